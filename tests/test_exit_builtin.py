import pytest

from minishell.environment import ShellState
from minishell.exit_builtin import builtin_exit, is_valid_exit_number


@pytest.mark.parametrize(
    "text",
    ["42", "-42", "+7", "  5", "12 ", "9223372036854775807", "-9223372036854775808"],
)
def test_valid_numbers(text):
    assert is_valid_exit_number(text) is True


@pytest.mark.parametrize(
    "text",
    ["", "abc", "--5", "1 2", "+", "9223372036854775808", "-9223372036854775809", "\n5"],
)
def test_invalid_numbers(text):
    assert is_valid_exit_number(text) is False


def test_exit_without_argument_keeps_status(capsys):
    state = ShellState(exit_status=3)
    assert builtin_exit(["exit"], state) == 3
    assert state.should_exit is True
    assert capsys.readouterr().err == "exit \n"


def test_exit_with_number():
    state = ShellState()
    assert builtin_exit(["exit", "42"], state) == 42
    assert state.should_exit is True
    assert state.exit_status == 42


def test_exit_negative_wraps():
    state = ShellState()
    assert builtin_exit(["exit", "-1"], state) == 255
    assert state.should_exit is True


def test_exit_wraps_modulo():
    state = ShellState()
    assert builtin_exit(["exit", "256"], state) == 0


def test_exit_double_dash():
    state = ShellState(exit_status=5)
    assert builtin_exit(["exit", "--"], state) == 0
    assert state.should_exit is True


def test_exit_non_numeric(capsys):
    state = ShellState()
    assert builtin_exit(["exit", "abc"], state) == 2
    assert state.should_exit is True
    err = capsys.readouterr().err
    assert "minishell: exit: abc: numeric argument required" in err
    assert "exit \n" not in err


def test_exit_too_many_arguments(capsys):
    state = ShellState()
    assert builtin_exit(["exit", "1", "2"], state) == 1
    assert state.should_exit is False
    assert "too many arguments" in capsys.readouterr().err


def test_exit_too_many_with_non_numeric_first():
    state = ShellState()
    assert builtin_exit(["exit", "abc", "2"], state) == 2
    assert state.should_exit is True


def test_exit_overflow_is_error():
    state = ShellState()
    assert builtin_exit(["exit", "9223372036854775808"], state) == 2
    assert state.should_exit is True