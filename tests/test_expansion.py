import os

import pytest

from minishell.environment import Environment, ShellState
from minishell.expansion import expand_tokens, expand_variable, expand_word
from minishell.lexer import Token, TokenType, tokenize


@pytest.fixture
def state():
    env = Environment([("HOME", "/home/u"), ("X", "a b"), ("EMPTY", None)])
    return ShellState(env=env, exit_status=42)


def test_exit_status_reference(state):
    assert expand_variable("$?", 0, state) == ("42", 2)


def test_pid_reference(state):
    assert expand_variable("$$", 0, state) == (str(os.getpid()), 2)


@pytest.mark.parametrize("text", ["$", "$ x", "$\"", "$'", "$-"])
def test_lone_dollar_is_literal(state, text):
    assert expand_variable(text, 0, state) == ("$", 1)


def test_positional_digit_expands_to_nothing(state):
    assert expand_variable("$1abc", 0, state) == ("", 2)


def test_named_variable(state):
    assert expand_variable("$HOME/x", 0, state) == ("/home/u", 5)


def test_unknown_and_valueless_variables(state):
    assert expand_variable("$UNSET", 0, state) == ("", 6)
    assert expand_variable("$EMPTY", 0, state) == ("", 6)


def test_variable_in_middle_of_text(state):
    assert expand_variable("ab$HOME", 2, state) == ("/home/u", 7)


def test_single_quotes_keep_dollar(state):
    assert expand_word("'$HOME'", state) == "$HOME"


def test_double_quotes_expand(state):
    assert expand_word('"$HOME"', state) == "/home/u"


def test_quotes_are_removed(state):
    assert expand_word("'a'\"b\"c", state) == "abc"


def test_dollar_before_quote_stays(state):
    assert expand_word('$"x"', state) == "$x"


def test_mixed_word(state):
    assert expand_word("pre$HOME'$X'", state) == "pre/home/u$X"


def test_unquoted_expansion_is_split(state):
    tokens = expand_tokens(tokenize("echo $X"), state)
    assert [t.value for t in tokens] == ["echo", "a", "b"]
    assert all(t.type is TokenType.WORD for t in tokens)


def test_quoted_expansion_is_not_split(state):
    tokens = expand_tokens(tokenize('echo "$X"'), state)
    assert [t.value for t in tokens] == ["echo", "a b"]


def test_operators_are_kept(state):
    tokens = expand_tokens(tokenize("echo $HOME | wc"), state)
    assert [t.type for t in tokens] == [
        TokenType.WORD, TokenType.WORD, TokenType.PIPE, TokenType.WORD
    ]
    assert tokens[1].value == "/home/u"


def test_empty_expansion_keeps_empty_word(state):
    tokens = expand_tokens(tokenize("echo $UNSET"), state)
    assert [t.value for t in tokens] == ["echo", ""]


def test_split_pieces_after_first_are_expanded_again(state):
    state.env.set("Y", "a $Z")
    state.env.set("Z", "zed")
    tokens = expand_tokens([Token(TokenType.WORD, "$Y")], state)
    assert [t.value for t in tokens] == ["a", "zed"]


def test_heredoc_delimiter_flag_unquoted(state):
    tokens = expand_tokens(tokenize("cat << EOF"), state)
    assert state.heredoc_expand is True
    assert tokens[-1].value == "EOF"


def test_heredoc_delimiter_flag_quoted(state):
    tokens = expand_tokens(tokenize("cat << 'EOF'"), state)
    assert state.heredoc_expand is False
    assert tokens[-1].value == "EOF"


def test_input_list_not_mutated(state):
    original = tokenize("echo $HOME")
    expand_tokens(original, state)
    assert original[1].value == "$HOME"