import os

import pytest

from minishell.cd import build_logical_path, builtin_cd, resolve_cd_target
from minishell.environment import Environment, ShellState


@pytest.fixture
def tree(tmp_path, monkeypatch):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "file").write_text("x")
    (tmp_path / "link").symlink_to(tmp_path / "a")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _same(left, right):
    return os.path.realpath(left) == os.path.realpath(right)


def test_resolve_empty_is_dot():
    assert resolve_cd_target(Environment(), "") == "."


def test_resolve_no_argument_uses_home():
    env = Environment([("HOME", "/home/someone")])
    assert resolve_cd_target(env, None) == "/home/someone"


def test_resolve_no_home():
    with pytest.raises(LookupError, match="HOME not set"):
        resolve_cd_target(Environment(), None)


def test_resolve_dash_uses_oldpwd():
    env = Environment([("OLDPWD", "/previous")])
    assert resolve_cd_target(env, "-") == "/previous"


def test_resolve_dash_without_oldpwd():
    with pytest.raises(LookupError, match="OLDPWD not set"):
        resolve_cd_target(Environment(), "-")


def test_resolve_tilde():
    env = Environment([("HOME", "/home/someone")])
    assert resolve_cd_target(env, "~/docs") == "/home/someone" + "/docs"
    with pytest.raises(LookupError):
        resolve_cd_target(Environment(), "~")


def test_resolve_plain_argument():
    assert resolve_cd_target(Environment(), "somewhere") == "somewhere"


def test_build_relative(tree):
    assert build_logical_path(str(tree), "a/b") == str(tree / "a" / "b")


def test_build_dot_and_dotdot(tree):
    assert build_logical_path(str(tree), "a/./b/..") == str(tree / "a")


def test_build_absolute_root():
    assert build_logical_path("/ignored", "/") == "/"
    assert build_logical_path("/", "..") == "/"


def test_build_keeps_symlink_name(tree):
    assert build_logical_path(str(tree), "link/b") == str(tree / "link" / "b")


def test_build_missing(tree):
    with pytest.raises(FileNotFoundError):
        build_logical_path(str(tree), "missing")


def test_build_not_a_directory(tree):
    with pytest.raises(NotADirectoryError):
        build_logical_path(str(tree), "file")


def test_cd_updates_pwd(tree):
    state = ShellState(env=Environment([("PWD", str(tree))]))
    assert builtin_cd(["cd", "a"], state) == 0
    assert state.env.get("PWD") == str(tree / "a")
    assert state.env.get("OLDPWD") == str(tree)
    assert _same(os.getcwd(), tree / "a")


def test_cd_too_many_arguments(tree, capsys):
    state = ShellState(env=Environment([("PWD", str(tree))]))
    assert builtin_cd(["cd", "a", "b"], state) == 1
    assert "too many arguments" in capsys.readouterr().err
    assert state.env.get("PWD") == str(tree)


def test_cd_missing_directory(tree, capsys):
    state = ShellState(env=Environment([("PWD", str(tree))]))
    assert builtin_cd(["cd", "nope"], state) == 1
    assert "minishell: cd: nope:" in capsys.readouterr().err
    assert state.env.get("PWD") == str(tree)


def test_cd_dash_prints_new_directory(tree, capsys):
    env = Environment([("PWD", str(tree / "a")), ("OLDPWD", str(tree))])
    state = ShellState(env=env)
    assert builtin_cd(["cd", "-"], state) == 0
    assert capsys.readouterr().out == str(tree) + "\n"
    assert state.env.get("OLDPWD") == str(tree / "a")


def test_cd_home_not_set(tree, capsys):
    state = ShellState(env=Environment([("PWD", str(tree))]))
    assert builtin_cd(["cd"], state) == 1
    assert "HOME not set" in capsys.readouterr().err