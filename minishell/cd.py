"""The ``cd`` builtin and logical path resolution."""

from __future__ import annotations

import errno
import os
import stat
import sys
from typing import Optional

from minishell.builtins import builtin_pwd
from minishell.environment import Environment, ShellState


def _stderr(message: str) -> None:
    sys.stderr.write(message)


def resolve_cd_target(env: Environment, arg: Optional[str]) -> str:
    """Turn the argument of ``cd`` into the path to visit.

    Raises LookupError when HOME or OLDPWD is needed but not set; the
    message is empty when nothing should be reported.
    """
    if arg == "":
        return "."
    if arg is None:
        home = env.get("HOME")
        if home is None:
            raise LookupError("HOME not set")
        return home
    if arg == "-":
        previous = env.get("OLDPWD")
        if previous is None:
            raise LookupError("OLDPWD not set")
        return previous
    if arg.startswith("~"):
        home = env.get("HOME")
        if home is None:
            raise LookupError("")
        return home + arg[1:]
    return arg


def _parent(path: str) -> str:
    if path == "/":
        return path
    last = path.rfind("/")
    if last == -1:
        return path
    return "/" if last == 0 else path[:last]


def _descend(path: str, component: str) -> str:
    candidate = ("/" if path == "/" else path + "/") + component
    with os.scandir(candidate):
        pass
    mode = os.lstat(candidate).st_mode
    if not (stat.S_ISDIR(mode) or stat.S_ISLNK(mode)):
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), candidate)
    return candidate


def build_logical_path(current_pwd: Optional[str], user_input: str) -> str:
    """Resolve ``user_input`` against ``current_pwd`` without following links.

    ``.`` is dropped and ``..`` removes the last component textually.
    Raises OSError when a component is not an accessible directory.
    """
    path = "/" if user_input.startswith("/") else (current_pwd or "")
    for component in filter(None, user_input.split("/")):
        if component == ".":
            continue
        if component == "..":
            path = _parent(path)
        else:
            path = _descend(path, component)
    return path


def _report(path: str, error: OSError) -> None:
    if error.errno == errno.ENOTDIR:
        reason = "Not a directory"
    elif error.errno is not None:
        reason = os.strerror(error.errno)
    else:
        reason = str(error)
    _stderr(f"minishell: cd: {path}: {reason}\n")


def _change_directory(
    state: ShellState, old_pwd: Optional[str], new_pwd: str, error_path: str
) -> int:
    try:
        os.chdir(new_pwd)
    except OSError as exc:
        _report(error_path, exc)
        return 1
    state.env.set("OLDPWD", old_pwd)
    state.env.set("PWD", new_pwd)
    return 0


def builtin_cd(args: list[str], state: ShellState) -> int:
    """Change directory, keeping PWD and OLDPWD up to date."""
    if len(args) > 2:
        _stderr("minishell: cd: too many arguments\n")
        return 1
    arg = args[1] if len(args) > 1 else None
    try:
        path = resolve_cd_target(state.env, arg)
    except LookupError as exc:
        message = exc.args[0] if exc.args else ""
        if message:
            _stderr(f"minishell: cd: {message}\n")
        return 1
    old_pwd = state.env.get("PWD")
    if old_pwd is None:
        try:
            old_pwd = os.getcwd()
        except OSError:
            old_pwd = None
    error_path = arg if arg is not None else path
    try:
        new_pwd = build_logical_path(old_pwd, path)
    except OSError as exc:
        _report(error_path, exc)
        return 1
    status = _change_directory(state, old_pwd, new_pwd, error_path)
    if arg == "-":
        return builtin_pwd(state)
    return status