"""The echo, env, pwd, unset and export builtins."""

from __future__ import annotations

import os
import sys
from typing import Optional

from minishell.environment import ShellState, is_valid_identifier
from minishell.paths import home_directory


def _is_n_option(arg: str) -> bool:
    return len(arg) >= 2 and arg[0] == "-" and set(arg[1:]) == {"n"}


def _echo_word(arg: str, state: ShellState) -> str:
    if arg.startswith("~") and (len(arg) == 1 or arg[1] == "/"):
        home = home_directory(state)
        return "" if home is None else home + arg[1:]
    return arg


def builtin_echo(args: list[str], state: ShellState) -> int:
    """Print the arguments; leading ``-n`` options suppress the newline."""
    words = args[1:]
    newline = True
    while words and _is_n_option(words[0]):
        newline = False
        words = words[1:]
    sys.stdout.write(" ".join(_echo_word(word, state) for word in words))
    if newline:
        sys.stdout.write("\n")
    return 0


def _hidden(name: str, state: ShellState) -> bool:
    return name == "PATH" and state.path_hide


def builtin_env(state: ShellState) -> int:
    """Print every variable that has a value."""
    for name, value in state.env:
        if value is not None and not _hidden(name, state):
            sys.stdout.write(f"{name}={value}\n")
    return 0


def builtin_pwd(state: ShellState) -> int:
    """Print PWD, or the real working directory when PWD is unset."""
    current = state.env.get("PWD")
    if current is None:
        try:
            current = os.getcwd()
        except OSError as exc:
            sys.stderr.write(f"pwd: {exc.strerror or exc}\n")
            return 1
    sys.stdout.write(f"{current}\n")
    return 0


def builtin_unset(args: list[str], state: ShellState) -> int:
    """Remove each named variable; invalid names are reported."""
    status = 0
    for name in args[1:]:
        if is_valid_identifier(name):
            state.env.unset(name)
        else:
            sys.stderr.write(f"minishell: unset: '{name}': not a valid identifier\n")
            status = 1
    return status


def parse_export_arg(arg: str) -> tuple[str, Optional[str], bool]:
    """Split an export argument into name, value and whether it appends."""
    plus = arg.find("+=")
    if plus != -1:
        return arg[:plus], arg[plus + 2:], True
    name, sep, value = arg.partition("=")
    return name, (value if sep else None), False


def sorted_export_lines(state: ShellState) -> list[str]:
    """Return the ``declare -x`` listing, sorted by name."""
    lines = []
    for name, value in sorted(state.env, key=lambda item: item[0]):
        if _hidden(name, state):
            continue
        if value is None:
            lines.append(f"declare -x {name}")
        else:
            lines.append(f'declare -x {name}="{value}"')
    return lines


def _invalid_key(name: str) -> bool:
    return not name or " " in name or "\t" in name or not is_valid_identifier(name)


def _export_one(arg: str, state: ShellState) -> int:
    name, value, is_append = parse_export_arg(arg)
    if _invalid_key(name):
        sys.stderr.write(f"minishell: export: `{arg}': not a valid identifier\n")
        return 1
    if is_append:
        state.env.append(name, value)
    elif value is not None or name not in state.env:
        state.env.set(name, value)
    if arg.startswith("PATH"):
        state.path_hide = False
    return 0


def builtin_export(args: list[str], state: ShellState) -> int:
    """Set or list exported variables."""
    if len(args) < 2:
        for line in sorted_export_lines(state):
            sys.stdout.write(line + "\n")
        return 0
    status = 0
    for arg in args[1:]:
        if _export_one(arg, state):
            status = 1
    return status