"""The ``exit`` builtin."""

from __future__ import annotations

import string
import sys

from minishell.environment import ShellState, parse_long

_BLANKS = " \t"


def is_valid_exit_number(text: str) -> bool:
    """Return True when ``text`` is an acceptable numeric argument to ``exit``.

    Spaces and tabs may surround the number, a single sign may precede it,
    and its value must fit in a signed 64-bit integer.
    """
    if not text:
        return False
    i = 0
    length = len(text)
    while i < length and text[i] in _BLANKS:
        i += 1
    if i < length and text[i] in "+-":
        i += 1
    if i >= length:
        return False
    while i < length and text[i] in string.digits:
        i += 1
    if text[i:].lstrip(_BLANKS):
        return False
    try:
        parse_long(text)
    except ValueError:
        return False
    return True


def _numeric_error(arg: str, state: ShellState) -> int:
    sys.stderr.write(f"minishell: exit: {arg}: numeric argument required\n")
    state.should_exit = True
    state.exit_status = 2
    return state.exit_status


def builtin_exit(args: list[str], state: ShellState) -> int:
    """Request the shell to stop, setting the exit status from the argument.

    With too many arguments and a numeric first one the shell keeps running
    and the status is 1; a non-numeric argument ends the shell with status 2.
    """
    if len(args) < 2:
        state.should_exit = True
    elif len(args) > 2:
        if is_valid_exit_number(args[1]):
            sys.stderr.write("minishell: exit: too many arguments\n")
            state.exit_status = 1
            return state.exit_status
        return _numeric_error(args[1], state)
    elif is_valid_exit_number(args[1]) or args[1] == "--":
        state.should_exit = True
        state.exit_status = parse_long(args[1]) % 256
    else:
        return _numeric_error(args[1], state)
    sys.stderr.write("exit \n")
    return state.exit_status