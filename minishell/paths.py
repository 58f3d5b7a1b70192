"""Locating commands on PATH and finding the user's home directory."""

from __future__ import annotations

import os
import pwd
from typing import Optional

from minishell.environment import ShellState


def find_command(state: ShellState, cmd: str) -> Optional[str]:
    """Return the executable path for ``cmd``, or None when none is found.

    A name containing ``/`` is used as given; otherwise each non-empty
    entry of PATH is tried in order.
    """
    if not cmd:
        return None
    if "/" in cmd:
        return cmd if os.access(cmd, os.X_OK) else None
    search = state.env.get("PATH")
    if search is None:
        return None
    for directory in filter(None, search.split(":")):
        candidate = f"{directory}/{cmd}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def home_directory(state: ShellState) -> Optional[str]:
    """Return HOME, falling back to the password database entry."""
    home = state.env.get("HOME")
    if home is not None:
        return home
    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return None