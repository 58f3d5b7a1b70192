"""Reading here-documents into temporary files."""

from __future__ import annotations

import itertools
import os
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from minishell.environment import ShellState
from minishell.expansion import expand_variable
from minishell.lexer import remove_quotes

_TMP_PREFIX = "/tmp/.minishell_heredoc_"
_EOF_WARNING = "warning: heredoc delimited by end-of-file\n"
_counter = itertools.count()

ReadLine = Callable[[str], Optional[str]]


class HeredocInterrupted(Exception):
    """Raised when reading a here-document is interrupted by the user."""


@dataclass
class HeredocData:
    delimiter: str
    expand: bool
    tmp_filename: str

    def cleanup(self) -> None:
        """Remove the temporary file holding the document."""
        try:
            os.unlink(self.tmp_filename)
        except FileNotFoundError:
            pass


def generate_tmp_filename() -> str:
    """Return a fresh temporary path unique to this process."""
    return f"{_TMP_PREFIX}{os.getpid()}_{next(_counter)}"


def expand_heredoc_line(line: str, state: ShellState) -> str:
    """Expand ``$`` references in a here-document line; quotes are kept."""
    parts: list[str] = []
    i = 0
    while i < len(line):
        dollar = line.find("$", i)
        if dollar == -1:
            parts.append(line[i:])
            break
        parts.append(line[i:dollar])
        value, i = expand_variable(line, dollar, state)
        parts.append(value)
    return "".join(parts)


def _prompt_line(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def collect_heredoc(
    delimiter: str, state: ShellState, read_line: Optional[ReadLine] = None
) -> HeredocData:
    """Read lines until ``delimiter`` and store them in a temporary file.

    ``read_line`` takes a prompt and returns a line, or None at end of
    input; a KeyboardInterrupt from it aborts with HeredocInterrupted and
    sets the exit status to 130.
    """
    reader = read_line or _prompt_line
    data = HeredocData(delimiter, state.heredoc_expand, generate_tmp_filename())
    end_marker = remove_quotes(delimiter)
    fd = os.open(data.tmp_filename, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o600)
    try:
        with os.fdopen(fd, "w") as out:
            while True:
                try:
                    line = reader("> ")
                except KeyboardInterrupt:
                    raise HeredocInterrupted(delimiter) from None
                if line is None:
                    sys.stdout.write(_EOF_WARNING)
                    break
                if line == end_marker:
                    break
                if data.expand and "$" in line:
                    line = expand_heredoc_line(line, state)
                out.write(line + "\n")
    except HeredocInterrupted:
        state.exit_status = 130
        data.cleanup()
        raise
    return data