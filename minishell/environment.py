"""Shell environment variables and the mutable state shared by the shell."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

LLONG_MAX = 2**63 - 1

_LEADING_SPACE = " \t\n\v\f\r"
_IDENT_START = set(string.ascii_letters + "_")
_IDENT_REST = set(string.ascii_letters + string.digits + "_")


class Environment:
    """Ordered collection of variables; a value of None means declared but unset."""

    def __init__(self, entries: Iterable[tuple[str, Optional[str]]] = ()) -> None:
        self._vars: dict[str, Optional[str]] = {}
        for name, value in entries:
            self._vars[name] = value

    @classmethod
    def from_envp(cls, envp: Iterable[str]) -> "Environment":
        """Build an environment from ``NAME=value`` strings."""
        entries = []
        for item in envp:
            name, sep, value = item.partition("=")
            entries.append((name, value if sep else None))
        return cls(entries)

    def get(self, name: str) -> Optional[str]:
        """Return the value of ``name``, or None when absent or without value."""
        return self._vars.get(name)

    def set(self, name: str, value: Optional[str]) -> None:
        """Set ``name`` to ``value``, adding it at the end if new."""
        self._vars[name] = value

    def append(self, name: str, value: Optional[str]) -> None:
        """Append ``value`` to an existing variable; unknown names are left alone."""
        if name not in self._vars:
            return
        current = self._vars[name] or ""
        self._vars[name] = current + (value or "")

    def unset(self, name: str) -> None:
        """Remove ``name`` if present."""
        self._vars.pop(name, None)

    def to_envp(self) -> list[str]:
        """Return the variables as ``NAME=value`` (or bare ``NAME``) strings."""
        return [
            name if value is None else f"{name}={value}"
            for name, value in self._vars.items()
        ]

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[tuple[str, Optional[str]]]:
        """Iterate over ``(name, value)`` pairs in insertion order."""
        return iter(list(self._vars.items()))

    def __contains__(self, name: object) -> bool:
        return name in self._vars


@dataclass
class ShellState:
    """Everything the running shell keeps between commands."""

    env: Environment = field(default_factory=Environment)
    exit_status: int = 0
    should_exit: bool = False
    path_hide: bool = False
    heredoc_expand: bool = False
    last_status: int = 0


def parse_long(text: str) -> int:
    """Parse a signed 64-bit integer the way the ``exit`` builtin expects.

    Leading whitespace and any run of sign characters are accepted (any
    ``-`` makes the number negative); trailing spaces and tabs are allowed.
    Raises ValueError on overflow or on other trailing characters.
    """
    i = 0
    length = len(text)
    while i < length and text[i] in _LEADING_SPACE:
        i += 1
    sign = 1
    while i < length and text[i] in "+-":
        if text[i] == "-":
            sign = -1
        i += 1
    limit = LLONG_MAX if sign == 1 else LLONG_MAX + 1
    number = 0
    while i < length and text[i] in string.digits:
        number = number * 10 + int(text[i])
        if number > limit:
            raise ValueError(f"numeric value out of range: {text!r}")
        i += 1
    while i < length and text[i] in " \t":
        i += 1
    if i < length:
        raise ValueError(f"invalid numeric value: {text!r}")
    return number * sign


def is_valid_identifier(name: Optional[str]) -> bool:
    """Return True when ``name`` is a valid variable name."""
    if not name:
        return False
    if name[0] not in _IDENT_START:
        return False
    return all(ch in _IDENT_REST for ch in name[1:])