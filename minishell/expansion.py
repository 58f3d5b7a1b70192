"""Parameter expansion and quote removal for command words."""

from __future__ import annotations

import os
import string
from collections import deque
from typing import Iterable

from minishell.environment import ShellState
from minishell.lexer import Token, TokenType, has_quotes, should_split_token

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_QUOTES = "'\""
_LITERAL_DOLLAR_FOLLOWERS = frozenset(" \t\"'")


def expand_variable(text: str, index: int, state: ShellState) -> tuple[str, int]:
    """Expand the ``$`` reference starting at ``text[index]``.

    Returns the replacement text and the index just past the reference.
    """
    start = index + 1
    nxt = text[start:start + 1]
    if nxt == "?":
        return str(state.exit_status), start + 1
    if nxt == "$":
        return str(os.getpid()), start + 1
    if nxt == "" or nxt in _LITERAL_DOLLAR_FOLLOWERS:
        return "$", start
    if nxt in string.digits:
        return "", start + 1
    if nxt not in _NAME_START:
        return "$", start
    end = start
    while end < len(text) and text[end] in _NAME_CHARS:
        end += 1
    return state.env.get(text[start:end]) or "", end


def _expand_span(text: str, start: int, end: int, state: ShellState) -> str:
    """Expand every ``$`` reference within ``text[start:end]``."""
    parts: list[str] = []
    i = start
    while i < end:
        dollar = text.find("$", i, end)
        if dollar == -1:
            parts.append(text[i:end])
            break
        parts.append(text[i:dollar])
        value, i = expand_variable(text, dollar, state)
        parts.append(value)
    return "".join(parts)


def expand_word(text: str, state: ShellState) -> str:
    """Expand variables and remove quotes from a single word.

    Single-quoted parts are kept verbatim; double-quoted and unquoted
    parts have their ``$`` references expanded.
    """
    parts: list[str] = []
    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        if ch in _QUOTES:
            end = text.find(ch, i + 1)
            if end == -1:
                end = length
            if ch == "'":
                parts.append(text[i + 1:end])
            else:
                parts.append(_expand_span(text, i + 1, end, state))
            i = min(end + 1, length)
        else:
            start = i
            while i < length and text[i] not in _QUOTES:
                i += 1
            parts.append(_expand_span(text, start, i, state))
    return "".join(parts)


def expand_tokens(tokens: Iterable[Token], state: ShellState) -> list[Token]:
    """Expand every word token, splitting unquoted words on spaces.

    When a word is split, its first piece is final while the remaining
    pieces are walked (and so expanded) again. ``state.heredoc_expand``
    records whether the last word seen was an unquoted heredoc delimiter.
    """
    pending = deque(tokens)
    result: list[Token] = []
    prev: Token | None = None
    while pending:
        token = pending.popleft()
        if token.type is not TokenType.WORD:
            result.append(token)
            prev = token
            continue
        state.heredoc_expand = (
            prev is not None
            and prev.type is TokenType.HEREDOC
            and not has_quotes(token.value)
        )
        expanded = expand_word(token.value, state)
        if should_split_token(token.value, expanded):
            pieces = [Token(TokenType.WORD, p) for p in expanded.split(" ") if p]
            if not pieces:
                prev = token
                continue
            first, *rest = pieces
            result.append(first)
            pending.extendleft(reversed(rest))
            prev = first
        else:
            new = Token(TokenType.WORD, expanded)
            result.append(new)
            prev = new
    return result