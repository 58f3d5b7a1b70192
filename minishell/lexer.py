"""Splitting a command line into words and operators, and quote helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

_OPERATOR_CHARS = frozenset("|<>&")
_BLANKS = " \t"
_QUOTES = "'\""
_ANSI_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'"}


class TokenType(Enum):
    WORD = auto()
    PIPE = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    REDIR_APPEND = auto()
    HEREDOC = auto()
    AND = auto()
    OR = auto()
    INVALID = auto()


@dataclass
class Token:
    type: TokenType
    value: str


class LexerError(Exception):
    """Raised when a line cannot be split into tokens."""


def is_operator_char(char: str) -> bool:
    """Return True for characters that start an operator."""
    return char in _OPERATOR_CHARS and len(char) == 1


def operator_type(op: str) -> TokenType:
    """Classify an operator by its first one or two characters."""
    first = op[:1]
    doubled = op[1:2] == first
    if first == "|":
        return TokenType.OR if doubled else TokenType.PIPE
    if first == "<":
        return TokenType.HEREDOC if doubled else TokenType.REDIR_IN
    if first == ">":
        return TokenType.REDIR_APPEND if doubled else TokenType.REDIR_OUT
    if first == "&":
        return TokenType.AND if doubled else TokenType.INVALID
    return TokenType.WORD


def are_quotes_closed(text: str) -> bool:
    """Return True when every single and double quote is paired."""
    single = double = 0
    for ch in text:
        if ch == "'" and double % 2 == 0:
            single += 1
        elif ch == '"' and single % 2 == 0:
            double += 1
    return single % 2 == 0 and double % 2 == 0


def remove_quotes(text: str) -> str:
    """Drop quote characters, keeping what they enclose verbatim."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            end = text.find(ch, i + 1)
            if end == -1:
                out.append(text[i + 1:])
                break
            out.append(text[i + 1:end])
            i = end + 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def has_quotes(text: str) -> bool:
    return any(ch in _QUOTES for ch in text)


def has_whitespace(text: str) -> bool:
    return any(ch in " \t\n" for ch in text)


def should_split_token(original: str, expanded: str) -> bool:
    """An unquoted word whose expansion contains whitespace is split."""
    return not has_quotes(original) and has_whitespace(expanded)


def decode_ansi_c(raw: str) -> str:
    """Decode backslash escapes of a ``$'...'`` string."""
    out: list[str] = []
    chars = iter(enumerate(raw))
    for i, ch in chars:
        if ch == "\\" and i + 1 < len(raw):
            _, escaped = next(chars)
            out.append(_ANSI_ESCAPES.get(escaped, escaped))
        else:
            out.append(ch)
    return "".join(out)


def _read_operator(line: str, i: int) -> tuple[Token, int]:
    length = 2 if line[i + 1:i + 2] == line[i] else 1
    op = line[i:i + length]
    kind = operator_type(op)
    if kind is TokenType.INVALID:
        raise LexerError(f"invalid operator `{op}'")
    return Token(kind, op), i + length


def _read_ansi_c(line: str, i: int) -> tuple[Token, int] | None:
    start = i + 2
    end = line.find("'", start)
    if end == -1:
        return None
    return Token(TokenType.WORD, decode_ansi_c(line[start:end])), end + 1


def _read_word(line: str, i: int) -> tuple[Token, int]:
    end = i
    while end < len(line) and not is_operator_char(line[end]) and line[end] not in _BLANKS:
        ch = line[end]
        end += 1
        if ch in _QUOTES:
            close = line.find(ch, end)
            end = len(line) if close == -1 else close + 1
    return Token(TokenType.WORD, line[i:end]), end


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens; words keep their quotes.

    Raises LexerError on unclosed quotes or a lone ``&``.
    """
    if line and not are_quotes_closed(line):
        raise LexerError("unclosed quotes")
    tokens: list[Token] = []
    i = 0
    while i < len(line):
        while i < len(line) and line[i] in _BLANKS:
            i += 1
        if i >= len(line):
            break
        if is_operator_char(line[i]):
            token, i = _read_operator(line, i)
        else:
            result = None
            if line.startswith("$'", i):
                result = _read_ansi_c(line, i)
            token, i = result if result is not None else _read_word(line, i)
        tokens.append(token)
    return tokens