"""Syntax tree nodes and token-level syntax checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional

from minishell.heredoc import HeredocData
from minishell.lexer import Token, TokenType

REDIRECTION_TOKENS = frozenset(
    {TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.REDIR_APPEND, TokenType.HEREDOC}
)
CONTROL_TOKENS = frozenset({TokenType.PIPE, TokenType.AND, TokenType.OR})

_CONTROL_TEXT = {TokenType.PIPE: "|", TokenType.AND: "&&", TokenType.OR: "||"}


class NodeType(Enum):
    CMD = auto()
    PIPE = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    REDIR_APPEND = auto()
    HEREDOC = auto()
    AND = auto()
    OR = auto()

    @property
    def is_redirection(self) -> bool:
        return self in _REDIRECTION_NODES


_REDIRECTION_NODES = frozenset(
    {NodeType.REDIR_IN, NodeType.REDIR_OUT, NodeType.REDIR_APPEND, NodeType.HEREDOC}
)

_REDIRECTION_MAP = {
    TokenType.REDIR_IN: NodeType.REDIR_IN,
    TokenType.REDIR_OUT: NodeType.REDIR_OUT,
    TokenType.REDIR_APPEND: NodeType.REDIR_APPEND,
    TokenType.HEREDOC: NodeType.HEREDOC,
}


class ShellSyntaxError(Exception):
    """A command line that does not form a valid command."""

    def __init__(self, token: str = "") -> None:
        self.token = token
        super().__init__(f"syntax error near unexpected token `{token}'")


@dataclass
class Node:
    type: NodeType
    args: Optional[list[str]] = None
    filename: Optional[str] = None
    heredoc: Optional[HeredocData] = None
    left: Optional[Node] = None
    right: Optional[Node] = None

    def cleanup(self) -> None:
        """Remove the temporary files of every here-document in the tree."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            if node.heredoc is not None:
                node.heredoc.cleanup()
            stack.extend(child for child in (node.left, node.right) if child)


def _check_control(tokens: list[Token], index: int) -> None:
    token = tokens[index]
    prev_is_control = index > 0 and tokens[index - 1].type in CONTROL_TOKENS
    if prev_is_control or index + 1 >= len(tokens):
        raise ShellSyntaxError(_CONTROL_TEXT.get(token.type, ""))


def _check_redirection(tokens: list[Token], index: int) -> None:
    if index + 1 >= len(tokens):
        raise ShellSyntaxError("newline")
    following = tokens[index + 1]
    if following.type is TokenType.WORD:
        return
    if following.type is TokenType.PIPE:
        raise ShellSyntaxError("|")
    if following.type in REDIRECTION_TOKENS:
        raise ShellSyntaxError(following.value)
    raise ShellSyntaxError("")


def validate_syntax(tokens: Iterable[Token]) -> bool:
    """Check operator placement; raise ShellSyntaxError on a bad line.

    A line that starts with a control operator is only checked for that
    operator; the parser reports the rest.
    """
    items = list(tokens)
    if items and items[0].type in CONTROL_TOKENS:
        _check_control(items, 0)
        return True
    for index, token in enumerate(items):
        if token.type in REDIRECTION_TOKENS:
            _check_redirection(items, index)
        elif token.type in CONTROL_TOKENS:
            _check_control(items, index)
    return True


def attach_redirections(cmd: Optional[Node], redirs: Optional[Node]) -> Optional[Node]:
    """Hang ``cmd`` below the innermost redirection of the ``redirs`` chain."""
    if redirs is None:
        return cmd
    last = redirs
    while last.left is not None:
        last = last.left
    last.left = cmd
    return redirs


def redirection_node_type(token_type: TokenType) -> NodeType:
    """Return the node type for a redirection token type."""
    try:
        return _REDIRECTION_MAP[token_type]
    except KeyError:
        raise ValueError(f"not a redirection token: {token_type}") from None