"""Building the syntax tree of a command line."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from minishell.environment import ShellState
from minishell.expansion import expand_tokens
from minishell.heredoc import HeredocData, HeredocInterrupted, collect_heredoc
from minishell.lexer import (
    LexerError,
    Token,
    TokenType,
    are_quotes_closed,
    remove_quotes,
    tokenize,
)
from minishell.syntax_tree import (
    CONTROL_TOKENS,
    REDIRECTION_TOKENS,
    Node,
    NodeType,
    ShellSyntaxError,
    attach_redirections,
    redirection_node_type,
    validate_syntax,
)

ReadLine = Callable[[str], Optional[str]]


class _EmptyCommand(Exception):
    """A command with nothing to run, which abandons the whole line."""


class Parser:
    """Recursive-descent parser over an expanded token list.

    ``&&`` and ``||`` group to the right, pipes group to the left, and the
    redirections of a command wrap it in the order they were written.
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        state: ShellState,
        read_line: Optional[ReadLine] = None,
    ) -> None:
        self._tokens = list(tokens)
        self._pos = 0
        self._state = state
        self._read_line = read_line
        self._heredocs: list[HeredocData] = []

    def parse(self) -> Optional[Node]:
        """Return the tree, or None when the line has nothing to run.

        Raises ShellSyntaxError on a malformed line and HeredocInterrupted
        when reading a here-document is cut short; here-documents already
        read are removed in both cases.
        """
        if not self._tokens:
            return None
        try:
            return self._parse_and_or()
        except _EmptyCommand:
            self._discard_heredocs()
            return None
        except (ShellSyntaxError, HeredocInterrupted):
            self._discard_heredocs()
            raise

    def _discard_heredocs(self) -> None:
        for data in self._heredocs:
            data.cleanup()
        self._heredocs.clear()

    def _peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _peek_type(self) -> Optional[TokenType]:
        token = self._peek()
        return token.type if token is not None else None

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _parse_and_or(self) -> Node:
        left = self._parse_pipeline()
        kind = self._peek_type()
        if kind is TokenType.AND:
            node_type = NodeType.AND
        elif kind is TokenType.OR:
            node_type = NodeType.OR
        else:
            return left
        self._advance()
        right = self._parse_and_or()
        return Node(node_type, left=left, right=right)

    def _parse_pipeline(self) -> Node:
        if self._peek_type() is TokenType.PIPE:
            raise ShellSyntaxError("|")
        left = self._parse_command()
        while self._peek_type() is TokenType.PIPE:
            self._advance()
            if self._peek_type() in (None, TokenType.PIPE):
                raise ShellSyntaxError("|")
            right = self._parse_command()
            left = Node(NodeType.PIPE, left=left, right=right)
        return left

    def _take_words(self) -> list[str]:
        words: list[str] = []
        while self._peek_type() is TokenType.WORD:
            words.append(self._advance().value)
        return words

    def _parse_command(self) -> Node:
        cmd: Optional[Node] = None
        redirs: Optional[Node] = None
        while (token := self._peek()) is not None and token.type not in CONTROL_TOKENS:
            if token.type in REDIRECTION_TOKENS:
                redirs = attach_redirections(self._parse_redirection(), redirs)
            elif token.type is TokenType.WORD:
                words = self._take_words()
                if cmd is None:
                    if all(word == "" for word in words):
                        raise _EmptyCommand
                    cmd = Node(NodeType.CMD, args=words)
                else:
                    cmd.args = (cmd.args or []) + words
            else:
                break
        if cmd is None and redirs is None:
            raise _EmptyCommand
        if cmd is None:
            cmd = Node(NodeType.CMD)
        return attach_redirections(cmd, redirs)

    def _parse_redirection(self) -> Node:
        operator = self._advance()
        node_type = redirection_node_type(operator.type)
        target = self._peek()
        if target is None:
            raise ShellSyntaxError("newline")
        if target.type is not TokenType.WORD:
            raise ShellSyntaxError(target.value)
        self._advance()
        if node_type is NodeType.HEREDOC:
            data = collect_heredoc(target.value, self._state, self._read_line)
            self._heredocs.append(data)
            return Node(node_type, filename=data.tmp_filename, heredoc=data)
        return Node(node_type, filename=remove_quotes(target.value))


def parse_tokens(
    tokens: Iterable[Token],
    state: ShellState,
    read_line: Optional[ReadLine] = None,
) -> Optional[Node]:
    """Parse already expanded tokens into a tree."""
    return Parser(tokens, state, read_line).parse()


def parse_line(
    line: str, state: ShellState, read_line: Optional[ReadLine] = None
) -> Optional[Node]:
    """Tokenize, expand and parse ``line``.

    Returns None when there is nothing to run. On a syntax error the exit
    status becomes 2 and LexerError or ShellSyntaxError is raised.
    """
    if not are_quotes_closed(line):
        state.exit_status = 2
        raise LexerError("syntax error: unclosed quotes")
    try:
        tokens = tokenize(line)
    except LexerError:
        state.exit_status = 2
        raise
    if not tokens:
        state.exit_status = 2
        return None
    tokens = expand_tokens(tokens, state)
    try:
        validate_syntax(tokens)
        return parse_tokens(tokens, state, read_line)
    except ShellSyntaxError:
        state.exit_status = 2
        raise