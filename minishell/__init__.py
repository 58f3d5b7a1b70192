"""A small shell library: tokenizing, expansion, parsing, built-ins and execution."""

__version__ = "0.1.0"

__all__ = [
    "builtins",
    "cd",
    "environment",
    "executor",
    "exit_builtin",
    "expansion",
    "heredoc",
    "lexer",
    "parser",
    "paths",
    "syntax_tree",
]