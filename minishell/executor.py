"""Running a syntax tree: commands, pipes, redirections and ``&&``/``||``."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
from contextlib import contextmanager
from enum import IntEnum
from typing import Callable, Iterator, NoReturn, Optional

from minishell.builtins import (
    builtin_echo,
    builtin_env,
    builtin_export,
    builtin_pwd,
    builtin_unset,
)
from minishell.cd import builtin_cd
from minishell.environment import ShellState
from minishell.exit_builtin import builtin_exit
from minishell.paths import find_command, home_directory
from minishell.syntax_tree import Node, NodeType


class BuiltinKind(IntEnum):
    """How a command name is handled."""

    NONE = 0
    FORKED = 1
    DIRECT = 2


_FORKED_BUILTINS = frozenset({"echo", "pwd", "env"})
_DIRECT_BUILTINS = frozenset({"unset", "cd", "export", "exit"})

_BUILTINS: dict[str, Callable[[list[str], ShellState], int]] = {
    "cd": builtin_cd,
    "echo": builtin_echo,
    "env": lambda args, state: builtin_env(state),
    "exit": builtin_exit,
    "export": builtin_export,
    "pwd": lambda args, state: builtin_pwd(state),
    "unset": builtin_unset,
}


def builtin_kind(name: str) -> BuiltinKind:
    """Classify ``name`` as an external command or one of the builtins."""
    if name in _FORKED_BUILTINS:
        return BuiltinKind.FORKED
    if name in _DIRECT_BUILTINS:
        return BuiltinKind.DIRECT
    return BuiltinKind.NONE


def run_builtin(args: list[str], state: ShellState) -> int:
    """Run the builtin named by ``args[0]``; unknown names give status 1."""
    handler = _BUILTINS.get(args[0]) if args else None
    if handler is None:
        return 1
    return handler(args, state)


def _flush_std() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            pass


@contextmanager
def _sigint_ignored() -> Iterator[None]:
    try:
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
        installed = True
    except ValueError:
        previous, installed = None, False
    try:
        yield
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)


def _default_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def _child_environment(state: ShellState) -> dict[str, str]:
    return {name: value for name, value in state.env if value is not None}


def _status_from_signal(signum: int) -> int:
    if signum == signal.SIGQUIT:
        sys.stderr.write("Quit\n")
        return 131
    if signum == signal.SIGINT:
        sys.stderr.write("\n")
        return 130
    return 0


def _run_external(args: list[str], state: ShellState) -> int:
    name = args[0]
    path = find_command(state, name)
    if path is None:
        sys.stderr.write(f"minishell: {name}: command not found\n")
        return 127
    _flush_std()
    try:
        process = subprocess.Popen(
            args,
            executable=path,
            env=_child_environment(state),
            preexec_fn=_default_signals,
        )
    except OSError as exc:
        sys.stderr.write(f"minishell: {name}: {exc.strerror or exc}\n")
        return 126
    while True:
        try:
            code = process.wait()
            break
        except KeyboardInterrupt:
            continue
    if code < 0:
        return _status_from_signal(-code)
    return code


def _run_forked_builtin(args: list[str], state: ShellState) -> int:
    _flush_std()
    try:
        return run_builtin(args, state)
    finally:
        _flush_std()


def execute_command(node: Node, state: ShellState) -> int:
    """Run a simple command node and return its exit status."""
    args = node.args
    if not args:
        return 0
    name = args[0]
    if name == "":
        sys.stderr.write("minishell: command not found\n")
        return 127
    if name == "~":
        home = home_directory(state)
        sys.stderr.write(f"minishell: {home or ''}: Is a directory\n")
        return 126
    kind = builtin_kind(name)
    if kind is BuiltinKind.DIRECT:
        return run_builtin(args, state)
    if kind is BuiltinKind.FORKED:
        return _run_forked_builtin(args, state)
    if name.startswith("./minishell"):
        with _sigint_ignored():
            return _run_external(args, state)
    return _run_external(args, state)


def _contains_heredoc(node: Optional[Node]) -> bool:
    if node is None:
        return False
    if node.type is NodeType.HEREDOC:
        return True
    return _contains_heredoc(node.left) or _contains_heredoc(node.right)


def _pipe_child(
    subtree: Optional[Node],
    state: ShellState,
    read_fd: int,
    write_fd: int,
    writer: bool,
) -> NoReturn:
    status = 1
    try:
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
        if writer:
            os.close(read_fd)
            os.dup2(write_fd, 1)
            os.close(write_fd)
        else:
            os.close(write_fd)
            if not _contains_heredoc(subtree):
                os.dup2(read_fd, 0)
            os.close(read_fd)
        sys.stdout = open(1, "w", closefd=False)
        status = execute(subtree, state)
    except BaseException:
        pass
    finally:
        _flush_std()
        os._exit(status)


def execute_pipe(node: Node, state: ShellState) -> int:
    """Run both sides of a pipe in child processes joined by a pipe."""
    try:
        read_fd, write_fd = os.pipe()
    except OSError:
        return 1
    _flush_std()
    with _sigint_ignored():
        try:
            left_pid = os.fork()
        except OSError:
            os.close(read_fd)
            os.close(write_fd)
            return 1
        if left_pid == 0:
            _pipe_child(node.left, state, read_fd, write_fd, writer=True)
        try:
            right_pid = os.fork()
        except OSError:
            os.close(read_fd)
            os.close(write_fd)
            os.kill(left_pid, signal.SIGTERM)
            os.waitpid(left_pid, 0)
            return 1
        if right_pid == 0:
            _pipe_child(node.right, state, read_fd, write_fd, writer=False)
        os.close(read_fd)
        os.close(write_fd)
        _, left_status = os.waitpid(left_pid, 0)
        _, right_status = os.waitpid(right_pid, 0)
    for status in (left_status, right_status):
        if os.WIFSIGNALED(status) and os.WTERMSIG(status) == signal.SIGINT:
            return 130
    if os.WIFEXITED(right_status):
        return os.WEXITSTATUS(right_status)
    return 1


def _redirection_source(node: Node) -> tuple[str, int]:
    if node.type is NodeType.HEREDOC and node.heredoc is not None:
        return node.heredoc.tmp_filename, os.O_RDONLY
    filename = node.filename or ""
    if node.type in (NodeType.REDIR_IN, NodeType.HEREDOC):
        return filename, os.O_RDONLY
    if node.type is NodeType.REDIR_OUT:
        return filename, os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    return filename, os.O_WRONLY | os.O_CREAT | os.O_APPEND


@contextmanager
def _restored_afterwards(saved_fd: int, target_fd: int) -> Iterator[None]:
    previous_stdout = sys.stdout
    if target_fd == 1:
        sys.stdout = open(1, "w", closefd=False)
    try:
        yield
    finally:
        if target_fd == 1:
            try:
                sys.stdout.flush()
                sys.stdout.close()
            except (OSError, ValueError):
                pass
            sys.stdout = previous_stdout
        os.dup2(saved_fd, target_fd)
        os.close(saved_fd)


def execute_redirection(node: Node, state: ShellState) -> int:
    """Point stdin or stdout at the node's file while running its subtree."""
    filename, flags = _redirection_source(node)
    try:
        file_fd = os.open(filename, flags, 0o644)
    except OSError as exc:
        sys.stderr.write(f"minishell: {filename}: {exc.strerror or exc}\n")
        return 1
    target_fd = 0 if node.type in (NodeType.REDIR_IN, NodeType.HEREDOC) else 1
    _flush_std()
    saved_fd = os.dup(target_fd)
    try:
        os.dup2(file_fd, target_fd)
    except OSError as exc:
        sys.stderr.write(f"minishell: dup2: {exc.strerror or exc}\n")
        os.close(file_fd)
        os.close(saved_fd)
        return 1
    os.close(file_fd)
    with _restored_afterwards(saved_fd, target_fd):
        return execute(node.left, state)


def execute(node: Optional[Node], state: ShellState) -> int:
    """Run ``node`` and return its exit status."""
    if node is None:
        return 0
    if node.type is NodeType.PIPE:
        return execute_pipe(node, state)
    if node.type.is_redirection:
        return execute_redirection(node, state)
    if node.type is NodeType.CMD:
        return execute_command(node, state)
    if node.type is NodeType.AND:
        status = execute(node.left, state)
        return execute(node.right, state) if status == 0 else status
    if node.type is NodeType.OR:
        status = execute(node.left, state)
        return execute(node.right, state) if status != 0 else status
    return 1