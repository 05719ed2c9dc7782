"""Execution of command trees: redirections, pipes, subshells and programs."""

from __future__ import annotations

import os
import signal
import sys
import tempfile
from typing import Callable, Iterable, Optional, TextIO

from minishell.builtin_commands import Environment, ShellExit, is_builtin, run_builtin
from minishell.parser import AstNode, Command, NodeType, Redirection
from minishell.signals import set_exit_status
from minishell.tokens import TokenType

COMMAND_NOT_FOUND_STATUS = 127
CANNOT_EXECUTE_STATUS = 126
HEREDOC_PROMPT = "> "

_FILE_MODE = 0o644
_OPEN_FLAGS = {
    TokenType.REDIR_IN: os.O_RDONLY,
    TokenType.REDIR_OUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    TokenType.APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}
_INPUT_REDIRECTS = frozenset({TokenType.REDIR_IN, TokenType.HEREDOC})
_CHILD_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGQUIT") if hasattr(signal, name)
)


def _flush() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()


def _err(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


def _report(name: str, message: str) -> None:
    _err(f"minishell: {name}: {message}")


def status_from_wait(status: int) -> int:
    """Turn a raw wait status into a shell status.

    A child killed by a signal gives 128 plus the signal number, which is
    also recorded as the last exit status.
    """
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        sig = os.WTERMSIG(status)
        if sig == signal.SIGINT:
            os.write(1, b"\n")
        elif sig == getattr(signal, "SIGQUIT", None):
            os.write(1, b"Quit: 3\n")
        code = 128 + sig
        set_exit_status(code)
        return code
    return 1


def resolve_path(name: str, env: Environment) -> Optional[str]:
    """Find the executable for ``name``.

    A name holding ``/`` is used as it is; otherwise the directories of
    ``PATH`` are searched in order. Returns None when nothing executable
    is found.
    """
    if not name:
        return None
    if "/" in name:
        return name if os.access(name, os.X_OK) else None
    search = env.get("PATH")
    if search is None:
        return None
    for directory in filter(None, search.split(":")):
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def read_heredoc(delimiter: str, stream: Optional[TextIO] = None) -> str:
    """Collect lines up to a line holding only ``delimiter``, or end of input."""
    source = sys.stdin if stream is None else stream
    lines: list[str] = []
    while True:
        sys.stderr.write(HEREDOC_PROMPT)
        sys.stderr.flush()
        line = source.readline()
        if not line or line == delimiter + "\n":
            break
        lines.append(line)
    return "".join(lines)


def handle_heredocs(command: Command, stream: Optional[TextIO] = None) -> None:
    """Read the body of every ``<<`` redirection of ``command``."""
    for redir in command.redirections:
        if redir.type is TokenType.HEREDOC:
            redir.heredoc = read_heredoc(redir.filename, stream)


def _open_redirection(redir: Redirection) -> int:
    if redir.type is TokenType.HEREDOC:
        with tempfile.TemporaryFile() as body:
            body.write((redir.heredoc or "").encode())
            body.flush()
            body.seek(0)
            return os.dup(body.fileno())
    return os.open(redir.filename, _OPEN_FLAGS[redir.type], _FILE_MODE)


def apply_redirections(redirections: Iterable[Redirection]) -> None:
    """Point standard input and output at the redirection targets, in order.

    Raises OSError when a file cannot be opened.
    """
    for redir in redirections:
        fd = _open_redirection(redir)
        try:
            os.dup2(fd, 0 if redir.type in _INPUT_REDIRECTS else 1)
        finally:
            os.close(fd)


def exec_command(command: Command, env: Environment) -> int:
    """Run a simple command with its redirections; returns its status."""
    _flush()
    saved_stdin, saved_stdout = os.dup(0), os.dup(1)
    try:
        try:
            apply_redirections(command.redirections)
        except OSError as exc:
            _err(f"{exc.filename}: {exc.strerror}")
            return 1
        if not command.argv:
            return 0
        if is_builtin(command.argv[0]):
            with open(1, "w", closefd=False) as out:
                return run_builtin(command.argv, env, out)
        return exec_external(command.argv, env)
    finally:
        _flush()
        os.dup2(saved_stdin, 0)
        os.dup2(saved_stdout, 1)
        os.close(saved_stdin)
        os.close(saved_stdout)


def _child_environment(env: Environment) -> dict[str, str]:
    return dict(item.split("=", 1) for item in env.to_envp())


def exec_external(argv: list[str], env: Environment) -> int:
    """Start a program and wait for it; 127 when it cannot be found."""
    name = argv[0] if argv else ""
    if not name:
        _report(name, "command not found")
        return COMMAND_NOT_FOUND_STATUS
    path = resolve_path(name, env)
    if path is None:
        _report(name, "No such file or directory" if "/" in name else "command not found")
        return COMMAND_NOT_FOUND_STATUS
    _flush()
    try:
        pid = os.posix_spawn(
            path, argv, _child_environment(env), setsigdef=_CHILD_SIGNALS
        )
    except OSError as exc:
        _err(f"execve: {exc.strerror}")
        return CANNOT_EXECUTE_STATUS
    _, status = os.waitpid(pid, 0)
    return status_from_wait(status)


def _fork(body: Callable[[], int]) -> int:
    """Run ``body`` in a child process that exits with its result."""
    _flush()
    pid = os.fork()
    if pid == 0:
        code = 1
        try:
            code = body()
        except ShellExit as exc:
            code = exc.status
        except BaseException as exc:  # the child must never return
            _err(f"minishell: {exc}")
        finally:
            _flush()
            os._exit(code & 0xFF)
    return pid


def exec_pipe(left: AstNode, right: AstNode, env: Environment) -> int:
    """Run ``left | right``; the status is that of the right side."""
    read_fd, write_fd = os.pipe()

    def writer() -> int:
        os.dup2(write_fd, 1)
        os.close(read_fd)
        os.close(write_fd)
        return exec_ast(left, env)

    def reader() -> int:
        os.dup2(read_fd, 0)
        os.close(read_fd)
        os.close(write_fd)
        return exec_ast(right, env)

    left_pid = _fork(writer)
    right_pid = _fork(reader)
    os.close(read_fd)
    os.close(write_fd)
    os.waitpid(left_pid, 0)
    _, status = os.waitpid(right_pid, 0)
    return status_from_wait(status)


def exec_subshell(node: Optional[AstNode], env: Environment) -> int:
    """Run ``node`` in a child process so it cannot change the shell."""
    pid = _fork(lambda: exec_ast(node, env))
    _, status = os.waitpid(pid, 0)
    return status_from_wait(status)


def exec_ast(node: Optional[AstNode], env: Environment) -> int:
    """Execute a command tree and return its status."""
    if node is None:
        return 1
    if node.type is NodeType.COMMAND:
        if node.command is None:
            return 1
        handle_heredocs(node.command)
        return exec_command(node.command, env)
    if node.type is NodeType.PIPE:
        return exec_pipe(node.left, node.right, env)
    if node.type is NodeType.AND:
        status = exec_ast(node.left, env)
        return exec_ast(node.right, env) if status == 0 else status
    if node.type is NodeType.OR:
        status = exec_ast(node.left, env)
        return exec_ast(node.right, env) if status != 0 else status
    if node.type is NodeType.SUBSHELL:
        return exec_subshell(node.left, env)
    return 0