"""The interactive read-evaluate loop of the shell."""

from __future__ import annotations

import os
import signal
import sys
from typing import Iterable, Mapping, Optional, TextIO, Union

from minishell.builtin_commands import Environment, ShellExit
from minishell.executor import exec_ast
from minishell.expander import expand
from minishell.parser import ParseError, format_ast, parse
from minishell.signals import exit_status, set_exit_status, setup_shell_signals
from minishell.tokens import LexerError, format_token_list, tokenize

PROMPT = "minishell$ "
EXIT_ON_EOF = "exit\n"
SYNTAX_ERROR_STATUS = 258


def _handled_signals() -> list[int]:
    return [getattr(signal, name) for name in ("SIGINT", "SIGQUIT") if hasattr(signal, name)]


class Shell:
    """A shell session: its environment and the loop that reads commands.

    Lines come from ``input_stream`` when one is given, otherwise from the
    terminal with ``prompt``.
    """

    def __init__(
        self,
        envp: Union[Mapping[str, str], Iterable[str], None] = None,
        *,
        input_stream: Optional[TextIO] = None,
        prompt: str = PROMPT,
        debug: bool = False,
    ) -> None:
        self.env = Environment(os.environ if envp is None else envp)
        self.prompt = prompt
        self.debug = debug
        self._input = input_stream

    def _debug(self, title: str, body: str) -> None:
        if self.debug:
            print(title)
            print(body)

    def _evaluate(self, line: str) -> int:
        if not line:
            return 0
        try:
            tokens = tokenize(line)
        except LexerError as exc:
            print(f"minishell: {exc}", file=sys.stderr)
            return exc.status
        if not tokens:
            return 0
        self._debug("lexer() returned:", format_token_list(tokens))
        tokens = expand(tokens, self.env, exit_status())
        self._debug("expander() returned:", format_token_list(tokens))
        try:
            tree = parse(tokens)
        except ParseError as exc:
            print(f"minishell: {exc}", file=sys.stderr)
            return SYNTAX_ERROR_STATUS
        self._debug("parser() returned AST:", format_ast(tree))
        return exec_ast(tree, self.env)

    def handle_input(self, line: str) -> int:
        """Lex, expand, parse and run one line; returns and records its status.

        ShellExit from the ``exit`` built-in is passed on.
        """
        status = self._evaluate(line)
        self.env.last_status = status
        set_exit_status(status)
        return status

    def _read_line(self) -> Optional[str]:
        if self._input is None:
            try:
                return input(self.prompt)
            except EOFError:
                return None
        line = self._input.readline()
        if not line:
            return None
        return line[:-1] if line.endswith("\n") else line

    def run(self) -> int:
        """Read and run lines until end of input or ``exit``; returns the status."""
        previous = {sig: signal.getsignal(sig) for sig in _handled_signals()}
        setup_shell_signals()
        if hasattr(signal, "SIGQUIT"):
            signal.signal(signal.SIGQUIT, signal.SIG_IGN)
        try:
            while True:
                line = self._read_line()
                if line is None:
                    sys.stdout.write(EXIT_ON_EOF)
                    sys.stdout.flush()
                    return self.env.last_status
                try:
                    self.handle_input(line)
                except ShellExit as exc:
                    return exc.status
        finally:
            for sig, handler in previous.items():
                if handler is not None:
                    signal.signal(sig, handler)


def main(argv: Optional[list[str]] = None) -> int:
    """Start an interactive shell on the process environment."""
    return Shell().run()