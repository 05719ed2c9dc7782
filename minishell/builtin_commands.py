"""The shell's environment and its built-in commands."""

from __future__ import annotations

import os
import sys
from typing import Iterable, Iterator, Mapping, Optional, TextIO, Union

BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(f"exit {status}")
        self.status = status


class Environment:
    """Shell variables in definition order.

    A variable exported without a value is kept with the value None; it is
    listed by ``export`` but not passed to children or shown by ``env``.
    """

    def __init__(
        self, variables: Union[Mapping[str, str], Iterable[str], None] = None
    ) -> None:
        self._vars: dict[str, Optional[str]] = {}
        self.last_status = 0
        if variables is None:
            return
        if isinstance(variables, Mapping):
            self._vars.update(variables)
        else:
            for assignment in variables:
                self.set(assignment)

    def __getitem__(self, key: str) -> Optional[str]:
        return self._vars[key]

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def get(self, key: str) -> Optional[str]:
        """Value of ``key``, or None when unset or without a value."""
        return self._vars.get(key)

    def set(self, assignment: str) -> None:
        """Apply ``KEY=VALUE``, or declare ``KEY`` keeping any value it has."""
        key, sep, value = assignment.partition("=")
        if sep:
            self._vars[key] = value
        else:
            self._vars.setdefault(key, None)

    def remove(self, key: str) -> None:
        self._vars.pop(key, None)

    def exported(self) -> list[str]:
        """Lines listing every variable, sorted by name, as ``export`` shows them."""
        return [
            f"declare -x {key}" if value is None else f'declare -x {key}="{value}"'
            for key, value in sorted(self._vars.items())
        ]

    def to_envp(self) -> list[str]:
        """``KEY=VALUE`` strings of the variables that have a value."""
        return [f"{key}={value}" for key, value in self._vars.items() if value is not None]


def _err(message: str) -> None:
    print(message, file=sys.stderr)


def is_valid_key(key: Optional[str]) -> bool:
    """A name starts with a letter and goes on with letters, digits or ``_``."""
    if not key or not (key[0].isascii() and key[0].isalpha()):
        return False
    return all(c == "_" or (c.isascii() and c.isalnum()) for c in key)


def is_numeric(text: Optional[str]) -> bool:
    """An optional sign followed only by digits."""
    if text is None:
        return False
    if text[:1] in ("-", "+"):
        text = text[1:]
    return all(c in "0123456789" for c in text)


def is_builtin(name: Optional[str]) -> bool:
    return name in BUILTINS


def run_echo(argv: list[str], stdout: Optional[TextIO] = None) -> int:
    out = stdout or sys.stdout
    args = argv[1:]
    newline = bool(args) and args[0] == "-n"
    if newline:
        args = args[1:]
    out.write(" ".join(args))
    if not newline:
        out.write("\n")
    out.flush()
    return 0


def run_cd(argv: list[str], env: Environment) -> int:
    path = argv[1] if len(argv) > 1 else None
    if path is None:
        path = env.get("HOME")
        if path is None:
            _err("minishell: cd: HOME not set")
            return 1
    try:
        os.chdir(path)
    except OSError as exc:
        _err(f"minishell: cd: {path} : {exc.strerror}")
        return 1
    return 0


def run_pwd(stdout: Optional[TextIO] = None) -> int:
    out = stdout or sys.stdout
    try:
        cwd = os.getcwd()
    except OSError as exc:
        _err(f"minishell: pwd: {exc.strerror}")
        return 1
    out.write(cwd + "\n")
    out.flush()
    return 0


def run_export(argv: list[str], env: Environment, stdout: Optional[TextIO] = None) -> int:
    """Define variables; with no arguments, list them.

    Stops at the first invalid name and returns 1.
    """
    if len(argv) < 2:
        out = stdout or sys.stdout
        for line in env.exported():
            out.write(line + "\n")
        out.flush()
        return 0
    for arg in argv[1:]:
        if not is_valid_key(arg.partition("=")[0]):
            _err("minishell: export: not a valid identifier")
            return 1
        env.set(arg)
    return 0


def run_unset(argv: list[str], env: Environment) -> int:
    """Remove variables; invalid names are reported but do not fail."""
    for arg in argv[1:]:
        if is_valid_key(arg):
            env.remove(arg)
        else:
            _err(f"minishell: unset: `{arg}': not a valid identifier")
    return 0


def run_env(env: Environment, stdout: Optional[TextIO] = None) -> int:
    out = stdout or sys.stdout
    for line in env.to_envp():
        out.write(line + "\n")
    out.flush()
    return 0


def run_exit(argv: list[str]) -> int:
    """Raise ShellExit; returns 1 only when given too many arguments."""
    _err("exit")
    if len(argv) < 2:
        raise ShellExit(0)
    arg = argv[1]
    if not is_numeric(arg):
        _err(f"minishell: exit: {arg}: numeric argument required")
        raise ShellExit(255)
    if len(argv) > 2:
        _err("minishell: exit: too many arguments")
        return 1
    value = int(arg) if arg.lstrip("+-") else 0
    raise ShellExit(value % 256)


def run_builtin(
    argv: list[str], env: Environment, stdout: Optional[TextIO] = None
) -> int:
    """Run the built-in named by ``argv[0]``; 1 when there is none."""
    if not argv:
        return 1
    name = argv[0]
    if name == "echo":
        return run_echo(argv, stdout)
    if name == "cd":
        return run_cd(argv, env)
    if name == "pwd":
        return run_pwd(stdout)
    if name == "export":
        return run_export(argv, env, stdout)
    if name == "unset":
        return run_unset(argv, env)
    if name == "env":
        return run_env(env, stdout)
    if name == "exit":
        return run_exit(argv)
    return 1