"""Signal handling of the interactive shell and its children."""

from __future__ import annotations

import signal
import sys
from types import FrameType
from typing import Optional

try:
    import readline as _readline
except ImportError:  # pragma: no cover - platform without readline
    _readline = None

INTERRUPTED_STATUS = 130
QUIT_STATUS = 131

_exit_status = 0


def exit_status() -> int:
    """Status of the last command, as seen by ``$?``."""
    return _exit_status


def set_exit_status(value: int) -> None:
    global _exit_status
    _exit_status = value


def _write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def sigint_handler(signum: int, frame: Optional[FrameType]) -> None:
    """On Ctrl-C at the prompt: record status 130 and start a fresh line."""
    set_exit_status(INTERRUPTED_STATUS)
    _write("\n")
    if _readline is not None and sys.stdin is not None and sys.stdin.isatty():
        _readline.redisplay()


def sigquit_handler(signum: int, frame: Optional[FrameType]) -> None:
    set_exit_status(QUIT_STATUS)
    _write("Quit: 3\n")


def _set(name: str, handler) -> None:
    signum = getattr(signal, name, None)
    if signum is not None:
        signal.signal(signum, handler)


def setup_child_signals() -> None:
    """Restore default handling, as a child process expects."""
    _set("SIGINT", signal.SIG_DFL)
    _set("SIGQUIT", signal.SIG_DFL)


def setup_shell_signals() -> None:
    """Install the shell's own interrupt and quit handlers."""
    _set("SIGINT", sigint_handler)
    _set("SIGQUIT", sigquit_handler)