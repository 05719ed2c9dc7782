import signal

import pytest

from minishell import signals


@pytest.fixture(autouse=True)
def _restore():
    saved_int = signal.getsignal(signal.SIGINT)
    saved_quit = signal.getsignal(signal.SIGQUIT)
    saved_status = signals.exit_status()
    yield
    signal.signal(signal.SIGINT, saved_int)
    signal.signal(signal.SIGQUIT, saved_quit)
    signals.set_exit_status(saved_status)


def test_exit_status_round_trip():
    signals.set_exit_status(7)
    assert signals.exit_status() == 7
    signals.set_exit_status(0)
    assert signals.exit_status() == 0


def test_sigint_handler_sets_status_and_newline(capsys):
    signals.set_exit_status(0)
    signals.sigint_handler(signal.SIGINT, None)
    assert signals.exit_status() == 130
    assert capsys.readouterr().out == "\n"


def test_sigquit_handler_sets_status_and_message(capsys):
    signals.set_exit_status(0)
    signals.sigquit_handler(0, None)
    assert signals.exit_status() == 131
    assert capsys.readouterr().out == "Quit: 3\n"


def test_setup_shell_signals_installs_handler(capsys):
    signals.set_exit_status(0)
    signals.setup_shell_signals()
    installed = signal.getsignal(signal.SIGINT)
    assert installed is signals.sigint_handler
    installed(signal.SIGINT, None)
    assert signals.exit_status() == 130
    assert capsys.readouterr().out == "\n"


def test_setup_child_signals_restores_default(capsys):
    signals.set_exit_status(0)
    signals.setup_shell_signals()
    quit_handler = signal.getsignal(signal.SIGQUIT)
    quit_handler(signal.SIGQUIT, None)
    assert signals.exit_status() == 131
    signals.setup_child_signals()
    assert signal.getsignal(signal.SIGINT) == signal.SIG_DFL
    assert signal.getsignal(signal.SIGQUIT) == signal.SIG_DFL
    assert capsys.readouterr().out == "Quit: 3\n"