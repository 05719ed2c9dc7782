import io
import os
import signal

import pytest

from minishell.builtin_commands import ShellExit
from minishell.shell import SYNTAX_ERROR_STATUS, Shell
from minishell.signals import exit_status, set_exit_status


@pytest.fixture
def envp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    set_exit_status(0)
    return {"PATH": os.environ.get("PATH", "/usr/bin:/bin"), "HOME": str(tmp_path)}


def test_empty_line(envp):
    shell = Shell(envp)
    assert shell.handle_input("") == 0
    assert shell.env.last_status == 0


def test_runs_command(envp, tmp_path):
    assert Shell(envp).handle_input("echo hi > out") == 0
    assert (tmp_path / "out").read_text() == "hi\n"


def test_export_then_expand(envp, tmp_path):
    shell = Shell(envp)
    shell.handle_input("export A=1")
    assert shell.env.get("A") == "1"
    shell.handle_input("echo $A > out")
    assert (tmp_path / "out").read_text() == "1\n"


def test_last_status_is_expanded(envp, tmp_path):
    shell = Shell(envp)
    assert shell.handle_input("false") == 1
    assert exit_status() == 1
    shell.handle_input("echo $? > out")
    assert (tmp_path / "out").read_text() == "1\n"


def test_wildcard(envp, tmp_path):
    (tmp_path / "a.txt").write_text("")
    (tmp_path / "b.txt").write_text("")
    assert Shell(envp).handle_input("echo *.txt > out") == 0
    assert (tmp_path / "out").read_text() == "a.txt b.txt\n"


def test_unclosed_quote(envp, capfd):
    shell = Shell(envp)
    status = shell.handle_input("echo 'abc")
    assert status == 258
    assert shell.env.last_status == status
    assert "unclosed quote" in capfd.readouterr().err


def test_syntax_error(envp, capfd):
    assert Shell(envp).handle_input("| x") == SYNTAX_ERROR_STATUS
    assert "syntax error" in capfd.readouterr().err


def test_exit_propagates(envp):
    with pytest.raises(ShellExit) as info:
        Shell(envp).handle_input("exit 3")
    assert info.value.status == 3


def test_debug_output(envp, capfd):
    Shell(envp, debug=True).handle_input("echo hi > out")
    out = capfd.readouterr().out
    assert "token:" in out
    assert "parser() returned AST:" in out


def test_run_until_exit(envp, tmp_path):
    shell = Shell(envp, input_stream=io.StringIO("echo a > out\nexit 4\necho b > out\n"))
    assert shell.run() == 4
    assert (tmp_path / "out").read_text() == "a\n"


def test_run_until_eof(envp, capfd):
    shell = Shell(envp, input_stream=io.StringIO("false\n"))
    assert shell.run() == 1
    assert capfd.readouterr().out.endswith("exit\n")


def test_run_restores_signal_handlers(envp):
    before = signal.getsignal(signal.SIGINT)
    assert Shell(envp, input_stream=io.StringIO("")).run() == 0
    assert signal.getsignal(signal.SIGINT) == before


def test_environment_from_list(tmp_path):
    shell = Shell(["X=1", "Y=two"])
    assert shell.env.get("Y") == "two"
    assert shell.env.to_envp() == ["X=1", "Y=two"]