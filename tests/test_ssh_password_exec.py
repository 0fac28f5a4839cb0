import os
import subprocess
from types import SimpleNamespace

import pytest

from sshhop import ssh_password_exec
from sshhop.ssh_password_exec import (
    build_probe_command,
    build_session_command,
    password_fifo,
    probe_login,
    run_interactive_session,
)


@pytest.fixture
def fake_binaries(monkeypatch):
    monkeypatch.setattr(ssh_password_exec, "find_sshpass", lambda: "/usr/bin/sshpass")
    monkeypatch.setattr(ssh_password_exec, "find_ssh", lambda: "/usr/bin/ssh")


class RecordingRunner:
    def __init__(self, returncode=0, error=None):
        self.returncode = returncode
        self.error = error
        self.calls = []

    def __call__(self, cmd, **kwargs):
        fifo = cmd[2]
        # Drain the FIFO like sshpass would
        with open(fifo, "r", encoding="utf-8") as f:
            secret = f.read()
        self.calls.append(SimpleNamespace(cmd=cmd, kwargs=kwargs, secret=secret))
        if self.error:
            raise self.error
        return subprocess.CompletedProcess(cmd, self.returncode)


def test_probe_command_relaxes_host_key_checking_and_runs_exit():
    cmd = build_probe_command("sshpass", "/tmp/x/pw.fifo", "web", ssh="ssh")

    assert cmd == [
        "sshpass", "-f", "/tmp/x/pw.fifo", "ssh",
        "-o", "StrictHostKeyChecking=no",
        "-o", "BatchMode=no",
        "web", "exit",
    ]


def test_session_command_requests_tty_and_login_shell():
    cmd = build_session_command("sshpass", "/tmp/x/pw.fifo", "web", ssh="ssh")

    assert cmd == ["sshpass", "-f", "/tmp/x/pw.fifo", "ssh", "-t", "web", "env TERM=xterm-256color bash --login"]


def test_session_command_uses_configured_term_and_shell():
    cmd = build_session_command("sshpass", "f", "web", term="screen", login_shell="zsh -l")

    assert cmd[-1] == "env TERM=screen zsh -l"


def test_password_fifo_delivers_secret_once_and_cleans_up():
    with password_fifo("pa55") as fifo:
        assert os.path.exists(fifo)
        assert oct(os.stat(os.path.dirname(fifo)).st_mode & 0o777) == oct(0o700)
        with open(fifo, "r", encoding="utf-8") as f:
            assert f.read() == "pa55"

    assert not os.path.exists(os.path.dirname(fifo))


def test_password_fifo_without_reader_does_not_hang():
    with password_fifo("unused") as fifo:
        directory = os.path.dirname(fifo)

    assert not os.path.exists(directory)


def test_probe_login_success_detaches_stdio(fake_binaries):
    runner = RecordingRunner(returncode=0)

    assert probe_login("web", "pw", runner=runner) is True

    call = runner.calls[0]
    assert call.secret == "pw"
    assert "pw" not in call.cmd
    assert call.cmd[3:] == [
        "/usr/bin/ssh", "-o", "StrictHostKeyChecking=no", "-o", "BatchMode=no", "web", "exit",
    ]
    assert call.kwargs["stdin"] is subprocess.DEVNULL
    assert call.kwargs["stdout"] is subprocess.DEVNULL
    assert call.kwargs["stderr"] is subprocess.DEVNULL
    assert "SSH_ASKPASS" not in call.kwargs["env"]


def test_probe_login_nonzero_exit_is_failure(fake_binaries):
    assert probe_login("web", "pw", runner=RecordingRunner(returncode=5)) is False


def test_probe_login_spawn_failure_is_failure(fake_binaries):
    runner = RecordingRunner(error=FileNotFoundError("sshpass"))

    assert probe_login("web", "pw", runner=runner) is False


def test_probe_login_without_sshpass(monkeypatch):
    monkeypatch.setattr(ssh_password_exec, "find_sshpass", lambda: None)

    def _runner(*a, **k):
        raise AssertionError("must not spawn")

    assert probe_login("web", "pw", runner=_runner) is False


def test_interactive_session_inherits_terminal_streams(fake_binaries, monkeypatch):
    monkeypatch.setenv("SSH_ASKPASS", "/usr/lib/ssh/askpass")
    runner = RecordingRunner(returncode=130)

    rc = run_interactive_session("web", "pw", runner=runner)

    assert rc == 130
    call = runner.calls[0]
    assert call.cmd[3:] == ["/usr/bin/ssh", "-t", "web", "env TERM=xterm-256color bash --login"]
    for stream in ("stdin", "stdout", "stderr"):
        assert stream not in call.kwargs
    assert "SSH_ASKPASS" not in call.kwargs["env"]


def test_interactive_session_spawn_failure(fake_binaries):
    assert run_interactive_session("web", "pw", runner=RecordingRunner(error=OSError("boom"))) == -1
