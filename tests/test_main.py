import pytest

import sshhop.main as main_module
import sshhop.tui.app as app_module
from sshhop.platform_utils import HomeDirectoryError
from sshhop.session import Confirm, ProbeResult, Submit


@pytest.fixture(autouse=True)
def quiet_environment(monkeypatch):
    monkeypatch.setattr(main_module, "find_sshpass", lambda: "/usr/bin/sshpass")
    monkeypatch.setattr(main_module, "setup_logging", lambda config: "/dev/null")


@pytest.fixture
def ssh_config(tmp_path, monkeypatch):
    ssh_dir = tmp_path / "ssh"
    ssh_dir.mkdir()
    monkeypatch.setenv("SSHHOP_SSH_DIR", str(ssh_dir))
    return ssh_dir / "config"


def test_missing_sshpass_prints_hint(monkeypatch, capsys):
    monkeypatch.setattr(main_module, "find_sshpass", lambda: None)

    assert main_module.main() == 1

    out = capsys.readouterr().out
    assert "Error: sshpass is not installed." in out


def test_unknown_home_directory(monkeypatch, capsys):
    def _no_home(*args, **kwargs):
        raise HomeDirectoryError("no passwd entry")

    monkeypatch.setattr(main_module, "Config", _no_home)

    assert main_module.main() == 1
    assert "Could not get current user: no passwd entry" in capsys.readouterr().out


def test_unreadable_ssh_config(ssh_config, capsys):
    assert main_module.main() == 1
    assert f"Could not parse {ssh_config}:" in capsys.readouterr().out


def test_config_without_hosts_exits_cleanly(ssh_config, capsys):
    ssh_config.write_text("Host *\n    ServerAliveInterval 30\n")

    assert main_module.main() == 0
    assert capsys.readouterr().out.strip() == f"No hosts found in {ssh_config}"


class _ScriptedApp:
    """Stands in for the TUI and drives the controller to a successful login."""

    def __init__(self, controller, **kwargs):
        self.controller = controller
        self.return_code = None

    def run(self):
        self.controller.dispatch(Confirm("web"))
        self.controller.dispatch(Submit("pw"))
        self.controller.dispatch(ProbeResult(True))


class _CrashingApp(_ScriptedApp):
    def run(self):
        raise RuntimeError("terminal went away")


def test_successful_login_hands_off_to_ssh(ssh_config, monkeypatch):
    ssh_config.write_text("Host web\n    Hostname 10.0.0.2\n")
    sessions = []
    monkeypatch.setattr(app_module, "SshHopApp", _ScriptedApp)
    monkeypatch.setattr(
        main_module,
        "run_interactive_session",
        lambda host, password, **kw: sessions.append((host, password, kw)) or 0,
    )

    assert main_module.main() == 0
    assert sessions == [("web", "pw", {"term": "xterm-256color", "login_shell": "bash --login"})]


def test_ui_failure_reports_error(ssh_config, monkeypatch, capsys):
    ssh_config.write_text("Host web\n")
    monkeypatch.setattr(app_module, "SshHopApp", _CrashingApp)

    assert main_module.main() == 1
    assert "Error running program: terminal went away" in capsys.readouterr().out
