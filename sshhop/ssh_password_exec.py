# ssh_password_exec.py
import contextlib
import logging
import os
import shutil
import subprocess
import tempfile
import threading
from typing import Callable, Dict, Iterator, List, Optional

from .platform_utils import find_ssh, find_sshpass, is_flatpak

logger = logging.getLogger(__name__)

PROBE_REMOTE_COMMAND = "exit"
DEFAULT_TERM = "xterm-256color"
DEFAULT_LOGIN_SHELL = "bash --login"


def _write_once_fifo(path: str, secret: str):
    # Writer runs in a thread: blocks until sshpass opens FIFO for read
    try:
        with open(path, "w", encoding="utf-8") as w:
            w.write(secret)
            w.flush()
    except OSError as exc:
        logger.debug("Password FIFO closed before it was read: %s", exc)


def _mk_priv_dir(prefix="sshhop-pass-") -> str:
    d = tempfile.mkdtemp(prefix=prefix)
    os.chmod(d, 0o700)
    return d


def _release_writer(path: str, writer: threading.Thread):
    # Open the read end once so a writer nobody consumed can finish
    if not writer.is_alive():
        return
    try:
        fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
    except OSError:
        return
    os.close(fd)
    writer.join(timeout=1)


@contextlib.contextmanager
def password_fifo(password: str) -> Iterator[str]:
    """Yield the path of a FIFO that hands *password* to one reader.

    The FIFO lives in a private temp dir which is removed on exit, so the
    password never shows up in argv or the environment.
    """
    tmpdir = _mk_priv_dir()
    fifo = os.path.join(tmpdir, "pw.fifo")
    os.mkfifo(fifo, 0o600)

    # Start writer thread that writes the password exactly once
    t = threading.Thread(target=_write_once_fifo, args=(fifo, password), daemon=True)
    t.start()
    try:
        yield fifo
    finally:
        _release_writer(fifo, t)
        shutil.rmtree(tmpdir, ignore_errors=True)


def build_probe_command(sshpass: str, fifo: str, host: str, *, ssh: str = "ssh") -> List[str]:
    """argv for a quick non-interactive login check against *host*."""
    return [
        sshpass, "-f", fifo, ssh,
        "-o", "StrictHostKeyChecking=no",
        "-o", "BatchMode=no",
        host, PROBE_REMOTE_COMMAND,
    ]


def build_session_command(sshpass: str, fifo: str, host: str, *,
                          ssh: str = "ssh",
                          term: str = DEFAULT_TERM,
                          login_shell: str = DEFAULT_LOGIN_SHELL) -> List[str]:
    """argv for the real interactive session on *host*."""
    return [sshpass, "-f", fifo, ssh, "-t", host, f"env TERM={term} {login_shell}"]


def _build_env(inherit_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    # Always strip askpass vars so sshpass is the only password source
    env = dict(inherit_env or os.environ)
    env.pop("SSH_ASKPASS", None)
    env.pop("SSH_ASKPASS_REQUIRE", None)

    # Ensure /app/bin is first in PATH for Flatpak compatibility
    if is_flatpak() and os.path.exists('/app/bin'):
        current_path = env.get('PATH', '')
        if '/app/bin' not in current_path:
            env['PATH'] = f"/app/bin:{current_path}"
    return env


def probe_login(host: str, password: str, *,
                runner: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> bool:
    """Return True if ``ssh`` accepts *password* for *host*.

    Only the exit status counts; every failure, including a failure to
    spawn the process, is reported as False.
    """
    sshpass = find_sshpass()
    if not sshpass:
        logger.warning("Login probe for %s skipped: sshpass not found", host)
        return False

    with password_fifo(password) as fifo:
        cmd = build_probe_command(sshpass, fifo, host, ssh=find_ssh())
        logger.debug("Running login probe: %s", cmd)
        try:
            result = runner(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=_build_env(),
                check=False,
            )
        except OSError as exc:
            logger.info("Login probe for %s could not start: %s", host, exc)
            return False

    logger.info("Login probe for %s exited with %s", host, result.returncode)
    return result.returncode == 0


def run_interactive_session(host: str, password: str, *,
                            term: str = DEFAULT_TERM,
                            login_shell: str = DEFAULT_LOGIN_SHELL,
                            runner: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> int:
    """Attach the current terminal to a login shell on *host*.

    Returns the exit status of ssh, or -1 if it could not be started.
    """
    sshpass = find_sshpass()
    if not sshpass:
        logger.error("Cannot start session on %s: sshpass not found", host)
        return -1

    with password_fifo(password) as fifo:
        cmd = build_session_command(sshpass, fifo, host, ssh=find_ssh(), term=term, login_shell=login_shell)
        logger.info("Starting interactive session on %s", host)
        try:
            result = runner(cmd, env=_build_env(), check=False)
        except OSError as exc:
            logger.error("Interactive session on %s failed to start: %s", host, exc)
            return -1

    logger.info("Interactive session on %s ended with %s", host, result.returncode)
    return result.returncode


__all__ = [
    "build_probe_command",
    "build_session_command",
    "password_fifo",
    "probe_login",
    "run_interactive_session",
]
