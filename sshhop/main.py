#!/usr/bin/env python3
"""
sshhop - pick a host from ~/.ssh/config, log in with a password, stay there
"""

import logging
import sys

from .config import Config
from .config_model import ConfigModel, FileConfigSource, ParseError
from .log_setup import setup_logging
from .platform_utils import HomeDirectoryError, find_sshpass, sshpass_install_hint
from .session import SessionController
from .ssh_password_exec import DEFAULT_LOGIN_SHELL, DEFAULT_TERM, run_interactive_session

logger = logging.getLogger(__name__)


def check_sshpass() -> bool:
    """Print install guidance and return False when sshpass is missing."""
    if find_sshpass():
        return True
    for line in sshpass_install_hint():
        print(line)
    return False


def _setup_logging(config: Config):
    try:
        log_path = setup_logging(config)
    except OSError as exc:
        logging.getLogger().addHandler(logging.NullHandler())
        print(f"Logging disabled: {exc}", file=sys.stderr)
        return
    logger.debug("Logging to %s", log_path)


def main() -> int:
    if not check_sshpass():
        return 1

    try:
        config = Config()
        _setup_logging(config)
        ssh_config_path = config.get_ssh_config_path()
    except HomeDirectoryError as exc:
        print("Could not get current user:", exc)
        return 1

    model = ConfigModel(FileConfigSource(ssh_config_path))
    try:
        entries = model.load()
    except ParseError as exc:
        logger.error("Could not parse %s: %s", ssh_config_path, exc.cause)
        print(f"Could not parse {ssh_config_path}:", exc.cause)
        return 1
    if not entries:
        print(f"No hosts found in {ssh_config_path}")
        return 0

    from .tui import create_app

    controller = SessionController(model, entries)
    app = create_app(controller)
    try:
        app.run()
    except Exception as exc:
        logger.exception("UI runtime failure")
        print("Error running program:", exc)
        return 1
    if app.return_code:
        print("Error running program: the terminal UI exited abnormally")
        return 1

    handoff = controller.take_handoff()
    if controller.should_launch_shell and handoff is not None:
        rc = run_interactive_session(
            handoff.host,
            handoff.password,
            term=config.get_setting('ssh.term', DEFAULT_TERM) or DEFAULT_TERM,
            login_shell=config.get_setting('ssh.login_shell', DEFAULT_LOGIN_SHELL) or DEFAULT_LOGIN_SHELL,
        )
        logger.info("Session with %s finished (exit status %s)", handoff.host, rc)
    return 0


if __name__ == '__main__':
    sys.exit(main())
