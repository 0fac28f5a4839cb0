"""Platform-related utility functions."""

import logging
import os
import platform
import shutil
from pathlib import Path
from typing import List, Optional

APP_NAME = "sshhop"
FLATPAK_SSHPASS = "/app/bin/sshpass"

logger = logging.getLogger(__name__)


class HomeDirectoryError(RuntimeError):
    """Raised when the current user's home directory cannot be determined."""


def _normalize_path(path: str) -> str:
    """Expand user references and return an absolute path."""
    return os.path.abspath(os.path.expanduser(path))


def is_macos() -> bool:
    """Return True if running on macOS."""
    return platform.system() == "Darwin"


def is_linux() -> bool:
    return platform.system() == "Linux"


def is_flatpak() -> bool:
    """Return True if running inside a Flatpak sandbox."""
    return os.environ.get("FLATPAK_ID") is not None or os.path.exists("/.flatpak-info")


def get_home_dir() -> str:
    """Return the current user's home directory.

    Raises :class:`HomeDirectoryError` when neither ``Path.home`` nor
    ``expanduser`` can work it out.
    """
    try:
        home_dir = str(Path.home())
    except (RuntimeError, KeyError) as exc:
        expanded = os.path.expanduser("~")
        if expanded and expanded != "~":
            return expanded
        raise HomeDirectoryError(str(exc) or "home directory is unknown") from exc
    if not home_dir.strip():
        raise HomeDirectoryError("home directory is empty")
    return home_dir


def _xdg_dir(env_var: str, fallback: str) -> str:
    base = os.environ.get(env_var, "").strip()
    if not base:
        base = os.path.join(get_home_dir(), fallback)
    return os.path.join(_normalize_path(base), APP_NAME)


def get_config_dir() -> str:
    """Return the per-user configuration directory for sshhop.

    ``SSHHOP_CONFIG_DIR`` overrides the XDG location.
    """
    override = os.environ.get("SSHHOP_CONFIG_DIR")
    if override:
        return _normalize_path(override)
    return _xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> str:
    """Return the per-user data directory (log files live here)."""
    override = os.environ.get("SSHHOP_DATA_DIR")
    if override:
        return _normalize_path(override)
    return _xdg_dir("XDG_DATA_HOME", os.path.join(".local", "share"))


def get_ssh_dir() -> str:
    """Return the user's SSH directory.

    The location can be overridden by setting the ``SSHHOP_SSH_DIR``
    environment variable.
    """
    override = os.environ.get("SSHHOP_SSH_DIR")
    if override:
        return _normalize_path(override)
    return _normalize_path(os.path.join(get_home_dir(), ".ssh"))


def get_ssh_config_path() -> str:
    return os.path.join(get_ssh_dir(), "config")


def find_sshpass() -> Optional[str]:
    """Resolve the sshpass binary, preferring the Flatpak bundled copy."""
    if os.path.exists(FLATPAK_SSHPASS) and os.access(FLATPAK_SSHPASS, os.X_OK):
        return FLATPAK_SSHPASS
    found = shutil.which("sshpass")
    logger.debug("sshpass resolved to: %s", found)
    return found


def find_ssh() -> str:
    return shutil.which("ssh") or "/usr/bin/ssh"


def sshpass_install_hint() -> List[str]:
    """Lines explaining how to install sshpass on the current platform."""
    lines = [
        "Error: sshpass is not installed.",
        "",
        "This app requires sshpass to provide passwords to ssh non-interactively.",
        "",
    ]
    if is_macos():
        lines += ["Install it with:", "  brew install hudochenkov/sshpass/sshpass"]
    elif is_linux():
        lines += ["Install it with:", "  sudo apt install sshpass"]
    else:
        lines.append("Please install sshpass for your platform.")
    return lines


__all__ = [
    "APP_NAME",
    "HomeDirectoryError",
    "find_ssh",
    "find_sshpass",
    "get_config_dir",
    "get_data_dir",
    "get_home_dir",
    "get_ssh_config_path",
    "get_ssh_dir",
    "is_flatpak",
    "is_linux",
    "is_macos",
    "sshpass_install_hint",
]
