"""
Terminal UI package for sshhop.

The Textual application lives in ``sshhop.tui.app``. It is imported lazily
so that importing :mod:`sshhop.tui` does not pull in Textual until the UI is
actually started.
"""

from __future__ import annotations

from typing import Any

__all__ = ["create_app"]


def create_app(*args: Any, **kwargs: Any) -> Any:
    """Build the Textual application for a :class:`SessionController`."""
    from .app import SshHopApp

    return SshHopApp(*args, **kwargs)
