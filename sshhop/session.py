"""
Session state machine for the host picker.

The controller knows nothing about widgets or processes. The TUI feeds it
events and carries out the effects it returns: starting the login probe in a
worker and leaving the UI loop. States are small immutable records; the
password only ever exists on ``Authenticate`` and ``Connecting``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .config_model import ConfigModel, ParseError
from .models import HostEntry

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Login failed: wrong password or SSH error."


# ---------------------------------------------------------------- states
@dataclass(frozen=True)
class Browse:
    """Host list with a live info panel."""


@dataclass(frozen=True)
class Authenticate:
    host: str
    password: str = ""
    error: str = ""

    def __repr__(self):
        return f"Authenticate(host={self.host!r}, error={self.error!r})"


@dataclass(frozen=True)
class Connecting:
    host: str
    password: str

    def __repr__(self):
        return f"Connecting(host={self.host!r})"


State = Union[Browse, Authenticate, Connecting]


# ---------------------------------------------------------------- events
@dataclass(frozen=True)
class Highlight:
    name: str


@dataclass(frozen=True)
class Confirm:
    name: str


@dataclass(frozen=True)
class DeleteRequest:
    name: str


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class EditPassword:
    value: str

    def __repr__(self):
        return "EditPassword(...)"


@dataclass(frozen=True)
class Submit:
    password: str

    def __repr__(self):
        return "Submit(...)"


@dataclass(frozen=True)
class ProbeResult:
    success: bool


Event = Union[Highlight, Confirm, DeleteRequest, Quit, Cancel, EditPassword, Submit, ProbeResult]


# --------------------------------------------------------------- effects
@dataclass(frozen=True)
class StartProbe:
    host: str
    password: str

    def __repr__(self):
        return f"StartProbe(host={self.host!r})"


@dataclass(frozen=True)
class Exit:
    pass


Effect = Union[StartProbe, Exit]


@dataclass(frozen=True)
class SessionHandoff:
    """What the caller needs to open the real session after the UI exits."""

    host: str
    password: str

    def __repr__(self):
        return f"SessionHandoff(host={self.host!r})"


class SessionController:
    """Drives Browse -> Authenticate -> Connecting and back."""

    def __init__(self, model: ConfigModel, entries: Optional[List[HostEntry]] = None):
        self.model = model
        self.entries: List[HostEntry] = list(entries if entries is not None else model.entries)
        self.state: State = Browse()
        self.highlighted: Optional[str] = None
        self.info_text = ""
        self.should_launch_shell = False
        self.finished = False
        self._handoff: Optional[SessionHandoff] = None

    @property
    def selected_host(self) -> Optional[str]:
        if isinstance(self.state, (Authenticate, Connecting)):
            return self.state.host
        return None

    @property
    def probe_in_flight(self) -> bool:
        return isinstance(self.state, Connecting)

    def dispatch(self, event: Event) -> Optional[Effect]:
        """Apply *event* and return the effect the UI has to carry out."""
        if self.finished:
            return None
        state = self.state
        if isinstance(state, Browse):
            effect = self._on_browse(event)
        elif isinstance(state, Authenticate):
            effect = self._on_authenticate(state, event)
        elif isinstance(state, Connecting):
            effect = self._on_connecting(state, event)
        else:
            raise TypeError(f"Unknown session state: {state!r}")
        if self.state is not state:
            logger.debug("Session %r --%r--> %r", state, event, self.state)
        return effect

    # ------------------------------------------------------------- Browse
    def _on_browse(self, event: Event) -> Optional[Effect]:
        if isinstance(event, Highlight):
            self._highlight(event.name)
        elif isinstance(event, Confirm):
            self.state = Authenticate(host=event.name)
        elif isinstance(event, DeleteRequest):
            self._delete(event.name)
        elif isinstance(event, Quit):
            self.finished = True
            return Exit()
        return None

    def _highlight(self, name: Optional[str]):
        self.highlighted = name
        self.info_text = self.model.describe_host(name) if name else ""

    def _delete(self, name: str):
        try:
            self.entries = self.model.delete_host(name)
        except (OSError, ParseError) as exc:
            # TODO: surface deletion failures in the status line once the UI has one.
            logger.warning("Failed to remove %s from SSH config: %s", name, exc)
            return
        if self.highlighted == name or self.highlighted not in {e.name for e in self.entries}:
            self._highlight(self.entries[0].name if self.entries else None)
        else:
            self._highlight(self.highlighted)

    # ------------------------------------------------------- Authenticate
    def _on_authenticate(self, state: Authenticate, event: Event) -> Optional[Effect]:
        if isinstance(event, EditPassword):
            self.state = Authenticate(host=state.host, password=event.value, error=state.error)
        elif isinstance(event, Cancel):
            self.state = Browse()
        elif isinstance(event, Submit):
            self.state = Connecting(host=state.host, password=event.password)
            return StartProbe(host=state.host, password=event.password)
        return None

    # --------------------------------------------------------- Connecting
    def _on_connecting(self, state: Connecting, event: Event) -> Optional[Effect]:
        if not isinstance(event, ProbeResult):
            return None
        if event.success:
            logger.info("Login to %s verified", state.host)
            self.should_launch_shell = True
            self._handoff = SessionHandoff(host=state.host, password=state.password)
            self.finished = True
            return Exit()
        logger.info("Login to %s failed", state.host)
        self.state = Authenticate(host=state.host, error=LOGIN_FAILED_MESSAGE)
        return None

    def take_handoff(self) -> Optional[SessionHandoff]:
        """Return the pending hand-off once; later calls return None."""
        handoff, self._handoff = self._handoff, None
        return handoff


__all__ = [
    "Authenticate",
    "Browse",
    "Cancel",
    "Confirm",
    "Connecting",
    "DeleteRequest",
    "EditPassword",
    "Exit",
    "Highlight",
    "LOGIN_FAILED_MESSAGE",
    "ProbeResult",
    "Quit",
    "SessionController",
    "SessionHandoff",
    "StartProbe",
    "Submit",
]
