from __future__ import annotations

import logging
from typing import Callable, List, Optional

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import ContentSwitcher, DataTable, Footer, Header, Input, LoadingIndicator, Static

from sshhop.models import HostEntry
from sshhop.session import (
    Authenticate,
    Browse,
    Cancel,
    Confirm,
    Connecting,
    DeleteRequest,
    EditPassword,
    Exit,
    Highlight,
    ProbeResult,
    Quit,
    SessionController,
    StartProbe,
    Submit,
)
from sshhop.ssh_password_exec import probe_login

LOG = logging.getLogger(__name__)

Prober = Callable[[str, str], bool]


class LoginFinished(Message):
    """Posted by the probe worker once ssh has exited."""

    def __init__(self, success: bool):
        super().__init__()
        self.success = success


class HostTable(DataTable):
    """Host list; Enter selects the highlighted row."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.cursor_type = "row"
        self.zebra_stripes = True


class InfoPanel(Static):
    """Shows the proxy-jump neighbourhood of the highlighted host."""

    def show_text(self, text: str) -> None:
        self.update(Text(text or "Select a host to see details."))


class SshHopApp(App[None]):
    """Textual front end for :class:`SessionController`."""

    TITLE = "SSH Hosts"
    ENABLE_COMMAND_PALETTE = False
    AUTO_FOCUS = "#host-table"
    CSS = """
    Screen {
        layout: vertical;
    }

    #screens {
        height: 1fr;
    }

    #browse {
        height: 1fr;
        padding: 1 2;
    }

    #list-panel {
        height: 1fr;
        width: 1fr;
    }

    #details-panel {
        height: 1fr;
        width: 64;
        margin-left: 2;
        border: round $secondary;
        padding: 1;
    }

    #info {
        height: 1fr;
        overflow-y: auto;
    }

    #host-table {
        height: 1fr;
    }

    #filter {
        margin-bottom: 1;
    }

    #authenticate {
        padding: 1 2;
    }

    #auth-host {
        color: $accent;
        text-style: underline;
        padding-bottom: 1;
    }

    #auth-error {
        color: $error;
        padding-bottom: 1;
    }

    .hint {
        color: $text-muted;
    }

    #password {
        width: 60;
    }

    #connecting {
        padding: 2 3;
        height: 5;
    }

    #connecting LoadingIndicator {
        height: 1;
    }

    .panel-title {
        text-style: bold;
        padding-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("x", "delete_host", "Remove host"),
        Binding("delete", "delete_host", "Remove host", show=False),
        Binding("/", "focus_filter", "Filter"),
        Binding("escape", "go_back", "Back"),
    ]

    def __init__(self, controller: SessionController, *, prober: Prober = probe_login, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self.prober = prober
        self.row_entries: List[HostEntry] = []
        self.filter_text = ""
        self._rendered: Optional[type] = None

    # --------------------------------------------------------------------- UI
    def compose(self) -> ComposeResult:
        yield Header()
        with ContentSwitcher(initial="browse", id="screens"):
            with Horizontal(id="browse"):
                with Vertical(id="list-panel"):
                    yield Input(placeholder="Filter hosts...", id="filter")
                    table = HostTable(id="host-table")
                    table.add_columns("Host", "Address")
                    yield table
                with Vertical(id="details-panel"):
                    yield Static("Details", classes="panel-title")
                    yield InfoPanel(id="info")
            with Vertical(id="authenticate"):
                yield Static("", id="auth-host", markup=False)
                yield Static("", id="auth-error", markup=False)
                yield Static("enter password:", classes="hint")
                yield Input(password=True, id="password")
            with Vertical(id="connecting"):
                yield LoadingIndicator()
                yield Static("Logging in...", id="connecting-label")
        yield Footer()

    def on_mount(self) -> None:
        self.host_table = self.query_one(HostTable)
        self.info_panel = self.query_one(InfoPanel)
        self.filter_input = self.query_one("#filter", Input)
        self.password_input = self.query_one("#password", Input)
        self.apply_filter()
        self._render_state()

    # ---------------------------------------------------------------- bindings
    def check_action(self, action: str, parameters) -> Optional[bool]:
        state = self.controller.state
        if action in ("quit", "delete_host", "focus_filter"):
            return isinstance(state, Browse)
        if action == "go_back":
            return isinstance(state, (Browse, Authenticate))
        return True

    async def action_quit(self) -> None:
        self._dispatch(Quit())

    def action_delete_host(self) -> None:
        entry = self._current_entry()
        if entry is None:
            return
        index = self.host_table.cursor_row
        before = self.controller.entries
        self._dispatch(DeleteRequest(entry.name))
        if self.controller.entries is not before:
            self.apply_filter(index=index)

    def action_focus_filter(self) -> None:
        self.filter_input.focus()
        self.filter_input.cursor_position = len(self.filter_input.value)

    def action_go_back(self) -> None:
        """Esc: leave the prompt, drop an active filter, or quit from the list."""
        if isinstance(self.controller.state, Authenticate):
            self._dispatch(Cancel())
        elif self.filter_text or self.focused is self.filter_input:
            self._clear_filter()
        else:
            self._dispatch(Quit())

    # ----------------------------------------------------------------- events
    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.data_table is not self.host_table:
            return
        entry = self._entry_for_row(event.cursor_row)
        if entry is not None:
            self._dispatch(Highlight(entry.name))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table is not self.host_table:
            return
        event.stop()
        entry = self._entry_for_row(event.cursor_row)
        if entry is not None:
            self._dispatch(Confirm(entry.name))

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input is self.filter_input:
            if event.value != self.filter_text:
                self.filter_text = event.value
                self.apply_filter()
            return
        state = self.controller.state
        if event.input is self.password_input and isinstance(state, Authenticate):
            if event.value != state.password:
                self._dispatch(EditPassword(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input is self.filter_input:
            event.stop()
            self.host_table.focus()
        elif event.input is self.password_input:
            event.stop()
            self._dispatch(Submit(event.value))

    def on_login_finished(self, message: LoginFinished) -> None:
        self._dispatch(ProbeResult(message.success))

    # ------------------------------------------------------------------ probe
    @work(thread=True, exclusive=True, group="login-probe")
    def run_probe(self, host: str, password: str) -> None:
        try:
            success = bool(self.prober(host, password))
        except OSError:
            LOG.exception("Login probe for %s crashed", host)
            success = False
        self.post_message(LoginFinished(success))

    # ---------------------------------------------------------------- helpers
    def _dispatch(self, event) -> None:
        effect = self.controller.dispatch(event)
        self._render_state()
        if isinstance(effect, StartProbe):
            self.run_probe(effect.host, effect.password)
        elif isinstance(effect, Exit):
            self.exit()

    def apply_filter(self, *, index: int = 0) -> None:
        """Show the hosts whose name contains the filter text, ignoring case."""
        needle = self.filter_text.strip().lower()
        table = self.host_table
        table.clear(columns=False)
        self.row_entries = [
            entry for entry in self.controller.entries
            if not needle or needle in entry.name.lower()
        ]
        for idx, entry in enumerate(self.row_entries):
            table.add_row(Text(entry.name), Text(entry.display_hint), key=f"row-{idx}")

        if self.row_entries:
            row = max(0, min(index, len(self.row_entries) - 1))
            table.move_cursor(row=row)
            self._dispatch(Highlight(self.row_entries[row].name))
        elif needle and self.controller.entries:
            self.info_panel.show_text("No hosts match the filter.")
        else:
            self.info_panel.show_text("No hosts left in the SSH config.")

    def _clear_filter(self) -> None:
        self.filter_text = ""
        self.filter_input.value = ""
        self.apply_filter()
        self.host_table.focus()

    def _entry_for_row(self, row: int) -> Optional[HostEntry]:
        if 0 <= row < len(self.row_entries):
            return self.row_entries[row]
        return None

    def _current_entry(self) -> Optional[HostEntry]:
        if not self.row_entries:
            return None
        return self._entry_for_row(self.host_table.cursor_row)

    def _render_state(self) -> None:
        state = self.controller.state
        entered = type(state) is not self._rendered
        self._rendered = type(state)
        switcher = self.query_one(ContentSwitcher)
        if isinstance(state, Browse):
            switcher.current = "browse"
            if self.password_input.value:
                self.password_input.value = ""
            if self.row_entries:
                self.info_panel.show_text(self.controller.info_text)
            # Leave focus alone while the user types into the filter
            if entered:
                self.host_table.focus()
        elif isinstance(state, Authenticate):
            switcher.current = "authenticate"
            self.query_one("#auth-host", Static).update(Text(state.host))
            error = self.query_one("#auth-error", Static)
            error.update(Text(state.error))
            error.display = bool(state.error)
            if self.password_input.value != state.password:
                self.password_input.value = state.password
            self.password_input.focus()
        elif isinstance(state, Connecting):
            switcher.current = "connecting"
            self.set_focus(None)
        self.refresh_bindings()


__all__ = ["LoginFinished", "SshHopApp"]
