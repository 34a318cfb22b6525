"""InstructionScreen — instruction list, forms, share and open-link actions."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Static

from ..clipboard import copy_text_to_clipboard
from ..commands import (
    cmd_clear_history,
    cmd_open_shared,
    cmd_record_history,
    cmd_restore_history,
    cmd_share,
)
from ..panels.accounts import AccountsForm
from ..panels.arguments import ArgumentForm
from ..widgets.header import TestshipHeader
from ..widgets.instruction_list import InstructionList
from ..widgets.log_panel import LogPanel
from ..widgets.status_bar import StatusBar, pending_signers
from .link import OpenLinkScreen, ShareLinkScreen


class InstructionScreen(Screen):
    """Main working screen."""

    BINDINGS = [
        Binding("ctrl+s", "share", "Share"),
        Binding("ctrl+o", "open_link", "Open Link"),
        Binding("ctrl+r", "restore", "Restore History"),
        Binding("ctrl+l", "clear_history", "Clear History"),
    ]

    DEFAULT_CSS = """
    InstructionScreen #ix-sidebar {
        width: 32;
        border-right: solid #1a3a4a;
    }
    InstructionScreen #ix-detail {
        width: 1fr;
    }
    InstructionScreen #ix-actions {
        height: auto;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield TestshipHeader(id="ix-header")
        with Horizontal():
            with Vertical(id="ix-sidebar"):
                yield Static("[#00ffcc bold]INSTRUCTIONS[/]", classes="panel-title")
                yield InstructionList(id="ix-list")
            with Vertical(id="ix-detail"):
                yield VerticalScroll(id="ix-form")
                with Horizontal(id="ix-actions"):
                    yield Button("Save to History", id="btn-save-history")
                    yield Button("Share", id="btn-share", variant="primary")
                    yield Button("Open Link", id="btn-open-link")
                yield LogPanel(id="ix-log")
        yield StatusBar(id="ix-status")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_idl()

    # ── Helpers ────────────────────────────────────────────────

    @property
    def _app_state(self):
        return self.app.app_state  # type: ignore[attr-defined]

    def get_log(self) -> LogPanel | None:
        try:
            return self.query_one("#ix-log", LogPanel)
        except Exception:
            return None

    def refresh_idl(self) -> None:
        """Re-read the loaded IDL and active instruction into the widgets."""
        app_state = self._app_state
        idl = app_state.idl
        self.refresh_chrome()
        try:
            self.query_one("#ix-list", InstructionList).set_names(idl.instruction_names() if idl else [])
        except Exception:
            return
        if app_state.store.active_instruction:
            self.show_instruction(app_state.store.active_instruction)

    def show_instruction(self, name: str) -> None:
        app_state = self._app_state
        idl = app_state.idl
        ix = idl.instruction(name) if idl else None
        if ix is None:
            self._log("error", f"Unknown instruction: {name}")
            return
        store = app_state.store
        store.set_active_instruction(name)
        for acc in ix.accounts:
            if acc.address and acc.name not in store.get_instruction_state(name).accounts:
                store.set_account(name, acc.name, acc.address)
        state = store.get_instruction_state(name)

        form = self.query_one("#ix-form", VerticalScroll)
        form.remove_children()
        form.mount(
            Static(f"[#00ffcc bold]{name}[/]", classes="panel-title"),
            *[Static(f"[#555e6e]{line}[/]") for line in ix.docs],
            ArgumentForm(ix, state, idl),
            AccountsForm(ix, state),
        )
        signers = pending_signers(ix, state)
        if signers:
            self._log("warning", f"{name} needs signer keypairs: {', '.join(signers)}")
        self.refresh_chrome()

    def _log(self, level: str, message: str) -> None:
        log = self.get_log()
        if log is not None:
            log.add_entry(level, message)

    def _set_operation(self, text: str) -> None:
        try:
            self.query_one("#ix-status", StatusBar).show_operation(text)
        except Exception:
            pass

    def refresh_chrome(self) -> None:
        """Bring the header and status bar in line with the store."""
        app_state = self._app_state
        store = app_state.store
        idl = app_state.idl
        active = store.active_instruction
        ix = idl.instruction(active) if idl and active else None
        try:
            self.query_one("#ix-header", TestshipHeader).show(idl, store.cluster, app_state.last_share_url)
            self.query_one("#ix-status", StatusBar).show_instruction(ix, store.get_instruction_state(active or ""))
        except Exception:
            pass

    # ── Events ─────────────────────────────────────────────────

    def on_instruction_list_selected(self, event: InstructionList.Selected) -> None:
        self.show_instruction(event.instruction)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        btn = event.button.id
        if btn == "btn-share":
            self.action_share()
        elif btn == "btn-open-link":
            self.action_open_link()
        elif btn == "btn-save-history":
            self._save_history()

    # ── Actions ────────────────────────────────────────────────

    def action_share(self) -> None:
        app_state = self._app_state
        result = cmd_share(app_state.store, app_state.base_url)
        if not result.success:
            self._log("error", result.message)
            self.app.notify(result.message, severity="error")
            return
        url = result.data["url"]
        app_state.last_share_url = url
        self.refresh_chrome()
        self._log("success", result.message)
        self._log("link", url)
        copied, tool_msg = copy_text_to_clipboard(url)
        if copied:
            self.app.notify(f"Share link copied ({tool_msg})", severity="information")
        self._set_operation("shared")
        self.app.push_screen(ShareLinkScreen(url))

    def action_open_link(self) -> None:
        self.app.push_screen(OpenLinkScreen(), self.open_link)

    def open_link(self, url: str | None) -> None:
        if not url:
            return
        app_state = self._app_state
        result = cmd_open_shared(app_state.store, url)
        if not result.success:
            self._log("error", result.message)
            self.app.notify(result.message, severity="error")
            return
        self._log("success", result.message)
        for line in result.logs:
            self._log("info", f"  {line}")
        needed = result.data.get("signers_needed") or []
        if needed:
            self._log("warning", f"Re-enter signer keypairs: {', '.join(needed)}")
        self.app.notify(result.message, severity="information")
        self._set_operation("loaded link")
        self.refresh_idl()

    def _save_history(self) -> None:
        app_state = self._app_state
        name = app_state.store.active_instruction
        if not name:
            self.app.notify("Select an instruction first", severity="warning")
            return
        result = cmd_record_history(app_state.history, app_state.store, name)
        self._log("success", result.message)

    def action_restore(self) -> None:
        app_state = self._app_state
        name = app_state.store.active_instruction
        if not name:
            self.app.notify("Select an instruction first", severity="warning")
            return
        result = cmd_restore_history(app_state.history, app_state.store, name)
        self._log("info", result.message)
        self.show_instruction(name)

    def action_clear_history(self) -> None:
        app_state = self._app_state
        result = cmd_clear_history(app_state.history, app_state.store)
        self._log("success", result.message)
        self.app.notify(result.message, severity="information")
        self.query_one("#ix-form", VerticalScroll).remove_children()
        self._set_operation("history cleared")
