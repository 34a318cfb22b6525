"""SettingsScreen — share base URL, cluster, RPC URL, history file."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Input, Select, Static

from ...config import get_defaults, set_defaults
from ...constants import CLUSTER_URLS
from ..widgets.header import TestshipHeader


_CLUSTERS = [(name, name) for name in CLUSTER_URLS]


class SettingsScreen(Screen):
    """Global settings stored in ~/.testship/config.toml."""

    BINDINGS = [
        Binding("up", "focus_previous", "Up", show=False),
        Binding("down", "focus_next", "Down", show=False),
    ]

    def compose(self) -> ComposeResult:
        yield TestshipHeader()
        with Vertical(id="settings-form"):
            yield Static("[#00ffcc bold]SETTINGS[/]", classes="panel-title")

            yield Static("[#8892a4]Share base URL[/]", classes="input-label")
            yield Input(placeholder="https://app.testship.xyz", id="settings-base-url")

            yield Static("[#8892a4]Cluster[/]", classes="input-label")
            yield Select(_CLUSTERS, value="devnet", id="settings-cluster")

            yield Static("[#8892a4]RPC URL (leave blank for cluster default)[/]", classes="input-label")
            yield Input(placeholder="https://api.devnet.solana.com", id="settings-rpc")

            yield Static("[#8892a4]History file[/]", classes="input-label")
            yield Input(placeholder="~/.testship/history.toml", id="settings-history")

            with Vertical(id="settings-buttons"):
                yield Button("Save", id="btn-settings-save", variant="primary")
                yield Button("Cancel", id="btn-settings-cancel")

            yield Static("", id="settings-status")
        yield Footer()

    def on_mount(self) -> None:
        app_state = self.app.app_state  # type: ignore[attr-defined]
        self.query_one(TestshipHeader).show(app_state.idl, app_state.store.cluster, app_state.last_share_url)
        defaults = get_defaults()
        self.query_one("#settings-base-url", Input).value = str(defaults.get("base_url", ""))
        try:
            self.query_one("#settings-cluster", Select).value = defaults.get("cluster", "devnet")
        except Exception:
            pass
        self.query_one("#settings-rpc", Input).value = str(defaults.get("rpc_url", ""))
        self.query_one("#settings-history", Input).value = str(defaults.get("history_path", ""))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-settings-save":
            self._save()
        elif event.button.id == "btn-settings-cancel":
            self.app.pop_screen()

    def _save(self) -> None:
        cluster_select = self.query_one("#settings-cluster", Select)
        cluster = str(cluster_select.value) if cluster_select.value != Select.BLANK else "devnet"
        base_url = self.query_one("#settings-base-url", Input).value.strip()
        rpc = self.query_one("#settings-rpc", Input).value.strip()
        history = self.query_one("#settings-history", Input).value.strip()

        set_defaults(
            base_url=base_url or None,
            cluster=cluster,
            rpc_url=rpc or None,
            history_path=history or None,
        )

        app_state = self.app.app_state  # type: ignore[attr-defined]
        app_state.defaults = get_defaults()
        app_state.store.set_cluster(cluster)

        self.query_one("#settings-status", Static).update("[#39ff14]Settings saved[/]")
        self.notify("Settings saved", severity="information")
