"""TestshipApp — main Textual application."""

from __future__ import annotations

from pathlib import Path

from textual.app import App
from textual.binding import Binding
from textual.command import Hit, Hits, Provider

from ..config import get_defaults, history_path
from ..history import TomlFileStore
from .commands import cmd_load_idl
from .state import AppState


class TestshipCommandProvider(Provider):
    """Provides fuzzy-searchable commands for the command palette."""

    async def search(self, query: str) -> Hits:
        commands = [
            ("Share Link", "action_share"),
            ("Open Shared Link", "action_open_link"),
            ("Restore From History", "action_restore"),
            ("Clear Form History", "action_clear_history"),
            ("Reload IDL", "action_reload_idl"),
            ("Settings", "action_settings"),
            ("Quit Testship", "action_quit_app"),
        ]
        for name, action in commands:
            if query.lower() in name.lower():
                yield Hit(
                    1.0 - (len(query) / len(name)) if query else 0.0,
                    name,
                    self._run_command(action),
                    help=f"Run {name}",
                )

    def _run_command(self, action: str):  # noqa: ANN202
        async def callback() -> None:
            target = self.app if hasattr(self.app, action) else self.app.screen
            if hasattr(target, action):
                getattr(target, action)()
        return callback


class TestshipApp(App):
    """Testship TUI — fill, save and share instruction forms."""

    TITLE = "TESTSHIP"
    SUB_TITLE = "instruction playground"

    COMMANDS = {TestshipCommandProvider}

    BINDINGS = [
        Binding("ctrl+p", "command_palette", "Command Palette", show=True),
        Binding("ctrl+q", "quit_app", "Quit", show=True),
        Binding("f2", "settings", "Settings", show=True),
        Binding("f5", "reload_idl", "Reload IDL", show=True),
        Binding("escape", "back", "Back", show=False),
    ]

    def __init__(self, idl_path: Path | None = None, share_url: str | None = None) -> None:
        super().__init__()
        defaults = get_defaults()
        self.app_state = AppState(
            idl_path=idl_path,
            share_url=share_url,
            history=TomlFileStore(history_path()),
            defaults=defaults,
        )

    def on_mount(self) -> None:
        from .screens.instruction import InstructionScreen

        if self.app_state.idl_path:
            self._load_idl(self.app_state.idl_path)
        screen = InstructionScreen()
        self.push_screen(screen)
        if self.app_state._initial_share_url:
            self.call_after_refresh(screen.open_link, self.app_state._initial_share_url)

    def _load_idl(self, path: Path) -> bool:
        result = cmd_load_idl(path)
        if not result.success:
            self.notify(result.message, severity="error")
            return False
        self.app_state.set_idl(result.data["idl"], result.data["path"])
        self.notify(result.message, severity="information")
        screen = self.screen
        if hasattr(screen, "refresh_idl"):
            screen.refresh_idl()
        return True

    def action_reload_idl(self) -> None:
        if not self.app_state.idl_path:
            self.notify("No IDL file to reload", severity="warning")
            return
        self._load_idl(self.app_state.idl_path)

    def action_settings(self) -> None:
        from .screens.settings import SettingsScreen

        self.push_screen(SettingsScreen())

    def action_back(self) -> None:
        if len(self.screen_stack) > 2:
            self.pop_screen()

    def action_quit_app(self) -> None:
        self.exit()
