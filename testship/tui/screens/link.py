"""Modal screens for showing a share link and entering one to open."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class ShareLinkScreen(ModalScreen[None]):
    """Shows a freshly generated share link."""

    DEFAULT_CSS = """
    ShareLinkScreen {
        align: center middle;
    }
    ShareLinkScreen > Vertical {
        width: 80%;
        height: auto;
        background: #111827;
        border: solid #00ffcc;
        padding: 1 2;
    }
    """

    def __init__(self, url: str) -> None:
        super().__init__()
        self._url = url

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[#00ffcc bold]Share[/]")
            yield Static("[#8892a4]Signer keypairs are never included in the link.[/]")
            yield Input(value=self._url, id="share-url")
            yield Button("Close", id="btn-share-close", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-share-close":
            self.dismiss(None)


class OpenLinkScreen(ModalScreen[str | None]):
    """Prompts for a share link; dismisses with the URL or None."""

    DEFAULT_CSS = """
    OpenLinkScreen {
        align: center middle;
    }
    OpenLinkScreen > Vertical {
        width: 80%;
        height: auto;
        background: #111827;
        border: solid #00ffcc;
        padding: 1 2;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[#00ffcc bold]Open shared link[/]")
            yield Input(placeholder="https://app.testship.xyz/?state=v1...", id="open-url")
            with Horizontal(classes="form-row"):
                yield Button("Open", id="btn-open", variant="primary")
                yield Button("Cancel", id="btn-open-cancel")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip() or None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-open":
            self.dismiss(self.query_one("#open-url", Input).value.strip() or None)
        elif event.button.id == "btn-open-cancel":
            self.dismiss(None)
