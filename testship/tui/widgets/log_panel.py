"""LogPanel — session log of form edits, shares and opened links."""

from __future__ import annotations

from datetime import datetime

from rich.markup import escape
from textual.widgets import RichLog


LEVEL_STYLES = {
    "info": "#8892a4",
    "success": "#39ff14",
    "error": "#ff3366",
    "warning": "#ffaa00",
    "link": "#00ffcc",
}


def format_entry(level: str, message: str, when: datetime | None = None) -> str:
    """Markup for one log line. Links stay clickable; unknown levels log as info."""
    stamp = (when or datetime.now()).strftime("%H:%M:%S")
    color = LEVEL_STYLES.get(level, LEVEL_STYLES["info"])
    text = escape(message)
    if level == "link":
        text = f"[link={message}]{text}[/link]"
    return f"[#555e6e]{stamp}[/] [{color}]{text}[/]"


class LogPanel(RichLog):
    """Timestamped log; keeps the plain entries so the last link can be recalled."""

    DEFAULT_CSS = """
    LogPanel {
        background: #0a0e17;
        border: solid #1a3a4a;
        padding: 0 1;
        min-height: 6;
        max-height: 30%;
    }
    LogPanel:focus {
        border: solid #00ffcc;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(highlight=False, markup=True, wrap=True, **kwargs)
        self.entries: list[tuple[str, str]] = []

    def add_entry(self, level: str, message: str) -> None:
        self.entries.append((level, message))
        self.write(format_entry(level, message))

    def last_link(self) -> str | None:
        for level, message in reversed(self.entries):
            if level == "link":
                return message
        return None
