"""Testship TUI — interactive instruction forms for Anchor programs."""

from __future__ import annotations

from pathlib import Path


def launch_tui(idl_path: Path | None = None, share_url: str | None = None) -> int:
    """Launch the Testship TUI application."""
    from .app import TestshipApp

    app = TestshipApp(idl_path=idl_path, share_url=share_url)
    app.run()
    return 0
