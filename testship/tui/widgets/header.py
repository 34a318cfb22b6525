"""TestshipHeader — loaded program, its address, cluster and share state."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from ...idl import IdlDocument


def short_address(address: str | None) -> str:
    if not address:
        return ""
    if len(address) <= 12:
        return address
    return f"{address[:4]}…{address[-4:]}"


def program_summary(idl: IdlDocument | None) -> str:
    if idl is None:
        return "no IDL loaded (F5 to reload, Ctrl+O to open a link)"
    count = len(idl.instructions)
    parts = [idl.name, f"{count} instruction{'s' if count != 1 else ''}"]
    if idl.address:
        parts.append(short_address(idl.address))
    return "  ".join(parts)


def share_summary(last_share_url: str | None) -> str:
    if not last_share_url:
        return "not shared"
    return f"shared ({len(last_share_url)} chars)"


class TestshipHeader(Widget):
    """One row: logo, program summary, share state, cluster badge."""

    DEFAULT_CSS = """
    TestshipHeader {
        dock: top;
        height: 3;
        background: #111827;
        border-bottom: solid #1a3a4a;
        layout: horizontal;
        padding: 0 2;
    }
    TestshipHeader Static {
        content-align: left middle;
        width: auto;
        padding-right: 2;
    }
    TestshipHeader #header-logo {
        color: #00ffcc;
        text-style: bold;
    }
    TestshipHeader #header-program {
        color: #ff00aa;
        width: 1fr;
    }
    TestshipHeader #header-share {
        color: #8892a4;
    }
    TestshipHeader #header-cluster {
        color: #00ffcc;
        padding-right: 0;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(" TESTSHIP ", id="header-logo")
        yield Static(program_summary(None), id="header-program")
        yield Static(share_summary(None), id="header-share")
        yield Static("", id="header-cluster")

    def show(self, idl: IdlDocument | None, cluster: str | None, last_share_url: str | None) -> None:
        try:
            self.query_one("#header-program", Static).update(program_summary(idl))
            self.query_one("#header-share", Static).update(share_summary(last_share_url))
            self.query_one("#header-cluster", Static).update(f"[{cluster}]" if cluster else "")
        except Exception:
            pass
