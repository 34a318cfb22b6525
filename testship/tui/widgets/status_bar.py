"""StatusBar — form progress and signers still to be entered."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from ...idl import IdlInstruction
from ...state import InstructionState


def pending_signers(ix: IdlInstruction, state: InstructionState) -> list[str]:
    """Signer accounts of ``ix`` with no keypair loaded."""
    return [acc.name for acc in ix.signer_accounts() if acc.name not in state.signer_keypairs]


def form_progress(ix: IdlInstruction, state: InstructionState) -> str:
    args = sum(1 for arg in ix.args if arg.name in state.arg_values)
    accounts = sum(1 for acc in ix.accounts if state.accounts.get(acc.name) or acc.address)
    return f"{ix.name}: {args}/{len(ix.args)} args, {accounts}/{len(ix.accounts)} accounts"


class StatusBar(Widget):
    """Bottom row. Signers that still need a keypair are shown in warning color."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: #111827;
        layout: horizontal;
        padding: 0 2;
    }
    StatusBar #sb-progress {
        color: #ff00aa;
        width: 1fr;
    }
    StatusBar #sb-signers {
        color: #ffaa00;
        width: auto;
        padding-right: 2;
    }
    StatusBar #sb-op {
        color: #8892a4;
        width: auto;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("no instruction selected", id="sb-progress")
        yield Static("", id="sb-signers")
        yield Static("", id="sb-op")

    def show_instruction(self, ix: IdlInstruction | None, state: InstructionState) -> None:
        try:
            if ix is None:
                self.query_one("#sb-progress", Static).update("no instruction selected")
                self.query_one("#sb-signers", Static).update("")
                return
            self.query_one("#sb-progress", Static).update(form_progress(ix, state))
            needed = pending_signers(ix, state)
            self.query_one("#sb-signers", Static).update(
                f"keypairs needed: {', '.join(needed)}" if needed else ""
            )
        except Exception:
            pass

    def show_operation(self, text: str) -> None:
        try:
            self.query_one("#sb-op", Static).update(text)
        except Exception:
            pass
