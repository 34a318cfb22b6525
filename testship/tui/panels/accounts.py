"""AccountsForm — account addresses and signer keypairs for an instruction."""

from __future__ import annotations

from solders.keypair import Keypair
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widget import Widget
from textual.widgets import Input, Static

from ...idl import IdlInstruction
from ...state import InstructionState
from ..commands import cmd_set_account, cmd_set_signer


class AccountsForm(Widget):
    """Address inputs for every account; signers also get a keypair path.

    Keypair paths go to the store's signer map only, which is never shared
    or written to history.
    """

    DEFAULT_CSS = """
    AccountsForm {
        height: auto;
        padding: 0 1;
    }
    AccountsForm .field-error {
        color: #ff3366;
        height: auto;
    }
    """

    def __init__(self, instruction: IdlInstruction, state: InstructionState, **kwargs) -> None:
        super().__init__(**kwargs)
        self._instruction = instruction
        self._state = state

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[#ff00aa bold]Accounts[/]", classes="group-title")
            if not self._instruction.accounts:
                yield Static("[#555e6e]No accounts[/]")
            for acc in self._instruction.accounts:
                flags = [f for f, on in (("signer", acc.signer), ("mut", acc.writable), ("optional", acc.optional)) if on]
                suffix = f" [#555e6e]({', '.join(flags)})[/]" if flags else ""
                yield Static(f"[#8892a4]{acc.name}[/]{suffix}", classes="input-label")
                address = self._state.accounts.get(acc.name) or acc.address or ""
                yield Input(
                    value=address,
                    placeholder="address",
                    disabled=acc.address is not None,
                    id=f"acct-{acc.name}",
                )
                if acc.signer:
                    loaded = self._state.signer_keypairs.get(acc.name)
                    yield Input(
                        placeholder=(
                            f"keypair loaded: {loaded.pubkey()}"
                            if isinstance(loaded, Keypair)
                            else "signer keypair path (not shared)"
                        ),
                        id=f"signer-{acc.name}",
                    )
            yield Static("", classes="field-error", id="acct-errors")

    def _report(self, message: str) -> None:
        try:
            self.query_one("#acct-errors", Static).update(message)
        except Exception:
            pass

    def on_input_changed(self, event: Input.Changed) -> None:
        widget_id = event.input.id or ""
        store = self.app.app_state.store  # type: ignore[attr-defined]
        if widget_id.startswith("acct-"):
            event.stop()
            if not event.value.strip():
                return
            result = cmd_set_account(store, self._instruction.name, widget_id[len("acct-"):], event.value)
            self._report("" if result.success else result.message)
            if result.success and hasattr(self.screen, "refresh_chrome"):
                self.screen.refresh_chrome()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        widget_id = event.input.id or ""
        if widget_id.startswith("signer-"):
            event.stop()
            store = self.app.app_state.store  # type: ignore[attr-defined]
            result = cmd_set_signer(store, self._instruction.name, widget_id[len("signer-"):], event.value)
            self._report("" if result.success else result.message)
            if result.success:
                signer = widget_id[len("signer-"):]
                address = store.get_instruction_state(self._instruction.name).accounts.get(signer, "")
                try:
                    self.query_one(f"#acct-{signer}", Input).value = address
                except Exception:
                    pass
                event.input.value = ""
                self.app.notify(result.message)
                if hasattr(self.screen, "refresh_chrome"):
                    self.screen.refresh_chrome()
