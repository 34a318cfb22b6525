"""ArgumentForm — one input per instruction argument, in IDL order."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widget import Widget
from textual.widgets import Checkbox, Input, Static

from ...idl import IdlDocument, IdlInstruction
from ...state import InstructionState
from ...typemap import FieldKind, field_kind, is_nested_type, type_display_name
from ..commands import cmd_set_arg


def _arg_widget_id(name: str) -> str:
    return f"arg-{name}"


class ArgumentForm(Widget):
    """Editable argument fields; every valid edit is upserted into the store."""

    DEFAULT_CSS = """
    ArgumentForm {
        height: auto;
        padding: 0 1;
    }
    ArgumentForm .field-error {
        color: #ff3366;
        height: auto;
    }
    """

    def __init__(
        self,
        instruction: IdlInstruction,
        state: InstructionState,
        idl: IdlDocument,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._instruction = instruction
        self._state = state
        self._idl = idl

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[#ff00aa bold]Arguments[/]", classes="group-title")
            if not self._instruction.args:
                yield Static("[#555e6e]No arguments[/]")
            for arg in self._instruction.args:
                kind = field_kind(arg.type)
                label = type_display_name(arg.type, self._idl)
                if is_nested_type(arg.type, self._idl):
                    label += " (JSON)"
                yield Static(f"[#8892a4]{arg.name}[/] [#555e6e]{label}[/]", classes="input-label")
                current = self._state.arg_values.get(arg.name)
                if kind is FieldKind.BOOLEAN:
                    yield Checkbox(arg.name, value=bool(current), id=_arg_widget_id(arg.name))
                elif kind is FieldKind.NUMBER:
                    yield Input(
                        value="" if current is None else str(current),
                        placeholder="0",
                        type="integer",
                        id=_arg_widget_id(arg.name),
                    )
                else:
                    yield Input(
                        value="" if current is None else str(current),
                        placeholder=label,
                        id=_arg_widget_id(arg.name),
                    )
            yield Static("", classes="field-error", id="arg-errors")

    def _arg_name(self, widget_id: str | None) -> str | None:
        if widget_id and widget_id.startswith("arg-"):
            return widget_id[len("arg-"):]
        return None

    def _apply(self, arg_name: str, raw) -> None:
        app_state = self.app.app_state  # type: ignore[attr-defined]
        result = cmd_set_arg(app_state.store, self._idl, self._instruction.name, arg_name, raw)
        try:
            self.query_one("#arg-errors", Static).update("" if result.success else result.message)
        except Exception:
            pass
        if result.success and hasattr(self.screen, "refresh_chrome"):
            self.screen.refresh_chrome()

    def on_input_changed(self, event: Input.Changed) -> None:
        arg_name = self._arg_name(event.input.id)
        if arg_name is None:
            return
        event.stop()
        if event.value == "":
            return
        self._apply(arg_name, event.value)

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        arg_name = self._arg_name(event.checkbox.id)
        if arg_name is None:
            return
        event.stop()
        self._apply(arg_name, event.value)
