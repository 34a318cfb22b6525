"""InstructionList — arrow-key navigable list of IDL instructions."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.message import Message
from textual.widget import Widget
from textual.widgets import OptionList
from textual.widgets.option_list import Option


class InstructionList(Widget):
    """Lists instruction names. Fires Selected on Enter or click."""

    DEFAULT_CSS = """
    InstructionList {
        height: 1fr;
        background: #111827;
    }
    """

    class Selected(Message):
        """Fired when an instruction is activated."""

        def __init__(self, instruction: str) -> None:
            super().__init__()
            self.instruction = instruction

    def __init__(self, names: list[str] | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._names = list(names or [])

    def compose(self) -> ComposeResult:
        yield OptionList(*[Option(name, id=name) for name in self._names])

    def set_names(self, names: list[str]) -> None:
        self._names = list(names)
        try:
            options = self.query_one(OptionList)
            options.clear_options()
            options.add_options([Option(name, id=name) for name in self._names])
        except Exception:
            pass

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id:
            self.post_message(self.Selected(event.option.id))
