"""Session state container for the Testship TUI."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..history import KeyValueStore, MemoryStore
from ..idl import IdlDocument
from ..state import InstructionStore


class AppState:
    """Everything one TUI session owns.

    The instruction store lives only in memory; signer key material entered
    in the forms is dropped when the session ends.
    """

    def __init__(
        self,
        idl_path: Path | None = None,
        share_url: str | None = None,
        history: KeyValueStore | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self.defaults: dict[str, Any] = dict(defaults or {})
        self.store = InstructionStore(cluster=self.defaults.get("cluster"))
        self.history: KeyValueStore = history if history is not None else MemoryStore()
        self.idl_path = idl_path
        self.last_share_url: str | None = None
        self._initial_share_url = share_url

    @property
    def idl(self) -> IdlDocument | None:
        return self.store.idl

    @property
    def base_url(self) -> str:
        return str(self.defaults.get("base_url", ""))

    def set_idl(self, idl: IdlDocument, path: Path | None = None) -> None:
        """Switch to a new IDL; state for the previous program is discarded."""
        if self.store.idl is not None and self.store.idl.name != idl.name:
            self.store.clear_all()
        self.store.set_idl(idl)
        self.idl_path = path
