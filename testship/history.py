"""Form and account history kept in an injected key-value store.

Values are JSON strings, the same way a browser keeps them in localStorage,
so a history file written here can be inspected by hand. Nothing in this
module ever stores signer key material.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from .constants import (
    ACCOUNTS_HISTORY_PREFIX,
    FORM_HISTORY_PREFIX,
    HISTORY_PREFIXES,
    SAVED_ACCOUNTS_KEY,
)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys_with_prefix(self, prefix: str) -> list[str]: ...


class MemoryStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [k for k in self._data if k.startswith(prefix)]


class TomlFileStore:
    """Store persisted as an ``[entries]`` table in a TOML file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = tomllib.loads(self.path.read_text())
        entries = data.get("entries", {})
        return {str(k): str(v) for k, v in entries.items()} if isinstance(entries, dict) else {}

    def _save(self, entries: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(tomli_w.dumps({"entries": entries}).encode())

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        entries = self._load()
        entries[key] = value
        self._save(entries)

    def remove(self, key: str) -> None:
        entries = self._load()
        if entries.pop(key, None) is not None:
            self._save(entries)

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [k for k in self._load() if k.startswith(prefix)]


def _load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return default
    return value if isinstance(value, type(default)) else default


# ── Form / account history ──────────────────────────────────────


def save_form_history(store: KeyValueStore, instruction: str, arg_values: dict[str, Any]) -> None:
    store.set(FORM_HISTORY_PREFIX + instruction, json.dumps(arg_values))


def load_form_history(store: KeyValueStore, instruction: str) -> dict[str, Any]:
    return _load_json(store, FORM_HISTORY_PREFIX + instruction, {})


def save_account_history(store: KeyValueStore, instruction: str, accounts: dict[str, str]) -> None:
    store.set(ACCOUNTS_HISTORY_PREFIX + instruction, json.dumps(accounts))


def load_account_history(store: KeyValueStore, instruction: str) -> dict[str, str]:
    accounts = _load_json(store, ACCOUNTS_HISTORY_PREFIX + instruction, {})
    return {k: v for k, v in accounts.items() if isinstance(v, str)}


def clear_form_history(store: KeyValueStore) -> int:
    """Remove every form and account history entry. Returns the number removed.

    The saved-accounts library is left alone.
    """
    keys: list[str] = []
    for prefix in HISTORY_PREFIXES:
        keys.extend(store.keys_with_prefix(prefix))
    for key in keys:
        store.remove(key)
    return len(keys)


# ── Saved accounts library ──────────────────────────────────────


@dataclass(frozen=True)
class SavedAccount:
    address: str
    name: str = ""
    instruction_name: str | None = None


def load_saved_accounts(store: KeyValueStore) -> list[SavedAccount]:
    out: list[SavedAccount] = []
    for entry in _load_json(store, SAVED_ACCOUNTS_KEY, []):
        if isinstance(entry, dict) and isinstance(entry.get("address"), str):
            out.append(
                SavedAccount(
                    address=entry["address"],
                    name=str(entry.get("name", "")),
                    instruction_name=entry.get("instruction_name"),
                )
            )
    return out


def _save_saved_accounts(store: KeyValueStore, accounts: list[SavedAccount]) -> None:
    store.set(SAVED_ACCOUNTS_KEY, json.dumps([asdict(a) for a in accounts]))


def add_saved_account(store: KeyValueStore, account: SavedAccount) -> bool:
    """Prepend an account unless its address is already saved."""
    accounts = load_saved_accounts(store)
    if any(a.address == account.address for a in accounts):
        return False
    _save_saved_accounts(store, [account, *accounts])
    return True


def remove_saved_account(store: KeyValueStore, address: str) -> bool:
    accounts = load_saved_accounts(store)
    kept = [a for a in accounts if a.address != address]
    if len(kept) == len(accounts):
        return False
    _save_saved_accounts(store, kept)
    return True


def saved_accounts_for(store: KeyValueStore, instruction: str | None = None) -> list[SavedAccount]:
    accounts = load_saved_accounts(store)
    if not instruction:
        return accounts
    return [a for a in accounts if a.instruction_name == instruction]
