"""Commands API — argparse-free interface to Testship operations.

Every function accepts explicit arguments and returns a CommandResult; the
TUI never sees an exception from these.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from solders.keypair import Keypair

from ..history import (
    KeyValueStore,
    clear_form_history,
    load_account_history,
    load_form_history,
    save_account_history,
    save_form_history,
)
from ..idl import IdlDocument, IdlError, load_idl
from ..share import DecodingError, EncodingError, decode_share_url, encode_share_url
from ..state import InstructionStore
from ..typemap import field_kind, type_display_name
from ..validation import coerce_value, validate_field


@dataclass
class CommandResult:
    """Universal return type for all TUI commands."""

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)


def cmd_load_idl(path: str | Path) -> CommandResult:
    try:
        idl = load_idl(path)
    except FileNotFoundError as exc:
        return CommandResult(success=False, message=str(exc))
    except IdlError as exc:
        return CommandResult(success=False, message=f"Invalid IDL: {exc}")
    return CommandResult(
        success=True,
        message=f"Loaded {idl.name} ({len(idl.instructions)} instructions)",
        data={"idl": idl, "path": Path(path).expanduser()},
    )


def cmd_describe_instruction(idl: IdlDocument, name: str) -> CommandResult:
    ix = idl.instruction(name)
    if ix is None:
        return CommandResult(success=False, message=f"Unknown instruction: {name}")
    fields = [
        {
            "name": arg.name,
            "type": type_display_name(arg.type, idl),
            "kind": field_kind(arg.type).value,
        }
        for arg in ix.args
    ]
    accounts = [
        {"name": acc.name, "signer": acc.signer, "writable": acc.writable, "address": acc.address}
        for acc in ix.accounts
    ]
    return CommandResult(
        success=True,
        message=f"{name}: {len(fields)} args, {len(accounts)} accounts",
        data={"args": fields, "accounts": accounts},
    )


def cmd_set_arg(
    store: InstructionStore,
    idl: IdlDocument,
    instruction: str,
    arg_name: str,
    raw_value: Any,
) -> CommandResult:
    """Validate and coerce one form value, then upsert it into the store."""
    ix = idl.instruction(instruction)
    arg = next((a for a in ix.args if a.name == arg_name), None) if ix else None
    if arg is None:
        return CommandResult(success=False, message=f"Unknown argument: {instruction}.{arg_name}")
    error = validate_field(arg_name, raw_value, arg.type)
    if error:
        return CommandResult(success=False, message=error, errors=[error])
    try:
        value = coerce_value(raw_value, arg.type)
    except ValueError as exc:
        return CommandResult(success=False, message=f"{arg_name}: {exc}", errors=[str(exc)])
    store.set_arg_value(instruction, arg_name, value)
    return CommandResult(success=True, message=f"{arg_name} = {value!r}", data={"value": value})


def cmd_set_account(store: InstructionStore, instruction: str, account_name: str, address: str) -> CommandResult:
    address = address.strip()
    error = validate_field(account_name, address)
    if error:
        return CommandResult(success=False, message=error, errors=[error])
    store.set_account(instruction, account_name, address)
    return CommandResult(success=True, message=f"{account_name} = {address}")


def load_keypair(path: Path) -> Keypair:
    raw = json.loads(path.read_text())
    return Keypair.from_bytes(bytes(raw))


def cmd_set_signer(store: InstructionStore, instruction: str, signer_name: str, keypair_path: str) -> CommandResult:
    """Load a keypair file into the store's signer map.

    The signer's account address is filled from the keypair when it is still
    empty. The keypair itself stays in memory only.
    """
    if not keypair_path.strip():
        return CommandResult(success=False, message=f"{signer_name}: keypair path is required")
    path = Path(keypair_path.strip()).expanduser()
    if not path.exists():
        return CommandResult(success=False, message=f"Keypair not found: {path}")
    try:
        keypair = load_keypair(path)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        return CommandResult(success=False, message=f"Invalid keypair file {path}: {exc}")
    store.set_signer_keypair(instruction, signer_name, keypair)
    pubkey = str(keypair.pubkey())
    if not store.get_instruction_state(instruction).accounts.get(signer_name):
        store.set_account(instruction, signer_name, pubkey)
    return CommandResult(
        success=True,
        message=f"{signer_name} signer set to {pubkey} (kept in memory only)",
        data={"pubkey": pubkey},
    )


def cmd_share(store: InstructionStore, base_url: str) -> CommandResult:
    try:
        url = encode_share_url(store.snapshot(), base_url)
    except EncodingError as exc:
        return CommandResult(success=False, message=str(exc), errors=[str(exc)])
    return CommandResult(
        success=True,
        message=f"Share link ready ({len(url)} chars)",
        data={"url": url},
    )


def cmd_open_shared(store: InstructionStore, url: str) -> CommandResult:
    """Decode a share link and seed the store with it.

    A failed decode leaves the store untouched.
    """
    try:
        snapshot = decode_share_url(url)
    except DecodingError as exc:
        return CommandResult(success=False, message=f"Failed to load shared state: {exc}")
    store.apply_snapshot(snapshot)
    logs = [f"{name}: {len(ix.arg_values)} args, {len(ix.accounts)} accounts" for name, ix in snapshot.instructions.items()]
    signers = []
    if snapshot.idl is not None:
        for ix in snapshot.idl.instructions:
            if ix.name in snapshot.instructions:
                signers.extend(f"{ix.name}.{acc.name}" for acc in ix.signer_accounts())
    return CommandResult(
        success=True,
        message="Successfully loaded shared state",
        data={"snapshot": snapshot, "signers_needed": signers},
        logs=logs,
    )


def cmd_record_history(history: KeyValueStore, store: InstructionStore, instruction: str) -> CommandResult:
    state = store.get_instruction_state(instruction)
    save_form_history(history, instruction, state.arg_values)
    save_account_history(history, instruction, state.accounts)
    return CommandResult(success=True, message=f"Saved {instruction} form to history")


def cmd_restore_history(history: KeyValueStore, store: InstructionStore, instruction: str) -> CommandResult:
    """Fill empty fields of an instruction from history; existing input wins."""
    current = store.get_instruction_state(instruction)
    restored = 0
    for name, value in load_form_history(history, instruction).items():
        if name not in current.arg_values:
            store.set_arg_value(instruction, name, value)
            restored += 1
    for name, address in load_account_history(history, instruction).items():
        if name not in current.accounts:
            store.set_account(instruction, name, address)
            restored += 1
    return CommandResult(success=True, message=f"Restored {restored} fields", data={"restored": restored})


def cmd_clear_history(history: KeyValueStore, store: InstructionStore | None = None) -> CommandResult:
    removed = clear_form_history(history)
    if store is not None:
        store.clear_all()
    return CommandResult(
        success=True,
        message=f"Cleared {removed} form entries from history",
        data={"removed": removed},
    )
