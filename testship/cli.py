"""CLI entrypoint for Testship."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from .config import get_defaults, history_path, load_config, set_defaults
from .history import TomlFileStore, clear_form_history
from .idl import load_idl
from .share import decode_share_url, encode_share_url
from .state import InstructionStore, build_execute_request
from .typemap import field_kind, type_display_name


def _cmd_fields(args: argparse.Namespace) -> int:
    idl = load_idl(args.idl)
    instructions = idl.instructions
    if args.instruction:
        ix = idl.instruction(args.instruction)
        if ix is None:
            raise ValueError(f"Unknown instruction: {args.instruction}")
        instructions = (ix,)

    if args.json:
        out = {
            ix.name: [
                {"name": a.name, "type": type_display_name(a.type, idl), "kind": field_kind(a.type).value}
                for a in ix.args
            ]
            for ix in instructions
        }
        print(json.dumps(out, indent=2))
        return 0

    print(f"{idl.name}: {len(idl.instructions)} instructions")
    for ix in instructions:
        print(f"[{ix.name}]")
        if not ix.args:
            print("  (no arguments)")
        for arg in ix.args:
            print(f"  {arg.name}: {type_display_name(arg.type, idl)} -> {field_kind(arg.type).value}")
        for acc in ix.accounts:
            marker = " (signer)" if acc.signer else ""
            print(f"  account {acc.name}{marker}")
    return 0


def _load_state_file(path: str | Path) -> dict:
    state_path = Path(path).expanduser()
    if not state_path.exists():
        raise FileNotFoundError(f"State file not found: {state_path}")
    try:
        data = json.loads(state_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"State file is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("State file must contain a JSON object")
    return data


def _store_from_state(data: dict, store: InstructionStore) -> None:
    instructions = data.get("instructions", {})
    if not isinstance(instructions, dict):
        raise ValueError("instructions must be an object")
    for name, entry in instructions.items():
        if not isinstance(entry, dict):
            raise ValueError(f"instructions.{name} must be an object")
        for arg_name, value in (entry.get("argValues") or {}).items():
            store.set_arg_value(name, arg_name, value)
        for account_name, address in (entry.get("accounts") or {}).items():
            store.set_account(name, account_name, str(address))
        for signer_name, key in (entry.get("signerKeypairs") or {}).items():
            store.set_signer_keypair(name, signer_name, key)
    active = data.get("activeInstruction")
    if active:
        store.set_active_instruction(str(active))


def _cmd_share(args: argparse.Namespace) -> int:
    defaults = get_defaults()
    idl = load_idl(args.idl)
    store = InstructionStore(idl=idl, cluster=args.cluster or defaults.get("cluster"))
    _store_from_state(_load_state_file(args.state), store)
    if args.active:
        store.set_active_instruction(args.active)
    for name in store.instruction_names():
        if idl.instruction(name) is None:
            print(f"Warning: {name} is not an instruction of {idl.name}")
    print(encode_share_url(store.snapshot(), args.base_url or defaults["base_url"]))
    return 0


def _cmd_request(args: argparse.Namespace) -> int:
    idl = load_idl(args.idl)
    store = InstructionStore(idl=idl)
    _store_from_state(_load_state_file(args.state), store)
    name = args.instruction or store.active_instruction
    if not name:
        raise ValueError("No instruction given and the state file has no activeInstruction")
    ix = idl.instruction(name)
    if ix is None:
        raise ValueError(f"Unknown instruction: {name}")
    for acc in ix.accounts:
        if acc.address and not store.get_instruction_state(name).accounts.get(acc.name):
            store.set_account(name, acc.name, acc.address)
    program_id = args.program_id or idl.address
    if not program_id:
        raise ValueError("IDL has no address; pass --program-id")
    request = build_execute_request(program_id, name, store.get_instruction_state(name))
    print(json.dumps(request, indent=2))
    return 0


def _cmd_open(args: argparse.Namespace) -> int:
    snapshot = decode_share_url(args.url)
    if args.idl_out:
        out = Path(args.idl_out).expanduser()
        out.write_text(json.dumps(snapshot.idl.to_dict(), indent=2))
        print(f"IDL written to {out}")

    if args.json:
        out_data = snapshot.to_dict()
        out_data["program"] = snapshot.idl.name if snapshot.idl else None
        out_data["cluster"] = snapshot.cluster
        print(json.dumps(out_data, indent=2))
        return 0

    print(f"Program: {snapshot.idl.name if snapshot.idl else '(none)'}")
    if snapshot.cluster:
        print(f"Cluster: {snapshot.cluster}")
    print(f"Active instruction: {snapshot.active_instruction or '(none)'}")
    for name, ix in snapshot.instructions.items():
        print(f"[{name}]")
        for arg_name, value in ix.arg_values.items():
            print(f"  {arg_name} = {value!r}")
        for account_name, address in ix.accounts.items():
            print(f"  account {account_name} = {address}")
        ix_def = snapshot.idl.instruction(name) if snapshot.idl else None
        if ix_def is not None:
            for acc in ix_def.signer_accounts():
                print(f"  signer {acc.name}: keypair required")
    return 0


def _history_store(args: argparse.Namespace) -> TomlFileStore:
    return TomlFileStore(args.path or history_path())


def _cmd_history_clear(args: argparse.Namespace) -> int:
    removed = clear_form_history(_history_store(args))
    print(f"Cleared {removed} form entries from history")
    return 0


def _cmd_config_show(args: argparse.Namespace) -> int:
    cfg = load_config()
    for key, value in get_defaults().items():
        print(f"{key} = {value}")
    if args.raw:
        print(json.dumps(cfg, indent=2))
    return 0


def _cmd_config_set(args: argparse.Namespace) -> int:
    set_defaults(
        base_url=args.base_url,
        cluster=args.cluster,
        rpc_url=args.rpc_url,
        history_path=args.history_path,
    )
    print("Defaults updated")
    return 0


def _cmd_tui(args: argparse.Namespace) -> int:
    from .tui import launch_tui

    idl_path = Path(args.idl).expanduser() if args.idl else None
    return launch_tui(idl_path=idl_path, share_url=args.url)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog=os.path.basename(sys.argv[0]) or "testship")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_fields = sub.add_parser("fields", help="List instructions and their form fields")
    p_fields.add_argument("idl", help="Path to the IDL JSON file")
    p_fields.add_argument("--instruction", help="Only show this instruction")
    p_fields.add_argument("--json", action="store_true", help="Print JSON")
    p_fields.set_defaults(func=_cmd_fields)

    p_share = sub.add_parser("share", help="Build a share link from a state file")
    p_share.add_argument("idl", help="Path to the IDL JSON file")
    p_share.add_argument("--state", required=True, help="JSON file with instruction state")
    p_share.add_argument("--base-url", help="Base URL for the link (default from config)")
    p_share.add_argument("--active", help="Active instruction in the link")
    p_share.add_argument("--cluster", help="Cluster name to embed")
    p_share.set_defaults(func=_cmd_share)

    p_request = sub.add_parser("request", help="Print the execute request body for one instruction")
    p_request.add_argument("idl", help="Path to the IDL JSON file")
    p_request.add_argument("--state", required=True, help="JSON file with instruction state")
    p_request.add_argument("--instruction", help="Instruction (default: activeInstruction in the state file)")
    p_request.add_argument("--program-id", help="Program address (default: the IDL address)")
    p_request.set_defaults(func=_cmd_request)

    p_open = sub.add_parser("open", help="Decode a share link")
    p_open.add_argument("url", help="Share link")
    p_open.add_argument("--json", action="store_true", help="Print JSON")
    p_open.add_argument("--idl-out", help="Write the embedded IDL to this file")
    p_open.set_defaults(func=_cmd_open)

    p_history = sub.add_parser("history", help="Manage saved form history")
    p_history_sub = p_history.add_subparsers(dest="history_cmd", required=True)
    p_history_clear = p_history_sub.add_parser("clear", help="Remove form and account history")
    p_history_clear.add_argument("--path", help="History file (default from config)")
    p_history_clear.set_defaults(func=_cmd_history_clear)

    p_config = sub.add_parser("config", help="Show or update defaults")
    p_config_sub = p_config.add_subparsers(dest="config_cmd", required=True)
    p_config_show = p_config_sub.add_parser("show", help="Print current defaults")
    p_config_show.add_argument("--raw", action="store_true", help="Also print the raw config file")
    p_config_show.set_defaults(func=_cmd_config_show)
    p_config_set = p_config_sub.add_parser("set", help="Update defaults")
    p_config_set.add_argument("--base-url")
    p_config_set.add_argument("--cluster")
    p_config_set.add_argument("--rpc-url")
    p_config_set.add_argument("--history-path")
    p_config_set.set_defaults(func=_cmd_config_set)

    p_tui = sub.add_parser("tui", help="Launch the interactive TUI")
    p_tui.add_argument("idl", nargs="?", help="Path to the IDL JSON file")
    p_tui.add_argument("--url", help="Share link to open on start")
    p_tui.set_defaults(func=_cmd_tui)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except FileNotFoundError as exc:
        print(str(exc))
        return 1
    except ValueError as exc:
        print(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
