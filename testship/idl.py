"""IDL document model and loading.

The IDL is supplied from outside (a JSON file written by ``anchor build`` or a
document embedded in a share link). This module only turns the JSON shape into
immutable types; it never fetches anything.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


class IdlError(ValueError):
    """Raised when an IDL document does not have the expected shape."""


# ── Argument types ──────────────────────────────────────────────


@dataclass(frozen=True)
class PrimitiveType:
    name: str


@dataclass(frozen=True)
class VecType:
    inner: "IdlType"


@dataclass(frozen=True)
class OptionType:
    inner: "IdlType"


@dataclass(frozen=True)
class ArrayType:
    inner: "IdlType"
    size: int


@dataclass(frozen=True)
class DefinedType:
    name: str


@dataclass(frozen=True)
class UnknownType:
    """Fallback arm for type descriptors this module does not recognize."""

    raw: Any


IdlType = PrimitiveType | VecType | OptionType | ArrayType | DefinedType | UnknownType


def _defined_name(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        name = value.get("name")
        if isinstance(name, str):
            return name
    return None


def parse_idl_type(raw: Any) -> IdlType:
    """Convert a JSON type descriptor into an ``IdlType``. Never raises."""
    if isinstance(raw, str):
        return PrimitiveType(raw)
    if not isinstance(raw, Mapping):
        return UnknownType(raw)
    if "vec" in raw:
        return VecType(parse_idl_type(raw["vec"]))
    if "option" in raw:
        return OptionType(parse_idl_type(raw["option"]))
    if "coption" in raw:
        return OptionType(parse_idl_type(raw["coption"]))
    if "array" in raw:
        array_def = raw["array"]
        if isinstance(array_def, (list, tuple)) and len(array_def) == 2 and isinstance(array_def[1], int):
            return ArrayType(parse_idl_type(array_def[0]), array_def[1])
        return UnknownType(raw)
    if "defined" in raw:
        name = _defined_name(raw["defined"])
        if name:
            return DefinedType(name)
    return UnknownType(raw)


# ── Document ────────────────────────────────────────────────────


@dataclass(frozen=True)
class IdlArgument:
    name: str
    type: IdlType


@dataclass(frozen=True)
class IdlAccount:
    name: str
    writable: bool = False
    signer: bool = False
    optional: bool = False
    address: str | None = None


@dataclass(frozen=True)
class IdlInstruction:
    name: str
    args: tuple[IdlArgument, ...] = ()
    accounts: tuple[IdlAccount, ...] = ()
    docs: tuple[str, ...] = ()

    def signer_accounts(self) -> tuple[IdlAccount, ...]:
        return tuple(acc for acc in self.accounts if acc.signer)


@dataclass(frozen=True)
class IdlTypeDef:
    """A named struct or enum from the ``types`` section."""

    name: str
    kind: str
    fields: tuple[IdlArgument, ...] = ()
    variants: tuple[str, ...] = ()


@dataclass(frozen=True)
class IdlMetadata:
    name: str
    description: str = ""
    version: str | None = None


@dataclass(frozen=True)
class IdlDocument:
    metadata: IdlMetadata
    instructions: tuple[IdlInstruction, ...]
    address: str | None = None
    types: tuple[IdlTypeDef, ...] = ()
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.metadata.name

    def instruction_names(self) -> list[str]:
        return [ix.name for ix in self.instructions]

    def instruction(self, name: str) -> IdlInstruction | None:
        for ix in self.instructions:
            if ix.name == name:
                return ix
        return None

    def find_type(self, name: str) -> IdlTypeDef | None:
        for typedef in self.types:
            if typedef.name == name:
                return typedef
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON mapping the document was parsed from."""
        return copy.deepcopy(self.raw)


def _require_str(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise IdlError(f"{what} must be a non-empty string")
    return value


def _parse_args(raw_args: Any, where: str) -> tuple[IdlArgument, ...]:
    if raw_args is None:
        return ()
    if not isinstance(raw_args, list):
        raise IdlError(f"{where}: args must be a list")
    args: list[IdlArgument] = []
    for idx, raw in enumerate(raw_args):
        if not isinstance(raw, Mapping):
            raise IdlError(f"{where}: arg #{idx} must be an object")
        name = _require_str(raw.get("name"), f"{where}: arg #{idx} name")
        if "type" not in raw:
            raise IdlError(f"{where}: arg '{name}' has no type")
        args.append(IdlArgument(name=name, type=parse_idl_type(raw["type"])))
    return tuple(args)


def _flatten_accounts(raw_accounts: Any, where: str) -> list[IdlAccount]:
    if raw_accounts is None:
        return []
    if not isinstance(raw_accounts, list):
        raise IdlError(f"{where}: accounts must be a list")
    out: list[IdlAccount] = []
    for idx, raw in enumerate(raw_accounts):
        if not isinstance(raw, Mapping):
            raise IdlError(f"{where}: account #{idx} must be an object")
        name = _require_str(raw.get("name"), f"{where}: account #{idx} name")
        if isinstance(raw.get("accounts"), list):
            # Composite account group: children are listed in place.
            out.extend(_flatten_accounts(raw["accounts"], f"{where}.{name}"))
            continue
        address = raw.get("address")
        out.append(
            IdlAccount(
                name=name,
                writable=bool(raw.get("writable", raw.get("isMut", False))),
                signer=bool(raw.get("signer", raw.get("isSigner", False))),
                optional=bool(raw.get("optional", raw.get("isOptional", False))),
                address=address if isinstance(address, str) else None,
            )
        )
    return out


def _parse_typedefs(raw_types: Any) -> tuple[IdlTypeDef, ...]:
    if not isinstance(raw_types, list):
        return ()
    out: list[IdlTypeDef] = []
    for raw in raw_types:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
            continue
        body = raw.get("type") if isinstance(raw.get("type"), Mapping) else {}
        kind = str(body.get("kind", ""))
        fields: tuple[IdlArgument, ...] = ()
        raw_fields = body.get("fields")
        if kind == "struct" and isinstance(raw_fields, list):
            fields = tuple(
                IdlArgument(name=str(f.get("name", i)), type=parse_idl_type(f.get("type")))
                if isinstance(f, Mapping)
                else IdlArgument(name=str(i), type=parse_idl_type(f))
                for i, f in enumerate(raw_fields)
            )
        variants: tuple[str, ...] = ()
        if kind == "enum" and isinstance(body.get("variants"), list):
            variants = tuple(
                str(v.get("name")) for v in body["variants"] if isinstance(v, Mapping) and v.get("name")
            )
        out.append(IdlTypeDef(name=raw["name"], kind=kind, fields=fields, variants=variants))
    return tuple(out)


def parse_idl(data: Any) -> IdlDocument:
    """Validate and convert an IDL JSON mapping.

    Accepts both the current layout (``metadata.name``) and the legacy one
    with ``name``/``version`` at the top level. Instruction names must be
    unique; argument and account order is kept as declared.
    """
    if not isinstance(data, Mapping):
        raise IdlError("IDL must be a JSON object")

    raw_meta = data.get("metadata") if isinstance(data.get("metadata"), Mapping) else {}
    name = raw_meta.get("name", data.get("name"))
    metadata = IdlMetadata(
        name=name if isinstance(name, str) and name else "unnamed",
        description=str(raw_meta.get("description", data.get("description", "")) or ""),
        version=raw_meta.get("version", data.get("version")),
    )

    raw_instructions = data.get("instructions")
    if not isinstance(raw_instructions, list):
        raise IdlError("IDL instructions must be a list")

    instructions: list[IdlInstruction] = []
    seen: set[str] = set()
    for idx, raw in enumerate(raw_instructions):
        if not isinstance(raw, Mapping):
            raise IdlError(f"instruction #{idx} must be an object")
        ix_name = _require_str(raw.get("name"), f"instruction #{idx} name")
        if ix_name in seen:
            raise IdlError(f"duplicate instruction name: {ix_name}")
        seen.add(ix_name)
        docs = raw.get("docs") if isinstance(raw.get("docs"), list) else []
        instructions.append(
            IdlInstruction(
                name=ix_name,
                args=_parse_args(raw.get("args"), ix_name),
                accounts=tuple(_flatten_accounts(raw.get("accounts"), ix_name)),
                docs=tuple(str(d) for d in docs),
            )
        )

    address = data.get("address")
    return IdlDocument(
        metadata=metadata,
        instructions=tuple(instructions),
        address=address if isinstance(address, str) else None,
        types=_parse_typedefs(data.get("types")),
        raw=copy.deepcopy(dict(data)),
    )


def load_idl(path: str | Path) -> IdlDocument:
    idl_path = Path(path).expanduser()
    if not idl_path.exists():
        raise FileNotFoundError(f"IDL not found: {idl_path}")
    try:
        data = json.loads(idl_path.read_text())
    except json.JSONDecodeError as exc:
        raise IdlError(f"IDL is not valid JSON: {exc}") from exc
    return parse_idl(data)
