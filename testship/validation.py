"""Form-layer checks run before values reach the instruction store."""

from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey

from .constants import INTEGER_RANGES, PUBKEY_TYPES
from .idl import PrimitiveType
from .typemap import FieldKind, as_idl_type, field_kind


def is_valid_pubkey(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        Pubkey.from_string(value.strip())
    except ValueError:
        return False
    return True


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return None
    return None


def validate_field(name: str, value: Any, idl_type: Any = None) -> str | None:
    """Return an error message for ``value`` or None when it is acceptable.

    Without a type the value is treated as an account address.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return f"{name} is required"

    if idl_type is None:
        if not is_valid_pubkey(value):
            return f"{name} must be a valid address"
        return None

    parsed = as_idl_type(idl_type)
    if not isinstance(parsed, PrimitiveType):
        return None

    if parsed.name in INTEGER_RANGES:
        lo, hi = INTEGER_RANGES[parsed.name]
        number = _as_int(value)
        if number is None or number < lo or number > hi:
            return f"{name} must be a valid {parsed.name} ({lo} to {hi})"
    elif parsed.name == "bool":
        if not isinstance(value, bool) and value not in ("true", "false"):
            return f"{name} must be a valid boolean (true or false)"
    elif parsed.name in PUBKEY_TYPES:
        if not is_valid_pubkey(value):
            return f"{name} must be a valid address"
    return None


def coerce_value(raw: Any, idl_type: Any) -> Any:
    """Convert user input to the value stored for an argument.

    Raises ValueError when a NUMBER or BOOLEAN field holds something that
    cannot be converted.
    """
    kind = field_kind(idl_type)
    if kind is FieldKind.NUMBER:
        number = _as_int(raw)
        if number is None:
            raise ValueError(f"not an integer: {raw!r}")
        return number
    if kind is FieldKind.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in ("true", "1", "yes"):
            return True
        if text in ("false", "0", "no", ""):
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    return raw
