"""Map IDL argument types to form-field kinds."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .constants import BOOL_TYPE, INTEGER_TYPES
from .idl import (
    ArrayType,
    DefinedType,
    IdlDocument,
    IdlType,
    OptionType,
    PrimitiveType,
    UnknownType,
    VecType,
    parse_idl_type,
)


class FieldKind(str, Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    TEXT = "text"


def as_idl_type(value: Any) -> IdlType:
    if isinstance(value, (PrimitiveType, VecType, OptionType, ArrayType, DefinedType, UnknownType)):
        return value
    return parse_idl_type(value)


def field_kind(idl_type: Any) -> FieldKind:
    """Return the form-field kind for an argument type.

    Integers of every width map to NUMBER and ``bool`` to BOOLEAN. Everything
    else, composite types included, is edited as TEXT. Accepts either a parsed
    ``IdlType`` or the raw JSON descriptor, and never raises.
    """
    parsed = as_idl_type(idl_type)
    if isinstance(parsed, PrimitiveType):
        if parsed.name in INTEGER_TYPES:
            return FieldKind.NUMBER
        if parsed.name == BOOL_TYPE:
            return FieldKind.BOOLEAN
    return FieldKind.TEXT


def type_display_name(idl_type: Any, idl: IdlDocument | None = None) -> str:
    parsed = as_idl_type(idl_type)
    if isinstance(parsed, PrimitiveType):
        return parsed.name
    if isinstance(parsed, VecType):
        return f"Vec<{type_display_name(parsed.inner, idl)}>"
    if isinstance(parsed, OptionType):
        return f"Option<{type_display_name(parsed.inner, idl)}>"
    if isinstance(parsed, ArrayType):
        return f"[{type_display_name(parsed.inner, idl)}; {parsed.size}]"
    if isinstance(parsed, DefinedType):
        typedef = idl.find_type(parsed.name) if idl else None
        if typedef and typedef.kind in ("struct", "enum"):
            return f"{typedef.kind} {parsed.name}"
        return parsed.name
    return "unknown"


def is_nested_type(idl_type: Any, idl: IdlDocument | None = None) -> bool:
    """True when the type refers to a struct or enum, directly or through a container."""
    parsed = as_idl_type(idl_type)
    if isinstance(parsed, DefinedType):
        typedef = idl.find_type(parsed.name) if idl else None
        return bool(typedef and typedef.kind in ("struct", "enum"))
    if isinstance(parsed, (VecType, OptionType, ArrayType)):
        return is_nested_type(parsed.inner, idl)
    return False
