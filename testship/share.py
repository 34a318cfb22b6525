"""Share links: encode a redacted state snapshot into a URL and back.

Payload layout (``state`` query parameter)::

    v1.<base64url(zlib(json))>

where the JSON object is ``{"v", "idl", "instructions", "activeInstruction",
"cluster", "timestamp"}`` and each instruction carries only ``argValues`` and
``accounts``. Signer key material is never written.

Links from the Testship web app (``/s#state=<lz-string>``) are read too; they
are never written.
"""

from __future__ import annotations

import base64
import binascii
import json
import time
import zlib
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

from lzstring import LZString

from .constants import MAX_SHARE_URL_LENGTH, SHARE_PARAM, SHARE_PREFIX, SHARE_VERSION
from .idl import IdlDocument, IdlError, parse_idl
from .state import InstructionSnapshot, StateSnapshot

# Upper bound on the inflated JSON, well above anything a URL can carry.
MAX_DECODED_BYTES = 1 << 20


class ShareError(ValueError):
    """Base class for share-link failures."""


class EncodingError(ShareError):
    """Raised when a snapshot cannot be turned into a share link."""


class DecodingError(ShareError):
    """Raised when a share link does not carry a usable payload."""


# ── Encode ──────────────────────────────────────────────────────


def build_share_payload(snapshot: StateSnapshot, timestamp: int | None = None) -> dict[str, Any]:
    if snapshot.idl is None:
        raise EncodingError("No IDL loaded; load an IDL before sharing")
    instructions = {
        name: {
            "argValues": dict(ix.arg_values),
            "accounts": dict(ix.accounts),
        }
        for name, ix in snapshot.instructions.items()
    }
    return {
        "v": SHARE_VERSION,
        "idl": snapshot.idl.to_dict(),
        "instructions": instructions,
        "activeInstruction": snapshot.active_instruction,
        "cluster": snapshot.cluster,
        "timestamp": int(time.time() * 1000) if timestamp is None else timestamp,
    }


def _pack(payload: dict[str, Any]) -> str:
    try:
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"State is not serializable: {exc}") from exc
    compressed = zlib.compress(text.encode("utf-8"), 9)
    return SHARE_PREFIX + base64.urlsafe_b64encode(compressed).rstrip(b"=").decode("ascii")


def _with_param(base_url: str, token: str) -> str:
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != SHARE_PARAM]
    query.append((SHARE_PARAM, token))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def encode_share_url(snapshot: StateSnapshot, base_url: str, timestamp: int | None = None) -> str:
    """Return ``base_url`` with the snapshot attached as the ``state`` parameter.

    Raises EncodingError when no IDL is loaded, when a value cannot be
    serialized, or when the resulting URL is longer than
    MAX_SHARE_URL_LENGTH. The URL is never truncated.
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise EncodingError("Base URL is required")
    token = _pack(build_share_payload(snapshot, timestamp))
    url = _with_param(base_url.strip(), token)
    if len(url) > MAX_SHARE_URL_LENGTH:
        raise EncodingError(
            f"Share link is {len(url)} characters; the limit is {MAX_SHARE_URL_LENGTH}"
        )
    return url


# ── Decode ──────────────────────────────────────────────────────


def _extract_token(url: str) -> str:
    parts = urlsplit(url)
    values = parse_qs(parts.query, keep_blank_values=True).get(SHARE_PARAM, [])
    if not values and parts.fragment:
        values = parse_qs(parts.fragment, keep_blank_values=True).get(SHARE_PARAM, [])
    if not values:
        raise DecodingError(f"Link has no '{SHARE_PARAM}' parameter")
    if len(values) > 1:
        raise DecodingError(f"Link has more than one '{SHARE_PARAM}' parameter")
    # parse_qs turns '+' into ' '; lz-string tokens use '+', so only trim newlines.
    token = values[0].strip("\r\n\t")
    if not token.strip():
        raise DecodingError(f"'{SHARE_PARAM}' parameter is empty")
    return token


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodingError(f"Share payload is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise DecodingError("Share payload is nested too deeply") from exc


def _unpack(token: str) -> Any:
    if not token.startswith(SHARE_PREFIX):
        raise DecodingError("Unrecognized share payload format")
    body = token[len(SHARE_PREFIX):]
    body += "=" * (-len(body) % 4)
    try:
        compressed = base64.b64decode(body, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodingError(f"Share payload is not valid base64: {exc}") from exc
    inflater = zlib.decompressobj()
    try:
        raw = inflater.decompress(compressed, MAX_DECODED_BYTES)
    except zlib.error as exc:
        raise DecodingError(f"Share payload is corrupted: {exc}") from exc
    if inflater.unconsumed_tail or not inflater.eof:
        raise DecodingError("Share payload is truncated or too large")
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodingError(f"Share payload is not valid UTF-8: {exc}") from exc
    return _load_json(text)


def _unpack_lz(token: str) -> Any:
    """Decode a web-app token: lz-string ``compressToEncodedURIComponent`` JSON."""
    try:
        text = LZString().decompressFromEncodedURIComponent(token.replace(" ", "+"))
    # lzstring has no error type of its own; malformed input surfaces as
    # KeyError, IndexError, UnboundLocalError and the like.
    except Exception as exc:
        raise DecodingError("Unrecognized share payload format") from exc
    if not text:
        raise DecodingError("Unrecognized share payload format")
    if len(text) > MAX_DECODED_BYTES:
        raise DecodingError("Share payload is truncated or too large")
    return _load_json(text)


def _string_map(value: Any, where: str) -> dict[str, str]:
    if not isinstance(value, dict):
        raise DecodingError(f"{where} must be an object")
    for key, item in value.items():
        if not isinstance(item, str):
            raise DecodingError(f"{where}.{key} must be a string")
    return value


def _parse_shared_idl(raw: Any) -> IdlDocument:
    if raw is None:
        raise DecodingError("Share payload has no IDL")
    try:
        return parse_idl(raw)
    except IdlError as exc:
        raise DecodingError(f"Shared IDL is invalid: {exc}") from exc
    except RecursionError as exc:
        raise DecodingError("Shared IDL is nested too deeply") from exc


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise DecodingError(f"{key} must be a string or null")
    return value


def parse_share_payload(payload: Any) -> StateSnapshot:
    """Validate a decoded ``v1`` payload object and build a snapshot from it."""
    if not isinstance(payload, dict):
        raise DecodingError("Share payload must be an object")
    version = payload.get("v")
    if type(version) is not int or version != SHARE_VERSION:
        raise DecodingError(f"Unsupported share payload version: {version!r}")

    idl = _parse_shared_idl(payload.get("idl"))

    raw_instructions = payload.get("instructions")
    if not isinstance(raw_instructions, dict):
        raise DecodingError("instructions must be an object")
    instructions: dict[str, InstructionSnapshot] = {}
    for name, entry in raw_instructions.items():
        if not isinstance(entry, dict):
            raise DecodingError(f"instructions.{name} must be an object")
        arg_values = entry.get("argValues", {})
        if not isinstance(arg_values, dict):
            raise DecodingError(f"instructions.{name}.argValues must be an object")
        accounts = _string_map(entry.get("accounts", {}), f"instructions.{name}.accounts")
        instructions[name] = InstructionSnapshot.of(arg_values, accounts)

    return StateSnapshot(
        instructions=MappingProxyType(instructions),
        active_instruction=_optional_str(payload, "activeInstruction"),
        idl=idl,
        cluster=_optional_str(payload, "cluster"),
    )


def _web_instruction_list(entries: list[Any]) -> dict[str, InstructionSnapshot]:
    # [{"name", "args": [{"name", "value"}], "accounts": [{"name", "address"}]}]
    out: dict[str, InstructionSnapshot] = {}
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise DecodingError(f"instructions[{i}] must be an object with a name")
        args = entry.get("args") or []
        accounts = entry.get("accounts") or []
        if not isinstance(args, list) or not isinstance(accounts, list):
            raise DecodingError(f"instructions[{i}] args and accounts must be lists")
        arg_values = {
            a["name"]: a["value"]
            for a in args
            if isinstance(a, dict) and isinstance(a.get("name"), str) and a.get("value") is not None
        }
        addresses = {
            a["name"]: a["address"]
            for a in accounts
            if isinstance(a, dict) and isinstance(a.get("name"), str) and isinstance(a.get("address"), str)
        }
        out[entry["name"]] = InstructionSnapshot.of(arg_values, addresses)
    return out


def _web_instruction_map(entries: dict[str, Any]) -> dict[str, InstructionSnapshot]:
    # {name: {"formData": {...}, "accountsAddresses": {name: address | null}}}
    out: dict[str, InstructionSnapshot] = {}
    for name, entry in entries.items():
        if not isinstance(entry, dict):
            raise DecodingError(f"instructions.{name} must be an object")
        form_data = entry.get("formData") or {}
        addresses = entry.get("accountsAddresses") or {}
        if not isinstance(form_data, dict) or not isinstance(addresses, dict):
            raise DecodingError(f"instructions.{name} formData and accountsAddresses must be objects")
        out[name] = InstructionSnapshot.of(
            form_data,
            {k: v for k, v in addresses.items() if isinstance(v, str)},
        )
    return out


def parse_web_payload(payload: Any) -> StateSnapshot:
    """Build a snapshot from a payload written by the Testship web app.

    Two layouts exist: the instruction list written by its share dialog and
    the per-instruction map of its full app state. ``cluster`` may be an
    object with a ``name``.
    """
    if not isinstance(payload, dict):
        raise DecodingError("Share payload must be an object")
    idl = _parse_shared_idl(payload.get("idl"))

    raw_instructions = payload.get("instructions", {})
    if isinstance(raw_instructions, list):
        instructions = _web_instruction_list(raw_instructions)
    elif isinstance(raw_instructions, dict):
        instructions = _web_instruction_map(raw_instructions)
    else:
        raise DecodingError("instructions must be a list or an object")

    cluster = payload.get("cluster")
    if isinstance(cluster, dict):
        cluster = cluster.get("name")
    if cluster is not None and not isinstance(cluster, str):
        raise DecodingError("cluster must be a string, an object with a name, or null")

    return StateSnapshot(
        instructions=MappingProxyType(instructions),
        active_instruction=_optional_str(payload, "activeInstruction"),
        idl=idl,
        cluster=cluster,
    )


def decode_share_url(url: str) -> StateSnapshot:
    """Rebuild a snapshot from a share link.

    Accepts ``v1.`` tokens written by ``encode_share_url`` and the lz-string
    ``#state=`` links of the web app. Raises DecodingError for a missing,
    malformed, or structurally invalid payload. Signer maps in the result are
    always empty.
    """
    if not isinstance(url, str) or not url.strip():
        raise DecodingError("Share link is empty")
    token = _extract_token(url.strip())
    try:
        if token.strip().startswith(SHARE_PREFIX):
            return parse_share_payload(_unpack(token.strip()))
        return parse_web_payload(_unpack_lz(token))
    except RecursionError as exc:
        raise DecodingError("Share payload is nested too deeply") from exc
