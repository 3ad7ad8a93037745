"""Inversion of dynamic mapping keys back to their `<type>` values."""

from __future__ import annotations

from typing import Any, Optional

from erc725y.errors import KeyDecodingError, KeyNameError
from erc725y.keys.encode import INT_PLACEHOLDER_RE
from erc725y.keys.key_name import DynamicKeyPart, classify_key_name, is_placeholder, placeholder_type
from erc725y.protocol.digests import to_checksum_address
from erc725y.protocol.hexutil import HEX_BODY_RE


# (start, end) offsets in hex chars of the key body, per segment position.
_MAPPING_SLOTS = ((24, 64),)
_GROUPING_SLOTS = ((12, 20), (24, 64))


def _normalize_key(encoded_key: str) -> str:
    if not isinstance(encoded_key, str):
        raise KeyDecodingError("Invalid encodedKey, must be a hexadecimal value")
    body = encoded_key[2:] if encoded_key.startswith("0x") else encoded_key
    if len(body) != 64:
        raise KeyDecodingError(
            "Invalid encodedKey length, key must be 32 bytes long hexadecimal value"
        )
    if HEX_BODY_RE.match(body) is None:
        raise KeyDecodingError("Invalid encodedKey, must be a hexadecimal value")
    return body.lower()


def decode_key_part(encoded_part: str, segment: str) -> Optional[DynamicKeyPart]:
    """Decode one hex slot of a key; literal segments yield None."""
    if not is_placeholder(segment):
        return None
    type_name = placeholder_type(segment)
    if type_name == "string":
        raise KeyNameError(
            f"Can not decode {segment} key part: string values are hashed into the key "
            "and cannot be recovered"
        )
    if type_name == "bool":
        return DynamicKeyPart(type_name, encoded_part[-1:] == "1")
    if type_name == "address":
        return DynamicKeyPart(type_name, to_checksum_address("0x" + encoded_part[-40:].rjust(40, "0")))

    match = INT_PLACEHOLDER_RE.match(type_name)
    if match is None:
        raise KeyNameError(f"Dynamic key: {segment} is not supported")
    kind, size = match.group(1), int(match.group(2))
    if kind == "bytes":
        return DynamicKeyPart(type_name, "0x" + encoded_part[: min(size * 2, len(encoded_part))])
    value: Any = int(encoded_part, 16)
    if kind == "int" and size // 4 <= len(encoded_part):
        value = int(encoded_part[-size // 4 :], 16)
        if value >> (size - 1):
            value -= 1 << size
    return DynamicKeyPart(type_name, value)


def decode_mapping_key(encoded_key: str, name_or_schema: Any) -> list[DynamicKeyPart]:
    """Recover the dynamic values of a Mapping or MappingWithGrouping key.

    `name_or_schema` is the template name, e.g. `MyKey:<address>`, or any
    object exposing it as `.name`. Literal segments are skipped, so the result
    holds one entry per placeholder in name order.
    """
    body = _normalize_key(encoded_key)
    name = name_or_schema if isinstance(name_or_schema, str) else name_or_schema.name
    layout = classify_key_name(name)
    segments = layout.segments
    if layout.shape == "Mapping":
        slots = _MAPPING_SLOTS
    elif layout.shape == "MappingWithGrouping":
        slots = _GROUPING_SLOTS
    elif layout.shape in ("Bytes20Mapping", "Bytes20MappingWithGrouping"):
        return []
    else:
        raise KeyNameError(f"Can not decode key {name} of type {layout.shape}: not a mapping key")
    parts = []
    for (start, end), segment in zip(slots, segments[1:]):
        part = decode_key_part(body[start:end], segment)
        if part is not None:
            parts.append(part)
    return parts
