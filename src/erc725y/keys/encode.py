"""Derivation of 32-byte ERC725Y keys from LSP-2 key names."""

from __future__ import annotations

import re
from typing import Any

from erc725y.errors import KeyNameError
from erc725y.keys.key_name import (
    DynamicKeyPartsInput,
    KeyNameLayout,
    classify_key_name,
    is_placeholder,
    normalize_dynamic_key_parts,
)
from erc725y.protocol.digests import is_address, keccak256
from erc725y.protocol.hexutil import HEX_BODY_RE, strip_0x


INT_PLACEHOLDER_RE = re.compile(r"^(u?int|bytes)(\d+)$")
ARRAY_INDEX_BYTES = 16


def _word_hash(text: str, nbytes: int) -> str:
    return keccak256(text.encode("utf-8"))[:nbytes].hex()


def _dynamic_type(type_name: str) -> str:
    if type_name.startswith("<") and type_name.endswith(">"):
        return type_name[1:-1]
    return type_name


def _parse_int(value: Any, type_name: str) -> int:
    if isinstance(value, bool):
        raise KeyNameError(f"Wrong value: {value} for dynamic key with type: <{type_name}>.")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        try:
            number = int(text[2:], 16) if text[:2] in ("0x", "0X") else int(text, 10)
        except ValueError as exc:
            raise KeyNameError(
                f"Wrong value: {value} for dynamic key with type: <{type_name}>. Value is not a number."
            ) from exc
    if number < 0:
        raise KeyNameError(f"Wrong value: {value} for dynamic key with type: <{type_name}>. Value is negative.")
    return number


def encode_dynamic_key_part(type_name: str, value: Any, nbytes: int) -> str:
    """Encode one dynamic value into `nbytes` bytes, returned as hex without `0x`.

    `string` values are hashed, addresses and numbers are left-padded and
    `bytesN` values are right-padded. Longer values are cut to `nbytes`.
    """
    base = _dynamic_type(type_name)
    if base == "string":
        if not isinstance(value, str):
            raise KeyNameError(f"Wrong value: {value} for dynamic key with type: <string>.")
        return _word_hash(value, nbytes)
    if base == "bool":
        if value is True or value == "true":
            return "01".rjust(nbytes * 2, "0")
        if value is False or value == "false":
            return "00".rjust(nbytes * 2, "0")
        raise KeyNameError(
            f'Wrong value: {value} for dynamic key with type: <bool>. Expected "true" or "false".'
        )
    if base == "address":
        if not value or not isinstance(value, str):
            raise KeyNameError(f"Wrong value: {value} for dynamic key with type: <address>. Value is empty.")
        address = value if value.startswith("0x") else "0x" + value
        if not is_address(address):
            raise KeyNameError(
                f"Wrong value: {address} for dynamic key with type: <address>. Value is not an address."
            )
        return strip_0x(address)[: nbytes * 2].rjust(nbytes * 2, "0").lower()

    match = INT_PLACEHOLDER_RE.match(base)
    if match is None:
        raise KeyNameError(f"Dynamic key: {type_name} is not supported")
    kind, size = match.group(1), int(match.group(2))

    if kind in ("int", "uint"):
        if size > 256 or size % 8 or size == 0:
            raise KeyNameError(
                f"Wrong dynamic key type: {type_name}. 0 < M <= 256, M % 8 == 0. Got: {size}."
            )
        digits = format(_parse_int(value, base), "x")
        if len(digits) > size // 4:
            raise KeyNameError(f"Value: {value} is too big for {base}.")
        return digits[-nbytes * 2 :].rjust(nbytes * 2, "0")

    if not isinstance(value, str):
        raise KeyNameError(f"Wrong value: {value} for dynamic key with type: {type_name}. Value is not in hex.")
    body = strip_0x(value)
    if HEX_BODY_RE.match(body) is None:
        raise KeyNameError(f"Wrong value: {value} for dynamic key with type: {type_name}. Value is not in hex.")
    if len(body) > size * 2:
        raise KeyNameError(f"Wrong value: {value} for dynamic key with type: {type_name}. Value is too big.")
    return body[: nbytes * 2].ljust(nbytes * 2, "0").lower()


def _literal_or_dynamic(segment: str, parts: list[Any], nbytes: int) -> str:
    if is_placeholder(segment):
        return encode_dynamic_key_part(segment, parts.pop(0), nbytes)
    if segment.startswith("0x"):
        body = segment[2 : 2 + nbytes * 2]
        if HEX_BODY_RE.match(body) is None:
            raise KeyNameError(f"Key name segment {segment} is not hex")
        return body.ljust(nbytes * 2, "0").lower()
    return _word_hash(segment, nbytes)


def _encode_mapping(layout: KeyNameLayout, parts: list[Any]) -> str:
    first, second = layout.segments
    if is_placeholder(second):
        tail = encode_dynamic_key_part(second, parts.pop(0), 20)
    elif second.startswith("0x") and is_address(second):
        tail = strip_0x(second).lower()
    else:
        tail = _word_hash(second, 20)
    return "0x" + _word_hash(first, 10) + "0000" + tail


def _encode_mapping_with_grouping(layout: KeyNameLayout, parts: list[Any]) -> str:
    first, second, third = layout.segments
    middle = _literal_or_dynamic(second, parts, 4)
    tail = _literal_or_dynamic(third, parts, 20)
    return "0x" + _word_hash(first, 6) + middle + "0000" + tail


def _encode_bytes20_mapping(layout: KeyNameLayout) -> str:
    first, raw = layout.segments
    return "0x" + _word_hash(first, 8) + "00000000" + raw


def _encode_bytes20_mapping_with_grouping(layout: KeyNameLayout) -> str:
    first, second, raw = layout.segments
    return "0x" + _word_hash(first, 4) + "00000000" + _word_hash(second, 2) + "0000" + raw


def encode_key_name(name: str, dynamic_key_parts: DynamicKeyPartsInput = None) -> str:
    """Derive the 32-byte key of `name` as lower-case 0x-hex.

    Dynamic names need one value per `<type>` placeholder, e.g.
    `encode_key_name("LSP5ReceivedAssetsMap:<address>", "0xcafe...")`.
    An Array name with a single int part yields the key of that element.
    The legacy Bytes20 shapes keep their raw 20-byte suffix verbatim.
    """
    layout = classify_key_name(name)
    parts = normalize_dynamic_key_parts(dynamic_key_parts)
    if layout.shape == "Array" and len(parts) == 1 and isinstance(parts[0], int) and not isinstance(parts[0], bool):
        return encode_array_key("0x" + keccak256(name.encode("utf-8")).hex(), parts[0])
    expected = len(layout.placeholders)
    if expected != len(parts):
        if expected == 0:
            raise KeyNameError(f"Key name {name} is not dynamic, got dynamicKeyParts: {parts}")
        raise KeyNameError(
            f"Can not encode dynamic key {name} of type: {layout.shape}. Wrong number of arguments. "
            f"Expects exactly {expected} variable(s), got: {len(parts)} ({parts})"
        )

    if layout.shape in ("Singleton", "Array"):
        return "0x" + keccak256(name.encode("utf-8")).hex()
    if layout.shape == "Mapping":
        return _encode_mapping(layout, parts)
    if layout.shape == "MappingWithGrouping":
        return _encode_mapping_with_grouping(layout, parts)
    if layout.shape == "Bytes20Mapping":
        return _encode_bytes20_mapping(layout)
    if layout.shape == "Bytes20MappingWithGrouping":
        return _encode_bytes20_mapping_with_grouping(layout)
    raise KeyNameError(f"Unsupported key shape: {layout.shape}")


def encode_array_key(base_key: str, index: int) -> str:
    """Element key: first 16 bytes of the array key followed by a uint128 index."""
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise KeyNameError(f"array index must be a non-negative int, got {index}")
    if index >= 1 << (ARRAY_INDEX_BYTES * 8):
        raise KeyNameError(f"array index {index} does not fit in uint128")
    body = strip_0x(base_key)
    if len(body) != 64:
        raise KeyNameError(f"array key must be 32 bytes, got {base_key}")
    return "0x" + body[:32].lower() + index.to_bytes(ARRAY_INDEX_BYTES, "big").hex()

