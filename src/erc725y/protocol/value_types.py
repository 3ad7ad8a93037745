"""Structural (ABI-like) encoding of LSP-2 valueTypes.

Scalars are packed: `uintN`/`intN` take exactly N/8 bytes, `bytesN` is
right-padded to N bytes and `address` is 20 bytes. `T[]` uses the standard
ABI encoding of a dynamic array. `T[CompactBytesArray]` prefixes every
element with its 2-byte big-endian length.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from erc725y.errors import ValueTypeError
from erc725y.protocol.digests import is_address, to_checksum_address
from erc725y.protocol.hexutil import (
    bytes_to_hex,
    hex_to_bytes,
    hex_to_int,
    hex_to_utf8,
    is_hex,
    is_hex_strict,
    strip_0x,
    utf8_to_hex,
)


COMPACT_BYTES_ARRAY = "[CompactBytesArray]"
MAX_COMPACT_ELEMENT_BYTES = 65_535
WORD = 32

INT_TYPE_RE = re.compile(r"^(u?)int(\d+)$")
BYTES_N_TYPE_RE = re.compile(r"^bytes(\d+)$")

SCALAR_TYPES = ("bool", "boolean", "string", "address", "bytes")


def int_type_size(type_name: str) -> Optional[tuple[bool, int]]:
    """Return (signed, bits) for a valid uintN/intN name, else None."""
    match = INT_TYPE_RE.match(type_name)
    if match is None:
        return None
    bits = int(match.group(2))
    if bits < 8 or bits > 256 or bits % 8:
        return None
    return match.group(1) != "u", bits


def bytes_type_size(type_name: str) -> Optional[int]:
    match = BYTES_N_TYPE_RE.match(type_name)
    if match is None:
        return None
    size = int(match.group(1))
    if size < 1 or size > 32:
        return None
    return size


def is_scalar_type(type_name: str) -> bool:
    return (
        type_name in SCALAR_TYPES
        or int_type_size(type_name) is not None
        or bytes_type_size(type_name) is not None
    )


def is_value_type(type_name: Any) -> bool:
    """True when the codec knows how to encode `type_name`."""
    if not isinstance(type_name, str):
        return False
    if type_name.endswith(COMPACT_BYTES_ARRAY):
        element = type_name[: -len(COMPACT_BYTES_ARRAY)]
        int_size = int_type_size(element)
        return (
            element in ("bytes", "string")
            or bytes_type_size(element) is not None
            or (int_size is not None and not int_size[0])
        )
    if type_name.endswith("[]"):
        return is_scalar_type(type_name[:-2])
    return is_scalar_type(type_name)


def static_width(type_name: str) -> Optional[int]:
    """Packed byte width of a fixed-size scalar, None for dynamic types."""
    if type_name in ("bool", "boolean"):
        return 1
    if type_name == "address":
        return 20
    int_size = int_type_size(type_name)
    if int_size is not None:
        return int_size[1] // 8
    return bytes_type_size(type_name)


# ---------------------------------------------------------------------------
# scalars


def _to_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueTypeError(f"{field} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text[:2] in ("0x", "0X"):
                return int(text[2:] or "0", 16)
            return int(text, 10)
        except ValueError as exc:
            raise ValueTypeError(f"{field} is not a number: {value}") from exc
    raise ValueTypeError(f"{field} must be int or numeric string")


def _encode_int(type_name: str, value: Any, signed: bool, bits: int) -> bytes:
    number = _to_int(value, field=type_name)
    low = -(1 << (bits - 1)) if signed else 0
    high = (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1
    if number < low or number > high:
        raise ValueTypeError(f"value {value} does not fit in {type_name}")
    return number.to_bytes(bits // 8, "big", signed=signed)


def _bytes_payload(type_name: str, value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, bool):
        raise ValueTypeError(f"{type_name} value must be hex, bytes or int")
    if isinstance(value, int):
        if value < 0:
            raise ValueTypeError(f"{type_name} value must not be negative")
        return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    if isinstance(value, str):
        if is_hex_strict(value):
            return hex_to_bytes(value)
        return value.encode("utf-8")
    raise ValueTypeError(f"{type_name} value must be hex, bytes or int")


def _encode_bytes_n(type_name: str, value: Any, size: int) -> bytes:
    payload = _bytes_payload(type_name, value)
    if len(payload) > size:
        raise ValueTypeError(
            f"Can't convert {value} to {type_name}. Too many bytes, "
            f"expected at most {size} bytes, received {len(payload)}."
        )
    return payload.ljust(size, b"\x00")


def _encode_address(value: Any) -> bytes:
    if not is_address(value):
        raise ValueTypeError(f'Address: "{value}" is an invalid address.')
    return hex_to_bytes(value)


def _encode_bool(value: Any) -> bytes:
    if not isinstance(value, bool):
        raise ValueTypeError(f"bool value must be bool, got {type(value).__name__}")
    return b"\x01" if value else b"\x00"


def _encode_scalar(type_name: str, value: Any) -> bytes:
    if type_name in ("bool", "boolean"):
        return _encode_bool(value)
    if type_name == "string":
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            raise ValueTypeError("string value must be str")
        return value.encode("utf-8")
    if type_name == "address":
        return _encode_address(value)
    if type_name == "bytes":
        return _bytes_payload(type_name, value)
    int_size = int_type_size(type_name)
    if int_size is not None:
        return _encode_int(type_name, value, *int_size)
    size = bytes_type_size(type_name)
    if size is not None:
        return _encode_bytes_n(type_name, value, size)
    raise ValueTypeError(f'Could not encode valueType: "{type_name}".')


def _decode_scalar(type_name: str, data: bytes) -> Any:
    if type_name in ("bool", "boolean"):
        return int.from_bytes(data, "big") != 0
    if type_name == "string":
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueTypeError("string value is not valid UTF-8") from exc
    if type_name == "address":
        if len(data) not in (20, WORD):
            raise ValueTypeError(f"address must be 20 bytes, got {len(data)}")
        return to_checksum_address(bytes_to_hex(data[-20:]))
    if type_name == "bytes":
        return bytes_to_hex(data)
    int_size = int_type_size(type_name)
    if int_size is not None:
        signed, bits = int_size
        if len(data) > bits // 8:
            raise ValueTypeError(
                f"Can't convert hex value {bytes_to_hex(data)} to {type_name}. "
                f"Too many bytes. {len(data)} > {bits // 8}"
            )
        if signed and len(data) < bits // 8:
            data = data.rjust(bits // 8, b"\x00")
        return int.from_bytes(data, "big", signed=signed)
    size = bytes_type_size(type_name)
    if size is not None:
        if len(data) > size:
            raise ValueTypeError(f"{type_name} value is longer than {size} bytes")
        return bytes_to_hex(data.ljust(size, b"\x00"))
    raise ValueTypeError(f'Could not decode valueType: "{type_name}".')


# ---------------------------------------------------------------------------
# ABI dynamic arrays


def _word(number: int) -> bytes:
    return number.to_bytes(WORD, "big")


def _pad_to_word(data: bytes) -> bytes:
    remainder = len(data) % WORD
    if remainder:
        return data + b"\x00" * (WORD - remainder)
    return data


def _abi_static_word(type_name: str, value: Any) -> bytes:
    packed = _encode_scalar(type_name, value)
    if bytes_type_size(type_name) is not None:
        return _pad_to_word(packed)
    int_size = int_type_size(type_name)
    if int_size is not None and int_size[0]:
        return _to_int(value, field=type_name).to_bytes(WORD, "big", signed=True)
    return packed.rjust(WORD, b"\x00")


def _abi_static_decode(type_name: str, word: bytes) -> Any:
    if bytes_type_size(type_name) is not None:
        return _decode_scalar(type_name, word[: bytes_type_size(type_name)])
    int_size = int_type_size(type_name)
    if int_size is not None:
        return int.from_bytes(word, "big", signed=int_size[0])
    return _decode_scalar(type_name, word)


def _encode_abi_array(element: str, values: Any) -> bytes:
    if not isinstance(values, (list, tuple)):
        raise ValueTypeError(f"{element}[] value must be a list")
    out = [_word(WORD), _word(len(values))]
    if element in ("string", "bytes"):
        heads: list[bytes] = []
        tails: list[bytes] = []
        offset = WORD * len(values)
        for value in values:
            payload = _encode_scalar(element, value)
            tail = _word(len(payload)) + _pad_to_word(payload)
            heads.append(_word(offset))
            tails.append(tail)
            offset += len(tail)
        out.extend(heads)
        out.extend(tails)
    else:
        out.extend(_abi_static_word(element, value) for value in values)
    return b"".join(out)


def _read_word(data: bytes, offset: int) -> bytes:
    if offset < 0 or offset + WORD > len(data):
        raise ValueTypeError("ABI data is too short")
    return data[offset : offset + WORD]


def _decode_abi_array(element: str, data: bytes) -> list[Any]:
    start = int.from_bytes(_read_word(data, 0), "big")
    length = int.from_bytes(_read_word(data, start), "big")
    body = start + WORD
    values: list[Any] = []
    for idx in range(length):
        head = _read_word(data, body + idx * WORD)
        if element in ("string", "bytes"):
            item_at = body + int.from_bytes(head, "big")
            size = int.from_bytes(_read_word(data, item_at), "big")
            payload = data[item_at + WORD : item_at + WORD + size]
            if len(payload) != size:
                raise ValueTypeError("ABI data is too short")
            values.append(_decode_scalar(element, payload))
        else:
            values.append(_abi_static_decode(element, head))
    return values


# ---------------------------------------------------------------------------
# CompactBytesArray


def encode_compact_bytes_array(values: Any) -> str:
    if not isinstance(values, (list, tuple)):
        raise ValueTypeError("CompactBytesArray value must be a list")
    parts = []
    for idx, value in enumerate(values):
        if not is_hex(value):
            raise ValueTypeError(
                f"Couldn't encode bytes[CompactBytesArray], value at index {idx} is not hex"
            )
        payload = hex_to_bytes(value)
        if len(payload) > MAX_COMPACT_ELEMENT_BYTES:
            raise ValueTypeError(
                f"Couldn't encode bytes[CompactBytesArray], value at index {idx} exceeds 65_535 bytes"
            )
        parts.append(len(payload).to_bytes(2, "big") + payload)
    return bytes_to_hex(b"".join(parts))


def decode_compact_bytes_array(value: str) -> list[str]:
    if not is_hex(value):
        raise ValueTypeError("Couldn't decode, value is not hex")
    data = hex_to_bytes(value)
    pointer = 0
    entries: list[str] = []
    while pointer < len(data):
        if pointer + 2 > len(data):
            raise ValueTypeError("Couldn't decode bytes[CompactBytesArray]")
        length = int.from_bytes(data[pointer : pointer + 2], "big")
        end = pointer + 2 + length
        if end > len(data):
            raise ValueTypeError("Couldn't decode bytes[CompactBytesArray]")
        entries.append(bytes_to_hex(data[pointer + 2 : end]))
        pointer = end
    return entries


def _encode_compact(element: str, values: Any) -> str:
    if not isinstance(values, (list, tuple)):
        raise ValueTypeError(f"{element}{COMPACT_BYTES_ARRAY} value must be a list")
    if element == "bytes":
        return encode_compact_bytes_array(values)
    if element == "string":
        return encode_compact_bytes_array([utf8_to_hex(value) for value in values])
    size = bytes_type_size(element)
    if size is not None:
        for idx, value in enumerate(values):
            if len(strip_0x(str(value))) > size * 2:
                raise ValueTypeError(
                    f"Hex {element} value at index {idx} does not fit in {size} bytes"
                )
        return encode_compact_bytes_array(values)
    int_size = int_type_size(element)
    if int_size is not None and not int_size[0]:
        nbytes = int_size[1] // 8
        encoded = []
        for idx, value in enumerate(values):
            number = _to_int(value, field=element)
            if number < 0 or number.bit_length() > nbytes * 8:
                raise ValueTypeError(
                    f"Hex {element} value at index {idx} does not fit in {nbytes} bytes"
                )
            encoded.append(bytes_to_hex(number.to_bytes(nbytes, "big")))
        return encode_compact_bytes_array(encoded)
    raise ValueTypeError(f'Could not encode valueType: "{element}{COMPACT_BYTES_ARRAY}".')


def _decode_compact(element: str, value: str) -> list[Any]:
    entries = decode_compact_bytes_array(value)
    if element == "bytes":
        return entries
    if element == "string":
        return [hex_to_utf8(entry) for entry in entries]
    size = bytes_type_size(element)
    if size is not None:
        for idx, entry in enumerate(entries):
            if len(strip_0x(entry)) > size * 2:
                raise ValueTypeError(
                    f"Hex {element} value at index {idx} does not fit in {size} bytes"
                )
        return entries
    int_size = int_type_size(element)
    if int_size is not None and not int_size[0]:
        nbytes = int_size[1] // 8
        numbers = []
        for idx, entry in enumerate(entries):
            if len(strip_0x(entry)) > nbytes * 2:
                raise ValueTypeError(
                    f"Hex {element} value at index {idx} does not fit in {nbytes} bytes"
                )
            numbers.append(hex_to_int(entry))
        return numbers
    raise ValueTypeError(f'Could not decode valueType: "{element}{COMPACT_BYTES_ARRAY}".')


# ---------------------------------------------------------------------------
# public API


def encode_value_type(type_name: str, value: Any) -> Optional[str]:
    """Encode `value` as `type_name`; `None` passes through unchanged."""
    if not is_value_type(type_name):
        raise ValueTypeError(f'Could not encode valueType: "{type_name}".')
    if value is None:
        return None
    if type_name.endswith(COMPACT_BYTES_ARRAY):
        return _encode_compact(type_name[: -len(COMPACT_BYTES_ARRAY)], value)
    if type_name.endswith("[]"):
        return bytes_to_hex(_encode_abi_array(type_name[:-2], value))
    return bytes_to_hex(_encode_scalar(type_name, value))


def decode_value_type(type_name: str, value: Optional[str]) -> Any:
    """Decode hex `value` as `type_name`; `0x` and `None` decode to `None`."""
    if not is_value_type(type_name):
        raise ValueTypeError(f'Could not decode valueType: "{type_name}".')
    if value is None or value == "0x":
        return None
    if not is_hex(value):
        raise ValueTypeError(f"Could not decode {type_name}, value is not hex: {value}")
    if type_name.endswith(COMPACT_BYTES_ARRAY):
        return _decode_compact(type_name[: -len(COMPACT_BYTES_ARRAY)], value)
    if type_name.endswith("[]"):
        return _decode_abi_array(type_name[:-2], hex_to_bytes(value))
    return _decode_scalar(type_name, hex_to_bytes(value))
