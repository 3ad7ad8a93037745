from __future__ import annotations

import re
from typing import Any


HEX_STRICT_RE = re.compile(r"^0x[0-9a-fA-F]*$")
HEX_BODY_RE = re.compile(r"^[0-9a-fA-F]*$")


def is_hex_strict(value: Any) -> bool:
    """True for a `0x`-prefixed string of hex digits (any length, `0x` included)."""
    return isinstance(value, str) and HEX_STRICT_RE.match(value) is not None


def is_hex(value: Any) -> bool:
    """True for hex digits with or without the `0x` prefix."""
    if not isinstance(value, str):
        return False
    return HEX_BODY_RE.match(strip_0x(value)) is not None


def strip_0x(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def add_0x(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return "0x" + value[2:]
    return "0x" + value


def hex_to_bytes(value: Any, *, field: str = "value") -> bytes:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a hex string")
    body = strip_0x(value)
    if HEX_BODY_RE.match(body) is None:
        raise ValueError(f"{field} is not hex: {value}")
    if len(body) % 2:
        body = "0" + body
    return bytes.fromhex(body)


def bytes_to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def pad_left(body: str, width: int) -> str:
    return body.rjust(width, "0")


def pad_right(body: str, width: int) -> str:
    return body.ljust(width, "0")


def int_to_hex_body(number: int, nbytes: int, *, signed: bool = False) -> str:
    return number.to_bytes(nbytes, "big", signed=signed).hex()


def hex_to_int(value: str, *, signed: bool = False) -> int:
    body = strip_0x(value)
    if not body:
        return 0
    number = int(body, 16)
    bits = len(body) * 4
    if signed and number >> (bits - 1):
        number -= 1 << bits
    return number


def utf8_to_hex(text: str) -> str:
    if not isinstance(text, str):
        raise ValueError("string value must be str")
    return "0x" + text.encode("utf-8").hex()


def hex_to_utf8(value: str) -> str:
    try:
        return hex_to_bytes(value).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError("value is not valid UTF-8") from exc
