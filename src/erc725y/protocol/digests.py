from __future__ import annotations

import re
from typing import Any

from eth_hash.auto import keccak

from erc725y.protocol.hexutil import bytes_to_hex, hex_to_bytes, is_hex_strict, strip_0x


ADDRESS_RE = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")


def keccak256(data: bytes) -> bytes:
    return keccak(data)


def keccak256_hex(data: bytes) -> str:
    return bytes_to_hex(keccak(data))


def keccak256_text(text: str) -> str:
    """Hex keccak256 of the UTF-8 bytes of `text`."""
    return keccak256_hex(text.encode("utf-8"))


def keccak256_value(value: Any) -> str:
    """Hash bytes as-is, `0x` hex strings as bytes and other strings as UTF-8."""
    if isinstance(value, (bytes, bytearray)):
        return keccak256_hex(bytes(value))
    if is_hex_strict(value):
        return keccak256_hex(hex_to_bytes(value))
    if isinstance(value, str):
        return keccak256_text(value)
    raise ValueError("keccak256 input must be bytes or str")


def to_checksum_address(address: str) -> str:
    """EIP-55 mixed-case checksum encoding of a 20-byte address."""
    if not isinstance(address, str) or ADDRESS_RE.match(address) is None:
        raise ValueError(f'Address: "{address}" is an invalid address.')
    lowered = strip_0x(address).lower()
    digest = keccak(lowered.encode("ascii")).hex()
    chars = [
        char.upper() if int(digest[idx], 16) >= 8 else char
        for idx, char in enumerate(lowered)
    ]
    return "0x" + "".join(chars)


def is_address(value: Any) -> bool:
    """Same acceptance rule as web3: all-lower or all-upper, else a valid checksum."""
    if not isinstance(value, str) or ADDRESS_RE.match(value) is None:
        return False
    body = strip_0x(value)
    if body == body.lower() or body == body.upper():
        return True
    return to_checksum_address(value) == "0x" + body
