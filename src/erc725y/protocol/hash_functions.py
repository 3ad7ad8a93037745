"""Registry of the hash functions used by verifiable URL content."""

from __future__ import annotations

from dataclasses import dataclass
import json
import math
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from erc725y.errors import ValueContentError
from erc725y.protocol.digests import keccak256_text, keccak256_value


KECCAK256_UTF8 = "keccak256(utf8)"
KECCAK256_BYTES = "keccak256(bytes)"
NO_VERIFICATION = "0x00000000"
ZERO_HASH = "0x" + "00" * 32


def _js_number(value: float) -> Any:
    if math.isnan(value) or math.isinf(value):
        return None
    if value.is_integer() and abs(value) < 1e21:
        return int(value)
    return value


def _js_compatible(data: Any) -> Any:
    if isinstance(data, float):
        return _js_number(data)
    if isinstance(data, dict):
        return {key: _js_compatible(item) for key, item in data.items()}
    if isinstance(data, (list, tuple)):
        return [_js_compatible(item) for item in data]
    return data


def canonical_json(data: Any) -> str:
    """Serialize `data` the way JSON.stringify does, with no whitespace.

    Integral floats lose their fraction and non-finite numbers become null.
    """
    return json.dumps(
        _js_compatible(data), separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )


def _keccak256_utf8(data: Any) -> str:
    if isinstance(data, (bytes, bytearray)):
        return keccak256_value(bytes(data))
    if isinstance(data, str):
        return keccak256_text(data)
    return keccak256_text(canonical_json(data))


@dataclass(frozen=True)
class HashFunction:
    """A supported verification method.

    Attributes:
        name: Human readable name, e.g. "keccak256(utf8)".
        sig: First 4 bytes of keccak256(name) as 0x-hex.
        method: Callable returning the 0x-hex digest of its input.
    """

    name: str
    sig: str
    method: Callable[[Any], str]

    def __call__(self, data: Any) -> str:
        return self.method(data)


_KECCAK256_UTF8 = HashFunction(KECCAK256_UTF8, "0x6f357c6a", _keccak256_utf8)
_KECCAK256_BYTES = HashFunction(KECCAK256_BYTES, "0x8019f9b1", keccak256_value)

HASH_FUNCTIONS: Mapping[str, HashFunction] = MappingProxyType(
    {
        _KECCAK256_UTF8.name: _KECCAK256_UTF8,
        _KECCAK256_UTF8.sig: _KECCAK256_UTF8,
        _KECCAK256_BYTES.name: _KECCAK256_BYTES,
        _KECCAK256_BYTES.sig: _KECCAK256_BYTES,
    }
)
SUPPORTED_HASH_FUNCTIONS = (KECCAK256_UTF8, KECCAK256_BYTES)


def get_hash_function(name_or_sig: str) -> HashFunction:
    key = name_or_sig.lower() if isinstance(name_or_sig, str) else name_or_sig
    hash_function = HASH_FUNCTIONS.get(key)
    if hash_function is None:
        raise ValueContentError(
            f"Chosen verification method '{name_or_sig}' is not supported. "
            f"Supported verification methods: {', '.join(SUPPORTED_HASH_FUNCTIONS)}"
        )
    return hash_function


def hash_data(data: Any, name_or_sig: str) -> str:
    if name_or_sig == NO_VERIFICATION:
        return ZERO_HASH
    return get_hash_function(name_or_sig)(data)


def verify(content: Any, expected_hash: str, method: Optional[str]) -> bool:
    """Check `content` against `expected_hash`; no method means unverifiable and passes."""
    if not method or method == NO_VERIFICATION:
        return True
    return hash_data(content, method).lower() == str(expected_hash).lower()


def is_data_authentic(
    data: Any,
    verification: Optional[Mapping[str, Any]],
    capture: Optional[list[str]] = None,
) -> bool:
    """Verify `data` against a `{method, data}` verification record.

    Mismatching digests are appended to `capture` when given.
    """
    method = (verification or {}).get("method")
    if not method or method == NO_VERIFICATION:
        return True
    digest = hash_data(data, method)
    if digest.lower() != str(verification.get("data", "")).lower():
        if capture is not None:
            capture.append(digest)
        return False
    return True
