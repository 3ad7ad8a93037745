"""Semantic encoding selected by an LSP-2 valueContent tag."""

from __future__ import annotations

from typing import Any, Optional, Union
import warnings

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from erc725y.errors import ValueContentError
from erc725y.protocol.digests import is_address, to_checksum_address
from erc725y.protocol.hash_functions import (
    KECCAK256_UTF8,
    NO_VERIFICATION,
    get_hash_function,
    hash_data,
)
from erc725y.protocol.hexutil import (
    hex_to_int,
    hex_to_utf8,
    is_hex,
    is_hex_strict,
    strip_0x,
    utf8_to_hex,
)
from erc725y.protocol.value_types import decode_value_type, encode_value_type
from erc725y.schema.types import (
    URL_CONTENT_TAGS,
    LiteralContent,
    NamedContent,
    TupleContent,
    UnresolvedContent,
    ValueContent,
    parse_value_content,
)


VERIFIABLE_URI_PREFIX = "0000"

NATURAL_VALUE_TYPES = {
    "Number": "uint256",
    "String": "string",
    "Markdown": "string",
    "URL": "string",
    "Address": "address",
    "Keccak256": "bytes32",
    "Boolean": "bool",
    "BitArray": "bytes",
    "Bytes": "bytes",
}


class _LiteralMismatch:
    """Falsy marker returned when a value does not equal a literal valueContent."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "LITERAL_MISMATCH"


LITERAL_MISMATCH = _LiteralMismatch()


class Verification(BaseModel):
    method: str
    data: str


class URLDataToEncode(BaseModel):
    """Input of the JSONURL, AssetURL and VerifiableURI encoders.

    Either `json` (hashed with keccak256(utf8)) or an explicit hash must be
    given. The hash can be passed as `hashFunction`/`hash` or as
    `verification: {method, data}`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    url: str
    hash_function: str | None = Field(default=None, alias="hashFunction")
    hash: str | None = None
    json_data: Any = Field(default=None, alias="json")
    verification: Verification | None = None

    @model_validator(mode="after")
    def _check_hash_source(self):
        explicit_method = self.hash_function or (self.verification.method if self.verification else None)
        explicit_hash = self.hash or (self.verification.data if self.verification else None)
        if self.json_data is not None:
            if explicit_method:
                raise ValueError(
                    'When passing in the `json` property, we use "keccak256(utf8)" as a default '
                    "hashingFunction. You do not need to set a `hashFunction`."
                )
            return self
        if not explicit_hash:
            raise ValueError(
                "You have to provide either the hash or the json via the respective properties"
            )
        return self

    def resolve(self) -> tuple[str, str]:
        """Return (hash function name or 0x00000000, 0x-hex hash)."""
        if self.json_data is not None:
            return KECCAK256_UTF8, hash_data(self.json_data, KECCAK256_UTF8)
        method = self.hash_function or (self.verification.method if self.verification else None)
        digest = self.hash or (self.verification.data if self.verification else None)
        method = method or KECCAK256_UTF8
        if method != NO_VERIFICATION:
            method = get_hash_function(method).name
        return method, digest


def _url_data(value: Any) -> URLDataToEncode:
    if isinstance(value, URLDataToEncode):
        return value
    if not isinstance(value, dict):
        raise ValueContentError(f"Could not encode URL data: expected a mapping, got {type(value).__name__}")
    try:
        return URLDataToEncode.model_validate(value)
    except ValidationError as exc:
        raise ValueContentError(f"Invalid URL data: {exc}") from exc


def _method_sig(method: str) -> str:
    if method == NO_VERIFICATION:
        return NO_VERIFICATION
    return get_hash_function(method).sig


def _method_name(sig: str) -> str:
    if sig == NO_VERIFICATION:
        return NO_VERIFICATION
    return get_hash_function(sig).name


def _require_hash(digest: str) -> str:
    if not is_hex_strict(digest):
        raise ValueContentError(f"Hash must be 0x-prefixed hex, got {digest}")
    return strip_0x(digest).lower()


def encode_url_with_hash(value: Any) -> str:
    """Legacy JSONURL/AssetURL layout: sig(4) ++ hash(32) ++ utf8(url)."""
    data = _url_data(value)
    method, digest = data.resolve()
    body = _require_hash(digest)
    if len(body) != 64:
        raise ValueContentError(f"Hash must be 32 bytes, got {digest}")
    return _method_sig(method) + body + strip_0x(utf8_to_hex(data.url))


def encode_verifiable_uri(value: Any) -> str:
    """VerifiableURI layout: 0x0000 ++ method(4) ++ uint16 length ++ data ++ utf8(url)."""
    data = _url_data(value)
    method, digest = data.resolve()
    body = _require_hash(digest)
    return (
        "0x"
        + VERIFIABLE_URI_PREFIX
        + strip_0x(_method_sig(method))
        + (len(body) // 2).to_bytes(2, "big").hex()
        + body
        + strip_0x(utf8_to_hex(data.url))
    )


def decode_url_with_hash(value: str) -> dict[str, Any]:
    """Decode either URL layout to `{verification: {method, data}, url}`."""
    body = strip_0x(value).lower()
    if body.startswith(VERIFIABLE_URI_PREFIX):
        sig = "0x" + body[4:12]
        length = int(body[12:16] or "0", 16)
        data_end = 16 + length * 2
        digest = "0x" + body[16:data_end]
        url_hex = body[data_end:]
    else:
        sig = "0x" + body[:8]
        digest = "0x" + body[8:72]
        url_hex = body[72:]
    return {
        "verification": {"method": _method_name(sig), "data": digest},
        "url": hex_to_utf8("0x" + url_hex),
    }


def natural_value_type(content: ValueContent) -> Optional[str]:
    """Structural type a valueContent maps onto, None when it has its own layout."""
    if isinstance(content, NamedContent):
        if content.bytes_length is not None:
            return "bytes"
        return NATURAL_VALUE_TYPES.get(content.tag)
    return None


def _encode_number(value: Any) -> str:
    if isinstance(value, bool):
        raise ValueContentError("Number value must be an integer, got bool")
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text.startswith("-") else text
        if not (digits.isascii() and digits.isdigit()):
            raise ValueContentError(f"Number value is not a decimal integer: {value}")
        value = int(text, 10)
    if not isinstance(value, int):
        raise ValueContentError(f"Number value must be int or decimal string, got {type(value).__name__}")
    if value < 0 or value >= 1 << 256:
        raise ValueContentError(f"Number value {value} does not fit in uint256")
    return encode_value_type("uint256", value)


def _encode_hex(tag: str, value: Any) -> str:
    if not isinstance(value, str) or not is_hex(value):
        raise ValueContentError(f"Value: {value} is not hex.")
    return "0x" + strip_0x(value)


def encode_value_content(content: Union[ValueContent, str], value: Any) -> Any:
    """Encode `value` per `content`; literal mismatches return LITERAL_MISMATCH."""
    content = parse_value_content(content)
    if isinstance(content, LiteralContent):
        if isinstance(value, str) and value.lower() == content.value:
            return value
        return LITERAL_MISMATCH
    if isinstance(content, (TupleContent, UnresolvedContent)):
        raise ValueContentError(f"Could not encode valueContent: {content}.")

    tag = content.tag
    if value is None:
        return "0x"
    if tag in URL_CONTENT_TAGS + ("Boolean",) and isinstance(value, str):
        expected = "boolean" if tag == "Boolean" else "object"
        raise ValueContentError(
            f"Could not encode valueContent: {tag} with value: {value}. Expected {expected}."
        )

    if tag == "Keccak256":
        if not is_hex_strict(value) or len(value) != 66:
            raise ValueContentError(f"Keccak256 value must be 32 bytes of 0x-hex, got {value}")
        return value
    if tag == "Number":
        return _encode_number(value)
    if tag == "Address":
        if not is_address(value):
            raise ValueContentError(f'Address: "{value}" is an invalid address.')
        return value.lower() if value.startswith("0x") else "0x" + value.lower()
    if tag in ("String", "Markdown", "URL"):
        if not isinstance(value, str):
            raise ValueContentError(f"{tag} value must be str")
        return utf8_to_hex(value)
    if tag in ("JSONURL", "AssetURL"):
        return encode_url_with_hash(value)
    if tag == "VerifiableURI":
        return encode_verifiable_uri(value)
    if tag == "Boolean":
        if not isinstance(value, bool):
            raise ValueContentError(f"Boolean value must be bool, got {value}")
        return encode_value_type("bool", value)
    if tag in ("BitArray", "Bytes"):
        return _encode_hex(tag, value)
    size = content.bytes_length
    if size is not None:
        encoded = _encode_hex(tag, value)
        if len(encoded) != 2 + size * 2:
            raise ValueContentError(
                f"Value: {value} is not of type {tag}. Expected hex value of length {2 + size * 2}"
            )
        return encoded
    raise ValueContentError(f"Could not encode unknown ({tag}) valueContent.")


def _decode_hex(tag: str, value: str, size: Optional[int] = None) -> Optional[str]:
    if not is_hex_strict(value):
        warnings.warn(f"Value: {value} is not hex.", stacklevel=3)
        return None
    if size is not None and len(value) != 2 + size * 2:
        warnings.warn(
            f"Value: {value} is not of type {tag}. Expected hex value of length {2 + size * 2}",
            stacklevel=3,
        )
        return None
    return value


def decode_value_content(content: Union[ValueContent, str], value: Optional[str]) -> Any:
    """Decode hex `value` per `content`; `None` and `0x` decode to None."""
    content = parse_value_content(content)
    if isinstance(content, LiteralContent):
        if isinstance(value, str) and value.lower() == content.value:
            return value
        return None
    if value is None or value == "0x":
        return None
    if isinstance(content, (TupleContent, UnresolvedContent)):
        raise ValueContentError(f"Could not decode valueContent: {content}.")

    tag = content.tag
    if tag == "Keccak256":
        return value
    if tag == "Number":
        return str(hex_to_int(value))
    if tag == "Address":
        return to_checksum_address("0x" + strip_0x(value)[-40:])
    if tag in ("String", "Markdown", "URL"):
        return hex_to_utf8(value)
    if tag in URL_CONTENT_TAGS:
        return decode_url_with_hash(value)
    if tag == "Boolean":
        return decode_value_type("bool", value)
    if tag in ("BitArray", "Bytes"):
        return _decode_hex(tag, value)
    if content.bytes_length is not None:
        return _decode_hex(tag, value, content.bytes_length)
    raise ValueContentError(f"Could not decode unknown ({tag}) valueContent.")
