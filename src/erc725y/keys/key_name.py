"""Key name shapes and dynamic placeholders."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Literal, Sequence, Union

from erc725y.errors import KeyNameError
from erc725y.protocol.digests import is_address


KeyShape = Literal[
    "Singleton",
    "Array",
    "Mapping",
    "MappingWithGrouping",
    "Bytes20Mapping",
    "Bytes20MappingWithGrouping",
]
KEY_SHAPES: tuple[KeyShape, ...] = (
    "Singleton",
    "Array",
    "Mapping",
    "MappingWithGrouping",
    "Bytes20Mapping",
    "Bytes20MappingWithGrouping",
)

PLACEHOLDER_RE = re.compile(r"^<(string|address|bool|u?int\d+|bytes\d+)>$")
MULTI_TYPE_PLACEHOLDER_RE = re.compile(r"^<([a-z0-9]+(\|[a-z0-9]+)+)>$")
BARE_BYTES20_RE = re.compile(r"^[0-9a-fA-F]{40}$")

DynamicValue = Union[str, int, bool]
DynamicKeyPartsInput = Union[DynamicValue, Sequence[DynamicValue], None]


@dataclass(frozen=True)
class KeyNameLayout:
    """A key name split into segments and classified by shape.

    Attributes:
        shape: Key derivation rule selected for the name.
        segments: Colon separated parts of the name.
    """

    shape: KeyShape
    segments: tuple[str, ...]

    @property
    def placeholders(self) -> tuple[str, ...]:
        return tuple(segment for segment in self.segments if is_placeholder(segment))


@dataclass(frozen=True)
class DynamicKeyPart:
    """A decoded `<type>` segment of a mapping key."""

    type: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "value": self.value}


def is_placeholder(segment: str) -> bool:
    return PLACEHOLDER_RE.match(segment) is not None


def placeholder_type(segment: str) -> str:
    """`<uint32>` -> `uint32`."""
    match = PLACEHOLDER_RE.match(segment)
    if match is None:
        raise KeyNameError(f"Dynamic key: {segment} is not supported")
    return match.group(1)


def classify_key_name(name: str) -> KeyNameLayout:
    if not isinstance(name, str) or not name:
        raise KeyNameError("key name must be a non-empty string")
    segments = tuple(name.split(":"))
    if len(segments) == 1:
        shape: KeyShape = "Array" if name.endswith("[]") else "Singleton"
    elif len(segments) == 2:
        shape = "Bytes20Mapping" if BARE_BYTES20_RE.match(segments[1]) else "Mapping"
    elif len(segments) == 3:
        shape = (
            "Bytes20MappingWithGrouping"
            if BARE_BYTES20_RE.match(segments[2])
            else "MappingWithGrouping"
        )
    else:
        raise KeyNameError(
            f"Unsupported key name: {name}. Expected at most 3 segments separated by ':'"
        )
    return KeyNameLayout(shape=shape, segments=segments)


def is_dynamic_key_name(name: str) -> bool:
    """True when `name` (or a template key) holds a `<type>` placeholder."""
    if name.startswith("0x") and "<" in name:
        return True
    return any(is_placeholder(segment) for segment in name.split(":"))


def normalize_dynamic_key_parts(parts: DynamicKeyPartsInput) -> list[DynamicValue]:
    if parts is None:
        return []
    if isinstance(parts, (str, int, bool)):
        return [parts]
    return list(parts)


def _format_dynamic_value(value: DynamicValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def generate_dynamic_key_name(name: str, dynamic_key_parts: DynamicKeyPartsInput) -> str:
    """Substitute dynamic values into the placeholders of `name`.

    `MyKey:<bytes4>:<address>` with `["0x11223344", "0x2ab3..."]` becomes
    `MyKey:0x11223344:0x2ab3...`.
    """
    parts = normalize_dynamic_key_parts(dynamic_key_parts)
    out = []
    index = 0
    for segment in name.split(":"):
        if not is_placeholder(segment):
            out.append(segment)
            continue
        if index >= len(parts) or parts[index] is None or parts[index] == "":
            raise KeyNameError(
                f"Can not generate key name: {name}. "
                f"Missing/not enough dynamicKeyParts: {parts}"
            )
        value = parts[index]
        if segment == "<address>" and not is_address(value):
            raise KeyNameError(f"Dynamic key is expecting an <address> but got: {value}")
        out.append(_format_dynamic_value(value))
        index += 1
    return ":".join(out)


def split_multi_type_segment(segment: str) -> list[str]:
    """`<address|uint256>` -> `["<address>", "<uint256>"]`, other segments unchanged."""
    match = MULTI_TYPE_PLACEHOLDER_RE.match(segment)
    if match is None:
        return [segment]
    return [f"<{type_name}>" for type_name in match.group(1).split("|")]
