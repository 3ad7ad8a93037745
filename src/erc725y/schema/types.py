"""Schema entry types and the parsed valueContent variants."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import re
from typing import Any, Literal, Optional, Union

from erc725y.errors import SchemaError, ValueContentError
from erc725y.protocol.hexutil import is_hex_strict
from erc725y.protocol.value_types import COMPACT_BYTES_ARRAY


KeyType = Literal["Singleton", "Array", "Mapping", "MappingWithGrouping"]
KEY_TYPES: tuple[KeyType, ...] = ("Singleton", "Array", "Mapping", "MappingWithGrouping")

NAMED_CONTENT_TAGS = (
    "Number",
    "String",
    "Address",
    "Keccak256",
    "AssetURL",
    "JSONURL",
    "VerifiableURI",
    "URL",
    "Markdown",
    "Boolean",
    "BitArray",
    "Bytes",
)
URL_CONTENT_TAGS = ("JSONURL", "AssetURL", "VerifiableURI")
BYTES_N_CONTENT_RE = re.compile(r"^Bytes(\d+)$")
ALLOWED_BYTES_SIZES = (2, 4, 8, 16, 32, 64, 128, 256)
UNRESOLVED_CONTENT = "?"


@dataclass(frozen=True)
class NamedContent:
    """A well-known valueContent tag such as `Number` or `JSONURL`."""

    tag: str

    def __post_init__(self) -> None:
        if self.tag in NAMED_CONTENT_TAGS:
            return
        match = BYTES_N_CONTENT_RE.match(self.tag or "")
        if match is None:
            raise ValueContentError(f"Unknown valueContent: {self.tag}")
        if int(match.group(1)) not in ALLOWED_BYTES_SIZES:
            raise ValueContentError(
                f"Provided bytes length: {match.group(1)} for valueContent: {self.tag} is not valid."
            )

    @property
    def bytes_length(self) -> Optional[int]:
        match = BYTES_N_CONTENT_RE.match(self.tag)
        return int(match.group(1)) if match else None

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class LiteralContent:
    """A literal `0x...` value the stored data must equal."""

    value: str

    def __post_init__(self) -> None:
        if not is_hex_strict(self.value):
            raise ValueContentError(f"Literal valueContent must be 0x-hex, got {self.value}")
        object.__setattr__(self, "value", self.value.lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UnresolvedContent:
    """Placeholder content of a partially resolved schema entry."""

    def __str__(self) -> str:
        return UNRESOLVED_CONTENT


@dataclass(frozen=True)
class TupleContent:
    parts: tuple[Union[NamedContent, LiteralContent], ...]

    def __str__(self) -> str:
        return "(" + ",".join(str(part) for part in self.parts) + ")"


ValueContent = Union[NamedContent, LiteralContent, TupleContent, UnresolvedContent]


def parse_value_content(raw: Any) -> ValueContent:
    """Turn a raw LSP-2 valueContent string into its variant."""
    if isinstance(raw, (NamedContent, LiteralContent, TupleContent, UnresolvedContent)):
        return raw
    if not isinstance(raw, str) or not raw:
        raise ValueContentError("valueContent must be a non-empty string")
    if raw == UNRESOLVED_CONTENT:
        return UnresolvedContent()
    if raw.startswith("(") and raw.endswith(")" + COMPACT_BYTES_ARRAY):
        raw = raw[: -len(COMPACT_BYTES_ARRAY)]
    if raw.startswith("(") and raw.endswith(")"):
        parts = []
        for item in raw[1:-1].split(","):
            parsed = parse_value_content(item.strip())
            if not isinstance(parsed, (NamedContent, LiteralContent)):
                raise ValueContentError(f"Unsupported tuple valueContent: {raw}")
            parts.append(parsed)
        return TupleContent(tuple(parts))
    if raw.startswith("0x"):
        return LiteralContent(raw)
    return NamedContent(raw)


@dataclass(frozen=True)
class SchemaEntry:
    """One LSP-2 schema entry.

    Attributes:
        name: Key name, possibly holding `<type>` placeholders.
        key: 32-byte key as 0x-hex, or a template key for dynamic names.
        key_type: Singleton, Array, Mapping or MappingWithGrouping.
        value_type: Structural type, e.g. `bytes`, `address[]` or `(bytes4,uint128)`.
        value_content: Parsed valueContent; raw strings are parsed on construction.
        dynamic_name: `name` with the dynamic values substituted, for
            entries materialized from a template.
        dynamic_key_parts: Values substituted into the template placeholders.
    """

    name: str
    key: str
    key_type: KeyType
    value_type: str
    value_content: ValueContent
    dynamic_name: Optional[str] = None
    dynamic_key_parts: Optional[tuple[Any, ...]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise SchemaError("Schema name must be a non-empty string.")
        if not isinstance(self.key, str) or not self.key.startswith("0x"):
            raise SchemaError(f"Schema {self.name}: key must be a 0x-prefixed string.")
        if self.key_type not in KEY_TYPES:
            raise SchemaError(f"Schema {self.name}: unsupported keyType {self.key_type}.")
        if not self.value_type or not isinstance(self.value_type, str):
            raise SchemaError(f"Schema {self.name}: valueType must be a non-empty string.")
        try:
            content = parse_value_content(self.value_content)
        except ValueContentError as exc:
            raise SchemaError(f"Schema {self.name}: {exc}") from exc
        object.__setattr__(self, "value_content", content)
        object.__setattr__(self, "key", self.key.lower())
        if self.dynamic_key_parts is not None:
            object.__setattr__(self, "dynamic_key_parts", tuple(self.dynamic_key_parts))

    @property
    def is_template(self) -> bool:
        return "<" in self.key

    def materialize(self, key: str, dynamic_name: str, dynamic_key_parts: Any) -> "SchemaEntry":
        """Derive a concrete entry for one set of dynamic values.

        `name` keeps the template name, `dynamic_name` holds the substituted one.
        """
        return replace(
            self,
            key=key,
            dynamic_name=dynamic_name,
            dynamic_key_parts=tuple(dynamic_key_parts),
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "key": self.key,
            "keyType": self.key_type,
            "valueType": self.value_type,
            "valueContent": str(self.value_content),
        }
        if self.dynamic_name is not None:
            data["dynamicName"] = self.dynamic_name
            data["dynamicKeyParts"] = list(self.dynamic_key_parts or ())
        return data

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "SchemaEntry":
        try:
            return SchemaEntry(
                name=data["name"],
                key=data["key"],
                key_type=data["keyType"],
                value_type=data["valueType"],
                value_content=data["valueContent"],
                dynamic_name=data.get("dynamicName"),
                dynamic_key_parts=data.get("dynamicKeyParts"),
            )
        except KeyError as exc:
            raise SchemaError(f"Schema entry is missing field {exc.args[0]!r}: {data}") from exc

    @staticmethod
    def degraded(name: str, key: str, key_type: KeyType, value_type: str) -> "SchemaEntry":
        """Entry for a key whose hashed name segments cannot be recovered."""
        return SchemaEntry(
            name=name,
            key=key,
            key_type=key_type,
            value_type=value_type,
            value_content=UnresolvedContent(),
        )
