"""Batch encode/decode of named ERC725Y entries against a schema set."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Iterable, Optional, Sequence, Union

from erc725y.codec.key_value import decode_key_value, encode_key_value
from erc725y.codec.value_content import LITERAL_MISMATCH
from erc725y.errors import ArrayParameterError, KeyNameError, SchemaNotFoundError, ValueTypeError
from erc725y.keys.encode import encode_array_key, encode_key_name
from erc725y.keys.key_name import (
    DynamicKeyPartsInput,
    generate_dynamic_key_name,
    is_dynamic_key_name,
    normalize_dynamic_key_parts,
)
from erc725y.protocol.hexutil import HEX_BODY_RE, hex_to_int, strip_0x
from erc725y.protocol.value_types import encode_value_type
from erc725y.schema.types import SchemaEntry

logger = logging.getLogger(__name__)

ARRAY_LENGTH_TYPE = "uint128"


@dataclass(frozen=True)
class EncodedEntry:
    key: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class EncodedData:
    """Wire form of a batch: parallel `keys` and `values`."""

    keys: tuple[str, ...] = ()
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.keys) != len(self.values):
            raise ValueError("keys and values must have the same length")
        object.__setattr__(self, "keys", tuple(self.keys))
        object.__setattr__(self, "values", tuple(self.values))

    def entries(self) -> list[EncodedEntry]:
        return [EncodedEntry(key, value) for key, value in zip(self.keys, self.values)]

    def to_dict(self) -> dict[str, list[str]]:
        return {"keys": list(self.keys), "values": list(self.values)}


@dataclass(frozen=True)
class DecodedEntry:
    """Result of decoding one schema entry.

    Attributes:
        key: 32-byte key the value was read from (array base key for arrays).
        name: Schema name, the template name for dynamic entries.
        value: Decoded value, None when absent.
        dynamic_name: Name with dynamic values substituted, if any.
        error: Failure recorded while fetching remote content.
    """

    key: str
    name: str
    value: Any
    dynamic_name: Optional[str] = None
    error: Optional[Exception] = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        data = {"key": self.key, "name": self.name, "value": self.value}
        if self.dynamic_name is not None:
            data["dynamicName"] = self.dynamic_name
        if self.error is not None:
            data["error"] = str(self.error)
        return data


@dataclass(frozen=True)
class EncodeDataInput:
    key_name: str
    value: Any
    dynamic_key_parts: DynamicKeyPartsInput = None
    starting_index: int = 0
    total_array_length: Optional[int] = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "EncodeDataInput":
        return EncodeDataInput(
            key_name=_pick(data, "key_name", "keyName"),
            value=data.get("value"),
            dynamic_key_parts=_pick(data, "dynamic_key_parts", "dynamicKeyParts", default=None),
            starting_index=_pick(data, "starting_index", "startingIndex", default=0),
            total_array_length=_pick(data, "total_array_length", "totalArrayLength", default=None),
        )


@dataclass(frozen=True)
class DecodeDataInput:
    key_name: str
    value: Any
    dynamic_key_parts: DynamicKeyPartsInput = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "DecodeDataInput":
        return DecodeDataInput(
            key_name=_pick(data, "key_name", "keyName"),
            value=data.get("value"),
            dynamic_key_parts=_pick(data, "dynamic_key_parts", "dynamicKeyParts", default=None),
        )


_MISSING = object()


def _pick(data: dict[str, Any], *names: str, default: Any = _MISSING) -> Any:
    for name in names:
        if name in data:
            return data[name]
    if default is _MISSING:
        raise KeyNameError(f"Input is missing field {names[0]!r}: {data}")
    return default


def _is_hashed_key(name_or_key: str) -> bool:
    body = strip_0x(name_or_key)
    return len(body) == 64 and HEX_BODY_RE.match(body) is not None


def get_schema_element(
    schemas: Sequence[SchemaEntry],
    name_or_key: str,
    dynamic_key_parts: DynamicKeyPartsInput = None,
) -> SchemaEntry:
    """Find the entry for a name, hashed key or dynamic name plus values."""
    if name_or_key.startswith("0x") and "<" in name_or_key:
        template_key = name_or_key.lower()
        for entry in schemas:
            if entry.key == template_key:
                return entry
        raise SchemaNotFoundError(f"No matching schema found for key: {name_or_key}.")

    if is_dynamic_key_name(name_or_key):
        parts = normalize_dynamic_key_parts(dynamic_key_parts)
        if not parts:
            raise KeyNameError(
                f"Can't encodeData for dynamic key: {name_or_key} with non dynamic values. "
                "Got dynamicKeyParts: none."
            )
        for entry in schemas:
            if entry.name == name_or_key:
                return entry.materialize(
                    key=encode_key_name(name_or_key, parts),
                    dynamic_name=generate_dynamic_key_name(name_or_key, parts),
                    dynamic_key_parts=parts,
                )
        raise SchemaNotFoundError(f"No matching schema found for key: {name_or_key}.")

    if _is_hashed_key(name_or_key):
        key = "0x" + strip_0x(name_or_key).lower()
    else:
        key = encode_key_name(name_or_key).lower()
    for entry in schemas:
        if entry.key == key:
            return entry
    raise SchemaNotFoundError(f"No matching schema found for key: {name_or_key} ({key}).")


def _encode_array(
    entry: SchemaEntry, value: Any, starting_index: int, total_array_length: Optional[int]
) -> list[EncodedEntry]:
    if not isinstance(value, (list, tuple)):
        raise ValueTypeError(f"Can't encode a non array for key: {entry.name} of type Array.")
    if isinstance(starting_index, bool) or not isinstance(starting_index, int) or starting_index < 0:
        raise ArrayParameterError("Invalid `startingIndex` parameter. Value cannot be negative.")
    total = len(value) if total_array_length is None else total_array_length
    if isinstance(total, bool) or not isinstance(total, int) or total < len(value):
        raise ArrayParameterError(
            "Invalid `totalArrayLength` parameter. Array length must be at least "
            f"as large as the number of elements of the value array: {len(value)}."
        )

    out = [EncodedEntry(entry.key, encode_value_type(ARRAY_LENGTH_TYPE, total))]
    for offset, item in enumerate(value):
        element_key = encode_array_key(entry.key, starting_index + offset)
        encoded = encode_key_value(entry.value_content, entry.value_type, item, entry.name)
        if encoded is LITERAL_MISMATCH:
            logger.warning(
                "skipping %s[%d]: value does not match literal valueContent",
                entry.name,
                starting_index + offset,
            )
            continue
        out.append(EncodedEntry(element_key, encoded))
    return out


def encode_key(
    entry: SchemaEntry,
    value: Any,
    starting_index: int = 0,
    total_array_length: Optional[int] = None,
) -> Any:
    """Encode `value` for one entry.

    Arrays return a list of EncodedEntry (length first, then elements) or,
    for a bare int, only the encoded length. Other key types return a
    0x-hex string or LITERAL_MISMATCH.
    """
    if entry.key_type == "Array":
        if isinstance(value, int) and not isinstance(value, bool):
            return encode_value_type(ARRAY_LENGTH_TYPE, value)
        return _encode_array(entry, value, starting_index, total_array_length)
    return encode_key_value(entry.value_content, entry.value_type, value, entry.name)


def _as_lookup(value: Iterable[Any]) -> dict[str, Optional[str]]:
    lookup: dict[str, Optional[str]] = {}
    for item in value:
        if isinstance(item, EncodedEntry):
            key, item_value = item.key, item.value
        else:
            key, item_value = item["key"], item.get("value")
        lookup[key.lower()] = item_value
    return lookup


def _array_count(raw: Optional[str]) -> int:
    if raw is None or raw == "0x":
        return 0
    return hex_to_int(raw)


def decode_key(entry: SchemaEntry, value: Any) -> Any:
    """Decode one entry.

    Array entries take a list of `{key, value}` pairs holding the length and
    element keys; a missing length decodes to `[]` and a missing element to
    None. Other entries take a hex string or a list to pick their key from.
    """
    if entry.key_type == "Array":
        if not isinstance(value, (list, tuple)):
            return []
        lookup = _as_lookup(value)
        if entry.key not in lookup:
            return []
        count = _array_count(lookup[entry.key])
        logger.debug("decoding %d elements of %s", count, entry.name)
        return [
            decode_key_value(
                entry.value_content,
                entry.value_type,
                lookup.get(encode_array_key(entry.key, index)),
                entry.name,
            )
            for index in range(count)
        ]
    if isinstance(value, (list, tuple)):
        value = _as_lookup(value).get(entry.key)
    return decode_key_value(entry.value_content, entry.value_type, value, entry.name)


EncodeInputs = Union[EncodeDataInput, dict, Sequence[Union[EncodeDataInput, dict]]]
DecodeInputs = Union[DecodeDataInput, dict, Sequence[Union[DecodeDataInput, dict]]]


def _encode_inputs(inputs: EncodeInputs) -> list[EncodeDataInput]:
    if isinstance(inputs, (EncodeDataInput, dict)):
        inputs = [inputs]
    return [item if isinstance(item, EncodeDataInput) else EncodeDataInput.from_dict(item) for item in inputs]


def _decode_inputs(inputs: DecodeInputs) -> list[DecodeDataInput]:
    if isinstance(inputs, (DecodeDataInput, dict)):
        inputs = [inputs]
    return [item if isinstance(item, DecodeDataInput) else DecodeDataInput.from_dict(item) for item in inputs]


def encode_data(inputs: EncodeInputs, schemas: Sequence[SchemaEntry]) -> EncodedData:
    """Encode a batch of inputs into parallel keys and values, preserving order."""
    keys: list[str] = []
    values: list[str] = []
    for item in _encode_inputs(inputs):
        entry = get_schema_element(schemas, item.key_name, item.dynamic_key_parts)
        encoded = encode_key(entry, item.value, item.starting_index, item.total_array_length)
        if encoded is LITERAL_MISMATCH:
            logger.warning("skipping %s: value does not match literal valueContent", entry.name)
            continue
        if isinstance(encoded, list):
            for pair in encoded:
                keys.append(pair.key)
                values.append(pair.value)
            continue
        keys.append(entry.key)
        values.append(encoded)
    return EncodedData(tuple(keys), tuple(values))


def decode_data(inputs: DecodeInputs, schemas: Sequence[SchemaEntry]) -> list[DecodedEntry]:
    """Decode a batch of inputs, one DecodedEntry per input in order."""
    out = []
    for item in _decode_inputs(inputs):
        entry = get_schema_element(schemas, item.key_name, item.dynamic_key_parts)
        out.append(
            DecodedEntry(
                key=entry.key,
                name=entry.name,
                value=decode_key(entry, item.value),
                dynamic_name=entry.dynamic_name,
            )
        )
    return out
