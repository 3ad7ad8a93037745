"""Loading and load-time validation of LSP-2 JSON schemas."""

from __future__ import annotations

from itertools import product
import json
from pathlib import Path
from typing import Any, Iterable, Union

from erc725y.codec.key_value import is_supported_value_type, is_tuple_value_type, validate_tuple
from erc725y.errors import ERC725YError, SchemaError
from erc725y.keys.encode import encode_key_name
from erc725y.keys.key_name import classify_key_name, is_dynamic_key_name, split_multi_type_segment
from erc725y.schema.types import SchemaEntry, TupleContent

SHAPE_KEY_TYPES = {
    "Singleton": "Singleton",
    "Array": "Array",
    "Mapping": "Mapping",
    "Bytes20Mapping": "Mapping",
    "MappingWithGrouping": "MappingWithGrouping",
    "Bytes20MappingWithGrouping": "MappingWithGrouping",
}

SchemaInput = Union[SchemaEntry, dict[str, Any]]


def expand_multi_type_entry(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Split `Name:<address|uint256>` into one entry per dynamic type."""
    name = data.get("name", "")
    if data.get("keyType") not in ("Mapping", "MappingWithGrouping") or "|" not in name:
        return [data]
    if ":" not in name:
        raise SchemaError(
            f"Input schema type is Mapping or MappingWithGrouping but the key: {data.get('key')} "
            "is not valid (missing ':')."
        )
    segments = name.split(":")
    choices = [split_multi_type_segment(segment) for segment in segments]
    out = []
    for combo in product(*choices):
        key = data.get("key", "")
        for original, chosen in zip(segments, combo):
            if original != chosen:
                key = key.replace(original, chosen, 1)
        out.append({**data, "name": ":".join(combo), "key": key})
    return out


def validate_entry(entry: SchemaEntry) -> SchemaEntry:
    try:
        layout = classify_key_name(entry.name)
    except ERC725YError as exc:
        raise SchemaError(f"Schema {entry.name}: {exc}") from exc
    if SHAPE_KEY_TYPES[layout.shape] != entry.key_type:
        raise SchemaError(
            f"Schema {entry.name}: keyType {entry.key_type} does not match the key name shape."
        )
    if not is_supported_value_type(entry.value_type):
        raise SchemaError(f"Schema {entry.name}: unsupported valueType {entry.value_type}.")
    if is_tuple_value_type(entry.value_type) or isinstance(entry.value_content, TupleContent):
        try:
            validate_tuple(entry.value_type, entry.value_content)
        except ValueError as exc:
            raise SchemaError(f"Schema {entry.name}: {exc}") from exc
    if is_dynamic_key_name(entry.name):
        if not entry.is_template:
            raise SchemaError(f"Schema {entry.name}: dynamic names need a template key.")
        return entry
    expected = encode_key_name(entry.name).lower()
    if entry.key != expected:
        raise SchemaError(f"Schema {entry.name}: key {entry.key} does not match its name ({expected}).")
    return entry


def load_schemas(data: Iterable[SchemaInput]) -> tuple[SchemaEntry, ...]:
    """Build validated entries from raw LSP-2 dicts (or entries)."""
    out: list[SchemaEntry] = []
    for item in data:
        if isinstance(item, SchemaEntry):
            out.append(validate_entry(item))
            continue
        if not isinstance(item, dict):
            raise SchemaError(f"Schema entry must be a mapping, got {type(item).__name__}")
        for expanded in expand_multi_type_entry(item):
            out.append(validate_entry(SchemaEntry.from_dict(expanded)))
    return tuple(out)


def load_schema_file(path: Union[str, Path]) -> tuple[SchemaEntry, ...]:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise SchemaError(f"Could not read schema file {path}: {exc}") from exc
    if isinstance(payload, dict):
        payload = [payload]
    return load_schemas(payload)


def load_schema_dir(directory: Union[str, Path]) -> tuple[SchemaEntry, ...]:
    """Load every `*.json` file of `directory` in file name order."""
    directory = Path(directory)
    if not directory.is_dir():
        raise SchemaError(f"Schema directory not found: {directory}")
    out: list[SchemaEntry] = []
    for path in sorted(directory.glob("*.json")):
        out.extend(load_schema_file(path))
    return tuple(out)


def coerce_schemas(schemas: Iterable[SchemaInput] | None) -> tuple[SchemaEntry, ...]:
    if schemas is None:
        return ()
    if isinstance(schemas, (SchemaEntry, dict)):
        schemas = [schemas]
    return load_schemas(schemas)
