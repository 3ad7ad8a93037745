"""Reverse lookup of schema entries from raw 32-byte keys."""

from __future__ import annotations

from dataclasses import replace
import re
from typing import Iterable, Optional, Union

from erc725y.keys.key_name import is_dynamic_key_name
from erc725y.protocol.digests import keccak256
from erc725y.protocol.hexutil import strip_0x
from erc725y.schema.loader import SchemaInput, coerce_schemas
from erc725y.schema.types import SchemaEntry
from erc725y.schemas import builtin_schemas

UNKNOWN_MAP_PART = "??????"
DECIMAL_RE = re.compile(r"^\d+$")


def _of_type(schemas: Iterable[SchemaEntry], key_type: str) -> list[SchemaEntry]:
    return [entry for entry in schemas if entry.key_type == key_type]


def _find_singleton(key: str, schemas: list[SchemaEntry]) -> Optional[SchemaEntry]:
    for entry in schemas:
        if entry.key == key:
            return entry
    return None


def _find_array(key: str, schemas: list[SchemaEntry]) -> Optional[SchemaEntry]:
    exact = _find_singleton(key, schemas)
    if exact is not None:
        return exact
    prefix = key[:34]
    match = next((entry for entry in schemas if entry.key[:34] == prefix), None)
    if match is None:
        return None
    # element keys only resolve when the index half reads as decimal
    index_part = key[34:]
    if DECIMAL_RE.match(index_part) is None:
        return None
    return replace(
        match,
        key=key,
        name=match.name.replace("[]", f"[{int(index_part, 10)}]"),
        key_type="Singleton",
    )


def _find_mapping(key: str, schemas: list[SchemaEntry]) -> Optional[SchemaEntry]:
    exact = _find_singleton(key, schemas)
    if exact is not None:
        return exact
    first_word, second_word = key[:26], key[26:]
    match = next((entry for entry in schemas if entry.key[:22] + "0000" == first_word), None)
    if match is None:
        return None
    segments = match.name.split(":")
    map_part = UNKNOWN_MAP_PART
    if is_dynamic_key_name(match.name):
        map_part = second_word
    if keccak256(segments[1].encode("utf-8"))[:20].hex() == second_word:
        map_part = segments[1]
    return SchemaEntry.degraded(
        name=f"{segments[0]}:{map_part}",
        key=key,
        key_type="Mapping",
        value_type=match.value_type,
    )


def _find_mapping_with_grouping(key: str, schemas: list[SchemaEntry]) -> Optional[SchemaEntry]:
    match = next((entry for entry in schemas if entry.key[:26] == key[:26]), None)
    if match is None:
        return None
    return replace(match, key=key, name=f"{match.name[: match.name.rfind(':')]}:{key[26:]}")


def resolve_key(key: str, schemas: Iterable[SchemaEntry]) -> Optional[SchemaEntry]:
    """Match one key against `schemas`, trying each key type in turn."""
    key = "0x" + strip_0x(key).lower()
    schemas = list(schemas)
    return (
        _find_singleton(key, _of_type(schemas, "Singleton"))
        or _find_array(key, _of_type(schemas, "Array"))
        or _find_mapping(key, _of_type(schemas, "Mapping"))
        or _find_mapping_with_grouping(key, _of_type(schemas, "MappingWithGrouping"))
    )


def get_schema(
    key_or_keys: Union[str, list[str]],
    provided_schemas: Optional[Iterable[SchemaInput]] = None,
) -> Union[Optional[SchemaEntry], dict[str, Optional[SchemaEntry]]]:
    """Find the schema entry of a key among the built-in and provided schemas.

    A list of keys returns `{key: entry or None}`.
    """
    schemas = builtin_schemas() + coerce_schemas(provided_schemas)
    if isinstance(key_or_keys, (list, tuple)):
        return {key: resolve_key(key, schemas) for key in key_or_keys}
    return resolve_key(key_or_keys, schemas)
