"""Persistent cache of user-provided schema entries."""

from __future__ import annotations

import os
from pathlib import Path
import tempfile
from typing import Iterable, Optional, Union

from diskcache import Cache

from erc725y.config import SCHEMA_CACHE_DIR_ENV
from erc725y.schema.loader import validate_entry
from erc725y.schema.types import SchemaEntry


def schema_cache_dir(directory: Union[str, Path, None] = None) -> Path:
    if directory:
        return Path(directory).expanduser()
    env_dir = os.environ.get(SCHEMA_CACHE_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return Path(tempfile.gettempdir()) / "erc725y" / "schema_cache"


def _open_schema_cache(directory: Union[str, Path, None]) -> Cache:
    return Cache(str(schema_cache_dir(directory)))


def _cache_key(entry: SchemaEntry) -> str:
    return f"{entry.key}|{entry.name}"


def cache_schemas(entries: Iterable[SchemaEntry], directory: Union[str, Path, None] = None) -> None:
    cache = _open_schema_cache(directory)
    try:
        for entry in entries:
            cache.set(_cache_key(entry), entry.to_dict())
    finally:
        cache.close()


def load_schemas_from_cache(directory: Union[str, Path, None] = None) -> tuple[SchemaEntry, ...]:
    """Entries stored by `cache_schemas`, re-validated, ordered by key."""
    cache = _open_schema_cache(directory)
    try:
        items = [cache[key] for key in sorted(cache.iterkeys())]
    finally:
        cache.close()
    return tuple(validate_entry(SchemaEntry.from_dict(item)) for item in items)


def clear_schema_cache(directory: Optional[Union[str, Path]] = None) -> int:
    cache = _open_schema_cache(directory)
    try:
        return cache.clear()
    finally:
        cache.close()
