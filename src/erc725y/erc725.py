"""Unified entrypoint for the ERC725Y schema codec."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Union
import warnings

from erc725y.codec.data import (
    DecodeDataInput,
    DecodedEntry,
    EncodeDataInput,
    EncodedData,
    EncodedEntry,
    decode_data,
    encode_data,
    get_schema_element,
)
from erc725y.codec.key_value import decode_key_value, encode_key_value
from erc725y.codec.value_content import LITERAL_MISMATCH, URLDataToEncode
from erc725y.config import ERC725Config
from erc725y.errors import ProviderError
from erc725y.keys.decode import decode_mapping_key
from erc725y.keys.encode import encode_array_key, encode_dynamic_key_part, encode_key_name
from erc725y.keys.key_name import DynamicKeyPart, generate_dynamic_key_name, is_dynamic_key_name
from erc725y.permissions import (
    LSP6_DEFAULT_PERMISSIONS,
    check_permissions,
    decode_permissions,
    encode_permissions,
    map_permission,
)
from erc725y.protocol.hash_functions import SUPPORTED_HASH_FUNCTIONS, hash_data, is_data_authentic
from erc725y.protocol.interfaces import ERC725Y_INTERFACE_IDS, INTERFACE_IDS
from erc725y.schema.cache import cache_schemas, load_schemas_from_cache
from erc725y.schema.loader import SchemaInput, coerce_schemas, load_schema_dir
from erc725y.schema.resolver import get_schema
from erc725y.schema.types import NamedContent, SchemaEntry
from erc725y.schemas import builtin_schemas, lsp_schema
from erc725y.sources import (
    ContentFetcher,
    DataSource,
    InMemoryDataSource,
    fetch_data,
    get_data,
    supports_interface,
)

DEPRECATED_CONTENT_TAGS = ("JSONURL", "AssetURL")


def _dedupe(entries: Iterable[SchemaEntry]) -> tuple[SchemaEntry, ...]:
    seen = set()
    out = []
    for entry in entries:
        marker = (entry.key, entry.name)
        if marker in seen:
            continue
        seen.add(marker)
        out.append(entry)
    return tuple(out)


def _warn_deprecated(entries: Iterable[SchemaEntry]) -> None:
    for entry in entries:
        content = entry.value_content
        if isinstance(content, NamedContent) and content.tag in DEPRECATED_CONTENT_TAGS:
            warnings.warn(
                f"Schema {entry.name} uses the deprecated valueContent {content.tag}; "
                "use VerifiableURI instead.",
                DeprecationWarning,
                stacklevel=3,
            )


class ERC725:
    """Schema-bound codec for one ERC725Y store.

    `schemas` are LSP-2 dicts or SchemaEntry objects. Extra schemas come from
    `config.schema_dir` and, when enabled, the persistent schema cache.
    `source` and `fetcher` are only needed by `get_data` and `fetch_data`.
    """

    def __init__(
        self,
        schemas: Optional[Iterable[SchemaInput]] = None,
        source: Optional[DataSource] = None,
        fetcher: Optional[ContentFetcher] = None,
        config: Optional[ERC725Config] = None,
    ) -> None:
        self.config = config or ERC725Config.from_env()
        provided = coerce_schemas(schemas)
        _warn_deprecated(provided)
        entries = list(provided)
        if self.config.schema_dir is not None:
            entries.extend(load_schema_dir(self.config.schema_dir))
        if self.config.use_schema_cache:
            cache_schemas(provided, self.config.schema_cache_dir)
            entries.extend(load_schemas_from_cache(self.config.schema_cache_dir))
        self.schemas: tuple[SchemaEntry, ...] = _dedupe(entries)
        self.source = source
        self.fetcher = fetcher

    def encode_data(
        self, inputs: Any, schemas: Optional[Iterable[SchemaInput]] = None
    ) -> EncodedData:
        return encode_data(inputs, self._schemas(schemas))

    def decode_data(
        self, inputs: Any, schemas: Optional[Iterable[SchemaInput]] = None
    ) -> list[DecodedEntry]:
        return decode_data(inputs, self._schemas(schemas))

    def get_schema(
        self, key_or_keys: Union[str, list[str]], provided_schemas: Optional[Iterable[SchemaInput]] = None
    ) -> Any:
        return get_schema(key_or_keys, self.schemas + coerce_schemas(provided_schemas))

    def get_data(self, key_names: Optional[Sequence[Any]] = None) -> list[DecodedEntry]:
        return get_data(self._require_source(), self.schemas, key_names)

    def fetch_data(self, key_names: Optional[Sequence[Any]] = None) -> list[DecodedEntry]:
        if self.fetcher is None:
            raise ProviderError("fetch_data needs a ContentFetcher.")
        return fetch_data(
            self._require_source(),
            self.fetcher,
            self.schemas,
            key_names,
            ipfs_gateway=self.config.ipfs_gateway,
        )

    def supports_interface(self, interface_id_or_name: str) -> bool:
        return supports_interface(self._require_source(), interface_id_or_name)

    def _schemas(self, schemas: Optional[Iterable[SchemaInput]]) -> tuple[SchemaEntry, ...]:
        if schemas is None:
            return self.schemas
        return coerce_schemas(schemas)

    def _require_source(self) -> DataSource:
        if self.source is None:
            raise ProviderError("No data source configured.")
        return self.source

    encode_key_name = staticmethod(encode_key_name)
    decode_mapping_key = staticmethod(decode_mapping_key)
    encode_array_key = staticmethod(encode_array_key)
    encode_key_value = staticmethod(encode_key_value)
    decode_key_value = staticmethod(decode_key_value)
    encode_permissions = staticmethod(encode_permissions)
    decode_permissions = staticmethod(decode_permissions)
    check_permissions = staticmethod(check_permissions)
    map_permission = staticmethod(map_permission)
    is_data_authentic = staticmethod(is_data_authentic)


__all__ = [
    "ERC725",
    "ERC725Config",
    "ContentFetcher",
    "DataSource",
    "InMemoryDataSource",
    "DecodeDataInput",
    "DecodedEntry",
    "DynamicKeyPart",
    "EncodeDataInput",
    "EncodedData",
    "EncodedEntry",
    "LITERAL_MISMATCH",
    "URLDataToEncode",
    "ERC725Y_INTERFACE_IDS",
    "INTERFACE_IDS",
    "LSP6_DEFAULT_PERMISSIONS",
    "SUPPORTED_HASH_FUNCTIONS",
    "SchemaEntry",
    "builtin_schemas",
    "lsp_schema",
    "check_permissions",
    "decode_data",
    "decode_key_value",
    "decode_mapping_key",
    "decode_permissions",
    "encode_array_key",
    "encode_data",
    "encode_dynamic_key_part",
    "encode_key_name",
    "encode_key_value",
    "encode_permissions",
    "fetch_data",
    "generate_dynamic_key_name",
    "get_data",
    "get_schema",
    "get_schema_element",
    "hash_data",
    "is_data_authentic",
    "is_dynamic_key_name",
    "map_permission",
    "supports_interface",
]
