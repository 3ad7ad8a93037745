"""Collaborator interfaces: ERC725Y stores and remote content fetchers."""

from __future__ import annotations

import base64
from dataclasses import replace
import json
import logging
import re
from typing import Any, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import unquote_to_bytes

from erc725y.codec.data import (
    DecodedEntry,
    EncodedData,
    EncodedEntry,
    decode_key,
    get_schema_element,
)
from erc725y.config import DEFAULT_IPFS_GATEWAY
from erc725y.errors import ERC725YError, ProviderError, ValueContentError
from erc725y.keys.encode import encode_array_key
from erc725y.keys.key_name import DynamicKeyPartsInput, is_dynamic_key_name
from erc725y.protocol.hash_functions import is_data_authentic
from erc725y.protocol.hexutil import hex_to_int
from erc725y.protocol.interfaces import resolve_interface_id
from erc725y.schema.types import URL_CONTENT_TAGS, NamedContent, SchemaEntry

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:.*?;(.*?),(.*)$", re.DOTALL)
JSON_EDGES_RE = re.compile(r"^(\[.*\]|\{.*\})\s*$", re.DOTALL)
UNVERIFIABLE_URL_RE = re.compile(r"[=?/]$")


class DataSource:
    """Abstract read access to an ERC725Y key/value store.

    `None` means the key is absent, `"0x"` an empty value.
    """

    def get_value(self, key: str) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_values(self, keys: Sequence[str]) -> list[Optional[str]]:
        return [self.get_value(key) for key in keys]

    def supports_interface(self, interface_id: str) -> bool:  # pragma: no cover - interface
        raise NotImplementedError


class ContentFetcher:
    """Abstract retrieval of off-chain content (IPFS, HTTP)."""

    def fetch(self, url: str) -> bytes:  # pragma: no cover - interface
        raise NotImplementedError


class InMemoryDataSource(DataSource):
    """Dict-backed store."""

    def __init__(
        self,
        data: Optional[Mapping[str, str]] = None,
        interfaces: Iterable[str] = (),
    ) -> None:
        self._data: dict[str, str] = {}
        for key, value in (data or {}).items():
            self.set_value(key, value)
        self._interfaces = {resolve_interface_id(item).lower() for item in interfaces}

    def set_value(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def set_data(self, encoded: Union[EncodedData, Iterable[EncodedEntry]]) -> None:
        entries = encoded.entries() if isinstance(encoded, EncodedData) else encoded
        for entry in entries:
            self.set_value(entry.key, entry.value)

    def get_value(self, key: str) -> Optional[str]:
        return self._data.get(key.lower())

    def supports_interface(self, interface_id: str) -> bool:
        return interface_id.lower() in self._interfaces


KeyNameInput = Union[str, Mapping[str, Any]]


def _read(source: DataSource, keys: list[str]) -> list[Optional[str]]:
    if not keys:
        return []
    try:
        values = source.get_values(keys)
    except ERC725YError:
        raise
    except Exception as exc:
        raise ProviderError(f"Data source failed to read {len(keys)} key(s): {exc}") from exc
    if len(values) != len(keys):
        raise ProviderError(f"Data source returned {len(values)} values for {len(keys)} keys")
    return list(values)


def _requested_entries(
    schemas: Sequence[SchemaEntry], key_names: Optional[Sequence[KeyNameInput]]
) -> list[SchemaEntry]:
    if key_names is None:
        return [entry for entry in schemas if not is_dynamic_key_name(entry.name)]
    entries = []
    for item in key_names:
        if isinstance(item, str):
            entries.append(get_schema_element(schemas, item))
            continue
        parts: DynamicKeyPartsInput = item.get("dynamic_key_parts", item.get("dynamicKeyParts"))
        entries.append(get_schema_element(schemas, item.get("key_name", item.get("keyName")), parts))
    return entries


def get_data(
    source: DataSource,
    schemas: Sequence[SchemaEntry],
    key_names: Optional[Sequence[KeyNameInput]] = None,
) -> list[DecodedEntry]:
    """Read and decode entries; arrays are completed with their element keys.

    `key_names` holds names, hashed keys or `{keyName, dynamicKeyParts}`
    mappings; when omitted every non-dynamic schema entry is read.
    """
    entries = _requested_entries(schemas, key_names)
    base_values = _read(source, [entry.key for entry in entries])

    inputs = []
    for entry, raw in zip(entries, base_values):
        if entry.key_type != "Array":
            inputs.append((entry, raw))
            continue
        pairs = [EncodedEntry(entry.key, raw)] if raw is not None else []
        count = hex_to_int(raw) if raw not in (None, "0x") else 0
        if count:
            element_keys = [encode_array_key(entry.key, index) for index in range(count)]
            logger.debug("reading %d elements of %s", count, entry.name)
            for key, value in zip(element_keys, _read(source, element_keys)):
                if value is not None:
                    pairs.append(EncodedEntry(key, value))
        inputs.append((entry, pairs))

    return [
        DecodedEntry(
            key=entry.key,
            name=entry.name,
            value=decode_key(entry, value),
            dynamic_name=entry.dynamic_name,
        )
        for entry, value in inputs
    ]


def convert_ipfs_gateway_url(gateway: str) -> str:
    """Normalize a gateway so it ends in `/ipfs/`."""
    if gateway.endswith("/") and not gateway.endswith("/ipfs/"):
        return gateway + "ipfs/"
    if gateway.endswith("/ipfs"):
        return gateway + "/"
    if not gateway.endswith("/ipfs/"):
        return gateway + "/ipfs/"
    return gateway


def patch_ipfs_url(url: str, gateway: str = DEFAULT_IPFS_GATEWAY) -> str:
    if url.startswith("ipfs://"):
        return url.replace("ipfs://", convert_ipfs_gateway_url(gateway), 1)
    return url


def _decode_data_url(url: str) -> Optional[bytes]:
    match = DATA_URL_RE.match(url)
    if match is None or not match.group(2):
        return None
    encoding, payload = match.group(1), match.group(2)
    if encoding == "base64":
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def _looks_like_json(data: bytes) -> bool:
    if len(data) < 2:
        return False
    edges = bytes([data[0]]) + data[-3:] if len(data) > 3 else data
    try:
        return JSON_EDGES_RE.match(edges.decode("utf-8")) is not None
    except UnicodeDecodeError:
        return False


def _hash_mismatch(capture: list[str], verification: Mapping[str, Any]) -> ValueContentError:
    calculated = '", "'.join(capture)
    return ValueContentError(
        f'Hash mismatch, calculated hashes ("{calculated}") are different from '
        f'expected hash "{verification.get("data")}"'
    )


def _verified_content(data: bytes, verification: Mapping[str, Any]) -> Any:
    capture: list[str] = []
    if _looks_like_json(data):
        try:
            parsed = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            parsed = None
        if parsed is not None:
            if is_data_authentic(parsed, verification, capture) or is_data_authentic(
                data, verification, capture
            ):
                return parsed
            raise _hash_mismatch(capture, verification)
    if is_data_authentic(data, verification, capture):
        return data
    raise _hash_mismatch(capture, verification)


def _fetch_entry(
    entry: DecodedEntry, fetcher: ContentFetcher, gateway: str
) -> DecodedEntry:
    value = entry.value
    if isinstance(value, str):
        raise ValueContentError(
            f"Value of key: {entry.name} ({value}) is string but valueContent expects an object with url key."
        )
    if not value:
        raise ValueContentError(f"Value of key: {entry.name} is empty")
    if isinstance(value, list):
        raise ValueContentError(
            f"Value of key: {entry.name} is a list but valueContent expects an object with url key."
        )

    url = patch_ipfs_url(value["url"], gateway)
    data = _decode_data_url(url)
    if data is None:
        if UNVERIFIABLE_URL_RE.search(url):
            return entry
        try:
            data = fetcher.fetch(url)
        except ERC725YError:
            raise
        except Exception as exc:
            raise ProviderError(f"Could not fetch {url}: {exc}") from exc
    return replace(entry, value=_verified_content(data, value.get("verification") or {}))


def _is_url_entry(entry: SchemaEntry) -> bool:
    return isinstance(entry.value_content, NamedContent) and entry.value_content.tag in URL_CONTENT_TAGS


def fetch_data(
    source: DataSource,
    fetcher: ContentFetcher,
    schemas: Sequence[SchemaEntry],
    key_names: Optional[Sequence[KeyNameInput]] = None,
    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY,
) -> list[DecodedEntry]:
    """Like `get_data`, then fetch and verify the content behind URL values.

    A failing entry keeps its place with `value=None` and `error` set.
    """
    decoded = get_data(source, schemas, key_names)
    by_key = {entry.key: entry for entry in _requested_entries(schemas, key_names)}
    out = []
    for entry in decoded:
        schema_entry = by_key.get(entry.key)
        if schema_entry is None or not _is_url_entry(schema_entry):
            out.append(entry)
            continue
        try:
            out.append(_fetch_entry(entry, fetcher, ipfs_gateway))
        except ERC725YError as exc:
            error = ProviderError(f"Value of key: {entry.name} has an error: {exc}")
            error.__cause__ = exc
            logger.warning("%s", error)
            out.append(replace(entry, value=None, error=error))
    return out


def supports_interface(source: DataSource, interface_id_or_name: str) -> bool:
    """Ask `source` about an interface ID or a known standard name like `LSP0ERC725Account`."""
    interface_id = resolve_interface_id(interface_id_or_name)
    try:
        return bool(source.supports_interface(interface_id))
    except NotImplementedError as exc:
        raise ProviderError(f"Data source {type(source).__name__} cannot check interfaces") from exc
