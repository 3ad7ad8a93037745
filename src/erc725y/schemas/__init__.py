"""LSP-2 schemas of the standard LUKSO LSPs, shipped as JSON package data."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from erc725y.errors import SchemaNotFoundError
from erc725y.schema.loader import load_schema_dir, load_schema_file
from erc725y.schema.types import SchemaEntry

SCHEMA_DIR = Path(__file__).parent

LSP_SCHEMA_FILES = {
    "LSP1": "LSP1UniversalReceiverDelegate.json",
    "LSP3": "LSP3ProfileMetadata.json",
    "LSP4": "LSP4DigitalAsset.json",
    "LSP5": "LSP5ReceivedAssets.json",
    "LSP6": "LSP6KeyManager.json",
    "LSP8": "LSP8IdentifiableDigitalAsset.json",
    "LSP9": "LSP9Vault.json",
    "LSP10": "LSP10ReceivedVaults.json",
    "LSP12": "LSP12IssuedAssets.json",
    "LSP17": "LSP17ContractExtension.json",
}


@lru_cache(maxsize=None)
def builtin_schemas() -> tuple[SchemaEntry, ...]:
    """All built-in entries, loaded once."""
    return load_schema_dir(SCHEMA_DIR)


@lru_cache(maxsize=None)
def lsp_schema(standard: str) -> tuple[SchemaEntry, ...]:
    """Entries of one standard, e.g. `lsp_schema("LSP6")`."""
    try:
        filename = LSP_SCHEMA_FILES[standard]
    except KeyError as exc:
        raise SchemaNotFoundError(f"Unknown LSP schema: {standard}. Known: {', '.join(LSP_SCHEMA_FILES)}") from exc
    return load_schema_file(SCHEMA_DIR / filename)


__all__ = ["LSP_SCHEMA_FILES", "SCHEMA_DIR", "builtin_schemas", "lsp_schema"]
