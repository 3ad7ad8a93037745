"""Schema entries; loading lives in `schema.loader`, key lookup in `schema.resolver`."""

from erc725y.schema.types import (
    KeyType,
    LiteralContent,
    NamedContent,
    SchemaEntry,
    TupleContent,
    UnresolvedContent,
    ValueContent,
    parse_value_content,
)

__all__ = [
    "KeyType",
    "LiteralContent",
    "NamedContent",
    "SchemaEntry",
    "TupleContent",
    "UnresolvedContent",
    "ValueContent",
    "parse_value_content",
]
