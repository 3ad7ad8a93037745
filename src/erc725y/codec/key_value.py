"""Composition of valueContent and valueType encodings for a single value."""

from __future__ import annotations

from typing import Any, Optional, Union
import warnings

from erc725y.codec.value_content import (
    LITERAL_MISMATCH,
    decode_value_content,
    encode_value_content,
    natural_value_type,
)
from erc725y.errors import ValueContentError, ValueTypeError
from erc725y.protocol.hexutil import is_hex_strict, strip_0x
from erc725y.protocol.value_types import (
    COMPACT_BYTES_ARRAY,
    bytes_type_size,
    decode_compact_bytes_array,
    decode_value_type,
    encode_value_type,
    int_type_size,
    is_value_type,
    static_width,
)
from erc725y.schema.types import (
    LiteralContent,
    NamedContent,
    TupleContent,
    UnresolvedContent,
    ValueContent,
    parse_value_content,
)


TUPLE_ELEMENT_TYPES = ("address",)


def _is_fixed_numeric_or_bytes(value_type: str) -> bool:
    return int_type_size(value_type) is not None or bytes_type_size(value_type) is not None


def _same_encoding(content: ValueContent, value_type: str) -> bool:
    natural = natural_value_type(content)
    if natural is None:
        return False
    if natural == value_type:
        return True
    return {natural, value_type} <= {"bool", "boolean"}


def _element_type(value_type: str) -> Optional[str]:
    if value_type.endswith(COMPACT_BYTES_ARRAY):
        return value_type[: -len(COMPACT_BYTES_ARRAY)]
    if value_type.endswith("[]"):
        return value_type[:-2]
    return None


# ---------------------------------------------------------------------------
# tuples


def is_tuple_value_type(value_type: str) -> bool:
    return value_type.startswith("(")


def tuple_element_types(value_type: str) -> list[str]:
    if value_type.endswith(COMPACT_BYTES_ARRAY):
        value_type = value_type[: -len(COMPACT_BYTES_ARRAY)]
    if not (value_type.startswith("(") and value_type.endswith(")")):
        raise ValueTypeError(f"Invalid tuple valueType: {value_type}")
    return [part.strip() for part in value_type[1:-1].split(",")]


def _is_tuple_element_type(type_name: str) -> bool:
    if type_name in TUPLE_ELEMENT_TYPES or bytes_type_size(type_name) is not None:
        return True
    int_size = int_type_size(type_name)
    return int_size is not None and not int_size[0]


def validate_tuple(value_type: str, content: ValueContent) -> None:
    """Check that a tuple valueType and valueContent line up."""
    types = tuple_element_types(value_type)
    if not isinstance(content, TupleContent):
        raise ValueContentError(
            f"Invalid tuple for valueType: {value_type} / valueContent: {content}. "
            "valueContent must be a tuple too."
        )
    if len(types) != len(content.parts):
        raise ValueTypeError(
            f"Invalid tuple for valueType: {value_type} / valueContent: {content}. "
            f"They should have the same number of elements. Got: {len(types)} and {len(content.parts)}"
        )
    for type_name in types:
        if not _is_tuple_element_type(type_name):
            raise ValueTypeError(
                f"Invalid tuple for valueType: {value_type} / valueContent: {content}. "
                f"Type: {type_name} is not valid. Valid types are: bytesN, uintN, address"
            )


def is_supported_value_type(value_type: str) -> bool:
    if is_tuple_value_type(value_type):
        try:
            return all(_is_tuple_element_type(part) for part in tuple_element_types(value_type))
        except ValueTypeError:
            return False
    return is_value_type(value_type)


def _encode_single_tuple(content: TupleContent, types: list[str], value: Any) -> str:
    if not isinstance(value, (list, tuple)) or len(value) != len(types):
        raise ValueTypeError(
            f"Can not encode tuple key value: {value}. Expected array of length: {len(types)}"
        )
    encoded = []
    for part, type_name, item in zip(content.parts, types, value):
        hex_value = encode_key_value(part, type_name, item)
        if hex_value is LITERAL_MISMATCH:
            raise ValueContentError(f"Tuple element {item} does not match literal valueContent {part}")
        encoded.append(strip_0x(hex_value))
    return "0x" + "".join(encoded)


def encode_tuple_value(content: TupleContent, value_type: str, value: Any) -> str:
    validate_tuple(value_type, content)
    types = tuple_element_types(value_type)
    if not isinstance(value, (list, tuple)):
        raise ValueTypeError(f"Incorrect value for tuple. Got: {value}, expected array.")
    if value_type.endswith(COMPACT_BYTES_ARRAY) and (not value or isinstance(value[0], (list, tuple))):
        return encode_value_type(
            "bytes" + COMPACT_BYTES_ARRAY,
            [_encode_single_tuple(content, types, item) for item in value],
        )
    return _encode_single_tuple(content, types, value)


def _decode_single_tuple(content: TupleContent, types: list[str], value: str) -> list[Any]:
    widths = [static_width(type_name) or 0 for type_name in types]
    body = strip_0x(value)
    if len(body) != sum(widths) * 2:
        warnings.warn(
            f"Trying to decode a value: {value} which does not match the length of the "
            f"valueType: ({','.join(types)}). Expected {sum(widths)} bytes.",
            stacklevel=3,
        )
        return []
    out = []
    cursor = 0
    for part, type_name, width in zip(content.parts, types, widths):
        out.append(decode_key_value(part, type_name, "0x" + body[cursor : cursor + width * 2]))
        cursor += width * 2
    return out


def decode_tuple_value(content: TupleContent, value_type: str, value: str) -> list[Any]:
    validate_tuple(value_type, content)
    types = tuple_element_types(value_type)
    if value_type.endswith(COMPACT_BYTES_ARRAY):
        return [
            _decode_single_tuple(content, types, entry)
            for entry in decode_compact_bytes_array(value)
        ]
    return _decode_single_tuple(content, types, value)


# ---------------------------------------------------------------------------
# scalars and arrays


def _encode_elements(content: ValueContent, value_type: str, element: str, values: Any) -> Any:
    if not isinstance(values, (list, tuple)):
        raise ValueTypeError(f"Can't encode a non array value for valueType: {value_type}")
    if _same_encoding(content, element):
        return encode_value_type(value_type, list(values))
    items = []
    for item in values:
        encoded = encode_value_content(content, item)
        if encoded is LITERAL_MISMATCH:
            return LITERAL_MISMATCH
        items.append(encoded)
    return encode_value_type(value_type, items)


def _adapt_structural(content: ValueContent, item: Any) -> Any:
    if isinstance(item, bool):
        return item
    if isinstance(item, int):
        if isinstance(content, NamedContent) and content.tag == "Number":
            return str(item)
        return item
    if isinstance(item, str) and is_hex_strict(item):
        return decode_value_content(content, item)
    return item


def _decode_elements(content: ValueContent, value_type: str, element: str, value: str) -> Any:
    items = decode_value_type(value_type, value)
    if items is None:
        return None
    if _same_encoding(content, element):
        if isinstance(content, NamedContent) and content.tag == "Number":
            return [str(item) for item in items]
        return items
    return [_adapt_structural(content, item) for item in items]


def encode_key_value(
    content: Union[ValueContent, str],
    value_type: str,
    value: Any,
    name: Optional[str] = None,
) -> Any:
    """Encode one value with both the content and the structural layer.

    Returns a 0x-hex string, or LITERAL_MISMATCH when a literal valueContent
    does not match `value`.
    """
    content = parse_value_content(content)
    if is_tuple_value_type(value_type) or isinstance(content, TupleContent):
        if not isinstance(content, TupleContent):
            raise ValueContentError(f"valueContent {content} for {name} is not a tuple")
        return encode_tuple_value(content, value_type, value)
    if isinstance(content, UnresolvedContent):
        raise ValueContentError(f"The valueContent '{content}' for {name} is not supported.")
    if not is_value_type(value_type):
        raise ValueTypeError(f'Could not encode valueType: "{value_type}".')
    if isinstance(content, LiteralContent):
        return encode_value_content(content, value)

    element = _element_type(value_type)
    if element is not None:
        return _encode_elements(content, value_type, element, value)
    if isinstance(value, (list, tuple)):
        raise ValueTypeError(f"Incorrect value for valueType {value_type}: got an array")
    if _same_encoding(content, value_type):
        return encode_value_content(content, value)
    size = bytes_type_size(value_type)
    if size is not None and isinstance(content, NamedContent) and content.tag == "Number":
        # numbers stay left-padded inside bytesN
        return encode_value_type(f"uint{size * 8}", value)
    if _is_fixed_numeric_or_bytes(value_type) and not isinstance(value, dict):
        return encode_value_type(value_type, value)
    encoded = encode_value_content(content, value)
    if encoded is LITERAL_MISMATCH or value_type in ("bytes", "string"):
        return encoded
    return encode_value_type(value_type, encoded)


def decode_key_value(
    content: Union[ValueContent, str],
    value_type: str,
    value: Optional[str],
    name: Optional[str] = None,
) -> Any:
    """Inverse of `encode_key_value`; `None` and `0x` decode to None."""
    content = parse_value_content(content)
    if is_tuple_value_type(value_type) or isinstance(content, TupleContent):
        if not isinstance(content, TupleContent):
            raise ValueContentError(f"valueContent {content} for {name} is not a tuple")
        if value is None or value == "0x":
            return None
        return decode_tuple_value(content, value_type, value)
    if isinstance(content, UnresolvedContent):
        raise ValueContentError(f'The valueContent "{content}" for "{name}" is not supported.')
    if not is_value_type(value_type):
        raise ValueTypeError(f'Could not decode valueType: "{value_type}".')
    if isinstance(content, LiteralContent):
        return decode_value_content(content, value)
    if value is None or value == "0x":
        return None

    element = _element_type(value_type)
    if element is not None:
        return _decode_elements(content, value_type, element, value)
    if _same_encoding(content, value_type):
        return decode_value_content(content, value)
    if _is_fixed_numeric_or_bytes(value_type):
        return _adapt_structural(content, decode_value_type(value_type, value))
    return decode_value_content(content, value)
