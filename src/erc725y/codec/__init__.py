"""Value content, single value and batch codecs."""

from erc725y.codec.value_content import (
    LITERAL_MISMATCH,
    URLDataToEncode,
    decode_value_content,
    encode_value_content,
)
from erc725y.codec.key_value import decode_key_value, encode_key_value
from erc725y.codec.data import (
    DecodeDataInput,
    DecodedEntry,
    EncodeDataInput,
    EncodedData,
    EncodedEntry,
    decode_data,
    decode_key,
    encode_data,
    encode_key,
    get_schema_element,
)

__all__ = [
    "LITERAL_MISMATCH",
    "URLDataToEncode",
    "decode_value_content",
    "encode_value_content",
    "decode_key_value",
    "encode_key_value",
    "DecodeDataInput",
    "DecodedEntry",
    "EncodeDataInput",
    "EncodedData",
    "EncodedEntry",
    "decode_data",
    "decode_key",
    "encode_data",
    "encode_key",
    "get_schema_element",
]
