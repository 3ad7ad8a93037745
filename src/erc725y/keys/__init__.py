"""Key name classification, key derivation and key inversion."""

from erc725y.keys.key_name import (
    DynamicKeyPart,
    KeyNameLayout,
    KeyShape,
    classify_key_name,
    generate_dynamic_key_name,
    is_dynamic_key_name,
)
from erc725y.keys.encode import encode_array_key, encode_dynamic_key_part, encode_key_name
from erc725y.keys.decode import decode_mapping_key

__all__ = [
    "DynamicKeyPart",
    "KeyNameLayout",
    "KeyShape",
    "classify_key_name",
    "generate_dynamic_key_name",
    "is_dynamic_key_name",
    "encode_array_key",
    "encode_dynamic_key_part",
    "encode_key_name",
    "decode_mapping_key",
]
