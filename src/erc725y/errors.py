"""Custom exceptions for the ERC725Y schema codec."""

from __future__ import annotations


class ERC725YError(Exception):
    """Base exception for ERC725Y codec failures."""


class SchemaError(ERC725YError):
    """Raised when a schema definition is invalid."""


class SchemaNotFoundError(ERC725YError):
    """Raised when no schema entry matches a name or key."""


class KeyNameError(ERC725YError, ValueError):
    """Raised when a key name or its dynamic parts cannot be encoded."""


class KeyDecodingError(ERC725YError, ValueError):
    """Raised when an encoded key cannot be decoded."""


class ValueTypeError(ERC725YError, ValueError):
    """Raised when a valueType is unknown or a value does not fit it."""


class ValueContentError(ERC725YError, ValueError):
    """Raised when a valueContent is unknown or a value does not fit it."""


class ArrayParameterError(ERC725YError, ValueError):
    """Raised when array range parameters are invalid."""


class PermissionsError(ERC725YError, ValueError):
    """Raised when a permission token or bitmask is invalid."""


class ProviderError(ERC725YError):
    """Raised when a data source or content fetcher fails."""
