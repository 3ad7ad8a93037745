"""LSP6 permission bitmasks: encode, decode and check."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Union

from erc725y.errors import PermissionsError
from erc725y.protocol.hexutil import is_hex_strict, strip_0x

PERMISSION_NAMES = (
    "CHANGEOWNER",
    "ADDCONTROLLER",
    "EDITPERMISSIONS",
    "ADDEXTENSIONS",
    "CHANGEEXTENSIONS",
    "ADDUNIVERSALRECEIVERDELEGATE",
    "CHANGEUNIVERSALRECEIVERDELEGATE",
    "REENTRANCY",
    "SUPER_TRANSFERVALUE",
    "TRANSFERVALUE",
    "SUPER_CALL",
    "CALL",
    "SUPER_STATICCALL",
    "STATICCALL",
    "SUPER_DELEGATECALL",
    "DELEGATECALL",
    "DEPLOY",
    "SUPER_SETDATA",
    "SETDATA",
    "ENCRYPT",
    "DECRYPT",
    "SIGN",
    "EXECUTE_RELAY_CALL",
)
ALL_PERMISSIONS = "ALL_PERMISSIONS"
# every defined bit except REENTRANCY, SUPER_DELEGATECALL and DELEGATECALL
ALL_PERMISSIONS_MASK = 0x7F3F7F


def _as_bytes32(number: int) -> str:
    return "0x" + format(number, "064x")


PERMISSION_BITS = MappingProxyType(
    {
        **{name: 1 << bit for bit, name in enumerate(PERMISSION_NAMES)},
        ALL_PERMISSIONS: ALL_PERMISSIONS_MASK,
    }
)
LSP6_DEFAULT_PERMISSIONS = MappingProxyType(
    {name: _as_bytes32(mask) for name, mask in PERMISSION_BITS.items()}
)

Permissions = Mapping[str, bool]


def _parse_mask(value: str, message: str) -> int:
    if not is_hex_strict(value):
        raise PermissionsError(message)
    body = strip_0x(value)
    return int(body, 16) if body else 0


def encode_permissions(permissions: Permissions) -> str:
    """Encode a `{name: bool}` mapping into a 32-byte bitmask.

    `ALL_PERMISSIONS` is applied first so individual flags can refine it:
    `{"ALL_PERMISSIONS": True, "CHANGEOWNER": False}` grants everything but
    CHANGEOWNER. Names left out of `permissions` are not set.
    """
    unknown = [name for name in permissions if name not in PERMISSION_BITS]
    if unknown:
        raise PermissionsError(f"Unknown permission name(s): {', '.join(unknown)}")
    order = [ALL_PERMISSIONS] + [name for name in permissions if name != ALL_PERMISSIONS]
    mask = 0
    for name in order:
        if name not in permissions:
            continue
        if permissions[name]:
            mask |= PERMISSION_BITS[name]
        else:
            mask &= ~PERMISSION_BITS[name]
    return _as_bytes32(mask)


def decode_permissions(permission_hex: str) -> dict[str, bool]:
    """Decode a bitmask into every known flag plus ALL_PERMISSIONS."""
    mask = _parse_mask(permission_hex, f"Invalid permission hex string: {permission_hex}")
    return {name: mask & bits == bits for name, bits in PERMISSION_BITS.items()}


def map_permission(permission: str) -> Optional[str]:
    """Known name or hex string -> bytes32 hex mask, None otherwise."""
    if permission in LSP6_DEFAULT_PERMISSIONS:
        return LSP6_DEFAULT_PERMISSIONS[permission]
    if is_hex_strict(permission):
        return permission
    return None


def check_permissions(required: Union[str, Sequence[str]], granted: str) -> bool:
    """True when `granted` holds every permission in `required`."""
    granted_mask = _parse_mask(
        granted, "Invalid grantedPermissions string. It must be a valid 32-byte hex string."
    )
    tokens = [required] if isinstance(required, str) else list(required)
    masks = []
    for token in tokens:
        mapped = map_permission(token) if isinstance(token, str) else None
        if mapped is None:
            raise PermissionsError(
                f"Invalid permission string: {token}. It must be a valid 32-byte hex string "
                "or a known permission name."
            )
        masks.append(_parse_mask(mapped, f"Invalid permission string: {token}."))
    return all(granted_mask & mask == mask for mask in masks)
