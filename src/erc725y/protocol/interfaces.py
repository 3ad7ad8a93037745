"""ERC165 interface IDs of the ERC725 and LSP standards."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


# LSP smart contracts v0.10.2
INTERFACE_IDS: Mapping[str, str] = MappingProxyType(
    {
        "ERC1271": "0x1626ba7e",
        "ERC725X": "0x7545acac",
        "ERC725Y": "0x629aa694",
        "LSP0ERC725Account": "0x3e89ad98",
        "LSP1UniversalReceiver": "0x6bb56a14",
        "LSP6KeyManager": "0x38bb3cdb",
        "LSP7DigitalAsset": "0xda1f85e4",
        "LSP8IdentifiableDigitalAsset": "0x622e7a01",
        "LSP9Vault": "0x28af17e6",
        "LSP14Ownable2Step": "0x94be5999",
        "LSP17Extendable": "0xa918fa6b",
        "LSP17Extension": "0xcee78b40",
        "LSP20CallVerification": "0x1a0eb6a5",
        "LSP20CallVerifier": "0x480c0ec2",
    }
)

# getData/setData signatures changed across ERC725Y releases.
ERC725Y_INTERFACE_IDS: Mapping[str, str] = MappingProxyType(
    {
        "legacy": "0x2bd57b73",
        "2.0": "0x5a988c0f",
        "3.0": "0x714df77c",
        "5.0": "0x629aa694",
    }
)


def resolve_interface_id(interface_id_or_name: str) -> str:
    """Map a known standard name to its interface ID, pass anything else through."""
    return INTERFACE_IDS.get(interface_id_or_name, interface_id_or_name)
