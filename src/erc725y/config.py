"""Runtime configuration read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping, Optional, Union

DEFAULT_IPFS_GATEWAY = "https://api.universalprofile.cloud/ipfs/"

IPFS_GATEWAY_ENV = "ERC725Y_IPFS_GATEWAY"
SCHEMA_DIR_ENV = "ERC725Y_SCHEMA_DIR"
SCHEMA_CACHE_DIR_ENV = "ERC725Y_SCHEMA_CACHE_DIR"
USE_SCHEMA_CACHE_ENV = "ERC725Y_USE_SCHEMA_CACHE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"", "0", "false", "no", "off"}


def _as_path(value: Union[str, Path, None]) -> Optional[Path]:
    if value is None or value == "":
        return None
    return Path(value).expanduser()


@dataclass(frozen=True)
class ERC725Config:
    """Settings of an `ERC725` instance.

    Attributes:
        ipfs_gateway: Gateway used to rewrite `ipfs://` URLs before fetching.
        schema_dir: Optional directory of extra LSP-2 JSON schema files.
        schema_cache_dir: Directory of the persistent schema cache.
        use_schema_cache: Persist provided schemas and load cached ones.
    """

    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    schema_dir: Optional[Path] = None
    schema_cache_dir: Optional[Path] = None
    use_schema_cache: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.ipfs_gateway, str) or not self.ipfs_gateway.strip():
            raise ValueError("ipfs_gateway must be a non-empty string.")
        if not self.ipfs_gateway.startswith(("http://", "https://")):
            raise ValueError(f"ipfs_gateway must be an http(s) URL, got {self.ipfs_gateway}")
        object.__setattr__(self, "schema_dir", _as_path(self.schema_dir))
        object.__setattr__(self, "schema_cache_dir", _as_path(self.schema_cache_dir))
        if not isinstance(self.use_schema_cache, bool):
            raise ValueError("use_schema_cache must be a bool.")

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "ERC725Config":
        env = os.environ if environ is None else environ
        flag = env.get(USE_SCHEMA_CACHE_ENV, "").strip().lower()
        if flag not in _TRUE_VALUES | _FALSE_VALUES:
            raise ValueError(f"{USE_SCHEMA_CACHE_ENV} must be a boolean flag, got {flag!r}")
        return ERC725Config(
            ipfs_gateway=env.get(IPFS_GATEWAY_ENV) or DEFAULT_IPFS_GATEWAY,
            schema_dir=env.get(SCHEMA_DIR_ENV),
            schema_cache_dir=env.get(SCHEMA_CACHE_DIR_ENV),
            use_schema_cache=flag in _TRUE_VALUES,
        )
