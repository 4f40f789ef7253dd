"""Client configuration: frozen defaults and validated construction options."""

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from common.constants import (
    BRIDGE_MAX_RETRIES,
    BRIDGE_RETRY_BACKOFF_MULTIPLIER,
    BRIDGE_TIMEOUT_SECONDS,
    DEFAULT_BRIDGE_URL,
    DEFAULT_SHARD_PROTOCOL,
    DEFAULT_STORE_PATH,
    POINTER_PAGE_SIZE,
    STORE_KIND_FS,
    STORE_KIND_MEMORY,
)
from common.exceptions import ConfigError


DEFAULT_CLIENT_CONFIG: Mapping[str, Any] = MappingProxyType({
    "bridge": DEFAULT_BRIDGE_URL,
    "protocol": DEFAULT_SHARD_PROTOCOL,
    "timeout": BRIDGE_TIMEOUT_SECONDS,
    "max_retries": BRIDGE_MAX_RETRIES,
    "retry_backoff_multiplier": BRIDGE_RETRY_BACKOFF_MULTIPLIER,
    "pointer_page_size": POINTER_PAGE_SIZE,
    "store": STORE_KIND_MEMORY,
    "store_path": DEFAULT_STORE_PATH,
    "bridge_user": None,
    "bridge_password": None,
})


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings for a Client and the bridge gateway it owns.

    Attributes:
        bridge: Bridge API base URL
        protocol: Scheme used to pull shards from farmers
        timeout: Bridge request timeout in seconds
        max_retries: Retries for bridge 5xx and network failures
        retry_backoff_multiplier: Base of the exponential retry delay
        pointer_page_size: Pointers requested per bridge call
        store: Default chunk store kind ('memory' or 'fs')
        store_path: Root directory for 'fs' stores
        bridge_user: Optional bridge account for basic auth
        bridge_password: Optional bridge password for basic auth
    """
    bridge: str = DEFAULT_BRIDGE_URL
    protocol: str = DEFAULT_SHARD_PROTOCOL
    timeout: float = BRIDGE_TIMEOUT_SECONDS
    max_retries: int = BRIDGE_MAX_RETRIES
    retry_backoff_multiplier: float = BRIDGE_RETRY_BACKOFF_MULTIPLIER
    pointer_page_size: int = POINTER_PAGE_SIZE
    store: str = STORE_KIND_MEMORY
    store_path: Optional[str] = DEFAULT_STORE_PATH
    bridge_user: Optional[str] = None
    bridge_password: Optional[str] = None

    def __post_init__(self):
        for name in ("bridge", "protocol"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got {type(value).__name__}")
            if not value:
                raise ConfigError(f"{name} must not be empty")

        for name in ("timeout", "retry_backoff_multiplier"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{name} must be a positive number")

        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int) or self.max_retries < 0:
            raise ConfigError("max_retries must be a non-negative integer")

        if (
            isinstance(self.pointer_page_size, bool)
            or not isinstance(self.pointer_page_size, int)
            or self.pointer_page_size < 1
        ):
            raise ConfigError("pointer_page_size must be a positive integer")

        if self.store not in (STORE_KIND_MEMORY, STORE_KIND_FS):
            raise ConfigError(f"store must be '{STORE_KIND_MEMORY}' or '{STORE_KIND_FS}', got {self.store!r}")
        if self.store == STORE_KIND_FS and not self.store_path:
            raise ConfigError("store_path is required when store is 'fs'")

        if (self.bridge_user is None) != (self.bridge_password is None):
            raise ConfigError("bridge_user and bridge_password must be given together")

    @classmethod
    def from_options(cls, options: Union[None, Mapping[str, Any], "ClientConfig"] = None) -> "ClientConfig":
        """
        Merge caller options over DEFAULT_CLIENT_CONFIG.

        Args:
            options: None, a mapping of option names, or a ClientConfig

        Returns:
            Validated ClientConfig

        Raises:
            ConfigError: If options is not a mapping, names an unknown option,
                or holds an invalid value
        """
        if options is None:
            return cls(**DEFAULT_CLIENT_CONFIG)
        if isinstance(options, ClientConfig):
            return options
        if not isinstance(options, Mapping):
            raise ConfigError("Client options must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ConfigError(f"Unknown client options: {', '.join(sorted(unknown))}")

        merged = dict(DEFAULT_CLIENT_CONFIG)
        for key, value in options.items():
            if value is not None:
                merged[key] = value
        return cls(**merged)
