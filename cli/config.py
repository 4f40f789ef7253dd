"""Configuration file management for the bridgefetch CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import Any

from common.config import ClientConfig
from common.constants import (
    BRIDGE_MAX_RETRIES,
    BRIDGE_RETRY_BACKOFF_MULTIPLIER,
    BRIDGE_TIMEOUT_SECONDS,
    DEFAULT_BRIDGE_URL,
    DEFAULT_SHARD_PROTOCOL,
    STORE_KIND_FS,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "bridge": os.environ.get("BRIDGEFETCH_BRIDGE_URL", DEFAULT_BRIDGE_URL),
        "protocol": os.environ.get("BRIDGEFETCH_PROTOCOL", DEFAULT_SHARD_PROTOCOL),
        "timeout": BRIDGE_TIMEOUT_SECONDS,
        "max_retries": BRIDGE_MAX_RETRIES,
        "retry_backoff_multiplier": BRIDGE_RETRY_BACKOFF_MULTIPLIER,
        "store": STORE_KIND_FS,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.bridgefetch/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.config_path.exists():
            config = self.DEFAULT_CONFIG.copy()
            self._write(config)
            return config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be a JSON object")
        except (json.JSONDecodeError, ValueError, OSError) as e:
            backup_path = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Config file {self.config_path} is unreadable ({e}); backing up to {backup_path}")
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.error(f"Could not back up config file: {copy_error}")
            return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        config.update(data)
        return config

    def _write(self, data: dict) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write config file {self.config_path}: {e}")

    def save(self) -> None:
        """Save current configuration to file."""
        self._write(self.data)

    def get_store_path(self) -> str:
        """
        Get the chunk directory used by the 'fs' store.

        Returns:
            Path string, defaulting to a 'chunks' directory next to the config file
        """
        return self.data.get('store_path') or str(self.config_path.parent / 'chunks')

    def get_client_options(self) -> dict[str, Any]:
        """
        Get the options to build a Client with.

        Returns:
            Mapping of ClientConfig fields found in the config file
        """
        options = {key: self.data[key] for key in ClientConfig.__dataclass_fields__ if key in self.data}
        options['store_path'] = self.get_store_path()
        return options
