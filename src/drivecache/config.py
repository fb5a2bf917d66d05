# SPDX-License-Identifier: MIT
"""Configuration management for drivecache."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CACHE_NAME,
    DEFAULT_WRITE_LOCK_SECONDS,
    ENV_PREFIX,
)
from .enums import Operation


_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


class LogMapping(BaseModel):
    """Per-operation switches for cache trace logging (all off by default)."""

    get: bool = False
    set: bool = False
    delete: bool = False
    clear: bool = False
    hydrate: bool = False
    store: bool = False
    clean_expired: bool = False
    rebuild: bool = False
    update: bool = False
    init: bool = False
    close: bool = False
    size: bool = False
    has: bool = False
    expires: bool = False
    entries: bool = False
    keys: bool = False
    values: bool = False

    @classmethod
    def all_enabled(cls) -> "LogMapping":
        return cls(**{operation.value: True for operation in Operation})

    def is_enabled(self, operation: Operation) -> bool:
        return bool(getattr(self, operation.value))


class CacheSettings(BaseModel):
    """Settings for a single expiring cache."""

    name: str = Field(DEFAULT_CACHE_NAME, description="Diagnostic cache name")
    default_ttl_seconds: float | None = Field(
        None, gt=0, description="TTL applied by set() when no expiry is given"
    )
    write_lock_seconds: float = Field(
        DEFAULT_WRITE_LOCK_SECONDS,
        ge=0.0,
        description="Grace period ignoring driver updates after a store",
    )
    log: LogMapping = LogMapping()


class AppConfig(BaseModel):
    """Main application configuration."""

    cache: CacheSettings = CacheSettings()


class ConfigManager:
    """Manages configuration from files and environment."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or self._find_config_file()
        self._config: AppConfig | None = None

    def _find_config_file(self) -> Path | None:
        """Find configuration file in standard locations."""
        search_paths = [
            Path.cwd() / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
            Path.cwd() / "config" / CONFIG_FILE_NAME,
            Path.cwd() / CONFIG_FILE_NAME,
            Path.home() / ".config" / "drivecache" / CONFIG_FILE_NAME,
            Path("/etc/drivecache") / CONFIG_FILE_NAME,
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def load_config(self) -> AppConfig:
        """Load configuration from file or create default."""
        if self._config is not None:
            return self._config

        default_config = self.get_default_config()

        if self.config_path and self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
            config_data = self._deep_merge_configs(default_config, file_config)
        else:
            config_data = default_config

        config_data = self._apply_env_overrides(config_data)

        self._config = AppConfig(**config_data)
        return self._config

    def _deep_merge_configs(
        self, default_config: dict[str, Any], override_config: dict[str, Any]
    ) -> dict[str, Any]:
        """Recursively merge override config into default config.

        Nested sections such as ``cache.log`` may be given partially; keys
        missing from the override keep their default value.

        Example:
            Default: {"cache": {"name": "default", "log": {"get": False, "set": False}}}
            Override: {"cache": {"log": {"set": True}}}
            Result: {"cache": {"name": "default", "log": {"get": False, "set": True}}}
        """
        result = copy.deepcopy(default_config)

        for key, value in override_config.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config_data: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config.

        Supported variables:
            DRIVECACHE_CACHE_NAME=sessions
            DRIVECACHE_CACHE_DEFAULT_TTL_SECONDS=300
            DRIVECACHE_CACHE_WRITE_LOCK_SECONDS=0.2
            DRIVECACHE_LOG_STORE=true
        """
        cache_data = config_data.setdefault("cache", {})
        log_data = cache_data.setdefault("log", {})
        operations = {operation.value for operation in Operation}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            config_key = key[len(ENV_PREFIX) :].lower()

            if config_key == "cache_name":
                cache_data["name"] = value
            elif config_key == "cache_default_ttl_seconds":
                cache_data["default_ttl_seconds"] = value or None
            elif config_key == "cache_write_lock_seconds":
                cache_data["write_lock_seconds"] = value
            elif config_key.startswith("log_"):
                operation = config_key[len("log_") :]
                if operation in operations:
                    log_data[operation] = value.strip().lower() in _TRUE_VALUES

        return config_data

    def get_cache_settings(self) -> CacheSettings:
        """Get the cache section of the configuration."""
        return self.load_config().cache

    def get_complete_config_dict(self) -> dict[str, Any]:
        """Get the complete configuration as a dictionary for display."""
        config = self.load_config()
        return config.model_dump()

    def show_config(self) -> str:
        """Show the complete configuration in YAML format.

        Returns:
            YAML formatted configuration string
        """
        config_dict = self.get_complete_config_dict()
        return yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    def get_default_config(self) -> dict[str, Any]:
        """Get the default configuration as a plain dictionary."""
        return AppConfig().model_dump()

    def create_default_config(self, output_path: Path) -> None:
        """Write the default configuration to ``output_path``."""
        default_config = self.get_default_config()

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)


_config_manager_instance: ConfigManager | None = None


def get_config_manager(config_path: Path | None = None) -> ConfigManager:
    """Get or create the global config manager instance.

    Args:
        config_path: Optional path to config file (only used on first call)

    Returns:
        The global ConfigManager instance
    """
    global _config_manager_instance
    if _config_manager_instance is None:
        _config_manager_instance = ConfigManager(config_path)
    return _config_manager_instance


def set_config_manager(manager: ConfigManager) -> None:
    """Set the config manager instance (primarily for testing)."""
    global _config_manager_instance
    _config_manager_instance = manager


def reset_config_manager() -> None:
    """Reset the config manager instance (primarily for testing)."""
    global _config_manager_instance
    _config_manager_instance = None
