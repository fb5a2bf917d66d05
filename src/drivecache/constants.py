# SPDX-License-Identifier: MIT
"""Constants used throughout drivecache."""

# Grace period after a store during which driver update notifications are
# treated as the echo of our own write
DEFAULT_WRITE_LOCK_SECONDS: float = 0.1

DEFAULT_CACHE_NAME: str = "default"

# Environment variable prefix for configuration overrides
ENV_PREFIX: str = "DRIVECACHE_"

CONFIG_DIR_NAME: str = ".drivecache"
CONFIG_FILE_NAME: str = "config.yaml"
