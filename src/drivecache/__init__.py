# SPDX-License-Identifier: MIT
"""drivecache - expiring async cache mirrored to pluggable storage drivers."""

from importlib.metadata import PackageNotFoundError, version

from .cache import ExpireCache
from .config import CacheSettings, LogMapping
from .drivers import MemoryStorageDriver, MemoryStore, StorageDriver
from .enums import Bandwidth, CacheEvent, HydrationState
from .exceptions import CacheClosedError, CacheError, HydrationError, StoreError
from .models import CacheEntry, Snapshot


__all__: list[str] = [
    "Bandwidth",
    "CacheClosedError",
    "CacheEntry",
    "CacheError",
    "CacheEvent",
    "CacheSettings",
    "ExpireCache",
    "HydrationError",
    "HydrationState",
    "LogMapping",
    "MemoryStorageDriver",
    "MemoryStore",
    "Snapshot",
    "StorageDriver",
    "StoreError",
    "__version__",
]

# Get version from installed package metadata
__version__: str
try:
    __version__ = version("drivecache")
except PackageNotFoundError:
    # Package is not installed, use development fallback
    __version__ = "development"
