# SPDX-License-Identifier: MIT
"""Storage drivers for the expiring cache."""

from .base import StorageDriver, UpdateCallback
from .memory import MemoryStorageDriver, MemoryStore


__all__ = [
    "MemoryStorageDriver",
    "MemoryStore",
    "StorageDriver",
    "UpdateCallback",
]
