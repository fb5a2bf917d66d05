# SPDX-License-Identifier: MIT
"""Enums for the expiring cache."""

from enum import Enum, IntEnum


class Bandwidth(IntEnum):
    """Cost tier of a driver store.

    Lower tiers are cheaper to write and get flushed eagerly; higher tiers
    skip writes triggered by read-path expiry sweeps.
    """

    VERY_SMALL = 0
    SMALL = 1
    NORMAL = 2
    LARGE = 3


class HydrationState(str, Enum):
    """Lifecycle of the initial driver read."""

    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    HYDRATED = "hydrated"


class CacheEvent(str, Enum):
    """Events emitted by the cache to registered listeners."""

    SET = "set"
    GET = "get"
    HAS = "has"
    CLEAR = "clear"


class Operation(str, Enum):
    """Cache operations that can be traced through the log map."""

    GET = "get"
    SET = "set"
    DELETE = "delete"
    CLEAR = "clear"
    HYDRATE = "hydrate"
    STORE = "store"
    CLEAN_EXPIRED = "clean_expired"
    REBUILD = "rebuild"
    UPDATE = "update"
    INIT = "init"
    CLOSE = "close"
    SIZE = "size"
    HAS = "has"
    EXPIRES = "expires"
    ENTRIES = "entries"
    KEYS = "keys"
    VALUES = "values"
