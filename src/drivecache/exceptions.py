# SPDX-License-Identifier: MIT
"""Exceptions raised by the expiring cache."""


class CacheError(Exception):
    """Base class for all cache-related exceptions."""

    def __init__(self, message: str, driver_name: str | None = None) -> None:
        self.driver_name = driver_name
        super().__init__(message)


class HydrationError(CacheError):
    """Raised when the driver fails to load the stored snapshot."""

    pass


class StoreError(CacheError):
    """Raised when the driver fails to persist the snapshot."""

    pass


class CacheClosedError(CacheError):
    """Raised when an operation is attempted on a closed cache."""

    def __init__(self, cache_name: str, driver_name: str | None = None) -> None:
        self.cache_name = cache_name
        super().__init__(f"Cache '{cache_name}' is closed", driver_name)
