# SPDX-License-Identifier: MIT
"""Expiring key/value cache mirrored to a storage driver."""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Iterable
from datetime import datetime, timedelta
from typing import Any, TypeVar

from .config import CacheSettings, LogMapping, get_config_manager
from .constants import DEFAULT_WRITE_LOCK_SECONDS
from .drivers.base import StorageDriver
from .enums import CacheEvent, HydrationState, Operation
from .events import EventEmitter, Listener, ListenerHandle
from .exceptions import CacheClosedError, HydrationError, StoreError
from .hydration import HydrationGate
from .logging_config import get_detail_logger
from .models import CacheEntry, Snapshot
from .policy import collect_expired, store_required


T = TypeVar("T")


class ExpireCache:
    """Async cache with per-entry expiry, persisted through a ``StorageDriver``.

    The driver is read once (lazily on first access, or through ``init``) and
    written in full after every mutation. Read operations evict expired
    entries and persist the eviction only when the driver's bandwidth tier is
    cheap enough for that operation. Snapshots pushed by the driver are
    merged into memory unless they arrive within the write-lock window that
    follows one of our own stores.

    Example:
        >>> cache = ExpireCache("sessions", MemoryStorageDriver())
        >>> await cache.set("token", "abc", expires=datetime.now() + timedelta(minutes=5))
        >>> await cache.get("token")
        'abc'
    """

    def __init__(
        self,
        name: str,
        driver: StorageDriver,
        *,
        default_ttl: float | timedelta | None = None,
        log_mapping: LogMapping | None = None,
        logger: logging.Logger | None = None,
        write_lock_seconds: float = DEFAULT_WRITE_LOCK_SECONDS,
    ) -> None:
        """Create a cache bound to ``driver``.

        Args:
            name: Diagnostic name used in log messages
            driver: Storage driver used for hydrate/store
            default_ttl: Lifetime (seconds or timedelta) applied by ``set``
                when no explicit expiry is given
            log_mapping: Operations to trace on the logger
            logger: Logger for traces, defaults to the detail logger
            write_lock_seconds: Grace period after a store during which
                driver updates are ignored as echoes of that store
        """
        self.name = name
        self._driver = driver
        self._cache: Snapshot = {}
        self._default_ttl = (
            default_ttl.total_seconds()
            if isinstance(default_ttl, timedelta)
            else default_ttl
        )
        self._log_map = log_mapping or LogMapping()
        self._logger = logger or get_detail_logger()
        self._write_lock_seconds = write_lock_seconds
        self._is_writing = False
        self._writes_in_flight = 0
        self._lock_release: asyncio.TimerHandle | None = None
        self._closed = False
        self._driver_initialized = False
        self._hydration_swept = False
        self.events: EventEmitter[CacheEvent] = EventEmitter()
        self._hydration = HydrationGate(self._hydrate)
        self._update_handle = driver.on_update(self._handle_update)

    @classmethod
    def from_config(
        cls,
        driver: StorageDriver,
        settings: CacheSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> "ExpireCache":
        """Build a cache from settings, defaulting to the loaded configuration."""
        if settings is None:
            settings = get_config_manager().get_cache_settings()
        return cls(
            settings.name,
            driver,
            default_ttl=settings.default_ttl_seconds,
            log_mapping=settings.log,
            logger=logger,
            write_lock_seconds=settings.write_lock_seconds,
        )

    @property
    def driver(self) -> StorageDriver:
        return self._driver

    @property
    def state(self) -> HydrationState:
        return self._hydration.state

    @property
    def is_writing(self) -> bool:
        return self._is_writing

    @property
    def closed(self) -> bool:
        return self._closed

    # Listeners

    def on(self, event: CacheEvent, listener: Listener) -> ListenerHandle[CacheEvent]:
        return self.events.on(event, listener)

    def off(self, handle: ListenerHandle[CacheEvent]) -> bool:
        return self.events.off(handle)

    def on_clear(self, listener: Listener) -> ListenerHandle[CacheEvent]:
        """Register a listener receiving the key -> value pairs removed by
        ``clear``, ``delete`` or expiry eviction."""
        return self.events.on(CacheEvent.CLEAR, listener)

    # Lifecycle

    async def init(self) -> None:
        """Initialize the driver and hydrate eagerly.

        The driver's ``init`` runs only on the first call; later calls just
        make sure the cache is hydrated.
        """
        self._check_open()
        if not self._driver_initialized:
            self._log(Operation.INIT, "init")
            self._driver_initialized = True
            await self._driver.init()
        await self._ensure_hydrated()

    async def close(self) -> None:
        """Unload the driver. Every later operation raises CacheClosedError."""
        if self._closed:
            return
        self._log(Operation.CLOSE, "close")
        self._closed = True
        self._driver.remove_update_listener(self._update_handle)
        if self._lock_release is not None:
            self._lock_release.cancel()
            self._lock_release = None
        self._is_writing = False
        await self._driver.unload()

    async def __aenter__(self) -> "ExpireCache":
        await self.init()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # Data access

    async def get(self, key: str) -> Any | None:
        await self._ensure_hydrated()
        self._log(Operation.GET, f"get with key: '{key}'")
        await self._clean_expired(Operation.GET)
        await self.events.emit(CacheEvent.GET, key)
        entry = self._cache.get(key)
        return None if entry is None else entry.value

    async def set(self, key: str, value: Any, expires: datetime | None = None) -> None:
        """Store ``value`` under ``key`` and persist the cache.

        Args:
            key: Cache key
            value: Payload
            expires: Absolute expiry; the default TTL applies when omitted
        """
        await self._ensure_hydrated()
        expires_at = self._resolve_expiry(expires)
        self._log(Operation.SET, f"set key: '{key}', expires_at: {expires_at}")
        self._cache[key] = CacheEntry(value=value, expires_at=expires_at)
        await self.events.emit(CacheEvent.SET, key, value, expires_at)
        await self._persist_mutation(Operation.SET)

    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if it was present."""
        await self._ensure_hydrated()
        self._log(Operation.DELETE, f"delete key: '{key}'")
        entry = self._cache.pop(key, None)
        if entry is None:
            return False
        await self._persist_mutation(Operation.DELETE, {key: entry.value})
        return True

    async def has(self, key: str) -> bool:
        await self._ensure_hydrated()
        self._log(Operation.HAS, f"has key: '{key}'")
        await self._clean_expired(Operation.HAS)
        await self.events.emit(CacheEvent.HAS, key)
        return key in self._cache

    async def expires(self, key: str) -> datetime | None:
        """Get the expiry of ``key`` as an aware UTC datetime, if it has one."""
        await self._ensure_hydrated()
        self._log(Operation.EXPIRES, f"get expire key: '{key}'")
        await self._clean_expired(Operation.EXPIRES)
        entry = self._cache.get(key)
        return None if entry is None else entry.expires_datetime

    async def clear(self) -> None:
        """Remove every entry and persist the empty cache."""
        await self._ensure_hydrated()
        self._log(Operation.CLEAR, "clear")
        removed = {key: entry.value for key, entry in self._cache.items()}
        self._cache.clear()
        await self._store()
        await self.events.emit(CacheEvent.CLEAR, removed)

    async def size(self) -> int:
        """Count live entries. Expired entries are swept before counting."""
        await self._ensure_hydrated()
        await self._clean_expired(Operation.SIZE)
        self._log(Operation.SIZE, f"size: {len(self._cache)}")
        return len(self._cache)

    def entries(self) -> AsyncIterator[tuple[str, Any]]:
        """Iterate over (key, value) pairs.

        Example:
            >>> async for key, value in cache.entries():
            ...     print(key, value)
        """
        self._log(Operation.ENTRIES, "entries")
        return self._iterate(
            Operation.ENTRIES,
            lambda: [(key, entry.value) for key, entry in self._cache.items()],
        )

    def keys(self) -> AsyncIterator[str]:
        self._log(Operation.KEYS, "keys")
        return self._iterate(Operation.KEYS, lambda: list(self._cache))

    def values(self) -> AsyncIterator[Any]:
        self._log(Operation.VALUES, "values")
        return self._iterate(
            Operation.VALUES, lambda: [entry.value for entry in self._cache.values()]
        )

    async def _iterate(
        self, operation: Operation, build: Callable[[], Iterable[T]]
    ) -> AsyncIterator[T]:
        await self._ensure_hydrated()
        await self._clean_expired(operation)
        for item in build():
            yield item

    # Synchronization

    def _check_open(self) -> None:
        if self._closed:
            raise CacheClosedError(self.name, self._driver.name)

    async def _ensure_hydrated(self) -> None:
        self._check_open()
        await self._hydration.ensure()
        if not self._hydration_swept:
            await self._sweep_after_hydration()

    async def _hydrate(self) -> None:
        self._log(Operation.HYDRATE, "hydrate")
        try:
            snapshot = await self._driver.hydrate()
            if snapshot is not None:
                self._rebuild(snapshot)
        except Exception as e:
            raise HydrationError(
                f"Failed to hydrate cache '{self.name}' from driver "
                f"'{self._driver.name}': {e}",
                self._driver.name,
            ) from e

    async def _sweep_after_hydration(self) -> None:
        """Evict entries that expired while stored, once per hydration.

        Runs outside the hydration task so clear listeners may call back
        into the cache. A failed store is logged and leaves the cache
        hydrated.
        """
        self._hydration_swept = True
        if not store_required(Operation.HYDRATE, self._driver.bandwidth):
            return
        removed = collect_expired(self._cache, time.time())
        if not removed:
            return
        self._log(Operation.CLEAN_EXPIRED, f"expired count: {len(removed)}")
        try:
            await self._store()
        except StoreError as e:
            self._logger.exception(
                f"ExpireCache[{self.name}]: failed to store after hydration: {e}"
            )
        await self.events.emit(CacheEvent.CLEAR, removed)

    def _rebuild(self, snapshot: Snapshot) -> None:
        self._cache = {
            key: CacheEntry.model_validate(entry) for key, entry in snapshot.items()
        }
        self._log(Operation.REBUILD, f"rebuild cache map: size={len(self._cache)}")

    async def _handle_update(self, snapshot: Snapshot | None) -> None:
        if snapshot is None or self._closed:
            return
        if self._is_writing:
            self._log(Operation.UPDATE, "update ignored while writing")
            return
        if self._hydration.state is not HydrationState.HYDRATED:
            # Hydration will read the same durable state
            self._log(Operation.UPDATE, "update ignored before hydration")
            return
        try:
            if self._merge(snapshot):
                await self._persist_mutation(Operation.UPDATE)
        except Exception as e:
            self._logger.exception(
                f"ExpireCache[{self.name}]: failed to merge external update: {e}"
            )

    def _merge(self, snapshot: Snapshot) -> bool:
        modified = False
        for key, incoming in snapshot.items():
            entry = CacheEntry.model_validate(incoming)
            current = self._cache.get(key)
            if current is None or current.expires_at != entry.expires_at:
                self._cache[key] = entry
                modified = True
        self._log(Operation.UPDATE, f"update merged: modified={modified}")
        return modified

    # Expiry and store policy

    async def _clean_expired(self, operation: Operation) -> None:
        removed = collect_expired(self._cache, time.time())
        if not removed:
            return
        self._log(Operation.CLEAN_EXPIRED, f"expired count: {len(removed)}")
        if store_required(operation, self._driver.bandwidth):
            await self._store()
        await self.events.emit(CacheEvent.CLEAR, removed)

    async def _persist_mutation(
        self, operation: Operation, removed: dict[str, Any] | None = None
    ) -> None:
        """Sweep after a direct mutation, store once, then report removals."""
        removed = dict(removed or {})
        expired = collect_expired(self._cache, time.time())
        if expired:
            self._log(Operation.CLEAN_EXPIRED, f"expired count: {len(expired)}")
            removed.update(expired)
        if store_required(operation, self._driver.bandwidth):
            await self._store()
        if removed:
            await self.events.emit(CacheEvent.CLEAR, removed)

    async def _store(self) -> None:
        self._log(Operation.STORE, f"store: size={len(self._cache)}")
        self._acquire_write_lock()
        try:
            await self._driver.store(dict(self._cache))
        except Exception as e:
            raise StoreError(
                f"Failed to store cache '{self.name}' to driver "
                f"'{self._driver.name}': {e}",
                self._driver.name,
            ) from e
        finally:
            self._schedule_write_lock_release()

    def _acquire_write_lock(self) -> None:
        self._writes_in_flight += 1
        self._is_writing = True
        if self._lock_release is not None:
            self._lock_release.cancel()
            self._lock_release = None

    def _schedule_write_lock_release(self) -> None:
        # Heuristic: drivers do not acknowledge their own echo, so the lock
        # is held for a fixed window after the last store finished
        self._writes_in_flight -= 1
        if self._writes_in_flight == 0 and not self._closed:
            self._lock_release = asyncio.get_running_loop().call_later(
                self._write_lock_seconds, self._release_write_lock
            )

    def _release_write_lock(self) -> None:
        self._lock_release = None
        if self._writes_in_flight == 0:
            self._is_writing = False

    def _resolve_expiry(self, expires: datetime | None) -> float | None:
        if expires is not None:
            return expires.timestamp()
        if self._default_ttl is not None:
            return time.time() + self._default_ttl
        return None

    def _log(self, operation: Operation, message: str) -> None:
        if self._log_map.is_enabled(operation):
            self._logger.debug(f"ExpireCache[{self.name}]: {message}")
