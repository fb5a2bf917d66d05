# SPDX-License-Identifier: MIT
"""Storage driver contract consumed by the cache."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from ..enums import Bandwidth
from ..events import EventEmitter, ListenerHandle
from ..models import Snapshot


UpdateCallback = Callable[[Snapshot | None], Awaitable[None] | None]

_UPDATE = "update"


class StorageDriver(ABC):
    """Abstract persistence backend for an expiring cache.

    A driver reads and writes whole snapshots and notifies subscribers when
    the backing store changes outside of this process (or echoes its own
    writes, as file watchers usually do).
    """

    def __init__(self, name: str, bandwidth: Bandwidth = Bandwidth.NORMAL) -> None:
        self.name = name
        self.bandwidth = bandwidth
        self._update_listeners: EventEmitter[str] = EventEmitter()

    async def init(self) -> None:
        """Prepare the backend. Optional for drivers with nothing to set up."""
        return None

    @abstractmethod
    async def hydrate(self) -> Snapshot | None:
        """Read the stored snapshot, or None if nothing was stored yet."""
        ...

    @abstractmethod
    async def store(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot in full."""
        ...

    @abstractmethod
    async def unload(self) -> None:
        """Release backend resources."""
        ...

    def on_update(self, callback: UpdateCallback) -> ListenerHandle[str]:
        """Subscribe to snapshots delivered by external changes."""
        return self._update_listeners.on(_UPDATE, callback)

    def remove_update_listener(self, handle: ListenerHandle[str]) -> bool:
        return self._update_listeners.off(handle)

    async def _notify_update(self, snapshot: Snapshot | None) -> None:
        await self._update_listeners.emit(_UPDATE, snapshot)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, bandwidth={self.bandwidth.name})"
