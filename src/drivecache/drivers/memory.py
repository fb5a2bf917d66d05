# SPDX-License-Identifier: MIT
"""In-memory storage driver.

Several drivers can share one ``MemoryStore`` to model processes that
persist to the same file or table: every write is announced to all
attached drivers, the writer included.
"""

import asyncio

from ..enums import Bandwidth
from ..logging_config import get_detail_logger
from ..models import Snapshot
from .base import StorageDriver


detail_logger = get_detail_logger()


class MemoryStore:
    """Shared backing store for memory drivers."""

    def __init__(self) -> None:
        self.snapshot: Snapshot | None = None
        self._drivers: set["MemoryStorageDriver"] = set()
        self._pending: set[asyncio.Task[None]] = set()

    def attach(self, driver: "MemoryStorageDriver") -> None:
        self._drivers.add(driver)

    def detach(self, driver: "MemoryStorageDriver") -> None:
        self._drivers.discard(driver)

    def write(self, snapshot: Snapshot, notify: bool = True) -> None:
        """Replace the stored snapshot, announcing it to attached drivers.

        Notifications are delivered on the next loop iterations, after the
        caller regains control, the way a file watcher reports a change.
        Calling this directly simulates a write by a foreign process.
        """
        self.snapshot = dict(snapshot)
        if not notify:
            return
        for driver in list(self._drivers):
            task = asyncio.get_running_loop().create_task(
                driver._notify_update(dict(snapshot))
            )
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    def clear(self) -> None:
        self.snapshot = None

    async def drain(self) -> None:
        """Wait until every scheduled update notification was delivered."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class MemoryStorageDriver(StorageDriver):
    """Driver keeping snapshots in process memory."""

    def __init__(
        self,
        name: str = "MemoryStorageDriver",
        bandwidth: Bandwidth = Bandwidth.NORMAL,
        store: MemoryStore | None = None,
    ) -> None:
        super().__init__(name, bandwidth)
        self.memory_store = store or MemoryStore()
        self.memory_store.attach(self)
        self.hydrate_count = 0
        self.store_count = 0

    async def hydrate(self) -> Snapshot | None:
        self.hydrate_count += 1
        snapshot = self.memory_store.snapshot
        detail_logger.debug(
            f"{self.name}: hydrate ({'empty' if snapshot is None else len(snapshot)})"
        )
        return None if snapshot is None else dict(snapshot)

    async def store(self, snapshot: Snapshot) -> None:
        self.store_count += 1
        detail_logger.debug(f"{self.name}: store {len(snapshot)} entries")
        self.memory_store.write(snapshot)

    async def clear(self) -> None:
        self.memory_store.clear()

    async def unload(self) -> None:
        self.memory_store.detach(self)
