# SPDX-License-Identifier: MIT
"""Pytest configuration and shared fixtures."""

import asyncio
import logging

import pytest

import drivecache.cache as cache_mod
from drivecache.config import LogMapping, reset_config_manager
from drivecache.drivers import MemoryStorageDriver, MemoryStore
from drivecache.enums import Bandwidth


# Short grace window so tests can wait it out with a real sleep
TEST_WRITE_LOCK_SECONDS = 0.05


class FakeClock:
    """Replacement for time.time() driven by the test."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SlowHydrateDriver(MemoryStorageDriver):
    """Memory driver whose hydrate blocks until ``release`` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.release = asyncio.Event()

    async def hydrate(self):
        await self.release.wait()
        return await super().hydrate()


class FlakyDriver(MemoryStorageDriver):
    """Memory driver that fails a configurable number of hydrates and stores."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hydrate_failures = 0
        self.store_failures = 0
        self.init_count = 0
        self.unload_count = 0

    async def init(self):
        self.init_count += 1

    async def hydrate(self):
        if self.hydrate_failures > 0:
            self.hydrate_failures -= 1
            self.hydrate_count += 1
            raise ConnectionError("backend unavailable")
        return await super().hydrate()

    async def store(self, snapshot):
        if self.store_failures > 0:
            self.store_failures -= 1
            self.store_count += 1
            raise OSError("disk full")
        await super().store(snapshot)

    async def unload(self):
        self.unload_count += 1
        await super().unload()


@pytest.fixture(autouse=True)
def reset_config():
    """Isolate the global config manager between tests."""
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def clock(monkeypatch):
    """Control the wall clock seen by the cache."""
    fake = FakeClock()
    monkeypatch.setattr(cache_mod.time, "time", fake)
    return fake


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def driver(memory_store):
    """Normal bandwidth memory driver."""
    return MemoryStorageDriver("test-driver", Bandwidth.NORMAL, memory_store)


@pytest.fixture
def write_lock_seconds():
    return TEST_WRITE_LOCK_SECONDS


@pytest.fixture
def slow_driver(memory_store):
    """Driver whose hydrate waits for ``slow_driver.release.set()``."""
    return SlowHydrateDriver("slow", store=memory_store)


@pytest.fixture
def flaky_driver(memory_store):
    """Driver with injectable hydrate and store failures."""
    return FlakyDriver("flaky", store=memory_store)


@pytest.fixture
def test_logger():
    logger = logging.getLogger("tests.drivecache")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def traced_log_mapping():
    return LogMapping.all_enabled()


@pytest.fixture
def clear_events():
    """Listener collecting every clear notification."""
    events: list[dict] = []

    def _listener(removed):
        events.append(dict(removed))

    _listener.events = events
    return _listener
