# SPDX-License-Identifier: MIT
"""Single-flight hydration gate."""

import asyncio
from collections.abc import Awaitable, Callable

from .enums import HydrationState


class HydrationGate:
    """Runs a loader at most once successfully, sharing the attempt in flight.

    Concurrent callers of ``ensure`` all wait on the same task. When the loader
    fails, every waiter receives the error and the gate falls back to
    UNINITIALIZED so the next call starts a fresh attempt.
    """

    def __init__(self, loader: Callable[[], Awaitable[None]]) -> None:
        self._loader = loader
        self._pending: asyncio.Task[None] | None = None
        self.state = HydrationState.UNINITIALIZED

    @property
    def is_hydrated(self) -> bool:
        return self.state is HydrationState.HYDRATED

    async def ensure(self) -> None:
        """Wait until the loader has completed once."""
        if self.state is HydrationState.HYDRATED:
            return
        if self._pending is None:
            self.state = HydrationState.HYDRATING
            self._pending = asyncio.create_task(self._run())
        # Shield so a cancelled waiter does not cancel the shared attempt
        await asyncio.shield(self._pending)

    async def _run(self) -> None:
        try:
            await self._loader()
        except BaseException:
            self.state = HydrationState.UNINITIALIZED
            raise
        else:
            self.state = HydrationState.HYDRATED
        finally:
            self._pending = None
