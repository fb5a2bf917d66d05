# SPDX-License-Identifier: MIT
"""Listener registry used for cache events and driver update subscriptions."""

import inspect
import itertools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar


E = TypeVar("E")

Listener = Callable[..., Awaitable[None] | None]


@dataclass(frozen=True)
class ListenerHandle(Generic[E]):
    """Opaque token returned on registration, used to remove the listener."""

    event: E
    listener_id: int


class EventEmitter(Generic[E]):
    """Ordered registry of listeners keyed by event.

    Listeners may be plain functions or coroutine functions. They are invoked
    in registration order; coroutine results are awaited one after another.
    """

    def __init__(self) -> None:
        self._listeners: dict[E, dict[int, Listener]] = {}
        self._ids = itertools.count(1)

    def on(self, event: E, listener: Listener) -> ListenerHandle[E]:
        """Register a listener for an event.

        Args:
            event: Event key
            listener: Callable invoked with the emitted arguments

        Returns:
            Handle that removes this registration when passed to ``off``
        """
        listener_id = next(self._ids)
        self._listeners.setdefault(event, {})[listener_id] = listener
        return ListenerHandle(event, listener_id)

    def off(self, handle: ListenerHandle[E]) -> bool:
        """Remove a listener by handle. Returns False if it was not registered."""
        listeners = self._listeners.get(handle.event)
        if not listeners or handle.listener_id not in listeners:
            return False
        del listeners[handle.listener_id]
        return True

    def listener_count(self, event: E) -> int:
        return len(self._listeners.get(event, {}))

    def clear(self) -> None:
        self._listeners.clear()

    async def emit(self, event: E, *args: Any) -> None:
        """Invoke every listener registered for ``event``.

        Exceptions raised by a listener propagate to the caller.
        """
        # Copy so listeners may unregister themselves while being called
        for listener in list(self._listeners.get(event, {}).values()):
            result = listener(*args)
            if inspect.isawaitable(result):
                await result
