"""Observable state holders for the execution layer.

``StateStream`` keeps a single current value, applies updates atomically and
publishes each new value to async subscribers. It backs the in-flight
counters of every Interactor and the parameter stream of SubjectInteractor.

Updates may come from any thread. Each subscriber is bound to the event loop
it subscribed from; values published from another thread are handed over
with ``loop.call_soon_threadsafe``.

Example::

    state = StateStream(InFlightState())
    state.update(lambda s: s.with_added(user_initiated=True))

    async for snapshot in state.subscribe():
        print(snapshot.total)
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class InFlightState:
    """Number of invocations currently in flight, split by origin."""

    user_count: int = 0
    ambient_count: int = 0

    def __post_init__(self) -> None:
        if self.user_count < 0 or self.ambient_count < 0:
            raise ValueError(
                f"In-flight counters cannot be negative: user={self.user_count}, "
                f"ambient={self.ambient_count}"
            )

    @property
    def total(self) -> int:
        return self.user_count + self.ambient_count

    @property
    def busy(self) -> bool:
        return self.total > 0

    def with_added(self, user_initiated: bool) -> InFlightState:
        """Counters after one more invocation entered."""
        if user_initiated:
            return InFlightState(self.user_count + 1, self.ambient_count)
        return InFlightState(self.user_count, self.ambient_count + 1)

    def with_removed(self, user_initiated: bool) -> InFlightState:
        """Counters after one invocation exited.

        Raises:
            ValueError: If no matching invocation is in flight
        """
        if user_initiated:
            return InFlightState(self.user_count - 1, self.ambient_count)
        return InFlightState(self.user_count, self.ambient_count - 1)


class _Subscriber(Generic[T]):
    """Per-subscription mailbox bound to the subscriber's event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._queue: asyncio.Queue[T] = asyncio.Queue()

    def offer(self, value: T) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._queue.put_nowait(value)
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._queue.put_nowait, value)

    async def get(self) -> T:
        return await self._queue.get()


class StateStream(Generic[T]):
    """A current value plus a live stream of its changes.

    - ``update(fn)`` is an atomic read-modify-write; concurrent updates from
      tasks or threads never lose each other's changes.
    - An update producing a value equal to the current one publishes nothing.
    - ``subscribe()`` yields the current value first, then every published
      value in order. Any number of subscriptions may be open at once and
      each can be closed independently.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._lock = threading.Lock()
        self._subscribers: set[_Subscriber[T]] = set()

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    @property
    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def update(self, fn: Callable[[T], T]) -> T:
        """Atomically replace the value with ``fn(current)`` and publish it.

        Returns:
            The value after the update.
        """
        with self._lock:
            new_value = fn(self._value)
            if new_value == self._value:
                return self._value
            self._value = new_value
            # Offered under the lock so subscribers observe updates in order
            for subscriber in self._subscribers:
                subscriber.offer(new_value)
            return new_value

    def set(self, value: T) -> T:
        return self.update(lambda _: value)

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the current value, then each subsequent value."""
        subscriber: _Subscriber[T] = _Subscriber(asyncio.get_running_loop())
        with self._lock:
            self._subscribers.add(subscriber)
            current = self._value
        try:
            yield current
            while True:
                yield await subscriber.get()
        finally:
            with self._lock:
                self._subscribers.discard(subscriber)

    def __repr__(self) -> str:
        return f"StateStream({self.value!r})"


__all__ = ["InFlightState", "StateStream"]
