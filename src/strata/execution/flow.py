"""Operators over async value streams.

Small building blocks used to derive the busy signal and the
SubjectInteractor flow from ``StateStream`` subscriptions:

    debounce               emit a value only after a per-value quiet period
    distinct_until_changed drop consecutive duplicates
    map_values             transform each value
    filter_values          keep values matching a predicate
    flat_map_latest        switch to a new inner stream for every upstream value

Every operator owns its upstream: closing the derived stream with
``aclose()`` or cancelling the consuming task closes the upstream right
away, so StateStream subscriptions never leak. After a ``break`` out of
``async for`` the upstream is closed only when the event loop finalizes the
abandoned generator; wrap the loop in ``contextlib.aclosing()`` when the
subscription must end at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")

_DONE = object()
_UNSET = object()


async def _next_or_done(iterator: AsyncIterator[T]) -> Any:
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        return _DONE


async def _drain(task: asyncio.Task | None) -> None:
    """Cancel ``task`` and wait for it to settle without raising its outcome."""
    if task is None:
        return
    if not task.done():
        task.cancel()
        await asyncio.wait({task})
    if not task.cancelled():
        task.exception()


async def _close(iterator: AsyncIterator[Any]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()


async def debounce(
    source: AsyncIterator[T],
    timeout_for: Callable[[T], float],
) -> AsyncIterator[T]:
    """Emit a value once ``timeout_for(value)`` seconds pass without a newer one.

    A timeout of zero (or less) emits the value immediately. When the
    upstream finishes, a still-pending value is emitted right away.
    """
    pending: Any = _UNSET
    next_task: asyncio.Task | None = asyncio.ensure_future(_next_or_done(source))
    try:
        while True:
            if pending is not _UNSET:
                delay = timeout_for(pending)
                if delay <= 0:
                    value, pending = pending, _UNSET
                    yield value
                    continue
                done, _ = await asyncio.wait({next_task}, timeout=delay)
                if not done:
                    value, pending = pending, _UNSET
                    yield value
                    continue

            item = await next_task
            next_task = None
            if item is _DONE:
                if pending is not _UNSET:
                    yield pending
                return
            pending = item
            next_task = asyncio.ensure_future(_next_or_done(source))
    finally:
        await _drain(next_task)
        await _close(source)


async def distinct_until_changed(source: AsyncIterator[T]) -> AsyncIterator[T]:
    """Skip values equal to the previously emitted one."""
    last: Any = _UNSET
    try:
        async for value in source:
            if last is not _UNSET and value == last:
                continue
            last = value
            yield value
    finally:
        await _close(source)


async def map_values(source: AsyncIterator[T], fn: Callable[[T], U]) -> AsyncIterator[U]:
    try:
        async for value in source:
            yield fn(value)
    finally:
        await _close(source)


async def filter_values(source: AsyncIterator[T], predicate: Callable[[T], bool]) -> AsyncIterator[T]:
    try:
        async for value in source:
            if predicate(value):
                yield value
    finally:
        await _close(source)


async def flat_map_latest(
    source: AsyncIterator[T],
    transform: Callable[[T], AsyncIterator[U]],
) -> AsyncIterator[U]:
    """For each upstream value, stream ``transform(value)``, dropping the previous inner stream.

    The inner stream is pulled only when the consumer asks for the next
    item, so a slow consumer never makes it run ahead. The upstream is
    watched while waiting; a new upstream value always wins over an inner
    item that became ready at the same time, and that item is discarded
    together with the inner stream it came from.

    An exception raised by the upstream or by an inner stream is re-raised
    to the consumer. The derived stream ends when the upstream ends and the
    last inner stream is exhausted.
    """
    inner: AsyncIterator[U] | None = None
    inner_next: asyncio.Task | None = None
    source_next: asyncio.Task | None = asyncio.ensure_future(_next_or_done(source))
    try:
        while source_next is not None or inner_next is not None:
            waiting = {task for task in (source_next, inner_next) if task is not None}
            done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

            if source_next in done:
                value = source_next.result()
                if value is _DONE:
                    source_next = None
                    continue
                await _drain(inner_next)
                if inner is not None:
                    await _close(inner)
                inner = transform(value)
                inner_next = asyncio.ensure_future(_next_or_done(inner))
                source_next = asyncio.ensure_future(_next_or_done(source))
                continue

            item = inner_next.result()
            inner_next = None
            if item is _DONE:
                await _close(inner)
                inner = None
                continue
            yield item
            inner_next = asyncio.ensure_future(_next_or_done(inner))
    finally:
        await _drain(source_next)
        await _drain(inner_next)
        if inner is not None:
            await _close(inner)
        await _close(source)


__all__ = [
    "debounce",
    "distinct_until_changed",
    "map_values",
    "filter_values",
    "flat_map_latest",
]
