"""InteractorScope: owns the tasks launched on behalf of a screen or state holder.

Event handlers are synchronous, interactors are not. A state holder creates
one scope, launches interactor calls on it from its event handlers and
cancels the scope when the screen goes away::

    scope = InteractorScope("summary")

    def on_save(value: int) -> None:
        scope.launch(save_summary_value(value))

    ...
    scope.cancel()          # every in-flight call sees CancelledError

Unhandled exceptions in launched tasks are logged and do not affect the other
tasks of the scope. Interactor calls never raise them anyway: failures come
back as ``Failure`` results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

from strata.core.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class ScopeClosedError(RuntimeError):
    """Raised by launch_or_throw() on a cancelled or closed scope."""


class InteractorScope:
    """A set of tasks with a shared lifetime."""

    def __init__(self, name: str = "scope"):
        self.name = name
        self._tasks: set[asyncio.Task[Any]] = set()
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    def launch(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T] | None:
        """Start ``coro`` as a task owned by this scope.

        Returns:
            The task, or None if the scope is no longer active (the coroutine
            is closed without running).
        """
        if not self._active:
            coro.close()
            logger.debug("scope.launch_skipped", scope=self.name)
            return None
        return self._start(coro)

    def launch_or_throw(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Like :meth:`launch`, but raise instead of silently skipping.

        Raises:
            ScopeClosedError: If the scope is no longer active
        """
        if not self._active:
            coro.close()
            raise ScopeClosedError(f"Scope '{self.name}' is not active")
        return self._start(coro)

    def _start(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "scope.task_failed",
                scope=self.name,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=exc,
            )

    def cancel(self) -> None:
        """Deactivate the scope and cancel every running task."""
        self._active = False
        for task in list(self._tasks):
            task.cancel()

    async def join(self) -> None:
        """Wait until every task launched so far has finished."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def __aenter__(self) -> InteractorScope:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.cancel()
        try:
            await self.join()
        finally:
            self._active = False


__all__ = ["InteractorScope", "ScopeClosedError"]
