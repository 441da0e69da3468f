"""Interactor: a reusable unit of business logic with loading state and a deadline.

WHY
───
Presentation code wants three things from every piece of business logic it
triggers: a typed result instead of exceptions, a deadline so nothing hangs
forever, and a busy flag to drive a loading indicator. ``Interactor`` gives
all three around a single abstract ``do_work``.

ARCHITECTURE
────────────
::

    await interactor(params, timeout=..., user_initiated=...)
      │
      ├── loading_state.update(+1 user | +1 ambient)      entry
      ├── run_catching_async                              result boundary
      │     └── with_deadline_async(timeout)              deadline
      │           └── do_work(params)                     subclass logic
      └── finally: loading_state.update(-1)               every exit path

    in_progress (BusySignal)
      loading_state.subscribe()
        → debounce(5s if ambient_count > 0 else 0)
        → map(total > 0)
        → distinct_until_changed()

Per-invocation states: Idle → Loading → Completed | Failed | TimedOut | Cancelled.
TimedOut is reported as a Failure whose error has ``is_timeout`` set.
Cancelled produces no result: ``asyncio.CancelledError`` propagates.

Example::

    class SaveSummaryValue(Interactor[int, None]):
        def __init__(self, repository):
            super().__init__()
            self._repository = repository

        async def do_work(self, params: int) -> None:
            await self._repository.save_value(params)

    save = SaveSummaryValue(repository)
    (await save(12)).on_failure(lambda e: logger.warning("save.failed", error=str(e)))

    async for busy in save.in_progress:
        indicator.visible = busy
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from strata.core.errors import ErrorCategory, StrataExecutionError
from strata.core.logging import get_logger
from strata.core.result import ExecutionResult, Failure
from strata.core.settings import get_settings
from strata.execution.flow import debounce, distinct_until_changed, map_values
from strata.execution.run_catching import run_catching_async
from strata.execution.state import InFlightState, StateStream
from strata.execution.timeout import to_seconds, with_deadline_async
from strata.observability.metrics import InteractorMetrics, interactor_metrics

P = TypeVar("P")
R = TypeVar("R")

logger = get_logger(__name__)


@runtime_checkable
class UserInitiatedParams(Protocol):
    """Parameters that say whether the invocation came from a user action.

    Parameters that do not implement this protocol are treated as
    user-initiated, so their work is never hidden behind the ambient debounce.
    """

    @property
    def user_initiated(self) -> bool: ...


class BusySignal:
    """Debounced busy/idle stream derived from an interactor's in-flight counters.

    Each ``async for`` opens an independent subscription that starts from the
    current state. Raw states with ambient work in flight are held back for
    ``ambient_window`` seconds and dropped if a newer state arrives first;
    states without ambient work are emitted at once. Only changes of the
    boolean are emitted.
    """

    def __init__(self, state: StateStream[InFlightState], ambient_window: float):
        self._state = state
        self._ambient_window = ambient_window

    @property
    def ambient_window(self) -> float:
        return self._ambient_window

    def _quiet_period(self, state: InFlightState) -> float:
        return self._ambient_window if state.ambient_count > 0 else 0.0

    def __aiter__(self) -> AsyncIterator[bool]:
        debounced = debounce(self._state.subscribe(), self._quiet_period)
        return distinct_until_changed(map_values(debounced, lambda state: state.busy))


class Interactor(ABC, Generic[P, R]):
    """Base class for all business logic units.

    Subclasses implement :meth:`do_work`. Callers use ``await interactor(params)``
    (or :meth:`invoke`) and always get an ExecutionResult back, except when
    their own task is cancelled.

    Args:
        name: Name used in logs, deadline errors and metric labels
            (defaults to the class name).
        default_timeout: Deadline when a call passes no ``timeout``
            (defaults to ``StrataSettings.default_timeout_seconds``).
        ambient_debounce: Quiet period before ambient work shows as busy
            (defaults to ``StrataSettings.ambient_debounce_seconds``).
        metrics: Metrics sink; defaults to the process-wide one unless
            metrics are disabled in settings.
    """

    def __init__(
        self,
        *,
        name: str | None = None,
        default_timeout: float | timedelta | None = None,
        ambient_debounce: float | timedelta | None = None,
        metrics: InteractorMetrics | None = None,
    ):
        settings = get_settings()
        self.name = name or type(self).__name__
        self._default_timeout = (
            settings.default_timeout_seconds if default_timeout is None else to_seconds(default_timeout)
        )
        window = settings.ambient_debounce_seconds if ambient_debounce is None else to_seconds(ambient_debounce)
        self._loading_state: StateStream[InFlightState] = StateStream(InFlightState())
        self._in_progress = BusySignal(self._loading_state, window)
        if metrics is not None:
            self._metrics: InteractorMetrics | None = metrics
        else:
            self._metrics = interactor_metrics if settings.metrics_enabled else None

    # ── Observation ──────────────────────────────────────────────────

    @property
    def in_progress(self) -> BusySignal:
        """Debounced busy signal for loading indicators."""
        return self._in_progress

    @property
    def loading_state(self) -> InFlightState:
        """Snapshot of the raw in-flight counters."""
        return self._loading_state.value

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    # ── Execution ────────────────────────────────────────────────────

    @abstractmethod
    async def do_work(self, params: P) -> R:
        """The business logic. May await anything, including other interactors."""

    async def invoke(
        self,
        params: P = None,
        *,
        timeout: float | timedelta | None = None,
        user_initiated: bool | None = None,
    ) -> ExecutionResult[R]:
        """Run :meth:`do_work` under a deadline and return its outcome.

        Args:
            params: Parameters for ``do_work``; omit for parameterless interactors.
            timeout: Deadline for this call (seconds or timedelta).
            user_initiated: Whether a user action triggered this call. Defaults
                to ``params.user_initiated`` when available, else True.

        Returns:
            Success with the value, or Failure with a StrataError. An expired
            deadline is a Failure whose error has ``is_timeout`` set.

        Raises:
            asyncio.CancelledError: If the calling task is cancelled.
        """
        if user_initiated is None:
            user_initiated = self._is_user_initiated(params)
        deadline = self._default_timeout if timeout is None else timeout
        source = "user" if user_initiated else "ambient"

        if self._metrics is not None:
            self._metrics.record_start(self.name, source)
        logger.debug("interactor.started", interactor=self.name, source=source)
        started_at = time.perf_counter()
        status = "cancelled"

        # Nothing between the increment and the try may raise
        self._loading_state.update(lambda state: state.with_added(user_initiated))
        try:
            result = await run_catching_async(lambda: self._run(params, deadline))
            status = self._report(result, user_initiated, deadline)
            return result
        finally:
            # No await below: cancellation cannot interrupt the decrement
            self._loading_state.update(lambda state: state.with_removed(user_initiated))
            if self._metrics is not None:
                self._metrics.record_end(self.name, source, status, started_at)
            if status == "cancelled":
                logger.info("interactor.cancelled", interactor=self.name, source=source)

    async def __call__(
        self,
        params: P = None,
        *,
        timeout: float | timedelta | None = None,
        user_initiated: bool | None = None,
    ) -> ExecutionResult[R]:
        return await self.invoke(params, timeout=timeout, user_initiated=user_initiated)

    async def _run(self, params: P, deadline: float | timedelta) -> R:
        async with with_deadline_async(deadline, self.name):
            return await self.do_work(params)

    def _report(self, result: ExecutionResult[R], user_initiated: bool, deadline: float | timedelta) -> str:
        if not isinstance(result, Failure):
            logger.debug("interactor.completed", interactor=self.name)
            return "completed"

        error = result.error
        if isinstance(error, StrataExecutionError) and error.context.interactor is None:
            error.with_context(
                interactor=self.name,
                user_initiated=user_initiated,
                timeout_seconds=_as_seconds(deadline),
            )
        status = "timed_out" if error.category is ErrorCategory.TIMEOUT else "failed"
        logger.warning(
            "interactor.failed",
            interactor=self.name,
            status=status,
            error_type=type(error).__name__,
            category=error.category.value,
            message=error.message,
        )
        return status

    @staticmethod
    def _is_user_initiated(params: Any) -> bool:
        if isinstance(params, UserInitiatedParams):
            return bool(params.user_initiated)
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, loading_state={self.loading_state!r})"


def _as_seconds(duration: float | timedelta) -> float:
    return duration.total_seconds() if isinstance(duration, timedelta) else float(duration)


__all__ = ["Interactor", "BusySignal", "UserInitiatedParams"]
