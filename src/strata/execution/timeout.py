"""Deadline enforcement for interactor invocations.

Provides the async deadline used by :class:`~strata.execution.interactor.Interactor`
to bound every call to ``do_work``, plus helpers that let work units inspect
the deadline they are running under.

Manifesto:
    An interactor without a deadline can keep a loading indicator spinning
    forever. Every invocation therefore runs under a deadline (5 minutes
    unless the caller says otherwise), and expiry must be told apart from
    cancellation of the caller:

    - **Deadline expiry:** only the in-flight work is cancelled and the
      caller sees ``TimeoutExpired`` (which the result boundary turns into a
      ``Failure``)
    - **Outer cancellation:** the caller's task is being torn down, so
      ``CancelledError`` keeps propagating even if the deadline expired at
      the same moment
    - **Nested deadlines:** inner deadline never outlives the outer one

Architecture:
    ::

        async with with_deadline_async(30.0, "SaveSummaryValue"):
            await do_work(params)
                              │
                              │ uses
                              ▼
        ┌────────────────────────────────────────────────────────────────┐
        │               asyncio.timeout (Python 3.11+)                   │
        │  - Cancels the current task when the deadline passes           │
        │  - expired() tells our deadline apart from a TimeoutError      │
        │    raised by the work itself                                   │
        │  - uncancel() accounting keeps outer cancellation intact       │
        └────────────────────────────────────────────────────────────────┘

        Deadline stack: ContextVar[tuple[DeadlineContext, ...]]
        Each task sees only its own chain of deadlines.

Examples:
    >>> async with with_deadline_async(10.0, "fetch_summary") as ctx:
    ...     data = await fetch_summary()
    ...     if ctx.remaining() < 1.0:
    ...         return data

    Cooperative checks inside long loops:

    >>> async def do_work(self, params):
    ...     for item in params.items:
    ...         check_deadline()
    ...         await process(item)

Tags:
    timeout, deadline, cancellation, execution, strata

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import timedelta
from typing import AsyncIterator


class TimeoutExpired(TimeoutError):
    """Raised when an operation exceeds its deadline.

    Inherits from built-in TimeoutError for broad exception handling.

    Attributes:
        timeout: The timeout value that was exceeded
        elapsed: How long the operation ran before being interrupted
        operation: Name/description of the operation
    """

    def __init__(
        self,
        timeout: float,
        elapsed: float | None = None,
        operation: str = "operation",
    ):
        self.timeout = timeout
        self.elapsed = elapsed
        self.operation = operation

        msg = f"Operation '{operation}' timed out after {timeout}s"

        if elapsed is not None:
            msg += f" (ran for {elapsed:.2f}s)"

        super().__init__(msg)


@dataclass
class DeadlineContext:
    """Context for tracking deadline state.

    Attributes:
        deadline: Absolute deadline timestamp (monotonic clock)
        timeout_seconds: Effective timeout value in seconds
        operation: Name/description of the operation
        start_time: When the deadline context started
    """

    deadline: float
    timeout_seconds: float
    operation: str = "operation"
    start_time: float = field(default_factory=time.monotonic)

    def remaining(self) -> float:
        """Remaining time until deadline in seconds.

        Returns:
            Positive value if time remains, negative if expired.
        """
        return self.deadline - time.monotonic()

    @property
    def elapsed(self) -> float:
        """Elapsed time since start in seconds."""
        return time.monotonic() - self.start_time

    def is_expired(self) -> bool:
        """True if deadline has passed."""
        return time.monotonic() >= self.deadline

    def check(self, op_name: str | None = None) -> None:
        """Check if deadline expired and raise if so.

        Raises:
            TimeoutExpired: If deadline has passed
        """
        if self.is_expired():
            raise TimeoutExpired(
                timeout=self.timeout_seconds,
                elapsed=self.elapsed,
                operation=op_name or self.operation,
            )


_deadline_stack: ContextVar[tuple[DeadlineContext, ...]] = ContextVar(
    "strata_deadline_stack", default=()
)


def to_seconds(duration: float | int | timedelta) -> float:
    """Normalize a duration to seconds.

    Raises:
        ValueError: If the duration is negative
    """
    seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
    if seconds < 0:
        raise ValueError(f"Timeout must be non-negative, got {seconds}")
    return seconds


def get_current_deadline() -> DeadlineContext | None:
    """Get the innermost active deadline of the current task, if any."""
    stack = _deadline_stack.get()
    return stack[-1] if stack else None


def get_effective_timeout(requested: float) -> float:
    """Get effective timeout considering nested deadlines.

    Inside a deadline block, returns the minimum of the requested timeout
    and the time remaining on the outer deadline (never below zero).
    """
    current = get_current_deadline()
    if current is None:
        return requested
    return max(0.0, min(requested, current.remaining()))


def get_remaining_deadline() -> float | None:
    """Remaining seconds on the current deadline, or None outside one."""
    ctx = get_current_deadline()
    if ctx is None:
        return None
    return ctx.remaining()


def check_deadline() -> None:
    """Raise TimeoutExpired if the current deadline has passed.

    Does nothing outside a deadline context. Useful in CPU-bound loops that
    do not reach an ``await`` often enough for asyncio.timeout to fire.
    """
    ctx = get_current_deadline()
    if ctx is not None:
        ctx.check()


@asynccontextmanager
async def with_deadline_async(
    seconds: float | timedelta,
    operation: str | None = None,
) -> AsyncIterator[DeadlineContext]:
    """Async context manager enforcing a time limit on the enclosed block.

    Args:
        seconds: Maximum time allowed (seconds or timedelta)
        operation: Name/description for error messages

    Yields:
        DeadlineContext for checking remaining time

    Raises:
        TimeoutExpired: If this deadline is exceeded
        asyncio.CancelledError: If the enclosing task is cancelled, including
            when that happens while the deadline is also expiring
        ValueError: If seconds is negative
    """
    effective = get_effective_timeout(to_seconds(seconds))
    op_name = operation or "operation"
    now = time.monotonic()
    ctx = DeadlineContext(
        deadline=now + effective,
        timeout_seconds=effective,
        operation=op_name,
        start_time=now,
    )

    token = _deadline_stack.set(_deadline_stack.get() + (ctx,))
    timer = asyncio.timeout(effective)
    try:
        async with timer:
            yield ctx
    except TimeoutError:
        if not timer.expired():
            # Raised by the block itself, not by this deadline
            raise
        raise TimeoutExpired(
            timeout=effective,
            elapsed=ctx.elapsed,
            operation=op_name,
        ) from None
    finally:
        _deadline_stack.reset(token)


__all__ = [
    "TimeoutExpired",
    "DeadlineContext",
    "to_seconds",
    "get_current_deadline",
    "get_effective_timeout",
    "get_remaining_deadline",
    "check_deadline",
    "with_deadline_async",
]
