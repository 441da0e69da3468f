"""Result boundary: run a unit of work and capture its outcome.

This is the single place where raised failures become
:class:`~strata.core.result.ExecutionResult` values:

    ┌──────────────────────────────┬───────────────────────────────────────┐
    │ work() ...                   │ result                                │
    ├──────────────────────────────┼───────────────────────────────────────┤
    │ returns value                │ Success(value)                        │
    │ raises CancelledError        │ re-raised unchanged                   │
    │ raises StrataError           │ Failure(error)                        │
    │ raises TimeoutExpired        │ Failure(StrataExecutionError) TIMEOUT │
    │ raises any other Exception   │ Failure(StrataExecutionError(cause))  │
    │ raises other BaseException   │ propagates (KeyboardInterrupt, ...)   │
    └──────────────────────────────┴───────────────────────────────────────┘

Cancellation stays a control-flow signal so that tearing down a task unwinds
through any number of nested interactors.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from strata.core.errors import ErrorCategory, StrataError, StrataExecutionError
from strata.core.logging import get_logger
from strata.core.result import ExecutionResult, Failure, Success
from strata.execution.timeout import TimeoutExpired

T = TypeVar("T")

logger = get_logger(__name__)


def _to_failure(exc: Exception) -> Failure:
    if isinstance(exc, StrataError):
        logger.debug("result_boundary.domain_error", error_type=type(exc).__name__)
        return Failure(exc)
    category = ErrorCategory.TIMEOUT if isinstance(exc, TimeoutExpired) else None
    logger.debug("result_boundary.wrapped", error_type=type(exc).__name__)
    return Failure(StrataExecutionError(exc, category=category))


def run_catching(work: Callable[[], T]) -> ExecutionResult[T]:
    """
    Call ``work`` and return its outcome as an ExecutionResult.

    Examples:
        >>> run_catching(lambda: 6 * 7)
        Success(42)
        >>> result = run_catching(lambda: 1 / 0)
        >>> type(result.error.cause).__name__
        'ZeroDivisionError'
    """
    try:
        return Success(work())
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        return _to_failure(exc)


async def run_catching_async(work: Callable[[], Awaitable[T]]) -> ExecutionResult[T]:
    """
    Await ``work()`` and return its outcome as an ExecutionResult.

    ``asyncio.CancelledError`` raised while awaiting is re-raised unchanged.
    """
    try:
        return Success(await work())
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        return _to_failure(exc)


__all__ = ["run_catching", "run_catching_async"]
