"""
Result envelope returned by every interactor invocation.

``ExecutionResult[T]`` is a tagged union of ``Success[T]`` and ``Failure``.
Interactors never raise business failures at their callers: the result
boundary converts them into ``Failure`` values, and the caller decides whether
to surface, retry or log them through explicit branches.

A ``Failure`` always carries a :class:`~strata.core.errors.StrataError`.
Cancellation is never represented here; it keeps propagating as
``asyncio.CancelledError``.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                   ExecutionResult[T]                         │
        │                      (Type Alias)                            │
        ├──────────────────────────┬──────────────────────────────────┤
        │       Success[T]         │       Failure                     │
        ├──────────────────────────┼──────────────────────────────────┤
        │ • value: T               │ • error: StrataError              │
        │ • on_success() runs      │ • on_failure() runs               │
        │ • get_or_none() → value  │ • get_or_none() → None            │
        │ • map() transforms       │ • map() → same Failure            │
        └──────────────────────────┴──────────────────────────────────┘

Examples:
    Pattern matching:

    >>> from strata.core.result import Success, Failure
    >>> result = Success(42)
    >>> match result:
    ...     case Success(value):
    ...         print(f"saved {value}")
    ...     case Failure(error):
    ...         print(f"failed: {error}")
    saved 42

    Handlers, as used by state holders:

    >>> Success(3).on_success(print).on_failure(print).get_or_none()
    3
    3

Guardrails:
    ❌ DON'T: Call get_or_raise() without checking is_success() first
    ✅ DO: Use fold(), get_or_default() or pattern matching

    ❌ DON'T: Wrap CancelledError in a Failure
    ✅ DO: Let cancellation propagate; only the result boundary builds Failures

Tags:
    result-pattern, error-handling, interactor, strata

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from strata.core.errors import StrataError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """
    Successful outcome of an invocation.

    Examples:
        >>> ok = Success(10)
        >>> ok.is_success()
        True
        >>> ok.map(lambda x: x * 2).get_or_none()
        20
    """

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def on_success(self, action: Callable[[T], Any]) -> ExecutionResult[T]:
        """Call ``action`` with the value, return self."""
        action(self.value)
        return self

    def on_failure(self, action: Callable[[StrataError], Any]) -> ExecutionResult[T]:
        """No-op for Success."""
        return self

    def get_or_none(self) -> T | None:
        return self.value

    def get_or_default(self, default: T) -> T:
        return self.value

    def get_or_raise(self) -> T:
        """Get the value. Safe for Success."""
        return self.value

    def map(self, f: Callable[[T], U]) -> ExecutionResult[U]:
        """Transform the value."""
        return Success(f(self.value))

    def fold(
        self,
        on_success: Callable[[T], U],
        on_failure: Callable[[StrataError], U],
    ) -> U:
        return on_success(self.value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {"success": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


@dataclass(frozen=True, slots=True)
class Failure:
    """
    Failed outcome of an invocation.

    ``error`` is the domain error raised by the work unit, or a
    StrataExecutionError wrapping whatever else it raised.

    Examples:
        >>> from strata.core.errors import NotFoundError
        >>> err = Failure(NotFoundError("no value saved"))
        >>> err.is_failure()
        True
        >>> err.get_or_default(0)
        0
    """

    error: StrataError

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def on_success(self, action: Callable[[Any], Any]) -> Failure:
        """No-op for Failure."""
        return self

    def on_failure(self, action: Callable[[StrataError], Any]) -> Failure:
        """Call ``action`` with the error, return self."""
        action(self.error)
        return self

    def get_or_none(self) -> None:
        return None

    def get_or_default(self, default: T) -> T:
        return default

    def get_or_raise(self) -> Any:
        """Raise the error. Use only when you're sure it's Success."""
        raise self.error

    def map(self, f: Callable[[Any], Any]) -> Failure:
        """No-op for Failure."""
        return self

    def fold(
        self,
        on_success: Callable[[Any], U],
        on_failure: Callable[[StrataError], U],
    ) -> U:
        return on_failure(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {"success": False, "error": self.error.to_dict()}

    def __repr__(self) -> str:
        return f"Failure({self.error!r})"


# Type alias for the tagged union
ExecutionResult = Success[T] | Failure


def partition_results(
    results: list[ExecutionResult[T]],
) -> tuple[list[T], list[StrataError]]:
    """
    Partition results into successful values and errors, preserving order.

    Examples:
        >>> from strata.core.errors import ValidationError
        >>> values, errors = partition_results([Success(1), Failure(ValidationError("x")), Success(2)])
        >>> values
        [1, 2]
        >>> len(errors)
        1
    """
    values = []
    errors = []
    for result in results:
        match result:
            case Success(value):
                values.append(value)
            case Failure(error):
                errors.append(error)
    return values, errors


__all__ = [
    "ExecutionResult",
    "Success",
    "Failure",
    "partition_results",
]
