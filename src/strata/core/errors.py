"""
Structured error types for Strata interactors.

Provides the error taxonomy carried by ``Failure`` results. Every failure that
crosses the result boundary is a StrataError: either a domain error raised
deliberately by business logic, or a StrataExecutionError wrapping anything
else that escaped a unit of work.

Cancellation (``asyncio.CancelledError``) is deliberately absent from this
module. It is a control-flow signal and never becomes an error value.

Manifesto:
    - **Two kinds, one base:** Domain errors pass through the boundary as-is,
      everything else is wrapped with the original cause kept
    - **Rich context:** Errors carry category and metadata for logging
    - **Error chaining:** The wrapped failure is preserved as ``cause`` and
      ``__cause__`` so tracebacks stay intact

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                         StrataError                             │
        │              (category, context, cause)                         │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                 │
        │  Domain errors (raised by do_work)       Wrapping kind          │
        │  ─────────────────────────────────       ─────────────          │
        │  ValidationError   (VALIDATION)          StrataExecutionError   │
        │  NotFoundError     (NOT_FOUND)           (EXECUTION / TIMEOUT)  │
        │  ConflictError     (CONFLICT)                                   │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ValidationError("count must be positive")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>

    >>> wrapped = StrataExecutionError(ZeroDivisionError("division by zero"))
    >>> wrapped.cause
    ZeroDivisionError('division by zero')
    >>> wrapped.message
    'ZeroDivisionError: division by zero'

Tags:
    errors, error-hierarchy, result-boundary, strata

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for logging and metric labels."""

    # Domain errors raised deliberately by business logic
    DOMAIN = "DOMAIN"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Wrapped failures
    TIMEOUT = "TIMEOUT"           # Interactor deadline expired
    EXECUTION = "EXECUTION"       # Any other uncaught failure

    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover what the interactor layer knows about a failure
    (interactor name, whether the call was user-initiated, the deadline in
    force). Anything else goes in ``metadata``. ``to_dict()`` serializes
    non-None fields for structured logging.

    Examples:
        >>> ctx = ErrorContext(interactor="SaveSummaryValue", timeout_seconds=0.05)
        >>> ctx.to_dict()
        {'interactor': 'SaveSummaryValue', 'timeout_seconds': 0.05}
    """

    interactor: str | None = None
    user_initiated: bool | None = None
    timeout_seconds: float | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["interactor", "user_initiated", "timeout_seconds"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class StrataError(Exception):
    """
    Base exception for all Strata failures.

    Business logic raises StrataError subclasses on purpose; the result
    boundary returns them as ``Failure(error)`` without another wrapping
    layer. Subclasses set ``default_category`` for their domain.

    Examples:
        >>> error = StrataError("Counter is locked")
        >>> error.category
        <ErrorCategory.DOMAIN: 'DOMAIN'>

        >>> error = StrataError("Save failed").with_context(interactor="SaveSummaryValue")
        >>> error.context.interactor
        'SaveSummaryValue'
    """

    default_category: ErrorCategory = ErrorCategory.DOMAIN

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StrataError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("No saved value").with_context(key="last_saved_value")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DOMAIN ERRORS
# =============================================================================


class ValidationError(StrataError):
    """Parameters or state rejected by business rules."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field is not None:
            result["field"] = self.field
        return result


class NotFoundError(StrataError):
    """A requested entity does not exist."""

    default_category = ErrorCategory.NOT_FOUND


class ConflictError(StrataError):
    """The operation conflicts with the current state."""

    default_category = ErrorCategory.CONFLICT


# =============================================================================
# WRAPPING KIND
# =============================================================================


class StrataExecutionError(StrataError):
    """
    Wraps a failure that is not a StrataError.

    Produced only by the result boundary. The original failure is kept as
    ``cause`` (and chained as ``__cause__``). An expired interactor deadline
    lands here too, with a ``TimeoutExpired`` cause and the TIMEOUT category.
    """

    default_category = ErrorCategory.EXECUTION

    def __init__(
        self,
        cause: BaseException,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{type(cause).__name__}: {cause}",
            category=category,
            context=context,
            cause=cause,
        )

    @property
    def is_timeout(self) -> bool:
        """True when the wrapped failure is an expired interactor deadline."""
        return self.category is ErrorCategory.TIMEOUT


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StrataError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StrataExecutionError",
]
