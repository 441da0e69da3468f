"""Strata Core -- result envelope, error taxonomy and ambient stack.

Architecture::

    errors.py      StrataError hierarchy (domain kinds + StrataExecutionError)
    result.py      ExecutionResult[T] envelope (Success / Failure)
    logging.py     structlog configuration and context binding
    settings.py    StrataSettings (pydantic-settings, STRATA_ prefix)

The execution layer (``strata.execution``) builds the result boundary and
the interactor on top of these modules; nothing here depends on asyncio.
"""

from strata.core.errors import (
    ConflictError,
    ErrorCategory,
    ErrorContext,
    NotFoundError,
    StrataError,
    StrataExecutionError,
    ValidationError,
)
from strata.core.result import ExecutionResult, Failure, Success, partition_results

__all__ = [
    "ConflictError",
    "ErrorCategory",
    "ErrorContext",
    "NotFoundError",
    "StrataError",
    "StrataExecutionError",
    "ValidationError",
    "ExecutionResult",
    "Failure",
    "Success",
    "partition_results",
]
