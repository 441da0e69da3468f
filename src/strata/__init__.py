"""Strata -- interactor execution framework for asyncio applications.

Wraps units of business logic with in-flight tracking, a debounced busy
signal, deadlines and an exception-to-result boundary.

    from strata import Interactor, Success, Failure
"""

from strata.core.errors import (
    ConflictError,
    ErrorCategory,
    NotFoundError,
    StrataError,
    StrataExecutionError,
    ValidationError,
)
from strata.core.result import ExecutionResult, Failure, Success
from strata.execution import (
    BusySignal,
    InFlightState,
    Interactor,
    InteractorScope,
    ScopeClosedError,
    SubjectInteractor,
    TimeoutExpired,
    UserInitiatedParams,
    run_catching,
    run_catching_async,
)

__all__ = [
    "__version__",
    "ConflictError",
    "ErrorCategory",
    "NotFoundError",
    "StrataError",
    "StrataExecutionError",
    "ValidationError",
    "ExecutionResult",
    "Failure",
    "Success",
    "BusySignal",
    "InFlightState",
    "Interactor",
    "InteractorScope",
    "ScopeClosedError",
    "SubjectInteractor",
    "TimeoutExpired",
    "UserInitiatedParams",
    "run_catching",
    "run_catching_async",
]

__version__ = "0.1.0"
