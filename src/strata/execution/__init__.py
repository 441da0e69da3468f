"""Strata execution layer.

Modules
-------
run_catching    Result boundary (exceptions -> ExecutionResult, cancellation passes)
timeout         Deadlines built on asyncio.timeout
state           InFlightState counters and StateStream
flow            Operators over async streams (debounce, flat_map_latest, ...)
interactor      Interactor base class and BusySignal
subject         SubjectInteractor for observable use cases
scope           InteractorScope for launching calls from sync event handlers
"""

from strata.execution.interactor import BusySignal, Interactor, UserInitiatedParams
from strata.execution.run_catching import run_catching, run_catching_async
from strata.execution.scope import InteractorScope, ScopeClosedError
from strata.execution.state import InFlightState, StateStream
from strata.execution.subject import SubjectInteractor
from strata.execution.timeout import TimeoutExpired, check_deadline, with_deadline_async

__all__ = [
    "BusySignal",
    "Interactor",
    "UserInitiatedParams",
    "run_catching",
    "run_catching_async",
    "InteractorScope",
    "ScopeClosedError",
    "InFlightState",
    "StateStream",
    "SubjectInteractor",
    "TimeoutExpired",
    "check_deadline",
    "with_deadline_async",
]
