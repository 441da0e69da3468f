"""SubjectInteractor: an interactor that exposes a stream instead of a result.

Used for "observe" use cases (e.g. the last saved value of a screen). Calling
the interactor publishes new parameters; ``flow`` switches to the stream
produced by :meth:`create_observable` for the latest distinct parameters.

::

    observe = ObserveLastSavedValue(repository)
    observe(None)                        # start observing

    async for value in observe.flow:     # re-subscribable
        label.text = value

Nothing is emitted until parameters have been published at least once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, Generic, TypeVar

from strata.core.logging import get_logger
from strata.execution.flow import distinct_until_changed, filter_values, flat_map_latest, map_values
from strata.execution.state import StateStream

P = TypeVar("P")
T = TypeVar("T")

logger = get_logger(__name__)


class _Params:
    """Wrapper so that ``None`` is a valid published parameter."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Params) and self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)


_NOT_SET = _Params(object())


class SubjectFlow(Generic[T]):
    """Async iterable view of a SubjectInteractor's output."""

    def __init__(self, interactor: SubjectInteractor[Any, T]):
        self._interactor = interactor

    def __aiter__(self) -> AsyncIterator[T]:
        interactor = self._interactor
        params = filter_values(interactor._params.subscribe(), lambda p: p is not _NOT_SET)
        unwrapped = map_values(params, lambda p: p.value)
        return distinct_until_changed(flat_map_latest(unwrapped, interactor._observe))


class SubjectInteractor(ABC, Generic[P, T]):
    """Base class for observable business logic."""

    def __init__(self, *, name: str | None = None):
        self.name = name or type(self).__name__
        self._params: StateStream[_Params] = StateStream(_NOT_SET)
        self._flow: SubjectFlow[T] = SubjectFlow(self)

    @property
    def flow(self) -> SubjectFlow[T]:
        return self._flow

    def __call__(self, params: P = None) -> None:
        """Publish new parameters; equal parameters are ignored."""
        self._params.set(_Params(params))

    @abstractmethod
    def create_observable(self, params: P) -> AsyncIterator[T]:
        """Return the stream for ``params``."""

    def _observe(self, params: P) -> AsyncIterator[T]:
        logger.debug("subject.observe", interactor=self.name)
        return self.create_observable(params)


__all__ = ["SubjectInteractor", "SubjectFlow"]
