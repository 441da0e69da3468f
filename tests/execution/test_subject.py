"""Tests for SubjectInteractor, using a save/observe pair over an in-memory repository."""

import asyncio
import time

import pytest

from strata.core.result import Success
from strata.execution.flow import filter_values
from strata.execution.interactor import Interactor
from strata.execution.state import StateStream
from strata.execution.subject import SubjectInteractor


# ── Helpers ──────────────────────────────────────────────────────────────


class InMemorySummaryRepository:
    """Keyed store whose values can be observed as async streams."""

    def __init__(self):
        self._values: dict[str, StateStream] = {}
        self.observed: list[str] = []

    def _stream(self, key: str) -> StateStream:
        return self._values.setdefault(key, StateStream(None))

    async def save_value(self, value: int, key: str = "summary") -> None:
        await asyncio.sleep(0)
        self._stream(key).set(value)

    def observe_last_saved_value(self, key: str = "summary"):
        self.observed.append(key)
        return filter_values(self._stream(key).subscribe(), lambda value: value is not None)


class SaveSummaryValue(Interactor[int, None]):
    def __init__(self, repository: InMemorySummaryRepository, **kwargs):
        super().__init__(**kwargs)
        self._repository = repository

    async def do_work(self, params: int) -> None:
        await self._repository.save_value(params)


class ObserveLastSavedValue(SubjectInteractor[None, int]):
    def __init__(self, repository: InMemorySummaryRepository):
        super().__init__()
        self._repository = repository

    def create_observable(self, params: None):
        return self._repository.observe_last_saved_value()


class ObserveKey(SubjectInteractor[str, int]):
    def __init__(self, repository: InMemorySummaryRepository):
        super().__init__()
        self._repository = repository

    def create_observable(self, params: str):
        return self._repository.observe_last_saved_value(params)


class Ticker(SubjectInteractor[str, str]):
    """Endless stream of ``<params>-<n>`` that counts what it produced."""

    def __init__(self):
        super().__init__()
        self.produced = 0

    def create_observable(self, params: str):
        async def stream():
            n = 0
            while True:
                self.produced += 1
                yield f"{params}-{n}"
                n += 1

        return stream()


class Collector:
    def __init__(self, flow):
        self.values: list = []
        self.error: BaseException | None = None
        self._task = asyncio.create_task(self._run(flow))

    async def _run(self, flow):
        try:
            async for value in flow:
                self.values.append(value)
        except Exception as exc:
            self.error = exc

    async def wait_for(self, count: int, timeout: float = 1.0) -> None:
        deadline = time.monotonic() + timeout
        while len(self.values) < count and self.error is None:
            if time.monotonic() > deadline:
                raise AssertionError(f"expected {count} values, got {self.values}")
            await asyncio.sleep(0.005)

    async def stop(self) -> None:
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)


# ── Tests ────────────────────────────────────────────────────────────────


class TestSaveAndObserve:
    """Save through an Interactor, observe through a SubjectInteractor."""

    @pytest.mark.asyncio
    async def test_observe_last_saved_value(self, metrics):
        repository = InMemorySummaryRepository()
        save = SaveSummaryValue(repository, metrics=metrics)
        observe = ObserveLastSavedValue(repository)

        collector = Collector(observe.flow)
        observe()

        assert await save(12) == Success(None)
        await collector.wait_for(1)
        assert collector.values == [12]

        await save(12)
        await save(30)
        await collector.wait_for(2)
        assert collector.values == [12, 30]
        await collector.stop()

    @pytest.mark.asyncio
    async def test_nothing_emitted_before_params(self):
        repository = InMemorySummaryRepository()
        await repository.save_value(1)
        observe = ObserveLastSavedValue(repository)

        collector = Collector(observe.flow)
        await asyncio.sleep(0.05)
        assert collector.values == []
        assert repository.observed == []

        observe(None)
        await collector.wait_for(1)
        assert collector.values == [1]
        await collector.stop()


class TestSubjectInteractor:
    """Parameter switching and stream lifecycle."""

    @pytest.mark.asyncio
    async def test_switches_to_latest_params(self):
        repository = InMemorySummaryRepository()
        await repository.save_value(1, key="a")
        await repository.save_value(2, key="b")
        observe = ObserveKey(repository)

        collector = Collector(observe.flow)
        observe("a")
        await collector.wait_for(1)
        observe("b")
        await collector.wait_for(2)
        assert collector.values == [1, 2]

        # Updates to the previous key are no longer delivered
        await repository.save_value(10, key="a")
        await repository.save_value(20, key="b")
        await collector.wait_for(3)
        await asyncio.sleep(0.02)
        assert collector.values == [1, 2, 20]
        await collector.stop()

    @pytest.mark.asyncio
    async def test_equal_params_do_not_restart_observation(self):
        repository = InMemorySummaryRepository()
        await repository.save_value(5, key="a")
        observe = ObserveKey(repository)

        collector = Collector(observe.flow)
        observe("a")
        await collector.wait_for(1)
        observe("a")
        await asyncio.sleep(0.02)
        assert repository.observed == ["a"]
        assert collector.values == [5]
        await collector.stop()

    @pytest.mark.asyncio
    async def test_consecutive_equal_values_collapsed(self):
        repository = InMemorySummaryRepository()
        await repository.save_value(7, key="a")
        await repository.save_value(7, key="b")
        observe = ObserveKey(repository)

        collector = Collector(observe.flow)
        observe("a")
        await collector.wait_for(1)
        observe("b")
        await asyncio.sleep(0.02)
        assert collector.values == [7]
        await collector.stop()

    @pytest.mark.asyncio
    async def test_flow_is_resubscribable(self):
        repository = InMemorySummaryRepository()
        await repository.save_value(3)
        observe = ObserveLastSavedValue(repository)
        observe()

        first = Collector(observe.flow)
        second = Collector(observe.flow)
        await first.wait_for(1)
        await second.wait_for(1)
        assert first.values == second.values == [3]
        await first.stop()
        await second.stop()

    @pytest.mark.asyncio
    async def test_inner_error_reaches_consumer(self):
        class Broken(SubjectInteractor[int, int]):
            def create_observable(self, params):
                async def stream():
                    yield params
                    raise RuntimeError("repository unavailable")

                return stream()

        observe = Broken()
        collector = Collector(observe.flow)
        observe(1)
        await collector.wait_for(2)
        assert collector.values == [1]
        assert isinstance(collector.error, RuntimeError)
        await collector.stop()

    @pytest.mark.asyncio
    async def test_stopping_consumer_closes_observation(self):
        repository = InMemorySummaryRepository()
        await repository.save_value(1)
        observe = ObserveLastSavedValue(repository)
        observe()

        collector = Collector(observe.flow)
        await collector.wait_for(1)
        assert repository._stream("summary").subscription_count == 1

        await collector.stop()
        assert repository._stream("summary").subscription_count == 0


class TestBackpressure:
    """A slow consumer paces an endless observation."""

    @pytest.mark.asyncio
    async def test_slow_consumer_does_not_run_observation_ahead(self):
        observe = Ticker()
        flow = aiter(observe.flow)
        observe("a")
        assert await asyncio.wait_for(anext(flow), 1.0) == "a-0"

        await asyncio.sleep(0.1)
        assert observe.produced <= 2

        assert await asyncio.wait_for(anext(flow), 1.0) == "a-1"
        await flow.aclose()

    @pytest.mark.asyncio
    async def test_new_params_drop_unread_values(self):
        observe = Ticker()
        flow = aiter(observe.flow)
        observe("a")
        assert await asyncio.wait_for(anext(flow), 1.0) == "a-0"

        await asyncio.sleep(0.05)
        observe("b")
        assert await asyncio.wait_for(anext(flow), 1.0) == "b-0"
        assert await asyncio.wait_for(anext(flow), 1.0) == "b-1"
        await flow.aclose()
