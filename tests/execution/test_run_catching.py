"""Tests for the result boundary."""

import asyncio

import pytest

from strata.core.errors import ErrorCategory, NotFoundError, StrataExecutionError
from strata.core.result import Failure, Success
from strata.execution.run_catching import run_catching, run_catching_async
from strata.execution.timeout import TimeoutExpired


# ── Helpers ──────────────────────────────────────────────────────────────


def _raise(exc: BaseException):
    def work():
        raise exc

    return work


def _raise_async(exc: BaseException):
    async def work():
        await asyncio.sleep(0)
        raise exc

    return work


# ── run_catching ─────────────────────────────────────────────────────────


class TestRunCatching:
    """Synchronous boundary."""

    def test_value_becomes_success(self):
        assert run_catching(lambda: 6 * 7) == Success(42)

    def test_none_value_becomes_success(self):
        assert run_catching(lambda: None) == Success(None)

    def test_domain_error_passes_through(self):
        error = NotFoundError("no value")
        result = run_catching(_raise(error))
        assert isinstance(result, Failure)
        assert result.error is error

    def test_other_exception_is_wrapped(self):
        result = run_catching(lambda: 1 / 0)
        assert isinstance(result, Failure)
        assert isinstance(result.error, StrataExecutionError)
        assert isinstance(result.error.cause, ZeroDivisionError)
        assert result.error.category is ErrorCategory.EXECUTION

    def test_timeout_expired_gets_timeout_category(self):
        result = run_catching(_raise(TimeoutExpired(1.0, operation="load")))
        assert result.error.is_timeout
        assert isinstance(result.error.cause, TimeoutExpired)

    def test_plain_timeout_error_is_not_a_deadline(self):
        result = run_catching(_raise(TimeoutError("socket")))
        assert result.error.category is ErrorCategory.EXECUTION

    def test_cancellation_propagates(self):
        with pytest.raises(asyncio.CancelledError):
            run_catching(_raise(asyncio.CancelledError()))

    def test_keyboard_interrupt_propagates(self):
        with pytest.raises(KeyboardInterrupt):
            run_catching(_raise(KeyboardInterrupt()))


# ── run_catching_async ───────────────────────────────────────────────────


class TestRunCatchingAsync:
    """Asynchronous boundary."""

    @pytest.mark.asyncio
    async def test_value_becomes_success(self):
        async def work():
            await asyncio.sleep(0)
            return "saved"

        assert await run_catching_async(work) == Success("saved")

    @pytest.mark.asyncio
    async def test_domain_error_passes_through(self):
        error = NotFoundError("no value")
        result = await run_catching_async(_raise_async(error))
        assert result.error is error

    @pytest.mark.asyncio
    async def test_other_exception_is_wrapped(self):
        result = await run_catching_async(_raise_async(RuntimeError("disk full")))
        assert isinstance(result.error, StrataExecutionError)
        assert result.error.message == "RuntimeError: disk full"

    @pytest.mark.asyncio
    async def test_cancelled_error_raised_by_work_propagates(self):
        with pytest.raises(asyncio.CancelledError):
            await run_catching_async(_raise_async(asyncio.CancelledError()))

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self):
        started = asyncio.Event()

        async def work():
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(run_catching_async(work))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert task.cancelled()
