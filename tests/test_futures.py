from __future__ import annotations

import asyncio
import time

import pytest

from promise_tools import Deferred, defer, delay, invoke


class TestDefer:
    @pytest.mark.asyncio
    async def test_resolve_settles_future(self) -> None:
        """resolve() settles the paired future with the value."""
        deferred = defer()
        assert isinstance(deferred, Deferred)

        asyncio.get_running_loop().call_soon(deferred.resolve, "hello")
        assert await deferred.future == "hello"

    @pytest.mark.asyncio
    async def test_reject_settles_future(self) -> None:
        """reject() fails the paired future with the error."""
        deferred = defer()
        deferred.reject(ValueError("boom"))

        with pytest.raises(ValueError, match="boom"):
            await deferred.future

    @pytest.mark.asyncio
    async def test_only_first_settlement_counts(self) -> None:
        """Later resolve/reject calls are ignored."""
        deferred = defer()
        deferred.resolve(1)
        deferred.resolve(2)
        deferred.reject(ValueError("ignored"))

        assert await deferred.future == 1

    @pytest.mark.asyncio
    async def test_settling_after_cancel_is_ignored(self) -> None:
        """A consumer cancelling the future does not make resolve() raise."""
        deferred = defer()
        deferred.future.cancel()

        deferred.resolve("late")
        assert deferred.future.cancelled()

    @pytest.mark.asyncio
    async def test_reject_requires_exception(self) -> None:
        """reject() only accepts exception instances."""
        deferred = defer()
        with pytest.raises(TypeError, match="error must be BaseException"):
            deferred.reject("not an exception")  # type: ignore[arg-type]


class TestDelay:
    @pytest.mark.asyncio
    async def test_resolves_with_none_after_interval(self) -> None:
        """delay(ms) resolves with None once the interval elapsed."""
        started = time.monotonic()
        assert await delay(20) is None
        assert time.monotonic() - started >= 0.015

    @pytest.mark.asyncio
    async def test_zero_and_negative_delays_resolve(self) -> None:
        """Non-positive delays resolve on a later loop turn."""
        assert await delay(0) is None
        assert await delay(-5) is None

    @pytest.mark.asyncio
    async def test_infinite_delay_never_resolves(self) -> None:
        """An infinite delay stays pending."""
        future = delay(float("inf"))
        await asyncio.sleep(0.01)
        assert not future.done()
        future.cancel()


class TestInvoke:
    @pytest.mark.asyncio
    async def test_plain_value_becomes_resolved_future(self) -> None:
        """A synchronous return value is an already-resolved future."""
        future = invoke(lambda: 42)
        assert future.done()
        assert await future == 42

    @pytest.mark.asyncio
    async def test_raise_becomes_rejected_future(self) -> None:
        """A synchronous raise is an already-rejected future."""

        def explode() -> None:
            raise KeyError("missing")

        future = invoke(explode)
        assert future.done()
        with pytest.raises(KeyError):
            await future

    @pytest.mark.asyncio
    async def test_coroutine_is_scheduled(self) -> None:
        """A returned coroutine is awaited through."""

        async def work(value: str) -> str:
            await asyncio.sleep(0)
            return value * 2

        assert await invoke(work, "ab") == "abab"
