from __future__ import annotations

import asyncio
import builtins

import pytest

from promise_tools import PromiseToolsError, TimeoutError, delay, timeout


async def _resolve_after(ms: float, value: object) -> object:
    await delay(ms)
    return value


async def _fail_after(ms: float, message: str) -> None:
    await delay(ms)
    raise RuntimeError(message)


class TestTimeoutError:
    def test_type_hierarchy(self) -> None:
        """TimeoutError is ours and also a built-in TimeoutError."""
        error = TimeoutError("timeout")
        assert isinstance(error, TimeoutError)
        assert isinstance(error, PromiseToolsError)
        assert isinstance(error, builtins.TimeoutError)
        assert isinstance(error, Exception)
        assert str(error) == "timeout"

    def test_for_duration_message(self) -> None:
        """The message names the configured duration."""
        error = TimeoutError.for_duration(250)
        assert str(error) == "Timeout: Promise did not resolve within 250 milliseconds"
        assert error.ms == 250

    def test_integral_float_duration_has_no_fraction(self) -> None:
        """A whole-number float duration is rendered without a trailing .0."""
        assert str(TimeoutError.for_duration(100.0)) == "Timeout: Promise did not resolve within 100 milliseconds"
        assert str(TimeoutError.for_duration(2.5)) == "Timeout: Promise did not resolve within 2.5 milliseconds"


class TestTimeout:
    @pytest.mark.asyncio
    async def test_resolves_when_target_resolves_in_time(self) -> None:
        """The target's value passes through."""
        assert await timeout(_resolve_after(10, "done"), 1000) == "done"

    @pytest.mark.asyncio
    async def test_rejects_when_target_rejects_in_time(self) -> None:
        """The target's error passes through unchanged."""
        with pytest.raises(RuntimeError, match="Boom"):
            await timeout(_fail_after(10, "Boom"), 1000)

    @pytest.mark.asyncio
    async def test_rejects_when_target_resolves_too_late(self) -> None:
        """A slow success still times out, and the target keeps running."""
        target = asyncio.ensure_future(_resolve_after(50, "done"))

        with pytest.raises(TimeoutError, match="within 1 milliseconds"):
            await timeout(target, 1)

        assert not target.cancelled()
        assert await target == "done"

    @pytest.mark.asyncio
    async def test_rejects_when_target_rejects_too_late(self) -> None:
        """A slow failure times out instead of surfacing its own error."""
        target = asyncio.ensure_future(_fail_after(50, "Boom"))

        with pytest.raises(TimeoutError):
            await timeout(target, 1)

        with pytest.raises(RuntimeError, match="Boom"):
            await target

    @pytest.mark.asyncio
    async def test_error_records_call_site(self) -> None:
        """The timeout error points at the caller, not at the timer callback."""
        target = asyncio.ensure_future(_resolve_after(30, None))

        with pytest.raises(TimeoutError) as excinfo:
            await timeout(target, 1)

        call_site = excinfo.value.call_site
        assert call_site is not None
        assert call_site.filename == __file__
        assert call_site.function == "test_error_records_call_site"
        await target

    @pytest.mark.asyncio
    async def test_accepts_plain_futures(self) -> None:
        """Any awaitable can be guarded, including bare futures."""
        future = delay(5)
        assert await timeout(future, 100) is None

    @pytest.mark.asyncio
    async def test_cancelling_outer_leaves_target_running(self) -> None:
        """Cancelling the guard disarms the timer but not the target."""
        target = asyncio.ensure_future(_resolve_after(10, "done"))
        guarded = timeout(target, 5)
        guarded.cancel()

        assert await target == "done"
        await delay(10)
        assert guarded.cancelled()
