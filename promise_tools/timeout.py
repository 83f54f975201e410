"""Race an awaitable against a timer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

from promise_tools.errors import TimeoutError
from promise_tools.futures import Deferred, defer, discard
from promise_tools.timers import TimerHandle, coerce_delay_ms, schedule_after
from promise_tools.utils import capture_call_site, trace

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _TimeoutRace:
    target: asyncio.Future[Any]
    deferred: Deferred[Any]
    error: TimeoutError
    timer: TimerHandle | None = None

    def arm(self, ms: float) -> None:
        self.timer = schedule_after(ms, self._on_timer)
        self.target.add_done_callback(self._on_target_settled)
        self.deferred.future.add_done_callback(self._on_outer_done)

    def _on_timer(self) -> None:
        if self.timer is None:
            return
        self.timer = None
        trace(logger, "timer fired before %r settled", self.target)
        self.deferred.reject(self.error)

    def _on_target_settled(self, target: asyncio.Future[Any]) -> None:
        if self.timer is None:
            discard(target)
            return
        self.timer.cancel()
        self.timer = None
        self.deferred.adopt(target)

    def _on_outer_done(self, _outer: asyncio.Future[Any]) -> None:
        # Caller cancelled the guarded future: stop the timer, leave the target running.
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


def timeout(awaitable: Awaitable[T], ms: float) -> asyncio.Future[T]:
    """
    Add a timeout to an existing awaitable.

    Settles like ``awaitable`` if it settles within ``ms`` milliseconds, otherwise
    rejects with ``TimeoutError("Timeout: Promise did not resolve within {ms} milliseconds")``.
    The awaitable itself is never cancelled.
    """
    coerce_delay_ms(ms)
    # Built before the race so the error records the caller, not the timer callback.
    error = TimeoutError.for_duration(ms, call_site=capture_call_site())
    race = _TimeoutRace(
        target=asyncio.ensure_future(awaitable),
        deferred=defer(),
        error=error,
    )
    race.arm(ms)
    return race.deferred.future


__all__ = ["timeout"]
