"""Timer collaborator backed by the running asyncio event loop.

``schedule_after`` mirrors ``loop.call_later`` but takes milliseconds and
tolerates delays the loop cannot express: an infinite delay never fires and a
negative delay fires on the next loop turn.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any, Protocol

from promise_tools.utils import trace

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class _NeverHandle:
    """Handle for a timer that is never going to fire."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


def coerce_delay_ms(ms: float) -> float:
    if isinstance(ms, bool) or not isinstance(ms, int | float):
        raise TypeError(f"ms must be int or float, got {type(ms).__name__}")
    if math.isnan(ms):
        raise ValueError("ms must not be NaN")
    return max(0.0, float(ms))


def schedule_after(
    ms: float,
    callback: Callable[..., Any],
    *args: Any,
    loop: asyncio.AbstractEventLoop | None = None,
) -> TimerHandle:
    """Call ``callback(*args)`` on the event loop after ``ms`` milliseconds."""

    delay_ms = coerce_delay_ms(ms)
    if math.isinf(delay_ms):
        trace(logger, "timer for %r armed with infinite delay; it will never fire", callback)
        return _NeverHandle()
    if loop is None:
        loop = asyncio.get_running_loop()
    return loop.call_later(delay_ms / 1000.0, callback, *args)


__all__ = ["TimerHandle", "coerce_delay_ms", "schedule_after"]
