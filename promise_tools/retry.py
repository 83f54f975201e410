"""Retry a task until it succeeds or its attempt budget runs out."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from promise_tools import config
from promise_tools.errors import ConfigurationError, unsupported_type_error
from promise_tools.futures import Deferred, defer, discard, invoke
from promise_tools.timers import TimerHandle, schedule_after
from promise_tools.utils import trace

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryTask = Callable[[BaseException | None], T | Awaitable[T]]


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


@dataclass(frozen=True)
class RetryOptions:
    """Attempt budget and pacing for ``retry``.

    Args:
        times: Number of attempts before giving up. ``math.inf`` retries forever.
        interval: Milliseconds to wait between attempts. Zero waits one loop turn.
    """

    times: int | float = field(default_factory=lambda: config.RETRY_TIMES)
    interval: float = field(default_factory=lambda: config.RETRY_INTERVAL)

    def __post_init__(self) -> None:
        if not _is_number(self.times):
            raise unsupported_type_error("times", self.times)
        if math.isnan(self.times):
            raise ConfigurationError("'times' may not be NaN")
        if not _is_number(self.interval):
            raise unsupported_type_error("interval", self.interval)
        if self.interval == math.inf:
            raise ConfigurationError("'interval' may not be Infinity")
        if math.isnan(self.interval):
            raise ConfigurationError("'interval' may not be NaN")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> RetryOptions:
        """Build options from a mapping with optional ``times`` and ``interval`` keys.

        Falsy values are treated as absent.
        """
        kwargs: dict[str, Any] = {}
        times = options.get("times")
        if _is_number(times):
            kwargs["times"] = times
        elif times:
            raise unsupported_type_error("times", times)
        interval = options.get("interval")
        if interval:
            kwargs["interval"] = interval
        return cls(**kwargs)

    def exhausted(self, attempts: int) -> bool:
        return self.times != math.inf and attempts >= self.times


def _resolve_arguments(options: Any, fn: Any) -> tuple[RetryOptions, RetryTask[Any]]:
    if callable(options):
        return RetryOptions(), options

    if _is_number(options):
        resolved = RetryOptions(times=options)
    elif isinstance(options, RetryOptions):
        resolved = options
    elif isinstance(options, Mapping):
        resolved = RetryOptions.from_mapping(options)
    elif options:
        raise unsupported_type_error("times", options)
    else:
        raise ConfigurationError("No parameters given")

    if not callable(fn):
        raise ConfigurationError("No task function given")
    return resolved, fn


@dataclass
class _RetryRun:
    options: RetryOptions
    fn: RetryTask[Any]
    deferred: Deferred[Any]
    attempts: int = 0
    last_error: BaseException | None = None
    timer: TimerHandle | None = None

    def start(self) -> None:
        self.deferred.future.add_done_callback(self._on_outer_done)
        self._attempt()

    def _attempt(self) -> None:
        self.timer = None
        if self.deferred.settled():
            return
        invoke(self.fn, self.last_error).add_done_callback(self._on_settled)

    def _on_settled(self, future: asyncio.Future[Any]) -> None:
        if self.deferred.settled():
            discard(future)
            return
        if future.cancelled():
            self.deferred.cancel()
            return
        error = future.exception()
        if error is None:
            self.deferred.resolve(future.result())
            return

        self.attempts += 1
        self.last_error = error
        if self.options.exhausted(self.attempts):
            trace(logger, "giving up after %d attempts: %r", self.attempts, error)
            self.deferred.reject(error)
            return
        trace(logger, "attempt %d failed, retrying in %sms: %r", self.attempts, self.options.interval, error)
        self.timer = schedule_after(self.options.interval, self._attempt)

    def _on_outer_done(self, _outer: asyncio.Future[Any]) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


def retry(
    options: RetryTask[T] | int | float | RetryOptions | Mapping[str, Any] | None = None,
    fn: RetryTask[T] | None = None,
) -> asyncio.Future[T]:
    """
    Keep calling ``fn`` until it returns a value, returns an awaitable that
    resolves, or the attempt budget is spent.

    ``fn`` receives the error from the previous attempt (None on the first).
    ``options`` may be the task itself (five attempts), an attempt count, a
    ``RetryOptions`` or a mapping with ``times``/``interval``. Pass ``math.inf``
    as ``times`` to retry forever. Invalid options reject the returned future
    with ``ConfigurationError`` without calling ``fn``.
    """
    deferred = defer()
    try:
        resolved, task = _resolve_arguments(options, fn)
    except ConfigurationError as exc:
        deferred.reject(exc)
        return deferred.future

    _RetryRun(options=resolved, fn=task, deferred=deferred).start()
    return deferred.future


__all__ = ["RetryOptions", "RetryTask", "retry"]
