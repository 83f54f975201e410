"""Future primitives shared by every combinator: deferreds, delays and task invocation."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from promise_tools.result import capture
from promise_tools.timers import schedule_after

T = TypeVar("T")


@dataclass
class Deferred(Generic[T]):
    """A future together with the controls that settle it.

    Only the first call to ``resolve`` or ``reject`` has an effect. Later calls,
    and calls made after the consumer cancelled ``future``, are ignored.
    """

    future: asyncio.Future[T] = field(repr=False)

    def resolve(self, value: T) -> None:
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        if not isinstance(error, BaseException):
            raise TypeError(f"error must be BaseException, got {type(error).__name__}")
        if self.future.done():
            return
        if isinstance(error, asyncio.CancelledError):
            self.future.cancel()
        else:
            self.future.set_exception(error)

    def cancel(self) -> None:
        if not self.future.done():
            self.future.cancel()

    def settled(self) -> bool:
        return self.future.done()

    def adopt(self, source: asyncio.Future[Any]) -> None:
        """Settle this deferred with the outcome of the finished ``source`` future."""

        if source.cancelled():
            self.cancel()
            return
        error = source.exception()
        if error is not None:
            self.reject(error)
        else:
            self.resolve(source.result())


def defer() -> Deferred[Any]:
    """Return a ``Deferred`` whose future belongs to the running event loop."""

    return Deferred(future=asyncio.get_running_loop().create_future())


def delay(ms: float) -> asyncio.Future[None]:
    """Return a future that resolves with ``None`` after ``ms`` milliseconds. It never fails."""

    deferred = defer()
    handle = schedule_after(ms, deferred.resolve, None)
    deferred.future.add_done_callback(lambda _future: handle.cancel())
    return deferred.future


def invoke(fn: Callable[..., Any], *args: Any) -> asyncio.Future[Any]:
    """Call ``fn(*args)`` and return its outcome as a future.

    A plain return value becomes a resolved future, a raised exception a
    rejected one, and an awaitable is scheduled with ``asyncio.ensure_future``.
    """

    return capture(fn, *args).to_future()


def discard(future: asyncio.Future[Any]) -> None:
    """Mark the outcome of a finished future as observed without using it."""

    if not future.cancelled():
        future.exception()


__all__ = ["Deferred", "defer", "delay", "discard", "invoke"]
