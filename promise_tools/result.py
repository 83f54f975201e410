"""
Minimal ``Result`` sum type used to capture the synchronous outcome of a task.

Every place that calls user code (a task, a map iterator, a retry function)
first captures the call into ``Ok``/``Err`` and only then turns it into a
future, so that a raised exception and a rejected future travel the same path.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar, cast

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
U = TypeVar("U")


class Result(Generic[T_co]):
    """Sum type representing either a successful value or an error."""

    __slots__ = ()

    def is_ok(self) -> bool:
        """Return ``True`` when the result is successful."""

        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` when the result represents a failure."""

        return isinstance(self, Err)

    def ok(self) -> T_co | None:
        if isinstance(self, Ok):
            return self.value
        return None

    def err(self) -> BaseException | None:
        if isinstance(self, Err):
            return self.error
        return None

    def unwrap(self) -> T_co:
        """Return the value or raise the stored error."""

        if isinstance(self, Ok):
            return self.value
        raise self.error

    def map(self, f: Callable[[T_co], U]) -> Result[U]:
        """Apply ``f`` to the contained value if this is a success."""

        if isinstance(self, Ok):
            return Ok(f(self.value))
        return cast(Result[U], self)

    def to_future(self, loop: asyncio.AbstractEventLoop | None = None) -> asyncio.Future[Any]:
        """Return a future already settled with this result.

        An ``Ok`` holding an awaitable is chained rather than wrapped, so a task
        returning a coroutine yields the coroutine's outcome.
        """

        if loop is None:
            loop = asyncio.get_running_loop()
        if isinstance(self, Ok):
            if inspect.isawaitable(self.value):
                return asyncio.ensure_future(self.value, loop=loop)
            future = loop.create_future()
            future.set_result(self.value)
            return future
        future = loop.create_future()
        if isinstance(self.error, asyncio.CancelledError):
            future.cancel()
        else:
            future.set_exception(self.error)
        return future

    def __bool__(self) -> bool:
        """Truthiness matches :meth:`is_ok`."""

        return self.is_ok()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Success result."""

    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Error result."""

    error: BaseException


def capture(fn: Callable[..., T], *args: Any) -> Result[T]:
    """Call ``fn(*args)`` and capture its return value or raised exception."""

    try:
        return Ok(fn(*args))
    except (KeyboardInterrupt, SystemExit):
        raise
    except BaseException as exc:
        return Err(exc)


__all__ = ["Err", "Ok", "Result", "capture"]
