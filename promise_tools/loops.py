"""``whilst`` and ``do_whilst``: repeat a task while a synchronous predicate holds."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from promise_tools.futures import Deferred, defer, invoke
from promise_tools.result import capture
from promise_tools.utils import trace

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Loop:
    test: Callable[[], bool]
    fn: Callable[[], Any]
    deferred: Deferred[Any]
    last_value: Any = None
    iterations: int = 0

    def step(self) -> None:
        if self.deferred.settled():
            return
        outcome = capture(self.test)
        if outcome.is_err():
            self.deferred.reject(outcome.err())
            return
        if not outcome.unwrap():
            trace(logger, "loop finished after %d iterations", self.iterations)
            self.deferred.resolve(self.last_value)
            return
        invoke(self.fn).add_done_callback(self._on_settled)

    def _on_settled(self, future: asyncio.Future[Any]) -> None:
        if future.cancelled() or future.exception() is not None:
            self.deferred.adopt(future)
            return
        self.last_value = future.result()
        self.iterations += 1
        # Next test runs on a fresh loop turn so long loops do not grow the stack.
        asyncio.get_running_loop().call_soon(self.step)


def whilst(test: Callable[[], bool], fn: Callable[[], T | Awaitable[T]]) -> asyncio.Future[T | None]:
    """
    Call ``fn()`` over and over while ``test()`` returns true.

    Resolves to the last value ``fn`` produced, or None if ``test()`` was false
    from the start. Rejects as soon as ``fn`` fails or either callable raises.
    """
    loop = _Loop(test=test, fn=fn, deferred=defer())
    loop.step()
    return loop.deferred.future


def do_whilst(fn: Callable[[], T | Awaitable[T]], test: Callable[[], bool]) -> asyncio.Future[T]:
    """Same as ``whilst`` but ``fn`` runs once before ``test`` is first consulted."""

    first = True

    def _test() -> bool:
        nonlocal first
        if first:
            first = False
            return True
        return test()

    return whilst(_test, fn)


__all__ = ["do_whilst", "whilst"]
