"""
promise_tools - control-flow combinators for asyncio futures.

Compose asynchronous steps without reaching for a runtime's own combinators:
run tasks in series or with bounded parallelism, retry with pacing, guard with
a timeout, or loop while a predicate holds. Every combinator must be called
from a running event loop and returns an ``asyncio.Future``.

Example:
    >>> import asyncio
    >>> from promise_tools import delay, parallel
    >>>
    >>> async def main():
    ...     tasks = [lambda: delay(10), lambda: "b", lambda: asyncio.sleep(0, "c")]
    ...     return await parallel(tasks, 2)
"""

from promise_tools.errors import ConfigurationError, PromiseToolsError, TimeoutError
from promise_tools.futures import Deferred, defer, delay, invoke
from promise_tools.loops import do_whilst, whilst
from promise_tools.result import Err, Ok, Result
from promise_tools.retry import RetryOptions, retry
from promise_tools.scheduler import map, parallel, parallel_limit, series
from promise_tools.timeout import timeout

__all__ = [
    "ConfigurationError",
    "Deferred",
    "Err",
    "Ok",
    "PromiseToolsError",
    "Result",
    "RetryOptions",
    "TimeoutError",
    "defer",
    "delay",
    "do_whilst",
    "invoke",
    "map",
    "parallel",
    "parallel_limit",
    "retry",
    "series",
    "timeout",
    "whilst",
]
