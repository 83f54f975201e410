"""Bounded-concurrency scheduling: ``parallel``, ``series`` and ``map``.

A run starts at most ``limit`` tasks at once and refills the pool as tasks
finish. Results are stored by task index. The first task to fail rejects the
run. Tasks that are already in flight keep running; their outcomes are
discarded.
"""

from __future__ import annotations

import asyncio
import builtins
import logging
import math
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from promise_tools.futures import Deferred, defer, discard, invoke
from promise_tools.utils import trace

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

Task = Callable[[], T | Awaitable[T]]


def _effective_limit(limit: float | None, task_count: int) -> int:
    if limit is None or limit < 1 or limit >= task_count:
        return task_count
    return math.ceil(limit)


@dataclass
class _ParallelRun:
    tasks: Sequence[Task[Any]]
    limit: int
    deferred: Deferred[builtins.list[Any]]
    results: builtins.list[Any] = field(init=False)
    next_index: int = 0
    in_flight: int = 0
    failed: bool = False

    def __post_init__(self) -> None:
        self.results = [None] * len(self.tasks)

    @property
    def stopped(self) -> bool:
        return self.failed or self.deferred.settled()

    def start(self) -> None:
        if not self.tasks:
            self.deferred.resolve([])
            return
        for _ in range(self.limit):
            self._start_next()

    def _start_next(self) -> None:
        if self.stopped or self.next_index >= len(self.tasks):
            return
        index = self.next_index
        self.next_index += 1
        self.in_flight += 1
        trace(logger, "starting task %d of %d (%d in flight)", index, len(self.tasks), self.in_flight)
        future = invoke(self.tasks[index])
        future.add_done_callback(lambda done: self._on_settled(index, done))

    def _on_settled(self, index: int, future: asyncio.Future[Any]) -> None:
        self.in_flight -= 1
        if self.stopped:
            trace(logger, "discarding outcome of task %d after the run stopped", index)
            discard(future)
            return

        if future.cancelled() or future.exception() is not None:
            self.failed = True
            trace(logger, "task %d failed; rejecting run with %d still in flight", index, self.in_flight)
            self.deferred.adopt(future)
            return

        self.results[index] = future.result()
        if self.next_index < len(self.tasks) and self.in_flight < self.limit:
            self._start_next()
        elif self.in_flight == 0:
            trace(logger, "all %d tasks finished", len(self.tasks))
            self.deferred.resolve(self.results)


def parallel(tasks: Iterable[Task[T]], limit: float | None = None) -> asyncio.Future[builtins.list[T]]:
    """
    Run ``tasks`` with at most ``limit`` of them in flight at once.

    Each task is a zero-argument callable returning a value or an awaitable.
    Resolves to the task results in task order. Rejects with the first failure
    by completion time. ``limit`` of None, below 1, or at least ``len(tasks)``
    runs every task at once.
    """
    task_list = builtins.list(tasks)
    run = _ParallelRun(
        tasks=task_list,
        limit=_effective_limit(limit, len(task_list)),
        deferred=defer(),
    )
    run.start()
    return run.deferred.future


parallel_limit = parallel


def series(tasks: Iterable[Task[T]]) -> asyncio.Future[builtins.list[T]]:
    """Run ``tasks`` one after another, starting each only after the previous one succeeded."""

    return parallel(tasks, 1)


def map(
    items: Iterable[T],
    iterator: Callable[[T, int], U | Awaitable[U]],
    limit: float | None = None,
) -> asyncio.Future[builtins.list[U]]:
    """
    Call ``iterator(item, index)`` for every item, at most ``limit`` at a time (default 1).

    Resolves to the iterator results in item order.
    """
    item_list = builtins.list(items)
    task_limit = 1 if limit is None or limit < 1 else math.ceil(limit)
    if task_limit >= len(item_list):
        task_limit = len(item_list)

    def _task(item: T, index: int) -> Task[U]:
        return lambda: iterator(item, index)

    return parallel([_task(item, index) for index, item in enumerate(item_list)], task_limit)


__all__ = ["Task", "map", "parallel", "parallel_limit", "series"]
