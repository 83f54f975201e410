from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest


@dataclass
class FlakyTask:
    """Callable that raises until its ``succeed_on``-th call, then returns the call count."""

    succeed_on: int
    calls: int = 0
    seen_errors: list[BaseException | None] = field(default_factory=list)

    def __call__(self, last_error: BaseException | None = None) -> int:
        self.calls += 1
        self.seen_errors.append(last_error)
        if self.calls == self.succeed_on:
            return self.calls
        raise RuntimeError(f"not done yet ({self.calls})")


@pytest.fixture
def flaky() -> Callable[[int], FlakyTask]:
    """Factory fixture for tasks that succeed on a given attempt."""

    return FlakyTask
