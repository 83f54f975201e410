"""
Environment-driven defaults for promise_tools.

Values are read once at import time:

- ``PROMISE_TOOLS_DEBUG``: ``1``/``true``/``yes`` enables debug tracing.
- ``PROMISE_TOOLS_RETRY_TIMES``: default attempt budget for ``retry`` (``inf`` allowed).
- ``PROMISE_TOOLS_RETRY_INTERVAL``: default pacing interval for ``retry`` in milliseconds.

Unparseable values fall back to the built-in defaults.
"""

from __future__ import annotations

import math
import os

DEBUG_ENV_KEY = "PROMISE_TOOLS_DEBUG"
RETRY_TIMES_ENV_KEY = "PROMISE_TOOLS_RETRY_TIMES"
RETRY_INTERVAL_ENV_KEY = "PROMISE_TOOLS_RETRY_INTERVAL"

_DEFAULT_RETRY_TIMES = 5
_DEFAULT_RETRY_INTERVAL = 0.0


def env_flag(name: str, environ: dict[str, str] | None = None) -> bool:
    source = os.environ if environ is None else environ
    return source.get(name, "").lower() in ("1", "true", "yes")


def env_retry_times(environ: dict[str, str] | None = None) -> int | float:
    source = os.environ if environ is None else environ
    raw = source.get(RETRY_TIMES_ENV_KEY, "").strip().lower()
    if not raw:
        return _DEFAULT_RETRY_TIMES
    if raw in ("inf", "infinity"):
        return math.inf
    try:
        times = int(raw)
    except ValueError:
        return _DEFAULT_RETRY_TIMES
    return times if times > 0 else _DEFAULT_RETRY_TIMES


def env_retry_interval(environ: dict[str, str] | None = None) -> float:
    source = os.environ if environ is None else environ
    raw = source.get(RETRY_INTERVAL_ENV_KEY, "").strip()
    if not raw:
        return _DEFAULT_RETRY_INTERVAL
    try:
        interval = float(raw)
    except ValueError:
        return _DEFAULT_RETRY_INTERVAL
    if math.isnan(interval) or math.isinf(interval) or interval < 0:
        return _DEFAULT_RETRY_INTERVAL
    return interval


DEBUG = env_flag(DEBUG_ENV_KEY)
RETRY_TIMES = env_retry_times()
RETRY_INTERVAL = env_retry_interval()


__all__ = [
    "DEBUG",
    "DEBUG_ENV_KEY",
    "RETRY_INTERVAL",
    "RETRY_INTERVAL_ENV_KEY",
    "RETRY_TIMES",
    "RETRY_TIMES_ENV_KEY",
    "env_flag",
    "env_retry_interval",
    "env_retry_times",
]
