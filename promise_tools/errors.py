from __future__ import annotations

import builtins
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promise_tools.utils import CallSite


class PromiseToolsError(Exception):
    """Base class for errors raised by promise_tools itself."""


class TimeoutError(PromiseToolsError, builtins.TimeoutError):
    """Raised when a future guarded by ``timeout`` does not settle in time."""

    def __init__(self, message: str, *, ms: float | None = None, call_site: CallSite | None = None) -> None:
        self.ms = ms
        self.call_site = call_site
        super().__init__(message)

    @classmethod
    def for_duration(cls, ms: float, call_site: CallSite | None = None) -> TimeoutError:
        return cls(
            f"Timeout: Promise did not resolve within {_format_ms(ms)} milliseconds",
            ms=ms,
            call_site=call_site,
        )


def _format_ms(ms: float) -> str:
    if isinstance(ms, float) and ms.is_integer():
        return str(int(ms))
    return str(ms)


class ConfigurationError(PromiseToolsError, ValueError):
    """Raised when ``retry`` is given options it cannot interpret."""


def unsupported_type_error(option: str, value: object) -> ConfigurationError:
    return ConfigurationError(
        f"Unsupported argument type for '{option}': {type(value).__name__}"
    )


__all__ = [
    "ConfigurationError",
    "PromiseToolsError",
    "TimeoutError",
    "unsupported_type_error",
]
