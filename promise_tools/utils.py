"""
Utility functions for the promise_tools library.
"""

from __future__ import annotations

import linecache
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

from promise_tools import config

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


@dataclass(frozen=True)
class CallSite:
    """Where a combinator was called from."""

    filename: str
    line: int
    function: str
    code: str | None = None

    def __str__(self) -> str:
        return f"{self.filename}:{self.line} in {self.function}"


def _is_internal(filename: str) -> bool:
    return os.path.dirname(os.path.abspath(filename)) == _PACKAGE_DIR


def capture_call_site(skip_frames: int = 1) -> CallSite | None:
    """
    Return the first stack frame outside promise_tools, starting ``skip_frames`` up.

    Returns None when frame introspection is unavailable.
    """
    try:
        frame = sys._getframe(skip_frames)
    except (AttributeError, ValueError):
        return None

    while frame is not None and _is_internal(frame.f_code.co_filename):
        frame = frame.f_back
    if frame is None:
        return None

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None
    return CallSite(filename=filename, line=line, function=frame.f_code.co_name, code=code)


def trace(logger: logging.Logger, message: str, *args: Any) -> None:
    """Emit a debug record when ``PROMISE_TOOLS_DEBUG`` is enabled."""

    if config.DEBUG:
        logger.debug(message, *args)


__all__ = [
    "CallSite",
    "capture_call_site",
    "trace",
]
