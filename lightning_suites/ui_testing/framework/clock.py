"""
Time source for every wait, retry and stopwatch in the framework.

All components take a Clock instead of calling the time module directly, so
unit tests can drive them with a virtual clock.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source with a blocking sleep."""

    def now(self) -> float:
        """Seconds on a monotonic scale."""
        ...

    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Clock backed by the interpreter's monotonic timer."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


__all__ = ["Clock", "SystemClock"]
