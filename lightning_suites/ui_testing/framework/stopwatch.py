"""
================================================================================
Stopwatch Accounting
================================================================================

Splits suite run time into "working" time (driving the browser, asserting)
and "waiting" time (polling, sleeping, refreshing).

Invariants:
    - After initialise() and before shutdown() exactly one of the working and
      waiting watches is running.
    - Starting any watch other than working stops working; starting working
      stops waiting; stopping a non-working watch restarts working.
    - Category sub-watches (visible, clickable, sleep, ...) run alongside the
      waiting watch and are not part of the exclusion.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from loguru import logger

from .clock import Clock, SystemClock


WORKING = "working"
WAITING = "waiting"


class StopWatch:
    """A named accumulating timer."""

    def __init__(self, name: str, clock: Clock, controller: Optional["StopWatchController"] = None):
        self.name = name
        self.elapsed = 0.0
        self.start_count = 0
        self.started = False
        self._clock = clock
        self._controller = controller
        self._started_at = 0.0

    def start(self) -> None:
        if self.started:
            return
        self.started = True
        self.start_count += 1
        self._started_at = self._clock.now()
        if self._controller is not None:
            self._controller._start_notified(self)

    def stop(self) -> None:
        if not self.started:
            return
        self.started = False
        self.elapsed += self._clock.now() - self._started_at
        if self._controller is not None:
            self._controller._stop_notified(self)

    def total(self) -> float:
        """Accumulated seconds, including the running interval."""
        if self.started:
            return self.elapsed + (self._clock.now() - self._started_at)
        return self.elapsed

    def __repr__(self) -> str:
        return (
            f"StopWatch(name={self.name!r}, elapsed={self.elapsed:.3f}, "
            f"start_count={self.start_count}, started={self.started})"
        )


class StopWatchController:
    """
    Owns the working/waiting pair and the per-category sub-watches.

    One controller belongs to one RunContext. Mutations are serialized with a
    re-entrant lock because start/stop notifications cascade into each other.

    Usage:
        controller = StopWatchController(clock)
        controller.initialise()
        with controller.waiting("visible"):
            ...  # poll
        summary = controller.shutdown()
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._depth = 0
        self.working = StopWatch(WORKING, self._clock, self)
        self.waiting_watch = StopWatch(WAITING, self._clock, self)
        self.categories: Dict[str, StopWatch] = {}
        self._active_category: Optional[StopWatch] = None
        self.initialised = False

    def initialise(self) -> None:
        with self._lock:
            self.initialised = True
            self.working.start()
        logger.debug("Stopwatch accounting initialised")

    def _start_notified(self, watch: StopWatch) -> None:
        with self._lock:
            if watch is not self.working:
                self.working.stop()
            elif self.waiting_watch.started:
                self.waiting_watch.stop()

    def _stop_notified(self, watch: StopWatch) -> None:
        with self._lock:
            if watch is not self.working and self.initialised and not self.working.started:
                self.working.start()

    def category(self, name: str) -> StopWatch:
        with self._lock:
            if name not in self.categories:
                self.categories[name] = StopWatch(name, self._clock)
            return self.categories[name]

    @contextmanager
    def waiting(self, category: str = "wait") -> Iterator[None]:
        """
        Bracket a wait. Nested brackets are absorbed by the outermost one and
        the watches are stopped even when the wrapped code raises.
        """
        with self._lock:
            self._depth += 1
            outermost = self._depth == 1
            if outermost:
                self._active_category = self.category(category)
                self._active_category.start()
                self.waiting_watch.start()
        try:
            yield
        finally:
            with self._lock:
                self._depth -= 1
                if outermost:
                    self.waiting_watch.stop()
                    self._active_category.stop()
                    self._active_category = None

    def shutdown(self) -> Dict[str, float]:
        """
        Stop all watches and log the totals.

        Returns:
            Seconds per watch name, working and waiting first
        """
        with self._lock:
            self.initialised = False
            self.waiting_watch.stop()
            self.working.stop()
            for watch in self.categories.values():
                watch.stop()
            summary = {
                WORKING: self.working.elapsed,
                WAITING: self.waiting_watch.elapsed,
            }
            summary.update({name: watch.elapsed for name, watch in self.categories.items()})

        logger.info(f"Working time: {self.working.elapsed:.1f}s ({self.working.start_count} starts)")
        logger.info(f"Wait time: {self.waiting_watch.elapsed:.1f}s ({self.waiting_watch.start_count} starts)")
        for name, watch in sorted(self.categories.items()):
            logger.debug(f"  {name}: {watch.elapsed:.1f}s over {watch.start_count} waits")
        return summary


__all__ = ["StopWatch", "StopWatchController", "WORKING", "WAITING"]
