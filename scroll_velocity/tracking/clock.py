"""Monotonic microsecond clocks used to timestamp position samples."""
from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]

MICROS_PER_SECOND = 1_000_000


class Stopwatch:
    """Microsecond stopwatch started at construction."""

    def __init__(self) -> None:
        """Initialize and start the stopwatch."""
        self._start_ns = time.perf_counter_ns()

    def elapsed_us(self) -> int:
        """Get the elapsed time in microseconds."""
        return (time.perf_counter_ns() - self._start_ns) // 1000

    def __call__(self) -> int:
        return self.elapsed_us()


class ManualClock:
    """Clock that only moves when told to.

    Used for replaying recorded samples and for tests. The clock refuses to
    move backward, so anything reading it sees the same guarantee as with a
    Stopwatch.
    """

    def __init__(self, start_us: int = 0) -> None:
        """Initialize the clock."""
        self._now_us = int(start_us)

    def advance(self, seconds: float) -> int:
        """Move the clock forward by the given number of seconds."""
        if seconds < 0:
            msg = f"Cannot move clock backward by {seconds}s"
            raise ValueError(msg)
        self._now_us += round(seconds * MICROS_PER_SECOND)
        return self._now_us

    def set_seconds(self, seconds: float) -> int:
        """Jump to an absolute time in seconds."""
        target = round(seconds * MICROS_PER_SECOND)
        if target < self._now_us:
            msg = f"Cannot move clock from {self._now_us}us back to {target}us"
            raise ValueError(msg)
        self._now_us = target
        return self._now_us

    def __call__(self) -> int:
        return self._now_us
