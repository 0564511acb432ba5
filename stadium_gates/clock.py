from __future__ import annotations

# Simulated clock.
#
# One tick of real time is one simulated minute (by default 1 s = 1 min).
# The time source is injectable so tests can drive the clock by hand.

import math
import time
from typing import Callable


class SimClock:
    """Monotonic elapsed-time source started at construction."""

    def __init__(self, *, tick_seconds: float = 1.0, time_fn: Callable[[], float] = time.monotonic) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")
        self.tick_seconds = tick_seconds
        self._time_fn = time_fn
        self._start = time_fn()

    def elapsed(self) -> float:
        return max(0.0, self._time_fn() - self._start)

    def elapsed_seconds(self) -> int:
        """Whole real seconds since start."""
        return int(math.floor(self.elapsed()))

    def current_minute(self) -> int:
        """Current simulated minute (floor, never negative, never decreasing)."""
        return int(math.floor(self.elapsed() / self.tick_seconds))
