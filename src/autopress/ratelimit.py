"""Minimum-interval gate between calls to rate-limited collaborators."""

from __future__ import annotations

import threading
import time
from typing import Callable


class MinIntervalLimiter:
    """Blocks in ``wait()`` until ``min_interval`` seconds passed since the last call.

    The first call never waits. Clock and sleep are injectable so tests can
    drive the limiter without touching the wall clock.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Wait for the gate and mark a call. Returns the seconds slept."""
        with self._lock:
            slept = 0.0
            if self._last_call is not None:
                elapsed = self._clock() - self._last_call
                if elapsed < self.min_interval:
                    slept = self.min_interval - elapsed
                    self._sleep(slept)
            self._last_call = self._clock()
            return slept

    def reset(self) -> None:
        with self._lock:
            self._last_call = None
