"""Elapsed wall-time measurement for a single job run."""
from __future__ import annotations

import time
from typing import Callable, Optional


class ClockTimer:
    """Measure the duration between ``start()`` and ``stop()``.

    One run is one measurement: calling ``start()`` again discards the
    previous begin instant instead of accumulating.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._started_at: Optional[float] = None
        self._elapsed: float = 0.0
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def elapsed(self) -> float:
        """Seconds since the last ``start()``; frozen once stopped, 0.0 before any start."""
        if self._running and self._started_at is not None:
            return self._clock() - self._started_at
        return self._elapsed

    def start(self) -> None:
        self._started_at = self._clock()
        self._elapsed = 0.0
        self._running = True

    def stop(self) -> float:
        """Freeze and return the elapsed duration."""
        if self._running and self._started_at is not None:
            self._elapsed = self._clock() - self._started_at
        self._running = False
        return self._elapsed

    def __repr__(self) -> str:
        return f"ClockTimer(elapsed={self.elapsed:.3f}s, running={self._running})"
