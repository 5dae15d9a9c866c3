# core/timers.py — timeout / interval scheduling on real elapsed time

from __future__ import annotations
import heapq
import itertools
from typing import Callable, Optional


class Timer:
    """Handle for a scheduled callback. Only the scheduler's caller cancels it."""

    def __init__(self, callback: Callable[[], None], interval_ms: Optional[float]) -> None:
        self.callback = callback
        self.interval_ms = interval_ms
        self.cancelled = False
        self.fire_count = 0

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None

    def cancel(self) -> None:
        self.cancelled = True


class TimerQueue:
    """
    Fires callbacks once (timeout) or every N milliseconds (interval).

    Time only moves when advance() is called. The frame loop feeds it real
    elapsed milliseconds, so timers keep running while the sim clock is paused.

    Callbacks run in due order and may schedule or cancel other timers.
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._heap: list[tuple[float, int, Timer]] = []
        self._seq = itertools.count()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def set_timeout(self, callback: Callable[[], None], delay_ms: float) -> Timer:
        timer = Timer(callback, None)
        self._push(self.now + max(0.0, delay_ms), timer)
        return timer

    def set_interval(self, callback: Callable[[], None], interval_ms: float) -> Timer:
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        timer = Timer(callback, interval_ms)
        self._push(self.now + interval_ms, timer)
        return timer

    def _push(self, due: float, timer: Timer) -> None:
        heapq.heappush(self._heap, (due, next(self._seq), timer))

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def advance(self, dt_ms: float) -> int:
        """Move time forward by dt_ms, firing everything due. Returns fire count."""
        target = self.now + dt_ms
        fired = 0

        while self._heap and self._heap[0][0] <= target:
            due, _, timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            self.now = due
            timer.fire_count += 1
            fired += 1
            timer.callback()
            if timer.repeating and not timer.cancelled:
                self._push(due + timer.interval_ms, timer)

        self.now = target
        return fired

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._heap if not t.cancelled)
