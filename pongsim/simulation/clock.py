"""
Frame clock: turns wall-clock time into per-frame deltas in milliseconds.
"""

import time
from typing import Callable, Optional


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FrameClock:
    """
    Source of frame deltas.

    The first tick after construction or ``reset`` returns 0. Later ticks
    return the milliseconds since the previous tick, capped at ``max_delta``
    so that a stalled window does not move the ball across the board in one
    frame.
    """

    def __init__(self,
                 max_delta: float = 100.0,
                 time_source: Optional[Callable[[], float]] = None):
        """
        Initialize the clock.

        Args:
            max_delta: Largest delta returned, in milliseconds
            time_source: Callable returning the current time in milliseconds
        """
        self.max_delta = max_delta
        self._time_source = time_source or _monotonic_ms
        self._last: Optional[float] = None

    def tick(self, now_ms: Optional[float] = None) -> float:
        """
        Mark a new frame.

        Args:
            now_ms: Current time in milliseconds, read from the time source when None

        Returns:
            Milliseconds since the previous tick
        """
        now = self._time_source() if now_ms is None else now_ms

        if self._last is None:
            self._last = now
            return 0.0

        # Never hand out negative deltas if the time source steps backwards
        delta = max(0.0, now - self._last)
        self._last = now
        return min(delta, self.max_delta)

    def reset(self) -> None:
        """Forget the previous tick so the next one returns 0."""
        self._last = None
