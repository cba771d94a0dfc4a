"""Wall-clock budget for one search call."""

import time
from typing import Callable


class Timer:
    """Immutable deadline: a start instant plus a duration in seconds.

    The clock is injectable and defaults to ``time.monotonic``.
    """

    __slots__ = ("_start", "_duration", "_clock")

    def __init__(self, duration: float, clock: Callable[[], float] = time.monotonic):
        if duration < 0:
            raise ValueError(f"Timer duration must be >= 0, got {duration}")
        self._clock = clock
        self._duration = float(duration)
        self._start = clock()

    @classmethod
    def from_ms(cls, ms: int, clock: Callable[[], float] = time.monotonic) -> "Timer":
        return cls(ms / 1000.0, clock=clock)

    @property
    def start(self) -> float:
        return self._start

    @property
    def duration(self) -> float:
        return self._duration

    def elapsed(self) -> float:
        return self._clock() - self._start

    def remaining(self) -> float:
        """Seconds left, clamped at zero."""
        left = self._duration - self.elapsed()
        return left if left > 0.0 else 0.0

    def expired(self) -> bool:
        return self.remaining() == 0.0

    def is_time_remaining(self, reserve: float = 0.05) -> bool:
        """True while less than ``1 - reserve`` of the budget has elapsed."""
        return self.elapsed() < self._duration * (1.0 - reserve)

    def __repr__(self) -> str:
        return f"Timer(duration={self._duration:.3f}s, remaining={self.remaining():.3f}s)"
