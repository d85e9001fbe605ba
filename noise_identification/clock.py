from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Display and LED animations sample this instead of calling real time, so a
    test can step them frame by frame.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


def elapsed_s(clock: Clock, since_s: float) -> float:
    """Seconds elapsed on ``clock`` since ``since_s`` (never negative)."""

    return max(0.0, clock.now() - float(since_s))
