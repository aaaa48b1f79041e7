from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

RATE_LIMIT_MAX = 30
RATE_LIMIT_WINDOW = 60.0


@dataclass(slots=True)
class RateWindow:
    count: int
    window_start: float


class RateLimiter:
    """Fixed-window call counter.

    Bursts straddling a window boundary can reach twice the quota; callers that
    need smoothing must add their own pacing.
    """

    def __init__(
        self,
        max_calls: int = RATE_LIMIT_MAX,
        window: float = RATE_LIMIT_WINDOW,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_calls = max_calls
        self.window = window
        self._clock = clock
        self.state = RateWindow(count=0, window_start=clock())

    def _roll(self, now: float) -> None:
        if now - self.state.window_start > self.window:
            self.state.count = 0
            self.state.window_start = now

    def allow(self, cost: int = 1) -> bool:
        """Take ``cost`` calls from the window, or none at all when they do not fit."""
        now = self._clock()
        self._roll(now)
        if self.state.count + cost > self.max_calls:
            logger.warning(f"Rate limit reached: {self.state.count}/{self.max_calls} calls in window")
            return False
        self.state.count += cost
        return True

    def remaining(self) -> int:
        self._roll(self._clock())
        return max(0, self.max_calls - self.state.count)

    def retry_after(self) -> float:
        elapsed = self._clock() - self.state.window_start
        return max(0.0, self.window - elapsed)
