"""Sliding-window rate limiting for data sources.

Each source owns its own policy instance; nothing is shared between runs
unless the caller passes the same policy in explicitly.
"""

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RateLimitPolicy:
    """Allow at most `calls` acquisitions in any `period`-second window."""

    def __init__(
        self,
        calls: int = 5,
        period: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        name: str = "source",
    ):
        """
        Initialize rate limiter.

        Args:
            calls: Maximum calls per period
            period: Period in seconds
            clock: Monotonic time function (injectable for tests)
            sleep: Sleep function (injectable for tests)
            name: Label used in log messages
        """
        if calls <= 0 or period <= 0:
            raise ValueError("calls and period must be positive")
        self.calls = calls
        self.period = period
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._call_timestamps: list[float] = []

    def acquire(self) -> float:
        """
        Block until a call is allowed, then record it.

        Returns:
            Seconds slept (0.0 when no wait was needed)
        """
        now = self._clock()
        self._call_timestamps = [
            ts for ts in self._call_timestamps if now - ts < self.period
        ]

        slept = 0.0
        if len(self._call_timestamps) >= self.calls:
            sleep_time = self._call_timestamps[0] + self.period - now
            if sleep_time > 0:
                logger.debug(f"[{self.name}] Rate limit: sleeping {sleep_time:.2f}s")
                self._sleep(sleep_time)
                slept = sleep_time
            self._call_timestamps.pop(0)

        self._call_timestamps.append(self._clock())
        return slept

    def reset(self) -> None:
        """Forget all recorded calls."""
        self._call_timestamps.clear()


class NoRateLimit(RateLimitPolicy):
    """Policy that never waits, for local sources."""

    def __init__(self) -> None:
        super().__init__(calls=1, period=1.0, name="unlimited")

    def acquire(self) -> float:
        return 0.0
