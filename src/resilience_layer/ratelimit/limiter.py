"""
Sliding window rate limiter.

Counts call attempts in a rolling window and refuses new attempts once the
window is full. The limiter only gates volume: it has no notion of success
or failure, and it never waits on the caller's behalf.

Example:
    >>> limiter = SlidingWindowRateLimiter(max_requests=100, window_duration=60.0)
    >>> if not limiter.try_acquire():
    ...     raise RateLimitExceeded(retry_after=limiter.time_until_next_slot())
"""

import threading
import time
from collections import deque
from typing import Callable, Optional

import structlog

from resilience_layer.models.policy_models import RateLimiterConfig
from resilience_layer.models.state_models import RateLimitStatus

logger = structlog.get_logger(__name__)


class SlidingWindowRateLimiter:
    """
    Sliding window rate limiter.

    Timestamps come from a monotonic clock. An entry expires once
    now - timestamp >= window_duration; expired entries are pruned lazily on
    every check. All operations are thread-safe.

    Attributes:
        name: Identifier used in logs
        max_requests: Maximum attempts admitted per window
        window_duration: Window length in seconds
    """

    def __init__(
        self,
        max_requests: int,
        window_duration: float,
        name: str = "default",
        clock: Optional[Callable[[], float]] = None,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        if window_duration <= 0:
            raise ValueError("window_duration must be > 0")

        self.name = name
        self.max_requests = max_requests
        self.window_duration = window_duration
        self._clock = clock or time.monotonic
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: RateLimiterConfig,
        name: str = "default",
        clock: Optional[Callable[[], float]] = None,
    ) -> "SlidingWindowRateLimiter":
        """Build a limiter from a RateLimiterConfig."""
        return cls(
            max_requests=config.max_requests,
            window_duration=config.window_duration,
            name=name,
            clock=clock,
        )

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window_duration:
            self._timestamps.popleft()

    def _wait_time(self, now: float) -> float:
        if len(self._timestamps) < self.max_requests:
            return 0.0
        oldest = self._timestamps[0]
        return max(0.0, self.window_duration - (now - oldest))

    def try_acquire(self) -> bool:
        """
        Admit one attempt if the window has room.

        Returns:
            True if the attempt was recorded, False if the window is full
        """
        with self._lock:
            now = self._clock()
            self._prune(now)

            if len(self._timestamps) < self.max_requests:
                self._timestamps.append(now)
                return True

        logger.debug(
            "Rate limit window full",
            limiter=self.name,
            max_requests=self.max_requests,
            window_duration=self.window_duration,
        )
        return False

    def time_until_next_slot(self) -> float:
        """Seconds until an attempt would be admitted (0 if admitting now)."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            return self._wait_time(now)

    def status(self) -> RateLimitStatus:
        """Current status for display. Does not consume a slot."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            return RateLimitStatus(
                allowed=len(self._timestamps) < self.max_requests,
                time_until_reset=self._wait_time(now),
            )

    @property
    def current_count(self) -> int:
        """Attempts recorded in the current window."""
        with self._lock:
            self._prune(self._clock())
            return len(self._timestamps)

    def reset(self) -> None:
        """Clear the window unconditionally."""
        with self._lock:
            self._timestamps.clear()
        logger.info("Rate limiter reset", limiter=self.name)
