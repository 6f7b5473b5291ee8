"""
Attempt history tracking.

AttemptRecord captures a single attempt; RetryMetadata bundles the history of
one execute() invocation. Neither outlives the call that produced it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AttemptRecord:
    """
    One attempt of a wrapped operation.

    Attributes:
        attempt_number: 1-based attempt index
        error: Failure raised by the attempt (None on success)
        scheduled_delay: Seconds waited before the next attempt (0 when none follows)
        timestamp: When the attempt finished (UTC)
    """

    attempt_number: int
    error: Optional[BaseException]
    scheduled_delay: float
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.attempt_number < 1:
            raise ValueError("attempt_number must be >= 1")
        if self.scheduled_delay < 0:
            raise ValueError("scheduled_delay must be >= 0")

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RetryMetadata:
    """
    Complete attempt history of one execute() invocation.

    Attributes:
        total_attempts: Number of times the operation was invoked
        attempts: Ordered attempt records
        total_latency_ms: Time from first attempt to final outcome, delays included
    """

    total_attempts: int
    attempts: tuple[AttemptRecord, ...] = field(default_factory=tuple)
    total_latency_ms: int = 0

    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")

        if self.total_attempts != len(self.attempts):
            raise ValueError(
                f"total_attempts ({self.total_attempts}) must match recorded attempts ({len(self.attempts)})"
            )

        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")

    @property
    def failures(self) -> list[BaseException]:
        """Errors of the failed attempts, oldest first."""
        return [record.error for record in self.attempts if record.error is not None]

    @property
    def delays(self) -> list[float]:
        """Delays inserted between attempts."""
        return [record.scheduled_delay for record in self.attempts[:-1]]
