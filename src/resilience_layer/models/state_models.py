"""
Read-only state snapshots handed to observers (UI layers, health endpoints).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RetryState(BaseModel):
    """
    Snapshot of a ManualRetryController.

    next_retry_at is informational only: the controller never sleeps, the
    caller decides when to trigger the next attempt.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attempt: int = Field(default=0, ge=0, description="Physical attempts made so far")
    last_error: Optional[BaseException] = Field(default=None, description="Failure of the latest attempt")
    next_retry_at: Optional[datetime] = Field(default=None, description="Suggested time for the next retry (UTC)")
    is_retrying: bool = Field(default=False, description="True while an attempt is in flight")


class RateLimitStatus(BaseModel):
    """Rate limiter status for display. Reading it never consumes a slot."""
    model_config = ConfigDict(frozen=True)

    allowed: bool = Field(..., description="Whether a call would be admitted right now")
    time_until_reset: float = Field(..., ge=0.0, description="Seconds until the next slot frees up")
