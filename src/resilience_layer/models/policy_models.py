"""
Policy configuration models.

These immutable models are supplied by collaborators when constructing the
retry engine, circuit breakers and rate limiters. All durations are seconds.
"""

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RetryPolicy(BaseModel):
    """
    Immutable retry configuration.

    The optional retry_predicate takes precedence over the default error
    classification when deciding whether a failure is retryable.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    max_attempts: int = Field(default=3, ge=1, description="Total attempts including the first one")
    base_delay: float = Field(default=1.0, ge=0.0, description="Delay before the first retry (seconds)")
    max_delay: float = Field(default=30.0, ge=0.0, description="Upper bound for any computed delay (seconds)")
    backoff_multiplier: float = Field(default=2.0, gt=1.0, description="Exponential growth factor")
    jitter_enabled: bool = Field(default=True, description="Scale delays by a random factor in [0.5, 1.0]")
    retry_predicate: Optional[Callable[[BaseException], bool]] = Field(
        default=None,
        description="Custom retryability check, overrides the default classification",
    )

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryPolicy":
        if self.base_delay > self.max_delay:
            raise ValueError(
                f"base_delay ({self.base_delay}) must not exceed max_delay ({self.max_delay})"
            )
        return self

    def with_overrides(self, **changes: Any) -> "RetryPolicy":
        """Return a validated copy of this policy with some fields replaced."""
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self)(**values)


class CircuitBreakerConfig(BaseModel):
    """Circuit breaker thresholds."""
    model_config = ConfigDict(frozen=True)

    failure_threshold: int = Field(default=5, gt=0, description="Consecutive failures before opening")
    recovery_timeout: float = Field(default=60.0, gt=0.0, description="Seconds to stay open before a trial call")


class RateLimiterConfig(BaseModel):
    """Sliding window rate limit."""
    model_config = ConfigDict(frozen=True)

    max_requests: int = Field(default=100, gt=0, description="Attempts admitted per window")
    window_duration: float = Field(default=60.0, gt=0.0, description="Window length in seconds")
