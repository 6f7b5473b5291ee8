"""
Backoff calculator.

delay = min(base_delay * multiplier ** (attempt - 1), max_delay)

With jitter enabled the capped delay is scaled by a uniform factor in
[0.5, 1.0] and floored to the millisecond, spreading retries from many
callers without ever exceeding max_delay.

A server-side rate limit (code RATE_LIMITED) that arrives without a
Retry-After hint waits 5-10s instead of the regular schedule.
"""

import math
import random
from typing import Callable, Optional

from resilience_layer.classification.classifier import Classification
from resilience_layer.models.policy_models import RetryPolicy

RATE_LIMITED = "RATE_LIMITED"
RATE_LIMIT_BASE_WAIT = 5.0  # seconds
RATE_LIMIT_WAIT_SPREAD = 5.0  # seconds


def calculate_delay(
    attempt: int,
    policy: RetryPolicy,
    rng: Optional[Callable[[], float]] = None,
) -> float:
    """
    Compute the delay (seconds) to wait after a failed attempt.

    Args:
        attempt: 1-based number of the attempt that just failed
        policy: Retry policy supplying base delay, multiplier, cap and jitter
        rng: Source of uniform floats in [0, 1) (defaults to random.random)

    Returns:
        Delay in seconds, always within [0, policy.max_delay]
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    delay = min(
        policy.base_delay * (policy.backoff_multiplier ** (attempt - 1)),
        policy.max_delay,
    )

    if policy.jitter_enabled:
        factor = 0.5 + (rng or random.random)() * 0.5
        delay = math.floor(delay * factor * 1000) / 1000

    return max(0.0, delay)


def exponential_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 30.0) -> float:
    """Plain doubling backoff capped at max_delay."""
    return calculate_delay(
        attempt,
        RetryPolicy(base_delay=base_delay, max_delay=max_delay, backoff_multiplier=2.0, jitter_enabled=False),
    )


def exponential_delay_with_jitter(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    rng: Optional[Callable[[], float]] = None,
) -> float:
    """Doubling backoff capped at max_delay, scaled by a jitter factor in [0.5, 1.0]."""
    return calculate_delay(
        attempt,
        RetryPolicy(base_delay=base_delay, max_delay=max_delay, backoff_multiplier=2.0, jitter_enabled=True),
        rng=rng,
    )


def rate_limit_delay(rng: Optional[Callable[[], float]] = None) -> float:
    """Wait for a server rate limit with no Retry-After: uniform in [5, 10) seconds, ms-floored."""
    delay = RATE_LIMIT_BASE_WAIT + (rng or random.random)() * RATE_LIMIT_WAIT_SPREAD
    return math.floor(delay * 1000) / 1000


def retry_delay(
    attempt: int,
    classification: Classification,
    policy: RetryPolicy,
    rng: Optional[Callable[[], float]] = None,
) -> float:
    """
    Delay before retrying a classified failure.

    Precedence: explicit wait hint, then the rate limit wait for RATE_LIMITED
    failures, then calculate_delay().
    """
    if classification.wait_hint is not None:
        return classification.wait_hint
    if classification.code == RATE_LIMITED:
        return rate_limit_delay(rng)
    return calculate_delay(attempt, policy, rng)
