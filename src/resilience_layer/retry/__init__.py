"""
Automatic and manual retries.

Main Components:
    - calculate_delay: exponential backoff with optional jitter
    - RetryEngine: automatic retry loop guarded by breaker and limiter
    - ManualRetryController: user-paced retries with observable state
    - AttemptRecord / RetryMetadata: per-invocation attempt history

Usage:
    >>> from resilience_layer.retry import RetryEngine
    >>> engine = RetryEngine(policy, circuit_breaker=breaker, rate_limiter=limiter)
    >>> contacts = await engine.execute(lambda: api.list_contacts())
"""

from resilience_layer.retry.backoff import (
    calculate_delay,
    exponential_delay,
    exponential_delay_with_jitter,
    rate_limit_delay,
    retry_delay,
)
from resilience_layer.retry.engine import RetryEngine, retryable
from resilience_layer.retry.manual import ManualRetryController
from resilience_layer.retry.metadata import AttemptRecord, RetryMetadata

__all__ = [
    "calculate_delay",
    "exponential_delay",
    "exponential_delay_with_jitter",
    "rate_limit_delay",
    "retry_delay",
    "RetryEngine",
    "retryable",
    "ManualRetryController",
    "AttemptRecord",
    "RetryMetadata",
]
