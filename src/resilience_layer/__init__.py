"""
Resilience layer for outbound calls to remote services.

Absorbs transient failures with automatic retries (exponential backoff and
jitter), contains cascading failures with a circuit breaker, and bounds
request volume with a sliding window rate limiter.
"""

from resilience_layer.circuit import CircuitBreaker
from resilience_layer.classification import Classification, classify
from resilience_layer.client import ResilientClient
from resilience_layer.errors import (
    CircuitOpenError,
    OperationError,
    RateLimitExceeded,
    ResilienceRejection,
    RetryNotAllowedError,
)
from resilience_layer.models import (
    CircuitBreakerConfig,
    CircuitState,
    RateLimiterConfig,
    RateLimitStatus,
    RetryPolicy,
    RetryState,
)
from resilience_layer.ratelimit import SlidingWindowRateLimiter
from resilience_layer.retry import (
    ManualRetryController,
    RetryEngine,
    calculate_delay,
    retryable,
)

__version__ = "0.1.0"

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitOpenError",
    "CircuitState",
    "Classification",
    "ManualRetryController",
    "OperationError",
    "RateLimitExceeded",
    "RateLimitStatus",
    "RateLimiterConfig",
    "ResilienceRejection",
    "ResilientClient",
    "RetryEngine",
    "RetryNotAllowedError",
    "RetryPolicy",
    "RetryState",
    "SlidingWindowRateLimiter",
    "calculate_delay",
    "classify",
    "retryable",
]
