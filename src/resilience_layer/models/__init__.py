"""
Pydantic data models for the resilience layer.

Includes:
- Enums (CircuitState, ErrorCategory, ErrorSeverity)
- Policy models (RetryPolicy, CircuitBreakerConfig, RateLimiterConfig)
- State snapshots (RetryState, RateLimitStatus)
"""

from resilience_layer.models.enums import CircuitState, ErrorCategory, ErrorSeverity
from resilience_layer.models.policy_models import (
    CircuitBreakerConfig,
    RateLimiterConfig,
    RetryPolicy,
)
from resilience_layer.models.state_models import RateLimitStatus, RetryState

__all__ = [
    # Enums
    "CircuitState",
    "ErrorCategory",
    "ErrorSeverity",
    # Policies
    "RetryPolicy",
    "CircuitBreakerConfig",
    "RateLimiterConfig",
    # Snapshots
    "RetryState",
    "RateLimitStatus",
]
