"""Custom Prometheus metrics for the resilience layer.

These metrics are registered in the default prometheus_client registry and
exposed by whatever /metrics endpoint the host application serves.
Alert rules should be configured for:
- resilience_retry_exhausted_total (operations failing after every attempt)
- resilience_circuit_state (circuits stuck open)
- resilience_rejections_total (callers hitting local rate limits)
"""

from prometheus_client import Counter, Gauge, Histogram

# === Retry Metrics ===

retries_total = Counter(
    "resilience_retries_total",
    "Total retry attempts scheduled by the retry engine",
    ["error_code"],
)
"""
Retries scheduled after a retryable failure.

Labels:
- error_code: code the failure was classified to (NETWORK_ERROR, SERVER_ERROR, ...)

Alert thresholds:
- WARN: retry rate > 10% of total calls
"""

retry_exhausted_total = Counter(
    "resilience_retry_exhausted_total",
    "Operations that failed terminally, by reason",
    ["reason"],
)
"""
Terminal failures propagated by the retry engine.

Labels:
- reason: exhausted (all attempts used), non_retryable (first failure was permanent)
"""

attempt_delay_seconds = Histogram(
    "resilience_attempt_delay_seconds",
    "Delay inserted before a retry attempt",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

# === Circuit Breaker Metrics ===

circuit_state = Gauge(
    "resilience_circuit_state",
    "Current circuit state (0=closed, 1=open, 2=half_open)",
    ["circuit"],
)

circuit_transitions_total = Counter(
    "resilience_circuit_transitions_total",
    "Circuit breaker state transitions",
    ["circuit", "to_state"],
)
"""
Circuit breaker transitions.

Labels:
- circuit: breaker name (one per remote service / endpoint group)
- to_state: closed, open, half_open

Alert thresholds:
- WARN: any transition to open
"""

# === Rejection Metrics ===

rejections_total = Counter(
    "resilience_rejections_total",
    "Calls rejected before the operation was invoked",
    ["reason"],
)
"""
Calls that were never attempted.

Labels:
- reason: circuit_open, rate_limited
"""
