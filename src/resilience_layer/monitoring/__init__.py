"""Monitoring and metrics instrumentation for the resilience layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from resilience_layer.monitoring.exporter import start_metrics_server
from resilience_layer.monitoring.metrics import (
    attempt_delay_seconds,
    circuit_state,
    circuit_transitions_total,
    rejections_total,
    retries_total,
    retry_exhausted_total,
)

__all__ = [
    "retries_total",
    "retry_exhausted_total",
    "attempt_delay_seconds",
    "circuit_state",
    "circuit_transitions_total",
    "rejections_total",
    "start_metrics_server",
]
