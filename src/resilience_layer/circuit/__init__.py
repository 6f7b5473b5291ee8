"""Circuit breaker guarding calls to a failing dependency."""

from resilience_layer.circuit.breaker import CircuitBreaker, CircuitStats, describe

__all__ = ["CircuitBreaker", "CircuitStats", "describe"]
