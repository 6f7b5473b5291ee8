"""
Enumerations for resilience layer data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class CircuitState(str, Enum):
    """
    Circuit breaker states.

    CLOSED is the initial state. OPEN rejects every call until the recovery
    timeout elapses. HALF_OPEN admits exactly one trial call whose outcome
    decides the next state.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class ErrorCategory(str, Enum):
    """
    Broad failure category assigned by the error classifier.

    AUTH and VALIDATION failures are never retried automatically.
    """

    AUTH = "auth"
    VALIDATION = "validation"
    NETWORK = "network"
    BUSINESS = "business"
    SERVER = "server"
    PAYMENT = "payment"
    FILE = "file"
    INTEGRATION = "integration"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """
    Failure severity, ordered from low to critical.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def get_ordinal(cls, severity: "ErrorSeverity") -> int:
        """Get ordinal value for severity (0=low, 1=medium, 2=high, 3=critical)."""
        order = [cls.LOW, cls.MEDIUM, cls.HIGH, cls.CRITICAL]
        return order.index(severity)
