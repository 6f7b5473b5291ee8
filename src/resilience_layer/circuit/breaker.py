"""
Circuit breaker for fault tolerance.

Stops calling a failing dependency for a cooldown period so that failures
do not cascade, then probes it with a single trial call.

States:
    CLOSED: Normal operation, calls pass through
    OPEN: Failing fast, calls rejected immediately
    HALF_OPEN: Exactly one trial call decides recovery

Transitions:
    CLOSED -> OPEN: consecutive_failures reaches failure_threshold
    OPEN -> HALF_OPEN: a call arrives after recovery_timeout has elapsed
        since the last failure
    HALF_OPEN -> CLOSED: trial call succeeds
    HALF_OPEN -> OPEN: trial call fails

Only the trial's own outcome moves a HALF_OPEN circuit. Calls admitted
before the circuit opened may still complete while the trial is in flight;
their outcomes update the counters but never the state.

Usage:
    breaker = CircuitBreaker(name="records-api", failure_threshold=5, recovery_timeout=60.0)
    allowed, is_trial = breaker.admit()
    if not allowed:
        raise CircuitOpenError(circuit_name=breaker.name)
    try:
        result = await fetch_records()
    except Exception as exc:
        breaker.record_failure(exc, trial=is_trial)
        raise
    breaker.record_success(trial=is_trial)
"""

import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog

from resilience_layer.errors.exceptions import CircuitOpenError
from resilience_layer.models.enums import CircuitState
from resilience_layer.models.policy_models import CircuitBreakerConfig
from resilience_layer.monitoring.metrics import circuit_state, circuit_transitions_total

T = TypeVar("T")

StateChangeCallback = Callable[[CircuitState, CircuitState], None]

logger = structlog.get_logger(__name__)

_STATE_GAUGE_VALUES = {
    CircuitState.CLOSED: 0,
    CircuitState.OPEN: 1,
    CircuitState.HALF_OPEN: 2,
}


@dataclass
class CircuitStats:
    """Statistics for circuit breaker monitoring."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    rejected_requests: int = 0
    state_changes: int = 0

    @property
    def failure_rate(self) -> float:
        """Failure rate as a percentage of completed calls."""
        total = self.successful_requests + self.failed_requests
        if total == 0:
            return 0.0
        return (self.failed_requests / total) * 100


class CircuitBreaker:
    """
    Three-state circuit breaker.

    Every read-modify-write of the breaker state happens under a re-entrant
    lock, so success/failure notifications from concurrent calls are applied
    one at a time. The breaker never blocks: allow_request() decides
    synchronously before the wrapped call runs.

    Attributes:
        name: Identifier for this circuit (one per remote service / endpoint group)
        failure_threshold: Consecutive failures before opening
        recovery_timeout: Seconds to stay open before admitting a trial call
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
        on_state_change: Optional[StateChangeCallback] = None,
    ):
        if failure_threshold <= 0:
            raise ValueError("failure_threshold must be > 0")
        if recovery_timeout <= 0:
            raise ValueError("recovery_timeout must be > 0")

        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.on_state_change = on_state_change
        self._clock = clock or time.monotonic
        self._lock = threading.RLock()

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure_time: Optional[float] = None
        self._trial_in_flight = False
        self._stats = CircuitStats()

        circuit_state.labels(circuit=self.name).set(_STATE_GAUGE_VALUES[self._state])

    @classmethod
    def from_config(
        cls,
        config: CircuitBreakerConfig,
        name: str = "default",
        clock: Optional[Callable[[], float]] = None,
        on_state_change: Optional[StateChangeCallback] = None,
    ) -> "CircuitBreaker":
        """Build a breaker from a CircuitBreakerConfig."""
        return cls(
            name=name,
            failure_threshold=config.failure_threshold,
            recovery_timeout=config.recovery_timeout,
            clock=clock,
            on_state_change=on_state_change,
        )

    @property
    def state(self) -> CircuitState:
        """
        Current state as last recorded.

        Reading the state never triggers OPEN -> HALF_OPEN; that transition
        happens only when a call is attempted.
        """
        with self._lock:
            return self._state

    @property
    def consecutive_failures(self) -> int:
        with self._lock:
            return self._consecutive_failures

    @property
    def last_failure_time(self) -> Optional[float]:
        with self._lock:
            return self._last_failure_time

    @property
    def stats(self) -> CircuitStats:
        """Snapshot of circuit statistics."""
        with self._lock:
            return replace(self._stats)

    def _transition_to(self, new_state: CircuitState) -> None:
        """Transition to a new state. Caller must hold the lock."""
        old_state = self._state
        if old_state == new_state:
            return

        self._state = new_state
        self._stats.state_changes += 1
        if new_state != CircuitState.HALF_OPEN:
            self._trial_in_flight = False

        circuit_state.labels(circuit=self.name).set(_STATE_GAUGE_VALUES[new_state])
        circuit_transitions_total.labels(circuit=self.name, to_state=new_state.value).inc()

        log = logger.warning if new_state == CircuitState.OPEN else logger.info
        log(
            "Circuit state changed",
            circuit=self.name,
            from_state=old_state.value,
            to_state=new_state.value,
            consecutive_failures=self._consecutive_failures,
        )

        if self.on_state_change is not None:
            self.on_state_change(old_state, new_state)

    def admit(self) -> tuple[bool, bool]:
        """
        Decide whether a call may be attempted now.

        Performs OPEN -> HALF_OPEN once recovery_timeout has elapsed and
        admits exactly one trial call while HALF_OPEN.

        Returns:
            Tuple of (allowed, is_trial). Pass is_trial back to
            record_success() / record_failure() for this call.
        """
        with self._lock:
            self._stats.total_requests += 1

            if self._state == CircuitState.OPEN:
                elapsed = (
                    self._clock() - self._last_failure_time
                    if self._last_failure_time is not None
                    else self.recovery_timeout
                )
                if elapsed < self.recovery_timeout:
                    self._stats.rejected_requests += 1
                    return False, False
                self._transition_to(CircuitState.HALF_OPEN)

            if self._state == CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    self._stats.rejected_requests += 1
                    return False, False
                self._trial_in_flight = True
                return True, True

            return True, False

    def allow_request(self) -> bool:
        """Decide whether a call may be attempted now (see admit())."""
        allowed, _ = self.admit()
        return allowed

    def record_success(self, trial: bool = False) -> None:
        """Record a successful call. trial marks the half-open trial call."""
        with self._lock:
            self._stats.successful_requests += 1
            self._consecutive_failures = 0

            if self._state == CircuitState.HALF_OPEN and trial:
                self._transition_to(CircuitState.CLOSED)

    def record_failure(self, error: Optional[BaseException] = None, trial: bool = False) -> None:
        """Record a failed call. trial marks the half-open trial call."""
        with self._lock:
            self._stats.failed_requests += 1
            self._consecutive_failures += 1
            self._last_failure_time = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                # The trial failed: back to open, cooldown restarts now
                if trial:
                    self._transition_to(CircuitState.OPEN)
            elif (
                self._state == CircuitState.CLOSED
                and self._consecutive_failures >= self.failure_threshold
            ):
                self._transition_to(CircuitState.OPEN)

            logger.debug(
                "Circuit recorded failure",
                circuit=self.name,
                consecutive_failures=self._consecutive_failures,
                error_type=type(error).__name__ if error else None,
            )

    def release_trial(self) -> None:
        """
        Free the half-open trial slot without recording an outcome.

        Used when the trial call was cancelled, so the next caller may probe.
        """
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._trial_in_flight = False

    def reset(self) -> None:
        """Force the circuit back to its initial state, statistics included (operator recovery)."""
        with self._lock:
            self._transition_to(CircuitState.CLOSED)
            self._consecutive_failures = 0
            self._last_failure_time = None
            self._trial_in_flight = False
            self._stats = CircuitStats()

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an async operation through the circuit breaker.

        Raises:
            CircuitOpenError: If the circuit rejects the call
        """
        allowed, is_trial = self.admit()
        if not allowed:
            raise CircuitOpenError(
                f"Circuit '{self.name}' is open, rejecting request",
                circuit_name=self.name,
            )

        try:
            result = await operation()
        except Exception as e:
            self.record_failure(e, trial=is_trial)
            raise
        except BaseException:
            if is_trial:
                self.release_trial()
            raise
        self.record_success(trial=is_trial)
        return result

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name={self.name!r}, state={self._state.value!r}, "
            f"consecutive_failures={self._consecutive_failures})"
        )


def describe(breaker: CircuitBreaker) -> dict[str, Any]:
    """Summarize a breaker for health endpoints."""
    stats = breaker.stats
    return {
        "name": breaker.name,
        "state": breaker.state.value,
        "consecutive_failures": breaker.consecutive_failures,
        "failure_threshold": breaker.failure_threshold,
        "recovery_timeout": breaker.recovery_timeout,
        "total_requests": stats.total_requests,
        "rejected_requests": stats.rejected_requests,
        "failure_rate": stats.failure_rate,
    }
