"""
Manual retry controller for user-initiated retries.

Interactive callers (a "Retry" button, a CLI prompt) use this controller to
run one physical attempt at a time and let a human trigger the next one.
The controller exposes attempt count, last error and a suggested next retry
time, but it never sleeps: manual retries are user-paced, while the
RetryEngine's automatic path is engine-paced.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional, TypeVar

import structlog

from resilience_layer.classification.classifier import classify
from resilience_layer.errors.exceptions import RetryNotAllowedError
from resilience_layer.models.policy_models import RetryPolicy
from resilience_layer.models.state_models import RetryState
from resilience_layer.retry.backoff import retry_delay
from resilience_layer.retry.engine import Operation, RetryEngine
from resilience_layer.retry.metadata import utcnow

T = TypeVar("T")

StateCallback = Callable[[RetryState], None]

logger = structlog.get_logger(__name__)


class ManualRetryController:
    """
    Stateful wrapper over a RetryEngine with observable RetryState.

    Each execute() call makes exactly one attempt (the engine runs with
    max_attempts=1), so circuit breaker and rate limiter checks still apply.
    The policy's max_attempts bounds how many manual attempts are offered.

    Attributes:
        policy: Retry policy (attempt budget, backoff for next_retry_at, predicate)
        engine: Engine performing the physical attempt
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        engine: Optional[RetryEngine] = None,
        on_state_change: Optional[StateCallback] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[Callable[[], float]] = None,
    ):
        self.policy = policy or RetryPolicy()
        self.engine = engine or RetryEngine(policy=self.policy)
        self._on_state_change = on_state_change
        self._clock = clock or utcnow
        self._rng = rng

        self._attempt = 0
        self._last_error: Optional[BaseException] = None
        self._next_retry_at: Optional[datetime] = None
        self._is_retrying = False

    @property
    def state(self) -> RetryState:
        """Snapshot of the current retry state."""
        return RetryState(
            attempt=self._attempt,
            last_error=self._last_error,
            next_retry_at=self._next_retry_at,
            is_retrying=self._is_retrying,
        )

    def set_state_change_callback(self, callback: Optional[StateCallback]) -> None:
        """Register (or clear) the observer notified on every state change."""
        self._on_state_change = callback

    def _notify(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self.state)

    async def execute(self, operation: Operation[T]) -> T:
        """
        Run one attempt of the operation.

        Increments attempt and marks the controller as retrying while the
        attempt is in flight. On failure the error is recorded and, if a
        further retry is possible, next_retry_at is set from the retry delay
        (wait hint, rate limit wait or backoff). The failure is re-raised unchanged.
        """
        self._attempt += 1
        self._is_retrying = True
        self._next_retry_at = None
        self._notify()

        try:
            result = await self.engine.execute(
                operation,
                policy=self.policy.with_overrides(max_attempts=1),
            )
            self._last_error = None
            return result
        except asyncio.CancelledError:
            logger.info("Manual attempt cancelled", attempt=self._attempt)
            raise
        except Exception as error:
            self._last_error = error
            self._is_retrying = False
            if self.can_retry():
                classification = classify(error, self.policy)
                delay = retry_delay(self._attempt, classification, self.policy, self._rng)
                self._next_retry_at = self._clock() + timedelta(seconds=delay)

            logger.warning(
                "Manual attempt failed",
                attempt=self._attempt,
                max_attempts=self.policy.max_attempts,
                error_type=type(error).__name__,
                next_retry_at=self._next_retry_at.isoformat() if self._next_retry_at else None,
            )
            raise
        finally:
            self._is_retrying = False
            self._notify()

    def can_retry(self) -> bool:
        """
        Whether retry() is currently permitted.

        True iff attempts remain, the last attempt failed with a retryable
        error, and no attempt is in flight.
        """
        if self._is_retrying or self._last_error is None:
            return False
        if self._attempt >= self.policy.max_attempts:
            return False
        return classify(self._last_error, self.policy).retryable

    async def retry(self, operation: Operation[T]) -> T:
        """
        Manually trigger the next attempt.

        Raises:
            RetryNotAllowedError: If can_retry() is false
        """
        if not self.can_retry():
            raise RetryNotAllowedError(self.state)
        return await self.execute(operation)

    def reset(self) -> None:
        """Zero all state."""
        self._attempt = 0
        self._last_error = None
        self._next_retry_at = None
        self._is_retrying = False
        self._notify()
