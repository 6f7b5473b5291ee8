"""
Resilient client facade.

Wires one circuit breaker, one rate limiter, one retry engine and one manual
retry controller for a remote service or endpoint group, and exposes the
observation and administrative operations data-access code and UI layers
need. Instances are constructed explicitly and passed by reference; there is
no global registry.

Usage:
    records_api = ResilientClient("records-api", settings=settings)
    records = await records_api.request(lambda: http.get_records(page=1))

    # user-facing action with a "Retry" button
    try:
        await records_api.execute_manual(save_record)
    except OperationError:
        if records_api.can_retry_last_request():
            await records_api.retry_last_failed(save_record)
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog

from resilience_layer.circuit.breaker import CircuitBreaker, describe
from resilience_layer.config import Settings
from resilience_layer.models.enums import CircuitState
from resilience_layer.models.policy_models import RetryPolicy
from resilience_layer.models.state_models import RateLimitStatus, RetryState
from resilience_layer.ratelimit.limiter import SlidingWindowRateLimiter
from resilience_layer.retry.engine import OnRetry, Operation, RetryEngine
from resilience_layer.retry.manual import ManualRetryController

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class ResilientClient:
    """
    Resilience wiring for one remote service / endpoint group.

    Attributes:
        name: Endpoint group name (used for the breaker and limiter)
        retry_policy: Policy used for automatic and manual retries
        circuit_breaker: Breaker shared by every call of this client
        rate_limiter: Limiter shared by every call of this client
        engine: Automatic retry engine
        retry_controller: Manual retry controller for user-facing actions
    """

    def __init__(
        self,
        name: str = "default",
        settings: Optional[Settings] = None,
        retry_policy: Optional[RetryPolicy] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        settings = settings or Settings()

        self.name = name
        self.retry_policy = retry_policy or settings.retry_policy()
        self.circuit_breaker = circuit_breaker or CircuitBreaker.from_config(
            settings.circuit_breaker_config(), name=name
        )
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter.from_config(
            settings.rate_limiter_config(), name=name
        )
        self.engine = RetryEngine(
            policy=self.retry_policy,
            circuit_breaker=self.circuit_breaker,
            rate_limiter=self.rate_limiter,
            sleep=sleep,
        )
        self.retry_controller = ManualRetryController(policy=self.retry_policy, engine=self.engine)

        logger.info(
            "ResilientClient initialized",
            client=name,
            max_attempts=self.retry_policy.max_attempts,
            failure_threshold=self.circuit_breaker.failure_threshold,
            recovery_timeout=self.circuit_breaker.recovery_timeout,
            max_requests=self.rate_limiter.max_requests,
            window_duration=self.rate_limiter.window_duration,
        )

    # === Calls ===

    async def request(self, operation: Operation[T], on_retry: Optional[OnRetry] = None) -> T:
        """Run an operation with automatic retries (limiter -> breaker -> retry)."""
        return await self.engine.execute(operation, on_retry=on_retry)

    async def execute_manual(self, operation: Operation[T]) -> T:
        """Run one user-initiated attempt through the manual retry controller."""
        return await self.retry_controller.execute(operation)

    async def retry_last_failed(self, operation: Operation[T]) -> T:
        """Retry the last failed manual attempt (raises RetryNotAllowedError if not permitted)."""
        return await self.retry_controller.retry(operation)

    # === Observation ===

    def can_retry_last_request(self) -> bool:
        return self.retry_controller.can_retry()

    def get_retry_state(self) -> RetryState:
        return self.retry_controller.state

    def get_circuit_breaker_state(self) -> CircuitState:
        return self.circuit_breaker.state

    def get_rate_limit_status(self) -> RateLimitStatus:
        return self.rate_limiter.status()

    def health(self) -> dict[str, Any]:
        """Summary of breaker, limiter and manual retry state for health endpoints."""
        rate_status = self.rate_limiter.status()
        retry_state = self.retry_controller.state
        return {
            "client": self.name,
            "circuit": describe(self.circuit_breaker),
            "rate_limit": {
                "allowed": rate_status.allowed,
                "time_until_reset": rate_status.time_until_reset,
                "current_count": self.rate_limiter.current_count,
            },
            "retry": {
                "attempt": retry_state.attempt,
                "is_retrying": retry_state.is_retrying,
                "has_error": retry_state.last_error is not None,
            },
        }

    # === Administration (idempotent) ===

    def reset_retry_state(self) -> None:
        self.retry_controller.reset()

    def reset_circuit_breaker(self) -> None:
        self.circuit_breaker.reset()

    def reset_rate_limiter(self) -> None:
        self.rate_limiter.reset()
