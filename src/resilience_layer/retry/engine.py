"""
Retry engine with exponential backoff and jitter.

This module implements the RetryEngine that repeatedly attempts a
caller-supplied async operation until it succeeds, a non-retryable failure
occurs, or the attempt budget is spent.

Per attempt:
    1. Rate limiter check (reject with RateLimitExceeded if the window is full)
    2. Circuit breaker check (reject with CircuitOpenError if open)
    3. Invoke the operation
    4. On success: notify the breaker, return the value
    5. On failure: notify the breaker, classify; if retryable and attempts
       remain, compute the delay (a wait hint overrides backoff, a server
       rate limit without one waits 5-10s), fire
       on_retry, sleep, and try again; otherwise re-raise the failure verbatim

Rejections are terminal for the current execute() call. The delay step is a
single awaitable sleep, so cancelling the calling task releases it at once.

Usage:
    engine = RetryEngine(policy, circuit_breaker=breaker, rate_limiter=limiter)
    records = await engine.execute(lambda: client.fetch_records(page=1))
"""

import asyncio
import functools
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog

from resilience_layer.circuit.breaker import CircuitBreaker
from resilience_layer.classification.classifier import classify
from resilience_layer.errors.exceptions import CircuitOpenError, RateLimitExceeded
from resilience_layer.models.policy_models import RetryPolicy
from resilience_layer.monitoring.metrics import (
    attempt_delay_seconds,
    rejections_total,
    retries_total,
    retry_exhausted_total,
)
from resilience_layer.ratelimit.limiter import SlidingWindowRateLimiter
from resilience_layer.retry.backoff import RATE_LIMITED, retry_delay
from resilience_layer.retry.metadata import AttemptRecord, RetryMetadata, utcnow

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
OnRetry = Callable[[int, BaseException, float], None]

logger = structlog.get_logger(__name__)


class RetryEngine:
    """
    Automatic retry orchestrator.

    The engine itself holds no per-call state; attempt history lives in the
    execute() invocation. Breaker and limiter are optional and shared by
    reference with any other engine guarding the same endpoint group.

    Attributes:
        policy: Default retry policy (overridable per call)
        circuit_breaker: Optional breaker consulted before each attempt
        rate_limiter: Optional limiter consulted before each attempt
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize retry engine.

        Args:
            policy: Default retry policy (RetryPolicy() if omitted)
            circuit_breaker: Breaker gating attempts, informed of every outcome
            rate_limiter: Limiter gating attempt volume
            sleep: Awaitable used for the backoff delay (asyncio.sleep)
            clock: Timestamp source for attempt records (UTC now)
            rng: Uniform [0, 1) source for jitter (random.random)
        """
        self.policy = policy or RetryPolicy()
        self.circuit_breaker = circuit_breaker
        self.rate_limiter = rate_limiter
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or utcnow
        self._rng = rng

        logger.debug(
            "RetryEngine initialized",
            max_attempts=self.policy.max_attempts,
            base_delay=self.policy.base_delay,
            max_delay=self.policy.max_delay,
            circuit=circuit_breaker.name if circuit_breaker else None,
            rate_limiter=rate_limiter.name if rate_limiter else None,
        )

    async def execute(
        self,
        operation: Operation[T],
        policy: Optional[RetryPolicy] = None,
        on_retry: Optional[OnRetry] = None,
    ) -> T:
        """
        Execute an operation with automatic retries.

        Args:
            operation: Zero-argument coroutine function to attempt
            policy: Policy for this call (defaults to the engine policy)
            on_retry: Called as on_retry(attempt, error, delay) before each delay

        Returns:
            The operation's result

        Raises:
            RateLimitExceeded: The limiter rejected an attempt
            CircuitOpenError: The breaker rejected an attempt
            Exception: The last failure of the operation, unaltered
        """
        result, _ = await self.execute_with_metadata(operation, policy=policy, on_retry=on_retry)
        return result

    async def execute_with_metadata(
        self,
        operation: Operation[T],
        policy: Optional[RetryPolicy] = None,
        on_retry: Optional[OnRetry] = None,
    ) -> tuple[T, RetryMetadata]:
        """
        Execute an operation with automatic retries and return its attempt history.

        Same semantics as execute(); failures propagate exactly as there.

        Returns:
            Tuple of (result, retry metadata)
        """
        policy = policy or self.policy
        records: list[AttemptRecord] = []
        started = time.monotonic()

        for attempt in range(1, policy.max_attempts + 1):
            is_trial = self._admit(attempt)

            try:
                result = await operation()
            except asyncio.CancelledError:
                if is_trial and self.circuit_breaker is not None:
                    self.circuit_breaker.release_trial()
                logger.info("Operation cancelled", attempt=attempt)
                raise
            except Exception as error:
                if self.circuit_breaker is not None:
                    self.circuit_breaker.record_failure(error, trial=is_trial)

                classification = classify(error, policy)
                is_last_attempt = attempt == policy.max_attempts

                if not classification.retryable or is_last_attempt:
                    records.append(AttemptRecord(attempt, error, 0.0, self._clock()))
                    reason = "exhausted" if classification.retryable else "non_retryable"
                    retry_exhausted_total.labels(reason=reason).inc()
                    logger.error(
                        "Operation failed terminally",
                        reason=reason,
                        attempt=attempt,
                        max_attempts=policy.max_attempts,
                        error_type=type(error).__name__,
                        error_code=classification.code,
                        total_latency_ms=int((time.monotonic() - started) * 1000),
                    )
                    raise

                delay = retry_delay(attempt, classification, policy, self._rng)

                records.append(AttemptRecord(attempt, error, delay, self._clock()))
                retries_total.labels(error_code=classification.code).inc()
                attempt_delay_seconds.observe(delay)

                logger.info(
                    "Retrying after failure",
                    attempt=attempt,
                    next_attempt=attempt + 1,
                    max_attempts=policy.max_attempts,
                    delay_seconds=delay,
                    wait_hint_applied=classification.wait_hint is not None,
                    rate_limited=classification.code == RATE_LIMITED,
                    error_type=type(error).__name__,
                    error_code=classification.code,
                )

                # Hook fires before the delay, never after
                if on_retry is not None:
                    on_retry(attempt, error, delay)

                await self._sleep(delay)
                continue

            if self.circuit_breaker is not None:
                self.circuit_breaker.record_success(trial=is_trial)

            records.append(AttemptRecord(attempt, None, 0.0, self._clock()))
            metadata = RetryMetadata(
                total_attempts=len(records),
                attempts=tuple(records),
                total_latency_ms=int((time.monotonic() - started) * 1000),
            )

            if attempt > 1:
                logger.info(
                    "Operation succeeded after retry",
                    total_attempts=metadata.total_attempts,
                    total_latency_ms=metadata.total_latency_ms,
                )
            return result, metadata

        # max_attempts >= 1, so the loop always returns or raises
        raise AssertionError("unreachable")

    def _admit(self, attempt: int) -> bool:
        """
        Consult the rate limiter, then the circuit breaker.

        Returns:
            True if this attempt is the breaker's half-open trial call
        """
        if self.rate_limiter is not None and not self.rate_limiter.try_acquire():
            wait = self.rate_limiter.time_until_next_slot()
            rejections_total.labels(reason="rate_limited").inc()
            logger.warning(
                "Attempt rejected by rate limiter",
                attempt=attempt,
                limiter=self.rate_limiter.name,
                retry_after=wait,
            )
            raise RateLimitExceeded(
                f"Rate limit exceeded for '{self.rate_limiter.name}', retry in {wait:.3f}s",
                retry_after=wait,
            )

        if self.circuit_breaker is None:
            return False

        allowed, is_trial = self.circuit_breaker.admit()
        if not allowed:
            rejections_total.labels(reason="circuit_open").inc()
            logger.warning(
                "Attempt rejected by open circuit",
                attempt=attempt,
                circuit=self.circuit_breaker.name,
            )
            raise CircuitOpenError(
                f"Circuit '{self.circuit_breaker.name}' is open, rejecting request",
                circuit_name=self.circuit_breaker.name,
            )

        return is_trial


def retryable(
    policy: Optional[RetryPolicy] = None,
    on_retry: Optional[OnRetry] = None,
    **engine_kwargs: Any,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator factory wrapping an async function in a RetryEngine.

    Args:
        policy: Retry policy (RetryPolicy() if omitted)
        on_retry: Hook called before each delay
        **engine_kwargs: Forwarded to RetryEngine (circuit_breaker, rate_limiter, ...)

    Example:
        >>> @retryable(RetryPolicy(max_attempts=5))
        ... async def fetch_contacts(page: int) -> list[dict]:
        ...     return await api.get_contacts(page)
    """
    engine = RetryEngine(policy=policy, **engine_kwargs)

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await engine.execute(lambda: func(*args, **kwargs), on_retry=on_retry)

        wrapper.retry_engine = engine  # type: ignore[attr-defined]
        return wrapper

    return decorator
