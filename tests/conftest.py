"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from resilience_layer.config import Settings
from resilience_layer.models.policy_models import RetryPolicy


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWallClock:
    """Manually advanced UTC wall clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self, clock: FakeClock = None):
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with small, deterministic values.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RETRY_MAX_ATTEMPTS = 5
    """
    return Settings(
        # === Application ===
        APP_NAME="Resilience Layer (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry ===
        RETRY_MAX_ATTEMPTS=3,
        RETRY_BASE_DELAY=0.1,
        RETRY_MAX_DELAY=1.0,
        RETRY_BACKOFF_MULTIPLIER=2.0,
        RETRY_JITTER_ENABLED=False,

        # === Circuit Breaker ===
        CIRCUIT_FAILURE_THRESHOLD=3,
        CIRCUIT_RECOVERY_TIMEOUT=10.0,

        # === Rate Limiter ===
        RATE_LIMIT_MAX_REQUESTS=5,
        RATE_LIMIT_WINDOW=60.0,

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeWallClock:
    return FakeWallClock()


@pytest.fixture
def recording_sleep(fake_clock: FakeClock) -> RecordingSleep:
    """Sleep that advances fake_clock by each requested delay."""
    return RecordingSleep(fake_clock)


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """3 attempts, 0.1s base delay, no jitter: delays are 0.1 then 0.2."""
    return RetryPolicy(
        max_attempts=3,
        base_delay=0.1,
        max_delay=1.0,
        backoff_multiplier=2.0,
        jitter_enabled=False,
    )
