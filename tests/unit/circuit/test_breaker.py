"""
Unit tests for CircuitBreaker.

Tests the CLOSED -> OPEN -> HALF_OPEN -> CLOSED/OPEN state machine using a
manually advanced clock.
"""

import threading

import pytest

from resilience_layer.circuit.breaker import CircuitBreaker, describe
from resilience_layer.errors.exceptions import CircuitOpenError
from resilience_layer.models.enums import CircuitState
from resilience_layer.models.policy_models import CircuitBreakerConfig


@pytest.fixture
def breaker(fake_clock):
    return CircuitBreaker("records", failure_threshold=3, recovery_timeout=10.0, clock=fake_clock)


def open_breaker(breaker: CircuitBreaker) -> None:
    for _ in range(breaker.failure_threshold):
        assert breaker.allow_request()
        breaker.record_failure(ConnectionError("reset"))


# ============================================================================
# Construction
# ============================================================================


def test_starts_closed(breaker):
    assert breaker.state == CircuitState.CLOSED
    assert breaker.consecutive_failures == 0
    assert breaker.last_failure_time is None
    assert breaker.allow_request() is True


@pytest.mark.parametrize("threshold,timeout", [(0, 10.0), (3, 0.0), (-1, 5.0)])
def test_invalid_configuration_rejected(threshold, timeout):
    with pytest.raises(ValueError):
        CircuitBreaker(failure_threshold=threshold, recovery_timeout=timeout)


def test_from_config(fake_clock):
    breaker = CircuitBreaker.from_config(
        CircuitBreakerConfig(failure_threshold=2, recovery_timeout=5.0),
        name="billing",
        clock=fake_clock,
    )

    assert breaker.name == "billing"
    assert breaker.failure_threshold == 2
    assert breaker.recovery_timeout == 5.0


# ============================================================================
# CLOSED -> OPEN
# ============================================================================


def test_opens_at_threshold(breaker):
    breaker.record_failure()
    breaker.record_failure()
    assert breaker.state == CircuitState.CLOSED

    breaker.record_failure()

    assert breaker.state == CircuitState.OPEN
    assert breaker.consecutive_failures == 3


def test_success_resets_consecutive_count(breaker):
    breaker.record_failure()
    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()
    breaker.record_failure()

    assert breaker.state == CircuitState.CLOSED
    assert breaker.consecutive_failures == 2


def test_every_failure_updates_last_failure_time(breaker, fake_clock):
    breaker.record_failure()
    first = breaker.last_failure_time
    fake_clock.advance(2.0)
    breaker.record_failure()

    assert breaker.last_failure_time == first + 2.0


# ============================================================================
# OPEN -> HALF_OPEN
# ============================================================================


def test_open_rejects_until_recovery_timeout(breaker, fake_clock):
    open_breaker(breaker)

    fake_clock.advance(9.0)
    assert breaker.allow_request() is False
    assert breaker.state == CircuitState.OPEN

    fake_clock.advance(1.0)
    assert breaker.allow_request() is True
    assert breaker.state == CircuitState.HALF_OPEN


def test_reading_state_does_not_transition(breaker, fake_clock):
    open_breaker(breaker)
    fake_clock.advance(60.0)

    assert breaker.state == CircuitState.OPEN
    assert breaker.state == CircuitState.OPEN


def test_success_while_open_keeps_circuit_open(breaker):
    open_breaker(breaker)

    breaker.record_success()

    assert breaker.state == CircuitState.OPEN
    assert breaker.consecutive_failures == 0


# ============================================================================
# HALF_OPEN -> CLOSED / OPEN
# ============================================================================


def test_half_open_admits_single_trial(breaker, fake_clock):
    open_breaker(breaker)
    fake_clock.advance(10.0)

    assert breaker.allow_request() is True
    assert breaker.allow_request() is False
    assert breaker.allow_request() is False


def test_trial_success_closes(breaker, fake_clock):
    open_breaker(breaker)
    fake_clock.advance(10.0)
    assert breaker.admit() == (True, True)

    breaker.record_success(trial=True)

    assert breaker.state == CircuitState.CLOSED
    assert breaker.consecutive_failures == 0
    assert breaker.allow_request() is True


def test_trial_failure_reopens_and_restarts_cooldown(breaker, fake_clock):
    open_breaker(breaker)
    fake_clock.advance(10.0)
    breaker.allow_request()

    breaker.record_failure(trial=True)

    assert breaker.state == CircuitState.OPEN
    fake_clock.advance(9.0)
    assert breaker.allow_request() is False
    fake_clock.advance(1.0)
    assert breaker.allow_request() is True


def test_admit_reports_trial_only_when_half_open(breaker, fake_clock):
    assert breaker.admit() == (True, False)

    open_breaker(breaker)
    assert breaker.admit() == (False, False)

    fake_clock.advance(10.0)
    assert breaker.admit() == (True, True)
    assert breaker.admit() == (False, False)


def test_stale_success_does_not_close_half_open(fake_clock):
    """A call admitted while CLOSED that succeeds during the trial leaves the state alone."""
    breaker = CircuitBreaker("records", failure_threshold=1, recovery_timeout=10.0, clock=fake_clock)
    slow_call = breaker.admit()
    failing_call = breaker.admit()
    assert slow_call == failing_call == (True, False)
    breaker.record_failure(trial=failing_call[1])
    fake_clock.advance(10.0)
    allowed, is_trial = breaker.admit()
    assert allowed and is_trial

    breaker.record_success(trial=slow_call[1])

    assert breaker.state == CircuitState.HALF_OPEN
    assert breaker.consecutive_failures == 0
    assert breaker.allow_request() is False

    breaker.record_failure(trial=is_trial)
    assert breaker.state == CircuitState.OPEN


def test_stale_failure_does_not_reopen_half_open(fake_clock):
    breaker = CircuitBreaker("records", failure_threshold=1, recovery_timeout=10.0, clock=fake_clock)
    _, slow_is_trial = breaker.admit()
    breaker.record_failure()
    fake_clock.advance(10.0)
    _, is_trial = breaker.admit()

    breaker.record_failure(ConnectionError("late"), trial=slow_is_trial)

    assert breaker.state == CircuitState.HALF_OPEN
    assert breaker.stats.failed_requests == 2

    breaker.record_success(trial=is_trial)
    assert breaker.state == CircuitState.CLOSED


def test_release_trial_frees_slot(breaker, fake_clock):
    open_breaker(breaker)
    fake_clock.advance(10.0)
    assert breaker.allow_request() is True

    breaker.release_trial()

    assert breaker.state == CircuitState.HALF_OPEN
    assert breaker.allow_request() is True


# ============================================================================
# Reset, callbacks, stats
# ============================================================================


def test_reset_closes_circuit(breaker):
    open_breaker(breaker)

    breaker.reset()
    breaker.reset()

    assert breaker.state == CircuitState.CLOSED
    assert breaker.consecutive_failures == 0
    assert breaker.last_failure_time is None
    assert breaker.stats.total_requests == 0
    assert breaker.stats.failed_requests == 0
    assert breaker.allow_request() is True


def test_state_change_callback(fake_clock):
    transitions = []
    breaker = CircuitBreaker(
        "records",
        failure_threshold=1,
        recovery_timeout=5.0,
        clock=fake_clock,
        on_state_change=lambda old, new: transitions.append((old, new)),
    )

    breaker.record_failure()
    fake_clock.advance(5.0)
    breaker.allow_request()
    breaker.record_success(trial=True)

    assert transitions == [
        (CircuitState.CLOSED, CircuitState.OPEN),
        (CircuitState.OPEN, CircuitState.HALF_OPEN),
        (CircuitState.HALF_OPEN, CircuitState.CLOSED),
    ]


def test_stats_and_describe(breaker, fake_clock):
    breaker.allow_request()
    breaker.record_success()
    open_breaker(breaker)
    breaker.allow_request()

    summary = describe(breaker)

    assert breaker.stats.rejected_requests == 1
    assert breaker.stats.failure_rate == pytest.approx(75.0)
    assert summary["name"] == "records"
    assert summary["state"] == "open"
    assert summary["consecutive_failures"] == 3
    assert "records" in repr(breaker)


# ============================================================================
# call()
# ============================================================================


@pytest.mark.asyncio
async def test_call_records_outcomes(breaker):
    async def ok():
        return 42

    async def fail():
        raise ConnectionError("reset")

    assert await breaker.call(ok) == 42
    for _ in range(3):
        with pytest.raises(ConnectionError):
            await breaker.call(fail)

    with pytest.raises(CircuitOpenError) as exc_info:
        await breaker.call(ok)
    assert exc_info.value.circuit_name == "records"


def test_stats_is_a_snapshot(breaker):
    snapshot = breaker.stats
    snapshot.failed_requests = 99

    breaker.record_failure()

    assert breaker.stats.failed_requests == 1
    assert snapshot.failed_requests == 99


# ============================================================================
# Concurrency
# ============================================================================


def test_concurrent_failures_are_all_counted(fake_clock):
    breaker = CircuitBreaker("records", failure_threshold=1_000_000, clock=fake_clock)
    threads_count, per_thread = 8, 5_000
    start = threading.Barrier(threads_count)

    def worker():
        start.wait()
        for _ in range(per_thread):
            breaker.record_failure()

    threads = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert breaker.consecutive_failures == threads_count * per_thread
    assert breaker.stats.failed_requests == threads_count * per_thread
    assert breaker.state == CircuitState.CLOSED


def test_concurrent_half_open_admits_one_trial(breaker, fake_clock):
    open_breaker(breaker)
    fake_clock.advance(10.0)
    threads_count = 16
    start = threading.Barrier(threads_count)
    trials = []

    def worker():
        start.wait()
        allowed, is_trial = breaker.admit()
        if allowed:
            trials.append(is_trial)

    threads = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert trials == [True]
