from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import pytest

from riskscreen.adapters.circuit_breaker import CircuitBreakerRegistry, TransitionEvent
from riskscreen.config import BreakerPolicy
from riskscreen.domain.model import (
    CircuitOpenError,
    CircuitStatus,
    ClassifiedError,
    ErrorKind,
)

if TYPE_CHECKING:
    from tests.support.screening import FakeClock

FAILURE = ClassifiedError.of(ErrorKind.TRANSIENT, "boom")


def _trip(registry: CircuitBreakerRegistry, connector_id: str, times: int) -> None:
    breaker = registry.get(connector_id)
    for _ in range(times):
        breaker.acquire()
        breaker.record_failure(FAILURE)


def test_opens_after_threshold_consecutive_failures(registry: CircuitBreakerRegistry) -> None:
    _trip(registry, "src", 2)
    assert registry.get("src").state.status is CircuitStatus.CLOSED

    _trip(registry, "src", 1)

    state = registry.get("src").state
    assert state.status is CircuitStatus.OPEN
    assert state.consecutive_failures == 3
    assert state.trips == 1


def test_success_resets_the_failure_count(registry: CircuitBreakerRegistry) -> None:
    breaker = registry.get("src")
    _trip(registry, "src", 2)
    breaker.acquire()
    breaker.record_success()
    _trip(registry, "src", 2)

    assert breaker.state.status is CircuitStatus.CLOSED
    assert breaker.state.consecutive_failures == 2


def test_no_call_is_admitted_during_cooldown(
    registry: CircuitBreakerRegistry, clock: FakeClock
) -> None:
    _trip(registry, "src", 3)
    breaker = registry.get("src")

    clock.advance(29.9)
    with pytest.raises(CircuitOpenError) as excinfo:
        breaker.acquire()

    assert excinfo.value.error.kind is ErrorKind.CIRCUIT_OPEN
    assert not excinfo.value.error.retryable
    assert excinfo.value.error.backoff_hint == pytest.approx(0.1)


def test_exactly_one_trial_call_after_cooldown(
    registry: CircuitBreakerRegistry, clock: FakeClock
) -> None:
    _trip(registry, "src", 3)
    breaker = registry.get("src")
    clock.advance(30.0)

    trial = breaker.acquire()
    assert trial
    assert breaker.state.status is CircuitStatus.HALF_OPEN
    with pytest.raises(CircuitOpenError):
        breaker.acquire()

    breaker.record_success(trial=trial)
    state = breaker.state
    assert state.status is CircuitStatus.CLOSED
    assert state.consecutive_failures == 0
    assert state.trips == 0
    breaker.acquire()


def test_failed_trial_call_reopens_with_longer_cooldown(
    registry: CircuitBreakerRegistry, clock: FakeClock
) -> None:
    _trip(registry, "src", 3)
    breaker = registry.get("src")
    clock.advance(30.0)
    trial = breaker.acquire()

    breaker.record_failure(FAILURE, trial=trial)

    state = breaker.state
    assert state.status is CircuitStatus.OPEN
    assert state.trips == 2
    assert state.cooldown_until == pytest.approx(clock.now + 60.0)


def test_cancelled_trial_call_returns_its_permit(
    registry: CircuitBreakerRegistry, clock: FakeClock
) -> None:
    _trip(registry, "src", 3)
    breaker = registry.get("src")
    clock.advance(30.0)
    trial = breaker.acquire()

    breaker.release(trial=trial)

    assert breaker.state.status is CircuitStatus.HALF_OPEN
    breaker.acquire()


def test_concurrent_trial_calls_admit_a_single_caller(
    registry: CircuitBreakerRegistry, clock: FakeClock
) -> None:
    _trip(registry, "src", 3)
    breaker = registry.get("src")
    clock.advance(30.0)

    def attempt(_: int) -> bool:
        try:
            breaker.acquire()
        except CircuitOpenError:
            return False
        return True

    with ThreadPoolExecutor(max_workers=8) as pool:
        admitted = list(pool.map(attempt, range(32)))

    assert admitted.count(True) == 1


def test_registry_counts_transitions_and_notifies_listeners(
    registry: CircuitBreakerRegistry, clock: FakeClock
) -> None:
    events: list[TransitionEvent] = []
    registry.add_listener(events.append)

    _trip(registry, "src", 3)
    clock.advance(30.0)
    trial = registry.get("src").acquire()
    registry.get("src").record_success(trial=trial)

    assert [(e.previous, e.current) for e in events] == [
        (CircuitStatus.CLOSED, CircuitStatus.OPEN),
        (CircuitStatus.OPEN, CircuitStatus.HALF_OPEN),
        (CircuitStatus.HALF_OPEN, CircuitStatus.CLOSED),
    ]
    assert registry.transitions[("src", CircuitStatus.CLOSED, CircuitStatus.OPEN)] == 1


def test_breakers_are_isolated_per_connector(registry: CircuitBreakerRegistry) -> None:
    _trip(registry, "bad", 3)

    registry.get("good").acquire()

    snapshot = registry.snapshot()
    assert snapshot["bad"].status is CircuitStatus.OPEN
    assert snapshot["good"].status is CircuitStatus.CLOSED


def test_reset_closes_selected_breakers(registry: CircuitBreakerRegistry) -> None:
    _trip(registry, "a", 3)
    _trip(registry, "b", 3)

    registry.reset("a")
    assert registry.get("a").state.status is CircuitStatus.CLOSED
    assert registry.get("b").state.status is CircuitStatus.OPEN

    registry.reset()
    assert registry.get("b").state.status is CircuitStatus.CLOSED


def test_per_connector_policy_override(clock: FakeClock) -> None:
    registry = CircuitBreakerRegistry(
        BreakerPolicy(failure_threshold=5),
        policies={"fragile": BreakerPolicy(failure_threshold=1)},
        clock=clock,
    )

    _trip(registry, "fragile", 1)
    _trip(registry, "sturdy", 1)

    assert registry.get("fragile").state.status is CircuitStatus.OPEN
    assert registry.get("sturdy").state.status is CircuitStatus.CLOSED


def test_cooldown_grows_geometrically_up_to_the_cap() -> None:
    policy = BreakerPolicy(cooldown_seconds=10, backoff_multiplier=3, max_cooldown_seconds=50)

    assert [policy.cooldown_for(trips) for trips in (1, 2, 3)] == [10, 30, 50]


def test_closed_circuit_admits_ordinary_calls(registry: CircuitBreakerRegistry) -> None:
    assert registry.get("src").acquire() is False


def test_stale_success_does_not_close_a_half_open_circuit(clock: FakeClock) -> None:
    registry = CircuitBreakerRegistry(
        BreakerPolicy(failure_threshold=2, cooldown_seconds=10), clock=clock
    )
    breaker = registry.get("src")
    stale = breaker.acquire()
    _trip(registry, "src", 2)
    clock.advance(10.0)
    trial = breaker.acquire()

    breaker.record_success(trial=stale)

    assert breaker.state.status is CircuitStatus.HALF_OPEN
    assert breaker.state.trial_in_flight
    with pytest.raises(CircuitOpenError):
        breaker.acquire()

    breaker.record_success(trial=trial)

    assert breaker.state.status is CircuitStatus.CLOSED


def test_stale_failure_does_not_reopen_a_half_open_circuit(clock: FakeClock) -> None:
    registry = CircuitBreakerRegistry(
        BreakerPolicy(failure_threshold=2, cooldown_seconds=10), clock=clock
    )
    breaker = registry.get("src")
    stale = breaker.acquire()
    _trip(registry, "src", 2)
    clock.advance(10.0)
    breaker.acquire()

    breaker.record_failure(FAILURE, trial=stale)
    breaker.release(trial=stale)

    state = breaker.state
    assert state.status is CircuitStatus.HALF_OPEN
    assert state.trial_in_flight
    assert state.trips == 1
    with pytest.raises(CircuitOpenError):
        breaker.acquire()


def test_stale_success_leaves_an_open_circuit_open(
    registry: CircuitBreakerRegistry,
) -> None:
    breaker = registry.get("src")
    stale = breaker.acquire()
    _trip(registry, "src", 3)

    breaker.record_success(trial=stale)

    assert breaker.state.status is CircuitStatus.OPEN
    assert breaker.state.consecutive_failures == 3


def test_failing_listener_does_not_break_the_transition(
    registry: CircuitBreakerRegistry, caplog: pytest.LogCaptureFixture
) -> None:
    events: list[TransitionEvent] = []

    def explode(_: TransitionEvent) -> None:
        raise RuntimeError("listener down")

    registry.add_listener(explode)
    registry.add_listener(events.append)

    _trip(registry, "src", 3)

    assert registry.get("src").state.status is CircuitStatus.OPEN
    assert [(e.previous, e.current) for e in events] == [
        (CircuitStatus.CLOSED, CircuitStatus.OPEN)
    ]
    assert "listener failed for connector src" in caplog.text
