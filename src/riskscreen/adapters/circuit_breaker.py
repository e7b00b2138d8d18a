"""Per-connector circuit breakers shared by every assessment in the process.

State machine::

    closed --(failure_threshold consecutive failures)--> open
    open --(cooldown elapsed, next call)--> half-open   (exactly one trial call admitted)
    half-open --(trial call succeeds)--> closed
    half-open --(trial call fails)--> open   (cooldown restarts, extended)

Every read and transition holds the breaker's ``threading.Lock``; one breaker per connector
is shared by all event loops and threads of the process.
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from dataclasses import dataclass, replace
from functools import lru_cache
from logging import getLogger
from typing import TYPE_CHECKING, Final

from riskscreen.config.http_resilience import BreakerPolicy, get_breaker_policy
from riskscreen.domain.model import CircuitOpenError, CircuitStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from riskscreen.domain.model import ClassifiedError

log = getLogger(__name__)

type Clock = Callable[[], float]
type TransitionListener = Callable[[TransitionEvent], None]

_ALLOWED: Final[frozenset[tuple[CircuitStatus, CircuitStatus]]] = frozenset(
    {
        (CircuitStatus.CLOSED, CircuitStatus.OPEN),
        (CircuitStatus.OPEN, CircuitStatus.HALF_OPEN),
        (CircuitStatus.HALF_OPEN, CircuitStatus.CLOSED),
        (CircuitStatus.HALF_OPEN, CircuitStatus.OPEN),
    }
)


@dataclass(frozen=True, slots=True)
class CircuitState:
    connector_id: str
    status: CircuitStatus = CircuitStatus.CLOSED
    consecutive_failures: int = 0
    last_failure_at: float | None = None
    cooldown_until: float | None = None
    trips: int = 0
    trial_in_flight: bool = False


@dataclass(frozen=True, slots=True)
class TransitionEvent:
    connector_id: str
    previous: CircuitStatus
    current: CircuitStatus
    consecutive_failures: int
    cooldown_until: float | None
    at: float


class CircuitBreaker:
    def __init__(
        self,
        connector_id: str,
        policy: BreakerPolicy,
        *,
        clock: Clock = time.monotonic,
        on_transition: TransitionListener | None = None,
    ) -> None:
        self.connector_id = connector_id
        self.policy = policy
        self._clock = clock
        self._on_transition = on_transition
        self._lock = threading.Lock()
        self._state = CircuitState(connector_id=connector_id)

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    def acquire(self) -> bool:
        """Admit a call or raise ``CircuitOpenError`` without touching the network.

        Returns ``True`` when the admitted call is the half-open trial call. Only
        that call's outcome may close or re-open a half-open circuit, so the caller
        hands this flag back to ``record_success``, ``record_failure`` or ``release``.
        """

        event: TransitionEvent | None = None
        trial = False
        with self._lock:
            state = self._state
            now = self._clock()
            if state.status is CircuitStatus.OPEN:
                cooldown_until = state.cooldown_until or now
                if now < cooldown_until:
                    raise CircuitOpenError(self.connector_id, retry_in=cooldown_until - now)
                event = self._transition(CircuitStatus.HALF_OPEN, now, trial_in_flight=True)
                trial = True
            elif state.status is CircuitStatus.HALF_OPEN:
                if state.trial_in_flight:
                    raise CircuitOpenError(self.connector_id)
                self._state = replace(state, trial_in_flight=True)
                trial = True
        self._emit(event)
        return trial

    def record_success(self, *, trial: bool = False) -> None:
        event: TransitionEvent | None = None
        with self._lock:
            status = self._state.status
            if status is CircuitStatus.HALF_OPEN and trial:
                event = self._transition(
                    CircuitStatus.CLOSED,
                    self._clock(),
                    consecutive_failures=0,
                    cooldown_until=None,
                    trips=0,
                    trial_in_flight=False,
                )
            elif status is CircuitStatus.CLOSED:
                self._state = replace(self._state, consecutive_failures=0)
            # calls admitted before the circuit opened leave open/half-open alone
        self._emit(event)

    def record_failure(self, error: ClassifiedError, *, trial: bool = False) -> None:
        event: TransitionEvent | None = None
        with self._lock:
            state = self._state
            now = self._clock()
            failures = state.consecutive_failures + 1
            if state.status is CircuitStatus.HALF_OPEN and trial:
                trips = state.trips + 1
                event = self._transition(
                    CircuitStatus.OPEN,
                    now,
                    consecutive_failures=failures,
                    last_failure_at=now,
                    cooldown_until=now + self.policy.cooldown_for(trips),
                    trips=trips,
                    trial_in_flight=False,
                )
            elif (
                state.status is CircuitStatus.CLOSED
                and failures >= self.policy.failure_threshold
            ):
                trips = state.trips + 1
                event = self._transition(
                    CircuitStatus.OPEN,
                    now,
                    consecutive_failures=failures,
                    last_failure_at=now,
                    cooldown_until=now + self.policy.cooldown_for(trips),
                    trips=trips,
                )
            else:
                self._state = replace(state, consecutive_failures=failures, last_failure_at=now)
        log.debug(
            "Connector %s failure recorded (%s, consecutive=%s)",
            self.connector_id,
            error.kind,
            failures,
        )
        self._emit(event)

    def release(self, *, trial: bool = False) -> None:
        """Give back an unfinished half-open trial call (its caller was cancelled)."""

        if not trial:
            return
        with self._lock:
            if self._state.status is CircuitStatus.HALF_OPEN and self._state.trial_in_flight:
                self._state = replace(self._state, trial_in_flight=False)

    def reset(self) -> None:
        with self._lock:
            self._state = CircuitState(connector_id=self.connector_id)

    def _transition(
        self,
        target: CircuitStatus,
        now: float,
        **changes: object,
    ) -> TransitionEvent:
        previous = self._state.status
        if (previous, target) not in _ALLOWED:
            raise RuntimeError(f"Illegal circuit transition {previous} -> {target}")
        self._state = replace(self._state, status=target, **changes)  # type: ignore[arg-type]
        return TransitionEvent(
            connector_id=self.connector_id,
            previous=previous,
            current=target,
            consecutive_failures=self._state.consecutive_failures,
            cooldown_until=self._state.cooldown_until,
            at=now,
        )

    def _emit(self, event: TransitionEvent | None) -> None:
        if event is not None and self._on_transition is not None:
            self._on_transition(event)


class CircuitBreakerRegistry:
    """Process-wide breakers keyed by connector id."""

    def __init__(
        self,
        policy: BreakerPolicy | None = None,
        *,
        policies: Mapping[str, BreakerPolicy] | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.policy = policy or BreakerPolicy()
        self._policies = dict(policies or {})
        self._clock = clock
        self._lock = threading.Lock()
        self._breakers: dict[str, CircuitBreaker] = {}
        self._listeners: list[TransitionListener] = []
        self.transitions: Counter[tuple[str, CircuitStatus, CircuitStatus]] = Counter()

    def get(self, connector_id: str) -> CircuitBreaker:
        with self._lock:
            breaker = self._breakers.get(connector_id)
            if breaker is None:
                breaker = CircuitBreaker(
                    connector_id,
                    self._policies.get(connector_id, self.policy),
                    clock=self._clock,
                    on_transition=self._record_transition,
                )
                self._breakers[connector_id] = breaker
            return breaker

    def add_listener(self, listener: TransitionListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def snapshot(self) -> dict[str, CircuitState]:
        with self._lock:
            breakers = dict(self._breakers)
        return {connector_id: breaker.state for connector_id, breaker in breakers.items()}

    def reset(self, connector_id: str | None = None) -> None:
        with self._lock:
            targets = (
                list(self._breakers.values())
                if connector_id is None
                else [b for key, b in self._breakers.items() if key == connector_id]
            )
        for breaker in targets:
            breaker.reset()
            log.info("Circuit for connector %s reset", breaker.connector_id)

    def _record_transition(self, event: TransitionEvent) -> None:
        with self._lock:
            self.transitions[(event.connector_id, event.previous, event.current)] += 1
            listeners = list(self._listeners)

        if event.current is CircuitStatus.OPEN:
            log.warning(
                "Circuit %s -> open for connector %s after %s consecutive failures "
                "(cooldown %.1fs)",
                event.previous,
                event.connector_id,
                event.consecutive_failures,
                (event.cooldown_until or event.at) - event.at,
            )
        else:
            log.info(
                "Circuit %s -> %s for connector %s",
                event.previous,
                event.current,
                event.connector_id,
            )
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                log.exception(
                    "Circuit transition listener failed for connector %s", event.connector_id
                )


@lru_cache(maxsize=1)
def get_breaker_registry() -> CircuitBreakerRegistry:
    """Return the process-wide registry (policy taken from the environment on first use)."""

    return CircuitBreakerRegistry(get_breaker_policy())
