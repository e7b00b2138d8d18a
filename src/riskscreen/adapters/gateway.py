"""Uniform, fault-isolated access to every registered connector.

``ConnectorGateway.call`` wraps each connector call in the connector's circuit breaker
and wraps the breaker-protected call in a retry loop, so every retry attempt passes
through the breaker again and can itself trip it.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from riskscreen.adapters.circuit_breaker import CircuitBreakerRegistry, get_breaker_registry
from riskscreen.adapters.errors import classify_error
from riskscreen.config.http_resilience import RetryPolicy
from riskscreen.domain.model import ConnectorError
from riskscreen.domain.ports import ConnectorOutcome

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping

    from tenacity import RetryCallState

    from riskscreen.adapters.circuit_breaker import CircuitBreaker
    from riskscreen.domain.model import Entity
    from riskscreen.domain.ports import (
        Connector,
        ConnectorGatewayPort,
        ConnectorRequest,
        NormalizedResponse,
    )

log = getLogger(__name__)

type Sleep = Callable[[float], Awaitable[None]]


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ConnectorError) and exc.error.retryable


@dataclass(frozen=True, slots=True)
class _BackoffWait:
    """Exponential backoff with jitter, stretched to a server ``Retry-After`` hint."""

    policy: RetryPolicy

    def __call__(self, retry_state: RetryCallState) -> float:
        base = wait_exponential_jitter(
            initial=self.policy.backoff_factor,
            max=self.policy.max_backoff_wait,
            jitter=self.policy.backoff_jitter,
        )(retry_state)
        if not self.policy.respect_retry_after_header or retry_state.outcome is None:
            return base
        exc = retry_state.outcome.exception()
        hint = exc.error.backoff_hint if isinstance(exc, ConnectorError) else None
        if hint is None:
            return base
        return max(base, min(hint, self.policy.max_backoff_wait))


class ConnectorGateway:
    def __init__(
        self,
        connectors: Iterable[Connector],
        *,
        breakers: CircuitBreakerRegistry | None = None,
        retry: RetryPolicy | None = None,
        retry_overrides: Mapping[str, RetryPolicy] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._connectors: dict[str, Connector] = {}
        for connector in connectors:
            if connector.connector_id in self._connectors:
                raise ValueError(f"Duplicate connector id: {connector.connector_id}")
            self._connectors[connector.connector_id] = connector
        self.breakers = breakers or get_breaker_registry()
        self.retry = retry or RetryPolicy()
        self._retry_overrides = dict(retry_overrides or {})
        self._sleep = sleep
        self.retries: Counter[str] = Counter()

    @property
    def connectors(self) -> tuple[Connector, ...]:
        return tuple(self._connectors.values())

    def applicable(self, entity: Entity) -> list[Connector]:
        return [c for c in self._connectors.values() if c.applies_to(entity)]

    async def call(self, connector_id: str, request: ConnectorRequest) -> ConnectorOutcome:
        """Call one connector with breaker protection and retries.

        Connector failures come back as ``ConnectorOutcome.error``; only cancellation
        propagates.
        """

        connector = self._connectors.get(connector_id)
        if connector is None:
            raise ValueError(f"Unknown connector: {connector_id}")
        policy = self._retry_overrides.get(connector_id, self.retry)
        breaker = self.breakers.get(connector_id)

        attempts = 0
        response: NormalizedResponse | None = None
        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=_BackoffWait(policy),
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    response = await self._call_once(connector, breaker, request)
        except ConnectorError as exc:
            log.warning(
                "Connector %s failed after %s attempt(s): %s",
                connector_id,
                attempts,
                exc.error.kind,
            )
            return ConnectorOutcome(
                connector_id=connector_id,
                domain=connector.domain,
                error=exc.error,
                attempts=attempts,
            )
        return ConnectorOutcome(
            connector_id=connector_id,
            domain=connector.domain,
            response=response,
            attempts=attempts,
        )

    async def _call_once(
        self,
        connector: Connector,
        breaker: CircuitBreaker,
        request: ConnectorRequest,
    ) -> NormalizedResponse:
        trial = breaker.acquire()
        try:
            response = await connector.fetch(request)
        except asyncio.CancelledError:
            breaker.release(trial=trial)
            raise
        except Exception as exc:
            error = classify_error(exc)
            breaker.record_failure(error, trial=trial)
            raise ConnectorError(connector.connector_id, error) from exc
        breaker.record_success(trial=trial)
        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if not isinstance(exc, ConnectorError):
            return
        self.retries[exc.connector_id] += 1
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        log.warning(
            "Retrying connector %s (attempt %s failed: %s %s); waiting %.2fs",
            exc.connector_id,
            retry_state.attempt_number,
            exc.error.kind,
            exc.error.message,
            wait,
        )


if TYPE_CHECKING:
    _gateway_check: ConnectorGatewayPort = ConnectorGateway(())
