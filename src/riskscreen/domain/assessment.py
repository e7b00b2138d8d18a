"""Assessment orchestration: fan out to connectors, match, aggregate."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from riskscreen.domain.aggregation import RiskAggregator
from riskscreen.domain.matching import MatchingEngine
from riskscreen.domain.model import (
    ClassifiedError,
    ConnectorFailure,
    Domain,
    ErrorKind,
    InvalidInputError,
)
from riskscreen.domain.ports import ConnectorOutcome, ConnectorRequest

if TYPE_CHECKING:
    from collections.abc import Sequence

    from riskscreen.domain.model import CandidateRecord, Entity, MatchResult, RiskVerdict
    from riskscreen.domain.ports import Connector, ConnectorGatewayPort

log = getLogger(__name__)

DEFAULT_DEADLINE_SECONDS = 30.0
DEFAULT_MATCH_FLOOR = 0.5

type Deadline = float | timedelta | None

_WARN_KINDS = frozenset({ErrorKind.AUTH_FAILURE, ErrorKind.PERMANENT})


def deadline_seconds(deadline: Deadline) -> float | None:
    """Time allowed for one assessment, in seconds; ``None`` waits for every connector."""

    if deadline is None:
        return None
    seconds = deadline.total_seconds() if isinstance(deadline, timedelta) else float(deadline)
    if seconds <= 0:
        raise InvalidInputError("Deadline must be positive", field="deadline")
    return seconds


@dataclass(slots=True)
class Orchestrator:
    gateway: ConnectorGatewayPort
    matcher: MatchingEngine = field(default_factory=MatchingEngine)
    aggregator: RiskAggregator = field(default_factory=RiskAggregator)
    match_floor: float = DEFAULT_MATCH_FLOOR

    def assess(self, entity: Entity, deadline: Deadline = DEFAULT_DEADLINE_SECONDS) -> RiskVerdict:
        return asyncio.run(self.assess_async(entity, deadline))

    async def assess_async(
        self, entity: Entity, deadline: Deadline = DEFAULT_DEADLINE_SECONDS
    ) -> RiskVerdict:
        """Assess one entity against every applicable connector.

        Raises:
            InvalidInputError: if the entity or the deadline is unusable. Nothing is
                fetched in that case.
        """

        # an empty match validates the entity's names without touching the network
        self.matcher.match(entity, ())
        timeout = deadline_seconds(deadline)

        connectors = list(self.gateway.applicable(entity))
        request = ConnectorRequest.from_entity(entity)
        log.info(
            "Assessing %s %r against %s connector(s), deadline=%s",
            entity.entity_type,
            request.name,
            len(connectors),
            timeout,
        )

        outcomes = await self._collect(connectors, request, timeout)
        verdict = self._conclude(entity, connectors, outcomes)
        log.info(
            "Assessment of %r finished: score=%.1f, level=%s, missing=%s",
            request.name,
            verdict.composite_score,
            verdict.level,
            [str(d) for d in verdict.domains_without_data],
        )
        return verdict

    async def _collect(
        self,
        connectors: Sequence[Connector],
        request: ConnectorRequest,
        timeout: float | None,
    ) -> dict[str, ConnectorOutcome]:
        if not connectors:
            return {}
        tasks = {
            connector.connector_id: asyncio.create_task(
                self.gateway.call(connector.connector_id, request),
                name=f"connector:{connector.connector_id}",
            )
            for connector in connectors
        }
        outcomes: dict[str, ConnectorOutcome] = {}
        try:
            done, pending = await asyncio.wait(tasks.values(), timeout=timeout)
            for connector in connectors:
                task = tasks[connector.connector_id]
                if task in done:
                    outcomes[connector.connector_id] = _settle(connector, task)
                elif task in pending:
                    log.warning("Connector %s missed the deadline", connector.connector_id)
                    outcomes[connector.connector_id] = ConnectorOutcome(
                        connector_id=connector.connector_id,
                        domain=connector.domain,
                        error=_timeout_error(timeout),
                    )
        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
        return outcomes

    def _conclude(
        self,
        entity: Entity,
        connectors: Sequence[Connector],
        outcomes: dict[str, ConnectorOutcome],
    ) -> RiskVerdict:
        candidates: dict[Domain, list[CandidateRecord]] = {}
        failures: list[ConnectorFailure] = []
        warnings: list[str] = []

        for connector in connectors:
            outcome = outcomes[connector.connector_id]
            if outcome.ok and outcome.response is not None:
                candidates.setdefault(connector.domain, []).extend(outcome.response.candidates)
                if outcome.response.skipped_records:
                    warnings.append(
                        f"{connector.connector_id}: skipped "
                        f"{outcome.response.skipped_records} malformed record(s)"
                    )
                continue
            error = outcome.error
            kind = error.kind if error is not None else ErrorKind.UNKNOWN
            message = error.message if error is not None else ""
            log.warning(
                "Connector %s contributed no data: %s %s", connector.connector_id, kind, message
            )
            failures.append(
                ConnectorFailure(
                    connector_id=connector.connector_id,
                    domain=connector.domain,
                    kind=kind,
                    message=message,
                )
            )
            if kind in _WARN_KINDS:
                warnings.append(f"{connector.connector_id}: {kind} {message}".rstrip())

        evidence: dict[Domain, list[MatchResult]] = {}
        for domain in Domain:
            if domain not in candidates:
                continue
            results = self.matcher.match(entity, candidates[domain])
            evidence[domain] = [
                result for result in results if result.composite >= self.match_floor
            ]

        verdict = self.aggregator.aggregate(evidence)
        return replace(
            verdict,
            connector_failures=tuple(failures),
            warnings=tuple(warnings),
        )


def _timeout_error(timeout: float | None) -> ClassifiedError:
    return ClassifiedError.of(ErrorKind.TIMEOUT, f"no response within {timeout}s")


def _settle(connector: Connector, task: asyncio.Task[ConnectorOutcome]) -> ConnectorOutcome:
    """A task that crashed instead of returning an outcome counts as that connector failing."""

    try:
        return task.result()
    except Exception as exc:
        log.exception("Connector %s call crashed", connector.connector_id)
        return ConnectorOutcome(
            connector_id=connector.connector_id,
            domain=connector.domain,
            error=ClassifiedError.of(ErrorKind.UNKNOWN, f"{type(exc).__name__}: {exc}"),
        )
