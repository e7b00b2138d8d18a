"""Application wiring entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from riskscreen.adapters.circuit_breaker import get_breaker_registry
from riskscreen.adapters.gateway import ConnectorGateway
from riskscreen.adapters.opensanctions import build_opensanctions_connectors
from riskscreen.adapters.ownership import build_ownership_connector
from riskscreen.adapters.threatfeed import build_threatfeed_connector
from riskscreen.config import (
    get_connector_settings,
    get_retry_policy,
    get_scoring_config,
)
from riskscreen.domain.aggregation import RiskAggregator
from riskscreen.domain.assessment import DEFAULT_DEADLINE_SECONDS, Orchestrator
from riskscreen.domain.matching import MatchingEngine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from riskscreen.adapters.circuit_breaker import CircuitBreakerRegistry
    from riskscreen.config import ConnectorSettings, ScoringConfig
    from riskscreen.domain.assessment import Deadline
    from riskscreen.domain.model import Entity, RiskVerdict
    from riskscreen.domain.ports import Connector

log = getLogger(__name__)


def build_connectors(settings: ConnectorSettings | None = None) -> list[Connector]:
    """Instantiate every configured source adapter."""

    effective = settings or get_connector_settings()
    connectors: list[Connector] = list(build_opensanctions_connectors(effective.opensanctions))
    if effective.ownership is not None:
        connectors.append(build_ownership_connector(effective.ownership))
    if effective.threatfeed is not None:
        connectors.append(build_threatfeed_connector(effective.threatfeed))
    log.info("Configured connectors: %s", ", ".join(c.connector_id for c in connectors))
    return connectors


def build_orchestrator(
    *,
    connectors: Sequence[Connector] | None = None,
    scoring: ScoringConfig | None = None,
    breakers: CircuitBreakerRegistry | None = None,
) -> Orchestrator:
    """Assemble gateway, matcher and aggregator from configuration."""

    effective_scoring = scoring or get_scoring_config()
    gateway = ConnectorGateway(
        connectors if connectors is not None else build_connectors(),
        breakers=breakers or get_breaker_registry(),
        retry=get_retry_policy(),
    )
    return Orchestrator(
        gateway=gateway,
        matcher=MatchingEngine(weights=effective_scoring.match_weights),
        aggregator=RiskAggregator(effective_scoring.rules),
        match_floor=effective_scoring.match_floor,
    )


def assess_entity(
    entity: Entity,
    *,
    deadline: Deadline = DEFAULT_DEADLINE_SECONDS,
    orchestrator: Orchestrator | None = None,
) -> RiskVerdict:
    """Assess one entity with the configured connectors and rules."""

    effective = orchestrator or build_orchestrator()
    return effective.assess(entity, deadline)
