"""Connector for a REST threat-actor intelligence feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from riskscreen.adapters.errors import SourcePayloadError
from riskscreen.adapters.http_resilience import (
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    default_client_factory,
)
from riskscreen.config.connectors import ALL_ENTITIES
from riskscreen.domain.model import Domain
from riskscreen.domain.ports import ApplicabilityRule, Connector, NormalizedResponse

from .schema import ActorSearchResponse
from .translator import parse_actors

if TYPE_CHECKING:
    from collections.abc import Callable

    from riskscreen.config.connectors import ThreatFeedConfig
    from riskscreen.domain.model import Entity
    from riskscreen.domain.ports import ConnectorRequest

log = getLogger(__name__)

ACTORS_PATH = "/v1/actors"
_DEFAULT_TIMEOUT_SECONDS = 10.0
_MAX_PAGES = 3


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="threatfeed",
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
    )


class ThreatFeedAPIError(SourcePayloadError):
    """Raised when the threat feed returns an unexpected payload."""


@dataclass(slots=True)
class ThreatFeedConnector:
    api_key: str | None = None
    limit: int = 25
    connector_id: str = "threatfeed"
    domain: Domain = Domain.THREAT_ACTOR
    applicability: ApplicabilityRule = field(default=ALL_ENTITIES)
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )

    def applies_to(self, entity: Entity) -> bool:
        return self.applicability.applies_to(entity)

    async def fetch(self, request: ConnectorRequest) -> NormalizedResponse:
        headers = {"X-API-Key": self.api_key} if self.api_key else None
        raw_actors: list[dict[str, object]] = []
        cursor: str | None = None
        async with self.client_factory(self.resilience) as client:
            for _ in range(_MAX_PAGES):
                params: dict[str, str | int] = {"q": request.name, "limit": self.limit}
                if cursor:
                    params["cursor"] = cursor
                response = await client.get(ACTORS_PATH, params=params, headers=headers)
                response.raise_for_status()
                try:
                    page = ActorSearchResponse.model_validate(response.json())
                except (ValueError, ValidationError) as exc:
                    raise ThreatFeedAPIError("Unexpected threat-feed response payload") from exc
                raw_actors.extend(page.actors)
                cursor = page.next_cursor
                if not cursor:
                    break

        candidates, skipped = parse_actors(raw_actors, source_id=self.connector_id)
        return NormalizedResponse(
            connector_id=self.connector_id,
            candidates=tuple(candidates),
            skipped_records=skipped,
        )


def build_threatfeed_connector(
    config: ThreatFeedConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] = default_client_factory,
) -> ThreatFeedConnector:
    resilience = config.resilience or ResilienceConfig(
        name="threatfeed",
        base_url=config.base_url,
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
    )
    return ThreatFeedConnector(
        api_key=config.api_key,
        applicability=config.applicability,
        resilience=resilience,
        client_factory=client_factory,
    )


if TYPE_CHECKING:
    _connector_check: Connector = ThreatFeedConnector()
