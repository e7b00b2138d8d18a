"""Connector for a beneficial-ownership graph exposed over GraphQL."""

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
from riskscreen.config.connectors import PEOPLE_AND_ORGANIZATIONS
from riskscreen.domain.model import Domain
from riskscreen.domain.ports import ApplicabilityRule, Connector, NormalizedResponse

from .schema import GraphQLResponse
from .translator import parse_parties

if TYPE_CHECKING:
    from collections.abc import Callable

    from riskscreen.config.connectors import OwnershipConfig
    from riskscreen.domain.model import Entity
    from riskscreen.domain.ports import ConnectorRequest

log = getLogger(__name__)

PARTY_SEARCH_QUERY = """
query PartySearch($name: String!, $aliases: [String!], $kind: String, $limit: Int) {
  partySearch(name: $name, aliases: $aliases, kind: $kind, limit: $limit) {
    parties {
      id
      name
      kind
      aliases
      birthDate
      jurisdictions
      identifiers { scheme value }
      links { relationship counterparty share }
      url
    }
  }
}
""".strip()

_DEFAULT_TIMEOUT_SECONDS = 15.0


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="ownership",
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
    )


class OwnershipGraphQLError(SourcePayloadError):
    """Raised when the GraphQL endpoint answers with errors and no data."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages) or "GraphQL request failed")
        self.messages = messages


@dataclass(slots=True)
class OwnershipGraphConnector:
    url: str
    api_token: str | None = None
    limit: int = 10
    connector_id: str = "ownership-graph"
    domain: Domain = Domain.OWNERSHIP
    applicability: ApplicabilityRule = field(default=PEOPLE_AND_ORGANIZATIONS)
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )

    def applies_to(self, entity: Entity) -> bool:
        return self.applicability.applies_to(entity)

    async def fetch(self, request: ConnectorRequest) -> NormalizedResponse:
        body = {
            "query": PARTY_SEARCH_QUERY,
            "variables": {
                "name": request.name,
                "aliases": list(request.aliases),
                "kind": request.entity_type.value,
                "limit": self.limit,
            },
        }
        headers = {"Authorization": f"Bearer {self.api_token}"} if self.api_token else None
        async with self.client_factory(self.resilience) as client:
            response = await client.post(self.url, json=body, headers=headers)
        response.raise_for_status()

        try:
            payload = GraphQLResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise OwnershipGraphQLError(["Unexpected GraphQL response payload"]) from exc

        search = (payload.data or {}).get("partySearch")
        if payload.errors:
            messages = [error.message for error in payload.errors]
            if search is None:
                raise OwnershipGraphQLError(messages)
            log.warning("Ownership graph returned partial data: %s", "; ".join(messages))
        if search is None:
            return NormalizedResponse(connector_id=self.connector_id)

        candidates, skipped = parse_parties(search.parties, source_id=self.connector_id)
        return NormalizedResponse(
            connector_id=self.connector_id,
            candidates=tuple(candidates),
            skipped_records=skipped,
        )


def build_ownership_connector(
    config: OwnershipConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] = default_client_factory,
) -> OwnershipGraphConnector:
    return OwnershipGraphConnector(
        url=config.url,
        api_token=config.api_token,
        applicability=config.applicability,
        resilience=config.resilience or _default_resilience_config(),
        client_factory=client_factory,
    )


if TYPE_CHECKING:
    _connector_check: Connector = OwnershipGraphConnector(url="")
