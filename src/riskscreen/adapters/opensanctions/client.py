"""Connectors backed by the OpenSanctions search API."""

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
from riskscreen.config.connectors import ALL_ENTITIES, OPENSANCTIONS_BASE_URL
from riskscreen.domain.model import Domain
from riskscreen.domain.ports import ApplicabilityRule, Connector, NormalizedResponse

from .schema import ErrorResponse, SearchResponse
from .translator import SCHEMA_FOR_ENTITY_TYPE, parse_results

if TYPE_CHECKING:
    from collections.abc import Callable

    from riskscreen.config.connectors import OpenSanctionsConfig
    from riskscreen.domain.model import CandidateRecord, Entity
    from riskscreen.domain.ports import ConnectorRequest

log = getLogger(__name__)

DATASET_DOMAINS: dict[str, Domain] = {
    "sanctions": Domain.SANCTIONS,
    "peps": Domain.PEP,
    "crime": Domain.CRIMINAL,
}
_DEFAULT_TIMEOUT_SECONDS = 10.0
_MAX_QUERY_NAMES = 3


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="opensanctions",
        base_url=OPENSANCTIONS_BASE_URL,
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )


class OpenSanctionsAPIError(SourcePayloadError):
    """Raised when the OpenSanctions API returns an unusable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class OpenSanctionsConnector:
    """Search one OpenSanctions dataset and report its hits under one risk domain."""

    api_key: str
    dataset: str = "sanctions"
    domain: Domain = Domain.SANCTIONS
    limit: int = 10
    applicability: ApplicabilityRule = field(default=ALL_ENTITIES)
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    connector_id: str = field(init=False)

    def __post_init__(self) -> None:
        self.connector_id = f"opensanctions:{self.dataset}"

    def applies_to(self, entity: Entity) -> bool:
        return self.applicability.applies_to(entity)

    async def fetch(self, request: ConnectorRequest) -> NormalizedResponse:
        seen: dict[str, CandidateRecord] = {}
        skipped = 0
        async with self.client_factory(self.resilience) as client:
            for query in request.names[:_MAX_QUERY_NAMES]:
                results = await self._search(client, query=query, request=request)
                candidates, dropped = parse_results(
                    results, source_id=self.connector_id, domain=self.domain
                )
                skipped += dropped
                for candidate in candidates:
                    seen.setdefault(candidate.record_id, candidate)
        log.debug(
            "%s: %s candidate(s), %s skipped for %r",
            self.connector_id,
            len(seen),
            skipped,
            request.name,
        )
        return NormalizedResponse(
            connector_id=self.connector_id,
            candidates=tuple(seen.values()),
            skipped_records=skipped,
        )

    async def _search(
        self,
        client: ResilientClient,
        *,
        query: str,
        request: ConnectorRequest,
    ) -> list[dict[str, object]]:
        params: dict[str, str | int] = {
            "q": query,
            "schema": SCHEMA_FOR_ENTITY_TYPE[request.entity_type],
            "limit": self.limit,
        }
        if request.nationality:
            params["countries"] = request.nationality.lower()
        response = await client.get(
            f"/search/{self.dataset}",
            params=params,
            headers={"Authorization": f"ApiKey {self.api_key}"},
        )
        if response.status_code == 400:
            try:
                detail = ErrorResponse.model_validate(response.json()).detail
            except (ValueError, ValidationError):
                detail = response.text
            log.error("OpenSanctions rejected query for %s: %s", self.dataset, detail)
            raise OpenSanctionsAPIError(detail, status_code=response.status_code)
        response.raise_for_status()

        try:
            payload = SearchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise OpenSanctionsAPIError("Unexpected OpenSanctions response payload") from exc
        return payload.results


def build_opensanctions_connectors(
    config: OpenSanctionsConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] = default_client_factory,
) -> list[OpenSanctionsConnector]:
    """One connector per configured dataset, in configuration order."""

    resilience = config.resilience or ResilienceConfig(
        name="opensanctions",
        base_url=config.base_url,
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )
    connectors: list[OpenSanctionsConnector] = []
    for dataset in config.datasets:
        domain = DATASET_DOMAINS.get(dataset)
        if domain is None:
            raise ValueError(f"No risk domain known for OpenSanctions dataset {dataset!r}")
        connectors.append(
            OpenSanctionsConnector(
                api_key=config.api_key,
                dataset=dataset,
                domain=domain,
                applicability=config.applicability,
                resilience=resilience,
                client_factory=client_factory,
            )
        )
    return connectors


if TYPE_CHECKING:
    _connector_check: Connector = OpenSanctionsConnector(api_key="")
