"""Connector settings read from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field

from riskscreen.domain.model import EntityType
from riskscreen.domain.ports import ApplicabilityRule

from .env import env_float, optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

OPENSANCTIONS_BASE_URL = "https://api.opensanctions.org"
OPENSANCTIONS_TIMEOUT_SECONDS = 10.0
OWNERSHIP_TIMEOUT_SECONDS = 15.0
THREATFEED_TIMEOUT_SECONDS = 10.0

PEOPLE_AND_ORGANIZATIONS = ApplicabilityRule(
    entity_types=frozenset({EntityType.PERSON, EntityType.ORGANIZATION})
)
ALL_ENTITIES = ApplicabilityRule()


def _cache_from_environment(prefix: str) -> CacheConfig | None:
    name = f"{prefix}_CACHE_TTL"
    if optional_env_var(name) is None:
        return None
    return CacheConfig(backend="sqlite", default_ttl_seconds=env_float(name, 0.0))


@dataclass(frozen=True)
class OpenSanctionsConfig:
    """Holds OpenSanctions API configuration values."""

    api_key: str
    base_url: str = OPENSANCTIONS_BASE_URL
    datasets: tuple[str, ...] = ("sanctions", "peps", "crime")
    applicability: ApplicabilityRule = field(default=ALL_ENTITIES)
    resilience: ResilienceConfig | None = None

    @classmethod
    def from_environment(cls) -> OpenSanctionsConfig:
        values = require_env_vars(("OPENSANCTIONS_API_KEY",))
        base_url = optional_env_var("OPENSANCTIONS_BASE_URL") or OPENSANCTIONS_BASE_URL
        return cls(
            api_key=values["OPENSANCTIONS_API_KEY"],
            base_url=base_url,
            resilience=ResilienceConfig(
                name="opensanctions",
                base_url=base_url,
                timeout_seconds=OPENSANCTIONS_TIMEOUT_SECONDS,
                ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
                cache=_cache_from_environment("OPENSANCTIONS"),
            ),
        )


@dataclass(frozen=True)
class OwnershipConfig:
    """Beneficial-ownership GraphQL endpoint."""

    url: str
    api_token: str | None = None
    applicability: ApplicabilityRule = field(default=PEOPLE_AND_ORGANIZATIONS)
    resilience: ResilienceConfig | None = None

    @classmethod
    def from_environment(cls) -> OwnershipConfig | None:
        url = optional_env_var("OWNERSHIP_GRAPHQL_URL")
        if url is None:
            return None
        return cls(
            url=url,
            api_token=optional_env_var("OWNERSHIP_API_TOKEN"),
            resilience=ResilienceConfig(
                name="ownership",
                timeout_seconds=OWNERSHIP_TIMEOUT_SECONDS,
                ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            ),
        )


@dataclass(frozen=True)
class ThreatFeedConfig:
    """Threat-actor intelligence REST feed."""

    base_url: str
    api_key: str | None = None
    applicability: ApplicabilityRule = field(default=ALL_ENTITIES)
    resilience: ResilienceConfig | None = None

    @classmethod
    def from_environment(cls) -> ThreatFeedConfig | None:
        base_url = optional_env_var("THREATFEED_BASE_URL")
        if base_url is None:
            return None
        return cls(
            base_url=base_url,
            api_key=optional_env_var("THREATFEED_API_KEY"),
            resilience=ResilienceConfig(
                name="threatfeed",
                base_url=base_url,
                timeout_seconds=THREATFEED_TIMEOUT_SECONDS,
                ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
                cache=_cache_from_environment("THREATFEED"),
            ),
        )


@dataclass(frozen=True)
class ConnectorSettings:
    opensanctions: OpenSanctionsConfig
    ownership: OwnershipConfig | None = None
    threatfeed: ThreatFeedConfig | None = None


def get_connector_settings() -> ConnectorSettings:
    return ConnectorSettings(
        opensanctions=OpenSanctionsConfig.from_environment(),
        ownership=OwnershipConfig.from_environment(),
        threatfeed=ThreatFeedConfig.from_environment(),
    )
