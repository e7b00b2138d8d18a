from __future__ import annotations

import pytest

from riskscreen.adapters.opensanctions import OpenSanctionsConnector
from riskscreen.adapters.ownership import OwnershipGraphConnector
from riskscreen.adapters.threatfeed import ThreatFeedConnector
from riskscreen.app import assess_entity, build_connectors, build_orchestrator
from riskscreen.config import (
    ConnectorSettings,
    MissingConfigurationError,
    OpenSanctionsConfig,
    OwnershipConfig,
    ThreatFeedConfig,
    get_connector_settings,
)
from riskscreen.domain.model import Domain, RiskLevel
from tests.support.screening import FakeConnector, make_candidate, make_entity


def test_build_connectors_covers_configured_sources() -> None:
    settings = ConnectorSettings(
        opensanctions=OpenSanctionsConfig(api_key="k", datasets=("sanctions",)),
        ownership=OwnershipConfig(url="https://graph.example/graphql"),
        threatfeed=ThreatFeedConfig(base_url="https://feed.example"),
    )

    connectors = build_connectors(settings)

    assert [type(c) for c in connectors] == [
        OpenSanctionsConnector,
        OwnershipGraphConnector,
        ThreatFeedConnector,
    ]
    assert [c.domain for c in connectors] == [
        Domain.SANCTIONS,
        Domain.OWNERSHIP,
        Domain.THREAT_ACTOR,
    ]


def test_optional_sources_are_skipped_when_unconfigured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENSANCTIONS_API_KEY", "k")

    settings = get_connector_settings()

    assert settings.ownership is None
    assert settings.threatfeed is None
    assert [c.connector_id for c in build_connectors(settings)] == [
        "opensanctions:sanctions",
        "opensanctions:peps",
        "opensanctions:crime",
    ]


def test_optional_sources_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENSANCTIONS_API_KEY", "k")
    monkeypatch.setenv("OWNERSHIP_GRAPHQL_URL", "https://graph.example/graphql")
    monkeypatch.setenv("OWNERSHIP_API_TOKEN", "token")
    monkeypatch.setenv("THREATFEED_BASE_URL", "https://feed.example")
    monkeypatch.setenv("THREATFEED_CACHE_TTL", "600")

    settings = get_connector_settings()

    assert settings.ownership is not None
    assert settings.ownership.api_token == "token"
    assert settings.threatfeed is not None
    assert settings.threatfeed.resilience is not None
    assert settings.threatfeed.resilience.cache is not None
    assert settings.threatfeed.resilience.cache.default_ttl_seconds == 600.0


def test_missing_api_key_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENSANCTIONS_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="OPENSANCTIONS_API_KEY"):
        build_orchestrator()


def test_assess_entity_with_explicit_connectors() -> None:
    orchestrator = build_orchestrator(
        connectors=[
            FakeConnector(
                "sanctions-src",
                Domain.SANCTIONS,
                candidates=(make_candidate("Ivan Petrov"),),
            )
        ]
    )

    verdict = assess_entity(make_entity("Ivan Petrov"), orchestrator=orchestrator)

    assert verdict.level is RiskLevel.CRITICAL
