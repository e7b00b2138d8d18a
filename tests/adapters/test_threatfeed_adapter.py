from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
import pytest

from riskscreen.adapters.threatfeed import (
    ThreatFeedAPIError,
    ThreatFeedConnector,
    build_threatfeed_connector,
)
from riskscreen.config import ThreatFeedConfig
from riskscreen.domain.model import Domain
from riskscreen.domain.ports import ConnectorRequest
from tests.support.http import make_client_factory

FEED_URL = "https://feed.example"


def _actor(actor_id: str, name: str, **extra: object) -> dict[str, object]:
    return {"id": actor_id, "name": name, **extra}


def _connector(handler: Callable[[httpx.Request], httpx.Response]) -> ThreatFeedConnector:
    return build_threatfeed_connector(
        ThreatFeedConfig(base_url=FEED_URL, api_key="feed-key"),
        client_factory=make_client_factory(handler),
    )


def test_follows_cursor_pages() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if "cursor" not in request.url.params:
            return httpx.Response(
                200,
                json={
                    "data": [
                        _actor(
                            "ta-1",
                            "Sandworm",
                            aliases=["Voodoo Bear"],
                            country="ru",
                            indicators=["185.10.10.10"],
                            campaigns=["NotPetya"],
                        )
                    ],
                    "nextCursor": "page-2",
                },
            )
        return httpx.Response(200, json={"data": [_actor("ta-2", "Sandworm Team")]})

    response = asyncio.run(_connector(handler).fetch(ConnectorRequest(name="Sandworm")))

    assert [c.record_id for c in response.candidates] == ["ta-1", "ta-2"]
    first = response.candidates[0]
    assert first.category is Domain.THREAT_ACTOR
    assert first.aliases == ("Voodoo Bear",)
    assert first.nationalities == frozenset({"RU"})
    assert first.identifiers == frozenset({"185.10.10.10"})
    assert first.programs == ("NotPetya",)
    assert len(seen) == 2
    assert seen[0].url.path == "/v1/actors"
    assert seen[0].headers["X-API-Key"] == "feed-key"
    assert seen[1].url.params["cursor"] == "page-2"


def test_stops_after_page_limit() -> None:
    calls: list[int] = []

    def handler(_: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(200, json={"data": [], "nextCursor": "more"})

    asyncio.run(_connector(handler).fetch(ConnectorRequest(name="Sandworm")))

    assert len(calls) == 3


def test_malformed_actor_is_skipped() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"id": "ta-x"}, _actor("ta-1", "APT28")]})

    response = asyncio.run(_connector(handler).fetch(ConnectorRequest(name="APT28")))

    assert [c.record_id for c in response.candidates] == ["ta-1"]
    assert response.skipped_records == 1


def test_unexpected_payload_raises() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(ThreatFeedAPIError):
        asyncio.run(_connector(handler).fetch(ConnectorRequest(name="APT28")))


def test_auth_failure_propagates() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(401)

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        asyncio.run(_connector(handler).fetch(ConnectorRequest(name="APT28")))

    assert excinfo.value.response.status_code == 401
