from __future__ import annotations

import asyncio

import httpx
import pytest

from riskscreen.adapters.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    shared_limiter,
)
from tests.support.http import make_client_factory


def test_client_applies_base_url_and_rate_limit() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="example",
        base_url="https://source.example",
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
    )

    async def run() -> list[int]:
        async with make_client_factory(handler)(config) as client:
            responses = [await client.get("/search", params={"q": "x"}) for _ in range(3)]
        return [response.status_code for response in responses]

    assert asyncio.run(run()) == [200, 200, 200]
    assert seen == ["https://source.example/search?q=x"] * 3


def test_disabled_cache_uses_plain_client() -> None:
    client = ResilientClient(ResilienceConfig(name="example", cache=CacheConfig(enabled=False)))

    assert type(client._client) is httpx.AsyncClient
    asyncio.run(client.aclose())


def test_unknown_cache_backend_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        cache = CacheConfig(backend="redis")  # type: ignore[arg-type]
        ResilientClient(ResilienceConfig(name="example", cache=cache))


def test_clients_for_one_source_share_a_rate_limit() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    factory = make_client_factory(handler)
    config = ResilienceConfig(
        name="example",
        base_url="https://source.example",
        ratelimit=RateLimit(max_calls=1, per_seconds=60.0),
    )

    async def run() -> None:
        async with factory(config) as first:
            assert (await first.get("/search")).status_code == 200
        async with factory(config) as second:
            assert second._limiter is first._limiter
            with pytest.raises(TimeoutError):
                await asyncio.wait_for(second.get("/search"), timeout=0.05)

    asyncio.run(run())


def test_rate_limits_are_kept_per_source() -> None:
    limit = RateLimit(max_calls=1, per_seconds=60.0)
    first = ResilientClient(ResilienceConfig(name="first", ratelimit=limit))
    second = ResilientClient(ResilienceConfig(name="second", ratelimit=limit))

    assert first._limiter is not second._limiter
    assert first._limiter is shared_limiter("first", 1, 60.0)
    asyncio.run(first.aclose())
    asyncio.run(second.aclose())
