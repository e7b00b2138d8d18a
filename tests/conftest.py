from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from riskscreen.adapters.circuit_breaker import CircuitBreakerRegistry, get_breaker_registry
from riskscreen.adapters.http_resilience import shared_limiter
from riskscreen.config import BreakerPolicy, RetryPolicy
from tests.support.screening import FakeClock, RecordingSleep


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "RISKSCREEN_RULES_FILE",
        "RISKSCREEN_RETRY_TOTAL",
        "RISKSCREEN_BREAKER_THRESHOLD",
        "OWNERSHIP_GRAPHQL_URL",
        "THREATFEED_BASE_URL",
        "OPENSANCTIONS_CACHE_TTL",
        "THREATFEED_CACHE_TTL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RISKSCREEN_DATA_DIR", str(tmp_path / "data"))
    get_breaker_registry.cache_clear()
    shared_limiter.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def breaker_policy() -> BreakerPolicy:
    return BreakerPolicy(failure_threshold=3, cooldown_seconds=30.0, max_cooldown_seconds=120.0)


@pytest.fixture
def registry(breaker_policy: BreakerPolicy, clock: FakeClock) -> CircuitBreakerRegistry:
    return CircuitBreakerRegistry(breaker_policy, clock=clock)


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return RetryPolicy(total=4, backoff_factor=0.1, max_backoff_wait=5.0, backoff_jitter=0.0)
