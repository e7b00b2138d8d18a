"""Configuration types for resilient connector calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from .env import env_float, env_int

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retries after the first attempt, with capped exponential backoff plus jitter."""

    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    backoff_jitter: float = 1.0

    @property
    def max_attempts(self) -> int:
        return self.total + 1


@dataclass(slots=True, frozen=True)
class BreakerPolicy:
    failure_threshold: int = 5
    cooldown_seconds: float = 30.0
    max_cooldown_seconds: float = 600.0
    backoff_multiplier: float = 2.0

    def cooldown_for(self, trips: int) -> float:
        """Cooldown after the ``trips``-th consecutive opening of a circuit."""

        exponent = max(trips - 1, 0)
        cooldown = self.cooldown_seconds * self.backoff_multiplier**exponent
        return min(cooldown, self.max_cooldown_seconds)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = field(default=None)


def get_retry_policy() -> RetryPolicy:
    defaults = RetryPolicy()
    return RetryPolicy(
        total=env_int("RISKSCREEN_RETRY_TOTAL", defaults.total),
        backoff_factor=env_float("RISKSCREEN_RETRY_BACKOFF", defaults.backoff_factor),
        max_backoff_wait=env_float("RISKSCREEN_RETRY_MAX_WAIT", defaults.max_backoff_wait),
    )


def get_breaker_policy() -> BreakerPolicy:
    defaults = BreakerPolicy()
    return BreakerPolicy(
        failure_threshold=env_int("RISKSCREEN_BREAKER_THRESHOLD", defaults.failure_threshold),
        cooldown_seconds=env_float("RISKSCREEN_BREAKER_COOLDOWN", defaults.cooldown_seconds),
        max_cooldown_seconds=env_float(
            "RISKSCREEN_BREAKER_MAX_COOLDOWN", defaults.max_cooldown_seconds
        ),
    )
