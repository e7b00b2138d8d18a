"""Application configuration helpers."""

from __future__ import annotations

from .connectors import (
    ALL_ENTITIES,
    PEOPLE_AND_ORGANIZATIONS,
    ConnectorSettings,
    OpenSanctionsConfig,
    OwnershipConfig,
    ThreatFeedConfig,
    get_connector_settings,
)
from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import (
    BreakerPolicy,
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    get_breaker_policy,
    get_retry_policy,
)
from .logging import configure_logging
from .scoring import ScoringConfig, get_scoring_config, load_scoring_config
from .storage import get_data_dir, get_http_cache_path

__all__ = [
    "ALL_ENTITIES",
    "PEOPLE_AND_ORGANIZATIONS",
    "BreakerPolicy",
    "CacheConfig",
    "ConfigurationError",
    "ConnectorSettings",
    "MissingConfigurationError",
    "OpenSanctionsConfig",
    "OwnershipConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ScoringConfig",
    "ThreatFeedConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_breaker_policy",
    "get_connector_settings",
    "get_data_dir",
    "get_http_cache_path",
    "get_retry_policy",
    "get_scoring_config",
    "load_scoring_config",
    "optional_env_var",
    "require_env_vars",
]
