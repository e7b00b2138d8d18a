"""Domain ports."""

from __future__ import annotations

from .connectors import (
    ApplicabilityRule,
    Connector,
    ConnectorGatewayPort,
    ConnectorOutcome,
    ConnectorRequest,
    NormalizedResponse,
)

__all__ = [
    "ApplicabilityRule",
    "Connector",
    "ConnectorGatewayPort",
    "ConnectorOutcome",
    "ConnectorRequest",
    "NormalizedResponse",
]
