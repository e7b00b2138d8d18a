"""Public interface for the OpenSanctions adapter."""

from __future__ import annotations

from .client import (
    DATASET_DOMAINS,
    OpenSanctionsAPIError,
    OpenSanctionsConnector,
    build_opensanctions_connectors,
)
from .schema import EntityPayload, SearchResponse
from .translator import parse_entity, parse_results

__all__ = [
    "DATASET_DOMAINS",
    "EntityPayload",
    "OpenSanctionsAPIError",
    "OpenSanctionsConnector",
    "SearchResponse",
    "build_opensanctions_connectors",
    "parse_entity",
    "parse_results",
]
