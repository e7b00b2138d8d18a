"""Public interface for the beneficial-ownership adapter."""

from __future__ import annotations

from .client import (
    PARTY_SEARCH_QUERY,
    OwnershipGraphConnector,
    OwnershipGraphQLError,
    build_ownership_connector,
)
from .translator import parse_parties, parse_party

__all__ = [
    "PARTY_SEARCH_QUERY",
    "OwnershipGraphConnector",
    "OwnershipGraphQLError",
    "build_ownership_connector",
    "parse_parties",
    "parse_party",
]
