"""Public interface for the threat-feed adapter."""

from __future__ import annotations

from .client import ThreatFeedAPIError, ThreatFeedConnector, build_threatfeed_connector
from .translator import parse_actor, parse_actors

__all__ = [
    "ThreatFeedAPIError",
    "ThreatFeedConnector",
    "build_threatfeed_connector",
    "parse_actor",
    "parse_actors",
]
