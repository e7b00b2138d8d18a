"""Risk aggregation."""

from __future__ import annotations

from .engine import DomainEvidence, RiskAggregator, aggregate, weighted_composite
from .recommendation import INSUFFICIENT_DATA, recommend
from .rules import (
    DEFAULT_OVERRIDES,
    DEFAULT_TRIGGERS,
    LevelBands,
    OverrideRule,
    RiskRules,
    TriggerRule,
)

__all__ = [
    "DEFAULT_OVERRIDES",
    "DEFAULT_TRIGGERS",
    "INSUFFICIENT_DATA",
    "DomainEvidence",
    "LevelBands",
    "OverrideRule",
    "RiskAggregator",
    "RiskRules",
    "TriggerRule",
    "aggregate",
    "recommend",
    "weighted_composite",
]
