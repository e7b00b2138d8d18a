"""Declarative risk rules evaluated against a DomainScore snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from riskscreen.domain.model import Domain, MatchType, RiskLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from riskscreen.domain.model import MatchResult


@dataclass(frozen=True, slots=True)
class LevelBands:
    """Lower bounds of the medium/high/critical bands; a boundary belongs to the higher band."""

    medium: float = 25.0
    high: float = 50.0
    critical: float = 75.0

    def __post_init__(self) -> None:
        if not 0.0 < self.medium < self.high < self.critical <= 100.0:
            bands = f"{self.medium}, {self.high}, {self.critical}"
            raise ValueError(f"Level bands must ascend within (0, 100]: {bands}")

    def level_for(self, score: float) -> RiskLevel:
        if score >= self.critical:
            return RiskLevel.CRITICAL
        if score >= self.high:
            return RiskLevel.HIGH
        if score >= self.medium:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


@dataclass(frozen=True, slots=True)
class TriggerRule:
    """Fires when every listed domain has data and reaches its threshold."""

    name: str
    thresholds: Mapping[Domain, float]
    escalate: bool = True
    description: str = ""

    def fires(self, scores: Mapping[Domain, float]) -> bool:
        if not self.thresholds:
            return False
        return all(
            domain in scores and scores[domain] >= threshold
            for domain, threshold in self.thresholds.items()
        )


@dataclass(frozen=True, slots=True)
class OverrideRule:
    """Forces at least ``level`` when a domain holds a qualifying match."""

    name: str
    domain: Domain
    level: RiskLevel = RiskLevel.CRITICAL
    match_types: frozenset[MatchType] = frozenset()
    min_score: float = 0.0
    require_identifier: bool = False
    description: str = ""

    def applies(self, results: Sequence[MatchResult]) -> bool:
        return any(self._qualifies(result) for result in results)

    def _qualifies(self, result: MatchResult) -> bool:
        if result.composite < self.min_score:
            return False
        if self.match_types and result.match_type not in self.match_types:
            return False
        return not (self.require_identifier and (result.scores.identifier or 0.0) < 1.0)


def _default_weights() -> dict[Domain, float]:
    return {
        Domain.SANCTIONS: 0.35,
        Domain.PEP: 0.20,
        Domain.CRIMINAL: 0.20,
        Domain.OWNERSHIP: 0.10,
        Domain.THREAT_ACTOR: 0.15,
    }


DEFAULT_TRIGGERS: tuple[TriggerRule, ...] = (
    TriggerRule(
        name="sanctioned-ownership",
        thresholds={Domain.SANCTIONS: 0.7, Domain.OWNERSHIP: 0.6},
        description="Sanctions hit combined with an ownership-chain hit",
    ),
    TriggerRule(
        name="pep-criminal-nexus",
        thresholds={Domain.PEP: 0.7, Domain.CRIMINAL: 0.7},
        description="Politically exposed person with a criminal record hit",
    ),
)

DEFAULT_OVERRIDES: tuple[OverrideRule, ...] = (
    OverrideRule(
        name="sanctions-exact-match",
        domain=Domain.SANCTIONS,
        match_types=frozenset({MatchType.EXACT}),
        description="Exact name match on a sanctions list",
    ),
    OverrideRule(
        name="sanctions-identifier-match",
        domain=Domain.SANCTIONS,
        min_score=0.8,
        require_identifier=True,
        description="Sanctions match corroborated by a shared identifier",
    ),
)


@dataclass(frozen=True, slots=True)
class RiskRules:
    weights: Mapping[Domain, float] = field(default_factory=_default_weights)
    bands: LevelBands = field(default_factory=LevelBands)
    triggers: tuple[TriggerRule, ...] = DEFAULT_TRIGGERS
    overrides: tuple[OverrideRule, ...] = DEFAULT_OVERRIDES
    top_matches: int = 3

    def __post_init__(self) -> None:
        negative = sorted(str(domain) for domain, weight in self.weights.items() if weight < 0)
        if negative:
            raise ValueError(f"Domain weights must be non-negative: {', '.join(negative)}")

    def weight_for(self, domain: Domain) -> float:
        return self.weights.get(domain, 0.0)
