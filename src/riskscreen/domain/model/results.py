"""Products of the matching and aggregation engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from riskscreen.domain.model.entity import CandidateRecord
    from riskscreen.domain.model.enums import Domain, ErrorKind, MatchType, RiskLevel


@dataclass(frozen=True, slots=True)
class DimensionScores:
    """Per-dimension similarity in [0, 1]; ``None`` means the attribute was unavailable."""

    name: float
    alias: float
    phonetic: float
    dob: float | None = None
    nationality: float | None = None
    identifier: float | None = None

    def attributes(self) -> dict[str, float]:
        values = {
            "dob": self.dob,
            "nationality": self.nationality,
            "identifier": self.identifier,
        }
        return {key: value for key, value in values.items() if value is not None}

    def as_dict(self) -> dict[str, float | None]:
        return {
            "name": self.name,
            "alias": self.alias,
            "phonetic": self.phonetic,
            "dob": self.dob,
            "nationality": self.nationality,
            "identifier": self.identifier,
        }


@dataclass(frozen=True, slots=True)
class MatchResult:
    candidate: CandidateRecord
    scores: DimensionScores
    composite: float
    match_type: MatchType
    matched_name: str
    corroborations: int = 0

    @property
    def domain(self) -> Domain:
        return self.candidate.category


@dataclass(frozen=True, slots=True)
class DomainScore:
    domain: Domain
    score: float
    weight: float
    effective_weight: float
    top_matches: tuple[MatchResult, ...] = ()


@dataclass(frozen=True, slots=True)
class ConnectorFailure:
    connector_id: str
    domain: Domain
    kind: ErrorKind
    message: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class RiskVerdict:
    """Terminal result of one assessment. A refresh produces a new verdict."""

    composite_score: float
    level: RiskLevel
    score_level: RiskLevel
    triggers: tuple[str, ...] = ()
    overrides: tuple[str, ...] = ()
    recommendation: str = ""
    domain_scores: tuple[DomainScore, ...] = ()
    domains_without_data: tuple[Domain, ...] = ()
    insufficient_data: bool = False
    connector_failures: tuple[ConnectorFailure, ...] = field(default=())
    warnings: tuple[str, ...] = ()

    def domain_score(self, domain: Domain) -> DomainScore | None:
        for score in self.domain_scores:
            if score.domain == domain:
                return score
        return None
