"""Outbound verdict payload exported to downstream compliance systems."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from riskscreen.domain.model import Domain, ErrorKind, MatchType, RiskLevel

if TYPE_CHECKING:
    from riskscreen.domain.model import (
        ConnectorFailure,
        DomainScore,
        MatchResult,
        RiskVerdict,
    )

SCHEMA_VERSION = "1"


class PayloadModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DimensionScoresPayload(PayloadModel):
    name: float = Field(ge=0.0, le=1.0)
    alias: float = Field(ge=0.0, le=1.0)
    phonetic: float = Field(ge=0.0, le=1.0)
    dob: float | None = Field(default=None, ge=0.0, le=1.0)
    nationality: float | None = Field(default=None, ge=0.0, le=1.0)
    identifier: float | None = Field(default=None, ge=0.0, le=1.0)


class MatchPayload(PayloadModel):
    source: str
    record_id: str
    name: str
    matched_name: str
    match_type: MatchType
    score: float = Field(ge=0.0, le=1.0)
    dimensions: DimensionScoresPayload
    programs: list[str] = Field(default_factory=list)
    url: str | None = None

    @classmethod
    def from_result(cls, result: MatchResult) -> MatchPayload:
        candidate = result.candidate
        return cls(
            source=candidate.source_id,
            record_id=candidate.record_id,
            name=candidate.name,
            matched_name=result.matched_name,
            match_type=result.match_type,
            score=result.composite,
            dimensions=DimensionScoresPayload(**result.scores.as_dict()),
            programs=list(candidate.programs),
            url=candidate.url,
        )


class DomainScorePayload(PayloadModel):
    domain: Domain
    score: float = Field(ge=0.0, le=1.0)
    weight: float = Field(ge=0.0)
    effective_weight: float = Field(ge=0.0, le=1.0)
    top_matches: list[MatchPayload] = Field(default_factory=list)

    @classmethod
    def from_domain_score(cls, domain_score: DomainScore) -> DomainScorePayload:
        return cls(
            domain=domain_score.domain,
            score=domain_score.score,
            weight=domain_score.weight,
            effective_weight=domain_score.effective_weight,
            top_matches=[MatchPayload.from_result(result) for result in domain_score.top_matches],
        )


class ConnectorFailurePayload(PayloadModel):
    connector: str
    domain: Domain
    kind: ErrorKind
    message: str = ""

    @classmethod
    def from_failure(cls, failure: ConnectorFailure) -> ConnectorFailurePayload:
        return cls(
            connector=failure.connector_id,
            domain=failure.domain,
            kind=failure.kind,
            message=failure.message,
        )


class RiskVerdictPayload(PayloadModel):
    """Field names and ranges downstream consumers rely on."""

    schema_version: str = SCHEMA_VERSION
    score: float = Field(ge=0.0, le=100.0)
    level: RiskLevel
    score_level: RiskLevel
    recommendation: str
    triggers: list[str] = Field(default_factory=list)
    overrides: list[str] = Field(default_factory=list)
    domains: list[DomainScorePayload] = Field(default_factory=list)
    domains_without_data: list[Domain] = Field(default_factory=list)
    insufficient_data: bool = False
    connector_failures: list[ConnectorFailurePayload] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_verdict(cls, verdict: RiskVerdict) -> RiskVerdictPayload:
        return cls(
            score=round(verdict.composite_score, 2),
            level=verdict.level,
            score_level=verdict.score_level,
            recommendation=verdict.recommendation,
            triggers=list(verdict.triggers),
            overrides=list(verdict.overrides),
            domains=[DomainScorePayload.from_domain_score(s) for s in verdict.domain_scores],
            domains_without_data=list(verdict.domains_without_data),
            insufficient_data=verdict.insufficient_data,
            connector_failures=[
                ConnectorFailurePayload.from_failure(f) for f in verdict.connector_failures
            ],
            warnings=list(verdict.warnings),
        )
