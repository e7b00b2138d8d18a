"""Public domain model surface."""

from __future__ import annotations

from riskscreen.domain.model.entity import CandidateRecord, Entity
from riskscreen.domain.model.enums import (
    DOMAIN_PRIORITY,
    RETRYABLE_KINDS,
    CircuitStatus,
    Domain,
    EntityType,
    ErrorKind,
    MatchType,
    RiskLevel,
)
from riskscreen.domain.model.errors import (
    CircuitOpenError,
    ClassifiedError,
    ConnectorError,
    InvalidInputError,
    RiskScreenError,
)
from riskscreen.domain.model.primitives import (
    ConnectorId,
    CountryCode,
    Identifier,
    PartialDate,
)
from riskscreen.domain.model.results import (
    ConnectorFailure,
    DimensionScores,
    DomainScore,
    MatchResult,
    RiskVerdict,
)

__all__ = [  # noqa: RUF022
    # entities
    "CandidateRecord",
    "Entity",
    # enums
    "DOMAIN_PRIORITY",
    "RETRYABLE_KINDS",
    "CircuitStatus",
    "Domain",
    "EntityType",
    "ErrorKind",
    "MatchType",
    "RiskLevel",
    # errors
    "CircuitOpenError",
    "ClassifiedError",
    "ConnectorError",
    "InvalidInputError",
    "RiskScreenError",
    # primitives
    "ConnectorId",
    "CountryCode",
    "Identifier",
    "PartialDate",
    # results
    "ConnectorFailure",
    "DimensionScores",
    "DomainScore",
    "MatchResult",
    "RiskVerdict",
]
