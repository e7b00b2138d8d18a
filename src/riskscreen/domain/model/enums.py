"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    PERSON = "person"
    ORGANIZATION = "organization"
    ASSET = "asset"


class Domain(StrEnum):
    """Category of risk evidence; also the list category of a candidate record."""

    SANCTIONS = "sanctions"
    PEP = "pep"
    CRIMINAL = "criminal"
    OWNERSHIP = "ownership"
    THREAT_ACTOR = "threat-actor"


# Tie-break order between otherwise equal matches: sanctions lists first.
DOMAIN_PRIORITY: dict[Domain, int] = {
    Domain.SANCTIONS: 0,
    Domain.CRIMINAL: 1,
    Domain.THREAT_ACTOR: 2,
    Domain.PEP: 3,
    Domain.OWNERSHIP: 4,
}


class MatchType(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    PHONETIC = "phonetic"
    ALIAS = "alias"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def escalate(self, steps: int = 1) -> RiskLevel:
        return _LEVEL_ORDER[min(self.rank + steps, len(_LEVEL_ORDER) - 1)]

    @classmethod
    def highest(cls, *levels: RiskLevel) -> RiskLevel:
        return max(levels, key=lambda level: level.rank)


_LEVEL_ORDER: tuple[RiskLevel, ...] = (
    RiskLevel.LOW,
    RiskLevel.MEDIUM,
    RiskLevel.HIGH,
    RiskLevel.CRITICAL,
)


class CircuitStatus(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


class ErrorKind(StrEnum):
    TRANSIENT = "transient"
    RATE_LIMITED = "rate-limited"
    AUTH_FAILURE = "auth-failure"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"
    CIRCUIT_OPEN = "circuit-open"
    TIMEOUT = "timeout"


RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({ErrorKind.TRANSIENT, ErrorKind.RATE_LIMITED})
