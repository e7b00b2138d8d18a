"""Port implemented by every external watchlist / threat-feed source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from riskscreen.domain.model.enums import EntityType

if TYPE_CHECKING:
    from collections.abc import Sequence

    from riskscreen.domain.model.entity import CandidateRecord, Entity
    from riskscreen.domain.model.enums import Domain
    from riskscreen.domain.model.errors import ClassifiedError


@dataclass(frozen=True, slots=True)
class ConnectorRequest:
    """Uniform query shape handed to every connector."""

    name: str
    entity_type: EntityType = EntityType.PERSON
    aliases: tuple[str, ...] = ()
    date_of_birth: str | None = None
    nationality: str | None = None
    identifiers: tuple[str, ...] = ()

    @classmethod
    def from_entity(cls, entity: Entity) -> ConnectorRequest:
        return cls(
            name=entity.name.strip(),
            entity_type=entity.entity_type,
            aliases=tuple(alias.strip() for alias in entity.aliases if alias.strip()),
            date_of_birth=str(entity.date_of_birth) if entity.date_of_birth else None,
            nationality=entity.nationality,
            identifiers=tuple(sorted(entity.identifiers)),
        )

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True)
class NormalizedResponse:
    """Candidates a connector produced for one request."""

    connector_id: str
    candidates: tuple[CandidateRecord, ...] = ()
    skipped_records: int = 0


@dataclass(frozen=True, slots=True)
class ApplicabilityRule:
    """Which entities a connector can say anything about."""

    entity_types: frozenset[EntityType] = field(default_factory=lambda: frozenset(EntityType))
    requires_identifiers: bool = False

    def applies_to(self, entity: Entity) -> bool:
        if entity.entity_type not in self.entity_types:
            return False
        return not (self.requires_identifiers and not entity.identifiers)


@runtime_checkable
class Connector(Protocol):
    """Capability interface: one implementation per external source."""

    connector_id: str
    domain: Domain

    def applies_to(self, entity: Entity) -> bool: ...

    async def fetch(self, request: ConnectorRequest) -> NormalizedResponse: ...


@dataclass(frozen=True, slots=True)
class ConnectorOutcome:
    """Result of one gateway call: a response or a classified error, never both."""

    connector_id: str
    domain: Domain
    response: NormalizedResponse | None = None
    error: ClassifiedError | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None


@runtime_checkable
class ConnectorGatewayPort(Protocol):
    """Fault-isolated access to the registered connectors."""

    def applicable(self, entity: Entity) -> Sequence[Connector]: ...

    async def call(self, connector_id: str, request: ConnectorRequest) -> ConnectorOutcome: ...


__all__ = [
    "ApplicabilityRule",
    "Connector",
    "ConnectorGatewayPort",
    "ConnectorOutcome",
    "ConnectorRequest",
    "NormalizedResponse",
]
