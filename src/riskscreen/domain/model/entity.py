"""Query subjects and the candidate records connectors return for them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from riskscreen.domain.model.enums import Domain, EntityType
from riskscreen.domain.model.primitives import (
    ConnectorId,
    CountryCode,
    Identifier,
    PartialDate,
)


def _as_tuple(values: Iterable[str] | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(value for value in values if value)


def _as_frozenset(values: Iterable[str] | None) -> frozenset[str]:
    return frozenset(_as_tuple(values))


@dataclass(frozen=True, slots=True, kw_only=True)
class Entity:
    """Subject of one assessment. Immutable for the duration of that assessment."""

    name: str
    entity_type: EntityType = EntityType.PERSON
    aliases: tuple[str, ...] = ()
    date_of_birth: PartialDate | None = None
    nationality: CountryCode | None = None
    identifiers: frozenset[Identifier] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", _as_tuple(self.aliases))
        object.__setattr__(self, "identifiers", _as_frozenset(self.identifiers))

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateRecord:
    """One watchlist / feed record returned by a connector for a query."""

    source_id: ConnectorId
    record_id: str
    category: Domain
    name: str
    aliases: tuple[str, ...] = ()
    date_of_birth: PartialDate | None = None
    nationalities: frozenset[CountryCode] = field(default_factory=frozenset)
    identifiers: frozenset[Identifier] = field(default_factory=frozenset)
    programs: tuple[str, ...] = ()
    url: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", _as_tuple(self.aliases))
        object.__setattr__(self, "nationalities", _as_frozenset(self.nationalities))
        object.__setattr__(self, "identifiers", _as_frozenset(self.identifiers))
        object.__setattr__(self, "programs", _as_tuple(self.programs))

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    @property
    def reference(self) -> str:
        return f"{self.source_id}:{self.record_id}"
