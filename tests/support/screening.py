"""Builders and fakes shared by the screening tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from riskscreen.domain.model import (
    CandidateRecord,
    DimensionScores,
    Domain,
    Entity,
    EntityType,
    MatchResult,
    MatchType,
    PartialDate,
)
from riskscreen.domain.ports import ApplicabilityRule, NormalizedResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

    from riskscreen.domain.ports import ConnectorRequest


def make_entity(
    name: str = "Ivan Petrov",
    *,
    entity_type: EntityType = EntityType.PERSON,
    aliases: Iterable[str] = (),
    dob: str | None = None,
    nationality: str | None = None,
    identifiers: Iterable[str] = (),
) -> Entity:
    return Entity(
        name=name,
        entity_type=entity_type,
        aliases=tuple(aliases),
        date_of_birth=PartialDate.parse(dob) if dob else None,
        nationality=nationality,
        identifiers=frozenset(identifiers),
    )


def make_candidate(
    name: str = "Ivan Petrov",
    *,
    record_id: str = "rec-1",
    source_id: str = "test-source",
    category: Domain = Domain.SANCTIONS,
    aliases: Iterable[str] = (),
    dob: str | None = None,
    nationalities: Iterable[str] = (),
    identifiers: Iterable[str] = (),
) -> CandidateRecord:
    return CandidateRecord(
        source_id=source_id,
        record_id=record_id,
        category=category,
        name=name,
        aliases=tuple(aliases),
        date_of_birth=PartialDate.parse(dob) if dob else None,
        nationalities=frozenset(nationalities),
        identifiers=frozenset(identifiers),
    )


def make_result(
    domain: Domain,
    composite: float,
    *,
    match_type: MatchType = MatchType.FUZZY,
    record_id: str = "rec-1",
    identifier: float | None = None,
) -> MatchResult:
    candidate = make_candidate(record_id=record_id, category=domain)
    return MatchResult(
        candidate=candidate,
        scores=DimensionScores(
            name=composite,
            alias=0.0,
            phonetic=0.0,
            identifier=identifier,
        ),
        composite=composite,
        match_type=match_type,
        matched_name=candidate.name,
    )


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RecordingSleep:
    waits: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


@dataclass
class FakeConnector:
    """Connector returning canned candidates, optionally failing first."""

    connector_id: str
    domain: Domain
    candidates: tuple[CandidateRecord, ...] = ()
    failures: list[BaseException] = field(default_factory=list)
    delay: float = 0.0
    skipped_records: int = 0
    applicability: ApplicabilityRule = field(default_factory=ApplicabilityRule)
    requests: list[ConnectorRequest] = field(default_factory=list)

    def applies_to(self, entity: Entity) -> bool:
        return self.applicability.applies_to(entity)

    async def fetch(self, request: ConnectorRequest) -> NormalizedResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)
        return NormalizedResponse(
            connector_id=self.connector_id,
            candidates=self.candidates,
            skipped_records=self.skipped_records,
        )
