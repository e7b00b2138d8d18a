"""Translate threat-feed actors into candidate records."""

from __future__ import annotations

from logging import getLogger

from pydantic import ValidationError

from riskscreen.domain.model import CandidateRecord, Domain

from .schema import ActorPayload

log = getLogger(__name__)


def parse_actor(payload: dict[str, object] | ActorPayload, *, source_id: str) -> CandidateRecord:
    actor = payload if isinstance(payload, ActorPayload) else ActorPayload.model_validate(payload)
    name = actor.name.strip()
    if not name:
        raise ValueError(f"Threat actor {actor.id} has no name")
    return CandidateRecord(
        source_id=source_id,
        record_id=actor.id,
        category=Domain.THREAT_ACTOR,
        name=name,
        aliases=tuple(alias.strip() for alias in actor.aliases if alias.strip() != name),
        nationalities=frozenset({actor.country.upper()}) if actor.country else frozenset(),
        identifiers=frozenset(actor.indicators),
        programs=tuple(actor.campaigns),
        url=actor.reference,
    )


def parse_actors(
    actors: list[dict[str, object]], *, source_id: str
) -> tuple[list[CandidateRecord], int]:
    candidates: list[CandidateRecord] = []
    skipped = 0
    for item in actors:
        try:
            candidates.append(parse_actor(item, source_id=source_id))
        except (ValidationError, ValueError) as exc:
            skipped += 1
            log.warning("Skipping malformed threat-feed record: %s", exc)
    return candidates, skipped
