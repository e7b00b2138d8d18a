"""Translate ownership-graph parties into candidate records."""

from __future__ import annotations

from logging import getLogger

from pydantic import ValidationError

from riskscreen.domain.model import CandidateRecord, Domain, PartialDate

from .schema import PartyPayload

log = getLogger(__name__)


def parse_party(payload: dict[str, object] | PartyPayload, *, source_id: str) -> CandidateRecord:
    party = payload if isinstance(payload, PartyPayload) else PartyPayload.model_validate(payload)
    name = party.name.strip()
    if not name:
        raise ValueError(f"Ownership party {party.id} has no name")
    return CandidateRecord(
        source_id=source_id,
        record_id=party.id,
        category=Domain.OWNERSHIP,
        name=name,
        aliases=tuple(alias.strip() for alias in party.aliases if alias.strip() != name),
        date_of_birth=PartialDate.parse_lenient(party.birth_date),
        nationalities=frozenset(code.strip().upper() for code in party.jurisdictions),
        identifiers=frozenset(identifier.value for identifier in party.identifiers),
        programs=tuple(
            f"{link.relationship}:{link.counterparty}" for link in party.links
        ),
        url=party.url,
    )


def parse_parties(
    parties: list[dict[str, object]], *, source_id: str
) -> tuple[list[CandidateRecord], int]:
    candidates: list[CandidateRecord] = []
    skipped = 0
    for item in parties:
        try:
            candidates.append(parse_party(item, source_id=source_id))
        except (ValidationError, ValueError) as exc:
            skipped += 1
            log.warning("Skipping malformed ownership record: %s", exc)
    return candidates, skipped
