"""Translate OpenSanctions entities into candidate records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from riskscreen.domain.model import CandidateRecord, EntityType, PartialDate

from .schema import EntityPayload

if TYPE_CHECKING:
    from riskscreen.domain.model import Domain

log = getLogger(__name__)

ENTITY_URL = "https://www.opensanctions.org/entities/{id}/"

SCHEMA_FOR_ENTITY_TYPE: dict[EntityType, str] = {
    EntityType.PERSON: "Person",
    EntityType.ORGANIZATION: "Organization",
    EntityType.ASSET: "Thing",
}

NAME_PROPERTIES = ("name",)
ALIAS_PROPERTIES = ("alias", "weakAlias", "previousName")
NATIONALITY_PROPERTIES = ("nationality", "citizenship", "jurisdiction", "country")
IDENTIFIER_PROPERTIES = (
    "idNumber",
    "passportNumber",
    "registrationNumber",
    "imoNumber",
    "taxNumber",
    "innCode",
    "ogrnCode",
    "leiCode",
    "swiftBic",
)


def parse_entity(
    payload: dict[str, object] | EntityPayload,
    *,
    source_id: str,
    domain: Domain,
) -> CandidateRecord:
    """Build a candidate record; raises ``ValueError`` when the payload has no name."""

    entity = (
        payload if isinstance(payload, EntityPayload) else EntityPayload.model_validate(payload)
    )
    names = entity.property_values(*NAME_PROPERTIES)
    if not names and entity.caption:
        names = [entity.caption.strip()]
    if not names or not names[0]:
        raise ValueError(f"OpenSanctions entity {entity.id} has no name")

    primary, *other_names = names
    alias_values = other_names + entity.property_values(*ALIAS_PROPERTIES)
    aliases = [name for name in alias_values if name != primary]

    birth_dates = [
        parsed
        for parsed in map(PartialDate.parse_lenient, entity.property_values("birthDate"))
        if parsed is not None
    ]
    date_of_birth = birth_dates[0] if birth_dates else None

    return CandidateRecord(
        source_id=source_id,
        record_id=entity.id,
        category=domain,
        name=primary,
        aliases=tuple(dict.fromkeys(aliases)),
        date_of_birth=date_of_birth,
        nationalities=frozenset(
            value.upper() for value in entity.property_values(*NATIONALITY_PROPERTIES)
        ),
        identifiers=frozenset(entity.property_values(*IDENTIFIER_PROPERTIES)),
        programs=tuple(entity.property_values("program", "topics")),
        url=ENTITY_URL.format(id=entity.id),
    )


def parse_results(
    results: list[dict[str, object]],
    *,
    source_id: str,
    domain: Domain,
) -> tuple[list[CandidateRecord], int]:
    """Translate a result list, counting records that could not be used."""

    candidates: list[CandidateRecord] = []
    skipped = 0
    for item in results:
        try:
            candidates.append(parse_entity(item, source_id=source_id, domain=domain))
        except (ValidationError, ValueError) as exc:
            skipped += 1
            log.warning("Skipping malformed OpenSanctions record from %s: %s", source_id, exc)
    return candidates, skipped
