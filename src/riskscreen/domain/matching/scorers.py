"""Independent per-dimension scorers. Every scorer returns a value in [0, 1].

Attribute scorers return ``None`` when either side lacks the attribute so the
dimension drops out of that candidate's computation instead of penalising it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from riskscreen.domain.matching.normalize import normalize_country, normalize_identifier
from riskscreen.domain.matching.phonetic import phonetic_similarity

if TYPE_CHECKING:
    from riskscreen.domain.model import CandidateRecord, Entity, PartialDate

type NameScorer = Callable[[str, str], float]
type AttributeScorer = Callable[[Entity, CandidateRecord], float | None]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def orthographic_similarity(left: str, right: str) -> float:
    """Edit-distance similarity of two normalized names, tolerant to token order."""

    if not left or not right:
        return 0.0
    ordered = Levenshtein.normalized_similarity(left, right)
    unordered = fuzz.token_sort_ratio(left, right) / 100.0
    return clamp(max(ordered, unordered))


def phonetic_name_similarity(left: str, right: str) -> float:
    if not left or not right:
        return 0.0
    return clamp(phonetic_similarity(left, right))


def partial_date_similarity(left: PartialDate | None, right: PartialDate | None) -> float | None:
    if left is None or right is None:
        return None
    gap = abs(left.year - right.year)
    if gap == 1:
        return 0.25
    if gap > 1:
        return 0.0
    month_conflict = None not in (left.month, right.month) and left.month != right.month
    day_conflict = None not in (left.day, right.day) and left.day != right.day
    if month_conflict or day_conflict:
        return 0.5
    if left.is_complete and right.is_complete:
        return 1.0
    return 0.75


def dob_similarity(entity: Entity, candidate: CandidateRecord) -> float | None:
    return partial_date_similarity(entity.date_of_birth, candidate.date_of_birth)


def nationality_similarity(entity: Entity, candidate: CandidateRecord) -> float | None:
    wanted = normalize_country(entity.nationality)
    published = {normalize_country(value) for value in candidate.nationalities} - {""}
    if not wanted or not published:
        return None
    return 1.0 if wanted in published else 0.0


def identifier_similarity(entity: Entity, candidate: CandidateRecord) -> float | None:
    wanted = {normalize_identifier(value) for value in entity.identifiers} - {""}
    published = {normalize_identifier(value) for value in candidate.identifiers} - {""}
    if not wanted or not published:
        return None
    return 1.0 if wanted & published else 0.0


@dataclass(frozen=True, slots=True)
class AttributeWeight:
    """Bounded adjustment: ``+bonus`` on full agreement, ``-penalty`` on full disagreement."""

    bonus: float
    penalty: float = 0.0

    def adjustment(self, score: float) -> float:
        return self.bonus * score - self.penalty * (1.0 - score)


DEFAULT_ATTRIBUTE_SCORERS: dict[str, AttributeScorer] = {
    "dob": dob_similarity,
    "nationality": nationality_similarity,
    "identifier": identifier_similarity,
}
