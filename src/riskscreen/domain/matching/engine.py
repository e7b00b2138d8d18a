"""Fuzzy matching of a query entity against connector candidate records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from riskscreen.domain.matching.normalize import normalize_name
from riskscreen.domain.matching.scorers import (
    DEFAULT_ATTRIBUTE_SCORERS,
    AttributeScorer,
    AttributeWeight,
    NameScorer,
    clamp,
    orthographic_similarity,
    phonetic_name_similarity,
)
from riskscreen.domain.model import (
    DOMAIN_PRIORITY,
    DimensionScores,
    InvalidInputError,
    MatchResult,
    MatchType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from riskscreen.domain.model import CandidateRecord, Entity

log = getLogger(__name__)


def _default_attribute_weights() -> dict[str, AttributeWeight]:
    return {
        "dob": AttributeWeight(bonus=0.06, penalty=0.06),
        "nationality": AttributeWeight(bonus=0.03, penalty=0.03),
        # people hold several documents, so a non-shared number proves nothing
        "identifier": AttributeWeight(bonus=0.12, penalty=0.0),
    }


@dataclass(frozen=True, slots=True)
class MatchWeights:
    """How dimension scores combine into the composite match score.

    The name signal carries the composite; attributes only nudge it by their
    bounded ``AttributeWeight``. A phonetic score at or above
    ``phonetic_threshold`` that beats the orthographic score closes
    ``phonetic_lift`` of the gap between the two.
    """

    phonetic_threshold: float = 0.85
    phonetic_lift: float = 0.9
    agreement_threshold: float = 0.75
    attributes: Mapping[str, AttributeWeight] = field(default_factory=_default_attribute_weights)


@dataclass(frozen=True, slots=True)
class _Variant:
    text: str
    original: str
    is_alias: bool


class MalformedCandidateError(ValueError):
    """A candidate record that cannot take part in matching."""


def _variants(names: Iterable[str]) -> list[_Variant]:
    seen: set[str] = set()
    variants: list[_Variant] = []
    for index, name in enumerate(names):
        normalized = normalize_name(name)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        variants.append(_Variant(text=normalized, original=name, is_alias=index > 0))
    return variants


def ordering_key(result: MatchResult) -> tuple[float, int, int, str, str]:
    """Deterministic ranking: score, corroborating attributes, list priority, reference."""

    candidate = result.candidate
    return (
        -result.composite,
        -result.corroborations,
        DOMAIN_PRIORITY.get(candidate.category, len(DOMAIN_PRIORITY)),
        candidate.source_id,
        candidate.record_id,
    )


@dataclass(slots=True)
class MatchingEngine:
    name_scorer: NameScorer = orthographic_similarity
    phonetic_scorer: NameScorer = phonetic_name_similarity
    attribute_scorers: Mapping[str, AttributeScorer] = field(
        default_factory=lambda: dict(DEFAULT_ATTRIBUTE_SCORERS)
    )
    weights: MatchWeights = field(default_factory=MatchWeights)

    def match(self, entity: Entity, candidates: Iterable[CandidateRecord]) -> list[MatchResult]:
        """Score every usable candidate and return results best first.

        Raises:
            InvalidInputError: if the entity has no usable name.
        """

        query = _variants(entity.names)
        if not query or query[0].is_alias:
            raise InvalidInputError("Entity has no usable name", field="name")

        results: list[MatchResult] = []
        for candidate in candidates:
            try:
                results.append(self._score(entity, query, candidate))
            except MalformedCandidateError as exc:
                log.warning(
                    "Skipping candidate %s from %s: %s",
                    candidate.record_id or "<no id>",
                    candidate.source_id,
                    exc,
                )
        results.sort(key=ordering_key)
        return results

    def _score(
        self,
        entity: Entity,
        query: Sequence[_Variant],
        candidate: CandidateRecord,
    ) -> MatchResult:
        if not candidate.record_id or not candidate.source_id:
            raise MalformedCandidateError("missing record reference")
        published = _variants(candidate.names)
        if not published or published[0].is_alias:
            raise MalformedCandidateError("no usable primary name")

        name_score = alias_score = best_score = 0.0
        best_pair = (query[0], published[0])
        phonetic_score = 0.0
        phonetic_pair = best_pair
        for wanted in query:
            for offered in published:
                score = clamp(self.name_scorer(wanted.text, offered.text))
                if wanted.is_alias or offered.is_alias:
                    alias_score = max(alias_score, score)
                else:
                    name_score = score
                if score > best_score:
                    best_score, best_pair = score, (wanted, offered)
                sounds = clamp(self.phonetic_scorer(wanted.text, offered.text))
                if sounds > phonetic_score:
                    phonetic_score, phonetic_pair = sounds, (wanted, offered)

        exact = query[0].text == published[0].text
        name_signal = best_score
        phonetic_driven = False
        if exact:
            name_signal = 1.0
        elif phonetic_score >= self.weights.phonetic_threshold and phonetic_score > best_score:
            name_signal = best_score + (phonetic_score - best_score) * self.weights.phonetic_lift
            phonetic_driven = name_signal > best_score

        attributes: dict[str, float] = {}
        adjustment = 0.0
        for key, scorer in self.attribute_scorers.items():
            value = scorer(entity, candidate)
            if value is None:
                continue
            value = clamp(value)
            attributes[key] = value
            weight = self.weights.attributes.get(key)
            if weight is not None:
                adjustment += weight.adjustment(value)

        if exact:
            match_type, matched = MatchType.EXACT, published[0]
        elif phonetic_driven:
            match_type, matched = MatchType.PHONETIC, phonetic_pair[1]
        elif best_pair[0].is_alias or best_pair[1].is_alias:
            match_type, matched = MatchType.ALIAS, best_pair[1]
        else:
            match_type, matched = MatchType.FUZZY, best_pair[1]

        return MatchResult(
            candidate=candidate,
            scores=DimensionScores(
                name=name_score,
                alias=alias_score,
                phonetic=phonetic_score,
                dob=attributes.get("dob"),
                nationality=attributes.get("nationality"),
                identifier=attributes.get("identifier"),
            ),
            composite=clamp(name_signal + adjustment),
            match_type=match_type,
            matched_name=matched.original,
            corroborations=sum(
                1 for value in attributes.values() if value >= self.weights.agreement_threshold
            ),
        )


def match(entity: Entity, candidates: Iterable[CandidateRecord]) -> list[MatchResult]:
    """Match with the default engine configuration."""

    return MatchingEngine().match(entity, candidates)
