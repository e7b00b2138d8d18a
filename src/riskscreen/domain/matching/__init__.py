"""Fuzzy entity matching."""

from __future__ import annotations

from .engine import MalformedCandidateError, MatchingEngine, MatchWeights, match, ordering_key
from .normalize import normalize_country, normalize_identifier, normalize_name
from .phonetic import phonetic_key, phonetic_similarity
from .scorers import AttributeWeight, orthographic_similarity

__all__ = [
    "AttributeWeight",
    "MalformedCandidateError",
    "MatchWeights",
    "MatchingEngine",
    "match",
    "normalize_country",
    "normalize_identifier",
    "normalize_name",
    "ordering_key",
    "orthographic_similarity",
    "phonetic_key",
    "phonetic_similarity",
]
