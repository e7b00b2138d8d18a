"""Bring names, identifiers and country codes into a comparable form."""

from __future__ import annotations

import re
import unicodedata
from typing import Final

_LETTER_FOLDS: Final[dict[str, str]] = {
    "æ": "ae",
    "œ": "oe",
    "ø": "o",
    "ł": "l",
    "đ": "d",
    "ð": "d",
    "þ": "th",
    "ı": "i",
    "ħ": "h",
}

# Passport-style (ICAO 9303) transliteration of Cyrillic
_CYRILLIC: Final[dict[str, str]] = {
    "а": "a", "б": "b", "в": "v", "г": "g", "ґ": "g", "д": "d", "е": "e", "ё": "e",
    "є": "ie", "ж": "zh", "з": "z", "и": "i", "і": "i", "ї": "i", "й": "i", "к": "k",
    "л": "l", "м": "m", "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t",
    "у": "u", "ф": "f", "х": "kh", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "shch",
    "ъ": "ie", "ы": "y", "ь": "", "э": "e", "ю": "iu", "я": "ia",
}  # fmt: skip

_TRANSLATION: Final = str.maketrans({**_LETTER_FOLDS, **_CYRILLIC})

# Honorifics and legal forms carry no identifying signal
NOISE_TOKENS: Final[frozenset[str]] = frozenset(
    {
        "mr", "mrs", "ms", "miss", "dr", "prof", "sir", "sheikh", "haji",
        "ltd", "llc", "inc", "corp", "co", "plc", "gmbh", "ag", "sa", "jsc",
        "ooo", "oao", "zao", "pjsc", "limited", "company", "the",
    }
)  # fmt: skip

_NON_WORD: Final = re.compile(r"[^0-9a-z]+")
_IDENTIFIER_SEPARATORS: Final = re.compile(r"[\s\-\.,/_]")


def fold_to_latin(text: str) -> str:
    """Case-fold, transliterate and strip diacritics."""

    folded = text.casefold().translate(_TRANSLATION)
    decomposed = unicodedata.normalize("NFKD", folded)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def name_tokens(text: str) -> list[str]:
    tokens = _NON_WORD.sub(" ", fold_to_latin(text)).split()
    meaningful = [token for token in tokens if token not in NOISE_TOKENS]
    return meaningful or tokens


def normalize_name(text: str | None) -> str:
    if not text:
        return ""
    return " ".join(name_tokens(text))


def normalize_identifier(value: str | None) -> str:
    if not value:
        return ""
    return _IDENTIFIER_SEPARATORS.sub("", value).upper()


def normalize_country(value: str | None) -> str:
    if not value:
        return ""
    return fold_to_latin(value).strip().upper()
