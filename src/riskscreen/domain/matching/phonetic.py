"""Metaphone-style phonetic keys for transliterated names.

The encoding is a reduced Metaphone: vowels only survive in first position (and all
collapse to ``A`` so ``Osama``/``Usama`` agree), ``H`` is silent after consonants
(``Gadhafi``/``Kadafi``), and the usual digraphs (``PH``, ``SH``, ``TH``, ``CH``)
map to single codes.
"""

from __future__ import annotations

from collections import Counter
from typing import Final

from riskscreen.domain.matching.normalize import name_tokens

_VOWELS: Final = frozenset("AEIOU")
_SILENT_INITIALS: Final = ("KN", "GN", "PN", "AE", "WR")
_SAME: Final = frozenset("FJLMNR")


def _at(word: str, index: int) -> str:
    return word[index] if 0 <= index < len(word) else ""


def phonetic_key(token: str) -> str:
    """Encode a single name token."""

    word = "".join(char for char in token.upper() if "A" <= char <= "Z")
    if not word:
        return ""
    if word.startswith(_SILENT_INITIALS):
        word = word[1:]
    elif word.startswith("X"):
        word = "S" + word[1:]
    elif word.startswith("WH"):
        word = "W" + word[2:]

    codes: list[str] = []
    for index, char in enumerate(word):
        prev, nxt = _at(word, index - 1), _at(word, index + 1)
        if char == prev and char != "C":
            continue

        code = ""
        if char in _VOWELS:
            code = "A" if index == 0 else ""
        elif char in _SAME:
            code = char
        elif char == "B":
            code = "" if prev == "M" and index == len(word) - 1 else "B"
        elif char == "C":
            if nxt == "H":
                code = "K" if prev == "S" else "X"
            elif word[index + 1 : index + 3] == "IA":
                code = "X"
            elif nxt in {"I", "E", "Y"}:
                code = "" if prev == "S" else "S"
            else:
                code = "K"
        elif char == "D":
            code = "J" if nxt == "G" and _at(word, index + 2) in {"E", "I", "Y"} else "T"
        elif char == "G":
            if nxt == "H" and _at(word, index + 2) not in _VOWELS:
                code = ""
            elif nxt == "N" and index + 2 >= len(word):
                code = ""
            elif nxt in {"I", "E", "Y"}:
                code = "J"
            else:
                code = "K"
        elif char == "H":
            code = "H" if (index == 0 or prev in _VOWELS) and nxt in _VOWELS else ""
        elif char == "K":
            code = "" if prev == "C" else "K"
        elif char == "P":
            code = "F" if nxt == "H" else "P"
        elif char == "Q":
            code = "K"
        elif char == "S":
            if nxt == "H" or word[index + 1 : index + 3] in {"IO", "IA"}:
                code = "X"
            else:
                code = "S"
        elif char == "T":
            if word[index + 1 : index + 3] in {"IA", "IO"}:
                code = "X"
            elif nxt == "H":
                code = "0"
            elif word[index + 1 : index + 3] == "CH":
                code = ""
            else:
                code = "T"
        elif char == "V":
            code = "F"
        elif char in {"W", "Y"}:
            code = char if nxt in _VOWELS else ""
        elif char == "X":
            code = "KS"
        elif char == "Z":
            code = "S"

        if code and not (codes and codes[-1] == code):
            codes.append(code)
    return "".join(codes)


def phonetic_keys(name: str) -> list[str]:
    keys = (phonetic_key(token) for token in name_tokens(name))
    return [key for key in keys if key]


def phonetic_similarity(left: str, right: str) -> float:
    """Dice coefficient over the multisets of token keys (word order is ignored)."""

    left_keys, right_keys = Counter(phonetic_keys(left)), Counter(phonetic_keys(right))
    total = left_keys.total() + right_keys.total()
    if total == 0:
        return 0.0
    shared = (left_keys & right_keys).total()
    return 2.0 * shared / total
