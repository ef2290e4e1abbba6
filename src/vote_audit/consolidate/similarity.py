"""String folding and edit-distance helpers for candidate-name matching."""

from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

_NON_ASCII_LETTER = re.compile(r"[^a-z]")
_NON_LETTER_WITH_CYRILLIC = re.compile(r"[^a-zа-я]")

DEFAULT_MAX_EDIT_DISTANCE = 2
DEFAULT_MAX_LENGTH_GAP = 2


def fold_name(name: str) -> str:
    """Lowercase and keep ASCII letters only."""

    return _NON_ASCII_LETTER.sub("", name.lower())


def prefix_key(name: str | None, length: int = 8) -> str:
    """Fold to lowercase Latin/Cyrillic letters and truncate to `length` chars."""

    if name is None:
        return ""
    return _NON_LETTER_WITH_CYRILLIC.sub("", name.lower())[:length]


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit costs for insert, delete and substitute."""

    return int(Levenshtein.distance(a, b))


def name_similar(
    a: str,
    b: str,
    *,
    max_distance: int = DEFAULT_MAX_EDIT_DISTANCE,
    max_length_gap: int = DEFAULT_MAX_LENGTH_GAP,
) -> bool:
    """Return True when two raw names likely denote the same candidate."""

    if a == b:
        return True
    folded_a = fold_name(a)
    folded_b = fold_name(b)
    if abs(len(folded_a) - len(folded_b)) > max_length_gap:
        return False
    return Levenshtein.distance(folded_a, folded_b, score_cutoff=max_distance) <= max_distance
