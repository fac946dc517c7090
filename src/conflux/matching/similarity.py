"""Normalized name similarity.

Scores two names in [0, 1]:
  1. Exact match after lowercasing and trimming -> 1.0
  2. Substring containment (either direction) -> len(shorter) / len(longer) * 0.9
  3. Otherwise -> 1 - levenshtein / max(len)

Edit distance is RapidFuzz's unit-cost Levenshtein (insert, delete,
substitute all cost 1).
"""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

# Containment never reaches an exact-match score
CONTAINMENT_WEIGHT = 0.9


def _normalize(text: str) -> str:
    return text.lower().strip()


def similarity_score(a: str, b: str) -> float:
    """Return a similarity score in [0, 1] for two names.

    Total over all string pairs; two empty strings score 1.0.
    """
    a_norm = _normalize(a)
    b_norm = _normalize(b)

    if a_norm == b_norm:
        return 1.0

    # Partial name match ("John" inside "John Smith")
    if a_norm in b_norm or b_norm in a_norm:
        shorter, longer = (a_norm, b_norm) if len(a_norm) < len(b_norm) else (b_norm, a_norm)
        return len(shorter) / len(longer) * CONTAINMENT_WEIGHT

    max_len = max(len(a_norm), len(b_norm))
    if max_len == 0:
        return 1.0
    distance = Levenshtein.distance(a_norm, b_norm)
    return 1 - distance / max_len
