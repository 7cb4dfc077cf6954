from __future__ import annotations

from typing import AbstractSet, FrozenSet

from .text import content_words

DEFAULT_DUPLICATE_THRESHOLD = 0.4
SET_MIN_TOKEN_LENGTH = 3


def token_set(text: str) -> FrozenSet[str]:
    return frozenset(content_words(text, min_length=SET_MIN_TOKEN_LENGTH))


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """|a & b| / |a | b|, defined as 0.0 when both sets are empty."""
    union = len(a | b)
    if not union:
        return 0.0
    return len(a & b) / union


def containment(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Share of ``a`` that also appears in ``b``."""
    if not a:
        return 0.0
    return len(a & b) / len(a)


def is_duplicate(a: AbstractSet[str], b: AbstractSet[str], threshold: float = DEFAULT_DUPLICATE_THRESHOLD) -> bool:
    return jaccard(a, b) > threshold
