"""Text similarity utilities: Jaccard scoring and fuzzy distance."""

from __future__ import annotations

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process


def jaccard_score(a: str, b: str) -> float:
    """Normalized token overlap (Jaccard similarity) between two strings."""
    tokens_a = set(a.lower().split())
    tokens_b = set(b.lower().split())
    if not tokens_a or not tokens_b:
        return 0.0
    intersection = tokens_a & tokens_b
    union = tokens_a | tokens_b
    return len(intersection) / len(union) if union else 0.0


def fuzzy_distance(a: str, b: str) -> float:
    """Normalized fuzzy distance in [0, 1]. 0.0 means identical after normalization.

    Token-sort ratio over lowercased, punctuation-stripped text, so word
    order and casing do not matter but added or missing words do.
    """
    if not a.strip() or not b.strip():
        return 1.0
    similarity = fuzz.token_sort_ratio(a, b, processor=default_process)
    return round(1.0 - similarity / 100.0, 6)


def truncate(text: str, limit: int) -> str:
    """Trim text to at most ``limit`` characters, stripping whitespace."""
    return (text or "")[:limit].strip()
