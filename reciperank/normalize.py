"""Ingredient name normalization and comparison helpers."""

import re
from typing import Iterable, Optional

_WHITESPACE = re.compile(r"\s+")


def normalize_ingredient_name(name: Optional[str]) -> str:
    """Canonical form used for every ingredient comparison.

    Lower-cases, trims and collapses inner whitespace, so "  Olive   Oil"
    and "olive oil" compare equal.
    """
    if name is None:
        return ""
    return _WHITESPACE.sub(" ", str(name)).strip().lower()


def ingredient_signature(names: Iterable[str]) -> str:
    """Sorted, de-duplicated normalized names joined with '|'."""
    normalized = {normalize_ingredient_name(n) for n in names}
    normalized.discard("")
    return "|".join(sorted(normalized))


def jaccard(a: set[str], b: set[str]) -> float:
    """Jaccard similarity of two name sets."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    intersection = len(a & b)
    union = len(a | b)
    return intersection / union if union else 0.0
