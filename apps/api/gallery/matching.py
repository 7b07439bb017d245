from __future__ import annotations

from typing import List, Sequence

from rapidfuzz import fuzz

from .providers.types import CatalogItem

DEFAULT_THRESHOLD = 0.3


def distance(query: str, key: str) -> float:
    """0.0 is an exact (sub)string hit, 1.0 means nothing in common."""
    q = query.strip().lower()
    k = key.lower()
    if not q or not k:
        return 1.0
    return 1.0 - float(fuzz.partial_ratio(q, k)) / 100.0


def match(query: str | None, candidates: Sequence[CatalogItem], threshold: float = DEFAULT_THRESHOLD) -> List[CatalogItem]:
    if not query or not query.strip():
        return list(candidates)
    scored = []
    for c in candidates:
        d = distance(query, c.key)
        if d <= threshold:
            scored.append((d, c))
    # sorted() is stable, so equal distances keep catalog order
    return [c for _, c in sorted(scored, key=lambda t: t[0])]
