"""Query refinement suggestions from the tag/keyword vocabulary of a result page."""

from __future__ import annotations

from typing import Iterable

from rapidfuzz import fuzz

from websearch.models import NormalizedResult

MAX_SUGGESTIONS = 5
SIMILARITY_THRESHOLD = 0.6


def similarity(a: str, b: str) -> float:
    """Normalized Indel similarity in [0, 1]; symmetric."""
    return fuzz.ratio(a, b) / 100.0


def vocabulary(results: Iterable[NormalizedResult]) -> list[str]:
    """Tags and keywords in first-seen order, without case-insensitive duplicates."""
    seen: set[str] = set()
    terms: list[str] = []
    for result in results:
        for term in (*result.tags, *result.keywords):
            term = term.strip()
            key = term.lower()
            if not term or key in seen:
                continue
            seen.add(key)
            terms.append(term)
    return terms


def suggest(
    results: Iterable[NormalizedResult],
    query: str,
    limit: int = MAX_SUGGESTIONS,
    threshold: float = SIMILARITY_THRESHOLD,
) -> list[str]:
    q = query.strip().lower()
    tokens = q.split()
    suggestions: list[str] = []
    for candidate in vocabulary(results):
        if len(suggestions) >= limit:
            break
        lowered = candidate.lower()
        if similarity(lowered, q) > threshold or any(t in lowered for t in tokens):
            suggestions.append(candidate)
    return suggestions
