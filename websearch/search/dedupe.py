"""Collapse results that point at the same URL."""

from __future__ import annotations

from typing import Iterable

from websearch.models import NormalizedResult


def canonical_url(url: str) -> str:
    return url.strip().lower().rstrip("/")


def _dedupe_key(result: NormalizedResult) -> str:
    url = canonical_url(result.url)
    # url-less documents are told apart by their id
    return f"url:{url}" if url else f"id:{result.id}"


def dedupe_by_url(results: Iterable[NormalizedResult]) -> list[NormalizedResult]:
    """Keep the first result per canonical ``url`` in engine order."""
    seen: set[str] = set()
    unique: list[NormalizedResult] = []
    for result in results:
        key = _dedupe_key(result)
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)
    return unique
