"""Composite ranking score on top of the engine's relevance.

    composite = relevance * 1.5
              + log1p(views) * 2
              + freshness * 3
              + 2.0 per tag contained in the query
              + 1.5 per keyword contained in the query
              + min(len(body) / 1000, 5)
              + 1.0 per extracted entity contained in the query

freshness = 1 / (1 + age_in_days), or 0 for undated documents.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from websearch.models import NormalizedResult

SECONDS_PER_DAY = 86400.0


class ScoringWeights(BaseModel):
    """Tunable constants; the defaults are the reference values."""

    model_config = ConfigDict(frozen=True)

    relevance: float = 1.5
    popularity: float = 2.0
    freshness: float = 3.0
    tag_match: float = 2.0
    keyword_match: float = 1.5
    entity_match: float = 1.0
    content_length_unit: float = 1000.0
    content_length_cap: float = 5.0


DEFAULT_WEIGHTS = ScoringWeights()


class ScoreBreakdown(BaseModel):
    relevance: float
    popularity: float
    freshness: float
    tag_overlap: float
    keyword_overlap: float
    content_length: float
    entity_overlap: float

    @property
    def total(self) -> float:
        return (
            self.relevance
            + self.popularity
            + self.freshness
            + self.tag_overlap
            + self.keyword_overlap
            + self.content_length
            + self.entity_overlap
        )


def freshness(updated_at: datetime | None, now: datetime) -> float:
    if updated_at is None:
        return 0.0
    age_days = max(0.0, (now - updated_at).total_seconds() / SECONDS_PER_DAY)
    return 1.0 / (1.0 + age_days)


def count_query_matches(terms: Iterable[str], query: str) -> int:
    """Number of distinct non-empty terms that occur in the query, ignoring case."""
    q = query.lower()
    return sum(1 for term in dict.fromkeys(terms) if term and term.lower() in q)


def score_breakdown(
    result: NormalizedResult,
    query: str,
    now: datetime,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoreBreakdown:
    return ScoreBreakdown(
        relevance=result.relevance_score * weights.relevance,
        popularity=math.log1p(max(0, result.views)) * weights.popularity,
        freshness=freshness(result.updated_at, now) * weights.freshness,
        tag_overlap=count_query_matches(result.tags, query) * weights.tag_match,
        keyword_overlap=count_query_matches(result.keywords, query) * weights.keyword_match,
        content_length=min(len(result.body) / weights.content_length_unit, weights.content_length_cap),
        entity_overlap=count_query_matches((e.text for e in result.entities), query) * weights.entity_match,
    )


def composite_score(
    result: NormalizedResult,
    query: str,
    now: datetime,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    return score_breakdown(result, query, now, weights).total


def score_results(
    results: Sequence[NormalizedResult],
    query: str,
    now: datetime,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[NormalizedResult]:
    """Copies of ``results`` carrying ``composite_score``; input order is kept.

    ``now`` is taken once per request so every result ages against the same instant.
    """
    return [
        r.model_copy(update={"composite_score": composite_score(r, query, now, weights)})
        for r in results
    ]


def rank_by_composite(results: Sequence[NormalizedResult]) -> list[NormalizedResult]:
    """Stable sort, highest composite score first."""
    return sorted(results, key=lambda r: r.composite_score, reverse=True)
