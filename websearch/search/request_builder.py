"""Build the query DSL body sent to the search cluster.

Scoring combines as ``final = query_score <boost_mode> (f1 <score_mode> f2 ...)``.
The defaults are ``score_mode=sum`` and ``boost_mode=multiply``, so the text
relevance is multiplied by the sum of the language weight, the freshness
decay and the popularity factor.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from websearch.config import Settings
from websearch.models import SearchRequest


class FieldWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: float = 5
    tags: float = 4
    meta_keywords: float = 3
    content: float = 2

    def fields(self) -> list[str]:
        return [
            f"title^{self.title:g}",
            f"tags^{self.tags:g}",
            f"meta_keywords^{self.meta_keywords:g}",
            f"content^{self.content:g}",
        ]


DEFAULT_FIELD_WEIGHTS = FieldWeights()

HIGHLIGHT = {
    "fields": {
        "title": {"number_of_fragments": 1},
        "content": {"number_of_fragments": 2},
    },
}


def _scoring_functions(request: SearchRequest, settings: Settings) -> list[dict[str, Any]]:
    functions: list[dict[str, Any]] = [
        {
            "filter": {"term": {"lang.keyword": request.language}},
            "weight": settings.language_weight,
        },
        {
            "gauss": {
                settings.freshness_field: {
                    "origin": "now",
                    "scale": settings.freshness_scale,
                    "decay": settings.freshness_decay,
                },
            },
        },
    ]
    if settings.popularity_boost_enabled:
        # log1p keeps high-traffic pages from dominating
        functions.append(
            {
                "field_value_factor": {
                    "field": "views",
                    "modifier": "log1p",
                    "factor": 1,
                    "missing": 0,
                },
            }
        )
    return functions


def _sort(settings: Settings) -> list[dict[str, Any]]:
    return [
        {"_score": {"order": "desc"}},
        {settings.sort_tiebreaker: {"order": "asc"}},
    ]


def build_search_body(
    request: SearchRequest,
    settings: Settings,
    weights: FieldWeights = DEFAULT_FIELD_WEIGHTS,
) -> dict[str, Any]:
    """Web search body: fuzzy multi-field match, title phrase boost, scoring functions."""
    body: dict[str, Any] = {
        "size": request.size,
        "track_total_hits": True,
        "query": {
            "function_score": {
                "query": {
                    "bool": {
                        "must": [
                            {
                                "multi_match": {
                                    "query": request.query,
                                    "fields": weights.fields(),
                                    "type": "best_fields",
                                    "operator": "and",
                                    "fuzziness": "AUTO",
                                    "minimum_should_match": "70%",
                                },
                            },
                        ],
                        "should": [
                            {
                                "match_phrase": {
                                    "title": {"query": request.query, "boost": settings.title_phrase_boost},
                                },
                            },
                        ],
                    },
                },
                "functions": _scoring_functions(request, settings),
                "score_mode": settings.score_mode,
                "boost_mode": settings.boost_mode,
            },
        },
        "highlight": HIGHLIGHT,
        "sort": _sort(settings),
    }

    if request.search_after:
        # search_after continues from the last sort values; "from" must stay unset
        body["search_after"] = list(request.search_after)
    else:
        body["from"] = request.offset
    return body


def build_image_search_body(request: SearchRequest) -> dict[str, Any]:
    """Pages that carry at least one image, matched on title and content."""
    return {
        "from": request.offset,
        "size": request.size,
        "track_total_hits": True,
        "query": {
            "bool": {
                "must": [
                    {"exists": {"field": "images.url"}},
                    {
                        "multi_match": {
                            "query": request.query,
                            "fields": ["title^2", "content"],
                            "fuzziness": "AUTO",
                        },
                    },
                ],
            },
        },
    }
