"""Per-request search pipeline.

normalize -> build request -> engine call -> transform -> dedupe
-> entities (first N) -> score -> suggest -> respond
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from websearch.caching import Cache, cache_key
from websearch.config import Settings
from websearch.exceptions import EngineTimeout, UpstreamUnavailable, ValidationFailure
from websearch.models import RawHit, SearchRequest, SearchResponse
from websearch.nlp.entities import EntityExtractor, NullEntityExtractor, apply_entities
from websearch.search.dedupe import dedupe_by_url
from websearch.search.query import empty_page, encode_cursor, normalize_query
from websearch.search.request_builder import build_image_search_body, build_search_body
from websearch.search.scoring import DEFAULT_WEIGHTS, ScoringWeights, rank_by_composite, score_results
from websearch.search.suggestions import suggest
from websearch.search.transform import parse_hits, transform_hits, transform_image_hits

logger = logging.getLogger(__name__)


class SearchEngine(Protocol):
    async def search(self, body: dict[str, Any], index: str | None = None) -> dict[str, Any]:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def read_total(hits_section: Mapping[str, Any]) -> int:
    """``hits.total`` is either a number or ``{"value": n, "relation": ...}``."""
    total = hits_section.get("total")
    if isinstance(total, Mapping):
        total = total.get("value")
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return 0
    return max(0, int(total))


class SearchPipeline:
    """Stateless between requests; the engine client is injected and owned by the caller."""

    def __init__(
        self,
        engine: SearchEngine,
        settings: Settings,
        extractor: Optional[EntityExtractor] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        cache: Optional[Cache] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.engine = engine
        self.settings = settings
        self.extractor = extractor or NullEntityExtractor()
        self.weights = weights
        self.cache = cache
        self.clock = clock

    async def _query_engine(self, body: dict[str, Any]) -> tuple[Mapping[str, Any], list[RawHit]]:
        start = time.perf_counter()
        data = await self.engine.search(body)
        took_ms = round((time.perf_counter() - start) * 1000, 2)

        hits_section = data.get("hits")
        if not isinstance(hits_section, Mapping):
            hits_section = {}
        raw_hits = parse_hits(hits_section.get("hits"))
        logger.info(f"Engine returned {len(raw_hits)} hits", extra={"hits": len(raw_hits), "took_ms": took_ms})
        return hits_section, raw_hits

    def _next_cursor(self, request: SearchRequest, raw_hits: list[RawHit]) -> str | None:
        """Continuation token for the next page, only once cursor paging is in use."""
        if len(raw_hits) < request.size or not raw_hits[-1].sort:
            return None
        deep = request.offset + request.size >= self.settings.deep_paging_offset
        if request.search_after or deep:
            return encode_cursor(raw_hits[-1].sort)
        return None

    async def run_web(self, request: SearchRequest) -> SearchResponse:
        hits_section, raw_hits = await self._query_engine(build_search_body(request, self.settings))
        total = read_total(hits_section)

        results = dedupe_by_url(transform_hits(raw_hits))
        if self.settings.entity_extraction_enabled and self.settings.entity_top_n > 0:
            results = await apply_entities(results, self.extractor, self.settings.entity_top_n)
        results = score_results(results, request.query, self.clock(), self.weights)

        return SearchResponse(
            hits=results,
            suggestions=suggest(results, request.query),
            total=total,
            page=request.page,
            size=request.size,
            total_pages=math.ceil(total / request.size),
            cursor=self._next_cursor(request, raw_hits),
        )

    async def run_images(self, request: SearchRequest) -> SearchResponse:
        _, raw_hits = await self._query_engine(build_image_search_body(request))
        images = transform_image_hits(raw_hits)
        return SearchResponse(
            hits=images,
            total=len(images),
            page=request.page,
            size=request.size,
            total_pages=1 if images else 0,
        )

    async def run(self, request: SearchRequest) -> SearchResponse:
        """
        Execute one normalized request.

        Raises:
            UpstreamUnavailable: The engine call failed or timed out
        """
        if request.type == "image":
            return await self.run_images(request)
        return await self.run_web(request)

    async def search(
        self,
        q: Optional[str],
        *,
        page: Any = None,
        size: Any = None,
        lang: Optional[str] = None,
        accept_language: Optional[str] = None,
        cursor: Optional[str] = None,
        search_type: str = "web",
    ) -> tuple[int, SearchResponse]:
        """
        Fail-soft entry point used by the HTTP layer.

        Returns:
            ``(status_code, response)``; 200 with an empty envelope for queries
            that cannot be searched, 500 with ``error`` set when the engine fails.
            Web hits come back ordered by descending composite score.
        """
        try:
            request = normalize_query(
                q,
                self.settings,
                page=page,
                size=size,
                lang=lang,
                accept_language=accept_language,
                cursor=cursor,
                search_type=search_type,
            )
        except ValidationFailure as e:
            logger.debug(f"Short-circuiting search: {e}")
            page_num, page_size = empty_page(page, size, self.settings)
            return 200, SearchResponse(page=page_num, size=page_size)

        key = cache_key(request)
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached:
                logger.debug("Cache hit for search", extra={"query": request.query})
                return 200, SearchResponse.model_validate_json(cached)

        try:
            response = await self.run(request)
        except UpstreamUnavailable as e:
            logger.error(
                f"Search failed: {e.message}",
                extra={"query": request.query, "error": e.message, "status_code": e.status_code},
            )
            message = "Search engine timed out" if isinstance(e, EngineTimeout) else "Search failed"
            return 500, SearchResponse(page=request.page, size=request.size, error=message)

        if request.type == "web":
            response = response.model_copy(update={"hits": rank_by_composite(response.hits)})

        if self.cache is not None:
            await self.cache.set(key, response.model_dump_json())
        return 200, response
