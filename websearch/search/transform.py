"""Map raw engine hits onto typed records.

Every field of a hit may be missing, null or of the wrong type. ``parse_hit``
applies one default-substitution policy (empty string, empty list, zero, None)
so the rest of the pipeline only ever sees a fully populated ``RawHit``.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Iterable

from websearch.exceptions import MalformedDocument
from websearch.models import ImageResult, NormalizedResult, RawHit

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 300

_MARKUP_RE = re.compile(r"<[^>]+>")


def strip_markup(value: str | None) -> str:
    """Remove every ``<tag>``-shaped substring."""
    if not value:
        return ""
    return _MARKUP_RE.sub("", value)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [s for s in (_as_str(v).strip() for v in value) if s]


def _as_str_set(value: Any) -> list[str]:
    """Like ``_as_str_list`` with exact duplicates dropped, first occurrence kept."""
    return list(dict.fromkeys(_as_str_list(value)))


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    # NaN and infinities cannot be serialized as JSON
    if not math.isfinite(result):
        return 0.0
    return result


def _as_datetime(value: Any) -> datetime | None:
    """ISO-8601 strings or epoch seconds/milliseconds; naive values are taken as UTC."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            # anything past year ~2286 in seconds is really milliseconds
            seconds = value / 1000 if value > 1e10 else value
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        if isinstance(value, str):
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    except (ValueError, OverflowError, OSError):
        logger.debug(f"Unparseable timestamp {value!r}")
    return None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def parse_hit(raw: Any) -> RawHit:
    """
    Read one engine hit with default substitution.

    Raises:
        MalformedDocument: ``raw`` is not a mapping at all
    """
    if not isinstance(raw, Mapping):
        raise MalformedDocument(f"hit is {type(raw).__name__}, expected an object")

    source = _as_mapping(raw.get("_source"))
    highlight = _as_mapping(raw.get("highlight"))
    images = source.get("images")
    sort = raw.get("sort")

    return RawHit(
        id=_as_str(raw.get("_id")),
        score=_as_float(raw.get("_score")),
        url=_as_str(source.get("url")),
        title=_as_str(source.get("title")),
        body=_as_str(source.get("content")),
        language=_as_str(source.get("lang")),
        updated_at=_as_datetime(source.get("updated_at")) or _as_datetime(source.get("crawl_time")),
        tags=_as_str_set(source.get("tags")),
        keywords=_as_str_set(source.get("meta_keywords") or source.get("keywords")),
        views=_as_int(source.get("views")),
        images=[img for img in images if isinstance(img, Mapping)] if isinstance(images, list) else [],
        highlight_title=_as_str_list(highlight.get("title")),
        highlight_body=_as_str_list(highlight.get("content")),
        sort=sort if isinstance(sort, list) else None,
    )


def transform_hit(hit: RawHit) -> NormalizedResult:
    highlighted_title = hit.highlight_title[0] if hit.highlight_title else None
    highlighted_body = " ".join(hit.highlight_body) if hit.highlight_body else None

    title = highlighted_title or hit.title or hit.url
    snippet = highlighted_body or strip_markup(hit.body)[:SNIPPET_LENGTH]

    return NormalizedResult(
        id=hit.id or hit.url,
        url=hit.url,
        title=title,
        snippet=snippet,
        body=hit.body,
        language=hit.language,
        updated_at=hit.updated_at,
        tags=hit.tags,
        keywords=hit.keywords,
        views=hit.views,
        highlighted_title=highlighted_title,
        highlighted_body=highlighted_body,
        relevance_score=hit.score,
    )


def parse_hits(raw_hits: Any) -> list[RawHit]:
    """Parse a hit list, skipping entries that are not objects."""
    if not isinstance(raw_hits, list):
        return []
    parsed = []
    for raw in raw_hits:
        try:
            parsed.append(parse_hit(raw))
        except MalformedDocument as e:
            logger.debug(f"Skipping malformed hit: {e}")
    return parsed


def transform_hits(hits: Iterable[RawHit]) -> list[NormalizedResult]:
    return [transform_hit(hit) for hit in hits]


def transform_image_hits(hits: Iterable[RawHit]) -> list[ImageResult]:
    """One record per image, in page order."""
    images: list[ImageResult] = []
    for hit in hits:
        for img in hit.images:
            image_url = _as_str(img.get("url"))
            if not image_url:
                continue
            images.append(
                ImageResult(
                    id=f"{hit.id}-{image_url}",
                    image_url=image_url,
                    page_url=hit.url,
                    alt=_as_str(img.get("alt")) or hit.title,
                )
            )
    return images
