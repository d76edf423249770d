"""Query normalization: trimming, paging limits, language preference and cursors."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional

import orjson

from websearch.config import Settings
from websearch.exceptions import ValidationFailure
from websearch.models import SearchRequest

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("web", "image")


def _parse_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def preferred_language(hint: Optional[str], default: str = "en") -> str:
    """``de`` when the hint starts with ``de``, otherwise the fallback."""
    if hint and hint.strip().lower().startswith("de"):
        return "de"
    return default


def encode_cursor(sort_values: list[Any]) -> str:
    return base64.urlsafe_b64encode(orjson.dumps(sort_values)).decode("ascii").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> Optional[list[Any]]:
    """Decode an opaque cursor into search_after values; ``None`` when unusable."""
    if not cursor:
        return None
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        values = orjson.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeEncodeError, orjson.JSONDecodeError, ValueError):
        logger.warning("Ignoring undecodable pagination cursor")
        return None
    if not isinstance(values, list) or not values:
        logger.warning("Ignoring pagination cursor without sort values")
        return None
    return values


def normalize_query(
    q: Optional[str],
    settings: Settings,
    page: Any = None,
    size: Any = None,
    lang: Optional[str] = None,
    accept_language: Optional[str] = None,
    cursor: Optional[str] = None,
    search_type: str = "web",
) -> SearchRequest:
    """
    Build the immutable request for one search.

    Raises:
        ValidationFailure: The trimmed query is shorter than ``min_query_length``
            or the search type is unknown.
    """
    query = (q or "").strip()
    if len(query) < settings.min_query_length:
        raise ValidationFailure(f"query must have at least {settings.min_query_length} characters")
    if search_type not in SEARCH_TYPES:
        raise ValidationFailure(f"unknown search type: {search_type}")

    page_num = max(0, _parse_int(page, 0))
    page_size = min(max(1, _parse_int(size, settings.max_page_size)), settings.max_page_size)

    search_after = decode_cursor(cursor) if search_type == "web" else None

    return SearchRequest(
        query=query,
        page=page_num,
        size=page_size,
        language=preferred_language(lang or accept_language, settings.default_language),
        cursor=cursor if search_after else None,
        search_after=search_after,
        type=search_type,
    )


def empty_page(page: Any, size: Any, settings: Settings) -> tuple[int, int]:
    """Page and size echoed back on a short-circuited request."""
    page_num = max(0, _parse_int(page, 0))
    page_size = min(max(1, _parse_int(size, settings.max_page_size)), settings.max_page_size)
    return page_num, page_size
