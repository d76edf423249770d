"""Tests for query normalization."""
import pytest

from websearch.exceptions import ValidationFailure
from websearch.search.query import decode_cursor, encode_cursor, normalize_query, preferred_language


def test_trims_query(settings):
    request = normalize_query("  ki projekte  ", settings)
    assert request.query == "ki projekte"
    assert request.page == 0
    assert request.size == 20
    assert request.language == "en"
    assert request.type == "web"


@pytest.mark.parametrize("q", [None, "", " ", "a", "  x  "])
def test_short_queries_fail(settings, q):
    with pytest.raises(ValidationFailure):
        normalize_query(q, settings)


def test_unknown_type_fails(settings):
    with pytest.raises(ValidationFailure):
        normalize_query("history", settings, search_type="video")


@pytest.mark.parametrize(
    "page, size, expected",
    [
        (None, None, (0, 20)),
        ("2", "10", (2, 10)),
        ("-1", "0", (0, 1)),
        ("abc", "1000", (0, 20)),
        (5, 7, (5, 7)),
    ],
)
def test_paging(settings, page, size, expected):
    request = normalize_query("history", settings, page=page, size=size)
    assert (request.page, request.size) == expected


def test_preferred_language():
    assert preferred_language("de-AT") == "de"
    assert preferred_language("DE") == "de"
    assert preferred_language("en-US,de;q=0.5") == "en"
    assert preferred_language(None) == "en"
    assert preferred_language("fr", default="en") == "en"


def test_lang_param_wins_over_header(settings):
    request = normalize_query("history", settings, lang="de", accept_language="en-US")
    assert request.language == "de"
    request = normalize_query("history", settings, accept_language="de-CH")
    assert request.language == "de"


def test_cursor_roundtrip(settings):
    cursor = encode_cursor([3.25, "https://x.test/a"])
    assert decode_cursor(cursor) == [3.25, "https://x.test/a"]
    request = normalize_query("history", settings, cursor=cursor)
    assert request.search_after == [3.25, "https://x.test/a"]
    assert request.cursor == cursor


@pytest.mark.parametrize("cursor", ["%%%", "bm90IGpzb24", encode_cursor([]), encode_cursor({"a": 1})])
def test_bad_cursor_is_ignored(settings, cursor):
    request = normalize_query("history", settings, cursor=cursor)
    assert request.search_after is None
    assert request.cursor is None


def test_request_is_immutable(settings):
    request = normalize_query("history", settings)
    with pytest.raises(Exception):
        request.query = "other"
