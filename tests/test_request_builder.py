"""Tests for the query DSL builder."""
from websearch.config import Settings
from websearch.models import SearchRequest
from websearch.search.request_builder import (
    FieldWeights,
    build_image_search_body,
    build_search_body,
)


def _function_score(body):
    return body["query"]["function_score"]


def test_field_weights_and_match_shape(settings):
    body = build_search_body(SearchRequest(query="ki projekte", size=10), settings)
    match = _function_score(body)["query"]["bool"]["must"][0]["multi_match"]

    assert match["query"] == "ki projekte"
    assert match["fields"] == ["title^5", "tags^4", "meta_keywords^3", "content^2"]
    assert match["fuzziness"] == "AUTO"
    assert match["operator"] == "and"
    assert match["type"] == "best_fields"


def test_title_phrase_boost(settings):
    body = build_search_body(SearchRequest(query="ki projekte"), settings)
    should = _function_score(body)["query"]["bool"]["should"]
    assert should == [{"match_phrase": {"title": {"query": "ki projekte", "boost": 6.0}}}]


def test_scoring_functions(settings):
    body = build_search_body(SearchRequest(query="history", language="de"), settings)
    fs = _function_score(body)
    language, gauss, popularity = fs["functions"]

    assert language == {"filter": {"term": {"lang.keyword": "de"}}, "weight": 2.5}
    assert gauss["gauss"]["updated_at"] == {"origin": "now", "scale": "30d", "decay": 0.5}
    assert popularity["field_value_factor"]["modifier"] == "log1p"
    assert popularity["field_value_factor"]["field"] == "views"
    assert fs["score_mode"] == "sum"
    assert fs["boost_mode"] == "multiply"


def test_popularity_can_be_disabled():
    settings = Settings(_env_file=None, popularity_boost_enabled=False, boost_mode="sum")
    fs = _function_score(build_search_body(SearchRequest(query="history"), settings))
    assert len(fs["functions"]) == 2
    assert fs["boost_mode"] == "sum"


def test_offset_pagination(settings):
    body = build_search_body(SearchRequest(query="history", page=3, size=20), settings)
    assert body["from"] == 60
    assert body["size"] == 20
    assert "search_after" not in body
    assert body["sort"][0] == {"_score": {"order": "desc"}}
    assert body["highlight"]["fields"]["content"] == {"number_of_fragments": 2}


def test_cursor_pagination(settings):
    request = SearchRequest(query="history", page=9, size=20, cursor="abc", search_after=[1.5, "https://x.test/z"])
    body = build_search_body(request, settings)
    assert body["search_after"] == [1.5, "https://x.test/z"]
    assert "from" not in body


def test_custom_field_weights(settings):
    weights = FieldWeights(title=8, tags=1.5)
    body = build_search_body(SearchRequest(query="history"), settings, weights)
    fields = _function_score(body)["query"]["bool"]["must"][0]["multi_match"]["fields"]
    assert fields[:2] == ["title^8", "tags^1.5"]


def test_build_is_deterministic(settings):
    request = SearchRequest(query="history", page=1)
    assert build_search_body(request, settings) == build_search_body(request, settings)


def test_image_body():
    body = build_image_search_body(SearchRequest(query="harbour", page=1, size=10, type="image"))
    assert body["from"] == 10
    must = body["query"]["bool"]["must"]
    assert must[0] == {"exists": {"field": "images.url"}}
    assert must[1]["multi_match"]["fields"] == ["title^2", "content"]
