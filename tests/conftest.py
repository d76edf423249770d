"""Shared fixtures: fake engine, fake entity extractor and hit builders."""

from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from websearch.config import Settings
from websearch.deps import get_cache, get_engine_client, get_entity_extractor
from websearch.main import create_app
from websearch.models import Entity

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeEngine:
    """Records every query body and answers with a canned response or error."""

    def __init__(self, response: dict[str, Any] | None = None, error: Exception | None = None):
        self.response = response if response is not None else engine_response([])
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def search(self, body: dict[str, Any], index: str | None = None) -> dict[str, Any]:
        self.calls.append(body)
        if self.error is not None:
            raise self.error
        return self.response

    async def ping(self) -> bool:
        return self.error is None


class FakeExtractor:
    def __init__(self, entities: list[Entity] | None = None):
        self.entities = entities or []
        self.texts: list[str] = []

    def extract(self, text: str) -> list[Entity]:
        self.texts.append(text)
        return list(self.entities)


def make_hit(
    id: str,
    url: str,
    title: str | None = None,
    content: str | None = None,
    score: float = 1.0,
    tags: list[str] | None = None,
    keywords: list[str] | None = None,
    views: int | None = None,
    lang: str | None = "en",
    updated_at: str | None = None,
    highlight: dict[str, list[str]] | None = None,
    sort: list[Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    source: dict[str, Any] = {"url": url, **extra}
    for key, value in (
        ("title", title),
        ("content", content),
        ("tags", tags),
        ("meta_keywords", keywords),
        ("views", views),
        ("lang", lang),
        ("updated_at", updated_at),
    ):
        if value is not None:
            source[key] = value
    hit: dict[str, Any] = {"_id": id, "_score": score, "_source": source}
    if highlight:
        hit["highlight"] = highlight
    if sort is not None:
        hit["sort"] = sort
    return hit


def engine_response(hits: list[dict[str, Any]], total: Any = None) -> dict[str, Any]:
    return {
        "took": 3,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "hits": hits,
        },
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, log_json=False, search_cache_ttl=0, redis_url=None)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def client(settings, engine, extractor):
    """TestClient without lifespan; the engine and extractor are fakes."""
    app = create_app(settings)
    app.dependency_overrides[get_engine_client] = lambda: engine
    app.dependency_overrides[get_entity_extractor] = lambda: extractor
    app.dependency_overrides[get_cache] = lambda: None
    return TestClient(app)
