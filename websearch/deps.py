"""FastAPI dependencies."""

from fastapi import Depends, Request

from websearch.caching import Cache
from websearch.config import Settings, get_settings
from websearch.engine_client import EngineClient
from websearch.nlp.entities import EntityExtractor, NullEntityExtractor
from websearch.search.pipeline import SearchPipeline


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_engine_client(request: Request) -> EngineClient:
    """Engine client created by the application lifespan."""
    return request.app.state.engine


def get_entity_extractor(request: Request) -> EntityExtractor:
    return getattr(request.app.state, "extractor", None) or NullEntityExtractor()


def get_cache(request: Request) -> Cache | None:
    return getattr(request.app.state, "cache", None)


def get_pipeline(
    engine: EngineClient = Depends(get_engine_client),
    extractor: EntityExtractor = Depends(get_entity_extractor),
    cache: Cache | None = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
) -> SearchPipeline:
    """A fresh pipeline per request; nothing mutable is shared between requests."""
    return SearchPipeline(engine, settings, extractor=extractor, cache=cache)
