"""FastAPI application for the web search front end."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from websearch.caching import Cache
from websearch.config import Settings, get_settings
from websearch.deps import get_cache, get_engine_client
from websearch.engine_client import EngineClient, create_http_client
from websearch.middleware.lowercase_path import LowercasePathMiddleware
from websearch.middleware.request_logging import RequestLoggingMiddleware
from websearch.models import HealthResponse, ReadyResponse, SearchResponse
from websearch.nlp.entities import NullEntityExtractor, SpacyEntityExtractor
from websearch.routers import search
from websearch.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_json, settings.log_file)

    http = create_http_client(settings)
    app.state.engine = EngineClient(http, index=settings.engine_index, timeout=settings.engine_timeout)
    app.state.extractor = (
        SpacyEntityExtractor(settings.entity_model)
        if settings.entity_extraction_enabled
        else NullEntityExtractor()
    )
    app.state.cache = Cache(redis_url=settings.redis_url, ttl_seconds=settings.search_cache_ttl)
    await app.state.cache.connect()
    logger.info(f"Search API ready, engine={settings.engine_url} index={settings.engine_index}")
    try:
        yield
    finally:
        await http.aclose()
        await app.state.cache.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        description="Query front end for the page search cluster",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins(),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(LowercasePathMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        if request.url.path.endswith("/search"):
            body = SearchResponse(error="Search failed").to_payload()
        else:
            body = {"error": "Internal server error"}
        return JSONResponse(status_code=500, content=body)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="ok", service="websearch", version=settings.app_version)

    @app.get("/ready", response_model=ReadyResponse)
    async def ready(
        engine: EngineClient = Depends(get_engine_client),
        cache: Cache | None = Depends(get_cache),
    ):
        engine_ok = await engine.ping()
        return ReadyResponse(
            ok=engine_ok,
            cache=cache.backend_name() if cache else "disabled",
            engine=engine_ok,
        )

    app.include_router(search.router)
    app.include_router(search.router, prefix="/api", include_in_schema=False)
    return app


app = create_app()


def run() -> None:
    uvicorn.run("websearch.main:app", host="0.0.0.0", port=8000)
