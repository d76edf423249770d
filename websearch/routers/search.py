"""Search endpoint consumed by the web UI."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from websearch.deps import get_pipeline
from websearch.search.pipeline import SearchPipeline

router = APIRouter(tags=["search"])


@router.get("/search", response_class=JSONResponse)
async def search(
    request: Request,
    q: str | None = Query(None, description="Search terms"),
    page: str | None = Query(None, description="Zero-based page number"),
    size: str | None = Query(None, description="Page size, capped by the server"),
    lang: str | None = Query(None, description="Language hint, e.g. 'de' or 'en-US'"),
    cursor: str | None = Query(None, description="Continuation token from a previous response"),
    type: str = Query("web", description="'web' or 'image'"),
    pipeline: SearchPipeline = Depends(get_pipeline),
):
    """
    Search pages.

    Always answers the same envelope: ``{hits, suggestions, total, page, size,
    total_pages}`` plus ``cursor`` for continuation and ``error`` on failure.
    Paging parameters are parsed leniently so malformed values fall back to
    defaults instead of failing validation.
    """
    status_code, response = await pipeline.search(
        q,
        page=page,
        size=size,
        lang=lang,
        accept_language=request.headers.get("accept-language"),
        cursor=cursor,
        search_type=type,
    )
    return JSONResponse(status_code=status_code, content=response.to_payload())
