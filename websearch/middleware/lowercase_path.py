"""Redirect mixed-case paths to their lower-case form."""

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware


class LowercasePathMiddleware(BaseHTTPMiddleware):
    """``/Search?q=Foo`` redirects to ``/search?q=Foo``; the query string is kept as is."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        lowered = path.lower()
        if path != lowered:
            url = request.url.replace(path=lowered)
            return RedirectResponse(url=str(url), status_code=307)
        return await call_next(request)
