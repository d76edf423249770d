"""Async client for the external document-search cluster."""

import asyncio
import logging
from typing import Any

import httpx

from websearch.config import Settings
from websearch.exceptions import (
    ConfigurationError,
    EngineResponseError,
    EngineTimeout,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Build the shared HTTP client; the application lifespan owns and closes it."""
    if not settings.engine_url:
        raise ConfigurationError("ENGINE_URL is not configured")

    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": f"WebSearchAPI/{settings.app_version}",
    }
    if settings.engine_api_key:
        headers["Authorization"] = f"ApiKey {settings.engine_api_key}"

    auth = None
    if settings.engine_username:
        auth = httpx.BasicAuth(settings.engine_username, settings.engine_password)

    return httpx.AsyncClient(
        base_url=settings.engine_url.rstrip("/"),
        headers=headers,
        auth=auth,
        timeout=httpx.Timeout(settings.engine_timeout),
    )


class EngineClient:
    """Thin wrapper around ``POST /{index}/_search`` with a hard time bound."""

    def __init__(self, http: httpx.AsyncClient, index: str = "pages", timeout: float = 1.5):
        self.http = http
        self.index = index
        self.timeout = timeout

    async def search(self, body: dict[str, Any], index: str | None = None) -> dict[str, Any]:
        """
        Run one query against the cluster.

        Args:
            body: Query DSL body
            index: Index name, defaults to the configured one

        Returns:
            Decoded JSON response

        Raises:
            EngineTimeout: The call exceeded ``timeout``
            EngineResponseError: Non-2xx status or a body that is not a JSON object
            UpstreamUnavailable: Network errors
        """
        path = f"/{index or self.index}/_search"
        try:
            response = await asyncio.wait_for(self.http.post(path, json=body), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Search engine timed out after {self.timeout}s on {path}")
            raise EngineTimeout(f"Search engine did not answer within {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.error(f"Network error connecting to search engine: {e}")
            raise UpstreamUnavailable(f"Network error connecting to search engine: {e}") from e

        if response.is_error:
            error_text = response.text[:1000] if response.text else ""
            logger.error(f"Search engine error {response.status_code}: path={path}, response={error_text}")
            raise EngineResponseError(
                status_code=response.status_code,
                message=f"API returned {response.status_code}",
                response_text=error_text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EngineResponseError(response.status_code, "response is not JSON") from e
        if not isinstance(data, dict):
            raise EngineResponseError(response.status_code, "response is not a JSON object")
        return data

    async def ping(self) -> bool:
        try:
            response = await asyncio.wait_for(self.http.get("/"), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.HTTPError):
            return False
        return response.is_success
