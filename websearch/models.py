"""Data models for the search pipeline."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    PERSON = "Person"
    PLACE = "Place"
    ORGANIZATION = "Organization"
    NUMBER = "Number"
    OTHER = "Other"


class Entity(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    type: EntityType = EntityType.OTHER


class SearchRequest(BaseModel):
    """Normalized search parameters, built once per incoming request."""

    model_config = ConfigDict(frozen=True)

    query: str
    page: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=1)
    language: str = "en"
    cursor: str | None = None
    search_after: list[Any] | None = None  # decoded cursor
    type: Literal["web", "image"] = "web"

    @property
    def offset(self) -> int:
        return self.page * self.size


class RawHit(BaseModel):
    """One engine hit after default substitution; every field is typed and present."""

    id: str = ""
    score: float = 0.0
    url: str = ""
    title: str = ""
    body: str = ""
    language: str = ""
    updated_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    views: int = 0
    images: list[dict[str, Any]] = Field(default_factory=list)
    highlight_title: list[str] = Field(default_factory=list)
    highlight_body: list[str] = Field(default_factory=list)
    sort: list[Any] | None = None


class NormalizedResult(BaseModel):
    """Canonical result record returned to the UI."""

    id: str
    url: str
    title: str
    snippet: str = ""
    body: str = ""
    language: str = ""
    updated_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    views: int = Field(default=0, ge=0)
    highlighted_title: str | None = None
    highlighted_body: str | None = None
    entities: list[Entity] = Field(default_factory=list)
    relevance_score: float = 0.0
    composite_score: float = 0.0


class ImageResult(BaseModel):
    id: str
    image_url: str
    page_url: str = ""
    alt: str = ""


class SearchResponse(BaseModel):
    """JSON envelope returned by the search endpoint."""

    hits: list[NormalizedResult | ImageResult] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list, max_length=5)
    total: int = 0
    page: int = 0
    size: int = 0
    total_pages: int = 0
    cursor: str | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize for JSON, leaving out ``cursor``/``error`` when unset."""
        payload = self.model_dump(mode="json")
        for key in ("cursor", "error"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadyResponse(BaseModel):
    ok: bool
    cache: str
    engine: bool
