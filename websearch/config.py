"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Search engine cluster
    engine_url: str = Field(default="http://localhost:9200", description="Base URL of the search cluster")
    engine_index: str = Field(default="pages", description="Index holding crawled pages")
    engine_api_key: str = Field(default="", description="Optional ApiKey credential")
    engine_username: str = Field(default="", description="Optional basic auth user")
    engine_password: str = Field(default="", description="Optional basic auth password")
    engine_timeout: float = Field(default=1.5, gt=0, description="Upper bound for one engine call in seconds")

    # Query normalization
    max_page_size: int = Field(default=20, ge=1, description="Hard cap for the page size")
    min_query_length: int = Field(default=2, ge=1, description="Shorter queries short-circuit")
    default_language: str = Field(default="en", description="Language preference without a hint")
    deep_paging_offset: int = Field(
        default=200, ge=0, description="Offset from which continuation switches to search_after cursors"
    )

    # Query shape
    score_mode: Literal["multiply", "sum", "avg", "first", "max", "min"] = "sum"
    boost_mode: Literal["multiply", "replace", "sum", "avg", "max", "min"] = "multiply"
    language_weight: float = 2.5
    title_phrase_boost: float = 6.0
    freshness_field: str = "updated_at"
    freshness_scale: str = "30d"
    freshness_decay: float = Field(default=0.5, gt=0, lt=1)
    popularity_boost_enabled: bool = True
    sort_tiebreaker: str = "url.keyword"

    # Entity extraction
    entity_extraction_enabled: bool = True
    entity_model: str = "en_core_web_sm"
    entity_top_n: int = Field(default=5, ge=0)

    # Response cache (0 disables it)
    search_cache_ttl: int = Field(default=0, ge=0, description="Seconds to keep a search response")
    redis_url: str | None = Field(default=None, description="Optional redis URL for the response cache")

    # Application Configuration
    app_title: str = Field(default="Web Search API", description="Application title")
    app_version: str = Field(default="1.0.0", description="Application version")
    allowed_origins: str = Field(default="http://localhost:3000", description="Comma separated CORS origins")
    debug: bool = Field(default=False, description="Debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=True, description="Use JSON log format")
    log_file: str | None = Field(default=None, description="Optional log file path")

    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
