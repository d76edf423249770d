"""Optional search response cache backed by redis or process memory."""

import asyncio
import hashlib
import logging
import time
from typing import Any

import orjson
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from websearch.models import SearchRequest

logger = logging.getLogger(__name__)


def cache_key(request: SearchRequest) -> str:
    """Key on every parameter that shapes the response, so one query never answers another."""
    parts = [
        request.type,
        request.query.lower(),
        str(request.page),
        str(request.size),
        request.language,
        request.cursor or "",
    ]
    digest = hashlib.sha256(orjson.dumps(parts)).hexdigest()
    return f"search:{digest}"


class SimpleTTLCache:
    def __init__(self, ttl_seconds: int = 300):
        self.ttl = ttl_seconds
        self._store: dict[str, tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            v = self._store.get(key)
            if not v:
                return None
            expires_at, data = v
            if time.time() > expires_at:
                self._store.pop(key, None)
                return None
            return data

    async def set(self, key: str, value: Any):
        async with self._lock:
            self._store[key] = (time.time() + self.ttl, value)


class Cache:
    def __init__(self, redis_url: str | None, ttl_seconds: int = 0):
        self.redis_url = redis_url
        self.ttl = ttl_seconds
        self.redis = None
        self.memory = SimpleTTLCache(ttl_seconds)

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    async def connect(self):
        if self.enabled and self.redis_url:
            try:
                self.redis = aioredis.from_url(
                    self.redis_url, encoding="utf-8", decode_responses=True
                )
                await self.redis.ping()
            except (RedisError, OSError) as e:
                logger.warning(f"Redis unavailable at {self.redis_url}, using memory cache: {e}")
                self.redis = None

    async def close(self):
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None

    async def get(self, key: str) -> str | None:
        if not self.enabled:
            return None
        if self.redis:
            try:
                return await self.redis.get(key)
            except RedisError:
                return await self.memory.get(key)
        return await self.memory.get(key)

    async def set(self, key: str, value: str):
        if not self.enabled:
            return
        if self.redis:
            try:
                await self.redis.set(key, value, ex=self.ttl)
                return
            except RedisError as e:
                logger.debug(f"Redis write failed, falling back to memory: {e}")
        await self.memory.set(key, value)

    def backend_name(self) -> str:
        if not self.enabled:
            return "disabled"
        return "redis" if self.redis else "memory"
