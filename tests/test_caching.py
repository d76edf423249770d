"""Tests for the response cache."""
import pytest

from websearch.caching import Cache, SimpleTTLCache, cache_key
from websearch.models import SearchRequest


def test_cache_key_covers_every_parameter():
    base = SearchRequest(query="History", page=0, size=20, language="en")
    variants = [
        SearchRequest(query="history", page=1, size=20, language="en"),
        SearchRequest(query="history", page=0, size=10, language="en"),
        SearchRequest(query="history", page=0, size=20, language="de"),
        SearchRequest(query="history", page=0, size=20, language="en", cursor="abc", search_after=[1]),
        SearchRequest(query="history", page=0, size=20, language="en", type="image"),
        SearchRequest(query="histories", page=0, size=20, language="en"),
    ]
    keys = {cache_key(v) for v in variants}
    assert len(keys) == len(variants)
    assert cache_key(base) not in keys
    assert cache_key(base) == cache_key(SearchRequest(query="history"))


@pytest.mark.asyncio
async def test_memory_ttl(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr("websearch.caching.time.time", lambda: clock[0])
    cache = SimpleTTLCache(ttl_seconds=10)

    await cache.set("k", "v")
    assert await cache.get("k") == "v"
    clock[0] += 11
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_disabled_cache_stores_nothing():
    cache = Cache(redis_url=None, ttl_seconds=0)
    await cache.connect()
    await cache.set("k", "v")
    assert await cache.get("k") is None
    assert cache.backend_name() == "disabled"


@pytest.mark.asyncio
async def test_unreachable_redis_falls_back_to_memory():
    cache = Cache(redis_url="redis://127.0.0.1:1/0", ttl_seconds=30)
    await cache.connect()
    assert cache.backend_name() == "memory"
    await cache.set("k", "v")
    assert await cache.get("k") == "v"
