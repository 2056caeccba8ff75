"""
Unit tests for cache keys and the cache backends.
"""
import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from conftest import VALID_ANALYSIS
from unit_economics.analysis.cache import (
    CACHE_KEY_PREFIX,
    MemoryCacheStore,
    RedisCacheStore,
    create_cache_store,
    make_cache_key,
)
from unit_economics.analysis.parser import FALLBACK_RESULT
from unit_economics.analysis.schemas import AnalysisRequest


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_cache_key_is_stable_for_identical_input(payload):
    a = AnalysisRequest.model_validate(payload)
    b = AnalysisRequest.model_validate(dict(reversed(list(payload.items()))))
    assert make_cache_key(a) == make_cache_key(b)
    assert make_cache_key(a).startswith(CACHE_KEY_PREFIX)
    assert len(make_cache_key(a)) == len(CACHE_KEY_PREFIX) + 64


def test_cache_key_ignores_surrounding_whitespace(payload):
    padded = dict(payload, description="  " + payload["description"] + "  ")
    assert make_cache_key(AnalysisRequest.model_validate(padded)) == make_cache_key(
        AnalysisRequest.model_validate(payload)
    )


def test_cache_key_depends_on_optional_field(payload):
    without = {k: v for k, v in payload.items() if k != "additional_info"}
    assert make_cache_key(AnalysisRequest.model_validate(payload)) != make_cache_key(
        AnalysisRequest.model_validate(without)
    )
    # blank and absent are the same validated input
    blank = dict(without, additional_info="")
    assert make_cache_key(AnalysisRequest.model_validate(blank)) == make_cache_key(
        AnalysisRequest.model_validate(without)
    )


@pytest.mark.asyncio
async def test_memory_store_round_trip(analysis):
    store = MemoryCacheStore()
    assert await store.get("k") is None
    await store.put("k", analysis, ttl_seconds=60)
    assert await store.get("k") == VALID_ANALYSIS


@pytest.mark.asyncio
async def test_memory_store_isolates_callers_from_stored_value(analysis):
    store = MemoryCacheStore()
    await store.put("k", analysis, ttl_seconds=60)
    analysis["metrics"]["cac"]["value"] = -1
    cached = await store.get("k")
    cached["recommendations"].append("mutated")
    assert await store.get("k") == VALID_ANALYSIS


@pytest.mark.asyncio
async def test_memory_store_expires_entries(analysis):
    clock = FakeClock()
    store = MemoryCacheStore(clock=clock)
    await store.put("k", analysis, ttl_seconds=3600)
    clock.now += 3599
    assert await store.get("k") is not None
    clock.now += 1
    assert await store.get("k") is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_memory_store_evicts_expired_entries_on_put(analysis):
    clock = FakeClock()
    store = MemoryCacheStore(clock=clock)
    for i in range(100):
        await store.put(f"k{i}", analysis, ttl_seconds=10)
    assert len(store) == 100

    clock.now += 1000
    await store.put("fresh", analysis, ttl_seconds=10)
    assert len(store) == 1
    assert await store.get("fresh") == analysis


@pytest.mark.asyncio
async def test_memory_store_put_keeps_live_entries(analysis):
    clock = FakeClock()
    store = MemoryCacheStore(clock=clock)
    await store.put("short", analysis, ttl_seconds=10)
    await store.put("long", analysis, ttl_seconds=3600)
    clock.now += 60
    await store.put("other", analysis, ttl_seconds=10)
    assert len(store) == 2
    assert await store.get("long") == analysis

@pytest.mark.asyncio
async def test_memory_store_last_writer_wins(analysis):
    store = MemoryCacheStore()
    await store.put("k", analysis, ttl_seconds=60)
    analysis["recommendations"] = ["Second opinion"]
    await store.put("k", analysis, ttl_seconds=60)
    assert (await store.get("k"))["recommendations"] == ["Second opinion"]


@pytest.mark.asyncio
async def test_stale_shape_entries_are_misses(analysis):
    store = MemoryCacheStore()
    del analysis["market_insights"]
    await store.put("old", analysis, ttl_seconds=60)
    await store.put("fallback", FALLBACK_RESULT, ttl_seconds=60)
    assert await store.get("old") is None
    assert await store.get("fallback") is None


@pytest.mark.asyncio
async def test_redis_store_uses_ttl_on_set(analysis):
    client = AsyncMock()
    store = RedisCacheStore(client)
    await store.put("k", analysis, ttl_seconds=3600)
    client.set.assert_awaited_once()
    key, value = client.set.await_args.args
    assert key == "k"
    assert json.loads(value) == VALID_ANALYSIS
    assert client.set.await_args.kwargs == {"ex": 3600}


@pytest.mark.asyncio
async def test_redis_store_get_validates_payload():
    client = AsyncMock()
    store = RedisCacheStore(client)

    client.get.return_value = json.dumps(VALID_ANALYSIS)
    assert await store.get("k") == VALID_ANALYSIS

    client.get.return_value = "{corrupt"
    assert await store.get("k") is None

    client.get.return_value = json.dumps({"metrics": {}})
    assert await store.get("k") is None

    client.get.return_value = None
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_redis_outage_is_a_miss(analysis):
    client = AsyncMock()
    client.get.side_effect = RedisConnectionError("down")
    client.set.side_effect = RedisConnectionError("down")
    store = RedisCacheStore(client)
    assert await store.get("k") is None
    await store.put("k", analysis, ttl_seconds=60)


@pytest.mark.asyncio
async def test_redis_store_close():
    client = AsyncMock()
    await RedisCacheStore(client).close()
    client.aclose.assert_awaited_once()


def test_create_cache_store_picks_backend(settings):
    assert isinstance(create_cache_store(settings), MemoryCacheStore)
    redis_settings = settings.model_copy(update={"redis_url": "redis://localhost:6379/0"})
    store = create_cache_store(redis_settings)
    assert isinstance(store, RedisCacheStore)
    assert store.backend == "redis"
