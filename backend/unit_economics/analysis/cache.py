"""
Analysis cache.

Content-addressed: the key is a SHA-256 fingerprint of the validated request,
so identical input always maps to the same slot. Entries are stored
serialized and re-validated on read; anything that no longer passes
is_valid_analysis is reported as a miss.
"""

import hashlib
import json
import logging
import time
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from unit_economics.analysis.parser import is_valid_analysis
from unit_economics.analysis.schemas import AnalysisRequest
from unit_economics.config import Settings

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "unit_analysis_"


def make_cache_key(request: AnalysisRequest) -> str:
    canonical = json.dumps(
        request.model_dump(exclude_none=True),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return CACHE_KEY_PREFIX + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _load(payload: Optional[str], key: str) -> Optional[dict]:
    if payload is None:
        return None
    try:
        data = json.loads(payload)
    except ValueError:
        logger.warning(f"Discarding undecodable cache entry {key[:30]}...")
        return None
    if not is_valid_analysis(data):
        logger.warning(f"Discarding stale-shape cache entry {key[:30]}...")
        return None
    return data


class CacheStore:
    """get/put interface shared by the cache backends."""

    backend = "none"

    async def get(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    async def put(self, key: str, result: dict, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class MemoryCacheStore(CacheStore):
    """Per-process store. Each put replaces the slot with one assignment."""

    backend = "memory"

    def __init__(self, clock=time.monotonic):
        self._entries: dict[str, tuple[str, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[dict]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if self._clock() >= expires_at:
            # only drop the slot if nobody replaced it meanwhile
            if self._entries.get(key) is entry:
                self._entries.pop(key, None)
            return None
        return _load(payload, key)

    async def put(self, key: str, result: dict, ttl_seconds: int) -> None:
        payload = json.dumps(result, ensure_ascii=False)
        now = self._clock()
        self._evict_expired(now)
        self._entries[key] = (payload, now + ttl_seconds)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries")

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore(CacheStore):
    """Shared store for multi-worker deployments. Outages degrade to cache misses."""

    backend = "redis"

    def __init__(self, client: redis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheStore":
        return cls(redis.from_url(url, encoding="utf8", decode_responses=True))

    async def get(self, key: str) -> Optional[dict]:
        try:
            payload = await self._redis.get(key)
        except RedisError as e:
            logger.warning(f"Redis get failed, treating as miss: {e}")
            return None
        return _load(payload, key)

    async def put(self, key: str, result: dict, ttl_seconds: int) -> None:
        payload = json.dumps(result, ensure_ascii=False)
        try:
            await self._redis.set(key, payload, ex=ttl_seconds)
        except RedisError as e:
            logger.warning(f"Redis set failed, result not cached: {e}")

    async def close(self) -> None:
        await self._redis.aclose()
        logger.info("Cache connection closed")


def create_cache_store(settings: Settings) -> CacheStore:
    if settings.redis_url:
        logger.info("Analysis cache backed by Redis")
        return RedisCacheStore.from_url(settings.redis_url)
    logger.info("Redis URL not provided, using in-process analysis cache")
    return MemoryCacheStore()
