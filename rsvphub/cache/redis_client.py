"""
Redis cache for per-event RSVP aggregates.

Values are stored as JSON. Any Redis failure, or ``CACHE_ENABLED=false``,
turns into a cache miss so callers fall through to the database.
"""
import json
from typing import Optional, Any
import redis.asyncio as redis
from rsvphub.core.config import settings
from rsvphub.core.logging import logger

SUMMARY_PREFIX = "rsvps:summary"


class RedisCache:

    def __init__(self, url: str, enabled: bool = True):
        self.url = url
        self.enabled = enabled
        self._client: Optional[redis.Redis] = None

    def _connection(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True, max_connections=20)
            logger.info(f"Redis cache connected to {self.url}")
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = await self._connection().get(key)
        except Exception as e:
            logger.warning(f"Redis GET {key} failed: {e}")
            return None
        return json.loads(raw) if raw else None

    async def set(self, key: str, value: Any, expire: int) -> bool:
        if not self.enabled:
            return False
        try:
            await self._connection().set(key, json.dumps(value, default=str), ex=expire)
            return True
        except Exception as e:
            logger.warning(f"Redis SET {key} failed: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern; returns how many went."""
        if not self.enabled:
            return 0
        try:
            client = self._connection()
            keys = [key async for key in client.scan_iter(match=pattern)]
            return await client.delete(*keys) if keys else 0
        except Exception as e:
            logger.warning(f"Redis delete of {pattern} failed: {e}")
            return 0

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis cache connection closed")


cache = RedisCache(settings.REDIS_URL, enabled=settings.CACHE_ENABLED)


async def invalidate_event_aggregates(event_id: Optional[int] = None) -> int:
    """Drop cached summaries for one event, or for all events."""
    if event_id is None:
        return await cache.delete_pattern(f"{SUMMARY_PREFIX}:*")
    return await cache.delete_pattern(f"{SUMMARY_PREFIX}:{event_id}")
