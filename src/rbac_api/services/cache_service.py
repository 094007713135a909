"""Redis cache for dashboard statistics."""

import json
import logging

import redis.asyncio as redis
from pydantic import BaseModel

logger = logging.getLogger(__name__)

PREFIX_DASHBOARD = "dashboard"
DASHBOARD_STATS_KEY = f"{PREFIX_DASHBOARD}:stats"


class CacheService:
    """Redis-backed cache shared by one process.

    Lookups miss and writes are dropped while Redis is unreachable, so the
    dashboard falls back to querying the database.
    """

    def __init__(self, redis_url: str, dashboard_ttl: int = 300) -> None:
        self.redis_url = redis_url
        self.dashboard_ttl = dashboard_ttl
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Open the connection pool and check the server answers."""
        client = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
        try:
            await client.ping()
        except redis.RedisError as e:
            logger.warning("Redis unavailable, dashboard caching disabled: %s", e)
            await client.aclose()
            return
        self._client = client
        logger.info("Redis cache connected")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def get_dashboard_stats(self) -> dict | None:
        """Get cached dashboard statistics.

        Returns:
            Decoded statistics, or None on a miss or a Redis failure
        """
        if self._client is None:
            return None
        try:
            raw = await self._client.get(DASHBOARD_STATS_KEY)
        except redis.RedisError as e:
            logger.error("Cache read failed for %s: %s", DASHBOARD_STATS_KEY, e)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    async def set_dashboard_stats(self, stats: BaseModel) -> bool:
        """Store dashboard statistics for ``dashboard_ttl`` seconds."""
        if self._client is None:
            return False
        try:
            await self._client.setex(DASHBOARD_STATS_KEY, self.dashboard_ttl, stats.model_dump_json())
        except redis.RedisError as e:
            logger.error("Cache write failed for %s: %s", DASHBOARD_STATS_KEY, e)
            return False
        return True

    async def invalidate_dashboard(self) -> int:
        """Drop every dashboard entry after an RBAC mutation.

        Returns:
            Number of keys deleted
        """
        if self._client is None:
            return 0
        try:
            keys = [key async for key in self._client.scan_iter(match=f"{PREFIX_DASHBOARD}:*")]
            return await self._client.delete(*keys) if keys else 0
        except redis.RedisError as e:
            logger.error("Cache invalidation failed: %s", e)
            return 0
