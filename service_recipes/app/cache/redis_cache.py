"""
Redis caching layer for Recipes Service.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import CacheError
from ..recipes.interfaces import ListingCache


class RedisListingCache(ListingCache):
    """Redis-backed cache for serialized recipe listings.

    Values are stored as raw bytes without expiry unless a TTL is given.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("recipes.cache.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        """Start the Redis cache."""
        try:
            if self.redis is None:
                self.redis = redis.from_url(
                    self.redis_url,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30
                )

            # Test connection
            await self.redis.ping()

            self.logger.info("Redis cache started")

        except RedisError as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise CacheError("Failed to connect to Redis", {"reason": str(e)}) from e

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def get(self, key: str) -> Optional[bytes]:
        """Get a cached value; ``None`` means the key is absent."""
        try:
            value = await self._client().get(key)
        except RedisError as e:
            self.logger.error("Error reading cache", key=key, error=str(e))
            raise CacheError("Error reading cache", {"key": key, "reason": str(e)}) from e

        if value is None:
            self.logger.debug("Cache miss", key=key)
        else:
            self.logger.debug("Cache hit", key=key)
        return value

    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        """Cache a value, without expiry when ``ttl`` is None."""
        try:
            await self._client().set(key, value, ex=ttl)
        except RedisError as e:
            self.logger.error("Error writing cache", key=key, error=str(e))
            raise CacheError("Error writing cache", {"key": key, "reason": str(e)}) from e

        self.logger.debug("Cached value", key=key, size=len(value), ttl=ttl)

    async def delete(self, key: str) -> None:
        """Delete a key. Absent keys are fine."""
        try:
            removed = await self._client().delete(key)
        except RedisError as e:
            self.logger.error("Error deleting cache key", key=key, error=str(e))
            raise CacheError("Error deleting cache key", {"key": key, "reason": str(e)}) from e

        self.logger.debug("Deleted cache key", key=key, removed=removed)

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis is None:
            return False
        try:
            await self.redis.ping()
            return True
        except RedisError:
            return False

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise CacheError("Redis cache is not started")
        return self.redis
