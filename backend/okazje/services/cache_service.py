"""Redis caching service for admin analytics responses.

Cache failures never break a request: reads fall back to a miss and writes
report False, so callers go straight to the database. After a connection
failure Redis is skipped for REDIS_RETRY_INTERVAL seconds instead of paying
the connect timeout on every call.
"""

from typing import Any, Callable, Optional
import json
import time
import structlog

from redis.asyncio import Redis, from_url
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from okazje.config import settings

logger = structlog.get_logger(__name__)

SEGMENT_DISTRIBUTION_KEY = "segments:distribution"


class CacheService:
    """Async Redis cache service with TTL support and health checking."""

    def __init__(
        self,
        redis_url: str,
        retry_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize cache service.

        Args:
            redis_url: Redis connection URL (e.g., "redis://localhost:6379/0")
            retry_interval: Seconds to skip Redis after a connection failure
            clock: Monotonic time source
        """
        self.redis_url = redis_url
        self.retry_interval = (
            settings.REDIS_RETRY_INTERVAL if retry_interval is None else retry_interval
        )
        self.clock = clock
        self._redis: Optional[Redis] = None
        self._unavailable_until = 0.0
        self.logger = logger.bind(service="cache_service")

    async def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            self.logger.info("redis_connection_created", url=self.redis_url)

        return self._redis

    def _skipping(self) -> bool:
        return self.clock() < self._unavailable_until

    def _record_failure(self, error: RedisError) -> None:
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            self._unavailable_until = self.clock() + self.retry_interval

    async def get_json(self, key: str) -> Optional[Any]:
        """Get and decode a JSON value.

        Returns:
            Decoded value, or None if not found, undecodable or on error
        """
        if self._skipping():
            return None

        try:
            redis = await self._get_redis()
            value = await redis.get(key)
        except RedisError as e:
            self._record_failure(e)
            self.logger.error("cache_get_failed", key=key, error=str(e))
            return None

        if value is None:
            self.logger.debug("cache_miss", key=key)
            return None

        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            self.logger.warning("cache_value_corrupt", key=key)
            return None

        self.logger.debug("cache_hit", key=key)
        return decoded

    async def set_json(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Encode ``value`` as JSON and store it with a TTL in seconds.

        Returns:
            True if successful, False on error
        """
        if self._skipping():
            return False

        try:
            redis = await self._get_redis()
            await redis.set(key, json.dumps(value), ex=ttl)
            self.logger.debug("cache_set", key=key, ttl=ttl)
            return True

        except RedisError as e:
            self._record_failure(e)
            self.logger.error("cache_set_failed", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key from cache.

        Returns:
            True if key was deleted, False if not found or error
        """
        if self._skipping():
            return False

        try:
            redis = await self._get_redis()
            result = await redis.delete(key)
            self.logger.debug("cache_delete", key=key, deleted=bool(result))
            return bool(result)

        except RedisError as e:
            self._record_failure(e)
            self.logger.error("cache_delete_failed", key=key, error=str(e))
            return False

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            redis = await self._get_redis()
            await redis.ping()
            return True

        except Exception as e:
            self.logger.error("redis_health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close Redis connection. Called on application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            self.logger.info("redis_connection_closed")


# Global cache instance
_cache_instance: Optional[CacheService] = None


def get_cache_service() -> CacheService:
    """Get or create the process-wide cache service instance."""
    global _cache_instance

    if _cache_instance is None:
        _cache_instance = CacheService(settings.REDIS_URL)
        logger.info("cache_service_initialized", redis_url=settings.REDIS_URL)

    return _cache_instance


async def get_cache() -> CacheService:
    """FastAPI dependency for cache service."""
    return get_cache_service()
