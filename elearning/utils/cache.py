"""
Redis cache utility for course catalog responses
"""
import redis
import json
import logging
from typing import Optional, Any, Dict
from elearning.config import settings

logger = logging.getLogger(__name__)

COURSE_LIST_PREFIX = "courses:list"


class CacheService:
    """Redis-based caching service for catalog listings"""

    def __init__(self, redis_url: str):
        self.redis_client = None

        if not redis_url:
            logger.info("REDIS_URL not set. Caching disabled.")
            return

        try:
            self.redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def generate_course_list_key(self, params: Dict[str, Any]) -> str:
        """
        Generate deterministic cache key for a catalog query

        Same query parameters in any order -> same key
        """
        parts = [f"{name}={params[name]}" for name in sorted(params) if params[name] is not None]
        return f"{COURSE_LIST_PREFIX}:{'&'.join(parts)}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.info(f"Cache hit: {key}")
                return json.loads(value)
            logger.info(f"Cache miss: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or settings.COURSE_CACHE_TTL
            self.redis_client.setex(key, ttl, json.dumps(value))
            logger.info(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def clear_course_cache(self) -> bool:
        """Clear every cached catalog listing"""
        if not self.redis_client:
            return False

        try:
            keys = list(self.redis_client.scan_iter(f"{COURSE_LIST_PREFIX}:*"))
            if keys:
                self.redis_client.delete(*keys)
                logger.info(f"Cleared {len(keys)} course cache entries")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False


# Global instance
cache_service = CacheService(settings.REDIS_URL)
