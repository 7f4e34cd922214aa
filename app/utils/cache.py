import json
import logging
import redis
from typing import Iterable, Optional, Any

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


class CacheService:
    """
    JSON cache in front of the product detail reads.

    Every operation is best effort: Redis failures are treated as a cache
    miss (or a no-op write) so the database stays the source of truth.
    """

    def __init__(self, client: redis.Redis = None, ttl: int = None):
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL

    @staticmethod
    def key_for(prefix: str, key: str) -> str:
        return f"{prefix}:{key}"

    def get(self, prefix: str, key: str) -> Optional[Any]:
        """Decoded value stored under ``prefix:key``, or None on a miss."""
        try:
            raw = self.client.get(self.key_for(prefix, key))
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {prefix}:{key}: {e}")
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def set(self, prefix: str, key: str, value: Any, ttl: int = None) -> bool:
        """Store ``value`` as JSON; Decimals and datetimes go in as strings."""
        try:
            payload = json.dumps(value, default=str)
        except TypeError:
            return False
        try:
            self.client.setex(self.key_for(prefix, key), ttl or self.ttl, payload)
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {prefix}:{key}: {e}")
            return False
        return True

    def delete(self, prefix: str, key: str) -> bool:
        try:
            self.client.delete(self.key_for(prefix, key))
        except redis.RedisError as e:
            logger.warning(f"Cache invalidation failed for {prefix}:{key}: {e}")
            return False
        return True

    def delete_many(self, prefix: str, keys: Iterable) -> None:
        for key in keys:
            self.delete(prefix, str(key))


cache_service = CacheService()
