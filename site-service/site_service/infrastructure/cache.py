"""
Redis cache for Site Service
"""
import redis.asyncio as redis
from typing import Optional, List, Dict, Any
import logging
import json

from ..config import settings
from ..domain.models import ContentKind
from ..domain.repositories import IPreferenceStore

logger = logging.getLogger(__name__)


class RedisCache(IPreferenceStore):
    """Redis cache manager for category lists and visitor preferences"""

    def __init__(self):
        self.client: Optional[redis.Redis] = None

    async def connect(self):
        """Connect to Redis"""
        if not settings.REDIS_ENABLED:
            logger.warning("Redis is disabled")
            return

        try:
            self.client = redis.from_url(
                f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}",
                password=settings.REDIS_PASSWORD if settings.REDIS_PASSWORD else None,
                encoding="utf-8",
                decode_responses=True,
            )
            # Test connection
            await self.client.ping()
            logger.info("Redis cache connected successfully")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.client = None

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Redis cache disconnected")

    def _categories_key(self, kind: ContentKind) -> str:
        """Get Redis key for a category list"""
        return f"categories:{kind.value}"

    def _preference_key(self, key: str) -> str:
        """Get Redis key for a visitor preference"""
        return f"pref:{key}"

    async def get_categories(self, kind: ContentKind) -> Optional[List[Dict[str, Any]]]:
        """Get cached category list"""
        if not self.client:
            return None

        try:
            data = await self.client.get(self._categories_key(kind))
            return json.loads(data) if data else None
        except Exception as e:
            logger.error(f"Failed to get categories from cache: {e}")
            return None

    async def set_categories(
        self,
        kind: ContentKind,
        categories: List[Dict[str, Any]],
        ttl: int = None
    ) -> bool:
        """Cache a category list"""
        if not self.client:
            return False

        try:
            await self.client.set(
                self._categories_key(kind),
                json.dumps(categories),
                ex=ttl or settings.CATEGORY_CACHE_TTL
            )
            return True
        except Exception as e:
            logger.error(f"Failed to set categories in cache: {e}")
            return False

    async def get(self, key: str) -> Optional[str]:
        """Get a stored preference"""
        if not self.client:
            return None

        try:
            return await self.client.get(self._preference_key(key))
        except Exception as e:
            logger.error(f"Failed to get preference {key}: {e}")
            return None

    async def set(self, key: str, value: str) -> bool:
        """Store a preference"""
        if not self.client:
            return False

        try:
            await self.client.set(
                self._preference_key(key), value, ex=settings.PREFERENCE_TTL
            )
            return True
        except Exception as e:
            logger.error(f"Failed to set preference {key}: {e}")
            return False


class MemoryPreferenceStore(IPreferenceStore):
    """Process-local preference store, for sessions without a visitor id"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._values[key] = value
        return True


# Global cache instance
cache = RedisCache()


async def get_cache() -> RedisCache:
    """Dependency for getting cache instance"""
    return cache
