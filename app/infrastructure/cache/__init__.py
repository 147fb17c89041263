"""Cache: Redis service used for effective-role lookups."""

from app.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
