"""
Cache Infrastructure

- **redis_client.py**: pooled async Redis client (CacheBackend implementation)
- **cache_store.py**: JSON values with "{key}:time" write timestamps
"""

from hn_cache.infrastructure.cache.cache_store import CacheEntry, CacheStore, time_key
from hn_cache.infrastructure.cache.redis_client import RedisClient

__all__ = ["CacheEntry", "CacheStore", "RedisClient", "time_key"]
