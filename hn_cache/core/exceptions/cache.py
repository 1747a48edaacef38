"""
Cache-Related Exceptions

Cache backend failures never reach a reader: the read-through
orchestrator catches every CacheBackendError and falls through to the
upstream fetch.
"""

from hn_cache.core.exceptions.base import HNCacheError


class CacheError(HNCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheBackendError(CacheError):
    """
    Raised when the cache store cannot serve or persist an entry.

    Common causes:
    - Redis server is down or not yet connected
    - Command timeout
    - Corrupt payload under a key
    """
    pass


class CacheConnectionError(CacheBackendError):
    """
    Raised when unable to connect to the cache (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    """
    pass


class CacheSerializationError(CacheBackendError):
    """Raised when a stored value or timestamp cannot be decoded."""
    pass
