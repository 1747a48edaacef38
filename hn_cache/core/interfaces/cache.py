"""
Cache Backend Protocol

This module defines the abstract protocol for the key/value backend that
the cache store sits on, enabling dependency injection and testability.

Architectural Decision: Protocol-based abstraction
- RedisClient is the production implementation
- Tests inject an in-memory stand-in with the same surface
- Type-safe interface with runtime checking
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol defining the operations the cache store needs.

    Values are strings; serialization is the store's concern.
    Every operation raises a CacheBackendError subclass on failure.
    """

    async def connect(self) -> None:
        """
        Establish connection to the cache backend.

        Raises:
            CacheConnectionError: If connection fails
        """
        ...

    async def disconnect(self) -> None:
        """Close connection to the cache backend."""
        ...

    async def get(self, key: str) -> str | None:
        """Get a single value, None if the key does not exist."""
        ...

    async def mget(self, *keys: str) -> list[str | None]:
        """Get several values in one round trip, positionally aligned with keys."""
        ...

    async def mset(self, mapping: dict[str, str]) -> None:
        """Write several keys in one pipelined round trip."""
        ...

    async def flushdb(self) -> None:
        """Erase every key in the configured database."""
        ...

    async def health_check(self) -> dict[str, Any]:
        """Report backend health for the health endpoint."""
        ...
