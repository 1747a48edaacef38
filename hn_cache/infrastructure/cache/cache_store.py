"""
Cache Store

Key/value store with a per-key write timestamp, layered over a
CacheBackend (Redis in production).

Persisted layout:
    "{key}"       -> JSON document (entity or listing)
    "{key}:time"  -> epoch seconds of the last write

There is no TTL at the storage layer. Freshness is a read-time decision
made by the read-through orchestrator from the stored timestamp, and the
whole keyspace is erased periodically by flush_all().
"""

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import orjson

from hn_cache.core.config.constants import CACHE_TIME_SUFFIX
from hn_cache.core.exceptions import CacheSerializationError
from hn_cache.core.interfaces.cache import CacheBackend
from hn_cache.core.logging.logger import get_logger

logger = get_logger(__name__)


def time_key(key: str) -> str:
    """Companion key holding the write timestamp of `key`."""
    return f"{key}{CACHE_TIME_SUFFIX}"


@dataclass(frozen=True)
class CacheEntry:
    """A cached value together with the moment it was written."""

    value: Any
    written_at: float

    def age(self, now: float) -> float:
        return now - self.written_at


class CacheStore:
    """
    JSON cache store with write timestamps.

    All methods raise CacheBackendError (or a subclass) when the backend
    is unreachable or a payload is corrupt. Callers on the read path are
    expected to absorb those errors.
    """

    def __init__(self, backend: CacheBackend, clock: Callable[[], float] = time.time):
        self._backend = backend
        self._clock = clock

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @staticmethod
    def _dumps(value: Any) -> str:
        return orjson.dumps(value).decode("utf-8")

    @staticmethod
    def _loads(key: str, raw: str) -> Any:
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise CacheSerializationError(
                message=f"Corrupt cache payload under '{key}'",
                details={"key": key, "error": str(e)},
            ) from e

    @staticmethod
    def _parse_time(key: str, raw: str) -> float:
        try:
            return float(raw)
        except ValueError as e:
            raise CacheSerializationError(
                message=f"Corrupt cache timestamp under '{time_key(key)}'",
                details={"key": key, "raw": raw},
            ) from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """
        Get the decoded value stored under `key`.

        Returns None when the key is absent. A stored JSON null also
        decodes to None; use get_with_timestamp() to tell them apart.
        """
        raw = await self._backend.get(key)
        if raw is None:
            return None
        return self._loads(key, raw)

    async def get_with_timestamp(self, key: str) -> CacheEntry | None:
        """
        Get value and write timestamp in one round trip.

        Returns:
            CacheEntry, or None when either half of the pair is missing
        """
        raw_value, raw_time = await self._backend.mget(key, time_key(key))
        if raw_value is None or raw_time is None:
            return None
        return CacheEntry(
            value=self._loads(key, raw_value),
            written_at=self._parse_time(key, raw_time),
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def set(self, key: str, value: Any, written_at: float | None = None) -> float:
        """
        Store `value` under `key` and stamp it.

        Returns:
            The timestamp that was written
        """
        return await self.set_many([(key, value)], written_at=written_at)

    async def set_many(
        self, pairs: Iterable[tuple[str, Any]], written_at: float | None = None
    ) -> float:
        """
        Store several entries with one shared timestamp in a single batch.

        Later pairs win when a key appears more than once.

        Returns:
            The timestamp that was written
        """
        stamp = self._clock() if written_at is None else written_at
        stamp_raw = repr(float(stamp))

        mapping: dict[str, str] = {}
        for key, value in pairs:
            mapping[key] = self._dumps(value)
            mapping[time_key(key)] = stamp_raw

        if mapping:
            await self._backend.mset(mapping)
            logger.debug("Cache entries written", entry_count=len(mapping) // 2)

        return stamp

    async def flush_all(self) -> None:
        """Erase every entry (values and timestamps)."""
        await self._backend.flushdb()
        logger.info("Cache flushed")
