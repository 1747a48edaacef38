"""
Read-Through Orchestrator

Decides, per key, whether to serve from the cache store or the upstream
API, and reconciles the two.

Algorithm:
    read_through(key, url, force_refresh, tree)
        key is None           -> None (no cache, no upstream)
        force_refresh         -> upstream -> normalize -> await write -> return
        otherwise:
            entry = store.get_with_timestamp(key)   (backend error == miss)
            fresh entry       -> return entry.value
            miss / stale      -> upstream -> normalize -> spawn write -> return

Freshness:
    An entry is fresh while `now - written_at <= caching_interval`.

Failure Semantics:
    - Cache backend errors are logged and treated as a miss; they never
      reach the caller, on reads or on writes.
    - UpstreamError propagates, even when a stale entry exists. Stale data
      is never served as an error fallback.

Write Visibility:
    On the normal read path the write is a background task and the value
    is returned without waiting for it. `drain()` waits for every pending
    write; the application calls it at shutdown.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from hn_cache.core.config.constants import ITEM_CHILD_FIELD, Stage
from hn_cache.core.exceptions import CacheBackendError
from hn_cache.core.logging.logger import get_logger, log_stage
from hn_cache.infrastructure.cache.cache_store import CacheStore
from hn_cache.infrastructure.upstream.client import UpstreamClient
from hn_cache.services.normalizer import normalize

logger = get_logger(__name__)


class ReadThroughCache:
    """
    Read-through cache over a CacheStore and an UpstreamClient.

    Attributes:
        caching_interval: Freshness window in seconds
    """

    def __init__(
        self,
        store: CacheStore,
        upstream: UpstreamClient,
        caching_interval: float,
        *,
        child_field: str = ITEM_CHILD_FIELD,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._upstream = upstream
        self.caching_interval = caching_interval
        self._child_field = child_field
        self._clock = clock
        self._pending_writes: set[asyncio.Task] = set()

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def upstream(self) -> UpstreamClient:
        return self._upstream

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def read_through(
        self,
        key: Any,
        url: str,
        *,
        force_refresh: bool = False,
        tree: bool = False,
    ) -> Any:
        """
        Read one entity or listing.

        Args:
            key: Entity ID or category name; None short-circuits to None
            url: Upstream URL for this key
            force_refresh: Skip the cache read and always refetch
            tree: Normalize embedded children before caching

        Returns:
            The (normalized) document, or None

        Raises:
            UpstreamError: When the upstream fetch is needed and fails
        """
        if key is None:
            return None

        cache_key = str(key)

        if force_refresh:
            value, pairs = await self._fetch(cache_key, url, tree)
            await self._write(cache_key, pairs)
            return value

        entry = await self._lookup(cache_key)
        if entry is not None:
            age = entry.age(self._clock())
            if age <= self.caching_interval:
                log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", level="debug", key=cache_key, age=round(age, 3))
                return entry.value
            log_stage(logger, Stage.CACHE_LOOKUP, "Cache entry stale", level="debug", key=cache_key, age=round(age, 3))
        else:
            log_stage(logger, Stage.CACHE_LOOKUP, "Cache miss", level="debug", key=cache_key)

        value, pairs = await self._fetch(cache_key, url, tree)
        self._spawn_write(cache_key, pairs)
        return value

    async def drain(self) -> None:
        """Wait until every background write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _lookup(self, cache_key: str):
        try:
            return await self._store.get_with_timestamp(cache_key)
        except CacheBackendError as e:
            log_stage(
                logger,
                Stage.CACHE_LOOKUP,
                "Cache read failed, falling back to upstream",
                level="warning",
                key=cache_key,
                error=e.message,
                error_type=type(e).__name__,
            )
            return None

    async def _fetch(self, cache_key: str, url: str, tree: bool) -> tuple[Any, list[tuple[str, Any]]]:
        """Fetch from upstream and build every (key, value) pair to persist."""
        document = await self._upstream.fetch(url)

        if not tree:
            return document, [(cache_key, document)]

        normalized = normalize(document, self._child_field)
        if normalized.descendants:
            log_stage(
                logger,
                Stage.NORMALIZATION,
                "Tree normalized",
                level="debug",
                key=cache_key,
                descendants=len(normalized.descendants),
            )
        return normalized.entity, [*normalized.descendants, (cache_key, normalized.entity)]

    async def _write(self, cache_key: str, pairs: list[tuple[str, Any]]) -> None:
        """Persist all pairs with one shared timestamp; never raises backend errors."""
        try:
            await self._store.set_many(pairs, written_at=self._clock())
        except CacheBackendError as e:
            log_stage(
                logger,
                Stage.CACHE_WRITE,
                "Cache write failed",
                level="warning",
                key=cache_key,
                entry_count=len(pairs),
                error=e.message,
                error_type=type(e).__name__,
            )

    def _spawn_write(self, cache_key: str, pairs: list[tuple[str, Any]]) -> None:
        task = asyncio.create_task(self._write(cache_key, pairs))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
