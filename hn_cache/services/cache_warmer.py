"""
Cache Warmer

Background worker that keeps hot listings in the cache ahead of reader
demand.

Architecture:
    CacheWarmer
        ├── refresh loop: run_cycle() at start, then every caching_interval
        └── flush loop:   flush_all() every flush_interval

Refresh Cycle:
    For every configured category, concurrently:
        1. force-refresh the listing
        2. force-refresh its first N items (concurrently)
        3. optionally force-refresh each item's first-level kids

Failure Isolation:
    A failing category is logged and reported in the cycle summary; the
    other categories still complete. Neither loop ever stops on an error
    other than cancellation.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from hn_cache.core.config.constants import ITEM_CHILD_FIELD, Stage
from hn_cache.core.config.settings import Settings
from hn_cache.core.exceptions import CacheBackendError
from hn_cache.core.logging.logger import get_logger, log_stage
from hn_cache.infrastructure.cache.cache_store import CacheStore
from hn_cache.services.content_service import ContentService

logger = get_logger(__name__)


class CacheWarmer:
    """
    Periodic force-refresh of hot categories plus periodic full flush.

    Usage:
        warmer = CacheWarmer(content_service, store, settings)
        await warmer.start()
        ...
        await warmer.stop()
    """

    def __init__(
        self,
        content: ContentService,
        store: CacheStore,
        settings: Settings,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._content = content
        self._store = store
        self._sleep = sleep

        warmer = settings.warmer
        self.categories = list(warmer.WARM_CATEGORIES)
        self.items_per_category = warmer.WARM_ITEMS_PER_CATEGORY
        self.warm_children = warmer.WARM_CHILDREN
        self.refresh_interval = settings.cache.CACHING_INTERVAL
        self.flush_interval = settings.cache.FLUSH_INTERVAL

        self._refresh_task: asyncio.Task | None = None
        self._flush_task: asyncio.Task | None = None
        self.cycles_completed = 0

    @property
    def is_running(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    async def warm_category(self, category: str) -> int:
        """
        Force-refresh one category.

        Returns:
            Number of entities refreshed (listing excluded)

        Raises:
            UpstreamError: When any fetch in the category fails
        """
        listing = await self._content.get_listing(category, force_refresh=True)
        item_ids = list(listing or [])[: self.items_per_category]

        items = await self._content.get_items(item_ids, force_refresh=True)
        refreshed = len(items)

        if self.warm_children:
            kid_ids = [
                kid_id
                for item in items
                if isinstance(item, dict)
                for kid_id in item.get(ITEM_CHILD_FIELD) or []
            ]
            kids = await self._content.get_items(kid_ids, force_refresh=True)
            refreshed += len(kids)

        return refreshed

    async def run_cycle(self) -> dict[str, Any]:
        """
        Refresh every configured category concurrently.

        Returns:
            Summary mapping category -> refreshed count or error message
        """
        log_stage(logger, Stage.WARMING, "Warming cycle started", categories=self.categories)

        results = await asyncio.gather(
            *(self.warm_category(category) for category in self.categories),
            return_exceptions=True,
        )

        summary: dict[str, Any] = {}
        for category, result in zip(self.categories, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                log_stage(
                    logger,
                    Stage.WARMING,
                    "Category warming failed",
                    level="error",
                    category=category,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                summary[category] = {"ok": False, "error": str(result)}
            else:
                summary[category] = {"ok": True, "refreshed": result}

        self.cycles_completed += 1
        log_stage(
            logger,
            Stage.WARMING,
            "Warming cycle finished",
            failed=[category for category, outcome in summary.items() if not outcome["ok"]],
        )
        return summary

    async def _refresh_loop(self) -> None:
        while True:
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Warming cycle crashed", error=str(e), error_type=type(e).__name__, exc_info=True)
            await self._sleep(self.refresh_interval)

    # -------------------------------------------------------------------------
    # Flush
    # -------------------------------------------------------------------------

    async def flush(self) -> bool:
        """Erase the whole cache; returns False when the backend failed."""
        try:
            await self._store.flush_all()
        except CacheBackendError as e:
            log_stage(logger, Stage.FLUSH, "Cache flush failed", level="warning", error=e.message)
            return False
        log_stage(logger, Stage.FLUSH, "Cache flushed")
        return True

    async def _flush_loop(self) -> None:
        while True:
            await self._sleep(self.flush_interval)
            await self.flush()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        if self.is_running:
            return
        self._refresh_task = asyncio.create_task(self._refresh_loop(), name="cache-warmer-refresh")
        self._flush_task = asyncio.create_task(self._flush_loop(), name="cache-warmer-flush")
        logger.info(
            "Cache warmer started",
            categories=self.categories,
            refresh_interval=self.refresh_interval,
            flush_interval=self.flush_interval,
        )

    async def stop(self) -> None:
        tasks = [task for task in (self._refresh_task, self._flush_task) if task is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._refresh_task = None
        self._flush_task = None
        if tasks:
            log_stage(logger, Stage.SHUTDOWN, "Cache warmer stopped")
