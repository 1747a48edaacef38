"""
Content Service

The query boundary of the cache: story listings, single items, single
users, and the nested field resolvers of the content schema.

    Query.<category>     -> get_stories(category, first, after)
    Query.item           -> get_item(id)
    Query.user           -> get_user(id)
    Item.kids / parts    -> get_item_kids / get_item_parts
    Item.by              -> get_item_author
    Item.parent / poll   -> get_item_parent / get_item_poll
    User.submitted       -> get_user_submitted

List-valued fields are windowed by the connection builder first, then
the visible IDs are resolved concurrently. If any sibling fails with
UpstreamError the whole list fails; there are no partial pages.
"""

import asyncio
from typing import Any

from hn_cache.core.config.constants import (
    ALL_CATEGORIES,
    ITEM_CHILD_FIELD,
    ITEM_PARTS_FIELD,
    USER_SUBMITTED_FIELD,
    Stage,
)
from hn_cache.core.exceptions import UnknownCategoryError
from hn_cache.core.logging.logger import get_logger, log_stage
from hn_cache.services.connection import Connection, paginate
from hn_cache.services.read_through import ReadThroughCache

logger = get_logger(__name__)


class ContentService:
    """Entry operations over the read-through cache."""

    def __init__(self, cache: ReadThroughCache, max_page_size: int):
        self._cache = cache
        self._upstream = cache.upstream
        self.max_page_size = max_page_size

    # -------------------------------------------------------------------------
    # Single entities
    # -------------------------------------------------------------------------

    async def get_item(self, item_id: Any, *, force_refresh: bool = False) -> dict[str, Any] | None:
        if item_id is None:
            return None
        return await self._cache.read_through(
            item_id,
            self._upstream.item_url(item_id),
            force_refresh=force_refresh,
            tree=True,
        )

    async def get_user(self, user_id: Any, *, force_refresh: bool = False) -> dict[str, Any] | None:
        if user_id is None:
            return None
        return await self._cache.read_through(
            user_id,
            self._upstream.user_url(user_id),
            force_refresh=force_refresh,
        )

    async def get_items(self, item_ids: list[Any], *, force_refresh: bool = False) -> list[Any]:
        """Resolve sibling IDs concurrently, preserving order."""
        return list(
            await asyncio.gather(
                *(self.get_item(item_id, force_refresh=force_refresh) for item_id in item_ids)
            )
        )

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def get_listing(self, category: str, *, force_refresh: bool = False) -> list[Any] | None:
        """Raw ID sequence of a category."""
        if category not in ALL_CATEGORIES:
            raise UnknownCategoryError(
                message=f"Unknown story category '{category}'",
                details={"category": category, "expected": ALL_CATEGORIES},
            )
        return await self._cache.read_through(
            category,
            self._upstream.listing_url(category),
            force_refresh=force_refresh,
        )

    async def get_stories(self, category: str, first: int | None = None, after: Any = None) -> Connection:
        listing = await self.get_listing(category)
        return await self._resolve_connection(listing, first, after)

    # -------------------------------------------------------------------------
    # Nested fields
    # -------------------------------------------------------------------------

    async def get_item_kids(self, item: dict[str, Any] | None, first: int | None = None, after: Any = None) -> Connection:
        return await self._resolve_connection(_field(item, ITEM_CHILD_FIELD), first, after)

    async def get_item_parts(self, item: dict[str, Any] | None, first: int | None = None, after: Any = None) -> Connection:
        return await self._resolve_connection(_field(item, ITEM_PARTS_FIELD), first, after)

    async def get_user_submitted(self, user: dict[str, Any] | None, first: int | None = None, after: Any = None) -> Connection:
        return await self._resolve_connection(_field(user, USER_SUBMITTED_FIELD), first, after)

    async def get_item_author(self, item: dict[str, Any] | None) -> dict[str, Any] | None:
        return await self.get_user(_field(item, "by"))

    async def get_item_parent(self, item: dict[str, Any] | None) -> dict[str, Any] | None:
        return await self.get_item(_field(item, "parent"))

    async def get_item_poll(self, item: dict[str, Any] | None) -> dict[str, Any] | None:
        return await self.get_item(_field(item, "poll"))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _resolve_connection(self, ids: list[Any] | None, first: int | None, after: Any) -> Connection:
        connection = paginate(ids, first=first, after=after, max_page_size=self.max_page_size)
        log_stage(
            logger,
            Stage.PAGINATION,
            "Window computed",
            level="debug",
            count=connection.count,
            window=len(connection.edges),
        )
        return connection.with_edges(await self.get_items(connection.edges))


def _field(entity: dict[str, Any] | None, name: str) -> Any:
    if not isinstance(entity, dict):
        return None
    return entity.get(name)
