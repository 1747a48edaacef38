"""
Content Routes

Thin HTTP adapter over ContentService.

    GET /stories/{category}?first=&after=
    GET /items/{item_id}
    GET /items/{item_id}/kids?first=&after=
    GET /items/{item_id}/parts?first=&after=
    GET /users/{user_id}
    GET /users/{user_id}/submitted?first=&after=

`after` is the ID of the last element already seen. A missing entity is
a 404; upstream failures are mapped to 502 by the app's exception
handlers.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from hn_cache.application.api.dependencies import ContentServiceDep
from hn_cache.application.api.models import ConnectionModel

router = APIRouter(tags=["Content"])

FirstQuery = Query(default=None, description="Page size, capped at MAX_PAGE_SIZE")
AfterQuery = Query(default=None, description="Cursor: ID of the element to start after")


def _found(entity: dict[str, Any] | None, kind: str, entity_id: Any) -> dict[str, Any]:
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{kind} {entity_id} not found")
    return entity


@router.get("/stories/{category}", response_model=ConnectionModel, response_model_by_alias=True)
async def get_stories(
    category: str,
    content: ContentServiceDep,
    first: int | None = FirstQuery,
    after: str | None = AfterQuery,
):
    connection = await content.get_stories(category, first=first, after=after)
    return ConnectionModel.from_connection(connection)


@router.get("/items/{item_id}")
async def get_item(item_id: int, content: ContentServiceDep) -> dict[str, Any]:
    return _found(await content.get_item(item_id), "Item", item_id)


@router.get("/items/{item_id}/kids", response_model=ConnectionModel, response_model_by_alias=True)
async def get_item_kids(
    item_id: int,
    content: ContentServiceDep,
    first: int | None = FirstQuery,
    after: str | None = AfterQuery,
):
    item = _found(await content.get_item(item_id), "Item", item_id)
    return ConnectionModel.from_connection(await content.get_item_kids(item, first=first, after=after))


@router.get("/items/{item_id}/parts", response_model=ConnectionModel, response_model_by_alias=True)
async def get_item_parts(
    item_id: int,
    content: ContentServiceDep,
    first: int | None = FirstQuery,
    after: str | None = AfterQuery,
):
    item = _found(await content.get_item(item_id), "Item", item_id)
    return ConnectionModel.from_connection(await content.get_item_parts(item, first=first, after=after))


@router.get("/users/{user_id}")
async def get_user(user_id: str, content: ContentServiceDep) -> dict[str, Any]:
    return _found(await content.get_user(user_id), "User", user_id)


@router.get("/users/{user_id}/submitted", response_model=ConnectionModel, response_model_by_alias=True)
async def get_user_submitted(
    user_id: str,
    content: ContentServiceDep,
    first: int | None = FirstQuery,
    after: str | None = AfterQuery,
):
    user = _found(await content.get_user(user_id), "User", user_id)
    return ConnectionModel.from_connection(await content.get_user_submitted(user, first=first, after=after))
