"""
API Response Models

Pydantic models for the JSON bodies returned by the content routes.
Entities are passed through as the upstream documents (after
normalization), so they are typed as plain dicts.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hn_cache.services.connection import Connection


class PageInfoModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(alias="hasNextPage")
    has_previous_page: bool = Field(alias="hasPreviousPage")
    start_cursor: Any = Field(default=None, alias="startCursor")
    end_cursor: Any = Field(default=None, alias="endCursor")


class ConnectionModel(BaseModel):
    """A window of resolved entities plus pagination metadata."""

    model_config = ConfigDict(populate_by_name=True)

    page_info: PageInfoModel = Field(alias="pageInfo")
    count: int
    edges: list[dict[str, Any] | None]

    @classmethod
    def from_connection(cls, connection: Connection) -> "ConnectionModel":
        return cls.model_validate(connection.to_dict())


class HealthResponse(BaseModel):
    status: str  # "healthy" or "degraded"
    timestamp: str  # ISO 8601
    version: str
    components: dict | None = None
