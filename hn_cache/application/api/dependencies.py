"""
FastAPI Dependency Injection Module

Route handlers receive the components built in the application lifespan
through these providers instead of importing globals. Tests swap them via
`app.dependency_overrides`.
"""

from typing import Annotated

from fastapi import Depends, Request

from hn_cache.core.interfaces.cache import CacheBackend
from hn_cache.services.content_service import ContentService
from hn_cache.services.read_through import ReadThroughCache


def get_content_service(request: Request) -> ContentService:
    """Retrieve the ContentService created during startup."""
    return request.app.state.content_service


def get_read_through(request: Request) -> ReadThroughCache:
    return request.app.state.read_through


def get_cache_backend(request: Request) -> CacheBackend:
    return request.app.state.cache_backend


ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
ReadThroughDep = Annotated[ReadThroughCache, Depends(get_read_through)]
CacheBackendDep = Annotated[CacheBackend, Depends(get_cache_backend)]
