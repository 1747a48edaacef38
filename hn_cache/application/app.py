#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Configures the FastAPI application, builds the cache components in the
lifespan, and registers routes, middleware and exception handlers.

Component Lifecycle:
    startup:  RedisClient -> CacheStore -> UpstreamClient -> ReadThroughCache
              -> ContentService -> CacheWarmer (started)
    shutdown: warmer stopped -> pending cache writes drained
              -> upstream client closed -> Redis disconnected

Components live on `app.state`; nothing is a module-level singleton.
"""

import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hn_cache.application.api.routes.content import router as content_router
from hn_cache.application.api.routes.health import router as health_router
from hn_cache.core.config.constants import HEADER_REQUEST_ID, Stage
from hn_cache.core.config.settings import Settings, get_settings
from hn_cache.core.exceptions import (
    CacheConnectionError,
    HNCacheError,
    UnknownCategoryError,
    UpstreamError,
)
from hn_cache.core.interfaces.cache import CacheBackend
from hn_cache.core.logging.logger import (
    clear_request_id,
    get_logger,
    log_stage,
    set_request_id,
    setup_logging,
)
from hn_cache.infrastructure.cache.cache_store import CacheStore
from hn_cache.infrastructure.cache.redis_client import RedisClient
from hn_cache.infrastructure.upstream.client import UpstreamClient
from hn_cache.services.cache_warmer import CacheWarmer
from hn_cache.services.content_service import ContentService
from hn_cache.services.read_through import ReadThroughCache

logger = get_logger(__name__)


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    *,
    cache_backend: CacheBackend | None = None,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings override (defaults to the global settings)
        cache_backend: Backend override (defaults to a pooled RedisClient)
        upstream_transport: httpx transport override for the upstream client

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

        log_stage(
            logger,
            Stage.INITIALIZATION,
            "Starting HN cache service",
            environment=settings.app.ENVIRONMENT,
            version=settings.app.APP_VERSION,
        )

        backend = cache_backend or RedisClient(settings)
        try:
            await backend.connect()
        except CacheConnectionError as e:
            # Reads degrade to upstream fetches until Redis is back
            logger.warning("Cache backend unavailable at startup", error=e.message)

        store = CacheStore(backend)
        upstream = UpstreamClient(settings, transport=upstream_transport)
        await upstream.connect()

        cache = ReadThroughCache(store, upstream, settings.cache.CACHING_INTERVAL)
        content = ContentService(cache, settings.cache.MAX_PAGE_SIZE)
        warmer = CacheWarmer(content, store, settings)

        app.state.settings = settings
        app.state.cache_backend = backend
        app.state.cache_store = store
        app.state.read_through = cache
        app.state.content_service = content
        app.state.cache_warmer = warmer

        if settings.warmer.WARMER_ENABLED:
            await warmer.start()

        logger.info("Application startup complete")

        try:
            yield
        finally:
            log_stage(logger, Stage.SHUTDOWN, "Shutting down application")

            await warmer.stop()
            await cache.drain()
            await upstream.close()
            await backend.disconnect()

            logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Read-through cache for the Hacker News content API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ========================================================================
    # Middleware
    # ========================================================================

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Inject a request ID into the logging context for correlation."""
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)
        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        logger.error("Upstream unavailable", path=request.url.path, **exc.details)
        return JSONResponse(status_code=502, content=exc.to_dict())

    @app.exception_handler(UnknownCategoryError)
    async def unknown_category_handler(request: Request, exc: UnknownCategoryError):
        return JSONResponse(status_code=404, content=exc.to_dict())

    @app.exception_handler(HNCacheError)
    async def service_error_handler(request: Request, exc: HNCacheError):
        logger.error(f"Service exception: {exc.message}", error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content=exc.to_dict())

    # ========================================================================
    # Routes
    # ========================================================================

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{settings.app.API_PREFIX}/health",
        }

    app.include_router(health_router, prefix=settings.app.API_PREFIX)
    app.include_router(content_router, prefix=settings.app.API_PREFIX)

    return app


# Create application instance
app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "hn_cache.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
