"""
Health Check Routes

The service stays up when Redis is down (reads fall through to the
upstream), so a failing cache backend reports "degraded" with HTTP 200
rather than an outage.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from hn_cache.application.api.dependencies import CacheBackendDep, ReadThroughDep
from hn_cache.application.api.models import HealthResponse

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check(request: Request, backend: CacheBackendDep, cache: ReadThroughDep):
    cache_health = await backend.health_check()
    warmer = request.app.state.cache_warmer

    status = "healthy" if cache_health.get("status") == "healthy" else "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=request.app.version,
        components={
            "cache": cache_health,
            "pending_writes": cache.pending_writes,
            "warmer": {
                "running": warmer.is_running,
                "cycles_completed": warmer.cycles_completed,
            },
        },
    )
