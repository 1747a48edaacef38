#!/usr/bin/env python3
"""
Application Startup Script

Checks that Redis answers before starting the FastAPI application. The
service runs without Redis (every read goes upstream), so an unreachable
server is reported but does not abort startup.

Usage:
    python start_app.py
"""

import asyncio
import sys

from hn_cache.core.config.settings import get_settings
from hn_cache.core.exceptions import CacheConnectionError
from hn_cache.infrastructure.cache.redis_client import RedisClient


async def check_redis() -> bool:
    client = RedisClient()
    try:
        await client.connect()
    except CacheConnectionError as e:
        print(f"[!] {e.message}")
        return False
    health = await client.health_check()
    await client.disconnect()
    print(f"[OK] Redis reachable (ping {health['ping_latency_ms']} ms)")
    return True


def main():
    """Start the application after a cache reachability check."""
    settings = get_settings()

    print("=" * 60)
    print(f"{settings.app.APP_NAME} - Startup")
    print("=" * 60)
    print()

    print("Step 1: Checking Redis...")
    if not asyncio.run(check_redis()):
        print("    Continuing without cache; reads will go to the upstream API")

    print("\nStep 2: Starting FastAPI application...")
    print("=" * 60)
    print()

    try:
        import uvicorn

        uvicorn.run(
            "hn_cache.application.app:app",
            host=settings.app.API_HOST,
            port=settings.app.API_PORT,
            reload=settings.app.ENVIRONMENT == "development",
            log_level=settings.logging.LOG_LEVEL.lower()
        )
    except KeyboardInterrupt:
        print("\n\n[!] Shutting down gracefully...")
        sys.exit(0)


if __name__ == "__main__":
    main()
