"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API)
        ├── ConnectionManager (Connection lifecycle)
        ├── OperationExecutor (Command execution with error handling)
        └── HealthMonitor (Health checks)

The client is constructed once by the application lifespan and injected
into the cache store. Every Redis failure is re-raised as a
CacheBackendError subclass so callers only deal with one exception family.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from hn_cache.core.config.settings import Settings, get_settings
from hn_cache.core.exceptions import CacheBackendError, CacheConnectionError
from hn_cache.core.logging.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# Handles connection lifecycle and pooling
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    Responsibility: Connection establishment, pooling, and cleanup.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        Returns:
            redis.Redis: Connected Redis client

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return self._client

        # Leftovers of a failed attempt
        if self._pool is not None:
            await self.disconnect()

        redis_settings = self._settings.redis

        try:
            self._pool = ConnectionPool(
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
                db=redis_settings.REDIS_DB,
                password=redis_settings.REDIS_PASSWORD,
                max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=redis_settings.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
                health_check_interval=redis_settings.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,  # Return strings instead of bytes
            )
            self._client = redis.Redis(connection_pool=self._pool)

            # Verify the connection is actually working
            await self._client.ping()

            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
                db=redis_settings.REDIS_DB,
                max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
            )

            return self._client

        except (ConnectionError, TimeoutError, OSError) as e:
            logger.error("Failed to connect to Redis", error=str(e))
            raise CacheConnectionError.from_exception(
                e,
                message=f"Failed to connect to Redis: {e}",
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
            ) from e

    async def disconnect(self) -> None:
        """Close Redis client and pool."""
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        logger.info("Redis disconnected")

    def get_client(self) -> redis.Redis | None:
        return self._client

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTION
# Command execution with consistent error handling
# =============================================================================


class OperationExecutor:
    """
    Executes Redis operations with consistent error handling.

    Error Handling Strategy:
    - Catch RedisError exceptions
    - Log error with context (operation, key count)
    - Raise CacheBackendError with details
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            logger.error("Redis GET failed", key=key, error=str(e))
            raise CacheBackendError(message=f"Redis GET failed: {e}", details={"key": key}) from e

    async def mget(self, *keys: str) -> list[str | None]:
        try:
            return await self._redis.mget(keys)
        except RedisError as e:
            logger.error("Redis MGET failed", keys=keys, error=str(e))
            raise CacheBackendError(message=f"Redis MGET failed: {e}", details={"keys": list(keys)}) from e

    async def mset(self, mapping: dict[str, str]) -> None:
        """
        Write all keys through one non-transactional pipeline.

        Single network round trip; no atomicity across keys is needed
        because every write is idempotent.
        """
        if not mapping:
            return
        try:
            async with self._redis.pipeline(transaction=False) as pipe:
                for key, value in mapping.items():
                    pipe.set(key, value)
                await pipe.execute()
        except RedisError as e:
            logger.error("Redis pipelined SET failed", key_count=len(mapping), error=str(e))
            raise CacheBackendError(
                message=f"Redis pipelined SET failed: {e}",
                details={"key_count": len(mapping)},
            ) from e

    async def flushdb(self) -> None:
        try:
            await self._redis.flushdb()
        except RedisError as e:
            logger.error("Redis FLUSHDB failed", error=str(e))
            raise CacheBackendError(message=f"Redis FLUSHDB failed: {e}") from e


# =============================================================================
# LAYER 3: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """Reports Redis health with ping latency."""

    def __init__(self, connection_manager: ConnectionManager, settings: Settings):
        self._conn_mgr = connection_manager
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        """
        Returns:
            Dict with health status and ping latency
        """
        health = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if not client or not self._conn_mgr.is_connected():
            health["status"] = "unhealthy"
            health["error"] = "Client not connected"
            return health

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except (RedisError, OSError) as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis client with connection pooling and health checks.

    Implements the CacheBackend protocol.

    Usage:
        client = RedisClient(settings)
        await client.connect()

        await client.mset({"8863": "{...}", "8863:time": "1700000000.0"})
        value, written_at = await client.mget("8863", "8863:time")

        await client.disconnect()
    """

    def __init__(self, settings: Settings | None = None, *, clock: Callable[[], float] = time.monotonic):
        self._settings = settings or get_settings()
        self._clock = clock

        self._conn_mgr = ConnectionManager(self._settings)
        self._executor: OperationExecutor | None = None
        self._health_monitor = HealthMonitor(self._conn_mgr, self._settings)
        self._last_connect_attempt: float | None = None
        self._connect_lock = asyncio.Lock()

    async def connect(self) -> None:
        """
        Raises:
            CacheConnectionError: If connection fails
        """
        self._last_connect_attempt = self._clock()
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        await self._conn_mgr.disconnect()
        self._executor = None

    async def _ensure_executor(self) -> OperationExecutor:
        """
        Return the executor, reconnecting first if the client is down.

        Reconnect attempts are spaced at least REDIS_RECONNECT_INTERVAL
        seconds apart; calls in between fail fast without touching Redis.
        """
        if self._executor is not None:
            return self._executor

        interval = self._settings.redis.REDIS_RECONNECT_INTERVAL
        async with self._connect_lock:
            if self._executor is not None:
                return self._executor

            last = self._last_connect_attempt
            if last is not None and self._clock() - last < interval:
                raise CacheConnectionError(
                    message="Redis client is not connected",
                    details={
                        "host": self._settings.redis.REDIS_HOST,
                        "port": self._settings.redis.REDIS_PORT,
                        "retry_in": round(interval - (self._clock() - last), 3),
                    },
                )

            try:
                await self.connect()
            except CacheConnectionError as e:
                raise e.with_context(retry_in=interval)

            logger.info("Redis reconnected", host=self._settings.redis.REDIS_HOST)
            return self._executor

    async def get(self, key: str) -> str | None:
        return await (await self._ensure_executor()).get(key)

    async def mget(self, *keys: str) -> list[str | None]:
        return await (await self._ensure_executor()).mget(*keys)

    async def mset(self, mapping: dict[str, str]) -> None:
        await (await self._ensure_executor()).mset(mapping)

    async def flushdb(self) -> None:
        await (await self._ensure_executor()).flushdb()

    async def health_check(self) -> dict[str, Any]:
        return await self._health_monitor.health_check()
