"""
Upstream API Client

Fetches one JSON document per call from the upstream content API
(Hacker News Firebase API by default) with a bounded, fixed-delay retry
budget.

Retry Policy:
-------------
- 1 initial attempt + `max_retries` retries (default 3)
- `retry_delay` seconds between attempts (default 0.5), no backoff, no jitter
- Every failure is retried the same way: transport errors, timeouts,
  non-2xx responses and undecodable bodies
- Attempts run strictly one after another
- At most `max_concurrency` requests are in flight across all callers
- After the last failure an UpstreamError is raised, chained to the last
  underlying error

URL Templates:
--------------
    {base_url}/item/{id}.json
    {base_url}/user/{id}.json
    {base_url}/{category}.json

A JSON `null` body is a successful response meaning "no such entity".

LIFECYCLE MANAGEMENT:
---------------------
```python
async with UpstreamClient(settings) as client:
    story = await client.fetch(client.item_url(8863))
```
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from hn_cache.core.config.constants import RESOURCE_ITEM, RESOURCE_USER, Stage
from hn_cache.core.config.settings import Settings, get_settings
from hn_cache.core.exceptions import UpstreamError
from hn_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

# Tenacity needs a std lib logger
std_logger = logging.getLogger(__name__)


class UpstreamClient:
    """
    Async HTTP client for the upstream content API.

    Attributes:
        base_url: API root without trailing slash
        max_retries: Attempts beyond the first
        retry_delay: Fixed seconds between attempts
        max_concurrency: Requests allowed in flight at once
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            settings: Application settings (defaults to the global settings)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
            sleep: Coroutine used to wait between attempts
        """
        upstream = (settings or get_settings()).upstream

        self.base_url = upstream.UPSTREAM_BASE_URL.rstrip("/")
        self.timeout = upstream.UPSTREAM_TIMEOUT
        self.max_retries = upstream.UPSTREAM_MAX_RETRIES
        self.retry_delay = upstream.UPSTREAM_RETRY_DELAY
        self.max_concurrency = upstream.UPSTREAM_MAX_CONCURRENCY

        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None
        # Caps fan-out from batch resolution; waits between attempts hold no slot
        self._in_flight = asyncio.Semaphore(self.max_concurrency)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the pooled HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
            logger.info(
                "Upstream client initialized",
                base_url=self.base_url,
                max_retries=self.max_retries,
                retry_delay=self.retry_delay,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "UpstreamClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # URL templates
    # -------------------------------------------------------------------------

    def item_url(self, item_id: int | str) -> str:
        return f"{self.base_url}/{RESOURCE_ITEM}/{item_id}.json"

    def user_url(self, user_id: int | str) -> str:
        return f"{self.base_url}/{RESOURCE_USER}/{user_id}.json"

    def listing_url(self, category: str) -> str:
        return f"{self.base_url}/{category}.json"

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def _fetch_once(self, url: str) -> Any:
        if self._client is None:
            await self.connect()

        response = await self._client.get(url)
        response.raise_for_status()
        return orjson.loads(response.content)

    async def fetch(self, url: str) -> Any:
        """
        Fetch and decode one JSON document.

        Returns:
            The decoded document; None when the upstream answers `null`

        Raises:
            UpstreamError: When every attempt failed
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(Exception),
            before_sleep=before_sleep_log(std_logger, logging.WARNING),
            sleep=self._sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    async with self._in_flight:
                        document = await self._fetch_once(url)
                    log_stage(
                        logger,
                        Stage.UPSTREAM_FETCH,
                        "Upstream fetch succeeded",
                        level="debug",
                        url=url,
                        attempt=attempt.retry_state.attempt_number,
                    )
                    return document
        except RetryError as e:
            last_error = e.last_attempt.exception()
            attempts = e.last_attempt.attempt_number
            log_stage(
                logger,
                Stage.UPSTREAM_FETCH,
                "Upstream fetch failed after retries",
                level="error",
                url=url,
                attempts=attempts,
                error=str(last_error),
                error_type=type(last_error).__name__,
            )
            raise UpstreamError.from_exception(
                last_error,
                message=f"Upstream fetch failed after {attempts} attempts: {url}",
                url=url,
                attempts=attempts,
            ) from last_error
