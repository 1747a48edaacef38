"""
Pytest Configuration and Shared Test Fixtures

This module provides reusable fixtures for all tests:
- settings pointed at a fake upstream host, warmer disabled
- an in-memory stand-in for the Redis backend
- a scriptable upstream API served through httpx.MockTransport
- a controllable clock
"""

import os
import sys
from collections import Counter
from typing import Any
from unittest.mock import AsyncMock

import httpx
import orjson
import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from hn_cache.core.config.settings import Settings  # noqa: E402
from hn_cache.core.exceptions import CacheBackendError  # noqa: E402
from hn_cache.infrastructure.cache.cache_store import CacheStore  # noqa: E402
from hn_cache.infrastructure.upstream.client import UpstreamClient  # noqa: E402
from hn_cache.services.content_service import ContentService  # noqa: E402
from hn_cache.services.read_through import ReadThroughCache  # noqa: E402

BASE_URL = "http://hn.test/v0"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the process environment's .env file."""
    return Settings(
        _env_file=None,
        UPSTREAM_BASE_URL=BASE_URL,
        UPSTREAM_MAX_RETRIES=3,
        UPSTREAM_RETRY_DELAY=0.5,
        CACHING_INTERVAL=300,
        FLUSH_INTERVAL=86400,
        MAX_PAGE_SIZE=20,
        WARMER_ENABLED=False,
        WARM_CATEGORIES=["topstories", "newstories"],
        WARM_ITEMS_PER_CATEGORY=2,
        WARM_CHILDREN=True,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


class FakeClock:
    """Monotonic test clock, advanced explicitly."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ============================================================================
# Cache Backend Fixtures
# ============================================================================


class InMemoryRedis:
    """
    In-memory stand-in for RedisClient.

    Set `fail = True` to make every operation raise CacheBackendError,
    mimicking an unreachable server.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.fail = False
        self.connected = False
        self.mset_calls = 0
        self.flushes = 0

    def _check(self):
        if self.fail:
            raise CacheBackendError("Redis unavailable", details={"host": "memory"})

    async def connect(self):
        self._check()
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def mget(self, *keys):
        self._check()
        return [self.data.get(key) for key in keys]

    async def mset(self, mapping):
        self._check()
        self.mset_calls += 1
        self.data.update(mapping)

    async def flushdb(self):
        self._check()
        self.flushes += 1
        self.data.clear()

    async def health_check(self):
        if self.fail:
            return {"status": "unhealthy", "type": "in_memory", "error": "Redis unavailable"}
        return {"status": "healthy", "type": "in_memory"}


@pytest.fixture
def redis_backend():
    return InMemoryRedis()


@pytest.fixture
def cache_store(redis_backend, clock):
    return CacheStore(redis_backend, clock=clock)


# ============================================================================
# Upstream Fixtures
# ============================================================================


class FakeUpstreamAPI:
    """
    Scriptable upstream API.

    Documents are registered by path relative to the base URL
    ("item/1.json", "topstories.json"). Unknown paths answer `null`, as
    the real API does. Paths in `failing` answer HTTP 500.
    """

    def __init__(self):
        self.documents: dict[str, Any] = {}
        self.failing: set[str] = set()
        self.calls: Counter = Counter()

    def add_item(self, item: dict[str, Any]) -> None:
        self.documents[f"item/{item['id']}.json"] = item

    def add_user(self, user: dict[str, Any]) -> None:
        self.documents[f"user/{user['id']}.json"] = user

    def add_listing(self, category: str, ids: list[int]) -> None:
        self.documents[f"{category}.json"] = ids

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v0/")
        self.calls[path] += 1
        if path in self.failing:
            return httpx.Response(500, json={"error": "boom"})
        return httpx.Response(200, content=orjson.dumps(self.documents.get(path)))

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture
def upstream_api():
    return FakeUpstreamAPI()


@pytest.fixture
def retry_sleep():
    """Records retry delays instead of sleeping."""
    return AsyncMock(return_value=None)


@pytest.fixture
def upstream_client(settings, upstream_api, retry_sleep):
    return UpstreamClient(
        settings,
        transport=httpx.MockTransport(upstream_api.handler),
        sleep=retry_sleep,
    )


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def read_through(cache_store, upstream_client, settings, clock):
    return ReadThroughCache(cache_store, upstream_client, settings.cache.CACHING_INTERVAL, clock=clock)


@pytest.fixture
def content_service(read_through, settings):
    return ContentService(read_through, settings.cache.MAX_PAGE_SIZE)


@pytest.fixture
def story_tree():
    """A story with a two-level embedded comment tree."""
    return {
        "id": 1,
        "type": "story",
        "by": "pg",
        "title": "Launch",
        "kids": [
            {"id": 2, "type": "comment", "by": "sama", "parent": 1, "kids": [{"id": 3, "type": "comment", "parent": 2}]},
            {"id": 4, "type": "comment", "by": "dang", "parent": 1},
        ],
    }
