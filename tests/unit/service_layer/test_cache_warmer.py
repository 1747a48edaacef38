"""
Unit Tests for the Cache Warmer

Tests refresh cycles, per-category failure isolation, flushing and the
background task lifecycle.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from hn_cache.services.cache_warmer import CacheWarmer


@pytest.fixture
def warm_api(upstream_api):
    upstream_api.add_listing("topstories", [1, 2, 3])
    upstream_api.add_listing("newstories", [4])
    upstream_api.add_item({"id": 1, "kids": [10, 11]})
    upstream_api.add_item({"id": 2})
    upstream_api.add_item({"id": 3})
    upstream_api.add_item({"id": 4})
    upstream_api.add_item({"id": 10, "parent": 1})
    upstream_api.add_item({"id": 11, "parent": 1})
    return upstream_api


class ScriptedSleep:
    """Records requested delays and cancels the loop after `allowed` sleeps."""

    def __init__(self, allowed: int):
        self.allowed = allowed
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)
        if len(self.delays) > self.allowed:
            raise asyncio.CancelledError


@pytest.fixture
def warmer(content_service, cache_store, settings):
    return CacheWarmer(content_service, cache_store, settings, sleep=AsyncMock(return_value=None))


@pytest.mark.unit
class TestWarmCategory:
    """Single category refresh."""

    @pytest.mark.asyncio
    async def test_refreshes_listing_items_and_kids(self, warmer, warm_api, cache_store):
        refreshed = await warmer.warm_category("topstories")

        # items 1, 2 plus kids 10, 11
        assert refreshed == 4
        assert await cache_store.get("topstories") == [1, 2, 3]
        for key in ("1", "2", "10", "11"):
            assert await cache_store.get(key) is not None
        assert await cache_store.get("3") is None

    @pytest.mark.asyncio
    async def test_bypasses_fresh_entries(self, warmer, warm_api, cache_store):
        await cache_store.set("topstories", [1])

        await warmer.warm_category("topstories")

        assert warm_api.calls["topstories.json"] == 1
        assert await cache_store.get("topstories") == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_children_skipped_when_disabled(self, warmer, warm_api):
        warmer.warm_children = False

        refreshed = await warmer.warm_category("topstories")

        assert refreshed == 2
        assert warm_api.calls["item/10.json"] == 0


@pytest.mark.unit
class TestRunCycle:
    """Concurrent cycles over all categories."""

    @pytest.mark.asyncio
    async def test_cycle_summary(self, warmer, warm_api):
        summary = await warmer.run_cycle()

        assert summary == {
            "topstories": {"ok": True, "refreshed": 4},
            "newstories": {"ok": True, "refreshed": 1},
        }
        assert warmer.cycles_completed == 1

    @pytest.mark.asyncio
    async def test_failing_category_does_not_block_others(self, warmer, warm_api, cache_store):
        warm_api.failing.add("topstories.json")

        summary = await warmer.run_cycle()

        assert summary["topstories"]["ok"] is False
        assert "topstories.json" in summary["topstories"]["error"]
        assert summary["newstories"] == {"ok": True, "refreshed": 1}
        assert await cache_store.get("4") == {"id": 4}


@pytest.mark.unit
class TestFlush:
    """Whole-cache flush."""

    @pytest.mark.asyncio
    async def test_flush_erases_everything(self, warmer, cache_store, redis_backend):
        await cache_store.set("1", {"id": 1})

        assert await warmer.flush() is True
        assert redis_backend.data == {}
        assert redis_backend.flushes == 1

    @pytest.mark.asyncio
    async def test_flush_failure_is_reported(self, warmer, redis_backend):
        redis_backend.fail = True

        assert await warmer.flush() is False


@pytest.mark.unit
class TestLifecycle:
    """Background task start/stop."""

    @pytest.mark.asyncio
    async def test_start_runs_first_cycle_and_stop_cancels(self, content_service, cache_store, settings, warm_api):
        async def park(_seconds):
            await asyncio.Event().wait()

        warmer = CacheWarmer(content_service, cache_store, settings, sleep=park)

        await warmer.start()
        assert warmer.is_running is True

        for _ in range(200):
            if warmer.cycles_completed:
                break
            await asyncio.sleep(0)

        await warmer.stop()

        assert warmer.cycles_completed == 1
        assert warmer.is_running is False

    @pytest.mark.asyncio
    async def test_stop_without_start(self, warmer):
        await warmer.stop()
        assert warmer.is_running is False


@pytest.mark.unit
class TestLoops:
    """Refresh and flush loops driven by a scripted sleep."""

    @pytest.mark.asyncio
    async def test_flush_runs_every_flush_interval(self, content_service, cache_store, settings, redis_backend):
        sleep = ScriptedSleep(allowed=2)
        warmer = CacheWarmer(content_service, cache_store, settings, sleep=sleep)

        with pytest.raises(asyncio.CancelledError):
            await warmer._flush_loop()

        assert redis_backend.flushes == 2
        assert sleep.delays == [settings.FLUSH_INTERVAL] * 3

    @pytest.mark.asyncio
    async def test_flush_waits_before_first_flush(self, content_service, cache_store, settings, redis_backend):
        warmer = CacheWarmer(content_service, cache_store, settings, sleep=ScriptedSleep(allowed=0))

        with pytest.raises(asyncio.CancelledError):
            await warmer._flush_loop()

        assert redis_backend.flushes == 0

    @pytest.mark.asyncio
    async def test_refresh_repeats_after_refresh_interval(self, content_service, cache_store, settings, warm_api):
        sleep = ScriptedSleep(allowed=1)
        warmer = CacheWarmer(content_service, cache_store, settings, sleep=sleep)

        with pytest.raises(asyncio.CancelledError):
            await warmer._refresh_loop()

        assert warmer.cycles_completed == 2
        assert warm_api.calls["topstories.json"] == 2
        assert sleep.delays == [settings.CACHING_INTERVAL] * 2

    @pytest.mark.asyncio
    async def test_refresh_survives_a_crashed_cycle(self, warmer, settings):
        sleep = ScriptedSleep(allowed=1)
        warmer._sleep = sleep
        warmer.run_cycle = AsyncMock(side_effect=[RuntimeError("boom"), {}])

        with pytest.raises(asyncio.CancelledError):
            await warmer._refresh_loop()

        assert warmer.run_cycle.await_count == 2
        assert sleep.delays == [settings.CACHING_INTERVAL] * 2
