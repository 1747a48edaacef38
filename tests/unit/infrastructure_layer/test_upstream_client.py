"""
Unit Tests for the Upstream API Client

Tests URL templates, decoding and the fixed-delay retry budget.
"""

import asyncio

import httpx
import pytest

from hn_cache.core.exceptions import UpstreamError
from hn_cache.infrastructure.upstream.client import UpstreamClient

BASE_URL = "http://hn.test/v0"


@pytest.mark.unit
class TestUrls:
    """URL templates."""

    def test_item_url(self, upstream_client):
        assert upstream_client.item_url(8863) == f"{BASE_URL}/item/8863.json"

    def test_user_url(self, upstream_client):
        assert upstream_client.user_url("pg") == f"{BASE_URL}/user/pg.json"

    def test_listing_url(self, upstream_client):
        assert upstream_client.listing_url("topstories") == f"{BASE_URL}/topstories.json"

    def test_trailing_slash_stripped(self, settings):
        settings.UPSTREAM_BASE_URL = f"{BASE_URL}/"

        client = UpstreamClient(settings)

        assert client.base_url == BASE_URL


@pytest.mark.unit
class TestFetch:
    """Successful fetches."""

    @pytest.mark.asyncio
    async def test_fetch_decodes_document(self, upstream_client, upstream_api):
        upstream_api.add_item({"id": 8863, "type": "story"})

        document = await upstream_client.fetch(upstream_client.item_url(8863))

        assert document == {"id": 8863, "type": "story"}
        assert upstream_api.calls["item/8863.json"] == 1

    @pytest.mark.asyncio
    async def test_null_body_is_none(self, upstream_client, retry_sleep):
        assert await upstream_client.fetch(upstream_client.item_url(1)) is None
        retry_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_listing_is_a_list(self, upstream_client, upstream_api):
        upstream_api.add_listing("beststories", [3, 1, 2])

        assert await upstream_client.fetch(upstream_client.listing_url("beststories")) == [3, 1, 2]

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, settings, upstream_api):
        async with UpstreamClient(settings, transport=httpx.MockTransport(upstream_api.handler)) as client:
            upstream_api.add_user({"id": "pg"})
            assert await client.fetch(client.user_url("pg")) == {"id": "pg"}

        assert client._client is None


@pytest.mark.unit
class TestRetries:
    """Bounded retry budget."""

    @pytest.mark.asyncio
    async def test_exhausted_budget_raises_upstream_error(self, upstream_client, upstream_api, retry_sleep):
        upstream_api.failing.add("item/1.json")

        with pytest.raises(UpstreamError) as exc_info:
            await upstream_client.fetch(upstream_client.item_url(1))

        assert upstream_api.calls["item/1.json"] == 4
        assert retry_sleep.await_count == 3
        for call in retry_sleep.await_args_list:
            assert call.args == (0.5,)

        error = exc_info.value
        assert error.details["attempts"] == 4
        assert error.details["url"] == upstream_client.item_url(1)
        assert error.details["original_error"] == "HTTPStatusError"
        assert isinstance(error.__cause__, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self, settings, retry_sleep):
        responses = iter([httpx.Response(503), httpx.Response(200, json={"id": 2})])

        client = UpstreamClient(
            settings,
            transport=httpx.MockTransport(lambda request: next(responses)),
            sleep=retry_sleep,
        )

        assert await client.fetch(client.item_url(2)) == {"id": 2}
        assert retry_sleep.await_count == 1
        await client.close()

    @pytest.mark.asyncio
    async def test_undecodable_body_is_retried(self, settings, retry_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, content=b"<html>")

        client = UpstreamClient(settings, transport=httpx.MockTransport(handler), sleep=retry_sleep)

        with pytest.raises(UpstreamError):
            await client.fetch(client.item_url(2))

        assert len(calls) == 4
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_is_retried(self, settings, retry_sleep):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = UpstreamClient(settings, transport=httpx.MockTransport(handler), sleep=retry_sleep)

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch(client.item_url(2))

        assert exc_info.value.details["original_error"] == "ConnectError"
        await client.close()

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self, settings, upstream_api, retry_sleep):
        settings.UPSTREAM_MAX_RETRIES = 0
        upstream_api.failing.add("item/1.json")
        client = UpstreamClient(settings, transport=httpx.MockTransport(upstream_api.handler), sleep=retry_sleep)

        with pytest.raises(UpstreamError):
            await client.fetch(client.item_url(1))

        assert upstream_api.calls["item/1.json"] == 1
        retry_sleep.assert_not_awaited()
        await client.close()


@pytest.mark.unit
class TestConcurrency:
    """In-flight request bound."""

    @pytest.mark.asyncio
    async def test_fan_out_is_bounded(self, settings):
        settings.UPSTREAM_MAX_CONCURRENCY = 3
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            for _ in range(5):
                await asyncio.sleep(0)
            in_flight -= 1
            return httpx.Response(200, json={"url": str(request.url)})

        async with UpstreamClient(settings, transport=httpx.MockTransport(handler)) as client:
            documents = await asyncio.gather(*(client.fetch(client.item_url(i)) for i in range(50)))

        assert len(documents) == 50
        assert peak == 3
