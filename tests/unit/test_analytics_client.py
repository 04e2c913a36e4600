"""Fire-and-forget analytics client over a mocked HTTP transport."""

from __future__ import annotations

import json

import httpx
import pytest

from geev.analytics.client import AnalyticsClient
from geev.analytics.schemas import EventType

ENDPOINT = "http://analytics.test/api/analytics/events"


def _client(handler, **kwargs) -> AnalyticsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AnalyticsClient(ENDPOINT, http_client=http, **kwargs)


class TestAnalyticsClient:
    @pytest.mark.asyncio
    async def test_fire_posts_event(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"tracked": True})

        client = _client(handler, page_url="/feed")
        client.fire(EventType.LIKE_ADDED, {"postId": "post-1"}, user_id="user-1")
        await client.aclose()

        assert len(requests) == 1
        assert requests[0].headers["x-user-id"] == "user-1"
        body = json.loads(requests[0].content)
        assert body == {"event_type": "like_added", "event_data": {"postId": "post-1"}, "page_url": "/feed"}

    @pytest.mark.asyncio
    async def test_server_error_is_swallowed(self):
        client = _client(lambda request: httpx.Response(500))
        assert await client.track(EventType.PAGE_VIEW) is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_is_swallowed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler)
        client.fire(EventType.PAGE_VIEW)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_disabled_client_sends_nothing(self):
        requests: list[httpx.Request] = []
        client = _client(lambda request: requests.append(request) or httpx.Response(200), enabled=False)
        client.fire(EventType.PAGE_VIEW)
        await client.aclose()
        assert requests == []

    def test_fire_without_event_loop_does_not_raise(self):
        client = AnalyticsClient(ENDPOINT)
        client.fire(EventType.PAGE_VIEW)
