"""Tests for platform posters."""
import json
import random

import httpx
import pytest

from viralclip.config import Settings
from viralclip.services import publish_service
from viralclip.services.publish_service import (
    SimulatedPlatformPoster,
    WebhookPlatformPoster,
    build_platform_posters,
    build_post_payload,
)

from conftest import make_clip


@pytest.fixture
def mock_http(monkeypatch):
    """Route every AsyncClient the service creates through a handler."""
    real_client = httpx.AsyncClient
    state = {"handler": None, "requests": []}

    def handler(request: httpx.Request):
        state["requests"].append(request)
        return state["handler"](request)

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(publish_service.httpx, "AsyncClient", client_factory)
    return state


def test_post_payload():
    clip = make_clip("a", 8.4, hashtags=["#AI"])
    payload = build_post_payload(clip, "TikTok")

    assert payload == {
        "platform": "TikTok",
        "clipId": "a",
        "title": "Title a",
        "caption": clip.caption,
        "hashtags": ["#AI"],
        "duration": 75.0,
        "viralityScore": 8.4,
    }


class TestSimulatedPlatformPoster:
    """Tests for the simulated poster."""

    @pytest.mark.asyncio
    async def test_always_succeeds_at_full_rate(self):
        poster = SimulatedPlatformPoster("TikTok", 0.0, 0.0, success_rate=1.0, rng=random.Random(1))
        assert await poster.post(make_clip("a", 9.0)) is True

    @pytest.mark.asyncio
    async def test_always_fails_at_zero_rate(self):
        poster = SimulatedPlatformPoster("TikTok", 0.0, 0.0, success_rate=0.0)
        assert await poster.post(make_clip("a", 9.0)) is False

    @pytest.mark.asyncio
    async def test_connection(self):
        ok = SimulatedPlatformPoster("TikTok", 0.0, 0.0, connection_success_rate=1.0)
        down = SimulatedPlatformPoster("TikTok", 0.0, 0.0, connection_success_rate=0.0)
        assert await ok.test_connection() is True
        assert await down.test_connection() is False


class TestWebhookPlatformPoster:
    """Tests for the webhook poster."""

    @pytest.mark.asyncio
    async def test_post_success(self, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(201, json={"id": "remote_1"})
        poster = WebhookPlatformPoster("TikTok", "http://hooks.test/tiktok")

        assert await poster.post(make_clip("a", 9.0)) is True

        request = mock_http["requests"][0]
        assert request.method == "POST"
        assert str(request.url) == "http://hooks.test/tiktok"
        assert json.loads(request.content)["clipId"] == "a"

    @pytest.mark.asyncio
    async def test_post_rejected(self, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(422, text="bad caption")
        poster = WebhookPlatformPoster("TikTok", "http://hooks.test/tiktok")

        assert await poster.post(make_clip("a", 9.0)) is False

    @pytest.mark.asyncio
    async def test_post_network_error(self, mock_http):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        mock_http["handler"] = refuse
        poster = WebhookPlatformPoster("TikTok", "http://hooks.test/tiktok")

        assert await poster.post(make_clip("a", 9.0)) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,reachable", [(200, True), (405, True), (503, False)])
    async def test_connection(self, mock_http, status, reachable):
        mock_http["handler"] = lambda request: httpx.Response(status)
        poster = WebhookPlatformPoster("TikTok", "http://hooks.test/tiktok")

        assert await poster.test_connection() is reachable
        assert mock_http["requests"][0].method == "GET"


def test_build_platform_posters():
    config = Settings(
        supported_platforms=["TikTok", "Twitter"],
        platform_webhook_urls={"TikTok": "http://hooks.test/tiktok", "Threads": "http://hooks.test/threads"},
    )
    posters = build_platform_posters(config)

    assert list(posters) == ["TikTok", "Twitter", "Threads"]
    assert isinstance(posters["TikTok"], WebhookPlatformPoster)
    assert isinstance(posters["Twitter"], SimulatedPlatformPoster)
    assert isinstance(posters["Threads"], WebhookPlatformPoster)
    assert posters["Twitter"].platform == "Twitter"
