"""Tests for the Serper search client."""

import json

import httpx
import pytest

from gemini_discord.clients.search import MAX_RESULTS, SERPER_SEARCH_URL, SerperSearchClient
from gemini_discord.services.cache import ResponseCache
from tests.fixtures import mock_http_client


def _organic(count):
    return {
        "organic": [
            {"title": f"Result {i}", "link": f"https://example.com/{i}", "snippet": f"snippet {i}"}
            for i in range(1, count + 1)
        ]
    }


class RecordingHandler:
    """MockTransport handler that counts calls and replays one response."""

    def __init__(self, status=200, payload=None, body=None):
        self.status = status
        self.payload = payload if payload is not None else _organic(2)
        self.body = body
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status, content=self.body)
        return httpx.Response(self.status, json=self.payload)


def _age_entries(cache, seconds):
    for entry in cache.cache.values():
        entry.expires_at -= seconds


class TestSerperSearchClient:
    @pytest.mark.asyncio
    async def test_missing_key_returns_nothing(self):
        handler = RecordingHandler()
        client = SerperSearchClient(api_key="", client=mock_http_client(handler))

        assert client.is_available() is False
        assert await client.search("台北天氣") == []
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_request_shape(self):
        handler = RecordingHandler()
        client = SerperSearchClient(api_key="secret", client=mock_http_client(handler))

        await client.search("台北天氣")

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == SERPER_SEARCH_URL
        assert request.headers["X-API-KEY"] == "secret"
        assert json.loads(request.content) == {
            "q": "台北天氣",
            "num": MAX_RESULTS,
            "gl": "tw",
            "hl": "zh-tw",
        }

    @pytest.mark.asyncio
    async def test_parses_organic_results(self):
        payload = _organic(8)
        payload["organic"].insert(0, {"title": "No link"})
        handler = RecordingHandler(payload=payload)
        client = SerperSearchClient(api_key="secret", client=mock_http_client(handler))

        results = await client.search("ff14")

        assert len(results) == 5
        assert results[0].title == "Result 1"
        assert results[0].link == "https://example.com/1"
        assert results[0].snippet == "snippet 1"

    @pytest.mark.asyncio
    async def test_identical_query_hits_cache(self):
        handler = RecordingHandler()
        cache = ResponseCache(ttl_seconds=300)
        client = SerperSearchClient(api_key="secret", cache=cache, client=mock_http_client(handler))

        first = await client.search("台北天氣")
        second = await client.search("台北天氣")

        assert first == second
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_calls_upstream_again(self):
        handler = RecordingHandler()
        cache = ResponseCache(ttl_seconds=300)
        client = SerperSearchClient(api_key="secret", cache=cache, client=mock_http_client(handler))

        await client.search("台北天氣")
        _age_entries(cache, 301)
        await client.search("台北天氣")

        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_error_status_is_empty_and_not_cached(self):
        handler = RecordingHandler(status=500, payload={"message": "boom"})
        client = SerperSearchClient(api_key="secret", client=mock_http_client(handler))

        assert await client.search("q") == []
        assert await client.search("q") == []
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_malformed_body_is_empty(self):
        handler = RecordingHandler(body=b"<html>not json</html>")
        client = SerperSearchClient(api_key="secret", client=mock_http_client(handler))

        assert await client.search("q") == []

    @pytest.mark.asyncio
    async def test_timeout_is_empty(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = SerperSearchClient(api_key="secret", client=mock_http_client(handler))
        assert await client.search("q") == []

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self):
        handler = RecordingHandler()
        client = SerperSearchClient(api_key="secret", client=mock_http_client(handler))

        (await client.search("q")).clear()
        assert len(await client.search("q")) == 2
