"""Test fixtures for the Gemini Discord bot tests."""

from typing import Callable, Dict, List, Optional
from unittest.mock import AsyncMock, Mock

import httpx

from gemini_discord.models.base import LLMResponse, Source


def create_mock_model_manager(
    response_text: str = "Test response", available: bool = True
) -> Mock:
    """Create a mock model manager for testing."""
    mock_manager = Mock()
    mock_manager.is_available = Mock(return_value=available)
    mock_manager.generate = AsyncMock(
        return_value=LLMResponse(content=response_text, model="test-model")
    )
    mock_manager.get_stats = Mock(return_value={"total_calls": 0})
    return mock_manager


def make_sources(count: int) -> List[Source]:
    """Numbered sources with distinct links."""
    return [
        Source(
            title=f"Title {i}",
            snippet=f"Snippet {i}",
            link=f"https://example.com/{i}",
        )
        for i in range(1, count + 1)
    ]


class FakeSearchClient:
    """Stand-in for SerperSearchClient returning canned results per query."""

    def __init__(self, results: Optional[Dict[str, List[Source]]] = None, default=None):
        self.results = results or {}
        self.default = default if default is not None else []
        self.queries: List[str] = []

    async def search(self, query: str) -> List[Source]:
        self.queries.append(query)
        return list(self.results.get(query, self.default))


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
