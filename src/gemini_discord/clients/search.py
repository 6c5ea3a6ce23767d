"""Google search through the Serper API."""

import logging
from typing import List, Optional

import httpx

from ..models.base import Source
from ..services.cache import ResponseCache
from .base import FetchClient

logger = logging.getLogger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"
SEARCH_CACHE_TTL = 5 * 60
MAX_RESULTS = 6


class SerperSearchClient(FetchClient):
    """Search client with a five-minute result cache."""

    name = "serper"

    def __init__(
        self,
        api_key: str = "",
        cache: Optional[ResponseCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 8.0,
        country: str = "tw",
        language: str = "zh-tw",
    ):
        super().__init__(client=client, timeout=timeout)
        self.api_key = (api_key or "").strip()
        self.cache = cache if cache is not None else ResponseCache(ttl_seconds=SEARCH_CACHE_TTL)
        self.country = country
        self.language = language

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str) -> List[Source]:
        """Return up to six organic results; [] on any failure or without a key."""
        if not self.api_key or not query.strip():
            return []

        cache_key = self.cache.create_key("serp", query)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Search cache hit for {query!r}")
            return list(cached)

        data = await self._request_json(
            "POST",
            SERPER_SEARCH_URL,
            json={"q": query, "num": MAX_RESULTS, "gl": self.country, "hl": self.language},
            headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
        )
        if not isinstance(data, dict):
            return []

        results = []
        for item in (data.get("organic") or [])[:MAX_RESULTS]:
            if not isinstance(item, dict) or not item.get("link"):
                continue
            results.append(
                Source(
                    title=str(item.get("title") or ""),
                    snippet=str(item.get("snippet") or ""),
                    link=str(item["link"]),
                )
            )

        logger.info(f"Serper returned {len(results)} results for {query!r}")
        self.cache.set(cache_key, results)
        return list(results)
