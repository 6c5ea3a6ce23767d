"""
MediaWiki lookup for game questions.

Finds the best matching page with action=opensearch, fetches its rendered HTML
with action=parse&prop=text, and strips it down to plain text for snippets.
No API key required.
"""

import html
import logging
import re
from typing import Optional, Tuple

import httpx

from ..models.base import Source
from .base import FetchClient

logger = logging.getLogger(__name__)

WIKI_TIMEOUT = 4.5
SNIPPET_CHARS = 600

_DROP_BLOCKS = re.compile(r"<(script|style|table|sup)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BREAKS = re.compile(r"<\s*(br|/p|/li|/h[1-6]|/div|/tr)\s*/?>", re.IGNORECASE)
_TAGS = re.compile(r"<[^>]+>")
_EDIT_MARKERS = re.compile(r"\[\s*(编辑|編輯|edit)\s*\]", re.IGNORECASE)


def html_to_text(raw_html: str) -> str:
    """Regex-strip rendered wiki HTML into whitespace-normalized plain text."""
    text = _DROP_BLOCKS.sub(" ", raw_html or "")
    text = _BREAKS.sub("\n", text)
    text = _TAGS.sub(" ", text)
    text = html.unescape(text)
    text = _EDIT_MARKERS.sub("", text)
    lines = [" ".join(line.split()) for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


class MediaWikiClient(FetchClient):
    """Read-only client for a MediaWiki api.php endpoint."""

    name = "wiki"

    def __init__(
        self,
        api_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = WIKI_TIMEOUT,
    ):
        super().__init__(client=client, timeout=timeout)
        self.api_url = api_url

    async def opensearch(self, query: str) -> Optional[Tuple[str, str]]:
        """Return (title, url) of the best match, or None."""
        data = await self._request_json(
            "GET",
            self.api_url,
            params={
                "action": "opensearch",
                "search": query,
                "limit": 1,
                "namespace": 0,
                "format": "json",
            },
        )
        # [query, [titles], [descriptions], [urls]]
        if not isinstance(data, list) or len(data) < 4:
            return None
        titles, urls = data[1], data[3]
        if not isinstance(titles, list) or not isinstance(urls, list):
            return None
        if not titles or not urls:
            return None
        return str(titles[0]), str(urls[0])

    async def page_text(self, title: str) -> str:
        """Fetch a page's rendered HTML and return it as plain text ('' on failure)."""
        data = await self._request_json(
            "GET",
            self.api_url,
            params={
                "action": "parse",
                "page": title,
                "prop": "text",
                "redirects": 1,
                "format": "json",
                "formatversion": 2,
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("parse"), dict):
            if isinstance(data, dict) and "error" in data:
                logger.warning(f"Wiki parse error for {title!r}: {data['error']}")
            return ""
        rendered = data["parse"].get("text", "")
        if isinstance(rendered, dict):
            # formatversion=1 shape
            rendered = rendered.get("*", "")
        return html_to_text(str(rendered))

    async def lookup(self, query: str) -> Tuple[Optional[Source], str]:
        """
        Search the wiki and build a Source from the top page.

        Returns:
            (source, full_text); source is None when nothing usable was found.
        """
        hit = await self.opensearch(query)
        if hit is None:
            return None, ""
        title, url = hit
        text = await self.page_text(title)
        if not text:
            return None, ""

        snippet = text[:SNIPPET_CHARS]
        if len(text) > SNIPPET_CHARS:
            snippet += "…"
        logger.info(f"Wiki page found for {query!r}: {title}")
        return Source(title=f"{title}（Wiki）", snippet=snippet, link=url), text
