"""Shared plumbing for the outbound HTTP clients."""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "gemini-discord-bot/1.0"


class FetchClient:
    """Base class for stateless JSON-over-HTTP clients.

    Every request goes through _request_json, which never raises: network
    errors, timeouts, non-2xx statuses and malformed bodies all come back as
    None so callers can treat them as "no result".
    """

    name = "http"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 8.0):
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the shared async client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, headers={"User-Agent": USER_AGENT}
            )
        return self._client

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Any]:
        try:
            response = await self.client.request(
                method, url, params=params, json=json, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException:
            logger.warning(f"{self.name} request timed out after {self.timeout}s: {url}")
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"{self.name} error: {e.response.status_code} {e.response.text[:200]}"
            )
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} request failed: {type(e).__name__}: {e}")
        except ValueError as e:
            logger.warning(f"{self.name} returned malformed JSON: {e}")
        return None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
