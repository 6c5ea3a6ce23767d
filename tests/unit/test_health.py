"""Tests for the liveness endpoint."""

import pytest
from aiohttp import test_utils

from gemini_discord.bot.health import create_health_app


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/", "/health", "/deep/probe/path"])
async def test_any_path_answers_ok(path):
    async with test_utils.TestClient(test_utils.TestServer(create_health_app())) as client:
        response = await client.get(path)

        assert response.status == 200
        assert await response.text() == "ok"
        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
