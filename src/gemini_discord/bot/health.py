"""Liveness endpoint, independent of the chat pipeline."""

import logging

from aiohttp import web

logger = logging.getLogger(__name__)


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="ok", content_type="text/plain", charset="utf-8")


def create_health_app() -> web.Application:
    app = web.Application()
    # Any GET path answers, so platform probes need no configuration
    app.router.add_get("/{tail:.*}", handle_health)
    return app


async def start_health_server(port: int, host: str = "0.0.0.0") -> web.AppRunner:
    """Start serving in the running event loop; returns the runner for cleanup."""
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"HTTP server listening on {port}")
    return runner
