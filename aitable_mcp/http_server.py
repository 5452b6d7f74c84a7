"""
AITable MCP Server - HTTP transport (for remote use)

Stateless streamable HTTP: every POST to /mcp gets a new server instance, so
no session state is shared between requests.

Usage:
    aitable-mcp-http            # listens on HOST:PORT, default 127.0.0.1:3000
"""

import logging
import sys
from typing import Callable

import uvicorn
from mcp.server.fastmcp import FastMCP
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.types import Message, Receive, Scope, Send

from .config import Settings
from .exceptions import ConfigurationError
from .server import SERVER_NAME, create_server, setup_logging

logger = logging.getLogger("aitable-mcp.http")

INTERNAL_ERROR = {
    "jsonrpc": "2.0",
    "error": {"code": -32603, "message": "Internal server error"},
    "id": None,
}


class StatelessMCPEndpoint:
    """ASGI endpoint serving one MCP request with a freshly built server."""

    def __init__(self, server_factory: Callable[[], FastMCP]):
        self.server_factory = server_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            server = self.server_factory()
            manager = StreamableHTTPSessionManager(
                app=server._mcp_server,
                json_response=True,
                stateless=True,
            )
            async with manager.run():
                await manager.handle_request(scope, receive, tracking_send)
        except Exception:
            logger.error("Error handling MCP request", exc_info=True)
            if not response_started:
                response = JSONResponse(INTERNAL_ERROR, status_code=500)
                await response(scope, receive, send)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "server": SERVER_NAME})


def create_app(settings: Settings) -> Starlette:
    """Build the Starlette application exposing /mcp and /health."""
    endpoint = StatelessMCPEndpoint(lambda: create_server(settings))
    return Starlette(
        routes=[
            Route("/mcp", endpoint=endpoint, methods=["POST"]),
            Route("/health", endpoint=health, methods=["GET"]),
        ],
    )


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.log_level)
    logger.info(f"AITable MCP Server running on http://{settings.host}:{settings.port}/mcp")
    logger.info(f"Health check available at http://{settings.host}:{settings.port}/health")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
