"""Streamable HTTP front-end for remote MCP clients."""

import logging

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .client import MochiClient
from .config import Settings, configure_logging, settings as default_settings
from .server import SERVER_NAME, create_server

logger = logging.getLogger(__name__)

MCP_PATH = "/mcp"
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def service_info(transport: str, endpoints: dict[str, str]) -> dict:
    """Descriptor served at the root path."""
    return {
        "name": SERVER_NAME,
        "version": __version__,
        "description": "MCP server for Mochi Cards spaced repetition flashcards",
        "transport": transport,
        "endpoints": endpoints,
    }


def missing_key_response() -> JSONResponse:
    return JSONResponse({"error": "MOCHI_API_KEY not configured"}, status_code=500)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "server": SERVER_NAME})


async def index(request: Request) -> JSONResponse:
    return JSONResponse(
        service_info("streamable-http", {"mcp": MCP_PATH, "health": "/health"})
    )


async def not_configured(request: Request) -> JSONResponse:
    return missing_key_response()


def create_http_app(settings: Settings | None = None) -> Starlette:
    """Build the HTTP application.

    Without an API key the app still answers `/` and `/health` so the
    deployment can be health-checked. Every other path reports the missing key.

    Args:
        settings: Settings to use. Uses the global settings if not provided.

    Returns:
        Starlette application serving MCP at /mcp
    """
    settings = settings or default_settings

    if not settings.mochi_api_key:
        logger.warning("MOCHI_API_KEY is not set; MCP endpoint disabled")
        return Starlette(
            routes=[
                Route("/", index, methods=["GET"]),
                Route("/health", health, methods=["GET"]),
                Route("/{path:path}", not_configured, methods=ALL_METHODS),
            ]
        )

    client = MochiClient(
        settings.mochi_api_key,
        base_url=settings.mochi_base_url,
        timeout=settings.request_timeout,
    )
    server = create_server(client, allow_local_files=settings.mochi_http_allow_local_files)
    server.custom_route("/", methods=["GET"])(index)
    server.custom_route("/health", methods=["GET"])(health)
    return server.http_app(path=MCP_PATH)


def main() -> None:
    """Entry point for the streamable HTTP server."""
    configure_logging()
    app = create_http_app()
    logger.info(
        "Mochi MCP server listening on http://%s:%s%s",
        default_settings.host,
        default_settings.port,
        MCP_PATH,
    )
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    main()
