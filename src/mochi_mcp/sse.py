"""Server-Sent Events front-end with header-addressed sessions.

Each `GET /sse` opens a session: a fresh MCP server wired to a pair of memory
streams. Server messages are pushed down the event stream; client messages
arrive as `POST /message` requests naming the session in `X-Session-Id`.
"""

import json
import logging
from collections.abc import Callable
from uuid import uuid4

import anyio
import uvicorn
from fastmcp import FastMCP
from mcp.shared.message import ServerMessageMetadata, SessionMessage
from mcp.types import jsonrpc_message_adapter
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from .client import MochiClient
from .config import Settings, configure_logging, settings as default_settings
from .http import ALL_METHODS, missing_key_response, service_info
from .server import SERVER_NAME, create_server

logger = logging.getLogger(__name__)

SSE_PATH = "/sse"
MESSAGE_PATH = "/message"
SESSION_HEADER = "X-Session-Id"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Expose-Headers": SESSION_HEADER,
}
PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {SESSION_HEADER}",
    "Access-Control-Max-Age": "86400",
}


def with_cors(response: Response) -> Response:
    response.headers.update(CORS_HEADERS)
    return response


class SseSession:
    """One client connection: an MCP server and the streams feeding it."""

    def __init__(self, session_id: str, server: FastMCP):
        self.session_id = session_id
        self.server = server
        self._inbound_writer, self._inbound = anyio.create_memory_object_stream[
            SessionMessage | Exception
        ](0)
        self._outbound_writer, self.outbound = anyio.create_memory_object_stream[
            SessionMessage
        ](0)

    async def run(self) -> None:
        """Serve MCP over this session's streams until the inbound side closes."""
        # Same sequence as FastMCP.run_stdio_async with our streams in place of
        # stdio. Both attributes are private, hence the fastmcp<5 pin.
        mcp_server = self.server._mcp_server
        async with self.server._lifespan_manager():
            await mcp_server.run(
                self._inbound,
                self._outbound_writer,
                mcp_server.create_initialization_options(),
            )

    async def send(self, message: SessionMessage | Exception) -> None:
        """Hand a client message to the session's server.

        Raises:
            anyio.ClosedResourceError: The session has been closed
            anyio.BrokenResourceError: The server stopped reading
        """
        await self._inbound_writer.send(message)

    async def aclose(self) -> None:
        await self._inbound_writer.aclose()
        await self.outbound.aclose()


class SessionRegistry:
    """Live SSE sessions keyed by session id.

    Only touched from the event loop thread, so no lock is taken.
    """

    def __init__(self):
        self._sessions: dict[str, SseSession] = {}

    def add(self, session: SseSession) -> None:
        self._sessions[session.session_id] = session

    def get(self, session_id: str) -> SseSession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> SseSession | None:
        return self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions


class SseEndpoint:
    """ASGI app for `GET /sse`.

    Streams the session's outbound messages until the client disconnects,
    then drops the session from the registry.
    """

    def __init__(self, registry: SessionRegistry, server_factory: Callable[[], FastMCP]):
        self.registry = registry
        self.server_factory = server_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        session = SseSession(uuid4().hex, self.server_factory())
        self.registry.add(session)
        logger.info("Opened SSE session %s", session.session_id)

        async def events():
            yield {
                "event": "endpoint",
                "data": json.dumps({"sessionId": session.session_id, "endpoint": MESSAGE_PATH}),
            }
            async for session_message in session.outbound:
                yield {
                    "event": "message",
                    "data": session_message.message.model_dump_json(
                        by_alias=True, exclude_unset=True
                    ),
                }

        response = EventSourceResponse(
            events(), headers={SESSION_HEADER: session.session_id, **CORS_HEADERS}
        )
        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(session.run)
                await response(scope, receive, send)
                tg.cancel_scope.cancel()
        finally:
            self.registry.remove(session.session_id)
            await session.aclose()
            logger.info("Closed SSE session %s", session.session_id)


class MessageEndpoint:
    """Request handler for `POST /message`."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    async def handle(self, request: Request) -> Response:
        session_id = request.headers.get(SESSION_HEADER)
        if not session_id:
            return with_cors(
                JSONResponse({"error": f"Missing {SESSION_HEADER} header"}, status_code=400)
            )

        session = self.registry.get(session_id)
        if session is None:
            logger.warning("Message for unknown session %s", session_id)
            return with_cors(JSONResponse({"error": "Session not found"}, status_code=404))

        body = await request.body()
        try:
            message = jsonrpc_message_adapter.validate_json(body, by_name=False)
        except ValidationError:
            logger.warning("Unparseable message for session %s", session_id)
            return with_cors(JSONResponse({"error": "Invalid JSON-RPC message"}, status_code=400))

        metadata = ServerMessageMetadata(request_context=request)
        try:
            await session.send(SessionMessage(message, metadata=metadata))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            self.registry.remove(session_id)
            return with_cors(JSONResponse({"error": "Session not found"}, status_code=404))

        return with_cors(PlainTextResponse("Accepted", status_code=202))


async def index(request: Request) -> Response:
    return with_cors(
        JSONResponse(
            service_info("sse", {"sse": SSE_PATH, "message": MESSAGE_PATH, "health": "/health"})
        )
    )


async def health(request: Request) -> Response:
    return with_cors(JSONResponse({"status": "ok", "server": SERVER_NAME}))


async def not_configured(request: Request) -> Response:
    return with_cors(missing_key_response())


async def fallback(request: Request) -> Response:
    """CORS preflight for any path, 404 for anything else."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)
    return with_cors(JSONResponse({"error": "Not found"}, status_code=404))


def create_sse_app(
    settings: Settings | None = None, registry: SessionRegistry | None = None
) -> Starlette:
    """Build the SSE application.

    Args:
        settings: Settings to use. Uses the global settings if not provided.
        registry: Session registry. A new one is created if not provided.

    Returns:
        Starlette application serving /sse and /message
    """
    settings = settings or default_settings
    registry = registry if registry is not None else SessionRegistry()

    if settings.mochi_api_key:
        client = MochiClient(
            settings.mochi_api_key,
            base_url=settings.mochi_base_url,
            timeout=settings.request_timeout,
        )

        def server_factory() -> FastMCP:
            return create_server(client, allow_local_files=settings.mochi_http_allow_local_files)

        session_routes = [
            Route(SSE_PATH, SseEndpoint(registry, server_factory), methods=["GET"]),
            Route(MESSAGE_PATH, MessageEndpoint(registry).handle, methods=["POST"]),
        ]
    else:
        logger.warning("MOCHI_API_KEY is not set; SSE sessions disabled")
        session_routes = [
            Route(SSE_PATH, not_configured, methods=["GET"]),
            Route(MESSAGE_PATH, not_configured, methods=["POST"]),
        ]

    app = Starlette(
        routes=[
            Route("/", index, methods=["GET"]),
            Route("/health", health, methods=["GET"]),
            *session_routes,
            Route("/{path:path}", fallback, methods=ALL_METHODS),
        ]
    )
    app.state.sessions = registry
    return app


def main() -> None:
    """Entry point for the SSE server."""
    configure_logging()
    app = create_sse_app()
    logger.info(
        "Mochi MCP SSE server listening on http://%s:%s%s",
        default_settings.host,
        default_settings.port,
        SSE_PATH,
    )
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    main()
