"""Tests for the SSE front-end and its session registry."""

import json

import anyio
import httpx
import pytest
from starlette.testclient import TestClient

from mochi_mcp.config import Settings
from mochi_mcp.server import create_server
from mochi_mcp.sse import SessionRegistry, SseEndpoint, SseSession, create_sse_app

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-06-18",
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "0.0.1"},
    },
}


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def sse_app(registry):
    return create_sse_app(Settings(mochi_api_key="test-key"), registry=registry)


@pytest.fixture
async def http(sse_app):
    transport = httpx.ASGITransport(app=sse_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class TestRoutes:
    """Plain routes and CORS."""

    async def test_health(self, http):
        response = await http.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "server": "mochi-mcp"}
        assert response.headers["access-control-allow-origin"] == "*"

    async def test_index(self, http):
        response = await http.get("/")

        body = response.json()
        assert body["transport"] == "sse"
        assert body["endpoints"]["sse"] == "/sse"
        assert body["endpoints"]["message"] == "/message"
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize("path", ["/sse", "/message", "/anything"])
    async def test_preflight(self, http, path):
        """Test that OPTIONS on any path is a CORS preflight."""
        response = await http.options(path)

        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "*"
        assert "X-Session-Id" in response.headers["access-control-allow-headers"]

    async def test_unknown_path(self, http):
        response = await http.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}
        assert response.headers["access-control-allow-origin"] == "*"


class TestMessageEndpoint:
    """POST /message routing."""

    async def test_missing_session_header(self, http):
        response = await http.post("/message", json=INITIALIZE)

        assert response.status_code == 400
        assert response.headers["access-control-allow-origin"] == "*"

    async def test_unknown_session(self, http):
        response = await http.post(
            "/message", json=INITIALIZE, headers={"X-Session-Id": "does-not-exist"}
        )

        assert response.status_code == 404

    async def test_unparseable_message(self, http, registry, mochi_client):
        registry.add(SseSession("s1", create_server(mochi_client)))

        response = await http.post(
            "/message", content=b"{not json", headers={"X-Session-Id": "s1"}
        )

        assert response.status_code == 400

    async def test_message_reaches_session_server(self, http, registry, mochi_client):
        """Test that a posted request is answered on the session's outbound stream."""
        session = SseSession("s1", create_server(mochi_client))
        registry.add(session)

        async with anyio.create_task_group() as tg:
            tg.start_soon(session.run)

            with anyio.fail_after(10):
                response = await http.post(
                    "/message", json=INITIALIZE, headers={"X-Session-Id": "s1"}
                )
                reply = await session.outbound.receive()

            assert response.status_code == 202
            assert response.text == "Accepted"

            payload = json.loads(reply.message.model_dump_json(by_alias=True, exclude_unset=True))
            assert payload["id"] == 1
            assert payload["result"]["serverInfo"]["name"] == "mochi-mcp"

            await session.aclose()
            tg.cancel_scope.cancel()


class TestSseEndpoint:
    """GET /sse session lifecycle, driven at the ASGI level."""

    async def test_endpoint_event_and_cleanup(self, registry, mochi_client):
        endpoint = SseEndpoint(registry, lambda: create_server(mochi_client))
        messages = []
        live_sessions = []
        first_event = anyio.Event()

        async def receive():
            await first_event.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            messages.append(message)
            if message["type"] == "http.response.body" and message.get("body"):
                live_sessions.append(len(registry))
                first_event.set()

        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": "/sse",
            "raw_path": b"/sse",
            "root_path": "",
            "query_string": b"",
            "headers": [],
            "client": ("127.0.0.1", 50000),
            "server": ("testserver", 80),
        }

        with anyio.fail_after(10):
            await endpoint(scope, receive, send)

        start = messages[0]
        assert start["type"] == "http.response.start"
        headers = {key.decode().lower(): value.decode() for key, value in start["headers"]}
        session_id = headers["x-session-id"]
        assert len(session_id) == 32
        assert headers["access-control-allow-origin"] == "*"
        assert headers["content-type"].startswith("text/event-stream")

        body = b"".join(
            message.get("body", b"")
            for message in messages
            if message["type"] == "http.response.body"
        ).decode()
        assert "event: endpoint" in body
        assert json.dumps({"sessionId": session_id, "endpoint": "/message"}) in body

        assert live_sessions[0] == 1
        assert len(registry) == 0


class TestUnconfigured:
    @pytest.mark.parametrize("method,path", [("GET", "/sse"), ("POST", "/message")])
    def test_session_routes_report_missing_key(self, method, path):
        client = TestClient(create_sse_app(Settings(mochi_api_key=None)))

        response = client.request(method, path)

        assert response.status_code == 500
        assert response.json() == {"error": "MOCHI_API_KEY not configured"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_health_without_key(self):
        client = TestClient(create_sse_app(Settings(mochi_api_key=None)))

        assert client.get("/health").status_code == 200


class TestSessionRegistry:
    def test_add_get_remove(self, mochi_client):
        registry = SessionRegistry()
        session = SseSession("abc", create_server(mochi_client))

        registry.add(session)
        assert registry.get("abc") is session
        assert "abc" in registry

        assert registry.remove("abc") is session
        assert registry.get("abc") is None
        assert registry.remove("abc") is None
        assert len(registry) == 0
