"""Shared fixtures: a recording fake of the Mochi API and clients bound to it."""

import json
from typing import Any

import httpx
import pytest
from fastmcp import Client

from mochi_mcp.client import MochiClient
from mochi_mcp.server import create_server

BASE_URL = "https://mochi.test/api"


class FakeMochiAPI:
    """httpx transport handler that records requests and replays canned responses.

    Routes are keyed by method and path relative to the API base URL. Unrouted
    requests get a 404 with a Mochi-style error body.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], tuple[int, dict[str, Any]]] = {}

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {"headers": headers or {}}
        if json is not None:
            kwargs["json"] = json
        elif content is not None:
            kwargs["content"] = content
        self._routes[(method, path)] = (status, kwargs)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self._routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"errors": ["Not found"]})
        status, kwargs = route
        return httpx.Response(status, **kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def api():
    return FakeMochiAPI()


@pytest.fixture
def mochi_client(api):
    return MochiClient("test-key", base_url=BASE_URL, transport=httpx.MockTransport(api))


@pytest.fixture
def server(mochi_client):
    return create_server(mochi_client)


@pytest.fixture
async def mcp_client(server):
    async with Client(server) as client:
        yield client


def result_text(result) -> str:
    """Text of the single content block of a tool result."""
    assert len(result.content) == 1
    return result.content[0].text


async def assert_rejected(mcp_client, api, name: str, arguments: dict) -> None:
    """Assert a tool call fails argument validation without reaching the API."""
    result = await mcp_client.call_tool_mcp(name, arguments)

    assert result.is_error
    assert "validation error" in result_text(result).lower()
    assert api.requests == []
