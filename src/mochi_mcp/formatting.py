"""Helpers that turn API payloads into MCP tool results."""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from .client import MochiAPIError


def pretty_json(data: Any) -> str:
    """Render an API payload as indented JSON."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def text_result(text: str) -> CallToolResult:
    """Successful tool result with a single text block."""
    return CallToolResult(content=[TextContent(type="text", text=text)])


def error_result(text: str) -> CallToolResult:
    """Recoverable tool error the assistant can read and act on."""
    return CallToolResult(isError=True, content=[TextContent(type="text", text=text)])


def api_error_result(error: MochiAPIError) -> CallToolResult:
    return error_result(f"Error {error.status_code}: {error.message}")


def request_body(**fields: Any) -> dict[str, Any]:
    """Build an API request body from wire-named fields.

    Unset (None) fields are dropped so upstream defaults apply. Nested models
    are dumped by alias, including any extra keys they carry.

    Example:
        >>> request_body(**{"deck-id": "abc", "pos": None})
        {'deck-id': 'abc'}
    """
    return {
        key: to_jsonable_python(value, by_alias=True, exclude_none=True)
        if isinstance(value, (BaseModel, dict, list))
        else to_jsonable_python(value)
        for key, value in fields.items()
        if value is not None
    }


async def respond(
    call: Awaitable[Any],
    render: Callable[[Any], str] = pretty_json,
) -> CallToolResult:
    """Await an API call and turn its outcome into a tool result.

    MochiAPIError becomes an error result; any other exception propagates.

    Args:
        call: Pending MochiClient call
        render: Formats the successful payload (pretty JSON by default)

    Returns:
        Tool result for the call
    """
    try:
        result = await call
    except MochiAPIError as e:
        return api_error_result(e)
    return text_result(render(result))
