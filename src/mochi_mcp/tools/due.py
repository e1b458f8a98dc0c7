"""MCP tool for cards due for review."""

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..client import MochiClient
from ..formatting import respond


def register_due_tools(mcp: FastMCP, client: MochiClient) -> None:
    @mcp.tool()
    async def get_due_cards(
        date: Annotated[
            str | None,
            Field(description="ISO 8601 date to check (defaults to today)"),
        ] = None,
        deck_id: Annotated[
            str | None, Field(alias="deck-id", description="Only return cards from this deck")
        ] = None,
    ) -> CallToolResult:
        """Get cards that are due for review on a specific date.

        Useful for spaced repetition study sessions.
        """
        return await respond(client.get_due_cards(date=date, deck_id=deck_id))
