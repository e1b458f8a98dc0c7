"""MCP tools for managing Mochi decks."""

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..client import MochiClient
from ..formatting import request_body, respond
from ..models import Bookmark, CardsView, Limit, SortBy

DeckId = Annotated[str, Field(description="Deck ID")]
ParentId = Annotated[
    str | None, Field(alias="parent-id", description="Parent deck ID for nesting")
]
Sort = Annotated[float | None, Field(description="Numeric sort order among sibling decks")]
Archived = Annotated[bool | None, Field(alias="archived?", description="Whether deck is archived")]
Trashed = Annotated[
    str | None,
    Field(alias="trashed?", description="ISO 8601 timestamp if trashed, or omit to untrash"),
]
SortByField = Annotated[
    SortBy | None, Field(alias="sort-by", description="How cards are sorted in the deck")
]
CardsViewField = Annotated[
    CardsView | None, Field(alias="cards-view", description="How cards are displayed")
]
ShowSides = Annotated[
    bool | None, Field(alias="show-sides?", description="Show all sides of cards in the list")
]
SortByDirection = Annotated[
    bool | None,
    Field(alias="sort-by-direction", description="Reverse the sort order"),
]
ReviewReverse = Annotated[
    bool | None,
    Field(alias="review-reverse?", description="Also review the deck's cards in reverse"),
]


def register_deck_tools(mcp: FastMCP, client: MochiClient) -> None:
    """Register deck tools on a server.

    Args:
        mcp: Server to register on
        client: Mochi client the tools call
    """

    @mcp.tool()
    async def list_decks(limit: Limit = None, bookmark: Bookmark = None) -> CallToolResult:
        """List all decks. Returns paginated results."""
        return await respond(client.list_decks(limit=limit, bookmark=bookmark))

    @mcp.tool()
    async def get_deck(id: DeckId) -> CallToolResult:
        """Retrieve a single deck by its ID."""
        return await respond(client.get_deck(id))

    @mcp.tool()
    async def create_deck(
        name: Annotated[str, Field(description="Deck name")],
        parent_id: ParentId = None,
        sort: Sort = None,
        archived: Archived = None,
        trashed: Trashed = None,
        sort_by: SortByField = None,
        cards_view: CardsViewField = None,
        show_sides: ShowSides = None,
        sort_by_direction: SortByDirection = None,
        review_reverse: ReviewReverse = None,
    ) -> CallToolResult:
        """Create a new deck. Use parent-id to nest it under another deck.

        Returns:
            The created deck as JSON

        Example:
            >>> create_deck(name="Spanish", **{"parent-id": "languages"})
            {"id": "...", "name": "Spanish", "parent-id": "languages"}
        """
        body = request_body(
            **{
                "name": name,
                "parent-id": parent_id,
                "sort": sort,
                "archived?": archived,
                "trashed?": trashed,
                "sort-by": sort_by,
                "cards-view": cards_view,
                "show-sides?": show_sides,
                "sort-by-direction": sort_by_direction,
                "review-reverse?": review_reverse,
            }
        )
        return await respond(client.create_deck(body))

    @mcp.tool()
    async def update_deck(
        id: DeckId,
        name: Annotated[str | None, Field(description="Deck name")] = None,
        parent_id: ParentId = None,
        sort: Sort = None,
        archived: Archived = None,
        trashed: Trashed = None,
        sort_by: SortByField = None,
        cards_view: CardsViewField = None,
        show_sides: ShowSides = None,
        sort_by_direction: SortByDirection = None,
        review_reverse: ReviewReverse = None,
    ) -> CallToolResult:
        """Update an existing deck's properties."""
        body = request_body(
            **{
                "name": name,
                "parent-id": parent_id,
                "sort": sort,
                "archived?": archived,
                "trashed?": trashed,
                "sort-by": sort_by,
                "cards-view": cards_view,
                "show-sides?": show_sides,
                "sort-by-direction": sort_by_direction,
                "review-reverse?": review_reverse,
            }
        )
        return await respond(client.update_deck(id, body))

    @mcp.tool()
    async def delete_deck(id: DeckId) -> CallToolResult:
        """Permanently delete a deck. WARNING: This cannot be undone.

        Use update_deck with trashed? for soft delete.
        """
        return await respond(
            client.delete_deck(id), render=lambda _: f"Deck {id} deleted successfully."
        )
