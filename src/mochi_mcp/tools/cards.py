"""MCP tools for managing Mochi cards and their attachments."""

import base64
import logging
import mimetypes
from typing import Annotated

import anyio
from fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..client import MochiClient
from ..formatting import error_result, pretty_json, request_body, respond
from ..models import Bookmark, CardFields, Limit

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CardId = Annotated[str, Field(description="Card ID")]
Content = Annotated[str, Field(description="Markdown content of the card")]
TemplateId = Annotated[
    str | None, Field(alias="template-id", description="Template to use for the card")
]
Archived = Annotated[bool | None, Field(alias="archived?", description="Whether card is archived")]
ReviewReverse = Annotated[
    bool | None,
    Field(alias="review-reverse?", description="Also review the card in reverse"),
]
Pos = Annotated[str | None, Field(description="Relative position within deck (lexicographic)")]
ManualTags = Annotated[
    list[str] | None, Field(alias="manual-tags", description="Tags without the # prefix")
]
Fields = Annotated[
    CardFields | None,
    Field(description="Template field values keyed by field ID"),
]


def register_card_tools(
    mcp: FastMCP, client: MochiClient, *, allow_local_files: bool = True
) -> None:
    """Register card tools on a server.

    Args:
        mcp: Server to register on
        client: Mochi client the tools call
        allow_local_files: Whether add_attachment may read file-path from
            this host's filesystem
    """

    @mcp.tool()
    async def list_cards(
        deck_id: Annotated[
            str | None, Field(alias="deck-id", description="Filter cards by deck ID")
        ] = None,
        limit: Limit = None,
        bookmark: Bookmark = None,
    ) -> CallToolResult:
        """List cards with optional filtering by deck. Returns paginated results.

        Pass the returned bookmark back to fetch the next page.
        """
        return await respond(client.list_cards(deck_id=deck_id, limit=limit, bookmark=bookmark))

    @mcp.tool()
    async def get_card(id: CardId) -> CallToolResult:
        """Retrieve a single card by its ID."""
        return await respond(client.get_card(id))

    @mcp.tool()
    async def create_card(
        content: Content,
        deck_id: Annotated[str, Field(alias="deck-id", description="Deck to add the card to")],
        template_id: TemplateId = None,
        archived: Archived = None,
        review_reverse: ReviewReverse = None,
        pos: Pos = None,
        manual_tags: ManualTags = None,
        fields: Fields = None,
    ) -> CallToolResult:
        """Create a new flashcard in a deck.

        Card content is Markdown. Use `---` on its own line to separate the
        front and back sides. With a template, supply `fields` keyed by the
        template's field IDs.

        Returns:
            The created card as JSON
        """
        body = request_body(
            **{
                "content": content,
                "deck-id": deck_id,
                "template-id": template_id,
                "archived?": archived,
                "review-reverse?": review_reverse,
                "pos": pos,
                "manual-tags": manual_tags,
                "fields": fields,
            }
        )
        return await respond(client.create_card(body))

    @mcp.tool()
    async def update_card(
        id: CardId,
        content: Annotated[str | None, Field(description="Markdown content of the card")] = None,
        deck_id: Annotated[
            str | None, Field(alias="deck-id", description="Move the card to this deck")
        ] = None,
        template_id: TemplateId = None,
        archived: Archived = None,
        trashed: Annotated[
            str | None,
            Field(
                alias="trashed?",
                description="ISO 8601 timestamp if trashed, or omit to untrash",
            ),
        ] = None,
        review_reverse: ReviewReverse = None,
        pos: Pos = None,
        manual_tags: ManualTags = None,
        fields: Fields = None,
    ) -> CallToolResult:
        """Update an existing card's properties.

        Only the supplied fields are changed.
        """
        body = request_body(
            **{
                "content": content,
                "deck-id": deck_id,
                "template-id": template_id,
                "archived?": archived,
                "trashed?": trashed,
                "review-reverse?": review_reverse,
                "pos": pos,
                "manual-tags": manual_tags,
                "fields": fields,
            }
        )
        return await respond(client.update_card(id, body))

    @mcp.tool()
    async def delete_card(id: CardId) -> CallToolResult:
        """Permanently delete a card. WARNING: This cannot be undone.

        Use update_card with trashed? for soft delete.
        """
        return await respond(
            client.delete_card(id), render=lambda _: f"Card {id} deleted successfully."
        )

    @mcp.tool()
    async def add_attachment(
        card_id: Annotated[str, Field(alias="card-id", description="Card to attach the file to")],
        filename: Annotated[
            str, Field(description="Attachment filename, e.g. diagram.png")
        ],
        file_path: Annotated[
            str | None,
            Field(alias="file-path", description="Path to a local file to upload"),
        ] = None,
        base64_data: Annotated[
            str | None,
            Field(alias="base64-data", description="Base64-encoded file content"),
        ] = None,
        content_type: Annotated[
            str | None,
            Field(
                alias="content-type",
                description="MIME type of the file (guessed from the filename if omitted)",
            ),
        ] = None,
    ) -> CallToolResult:
        """Attach a file to a card. Reference it in card content as ![](@media/filename).

        Provide either base64-data or file-path. base64-data wins when both
        are given.

        Returns:
            Upload result, or an error if no usable file source was given
        """
        if base64_data:
            # Whitespace from line-wrapped data is allowed; anything else outside
            # the alphabet raises binascii.Error.
            content = base64.b64decode("".join(base64_data.split()), validate=True)
            mime_type = content_type or DEFAULT_CONTENT_TYPE
        elif file_path:
            if not allow_local_files:
                return error_result(
                    "Error: file-path is not supported by this server. Use base64-data instead."
                )
            path = anyio.Path(file_path)
            if not await path.is_file():
                return error_result(f"Error: File not found: {file_path}")
            content = await path.read_bytes()
            mime_type = (
                content_type or mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
            )
        else:
            return error_result("Error: Either file-path or base64-data must be provided")

        logger.info("Uploading %s (%d bytes) to card %s", filename, len(content), card_id)
        return await respond(
            client.add_attachment(card_id, content, filename, mime_type),
            render=lambda result: (
                "Attachment uploaded successfully. "
                f"Reference in card content as: ![](@media/{filename})\n\n{pretty_json(result)}"
            ),
        )

    @mcp.tool()
    async def delete_attachment(
        card_id: Annotated[str, Field(alias="card-id", description="Card the file is on")],
        filename: Annotated[str, Field(description="Attachment filename to remove")],
    ) -> CallToolResult:
        """Remove an attachment from a card."""
        return await respond(
            client.delete_attachment(card_id, filename),
            render=lambda _: f"Attachment {filename} deleted from card {card_id}.",
        )
