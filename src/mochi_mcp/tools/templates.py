"""MCP tools for Mochi card templates."""

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..client import MochiClient
from ..formatting import request_body, respond
from ..models import Bookmark, Limit, TemplateFields, TemplateOptions, TemplateStyle


def register_template_tools(mcp: FastMCP, client: MochiClient) -> None:
    """Register template tools on a server.

    Args:
        mcp: Server to register on
        client: Mochi client the tools call
    """

    @mcp.tool()
    async def list_templates(limit: Limit = None, bookmark: Bookmark = None) -> CallToolResult:
        """List all card templates. Returns paginated results."""
        return await respond(client.list_templates(limit=limit, bookmark=bookmark))

    @mcp.tool()
    async def get_template(
        id: Annotated[str, Field(description="Template ID")],
    ) -> CallToolResult:
        """Retrieve a single template by its ID.

        Useful for examining template structure before creating cards.
        """
        return await respond(client.get_template(id))

    @mcp.tool()
    async def create_template(
        name: Annotated[
            str, Field(min_length=1, max_length=64, description="Template name (1-64 characters)")
        ],
        content: Annotated[str, Field(description="Template content in Markdown")],
        fields: Annotated[
            TemplateFields, Field(description="Field definitions keyed by field ID")
        ],
        pos: Annotated[
            str | None, Field(description="Relative position for sorting (lexicographic)")
        ] = None,
        style: Annotated[TemplateStyle | None, Field(description="Template styling")] = None,
        options: Annotated[TemplateOptions | None, Field(description="Template options")] = None,
    ) -> CallToolResult:
        """Create a new card template.

        Use field placeholders like << Field name >> in content.

        Example:
            >>> create_template(
            ...     name="Vocab",
            ...     content="<< Word >>\\n---\\n<< Meaning >>",
            ...     fields={"word": {"id": "word", "name": "Word"}},
            ... )
        """
        body = request_body(
            name=name, content=content, pos=pos, fields=fields, style=style, options=options
        )
        return await respond(client.create_template(body))
