"""MCP tools for Mochi cards, decks, templates and reviews."""

from fastmcp import FastMCP

from ..client import MochiClient
from .cards import register_card_tools
from .decks import register_deck_tools
from .due import register_due_tools
from .templates import register_template_tools

__all__ = [
    "register_all_tools",
    "register_card_tools",
    "register_deck_tools",
    "register_due_tools",
    "register_template_tools",
]


def register_all_tools(mcp: FastMCP, client: MochiClient, *, allow_local_files: bool = True) -> None:
    """Register every tool group on a server."""
    register_card_tools(mcp, client, allow_local_files=allow_local_files)
    register_deck_tools(mcp, client)
    register_template_tools(mcp, client)
    register_due_tools(mcp, client)
