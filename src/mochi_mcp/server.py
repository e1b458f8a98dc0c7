"""FastMCP server factory and stdio entry point."""

import logging
import sys

from fastmcp import FastMCP

from . import __version__
from .client import MochiClient
from .config import configure_logging, settings
from .tools import register_all_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "mochi-mcp"

USAGE = """\
Error: MOCHI_API_KEY environment variable is required

To get your API key:
  1. Open the Mochi Cards app
  2. Go to Account Settings
  3. Find your API key

Then run with:
  MOCHI_API_KEY=your_api_key mochi-mcp
"""


def create_server(client: MochiClient, *, allow_local_files: bool = True) -> FastMCP:
    """Build a server with every Mochi tool bound to the given client.

    Args:
        client: Mochi client the tools call
        allow_local_files: Whether add_attachment may read file-path

    Returns:
        Configured FastMCP server
    """
    mcp = FastMCP(SERVER_NAME, version=__version__)
    register_all_tools(mcp, client, allow_local_files=allow_local_files)
    return mcp


def main() -> None:
    """Main entry point for the stdio MCP server."""
    if not settings.mochi_api_key:
        print(USAGE, file=sys.stderr, end="")
        sys.exit(1)

    configure_logging()
    client = MochiClient(settings.mochi_api_key)
    server = create_server(client, allow_local_files=settings.mochi_allow_local_files)

    logger.info("Mochi MCP server running on stdio")
    server.run(transport="stdio", show_banner=False)


if __name__ == "__main__":
    main()
