"""MCP server bridging AI assistants to the Mochi Cards spaced-repetition API."""

__version__ = "1.0.0"
