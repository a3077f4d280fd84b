"""MCP server and CLI for IPv4 address classification and network resolution."""

__version__ = "0.1.0"
