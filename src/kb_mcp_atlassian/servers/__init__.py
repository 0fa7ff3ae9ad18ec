"""Server startup for KB MCP Atlassian."""

from .main import create_server, start_server

__all__ = ["create_server", "start_server"]
