"""MCP server package initialization"""

from post_catalog.server.app import create_mcp_server, register_tools

__all__ = ["create_mcp_server", "register_tools"]
