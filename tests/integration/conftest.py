"""Fixtures for MCP integration tests.

The server is exercised through the MCP in-memory transport, so tool calls go
through the full protocol path: schema validation, the decorator chain and
result serialization.
"""

import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from post_catalog.server.app import create_mcp_server
from post_catalog.log_system.unified_logger import UnifiedLogger
from post_catalog.storage import database


@pytest.fixture
async def mcp_session(app_config, tmp_path, monkeypatch):
    """Yield (session, transport) for a server bound to the test content."""
    monkeypatch.setenv("POST_CATALOG_DB_PATH", str(tmp_path / "catalog.db"))
    monkeypatch.setattr(database, "_db_connection", None)

    server = create_mcp_server(app_config)

    async with create_connected_server_and_client_session(server._mcp_server) as session:
        yield session, "memory"

    await database.close_database()
    await UnifiedLogger.close()
