"""Unit tests for the tool decorators."""

import inspect
import logging

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from post_catalog.decorators.exception_handler import exception_handler
from post_catalog.decorators.tool_logger import tool_logger
from post_catalog.decorators.type_converter import convert_value, type_converter
from post_catalog.log_system.correlation import get_correlation_id


# Mark all tests as async
pytestmark = pytest.mark.anyio


async def sample_tool(include_drafts: bool = False, limit: int = 50, since: str = "") -> dict:
    return {
        "success": True,
        "include_drafts": include_drafts,
        "limit": limit,
        "since": since,
        "correlation_id": get_correlation_id(),
    }


async def failing_tool(slug: str) -> dict:
    raise RuntimeError(f"boom {slug}")


class TestTypeConverter:
    """Tests for string argument conversion."""

    async def test_converts_strings(self):
        result = await type_converter(sample_tool)(include_drafts="true", limit="10", since="2020-01-01")

        assert result["include_drafts"] is True
        assert result["limit"] == 10
        assert result["since"] == "2020-01-01"

    async def test_native_values_unchanged(self):
        result = await type_converter(sample_tool)(include_drafts=False, limit=3)

        assert result["include_drafts"] is False
        assert result["limit"] == 3

    async def test_invalid_value_raises(self):
        with pytest.raises(ValueError, match="limit"):
            await type_converter(sample_tool)(limit="many")

    def test_preserves_signature(self):
        wrapped = exception_handler(tool_logger(type_converter(sample_tool), {"name": "test"}))

        assert inspect.signature(wrapped) == inspect.signature(sample_tool)
        assert wrapped.__name__ == "sample_tool"

    @pytest.mark.parametrize("value,expected", [("yes", True), ("0", False), ("", False), ("ON", True)])
    def test_bool_strings(self, value, expected):
        assert convert_value(value, bool) is expected


class TestToolLogger:
    """Tests for per-call logging."""

    async def test_sets_correlation_id_per_call(self):
        wrapped = tool_logger(sample_tool, {"name": "test"})

        first = await wrapped()
        second = await wrapped()

        assert first["correlation_id"].startswith("req_")
        assert first["correlation_id"] != second["correlation_id"]
        assert get_correlation_id() == "-"

    async def test_logs_start_and_finish(self, caplog, monkeypatch):
        monkeypatch.setattr(logging.getLogger("post_catalog"), "propagate", True)
        wrapped = tool_logger(sample_tool, {"name": "test"})

        with caplog.at_level(logging.INFO, logger="post_catalog"):
            await wrapped(limit=5)

        messages = [r.getMessage() for r in caplog.records]
        assert any("sample_tool started (limit=5)" in m for m in messages)
        assert any("sample_tool finished" in m and "success=True" in m for m in messages)


class TestExceptionHandler:
    """Tests for converting failures to tool errors."""

    async def test_wraps_unexpected_errors(self):
        with pytest.raises(ToolError, match="failing_tool failed: RuntimeError: boom a"):
            await exception_handler(failing_tool)(slug="a")

    async def test_passes_results_through(self):
        result = await exception_handler(sample_tool)()

        assert result["success"] is True
