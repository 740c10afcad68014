"""Exception handling for MCP tools.

Unexpected exceptions are logged with their traceback and surfaced to the
client as a ToolError, which the MCP server reports as an error result.
"""

import functools
from typing import Callable

from mcp.server.fastmcp.exceptions import ToolError

from post_catalog.log_system.unified_logger import UnifiedLogger


def exception_handler(func: Callable) -> Callable:
    logger = UnifiedLogger.get_logger("tools")

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ToolError:
            raise
        except Exception as e:
            logger.error(f"Tool {func.__name__} failed: {type(e).__name__}: {e}", exc_info=True)
            raise ToolError(f"{func.__name__} failed: {type(e).__name__}: {e}") from e

    return wrapper
