"""Per-call logging for MCP tools.

Each call gets its own correlation id, and its start, end and duration are
logged.
"""

import functools
import time
from typing import Any, Callable, Dict, Optional

from post_catalog.log_system.correlation import (
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from post_catalog.log_system.unified_logger import UnifiedLogger

MAX_LOGGED_ARG_LENGTH = 200


def _summarize(kwargs: Dict[str, Any]) -> str:
    parts = []
    for key, value in kwargs.items():
        if key == "ctx":
            continue
        text = repr(value)
        if len(text) > MAX_LOGGED_ARG_LENGTH:
            text = text[:MAX_LOGGED_ARG_LENGTH] + "..."
        parts.append(f"{key}={text}")
    return ", ".join(parts)


def tool_logger(func: Callable, config: Optional[Dict[str, Any]] = None) -> Callable:
    """Wrap an async tool with call logging.

    Args:
        func: Tool function
        config: Server config as a dict; ``name`` is included in the log lines
    """
    logger = UnifiedLogger.get_logger("tools")
    server_name = (config or {}).get("name", "post_catalog")

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        token = set_correlation_id(generate_correlation_id())
        started = time.perf_counter()
        logger.info(f"[{server_name}] {func.__name__} started ({_summarize(kwargs)})")
        try:
            result = await func(*args, **kwargs)
        except Exception:
            elapsed = (time.perf_counter() - started) * 1000
            logger.info(f"[{server_name}] {func.__name__} raised after {elapsed:.1f}ms")
            raise
        else:
            elapsed = (time.perf_counter() - started) * 1000
            success = result.get("success") if isinstance(result, dict) else None
            logger.info(f"[{server_name}] {func.__name__} finished in {elapsed:.1f}ms (success={success})")
            return result
        finally:
            reset_correlation_id(token)

    return wrapper
