"""Correlation IDs for post_catalog logging.

Every log record carries a correlation id so that the lines produced by one
tool call (or by server startup) can be grouped together.
"""

import contextvars
import uuid
from typing import Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "post_catalog_correlation_id", default=None
)
_initialization_correlation_id: Optional[str] = None


def generate_correlation_id() -> str:
    """Generate a new correlation id of the form ``req_<hex>``."""
    return f"req_{uuid.uuid4().hex[:12]}"


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    _correlation_id.reset(token)


def set_initialization_correlation_id(correlation_id: str) -> None:
    global _initialization_correlation_id
    _initialization_correlation_id = correlation_id


def clear_initialization_correlation_id() -> None:
    global _initialization_correlation_id
    _initialization_correlation_id = None


def get_correlation_id() -> str:
    """Return the active correlation id.

    The per-call id wins, then the startup id, then ``"-"``.
    """
    return _correlation_id.get() or _initialization_correlation_id or "-"
