"""Logging system for post_catalog."""

from .correlation import (
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    reset_correlation_id,
)
from .destinations import DestinationConfig
from .unified_logger import UnifiedLogger

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
    "DestinationConfig",
    "UnifiedLogger",
]
