"""Log destinations for post_catalog.

A destination turns a ``DestinationConfig`` into a ``logging.Handler``.
"""

import logging
import sys
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict

from post_catalog.log_system.correlation import get_correlation_id

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(correlation_id)s] %(message)s"


@dataclass
class DestinationConfig:
    """Configuration for one log destination."""

    type: str = "stderr"
    enabled: bool = True
    settings: Dict[str, Any] = field(default_factory=dict)


class CorrelationIdFilter(logging.Filter):
    """Attach the active correlation id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def _stderr_handler(settings: Dict[str, Any]) -> logging.Handler:
    # stdout belongs to the STDIO transport
    return logging.StreamHandler(sys.stderr)


def _file_handler(settings: Dict[str, Any]) -> logging.Handler:
    path = settings.get("path")
    if not path:
        raise ValueError("File log destination requires a 'path' setting")
    log_path = Path(path).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_path,
        maxBytes=int(settings.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(settings.get("backup_count", 3)),
        encoding="utf-8",
    )


DESTINATION_FACTORIES: Dict[str, Callable[[Dict[str, Any]], logging.Handler]] = {
    "stderr": _stderr_handler,
    "file": _file_handler,
}


def create_handler(dest: DestinationConfig) -> logging.Handler:
    """Create a configured handler for a destination.

    Raises:
        ValueError: If the destination type is unknown
    """
    factory = DESTINATION_FACTORIES.get(dest.type)
    if factory is None:
        raise ValueError(
            f"Unknown log destination '{dest.type}'. "
            f"Available: {', '.join(sorted(DESTINATION_FACTORIES))}"
        )

    handler = factory(dest.settings)
    handler.setFormatter(logging.Formatter(dest.settings.get("format", LOG_FORMAT)))
    handler.addFilter(CorrelationIdFilter())
    level = dest.settings.get("level")
    if level:
        handler.setLevel(str(level).upper())
    return handler
