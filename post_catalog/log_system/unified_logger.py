"""Unified logger for post_catalog.

All modules obtain their logger through ``UnifiedLogger.get_logger(__name__)``.
The handlers hang off the ``post_catalog`` root logger, so loggers created
before initialization pick up the configured destinations too.
"""

import logging
from typing import Any, List

from post_catalog.log_system.destinations import (
    DESTINATION_FACTORIES,
    DestinationConfig,
    create_handler,
)

ROOT_LOGGER_NAME = "post_catalog"


class UnifiedLogger:
    """Process-wide logging setup shared by the server, tools and CLI."""

    _handlers: List[logging.Handler] = []
    _initialized: bool = False

    @classmethod
    def initialize_from_config(cls, destinations: List[DestinationConfig], config: Any) -> None:
        """Install one handler per enabled destination.

        Calling this again replaces the previously installed handlers.
        """
        root = logging.getLogger(ROOT_LOGGER_NAME)
        cls._remove_handlers(root)

        for dest in destinations:
            if not dest.enabled:
                continue
            handler = create_handler(dest)
            root.addHandler(handler)
            cls._handlers.append(handler)

        root.setLevel(str(getattr(config, "log_level", "INFO")).upper())
        root.propagate = False
        cls._initialized = True

    @classmethod
    def initialize_default(cls, config: Any) -> None:
        """Log to stderr, and to ``config.log_file`` when one is set."""
        destinations = [DestinationConfig(type="stderr")]
        log_file = getattr(config, "log_file", None)
        if log_file:
            destinations.append(DestinationConfig(type="file", settings={"path": log_file}))
        cls.initialize_from_config(destinations, config)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    @classmethod
    def get_available_destinations(cls) -> List[str]:
        return sorted(DESTINATION_FACTORIES)

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    @classmethod
    async def close(cls) -> None:
        """Flush and detach every installed handler."""
        cls._remove_handlers(logging.getLogger(ROOT_LOGGER_NAME))
        cls._initialized = False

    @classmethod
    def _remove_handlers(cls, root: logging.Logger) -> None:
        for handler in cls._handlers:
            root.removeHandler(handler)
            handler.flush()
            handler.close()
        cls._handlers = []
