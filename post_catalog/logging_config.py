"""Logging entry points for post_catalog."""

from post_catalog.config import ServerConfig
from post_catalog.log_system.unified_logger import ROOT_LOGGER_NAME, UnifiedLogger

logger = UnifiedLogger.get_logger(ROOT_LOGGER_NAME)


def setup_logging(config: ServerConfig) -> None:
    """Initialize logging from ``config.logging_destinations`` or the defaults."""
    from post_catalog.log_system.destinations import DestinationConfig

    destinations = [
        DestinationConfig(
            type=dest_dict.get("type", "stderr"),
            enabled=dest_dict.get("enabled", True),
            settings=dest_dict.get("settings", {}),
        )
        for dest_dict in (config.logging_destinations or {}).get("destinations", [])
    ]

    if destinations:
        UnifiedLogger.initialize_from_config(destinations, config)
    else:
        UnifiedLogger.initialize_default(config)
