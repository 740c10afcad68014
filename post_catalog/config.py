"""Configuration for post_catalog.

Values come from the defaults below, then an optional YAML file
(``POST_CATALOG_CONFIG`` or ~/.post_catalog/config.yaml), then
``POST_CATALOG_*`` environment variables.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

ENV_PREFIX = "POST_CATALOG_"


def _default_config_path() -> Path:
    env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
    if env_path:
        return Path(env_path)
    return Path.home() / ".post_catalog" / "config.yaml"


@dataclass
class ServerConfig:
    """Runtime configuration for the server and command line."""

    name: str = "post_catalog"
    log_level: str = "INFO"
    content_dir: str = "content"
    output_dir: str = "public"
    site_title: str = "Posts"
    base_url: str = "/"
    log_file: Optional[str] = None
    logging_destinations: Dict[str, Any] = field(default_factory=dict)


def load_config(path: Optional[Path] = None) -> ServerConfig:
    """Load configuration from file and environment.

    Args:
        path: Optional YAML config file (defaults to the standard location)

    Returns:
        ServerConfig with all overrides applied

    Raises:
        ValueError: If the config file is not a YAML mapping
    """
    values: Dict[str, Any] = {}
    known = {f.name for f in fields(ServerConfig)}

    config_path = path or _default_config_path()
    if config_path.is_file():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        values.update({k: v for k, v in loaded.items() if k in known})

    for name in known - {"logging_destinations"}:
        env_value = os.environ.get(ENV_PREFIX + name.upper())
        if env_value is not None:
            values[name] = env_value

    return ServerConfig(**values)


_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_config()
    return _config
