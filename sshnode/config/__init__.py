"""Configuration types and loading."""

from .loader import ConfigError, find_config_file, load_config
from .protocol import DEFAULT_BASE_DIR, Config, NodeConfig, Slug

__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_BASE_DIR",
    "NodeConfig",
    "Slug",
    "find_config_file",
    "load_config",
]
