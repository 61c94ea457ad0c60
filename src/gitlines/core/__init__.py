"""Core module for gitlines."""

from gitlines.core.config import (
    Config,
    ConfigError,
    ConflictConfig,
    find_config_file,
    load_config,
    merge_cli_args,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConflictConfig",
    "load_config",
    "find_config_file",
    "merge_cli_args",
]
