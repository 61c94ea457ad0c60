"""Configuration loading and validation for gitlines."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from gitlines.diff.markers import DEFAULT_MARKER_SIZE

CONFIG_NAMES = (".gitlines.yaml", ".gitlines.yml")
OUTPUT_FORMATS = {"text", "json"}


class ConfigError(Exception):
    """Error in configuration."""

    pass


@dataclass
class ConflictConfig:
    """Configuration for conflict marker scanning."""

    marker_size: int = DEFAULT_MARKER_SIZE


@dataclass
class Config:
    """Full application configuration."""

    output_format: str = "text"
    color: bool = True
    line_numbers: bool = True
    conflicts: ConflictConfig = field(default_factory=ConflictConfig)

    def __post_init__(self) -> None:
        validate_config(self)


def validate_config(config: Config) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If any values are invalid.
    """
    if config.output_format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output_format must be one of {sorted(OUTPUT_FORMATS)}, got {config.output_format}"
        )

    marker_size = config.conflicts.marker_size
    if not isinstance(marker_size, int) or isinstance(marker_size, bool) or marker_size < 1:
        raise ConfigError(f"conflicts.marker_size must be a positive integer, got {marker_size!r}")

    for name in ("color", "line_numbers"):
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"{name} must be true or false, got {getattr(config, name)!r}")


def find_config_file(start_path: Optional[str] = None) -> Optional[str]:
    """Find .gitlines.yaml in current directory or parents.

    Args:
        start_path: Starting directory (defaults to cwd).

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path:
        current = Path(start_path).resolve()
    else:
        current = Path.cwd()

    # Search up to filesystem root or git root
    while True:
        for name in CONFIG_NAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)

        # Stop at git root
        if (current / ".git").exists():
            break

        # Stop at filesystem root
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file.

    Args:
        path: Path to config file. If None, searches for .gitlines.yaml.

    Returns:
        Config object with loaded or default values.

    Raises:
        ConfigError: If the config file is invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}") from e

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a mapping")

    return _parse_config(raw)


def _parse_config(raw: dict) -> Config:
    """Parse raw YAML dict into Config object."""
    settings = raw.get("settings", {})
    if settings is None:
        settings = {}
    if not isinstance(settings, dict):
        raise ConfigError("settings must be a mapping")

    conflicts = raw.get("conflicts", {})
    if conflicts is None:
        conflicts = {}
    if not isinstance(conflicts, dict):
        raise ConfigError("conflicts must be a mapping")

    return Config(
        output_format=settings.get("output_format", "text"),
        color=settings.get("color", True),
        line_numbers=settings.get("line_numbers", True),
        conflicts=ConflictConfig(marker_size=conflicts.get("marker_size", DEFAULT_MARKER_SIZE)),
    )


def merge_cli_args(config: Config, **kwargs: Any) -> Config:
    """Merge CLI arguments into configuration.

    CLI args take precedence over config file values.

    Args:
        config: Base configuration.
        **kwargs: CLI arguments (output_format, color, line_numbers, marker_size).

    Returns:
        New Config with merged values.
    """
    output_format = config.output_format
    color = config.color
    line_numbers = config.line_numbers
    marker_size = config.conflicts.marker_size

    # Override with CLI args if provided
    if kwargs.get("output_format") is not None:
        output_format = kwargs["output_format"]

    if kwargs.get("color") is not None:
        color = kwargs["color"]

    if kwargs.get("line_numbers") is not None:
        line_numbers = kwargs["line_numbers"]

    if kwargs.get("marker_size") is not None:
        marker_size = kwargs["marker_size"]

    return Config(
        output_format=output_format,
        color=color,
        line_numbers=line_numbers,
        conflicts=ConflictConfig(marker_size=marker_size),
    )
