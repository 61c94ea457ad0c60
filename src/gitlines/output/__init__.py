"""Output formatters for gitlines."""

from gitlines.output.base import Formatter
from gitlines.output.json import JSONFormatter
from gitlines.output.text import TextFormatter

_FORMATTERS: dict[str, type[Formatter]] = {
    "text": TextFormatter,
    "json": JSONFormatter,
}


def get_formatter(name: str, color: bool = True, line_numbers: bool = True) -> Formatter:
    """Get a formatter by name.

    Args:
        name: Formatter name (text, json).
        color: Use ANSI colors where the format supports them.
        line_numbers: Show the old/new line-number gutter.

    Returns:
        Formatter instance.

    Raises:
        ValueError: If formatter name is unknown.
    """
    if name not in _FORMATTERS:
        raise ValueError(f"Unknown formatter: {name}")
    return _FORMATTERS[name](color=color, line_numbers=line_numbers)


__all__ = [
    "Formatter",
    "TextFormatter",
    "JSONFormatter",
    "get_formatter",
]
