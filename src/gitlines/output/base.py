"""Base formatter interface for gitlines."""

from abc import ABC, abstractmethod

from gitlines.conflict.regions import ConflictRegion
from gitlines.diff.types import ParsedDiff


class Formatter(ABC):
    """Abstract base class for output formatters."""

    def __init__(self, color: bool = True, line_numbers: bool = True) -> None:
        self.color = color
        self.line_numbers = line_numbers

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this formatter."""
        pass

    @abstractmethod
    def format(self, diff: ParsedDiff, stat_only: bool = False) -> str:
        """Format a parsed diff.

        Args:
            diff: The parsed diff to format.
            stat_only: Only show per-file added/removed counts.

        Returns:
            Formatted output as a string.
        """
        pass

    @abstractmethod
    def format_conflicts(self, path: str, regions: list[ConflictRegion]) -> str:
        """Format the conflict regions found in one file."""
        pass
