"""JSON output formatter for gitlines."""

import json

from gitlines import __version__
from gitlines.conflict.regions import ConflictRegion
from gitlines.diff.types import ParsedDiff
from gitlines.output.base import Formatter


class JSONFormatter(Formatter):
    """JSON formatter for machine-readable output."""

    @property
    def name(self) -> str:
        return "json"

    def format(self, diff: ParsedDiff, stat_only: bool = False) -> str:
        """Format a parsed diff as JSON.

        Args:
            diff: The parsed diff to format.
            stat_only: Drop hunks and keep per-file counts only.

        Returns:
            Formatted JSON string.
        """
        output = {"version": __version__, **diff.to_dict()}

        if stat_only:
            for file_dict in output["files"]:
                file_dict.pop("hunks", None)

        return json.dumps(output, indent=2)

    def format_conflicts(self, path: str, regions: list[ConflictRegion]) -> str:
        output = {
            "version": __version__,
            "path": path,
            "conflicts": [region.to_dict() for region in regions],
        }
        return json.dumps(output, indent=2)
