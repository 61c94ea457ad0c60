"""Text output formatter for gitlines."""

from typing import Optional

from gitlines.conflict.regions import ConflictRegion
from gitlines.diff.types import FileDiff, Line, LineKind, ParsedDiff
from gitlines.output.base import Formatter


# ANSI color codes
COLORS = {
    LineKind.HEADER: "\033[96m",  # Cyan
    LineKind.ADDED: "\033[92m",  # Green
    LineKind.REMOVED: "\033[91m",  # Red
    LineKind.CONFLICT_START: "\033[91m",
    LineKind.CONFLICT_MIDDLE: "\033[91m",
    LineKind.CONFLICT_END: "\033[91m",
    LineKind.CONFLICT_OURS: "\033[94m",  # Blue
    LineKind.CONFLICT_THEIRS: "\033[92m",
}
DIM = "\033[90m"
RESET = "\033[0m"
BOLD = "\033[1m"


class TextFormatter(Formatter):
    """Human-readable text formatter for terminal output."""

    @property
    def name(self) -> str:
        return "text"

    def format(self, diff: ParsedDiff, stat_only: bool = False) -> str:
        """Format a parsed diff as human-readable text.

        Args:
            diff: The parsed diff to format.
            stat_only: Only show per-file added/removed counts.

        Returns:
            Formatted text output.
        """
        if not diff.files:
            return "No changes."

        if stat_only:
            return self._format_stat(diff)

        lines: list[str] = []
        for file_diff in diff.files:
            lines.extend(self._format_file(file_diff))
            lines.append("")

        return "\n".join(lines).rstrip("\n")

    def format_conflicts(self, path: str, regions: list[ConflictRegion]) -> str:
        """Format conflict regions as a short listing."""
        if not regions:
            return f"{path}: no conflicts."

        lines = [f"{self._style(path, BOLD)}: {len(regions)} conflict(s)"]
        for number, region in enumerate(regions, start=1):
            first = _first_number(region.lines)
            where = f"line {first}" if first is not None else "unnumbered"
            lines.append(
                f"  #{number} {where}: "
                f"{self._style(region.ours_label or 'ours', COLORS[LineKind.CONFLICT_OURS])} "
                f"({len(region.ours)} line(s)) vs "
                f"{self._style(region.theirs_label or 'theirs', COLORS[LineKind.CONFLICT_THEIRS])} "
                f"({len(region.theirs)} line(s))"
            )
        return "\n".join(lines)

    def _format_stat(self, diff: ParsedDiff) -> str:
        lines: list[str] = []
        width = max(len(file_diff.path) for file_diff in diff.files)

        for file_diff in diff.files:
            stats = file_diff.line_stats
            if file_diff.is_binary:
                counts = "Bin"
            else:
                counts = (
                    f"{self._style(f'+{stats.added}', COLORS[LineKind.ADDED])} "
                    f"{self._style(f'-{stats.removed}', COLORS[LineKind.REMOVED])}"
                )
            lines.append(f" {file_diff.status.short_code} {file_diff.path.ljust(width)} | {counts}")

        total = diff.line_stats
        lines.append(
            f" {len(diff.files)} file(s) changed, "
            f"{total.added} insertion(s)(+), {total.removed} deletion(s)(-)"
        )
        return "\n".join(lines)

    def _format_file(self, file_diff: FileDiff) -> list[str]:
        lines: list[str] = []
        stats = file_diff.line_stats

        title = file_diff.path or "<fragment>"
        if file_diff.is_renamed:
            title = f"{file_diff.from_path} -> {file_diff.to_path}"
        lines.append(
            f"{self._style(title, BOLD)} ({file_diff.status.value}) "
            f"+{stats.added} -{stats.removed}"
        )

        if file_diff.is_binary:
            lines.append("  Binary file, no line-level changes")
            return lines

        if file_diff.old_mode and file_diff.new_mode and file_diff.old_mode != file_diff.new_mode:
            lines.append(f"  mode {file_diff.old_mode} -> {file_diff.new_mode}")

        for line in file_diff.lines(include_headers=True):
            lines.append(self._format_line(line))
            if line.trailer is not None:
                lines.append(self._gutter(None, None) + self._style(line.trailer, DIM))

        return lines

    def _format_line(self, line: Line) -> str:
        color = COLORS.get(line.kind, "")
        if line.kind == LineKind.HEADER:
            return self._style(line.raw_text, color)
        return self._gutter(line.old_line_number, line.new_line_number) + self._style(
            line.raw_text, color
        )

    def _gutter(self, old: Optional[int], new: Optional[int]) -> str:
        if not self.line_numbers:
            return ""
        old_text = str(old) if old is not None else ""
        new_text = str(new) if new is not None else ""
        return self._style(f"{old_text:>5} {new_text:>5} ", DIM) + "|"

    def _style(self, text: str, code: str) -> str:
        if not self.color or not code:
            return text
        return f"{code}{text}{RESET}"


def _first_number(lines: tuple[Line, ...]) -> Optional[int]:
    for line in lines:
        if line.new_line_number is not None:
            return line.new_line_number
    return None
