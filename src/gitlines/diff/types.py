"""Diff data structures for gitlines."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


class LineKind(Enum):
    """Type of line in a diff or conflicted file."""

    HEADER = "header"
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    CONFLICT_START = "conflict_start"
    CONFLICT_OURS = "conflict_ours"
    CONFLICT_MIDDLE = "conflict_middle"
    CONFLICT_THEIRS = "conflict_theirs"
    CONFLICT_END = "conflict_end"

    @property
    def is_conflict(self) -> bool:
        """Check if this kind belongs to a conflict region."""
        return self in _CONFLICT_KINDS

    @property
    def is_marker(self) -> bool:
        """Check if this kind is one of the three conflict marker lines."""
        return self in _MARKER_KINDS


_MARKER_KINDS = frozenset(
    {LineKind.CONFLICT_START, LineKind.CONFLICT_MIDDLE, LineKind.CONFLICT_END}
)
_CONFLICT_KINDS = _MARKER_KINDS | {LineKind.CONFLICT_OURS, LineKind.CONFLICT_THEIRS}


class FileStatus(Enum):
    """How a file changed."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    CONFLICT = "conflict"

    @property
    def short_code(self) -> str:
        """One-letter code as shown by `git status --short`."""
        return _SHORT_CODES[self]


_SHORT_CODES = {
    FileStatus.ADDED: "A",
    FileStatus.MODIFIED: "M",
    FileStatus.DELETED: "D",
    FileStatus.RENAMED: "R",
    FileStatus.CONFLICT: "U",
}


@dataclass(frozen=True)
class Line:
    """A single row of diff or file text."""

    kind: LineKind
    raw_text: str
    content: str
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None
    trailer: Optional[str] = None  # raw "\ No newline at end of file"

    @property
    def no_newline_at_eof(self) -> bool:
        return self.trailer is not None

    @property
    def comment_line_number(self) -> Optional[int]:
        """New-side line number a review comment on this line anchors to."""
        if self.kind in (LineKind.ADDED, LineKind.UNCHANGED):
            return self.new_line_number
        return None

    def to_dict(self) -> dict:
        """Convert line to dictionary."""
        return {
            "kind": self.kind.value,
            "raw_text": self.raw_text,
            "content": self.content,
            "old_line_number": self.old_line_number,
            "new_line_number": self.new_line_number,
            "no_newline_at_eof": self.no_newline_at_eof,
        }


@dataclass(frozen=True)
class LineStats:
    """Added/removed line totals."""

    added: int = 0
    removed: int = 0

    def __add__(self, other: "LineStats") -> "LineStats":
        if not isinstance(other, LineStats):
            return NotImplemented
        return LineStats(added=self.added + other.added, removed=self.removed + other.removed)

    def to_dict(self) -> dict:
        return {"added": self.added, "removed": self.removed}


@dataclass(frozen=True)
class Hunk:
    """A contiguous changed section in a file diff."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[Line, ...]
    header: str
    section: str = ""

    def added_lines(self) -> set[int]:
        """Return set of added line numbers (in new file)."""
        return {
            line.new_line_number
            for line in self.lines
            if line.kind == LineKind.ADDED and line.new_line_number is not None
        }

    def removed_lines(self) -> set[int]:
        """Return set of removed line numbers (in old file)."""
        return {
            line.old_line_number
            for line in self.lines
            if line.kind == LineKind.REMOVED and line.old_line_number is not None
        }

    @property
    def old_line_total(self) -> int:
        """Number of lines carrying an old-side line number."""
        return sum(1 for line in self.lines if line.old_line_number is not None)

    @property
    def new_line_total(self) -> int:
        """Number of lines carrying a new-side line number."""
        return sum(1 for line in self.lines if line.new_line_number is not None)

    @property
    def is_consistent(self) -> bool:
        """Check that the body matches the counts declared in the header."""
        return self.old_line_total == self.old_count and self.new_line_total == self.new_count

    @property
    def line_stats(self) -> LineStats:
        added = sum(1 for line in self.lines if line.kind == LineKind.ADDED)
        removed = sum(1 for line in self.lines if line.kind == LineKind.REMOVED)
        return LineStats(added=added, removed=removed)

    def header_line(self) -> Line:
        """Return the hunk header as a renderable line."""
        return Line(kind=LineKind.HEADER, raw_text=self.header, content=self.header)

    def to_dict(self) -> dict:
        """Convert hunk to dictionary."""
        return {
            "header": self.header,
            "old_start": self.old_start,
            "old_count": self.old_count,
            "new_start": self.new_start,
            "new_count": self.new_count,
            "section": self.section,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class FileDiff:
    """Changes to a single file.

    An empty ``from_path`` means the file was added, an empty ``to_path``
    means it was deleted. ``combined`` marks ``diff --cc`` output, whose
    body lines carry one prefix column per parent. ``line_stats`` is
    computed from line kinds on every access and never stored.
    """

    from_path: str
    to_path: str
    status: FileStatus
    hunks: tuple[Hunk, ...]
    is_binary: bool = False
    header_lines: tuple[str, ...] = ()
    old_mode: Optional[str] = None
    new_mode: Optional[str] = None
    similarity: Optional[int] = None
    working_tree: bool = False
    combined: bool = False

    @property
    def path(self) -> str:
        """Return the current path (to_path if set, else from_path)."""
        return self.to_path or self.from_path

    @property
    def is_new(self) -> bool:
        """Check if this is a new file."""
        return self.status == FileStatus.ADDED

    @property
    def is_deleted(self) -> bool:
        """Check if this file was deleted."""
        return self.status == FileStatus.DELETED

    @property
    def is_renamed(self) -> bool:
        """Check if this file was renamed."""
        return self.status == FileStatus.RENAMED

    @property
    def has_conflicts(self) -> bool:
        return any(line.kind.is_conflict for line in self.lines())

    @property
    def line_stats(self) -> LineStats:
        total = LineStats()
        for hunk in self.hunks:
            total = total + hunk.line_stats
        return total

    def lines(self, include_headers: bool = False) -> Iterator[Line]:
        """Iterate over all lines of all hunks in order.

        Args:
            include_headers: Yield each hunk's header line before its body.
        """
        for hunk in self.hunks:
            if include_headers:
                yield hunk.header_line()
            yield from hunk.lines

    def changed_lines(self) -> set[int]:
        """Return set of all changed line numbers in new file (added lines)."""
        result: set[int] = set()
        for hunk in self.hunks:
            result.update(hunk.added_lines())
        return result

    def to_dict(self) -> dict:
        """Convert file diff to dictionary."""
        return {
            "from_path": self.from_path,
            "to_path": self.to_path,
            "status": self.status.value,
            "is_binary": self.is_binary,
            "old_mode": self.old_mode,
            "new_mode": self.new_mode,
            "similarity": self.similarity,
            "combined": self.combined,
            "line_stats": self.line_stats.to_dict(),
            "hunks": [hunk.to_dict() for hunk in self.hunks],
        }


@dataclass(frozen=True)
class ParsedDiff:
    """A complete parsed diff."""

    files: tuple[FileDiff, ...]

    def __iter__(self) -> Iterator[FileDiff]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def get_file(self, path: str) -> Optional[FileDiff]:
        """Get FileDiff by path (matches from_path or to_path)."""
        for file_diff in self.files:
            if path and (file_diff.to_path == path or file_diff.from_path == path):
                return file_diff
        return None

    def changed_lines(self, path: str) -> set[int]:
        """Get changed line numbers for a specific file."""
        file_diff = self.get_file(path)
        if file_diff is None:
            return set()
        return file_diff.changed_lines()

    @property
    def changed_files(self) -> list[str]:
        """List of all changed file paths."""
        return [file_diff.path for file_diff in self.files if file_diff.path]

    @property
    def line_stats(self) -> LineStats:
        total = LineStats()
        for file_diff in self.files:
            total = total + file_diff.line_stats
        return total

    def to_dict(self) -> dict:
        return {
            "files": [file_diff.to_dict() for file_diff in self.files],
            "line_stats": self.line_stats.to_dict(),
        }
