"""Conflict regions and side resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from gitlines.conflict.annotator import ConflictScanner
from gitlines.diff.markers import DEFAULT_MARKER_SIZE
from gitlines.diff.types import FileDiff, Line, LineKind


class Side(Enum):
    """Which side of a conflict to keep."""

    OURS = "ours"
    THEIRS = "theirs"
    BOTH = "both"


@dataclass(frozen=True)
class ConflictRegion:
    """Lines between a conflict start marker and its matching end marker."""

    start: Line
    ours: tuple[Line, ...]
    middle: Line
    theirs: tuple[Line, ...]
    end: Line

    @property
    def ours_label(self) -> str:
        """Label after the start marker, usually HEAD."""
        return self.start.content.lstrip("<").strip()

    @property
    def theirs_label(self) -> str:
        """Label after the end marker, usually the merged branch."""
        return self.end.content.lstrip(">").strip()

    @property
    def ours_text(self) -> str:
        return "\n".join(line.content for line in self.ours)

    @property
    def theirs_text(self) -> str:
        return "\n".join(line.content for line in self.theirs)

    @property
    def lines(self) -> tuple[Line, ...]:
        return (self.start, *self.ours, self.middle, *self.theirs, self.end)

    def to_dict(self) -> dict:
        """Convert region to dictionary."""
        return {
            "ours_label": self.ours_label,
            "theirs_label": self.theirs_label,
            "ours": [line.to_dict() for line in self.ours],
            "theirs": [line.to_dict() for line in self.theirs],
        }


def find_conflict_regions(file_diff: FileDiff) -> list[ConflictRegion]:
    """Collect the conflict regions of an annotated file diff, in order."""
    regions: list[ConflictRegion] = []
    start: Optional[Line] = None
    middle: Optional[Line] = None
    ours: list[Line] = []
    theirs: list[Line] = []

    for line in file_diff.lines():
        kind = line.kind
        if kind == LineKind.CONFLICT_START:
            start, middle = line, None
            ours, theirs = [], []
        elif start is None:
            continue
        elif kind == LineKind.CONFLICT_OURS and middle is None:
            ours.append(line)
        elif kind == LineKind.CONFLICT_MIDDLE and middle is None:
            middle = line
        elif kind == LineKind.CONFLICT_THEIRS and middle is not None:
            theirs.append(line)
        elif kind == LineKind.CONFLICT_END and middle is not None:
            regions.append(
                ConflictRegion(
                    start=start,
                    ours=tuple(ours),
                    middle=middle,
                    theirs=tuple(theirs),
                    end=line,
                )
            )
            start = middle = None

    return regions


def resolve_conflicts(
    text: str,
    side: Union[Side, str],
    marker_size: int = DEFAULT_MARKER_SIZE,
) -> str:
    """Rewrite conflicted file text keeping one side of every region.

    Args:
        text: Working-tree file contents with conflict markers.
        side: Side to keep; BOTH keeps ours followed by theirs.
        marker_size: Length of the conflict markers.

    Returns:
        Resolved text. Line endings are preserved and unterminated regions
        are left untouched.
    """
    side = Side(side)
    parts = text.split("\n")
    chunks = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        chunks.append(parts[-1])

    kinds = ConflictScanner(marker_size).classify([chunk.rstrip("\n") for chunk in chunks])

    keep = {
        Side.OURS: {LineKind.CONFLICT_OURS},
        Side.THEIRS: {LineKind.CONFLICT_THEIRS},
        Side.BOTH: {LineKind.CONFLICT_OURS, LineKind.CONFLICT_THEIRS},
    }[side]

    out: list[str] = []
    for chunk, kind in zip(chunks, kinds):
        if kind is None or kind in keep:
            out.append(chunk)
    return "".join(out)
