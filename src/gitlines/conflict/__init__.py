"""Conflict marker handling for gitlines."""

from gitlines.conflict.annotator import (
    DEFAULT_MARKER_SIZE,
    ConflictScanner,
    ScanState,
    annotate,
    annotate_text,
    diff_kind,
)
from gitlines.conflict.regions import (
    ConflictRegion,
    Side,
    find_conflict_regions,
    resolve_conflicts,
)

__all__ = [
    "DEFAULT_MARKER_SIZE",
    "ConflictScanner",
    "ScanState",
    "annotate",
    "annotate_text",
    "diff_kind",
    "ConflictRegion",
    "Side",
    "find_conflict_regions",
    "resolve_conflicts",
]
