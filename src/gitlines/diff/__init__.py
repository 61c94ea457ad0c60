"""Diff parsing module for gitlines."""

from gitlines.diff.markers import DEFAULT_MARKER_SIZE, is_bare_marker
from gitlines.diff.parser import ParseError, parse_diff, parse_diff_file
from gitlines.diff.patch import PatchError, format_hunk_header, format_patch, select_lines
from gitlines.diff.types import (
    FileDiff,
    FileStatus,
    Hunk,
    Line,
    LineKind,
    LineStats,
    ParsedDiff,
)

__all__ = [
    "LineKind",
    "Line",
    "LineStats",
    "Hunk",
    "FileStatus",
    "FileDiff",
    "ParsedDiff",
    "parse_diff",
    "parse_diff_file",
    "ParseError",
    "PatchError",
    "format_hunk_header",
    "format_patch",
    "select_lines",
    "DEFAULT_MARKER_SIZE",
    "is_bare_marker",
]
