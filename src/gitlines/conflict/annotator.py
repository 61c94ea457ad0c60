"""Conflict marker annotation for gitlines.

Conflict detection is advisory: unterminated regions and stray markers fall
back to the line's ordinary kind instead of raising.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional, Sequence

from gitlines.diff.markers import DEFAULT_MARKER_SIZE, marker_patterns
from gitlines.diff.patch import format_hunk_header
from gitlines.diff.types import FileDiff, FileStatus, Hunk, Line, LineKind

logger = logging.getLogger(__name__)

NO_NEWLINE_TRAILER = "\\ No newline at end of file"


class ScanState(Enum):
    """Position of the scanner relative to a conflict region."""

    NORMAL = "normal"
    OURS = "ours"
    THEIRS = "theirs"


class ConflictScanner:
    """Single forward pass over lines with a three-state marker machine."""

    def __init__(self, marker_size: int = DEFAULT_MARKER_SIZE) -> None:
        if marker_size < 1:
            raise ValueError(f"marker_size must be at least 1, got {marker_size}")
        self.marker_size = marker_size
        self.start_pattern, self.middle_pattern, self.end_pattern = marker_patterns(marker_size)

    def classify(self, texts: Sequence[Optional[str]]) -> list[Optional[LineKind]]:
        """Classify each line of text.

        Args:
            texts: Line contents without diff prefix or newline. A None entry
                does not take part in the scan.

        Returns:
            The conflict kind for each entry, or None for entries outside a
            complete conflict region.
        """
        kinds: list[Optional[LineKind]] = []
        state = ScanState.NORMAL
        region_start = 0

        for text in texts:
            if text is None:
                kinds.append(None)
                continue

            if state is ScanState.NORMAL:
                if self.start_pattern.match(text):
                    state = ScanState.OURS
                    region_start = len(kinds)
                    kinds.append(LineKind.CONFLICT_START)
                else:
                    kinds.append(None)
            elif state is ScanState.OURS:
                if self.middle_pattern.match(text):
                    state = ScanState.THEIRS
                    kinds.append(LineKind.CONFLICT_MIDDLE)
                else:
                    kinds.append(LineKind.CONFLICT_OURS)
            else:
                if self.end_pattern.match(text):
                    state = ScanState.NORMAL
                    kinds.append(LineKind.CONFLICT_END)
                else:
                    kinds.append(LineKind.CONFLICT_THEIRS)

        if state is not ScanState.NORMAL:
            logger.debug("Unterminated conflict region starting at entry %d", region_start + 1)
            for index in range(region_start, len(kinds)):
                kinds[index] = None

        return kinds


def annotate(
    file_diff: FileDiff,
    full_file_text: Optional[str] = None,
    marker_size: int = DEFAULT_MARKER_SIZE,
) -> FileDiff:
    """Tag conflict regions in a file diff.

    Without ``full_file_text`` the lines already in ``file_diff`` are
    rescanned and only their ``kind`` changes. With it, a synthetic
    working-tree FileDiff is built from the text instead: one hunk whose
    marker lines carry no numbers and whose other lines are numbered 1..N
    in order, so the header reads ``@@ -1,N +1,N @@``. Marker lines are
    skipped when counting, so these numbers are not physical file lines.

    Args:
        file_diff: Parsed file diff.
        full_file_text: Working-tree contents of the file, markers included.
        marker_size: Length of the conflict markers (git's conflict-marker-size).

    Returns:
        Annotated FileDiff. Running it again gives an equal result.
    """
    scanner = ConflictScanner(marker_size)
    if full_file_text is not None:
        return _annotate_working_tree(file_diff.from_path, file_diff.to_path, full_file_text, scanner)
    if file_diff.working_tree:
        return _annotate_working_tree(
            file_diff.from_path, file_diff.to_path, _working_tree_text(file_diff), scanner
        )
    return _annotate_diff(file_diff, scanner)


def annotate_text(text: str, path: str = "", marker_size: int = DEFAULT_MARKER_SIZE) -> FileDiff:
    """Build a working-tree FileDiff for a file that has no diff."""
    return _annotate_working_tree(path, path, text, ConflictScanner(marker_size))


def diff_kind(line: Line) -> LineKind:
    """Kind implied by a diff line's prefix columns.

    Combined diffs carry one column per parent and bare conflict markers
    carry none. A line missing from the result is removed, a line missing
    from any parent is added.
    """
    prefix = line.raw_text[: len(line.raw_text) - len(line.content)]
    if "-" in prefix:
        return LineKind.REMOVED
    if "+" in prefix:
        return LineKind.ADDED
    return LineKind.UNCHANGED


def _annotate_diff(file_diff: FileDiff, scanner: ConflictScanner) -> FileDiff:
    flat = list(file_diff.lines())
    base_kinds = [diff_kind(line) for line in flat]
    # Removed lines are not in the new file, so they cannot hold a marker.
    # Bare markers have no prefix, so their content is the whole raw line.
    texts = [line.content if kind is not LineKind.REMOVED else None for line, kind in zip(flat, base_kinds)]
    kinds = scanner.classify(texts)

    index = 0
    hunks: list[Hunk] = []
    for hunk in file_diff.hunks:
        lines: list[Line] = []
        for line in hunk.lines:
            kind = kinds[index] or base_kinds[index]
            lines.append(line if line.kind == kind else replace(line, kind=kind))
            index += 1
        hunks.append(replace(hunk, lines=tuple(lines)))

    found = LineKind.CONFLICT_START in kinds
    return replace(
        file_diff,
        hunks=tuple(hunks),
        status=FileStatus.CONFLICT if found else file_diff.status,
    )


def _annotate_working_tree(from_path: str, to_path: str, text: str, scanner: ConflictScanner) -> FileDiff:
    texts = text.split("\n")
    if texts and texts[-1] == "":
        texts.pop()
    kinds = scanner.classify(texts)

    lines: list[Line] = []
    numbered = 0
    for raw, kind in zip(texts, kinds):
        if kind is not None and kind.is_marker:
            lines.append(Line(kind=kind, raw_text=raw, content=raw))
            continue
        numbered += 1
        lines.append(
            Line(
                kind=kind or LineKind.UNCHANGED,
                raw_text=raw,
                content=raw,
                old_line_number=numbered,
                new_line_number=numbered,
            )
        )

    if lines and not text.endswith("\n"):
        lines[-1] = replace(lines[-1], trailer=NO_NEWLINE_TRAILER)

    hunks: tuple[Hunk, ...] = ()
    if lines:
        start = 1 if numbered else 0
        hunks = (
            Hunk(
                old_start=start,
                old_count=numbered,
                new_start=start,
                new_count=numbered,
                lines=tuple(lines),
                header=format_hunk_header(start, numbered, start, numbered),
            ),
        )

    found = LineKind.CONFLICT_START in kinds
    return FileDiff(
        from_path=from_path,
        to_path=to_path,
        status=FileStatus.CONFLICT if found else FileStatus.MODIFIED,
        hunks=hunks,
        working_tree=True,
    )


def _working_tree_text(file_diff: FileDiff) -> str:
    lines = list(file_diff.lines())
    if not lines:
        return ""
    text = "\n".join(line.raw_text for line in lines)
    if lines[-1].trailer is None:
        text += "\n"
    return text
