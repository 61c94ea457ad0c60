"""Patch regeneration for staging hunks and single lines.

The output is plain unified-diff text meant for `git apply --cached`;
running git is left to the caller.
"""

from dataclasses import replace
from typing import Iterable, Optional

from gitlines.diff.markers import is_bare_marker
from gitlines.diff.types import FileDiff, FileStatus, Hunk, Line, LineKind


class PatchError(Exception):
    """Error building a patch from a file diff."""

    pass


def format_hunk_header(
    old_start: int,
    old_count: int,
    new_start: int,
    new_count: int,
    section: str = "",
) -> str:
    """Format a hunk header the way git writes it (a count of 1 is omitted)."""
    header = f"@@ -{_format_range(old_start, old_count)} +{_format_range(new_start, new_count)} @@"
    if section:
        header += f" {section}"
    return header


def _format_range(start: int, count: int) -> str:
    if count == 1:
        return str(start)
    return f"{start},{count}"


def select_lines(hunk: Hunk, indices: Iterable[int]) -> Hunk:
    """Build a hunk that applies only the chosen changed lines.

    Unselected added lines are dropped and unselected removed lines turn
    into context, so the result applies cleanly against the old side.
    Bare conflict markers are dropped.

    Args:
        hunk: Hunk to take lines from.
        indices: Positions in ``hunk.lines`` to keep as changes.

    Returns:
        New Hunk with recomputed counts and line numbers.
    """
    selected = set(indices)
    old_line = hunk.old_start
    new_line = hunk.new_start
    lines: list[Line] = []

    for index, line in enumerate(hunk.lines):
        if _is_marker_line(line):
            continue
        prefix = line.raw_text[:1]
        if prefix == "+":
            if index not in selected:
                continue
            lines.append(replace(line, kind=LineKind.ADDED, old_line_number=None, new_line_number=new_line))
            new_line += 1
        elif prefix == "-" and index in selected:
            lines.append(replace(line, kind=LineKind.REMOVED, old_line_number=old_line, new_line_number=None))
            old_line += 1
        else:
            lines.append(
                replace(
                    line,
                    kind=LineKind.UNCHANGED,
                    raw_text=" " + line.content,
                    old_line_number=old_line,
                    new_line_number=new_line,
                )
            )
            old_line += 1
            new_line += 1

    old_count = old_line - hunk.old_start
    new_count = new_line - hunk.new_start
    return Hunk(
        old_start=hunk.old_start,
        old_count=old_count,
        new_start=hunk.new_start,
        new_count=new_count,
        lines=tuple(lines),
        header=format_hunk_header(hunk.old_start, old_count, hunk.new_start, new_count, hunk.section),
        section=hunk.section,
    )


def format_patch(file_diff: FileDiff, hunks: Optional[Iterable[Hunk]] = None) -> str:
    """Regenerate patch text for a file.

    New-side starts are recomputed from the hunks actually included, so a
    subset of hunks still applies against the old side.

    Args:
        file_diff: File to write a patch for.
        hunks: Hunks to include (defaults to all of them).

    Returns:
        Unified diff text ending with a newline.

    Raises:
        PatchError: If the file diff cannot be expressed as a text patch.
    """
    if file_diff.is_binary:
        raise PatchError(f"Cannot build a text patch for binary file {file_diff.path}")
    if file_diff.working_tree:
        raise PatchError(f"{file_diff.path} is working-tree text, not a diff")
    if file_diff.combined:
        raise PatchError(f"Cannot build a patch from the combined diff of {file_diff.path}")
    if not file_diff.path:
        raise PatchError("Cannot build a patch for a diff fragment without file paths")

    selected = list(file_diff.hunks if hunks is None else hunks)
    selected.sort(key=lambda hunk: hunk.old_start)

    from_path = file_diff.from_path or file_diff.to_path
    to_path = file_diff.to_path or file_diff.from_path
    out: list[str] = [f"diff --git a/{from_path} b/{to_path}"]
    out.extend(line.rstrip("\r") for line in file_diff.header_lines)

    if selected or file_diff.hunks:
        if file_diff.status == FileStatus.ADDED and not file_diff.from_path:
            out.append("--- /dev/null")
        else:
            out.append(f"--- a/{from_path}")
        if file_diff.status == FileStatus.DELETED:
            out.append("+++ /dev/null")
        else:
            out.append(f"+++ b/{to_path}")

    offset = 0
    for hunk in selected:
        new_start = _shifted_new_start(hunk, offset)
        out.append(format_hunk_header(hunk.old_start, hunk.old_count, new_start, hunk.new_count, hunk.section))
        for line in hunk.lines:
            if _is_marker_line(line):
                continue
            out.append(line.raw_text)
            if line.trailer is not None:
                out.append(line.trailer)
        offset += hunk.new_count - hunk.old_count

    return "\n".join(out) + "\n"


def _shifted_new_start(hunk: Hunk, offset: int) -> int:
    if hunk.old_count == 0:
        # Pure insertion: old_start names the line the text goes after
        return hunk.old_start + 1 + offset
    if hunk.new_count == 0:
        return hunk.old_start - 1 + offset
    return hunk.old_start + offset


def _is_marker_line(line: Line) -> bool:
    # Bare conflict markers belong to neither side of the patch
    return is_bare_marker(line.raw_text.rstrip("\r"))
