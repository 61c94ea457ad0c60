"""Unified diff parser for gitlines."""

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Optional

from gitlines.diff.markers import is_bare_marker
from gitlines.diff.types import FileDiff, FileStatus, Hunk, Line, LineKind, ParsedDiff

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Error reading diff content."""

    pass


# Regex patterns for parsing
DIFF_GIT_PREFIX = "diff --git "
COMBINED_PREFIXES = ("diff --cc ", "diff --combined ")
SEGMENT_PREFIXES = (DIFF_GIT_PREFIX,) + COMBINED_PREFIXES
GIT_AB_PATHS = re.compile(r"^a/(.*) b/(.*)$")
OLD_FILE_HEADER = re.compile(r"^--- (.+?)(?:\t.*)?$")
NEW_FILE_HEADER = re.compile(r"^\+\+\+ (.+?)(?:\t.*)?$")
HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$")
COMBINED_HUNK_HEADER = re.compile(r"^(@{3,}) ((?:-\d+(?:,\d+)? )+)\+(\d+)(?:,(\d+))? \1 ?(.*)$")
LOOSE_OLD_RANGE = re.compile(r"-(\d+)(?:,(\d+))?")
LOOSE_NEW_RANGE = re.compile(r"\+(\d+)(?:,(\d+))?")
BINARY_FILES = re.compile(r"^Binary files (.+) and (.+) differ$")
DEV_NULL = "/dev/null"

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}


def parse_diff(content: str) -> ParsedDiff:
    """Parse unified diff content string.

    Malformed input never raises: segments that cannot be understood are
    skipped and parsing resumes at the next file header.

    Args:
        content: The unified diff content as a string.

    Returns:
        ParsedDiff containing all file changes.
    """
    if not content or not content.strip():
        return ParsedDiff(files=())

    lines = _split_lines(content)
    files: list[FileDiff] = []
    i = 0

    while i < len(lines):
        line = lines[i].rstrip("\r")

        if (
            line.startswith(SEGMENT_PREFIXES)
            or _is_file_header_pair(lines, i)
            or line.startswith("@@")
        ):
            file_diff, i = _parse_file_diff(lines, i)
            if file_diff is not None:
                files.append(file_diff)
            continue

        # Anything else between segments (commit headers, mail signatures)
        i += 1

    return ParsedDiff(files=tuple(files))


def parse_diff_file(path: str) -> ParsedDiff:
    """Parse diff from a file.

    Args:
        path: Path to the diff/patch file.

    Returns:
        ParsedDiff containing all file changes.

    Raises:
        ParseError: If the file cannot be read.
        FileNotFoundError: If the file does not exist.
    """
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"Diff file not found: {path}")

    try:
        content = filepath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        try:
            content = filepath.read_text(encoding="latin-1")
        except Exception as e:
            raise ParseError(f"Cannot read diff file: {e}") from e
    except OSError as e:
        raise ParseError(f"Cannot read diff file: {e}") from e

    return parse_diff(content)


def _split_lines(content: str) -> list[str]:
    """Split on newlines only, keeping carriage returns and form feeds in the text."""
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _is_file_header_pair(lines: list[str], i: int) -> bool:
    return (
        lines[i].startswith("--- ")
        and i + 1 < len(lines)
        and lines[i + 1].startswith("+++ ")
    )


def _parse_file_diff(lines: list[str], start: int) -> tuple[Optional[FileDiff], int]:
    """Parse a single file's diff section.

    Returns:
        Tuple of (FileDiff or None, next line index)
    """
    i = start
    from_path = ""
    to_path = ""
    header_lines: list[str] = []
    hunks: list[Hunk] = []
    added = deleted = renamed = copied = False
    is_binary = False
    old_mode: Optional[str] = None
    new_mode: Optional[str] = None
    similarity: Optional[int] = None
    has_file_header = False
    combined = False

    # Handle diff --git (or --cc) header and the extended header lines after it
    if lines[i].startswith(SEGMENT_PREFIXES):
        has_file_header = True
        header = lines[i].rstrip("\r")
        if header.startswith(DIFF_GIT_PREFIX):
            from_path, to_path = _parse_git_header_paths(header[len(DIFF_GIT_PREFIX):])
        else:
            # A combined diff names only the merged path
            combined = True
            from_path = to_path = _unquote(header.split(" ", 2)[2])
        i += 1

        while i < len(lines):
            line = lines[i].rstrip("\r")
            if line.startswith(SEGMENT_PREFIXES) or line.startswith("@@") or _is_file_header_pair(lines, i):
                break

            if line.startswith("new file mode "):
                added = True
                new_mode = line.rsplit(" ", 1)[-1]
            elif line.startswith("deleted file mode "):
                deleted = True
                old_mode = line.rsplit(" ", 1)[-1]
            elif line.startswith("old mode "):
                old_mode = line.rsplit(" ", 1)[-1]
            elif line.startswith("new mode "):
                new_mode = line.rsplit(" ", 1)[-1]
            elif line.startswith("similarity index "):
                similarity = _parse_percent(line[len("similarity index "):])
            elif line.startswith("rename from "):
                renamed = True
                from_path = _unquote(line[len("rename from "):])
            elif line.startswith("rename to "):
                renamed = True
                to_path = _unquote(line[len("rename to "):])
            elif line.startswith("copy from "):
                copied = True
                from_path = _unquote(line[len("copy from "):])
            elif line.startswith("copy to "):
                copied = True
                to_path = _unquote(line[len("copy to "):])
            elif line.startswith(("index ", "dissimilarity index ", "mode ")):
                pass
            elif BINARY_FILES.match(line):
                is_binary = True
                binary_match = BINARY_FILES.match(line)
                if binary_match.group(1) == DEV_NULL:
                    added = True
                if binary_match.group(2) == DEV_NULL:
                    deleted = True
                header_lines.append(lines[i])
                i += 1
                break
            elif line == "GIT binary patch":
                is_binary = True
                header_lines.append(lines[i])
                i += 1
                # Skip the base85 payload up to the next file
                while i < len(lines) and not lines[i].startswith(SEGMENT_PREFIXES):
                    i += 1
                break
            else:
                break

            header_lines.append(lines[i])
            i += 1

    # Parse ---/+++ header pair
    if not is_binary and i < len(lines) and _is_file_header_pair(lines, i):
        has_file_header = True
        old_path = _clean_header_path(lines[i], OLD_FILE_HEADER, "a/")
        new_path = _clean_header_path(lines[i + 1], NEW_FILE_HEADER, "b/")
        if old_path is None:
            added = True
        elif old_path and not renamed and not copied:
            from_path = old_path
        if new_path is None:
            deleted = True
        elif new_path and not renamed and not copied:
            to_path = new_path
        i += 2

    # Parse hunks
    while not is_binary and i < len(lines):
        line = lines[i].rstrip("\r")
        if not line.startswith("@@"):
            break
        hunk, i = _parse_hunk(lines, i)
        hunks.append(hunk)

    if not has_file_header and not hunks:
        return None, max(i, start + 1)

    if deleted:
        status = FileStatus.DELETED
        to_path = ""
    elif added or copied:
        status = FileStatus.ADDED
        if not copied:
            from_path = ""
    elif renamed:
        status = FileStatus.RENAMED
    else:
        status = FileStatus.MODIFIED

    if has_file_header and not from_path and not to_path:
        logger.warning("Skipping diff segment at line %d: no file path found", start + 1)
        return None, max(i, start + 1)

    logger.debug(
        "Parsed %s (%s): %d hunk(s)%s",
        to_path or from_path or "<fragment>",
        status.value,
        len(hunks),
        ", binary" if is_binary else "",
    )

    return (
        FileDiff(
            from_path=from_path,
            to_path=to_path,
            status=status,
            hunks=tuple(hunks),
            is_binary=is_binary,
            header_lines=tuple(header_lines),
            old_mode=old_mode,
            new_mode=new_mode,
            similarity=similarity,
            combined=combined,
        ),
        max(i, start + 1),
    )


def _parse_hunk(lines: list[str], start: int) -> tuple[Hunk, int]:
    """Parse a single hunk.

    A well-formed header bounds the body by its declared counts. Body lines
    past those counts are still read, with a warning, until a blank line or
    the next header. A header that does not match falls back to reading body
    lines until the first line that cannot belong to a hunk.

    Combined (``@@@``) hunks carry one prefix column per parent. Their old
    side follows the first parent. Bare conflict markers inside a body are
    kept without line numbers and do not count against either side.

    Returns:
        Tuple of (Hunk, next line index)
    """
    header = lines[start].rstrip("\r")
    parents = 1
    hunk_match = HUNK_HEADER.match(header)
    combined_match = None if hunk_match else COMBINED_HUNK_HEADER.match(header)
    strict = hunk_match is not None or combined_match is not None

    if hunk_match:
        old_start = int(hunk_match.group(1))
        old_count = int(hunk_match.group(2)) if hunk_match.group(2) is not None else 1
        new_start = int(hunk_match.group(3))
        new_count = int(hunk_match.group(4)) if hunk_match.group(4) is not None else 1
        section = hunk_match.group(5)
    elif combined_match:
        parents = len(combined_match.group(1)) - 1
        first_parent = LOOSE_OLD_RANGE.match(combined_match.group(2))
        old_start = int(first_parent.group(1))
        old_count = int(first_parent.group(2)) if first_parent.group(2) is not None else 1
        new_start = int(combined_match.group(3))
        new_count = int(combined_match.group(4)) if combined_match.group(4) is not None else 1
        section = combined_match.group(5)
    else:
        old_start, old_count, new_start, new_count = _loose_ranges(header)
        section = ""
        logger.warning("Malformed hunk header %r, using best-effort line numbers", header)

    hunk_lines: list[Line] = []
    old_line = old_start
    new_line = new_start
    old_left = old_count
    new_left = new_count
    i = start + 1

    while i < len(lines):
        line = lines[i]

        if line.startswith("\\"):
            if hunk_lines:
                hunk_lines[-1] = replace(hunk_lines[-1], trailer=line)
            i += 1
            continue

        if is_bare_marker(line.rstrip("\r")):
            hunk_lines.append(Line(kind=LineKind.UNCHANGED, raw_text=line, content=line))
            i += 1
            continue

        if line and not _is_body_line(line, parents):
            break
        if not strict and _is_file_header_pair(lines, i):
            break
        if strict and old_left <= 0 and new_left <= 0 and _ends_overflow(lines, i):
            break

        prefix = line[:parents]
        in_result = "-" not in prefix
        if in_result:
            in_first = prefix[:1] != "+"
        else:
            in_first = prefix[:1] == "-"

        if not in_result:
            kind = LineKind.REMOVED
        elif "+" in prefix:
            kind = LineKind.ADDED
        else:
            # Context line (or empty context line)
            kind = LineKind.UNCHANGED

        hunk_lines.append(
            Line(
                kind=kind,
                raw_text=line,
                content=line[parents:],
                old_line_number=old_line if in_first else None,
                new_line_number=new_line if in_result else None,
            )
        )
        if in_first:
            old_line += 1
            old_left -= 1
        if in_result:
            new_line += 1
            new_left -= 1

        i += 1

    if not strict:
        old_count = old_line - old_start
        new_count = new_line - new_start
    elif old_left != 0 or new_left != 0:
        logger.warning(
            "Hunk %r declares %d old/%d new line(s) but its body has %d/%d",
            header,
            old_count,
            new_count,
            old_count - old_left,
            new_count - new_left,
        )

    return (
        Hunk(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            lines=tuple(hunk_lines),
            header=header,
            section=section,
        ),
        i,
    )


def _is_body_line(line: str, parents: int) -> bool:
    prefix = line[:parents]
    return len(prefix) == parents and all(ch in "+- " for ch in prefix)


def _ends_overflow(lines: list[str], i: int) -> bool:
    """Check whether a line past the declared counts ends the hunk."""
    line = lines[i].rstrip("\r")
    # A blank line, the next file's headers or a mail signature separator
    return not line or _is_file_header_pair(lines, i) or line in ("--", "-- ")


def _loose_ranges(header: str) -> tuple[int, int, int, int]:
    """Pull whatever ranges can be found out of a malformed hunk header."""
    old_match = LOOSE_OLD_RANGE.search(header)
    new_match = LOOSE_NEW_RANGE.search(header)
    new_start = int(new_match.group(1)) if new_match else 1
    old_start = int(old_match.group(1)) if old_match else new_start
    return old_start, 0, new_start, 0


def _parse_percent(value: str) -> Optional[int]:
    try:
        return int(value.strip().rstrip("%"))
    except ValueError:
        return None


def _clean_header_path(line: str, pattern: re.Pattern, prefix: str) -> Optional[str]:
    """Extract a path from a ---/+++ line, returning None for /dev/null."""
    match = pattern.match(line.rstrip("\r"))
    if not match:
        return ""
    path = _unquote(match.group(1))
    if path == DEV_NULL:
        return None
    return _strip_prefix(path, prefix)


def _parse_git_header_paths(rest: str) -> tuple[str, str]:
    """Split the `a/X b/Y` part of a diff --git line into two paths."""
    if rest.startswith('"'):
        old_token, remainder = _read_quoted(rest)
        new_token = remainder.strip()
        return _strip_prefix(_unquote(old_token), "a/"), _strip_prefix(_unquote(new_token), "b/")

    if rest.endswith('"'):
        split_at = rest.rfind(' "')
        if split_at != -1:
            return (
                _strip_prefix(rest[:split_at], "a/"),
                _strip_prefix(_unquote(rest[split_at + 1:]), "b/"),
            )

    match = GIT_AB_PATHS.match(rest)
    if match:
        return match.group(1), match.group(2)

    # --no-prefix output: both halves are the same path
    half = len(rest) // 2
    if len(rest) % 2 == 1 and rest[half] == " " and rest[:half] == rest[half + 1:]:
        return rest[:half], rest[half + 1:]

    return "", ""


def _strip_prefix(path: str, prefix: str) -> str:
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _read_quoted(text: str) -> tuple[str, str]:
    """Read a leading double-quoted token, returning (token, remainder)."""
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return text[: i + 1], text[i + 1:]
        i += 1
    return text, ""


def _unquote(token: str) -> str:
    """Decode a C-style quoted path as written by git for unusual file names."""
    if len(token) < 2 or not (token.startswith('"') and token.endswith('"')):
        return token

    body = token[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            octal = body[i + 1:i + 4]
            if len(octal) == 3 and all(c in "01234567" for c in octal):
                out.append(int(octal, 8) & 0xFF)
                i += 4
                continue
            escaped = _ESCAPES.get(body[i + 1])
            if escaped is not None:
                out.extend(escaped.encode("utf-8"))
                i += 2
                continue
        out.extend(ch.encode("utf-8"))
        i += 1

    return out.decode("utf-8", errors="replace")
