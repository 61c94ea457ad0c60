"""Tests for diff parser."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from gitlines.diff.parser import ParseError, parse_diff, parse_diff_file
from gitlines.diff.types import FileStatus, LineKind


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "diffs"


class TestParseDiff:
    """Tests for parse_diff function."""

    def test_parse_empty_diff(self):
        """Test parsing empty content."""
        result = parse_diff("")
        assert len(result.files) == 0

    def test_parse_whitespace_only(self):
        """Test parsing whitespace-only content."""
        result = parse_diff("   \n\n   ")
        assert len(result.files) == 0

    def test_parse_simple_add(self):
        """Test parsing a diff with added lines."""
        content = (FIXTURES_DIR / "simple_add.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 1
        file_diff = result.files[0]
        assert file_diff.path == "test.py"
        assert file_diff.status == FileStatus.MODIFIED
        assert not file_diff.is_new
        assert not file_diff.is_deleted
        assert len(file_diff.hunks) == 1

        hunk = file_diff.hunks[0]
        added = [l for l in hunk.lines if l.kind == LineKind.ADDED]
        assert len(added) == 2
        assert added[0].content == '    print("world")'
        assert added[1].content == "    return True"
        assert added[0].raw_text == '+    print("world")'

    def test_parse_simple_delete(self):
        """Test parsing a diff with deleted lines."""
        content = (FIXTURES_DIR / "simple_delete.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 1
        hunk = result.files[0].hunks[0]

        removed = [l for l in hunk.lines if l.kind == LineKind.REMOVED]
        assert len(removed) == 2
        assert removed[0].content == '    print("world")'
        assert [l.old_line_number for l in removed] == [3, 4]
        assert all(l.new_line_number is None for l in removed)

    def test_parse_multi_file(self):
        """Test parsing a diff with multiple files."""
        content = (FIXTURES_DIR / "multi_file.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 2
        assert result.files[0].path == "foo.py"
        assert result.files[1].path == "bar.py"

        foo = result.get_file("foo.py")
        assert foo is not None
        assert len(foo.hunks) == 1
        assert 3 in foo.changed_lines()  # Line 3 added "return 1"

        bar = result.get_file("bar.py")
        assert bar is not None
        assert 8 in bar.changed_lines()  # Line 8 added "w = 4" (at position 5+3)
        assert bar.hunks[0].section == "def bar():"

    def test_parse_new_file(self):
        """Test parsing a diff creating a new file."""
        content = (FIXTURES_DIR / "new_file.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 1
        file_diff = result.files[0]
        assert file_diff.is_new
        assert file_diff.status == FileStatus.ADDED
        assert file_diff.from_path == ""
        assert file_diff.to_path == "newfile.py"
        assert file_diff.path == "newfile.py"
        assert file_diff.new_mode == "100644"

        hunk = file_diff.hunks[0]
        assert all(l.kind == LineKind.ADDED for l in hunk.lines)
        assert len(hunk.lines) == 5
        assert [l.new_line_number for l in hunk.lines] == [1, 2, 3, 4, 5]

    def test_parse_deleted_file(self):
        """Test parsing a diff deleting a file."""
        content = (FIXTURES_DIR / "deleted_file.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 1
        file_diff = result.files[0]
        assert file_diff.is_deleted
        assert file_diff.from_path == "oldfile.py"
        assert file_diff.to_path == ""
        assert file_diff.path == "oldfile.py"

        hunk = file_diff.hunks[0]
        assert all(l.kind == LineKind.REMOVED for l in hunk.lines)
        assert hunk.new_count == 0

    def test_parse_binary_file(self):
        """Test parsing a diff with binary files."""
        content = (FIXTURES_DIR / "binary.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 1
        file_diff = result.files[0]
        assert file_diff.is_binary
        assert file_diff.status == FileStatus.MODIFIED
        assert file_diff.path == "image.png"
        assert len(file_diff.hunks) == 0

    def test_parse_new_binary_file(self):
        """Test a binary file added from /dev/null."""
        content = """diff --git a/logo.png b/logo.png
new file mode 100644
index 0000000..1234567
Binary files /dev/null and b/logo.png differ
"""
        file_diff = parse_diff(content).files[0]
        assert file_diff.is_binary
        assert file_diff.status == FileStatus.ADDED
        assert file_diff.from_path == ""

    def test_parse_git_binary_patch(self):
        """Test that a base85 binary payload is skipped up to the next file."""
        content = """diff --git a/blob.bin b/blob.bin
index 1234567..89abcde 100644
GIT binary patch
literal 12
TcmZ?wbhEHbRA_Wy;

literal 0
HcmV?d00001

diff --git a/notes.txt b/notes.txt
--- a/notes.txt
+++ b/notes.txt
@@ -1 +1 @@
-old
+new
"""
        result = parse_diff(content)
        assert [f.path for f in result.files] == ["blob.bin", "notes.txt"]
        assert result.files[0].is_binary
        assert result.files[0].hunks == ()
        assert len(result.files[1].hunks) == 1

    def test_parse_rename(self):
        """Test rename detection with and without content changes."""
        content = (FIXTURES_DIR / "rename.patch").read_text()
        result = parse_diff(content)

        assert len(result.files) == 2
        renamed = result.files[0]
        assert renamed.status == FileStatus.RENAMED
        assert renamed.is_renamed
        assert renamed.from_path == "src/old_name.py"
        assert renamed.to_path == "src/new_name.py"
        assert renamed.similarity == 90
        assert renamed.line_stats.added == 1
        assert renamed.line_stats.removed == 1

        pure = result.files[1]
        assert pure.status == FileStatus.RENAMED
        assert pure.from_path == "docs/a.md"
        assert pure.to_path == "docs/b.md"
        assert pure.hunks == ()

    def test_parse_copy(self):
        """Test that a copy is reported as an addition that keeps its source."""
        content = """diff --git a/a.txt b/b.txt
similarity index 100%
copy from a.txt
copy to b.txt
"""
        file_diff = parse_diff(content).files[0]
        assert file_diff.status == FileStatus.ADDED
        assert file_diff.from_path == "a.txt"
        assert file_diff.to_path == "b.txt"

    def test_parse_mode_change(self):
        """Test a mode-only change yields a file without hunks."""
        content = (FIXTURES_DIR / "mode_change.patch").read_text()
        file_diff = parse_diff(content).files[0]

        assert file_diff.path == "scripts/run.sh"
        assert file_diff.status == FileStatus.MODIFIED
        assert file_diff.hunks == ()
        assert file_diff.old_mode == "100644"
        assert file_diff.new_mode == "100755"
        assert file_diff.header_lines == ("old mode 100644", "new mode 100755")

    def test_parse_empty_new_file(self):
        """Test an empty new file, which has no ---/+++ lines."""
        content = """diff --git a/empty.txt b/empty.txt
new file mode 100644
index 0000000..e69de29
"""
        file_diff = parse_diff(content).files[0]
        assert file_diff.status == FileStatus.ADDED
        assert file_diff.to_path == "empty.txt"
        assert file_diff.from_path == ""

    def test_parse_hunk_line_numbers(self):
        """Test that line numbers are tracked correctly in hunks."""
        content = (FIXTURES_DIR / "simple_add.patch").read_text()
        result = parse_diff(content)

        hunk = result.files[0].hunks[0]
        # @@ -1,3 +1,5 @@
        assert hunk.old_start == 1
        assert hunk.old_count == 3
        assert hunk.new_start == 1
        assert hunk.new_count == 5
        assert hunk.is_consistent

    def test_parse_context_lines(self):
        """Test that context lines have both old and new line numbers."""
        content = (FIXTURES_DIR / "simple_add.patch").read_text()
        result = parse_diff(content)

        hunk = result.files[0].hunks[0]
        context_lines = [l for l in hunk.lines if l.kind == LineKind.UNCHANGED]

        assert len(context_lines) == 3
        for line in context_lines:
            assert line.old_line_number is not None
            assert line.new_line_number is not None

    def test_parse_hunk_fragment(self):
        """Test a bare hunk with no file header."""
        result = parse_diff("@@ -1,3 +1,4 @@\n a\n-b\n+c\n+d\n e\n")

        assert len(result.files) == 1
        file_diff = result.files[0]
        assert file_diff.from_path == ""
        assert file_diff.to_path == ""
        assert file_diff.status == FileStatus.MODIFIED
        assert len(file_diff.hunks) == 1

        lines = file_diff.hunks[0].lines
        assert [(l.kind, l.old_line_number, l.new_line_number, l.content) for l in lines] == [
            (LineKind.UNCHANGED, 1, 1, "a"),
            (LineKind.REMOVED, 2, None, "b"),
            (LineKind.ADDED, None, 2, "c"),
            (LineKind.ADDED, None, 3, "d"),
            (LineKind.UNCHANGED, 3, 4, "e"),
        ]

    def test_parse_pure_addition_hunk(self):
        """Test a hunk with an old count of zero."""
        result = parse_diff("@@ -0,0 +1,2 @@\n+one\n+two\n")
        hunk = result.files[0].hunks[0]

        assert sum(1 for l in hunk.lines if l.old_line_number is not None) == 0
        assert sum(1 for l in hunk.lines if l.new_line_number is not None) == 2

    def test_parse_inline_diff(self):
        """Test parsing a diff without git header (traditional unified diff)."""
        content = """--- a/test.py
+++ b/test.py
@@ -1,3 +1,4 @@
 line1
 line2
+line3
 line4
"""
        result = parse_diff(content)
        assert len(result.files) == 1
        assert result.files[0].path == "test.py"

    def test_parse_timestamped_headers(self):
        """Test ---/+++ lines carrying timestamps, as written by diff -u."""
        content = (
            "--- old/config.ini\t2024-01-01 10:00:00.000000000 +0000\n"
            "+++ new/config.ini\t2024-01-02 10:00:00.000000000 +0000\n"
            "@@ -1 +1 @@\n"
            "-a=1\n"
            "+a=2\n"
        )
        file_diff = parse_diff(content).files[0]
        assert file_diff.from_path == "old/config.ini"
        assert file_diff.to_path == "new/config.ini"

    def test_parse_quoted_paths(self):
        """Test git's C-style quoting of unusual file names."""
        content = (
            'diff --git "a/caf\\303\\251 menu.txt" "b/caf\\303\\251 menu.txt"\n'
            "index 1111111..2222222 100644\n"
            '--- "a/caf\\303\\251 menu.txt"\n'
            '+++ "b/caf\\303\\251 menu.txt"\n'
            "@@ -1 +1 @@\n"
            "-tea\n"
            "+coffee\n"
        )
        file_diff = parse_diff(content).files[0]
        assert file_diff.path == "café menu.txt"
        assert file_diff.from_path == "café menu.txt"

    def test_parse_paths_with_spaces(self):
        """Test unquoted paths containing spaces."""
        content = """diff --git a/my docs/read me.md b/my docs/read me.md
index 1111111..2222222 100644
"""
        file_diff = parse_diff(content).files[0]
        assert file_diff.path == "my docs/read me.md"

    def test_parse_hunk_count_one_omitted(self):
        """Test parsing hunk header where count of 1 is omitted."""
        content = """diff --git a/test.py b/test.py
--- a/test.py
+++ b/test.py
@@ -5 +5,2 @@
 existing
+added
"""
        result = parse_diff(content)
        hunk = result.files[0].hunks[0]
        assert hunk.old_count == 1
        assert hunk.new_count == 2

    def test_removed_line_that_looks_like_file_header(self):
        """Test that a removed '-- x' line inside a hunk stays a body line."""
        content = """diff --git a/schema.sql b/schema.sql
--- a/schema.sql
+++ b/schema.sql
@@ -1,2 +1,1 @@
--- drop this comment
 SELECT 1;
"""
        result = parse_diff(content)
        assert len(result.files) == 1
        lines = result.files[0].hunks[0].lines
        assert lines[0].kind == LineKind.REMOVED
        assert lines[0].content == "-- drop this comment"
        assert lines[1].kind == LineKind.UNCHANGED

    def test_empty_context_line(self):
        """Test that an empty line inside a hunk is unchanged context."""
        content = "@@ -1,3 +1,3 @@\n a\n\n-b\n+c\n"
        lines = parse_diff(content).files[0].hunks[0].lines
        assert lines[1].kind == LineKind.UNCHANGED
        assert lines[1].raw_text == ""
        assert (lines[1].old_line_number, lines[1].new_line_number) == (2, 2)

    def test_no_newline_marker_attached(self):
        """Test that backslash lines attach to the preceding line."""
        content = (FIXTURES_DIR / "stash.patch").read_text()
        result = parse_diff(content)

        notes = result.get_file("notes.txt")
        assert notes is not None
        lines = notes.hunks[0].lines
        assert len(lines) == 1
        assert lines[0].no_newline_at_eof
        assert lines[0].trailer == "\\ No newline at end of file"

    def test_no_newline_marker_mid_hunk(self):
        """Test a no-newline marker after a removed line."""
        content = "@@ -1 +1 @@\n-old\n\\ No newline at end of file\n+new\n"
        lines = parse_diff(content).files[0].hunks[0].lines
        assert [l.kind for l in lines] == [LineKind.REMOVED, LineKind.ADDED]
        assert lines[0].no_newline_at_eof
        assert not lines[1].no_newline_at_eof

    def test_stash_show_output(self):
        """Test output of git stash show -p --include-untracked."""
        content = (FIXTURES_DIR / "stash.patch").read_text()
        result = parse_diff(content)

        assert result.changed_files == ["README.md", "notes.txt"]
        assert result.files[1].status == FileStatus.ADDED
        assert result.line_stats.added == 2
        assert result.line_stats.removed == 0

    def test_truncated_hunk_is_best_effort(self, caplog):
        """Test a hunk whose body is shorter than its header declares."""
        content = """diff --git a/a.py b/a.py
--- a/a.py
+++ b/a.py
@@ -1,5 +1,5 @@
 one
-two
+TWO
diff --git a/b.py b/b.py
--- a/b.py
+++ b/b.py
@@ -1 +1 @@
-x
+y
"""
        with caplog.at_level("WARNING", logger="gitlines.diff.parser"):
            result = parse_diff(content)

        assert [f.path for f in result.files] == ["a.py", "b.py"]
        hunk = result.files[0].hunks[0]
        assert len(hunk.lines) == 3
        assert not hunk.is_consistent
        assert "declares" in caplog.text

    def test_overlong_hunk_keeps_extra_lines(self, caplog):
        """Test a hunk whose body is longer than its header declares."""
        content = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -1 +1 @@\n-a\n+b\n+c\n"
        with caplog.at_level("WARNING", logger="gitlines.diff.parser"):
            result = parse_diff(content)

        hunk = result.files[0].hunks[0]
        assert [l.raw_text for l in hunk.lines] == ["-a", "+b", "+c"]
        assert [l.new_line_number for l in hunk.lines] == [None, 1, 2]
        assert hunk.line_stats.added == 2
        assert not hunk.is_consistent
        assert "declares" in caplog.text

    def test_overlong_fragment_keeps_extra_lines(self, caplog):
        """Test extra lines after a bare hunk header."""
        with caplog.at_level("WARNING", logger="gitlines.diff.parser"):
            result = parse_diff("@@ -1 +1 @@\n-a\n+b\n+c\n")

        hunk = result.files[0].hunks[0]
        assert [l.raw_text for l in hunk.lines] == ["-a", "+b", "+c"]
        assert not hunk.is_consistent
        assert "declares" in caplog.text

    def test_blank_line_ends_overlong_hunk(self):
        """Test that extra lines stop at a blank line."""
        content = "@@ -1 +1 @@\n-a\n+b\n+c\n\nnot part of the diff\n"
        hunk = parse_diff(content).files[0].hunks[0]
        assert [l.raw_text for l in hunk.lines] == ["-a", "+b", "+c"]

    def test_bare_conflict_markers_in_body(self):
        """Test markers without a diff prefix inside a hunk body."""
        content = (
            "@@ -1,2 +1,4 @@\n a\n<<<<<<< HEAD\n+mine\n=======\n+theirs\n>>>>>>> topic\n b\n"
        )
        hunk = parse_diff(content).files[0].hunks[0]

        assert [l.raw_text for l in hunk.lines] == [
            " a", "<<<<<<< HEAD", "+mine", "=======", "+theirs", ">>>>>>> topic", " b",
        ]
        markers = [hunk.lines[1], hunk.lines[3], hunk.lines[5]]
        assert all(l.old_line_number is None and l.new_line_number is None for l in markers)
        assert all(l.content == l.raw_text for l in markers)
        assert [l.new_line_number for l in hunk.lines] == [1, None, 2, None, 3, None, 4]
        assert hunk.is_consistent

    def test_bare_markers_do_not_end_hunk(self):
        """Test that lines after a bare marker stay in the same hunk."""
        content = "@@ -1,2 +1,2 @@\n a\n<<<<<<< HEAD\n+mine\n=======\n+theirs\n>>>>>>> topic\n b\n"
        hunks = parse_diff(content).files[0].hunks
        assert len(hunks) == 1
        assert hunks[0].lines[-1].raw_text == " b"
        assert not hunks[0].is_consistent

    def test_malformed_hunk_header(self):
        """Test a hunk header that does not match the standard form."""
        content = """--- a/x.txt
+++ b/x.txt
@@ -3 +3,2
 keep
+extra
"""
        hunk = parse_diff(content).files[0].hunks[0]
        assert hunk.old_start == 3
        assert hunk.new_start == 3
        assert [l.new_line_number for l in hunk.lines] == [3, 4]
        assert hunk.old_count == 1
        assert hunk.new_count == 2

    def test_skips_commit_header_noise(self):
        """Test that git show / format-patch preamble is skipped."""
        content = """commit 0123456789abcdef0123456789abcdef01234567
Author: A Developer <dev@example.com>
Date:   Mon Jan 1 10:00:00 2024 +0000

    Fix the thing

diff --git a/fix.py b/fix.py
--- a/fix.py
+++ b/fix.py
@@ -1 +1 @@
-bug
+fix
--
2.43.0
"""
        result = parse_diff(content)
        assert len(result.files) == 1
        assert result.files[0].hunks[0].is_consistent

    def test_segment_without_paths_is_skipped(self):
        """Test that an unusable file header does not stop later files."""
        content = """diff --git garbage
diff --git a/ok.py b/ok.py
--- a/ok.py
+++ b/ok.py
@@ -1 +1 @@
-a
+b
"""
        result = parse_diff(content)
        assert [f.path for f in result.files] == ["ok.py"]

    def test_crlf_content_is_preserved(self):
        """Test that carriage returns stay in the line text."""
        content = "@@ -1 +1 @@\r\n-a\r\n+b\r\n"
        lines = parse_diff(content).files[0].hunks[0].lines
        assert lines[0].raw_text == "-a\r"
        assert lines[1].content == "b\r"

    def test_round_trip_raw_text(self):
        """Test that raw text of all lines reproduces the hunk bodies."""
        content = (FIXTURES_DIR / "multi_file.patch").read_text()
        result = parse_diff(content)

        rebuilt = []
        for file_diff in result.files:
            for hunk in file_diff.hunks:
                rebuilt.append(hunk.header)
                rebuilt.extend(l.raw_text for l in hunk.lines)

        original = [
            l for l in content.splitlines()
            if not l.startswith(("diff --git", "index ", "--- ", "+++ "))
        ]
        assert rebuilt == original

    def test_hunk_counts_match_declared_counts(self):
        """Test the declared counts against line numbers for every fixture."""
        for fixture in FIXTURES_DIR.glob("*.patch"):
            for file_diff in parse_diff(fixture.read_text()).files:
                for hunk in file_diff.hunks:
                    assert hunk.is_consistent, f"{fixture.name}: {hunk.header}"


class TestParseDiffFile:
    """Tests for parse_diff_file function."""

    def test_parse_existing_file(self):
        """Test parsing an existing diff file."""
        path = FIXTURES_DIR / "simple_add.patch"
        result = parse_diff_file(str(path))
        assert len(result.files) == 1

    def test_parse_nonexistent_file(self):
        """Test parsing a file that doesn't exist."""
        with pytest.raises(FileNotFoundError):
            parse_diff_file("/nonexistent/path/to/file.patch")

    def test_parse_latin1_file(self, tmp_path):
        """Test fallback to latin-1 for non-utf-8 patches."""
        path = tmp_path / "legacy.patch"
        path.write_bytes(b"@@ -1 +1 @@\n-caf\xe9\n+cafe\n")
        result = parse_diff_file(str(path))
        assert result.files[0].hunks[0].lines[0].content == "café"

    def test_parse_directory_raises_parse_error(self, tmp_path):
        """Test that an unreadable path raises ParseError."""
        with pytest.raises(ParseError):
            parse_diff_file(str(tmp_path))


class TestChangedLines:
    """Tests for changed line tracking."""

    def test_changed_lines_simple(self):
        """Test getting changed lines from a simple diff."""
        content = (FIXTURES_DIR / "simple_add.patch").read_text()
        result = parse_diff(content)

        changed = result.changed_lines("test.py")
        assert 3 in changed  # print("world")
        assert 4 in changed  # return True

    def test_changed_lines_multi_hunk(self):
        """Test getting changed lines from multiple hunks."""
        content = """diff --git a/test.py b/test.py
--- a/test.py
+++ b/test.py
@@ -1,3 +1,4 @@
 line1
+added1
 line2
 line3
@@ -10,3 +11,4 @@
 line10
 line11
+added2
 line12
"""
        result = parse_diff(content)
        changed = result.changed_lines("test.py")
        assert 2 in changed  # added1
        assert 13 in changed  # added2

    def test_changed_lines_nonexistent_file(self):
        """Test getting changed lines for a file not in the diff."""
        content = (FIXTURES_DIR / "simple_add.patch").read_text()
        result = parse_diff(content)
        assert result.changed_lines("nonexistent.py") == set()


class TestCombinedDiff:
    """Tests for `diff --cc` output of a merge in progress."""

    @pytest.fixture
    def combined_diff(self):
        content = (FIXTURES_DIR / "combined_conflict.patch").read_text()
        return parse_diff(content).files[0]

    def test_parse_combined_header(self, combined_diff):
        """Test the file header of a combined diff."""
        assert combined_diff.combined
        assert combined_diff.path == "app.py"
        assert combined_diff.status == FileStatus.MODIFIED
        assert len(combined_diff.hunks) == 1

    def test_parse_combined_hunk(self, combined_diff):
        """Test kinds and numbers follow the first parent and the result."""
        hunk = combined_diff.hunks[0]
        assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (1, 4, 1, 8)
        assert [l.kind for l in hunk.lines] == [
            LineKind.UNCHANGED,
            LineKind.UNCHANGED,
            LineKind.ADDED,
            LineKind.ADDED,
            LineKind.ADDED,
            LineKind.ADDED,
            LineKind.ADDED,
            LineKind.UNCHANGED,
        ]
        assert [l.old_line_number for l in hunk.lines] == [1, 2, None, 3, None, None, None, 4]
        assert [l.new_line_number for l in hunk.lines] == [1, 2, 3, 4, 5, 6, 7, 8]
        assert hunk.is_consistent

    def test_combined_content_drops_all_prefix_columns(self, combined_diff):
        """Test that content has both prefix columns removed."""
        contents = [l.content for l in combined_diff.lines()]
        assert contents[0] == "import os"
        assert contents[2] == "<<<<<<< HEAD"
        assert contents[3] == "TIMEOUT = 30"
        assert contents[5] == "TIMEOUT = 60"

    def test_combined_removed_line(self):
        """Test a line dropped from the result by one parent column."""
        content = "diff --cc f\n--- a/f\n+++ b/f\n@@@ -1,2 -1,1 +1,1 @@@\n  keep\n- gone\n"
        hunk = parse_diff(content).files[0].hunks[0]
        assert [l.kind for l in hunk.lines] == [LineKind.UNCHANGED, LineKind.REMOVED]
        assert [l.old_line_number for l in hunk.lines] == [1, 2]
        assert [l.new_line_number for l in hunk.lines] == [1, None]
        assert hunk.is_consistent

    def test_plain_diff_is_not_combined(self):
        """Test that two-way diffs are not flagged as combined."""
        content = (FIXTURES_DIR / "simple_add.patch").read_text()
        assert not parse_diff(content).files[0].combined


class TestConcurrentParsing:
    """Tests for parsing from several threads at once."""

    def test_parse_from_threads(self):
        """Test that threads parsing the same input agree with a serial parse."""
        contents = [fixture.read_text() for fixture in sorted(FIXTURES_DIR.glob("*.patch"))]
        expected = [parse_diff(content) for content in contents]

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(parse_diff, contents * 8))

        assert results == expected * 8
