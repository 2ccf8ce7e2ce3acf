"""
Unit tests for the Diff Annotator.

Covers annotate (raw diff -> line model), render (line model -> OLD | NEW
table) and parse (table -> line model).
"""

import logging

import pytest

from pr_diff_context.diff.annotator import (
    BINARY_SENTINEL,
    COLUMN_HEADER,
    DiffAnnotator,
    annotate_and_render,
    annotate_diff,
    parse_annotated_diff,
)
from pr_diff_context.diff.hunk import UnknownPrefixPolicy
from pr_diff_context.models.diff import AnnotatedFile, AnnotatedHunk, AnnotatedLine, HunkHeader, LineType


MODIFIED_DIFF = "\n".join([
    "diff --git a/src/app.py b/src/app.py",
    "index 1111111..2222222 100644",
    "--- a/src/app.py",
    "+++ b/src/app.py",
    "@@ -1,4 +1,5 @@ import os",
    " import sys",
    '-print("old")',
    '+print("new")',
    '+print("extra")',
    " ",
    " def main():",
    "",
])

RENAME_DIFF = "\n".join([
    "diff --git a/old/name.py b/new/name.py",
    "similarity index 90%",
    "rename from old/name.py",
    "rename to new/name.py",
    "index 3333333..4444444 100644",
    "--- a/old/name.py",
    "+++ b/new/name.py",
    "@@ -10,3 +10,3 @@",
    " a",
    "-b",
    "+B",
    " c",
])

BINARY_DIFF = "\n".join([
    "diff --git a/img/logo.png b/img/logo.png",
    "index 5555555..6666666 100644",
    "Binary files a/img/logo.png and b/img/logo.png differ",
])

NEW_FILE_DIFF = "\n".join([
    "diff --git a/src/new.py b/src/new.py",
    "new file mode 100644",
    "index 0000000..7777777",
    "--- /dev/null",
    "+++ b/src/new.py",
    "@@ -0,0 +1,2 @@",
    "+first",
    "+second",
])

DELETED_FILE_DIFF = "\n".join([
    "diff --git a/src/gone.py b/src/gone.py",
    "deleted file mode 100644",
    "index 8888888..0000000",
    "--- a/src/gone.py",
    "+++ /dev/null",
    "@@ -1,2 +0,0 @@",
    "-x",
    "-y",
])

NO_NEWLINE_DIFF = "\n".join([
    "diff --git a/README b/README",
    "--- a/README",
    "+++ b/README",
    "@@ -1 +1 @@",
    "-hello",
    "\\ No newline at end of file",
    "+hello world",
    "\\ No newline at end of file",
])

MULTI_HUNK_DIFF = "\n".join([
    "diff --git a/lib/util.py b/lib/util.py",
    "--- a/lib/util.py",
    "+++ b/lib/util.py",
    "@@ -3,3 +3,4 @@ def first():",
    " one",
    "+inserted",
    " two",
    " three",
    "@@ -20,3 +21,2 @@ def second():",
    " four",
    "-five",
    " six",
])


class TestAnnotate:
    """Unit tests for DiffAnnotator.annotate."""

    def setup_method(self):
        self.annotator = DiffAnnotator()

    def test_modified_file_line_numbers(self):
        """Test old/new counters advance per line type."""
        files = self.annotator.annotate(MODIFIED_DIFF)

        assert len(files) == 1
        annotated = files[0]
        assert annotated.path == "src/app.py"
        assert annotated.renamed_from is None
        assert not annotated.is_binary
        assert [line.as_tuple() for line in annotated.lines] == [
            (1, 1, "context", "import sys"),
            (2, None, "delete", 'print("old")'),
            (None, 2, "add", 'print("new")'),
            (None, 3, "add", 'print("extra")'),
            (3, 4, "context", ""),
            (4, 5, "context", "def main():"),
        ]

    def test_hunk_header_is_preserved(self):
        """Test the original header text and parsed header are kept."""
        hunk = self.annotator.annotate(MODIFIED_DIFF)[0].hunks[0]

        assert hunk.header == HunkHeader(1, 4, 1, 5, "import os")
        assert hunk.header_text == "@@ -1,4 +1,5 @@ import os"

    def test_multiple_hunks(self):
        """Test each hunk restarts its counters from its header."""
        annotated = self.annotator.annotate(MULTI_HUNK_DIFF)[0]

        assert len(annotated.hunks) == 2
        second = annotated.hunks[1]
        assert [line.as_tuple() for line in second.lines] == [
            (20, 21, "context", "four"),
            (21, None, "delete", "five"),
            (22, 22, "context", "six"),
        ]
        assert annotated.additions == 1
        assert annotated.deletions == 1

    def test_rename(self):
        """Test renames keep both paths and key on the new path."""
        annotated = self.annotator.annotate(RENAME_DIFF)[0]

        assert annotated.path == "new/name.py"
        assert annotated.renamed_from == "old/name.py"
        assert annotated.display_path == "old/name.py -> new/name.py"

    def test_binary_file(self):
        """Test binary files carry no line model."""
        annotated = self.annotator.annotate(BINARY_DIFF)[0]

        assert annotated.path == "img/logo.png"
        assert annotated.is_binary
        assert annotated.hunks == ()

    def test_git_binary_patch_marker(self):
        """Test the GIT binary patch marker also flags binary content."""
        diff = "\n".join([
            "diff --git a/font.woff b/font.woff",
            "index 1..2 100644",
            "GIT binary patch",
            "literal 1234",
            "zcmV-M1k5L",
        ])

        annotated = self.annotator.annotate(diff)[0]

        assert annotated.is_binary
        assert annotated.lines == ()

    def test_new_file(self):
        """Test a new file has only additions."""
        annotated = self.annotator.annotate(NEW_FILE_DIFF)[0]

        assert annotated.path == "src/new.py"
        assert [line.as_tuple() for line in annotated.lines] == [
            (None, 1, "add", "first"),
            (None, 2, "add", "second"),
        ]

    def test_deleted_file(self):
        """Test a deleted file keeps its old path."""
        annotated = self.annotator.annotate(DELETED_FILE_DIFF)[0]

        assert annotated.path == "src/gone.py"
        assert [line.as_tuple() for line in annotated.lines] == [
            (1, None, "delete", "x"),
            (2, None, "delete", "y"),
        ]

    def test_no_newline_marker(self):
        """Test no-newline markers are kept without line numbers."""
        annotated = self.annotator.annotate(NO_NEWLINE_DIFF)[0]

        assert [line.as_tuple() for line in annotated.lines] == [
            (1, None, "delete", "hello"),
            (None, None, "no-newline", "\\ No newline at end of file"),
            (None, 1, "add", "hello world"),
            (None, None, "no-newline", "\\ No newline at end of file"),
        ]

    def test_multiple_files_in_order(self):
        """Test files come back in diff order."""
        diff = "\n".join([MODIFIED_DIFF, RENAME_DIFF, BINARY_DIFF, NEW_FILE_DIFF])

        files = self.annotator.annotate(diff)

        assert [f.path for f in files] == ["src/app.py", "new/name.py", "img/logo.png", "src/new.py"]

    @pytest.mark.parametrize("diff_text", [None, "", "   ", "\n\n\t\n"])
    def test_empty_input(self, diff_text):
        """Test empty or whitespace input yields no files."""
        assert self.annotator.annotate(diff_text) == []

    def test_preamble_is_ignored(self):
        """Test text before the first diff --git marker is skipped."""
        diff = "From abc123\nSubject: [PATCH] change\n\n" + MODIFIED_DIFF

        files = self.annotator.annotate(diff)

        assert [f.path for f in files] == ["src/app.py"]

    def test_malformed_hunk_header_is_skipped(self, caplog):
        """Test a bad hunk header drops only that hunk."""
        diff = "\n".join([
            "diff --git a/a.py b/a.py",
            "--- a/a.py",
            "+++ b/a.py",
            "@@ -x +y @@",
            "+skipped",
            "@@ -1,1 +1,1 @@",
            "-a",
            "+b",
        ])

        with caplog.at_level(logging.WARNING):
            files = self.annotator.annotate(diff)

        assert len(files) == 1
        assert len(files[0].hunks) == 1
        assert [line.as_tuple() for line in files[0].lines] == [
            (1, None, "delete", "a"),
            (None, 1, "add", "b"),
        ]
        assert "Skipping malformed hunk" in caplog.text

    def test_unparseable_section_is_skipped(self, caplog):
        """Test a section without any path is dropped and parsing continues."""
        diff = "\n".join([
            "diff --git garbage",
            "@@ -1 +1 @@",
            "-a",
            "+b",
            MODIFIED_DIFF,
        ])

        with caplog.at_level(logging.WARNING):
            files = self.annotator.annotate(diff)

        assert [f.path for f in files] == ["src/app.py"]
        assert "unparseable diff section" in caplog.text

    def test_lines_after_exhausted_counts_need_prefix(self):
        """Test trailing text after a complete hunk is not swallowed."""
        diff = MODIFIED_DIFF + "\nsome trailing text\n"

        annotated = self.annotator.annotate(diff)[0]

        assert len(annotated.lines) == 6

    def test_unknown_prefix_inside_hunk_is_context(self):
        """Test a blank line that lost its leading space counts as context."""
        diff = "\n".join([
            "diff --git a/a.py b/a.py",
            "--- a/a.py",
            "+++ b/a.py",
            "@@ -1,3 +1,3 @@",
            " a",
            "",
            " c",
        ])

        annotated = self.annotator.annotate(diff)[0]

        assert [line.as_tuple() for line in annotated.lines] == [
            (1, 1, "context", "a"),
            (2, 2, "context", ""),
            (3, 3, "context", "c"),
        ]

    def test_unknown_prefix_strict_policy_drops_line(self, caplog):
        """Test the strict policy skips unknown-prefix lines with a warning."""
        annotator = DiffAnnotator(unknown_prefix_policy=UnknownPrefixPolicy.STRICT)
        diff = "\n".join([
            "diff --git a/a.py b/a.py",
            "--- a/a.py",
            "+++ b/a.py",
            "@@ -1,2 +1,2 @@",
            " a",
            "?weird",
            " b",
        ])

        with caplog.at_level(logging.WARNING):
            annotated = annotator.annotate(diff)[0]

        assert [line.content for line in annotated.lines] == ["a", "b"]
        assert "Unknown diff line prefix" in caplog.text

    def test_invalid_min_width(self):
        """Test the column width must fit the placeholder."""
        with pytest.raises(ValueError):
            DiffAnnotator(min_line_num_width=1)


class TestRender:
    """Unit tests for DiffAnnotator.render."""

    def setup_method(self):
        self.annotator = DiffAnnotator()

    def test_render_modified_file(self):
        """Test the exact table layout."""
        text = self.annotator.render(self.annotator.annotate(MODIFIED_DIFF))

        assert text.split("\n") == [
            "=== src/app.py ===",
            " OLD | NEW |",
            "@@ -1,4 +1,5 @@ import os",
            "   1 |    1 |     import sys",
            '   2 |   -- | [-] print("old")',
            '  -- |    2 | [+] print("new")',
            '  -- |    3 | [+] print("extra")',
            "   3 |    4 |     ",
            "   4 |    5 |     def main():",
        ]

    def test_render_rename_header(self):
        """Test renamed files print old -> new."""
        text = self.annotator.render(self.annotator.annotate(RENAME_DIFF))

        assert text.split("\n")[0] == "=== old/name.py -> new/name.py ==="

    def test_render_binary_sentinel(self):
        """Test binary files print the sentinel instead of a table."""
        text = self.annotator.render(self.annotator.annotate(BINARY_DIFF))

        assert text == f"=== img/logo.png ===\n{BINARY_SENTINEL}"
        assert COLUMN_HEADER not in text

    def test_render_no_newline_row(self):
        """Test no-newline rows use placeholders on both sides."""
        text = self.annotator.render(self.annotator.annotate(NO_NEWLINE_DIFF))

        assert "  -- |   -- |     \\ No newline at end of file" in text.split("\n")

    def test_width_grows_for_large_line_numbers(self):
        """Test columns widen to fit five-digit line numbers."""
        diff = "\n".join([
            "diff --git a/big.txt b/big.txt",
            "--- a/big.txt",
            "+++ b/big.txt",
            "@@ -9998,2 +9998,3 @@",
            " x",
            "+y",
            " z",
        ])

        rows = self.annotator.render(self.annotator.annotate(diff)).split("\n")[3:]

        assert rows == [
            " 9998 |  9998 |     x",
            "   -- |  9999 | [+] y",
            " 9999 | 10000 |     z",
        ]

    def test_render_empty(self):
        """Test empty input renders as an empty string."""
        assert annotate_and_render("") == ""
        assert self.annotator.render([]) == ""

    def test_render_headerless_hunk(self):
        """Test hunks without a header render rows only."""
        annotated = AnnotatedFile(
            path="a.py",
            hunks=(AnnotatedHunk(header=None, lines=(AnnotatedLine(7, 7, LineType.CONTEXT, "x"),)),),
        )

        assert self.annotator.render([annotated]) == "=== a.py ===\n OLD | NEW |\n   7 |    7 |     x"


class TestParse:
    """Unit tests for DiffAnnotator.parse."""

    def setup_method(self):
        self.annotator = DiffAnnotator()

    def test_parse_rendered_text(self):
        """Test parse inverts render for every line type."""
        diff = "\n".join([MODIFIED_DIFF, RENAME_DIFF, NO_NEWLINE_DIFF, MULTI_HUNK_DIFF])
        files = self.annotator.annotate(diff)

        parsed = self.annotator.parse(self.annotator.render(files))

        assert parsed == files

    def test_parse_binary(self):
        """Test the binary sentinel round trips."""
        files = self.annotator.annotate(BINARY_DIFF)

        parsed = self.annotator.parse(self.annotator.render(files))

        assert parsed == files

    def test_parse_rename_paths(self):
        """Test the rename header is split back into both paths."""
        parsed = self.annotator.parse("=== a/b.py -> c/d.py ===\n OLD | NEW |\n   1 |    1 |     x")

        assert parsed[0].path == "c/d.py"
        assert parsed[0].renamed_from == "a/b.py"

    def test_parse_tolerates_noise(self):
        """Test unrelated lines are ignored and rows form a header-less hunk."""
        text = "\n".join([
            "Here is the annotated diff you asked for:",
            "=== src/app.py ===",
            "   1 |    1 |     import sys",
            "some commentary",
            '  -- |    2 | [+] print("new")',
            "   2 |   -- | [-] print(\"old\")",
        ])

        parsed = parse_annotated_diff(text)

        assert len(parsed) == 1
        hunk = parsed[0].hunks[0]
        assert hunk.header is None
        assert [line.as_tuple() for line in hunk.lines] == [
            (1, 1, "context", "import sys"),
            (None, 2, "add", 'print("new")'),
            (2, None, "delete", 'print("old")'),
        ]

    def test_parse_skips_inconsistent_rows(self):
        """Test rows whose numbers contradict their marker are dropped."""
        text = "=== a.py ===\n   1 |    1 | [+] bad\n   2 |    2 |     good"

        lines = parse_annotated_diff(text)[0].lines

        assert [line.as_tuple() for line in lines] == [(2, 2, "context", "good")]

    def test_parse_keeps_content_whitespace(self):
        """Test indentation inside content survives the round trip."""
        parsed = parse_annotated_diff("=== a.py ===\n   3 |    3 |         return x  ")

        assert parsed[0].lines[0].content == "    return x  "

    def test_parse_row_with_stripped_whitespace(self):
        """Test a row that lost its trailing spaces is an empty context line."""
        parsed = parse_annotated_diff("=== a.py ===\n   3 |    4 |")

        assert [line.as_tuple() for line in parsed[0].lines] == [(3, 4, "context", "")]

    def test_parse_empty(self):
        """Test empty text parses to nothing."""
        assert parse_annotated_diff("") == []
        assert parse_annotated_diff(None) == []

    def test_module_helpers_share_default_annotator(self):
        """Test module-level helpers agree with a default annotator."""
        assert annotate_diff(MODIFIED_DIFF) == DiffAnnotator().annotate(MODIFIED_DIFF)
        assert annotate_and_render(MODIFIED_DIFF) == DiffAnnotator().render(annotate_diff(MODIFIED_DIFF))
