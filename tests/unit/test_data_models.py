"""
Unit tests for data models.
"""

import pytest
from pydantic import ValidationError

from pr_diff_context.models.diff import (
    AnnotatedFile,
    AnnotatedFileRequest,
    AnnotatedHunk,
    AnnotatedLine,
    AnnotatedLineRequest,
    HunkHeader,
    LineType,
    Side,
)
from pr_diff_context.models.context_file import (
    CommentTarget,
    CommentTargetRequest,
    ContextFileRange,
    ContextResult,
)


class TestHunkHeader:
    """Unit tests for HunkHeader."""

    def test_to_text(self):
        """Test canonical rendering with explicit counts."""
        assert HunkHeader(1, 1, 1, 2).to_text() == "@@ -1,1 +1,2 @@"
        assert HunkHeader(5, 3, 6, 4, "def f():").to_text() == "@@ -5,3 +6,4 @@ def f():"

    def test_ends(self):
        """Test exclusive end coordinates."""
        header = HunkHeader(10, 5, 12, 7)

        assert header.old_end == 15
        assert header.new_end == 19

    @pytest.mark.parametrize("args", [
        (1, -1, 1, 1),
        (0, 2, 1, 1),
        (1, 1, 0, 3),
        (-1, 0, 1, 1),
    ])
    def test_invalid(self, args):
        """Test invariant violations raise ValueError."""
        with pytest.raises(ValueError):
            HunkHeader(*args)


class TestAnnotatedLine:
    """Unit tests for AnnotatedLine."""

    @pytest.mark.parametrize("old,new,line_type", [
        (None, 1, LineType.ADD),
        (1, None, LineType.DELETE),
        (1, 1, LineType.CONTEXT),
        (None, None, LineType.NO_NEWLINE),
    ])
    def test_valid_combinations(self, old, new, line_type):
        """Test each type accepts its coordinate shape."""
        line = AnnotatedLine(old, new, line_type, "x")

        assert line.type is line_type

    @pytest.mark.parametrize("old,new,line_type", [
        (1, 1, LineType.ADD),
        (None, None, LineType.DELETE),
        (None, 1, LineType.CONTEXT),
        (1, None, LineType.NO_NEWLINE),
    ])
    def test_invalid_combinations(self, old, new, line_type):
        """Test contradictory coordinates are unrepresentable."""
        with pytest.raises(ValueError):
            AnnotatedLine(old, new, line_type, "x")

    def test_type_from_string(self):
        """Test string types are normalised."""
        assert AnnotatedLine(None, 3, "add", "x").type is LineType.ADD

    def test_non_positive_numbers(self):
        """Test line numbers start at 1."""
        with pytest.raises(ValueError):
            AnnotatedLine(0, 1, LineType.CONTEXT, "x")

    def test_frozen(self):
        """Test lines are immutable."""
        line = AnnotatedLine(1, 1, LineType.CONTEXT, "x")
        with pytest.raises(AttributeError):
            line.content = "y"


class TestAnnotatedHunkAndFile:
    """Unit tests for AnnotatedHunk and AnnotatedFile."""

    def test_hunk_header_text_default(self):
        """Test header text falls back to the canonical form."""
        hunk = AnnotatedHunk(header=HunkHeader(1, 1, 1, 1), lines=[])

        assert hunk.header_text == "@@ -1,1 +1,1 @@"
        assert hunk.lines == ()

    def test_coordinate_bounds(self):
        """Test bounds scan each side independently."""
        hunk = AnnotatedHunk(header=None, lines=[
            AnnotatedLine(None, 4, LineType.ADD, "a"),
            AnnotatedLine(7, None, LineType.DELETE, "b"),
            AnnotatedLine(8, 5, LineType.CONTEXT, "c"),
            AnnotatedLine(9, None, LineType.DELETE, "d"),
        ])

        assert hunk.coordinate_bounds("first") == (7, 4)
        assert hunk.coordinate_bounds("last") == (9, 5)
        with pytest.raises(ValueError):
            hunk.coordinate_bounds("middle")

    def test_file_properties(self):
        """Test flattened lines and change counts."""
        annotated = AnnotatedFile(
            path="new.py",
            renamed_from="old.py",
            hunks=[
                AnnotatedHunk(header=None, lines=[AnnotatedLine(None, 1, LineType.ADD, "a")]),
                AnnotatedHunk(header=None, lines=[AnnotatedLine(5, None, LineType.DELETE, "b")]),
            ],
        )

        assert annotated.display_path == "old.py -> new.py"
        assert len(annotated.lines) == 2
        assert annotated.additions == 1
        assert annotated.deletions == 1

    def test_file_requires_path(self):
        """Test empty paths are rejected."""
        with pytest.raises(ValueError):
            AnnotatedFile(path="")

    def test_binary_file_has_no_lines(self):
        """Test binary files cannot carry lines."""
        with pytest.raises(ValueError):
            AnnotatedFile(
                path="x.bin",
                is_binary=True,
                hunks=[AnnotatedHunk(header=None, lines=[AnnotatedLine(1, 1, LineType.CONTEXT, "x")])],
            )


class TestSide:
    """Unit tests for Side."""

    def test_coerce(self):
        """Test side coercion."""
        assert Side.coerce("left") is Side.LEFT
        assert Side.coerce(None) is Side.RIGHT
        assert Side.coerce(Side.LEFT) is Side.LEFT
        with pytest.raises(ValueError):
            Side.coerce("up")


class TestRequestModels:
    """Unit tests for pydantic request models."""

    def test_line_request(self):
        """Test a valid line payload converts to AnnotatedLine."""
        request = AnnotatedLineRequest(old_line_num=None, new_line_num=3, type="add", content="x")

        assert request.to_line() == AnnotatedLine(None, 3, LineType.ADD, "x")

    def test_line_request_rejects_bad_shape(self):
        """Test the dataclass invariant surfaces as a validation error."""
        with pytest.raises(ValidationError):
            AnnotatedLineRequest(old_line_num=1, new_line_num=3, type="add")
        with pytest.raises(ValidationError):
            AnnotatedLineRequest(old_line_num=0, new_line_num=0, type="context")

    def test_file_request(self):
        """Test a file payload converts to a single header-less hunk."""
        request = AnnotatedFileRequest(
            path="a.py",
            lines=[{"old_line_num": 1, "new_line_num": 1, "type": "context", "content": "x"}],
        )

        annotated = request.to_file()

        assert annotated.path == "a.py"
        assert len(annotated.hunks) == 1
        assert annotated.hunks[0].header is None

    def test_file_request_rejects_blank_path(self):
        """Test blank paths are rejected."""
        with pytest.raises(ValidationError):
            AnnotatedFileRequest(path="   ")

    def test_comment_target_request(self):
        """Test comment payload validation."""
        assert CommentTargetRequest(file="a.py", line_start=3).to_target() == CommentTarget("a.py", 3)
        assert CommentTargetRequest(file="a.py", line_end=3).to_target().is_file_level
        with pytest.raises(ValidationError):
            CommentTargetRequest(file="a.py", line_start=5, line_end=3)


class TestContextModels:
    """Unit tests for context range models."""

    def test_comment_target(self):
        """Test file-level detection and validation."""
        assert CommentTarget("a.py").is_file_level
        assert not CommentTarget("a.py", 1, 2).is_file_level
        assert CommentTarget("a.py", None, 5).is_file_level
        with pytest.raises(ValueError):
            CommentTarget("a.py", 5, 3)
        with pytest.raises(ValueError):
            CommentTarget("")

    def test_context_file_range(self):
        """Test coverage and overlap checks."""
        entry = ContextFileRange(id=1, review_id=1, file="a.py", line_start=30, line_end=80)

        assert entry.span == 51
        assert entry.covers(40, 65)
        assert not entry.covers(20, 65)
        assert entry.overlaps(80, 90)
        assert not entry.overlaps(81, 90)

    def test_context_result_dict(self):
        """Test the id is only present when set."""
        assert ContextResult().to_dict() == {"created": False, "expanded": False}
        assert ContextResult(created=True, context_file_id=3).to_dict() == {
            "created": True,
            "expanded": False,
            "contextFileId": 3,
        }
