"""
Diff Data Models

annotated unified diff 의 이중 좌표(old/new) 라인 모델들
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, field_validator, model_validator


class LineType(str, Enum):
    """Kind of a line inside a hunk body."""
    CONTEXT = "context"
    ADD = "add"
    DELETE = "delete"
    NO_NEWLINE = "no-newline"


class Side(str, Enum):
    """Diff side: LEFT is the old revision, RIGHT the new one."""
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @classmethod
    def coerce(cls, value) -> "Side":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.RIGHT
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Invalid side: {value!r} (expected LEFT or RIGHT)")


@dataclass(frozen=True)
class HunkHeader:
    """Parsed `@@ -O,C +N,D @@ context` header."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    context: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if self.old_count < 0 or self.new_count < 0:
            raise ValueError("Hunk counts must be non-negative")
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Hunk start lines must be non-negative")
        if self.old_start == 0 and self.old_count != 0:
            raise ValueError("old_start may be 0 only when old_count is 0")
        if self.new_start == 0 and self.new_count != 0:
            raise ValueError("new_start may be 0 only when new_count is 0")

    @property
    def old_end(self) -> int:
        return self.old_start + self.old_count

    @property
    def new_end(self) -> int:
        return self.new_start + self.new_count

    def to_text(self) -> str:
        """Render the canonical header text (counts always explicit)."""
        text = f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"
        if self.context:
            text += f" {self.context}"
        return text


@dataclass(frozen=True)
class AnnotatedLine:
    """A hunk body line carrying both old and new line numbers."""
    old_line_num: Optional[int]
    new_line_num: Optional[int]
    type: LineType
    content: str

    def __post_init__(self):
        """데이터 검증"""
        object.__setattr__(self, 'type', LineType(self.type))
        old_set = self.old_line_num is not None
        new_set = self.new_line_num is not None
        expected = {
            LineType.ADD: (False, True),
            LineType.DELETE: (True, False),
            LineType.CONTEXT: (True, True),
            LineType.NO_NEWLINE: (False, False),
        }[self.type]
        if (old_set, new_set) != expected:
            raise ValueError(
                f"Invalid line numbers for {self.type.value} line: "
                f"old={self.old_line_num}, new={self.new_line_num}"
            )
        for num in (self.old_line_num, self.new_line_num):
            if num is not None and num < 1:
                raise ValueError("Line numbers must be positive")

    def as_tuple(self) -> Tuple[Optional[int], Optional[int], str, str]:
        return (self.old_line_num, self.new_line_num, self.type.value, self.content)


@dataclass(frozen=True)
class AnnotatedHunk:
    """One hunk: its header (when known) and its annotated lines."""
    header: Optional[HunkHeader]
    lines: Tuple[AnnotatedLine, ...] = ()
    header_text: Optional[str] = None

    def __post_init__(self):
        # Freeze whatever sequence the caller handed in
        object.__setattr__(self, 'lines', tuple(self.lines))
        if self.header is not None and self.header_text is None:
            object.__setattr__(self, 'header_text', self.header.to_text())

    def coordinate_bounds(self, mode: str = 'first') -> Tuple[Optional[int], Optional[int]]:
        """
        First or last valid (old, new) coordinates of the hunk.

        Deletion-only runs have no new numbers and addition-only runs
        have no old numbers, so each side is scanned independently.

        Args:
            mode: 'first' or 'last'

        Returns:
            Tuple of (old, new), either of which may be None
        """
        if mode not in ('first', 'last'):
            raise ValueError(f"Invalid mode: {mode}")

        ordered = self.lines if mode == 'first' else tuple(reversed(self.lines))
        found_old = None
        found_new = None
        for line in ordered:
            if found_old is None and line.old_line_num is not None:
                found_old = line.old_line_num
            if found_new is None and line.new_line_num is not None:
                found_new = line.new_line_num
            if found_old is not None and found_new is not None:
                break
        return found_old, found_new


@dataclass(frozen=True)
class AnnotatedFile:
    """Annotated diff of a single file."""
    path: str
    renamed_from: Optional[str] = None
    is_binary: bool = False
    hunks: Tuple[AnnotatedHunk, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """데이터 검증"""
        if not self.path:
            raise ValueError("File path must not be empty")
        object.__setattr__(self, 'hunks', tuple(self.hunks))
        if self.is_binary and any(h.lines for h in self.hunks):
            raise ValueError("Binary files carry no line model")

    @property
    def display_path(self) -> str:
        """Header path; renames read `old -> new`."""
        if self.renamed_from and self.renamed_from != self.path:
            return f"{self.renamed_from} -> {self.path}"
        return self.path

    @property
    def lines(self) -> Tuple[AnnotatedLine, ...]:
        """All annotated lines across hunks, in order."""
        return tuple(line for hunk in self.hunks for line in hunk.lines)

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.type == LineType.ADD)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.type == LineType.DELETE)


# Pydantic models for API validation
class AnnotatedLineRequest(BaseModel):
    """API 요청용 AnnotatedLine 모델"""
    old_line_num: Optional[int] = None
    new_line_num: Optional[int] = None
    type: LineType
    content: str = ""

    @field_validator('old_line_num', 'new_line_num')
    @classmethod
    def validate_line_numbers(cls, v):
        if v is not None and v < 1:
            raise ValueError('Line numbers must be positive')
        return v

    @model_validator(mode='after')
    def validate_coordinates(self):
        # Reuse the dataclass invariant
        self.to_line()
        return self

    def to_line(self) -> AnnotatedLine:
        return AnnotatedLine(
            old_line_num=self.old_line_num,
            new_line_num=self.new_line_num,
            type=self.type,
            content=self.content,
        )


class AnnotatedFileRequest(BaseModel):
    """API 요청용 AnnotatedFile 모델"""
    path: str
    renamed_from: Optional[str] = None
    is_binary: bool = False
    lines: List[AnnotatedLineRequest] = []

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        if not v.strip():
            raise ValueError('Path must not be empty')
        return v

    def to_file(self) -> AnnotatedFile:
        hunks = ()
        if self.lines:
            hunks = (AnnotatedHunk(header=None, lines=tuple(l.to_line() for l in self.lines)),)
        return AnnotatedFile(
            path=self.path,
            renamed_from=self.renamed_from,
            is_binary=self.is_binary,
            hunks=hunks,
        )
