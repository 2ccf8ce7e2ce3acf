"""
Gap Data Models

hunk 사이의 접힌(no-change) 구간과 확장 결과 모델들
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GapPosition(str, Enum):
    """Where a gap sits relative to the hunks of its file."""
    ABOVE = "above"
    BETWEEN = "between"
    BELOW = "below"


@dataclass(frozen=True)
class Gap:
    """
    Collapsed run of unchanged lines, addressable in both revisions.

    `end_line_new` is only set when the new-side end cannot be derived
    as `start_line_new + (end_line - start_line)`.
    """
    start_line: int
    end_line: int
    start_line_new: int
    end_line_new: Optional[int] = None
    position: GapPosition = GapPosition.BETWEEN

    def __post_init__(self):
        """데이터 검증"""
        if self.start_line < 1 or self.start_line_new < 1:
            raise ValueError("Gap start lines must be positive")
        if self.end_line < self.start_line:
            raise ValueError(
                f"Gap end ({self.end_line}) is before its start ({self.start_line})"
            )
        object.__setattr__(self, 'position', GapPosition(self.position))

    @property
    def offset(self) -> int:
        """NEW - OLD at the start of the gap."""
        return self.start_line_new - self.start_line

    @property
    def size(self) -> int:
        return self.end_line - self.start_line + 1

    @property
    def has_explicit_end_new(self) -> bool:
        return isinstance(self.end_line_new, int)

    @property
    def derived_end_line_new(self) -> int:
        return self.start_line_new + (self.end_line - self.start_line)

    @property
    def resolved_end_line_new(self) -> int:
        """Explicit new-side end when present, otherwise the derived one."""
        if self.has_explicit_end_new:
            return self.end_line_new
        return self.derived_end_line_new

    @property
    def is_uniform(self) -> bool:
        return self.resolved_end_line_new == self.derived_end_line_new


@dataclass(frozen=True)
class RevealedRange:
    """Lines pulled out of a gap, in both coordinate spaces."""
    start_line: int
    end_line: int
    start_line_new: int
    end_line_new: int

    @property
    def count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class ExpansionResult:
    """Result of revealing lines from one edge of a gap."""
    revealed: RevealedRange
    remaining: Optional[Gap]


@dataclass(frozen=True)
class SplitResult:
    """Result of pulling an explicit old-line range out of a gap."""
    above: Optional[Gap]
    revealed: RevealedRange
    below: Optional[Gap]


@dataclass(frozen=True)
class GapMatch:
    """A gap containing a requested line range."""
    gap: Gap
    index: int
    matched_in_new_coords: bool
