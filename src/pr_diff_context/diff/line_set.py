"""
Diff Line Set

Membership index answering "is line L of file F part of the diff" on either
side, built from raw diff text.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..models.diff import AnnotatedFile, Side
from .annotator import DiffAnnotator


logger = logging.getLogger(__name__)


class DiffLineSet:
    """
    Line membership index keyed by (file, side).

    A line is in the diff when it appears anywhere in a hunk body on that
    side, including unchanged context lines.
    """

    def __init__(self, files: Iterable[AnnotatedFile] = ()):
        self._index: Dict[Tuple[str, Side], Set[int]] = {}
        self._files: List[str] = []

        for annotated in files:
            if annotated.path not in self._files:
                self._files.append(annotated.path)
            left = self._index.setdefault((annotated.path, Side.LEFT), set())
            right = self._index.setdefault((annotated.path, Side.RIGHT), set())
            for line in annotated.lines:
                if line.old_line_num is not None:
                    left.add(line.old_line_num)
                if line.new_line_num is not None:
                    right.add(line.new_line_num)

    @property
    def files(self) -> List[str]:
        """New-side paths present in the diff."""
        return list(self._files)

    def is_line_in_diff(self, file: str, line: Optional[int], side=Side.RIGHT) -> bool:
        """
        Check whether a line belongs to a hunk of the file.

        Args:
            file: File path (new path for renames)
            line: Line number in the side's coordinates
            side: 'LEFT' (old) or 'RIGHT' (new, default)

        Returns:
            True if the line is inside a hunk on that side
        """
        if line is None:
            return False
        lines = self._index.get((file, Side.coerce(side)))
        if not lines:
            return False
        return line in lines

    def is_range_in_diff(
        self,
        file: str,
        line_start: int,
        line_end: Optional[int] = None,
        side=Side.RIGHT
    ) -> bool:
        """True when both ends of the range are inside the diff."""
        if line_end is None:
            line_end = line_start
        return (
            self.is_line_in_diff(file, line_start, side)
            and self.is_line_in_diff(file, line_end, side)
        )

    def __contains__(self, item) -> bool:
        file, line, *rest = item
        return self.is_line_in_diff(file, line, rest[0] if rest else Side.RIGHT)

    def __repr__(self) -> str:
        return f"DiffLineSet(files={len(self._files)})"


def build_diff_line_set(diff_text: Optional[str], annotator: Optional[DiffAnnotator] = None) -> DiffLineSet:
    """
    Build a membership index from raw diff text.

    Args:
        diff_text: Raw unified diff; None or empty yields an empty index
        annotator: Annotator to parse with (default settings when omitted)

    Returns:
        DiffLineSet whose is_line_in_diff answers membership queries
    """
    if not diff_text:
        return DiffLineSet()

    annotator = annotator or DiffAnnotator()
    files = annotator.annotate(diff_text)
    logger.debug(f"Built diff line set for {len(files)} files")
    return DiffLineSet(files)
