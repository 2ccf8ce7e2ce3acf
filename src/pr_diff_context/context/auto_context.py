"""
Auto Context

Makes sure a comment anchored on a file outside the review's diff has a
stored context range around it, expanding existing ranges minimally.
"""

import logging
from typing import Any, Optional, Tuple

from ..models.context_file import CommentTarget, ContextResult, NO_CHANGE
from .diff_files import DiffFileListProvider
from .repository import ContextFileRepository


logger = logging.getLogger(__name__)


LINE_PADDING = 10
FILE_COMMENT_DEFAULT_LINES = 50
MAX_RANGE = 500
AUTO_CONTEXT_LABEL = 'Auto-added for comment'


class CollaboratorFailure(Exception):
    """Diff file list or repository call failed"""
    pass


def _field(entry: Any, name: str):
    # Repositories may hand back records or plain mappings
    if isinstance(entry, dict):
        return entry[name]
    return getattr(entry, name)


class AutoContextManager:
    """
    Context range policy for one review.

    For a comment on a file outside the diff:
    1. pad the commented lines (or take the top of the file for file-level
       comments) and clamp the span to max_range
    2. do nothing if a stored range already covers it
    3. otherwise widen the first overlapping range to the clamped union
    4. otherwise store a new range
    """

    def __init__(
        self,
        review_id: int,
        diff_files: DiffFileListProvider,
        repository: ContextFileRepository,
        logger: Optional[logging.Logger] = None,
        line_padding: int = LINE_PADDING,
        file_comment_default_lines: int = FILE_COMMENT_DEFAULT_LINES,
        max_range: int = MAX_RANGE,
        label: str = AUTO_CONTEXT_LABEL
    ):
        """
        Initialize auto-context manager.

        Args:
            review_id: Review the context ranges belong to
            diff_files: Source of the review's diff file list
            repository: Context range storage
            logger: Diagnostic sink (module logger when omitted)
            line_padding: Lines added on each side of a line comment
            file_comment_default_lines: Range length for file-level comments
            max_range: Maximum span of a single context range
            label: Label stored with created ranges
        """
        if line_padding < 0:
            raise ValueError("line_padding must be non-negative")
        if file_comment_default_lines < 1 or max_range < 1:
            raise ValueError("Range sizes must be positive")

        self.review_id = review_id
        self.diff_files = diff_files
        self.repository = repository
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.line_padding = line_padding
        self.file_comment_default_lines = file_comment_default_lines
        self.max_range = max_range
        self.label = label

    def compute_desired_range(self, target: CommentTarget) -> Tuple[int, int]:
        """
        Padded and clamped range for a comment.

        Args:
            target: Comment file and lines

        Returns:
            Tuple of (start, end), 1-based and inclusive
        """
        if target.line_start is None:
            start, end = 1, self.file_comment_default_lines
        else:
            line_end = target.line_end if target.line_end is not None else target.line_start
            start = max(1, target.line_start - self.line_padding)
            end = line_end + self.line_padding
        return self.clamp_range(start, end)

    def clamp_range(self, start: int, end: int) -> Tuple[int, int]:
        """Limit a range to max_range lines, anchored at its start."""
        if end - start + 1 > self.max_range:
            end = start + self.max_range - 1
        return start, end

    def ensure_context_file_for_comment(self, target: CommentTarget) -> ContextResult:
        """
        Ensure a context range covers a comment outside the diff.

        Collaborator failures are logged as warnings and yield a no-op
        result; nothing is raised to the caller.

        Args:
            target: Comment file and lines (no lines for file-level comments)

        Returns:
            ContextResult telling whether a range was created or expanded
        """
        try:
            return self._ensure(target)
        except Exception as e:
            self.logger.warning(f"[AutoContext] Failed to ensure context file: {e}")
            return NO_CHANGE

    def _ensure(self, target: CommentTarget) -> ContextResult:
        try:
            diff_files = self.diff_files.get_diff_file_list()
        except Exception as e:
            raise CollaboratorFailure(str(e)) from e

        if target.file in diff_files:
            return NO_CHANGE

        desired_start, desired_end = self.compute_desired_range(target)

        try:
            existing = list(self.repository.get_by_review_id_and_file(self.review_id, target.file))
        except Exception as e:
            raise CollaboratorFailure(str(e)) from e

        for entry in existing:
            if _field(entry, 'line_start') <= desired_start and _field(entry, 'line_end') >= desired_end:
                return NO_CHANGE

        for entry in existing:
            entry_start = _field(entry, 'line_start')
            entry_end = _field(entry, 'line_end')
            if entry_start <= desired_end and entry_end >= desired_start:
                new_start, new_end = self.clamp_range(
                    min(entry_start, desired_start),
                    max(entry_end, desired_end),
                )
                entry_id = _field(entry, 'id')
                try:
                    self.repository.update_range(entry_id, new_start, new_end)
                except Exception as e:
                    raise CollaboratorFailure(str(e)) from e

                self.logger.info(
                    f"[AutoContext] Expanded context range {target.file}:{new_start}-{new_end} (id={entry_id})"
                )
                return ContextResult(created=False, expanded=True, context_file_id=entry_id)

        try:
            inserted = self.repository.add(
                self.review_id, target.file, desired_start, desired_end, self.label
            )
        except Exception as e:
            raise CollaboratorFailure(str(e)) from e

        inserted_id = _field(inserted, 'id')
        self.logger.info(
            f"[AutoContext] Added context range {target.file}:{desired_start}-{desired_end} (id={inserted_id})"
        )
        return ContextResult(created=True, expanded=False, context_file_id=inserted_id)
