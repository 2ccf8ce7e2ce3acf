"""
Data Models

diff 좌표 엔진의 핵심 데이터 모델들
"""

from .diff import HunkHeader, LineType, Side, AnnotatedLine, AnnotatedHunk, AnnotatedFile
from .gap import Gap, GapPosition, RevealedRange, ExpansionResult, SplitResult, GapMatch
from .context_file import ContextFileRange, CommentTarget, ContextResult

__all__ = [
    "HunkHeader",
    "LineType",
    "Side",
    "AnnotatedLine",
    "AnnotatedHunk",
    "AnnotatedFile",
    "Gap",
    "GapPosition",
    "RevealedRange",
    "ExpansionResult",
    "SplitResult",
    "GapMatch",
    "ContextFileRange",
    "CommentTarget",
    "ContextResult",
]
