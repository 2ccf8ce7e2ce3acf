"""
Context File Data Models

diff 밖의 파일에 대한 context 범위 관련 데이터 모델들
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, field_validator, model_validator


@dataclass
class ContextFileRange:
    """저장된 context 범위"""
    id: int
    review_id: int
    file: str
    line_start: int
    line_end: int
    label: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """데이터 검증"""
        if self.line_start < 1:
            raise ValueError("line_start must be positive")
        if self.line_end < self.line_start:
            raise ValueError("line_end must not be before line_start")

    @property
    def span(self) -> int:
        return self.line_end - self.line_start + 1

    def covers(self, start: int, end: int) -> bool:
        """True when this range fully contains [start, end]."""
        return self.line_start <= start and self.line_end >= end

    def overlaps(self, start: int, end: int) -> bool:
        """True when this range shares at least one line with [start, end]."""
        return self.line_start <= end and self.line_end >= start


@dataclass(frozen=True)
class CommentTarget:
    """코멘트가 가리키는 파일/라인 (line_start가 없으면 파일 단위 코멘트)"""
    file: str
    line_start: Optional[int] = None
    line_end: Optional[int] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.file:
            raise ValueError("Comment target file must not be empty")
        if self.line_start is not None and self.line_start < 1:
            raise ValueError("line_start must be positive")
        if self.line_start is not None and self.line_end is not None and self.line_end < self.line_start:
            raise ValueError("line_end must not be before line_start")

    @property
    def is_file_level(self) -> bool:
        return self.line_start is None


@dataclass(frozen=True)
class ContextResult:
    """ensure_context_file_for_comment 결과"""
    created: bool = False
    expanded: bool = False
    context_file_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'created': self.created, 'expanded': self.expanded}
        if self.context_file_id is not None:
            result['contextFileId'] = self.context_file_id
        return result


NO_CHANGE = ContextResult(created=False, expanded=False)


# Pydantic models for API validation
class CommentTargetRequest(BaseModel):
    """API 요청용 CommentTarget 모델"""
    file: str
    line_start: Optional[int] = None
    line_end: Optional[int] = None

    @field_validator('file')
    @classmethod
    def validate_file(cls, v):
        if not v.strip():
            raise ValueError('File must not be empty')
        return v

    @field_validator('line_start', 'line_end')
    @classmethod
    def validate_lines(cls, v):
        if v is not None and v < 1:
            raise ValueError('Line numbers must be positive')
        return v

    @model_validator(mode='after')
    def validate_range(self):
        if self.line_start is not None and self.line_end is not None and self.line_end < self.line_start:
            raise ValueError('line_end must not be before line_start')
        return self

    def to_target(self) -> CommentTarget:
        return CommentTarget(file=self.file, line_start=self.line_start, line_end=self.line_end)
