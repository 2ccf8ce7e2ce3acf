"""
Context File Repository

Storage interface for per-review context ranges, plus an in-memory
implementation used for local runs and tests.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from ..models.context_file import ContextFileRange


logger = logging.getLogger(__name__)


class ContextFileRepositoryError(Exception):
    """Context file storage errors"""
    pass


class ContextFileRepository(ABC):
    """Narrow storage interface the auto-context manager depends on."""

    @abstractmethod
    def get_by_review_id_and_file(self, review_id: int, file: str) -> List[ContextFileRange]:
        """Ranges stored for a file of a review, in insertion order."""

    @abstractmethod
    def add(
        self,
        review_id: int,
        file: str,
        line_start: int,
        line_end: int,
        label: Optional[str] = None
    ) -> ContextFileRange:
        """Store a new range and return it with its id."""

    @abstractmethod
    def update_range(self, context_file_id: int, line_start: int, line_end: int) -> bool:
        """Replace the range of an existing entry; False if it does not exist."""

    @abstractmethod
    def get_by_review_id(self, review_id: int) -> List[ContextFileRange]:
        """All ranges stored for a review."""

    @abstractmethod
    def remove(self, context_file_id: int, review_id: int) -> bool:
        """Delete an entry of the review; False if it does not exist."""


class InMemoryContextFileRepository(ContextFileRepository):
    """
    Process-local repository.

    Ids are sequential starting at 1. A lock keeps individual operations
    atomic; callers composing several operations get no isolation.
    """

    def __init__(self):
        self._entries: Dict[int, ContextFileRange] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def get_by_review_id_and_file(self, review_id: int, file: str) -> List[ContextFileRange]:
        with self._lock:
            return [
                self._copy(e) for e in self._entries.values()
                if e.review_id == review_id and e.file == file
            ]

    def get_by_review_id(self, review_id: int) -> List[ContextFileRange]:
        with self._lock:
            return [self._copy(e) for e in self._entries.values() if e.review_id == review_id]

    def add(
        self,
        review_id: int,
        file: str,
        line_start: int,
        line_end: int,
        label: Optional[str] = None
    ) -> ContextFileRange:
        with self._lock:
            entry = ContextFileRange(
                id=self._next_id,
                review_id=review_id,
                file=file,
                line_start=line_start,
                line_end=line_end,
                label=label,
                created_at=datetime.now(),
            )
            self._entries[entry.id] = entry
            self._next_id += 1

        logger.debug(f"Added context range {file}:{line_start}-{line_end} (id={entry.id})")
        return self._copy(entry)

    def update_range(self, context_file_id: int, line_start: int, line_end: int) -> bool:
        if line_start < 1 or line_end < line_start:
            raise ContextFileRepositoryError(f"Invalid range: {line_start}-{line_end}")

        with self._lock:
            entry = self._entries.get(context_file_id)
            if entry is None:
                return False
            entry.line_start = line_start
            entry.line_end = line_end

        logger.debug(f"Updated context range id={context_file_id} to {line_start}-{line_end}")
        return True

    def remove(self, context_file_id: int, review_id: int) -> bool:
        with self._lock:
            entry = self._entries.get(context_file_id)
            if entry is None or entry.review_id != review_id:
                return False
            del self._entries[context_file_id]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def _copy(entry: ContextFileRange) -> ContextFileRange:
        return ContextFileRange(
            id=entry.id,
            review_id=entry.review_id,
            file=entry.file,
            line_start=entry.line_start,
            line_end=entry.line_end,
            label=entry.label,
            created_at=entry.created_at,
        )
