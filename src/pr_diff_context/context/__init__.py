"""
Auto-Context Layer

Context range policy for comments outside the diff and the collaborators
it depends on.
"""

from .auto_context import AutoContextManager, CollaboratorFailure, MAX_RANGE
from .diff_files import (
    DiffFileListProvider,
    AnnotatedDiffFileList,
    PullRequestDiffFileList,
    StaticDiffFileList,
)
from .repository import ContextFileRepository, ContextFileRepositoryError, InMemoryContextFileRepository

__all__ = [
    'AutoContextManager',
    'CollaboratorFailure',
    'MAX_RANGE',
    'DiffFileListProvider',
    'AnnotatedDiffFileList',
    'PullRequestDiffFileList',
    'StaticDiffFileList',
    'ContextFileRepository',
    'ContextFileRepositoryError',
    'InMemoryContextFileRepository',
]
