"""
Diff File Lists

Providers answering "which files belong to this review's diff".
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..diff.annotator import DiffAnnotator
from ..github.client import GitHubClient


logger = logging.getLogger(__name__)


class DiffFileListProvider(ABC):
    """Source of the file paths that are part of a review's diff."""

    @abstractmethod
    def get_diff_file_list(self) -> List[str]:
        """
        Return the diff's file paths (new-side paths for renames).

        Raises:
            Exception: Any I/O failure; callers decide how to recover
        """


class AnnotatedDiffFileList(DiffFileListProvider):
    """File list taken from raw diff text."""

    def __init__(self, diff_text: Optional[str], annotator: Optional[DiffAnnotator] = None):
        self.diff_text = diff_text
        self.annotator = annotator or DiffAnnotator()
        self._files: Optional[List[str]] = None

    def get_diff_file_list(self) -> List[str]:
        if self._files is None:
            self._files = [f.path for f in self.annotator.annotate(self.diff_text)]
        return list(self._files)


class PullRequestDiffFileList(DiffFileListProvider):
    """File list of a GitHub pull request, fetched on every call."""

    def __init__(self, client: GitHubClient, owner: str, repo: str, pr_number: int):
        self.client = client
        self.owner = owner
        self.repo = repo
        self.pr_number = pr_number

    def get_diff_file_list(self) -> List[str]:
        files = self.client.get_pull_request_files(self.owner, self.repo, self.pr_number)
        paths = [f['filename'] for f in files if f.get('filename')]
        logger.debug(f"{self.owner}/{self.repo}#{self.pr_number} diff has {len(paths)} files")
        return paths


class StaticDiffFileList(DiffFileListProvider):
    """Fixed file list."""

    def __init__(self, files: List[str]):
        self._files = list(files)

    def get_diff_file_list(self) -> List[str]:
        return list(self._files)
