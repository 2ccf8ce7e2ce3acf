"""
Diff Context API

Main interface wiring the annotator, gap engine, GitHub client and
auto-context manager behind one configured object.
"""

import logging
from typing import List, Optional

from .config import AppConfig, get_config
from .context.auto_context import AutoContextManager
from .context.diff_files import AnnotatedDiffFileList, DiffFileListProvider, PullRequestDiffFileList
from .context.repository import ContextFileRepository, InMemoryContextFileRepository
from .diff.annotator import DiffAnnotator
from .diff.line_set import DiffLineSet
from .gaps.coordinates import (
    compute_file_gaps,
    expand_from_bottom,
    expand_from_top,
    is_small_gap,
    should_auto_expand,
)
from .github.client import GitHubClient
from .models.diff import AnnotatedFile
from .models.gap import ExpansionResult, Gap


logger = logging.getLogger(__name__)


class DiffContextAPI:
    """
    Main diff context interface.

    Covers the path from raw pull request diff to review context:
    1. Fetch the unified diff from GitHub
    2. Annotate it with OLD/NEW line numbers
    3. Answer line membership and gap queries
    4. Maintain context ranges for comments outside the diff
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        repository: Optional[ContextFileRepository] = None,
        github_client: Optional[GitHubClient] = None
    ):
        """
        Initialize diff context API.

        Args:
            config: Optional configuration object (global config when omitted)
            repository: Context range storage (in-memory when omitted)
            github_client: Optional preconfigured GitHub client
        """
        self.config = config or get_config()

        logger.info("Initializing diff context components...")

        self.annotator = DiffAnnotator(
            min_line_num_width=self.config.annotator.min_line_num_width,
            unknown_prefix_policy=self.config.annotator.unknown_prefix_policy
        )
        self.repository = repository or InMemoryContextFileRepository()
        self._github_client = github_client

    @property
    def github_client(self) -> GitHubClient:
        """GitHub client, created on first use."""
        if self._github_client is None:
            self._github_client = GitHubClient(
                token=self.config.github.token,
                base_url=self.config.github.api_base_url,
                timeout=self.config.github.timeout_seconds
            )
        return self._github_client

    def annotate(self, diff_text: Optional[str]) -> List[AnnotatedFile]:
        """Annotate a unified diff into per-file line models."""
        files = self.annotator.annotate(diff_text)
        logger.debug(f"Annotated {len(files)} files")
        return files

    def render(self, diff_text: Optional[str]) -> str:
        """Annotate a unified diff and render the fixed-width text form."""
        return self.annotator.render(self.annotate(diff_text))

    def parse(self, annotated_text: Optional[str]) -> List[AnnotatedFile]:
        """Read rendered annotated text back into line models."""
        return self.annotator.parse(annotated_text)

    def line_set(self, diff_text: Optional[str]) -> DiffLineSet:
        """Build the line membership index of a unified diff."""
        return DiffLineSet(self.annotate(diff_text))

    def fetch_pull_request_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """
        Fetch the raw unified diff of a pull request.

        Raises:
            GitHubAPIError: On request or API failure
        """
        return self.github_client.get_pull_request_diff(owner, repo, pr_number)

    def annotate_pull_request(self, owner: str, repo: str, pr_number: int) -> List[AnnotatedFile]:
        """
        Fetch and annotate a pull request diff.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Annotated files of the pull request
        """
        diff_text = self.fetch_pull_request_diff(owner, repo, pr_number)
        files = self.annotate(diff_text)
        logger.info(f"Annotated {owner}/{repo}#{pr_number}: {len(files)} files")
        return files

    def context_manager(
        self,
        review_id: int,
        diff_files: DiffFileListProvider,
        logger: Optional[logging.Logger] = None
    ) -> AutoContextManager:
        """
        Auto-context manager for one review, using the configured policy.

        Args:
            review_id: Review the context ranges belong to
            diff_files: Source of the review's diff file list
            logger: Optional diagnostic sink for the manager

        Returns:
            AutoContextManager bound to this API's repository
        """
        settings = self.config.auto_context
        return AutoContextManager(
            review_id=review_id,
            diff_files=diff_files,
            repository=self.repository,
            logger=logger,
            line_padding=settings.line_padding,
            file_comment_default_lines=settings.file_comment_default_lines,
            max_range=settings.max_range,
            label=settings.label
        )

    def context_manager_for_diff(self, review_id: int, diff_text: Optional[str]) -> AutoContextManager:
        """Auto-context manager whose diff file list comes from raw diff text."""
        return self.context_manager(review_id, AnnotatedDiffFileList(diff_text, self.annotator))

    def context_manager_for_pull_request(
        self,
        review_id: int,
        owner: str,
        repo: str,
        pr_number: int
    ) -> AutoContextManager:
        """Auto-context manager whose diff file list comes from GitHub."""
        provider = PullRequestDiffFileList(self.github_client, owner, repo, pr_number)
        return self.context_manager(review_id, provider)

    def gaps_for(self, diff_text: Optional[str], path: str, old_line_count: Optional[int] = None) -> List[Gap]:
        """
        Collapsed regions around the hunks of one file.

        Args:
            diff_text: Unified diff text
            path: New-side path of the file
            old_line_count: Total lines of the old file; enables the trailing gap

        Returns:
            Gaps in file order, empty when the file is not in the diff
        """
        for annotated in self.annotate(diff_text):
            if annotated.path == path:
                return compute_file_gaps(annotated, old_line_count)
        logger.debug(f"No annotated file for {path}")
        return []

    def expand_gap(self, gap: Gap, from_top: bool = True, count: Optional[int] = None) -> ExpansionResult:
        """
        Reveal lines from one edge of a gap.

        Args:
            gap: Gap to shrink
            from_top: Reveal below the hunk above (True) or above the hunk below (False)
            count: Lines to reveal (configured default when omitted)

        Returns:
            ExpansionResult with revealed lines and the remaining gap
        """
        if count is None:
            count = self.config.gaps.default_expand_lines
        if from_top:
            return expand_from_top(gap, count)
        return expand_from_bottom(gap, count)

    def is_small_gap(self, gap: Gap) -> bool:
        """Gap small enough for a single expand-all control."""
        return is_small_gap(gap, self.config.gaps.small_gap_threshold)

    def should_auto_expand(self, gap: Gap) -> bool:
        """Gap small enough to reveal without asking."""
        return should_auto_expand(gap, self.config.gaps.auto_expand_threshold)
