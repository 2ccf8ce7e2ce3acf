"""
GitHub Integration Layer

This module provides GitHub API access for pull request diff retrieval
and changed-file listing.
"""

from .client import GitHubClient, GitHubAPIError, RateLimitExceeded

__all__ = ['GitHubClient', 'GitHubAPIError', 'RateLimitExceeded']
