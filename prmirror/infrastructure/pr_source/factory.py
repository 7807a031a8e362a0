"""Factory for creating pull-request sources.

This module provides factory functions for creating the appropriate source
based on where blobs should be read from (GitHub API or local git).
"""

from __future__ import annotations

from prmirror.domain.diff_source import DiffSource
from prmirror.services.git_operations import GitOperationsService

from ..github.client import DEFAULT_API_URL, GitHubClient
from .base import PullRequestSource
from .github_source import GitHubPullRequestSource
from .local_source import LocalGitPullRequestSource


def create_pull_request_source(
    source: DiffSource,
    repo_owner: str,
    repo_name: str,
    token: str | None = None,
    api_url: str = DEFAULT_API_URL,
    local_repo_path: str | None = None,
) -> PullRequestSource:
    """Create a pull-request source based on source type.

    Args:
        source: GITHUB or LOCAL
        repo_owner: GitHub repo owner (needed for both sources)
        repo_name: GitHub repo name (needed for both sources)
        token: GitHub token, or None for anonymous access
        api_url: GitHub REST API root
        local_repo_path: Path to local git repo (required for LOCAL)

    Returns:
        PullRequestSource implementation appropriate for the source type

    Raises:
        ValueError: If source is LOCAL but local_repo_path is None

    Examples:
        >>> source = create_pull_request_source(DiffSource.GITHUB, "myorg", "myrepo")

        >>> source = create_pull_request_source(
        ...     DiffSource.LOCAL,
        ...     "myorg",
        ...     "myrepo",
        ...     local_repo_path="/path/to/repo"
        ... )
    """
    github_source = GitHubPullRequestSource(
        GitHubClient(repo_owner, repo_name, token=token, api_url=api_url)
    )
    if source == DiffSource.GITHUB:
        return github_source
    elif source == DiffSource.LOCAL:
        if local_repo_path is None:
            raise ValueError("local_repo_path is required for LOCAL source")
        return LocalGitPullRequestSource(github_source, GitOperationsService(local_repo_path))
    else:
        raise ValueError(f"Unknown diff source: {source}")
