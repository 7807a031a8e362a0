"""Infrastructure components for prmirror.

This layer handles external system interactions:
- GitHub REST API via requests
- gh CLI (token discovery)
- Local git checkouts (through GitOperationsService)
- Virtual document provider registration

Organized into subdirectories:
- github/ - GitHub API wrappers
- pr_source/ - Pull-request sources (GitHub vs local blobs)
"""

from .content_registry import ContentProviderRegistry, Registration
from .github import GhCommandRunner, GitHubClient
from .pr_source import (
    FetchError,
    GitHubPullRequestSource,
    LocalGitPullRequestSource,
    PullRequestSource,
    create_pull_request_source,
)

__all__ = [
    "ContentProviderRegistry",
    "FetchError",
    "GhCommandRunner",
    "GitHubClient",
    "GitHubPullRequestSource",
    "LocalGitPullRequestSource",
    "PullRequestSource",
    "Registration",
    "create_pull_request_source",
]
