"""Pull-request sources - where change data and blobs come from."""

from .base import FetchError, PullRequestSource
from .factory import create_pull_request_source
from .github_source import GitHubPullRequestSource
from .local_source import LocalGitPullRequestSource

__all__ = [
    "FetchError",
    "GitHubPullRequestSource",
    "LocalGitPullRequestSource",
    "PullRequestSource",
    "create_pull_request_source",
]
