"""GitHub API wrappers."""

from .client import DEFAULT_API_URL, GitHubClient
from .runner import GhCommandRunner

__all__ = [
    "DEFAULT_API_URL",
    "GhCommandRunner",
    "GitHubClient",
]
