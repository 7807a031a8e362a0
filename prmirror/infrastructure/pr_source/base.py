from abc import ABC, abstractmethod

from prmirror.domain.change import ReviewComment
from prmirror.domain.github import FileChangesInfo, PullRequest


class FetchError(Exception):
    """Raised when the pull-request source cannot deliver the requested data."""

    pass


class PullRequestSource(ABC):
    """Abstract base class for pull-request sources.

    Provides the raw data a change set is resolved from (file list, review
    comments, merge base) and raw blob retrieval. Every method raises
    FetchError on network or storage failure.
    """

    @abstractmethod
    def get_pull_request(self, pr_number: int) -> PullRequest:
        """Fetch pull request metadata (base and head commits)."""
        pass

    @abstractmethod
    def get_file_changes_info(self, pull_request: PullRequest) -> FileChangesInfo:
        """Fetch the changed files of the pull request and its merge base.

        Note:
            merge_base is None when the host cannot compute it.
        """
        pass

    @abstractmethod
    def get_review_comments(self, pull_request: PullRequest) -> list[ReviewComment]:
        """Fetch inline review comments, in host order."""
        pass

    @abstractmethod
    def get_file(self, file_path: str, commit_hash: str) -> str:
        """Get full file content at a specific commit."""
        pass

    def has_file(self, file_path: str, commit_hash: str) -> bool | None:
        """Whether the file exists at the commit, or None when it cannot be told cheaply."""
        return None
