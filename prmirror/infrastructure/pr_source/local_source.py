"""Local git repository pull-request source.

Reads blobs from a local checkout via GitOperationsService. The file list,
review comments and pull request metadata still come from GitHub.
"""

from __future__ import annotations

import logging

from prmirror.domain.change import ReviewComment
from prmirror.domain.github import FileChangesInfo, PullRequest
from prmirror.services.git_operations import (
    GitFileNotFoundError,
    GitMergeBaseError,
    GitOperationsService,
    GitRepositoryError,
)

from .base import FetchError, PullRequestSource

logger = logging.getLogger(__name__)


class LocalGitPullRequestSource(PullRequestSource):
    """Implementation backed by a local git working copy.

    Workflow:
    1. Delegates pull request metadata and review comments to GitHub
    2. Prefers a locally computed merge base, falling back to GitHub's
    3. Reads blobs with git show, never touching the working tree
    """

    def __init__(self, remote: PullRequestSource, git_service: GitOperationsService):
        """Initialize with dependencies.

        Args:
            remote: Source used for metadata (injected)
            git_service: Service for git operations (injected)
        """
        self.remote = remote
        self.git_service = git_service

    def get_pull_request(self, pr_number: int) -> PullRequest:
        return self.remote.get_pull_request(pr_number)

    def get_file_changes_info(self, pull_request: PullRequest) -> FileChangesInfo:
        info = self.remote.get_file_changes_info(pull_request)
        if not pull_request.is_resolved:
            return info
        try:
            merge_base = self.git_service.get_merge_base(pull_request.base_sha, pull_request.head_sha)
        except (GitMergeBaseError, GitRepositoryError) as e:
            logger.info("Using remote merge base, local one unavailable: %s", e)
            return info
        return FileChangesInfo(changes=info.changes, merge_base=merge_base or info.merge_base)

    def get_review_comments(self, pull_request: PullRequest) -> list[ReviewComment]:
        return self.remote.get_review_comments(pull_request)

    def get_file(self, file_path: str, commit_hash: str) -> str:
        try:
            return self.git_service.get_file_content(file_path, commit_hash)
        except (GitFileNotFoundError, GitRepositoryError) as e:
            raise FetchError(str(e)) from e

    def has_file(self, file_path: str, commit_hash: str) -> bool | None:
        try:
            return self.git_service.has_file(file_path, commit_hash)
        except GitRepositoryError:
            return None
