"""GitHub API pull-request source.

Provides file list, review comments, merge base and blobs from the GitHub REST
API. Request failures are converted to FetchError at this boundary.
"""

from __future__ import annotations

import requests

from prmirror.domain.change import ReviewComment
from prmirror.domain.github import FileChangesInfo, PullRequest

from ..github.client import GitHubClient
from .base import FetchError, PullRequestSource

PENDING_REVIEW_STATE = "PENDING"


class GitHubPullRequestSource(PullRequestSource):
    """Implementation for GitHub pull requests using the REST API.

    Change-set workflow:
    1. Lists the pull request's changed files (with patches)
    2. Computes the merge base of base and head with the compare API
    3. Lists review comments, marking those of pending reviews as drafts
    4. Reads blobs through the contents API on demand
    """

    def __init__(self, client: GitHubClient):
        """Initialize with dependencies.

        Args:
            client: GitHub REST client (injected)
        """
        self.client = client

    @property
    def repo_owner(self) -> str:
        return self.client.owner

    @property
    def repo_name(self) -> str:
        return self.client.repo

    def get_pull_request(self, pr_number: int) -> PullRequest:
        try:
            return self.client.get_pull_request(pr_number)
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch PR #{pr_number}: {e}") from e

    def get_file_changes_info(self, pull_request: PullRequest) -> FileChangesInfo:
        try:
            changes = self.client.list_pull_request_files(pull_request.number)
            merge_base = None
            if pull_request.is_resolved:
                merge_base = self.client.get_merge_base(pull_request.base_sha, pull_request.head_sha)
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch file changes of PR #{pull_request.number}: {e}") from e
        return FileChangesInfo(changes=changes, merge_base=merge_base)

    def get_review_comments(self, pull_request: PullRequest) -> list[ReviewComment]:
        try:
            reviews = self.client.list_reviews(pull_request.number)
            comments = self.client.list_review_comments(pull_request.number)
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch review comments of PR #{pull_request.number}: {e}") from e

        pending_review_ids = {
            review["id"] for review in reviews if review.get("state") == PENDING_REVIEW_STATE
        }
        return [ReviewComment.from_dict(data, pending_review_ids) for data in comments]

    def get_file(self, file_path: str, commit_hash: str) -> str:
        try:
            return self.client.get_file_content(file_path, commit_hash)
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {file_path} at {commit_hash}: {e}") from e
