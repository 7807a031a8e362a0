"""GitHub REST API client.

Infrastructure component that wraps the requests calls needed to resolve a
pull request's change set. Methods raise requests.RequestException on HTTP or
network failure; callers decide how to degrade.
"""

from __future__ import annotations

from urllib.parse import quote

import requests

from prmirror.domain.github import PullRequest, RawFileChange

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100


class GitHubClient:
    """Implementation for GitHub repository operations over REST."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ):
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            self.headers["Authorization"] = f"token {token}"

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    @property
    def repo_url(self) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}"

    def get_pull_request(self, pr_number: int) -> PullRequest:
        response = self._get(f"{self.repo_url}/pulls/{pr_number}")
        return PullRequest.from_dict(response.json())

    def list_pull_request_files(self, pr_number: int) -> list[RawFileChange]:
        """List changed files with their patches, following pagination."""
        return [
            RawFileChange.from_dict(item)
            for item in self._get_paginated(f"{self.repo_url}/pulls/{pr_number}/files")
        ]

    def list_review_comments(self, pr_number: int) -> list[dict]:
        return self._get_paginated(f"{self.repo_url}/pulls/{pr_number}/comments")

    def list_reviews(self, pr_number: int) -> list[dict]:
        return self._get_paginated(f"{self.repo_url}/pulls/{pr_number}/reviews")

    def get_merge_base(self, base: str, head: str) -> str | None:
        """Get the merge base of two commits using the compare API."""
        response = self._get(f"{self.repo_url}/compare/{base}...{head}")
        merge_base_commit = response.json().get("merge_base_commit") or {}
        return merge_base_commit.get("sha") or None

    def get_file_content(self, file_path: str, commit_hash: str) -> str:
        """Get the raw content of a file at a commit."""
        encoded_path = quote(file_path)
        response = self._get(
            f"{self.repo_url}/contents/{encoded_path}",
            params={"ref": commit_hash},
            accept="application/vnd.github.v3.raw",
        )
        return response.text

    # --------------------------------------------------------
    # Private Helpers
    # --------------------------------------------------------

    def _get(self, url: str, params: dict | None = None, accept: str | None = None) -> requests.Response:
        headers = dict(self.headers)
        if accept:
            headers["Accept"] = accept
        response = self.session.get(url, headers=headers, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response

    def _get_paginated(self, url: str) -> list[dict]:
        items: list[dict] = []
        page = 1
        while True:
            response = self._get(url, params={"per_page": PER_PAGE, "page": page})
            page_items = response.json()
            if not page_items:
                break
            items.extend(page_items)
            if len(page_items) < PER_PAGE:
                break
            page += 1
        return items
