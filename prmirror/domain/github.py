"""Domain models for GitHub REST API responses.

These models mirror the fields of GitHub's JSON payloads that the change set
needs, providing type-safe access to pull request and file-change data.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field


@dataclass
class PullRequest:
    """GitHub Pull Request metadata."""

    number: int
    title: str = ""
    state: str = ""
    is_draft: bool = False
    url: str = ""
    author: str = ""
    base_ref_name: str = ""
    base_sha: str = ""
    head_ref_name: str = ""
    head_sha: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> PullRequest:
        base = data.get("base") or {}
        head = data.get("head") or {}
        user = data.get("user") or {}
        return cls(
            number=data.get("number", 0),
            title=data.get("title", ""),
            state=data.get("state", ""),
            is_draft=data.get("draft", False),
            url=data.get("html_url", ""),
            author=user.get("login", ""),
            base_ref_name=base.get("ref", ""),
            base_sha=base.get("sha", ""),
            head_ref_name=head.get("ref", ""),
            head_sha=head.get("sha", ""),
        )

    @classmethod
    def from_json(cls, json_str: str) -> PullRequest:
        return cls.from_dict(json.loads(json_str))

    @property
    def is_resolved(self) -> bool:
        """Whether both ends of the pull request are known."""
        return bool(self.base_sha and self.head_sha)


@dataclass
class RawFileChange:
    """One element of GET /repos/{owner}/{repo}/pulls/{n}/files."""

    filename: str
    status: str
    previous_filename: str | None = None
    patch: str | None = None
    blob_url: str = ""
    sha: str = ""
    additions: int = 0
    deletions: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> RawFileChange:
        return cls(
            filename=data.get("filename", ""),
            status=data.get("status", ""),
            previous_filename=data.get("previous_filename"),
            patch=data.get("patch"),
            blob_url=data.get("blob_url", ""),
            sha=data.get("sha", ""),
            additions=data.get("additions", 0),
            deletions=data.get("deletions", 0),
        )


@dataclass
class FileChangesInfo:
    """Raw file changes of a pull request plus the merge base they were diffed against."""

    changes: list[RawFileChange] = field(default_factory=list)
    merge_base: str | None = None
