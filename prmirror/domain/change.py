"""Domain models for the changed files of a pull request.

A change record is a tagged variant: RemoteChange when the host gave no patch
for the file (binary or too large), InMemoryChange when the patch is known and
content can be reconstructed locally. Records are immutable; new comment
associations produce new records.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar

from prmirror.domain.diff import DiffHunk, Side


# ============================================================
# Enums
# ============================================================


class ChangeStatus(Enum):
    """How a file changed between base and head."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"

    @classmethod
    def from_github(cls, value: str) -> ChangeStatus:
        """Parse the status field of a GitHub pull request file.

        GitHub reports deleted files as "removed"; unknown values are treated
        as modifications.
        """
        value_lower = (value or "").lower()
        if value_lower == "removed":
            return cls.DELETED
        for member in cls:
            if member.value == value_lower:
                return member
        return cls.MODIFIED


class ChangeKind(Enum):
    """Tag of the change record variant."""

    REMOTE = "remote"
    IN_MEMORY = "in_memory"


# ============================================================
# Review Comments
# ============================================================


@dataclass(frozen=True)
class ReviewComment:
    """An inline review comment attached to a file of the pull request."""

    id: int
    path: str
    position: int | None
    body: str = ""
    original_position: int | None = None
    commit_id: str = ""
    author: str = ""
    review_id: int | None = None
    is_draft: bool = False

    @classmethod
    def from_dict(cls, data: dict, pending_review_ids: set[int] | None = None) -> ReviewComment:
        """Parse a review comment from the GitHub REST payload.

        Args:
            data: One element of GET /repos/{owner}/{repo}/pulls/{n}/comments
            pending_review_ids: IDs of reviews still pending; their comments are drafts

        Returns:
            Typed ReviewComment instance
        """
        user = data.get("user") or {}
        review_id = data.get("pull_request_review_id")
        return cls(
            id=data.get("id", 0),
            path=data.get("path", ""),
            position=data.get("position"),
            body=data.get("body", ""),
            original_position=data.get("original_position"),
            commit_id=data.get("commit_id", ""),
            author=user.get("login", ""),
            review_id=review_id,
            is_draft=review_id is not None and review_id in (pending_review_ids or set()),
        )


# ============================================================
# Change Records
# ============================================================


@dataclass(frozen=True)
class ChangeRecord:
    """Fields shared by both change record variants.

    Attributes:
        file_name: Path of the file on the head side
        status: How the file changed
        previous_file_name: Path on the base side, set only for renames
        blob_url: Link to the file on the host, offered when content is unavailable
        base_commit: Merge-base commit the diff was computed against
        base_uri: Encoded address of the base-side document
        head_uri: Encoded address of the head-side document
    """

    kind: ClassVar[ChangeKind]

    file_name: str
    status: ChangeStatus
    previous_file_name: str | None = None
    blob_url: str = ""
    base_commit: str = ""
    base_uri: str = ""
    head_uri: str = ""

    def __post_init__(self) -> None:
        if self.status is ChangeStatus.RENAMED and not self.previous_file_name:
            raise ValueError(f"Renamed file {self.file_name} has no previous file name")
        if self.status is not ChangeStatus.RENAMED and self.previous_file_name is not None:
            raise ValueError(
                f"Only renamed files carry a previous file name ({self.file_name} is {self.status.value})"
            )

    @property
    def base_file_name(self) -> str:
        """Path used to read the base-side content."""
        return self.previous_file_name or self.file_name

    def path_on(self, side: Side) -> str:
        return self.base_file_name if side is Side.BASE else self.file_name

    def uri_for(self, side: Side) -> str:
        return self.base_uri if side is Side.BASE else self.head_uri

    def is_empty_on(self, side: Side) -> bool:
        """Added files have no base side, deleted files have no head side."""
        if side is Side.BASE:
            return self.status is ChangeStatus.ADDED
        return self.status is ChangeStatus.DELETED


@dataclass(frozen=True)
class RemoteChange(ChangeRecord):
    """A changed file whose content can only be read from the host."""

    kind: ClassVar[ChangeKind] = ChangeKind.REMOTE


@dataclass(frozen=True)
class InMemoryChange(ChangeRecord):
    """A changed file whose patch is known.

    Attributes:
        patch: Raw unified diff patch for the file
        diff_hunks: Hunks parsed from the patch
        is_partial: True when the full base-side file cannot be retrieved
        comments: Review comments anchored to this file's diff
    """

    kind: ClassVar[ChangeKind] = ChangeKind.IN_MEMORY

    patch: str = ""
    diff_hunks: tuple[DiffHunk, ...] = field(default_factory=tuple)
    is_partial: bool = False
    comments: tuple[ReviewComment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        super().__post_init__()
        if (
            not self.is_partial
            and self.status in (ChangeStatus.ADDED, ChangeStatus.DELETED)
            and not self.diff_hunks
        ):
            raise ValueError(
                f"{self.status.value.capitalize()} file {self.file_name} needs diff hunks to be reconstructed"
            )

    @property
    def reads_content_from_hunks(self) -> bool:
        """Added and deleted files are rebuilt from their hunks alone."""
        return self.status in (ChangeStatus.ADDED, ChangeStatus.DELETED)

    def with_comments(self, comments: tuple[ReviewComment, ...]) -> InMemoryChange:
        return replace(self, comments=tuple(comments))
