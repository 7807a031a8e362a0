"""Domain models for prmirror."""

from prmirror.domain.address import Address, decode, encode
from prmirror.domain.change import (
    ChangeKind,
    ChangeRecord,
    ChangeStatus,
    InMemoryChange,
    RemoteChange,
    ReviewComment,
)
from prmirror.domain.diff import (
    DiffHunk,
    DiffLine,
    DiffLineType,
    ParseError,
    Side,
    parse_diff_hunks,
)
from prmirror.domain.diff_source import DiffSource
from prmirror.domain.github import FileChangesInfo, PullRequest, RawFileChange

__all__ = [
    "Address",
    "ChangeKind",
    "ChangeRecord",
    "ChangeStatus",
    "DiffHunk",
    "DiffLine",
    "DiffLineType",
    "DiffSource",
    "FileChangesInfo",
    "InMemoryChange",
    "ParseError",
    "PullRequest",
    "RawFileChange",
    "RemoteChange",
    "ReviewComment",
    "Side",
    "decode",
    "encode",
    "parse_diff_hunks",
]
