"""Content reconstruction service.

Rebuilds the base-side or head-side text of a changed file from its diff hunks,
either by applying the patch to the original file or, when no original is
available, by reading the lines the hunks show for that side.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from prmirror.domain.address import Address
from prmirror.domain.change import ChangeKind, ChangeRecord, InMemoryChange
from prmirror.domain.diff import DiffHunk, Side
from prmirror.infrastructure.pr_source.base import FetchError, PullRequestSource

logger = logging.getLogger(__name__)


class PatchApplyError(ValueError):
    """Raised when hunks do not fit the original content they should apply to."""

    pass


# ============================================================
# Result Model
# ============================================================


class ContentStrategy(Enum):
    """How a document's text was obtained."""

    EMPTY = "empty"
    ORIGINAL = "original"
    PATCHED = "patched"
    HUNKS = "hunks"
    REMOTE_BLOB = "remote_blob"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class DocumentContent:
    """Text of a virtual document plus how it was produced.

    Attributes:
        text: Document text ("" when empty or unavailable)
        strategy: Which reconstruction path produced the text
        fallback_url: Host URL to offer when content is unavailable
    """

    text: str
    strategy: ContentStrategy
    fallback_url: str = ""

    @classmethod
    def empty(cls) -> DocumentContent:
        return cls(text="", strategy=ContentStrategy.EMPTY)

    @classmethod
    def unavailable(cls, fallback_url: str = "") -> DocumentContent:
        return cls(text="", strategy=ContentStrategy.UNAVAILABLE, fallback_url=fallback_url)

    @property
    def available(self) -> bool:
        return self.strategy is not ContentStrategy.UNAVAILABLE


# ============================================================
# Reconstruction
# ============================================================


def reconstruct_from_hunks(hunks: tuple[DiffHunk, ...] | list[DiffHunk], side: Side) -> str:
    """Join the lines every hunk shows for one side, in hunk order.

    Context lines appear on both sides, added lines only on head, deleted lines
    only on base. Control lines never appear.
    """
    return "\n".join(line.text for hunk in hunks for line in hunk.content_lines(side))


def apply_patch(original: str, hunks: tuple[DiffHunk, ...] | list[DiffHunk]) -> str:
    """Apply hunks to the original file content.

    Each hunk replaces its old range (located by old_start/old_length) with its
    head-side lines. Context text is taken from the patch, so drift between the
    original and the patch's pre-image inside a hunk is tolerated; text outside
    hunks is copied verbatim.

    Args:
        original: Full base-side file content
        hunks: Hunks in patch order

    Returns:
        Head-side file content

    Raises:
        PatchApplyError: If a hunk overlaps the previous one or runs past the end of original
    """
    if not hunks:
        return original

    has_final_newline = original.endswith("\n")
    body = original[:-1] if has_final_newline else original
    original_lines = body.split("\n") if (body or has_final_newline) else []

    result: list[str] = []
    cursor = 0
    for hunk in hunks:
        # A pure insertion (old_length 0) goes after line old_start
        start = hunk.old_start - 1 if hunk.old_length > 0 else hunk.old_start
        end = start + hunk.old_length
        if start < cursor:
            raise PatchApplyError(
                f"Hunk at -{hunk.old_start},{hunk.old_length} overlaps the previous hunk"
            )
        if end > len(original_lines):
            raise PatchApplyError(
                f"Hunk at -{hunk.old_start},{hunk.old_length} runs past the end of the "
                f"original ({len(original_lines)} lines)"
            )
        result.extend(original_lines[cursor:start])
        result.extend(line.text for line in hunk.content_lines(Side.HEAD))
        cursor = end
    result.extend(original_lines[cursor:])

    missing_newline: set[Side] = set()
    for hunk in hunks:
        missing_newline |= hunk.sides_missing_final_newline()
    if Side.HEAD in missing_newline:
        final_newline = False
    elif Side.BASE in missing_newline or not original_lines:
        # Without a marker the patch reaches a head that ends in a newline
        final_newline = True
    else:
        final_newline = has_final_newline

    if not result:
        return ""
    return "\n".join(result) + ("\n" if final_newline else "")


def reconstruct(record: ChangeRecord, side: Side, original_content: str | None = None) -> str:
    """Reconstruct one side of a changed file.

    Args:
        record: An in-memory change record
        side: Which side to rebuild
        original_content: Base-side file content, if it could be retrieved

    Returns:
        The side's text ("" for the missing side of added/deleted files)

    Raises:
        ValueError: If record is a RemoteChange (it has no hunks)
        PatchApplyError: If the patch does not fit original_content
    """
    if record.kind is not ChangeKind.IN_MEMORY:
        raise ValueError(f"{record.file_name} has no patch; its content must be fetched from the host")
    assert isinstance(record, InMemoryChange)

    if record.is_empty_on(side):
        return ""

    if record.reads_content_from_hunks or record.is_partial or original_content is None:
        return reconstruct_from_hunks(record.diff_hunks, side)

    if side is Side.BASE:
        return original_content
    return apply_patch(original_content, record.diff_hunks)


# ============================================================
# Service
# ============================================================


class DocumentReconstructor:
    """Produces document content for in-memory change records.

    Fetches the original file from the pull-request source when the record
    needs it and degrades to hunk-only reconstruction when the fetch or the
    patch application fails. Never raises for those failures.
    """

    def __init__(self, source: PullRequestSource):
        """Initialize with dependencies.

        Args:
            source: Pull-request source used to read original blobs (injected)
        """
        self.source = source

    async def build(self, record: InMemoryChange, address: Address) -> DocumentContent:
        """Build the document named by address for record.

        Args:
            record: The change record the address resolved to
            address: Decoded document address (side and commits)

        Returns:
            DocumentContent describing the text and how it was produced
        """
        side = address.side
        if record.is_empty_on(side):
            return DocumentContent.empty()

        if record.reads_content_from_hunks or record.is_partial:
            return DocumentContent(
                text=reconstruct(record, side),
                strategy=ContentStrategy.HUNKS,
            )

        try:
            original = await asyncio.to_thread(
                self.source.get_file, record.base_file_name, address.base_commit
            )
        except FetchError as e:
            logger.warning(
                "Fetching %s at %s failed, showing diff hunks only: %s",
                record.base_file_name,
                address.base_commit,
                e,
            )
            return DocumentContent(
                text=reconstruct(record, side),
                strategy=ContentStrategy.HUNKS,
                fallback_url=record.blob_url,
            )

        try:
            text = reconstruct(record, side, original)
        except PatchApplyError as e:
            logger.warning(
                "Patch for %s does not apply to %s, showing diff hunks only: %s",
                record.file_name,
                address.base_commit,
                e,
            )
            return DocumentContent(
                text=reconstruct(record, side),
                strategy=ContentStrategy.HUNKS,
            )

        strategy = ContentStrategy.ORIGINAL if side is Side.BASE else ContentStrategy.PATCHED
        return DocumentContent(text=text, strategy=strategy)
