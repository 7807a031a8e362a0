"""Change set resolution service.

Turns a pull request's raw file changes into immutable change records, each
paired with the encoded addresses of its base and head documents. Every
resolve replaces the previous record set; nothing is merged.

Following Martin Fowler's Service Layer pattern with constructor-based
dependency injection.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from prmirror.domain.address import Address, encode
from prmirror.domain.change import (
    ChangeRecord,
    ChangeStatus,
    InMemoryChange,
    RemoteChange,
    ReviewComment,
)
from prmirror.domain.diff import Side, parse_diff_hunks
from prmirror.domain.github import PullRequest, RawFileChange
from prmirror.infrastructure.pr_source.base import FetchError, PullRequestSource

logger = logging.getLogger(__name__)


class ChangeSetResolver:
    """Resolves and holds the current change records of one pull request.

    resolve() is last-resolve-wins: starting a resolve cancels any resolve
    still in flight, and callers awaiting a superseded resolve receive the
    newest result instead.
    """

    def __init__(self, source: PullRequestSource):
        """Initialize with dependencies.

        Args:
            source: Pull-request source for change data (injected)
        """
        self.source = source
        self._records: list[ChangeRecord] = []
        self._in_flight: asyncio.Task | None = None
        self._waiters = 0

    # ============================================================
    # Public API
    # ============================================================

    @property
    def records(self) -> list[ChangeRecord]:
        """Records of the last completed resolve."""
        return list(self._records)

    def find(self, file_name: str) -> ChangeRecord | None:
        for record in self._records:
            if record.file_name == file_name:
                return record
        return None

    def find_by_uri(self, uri: str) -> ChangeRecord | None:
        """Look up the record that issued uri; tokens of an older change set miss."""
        for record in self._records:
            if uri in (record.base_uri, record.head_uri):
                return record
        return None

    async def resolve(self, pull_request: PullRequest) -> list[ChangeRecord]:
        """Resolve the change records of a pull request.

        Args:
            pull_request: Pull request with known base and head commits

        Returns:
            Records in the host's file order; empty when no merge base is known
        """
        previous = self._in_flight
        if previous is not None and not previous.done():
            logger.debug("Superseding in-flight resolve of PR #%d", pull_request.number)
            previous.cancel()

        task = asyncio.ensure_future(self._resolve(pull_request))
        self._in_flight = task

        self._waiters += 1
        try:
            while True:
                try:
                    return await asyncio.shield(task)
                except asyncio.CancelledError:
                    if not task.cancelled():
                        # The caller itself was cancelled; other callers may still wait
                        if self._in_flight is task and self._waiters == 1:
                            task.cancel()
                        raise
                    if self._in_flight is task or self._in_flight is None:
                        raise
                    task = self._in_flight
        finally:
            self._waiters -= 1

    def apply_draft_mode_cleared(self) -> list[ChangeRecord]:
        """Rebuild the current records with every attached comment no longer a draft."""
        self._records = [
            record.with_comments(tuple(replace(c, is_draft=False) for c in record.comments))
            if isinstance(record, InMemoryChange)
            else record
            for record in self._records
        ]
        return self.records

    # ============================================================
    # Resolution
    # ============================================================

    async def _resolve(self, pull_request: PullRequest) -> list[ChangeRecord]:
        if not pull_request.is_resolved:
            logger.info("PR #%d has no base/head commits yet", pull_request.number)
            self._records = []
            return []

        comments_result, info_result = await asyncio.gather(
            asyncio.to_thread(self.source.get_review_comments, pull_request),
            asyncio.to_thread(self.source.get_file_changes_info, pull_request),
            return_exceptions=True,
        )

        if isinstance(info_result, BaseException):
            if not isinstance(info_result, FetchError):
                raise info_result
            logger.warning("Could not fetch files of PR #%d: %s", pull_request.number, info_result)
            self._records = []
            return []
        info = info_result

        if isinstance(comments_result, BaseException):
            if not isinstance(comments_result, FetchError):
                raise comments_result
            logger.warning(
                "Could not fetch review comments of PR #%d, showing files without them: %s",
                pull_request.number,
                comments_result,
            )
            comments: list[ReviewComment] = []
        else:
            comments = comments_result

        if not info.merge_base:
            logger.info("PR #%d has no merge base, no files to show", pull_request.number)
            self._records = []
            return []

        records: list[ChangeRecord] = []
        for change in info.changes:
            record = await self._build_record(change, pull_request, info.merge_base, comments)
            records.append(record)

        self._records = records
        return list(records)

    async def _build_record(
        self,
        change: RawFileChange,
        pull_request: PullRequest,
        merge_base: str,
        comments: list[ReviewComment],
    ) -> ChangeRecord:
        status = ChangeStatus.from_github(change.status)
        previous_file_name = change.previous_filename if status is ChangeStatus.RENAMED else None
        if status is ChangeStatus.RENAMED and not previous_file_name:
            logger.warning("Renamed file %s has no previous name, treating as modified", change.filename)
            status = ChangeStatus.MODIFIED

        common = dict(
            file_name=change.filename,
            status=status,
            previous_file_name=previous_file_name,
            blob_url=change.blob_url,
            base_commit=merge_base,
            base_uri=self._uri(Side.BASE, change.filename, merge_base, pull_request, status),
            head_uri=self._uri(Side.HEAD, change.filename, merge_base, pull_request, status),
        )

        if not change.patch:
            # Binary or oversized files come without a patch
            return RemoteChange(**common)

        # Malformed hunks are dropped (and logged) without losing their siblings
        hunks = tuple(parse_diff_hunks(change.patch, strict=False))

        if not hunks and status in (ChangeStatus.ADDED, ChangeStatus.DELETED):
            logger.warning("No usable hunks for %s, content will be read from the host", change.filename)
            return RemoteChange(**common)

        is_partial = False
        if status in (ChangeStatus.MODIFIED, ChangeStatus.CHANGED):
            exists = await asyncio.to_thread(self.source.has_file, change.filename, merge_base)
            is_partial = exists is False

        return InMemoryChange(
            **common,
            patch=change.patch,
            diff_hunks=hunks,
            is_partial=is_partial,
            comments=tuple(
                c for c in comments if c.path == change.filename and c.position is not None
            ),
        )

    @staticmethod
    def _uri(
        side: Side,
        file_name: str,
        merge_base: str,
        pull_request: PullRequest,
        status: ChangeStatus,
    ) -> str:
        return encode(
            Address.for_side(
                side,
                file_name=file_name,
                base_commit=merge_base,
                head_commit=pull_request.head_sha,
                status=status,
                pr_number=pull_request.number,
            )
        )
