"""Pull request session.

A session is the explicit lifetime of one pull request view: open() resolves
the change set and registers the session's content provider, close() releases
the registration. Content and commenting-range requests carry tokens issued by
the current change set; tokens from an older change set decode but miss.
"""

from __future__ import annotations

import asyncio
import logging

from prmirror.domain.address import Address, decode
from prmirror.domain.change import ChangeKind, ChangeRecord, InMemoryChange
from prmirror.domain.github import PullRequest
from prmirror.infrastructure.content_registry import ContentProviderRegistry, Registration
from prmirror.infrastructure.pr_source.base import FetchError, PullRequestSource
from prmirror.services.change_set_resolver import ChangeSetResolver
from prmirror.services.commenting_ranges import LineRange, ranges_for
from prmirror.services.content_reconstructor import (
    ContentStrategy,
    DocumentContent,
    DocumentReconstructor,
)

logger = logging.getLogger(__name__)


class PullRequestSession:
    """Serves virtual documents and commenting ranges for one pull request.

    Use open() rather than the constructor; the session is also an async
    context manager that closes itself on exit.
    """

    def __init__(
        self,
        pull_request: PullRequest,
        source: PullRequestSource,
        registry: ContentProviderRegistry,
    ):
        self.pull_request = pull_request
        self.source = source
        self.registry = registry
        self.resolver = ChangeSetResolver(source)
        self.reconstructor = DocumentReconstructor(source)
        self._registration: Registration | None = None
        self._served: dict[str, ContentStrategy] = {}

    # ============================================================
    # Lifecycle
    # ============================================================

    @classmethod
    async def open(
        cls,
        pull_request: PullRequest,
        source: PullRequestSource,
        registry: ContentProviderRegistry,
    ) -> PullRequestSession:
        """Resolve the pull request's change set and register its content provider.

        Raises:
            ValueError: If another session already serves this pull request
        """
        session = cls(pull_request, source, registry)
        await session.refresh()
        session._registration = registry.register(
            pull_request.number, session.provide_document_content
        )
        return session

    async def refresh(self) -> list[ChangeRecord]:
        """Re-resolve the change set, replacing the previous records and their tokens."""
        records = await self.resolver.resolve(self.pull_request)
        self._served.clear()
        return records

    def handle_draft_mode_cleared(self) -> list[ChangeRecord]:
        """Apply the "pending review submitted" transition to the current records."""
        return self.resolver.apply_draft_mode_cleared()

    def close(self) -> None:
        if self._registration is not None:
            self._registration.dispose()
            self._registration = None

    @property
    def is_open(self) -> bool:
        return self._registration is not None

    async def __aenter__(self) -> PullRequestSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ============================================================
    # Public API
    # ============================================================

    @property
    def records(self) -> list[ChangeRecord]:
        return self.resolver.records

    async def provide_document_content(self, token: str) -> str:
        """Content of the virtual document named by token ("" when unavailable)."""
        return (await self.resolve_document(token)).text

    async def resolve_document(self, token: str) -> DocumentContent:
        """Content of the virtual document named by token, with how it was obtained."""
        address = self._own_address(token)
        if address is None:
            return DocumentContent.unavailable()

        record = self.resolver.find_by_uri(token)
        if record is None:
            logger.info("Can not find content for document %s", token)
            return DocumentContent.unavailable()

        if record.is_empty_on(address.side):
            content = DocumentContent.empty()
        elif record.kind is ChangeKind.REMOTE:
            content = await self._fetch_remote(record, address)
        else:
            assert isinstance(record, InMemoryChange)
            content = await self.reconstructor.build(record, address)

        self._served[token] = content.strategy
        return content

    async def provide_commenting_ranges(self, token: str) -> list[LineRange] | None:
        """Commenting ranges of the document named by token.

        Returns:
            Ranges sorted by start line, or None when the document is not one
            of this pull request's in-memory files
        """
        address = self._own_address(token)
        if address is None:
            return None

        record = self.resolver.find_by_uri(token)
        if record is None or record.kind is not ChangeKind.IN_MEMORY:
            return None
        assert isinstance(record, InMemoryChange)

        strategy = self._served.get(token)
        if strategy is None:
            compact = record.reads_content_from_hunks or record.is_partial
        else:
            compact = strategy is ContentStrategy.HUNKS
        return ranges_for(record.diff_hunks, address.side, compact=compact)

    # ============================================================
    # Private Helpers
    # ============================================================

    def _own_address(self, token: str) -> Address | None:
        address = decode(token)
        if address is None:
            logger.info("Ignoring malformed document token %s", token)
            return None
        if address.pr_number != self.pull_request.number:
            return None
        return address

    async def _fetch_remote(self, record: ChangeRecord, address: Address) -> DocumentContent:
        path = record.path_on(address.side)
        try:
            text = await asyncio.to_thread(self.source.get_file, path, address.commit)
        except FetchError as e:
            logger.warning(
                "Fetching file content failed: %s. View it on GitHub: %s",
                e,
                record.blob_url,
            )
            return DocumentContent.unavailable(fallback_url=record.blob_url)
        return DocumentContent(text=text, strategy=ContentStrategy.REMOTE_BLOB)
