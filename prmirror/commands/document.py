"""Document commands - print a reconstructed file or its commenting ranges.

A document is named either by its token (as printed by the files command) or
by a file name plus a side.
"""

from __future__ import annotations

import asyncio
import sys

from prmirror.commands.common import open_session
from prmirror.config import MirrorConfig
from prmirror.domain.diff import Side
from prmirror.infrastructure.pr_source.base import FetchError
from prmirror.services.commenting_ranges import LineRange
from prmirror.services.content_reconstructor import ContentStrategy, DocumentContent
from prmirror.services.session import PullRequestSession


class DocumentNotFoundError(Exception):
    """Raised when the requested file is not part of the pull request."""

    pass


def cmd_show(
    config: MirrorConfig,
    pr_number: int,
    uri: str | None = None,
    file_name: str | None = None,
    side: str = "head",
) -> int:
    """Print the content of one side of a changed file.

    Args:
        config: Loaded prmirror configuration
        pr_number: Pull request number
        uri: Document token; takes precedence over file_name/side
        file_name: Head-side path of the file
        side: "base" or "head"

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        content = asyncio.run(_show(config, pr_number, uri, file_name, side))
    except (FetchError, DocumentNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if content.strategy is ContentStrategy.UNAVAILABLE:
        print("Content is not available.", file=sys.stderr)
        if content.fallback_url:
            print(f"View it on GitHub: {content.fallback_url}", file=sys.stderr)
        return 1

    if content.strategy is ContentStrategy.HUNKS:
        print("Showing diff hunks only; the full file could not be reconstructed.", file=sys.stderr)
    sys.stdout.write(content.text)
    if content.text and not content.text.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def cmd_ranges(
    config: MirrorConfig,
    pr_number: int,
    uri: str | None = None,
    file_name: str | None = None,
    side: str = "head",
) -> int:
    """Print the commenting ranges of one side of a changed file, one per line.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        ranges = asyncio.run(_ranges(config, pr_number, uri, file_name, side))
    except (FetchError, DocumentNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if ranges is None:
        print("No commenting ranges: the file's content is read from the host.", file=sys.stderr)
        return 1

    for line_range in ranges:
        print(line_range)
    return 0


# ============================================================
# Private Helpers
# ============================================================


async def _show(
    config: MirrorConfig,
    pr_number: int,
    uri: str | None,
    file_name: str | None,
    side: str,
) -> DocumentContent:
    session = await open_session(config, pr_number)
    async with session:
        token = uri or _token_for(session, file_name, side)
        return await session.resolve_document(token)


async def _ranges(
    config: MirrorConfig,
    pr_number: int,
    uri: str | None,
    file_name: str | None,
    side: str,
) -> list[LineRange] | None:
    session = await open_session(config, pr_number)
    async with session:
        token = uri or _token_for(session, file_name, side)
        # Ranges follow the numbering of the document actually served
        await session.resolve_document(token)
        return await session.provide_commenting_ranges(token)


def _token_for(session: PullRequestSession, file_name: str | None, side: str) -> str:
    if not file_name:
        raise ValueError("Either --uri or --file is required")
    record = session.resolver.find(file_name)
    if record is None:
        raise DocumentNotFoundError(f"{file_name} is not changed in PR #{session.pull_request.number}")
    return record.uri_for(Side.from_string(side))
