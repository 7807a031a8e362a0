"""Files command - list the changed files of a pull request.

Prints each file's status and the document tokens of its base and head sides,
either as a flat list or grouped by directory.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections import defaultdict
from pathlib import PurePosixPath

from prmirror.commands.common import open_session
from prmirror.config import MirrorConfig
from prmirror.domain.change import ChangeRecord, ChangeStatus, InMemoryChange
from prmirror.infrastructure.pr_source.base import FetchError

_STATUS_LABELS = {
    ChangeStatus.ADDED: "A",
    ChangeStatus.DELETED: "D",
    ChangeStatus.MODIFIED: "M",
    ChangeStatus.RENAMED: "R",
    ChangeStatus.COPIED: "C",
    ChangeStatus.CHANGED: "T",
    ChangeStatus.UNCHANGED: " ",
}


def cmd_files(
    config: MirrorConfig,
    pr_number: int,
    layout: str | None = None,
    as_json: bool = False,
) -> int:
    """Execute the files command.

    Args:
        config: Loaded prmirror configuration
        pr_number: Pull request number
        layout: "flat" or "tree"; defaults to config.file_list_layout
        as_json: Print records as JSON instead of a listing

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        records = asyncio.run(_load_records(config, pr_number))
    except FetchError as e:
        print(f"Error fetching PR #{pr_number}: {e}", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps([record_to_dict(r) for r in records], indent=2))
        return 0

    if not records:
        print(f"PR #{pr_number} has no files to show")
        return 0

    layout = layout or config.file_list_layout
    lines = format_tree(records) if layout == "tree" else format_flat(records)
    print("\n".join(lines))
    return 0


async def _load_records(config: MirrorConfig, pr_number: int) -> list[ChangeRecord]:
    session = await open_session(config, pr_number)
    async with session:
        return session.records


# ============================================================
# Formatting
# ============================================================


def record_to_dict(record: ChangeRecord) -> dict:
    data = {
        "file_name": record.file_name,
        "status": record.status.value,
        "kind": record.kind.value,
        "previous_file_name": record.previous_file_name,
        "blob_url": record.blob_url,
        "base_uri": record.base_uri,
        "head_uri": record.head_uri,
    }
    if isinstance(record, InMemoryChange):
        data["is_partial"] = record.is_partial
        data["hunks"] = len(record.diff_hunks)
        data["comments"] = len(record.comments)
    return data


def _describe(record: ChangeRecord, name: str) -> str:
    label = _STATUS_LABELS.get(record.status, "?")
    text = f"{label} {name}"
    if record.previous_file_name:
        text += f" (from {record.previous_file_name})"
    if isinstance(record, InMemoryChange):
        if record.comments:
            text += f" [{len(record.comments)} comments]"
        if record.is_partial:
            text += " [partial]"
    else:
        text += " [remote]"
    return text


def format_flat(records: list[ChangeRecord]) -> list[str]:
    """One entry per file in host order, followed by its document tokens."""
    lines: list[str] = []
    for record in records:
        lines.append(_describe(record, record.file_name))
        lines.append(f"    base: {record.base_uri}")
        lines.append(f"    head: {record.head_uri}")
    return lines


def format_tree(records: list[ChangeRecord]) -> list[str]:
    """Files grouped under their directory, directories sorted by path."""
    by_directory: dict[str, list[ChangeRecord]] = defaultdict(list)
    for record in records:
        parent = str(PurePosixPath(record.file_name).parent)
        by_directory[parent].append(record)

    lines: list[str] = []
    for directory in sorted(by_directory):
        lines.append("./" if directory == "." else f"{directory}/")
        for record in by_directory[directory]:
            lines.append("  " + _describe(record, PurePosixPath(record.file_name).name))
    return lines
