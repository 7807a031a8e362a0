"""Parse diff command.

Thin command that reads a single file's patch from stdin or a file and prints
its hunks with base/head line numbers and GitHub diff positions.
"""

from __future__ import annotations

import sys
from pathlib import Path

from prmirror.domain.diff import ParseError, format_hunks_as_json, format_hunks_as_text, parse_diff_hunks


def cmd_parse_diff(
    input_file: str | None = None,
    output_format: str = "json",
) -> int:
    """Parse a patch and output structured hunk information.

    Args:
        input_file: Optional path to read the patch from. If None, reads from stdin.
        output_format: Output format - 'json' (default) or 'text' for debugging

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    # --------------------------------------------------------
    # 1. Read patch input
    # --------------------------------------------------------
    try:
        patch = Path(input_file).read_text() if input_file else sys.stdin.read()
    except FileNotFoundError:
        print(f"Input file not found: {input_file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Failed to read diff: {e}", file=sys.stderr)
        return 1

    # --------------------------------------------------------
    # 2. Parse into domain model
    # --------------------------------------------------------
    try:
        hunks = parse_diff_hunks(patch)
    except ParseError as e:
        print(f"Failed to parse diff: {e}", file=sys.stderr)
        return 1

    # --------------------------------------------------------
    # 3. Output in requested format
    # --------------------------------------------------------
    if output_format == "text":
        print(format_hunks_as_text(hunks))
    else:
        print(format_hunks_as_json(hunks))

    return 0
