"""Domain models for unified diff hunks.

Parse-once pattern: Raw patch text is parsed into type-safe models at the boundary.
Each hunk carries its typed lines with old/new line numbers already computed, so
reconstruction and commenting-range code never re-reads the raw patch.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$")


class ParseError(ValueError):
    """Raised when a hunk header cannot be parsed."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


# ============================================================
# Domain Models
# ============================================================


class Side(Enum):
    """Which version of a file a document shows."""

    BASE = "base"
    HEAD = "head"

    @classmethod
    def from_is_base(cls, is_base: bool) -> Side:
        return cls.BASE if is_base else cls.HEAD

    @classmethod
    def from_string(cls, value: str) -> Side:
        """Parse Side from string value ("base" or "head").

        Raises:
            ValueError: If value is not a valid side
        """
        value_lower = value.lower()
        for member in cls:
            if member.value == value_lower:
                return member
        raise ValueError(f"Invalid side: {value}. Must be one of: base, head")

    @property
    def is_base(self) -> bool:
        return self is Side.BASE


class DiffLineType(Enum):
    """Type of line in a diff."""

    CONTEXT = "context"
    ADDED = "added"
    DELETED = "deleted"
    CONTROL = "control"


@dataclass(frozen=True)
class DiffLine:
    """A single line from a diff hunk.

    Attributes:
        line_type: Context, added, deleted, or control (hunk header / no-newline marker)
        text: The line content without its marker
        raw_line: The original line including its marker
        old_line_number: Line number in the base file (None for added and control lines)
        new_line_number: Line number in the head file (None for deleted and control lines)
        position: GitHub diff position, counted from the first @@ header of the patch
    """

    line_type: DiffLineType
    text: str
    raw_line: str
    old_line_number: int | None = None
    new_line_number: int | None = None
    position: int = 0

    @property
    def is_changed(self) -> bool:
        """Check if this line represents a change (added or deleted)."""
        return self.line_type in (DiffLineType.ADDED, DiffLineType.DELETED)

    def is_visible_on(self, side: Side) -> bool:
        """Whether this line exists in the given side's version of the file."""
        if self.line_type == DiffLineType.CONTEXT:
            return True
        if side is Side.BASE:
            return self.line_type == DiffLineType.DELETED
        return self.line_type == DiffLineType.ADDED

    def line_number_on(self, side: Side) -> int | None:
        return self.old_line_number if side is Side.BASE else self.new_line_number


@dataclass(frozen=True)
class DiffHunk:
    """A contiguous block of a unified diff.

    The first line is always the CONTROL line for the @@ header itself.
    """

    old_start: int
    old_length: int
    new_start: int
    new_length: int
    header: str = ""
    lines: tuple[DiffLine, ...] = field(default_factory=tuple)

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    @property
    def old_end(self) -> int:
        """Last base-file line covered by this hunk (old_start - 1 when empty)."""
        return self.old_start + self.old_length - 1

    @property
    def new_end(self) -> int:
        """Last head-file line covered by this hunk (new_start - 1 when empty)."""
        return self.new_start + self.new_length - 1

    def start_on(self, side: Side) -> int:
        return self.old_start if side is Side.BASE else self.new_start

    def added_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.line_type == DiffLineType.ADDED]

    def deleted_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.line_type == DiffLineType.DELETED]

    def context_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.line_type == DiffLineType.CONTEXT]

    def content_lines(self, side: Side) -> list[DiffLine]:
        """Lines that exist in the given side's version of the file, in order."""
        return [line for line in self.lines if line.is_visible_on(side)]

    def sides_missing_final_newline(self) -> set[Side]:
        """Sides flagged by a '\\ No newline at end of file' marker in this hunk.

        The marker applies to the line right before it: a deleted line means the
        base file lacks the final newline, an added line means the head file does,
        a context line means both do.
        """
        sides: set[Side] = set()
        previous: DiffLine | None = None
        for line in self.lines:
            if line.line_type == DiffLineType.CONTROL and line.raw_line.startswith("\\"):
                if previous is None:
                    continue
                if previous.line_type == DiffLineType.DELETED:
                    sides.add(Side.BASE)
                elif previous.line_type == DiffLineType.ADDED:
                    sides.add(Side.HEAD)
                elif previous.line_type == DiffLineType.CONTEXT:
                    sides.update((Side.BASE, Side.HEAD))
            else:
                previous = line
        return sides

    def to_dict(self) -> dict:
        """Convert hunk to dictionary for JSON serialization."""
        return {
            "old_start": self.old_start,
            "old_length": self.old_length,
            "new_start": self.new_start,
            "new_length": self.new_length,
            "header": self.header,
            "lines": [
                {
                    "type": line.line_type.value,
                    "text": line.text,
                    "old_line_number": line.old_line_number,
                    "new_line_number": line.new_line_number,
                    "position": line.position,
                }
                for line in self.lines
            ],
        }


# ============================================================
# Parsing
# ============================================================


@dataclass
class _HunkBuilder:
    """Mutable accumulator used while reading one hunk's body."""

    old_start: int
    old_length: int
    new_start: int
    new_length: int
    header: str
    lines: list[DiffLine] = field(default_factory=list)
    old_line: int = 0
    new_line: int = 0
    remaining_old: int = 0
    remaining_new: int = 0

    @classmethod
    def from_header(cls, match: re.Match, raw_line: str, position: int) -> _HunkBuilder:
        old_start = int(match.group(1))
        old_length = int(match.group(2)) if match.group(2) is not None else 1
        new_start = int(match.group(3))
        new_length = int(match.group(4)) if match.group(4) is not None else 1
        builder = cls(
            old_start=old_start,
            old_length=old_length,
            new_start=new_start,
            new_length=new_length,
            header=match.group(5).strip(),
            old_line=old_start,
            new_line=new_start,
            remaining_old=old_length,
            remaining_new=new_length,
        )
        builder.lines.append(
            DiffLine(
                line_type=DiffLineType.CONTROL,
                text=raw_line,
                raw_line=raw_line,
                position=position,
            )
        )
        return builder

    @property
    def expects_more(self) -> bool:
        return self.remaining_old > 0 or self.remaining_new > 0

    def add_line(self, raw_line: str, position: int) -> bool:
        """Consume one body line. Returns False when the line does not belong to the hunk."""
        marker = raw_line[:1]
        text = raw_line[1:]

        if marker == "\\":
            self.lines.append(
                DiffLine(
                    line_type=DiffLineType.CONTROL,
                    text=raw_line,
                    raw_line=raw_line,
                    position=position,
                )
            )
            return True

        if not self.expects_more:
            return False

        if marker == "+":
            self.lines.append(
                DiffLine(
                    line_type=DiffLineType.ADDED,
                    text=text,
                    raw_line=raw_line,
                    new_line_number=self.new_line,
                    position=position,
                )
            )
            self.new_line += 1
            self.remaining_new -= 1
        elif marker == "-":
            self.lines.append(
                DiffLine(
                    line_type=DiffLineType.DELETED,
                    text=text,
                    raw_line=raw_line,
                    old_line_number=self.old_line,
                    position=position,
                )
            )
            self.old_line += 1
            self.remaining_old -= 1
        elif marker == " " or raw_line == "":
            # Some tools strip the single space of empty context lines
            self.lines.append(
                DiffLine(
                    line_type=DiffLineType.CONTEXT,
                    text=text,
                    raw_line=raw_line,
                    old_line_number=self.old_line,
                    new_line_number=self.new_line,
                    position=position,
                )
            )
            self.old_line += 1
            self.new_line += 1
            self.remaining_old -= 1
            self.remaining_new -= 1
        else:
            return False
        return True

    def build(self) -> DiffHunk:
        return DiffHunk(
            old_start=self.old_start,
            old_length=self.old_length,
            new_start=self.new_start,
            new_length=self.new_length,
            header=self.header,
            lines=tuple(self.lines),
        )


def parse_diff_hunks(patch: str, strict: bool = True) -> list[DiffHunk]:
    """Parse a file's unified diff patch into hunks of typed lines.

    File header lines (diff --git, index, ---, +++) before the first hunk are
    skipped. Positions follow GitHub's review-comment convention: the first @@
    header is position 0 and every following line, including later @@ headers,
    increments it.

    Args:
        patch: Patch text for a single file (e.g. the "patch" field of a PR file)
        strict: Raise on a malformed hunk header instead of skipping that hunk

    Returns:
        Parsed hunks in patch order

    Raises:
        ParseError: If strict and a hunk header is malformed
    """
    hunks: list[DiffHunk] = []
    builder: _HunkBuilder | None = None
    position: int | None = None

    for raw_line in patch.split("\n"):
        if raw_line.startswith("@@"):
            if builder is not None:
                hunks.append(builder.build())
                builder = None
            position = 0 if position is None else position + 1

            match = _HUNK_HEADER_RE.match(raw_line)
            if not match:
                if strict:
                    raise ParseError(f"Malformed hunk header: {raw_line!r}", line=raw_line)
                logger.warning("Skipping hunk with malformed header: %r", raw_line)
                continue
            builder = _HunkBuilder.from_header(match, raw_line, position)
            continue

        if position is None:
            # File header before the first hunk
            continue

        if builder is None:
            # Body of a skipped hunk or trailing file markers
            if raw_line:
                position += 1
            continue

        if builder.add_line(raw_line, position + 1):
            position += 1
        else:
            hunks.append(builder.build())
            builder = None
            if raw_line:
                position += 1

    if builder is not None:
        hunks.append(builder.build())

    return hunks


# ============================================================
# Formatting
# ============================================================


def format_hunks_as_json(hunks: list[DiffHunk]) -> str:
    """Render hunks as a JSON document."""
    return json.dumps({"hunks": [hunk.to_dict() for hunk in hunks]}, indent=2)


def format_hunks_as_text(hunks: list[DiffHunk]) -> str:
    """Render hunks for humans, prefixing each line with its base/head line numbers."""
    output: list[str] = []
    for index, hunk in enumerate(hunks, 1):
        output.append(
            f"Hunk {index}: -{hunk.old_start},{hunk.old_length} +{hunk.new_start},{hunk.new_length}"
            + (f"  {hunk.header}" if hunk.header else "")
        )
        for line in hunk.lines[1:]:
            old = "" if line.old_line_number is None else str(line.old_line_number)
            new = "" if line.new_line_number is None else str(line.new_line_number)
            output.append(f"{old:>5} {new:>5} | {line.raw_line}")
        output.append("")
    return "\n".join(output)
