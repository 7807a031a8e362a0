"""Commenting range mapping.

Derives the line ranges of a reconstructed document where review comments may
be anchored. A line is commentable when it is shown by some hunk on that side:
context lines on both sides, added lines on head, deleted lines on base.
"""

from __future__ import annotations

from dataclasses import dataclass

from prmirror.domain.diff import DiffHunk, Side


@dataclass(frozen=True)
class LineRange:
    """A 1-based, inclusive range of lines."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < self.start:
            raise ValueError(f"Invalid line range {self.start}-{self.end}")

    def __contains__(self, line_number: object) -> bool:
        return isinstance(line_number, int) and self.start <= line_number <= self.end

    def __len__(self) -> int:
        return self.end - self.start + 1

    def to_zero_based(self) -> tuple[int, int]:
        """Editor-style (start_line, end_line), both 0-based and inclusive."""
        return self.start - 1, self.end - 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def ranges_for(
    hunks: tuple[DiffHunk, ...] | list[DiffHunk],
    side: Side,
    compact: bool = False,
) -> list[LineRange]:
    """Compute commenting ranges for one side of a file.

    Each hunk contributes the runs of consecutive commentable lines it shows;
    ranges from different hunks are never merged, even when adjacent.

    Args:
        hunks: Hunks of the file's patch
        side: Which side's document the ranges are for
        compact: Number lines by their position in the hunk-only document
            (see reconstruct_from_hunks) instead of by file line number

    Returns:
        Disjoint ranges sorted by start line
    """
    ranges: list[LineRange] = []
    position = 0

    for hunk in hunks:
        start: int | None = None
        previous = 0
        for line in hunk.content_lines(side):
            position += 1
            number = position if compact else line.line_number_on(side)
            if number is None:
                continue
            if start is not None and number == previous + 1:
                previous = number
                continue
            if start is not None:
                ranges.append(LineRange(start, previous))
            start = previous = number
        if start is not None:
            ranges.append(LineRange(start, previous))

    ranges.sort(key=lambda r: (r.start, r.end))

    # Overlaps only come from malformed patches; fold them to stay disjoint
    disjoint: list[LineRange] = []
    for current in ranges:
        if disjoint and current.start <= disjoint[-1].end:
            last = disjoint.pop()
            current = LineRange(last.start, max(last.end, current.end))
        disjoint.append(current)
    return disjoint
