"""Tests for commenting range mapping.

Tests cover:
- Ranges per side for single and multiple hunks
- Ranges from different hunks are never merged
- Compact numbering for hunk-only documents
- LineRange validation and helpers
"""

import unittest

from prmirror.domain.diff import Side, parse_diff_hunks
from prmirror.services.commenting_ranges import LineRange, ranges_for
from prmirror.services.content_reconstructor import reconstruct_from_hunks

MODIFIED_PATCH = "@@ -1,3 +1,4 @@\n a\n-b\n+B\n+c\n d"

TWO_HUNKS = "@@ -1,2 +1,2 @@\n-x\n+y\n z\n@@ -10,2 +10,3 @@ def f():\n p\n+q\n r"


class TestRangesFor(unittest.TestCase):
    """Tests for ranges_for."""

    def test_single_hunk_head(self):
        self.assertEqual(ranges_for(parse_diff_hunks(MODIFIED_PATCH), Side.HEAD), [LineRange(1, 4)])

    def test_single_hunk_base(self):
        self.assertEqual(ranges_for(parse_diff_hunks(MODIFIED_PATCH), Side.BASE), [LineRange(1, 3)])

    def test_one_range_per_hunk(self):
        ranges = ranges_for(parse_diff_hunks(TWO_HUNKS), Side.HEAD)

        self.assertEqual(ranges, [LineRange(1, 2), LineRange(10, 12)])

    def test_base_ranges_use_old_line_numbers(self):
        ranges = ranges_for(parse_diff_hunks(TWO_HUNKS), Side.BASE)

        self.assertEqual(ranges, [LineRange(1, 2), LineRange(10, 11)])

    def test_adjacent_hunks_are_not_merged(self):
        hunks = parse_diff_hunks("@@ -1,2 +1,2 @@\n a\n b\n@@ -3,2 +3,2 @@\n c\n d")

        self.assertEqual(ranges_for(hunks, Side.HEAD), [LineRange(1, 2), LineRange(3, 4)])

    def test_compact_numbers_follow_hunk_only_document(self):
        hunks = parse_diff_hunks(TWO_HUNKS)

        ranges = ranges_for(hunks, Side.HEAD, compact=True)

        self.assertEqual(ranges, [LineRange(1, 2), LineRange(3, 5)])
        document_lines = reconstruct_from_hunks(hunks, Side.HEAD).split("\n")
        self.assertEqual(len(document_lines), ranges[-1].end)

    def test_added_file_has_no_base_ranges(self):
        hunks = parse_diff_hunks("@@ -0,0 +1,2 @@\n+one\n+two")

        self.assertEqual(ranges_for(hunks, Side.BASE), [])
        self.assertEqual(ranges_for(hunks, Side.HEAD), [LineRange(1, 2)])

    def test_no_hunks_no_ranges(self):
        self.assertEqual(ranges_for([], Side.HEAD), [])

    def test_every_visible_line_is_commentable(self):
        hunks = parse_diff_hunks(TWO_HUNKS)

        for side in Side:
            ranges = ranges_for(hunks, side)
            for hunk in hunks:
                for line in hunk.content_lines(side):
                    number = line.line_number_on(side)
                    self.assertTrue(any(number in r for r in ranges), f"{side} line {number}")

    def test_ranges_are_sorted_and_disjoint(self):
        ranges = ranges_for(parse_diff_hunks(TWO_HUNKS), Side.HEAD)

        for previous, current in zip(ranges, ranges[1:]):
            self.assertLess(previous.end, current.start)


class TestLineRange(unittest.TestCase):
    """Tests for LineRange."""

    def test_rejects_zero_start(self):
        with self.assertRaises(ValueError):
            LineRange(0, 1)

    def test_rejects_end_before_start(self):
        with self.assertRaises(ValueError):
            LineRange(3, 2)

    def test_membership_and_length(self):
        line_range = LineRange(2, 4)

        self.assertIn(3, line_range)
        self.assertNotIn(5, line_range)
        self.assertEqual(len(line_range), 3)

    def test_zero_based_and_str(self):
        self.assertEqual(LineRange(1, 4).to_zero_based(), (0, 3))
        self.assertEqual(str(LineRange(1, 4)), "1-4")


if __name__ == "__main__":
    unittest.main()
