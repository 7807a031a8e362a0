"""Tests for content reconstruction.

Tests cover:
- Hunk-only reconstruction of added, deleted and partial files
- Patch application, including insertions, multiple hunks and drift inside hunks
- Final newline handling driven by no-newline markers
- PatchApplyError for overlapping or out-of-range hunks
- DocumentReconstructor fallbacks when the original cannot be fetched or patched
- Originals that are not valid UTF-8 read through a local checkout
"""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import MagicMock, patch

from prmirror.domain.address import Address
from prmirror.domain.change import ChangeStatus, InMemoryChange, RemoteChange
from prmirror.domain.diff import Side, parse_diff_hunks
from prmirror.infrastructure.pr_source.base import FetchError, PullRequestSource
from prmirror.infrastructure.pr_source.local_source import LocalGitPullRequestSource
from prmirror.services.commenting_ranges import LineRange, ranges_for
from prmirror.services.content_reconstructor import (
    ContentStrategy,
    DocumentContent,
    DocumentReconstructor,
    PatchApplyError,
    apply_patch,
    reconstruct,
    reconstruct_from_hunks,
)
from prmirror.services.git_operations import GitOperationsService

MODIFIED_PATCH = "@@ -1,3 +1,4 @@\n a\n-b\n+B\n+c\n d"
ADDED_PATCH = "@@ -0,0 +1,2 @@\n+one\n+two"
DELETED_PATCH = "@@ -1,2 +0,0 @@\n-one\n-two"


# ============================================================
# Test Fixtures
# ============================================================


def make_record(
    patch: str = MODIFIED_PATCH,
    status: ChangeStatus = ChangeStatus.MODIFIED,
    is_partial: bool = False,
    **kwargs,
) -> InMemoryChange:
    """Create an InMemoryChange instance for testing."""
    return InMemoryChange(
        file_name=kwargs.pop("file_name", "src/app.py"),
        status=status,
        patch=patch,
        diff_hunks=tuple(parse_diff_hunks(patch)),
        is_partial=is_partial,
        blob_url="https://github.com/o/r/blob/head1/src/app.py",
        base_commit="mb1",
        **kwargs,
    )


def make_address(record: InMemoryChange, side: Side) -> Address:
    return Address.for_side(
        side,
        file_name=record.file_name,
        base_commit="mb1",
        head_commit="head1",
        status=record.status,
        pr_number=42,
    )


# ============================================================
# Pure Functions
# ============================================================


class TestReconstructFromHunks(unittest.TestCase):
    """Tests for reconstruct_from_hunks."""

    def test_added_file_head_is_added_lines(self):
        self.assertEqual(reconstruct_from_hunks(parse_diff_hunks(ADDED_PATCH), Side.HEAD), "one\ntwo")

    def test_added_file_base_is_empty(self):
        self.assertEqual(reconstruct_from_hunks(parse_diff_hunks(ADDED_PATCH), Side.BASE), "")

    def test_deleted_file_base_is_deleted_lines(self):
        self.assertEqual(reconstruct_from_hunks(parse_diff_hunks(DELETED_PATCH), Side.BASE), "one\ntwo")

    def test_modified_sides_keep_context(self):
        hunks = parse_diff_hunks(MODIFIED_PATCH)

        self.assertEqual(reconstruct_from_hunks(hunks, Side.BASE), "a\nb\nd")
        self.assertEqual(reconstruct_from_hunks(hunks, Side.HEAD), "a\nB\nc\nd")

    def test_hunks_are_concatenated_in_order(self):
        hunks = parse_diff_hunks("@@ -1,1 +1,1 @@\n-x\n+y\n@@ -9,1 +9,1 @@\n-p\n+q")

        self.assertEqual(reconstruct_from_hunks(hunks, Side.HEAD), "y\nq")

    def test_control_lines_never_appear(self):
        hunks = parse_diff_hunks("@@ -1 +1 @@\n-a\n+b\n\\ No newline at end of file")

        self.assertEqual(reconstruct_from_hunks(hunks, Side.HEAD), "b")


class TestApplyPatch(unittest.TestCase):
    """Tests for apply_patch."""

    def test_applies_single_hunk(self):
        self.assertEqual(apply_patch("a\nb\nd\n", parse_diff_hunks(MODIFIED_PATCH)), "a\nB\nc\nd\n")

    def test_copies_lines_outside_hunks(self):
        hunks = parse_diff_hunks("@@ -3,2 +3,2 @@\n-3\n+three\n 4")

        self.assertEqual(apply_patch("1\n2\n3\n4\n5\n6\n", hunks), "1\n2\nthree\n4\n5\n6\n")

    def test_applies_pure_insertion_after_old_start(self):
        hunks = parse_diff_hunks("@@ -2,0 +3,1 @@\n+new")

        self.assertEqual(apply_patch("a\nb\nc\n", hunks), "a\nb\nnew\nc\n")

    def test_applies_multiple_hunks(self):
        hunks = parse_diff_hunks("@@ -1,1 +1,1 @@\n-1\n+one\n@@ -4,1 +4,2 @@\n 4\n+4.5")

        self.assertEqual(apply_patch("1\n2\n3\n4\n5\n", hunks), "one\n2\n3\n4\n4.5\n5\n")

    def test_takes_context_text_from_patch(self):
        # The original drifted inside the hunk; the patch wins there
        self.assertEqual(apply_patch("A\nb\nd\n", parse_diff_hunks(MODIFIED_PATCH)), "a\nB\nc\nd\n")

    def test_changes_one_line_of_ten_line_file(self):
        original = "".join(f"line {n}\n" for n in range(1, 11))
        hunks = parse_diff_hunks("@@ -3,5 +3,5 @@\n line 3\n line 4\n-line 5\n+LINE FIVE\n line 6\n line 7")

        result = apply_patch(original, hunks)

        self.assertEqual(result, original.replace("line 5\n", "LINE FIVE\n"))
        self.assertEqual(
            ranges_for(hunks, Side.HEAD),
            [LineRange(3, 7)],
        )

    def test_without_hunks_returns_original(self):
        self.assertEqual(apply_patch("a\n", []), "a\n")

    def test_keeps_missing_final_newline(self):
        self.assertEqual(apply_patch("a\nb\nd", parse_diff_hunks(MODIFIED_PATCH)), "a\nB\nc\nd")

    def test_head_no_newline_marker_drops_final_newline(self):
        hunks = parse_diff_hunks("@@ -1 +1 @@\n-x\n+y\n\\ No newline at end of file")

        self.assertEqual(apply_patch("x\n", hunks), "y")

    def test_base_only_no_newline_marker_adds_final_newline(self):
        hunks = parse_diff_hunks("@@ -1 +1 @@\n-x\n\\ No newline at end of file\n+y")

        self.assertEqual(apply_patch("x", hunks), "y\n")

    def test_empty_original_gains_final_newline(self):
        self.assertEqual(apply_patch("", parse_diff_hunks(ADDED_PATCH)), "one\ntwo\n")

    def test_empty_original_keeps_head_no_newline_marker(self):
        hunks = parse_diff_hunks("@@ -0,0 +1,2 @@\n+one\n+two\n\\ No newline at end of file")

        self.assertEqual(apply_patch("", hunks), "one\ntwo")

    def test_deleting_everything_gives_empty_text(self):
        self.assertEqual(apply_patch("one\ntwo\n", parse_diff_hunks(DELETED_PATCH)), "")

    def test_raises_on_overlapping_hunks(self):
        hunks = parse_diff_hunks("@@ -1,2 +1,2 @@\n a\n b\n@@ -2,1 +2,1 @@\n b")

        with self.assertRaises(PatchApplyError):
            apply_patch("a\nb\nc\n", hunks)

    def test_raises_when_hunk_runs_past_end(self):
        hunks = parse_diff_hunks("@@ -5,1 +5,1 @@\n-x\n+y")

        with self.assertRaises(PatchApplyError):
            apply_patch("a\n", hunks)


class TestReconstruct(unittest.TestCase):
    """Tests for reconstruct."""

    def test_base_of_modified_is_original_verbatim(self):
        self.assertEqual(reconstruct(make_record(), Side.BASE, "a\nb\nd\n"), "a\nb\nd\n")

    def test_head_of_modified_applies_patch(self):
        self.assertEqual(reconstruct(make_record(), Side.HEAD, "a\nb\nd\n"), "a\nB\nc\nd\n")

    def test_missing_original_falls_back_to_hunks(self):
        self.assertEqual(reconstruct(make_record(), Side.HEAD), "a\nB\nc\nd")

    def test_partial_record_ignores_original(self):
        record = make_record(is_partial=True)

        self.assertEqual(reconstruct(record, Side.BASE, "something else\n"), "a\nb\nd")

    def test_added_file_sides(self):
        record = make_record(ADDED_PATCH, ChangeStatus.ADDED)

        self.assertEqual(reconstruct(record, Side.BASE), "")
        self.assertEqual(reconstruct(record, Side.HEAD), "one\ntwo")

    def test_deleted_file_sides(self):
        record = make_record(DELETED_PATCH, ChangeStatus.DELETED)

        self.assertEqual(reconstruct(record, Side.BASE), "one\ntwo")
        self.assertEqual(reconstruct(record, Side.HEAD), "")

    def test_remote_record_is_rejected(self):
        record = RemoteChange(file_name="logo.png", status=ChangeStatus.MODIFIED)

        with self.assertRaises(ValueError):
            reconstruct(record, Side.HEAD)


# ============================================================
# Service
# ============================================================


class TestDocumentReconstructor(unittest.TestCase):
    """Tests for DocumentReconstructor with a mocked source."""

    def setUp(self):
        self.mock_source = MagicMock(spec=PullRequestSource)
        self.reconstructor = DocumentReconstructor(self.mock_source)

    def _build(self, record: InMemoryChange, side: Side) -> DocumentContent:
        return asyncio.run(self.reconstructor.build(record, make_address(record, side)))

    def test_head_is_patched_original(self):
        self.mock_source.get_file.return_value = "a\nb\nd\n"

        content = self._build(make_record(), Side.HEAD)

        self.assertEqual(content.text, "a\nB\nc\nd\n")
        self.assertEqual(content.strategy, ContentStrategy.PATCHED)
        self.mock_source.get_file.assert_called_once_with("src/app.py", "mb1")

    def test_base_is_original(self):
        self.mock_source.get_file.return_value = "a\nb\nd\n"

        content = self._build(make_record(), Side.BASE)

        self.assertEqual(content.text, "a\nb\nd\n")
        self.assertEqual(content.strategy, ContentStrategy.ORIGINAL)

    def test_renamed_file_reads_previous_name(self):
        self.mock_source.get_file.return_value = "a\nb\nd\n"
        record = make_record(
            status=ChangeStatus.RENAMED, file_name="src/new.py", previous_file_name="src/old.py"
        )

        self._build(record, Side.HEAD)

        self.mock_source.get_file.assert_called_once_with("src/old.py", "mb1")

    def test_fetch_failure_falls_back_to_hunks(self):
        self.mock_source.get_file.side_effect = FetchError("boom")

        with self.assertLogs("prmirror.services.content_reconstructor", level="WARNING"):
            content = self._build(make_record(), Side.HEAD)

        self.assertEqual(content.text, "a\nB\nc\nd")
        self.assertEqual(content.strategy, ContentStrategy.HUNKS)
        self.assertEqual(content.fallback_url, "https://github.com/o/r/blob/head1/src/app.py")

    def test_patch_mismatch_falls_back_to_hunks(self):
        self.mock_source.get_file.return_value = "a\n"

        with self.assertLogs("prmirror.services.content_reconstructor", level="WARNING"):
            content = self._build(make_record(), Side.HEAD)

        self.assertEqual(content.strategy, ContentStrategy.HUNKS)
        self.assertEqual(content.text, "a\nB\nc\nd")

    def test_added_file_never_fetches(self):
        record = make_record(ADDED_PATCH, ChangeStatus.ADDED)

        head = self._build(record, Side.HEAD)
        base = self._build(record, Side.BASE)

        self.assertEqual(head, DocumentContent(text="one\ntwo", strategy=ContentStrategy.HUNKS))
        self.assertEqual(base, DocumentContent.empty())
        self.mock_source.get_file.assert_not_called()

    def test_partial_file_never_fetches(self):
        content = self._build(make_record(is_partial=True), Side.HEAD)

        self.assertEqual(content.strategy, ContentStrategy.HUNKS)
        self.mock_source.get_file.assert_not_called()

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_latin1_original_from_local_checkout(self, mock_run):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(stdout=b"caf\xe9\nb\n")]
        source = LocalGitPullRequestSource(
            MagicMock(spec=PullRequestSource), GitOperationsService("/repo")
        )
        record = make_record("@@ -1,2 +1,2 @@\n caf\ufffd\n-b\n+B")

        content = asyncio.run(
            DocumentReconstructor(source).build(record, make_address(record, Side.HEAD))
        )

        self.assertEqual(content.strategy, ContentStrategy.PATCHED)
        self.assertEqual(content.text, "caf\ufffd\nB\n")

    def test_unavailable_content(self):
        content = DocumentContent.unavailable("https://example.com")

        self.assertFalse(content.available)
        self.assertEqual(content.text, "")
        self.assertTrue(DocumentContent.empty().available)


if __name__ == "__main__":
    unittest.main()
