"""Tests for GitOperationsService.

Tests cover:
- git show, cat-file and merge-base command construction
- Undecodable blob bytes replaced rather than raised
- Error conversion for missing files, missing repositories and merge-base failures
"""

import subprocess
import unittest
from unittest.mock import MagicMock, patch

from prmirror.services.git_operations import (
    GitFileNotFoundError,
    GitMergeBaseError,
    GitOperationsService,
    GitRepositoryError,
)


class TestGitOperationsService(unittest.TestCase):
    """Tests for GitOperationsService with subprocess mocked."""

    def setUp(self):
        self.service = GitOperationsService("/repo")

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_is_git_repository(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)

        self.assertTrue(self.service.is_git_repository())
        mock_run.assert_called_once()
        self.assertEqual(mock_run.call_args.args[0], ["git", "rev-parse", "--git-dir"])

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_is_not_git_repository(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(128, ["git"])

        self.assertFalse(self.service.is_git_repository())

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_missing_git_is_not_a_repository(self, mock_run):
        mock_run.side_effect = FileNotFoundError("git")

        self.assertFalse(self.service.is_git_repository())

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_get_file_content_uses_git_show(self, mock_run):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(stdout=b"content\n")]

        content = self.service.get_file_content("src/a.py", "mb1")

        self.assertEqual(content, "content\n")
        self.assertEqual(mock_run.call_args.args[0], ["git", "show", "mb1:src/a.py"])

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_get_file_content_replaces_undecodable_bytes(self, mock_run):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(stdout=b"caf\xe9\nb\n")]

        content = self.service.get_file_content("src/latin1.py", "mb1")

        self.assertEqual(content, "caf\ufffd\nb\n")

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_get_file_content_raises_for_missing_file(self, mock_run):
        mock_run.side_effect = [
            MagicMock(returncode=0),
            subprocess.CalledProcessError(128, ["git"], stderr=b"does not exist"),
        ]

        with self.assertRaises(GitFileNotFoundError):
            self.service.get_file_content("src/a.py", "mb1")

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_get_file_content_requires_repository(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(128, ["git"])

        with self.assertRaises(GitRepositoryError):
            self.service.get_file_content("src/a.py", "mb1")

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_has_file_checks_return_code(self, mock_run):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(returncode=128)]

        self.assertFalse(self.service.has_file("src/a.py", "mb1"))
        self.assertEqual(mock_run.call_args.args[0], ["git", "cat-file", "-e", "mb1:src/a.py"])

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_get_merge_base(self, mock_run):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(stdout="mb1\n")]

        self.assertEqual(self.service.get_merge_base("base1", "head1"), "mb1")
        self.assertEqual(mock_run.call_args.args[0], ["git", "merge-base", "base1", "head1"])

    @patch("prmirror.services.git_operations.subprocess.run")
    def test_get_merge_base_raises_on_failure(self, mock_run):
        mock_run.side_effect = [
            MagicMock(returncode=0),
            subprocess.CalledProcessError(1, ["git"], stderr="bad revision"),
        ]

        with self.assertRaises(GitMergeBaseError):
            self.service.get_merge_base("base1", "head1")


if __name__ == "__main__":
    unittest.main()
