"""Tests for MirrorConfig.

Tests cover:
- Defaults and YAML config files
- Layering of flags over environment over file
- Token discovery through gh
- Validation of keys, sources, layouts and repository names
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from prmirror.config import ConfigError, MirrorConfig
from prmirror.domain.diff_source import DiffSource
from prmirror.infrastructure.github.runner import GhCommandRunner


class ConfigTestCase(unittest.TestCase):
    """Shared setup: a temporary directory and a gh runner without a token."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.gh = MagicMock(spec=GhCommandRunner)
        self.gh.auth_token.return_value = None

    def write_config(self, text: str) -> str:
        path = Path(self.temp_dir.name) / "prmirror.yaml"
        path.write_text(text)
        return str(path)

    def load(self, config_path=None, environ=None, overrides=None) -> MirrorConfig:
        return MirrorConfig.load(
            config_path=config_path,
            environ=environ or {},
            overrides=overrides,
            gh=self.gh,
        )


class TestLoad(ConfigTestCase):
    """Tests for MirrorConfig.load."""

    def test_defaults(self):
        config = MirrorConfig()

        self.assertEqual(config.source, DiffSource.GITHUB)
        self.assertEqual(config.api_url, "https://api.github.com")
        self.assertEqual(config.file_list_layout, "flat")
        self.assertEqual(config.log_level, "WARNING")

    def test_reads_yaml_file(self):
        path = self.write_config("repo: octo/repo\nsource: local\nfile_list_layout: tree\nlog_level: info\n")

        config = self.load(config_path=path)

        self.assertEqual(config.repo, "octo/repo")
        self.assertEqual(config.source, DiffSource.LOCAL)
        self.assertEqual(config.file_list_layout, "tree")
        self.assertEqual(config.log_level, "INFO")

    def test_environment_overrides_file(self):
        path = self.write_config("repo: octo/repo\n")

        config = self.load(config_path=path, environ={"PRMIRROR_REPO": "env/repo"})

        self.assertEqual(config.repo, "env/repo")

    def test_flags_override_environment(self):
        config = self.load(
            environ={"PRMIRROR_REPO": "env/repo", "PRMIRROR_SOURCE": "local"},
            overrides={"repo": "flag/repo", "source": None},
        )

        self.assertEqual(config.repo, "flag/repo")
        self.assertEqual(config.source, DiffSource.LOCAL)

    def test_gh_token_wins_over_github_token(self):
        config = self.load(environ={"GH_TOKEN": "gh", "GITHUB_TOKEN": "github"})

        self.assertEqual(config.token, "gh")
        self.gh.auth_token.assert_not_called()

    def test_asks_gh_for_token_when_missing(self):
        self.gh.auth_token.return_value = "from-gh"

        self.assertEqual(self.load().token, "from-gh")

    def test_no_token_anywhere(self):
        self.assertIsNone(self.load().token)

    def test_expands_repo_path(self):
        config = self.load(overrides={"local_repo_path": "~/src/repo"})

        self.assertEqual(config.local_repo_path, str(Path("~/src/repo").expanduser()))


class TestValidation(ConfigTestCase):
    """Tests for config validation errors."""

    def test_unknown_keys_are_rejected(self):
        path = self.write_config("repo: octo/repo\ncolour: blue\n")

        with self.assertRaises(ConfigError) as ctx:
            self.load(config_path=path)

        self.assertIn("colour", str(ctx.exception))

    def test_invalid_yaml_is_rejected(self):
        path = self.write_config("repo: [unclosed\n")

        with self.assertRaises(ConfigError):
            self.load(config_path=path)

    def test_non_mapping_is_rejected(self):
        path = self.write_config("- a\n- b\n")

        with self.assertRaises(ConfigError):
            self.load(config_path=path)

    def test_missing_file_is_rejected(self):
        with self.assertRaises(ConfigError):
            self.load(config_path=str(Path(self.temp_dir.name) / "missing.yaml"))

    def test_invalid_source_is_rejected(self):
        with self.assertRaises(ConfigError):
            self.load(overrides={"source": "svn"})

    def test_invalid_layout_is_rejected(self):
        with self.assertRaises(ConfigError):
            self.load(overrides={"file_list_layout": "grid"})

    def test_repo_owner_and_name(self):
        config = MirrorConfig(repo="octo/repo")

        self.assertEqual(config.repo_owner, "octo")
        self.assertEqual(config.repo_name, "repo")

    def test_malformed_repo_is_rejected(self):
        for repo in ("", "octo", "octo/", "a/b/c"):
            with self.subTest(repo=repo):
                with self.assertRaises(ConfigError):
                    MirrorConfig(repo=repo).repo_owner


if __name__ == "__main__":
    unittest.main()
