"""Configuration for prmirror.

Values are layered: command-line flags override environment variables, which
override the YAML config file, which overrides the defaults.

Example .prmirror.yaml:

    repo: myorg/myrepo
    source: local
    local_repo_path: ~/src/myrepo
    file_list_layout: tree
    log_level: INFO
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from prmirror.domain.diff_source import DiffSource
from prmirror.infrastructure.github.client import DEFAULT_API_URL
from prmirror.infrastructure.github.runner import GhCommandRunner

DEFAULT_CONFIG_FILENAME = ".prmirror.yaml"

FILE_LIST_LAYOUTS = ("flat", "tree")

# Environment variable -> config field
_ENV_VARS = {
    "PRMIRROR_REPO": "repo",
    "PRMIRROR_SOURCE": "source",
    "PRMIRROR_REPO_PATH": "local_repo_path",
    "GITHUB_API_URL": "api_url",
    "GH_TOKEN": "token",
    "GITHUB_TOKEN": "token",
}


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass(frozen=True)
class MirrorConfig:
    """Settings shared by every prmirror command."""

    repo: str = ""
    source: DiffSource = DiffSource.GITHUB
    local_repo_path: str | None = None
    api_url: str = DEFAULT_API_URL
    token: str | None = None
    file_list_layout: str = "flat"
    log_level: str = "WARNING"

    # --------------------------------------------------------
    # Factory Methods
    # --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> MirrorConfig:
        """Build a config from a mapping, ignoring None values.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls().merged(data)

    @classmethod
    def from_file(cls, path: Path) -> MirrorConfig:
        """Load a YAML config file.

        Raises:
            ConfigError: If the file cannot be read or is not a YAML mapping
        """
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        environ: dict[str, str] | None = None,
        overrides: dict | None = None,
        gh: GhCommandRunner | None = None,
    ) -> MirrorConfig:
        """Load configuration from every layer.

        Args:
            config_path: Explicit YAML file; defaults to .prmirror.yaml when present
            environ: Environment to read (defaults to os.environ)
            overrides: Values from command-line flags (None values are ignored)
            gh: Runner used to ask gh for a token when none is configured

        Returns:
            The merged configuration
        """
        environ = os.environ if environ is None else environ

        if config_path:
            config = cls.from_file(Path(config_path).expanduser())
        elif Path(DEFAULT_CONFIG_FILENAME).is_file():
            config = cls.from_file(Path(DEFAULT_CONFIG_FILENAME))
        else:
            config = cls()

        env_values: dict = {}
        for name, key in _ENV_VARS.items():
            value = environ.get(name)
            if value and key not in env_values:
                env_values[key] = value
        config = config.merged(env_values).merged(overrides or {})

        if not config.token:
            runner = gh if gh is not None else GhCommandRunner()
            token = runner.auth_token()
            if token:
                config = replace(config, token=token)
        return config

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def merged(self, values: dict) -> MirrorConfig:
        """Return a copy with the given non-None values applied and validated.

        Raises:
            ConfigError: On invalid values
        """
        updates = {key: value for key, value in values.items() if value is not None}
        if "source" in updates and not isinstance(updates["source"], DiffSource):
            try:
                updates["source"] = DiffSource.from_string(str(updates["source"]))
            except ValueError as e:
                raise ConfigError(str(e)) from e
        if "local_repo_path" in updates:
            updates["local_repo_path"] = str(Path(str(updates["local_repo_path"])).expanduser())
        if "log_level" in updates:
            updates["log_level"] = str(updates["log_level"]).upper()

        config = replace(self, **updates)
        if config.file_list_layout not in FILE_LIST_LAYOUTS:
            raise ConfigError(
                f"Invalid file_list_layout: {config.file_list_layout}. "
                f"Must be one of: {', '.join(FILE_LIST_LAYOUTS)}"
            )
        return config

    @property
    def repo_owner(self) -> str:
        return self._split_repo()[0]

    @property
    def repo_name(self) -> str:
        return self._split_repo()[1]

    def _split_repo(self) -> tuple[str, str]:
        owner, separator, name = self.repo.partition("/")
        if not separator or not owner or not name or "/" in name:
            raise ConfigError(f"Repository must be in owner/name format, got: {self.repo!r}")
        return owner, name

