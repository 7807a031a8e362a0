"""Helpers shared by the commands that talk to a pull request."""

from __future__ import annotations

from prmirror.config import MirrorConfig
from prmirror.domain.diff_source import DiffSource
from prmirror.infrastructure.content_registry import ContentProviderRegistry
from prmirror.infrastructure.pr_source import PullRequestSource, create_pull_request_source
from prmirror.services.session import PullRequestSession


def create_source(config: MirrorConfig) -> PullRequestSource:
    """Create the pull-request source described by config.

    Raises:
        ConfigError: If the repository is not in owner/name format
    """
    local_repo_path = config.local_repo_path
    if config.source == DiffSource.LOCAL and local_repo_path is None:
        local_repo_path = "."
    return create_pull_request_source(
        config.source,
        config.repo_owner,
        config.repo_name,
        token=config.token,
        api_url=config.api_url,
        local_repo_path=local_repo_path,
    )


async def open_session(
    config: MirrorConfig,
    pr_number: int,
    source: PullRequestSource | None = None,
) -> PullRequestSession:
    """Fetch the pull request and open a session for it.

    Raises:
        FetchError: If the pull request metadata cannot be fetched
    """
    source = source or create_source(config)
    pull_request = source.get_pull_request(pr_number)
    return await PullRequestSession.open(pull_request, source, ContentProviderRegistry())
