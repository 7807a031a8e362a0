"""Registry of virtual document content providers.

The host's text-document layer asks the registry for a token's content; the
registry routes the request to the provider registered for the token's pull
request. Registrations are owned by whoever opened them and released with
dispose().
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from prmirror.domain.address import decode

logger = logging.getLogger(__name__)

ContentProvider = Callable[[str], Awaitable[str]]


@dataclass
class Registration:
    """Handle for one registered provider."""

    registry: ContentProviderRegistry
    pr_number: int
    provider: ContentProvider
    disposed: bool = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.registry._unregister(self)
        self.disposed = True


@dataclass
class ContentProviderRegistry:
    """Routes document content requests to per-pull-request providers."""

    _providers: dict[int, Registration] = field(default_factory=dict)

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def register(self, pr_number: int, provider: ContentProvider) -> Registration:
        """Register the content provider of a pull request.

        Raises:
            ValueError: If the pull request already has a provider
        """
        if pr_number in self._providers:
            raise ValueError(f"A content provider is already registered for PR #{pr_number}")
        registration = Registration(registry=self, pr_number=pr_number, provider=provider)
        self._providers[pr_number] = registration
        logger.debug("Registered content provider for PR #%d", pr_number)
        return registration

    def is_registered(self, pr_number: int) -> bool:
        return pr_number in self._providers

    async def provide(self, token: str) -> str:
        """Return the content of the document named by token, or "" if nobody serves it."""
        address = decode(token)
        if address is None:
            logger.info("Ignoring malformed document token %.200s", token)
            return ""
        registration = self._providers.get(address.pr_number)
        if registration is None:
            logger.info("No content provider registered for PR #%d", address.pr_number)
            return ""
        return await registration.provider(token)

    # --------------------------------------------------------
    # Private Helpers
    # --------------------------------------------------------

    def _unregister(self, registration: Registration) -> None:
        if self._providers.get(registration.pr_number) is registration:
            del self._providers[registration.pr_number]
            logger.debug("Unregistered content provider for PR #%d", registration.pr_number)
