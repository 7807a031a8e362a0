"""GitHub CLI command runner.

Infrastructure component that wraps subprocess calls to the gh CLI.
Used to discover an API token when none is configured.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class GhCommandRunner:
    """Runs gh CLI commands via subprocess.

    For testing, mock this class or patch run().
    """

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def run(self, cmd: list[str]) -> tuple[bool, str]:
        """Run a gh CLI command.

        Args:
            cmd: Command and arguments (e.g., ["gh", "auth", "token"])

        Returns:
            Tuple of (success, output_or_error)
        """
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            logger.debug("Command failed: %s", e.stderr)
            return False, e.stderr
        except FileNotFoundError as e:
            logger.debug("Command not found: %s", e)
            return False, str(e)

    def auth_token(self, hostname: str | None = None) -> str | None:
        """Get the token gh is logged in with.

        Args:
            hostname: GitHub host (uses gh's default host if None)

        Returns:
            The token, or None if gh is missing or not authenticated
        """
        cmd = ["gh", "auth", "token"]
        if hostname:
            cmd.extend(["--hostname", hostname])
        success, result = self.run(cmd)
        if not success:
            return None
        return result.strip() or None
