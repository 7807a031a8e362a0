"""Git operations service.

Core service for read-only git command operations. Encapsulates all subprocess
calls to git so the local pull-request source can read blobs from a checkout.
"""

import subprocess
from pathlib import Path


class GitFileNotFoundError(Exception):
    """Raised when file doesn't exist at specified commit."""

    pass


class GitRepositoryError(Exception):
    """Raised when directory is not a git repository."""

    pass


class GitMergeBaseError(Exception):
    """Raised when git merge-base fails."""

    pass


class GitOperationsService:
    """Core service for git command operations.

    Encapsulates all subprocess calls to git commands.
    Never mutates the working copy.
    """

    def __init__(self, repo_path: str = "."):
        """Initialize with repository path.

        Args:
            repo_path: Path to git repository (default: current directory)
        """
        self.repo_path = Path(repo_path)

    def is_git_repository(self) -> bool:
        """Check if current directory is a git repository.

        Returns:
            True if valid git repo, False otherwise
        """
        try:
            subprocess.run(
                ["git", "rev-parse", "--git-dir"],
                cwd=self.repo_path,
                capture_output=True,
                check=True,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    def get_file_content(self, file_path: str, commit_hash: str) -> str:
        """Get file content at specific commit.

        Args:
            file_path: Path to file in repository
            commit_hash: Git commit SHA or branch name

        Returns:
            File content as string

        Raises:
            GitFileNotFoundError: If file doesn't exist at commit
            GitRepositoryError: If not in a git repository
        """
        self._require_repository()

        try:
            result = subprocess.run(
                ["git", "show", f"{commit_hash}:{file_path}"],
                cwd=self.repo_path,
                capture_output=True,
                check=True,
            )
            # Blobs are not guaranteed to be UTF-8
            return result.stdout.decode("utf-8", errors="replace")
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace")
            raise GitFileNotFoundError(f"File {file_path} not found at {commit_hash}: {stderr}")

    def has_file(self, file_path: str, commit_hash: str) -> bool:
        """Check whether a file exists at a commit without reading it.

        Raises:
            GitRepositoryError: If not in a git repository
        """
        self._require_repository()

        result = subprocess.run(
            ["git", "cat-file", "-e", f"{commit_hash}:{file_path}"],
            cwd=self.repo_path,
            capture_output=True,
            text=True,
        )
        return result.returncode == 0

    def get_merge_base(self, base: str, head: str) -> str:
        """Get the best common ancestor of two commits.

        Raises:
            GitMergeBaseError: If git cannot compute a merge base
            GitRepositoryError: If not in a git repository
        """
        self._require_repository()

        try:
            result = subprocess.run(
                ["git", "merge-base", base, head],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            raise GitMergeBaseError(f"Failed to compute merge base of {base} and {head}: {e.stderr}")

    def _require_repository(self) -> None:
        if not self.is_git_repository():
            raise GitRepositoryError(
                f"Not a git repository: {self.repo_path}\n"
                "Make sure you're running from within a git repository."
            )
