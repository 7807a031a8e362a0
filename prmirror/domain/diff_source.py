"""Domain enum for file content source selection.

This module defines the DiffSource enum used to select where original file
content is read from in the pull-request source factory.
"""

from __future__ import annotations

from enum import Enum


class DiffSource(Enum):
    """Source for file content.

    Attributes:
        GITHUB: Read blobs from the GitHub contents API (default)
        LOCAL: Read blobs from a local git checkout with git show

    Note:
        Both sources use the GitHub API for the file list, review comments
        and merge base. Only blob retrieval changes.
    """

    GITHUB = "github"
    LOCAL = "local"

    @classmethod
    def from_string(cls, value: str) -> DiffSource:
        """Parse DiffSource from string value.

        Args:
            value: String value ("github" or "local")

        Returns:
            Corresponding DiffSource enum value

        Raises:
            ValueError: If value is not a valid DiffSource

        Examples:
            >>> DiffSource.from_string("github")
            <DiffSource.GITHUB: 'github'>
            >>> DiffSource.from_string("LOCAL")
            <DiffSource.LOCAL: 'local'>
        """
        value_lower = value.lower()
        for member in cls:
            if member.value == value_lower:
                return member
        valid_values = [m.value for m in cls]
        raise ValueError(
            f"Invalid diff source: {value}. Must be one of: {', '.join(valid_values)}"
        )
