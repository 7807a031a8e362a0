"""Services for prmirror.

Services encapsulate business logic and orchestrate domain models.
They receive dependencies via constructor injection.
"""

from prmirror.services.change_set_resolver import ChangeSetResolver
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
from prmirror.services.git_operations import (
    GitFileNotFoundError,
    GitMergeBaseError,
    GitOperationsService,
    GitRepositoryError,
)
from prmirror.services.session import PullRequestSession

__all__ = [
    "ChangeSetResolver",
    "ContentStrategy",
    "DocumentContent",
    "DocumentReconstructor",
    "GitFileNotFoundError",
    "GitMergeBaseError",
    "GitOperationsService",
    "GitRepositoryError",
    "LineRange",
    "PatchApplyError",
    "PullRequestSession",
    "apply_patch",
    "ranges_for",
    "reconstruct",
    "reconstruct_from_hunks",
]
