"""Exception hierarchy for SnapVCS.

Every error is fatal to the current command; the CLI maps them to a
diagnostic and a non-zero exit code.
"""

from pathlib import Path
from typing import Optional, Union


class SnapVCSError(Exception):
    """Base class for all SnapVCS errors."""


class ValidationError(SnapVCSError):
    """Raised when a required argument is missing or empty."""


class StorageError(SnapVCSError):
    """Raised when the repository cannot be read, written or enumerated.

    Attributes:
        path: Filesystem path involved in the failure, if known
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class RepositoryNotFoundError(SnapVCSError):
    """Raised when operating on a repository root that was never initialized."""


class RepositoryExistsError(SnapVCSError):
    """Raised by init when the repository root already exists."""


class CommitFormatError(SnapVCSError):
    """Raised when a commit record does not follow the body format."""
