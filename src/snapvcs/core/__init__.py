"""Core engine layer for SnapVCS.

This module ties the storage layer to a repository root and provides the
operations the CLI exposes.
"""

from snapvcs.core.repository import Repository

__all__ = [
    "Repository",
]
