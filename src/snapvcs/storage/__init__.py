"""Storage layer for SnapVCS.

This module provides the content-addressable blob store and the commit
chain built on top of it.
"""

from snapvcs.storage.commit_chain import Commit, CommitChain, parse_commit_body
from snapvcs.storage.object_store import (
    BlobCorruptedError,
    BlobNotFoundError,
    ObjectStore,
    compute_hash,
)

__all__ = [
    "ObjectStore",
    "BlobNotFoundError",
    "BlobCorruptedError",
    "compute_hash",
    "Commit",
    "CommitChain",
    "parse_commit_body",
]
