"""Content-addressable blob storage for SnapVCS.

This module implements a Git-like object store using SHA-1 hashing for
content addressing. Blobs are stored flat in <root>/objects/ under their
hex digest, with automatic deduplication.
"""

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Tuple

from snapvcs.constants import (
    HASH_ALGORITHM,
    HASH_LENGTH,
    OBJECTS_DIR,
    TMP_PREFIX,
)
from snapvcs.errors import SnapVCSError, StorageError

logger = logging.getLogger(__name__)


class BlobNotFoundError(SnapVCSError):
    """Raised when a blob cannot be found in the object store."""

    pass


class BlobCorruptedError(SnapVCSError):
    """Raised when a blob's hash doesn't match its content."""

    pass


def compute_hash(content: bytes) -> str:
    """Return the hex digest of content using the store's hash algorithm."""
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(content)
    return hasher.hexdigest()


def is_object_id(name: str) -> bool:
    """Check whether name is a well-formed object id (lowercase hex digest)."""
    return len(name) == HASH_LENGTH and all(c in "0123456789abcdef" for c in name)


class ObjectStore:
    """Content-addressable storage for file blobs.

    Stores file contents as blobs identified by SHA-1 hash. An existing blob
    is never re-verified or overwritten on write, which is what makes
    repeated adds of the same content free.

    Storage layout:
        <root>/objects/<hash>

    Attributes:
        root: Path to the repository root
        objects_dir: Path to the objects directory

    Example:
        >>> store = ObjectStore(Path(".snapvcs"))
        >>> blob_hash = store.write_blob(b"hello")
        >>> content = store.read_blob(blob_hash)
        >>> assert content == b"hello"
    """

    def __init__(self, root: Path) -> None:
        """Initialize the object store.

        Args:
            root: Path to the repository root (e.g. .snapvcs)
        """
        self.root = Path(root)
        self.objects_dir = self.root / OBJECTS_DIR

    def write_blob(self, content: bytes) -> str:
        """Write a blob to the object store.

        If a blob with the same hash already exists, returns the hash without
        writing (deduplication). Uses atomic write (tmp file + rename) so a
        partially written blob is never visible under its hash.

        Args:
            content: Binary content to store, possibly empty

        Returns:
            SHA-1 hash of the content (40 hex characters)

        Raises:
            StorageError: If write fails (permissions, disk full, etc.)

        Example:
            >>> hash1 = store.write_blob(b"data")
            >>> hash2 = store.write_blob(b"data")
            >>> assert hash1 == hash2  # Deduplication
        """
        blob_hash = compute_hash(content)

        if self.blob_exists(blob_hash):
            logger.debug("Blob %s already stored, skipping write", blob_hash)
            return blob_hash

        blob_path = self._get_blob_path(blob_hash)

        try:
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=self.objects_dir,
                prefix=TMP_PREFIX,
                suffix=".blob",
            )
        except OSError as e:
            raise StorageError(
                f"Error writing object file {blob_path}: {e}", path=blob_path
            ) from e

        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, blob_path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(
                f"Error writing object file {blob_path}: {e}", path=blob_path
            ) from e

        logger.debug("Stored blob %s (%d bytes)", blob_hash, len(content))
        return blob_hash

    def read_blob(self, blob_hash: str, verify_hash: bool = True) -> bytes:
        """Read a blob from the object store.

        Args:
            blob_hash: SHA-1 hash of the blob (40 hex characters)
            verify_hash: Whether to recompute and verify hash (default: True)

        Returns:
            Binary content of the blob

        Raises:
            BlobNotFoundError: If blob doesn't exist
            BlobCorruptedError: If hash verification fails
            StorageError: If the blob exists but cannot be read
            ValueError: If blob_hash is invalid format
        """
        self._validate_hash(blob_hash)

        blob_path = self._get_blob_path(blob_hash)
        if not blob_path.exists():
            raise BlobNotFoundError(f"Blob not found: {blob_hash} (tried {blob_path})")

        try:
            with open(blob_path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise StorageError(
                f"Error reading object file {blob_path}: {e}", path=blob_path
            ) from e

        if verify_hash:
            actual_hash = compute_hash(content)
            if actual_hash != blob_hash:
                raise BlobCorruptedError(
                    f"Blob corrupted: expected {blob_hash}, got {actual_hash}"
                )

        return content

    def blob_exists(self, blob_hash: str) -> bool:
        """Check if a blob exists in the store.

        Args:
            blob_hash: SHA-1 hash of the blob

        Returns:
            True if blob exists, False for unknown or malformed hashes
        """
        try:
            self._validate_hash(blob_hash)
        except ValueError:
            return False

        return self._get_blob_path(blob_hash).exists()

    def get_blob_size(self, blob_hash: str) -> int:
        """Get the size of a blob on disk.

        Raises:
            BlobNotFoundError: If blob doesn't exist
            ValueError: If blob_hash is invalid format
        """
        self._validate_hash(blob_hash)

        blob_path = self._get_blob_path(blob_hash)
        if not blob_path.exists():
            raise BlobNotFoundError(f"Blob not found: {blob_hash}")
        return blob_path.stat().st_size

    def list_ids(self) -> List[str]:
        """List the ids of all stored blobs, sorted.

        Names that are not object ids (e.g. leftover temp files) are skipped.

        Raises:
            StorageError: If the objects directory cannot be enumerated
        """
        try:
            names = os.listdir(self.objects_dir)
        except OSError as e:
            raise StorageError(
                f"Error reading objects directory {self.objects_dir}: {e}",
                path=self.objects_dir,
            ) from e
        return sorted(name for name in names if is_object_id(name))

    def list_objects(self) -> List[Tuple[str, bytes]]:
        """List every stored blob with its content.

        Order is sorted by blob hash, so the result is deterministic for a
        fixed store state. Content is returned as stored, without
        verification.

        Returns:
            List of (blob_hash, content) tuples

        Raises:
            StorageError: If the objects directory cannot be enumerated or a
                blob cannot be read
        """
        objects = []
        for blob_hash in self.list_ids():
            blob_path = self._get_blob_path(blob_hash)
            try:
                with open(blob_path, "rb") as f:
                    objects.append((blob_hash, f.read()))
            except OSError as e:
                raise StorageError(
                    f"Error reading object file {blob_path}: {e}", path=blob_path
                ) from e
        return objects

    def count(self) -> int:
        """Return the number of stored blobs."""
        return len(self.list_ids())

    def _get_blob_path(self, blob_hash: str) -> Path:
        """Get the filesystem path for a blob: objects/<hash>."""
        return self.objects_dir / blob_hash

    def _validate_hash(self, blob_hash: str) -> None:
        """Validate that a hash string is properly formatted.

        Raises:
            ValueError: If hash is invalid format
        """
        if not isinstance(blob_hash, str):
            raise ValueError(f"Hash must be string, got {type(blob_hash)}")

        if len(blob_hash) != HASH_LENGTH:
            raise ValueError(
                f"Hash must be {HASH_LENGTH} characters, got {len(blob_hash)}"
            )

        if not is_object_id(blob_hash):
            raise ValueError(f"Hash must be lowercase hexadecimal: {blob_hash!r}")
