"""Commit record builder and history traversal.

A commit is a plain-text snapshot record of the whole object store:

    tree <tree digest>

    <message>

Records live in <root>/commits/ under a timestamp identity, so sorting the
file names gives creation order.
"""

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from snapvcs.constants import (
    COMMIT_ID_FORMAT,
    COMMIT_ID_SUFFIX_WIDTH,
    COMMITS_DIR,
    HASH_LENGTH,
    TMP_PREFIX,
)
from snapvcs.errors import CommitFormatError, StorageError, ValidationError
from snapvcs.storage.object_store import ObjectStore, compute_hash

logger = logging.getLogger(__name__)

_COMMIT_ID_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}(\.\d{%d})?$" % COMMIT_ID_SUFFIX_WIDTH
)
_TREE_LINE_RE = re.compile(r"^tree ([0-9a-f]{%d})$" % HASH_LENGTH)
_MAX_SUFFIX = 10 ** COMMIT_ID_SUFFIX_WIDTH


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_commit_id(name: str) -> bool:
    """Check whether name is a well-formed commit identity."""
    return bool(_COMMIT_ID_RE.match(name))


def format_commit_body(tree_digest: str, message: str) -> str:
    """Render a commit body."""
    return f"tree {tree_digest}\n\n{message}\n"


@dataclass(frozen=True)
class Commit:
    """Parsed view of a commit record."""

    commit_id: str
    tree_digest: str
    message: str
    body: str


def parse_commit_body(commit_id: str, body: str) -> Commit:
    """Parse a commit body into a Commit.

    Raises:
        CommitFormatError: If the body does not start with a tree line
    """
    text = body.strip()
    header, _, message = text.partition("\n")
    match = _TREE_LINE_RE.match(header)
    if match is None:
        raise CommitFormatError(f"Malformed commit {commit_id}: missing tree line")
    return Commit(
        commit_id=commit_id,
        tree_digest=match.group(1),
        message=message.strip(),
        body=text,
    )


class CommitChain:
    """Builder and reader for the commit history.

    Each commit captures the entire current object set, not a delta, and has
    no parent link. The chain keeps no state between calls; everything is
    read from disk.

    Attributes:
        root: Path to the repository root
        commits_dir: Path to the commits directory
        object_store: ObjectStore the snapshots are taken from
    """

    def __init__(
        self,
        root: Path,
        object_store: ObjectStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize CommitChain.

        Args:
            root: Path to the repository root
            object_store: ObjectStore to snapshot
            clock: Callable returning the current time (default: UTC now)
        """
        self.root = Path(root)
        self.commits_dir = self.root / COMMITS_DIR
        self.object_store = object_store
        self.clock = clock or _utc_now

    def compute_tree_digest(
        self, objects: Optional[Sequence[Tuple[str, bytes]]] = None
    ) -> str:
        """Compute the digest over the manifest of every stored object.

        Each manifest line is "<object id> <hash of content>". The content is
        hashed again even though the id already is its hash; existing tree
        digests depend on this.

        Args:
            objects: (object id, content) pairs; defaults to the full store

        Returns:
            Hex digest of the newline-joined manifest lines
        """
        if objects is None:
            objects = self.object_store.list_objects()

        lines = [f"{object_id} {compute_hash(content)}" for object_id, content in objects]
        return compute_hash("\n".join(lines).encode("utf-8"))

    def create_commit(self, message: str) -> str:
        """Snapshot the object store and persist a commit record.

        Args:
            message: Commit message, must not be blank

        Returns:
            Commit identity (timestamp string)

        Raises:
            ValidationError: If message is empty or cannot be encoded
            StorageError: If objects cannot be listed or the record cannot be written
        """
        if not message or not message.strip():
            raise ValidationError("Please provide a commit message.")
        try:
            message.encode("utf-8", "surrogateescape")
        except UnicodeEncodeError as e:
            raise ValidationError(f"Commit message cannot be encoded: {e}") from e

        tree_digest = self.compute_tree_digest()
        body = format_commit_body(tree_digest, message)

        commit_id = self._next_commit_id()
        self._write_commit_file(commit_id, body)

        logger.debug("Created commit %s (tree %s)", commit_id, tree_digest)
        return commit_id

    def list_commit_ids(self) -> List[str]:
        """List commit identities in creation order (oldest first).

        Raises:
            StorageError: If the commits directory cannot be enumerated
        """
        try:
            names = os.listdir(self.commits_dir)
        except OSError as e:
            raise StorageError(
                f"Error reading commits directory {self.commits_dir}: {e}",
                path=self.commits_dir,
            ) from e
        return sorted(name for name in names if is_commit_id(name))

    def commit_exists(self, commit_id: str) -> bool:
        """Check if a commit exists."""
        return is_commit_id(commit_id) and (self.commits_dir / commit_id).exists()

    def read_body(self, commit_id: str) -> str:
        """Read a commit record verbatim.

        Raises:
            StorageError: If the record cannot be read
            ValueError: If commit_id is not a well-formed identity
        """
        if not is_commit_id(commit_id):
            raise ValueError(f"Invalid commit id: {commit_id!r}")

        commit_path = self.commits_dir / commit_id
        try:
            with open(commit_path, "r", encoding="utf-8", errors="surrogateescape") as f:
                return f.read()
        except OSError as e:
            raise StorageError(
                f"Error reading commit file {commit_id}: {e}", path=commit_path
            ) from e

    def read_commit(self, commit_id: str) -> Commit:
        """Read and parse a commit record.

        Raises:
            StorageError: If the record cannot be read
            CommitFormatError: If the record is malformed
        """
        return parse_commit_body(commit_id, self.read_body(commit_id))

    def log(self) -> List[str]:
        """Return every commit body, most recent first, whitespace-trimmed.

        Raises:
            StorageError: If the history cannot be enumerated or read
        """
        return [
            self.read_body(commit_id).strip()
            for commit_id in reversed(self.list_commit_ids())
        ]

    def iter_commits(self) -> Iterator[Commit]:
        """Yield parsed commits, most recent first."""
        for commit_id in reversed(self.list_commit_ids()):
            yield self.read_commit(commit_id)

    def _next_commit_id(self) -> str:
        """Derive a fresh identity from the clock.

        When the timestamp is already taken (two commits in one second), a
        zero-padded counter suffix is appended. "." sorts before any digit,
        so suffixed ids still sort after the bare id and before the next
        second.

        Raises:
            StorageError: If every suffix for this second is taken
        """
        base_id = self.clock().strftime(COMMIT_ID_FORMAT)
        commit_id = base_id
        counter = 0
        while (self.commits_dir / commit_id).exists():
            counter += 1
            if counter >= _MAX_SUFFIX:
                raise StorageError(
                    f"Too many commits within {base_id}: all {_MAX_SUFFIX - 1} "
                    "suffixes are taken",
                    path=self.commits_dir,
                )
            commit_id = f"{base_id}.{counter:0{COMMIT_ID_SUFFIX_WIDTH}d}"
        if counter:
            logger.debug("Commit id %s taken, using %s", base_id, commit_id)
        return commit_id

    def _write_commit_file(self, commit_id: str, body: str) -> None:
        """Write a commit record atomically (tmp file + rename).

        Raises:
            StorageError: If write fails
        """
        commit_path = self.commits_dir / commit_id

        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.commits_dir,
                prefix=TMP_PREFIX,
                suffix=".commit",
            )
        except OSError as e:
            raise StorageError(
                f"Error writing commit file {commit_path}: {e}", path=commit_path
            ) from e

        try:
            with os.fdopen(
                fd, "w", encoding="utf-8", errors="surrogateescape", newline=""
            ) as f:
                f.write(body)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, commit_path)
        except Exception as e:
            # Clean up temp file on error
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            if isinstance(e, OSError):
                raise StorageError(
                    f"Error writing commit file {commit_path}: {e}", path=commit_path
                ) from e
            raise
