"""Repository facade for SnapVCS.

Binds one repository root to its object store and commit chain. The root is
always passed in explicitly, so several repositories can live in one process.
"""

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from snapvcs.constants import (
    COMMITS_DIR,
    HEAD_CONTENT,
    HEAD_FILE,
    OBJECTS_DIR,
    ROOT_ENV_VAR,
    SNAPVCS_DIR,
)
from snapvcs.errors import (
    RepositoryExistsError,
    RepositoryNotFoundError,
    StorageError,
)
from snapvcs.storage import CommitChain, ObjectStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Repository:
    """A SnapVCS repository rooted at a directory.

    Layout:
        <root>/objects/   content-addressed blobs
        <root>/commits/   commit records named by timestamp
        <root>/HEAD       "ref: refs/heads/master"

    Attributes:
        root: Path to the repository root
        object_store: ObjectStore for <root>/objects
        commit_chain: CommitChain for <root>/commits
    """

    def __init__(
        self,
        root: PathLike,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.root = Path(root)
        self.object_store = ObjectStore(self.root)
        self.commit_chain = CommitChain(self.root, self.object_store, clock=clock)

    @classmethod
    def discover(
        cls,
        workspace: Optional[PathLike] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "Repository":
        """Locate the repository root from the environment.

        Uses $SNAPVCS_DIR when set, otherwise <workspace>/.snapvcs where
        workspace defaults to the current directory.
        """
        env_root = os.getenv(ROOT_ENV_VAR)
        if env_root:
            return cls(Path(env_root), clock=clock)
        base = Path(workspace) if workspace is not None else Path.cwd()
        return cls(base / SNAPVCS_DIR, clock=clock)

    @property
    def head_path(self) -> Path:
        return self.root / HEAD_FILE

    def is_initialized(self) -> bool:
        """Check whether the repository layout exists."""
        return (
            (self.root / OBJECTS_DIR).is_dir()
            and (self.root / COMMITS_DIR).is_dir()
            and self.head_path.is_file()
        )

    def ensure_initialized(self) -> None:
        """Raise RepositoryNotFoundError unless init has been run."""
        if not self.is_initialized():
            raise RepositoryNotFoundError(f"Not a SnapVCS repository: {self.root}")

    def init(self) -> Path:
        """Create the repository layout.

        Returns:
            Path to the repository root

        Raises:
            RepositoryExistsError: If the root already exists
            StorageError: If the layout cannot be created
        """
        if self.root.exists():
            raise RepositoryExistsError(f"Repository already exists: {self.root}")

        try:
            self.root.mkdir(parents=True)
            (self.root / OBJECTS_DIR).mkdir()
            (self.root / COMMITS_DIR).mkdir()
            self.head_path.write_text(HEAD_CONTENT, encoding="utf-8")
        except OSError as e:
            # Clean up partial initialization
            if self.root.exists():
                shutil.rmtree(self.root)
            raise StorageError(
                f"Error initializing repository {self.root}: {e}", path=self.root
            ) from e

        logger.debug("Initialized repository at %s", self.root)
        return self.root

    def head(self) -> str:
        """Return the HEAD reference text."""
        self.ensure_initialized()
        return self.head_path.read_text(encoding="utf-8").strip()

    def add_files(self, paths: Iterable[PathLike]) -> List[Tuple[Path, str]]:
        """Store the content of each file in the object store.

        Files are processed in order and independently: if one cannot be
        read, the ones before it stay stored.

        Returns:
            List of (path, object id) pairs, empty when no paths are given

        Raises:
            RepositoryNotFoundError: If the repository is not initialized
            StorageError: If a file cannot be read or its blob written
        """
        paths = [Path(p) for p in paths]
        if not paths:
            return []

        self.ensure_initialized()

        added = []
        for path in paths:
            try:
                content = path.read_bytes()
            except OSError as e:
                raise StorageError(f"Error reading file {path}: {e}", path=path) from e
            added.append((path, self.object_store.write_blob(content)))
        return added

    def commit(self, message_words: Union[str, Iterable[str]]) -> str:
        """Commit the full object store with a message.

        Args:
            message_words: Message text, or words joined with single spaces

        Returns:
            Commit identity

        Raises:
            RepositoryNotFoundError: If the repository is not initialized
            ValidationError: If the message is empty
            StorageError: On filesystem failure
        """
        if isinstance(message_words, str):
            message = message_words
        else:
            message = " ".join(message_words)
        self.ensure_initialized()
        return self.commit_chain.create_commit(message)

    def log(self) -> List[str]:
        """Return commit bodies, most recent first."""
        self.ensure_initialized()
        return self.commit_chain.log()
