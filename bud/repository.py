"""Repository handle: the on-disk layout and the user-level operations."""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Iterator

from .commits import Commit, CommitGraph
from .config import REPO_DIR, RepoConfig, load_config, save_config
from .diff import FileDiff, render_commit_diff
from .errors import AlreadyInitialized, NotInitialized, StorageError
from .history import walk_with_digests
from .index import StagingEntry, StagingIndex
from .store import OBJECTS_DIR, object_store

logger = logging.getLogger(__name__)

HEAD_FILE = "HEAD"
INDEX_FILE = "index"


class Repository:
    """One repository rooted at ``<workdir>/.bud``.

    Constructed once per invocation and passed to whatever needs it;
    every path used by the object store, index and HEAD hangs off it.

    Layout::

        .bud/objects/<digest>   blobs and commits (files backend)
        .bud/HEAD               newest commit digest, empty before the first
        .bud/index              JSON list of staged entries
        .bud/config             JSON RepoConfig
    """

    def __init__(self, workdir: str, config: RepoConfig | None = None) -> None:
        self.workdir = os.path.abspath(workdir)
        self.repo_dir = os.path.join(self.workdir, REPO_DIR)
        self.config = config or RepoConfig()
        self.objects = object_store(self.repo_dir, self.config)
        self.index = StagingIndex(os.path.join(self.repo_dir, INDEX_FILE))
        self.graph = CommitGraph(
            self.objects, os.path.join(self.repo_dir, HEAD_FILE), self.index
        )

    def close(self) -> None:
        """Release the object backend. The handle is unusable afterwards."""
        self.objects.close()

    def __enter__(self) -> Repository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -- Setup --

    @classmethod
    def init(cls, workdir: str = ".", *, config: RepoConfig | None = None) -> Repository:
        """Create the repository layout under ``workdir``.

        Pieces that already exist are left untouched.

        Raises:
            AlreadyInitialized: If ``workdir`` already held a repository.
                Nothing is overwritten in that case.
        """
        repo_dir = os.path.join(os.path.abspath(workdir), REPO_DIR)
        existed = os.path.isfile(os.path.join(repo_dir, HEAD_FILE))
        if existed:
            raise AlreadyInitialized(repo_dir)

        config = config or RepoConfig()
        try:
            os.makedirs(os.path.join(repo_dir, OBJECTS_DIR), exist_ok=True)
        except OSError as e:
            raise StorageError(repo_dir, e.strerror or str(e)) from e
        if not os.path.exists(os.path.join(repo_dir, "config")):
            save_config(repo_dir, config)
        _create_exclusive(os.path.join(repo_dir, INDEX_FILE), "[]")
        _create_exclusive(os.path.join(repo_dir, HEAD_FILE), "")
        logger.debug("initialized repository at %s", repo_dir)
        return cls(workdir, load_config(repo_dir))

    @classmethod
    def open(cls, workdir: str = ".") -> Repository:
        """Open an existing repository.

        Raises:
            NotInitialized: If ``workdir`` holds no repository.
        """
        repo_dir = os.path.join(os.path.abspath(workdir), REPO_DIR)
        if not os.path.isdir(os.path.join(repo_dir, OBJECTS_DIR)):
            raise NotInitialized(repo_dir)
        return cls(workdir, load_config(repo_dir))

    # -- Operations --

    def add(self, path: str) -> StagingEntry:
        """Stage the current content of ``path``.

        Raises:
            StorageError: If ``path`` cannot be read or is outside the
                working tree. Paths under ``.bud`` are refused too.
        """
        full_path = os.path.join(self.workdir, path)
        rel = self._relative(full_path)
        if rel == ".." or rel.startswith("../"):
            raise StorageError(path, "outside the working tree")
        if rel == REPO_DIR or rel.startswith(REPO_DIR + "/"):
            raise StorageError(path, "inside the repository directory")

        try:
            with open(full_path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise StorageError(path, e.strerror or str(e)) from e

        digest = self.objects.put(content)
        return self.index.append(rel, digest)

    def commit(self, message: str) -> tuple[Commit, str]:
        """Commit everything staged; the index is empty afterwards."""
        staged = self.index.load()
        parent = self.graph.get_head()
        return self.graph.create_commit(message, staged, parent)

    def log(self, start: str | None = None) -> Iterator[tuple[str, Commit]]:
        """``(digest, commit)`` pairs from ``start`` (default HEAD), newest first."""
        if start is None:
            start = self.graph.get_head()
        return walk_with_digests(self.graph, start)

    def show_diff(self, digest: str) -> list[FileDiff]:
        return render_commit_diff(self.graph, digest)

    def cat(self, digest: str) -> bytes:
        return self.objects.get(digest)

    def status(self) -> list[StagingEntry]:
        return self.index.load()

    @property
    def head(self) -> str | None:
        return self.graph.get_head()

    def _relative(self, full_path: str) -> str:
        rel = os.path.relpath(os.path.abspath(full_path), self.workdir)
        return rel.replace(os.sep, "/")


def _create_exclusive(path: str, content: str) -> None:
    """Write ``content`` to ``path`` unless the file already exists."""
    try:
        with open(path, "x", encoding="utf-8") as f:
            f.write(content)
    except FileExistsError:
        pass
    except OSError as e:
        raise StorageError(path, e.strerror or str(e)) from e
