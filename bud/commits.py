"""Commit records, their canonical encoding, and the HEAD pointer."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from .errors import CorruptData, EmptyCommit, NotFound, StorageError
from .index import StagingEntry, StagingIndex
from .objects import ObjectStore, is_digest

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
COMMIT_FIELDS = ("format", "timestamp", "message", "files", "parent")


@dataclass(frozen=True)
class Commit:
    """An immutable snapshot of staged files with an optional parent."""

    timestamp: str
    message: str
    files: tuple[StagingEntry, ...]
    parent: str | None = None


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def encode_commit(commit: Commit) -> bytes:
    """Serialize ``commit`` in canonical form (format 1).

    The digest of these bytes is the commit's identity, so the layout
    is fixed: compact UTF-8 JSON with keys in ``COMMIT_FIELDS`` order
    and file entries as ``{"path", "digest"}``.
    """
    record = {
        "format": FORMAT_VERSION,
        "timestamp": commit.timestamp,
        "message": commit.message,
        "files": [entry.to_dict() for entry in commit.files],
        "parent": commit.parent,
    }
    return json.dumps(
        record, ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")


def decode_commit(raw: bytes, *, digest: str) -> Commit:
    """Parse canonical commit bytes, raising CorruptData on any mismatch."""
    try:
        record = json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise CorruptData(digest, f"not a commit record: {e}") from e

    if not isinstance(record, dict) or tuple(record) != COMMIT_FIELDS:
        raise CorruptData(digest, "not a commit record")
    if record["format"] != FORMAT_VERSION:
        raise CorruptData(digest, f"unknown commit format {record['format']!r}")

    timestamp, message = record["timestamp"], record["message"]
    files, parent = record["files"], record["parent"]
    if not isinstance(timestamp, str) or not isinstance(message, str):
        raise CorruptData(digest, "timestamp and message must be strings")
    if not isinstance(files, list):
        raise CorruptData(digest, "files must be a list")
    if parent is not None and not is_digest(parent):
        raise CorruptData(digest, f"invalid parent {parent!r}")

    return Commit(
        timestamp=timestamp,
        message=message,
        files=tuple(StagingEntry.from_dict(f, source=digest) for f in files),
        parent=parent,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommitGraph:
    """Builds, stores and reads commits, and owns the HEAD pointer.

    Commit creation writes in a fixed order: commit object, then HEAD,
    then the cleared index. There is no transaction spanning those
    files; a failure after the object write leaves an unreachable
    commit object while HEAD and the index keep their old contents.
    """

    def __init__(
        self,
        objects: ObjectStore,
        head_path: str,
        index: StagingIndex,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.objects = objects
        self.head_path = head_path
        self.index = index
        self._clock = clock

    # -- HEAD --

    def get_head(self) -> str | None:
        """Digest of the newest commit, or None if there are no commits."""
        try:
            with open(self.head_path, encoding="utf-8") as f:
                value = f.read().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(self.head_path, e.strerror or str(e)) from e
        if not value:
            return None
        if not is_digest(value):
            raise CorruptData(self.head_path, f"invalid digest {value!r}")
        return value

    def set_head(self, digest: str) -> None:
        try:
            with open(self.head_path, "w", encoding="utf-8") as f:
                f.write(digest)
        except OSError as e:
            raise StorageError(self.head_path, e.strerror or str(e)) from e
        logger.debug("HEAD -> %s", digest)

    # -- Commits --

    def create_commit(
        self,
        message: str,
        staged_files: Iterable[StagingEntry],
        parent: str | None,
    ) -> tuple[Commit, str]:
        """Store a new commit, move HEAD to it and clear the index.

        Returns:
            The commit and its digest.

        Raises:
            EmptyCommit: If ``staged_files`` is empty.
            NotFound: If ``parent`` is not in the object store.
        """
        files = tuple(staged_files)
        if not files:
            raise EmptyCommit()
        if parent is not None and parent not in self.objects:
            raise NotFound(parent)

        commit = Commit(
            timestamp=format_timestamp(self._clock()),
            message=message,
            files=files,
            parent=parent,
        )
        digest = self.objects.put(encode_commit(commit))
        self.set_head(digest)
        self.index.clear()
        logger.debug(
            "created commit %s (%d files, parent %s)", digest, len(files), parent
        )
        return commit, digest

    def get_commit(self, digest: str) -> Commit:
        """Fetch and decode a commit.

        Raises:
            NotFound: If the digest is absent from the object store.
            CorruptData: If the stored bytes are not a commit record.
        """
        return decode_commit(self.objects.get(digest), digest=digest)
