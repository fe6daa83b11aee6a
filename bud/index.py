"""Staging index: pending (path, digest) pairs awaiting the next commit."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from .errors import CorruptData, StorageError
from .objects import is_digest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagingEntry:
    """A file path and the digest of the content staged for it."""

    path: str
    digest: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "digest": self.digest}

    @classmethod
    def from_dict(cls, data: object, *, source: str) -> StagingEntry:
        if not isinstance(data, dict) or set(data) != {"path", "digest"}:
            raise CorruptData(source, f"malformed entry: {data!r}")
        path, digest = data["path"], data["digest"]
        if not isinstance(path, str) or not is_digest(digest):
            raise CorruptData(source, f"malformed entry: {data!r}")
        return cls(path=path, digest=digest)


class StagingIndex:
    """Ordered, append-only list of staging entries persisted as JSON.

    Entries are not deduplicated by path: staging a path twice keeps
    both entries, in insertion order. Read-modify-write is not atomic,
    so concurrent writers can lose entries.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> list[StagingEntry]:
        """Return the persisted entries, or [] if none were ever written."""
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(self.path, e.strerror or str(e)) from e

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CorruptData(self.path, f"invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise CorruptData(self.path, "expected a JSON list")
        return [StagingEntry.from_dict(item, source=self.path) for item in data]

    def append(self, path: str, digest: str) -> StagingEntry:
        """Stage ``digest`` for ``path`` after the existing entries."""
        entries = self.load()
        entry = StagingEntry(path=path, digest=digest)
        entries.append(entry)
        self._write(entries)
        logger.debug("staged %s as %s (%d pending)", path, digest, len(entries))
        return entry

    def clear(self) -> None:
        """Persist an empty list."""
        self._write([])
        logger.debug("cleared staging index")

    def __len__(self) -> int:
        return len(self.load())

    def _write(self, entries: list[StagingEntry]) -> None:
        payload = json.dumps([e.to_dict() for e in entries])
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(payload)
        except OSError as e:
            raise StorageError(self.path, e.strerror or str(e)) from e
