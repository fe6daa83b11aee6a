"""Directory-backed KV store: one file per key."""

import os
from typing import Iterable

from ..errors import StorageError
from .base import KVStore


class Files(KVStore):
    """KV store keeping each value in its own file under ``directory``.

    Keys become file names, so they must be plain names (no path
    separators, no leading dot). Writes are not atomic: a crash
    mid-write can leave a partially written file behind.
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory

    def _path(self, key: str) -> str:
        if not key or key.startswith(".") or "/" in key or os.sep in key:
            raise ValueError(f"Invalid key for file store: {key!r}")
        return os.path.join(self.directory, key)

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(path, e.strerror or str(e)) from e

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        path = self._path(key)
        try:
            with open(path, "wb") as f:
                f.write(value)
        except OSError as e:
            raise StorageError(path, e.strerror or str(e)) from e

    def keys(self) -> Iterable[str]:
        try:
            names = sorted(os.listdir(self.directory))
        except OSError as e:
            raise StorageError(self.directory, e.strerror or str(e)) from e
        return [name for name in names if not name.startswith(".")]

    def __contains__(self, key: str) -> bool:
        return os.path.isfile(self._path(key))

    def cas(self, key: str, value: bytes, expected: bytes | None) -> bool:
        # Not atomic across processes; bud assumes a single writer.
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        if self.get(key) != expected:
            return False
        self.set(key, value)
        return True
