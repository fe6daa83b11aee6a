"""Object backend in a single diskcache database."""

from typing import Iterable, cast

from .base import KVStore

ONE_GB = 1024 * 1024 * 1024


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap).

    Culling is disabled, so objects are never evicted once
    ``size_limit`` is reached. The cache holds an open SQLite
    connection until ``close()``.
    """

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        from diskcache import Cache as DiskCache

        self.directory = directory
        self.cache = DiskCache(directory, size_limit=size_limit, cull_limit=0)

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.cache.get(key))

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.cache.set(key, value)

    def keys(self) -> Iterable[str]:
        return sorted(str(key) for key in self.cache.iterkeys())

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def cas(self, key: str, value: bytes, expected: bytes | None) -> bool:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        if expected is None:
            # Objects are write-once; add() is diskcache's atomic set-if-absent.
            return bool(self.cache.add(key, value))
        with self.cache.transact():
            if self.cache.get(key) != expected:
                return False
            self.cache.set(key, value)
            return True

    def close(self) -> None:
        self.cache.close()
