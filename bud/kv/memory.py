"""In-memory KV store."""

from typing import Iterable

from .base import KVStore


class Memory(KVStore):
    """Objects held in a dict, gone when the process exits.

    Used for tests and for object stores created without a repository
    directory. Like the other backends it assumes a single writer.
    """

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.memory.get(key)

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.memory[key] = value

    def keys(self) -> Iterable[str]:
        return sorted(self.memory)

    def __contains__(self, key: str) -> bool:
        return key in self.memory

    def __len__(self) -> int:
        return len(self.memory)

    def cas(self, key: str, value: bytes, expected: bytes | None) -> bool:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        if self.memory.get(key) != expected:
            return False
        self.memory[key] = value
        return True
