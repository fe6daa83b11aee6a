"""Content-addressable object storage."""

import hashlib
import logging

from .errors import NotFound
from .kv.base import KVStore
from .kv.memory import Memory

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 40


def hash_content(content: bytes) -> str:
    """Return the SHA-1 hex digest identifying ``content``."""
    return hashlib.sha1(content).hexdigest()


def is_digest(value: object) -> bool:
    """Whether ``value`` looks like a digest produced by ``hash_content``."""
    return (
        isinstance(value, str)
        and len(value) == DIGEST_LENGTH
        and all(c in "0123456789abcdef" for c in value)
    )


class ObjectStore:
    """Blobs and commit records keyed by their own digest.

    Both kinds of object share one keyspace. Objects are immutable:
    a digest is only ever written once, and nothing is deleted.
    """

    def __init__(self, store: KVStore | None = None) -> None:
        if store is None:
            store = Memory()
        self.store = store

    def put(self, content: bytes) -> str:
        """Store ``content`` under its digest and return the digest."""
        if not isinstance(content, bytes):
            raise TypeError(f"Expected bytes, got {type(content).__name__}")
        digest = hash_content(content)
        if self.store.cas(digest, content, expected=None):
            logger.debug("wrote object %s (%d bytes)", digest, len(content))
        else:
            logger.debug("object %s already stored", digest)
        return digest

    def get(self, digest: str) -> bytes:
        """Fetch the bytes stored under ``digest``.

        Raises:
            NotFound: If no object exists under that digest.
            StorageError: If the backend fails to read.
        """
        if not is_digest(digest):
            raise NotFound(digest)
        content = self.store.get(digest)
        if content is None:
            raise NotFound(digest)
        return content

    def __contains__(self, digest: str) -> bool:
        return is_digest(digest) and digest in self.store

    def close(self) -> None:
        self.store.close()
