"""bud: a minimal local version-control engine."""

__version__ = "0.1.0"

from .commits import Commit, CommitGraph, decode_commit, encode_commit
from .config import RepoConfig
from .diff import FileDiff, Hunk, diff_lines, render_commit_diff
from .errors import (
    AlreadyInitialized,
    BudError,
    CorruptData,
    CorruptHistory,
    EmptyCommit,
    NotFound,
    NotInitialized,
    StorageError,
)
from .history import walk, walk_with_digests
from .index import StagingEntry, StagingIndex
from .kv.base import KVStore
from .objects import ObjectStore, hash_content
from .repository import Repository
from .store import object_store

__all__ = [
    "AlreadyInitialized",
    "BudError",
    "Commit",
    "CommitGraph",
    "CorruptData",
    "CorruptHistory",
    "EmptyCommit",
    "FileDiff",
    "Hunk",
    "KVStore",
    "NotFound",
    "NotInitialized",
    "ObjectStore",
    "RepoConfig",
    "Repository",
    "StagingEntry",
    "StagingIndex",
    "StorageError",
    "decode_commit",
    "diff_lines",
    "encode_commit",
    "hash_content",
    "object_store",
    "render_commit_diff",
    "walk",
    "walk_with_digests",
]
