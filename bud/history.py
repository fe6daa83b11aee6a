"""Walking the parent chain of a commit."""

from typing import Iterator

from .commits import Commit, CommitGraph
from .errors import CorruptHistory


def walk_with_digests(
    graph: CommitGraph, start: str | None
) -> Iterator[tuple[str, Commit]]:
    """Yield ``(digest, commit)`` pairs from ``start`` to the root commit.

    Commits are acyclic when written by bud, but nothing stops a
    damaged store from linking a commit back to a descendant, so
    visited digests are tracked.

    Raises:
        CorruptHistory: If a digest is reached twice.
    """
    visited: set[str] = set()
    current = start
    while current is not None:
        if current in visited:
            raise CorruptHistory(current)
        visited.add(current)
        commit = graph.get_commit(current)
        yield current, commit
        current = commit.parent


def walk(graph: CommitGraph, start: str | None) -> Iterator[Commit]:
    """Yield commits from ``start`` following parents, newest first.

    ``start=None`` yields nothing. Calling again with the same start
    reproduces the same sequence.
    """
    for _, commit in walk_with_digests(graph, start):
        yield commit
