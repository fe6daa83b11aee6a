"""Tests for walking commit history."""

from datetime import datetime, timezone

import pytest

from bud import (
    Commit,
    CommitGraph,
    CorruptHistory,
    NotFound,
    ObjectStore,
    StagingEntry,
    StagingIndex,
    encode_commit,
    walk,
    walk_with_digests,
)

ENTRY = StagingEntry("a.txt", "f572d396fae9206628714fb2ce00f72e94f2258f")


@pytest.fixture
def graph(tmp_path):
    return CommitGraph(
        ObjectStore(),
        str(tmp_path / "HEAD"),
        StagingIndex(str(tmp_path / "index")),
        clock=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def _chain(graph, messages):
    digests = []
    parent = None
    for message in messages:
        _, parent = graph.create_commit(message, [ENTRY], parent)
        digests.append(parent)
    return digests


def _plant(graph, digest, parent):
    """Store a commit under an arbitrary key, as a damaged store might."""
    graph.objects.store.set(digest, encode_commit(Commit("t", digest[:4], (ENTRY,), parent)))


class TestWalk:
    def test_none_start_is_empty(self, graph):
        assert list(walk(graph, None)) == []

    def test_newest_first(self, graph):
        _chain(graph, ["one", "two", "three"])
        messages = [c.message for c in walk(graph, graph.get_head())]
        assert messages == ["three", "two", "one"]

    def test_from_middle(self, graph):
        digests = _chain(graph, ["one", "two", "three"])
        assert [c.message for c in walk(graph, digests[1])] == ["two", "one"]

    def test_with_digests(self, graph):
        digests = _chain(graph, ["one", "two"])
        pairs = list(walk_with_digests(graph, digests[-1]))
        assert [d for d, _ in pairs] == [digests[1], digests[0]]
        assert pairs[-1][1].parent is None

    def test_restartable(self, graph):
        head = _chain(graph, ["one", "two"])[-1]
        assert list(walk(graph, head)) == list(walk(graph, head))

    def test_lazy(self, graph):
        head = _chain(graph, ["one", "two"])[-1]
        it = walk(graph, head)
        assert next(it).message == "two"


class TestWalkCorruption:
    def test_two_commit_cycle(self, graph):
        a, b = "a" * 40, "b" * 40
        _plant(graph, a, b)
        _plant(graph, b, a)
        it = walk_with_digests(graph, a)
        assert next(it)[0] == a
        assert next(it)[0] == b
        with pytest.raises(CorruptHistory) as exc:
            next(it)
        assert exc.value.digest == a

    def test_self_loop(self, graph):
        c = "c" * 40
        _plant(graph, c, c)
        with pytest.raises(CorruptHistory):
            list(walk(graph, c))

    def test_dangling_parent(self, graph):
        _plant(graph, "d" * 40, "e" * 40)
        with pytest.raises(NotFound) as exc:
            list(walk(graph, "d" * 40))
        assert exc.value.digest == "e" * 40
