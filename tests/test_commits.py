"""Tests for commit encoding and the CommitGraph."""

from datetime import datetime, timedelta, timezone

import pytest

from bud import (
    Commit,
    CommitGraph,
    CorruptData,
    EmptyCommit,
    NotFound,
    ObjectStore,
    StagingEntry,
    StagingIndex,
    StorageError,
    decode_commit,
    encode_commit,
    hash_content,
)
from bud.commits import format_timestamp

HELLO_DIGEST = "f572d396fae9206628714fb2ce00f72e94f2258f"
MOMENT = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def graph(tmp_path):
    index = StagingIndex(str(tmp_path / "index"))
    return CommitGraph(
        ObjectStore(), str(tmp_path / "HEAD"), index, clock=lambda: MOMENT
    )


def _entry(path: str = "a.txt", digest: str = HELLO_DIGEST) -> StagingEntry:
    return StagingEntry(path, digest)


class TestTimestamp:
    def test_utc_millis_z(self):
        assert format_timestamp(MOMENT) == "2024-05-01T12:00:00.123Z"

    def test_converts_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        moment = datetime(2024, 5, 1, 14, 0, 0, tzinfo=plus_two)
        assert format_timestamp(moment) == "2024-05-01T12:00:00.000Z"


class TestEncoding:
    def test_canonical_bytes(self):
        commit = Commit(
            timestamp="2024-05-01T12:00:00.123Z",
            message="first",
            files=(_entry(),),
            parent=None,
        )
        assert encode_commit(commit) == (
            b'{"format":1,"timestamp":"2024-05-01T12:00:00.123Z",'
            b'"message":"first","files":[{"path":"a.txt","digest":"'
            + HELLO_DIGEST.encode()
            + b'"}],"parent":null}'
        )

    def test_non_ascii_kept_as_utf8(self):
        commit = Commit("t", "héllo", (), None)
        assert "héllo".encode("utf-8") in encode_commit(commit)

    def test_decode_reverses_encode(self):
        commit = Commit("t", "msg", (_entry(), _entry("b.txt")), "b" * 40)
        raw = encode_commit(commit)
        decoded = decode_commit(raw, digest="x")
        assert decoded == commit
        assert encode_commit(decoded) == raw

    @pytest.mark.parametrize(
        "raw",
        [
            b"hello\n",
            b"[]",
            b'{"timestamp":"t","message":"m","files":[],"parent":null}',
            b'{"format":2,"timestamp":"t","message":"m","files":[],"parent":null}',
            b'{"format":1,"timestamp":1,"message":"m","files":[],"parent":null}',
            b'{"format":1,"timestamp":"t","message":"m","files":{},"parent":null}',
            b'{"format":1,"timestamp":"t","message":"m","files":[],"parent":"zz"}',
            b'{"format":1,"timestamp":"t","message":"m","files":[{"path":"a"}],"parent":null}',
            b"\xff\xfe",
        ],
    )
    def test_decode_rejects_bad_shapes(self, raw):
        with pytest.raises(CorruptData) as exc:
            decode_commit(raw, digest="abc")
        assert exc.value.key == "abc"


class TestHead:
    def test_no_head_file(self, graph):
        assert graph.get_head() is None

    def test_empty_head_file(self, graph, tmp_path):
        (tmp_path / "HEAD").write_text("")
        assert graph.get_head() is None

    def test_set_and_get(self, graph):
        graph.set_head("a" * 40)
        assert graph.get_head() == "a" * 40

    def test_garbage_head_is_corrupt(self, graph, tmp_path):
        (tmp_path / "HEAD").write_text("not-a-digest")
        with pytest.raises(CorruptData):
            graph.get_head()


class TestCreateCommit:
    def test_returns_commit_and_digest(self, graph):
        commit, digest = graph.create_commit("first", [_entry()], None)
        assert commit == Commit(
            "2024-05-01T12:00:00.123Z", "first", (_entry(),), None
        )
        assert digest == hash_content(encode_commit(commit))

    def test_moves_head(self, graph):
        _, digest = graph.create_commit("first", [_entry()], None)
        assert graph.get_head() == digest

    def test_clears_index(self, graph):
        graph.index.append("a.txt", HELLO_DIGEST)
        graph.index.append("b.txt", HELLO_DIGEST)
        graph.create_commit("first", graph.index.load(), None)
        assert graph.index.load() == []

    def test_records_parent(self, graph):
        _, first = graph.create_commit("first", [_entry()], None)
        commit, _ = graph.create_commit("second", [_entry()], first)
        assert commit.parent == first

    def test_stored_and_readable(self, graph):
        commit, digest = graph.create_commit("first", [_entry()], None)
        assert graph.get_commit(digest) == commit

    def test_duplicate_paths_kept(self, graph):
        files = [_entry("a.txt", "1" * 40), _entry("a.txt", "2" * 40)]
        commit, _ = graph.create_commit("dup", files, None)
        assert commit.files == tuple(files)

    def test_empty_commit_refused(self, graph):
        with pytest.raises(EmptyCommit):
            graph.create_commit("nothing", [], None)
        assert graph.get_head() is None
        assert list(graph.objects.store.keys()) == []

    def test_missing_parent_refused(self, graph):
        graph.index.append("a.txt", HELLO_DIGEST)
        with pytest.raises(NotFound) as exc_info:
            graph.create_commit("orphan", graph.index.load(), "0" * 40)
        assert exc_info.value.digest == "0" * 40
        assert graph.get_head() is None
        assert graph.index.load() == [_entry()]
        assert list(graph.objects.store.keys()) == []

    def test_same_inputs_same_digest(self, graph):
        _, d1 = graph.create_commit("m", [_entry()], None)
        _, d2 = graph.create_commit("m", [_entry()], None)
        assert d1 == d2


class TestCommitCrashWindow:
    """HEAD write fails after the commit object was stored."""

    def test_head_and_index_untouched(self, graph, monkeypatch):
        _, first = graph.create_commit("first", [_entry()], None)
        graph.index.append("b.txt", HELLO_DIGEST)

        def fail(digest):
            raise StorageError(graph.head_path, "disk full")

        monkeypatch.setattr(graph, "set_head", fail)
        with pytest.raises(StorageError):
            graph.create_commit("second", graph.index.load(), first)

        assert graph.get_head() == first
        assert graph.index.load() == [_entry("b.txt")]

    def test_orphan_object_left_behind(self, graph, monkeypatch):
        def fail(digest):
            raise StorageError(graph.head_path, "disk full")

        monkeypatch.setattr(graph, "set_head", fail)
        with pytest.raises(StorageError):
            graph.create_commit("orphan", [_entry()], None)

        expected = Commit("2024-05-01T12:00:00.123Z", "orphan", (_entry(),), None)
        orphan = hash_content(encode_commit(expected))
        assert orphan in graph.objects
        assert graph.get_head() is None


class TestGetCommit:
    def test_missing(self, graph):
        with pytest.raises(NotFound):
            graph.get_commit("0" * 40)

    def test_blob_is_not_a_commit(self, graph):
        digest = graph.objects.put(b"hello\n")
        with pytest.raises(CorruptData) as exc:
            graph.get_commit(digest)
        assert exc.value.key == digest
