"""Line-level diffs between file versions and between a commit and its parent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .commits import Commit, CommitGraph
from .index import StagingEntry

HunkKind = Literal["unchanged", "added", "removed"]


@dataclass(frozen=True)
class Hunk:
    """A contiguous run of lines sharing one kind."""

    kind: HunkKind
    text: str


@dataclass(frozen=True)
class FileDiff:
    """Changes to one file entry of a commit relative to its parent."""

    path: str
    digest: str
    parent_digest: str | None
    hunks: tuple[Hunk, ...]

    @property
    def is_new(self) -> bool:
        return self.parent_digest is None


KINDS: tuple[HunkKind, ...] = ("unchanged", "removed", "added")
START = len(KINDS)


def _lcs_table(a: list[str], b: list[str]) -> list[list[int]]:
    """``table[i][j]`` is the LCS length of ``a[i:]`` and ``b[j:]``.

    Memory is O(len(a) * len(b)); callers trim the common prefix and
    suffix first so only the changed middle section pays for it.
    """
    n, m = len(a), len(b)
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(m - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])
    return table


def _moves(
    a: list[str], b: list[str], table: list[list[int]], i: int, j: int
) -> list[tuple[int, int, int]]:
    """``(kind, i, j)`` steps from ``(i, j)`` that keep the script minimal.

    Ordered by preference: match, then remove, then add.
    """
    moves = []
    if i < len(a) and j < len(b) and a[i] == b[j]:
        moves.append((0, i + 1, j + 1))
    if i < len(a) and table[i + 1][j] == table[i][j]:
        moves.append((1, i + 1, j))
    if j < len(b) and table[i][j + 1] == table[i][j]:
        moves.append((2, i, j + 1))
    return moves


def _fewest_runs(
    a: list[str], b: list[str], table: list[list[int]]
) -> list[list[list[int]]]:
    """``runs[i][j][k]``: fewest hunks left from ``(i, j)`` after a ``k`` step.

    ``k`` indexes KINDS, or is START before any step. Same O(n * m)
    memory bound as the LCS table.
    """
    n, m = len(a), len(b)
    runs = [[[0] * (START + 1) for _ in range(m + 1)] for _ in range(n + 1)]
    for i in range(n, -1, -1):
        for j in range(m, -1, -1):
            moves = _moves(a, b, table, i, j)
            if not moves:
                continue
            runs[i][j] = [
                min((kind != prev) + runs[ni][nj][kind] for kind, ni, nj in moves)
                for prev in range(START + 1)
            ]
    return runs


def _edit_script(a: list[str], b: list[str]) -> list[tuple[HunkKind, str]]:
    """Per-line operations turning ``a`` into ``b``.

    Among the scripts keeping a longest common subsequence, the one
    with the fewest same-kind runs wins; remaining ties prefer a match,
    then a removal, then an addition.
    """
    # Common prefix and suffix are always part of some LCS.
    start = 0
    while start < len(a) and start < len(b) and a[start] == b[start]:
        start += 1
    end_a, end_b = len(a), len(b)
    while end_a > start and end_b > start and a[end_a - 1] == b[end_b - 1]:
        end_a -= 1
        end_b -= 1

    ops: list[tuple[HunkKind, str]] = [("unchanged", line) for line in a[:start]]

    mid_a, mid_b = a[start:end_a], b[start:end_b]
    table = _lcs_table(mid_a, mid_b)
    runs = _fewest_runs(mid_a, mid_b, table)
    i = j = 0
    prev = 0 if start else START
    while i < len(mid_a) or j < len(mid_b):
        kind, ni, nj = min(
            _moves(mid_a, mid_b, table, i, j),
            key=lambda move: (move[0] != prev) + runs[move[1]][move[2]][move[0]],
        )
        ops.append((KINDS[kind], mid_b[j] if kind == 2 else mid_a[i]))
        prev, i, j = kind, ni, nj

    ops.extend(("unchanged", line) for line in a[end_a:])
    return ops


def diff_lines(old: str | None, new: str) -> list[Hunk]:
    """Minimal line diff from ``old`` to ``new``.

    Lines keep their terminators, so concatenating the text of every
    non-removed hunk gives back ``new``. ``old=None`` means the file did
    not exist before and yields a single ``added`` hunk.
    """
    if old is None:
        return [Hunk("added", new)]
    if old == new:
        return [Hunk("unchanged", new)]

    ops = _edit_script(
        old.splitlines(keepends=True), new.splitlines(keepends=True)
    )
    hunks: list[Hunk] = []
    for kind, line in ops:
        if hunks and hunks[-1].kind == kind:
            hunks[-1] = Hunk(kind, hunks[-1].text + line)
        else:
            hunks.append(Hunk(kind, line))
    return hunks


def _find_entry(commit: Commit | None, path: str) -> StagingEntry | None:
    # First match in list order; a commit can hold the same path twice.
    if commit is None:
        return None
    for entry in commit.files:
        if entry.path == path:
            return entry
    return None


def _read_text(graph: CommitGraph, digest: str) -> str:
    return graph.objects.get(digest).decode("utf-8", errors="replace")


def render_commit_diff(graph: CommitGraph, target: str) -> list[FileDiff]:
    """Diff every file entry of commit ``target`` against its parent.

    Files absent from the parent (or every file of a root commit) are
    reported as entirely added. One FileDiff per entry, in the
    commit's file-list order.
    """
    commit = graph.get_commit(target)
    parent = graph.get_commit(commit.parent) if commit.parent else None

    result = []
    for entry in commit.files:
        content = _read_text(graph, entry.digest)
        previous = _find_entry(parent, entry.path)
        if previous is None:
            hunks = diff_lines(None, content)
        else:
            hunks = diff_lines(_read_text(graph, previous.digest), content)
        result.append(
            FileDiff(
                path=entry.path,
                digest=entry.digest,
                parent_digest=previous.digest if previous else None,
                hunks=tuple(hunks),
            )
        )
    return result
