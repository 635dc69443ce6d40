"""Line diffs between two :class:`Lines` values.

A diff is itself a :class:`Lines`: equal lines are copied from the after
side, removed lines from the before side with ``Flag.DELETED``, and added
lines with ``Flag.INSERTED``. Summary diffs group changes into hunks, each
introduced by an ``Flag.ANNOTATION_ONLY`` header line.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from difflib import SequenceMatcher
from enum import Enum

from yamlines.lines import Annotation, Flag, Line, Lines


class OpKind(Enum):
    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"

    @property
    def flag(self) -> Flag:
        return _FLAGS[self]

    def deltas(self) -> tuple[int, int]:
        """How far this op moves the before and after line counters."""
        return _DELTAS[self]


_FLAGS = {
    OpKind.EQUAL: Flag.DEFAULT,
    OpKind.DELETE: Flag.DELETED,
    OpKind.INSERT: Flag.INSERTED,
}

_DELTAS = {
    OpKind.EQUAL: (1, 1),
    OpKind.DELETE: (1, 0),
    OpKind.INSERT: (0, 1),
}


@dataclass(frozen=True)
class Op:
    kind: OpKind
    index: int  # into before for DELETE, into after otherwise


@dataclass
class Hunk:
    """A run of ops ``[start, end)`` with its unified-diff line numbers."""

    start: int
    end: int
    from_line: int
    to_line: int
    from_count: int = 0
    to_count: int = 0

    def header(self) -> str:
        return f"@@ -{self.from_line},{self.from_count} +{self.to_line},{self.to_count} @@"


def diff_ops(before: Sequence[str], after: Sequence[str]) -> list[Op]:
    """Edit script turning *before* into *after*.

    Inside a changed block all deletions come before the insertions.
    """
    ops: list[Op] = []
    matcher = SequenceMatcher(None, before, after, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            ops.extend(Op(OpKind.EQUAL, j) for j in range(j1, j2))
            continue
        ops.extend(Op(OpKind.DELETE, i) for i in range(i1, i2))
        ops.extend(Op(OpKind.INSERT, j) for j in range(j1, j2))
    return ops


def hunks(ops: Sequence[Op], context: int = 3) -> list[Hunk]:
    """Group the changes in *ops*, with *context* equal ops on each side."""
    included = [False] * len(ops)
    for i, op in enumerate(ops):
        if op.kind != OpKind.EQUAL:
            for j in range(max(0, i - context), min(len(ops), i + context + 1)):
                included[j] = True

    out: list[Hunk] = []
    current: Hunk | None = None
    before_line = after_line = 1
    for i, op in enumerate(ops):
        before_delta, after_delta = op.kind.deltas()
        if included[i]:
            if current is None:
                current = Hunk(start=i, end=i, from_line=before_line, to_line=after_line)
            current.end = i + 1
            current.from_count += before_delta
            current.to_count += after_delta
        elif current is not None:
            out.append(current)
            current = None
        before_line += before_delta
        after_line += after_delta

    if current is not None:
        out.append(current)
    return out


def _contents(lines: Lines) -> list[str]:
    return [line.content() for line in lines]


def _flagged(before: Lines, after: Lines, op: Op) -> Line:
    line = (before if op.kind == OpKind.DELETE else after)[op.index].clone()
    line.flag = op.kind.flag
    return line


def full_diff(before: Lines, after: Lines) -> Lines:
    """Every line of both sides, in diff order."""
    ops = diff_ops(_contents(before), _contents(after))
    return Lines(_flagged(before, after, op) for op in ops)


def summary_diff(before: Lines, after: Lines, context: int = 3) -> Lines:
    """Only the changed lines and their context, one header line per hunk.

    Identical inputs give an empty :class:`Lines`.
    """
    ops = diff_ops(_contents(before), _contents(after))
    out: list[Line] = []
    for hunk in hunks(ops, context):
        out.append(Line(annotations=[Annotation(hunk.header())], flag=Flag.ANNOTATION_ONLY))
        out.extend(_flagged(before, after, op) for op in ops[hunk.start:hunk.end])
    return Lines(out)
