"""Revision chains: successive versions of one YAML document."""

from __future__ import annotations

from collections.abc import Iterator

from yamlines.diff import full_diff, summary_diff
from yamlines.lines import Lines
from yamlines.source import Source


class Revision:
    """One :class:`Source` in a doubly linked chain of revisions.

    A single revision is a valid chain. Navigation never fails: seeking past
    either end stops there.
    """

    def __init__(self, source: Source) -> None:
        self.source = source
        self.prev: Revision | None = None
        self.next: Revision | None = None

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def lines(self) -> Lines:
        return self.source.lines

    # ── Chain edits ───────────────────────────────────────────────

    def append(self, source: Source) -> Revision:
        """Insert *source* right after this revision and return it."""
        rev = Revision(source)
        rev.prev, rev.next = self, self.next
        if self.next is not None:
            self.next.prev = rev
        self.next = rev
        return rev

    def prepend(self, source: Source) -> Revision:
        """Insert *source* right before this revision and return it."""
        rev = Revision(source)
        rev.prev, rev.next = self.prev, self
        if self.prev is not None:
            self.prev.next = rev
        self.prev = rev
        return rev

    # ── Navigation ────────────────────────────────────────────────

    def seek(self, n: int) -> Revision:
        """Move *n* revisions forward (or backward when negative)."""
        curr = self
        for _ in range(abs(n)):
            step = curr.next if n > 0 else curr.prev
            if step is None:
                break
            curr = step
        return curr

    def origin(self) -> Revision:
        curr = self
        while curr.prev is not None:
            curr = curr.prev
        return curr

    def tip(self) -> Revision:
        curr = self
        while curr.next is not None:
            curr = curr.next
        return curr

    def at(self, index: int) -> Revision:
        """The revision at zero-based *index*, clamped to the chain."""
        return self.origin().seek(index)

    @property
    def at_origin(self) -> bool:
        return self.prev is None

    @property
    def at_tip(self) -> bool:
        return self.next is None

    def index(self) -> int:
        count = 0
        curr = self
        while curr.prev is not None:
            count += 1
            curr = curr.prev
        return count

    def count(self) -> int:
        return sum(1 for _ in self.origin())

    def names(self) -> list[str]:
        return [rev.name for rev in self.origin()]

    def __iter__(self) -> Iterator[Revision]:
        """This revision and every later one."""
        curr: Revision | None = self
        while curr is not None:
            yield curr
            curr = curr.next

    # ── Diffs ─────────────────────────────────────────────────────

    def diff(self, context: int | None = None) -> Lines:
        """Diff against the previous revision.

        With *context* the result is a summary diff; without it every line
        is shown. The origin diffs against an empty document.
        """
        before = self.prev.lines if self.prev is not None else Lines()
        if context is None:
            return full_diff(before, self.lines)
        return summary_diff(before, self.lines, context)
