"""Cursor positions and ranges over a Lines sequence.

All values here are 0-indexed: ``line`` is an index into a
:class:`~yamlines.lines.Lines` value, ``col`` a character column.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class Position:
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


@dataclass(frozen=True)
class Span:
    """A half-open column range ``[start, end)`` on one line."""

    start: int
    end: int

    def contains(self, col: int) -> bool:
        return self.start <= col < self.end

    def __len__(self) -> int:
        return max(0, self.end - self.start)


@dataclass(frozen=True)
class Range:
    """A half-open range between two positions."""

    start: Position
    end: Position

    def contains(self, pos: Position) -> bool:
        return self.start <= pos < self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class Ranges:
    """Insertion-ordered collection of ranges."""

    _values: list[Range] = field(default_factory=list)

    def add(self, *ranges: Range) -> None:
        self._values.extend(ranges)

    def values(self) -> list[Range]:
        return list(self._values)

    def unique_values(self) -> list[Range]:
        """Values with duplicates removed, keeping first occurrences."""
        seen: set[Range] = set()
        out: list[Range] = []
        for r in self._values:
            if r not in seen:
                seen.add(r)
                out.append(r)
        return out

    def __iter__(self) -> Iterator[Range]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
