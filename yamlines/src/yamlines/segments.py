"""Segments pair a source token with the slice of it that sits on one line."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from yamlines.position import Position, Range, Ranges
from yamlines.tokens import Token


def _strip_newline(origin: str) -> str:
    return origin[:-1] if origin.endswith("\n") else origin


class Segment:
    """One line's slice (``part``) of a lexer token (``source``).

    Sources are shared between every segment cut from the same token and are
    compared by identity. ``width`` is the character count of the part's
    origin without its line break.
    """

    __slots__ = ("_source", "_part", "width")

    def __init__(self, source: Token, part: Token) -> None:
        self._source = source
        self._part = part
        self.width = len(_strip_newline(part.origin))

    @property
    def source(self) -> Token:
        return self._source.clone()

    @property
    def part(self) -> Token:
        return self._part.clone()

    @property
    def source_ref(self) -> Token:
        return self._source

    @property
    def part_ref(self) -> Token:
        return self._part

    def contains(self, tk: Token) -> bool:
        return self._source is tk or self._part is tk

    def source_equals(self, tk: Token) -> bool:
        return self._source is tk

    def part_equals(self, tk: Token) -> bool:
        return self._part is tk

    def __repr__(self) -> str:
        return f"Segment({self._part.type.name}, {self._part.origin!r})"


class Segments:
    """The segments of a single line, in column order."""

    def __init__(self, segments: Iterable[Segment] = ()) -> None:
        self._segments: list[Segment] = list(segments)

    def append(self, source: Token, part: Token) -> None:
        self._segments.append(Segment(source, part))

    def clone(self) -> Segments:
        """Copy the parts; sources stay shared."""
        return Segments(Segment(seg.source_ref, seg.part) for seg in self._segments)

    def source_tokens(self) -> list[Token]:
        """Clone each distinct source once, in order of first appearance."""
        seen: set[int] = set()
        out: list[Token] = []
        for seg in self._segments:
            key = id(seg.source_ref)
            if key not in seen:
                seen.add(key)
                out.append(seg.source)
        return out

    def part_tokens(self) -> list[Token]:
        return [seg.part for seg in self._segments]

    def next_column(self) -> int:
        """The largest part column on this line, or 0."""
        col = 0
        for seg in self._segments:
            pos = seg.part_ref.position
            if pos is not None and pos.column > col:
                col = pos.column
        return col

    def source_token_at(self, col: int) -> Token | None:
        tk = self.source_ref_at(col)
        return tk.clone() if tk is not None else None

    def source_ref_at(self, col: int) -> Token | None:
        """The shared source covering character column *col*."""
        c = 0
        for seg in self._segments:
            if c <= col < c + seg.width:
                return seg.source_ref
            c += seg.width
        return None

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, idx: int) -> Segment:
        return self._segments[idx]

    def __bool__(self) -> bool:
        return bool(self._segments)

    def __repr__(self) -> str:
        return f"Segments({self._segments!r})"


class Segments2:
    """Segments for every line of a document, indexed by line index."""

    def __init__(self, lines: Iterable[Segments] = ()) -> None:
        self._lines: list[Segments] = list(lines)

    def __iter__(self) -> Iterator[Segments]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, idx: int) -> Segments:
        return self._lines[idx]

    def _source_at(self, idx: int, col: int) -> Token | None:
        if idx < 0 or idx >= len(self._lines):
            return None
        return self._lines[idx].source_ref_at(col)

    def token_ranges_at(self, idx: int, col: int) -> Ranges:
        """Ranges covered by the token under ``(idx, col)``, one per line."""
        source = self._source_at(idx, col)
        if source is None:
            return Ranges()
        return self.ranges_of(source)

    def ranges_of(self, tk: Token) -> Ranges:
        """One range per non-empty segment holding *tk* as source or part."""
        ranges = Ranges()
        for i, segs in enumerate(self._lines):
            line_col = 0
            for seg in segs:
                if seg.contains(tk) and seg.width > 0:
                    ranges.add(Range(Position(i, line_col), Position(i, line_col + seg.width)))
                line_col += seg.width
        return ranges

    def content_ranges_at(self, idx: int, col: int) -> Ranges:
        """Like :meth:`token_ranges_at` with surrounding spaces trimmed."""
        ranges = Ranges()
        source = self._source_at(idx, col)
        if source is None:
            return ranges
        for i, segs in enumerate(self._lines):
            line_col = 0
            for seg in segs:
                if seg.source_equals(source) and seg.width > 0:
                    text = _strip_newline(seg.part_ref.origin).removesuffix("\r")
                    stripped = text.strip(" ")
                    if stripped:
                        leading = len(text) - len(text.lstrip(" "))
                        start = line_col + leading
                        ranges.add(Range(Position(i, start), Position(i, start + len(stripped))))
                line_col += seg.width
        return ranges
