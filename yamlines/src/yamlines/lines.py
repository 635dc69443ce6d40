"""Line and Lines: a line-oriented view over a YAML token stream."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import overload

from yamlines.position import Position, Range, Ranges, Span
from yamlines.segments import Segments, Segments2
from yamlines.tokens import Token


class AnnotationPosition(Enum):
    ABOVE = auto()
    BELOW = auto()


class Flag(Enum):
    DEFAULT = auto()
    INSERTED = auto()
    DELETED = auto()
    ANNOTATION_ONLY = auto()


_MARKERS = {Flag.INSERTED: "+", Flag.DELETED: "-"}


@dataclass(frozen=True)
class Annotation:
    """A text line shown above or below a source line."""

    content: str
    position: AnnotationPosition = AnnotationPosition.BELOW
    col: int = 0

    def __str__(self) -> str:
        return " " * max(0, self.col) + self.content


@dataclass(frozen=True)
class Overlay:
    """A styled column range on one line. ``kind`` is a Pygments token type."""

    cols: Span
    kind: object


class ValidationKind(Enum):
    OK = auto()
    LINE_NUMBER_NOT_INCREASING = auto()
    LINE_NUMBER_MISMATCH = auto()
    COLUMN_NOT_INCREASING = auto()


@dataclass(frozen=True)
class ValidateResult:
    kind: ValidationKind = ValidationKind.OK
    line_index: int = -1
    segment_index: int = -1
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind == ValidationKind.OK

    def __bool__(self) -> bool:
        return self.ok


def _strip_line_break(origin: str) -> str:
    return origin.removesuffix("\n").removesuffix("\r")


@dataclass
class Line:
    segments: Segments = field(default_factory=Segments)
    number: int = 0
    annotations: list[Annotation] = field(default_factory=list)
    overlays: list[Overlay] = field(default_factory=list)
    flag: Flag = Flag.DEFAULT

    def content(self) -> str:
        """The line's text without its line break."""
        return "".join(_strip_line_break(seg.part_ref.origin) for seg in self.segments)

    def tokens(self) -> list[Token]:
        return self.segments.part_tokens()

    def width(self) -> int:
        return len(self.content())

    def is_empty(self) -> bool:
        return len(self.segments) == 0

    def add_annotation(self, annotation: Annotation) -> None:
        self.annotations.append(annotation)

    def add_overlay(self, overlay: Overlay) -> None:
        self.overlays.append(overlay)

    def clear_overlays(self) -> None:
        self.overlays.clear()

    def clone(self) -> Line:
        return Line(
            segments=self.segments.clone(),
            number=self.number,
            annotations=list(self.annotations),
            overlays=list(self.overlays),
            flag=self.flag,
        )

    def __str__(self) -> str:
        if self.flag == Flag.ANNOTATION_ONLY:
            return "\n".join(" " * 7 + str(a) for a in self.annotations)
        prefix = f"{self.number:4d} {_MARKERS.get(self.flag, '|')} "
        out = [prefix + str(a) for a in self.annotations
               if a.position == AnnotationPosition.ABOVE]
        out.append(prefix + self.content())
        out.extend(prefix + str(a) for a in self.annotations
                   if a.position == AnnotationPosition.BELOW)
        return "\n".join(out)


class Lines(Sequence[Line]):
    """The lines of one YAML document, in order.

    Built by :func:`yamlines.builder.build_lines`. Positions taken and
    returned here are :class:`~yamlines.position.Position` values whose
    ``line`` is an index into this sequence.
    """

    def __init__(self, lines: Iterable[Line] = ()) -> None:
        self._lines: list[Line] = list(lines)

    @overload
    def __getitem__(self, idx: int) -> Line: ...
    @overload
    def __getitem__(self, idx: slice) -> Lines: ...

    def __getitem__(self, idx: int | slice) -> Line | Lines:
        if isinstance(idx, slice):
            return Lines(self._lines[idx])
        return self._lines[idx]

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self._lines)

    def __repr__(self) -> str:
        return f"Lines({len(self._lines)} lines)"

    def __str__(self) -> str:
        return "\n".join(str(line) for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def clone(self) -> Lines:
        return Lines(line.clone() for line in self._lines)

    def segments(self) -> Segments2:
        return Segments2(line.segments for line in self._lines)

    def content(self) -> str:
        return "\n".join(line.content() for line in self._lines)

    def line_index(self, number: int) -> int | None:
        """Index of the line numbered *number*, if present."""
        for i, line in enumerate(self._lines):
            if line.number == number:
                return i
            if line.number > number:
                break
        return None

    # ── Tokens ────────────────────────────────────────────────────

    def tokens(self) -> list[Token]:
        """Clones of the source tokens, each once, in document order.

        Inverse of the builder: equal field-wise to the tokens the lines were
        built from. The clones are not linked.
        """
        seen: set[int] = set()
        out: list[Token] = []
        for line in self._lines:
            for seg in line.segments:
                key = id(seg.source_ref)
                if key not in seen:
                    seen.add(key)
                    out.append(seg.source)
        return out

    def token_at(self, pos: Position) -> Token | None:
        if pos.line < 0 or pos.line >= len(self._lines):
            return None
        return self._lines[pos.line].segments.source_token_at(pos.col)

    def token_positions(self, tk: Token) -> list[Position]:
        """Every position where *tk* (a source or part object) starts a segment."""
        out: list[Position] = []
        for i, line in enumerate(self._lines):
            col = 0
            for seg in line.segments:
                if seg.contains(tk):
                    out.append(Position(i, col))
                col += seg.width
        return out

    def token_position_ranges(self, tk: Token) -> Ranges:
        return self.segments().ranges_of(tk)

    def token_position_ranges_at(self, pos: Position) -> Ranges:
        return self.segments().token_ranges_at(pos.line, pos.col)

    def content_position_ranges_at(self, pos: Position) -> Ranges:
        return self.segments().content_ranges_at(pos.line, pos.col)

    # ── Metadata ──────────────────────────────────────────────────

    def add_overlay(self, kind: object, *ranges: Range) -> None:
        """Overlay *ranges*, split per line and clamped to each line's width."""
        for r in ranges:
            first = max(r.start.line, 0)
            last = min(r.end.line, len(self._lines) - 1)
            for idx in range(first, last + 1):
                line = self._lines[idx]
                width = line.width()
                start = r.start.col if idx == r.start.line else 0
                end = r.end.col if idx == r.end.line else width
                start, end = min(max(start, 0), width), min(max(end, 0), width)
                if end > start:
                    line.add_overlay(Overlay(Span(start, end), kind))

    def clear_overlays(self) -> None:
        for line in self._lines:
            line.clear_overlays()

    # ── Integrity ─────────────────────────────────────────────────

    def validate(self) -> ValidateResult:
        """Check line numbering and per-line part positions."""
        prev_number = 0
        for i, line in enumerate(self._lines):
            if line.number != 0:
                if line.number <= prev_number:
                    return ValidateResult(
                        ValidationKind.LINE_NUMBER_NOT_INCREASING, i, -1,
                        f"line at index {i}: line number {line.number} "
                        f"not greater than previous {prev_number}",
                    )
                prev_number = line.number

            prev_col: int | None = None
            for j, seg in enumerate(line.segments):
                pos = seg.part_ref.position
                if pos is None:
                    continue
                if pos.line != line.number:
                    return ValidateResult(
                        ValidationKind.LINE_NUMBER_MISMATCH, i, j,
                        f"line at index {i}, segment {j}: line number "
                        f"{pos.line} differs from expected {line.number}",
                    )
                if seg.part_ref.origin == "":
                    continue
                if prev_col is not None and pos.column <= prev_col:
                    return ValidateResult(
                        ValidationKind.COLUMN_NOT_INCREASING, i, j,
                        f"line at index {i}, segment {j}: column "
                        f"{pos.column} not greater than previous {prev_col}",
                    )
                prev_col = pos.column
        return ValidateResult()
