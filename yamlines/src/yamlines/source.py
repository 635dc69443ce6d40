"""Named YAML sources with their tokens and lines."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from yamlines.builder import build_lines
from yamlines.lexer import tokenize
from yamlines.lines import Line, Lines, ValidateResult
from yamlines.position import Position, Range, Ranges
from yamlines.tokens import Token, TokenType


class Source:
    """A YAML text, its tokens and the :class:`Lines` built from them.

    Overlay changes and line iteration share one lock, so a source can be
    highlighted from one thread while another renders it.
    """

    def __init__(self, tokens: list[Token], name: str = "<input>", path: Path | None = None) -> None:
        self.name = name
        self.path = path
        self._tokens = tokens
        self._lines = build_lines(tokens)
        self._lock = threading.Lock()

    @classmethod
    def from_string(cls, text: str, name: str = "<input>") -> Source:
        return cls(tokenize(text), name=name)

    @classmethod
    def from_file(cls, path: Path | str) -> Source:
        path = Path(path)
        return cls(tokenize(path.read_text(encoding="utf-8")), name=str(path), path=path)

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token], name: str = "<input>") -> Source:
        return cls(list(tokens), name=name)

    @property
    def lines(self) -> Lines:
        return self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[Line]:
        with self._lock:
            snapshot = self._lines.clone()
        return iter(snapshot)

    def __str__(self) -> str:
        with self._lock:
            return str(self._lines)

    def tokens(self) -> list[Token]:
        return self._lines.tokens()

    def content(self) -> str:
        return self._lines.content()

    def text(self) -> str:
        """The original document."""
        return "".join(tk.origin for tk in self._tokens)

    def width(self) -> int:
        return max((line.width() for line in self._lines), default=0)

    def validate(self) -> ValidateResult:
        return self._lines.validate()

    def invalid_tokens(self) -> list[Token]:
        """The shared INVALID tokens, usable as keys into :attr:`lines`."""
        return [tk for tk in self._tokens if tk.type == TokenType.INVALID]

    def token_at(self, pos: Position) -> Token | None:
        return self._lines.token_at(pos)

    def token_position_ranges(self, *positions: Position) -> Ranges:
        ranges = Ranges()
        for pos in positions:
            ranges.add(*self._lines.token_position_ranges_at(pos))
        return Ranges(ranges.unique_values())

    def content_position_ranges(self, *positions: Position) -> Ranges:
        ranges = Ranges()
        for pos in positions:
            ranges.add(*self._lines.content_position_ranges_at(pos))
        return Ranges(ranges.unique_values())

    def add_overlay(self, kind: object, *ranges: Range) -> None:
        with self._lock:
            self._lines.add_overlay(kind, *ranges)

    def clear_overlays(self) -> None:
        with self._lock:
            self._lines.clear_overlays()
