"""Text search over :class:`Lines`, reporting matches as position ranges."""

from __future__ import annotations

import threading
import unicodedata
from collections.abc import Callable

from yamlines.lines import Lines
from yamlines.position import Position, Range, Ranges

Normalizer = Callable[[str], str]


def standard_normalizer(text: str) -> str:
    """Lowercase and drop combining marks, so ``"Ö"`` matches ``"o"``."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", stripped).lower()


class Finder:
    """Finds every occurrence of a string in loaded lines.

    The searched text is every part origin in order, line breaks included,
    so a match may span lines. :meth:`load` indexes the lines once; each
    :meth:`find` then runs against that index. With a normalizer both the
    index and the search string are normalized, and every normalized
    character maps back to the position of the character it came from.
    """

    def __init__(self, normalizer: Normalizer | None = None) -> None:
        self._normalizer = normalizer
        self._lines: Lines | None = None
        self._text = ""
        self._positions: list[Position] = []
        self._lock = threading.Lock()

    def load(self, lines: Lines) -> None:
        with self._lock:
            if lines is self._lines:
                return
            self._lines = lines
            self._text, self._positions = self._index(lines)

    def _index(self, lines: Lines) -> tuple[str, list[Position]]:
        chars: list[str] = []
        positions: list[Position] = []
        cache: dict[str, str] = {}
        for idx, line in enumerate(lines):
            col = 0
            for part in line.tokens():
                for ch in part.origin:
                    normalized = ch
                    if self._normalizer is not None:
                        if ch not in cache:
                            cache[ch] = self._normalizer(ch)
                        normalized = cache[ch]
                    for out in normalized:
                        chars.append(out)
                        positions.append(Position(idx, col))
                    col += 1
        return "".join(chars), positions

    def find(self, search: str) -> Ranges:
        """Non-overlapping matches of *search*, in document order.

        Each range ends one column past the last matched character. Nothing
        matches an empty search or an empty index.
        """
        ranges = Ranges()
        with self._lock:
            needle = self._normalizer(search) if self._normalizer and search else search
            if not needle or not self._text:
                return ranges
            start = self._text.find(needle)
            while start >= 0:
                last = self._positions[start + len(needle) - 1]
                ranges.add(Range(self._positions[start], Position(last.line, last.col + 1)))
                start = self._text.find(needle, start + len(needle))
        return ranges
