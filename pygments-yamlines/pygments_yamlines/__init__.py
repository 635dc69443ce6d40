"""Pygments lexer for YAML, driven by yamlines' line segments."""

from pygments.lexer import Lexer

from yamlines.builder import build_lines
from yamlines.lexer import tokenize
from yamlines.styles import part_style


class YamlinesLexer(Lexer):
    """Highlights YAML one line segment at a time.

    Keys, anchors and aliases are styled from their neighbouring tokens, so
    ``key:`` is a ``Name.Tag`` whatever scalar type ``key`` resolves to.
    """

    name = "YAML (yamlines)"
    aliases = ["yamlines"]
    filenames = []
    mimetypes = ["text/x-yamlines"]

    def __init__(self, **options):
        # Blank lines at either end are part of the document.
        options.setdefault("stripnl", False)
        super().__init__(**options)

    def get_tokens_unprocessed(self, text):
        index = 0
        for line in build_lines(tokenize(text)):
            for seg in line.segments:
                part = seg.part_ref
                if part.origin:
                    yield index, part_style(part, seg.source_ref), part.origin
                    index += len(part.origin)
