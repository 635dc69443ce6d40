"""yamlines: line-oriented views over YAML token streams."""

from yamlines.builder import LinesBuilder, build_lines
from yamlines.lexer import tokenize, tokenize_documents
from yamlines.lines import Line, Lines
from yamlines.source import Source

__version__ = "0.1.0"

__all__ = [
    "Line",
    "Lines",
    "LinesBuilder",
    "Source",
    "__version__",
    "build_lines",
    "tokenize",
    "tokenize_documents",
]
