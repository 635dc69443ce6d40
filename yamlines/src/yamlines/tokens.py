"""Token kinds and token representation for YAML lexer output."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto


class TokenType(Enum):
    # Scalars
    STRING = auto()
    SINGLE_QUOTE = auto()
    DOUBLE_QUOTE = auto()
    LITERAL = auto()
    FOLDED = auto()

    # Mappings
    MAPPING_KEY = auto()
    MAPPING_VALUE = auto()
    MAPPING_START = auto()
    MAPPING_END = auto()
    MERGE_KEY = auto()

    # Sequences
    SEQUENCE_START = auto()
    SEQUENCE_ENTRY = auto()
    SEQUENCE_END = auto()
    COLLECT_ENTRY = auto()

    # Node properties
    ANCHOR = auto()
    ALIAS = auto()
    TAG = auto()

    # Documents
    COMMENT = auto()
    DIRECTIVE = auto()
    DOCUMENT_HEADER = auto()
    DOCUMENT_END = auto()

    # Whitespace
    SPACE = auto()

    # Typed plain scalars
    BOOL = auto()
    INTEGER = auto()
    BINARY_INTEGER = auto()
    OCTET_INTEGER = auto()
    HEX_INTEGER = auto()
    FLOAT = auto()
    NULL = auto()
    IMPLICIT_NULL = auto()
    INFINITY = auto()
    NAN = auto()

    # Special
    INVALID = auto()
    UNKNOWN = auto()


class CharacterType(Enum):
    UNKNOWN = auto()
    INDICATOR = auto()
    WHITESPACE = auto()
    MISCELLANEOUS = auto()
    ESCAPED = auto()


class Indicator(Enum):
    NOT = auto()
    BLOCK_STRUCTURE = auto()
    FLOW_COLLECTION = auto()
    COMMENT = auto()
    NODE_PROPERTY = auto()
    BLOCK_SCALAR = auto()
    QUOTED_SCALAR = auto()
    DIRECTIVE = auto()
    INVALID_USE_OF_RESERVED = auto()


BLOCK_SCALAR_HEADERS: frozenset[TokenType] = frozenset({
    TokenType.LITERAL,
    TokenType.FOLDED,
})


@dataclass(frozen=True)
class TokenPosition:
    """Where a token sits in its document. Line, column and offset are 1-indexed."""

    line: int
    column: int
    offset: int = 1
    indent_num: int = 0
    indent_level: int = 0


@dataclass(eq=True)
class Token:
    """A lexer token.

    ``origin`` is the verbatim source text the token covers, ``value`` the
    decoded scalar. ``prev``/``next`` link neighbours in the stream and are
    ignored by equality.
    """

    type: TokenType
    value: str = ""
    origin: str = ""
    position: TokenPosition | None = None
    character_type: CharacterType = CharacterType.MISCELLANEOUS
    indicator: Indicator = Indicator.NOT
    error: str = ""
    prev: Token | None = field(default=None, repr=False, compare=False)
    next: Token | None = field(default=None, repr=False, compare=False)

    def clone(self) -> Token:
        """Copy every field except the stream links."""
        return replace(self, prev=None, next=None)

    # Tokens are compared by value but de-duplicated by identity, so keep the
    # default object hash.
    __hash__ = object.__hash__


def link_tokens(tokens: list[Token]) -> list[Token]:
    """Set ``prev``/``next`` across *tokens* in one pass and return them."""
    prev: Token | None = None
    for tk in tokens:
        tk.prev = prev
        tk.next = None
        if prev is not None:
            prev.next = tk
        prev = tk
    return tokens


# ── Origin helpers ────────────────────────────────────────────────


def split_origin(origin: str) -> list[str]:
    """Split *origin* after each ``\\n``. An empty origin is one empty part."""
    if origin == "":
        return [""]
    parts: list[str] = []
    start = 0
    while True:
        idx = origin.find("\n", start)
        if idx < 0:
            break
        parts.append(origin[start:idx + 1])
        start = idx + 1
    if start < len(origin):
        parts.append(origin[start:])
    return parts


def is_pure_newline(s: str) -> bool:
    return s == "\n" or s == "\r\n"


def is_pure_horizontal_whitespace(s: str) -> bool:
    return s != "" and s.strip(" \t") == ""


def count_leading_spaces(s: str) -> int:
    return len(s) - len(s.lstrip(" "))


def count_leading_newlines(s: str) -> int:
    """Count the ``\\n`` characters before the first non-whitespace character."""
    count = 0
    for ch in s:
        if ch in " \t\r":
            continue
        if ch != "\n":
            break
        count += 1
    return count


def update_indent_level(prev_indent_num: int, indent_num: int, level: int) -> int:
    """Step the nesting level by one when indentation grows or shrinks."""
    if prev_indent_num < indent_num:
        return level + 1
    if prev_indent_num > indent_num and level > 0:
        return level - 1
    return level


def is_block_scalar_content(tk: Token) -> bool:
    """True if *tk* is the body of a ``|`` or ``>`` scalar.

    Comments may sit between the header and its content.
    """
    if tk.type != TokenType.STRING:
        return False
    prev = tk.prev
    while prev is not None:
        if prev.type in BLOCK_SCALAR_HEADERS:
            return True
        if prev.type != TokenType.COMMENT:
            return False
        prev = prev.prev
    return False
