"""Map YAML tokens to Pygments token types for highlighting.

Styles are plain Pygments token types, so any Pygments style can paint them
and unknown subtypes fall back to their parents.
"""

from __future__ import annotations

from pygments.token import (
    Comment,
    Generic,
    Literal,
    Name,
    Punctuation,
    Text,
)
from pygments.token import _TokenType as StyleTag

from yamlines.tokens import Token, TokenType

_STYLES: dict[TokenType, StyleTag] = {
    TokenType.ALIAS: Name.Alias,
    TokenType.ANCHOR: Name.Anchor,
    TokenType.BINARY_INTEGER: Literal.Number.Bin,
    TokenType.BOOL: Literal.Boolean,
    TokenType.COLLECT_ENTRY: Punctuation.CollectEntry,
    TokenType.COMMENT: Comment,
    TokenType.DIRECTIVE: Comment.Preproc,
    TokenType.DOCUMENT_END: Punctuation.Heading,
    TokenType.DOCUMENT_HEADER: Punctuation.Heading,
    TokenType.DOUBLE_QUOTE: Literal.String.Double,
    TokenType.FLOAT: Literal.Number.Float,
    TokenType.FOLDED: Punctuation.Block.Folded,
    TokenType.HEX_INTEGER: Literal.Number.Hex,
    TokenType.IMPLICIT_NULL: Literal.Null.Implicit,
    TokenType.INFINITY: Literal.Number.Infinity,
    TokenType.INTEGER: Literal.Number.Integer,
    TokenType.INVALID: Generic.Error.Invalid,
    TokenType.LITERAL: Punctuation.Block.Literal,
    TokenType.MAPPING_END: Punctuation.Mapping.End,
    TokenType.MAPPING_KEY: Name.Tag,
    TokenType.MAPPING_START: Punctuation.Mapping.Start,
    TokenType.MAPPING_VALUE: Punctuation.Mapping.Value,
    TokenType.MERGE_KEY: Name.Alias.Merge,
    TokenType.NAN: Literal.Number.NaN,
    TokenType.NULL: Literal.Null,
    TokenType.OCTET_INTEGER: Literal.Number.Oct,
    TokenType.SEQUENCE_END: Punctuation.Sequence.End,
    TokenType.SEQUENCE_ENTRY: Punctuation.Sequence.Entry,
    TokenType.SEQUENCE_START: Punctuation.Sequence.Start,
    TokenType.SINGLE_QUOTE: Literal.String.Single,
    TokenType.SPACE: Text,
    TokenType.STRING: Literal.String,
    TokenType.TAG: Name.Decorator,
    TokenType.UNKNOWN: Generic.Error.Unknown,
}


def visual_type(tk: Token) -> TokenType:
    """The type a token is drawn as, given its neighbours.

    A scalar after an anchor or alias is drawn like that property and a
    scalar followed by ``:`` is drawn as a key.
    """
    prev_type = tk.prev.type if tk.prev is not None else None
    if prev_type in (TokenType.ANCHOR, TokenType.ALIAS):
        return prev_type
    if tk.next is not None and tk.next.type == TokenType.MAPPING_VALUE:
        return TokenType.MAPPING_KEY
    return tk.type


def type_style(tk: Token) -> StyleTag:
    return _STYLES.get(visual_type(tk), Text)


def part_style(part: Token, source: Token) -> StyleTag:
    """Style for one line segment: whitespace parts stay plain."""
    if part.type == TokenType.SPACE:
        return Text
    return type_style(source)
