"""Shared test helpers for the yamlines test suite."""

from __future__ import annotations

from yamlines.builder import build_lines
from yamlines.lines import Lines
from yamlines.tokens import Token, TokenPosition, TokenType, link_tokens


def tk(
    type_: TokenType,
    origin: str,
    line: int,
    column: int,
    offset: int,
    value: str | None = None,
    *,
    indent_num: int = 0,
    indent_level: int = 0,
) -> Token:
    """Build a token the way the lexer shapes it. Value defaults to the stripped origin."""
    return Token(
        type=type_,
        value=origin.strip() if value is None else value,
        origin=origin,
        position=TokenPosition(line, column, offset, indent_num, indent_level),
    )


def stream(*tokens: Token) -> list[Token]:
    """Link *tokens* into a stream."""
    return link_tokens(list(tokens))


def joined_origin(tokens: list[Token]) -> str:
    return "".join(t.origin for t in tokens)


def part_origins(lines: Lines) -> str:
    """Concatenated part origins across every segment."""
    return "".join(
        seg.part_ref.origin for line in lines for seg in line.segments
    )


def build(*tokens: Token) -> Lines:
    return build_lines(stream(*tokens))


# ── Fixtures shaped like real lexer output ────────────────────────


def simple_kv() -> list[Token]:
    """``key: value\\n``"""
    return stream(
        tk(TokenType.STRING, "key", 1, 1, 1),
        tk(TokenType.MAPPING_VALUE, ":", 1, 4, 4),
        tk(TokenType.STRING, " value\n", 1, 6, 6),
    )


def literal_block(*, followed: bool = False) -> list[Token]:
    """``s: |\\n  a\\n  b\\n``, optionally followed by ``n: x\\n``.

    When followed, the body reports its first content line with column 0.
    Otherwise it reports the last content line.
    """
    if followed:
        body = tk(TokenType.STRING, "  a\n  b\n", 2, 0, 6, "a\nb\n", indent_num=2, indent_level=1)
    else:
        body = tk(TokenType.STRING, "  a\n  b\n", 3, 3, 12, "a\nb\n", indent_num=2, indent_level=1)
    tokens = [
        tk(TokenType.STRING, "s", 1, 1, 1),
        tk(TokenType.MAPPING_VALUE, ":", 1, 2, 2),
        tk(TokenType.LITERAL, " |\n", 1, 4, 4),
        body,
    ]
    if followed:
        tokens += [
            tk(TokenType.STRING, "n", 4, 1, 14),
            tk(TokenType.MAPPING_VALUE, ":", 4, 2, 15),
            tk(TokenType.STRING, " x\n", 4, 4, 17),
        ]
    return stream(*tokens)
