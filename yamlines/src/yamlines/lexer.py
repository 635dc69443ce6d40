"""YAML lexer built on PyYAML's scanner.

PyYAML reports where each token starts and ends but keeps neither the text
between tokens nor comments. This module recovers both so every character of
the input belongs to exactly one token's ``origin``:

* leading whitespace on a token's own line belongs to the token;
* whitespace between two tokens on one line belongs to the later token;
* line breaks and blank lines after a token belong to that token.
"""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass

import yaml

from yamlines.documents import split_documents
from yamlines.tokens import (
    CharacterType,
    Indicator,
    Token,
    TokenPosition,
    TokenType,
    count_leading_spaces,
    is_pure_newline,
    link_tokens,
    split_origin,
    update_indent_level,
)

log = logging.getLogger(__name__)

# ── Plain scalar resolution ───────────────────────────────────────

_PLAIN_RULES: list[tuple[re.Pattern[str], TokenType]] = [
    (re.compile(r"~|null|Null|NULL"), TokenType.NULL),
    (re.compile(r"true|True|TRUE|false|False|FALSE"), TokenType.BOOL),
    (re.compile(r"[-+]?\.(?:inf|Inf|INF)"), TokenType.INFINITY),
    (re.compile(r"\.(?:nan|NaN|NAN)"), TokenType.NAN),
    (re.compile(r"0b[01_]+"), TokenType.BINARY_INTEGER),
    (re.compile(r"0o?[0-7_]+"), TokenType.OCTET_INTEGER),
    (re.compile(r"0x[0-9a-fA-F_]+"), TokenType.HEX_INTEGER),
    (re.compile(r"[-+]?(?:0|[1-9][0-9_]*)"), TokenType.INTEGER),
    (re.compile(r"[-+]?(?:\.[0-9]+|[0-9][0-9_]*(?:\.[0-9_]*)?)(?:[eE][-+]?[0-9]+)?"),
     TokenType.FLOAT),
    (re.compile(r"<<"), TokenType.MERGE_KEY),
]


def resolve_plain(value: str) -> TokenType:
    """Token type of an unquoted scalar."""
    for pattern, tk_type in _PLAIN_RULES:
        if pattern.fullmatch(value):
            return tk_type
    return TokenType.STRING


_SIMPLE_TOKENS: dict[type, tuple[TokenType, Indicator]] = {
    yaml.DocumentStartToken: (TokenType.DOCUMENT_HEADER, Indicator.NOT),
    yaml.DocumentEndToken: (TokenType.DOCUMENT_END, Indicator.NOT),
    yaml.DirectiveToken: (TokenType.DIRECTIVE, Indicator.DIRECTIVE),
    yaml.KeyToken: (TokenType.MAPPING_KEY, Indicator.BLOCK_STRUCTURE),
    yaml.ValueToken: (TokenType.MAPPING_VALUE, Indicator.BLOCK_STRUCTURE),
    yaml.BlockEntryToken: (TokenType.SEQUENCE_ENTRY, Indicator.BLOCK_STRUCTURE),
    yaml.FlowEntryToken: (TokenType.COLLECT_ENTRY, Indicator.FLOW_COLLECTION),
    yaml.FlowSequenceStartToken: (TokenType.SEQUENCE_START, Indicator.FLOW_COLLECTION),
    yaml.FlowSequenceEndToken: (TokenType.SEQUENCE_END, Indicator.FLOW_COLLECTION),
    yaml.FlowMappingStartToken: (TokenType.MAPPING_START, Indicator.FLOW_COLLECTION),
    yaml.FlowMappingEndToken: (TokenType.MAPPING_END, Indicator.FLOW_COLLECTION),
    yaml.TagToken: (TokenType.TAG, Indicator.NODE_PROPERTY),
}


@dataclass
class _Item:
    """A token before its origin is known. ``start``/``end`` index the text."""

    type: TokenType
    value: str
    start: int
    end: int
    indicator: Indicator = Indicator.NOT
    character_type: CharacterType = CharacterType.MISCELLANEOUS
    error: str = ""
    block_content: bool = False


class _Text:
    """Index arithmetic over the source text. Only LF starts a new line."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def line_of(self, idx: int) -> int:
        return bisect.bisect_right(self.line_starts, idx) - 1

    def line_start(self, idx: int) -> int:
        return self.line_starts[self.line_of(idx)]

    def line_end(self, idx: int) -> int:
        """Index of the line break ending *idx*'s line (CR excluded), or EOF."""
        nl = self.text.find("\n", idx)
        end = len(self.text) if nl < 0 else nl
        if end > idx and self.text[end - 1] == "\r" and nl >= 0:
            end -= 1
        return end


# ── Scanning ──────────────────────────────────────────────────────


def _scan(src: _Text) -> tuple[list[_Item], yaml.YAMLError | None]:
    items: list[_Item] = []
    text = src.text
    try:
        for tok in yaml.scan(text, Loader=yaml.SafeLoader):
            start, end = tok.start_mark.index, tok.end_mark.index
            if isinstance(tok, yaml.ScalarToken):
                if tok.style in ("|", ">"):
                    items.extend(_block_scalar(src, tok))
                else:
                    items.append(_flow_scalar(tok))
            elif isinstance(tok, (yaml.AnchorToken, yaml.AliasToken)):
                is_anchor = isinstance(tok, yaml.AnchorToken)
                items.append(_Item(
                    TokenType.ANCHOR if is_anchor else TokenType.ALIAS,
                    text[start], start, start + 1,
                    indicator=Indicator.NODE_PROPERTY,
                    character_type=CharacterType.INDICATOR,
                ))
                items.append(_Item(TokenType.STRING, tok.value, start + 1, end))
            elif start == end:
                # Stream and block structure markers and implicit keys.
                continue
            elif type(tok) in _SIMPLE_TOKENS:
                tk_type, indicator = _SIMPLE_TOKENS[type(tok)]
                items.append(_Item(
                    tk_type, text[start:end], start, end,
                    indicator=indicator,
                    character_type=CharacterType.INDICATOR,
                ))
            else:
                log.debug("unmapped scanner token %s", type(tok).__name__)
                items.append(_Item(TokenType.UNKNOWN, text[start:end], start, end))
    except yaml.YAMLError as exc:
        return items, exc
    return items, None


def _flow_scalar(tok: yaml.ScalarToken) -> _Item:
    start, end = tok.start_mark.index, tok.end_mark.index
    match tok.style:
        case "'":
            tk_type, indicator = TokenType.SINGLE_QUOTE, Indicator.QUOTED_SCALAR
        case '"':
            tk_type, indicator = TokenType.DOUBLE_QUOTE, Indicator.QUOTED_SCALAR
        case _:
            tk_type, indicator = resolve_plain(tok.value), Indicator.NOT
    return _Item(tk_type, tok.value, start, end, indicator=indicator)


def _block_scalar(src: _Text, tok: yaml.ScalarToken) -> list[_Item]:
    """Split a ``|``/``>`` scalar into its header, header comment and body."""
    text = src.text
    start, end = tok.start_mark.index, tok.end_mark.index
    header_end = start + 1
    while header_end < len(text) and text[header_end] in "+-0123456789":
        header_end += 1

    items = [_Item(
        TokenType.LITERAL if tok.style == "|" else TokenType.FOLDED,
        text[start:header_end], start, header_end,
        indicator=Indicator.BLOCK_SCALAR,
        character_type=CharacterType.INDICATOR,
    )]
    line_end = src.line_end(header_end)
    items.extend(_comments(src, header_end, line_end))

    nl = text.find("\n", header_end)
    body_start = len(text) if nl < 0 else nl + 1
    items.append(_Item(
        TokenType.STRING, tok.value, body_start, max(end, body_start),
        block_content=True,
    ))
    return items


def _comments(src: _Text, start: int, end: int) -> list[_Item]:
    """Comments in ``text[start:end]``, which holds only whitespace and comments."""
    out: list[_Item] = []
    text = src.text
    idx = start
    while idx < end:
        hash_idx = text.find("#", idx, end)
        if hash_idx < 0:
            break
        stop = min(src.line_end(hash_idx), end)
        out.append(_Item(
            TokenType.COMMENT, text[hash_idx + 1:stop], hash_idx, stop,
            indicator=Indicator.COMMENT,
            character_type=CharacterType.INDICATOR,
        ))
        idx = stop + 1
    return out


def _with_gaps(src: _Text, items: list[_Item], error: yaml.YAMLError | None) -> list[_Item]:
    """Add comments between scanner tokens and the unscanned tail after an error."""
    text = src.text
    out: list[_Item] = []
    prev_end = 0
    for item in items:
        if item.start > prev_end and not item.block_content:
            out.extend(_comments(src, prev_end, item.start))
        out.append(item)
        prev_end = max(prev_end, item.end)

    tail = len(text)
    if error is not None:
        rest = text[prev_end:]
        stripped = len(rest) - len(rest.lstrip())
        tail = prev_end + stripped
        message = getattr(error, "problem", None) or str(error)
        log.warning("yaml scan failed at index %d: %s", tail, message)
    if tail > prev_end:
        out.extend(_comments(src, prev_end, tail))
    if error is not None and tail < len(text):
        out.append(_Item(
            TokenType.INVALID, text[tail:].rstrip(), tail, len(text),
            error=getattr(error, "problem", None) or str(error),
        ))
    return out


# ── Token construction ────────────────────────────────────────────


def _cuts(src: _Text, items: list[_Item]) -> list[int]:
    cuts: list[int] = []
    prev_end = 0
    for i, item in enumerate(items):
        if i == 0:
            cuts.append(0)
        else:
            line_start = src.line_start(item.start)
            cuts.append(line_start if line_start >= prev_end else prev_end)
        prev_end = item.end
    return cuts


def _value_index(src: _Text, item: _Item, origin_start: int, origin: str) -> int:
    """Index whose position a token reports.

    Block scalar bodies report the first non-space character of their last
    line with content; everything else reports its first character.
    """
    if not item.block_content or origin == "":
        return item.start
    parts = split_origin(origin)
    last = len(parts) - 1
    while last > 0 and is_pure_newline(parts[last]):
        last -= 1
    part_start = origin_start + sum(len(p) for p in parts[:last])
    return part_start + count_leading_spaces(parts[last])


def tokenize(text: str) -> list[Token]:
    """Lex *text* into linked tokens whose origins concatenate to *text*.

    Malformed input never raises: the part PyYAML could not scan becomes a
    single ``INVALID`` token carrying the scanner's message.
    """
    src = _Text(text)
    items, error = _scan(src)
    items = _with_gaps(src, items, error)

    if not items:
        if not text:
            return []
        items = [_Item(TokenType.SPACE, "", 0, len(text), character_type=CharacterType.WHITESPACE)]
    else:
        # Blank lines ahead of the first token get a token of their own, so
        # the first token's position stays on the line its origin starts on.
        head = src.line_start(items[0].start)
        if head > 0:
            items.insert(0, _Item(
                TokenType.SPACE, "", 0, head, character_type=CharacterType.WHITESPACE,
            ))

    cuts = _cuts(src, items)
    bounds = cuts[1:] + [len(text)]

    tokens: list[Token] = []
    prev_line = -1
    prev_indent = 0
    level = 0
    for item, cut, bound in zip(items, cuts, bounds):
        origin = text[cut:bound]
        idx = _value_index(src, item, cut, origin)
        line = src.line_of(idx)
        line_start = src.line_starts[line]
        indent = count_leading_spaces(text[line_start:src.line_end(line_start)])
        if line != prev_line:
            if prev_line >= 0:
                level = update_indent_level(prev_indent, indent, level)
            prev_line, prev_indent = line, indent
        tokens.append(Token(
            type=item.type,
            value=item.value,
            origin=origin,
            position=TokenPosition(
                line=line + 1,
                column=idx - line_start + 1,
                offset=idx + 1,
                indent_num=indent,
                indent_level=level,
            ),
            character_type=item.character_type,
            indicator=item.indicator,
            error=item.error,
        ))
    return link_tokens(tokens)


def tokenize_documents(text: str, *, reset_positions: bool = False) -> list[list[Token]]:
    """Lex *text* and split it at ``---`` headers."""
    return list(split_documents(tokenize(text), reset_positions=reset_positions))
