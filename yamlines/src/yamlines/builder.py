"""Line builder: cuts a lexer token stream into per-line segments.

Every token is split at its line breaks into *parts*. Each part becomes a
:class:`~yamlines.segments.Segment` on the line it belongs to, with a
position recomputed for that line. Concatenating the part origins gives the
original document back and de-duplicating the segment sources gives the
original token list back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from yamlines.errors import BuilderConsumedError
from yamlines.lines import Line, Lines
from yamlines.segments import Segments
from yamlines.tokens import (
    Token,
    TokenPosition,
    TokenType,
    count_leading_newlines,
    count_leading_spaces,
    is_block_scalar_content,
    is_pure_horizontal_whitespace,
    is_pure_newline,
    split_origin,
    update_indent_level,
)

log = logging.getLogger(__name__)


@dataclass
class _PartContext:
    tk: Token
    parts: list[str]
    block_scalar: bool
    last_content_idx: int
    first_content: bool = True

    @property
    def multi_part(self) -> bool:
        return len(self.parts) > 1


def _last_content_index(parts: list[str]) -> int:
    for i in range(len(parts) - 1, -1, -1):
        if not is_pure_newline(parts[i]):
            return i
    return len(parts) - 1


class LinesBuilder:
    """Accumulates tokens into :class:`Lines`.

    Seeded from the first token of the stream. Call :meth:`add_token` for
    every token in document order, then :meth:`build` once.
    """

    def __init__(self, first: Token | None = None) -> None:
        self._lines: list[Line] = []
        self._segments = Segments()
        self._built = False
        self._prev_ended_with_newline = False

        self.current_line = 1
        self.current_offset = 1
        self.current_indent_num = 0
        self.prev_line_indent_num = 0
        self.current_indent_level = 0

        if first is not None:
            self._seed(first)

    def _seed(self, first: Token) -> None:
        pos = first.position
        if pos is None:
            return
        self.current_line = pos.line
        # The position sits on the token's content, not at the start of its
        # origin; walk both back over the whitespace in front of it.
        leading = count_leading_newlines(first.origin)
        if 0 < leading < self.current_line:
            self.current_line -= leading
        if pos.offset > 0:
            content = first.origin.lstrip()
            prefix = len(first.origin) - len(content) if content else 0
            self.current_offset = max(1, pos.offset - prefix)
            self.current_indent_num = pos.indent_num
            self.current_indent_level = pos.indent_level

    # ── Public API ────────────────────────────────────────────────

    def add_token(self, tk: Token) -> None:
        if self._built:
            raise BuilderConsumedError("cannot add a token after build()")

        origin = tk.origin
        self._handle_gap(tk, origin)

        parts = split_origin(origin)
        ctx = _PartContext(
            tk=tk,
            parts=parts,
            block_scalar=is_block_scalar_content(tk),
            last_content_idx=_last_content_index(parts),
        )
        for i, part in enumerate(parts):
            self._process_part(ctx, i, part)

        self._prev_ended_with_newline = origin.endswith("\n")

    def add_tokens(self, tokens: Iterable[Token]) -> None:
        for tk in tokens:
            self.add_token(tk)

    def build(self) -> Lines:
        if self._built:
            raise BuilderConsumedError("build() was already called")
        if self._segments:
            self._lines.append(Line(self._segments, self.current_line))
            self._segments = Segments()
        self._built = True
        return Lines(self._lines)

    # ── Line bookkeeping ──────────────────────────────────────────

    def _finish_line(self) -> None:
        self._lines.append(Line(self._segments, self.current_line))
        self.prev_line_indent_num = self.current_indent_num
        self._segments = Segments()
        self.current_indent_num = 0
        self.current_line += 1

    def _handle_gap(self, tk: Token, origin: str) -> None:
        """Fast-forward to a single-line token that sits past the next line."""
        newlines = origin.count("\n")
        if not (newlines == 0 or (newlines == 1 and origin.endswith("\n"))):
            return

        pos = tk.position
        tk_line = pos.line if pos is not None else self.current_line

        if tk_line > self.current_line + 1 and self._segments:
            self._lines.append(Line(self._segments, self.current_line))
            self._segments = Segments()

        if not self._segments and tk_line > self.current_line:
            log.debug("line gap: %d -> %d", self.current_line, tk_line)
            self.current_line = tk_line
            if pos is not None:
                if pos.offset > 0:
                    self.current_offset = pos.offset
                self.current_indent_num = pos.indent_num
                self.current_indent_level = pos.indent_level

    # ── Parts ─────────────────────────────────────────────────────

    def _process_part(self, ctx: _PartContext, idx: int, part: str) -> None:
        tk = ctx.tk
        pos = tk.position
        pure_newline = is_pure_newline(part)

        if (
            idx == 0
            and pure_newline
            and self._prev_ended_with_newline
            and pos is not None
            and self.current_line == pos.line
            and self._lines
        ):
            self._attach_duplicate_newline(tk, part)
            return

        if not self._segments and not pure_newline:
            if idx == 0 and pos is not None and (not ctx.block_scalar or not ctx.multi_part):
                self.current_indent_num = pos.indent_num
                self.current_indent_level = pos.indent_level
            else:
                self.current_indent_num = count_leading_spaces(part)
                self.current_indent_level = update_indent_level(
                    self.prev_line_indent_num,
                    self.current_indent_num,
                    self.current_indent_level,
                )

        is_last_content = idx == ctx.last_content_idx
        if ctx.block_scalar:
            gets_value = is_last_content
        else:
            gets_value = ctx.first_content
        was_first_content = ctx.first_content and not pure_newline

        value = ""
        if pure_newline:
            col = self._segments.next_column() + 1
        else:
            col = 1
            if tk.value and gets_value:
                value = tk.value
                if pos is not None and pos.column > 0:
                    col = pos.column
            elif ctx.first_content and pos is not None and pos.column > 0:
                col = pos.column
            ctx.first_content = False

        offset = self.current_offset
        use_token_offset = (
            not ctx.multi_part
            or (idx == len(ctx.parts) - 1 == ctx.last_content_idx and ctx.block_scalar)
            or (gets_value and value != "")
        )
        if use_token_offset and pos is not None and pos.offset > 0:
            offset = pos.offset

        part_type = tk.type
        if is_pure_horizontal_whitespace(part) and value == "" and not ctx.block_scalar:
            part_type = TokenType.SPACE

        part_pos = TokenPosition(
            line=self.current_line,
            column=col,
            offset=offset,
            indent_num=self.current_indent_num,
            indent_level=self.current_indent_level,
        )

        if ctx.block_scalar and ctx.multi_part and pos is not None:
            # Column 0 means the lexer reported the first content line.
            first_line_position = pos.column == 0
            if (was_first_content and first_line_position) or (
                is_last_content and not first_line_position
            ):
                part_pos = pos

        leading_blank = ctx.multi_part and is_pure_newline(ctx.parts[0])
        if leading_blank and was_first_content and pos is not None:
            part_pos = pos
            self.current_indent_level = pos.indent_level

        self._segments.append(tk, Token(
            type=part_type,
            value=value,
            origin=part,
            position=part_pos,
            character_type=tk.character_type,
            indicator=tk.indicator,
            error=tk.error,
        ))
        self.current_offset += len(part)

        # Only LF ends a line; a lone CR stays on the line.
        if part.endswith("\n"):
            self._finish_line()

    def _attach_duplicate_newline(self, tk: Token, part: str) -> None:
        """Hang a line break the lexer counted twice on the previous line."""
        last = self._lines[-1]
        log.debug("duplicate newline attached to line %d", last.number)
        last.segments.append(tk, Token(
            type=tk.type,
            origin=part,
            position=TokenPosition(
                line=last.number,
                column=last.segments.next_column() + 1,
                offset=self.current_offset,
                indent_num=self.prev_line_indent_num,
                indent_level=self.current_indent_level,
            ),
            character_type=tk.character_type,
            indicator=tk.indicator,
        ))
        self.current_offset += len(part)


def build_lines(tokens: Iterable[Token]) -> Lines:
    """Build :class:`Lines` from a token stream in document order."""
    tokens = list(tokens)
    if not tokens:
        return Lines()
    builder = LinesBuilder(tokens[0])
    builder.add_tokens(tokens)
    return builder.build()
