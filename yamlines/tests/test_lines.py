"""Tests for Line and Lines."""

from __future__ import annotations

from yamlines.builder import build_lines
from yamlines.lines import (
    Annotation,
    AnnotationPosition,
    Flag,
    Line,
    Lines,
    Overlay,
    ValidationKind,
)
from yamlines.position import Position, Range, Span
from yamlines.segments import Segments
from yamlines.tokens import Token, TokenPosition, TokenType

from tests.helpers import literal_block, simple_kv


def _line(number: int, *parts: tuple[str, int, int]) -> Line:
    """A hand-built line from ``(origin, line, column)`` triples."""
    segs = Segments()
    for origin, line, column in parts:
        src = Token(TokenType.STRING, origin.strip(), origin)
        segs.append(src, Token(TokenType.STRING, origin.strip(), origin, TokenPosition(line, column)))
    return Line(segs, number)


class TestLine:
    def test_content_and_width(self):
        line = build_lines(simple_kv())[0]
        assert line.content() == "key: value"
        assert line.width() == 10
        assert not line.is_empty()
        assert Line().is_empty()

    def test_str_prefix(self):
        line = build_lines(simple_kv())[0]
        assert str(line) == "   1 | key: value"

    def test_annotations(self):
        line = build_lines(simple_kv())[0]
        line.add_annotation(Annotation("^^^^^", col=5))
        line.add_annotation(Annotation("note", position=AnnotationPosition.ABOVE))
        assert str(line).split("\n") == [
            "   1 | note",
            "   1 | key: value",
            "   1 |      ^^^^^",
        ]

    def test_str_diff_markers(self):
        line = build_lines(simple_kv())[0]
        line.flag = Flag.INSERTED
        assert str(line) == "   1 + key: value"
        line.flag = Flag.DELETED
        assert str(line) == "   1 - key: value"

    def test_str_annotation_only(self):
        line = Line(annotations=[Annotation("@@ -1,2 +1,2 @@")], flag=Flag.ANNOTATION_ONLY)
        assert str(line) == "       @@ -1,2 +1,2 @@"

    def test_clone_keeps_flag(self):
        line = build_lines(simple_kv())[0]
        line.flag = Flag.DELETED
        assert line.clone().flag == Flag.DELETED

    def test_clone_is_independent(self):
        line = build_lines(simple_kv())[0]
        copy = line.clone()
        copy.add_annotation(Annotation("x"))
        copy.add_overlay(Overlay(Span(0, 1), "kind"))
        assert line.annotations == []
        assert line.overlays == []
        assert copy.segments[0].source_equals(line.segments[0].source_ref)

    def test_tokens_are_parts(self):
        line = build_lines(simple_kv())[0]
        assert [t.origin for t in line.tokens()] == ["key", ":", " value\n"]
        assert [t.position.column for t in line.tokens()] == [1, 4, 6]


class TestLinesSequence:
    def test_len_iter_and_slice(self):
        lines = build_lines(literal_block())
        assert len(lines) == 3
        assert [line.number for line in lines] == [1, 2, 3]
        tail = lines[1:]
        assert isinstance(tail, Lines)
        assert [line.number for line in tail] == [2, 3]

    def test_content_joins_lines(self):
        assert build_lines(literal_block()).content() == "s: |\n  a\n  b"

    def test_str(self):
        assert str(build_lines(literal_block())) == "   1 | s: |\n   2 |   a\n   3 |   b"

    def test_line_index(self):
        lines = build_lines(literal_block())
        assert lines.line_index(3) == 2
        assert lines.line_index(7) is None

    def test_clone_keeps_sources(self):
        lines = build_lines(literal_block())
        copy = lines.clone()
        copy[0].add_annotation(Annotation("x"))
        assert lines[0].annotations == []
        assert copy.tokens() == lines.tokens()


class TestTokenLookup:
    def test_token_at(self):
        tokens = simple_kv()
        lines = build_lines(tokens)
        assert lines.token_at(Position(0, 0)) == tokens[0]
        assert lines.token_at(Position(0, 2)) == tokens[0]
        assert lines.token_at(Position(0, 3)) == tokens[1]
        assert lines.token_at(Position(0, 9)) == tokens[2]
        assert lines.token_at(Position(0, 10)) is None
        assert lines.token_at(Position(4, 0)) is None
        assert lines.token_at(Position(-1, 0)) is None

    def test_token_at_returns_clone(self):
        tokens = simple_kv()
        found = build_lines(tokens).token_at(Position(0, 0))
        assert found is not tokens[0]

    def test_token_positions(self):
        tokens = literal_block()
        lines = build_lines(tokens)
        assert lines.token_positions(tokens[3]) == [Position(1, 0), Position(2, 0)]
        assert lines.token_positions(tokens[2]) == [Position(0, 2)]
        assert lines.token_positions(tokens[3].clone()) == []

    def test_token_positions_of_part(self):
        lines = build_lines(simple_kv())
        part = lines[0].segments[2].part_ref
        assert lines.token_positions(part) == [Position(0, 4)]

    def test_token_position_ranges(self):
        tokens = simple_kv()
        lines = build_lines(tokens)
        assert lines.token_position_ranges(tokens[2]).values() == [
            Range(Position(0, 4), Position(0, 10)),
        ]

    def test_token_position_ranges_at(self):
        lines = build_lines(literal_block())
        assert lines.token_position_ranges_at(Position(2, 1)).values() == [
            Range(Position(1, 0), Position(1, 3)),
            Range(Position(2, 0), Position(2, 3)),
        ]

    def test_content_position_ranges_at(self):
        lines = build_lines(literal_block())
        assert lines.content_position_ranges_at(Position(0, 3)).values() == [
            Range(Position(0, 3), Position(0, 4)),
        ]


class TestOverlays:
    def test_split_per_line(self):
        lines = build_lines(literal_block())
        lines.add_overlay("hl", Range(Position(0, 2), Position(2, 2)))
        assert [o.cols for o in lines[0].overlays] == [Span(2, 4)]
        assert [o.cols for o in lines[1].overlays] == [Span(0, 3)]
        assert [o.cols for o in lines[2].overlays] == [Span(0, 2)]
        assert lines[0].overlays[0].kind == "hl"

    def test_clamped_to_width(self):
        lines = build_lines(literal_block())
        lines.add_overlay("hl", Range(Position(0, 1), Position(0, 99)))
        assert [o.cols for o in lines[0].overlays] == [Span(1, 4)]

    def test_past_last_line(self):
        lines = build_lines(literal_block())
        lines.add_overlay("hl", Range(Position(1, 0), Position(9, 0)))
        assert lines[0].overlays == []
        assert [o.cols for o in lines[2].overlays] == [Span(0, 3)]

    def test_empty_range_skipped(self):
        lines = build_lines(simple_kv())
        lines.add_overlay("hl", Range(Position(0, 3), Position(0, 3)))
        assert lines[0].overlays == []

    def test_clear(self):
        lines = build_lines(literal_block())
        lines.add_overlay("hl", Range(Position(0, 0), Position(2, 3)))
        lines.clear_overlays()
        assert all(line.overlays == [] for line in lines)


class TestValidate:
    def test_built_lines_are_valid(self):
        result = build_lines(literal_block()).validate()
        assert result.ok
        assert result
        assert result.kind == ValidationKind.OK

    def test_line_numbers_must_increase(self):
        lines = Lines([_line(2, ("a\n", 2, 1)), _line(2, ("b\n", 2, 1))])
        result = lines.validate()
        assert not result
        assert result.kind == ValidationKind.LINE_NUMBER_NOT_INCREASING
        assert result.line_index == 1

    def test_part_line_must_match(self):
        lines = Lines([_line(1, ("a", 1, 1), ("b\n", 2, 2))])
        result = lines.validate()
        assert result.kind == ValidationKind.LINE_NUMBER_MISMATCH
        assert result.line_index == 0
        assert result.segment_index == 1
        assert "differs" in result.message

    def test_columns_must_increase(self):
        lines = Lines([_line(1, ("a", 1, 3), ("b\n", 1, 2))])
        result = lines.validate()
        assert result.kind == ValidationKind.COLUMN_NOT_INCREASING
        assert result.segment_index == 1

    def test_first_column_may_be_zero(self):
        lines = Lines([_line(1, ("a", 1, 0), ("b\n", 1, 2))])
        assert lines.validate().ok

    def test_zero_number_lines_skip_order_check(self):
        lines = Lines([_line(3, ("a\n", 3, 1)), Line(Segments(), 0)])
        assert lines.validate().ok
