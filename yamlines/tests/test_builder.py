"""Tests for the line builder."""

from __future__ import annotations

import pytest

from yamlines.builder import LinesBuilder, build_lines
from yamlines.errors import BuilderConsumedError
from yamlines.tokens import TokenPosition, TokenType

from tests.helpers import build, joined_origin, literal_block, part_origins, simple_kv, stream, tk


class TestBuildScenarios:
    def test_empty_input(self):
        lines = build_lines([])
        assert len(lines) == 0
        assert lines.is_empty()

    def test_simple_kv(self):
        lines = build_lines(simple_kv())
        assert len(lines) == 1
        assert lines[0].number == 1
        assert lines[0].content() == "key: value"

    def test_literal_block(self):
        tokens = literal_block()
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [1, 2, 3]
        assert [line.content() for line in lines] == ["s: |", "  a", "  b"]
        body = tokens[3]
        assert lines[1].segments[0].source_equals(body)
        assert lines[2].segments[0].source_equals(body)
        assert len(lines.tokens()) == 4

    def test_crlf_preserved(self):
        lines = build(
            tk(TokenType.STRING, "k", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 2, 2),
            tk(TokenType.STRING, " v\r\n", 1, 4, 4),
        )
        assert len(lines) == 1
        assert lines[0].content() == "k: v"
        assert lines.tokens()[2].origin == " v\r\n"

    def test_gapped_lines_with_newlines(self):
        tokens = stream(
            tk(TokenType.STRING, "a\n", 5, 1, 1),
            tk(TokenType.STRING, "b\n", 100, 1, 3),
        )
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [5, 100]
        assert part_origins(lines) == joined_origin(tokens)
        assert lines.validate().ok

    def test_gapped_lines_flush_open_line(self):
        tokens = stream(
            tk(TokenType.STRING, "a", 5, 1, 1),
            tk(TokenType.STRING, "b", 100, 1, 2),
        )
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [5, 100]
        assert [line.content() for line in lines] == ["a", "b"]

    def test_blank_line_absorption(self):
        tokens = stream(
            tk(TokenType.STRING, "k", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 2, 2),
            tk(TokenType.STRING, " v\n\n", 1, 4, 4),
            tk(TokenType.STRING, "n", 3, 1, 7),
            tk(TokenType.MAPPING_VALUE, ":", 3, 2, 8),
            tk(TokenType.STRING, " d\n", 3, 4, 10),
        )
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [1, 2, 3]
        assert lines[1].content() == ""
        assert lines.tokens()[2].origin == " v\n\n"

    def test_duplicate_newline_attaches_to_previous_line(self):
        tokens = stream(
            tk(TokenType.STRING, "a", 1, 1, 1),
            tk(TokenType.COMMENT, " # c\n", 1, 3, 3, " c"),
            tk(TokenType.STRING, "\nd", 2, 1, 8),
        )
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [1, 2]
        first = lines[0].tokens()
        assert [p.origin for p in first] == ["a", " # c\n", "\n"]
        assert first[2].position.line == 1
        assert first[2].position.column == 4
        assert lines[0].content() == "a # c"
        assert lines[1].content() == "d"
        assert lines.validate().ok
        assert part_origins(lines).count("\n") == joined_origin(tokens).count("\n")


class TestPositions:
    def test_block_scalar_position_on_last_line(self):
        tokens = literal_block()
        lines = build_lines(tokens)
        last = lines[2].tokens()[0]
        assert last.position == tokens[3].position
        assert last.position.line == 3
        assert last.value == "a\nb\n"
        assert lines[1].tokens()[0].value == ""

    def test_block_scalar_position_on_first_line_when_followed(self):
        tokens = literal_block(followed=True)
        lines = build_lines(tokens)
        first = lines[1].tokens()[0]
        assert first.position == tokens[3].position
        assert first.position.line == 2
        assert first.position.column == 0
        assert [line.number for line in lines] == [1, 2, 3, 4]
        assert lines.validate().ok

    def test_block_scalar_value_on_last_content_part(self):
        lines = build_lines(literal_block(followed=True))
        assert lines[2].tokens()[0].value == "a\nb\n"

    def test_plain_multiline_value_on_first_part(self):
        tokens = stream(
            tk(TokenType.STRING, "key", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 4, 4),
            tk(TokenType.STRING, " this is\n  continued\n", 1, 6, 6, "this is continued"),
        )
        lines = build_lines(tokens)
        first, second = lines[0].tokens()[2], lines[1].tokens()[0]
        assert first.value == "this is continued"
        assert first.position.line == 1
        assert first.position.column == 6
        assert first.position.offset == 6
        assert second.value == ""
        assert second.position.column == 1
        assert second.position.offset == 14
        assert lines.tokens()[2].position.line == 1

    def test_indent_tracking_for_continuation_lines(self):
        tokens = stream(
            tk(TokenType.STRING, "key", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 4, 4),
            tk(TokenType.STRING, " a\n  b\n", 1, 6, 6, "a b"),
        )
        lines = build_lines(tokens)
        cont = lines[1].tokens()[0]
        assert cont.position.indent_num == 2
        assert cont.position.indent_level == 1

    def test_trailing_whitespace_part_retyped_to_space(self):
        tokens = stream(
            tk(TokenType.STRING, "a", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 2, 2),
            tk(TokenType.STRING, " b\n  ", 1, 4, 4, "b"),
        )
        lines = build_lines(tokens)
        tail = lines[1].tokens()[0]
        assert tail.type == TokenType.SPACE
        assert lines.tokens()[2].type == TokenType.STRING

    def test_block_scalar_whitespace_keeps_type(self):
        tokens = stream(
            tk(TokenType.STRING, "s", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 2, 2),
            tk(TokenType.LITERAL, " |+\n", 1, 4, 4),
            tk(TokenType.STRING, "  a\n  ", 3, 3, 13, "a\n", indent_num=2, indent_level=1),
        )
        lines = build_lines(tokens)
        assert lines[2].tokens()[0].type == TokenType.STRING

    def test_leading_blank_line_restores_position(self):
        tokens = stream(
            tk(TokenType.STRING, "\n\nkey", 3, 1, 3, "key"),
            tk(TokenType.MAPPING_VALUE, ":", 3, 4, 6),
            tk(TokenType.STRING, " v\n", 3, 6, 8),
        )
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [1, 2, 3]
        key = lines[2].tokens()[0]
        assert key.position == tokens[0].position
        assert lines.validate().ok

    def test_offsets_count_characters(self):
        tokens = stream(
            tk(TokenType.STRING, "日", 1, 1, 1),
            tk(TokenType.MAPPING_VALUE, ":", 1, 2, 2),
            tk(TokenType.STRING, " value\n", 1, 4, 4),
        )
        parts = build_lines(tokens)[0].tokens()
        assert [p.position.offset for p in parts] == [1, 2, 4]

    def test_missing_positions_tolerated(self):
        a = tk(TokenType.STRING, "a", 1, 1, 1)
        a.position = None
        lines = build_lines(stream(a, tk(TokenType.STRING, " b\n", 1, 3, 3)))
        assert lines[0].number == 1
        assert lines[0].content() == "a b"
        assert lines.tokens()[0].position is None

    def test_error_copied_to_parts(self):
        bad = tk(TokenType.INVALID, "oops\n", 1, 1, 1)
        bad.error = "unexpected"
        lines = build_lines(stream(bad))
        assert lines[0].tokens()[0].error == "unexpected"


class TestRoundTrip:
    @pytest.mark.parametrize("make", [
        simple_kv,
        literal_block,
        lambda: literal_block(followed=True),
    ])
    def test_tokens_round_trip(self, make):
        tokens = make()
        lines = build_lines(tokens)
        assert lines.tokens() == tokens
        assert part_origins(lines) == joined_origin(tokens)
        assert lines.validate().ok

    def test_round_trip_tokens_are_unlinked_clones(self):
        tokens = simple_kv()
        out = build_lines(tokens).tokens()
        assert all(a is not b for a, b in zip(out, tokens))
        assert all(t.prev is None and t.next is None for t in out)

    def test_sources_are_not_mutated(self):
        tokens = literal_block()
        before = [t.clone() for t in tokens]
        build_lines(tokens)
        assert tokens == before


class TestLinesBuilder:
    def test_incremental(self):
        tokens = simple_kv()
        builder = LinesBuilder(tokens[0])
        for t in tokens:
            builder.add_token(t)
        lines = builder.build()
        assert lines.content() == "key: value"

    def test_seed_without_position(self):
        builder = LinesBuilder()
        assert builder.current_line == 1
        assert builder.current_offset == 1

    def test_seed_subtracts_leading_newlines(self):
        first = tk(TokenType.STRING, "\r\n\r\nkey", 3, 1, 5, "key")
        assert LinesBuilder(first).current_line == 1

    def test_seed_counts_whitespace_only_lines(self):
        first = tk(TokenType.COMMENT, "   \n# c\n", 2, 1, 5, " c")
        assert LinesBuilder(first).current_line == 1

    def test_seed_offset_starts_at_origin(self):
        first = tk(TokenType.STRING, "\n\nkey", 3, 1, 3, "key")
        assert LinesBuilder(first).current_offset == 1
        indented = tk(TokenType.STRING, "  key", 1, 3, 3, "key")
        assert LinesBuilder(indented).current_offset == 1

    def test_leading_blank_line_offsets_increase(self):
        tokens = stream(
            tk(TokenType.STRING, "\n\nkey", 3, 1, 3, "key"),
            tk(TokenType.MAPPING_VALUE, ":", 3, 4, 6),
            tk(TokenType.STRING, " v\n", 3, 6, 8),
        )
        offsets = [p.position.offset for line in build_lines(tokens) for p in line.tokens()]
        assert offsets == [1, 2, 3, 6, 8]

    def test_seed_offset_defaults_to_one(self):
        first = tk(TokenType.STRING, "key", 1, 1, 0)
        assert LinesBuilder(first).current_offset == 1

    def test_add_after_build_raises(self):
        tokens = simple_kv()
        builder = LinesBuilder(tokens[0])
        builder.add_tokens(tokens)
        builder.build()
        with pytest.raises(BuilderConsumedError):
            builder.add_token(tokens[0])

    def test_build_twice_raises(self):
        builder = LinesBuilder()
        builder.build()
        with pytest.raises(RuntimeError):
            builder.build()

    def test_never_rewinds(self):
        tokens = stream(
            tk(TokenType.STRING, "a\n", 3, 1, 1),
            tk(TokenType.STRING, "b\n", 1, 1, 3),
        )
        lines = build_lines(tokens)
        assert [line.number for line in lines] == [3, 4]

    def test_part_position_type(self):
        lines = build_lines(simple_kv())
        assert all(isinstance(p.position, TokenPosition) for p in lines[0].tokens())
