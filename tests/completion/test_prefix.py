"""
Tests for scopels/completion/prefix.py
"""
from __future__ import annotations

import pytest
from lsprotocol.types import Position, Range

from scopels.completion.prefix import extract_prefix


def name_range(line: int, start: int, length: int) -> Range:
    return Range(
        start=Position(line=line, character=start),
        end=Position(line=line, character=start + length),
    )


class TestExtractPrefix:
    """Tests for extract_prefix."""

    def test_cursor_inside_name(self):
        rng = name_range(3, 4, len("getName"))
        assert extract_prefix("getName", rng, Position(line=3, character=7)) == "get"

    def test_cursor_at_start_column_is_empty(self):
        """Cursor exactly at the start shows everything."""
        rng = name_range(3, 4, len("getName"))
        assert extract_prefix("getName", rng, Position(line=3, character=4)) == ""

    def test_cursor_left_of_start_is_empty(self):
        rng = name_range(3, 4, len("getName"))
        assert extract_prefix("getName", rng, Position(line=3, character=1)) == ""

    def test_cursor_at_end_is_full_name(self):
        rng = name_range(0, 0, len("count"))
        assert extract_prefix("count", rng, Position(line=0, character=5)) == "count"

    def test_cursor_beyond_name_clamps_to_full_name(self):
        rng = name_range(0, 2, len("foo"))
        assert extract_prefix("foo", rng, Position(line=0, character=40)) == "foo"

    @pytest.mark.parametrize("line", [0, 2])
    def test_other_line_is_empty(self, line):
        rng = name_range(1, 0, len("value"))
        assert extract_prefix("value", rng, Position(line=line, character=3)) == ""

    def test_empty_name(self):
        rng = name_range(0, 5, 0)
        assert extract_prefix("", rng, Position(line=0, character=9)) == ""
