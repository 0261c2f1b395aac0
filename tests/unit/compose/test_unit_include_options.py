# tests/unit/compose/test_unit_include_options.py — v1
"""Tests for compose/include_options.py — attribute parsing and selection."""

from __future__ import annotations

from adockroki.compose.include_options import (
    apply_include_options,
    indent_lines,
    parse_include_options,
    parse_line_spec,
    pick_lines,
    pick_tags,
    shift_heading_levels,
    tokenize_key_values,
)
from adockroki.core.models import IncludeOptions

TEN_LINES = "\n".join(f"line {i}" for i in range(1, 11))


class TestParseIncludeOptions:
    def test_empty(self):
        assert parse_include_options("") == IncludeOptions()

    def test_leveloffset_signed(self):
        assert parse_include_options("leveloffset=+1").leveloffset == 1
        assert parse_include_options("leveloffset=-2").leveloffset == -2

    def test_lines_keeps_separators(self):
        opts = parse_include_options("lines=2;5..6,leveloffset=+1")
        assert opts.lines == "2;5..6"
        assert opts.leveloffset == 1

    def test_tag_and_tags(self):
        assert parse_include_options("tag=intro").tag == "intro"
        assert parse_include_options('tags="a;b"').tags == ["a", "b"]

    def test_indent(self):
        assert parse_include_options("indent=4").indent == 4
        assert parse_include_options("indent=-1").indent is None

    def test_optional(self):
        assert parse_include_options("opts=optional").optional is True
        assert parse_include_options("opts=other").optional is False

    def test_unknown_keys_ignored(self):
        opts = parse_include_options("encoding=utf-8,leveloffset=1")
        assert opts.leveloffset == 1

    def test_malformed_int_unset(self):
        assert parse_include_options("leveloffset=abc").leveloffset is None

    def test_tokenize(self):
        assert tokenize_key_values("a=1, b=x;y") == [("a", "1"), ("b", "x;y")]


class TestPickLines:
    def test_noncontiguous_selection_gets_one_separator(self):
        assert pick_lines(TEN_LINES, "2;5..6") == "line 2\n\nline 5\nline 6"

    def test_reverse_range(self):
        assert pick_lines(TEN_LINES, "4..3") == "line 3\nline 4"

    def test_order_follows_original(self):
        assert pick_lines(TEN_LINES, "7,1") == "line 1\n\nline 7"

    def test_blank_before_heading(self):
        text = "para one\n== Heading\nbody"
        assert pick_lines(text, "1..3") == "para one\n\n== Heading\nbody"

    def test_line_spec(self):
        assert parse_line_spec("1|3..4;x") == {1, 3, 4}


class TestPickTags:
    TEXT = (
        "before\n"
        "tag::a[]\n"
        "in a\n"
        "end::a[]\n"
        "tag::b[]\n"
        "in b\n"
        "end::b[]\n"
        "after"
    )

    def test_single_tag(self):
        assert pick_tags(self.TEXT, {"a"}) == "in a"

    def test_multiple_tags(self):
        assert pick_tags(self.TEXT, {"a", "b"}) == "in a\nin b"

    def test_any_end_marker_closes_capture(self):
        text = "tag::outer[]\none\ntag::inner[]\ntwo\nend::inner[]\nthree\nend::outer[]"
        # Nested regions with distinct names are not supported.
        assert pick_tags(text, {"outer", "inner"}) == "one\ntwo"


class TestIndentAndApply:
    def test_indent_skips_empty_lines(self):
        assert indent_lines("a\n\nb", 2) == "  a\n\n  b"

    def test_apply_order_lines_then_indent(self):
        opts = IncludeOptions(lines="1..2", indent=1)
        assert apply_include_options("x\ny\nz", opts) == " x\n y"

    def test_tag_wins_over_tags(self):
        text = "tag::a[]\nA\nend::a[]\ntag::b[]\nB\nend::b[]"
        opts = IncludeOptions(tag="a", tags=["b"])
        assert apply_include_options(text, opts) == "A"


class TestShiftHeadingLevels:
    def test_shift_down(self):
        assert shift_heading_levels("== Title\ntext", 1) == "=== Title\ntext"

    def test_floor_at_one(self):
        assert shift_heading_levels("== Title", -5) == "= Title"

    def test_zero_offset_identity(self):
        assert shift_heading_levels("== T", 0) == "== T"

    def test_non_heading_untouched(self):
        text = "==not a heading\n====\nplain"
        assert shift_heading_levels(text, 2) == text
