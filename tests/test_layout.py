"""Layout engine: fitting, indentation, fills and line suffixes."""

from __future__ import annotations

from vxfmt.doc import (
    CURSOR,
    HARDLINE,
    LINE,
    LINE_SUFFIX_BOUNDARY,
    LITERALLINE,
    SOFTLINE,
    align,
    concat,
    conditional_group,
    dedent,
    fill,
    group,
    if_break,
    indent,
    line_suffix,
)
from vxfmt.layout import render, render_with_cursor, string_width


class TestGroups:
    def test_fits_flat(self) -> None:
        assert render(group(concat(["a", LINE, "b"]))) == "a b"

    def test_breaks_when_too_wide(self) -> None:
        assert render(group(concat(["aaa", LINE, "bbb"])), max_width=3) == "aaa\nbbb"

    def test_softline_is_empty_when_flat(self) -> None:
        assert render(group(concat(["a", SOFTLINE, "b"]))) == "ab"

    def test_indent_on_break(self) -> None:
        doc = group(concat(["[", indent(concat([SOFTLINE, "x"])), SOFTLINE, "]"]))
        assert render(doc, max_width=2) == "[\n  x\n]"

    def test_hardline_breaks_enclosing_group(self) -> None:
        doc = group(concat(["a", LINE, "b", HARDLINE, "c"]))
        assert render(doc) == "a\nb\nc"

    def test_if_break(self) -> None:
        assert render(group(if_break("broken", "flat"))) == "flat"
        assert render(group(if_break("broken", "flat"), should_break=True)) == "broken"

    def test_conditional_group_picks_first_fitting_state(self) -> None:
        assert render(conditional_group(["aaaa", "b"]), max_width=2) == "b"

    def test_conditional_group_falls_back_to_last_state(self) -> None:
        doc = conditional_group(["aaaa", concat(["x", LINE, "y"])])
        assert render(doc, max_width=1) == "x\ny"


class TestIndentation:
    def test_tab_width(self) -> None:
        assert render(indent(concat([HARDLINE, "x"])), tab_width=4) == "\n    x"

    def test_use_tabs(self) -> None:
        assert render(indent(concat([HARDLINE, "x"])), use_tabs=True) == "\n\tx"

    def test_align(self) -> None:
        assert render(concat(["a", align(2, concat([HARDLINE, "b"]))])) == "a\n  b"

    def test_dedent(self) -> None:
        doc = indent(concat([HARDLINE, "a", dedent(concat([HARDLINE, "b"]))]))
        assert render(doc) == "\n  a\nb"

    def test_literalline_does_not_indent(self) -> None:
        assert render(indent(concat(["a", LITERALLINE, "b"]))) == "a\nb"

    def test_trailing_whitespace_trimmed(self) -> None:
        assert render(concat(["a  ", HARDLINE, "b"])) == "a\nb"


class TestFill:
    def test_packs_greedily(self) -> None:
        doc = fill(["aa", LINE, "bb", LINE, "cc"])
        assert render(doc, max_width=5) == "aa bb\ncc"

    def test_everything_fits(self) -> None:
        assert render(fill(["a", LINE, "b", LINE, "c"])) == "a b c"

    def test_oversize_token_gets_its_own_line(self) -> None:
        doc = fill(["x", LINE, "aaaaaaaa", LINE, "b"])
        assert render(doc, max_width=3) == "x\naaaaaaaa\nb"


class TestLineSuffix:
    def test_flushed_before_newline(self) -> None:
        doc = concat(["a", line_suffix(" // c"), ";", HARDLINE, "b"])
        assert render(doc) == "a; // c\nb"

    def test_flushed_at_end(self) -> None:
        assert render(concat(["a", line_suffix(" // c")])) == "a // c"

    def test_boundary_flushes_early(self) -> None:
        doc = concat(["a", line_suffix(" // c"), LINE_SUFFIX_BOUNDARY, "b"])
        assert render(doc) == "a // c\nb"

    def test_boundary_without_pending_suffix(self) -> None:
        assert render(concat(["a", LINE_SUFFIX_BOUNDARY, "b"])) == "ab"


class TestCursor:
    def test_marker_offset(self) -> None:
        assert render_with_cursor(concat(["ab", CURSOR, "cd"])) == ("abcd", 2)

    def test_no_marker(self) -> None:
        assert render_with_cursor("abc") == ("abc", None)

    def test_marker_ignored_by_render(self) -> None:
        assert render(concat(["ab", CURSOR, "cd"])) == "abcd"


class TestStringWidth:
    def test_ascii(self) -> None:
        assert string_width("abc") == 3

    def test_wide_characters(self) -> None:
        assert string_width("日本") == 4

    def test_wide_characters_break_groups(self) -> None:
        doc = group(concat(["日本", LINE, "x"]))
        assert render(doc, max_width=5) == "日本\nx"

    def test_tabs_count_tab_width(self) -> None:
        assert string_width("\tab", tab_width=4) == 6

    def test_tabs_in_text_break_groups(self) -> None:
        doc = group(concat(["\tabc", LINE, "def"]))
        assert render(doc, max_width=8, tab_width=4) == "\tabc\ndef"
        assert render(doc, max_width=11, tab_width=4) == "\tabc def"
