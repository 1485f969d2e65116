"""Doc builders and structural utilities."""

from __future__ import annotations

from vxfmt.doc import (
    BREAK_PARENT,
    HARDLINE,
    LINE,
    LITERALLINE,
    SOFTLINE,
    Concat,
    concat,
    conditional_group,
    group,
    indent,
    is_empty,
    is_line_next,
    join,
    map_doc,
    propagate_breaks,
    remove_lines,
    strip_trailing_hardline,
    will_break,
)
from vxfmt.layout import render


class TestBuilders:
    def test_concat_drops_empty_parts(self) -> None:
        doc = concat(["", "a", concat([])])
        assert doc.parts == ["a"]

    def test_join(self) -> None:
        assert render(join(", ", ["a", "b", "c"])) == "a, b, c"

    def test_is_empty(self) -> None:
        assert is_empty("")
        assert is_empty(concat([]))
        assert not is_empty("a")
        assert not is_empty(LINE)

    def test_hardline_is_concat_with_break_parent(self) -> None:
        assert isinstance(HARDLINE, Concat)
        assert HARDLINE.parts[1] is BREAK_PARENT

    def test_line_constants_carry_forced_break(self) -> None:
        assert will_break(HARDLINE)
        assert will_break(LITERALLINE)
        assert not will_break(LINE)


class TestWillBreak:
    def test_hardline(self) -> None:
        assert will_break(HARDLINE)

    def test_plain_group(self) -> None:
        assert not will_break(group(concat(["a", LINE, "b"])))

    def test_nested_hardline(self) -> None:
        assert will_break(concat(["a", group(indent(HARDLINE))]))

    def test_should_break_group(self) -> None:
        assert will_break(group("a", should_break=True))


class TestPropagateBreaks:
    def test_marks_enclosing_groups(self) -> None:
        inner = group(concat(["a", BREAK_PARENT]))
        outer = group(concat(["x", inner]))
        propagate_breaks(outer)
        assert inner.should_break
        assert outer.should_break

    def test_sibling_group_untouched(self) -> None:
        sibling = group(concat(["a", LINE, "b"]))
        outer = group(concat([sibling, group(HARDLINE)]))
        propagate_breaks(outer)
        assert outer.should_break
        assert not sibling.should_break

    def test_conditional_group_not_marked(self) -> None:
        cg = conditional_group([concat(["a", BREAK_PARENT]), "b"])
        propagate_breaks(cg)
        assert not cg.should_break


class TestTransforms:
    def test_remove_lines(self) -> None:
        doc = remove_lines(group(concat(["a", LINE, "b", SOFTLINE, "c"])))
        assert render(doc, max_width=1) == "a bc"

    def test_strip_trailing_hardline(self) -> None:
        assert render(strip_trailing_hardline(concat(["a", HARDLINE]))) == "a"

    def test_strip_trailing_hardline_nested(self) -> None:
        doc = concat(["a", concat(["b", HARDLINE])])
        assert render(strip_trailing_hardline(doc)) == "ab"

    def test_map_doc_rewrites_leaves(self) -> None:
        doc = concat(["a", group(concat(["b", LINE, "c"]))])
        upper = map_doc(doc, lambda d: d.upper() if isinstance(d, str) else d)
        assert render(upper) == "AB C"

    def test_is_line_next(self) -> None:
        assert is_line_next(concat(["", LINE, "a"]))
        assert not is_line_next(concat(["a", LINE]))
