"""Fragment wrapper removal."""

from __future__ import annotations

from vxfmt.normalize import FRAGMENT_CLOSE, FRAGMENT_OPEN, unwrap_fragment, wrap_fragment


class TestWrap:
    def test_wrap(self) -> None:
        assert wrap_fragment("<a />") == "<>\n<a />\n</>"
        assert wrap_fragment("x").startswith(FRAGMENT_OPEN)
        assert wrap_fragment("x").endswith(FRAGMENT_CLOSE)


class TestUnwrap:
    def test_strips_wrapper_and_indent(self) -> None:
        assert unwrap_fragment("<>\n  hi\n</>\n") == "hi\n"

    def test_nested_indent_kept_relative(self) -> None:
        formatted = "<>\n  <div>\n    <span />\n  </div>\n</>\n"
        assert unwrap_fragment(formatted) == "<div>\n  <span />\n</div>\n"

    def test_tab_indent(self) -> None:
        assert unwrap_fragment("<>\n\t<a />\n\t<b />\n</>\n") == "<a />\n<b />\n"

    def test_collapsed_wrapper(self) -> None:
        assert unwrap_fragment("<></>\n") == "\n"

    def test_empty_first_line(self) -> None:
        assert unwrap_fragment("<>\n\n</>\n") == "\n"

    def test_unindented_content_untouched(self) -> None:
        assert unwrap_fragment("<>\nhi\n</>\n") == "hi\n"

    def test_content_after_html_comment_moves_to_next_line(self) -> None:
        formatted = "<>\n  <!-- note --><a />\n</>\n"
        assert unwrap_fragment(formatted) == "<!-- note -->\n<a />\n"

    def test_html_comment_at_line_end_untouched(self) -> None:
        formatted = "<>\n  <div>\n    <!-- note -->\n  </div>\n</>\n"
        assert unwrap_fragment(formatted) == "<div>\n  <!-- note -->\n</div>\n"

    def test_content_after_indented_html_comment_keeps_indent(self) -> None:
        formatted = "<>\n  <div>\n    <!-- a --><b />\n  </div>\n</>\n"
        assert unwrap_fragment(formatted) == "<div>\n  <!-- a -->\n  <b />\n</div>\n"
