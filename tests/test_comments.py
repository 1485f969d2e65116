"""Comment attachment and printing."""

from __future__ import annotations

import pytest

from vxfmt.ast import Comment
from vxfmt.comments import CommentContext, attach_comments, has_ignore_comment
from vxfmt.errors import CommentNotPrintedError
from vxfmt.tokens import Position, Span

from tests.conftest import first_expression, first_statement


def attached(parse_source, source: str):
    result = parse_source(source)
    attach_comments(result.root, result.comments, result.source)
    return result


# ---------------------------------------------------------------------------
# Attachment
# ---------------------------------------------------------------------------


class TestAttachment:
    def test_comment_at_start_of_file_leads_next_statement(self, parse_source) -> None:
        result = attached(parse_source, "// a\nfoo();")
        stmt = first_statement(result)
        assert [c.value for c in stmt.comments] == [" a"]
        comment = stmt.comments[0]
        assert comment.leading and not comment.trailing
        # Nothing precedes it, so no newline is found before the comment
        assert comment.placement == "end-of-line"

    def test_own_line_comment_leads_next_statement(self, parse_source) -> None:
        result = attached(parse_source, "a;\n// b\nfoo();")
        first, second = result.root.body
        assert not first.comments
        comment = second.comments[0]
        assert comment.leading and not comment.trailing
        assert comment.placement == "own-line"

    def test_end_of_line_comment_trails_statement(self, parse_source) -> None:
        result = attached(parse_source, "foo(); // b\nbar();")
        stmt = first_statement(result)
        comment = stmt.comments[0]
        assert comment.trailing
        assert comment.placement == "end-of-line"

    def test_remaining_comment_before_operand_leads_it(self, parse_source) -> None:
        result = attached(parse_source, "a = /* c */ b")
        expr = first_expression(result)
        assert expr.right.comments[0].leading
        assert expr.right.comments[0].placement == "remaining"
        assert not expr.left.comments

    def test_remaining_comment_before_operator_trails_left(self, parse_source) -> None:
        result = attached(parse_source, "a /* c */ = b")
        expr = first_expression(result)
        assert expr.left.comments[0].trailing
        assert not expr.right.comments

    def test_consecutive_comments_before_operand_lead_it(self, parse_source) -> None:
        result = attached(parse_source, "a = /* x */ /* y */ b")
        expr = first_expression(result)
        assert [c.value for c in expr.right.comments] == [" x ", " y "]
        assert all(c.leading for c in expr.right.comments)
        assert not expr.left.comments

    def test_consecutive_comments_before_operator_trail_left(self, parse_source) -> None:
        result = attached(parse_source, "a /* x */ /* y */ = b")
        expr = first_expression(result)
        assert [c.value for c in expr.left.comments] == [" x ", " y "]
        assert all(c.trailing for c in expr.left.comments)
        assert not expr.right.comments

    def test_comment_only_program_is_dangling(self, parse_source) -> None:
        result = attached(parse_source, "// only")
        comment = result.root.comments[0]
        assert not comment.leading and not comment.trailing

    def test_ignore_directive(self, parse_source) -> None:
        result = attached(parse_source, "// vxfmt-ignore\na;")
        assert has_ignore_comment(first_statement(result))


class TestCommentContext:
    def test_unprinted_comment_raises(self) -> None:
        span = Span(Position(1, 1, 0), Position(1, 5, 4))
        ctx = CommentContext("// x", [Comment("line", " x", span)])
        with pytest.raises(CommentNotPrintedError):
            ctx.ensure_all_printed()

    def test_mark_range_printed(self) -> None:
        span = Span(Position(1, 3, 2), Position(1, 9, 8))
        comment = Comment("block", " x ", span)
        ctx = CommentContext("a /* x */ b", [comment])
        ctx.mark_range_printed(0, 11)
        assert ctx.is_printed(comment)
        ctx.ensure_all_printed()


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------


class TestPrinting:
    def test_leading_block_comment_on_same_line(self, fmt) -> None:
        assert fmt("/* a */ foo();") == "/* a */ foo();\n"

    def test_comment_inside_assignment(self, fmt) -> None:
        assert fmt("a = /* c */ b") == "a = /* c */ b;\n"

    def test_blank_line_after_comment_kept(self, fmt) -> None:
        assert fmt("// a\n\nfoo();") == "// a\n\nfoo();\n"

    def test_comment_in_empty_function(self, fmt) -> None:
        assert fmt("function f() {\n  // only\n}") == "function f() {\n  // only\n}\n"

    def test_comment_leading_object_property(self, fmt) -> None:
        source = "const x = {\n  // note\n  a: 1\n};"
        assert fmt(source) == "const x = {\n  // note\n  a: 1\n};\n"

    def test_ignored_statement_printed_verbatim(self, fmt) -> None:
        source = "// vxfmt-ignore\nconst  a   =  1;\nconst  b = 2;"
        assert fmt(source) == "// vxfmt-ignore\nconst  a   =  1;\nconst b = 2;\n"

    def test_comment_container_keeps_element_open(self, fmt) -> None:
        assert fmt("<div>{/* c */}</div>") == "<div>{/* c */}</div>;\n"

    def test_jsdoc_block_reindented(self, fmt) -> None:
        source = "function f() {\n      /**\n       * Doc\n       */\n  return 1;\n}"
        assert fmt(source) == "function f() {\n  /**\n   * Doc\n   */\n  return 1;\n}\n"
