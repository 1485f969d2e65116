"""Tests for the --debug dumps."""

from __future__ import annotations

import io

from vxfmt.debug import dump_ast, dump_doc
from vxfmt.doc import HARDLINE, SOFTLINE, concat, group, indent


class TestDumpAst:
    def test_tree_shape(self, parse_source) -> None:
        out = io.StringIO()
        dump_ast(parse_source("x = 1;").root, file=out)
        lines = out.getvalue().splitlines()
        assert lines[0].startswith("Program")
        assert lines[1].strip().startswith("body[0]: ExpressionStatement")
        assert any("operator='='" in line for line in lines)

    def test_comments_listed(self, parse_source) -> None:
        from vxfmt.comments import attach_comments

        result = parse_source("// hi\nx;")
        attach_comments(result.root, result.comments, result.source)
        out = io.StringIO()
        dump_ast(result.root, file=out)
        assert "comment (leading)" in out.getvalue()


class TestDumpDoc:
    def test_commands(self) -> None:
        out = io.StringIO()
        dump_doc(group(concat(["a", indent(concat([SOFTLINE, "b"])), HARDLINE])), file=out)
        text = out.getvalue()
        assert text.splitlines()[0] == "group"
        assert "indent" in text
        assert "softline" in text
        assert "hardline" in text
        assert "break_parent" in text
