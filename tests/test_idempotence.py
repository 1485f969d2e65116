"""Formatting already-formatted output changes nothing."""

from __future__ import annotations

import pytest

import vxfmt
from vxfmt.parser import parse

from tests.conftest import assert_idempotent

SCRIPTS = [
    "const a = 1",
    "if (a) { b() } else if (c) { d() } else { e() }",
    "function add(a, b) { return a + b }",
    "const f = async (x) => { await x }",
    "class A extends B { constructor() { super() } static x = 1; get y() { return 2 } }",
    "import a, { b as c } from 'mod'\nexport { a, c }",
    "const o = { a: 1, 'b-c': [1, 2, 3], ...rest }",
    "promise.then(a).then(b).then(c)",
    "const message = isError ? 'something went wrong with the request' : 'all good here'",
    "foo(aaaaaaaaaaaaaaaaaaaa, bbbbbbbbbbbbbbbbbbbbbbbb, cccccccccccccccccccccc, dddddddddd)",
    "// leading\nfoo() // trailing\n\n/* block */\nbar()",
    "const x = `a ${b} c`",
    "const a = <div className=\"x\"><span>{label}</span></div>",
    "const Button = styled.button`color:red;padding:${p}px;`",
]


class TestScripts:
    @pytest.mark.parametrize("source", SCRIPTS)
    def test_default_options(self, source: str) -> None:
        assert_idempotent(source, parser="script")

    @pytest.mark.parametrize("source", [s for s in SCRIPTS if not s.startswith("class")])
    def test_alternate_options(self, source: str) -> None:
        assert_idempotent(
            source,
            parser="script",
            semi=False,
            single_quote=True,
            trailing_comma="all",
            arrow_parens="always",
        )


class TestOtherLanguages:
    def test_stylesheet(self) -> None:
        assert_idempotent(
            "@media (max-width:100px){.a,.b{color:red;margin:0 auto}}",
            parser="css",
        )

    def test_fragment(self) -> None:
        source = "<div>\n  <p>Hello {name}</p>\n</div>\n<footer />"
        once = vxfmt.format_fragment(source)
        assert vxfmt.format_fragment(once) == once


class TestOutputShape:
    @pytest.mark.parametrize("source", SCRIPTS)
    def test_lines_fit_print_width(self, source: str) -> None:
        formatted = vxfmt.format(source, parser="script")
        assert all(len(line) <= 80 for line in formatted.splitlines())

    @pytest.mark.parametrize("source", SCRIPTS)
    def test_comments_survive(self, source: str) -> None:
        formatted = vxfmt.format(source, parser="script")
        for comment in parse(source).comments:
            assert comment.text() in formatted
