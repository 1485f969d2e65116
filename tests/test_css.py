"""Stylesheet parsing and printing."""

from __future__ import annotations

import pytest

import vxfmt
from vxfmt.css import (
    CssAtRule,
    CssComment,
    CssDeclaration,
    CssRule,
    format_selector,
    format_value,
    parse_css,
    print_stylesheet,
)
from vxfmt.errors import ParseError
from vxfmt.layout import render


def css(source: str) -> str:
    return render(print_stylesheet(parse_css(source)))


class TestParse:
    def test_rule_with_declarations(self) -> None:
        sheet = parse_css(".a { color: red; margin: 0 }")
        rule = sheet.nodes[0]
        assert isinstance(rule, CssRule)
        assert rule.selector == ".a"
        assert [(d.prop, d.value) for d in rule.nodes] == [("color", "red"), ("margin", "0")]

    def test_important(self) -> None:
        decl = parse_css("color: red !important;").nodes[0]
        assert isinstance(decl, CssDeclaration)
        assert decl.important
        assert decl.value == "red"

    def test_at_rule_with_block(self) -> None:
        rule = parse_css("@media (max-width: 10px) { a { b: c } }").nodes[0]
        assert isinstance(rule, CssAtRule)
        assert rule.name == "media"
        assert rule.params == "(max-width: 10px)"
        assert isinstance(rule.nodes[0], CssRule)

    def test_at_rule_without_block(self) -> None:
        rule = parse_css("@import 'x.css';").nodes[0]
        assert isinstance(rule, CssAtRule)
        assert rule.nodes is None

    def test_comments(self) -> None:
        nodes = parse_css("/* a */\n// b\ncolor: red;").nodes
        assert isinstance(nodes[0], CssComment)
        assert nodes[0].text == "/* a */"
        assert nodes[1].text == "// b"

    def test_blank_line_recorded(self) -> None:
        nodes = parse_css("a: 1;\n\nb: 2;").nodes
        assert not nodes[0].blank_before
        assert nodes[1].blank_before

    def test_placeholder_statement(self) -> None:
        nodes = parse_css("@vxfmt-placeholder-0-id\ncolor: red;").nodes
        assert nodes[0] == CssDeclaration("@vxfmt-placeholder-0-id", None, semicolon=False)
        assert nodes[1].prop == "color"

    def test_semicolon_inside_string(self) -> None:
        decl = parse_css("content: ';';").nodes[0]
        assert decl.value == "';'"


class TestParseErrors:
    def test_unclosed_block(self) -> None:
        with pytest.raises(ParseError, match="unclosed block"):
            parse_css("a { color: red;")

    def test_stray_closing_brace(self) -> None:
        with pytest.raises(ParseError, match="unexpected '}'"):
            parse_css("}")

    def test_declaration_without_colon(self) -> None:
        with pytest.raises(ParseError, match="expected ':'"):
            parse_css("a { color red; }")

    def test_unterminated_comment(self) -> None:
        with pytest.raises(ParseError, match="unterminated comment"):
            parse_css("/* a")


class TestFormatHelpers:
    def test_value_commas(self) -> None:
        assert format_value("a ,b,   c") == "a, b, c"

    def test_value_keeps_function_commas(self) -> None:
        assert format_value("rgba(0,0,0,0.5)") == "rgba(0,0,0,0.5)"

    def test_selector_combinators(self) -> None:
        assert format_selector("a>b,  c   d") == ["a > b", "c d"]


class TestPrint:
    def test_rule(self) -> None:
        assert css(".a{color:red}") == ".a {\n  color: red;\n}\n"

    def test_selector_list_one_per_line(self) -> None:
        assert css("a,b{c:d}") == "a,\nb {\n  c: d;\n}\n"

    def test_property_lowercased(self) -> None:
        assert css("COLOR: red;") == "color: red;\n"

    def test_custom_property_kept(self) -> None:
        assert css("--Main-Color:  #fff;") == "--Main-Color: #fff;\n"

    def test_empty_block(self) -> None:
        assert css("a {}") == "a {\n}\n"

    def test_important(self) -> None:
        assert css("a: b!important") == "a: b !important;\n"

    def test_blank_line_kept(self) -> None:
        assert css("a: 1;\n\n\nb: 2;") == "a: 1;\n\nb: 2;\n"

    def test_empty_stylesheet(self) -> None:
        assert css("") == ""

    def test_at_rule(self) -> None:
        assert css("@MEDIA screen{a{b:c}}") == "@media screen {\n  a {\n    b: c;\n  }\n}\n"


class TestCssParser:
    def test_format_with_css_parser(self) -> None:
        assert vxfmt.format("a{b:c}", parser="css") == "a {\n  b: c;\n}\n"
