"""Test error messages, position accuracy, and context snippets."""

from dataclasses import dataclass

import pytest

import vxfmt
from vxfmt.ast import Node, Program
from vxfmt.core import print_tree
from vxfmt.errors import (
    AdapterError,
    CommentNotPrintedError,
    FormatError,
    LexError,
    ParseError,
    UnsupportedNodeTypeError,
)
from vxfmt.options import FormatOptions
from vxfmt.parser import ParseResult, parse
from vxfmt.tokens import Position, Span


def parse_error(source: str) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        parse(source)
    return exc_info.value


class TestErrorPositions:
    def test_lex_error_position(self):
        with pytest.raises(LexError) as exc_info:
            parse('a = "abc')
        err = exc_info.value
        assert err.position.line == 1
        assert err.position.column == 5

    def test_error_on_second_line(self):
        err = parse_error("a;\nb c")
        assert err.span.start.line == 2
        assert err.span.start.column == 3

    def test_nul_character(self):
        with pytest.raises(LexError, match="NUL"):
            parse("a\0b")


class TestErrorFormatting:
    def test_format_contains_line(self):
        formatted = parse_error("some text here").format()
        assert "some text here" in formatted

    def test_format_contains_carets(self):
        formatted = parse_error("a b").format()
        assert "^" in formatted

    def test_format_contains_error_prefix(self):
        formatted = parse_error("a b").format()
        assert formatted.startswith("error:")

    def test_format_contains_position(self):
        formatted = parse_error("a b").format()
        assert "input.vx:1:3" in formatted

    def test_format_with_custom_filename(self):
        formatted = parse_error("a b").format("view.vx")
        assert "--> view.vx:1:3" in formatted

    def test_caret_under_token(self):
        formatted = parse_error("a bcd").format()
        assert formatted.splitlines()[-1].endswith("   ^^^")

    def test_str_is_formatted(self):
        err = parse_error("a b")
        assert str(err) == err.format()


class TestHierarchy:
    def test_adapter_errors_are_format_errors(self):
        assert issubclass(LexError, AdapterError)
        assert issubclass(ParseError, AdapterError)
        assert issubclass(AdapterError, FormatError)

    def test_public_api_raises_adapter_error(self):
        with pytest.raises(AdapterError):
            vxfmt.format("const = 1")


class TestPrinterErrors:
    def test_unsupported_node_type_message(self):
        span = Span(Position(3, 4, 20), Position(3, 9, 25))
        err = UnsupportedNodeTypeError("WithStatement", span)
        assert str(err) == "unsupported node type 'WithStatement' at 3:4"

    def test_comment_not_printed_message(self):
        span = Span(Position(1, 1, 0), Position(1, 5, 4))
        err = CommentNotPrintedError("/**/", span)
        assert "was not printed" in str(err)
        assert isinstance(err, FormatError)

    def test_unknown_node_raises_from_printer(self):
        @dataclass(frozen=True, slots=True, eq=False)
        class WithStatement(Node):
            pass

        span = Span(Position(1, 1, 0), Position(1, 5, 4))
        result = ParseResult(Program(body=(WithStatement(span=span),), span=span), [], "with")
        with pytest.raises(UnsupportedNodeTypeError) as exc_info:
            print_tree(result, FormatOptions(parser="script"))
        assert str(exc_info.value) == "unsupported node type 'WithStatement' at 1:1"
        assert exc_info.value.node_type == "WithStatement"
