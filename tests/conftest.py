"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

import vxfmt
from vxfmt.ast import Node, Program
from vxfmt.lexer import Lexer, Mode
from vxfmt.parser import ParseResult, parse
from vxfmt.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that scans script source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        lexer = Lexer(source)
        tokens = []
        while True:
            tok = lexer.next(Mode.SCRIPT)
            if tok.type == TokenType.EOF:
                return tokens
            tokens.append(tok)

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses script source and returns the ParseResult."""

    def _parse(source: str) -> ParseResult:
        return parse(source)

    return _parse


@pytest.fixture
def fmt():
    """Return a helper that formats script source with keyword options."""

    def _fmt(source: str, **options) -> str:
        return vxfmt.format(source, parser="script", **options)

    return _fmt


def first_statement(result: ParseResult) -> Node:
    """The first top-level statement of a parsed program."""
    assert isinstance(result.root, Program), f"Expected Program, got {result.root.type}"
    assert result.root.body, "Expected at least one statement"
    return result.root.body[0]


def first_expression(result: ParseResult) -> Node:
    """The expression of the first top-level expression statement."""
    stmt = first_statement(result)
    assert stmt.type == "ExpressionStatement", f"Expected ExpressionStatement, got {stmt.type}"
    return stmt.expression


def assert_idempotent(source: str, **options) -> str:
    """Format twice and assert the second pass changes nothing."""
    once = vxfmt.format(source, **options)
    twice = vxfmt.format(once, **options)
    assert once == twice, f"Not idempotent:\n{once!r}\n{twice!r}"
    return once


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
