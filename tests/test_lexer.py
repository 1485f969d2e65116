"""Script-mode scanning: token types, values, positions and comments."""

from __future__ import annotations

import pytest

from vxfmt.errors import LexError
from vxfmt.lexer import Lexer, Mode
from vxfmt.tokens import TokenType

from tests.conftest import assert_types, assert_values


class TestTokens:
    def test_declaration(self, lex) -> None:
        tokens = lex("const a = 1;")
        assert_types(
            tokens,
            [TokenType.NAME, TokenType.NAME, TokenType.PUNCT, TokenType.NUMBER, TokenType.PUNCT],
        )
        assert_values(tokens, ["const", "a", "=", "1", ";"])

    def test_longest_punctuator_wins(self, lex) -> None:
        assert_values(lex("a >>>= b === c"), ["a", ">>>=", "b", "===", "c"])

    def test_string_keeps_raw_text(self, lex) -> None:
        tokens = lex(r'"a\"b"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == r'"a\"b"'

    def test_numbers(self, lex) -> None:
        assert_values(lex("0xFF 1.5e3 .5 10n"), ["0xFF", "1.5e3", ".5", "10n"])

    def test_optional_chaining_vs_conditional(self, lex) -> None:
        assert_values(lex("a?.b"), ["a", "?.", "b"])
        assert_values(lex("a?.5:b"), ["a", "?", ".5", ":", "b"])

    def test_private_name(self, lex) -> None:
        tokens = lex("#count")
        assert tokens[0].type == TokenType.PRIVATE_NAME
        assert tokens[0].value == "#count"

    def test_decorator_at(self, lex) -> None:
        assert_values(lex("@dec"), ["@", "dec"])


class TestPositions:
    def test_offsets_and_columns(self, lex) -> None:
        tokens = lex("ab cd")
        start = tokens[1].span.start
        assert (start.line, start.column, start.offset) == (1, 4, 3)

    def test_newline_before(self, lex) -> None:
        tokens = lex("a\nb")
        assert not tokens[0].newline_before
        assert tokens[1].newline_before
        assert tokens[1].span.start.line == 2


class TestComments:
    def test_comments_are_collected(self) -> None:
        lexer = Lexer("a // one\n/* two */ b")
        while lexer.next(Mode.SCRIPT).type != TokenType.EOF:
            pass
        assert [c.kind for c in lexer.comments] == ["line", "block"]
        assert [c.value for c in lexer.comments] == [" one", " two "]

    def test_comments_are_not_tokens(self, lex) -> None:
        assert_values(lex("a /* x */ + b"), ["a", "+", "b"])

    def test_multiline_block_comment_counts_as_newline(self, lex) -> None:
        tokens = lex("a /*\n*/ b")
        assert tokens[1].newline_before


class TestLexErrors:
    def test_unterminated_string(self, lex) -> None:
        with pytest.raises(LexError, match="unterminated string"):
            lex('"abc')

    def test_newline_in_string(self, lex) -> None:
        with pytest.raises(LexError, match="newline in string"):
            lex('"ab\nc"')

    def test_unterminated_block_comment(self, lex) -> None:
        with pytest.raises(LexError, match="unterminated block comment"):
            lex("a /* b")

    def test_nul_character(self, lex) -> None:
        with pytest.raises(LexError, match="NUL"):
            lex("a\0b")

    def test_identifier_after_number(self, lex) -> None:
        with pytest.raises(LexError) as exc_info:
            lex("3in")
        assert exc_info.value.position.column == 2
