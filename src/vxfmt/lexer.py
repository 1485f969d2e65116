"""Modal scanner for script, markup and HTML source.

The parser drives the scanner one token at a time and chooses the mode for
each token, since the same characters mean different things inside a tag,
between tags, and in script code. Comments met while skipping trivia are
collected on the lexer; ``seek`` rewinds and forgets comments past the new
position so speculative parses never record a comment twice.
"""

from __future__ import annotations

from enum import Enum, auto

from vxfmt.ast import Comment
from vxfmt.errors import LexError
from vxfmt.tokens import (
    Position,
    Span,
    Token,
    TokenType,
    is_id_part,
    is_id_start,
    is_jsx_name_part,
)


class Mode(Enum):
    SCRIPT = auto()
    JSX_TAG = auto()
    JSX_CHILD = auto()
    HTML_TAG = auto()
    HTML_VALUE = auto()
    HTML_CHILD = auto()


_PUNCTUATORS = sorted(
    [
        ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
        "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--", "+=", "-=",
        "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>", "|>",
        "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-", "*", "/", "%",
        "&", "|", "^", "!", "~", "?", ":", "=", ".", "@",
    ],
    key=len,
    reverse=True,
)

_WHITESPACE = " \t\n\r\v\f\u00a0\ufeff\u2028\u2029"
_TAG_PUNCT = "<>/={}:."


class Lexer:
    """Scan source text into tokens on demand."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.comments: list[Comment] = []
        self._pos = 0
        self._line = 1
        self._col = 1

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def position(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def seek(self, position: Position) -> None:
        """Rewind (or advance) to *position*, dropping comments past it."""
        self._pos = position.offset
        self._line = position.line
        self._col = position.column
        while self.comments and self.comments[-1].start >= position.offset:
            self.comments.pop()

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return ""

    def _startswith(self, text: str) -> bool:
        return self.source.startswith(text, self._pos)

    def _advance(self, count: int = 1) -> str:
        chunk = self.source[self._pos : self._pos + count]
        for ch in chunk:
            if ch == "\n":
                self._line += 1
                self._col = 1
            else:
                self._col += 1
        self._pos += len(chunk)
        return chunk

    def _token(self, tt: TokenType, value: str, start: Position, newline: bool = False) -> Token:
        return Token(tt, value, Span(start, self.position()), newline)

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self.position()
        return LexError(message, pos, self.source)

    # ------------------------------------------------------------------
    # Trivia
    # ------------------------------------------------------------------

    def _skip_trivia(self) -> bool:
        """Skip whitespace and comments; return True if a newline was crossed."""
        newline = False
        while self._pos < len(self.source):
            ch = self._peek()
            if ch in _WHITESPACE:
                if ch in "\n\r\u2028\u2029":
                    newline = True
                self._advance()
            elif self._startswith("//"):
                start = self.position()
                self._advance(2)
                begin = self._pos
                while self._pos < len(self.source) and self._peek() not in "\n\r":
                    self._advance()
                self._record("line", self.source[begin : self._pos], start)
            elif self._startswith("/*"):
                start = self.position()
                end = self.source.find("*/", self._pos + 2)
                if end < 0:
                    raise self._error("unterminated block comment", start)
                value = self.source[self._pos + 2 : end]
                if "\n" in value:
                    newline = True
                self._advance(end + 2 - self._pos)
                self._record("block", value, start)
            else:
                break
        return newline

    def _record(self, kind: str, value: str, start: Position) -> None:
        if self.comments and self.comments[-1].start >= start.offset:
            return
        self.comments.append(Comment(kind, value, Span(start, self.position())))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def next(self, mode: Mode = Mode.SCRIPT) -> Token:
        """Scan the next token under *mode*."""
        if mode is Mode.SCRIPT:
            return self._next_script()
        if mode is Mode.JSX_CHILD or mode is Mode.HTML_CHILD:
            return self._next_child(mode is Mode.HTML_CHILD)
        if mode is Mode.HTML_VALUE:
            return self._next_html_value()
        return self._next_tag(mode is Mode.HTML_TAG)

    # ------------------------------------------------------------------
    # Script mode
    # ------------------------------------------------------------------

    def _next_script(self) -> Token:
        newline = self._skip_trivia()
        start = self.position()
        ch = self._peek()

        if ch == "":
            return self._token(TokenType.EOF, "", start, newline)
        if ch == "\0":
            raise self._error("NUL character in source")

        if is_id_start(ch):
            while is_id_part(self._peek()):
                self._advance()
            return self._token(TokenType.NAME, self.source[start.offset : self._pos], start, newline)

        if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
            self._scan_number()
            return self._token(TokenType.NUMBER, self.source[start.offset : self._pos], start, newline)

        if ch in "'\"":
            self._scan_string(ch)
            return self._token(TokenType.STRING, self.source[start.offset : self._pos], start, newline)

        if ch == "`":
            self._advance()
            return self._token(TokenType.PUNCT, "`", start, newline)

        if ch == "#" and is_id_start(self._peek(1)):
            self._advance()
            while is_id_part(self._peek()):
                self._advance()
            value = self.source[start.offset : self._pos]
            return self._token(TokenType.PRIVATE_NAME, value, start, newline)

        for punct in _PUNCTUATORS:
            if self._startswith(punct):
                # `a?.5:b` is a conditional, not optional chaining
                if punct == "?." and self._peek(2).isdigit():
                    continue
                self._advance(len(punct))
                return self._token(TokenType.PUNCT, punct, start, newline)

        raise self._error(f"unexpected character {ch!r}")

    def _scan_number(self) -> None:
        if self._peek() == "0" and self._peek(1) in ("x", "X", "o", "O", "b", "B"):
            self._advance(2)
            while self._peek().isalnum() or self._peek() == "_":
                self._advance()
            return
        while self._peek().isdigit() or self._peek() == "_":
            self._advance()
        if self._peek() == ".":
            self._advance()
            while self._peek().isdigit() or self._peek() == "_":
                self._advance()
        if self._peek() in ("e", "E") and (
            self._peek(1).isdigit() or (self._peek(1) in "+-" and self._peek(2).isdigit())
        ):
            self._advance(2)
            while self._peek().isdigit() or self._peek() == "_":
                self._advance()
        if self._peek() == "n":
            self._advance()
        if is_id_start(self._peek()):
            raise self._error("identifier directly after number")

    def _scan_string(self, quote: str) -> None:
        start = self.position()
        self._advance()
        while True:
            ch = self._peek()
            if ch == "":
                raise self._error("unterminated string literal", start)
            if ch == "\n":
                raise self._error("newline in string literal", start)
            if ch == "\\":
                self._advance(2)
                continue
            self._advance()
            if ch == quote:
                return

    def scan_template_chunk(self) -> tuple[str, bool, Span]:
        """Scan raw template text up to `` ` `` or ``${``.

        Returns the raw text, whether the template ended, and the text's span.
        The closing delimiter is consumed.
        """
        start = self.position()
        while True:
            ch = self._peek()
            if ch == "":
                raise self._error("unterminated template literal", start)
            if ch == "\\":
                self._advance(2)
                continue
            if ch == "`":
                span = Span(start, self.position())
                raw = self.source[start.offset : self._pos]
                self._advance()
                return raw, True, span
            if ch == "$" and self._peek(1) == "{":
                span = Span(start, self.position())
                raw = self.source[start.offset : self._pos]
                self._advance(2)
                return raw, False, span
            self._advance()

    # ------------------------------------------------------------------
    # Markup modes
    # ------------------------------------------------------------------

    def _next_tag(self, html: bool) -> Token:
        if html:
            self._skip_html_space()
        else:
            self._skip_trivia()
        start = self.position()
        ch = self._peek()
        if ch == "":
            return self._token(TokenType.EOF, "", start)
        if is_id_start(ch):
            while is_jsx_name_part(self._peek()) or (html and self._peek() in ":."):
                self._advance()
            return self._token(TokenType.JSX_NAME, self.source[start.offset : self._pos], start)
        if ch in "'\"":
            return self._scan_jsx_string(ch, start)
        if ch in _TAG_PUNCT:
            self._advance()
            return self._token(TokenType.PUNCT, ch, start)
        raise self._error(f"unexpected character {ch!r} in tag")

    def _skip_html_space(self) -> None:
        while self._peek() and self._peek() in _WHITESPACE:
            self._advance()

    def _scan_jsx_string(self, quote: str, start: Position) -> Token:
        self._advance()
        end = self.source.find(quote, self._pos)
        if end < 0:
            raise self._error("unterminated attribute string", start)
        self._advance(end + 1 - self._pos)
        return self._token(TokenType.JSX_STRING, self.source[start.offset : self._pos], start)

    def _next_html_value(self) -> Token:
        self._skip_html_space()
        start = self.position()
        ch = self._peek()
        if ch in "'\"":
            return self._scan_jsx_string(ch, start)
        while self._peek() and self._peek() not in _WHITESPACE and self._peek() != ">":
            if self._startswith("/>"):
                break
            self._advance()
        if self._pos == start.offset:
            raise self._error("expected attribute value")
        value = self.source[start.offset : self._pos]
        quote = "'" if '"' in value else '"'
        return self._token(TokenType.JSX_STRING, quote + value + quote, start)

    def _next_child(self, html: bool) -> Token:
        start = self.position()
        ch = self._peek()
        if ch == "":
            return self._token(TokenType.EOF, "", start)
        if self._startswith("<!--") or (html and self._startswith("<!")):
            end_marker = "-->" if self._startswith("<!--") else ">"
            end = self.source.find(end_marker, self._pos)
            if end < 0:
                raise self._error("unterminated markup comment", start)
            self._advance(end + len(end_marker) - self._pos)
            return self._token(TokenType.HTML_COMMENT, self.source[start.offset : self._pos], start)
        if ch == "<" or (ch == "{" and not html):
            self._advance()
            return self._token(TokenType.PUNCT, ch, start)
        stops = "<" if html else "<{"
        while self._peek() and self._peek() not in stops:
            if not html and self._peek() in ">}":
                raise self._error(f"unexpected {self._peek()!r} in markup text")
            self._advance()
        return self._token(TokenType.JSX_TEXT, self.source[start.offset : self._pos], start)
