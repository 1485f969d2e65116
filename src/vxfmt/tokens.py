"""Token types, source positions, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    NAME = auto()  # identifiers and keywords
    NUMBER = auto()  # numeric literal, raw text kept in value
    STRING = auto()  # quoted string, raw text including quotes
    PUNCT = auto()  # operators and punctuation
    PRIVATE_NAME = auto()  # #field inside class bodies

    # Markup sub-tokens
    JSX_NAME = auto()  # tag or attribute name, may contain '-'
    JSX_STRING = auto()  # attribute string, no escape processing
    JSX_TEXT = auto()  # raw text between tags
    HTML_COMMENT = auto()  # <!-- ... --> inside an HTML payload

    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position, end exclusive."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token.

    ``newline_before`` records whether a line terminator was skipped between
    the previous token and this one; the parser uses it for automatic
    semicolon insertion and for restricted productions such as ``return``.
    """

    type: TokenType
    value: str
    span: Span
    newline_before: bool = False


def is_id_start(ch: str) -> bool:
    """Return True if ch may start an identifier."""
    return ch.isalpha() or ch == "_" or ch == "$"


def is_id_part(ch: str) -> bool:
    """Return True if ch may continue an identifier."""
    return ch.isalnum() or ch == "_" or ch == "$"


def is_jsx_name_part(ch: str) -> bool:
    """Return True if ch may continue a markup tag or attribute name."""
    return is_id_part(ch) or ch == "-"


# Whitespace that is insignificant in markup text.
JSX_WHITESPACE = " \n\r\t"
