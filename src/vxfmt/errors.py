"""Error types with formatted source context."""

from __future__ import annotations

from typing import Any

from vxfmt.tokens import Position, Span


class FormatError(Exception):
    """Base class for every error raised by a format call."""


def _snippet(message: str, span: Span, source: str, filename: str) -> str:
    """Render a one-line source excerpt with carets under *span*."""
    lines = source.splitlines(keepends=True)
    line_idx = span.start.line - 1
    col = span.start.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline the full span when on one line, otherwise to end of line
    if span.end.line == span.start.line:
        underline_len = max(1, span.end.column - col)
    else:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(span.start.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{span.start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class AdapterError(FormatError):
    """Malformed input, raised by the lexer or parser with source context."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.vx") -> str:
        return _snippet(self.message, self.span, self.source, filename)


class LexError(AdapterError):
    """Raised on the first lexing error."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.position = position
        super().__init__(message, Span(position, position), source)


class ParseError(AdapterError):
    """Raised on the first parse error."""


class UnsupportedNodeTypeError(FormatError):
    """The printer met a node type outside its closed set."""

    def __init__(self, node_type: str, span: Span | None = None) -> None:
        self.node_type = node_type
        self.span = span
        where = ""
        if span is not None:
            where = f" at {span.start.line}:{span.start.column}"
        super().__init__(f"unsupported node type {node_type!r}{where}")


class EmbeddedSubstitutionError(FormatError):
    """Placeholders in an embedded payload did not match its expressions."""

    def __init__(self, language: str, expected: int, actual: int) -> None:
        self.language = language
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"embedded {language}: expected {expected} substitution(s), "
            f"found {actual} placeholder(s) in formatted output"
        )


class OptionValidationError(FormatError):
    """An option name or value was rejected before formatting started."""

    def __init__(self, name: str, value: Any, reason: str) -> None:
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"invalid option {name}={value!r}: {reason}")


class CommentNotPrintedError(FormatError):
    """A comment was attached but never emitted by the printer."""

    def __init__(self, text: str, span: Span) -> None:
        self.text = text
        self.span = span
        super().__init__(
            f"comment {text!r} at {span.start.line}:{span.start.column} was not printed"
        )
