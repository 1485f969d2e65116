"""Stylesheet sub-grammar for embedded CSS templates.

A lenient statement parser: rules, at-rules, declarations and comments are
recognized, selectors and values are kept as text with their whitespace
normalized. Interpolation placeholders may appear anywhere a word may, and a
placeholder on a line of its own is a statement by itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from vxfmt.doc import HARDLINE, Doc, concat, indent, join
from vxfmt.errors import ParseError
from vxfmt.tokens import Position, Span

PLACEHOLDER_PREFIX = "@vxfmt-placeholder-"

_PLACEHOLDER_ONLY_RE = re.compile(r"@vxfmt-placeholder-\d+-id")
_WHITESPACE_RE = re.compile(r"\s+")
_IMPORTANT_RE = re.compile(r"\s*!\s*important$", re.IGNORECASE)
_COMBINATOR_RE = re.compile(r"\s*([>+~])\s*")


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CssComment:
    text: str  # including delimiters
    blank_before: bool = False


@dataclass(frozen=True, slots=True)
class CssDeclaration:
    """``prop: value``; a bare interpolation statement has no value."""

    prop: str
    value: str | None
    important: bool = False
    semicolon: bool = True
    blank_before: bool = False


@dataclass(frozen=True, slots=True)
class CssAtRule:
    name: str
    params: str
    nodes: tuple[CssNode, ...] | None  # None: no block, ends with `;`
    blank_before: bool = False


@dataclass(frozen=True, slots=True)
class CssRule:
    selector: str
    nodes: tuple[CssNode, ...]
    blank_before: bool = False


@dataclass(frozen=True, slots=True)
class Stylesheet:
    nodes: tuple[CssNode, ...]


CssNode = CssComment | CssDeclaration | CssAtRule | CssRule


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class CssParser:
    def __init__(self, source: str) -> None:
        self._src = source
        self._pos = 0

    def parse(self) -> Stylesheet:
        return Stylesheet(self._parse_nodes(nested=False))

    # -- helpers --------------------------------------------------------

    def _position(self, offset: int) -> Position:
        line = self._src.count("\n", 0, offset) + 1
        column = offset - (self._src.rfind("\n", 0, offset) + 1) + 1
        return Position(line, column, offset)

    def _error(self, message: str, start: int, end: int | None = None) -> ParseError:
        end = start if end is None else end
        return ParseError(message, Span(self._position(start), self._position(end)), self._src)

    def _peek(self, n: int = 1) -> str:
        return self._src[self._pos : self._pos + n]

    def _skip_whitespace(self) -> bool:
        """Skip whitespace; True if it contained a blank line."""
        start = self._pos
        while self._pos < len(self._src) and self._src[self._pos].isspace():
            self._pos += 1
        return self._src.count("\n", start, self._pos) > 1

    # -- statements -----------------------------------------------------

    def _parse_nodes(self, nested: bool) -> tuple[CssNode, ...]:
        open_pos = self._pos - 1
        nodes: list[CssNode] = []
        while True:
            blank = self._skip_whitespace() and bool(nodes)
            if self._pos >= len(self._src):
                if nested:
                    raise self._error("unclosed block", open_pos, open_pos + 1)
                return tuple(nodes)
            ch = self._peek()
            if ch == "}":
                if not nested:
                    raise self._error("unexpected '}'", self._pos, self._pos + 1)
                self._pos += 1
                return tuple(nodes)
            if ch == ";":
                self._pos += 1
                continue
            if self._peek(2) == "/*":
                nodes.append(CssComment(self._read_block_comment(), blank))
                continue
            if self._peek(2) == "//":
                end = self._src.find("\n", self._pos)
                end = len(self._src) if end == -1 else end
                nodes.append(CssComment(self._src[self._pos : end].rstrip(), blank))
                self._pos = end
                continue
            nodes.append(self._parse_statement(blank))

    def _read_block_comment(self) -> str:
        start = self._pos
        end = self._src.find("*/", start + 2)
        if end == -1:
            raise self._error("unterminated comment", start, start + 2)
        self._pos = end + 2
        return self._src[start : self._pos]

    def _scan_prelude(self) -> tuple[str, str]:
        """Read up to a top-level ``;``, ``{`` or ``}``; return (text, stop)."""
        start = self._pos
        depth = 0
        while self._pos < len(self._src):
            ch = self._src[self._pos]
            if ch in "\"'":
                self._skip_string(ch)
                continue
            if self._src.startswith("/*", self._pos):
                self._read_block_comment()
                continue
            if ch in "([":
                depth += 1
            elif ch in ")]":
                depth = max(0, depth - 1)
            elif depth == 0 and ch in ";{}":
                return self._src[start : self._pos], ch
            elif ch == "\n" and _PLACEHOLDER_ONLY_RE.fullmatch(self._src[start : self._pos].strip()):
                return self._src[start : self._pos], "\n"
            self._pos += 1
        return self._src[start:], ""

    def _skip_string(self, quote: str) -> None:
        start = self._pos
        self._pos += 1
        while self._pos < len(self._src):
            ch = self._src[self._pos]
            if ch == "\\":
                self._pos += 2
                continue
            self._pos += 1
            if ch == quote:
                return
            if ch == "\n":
                break
        raise self._error("unterminated string", start, self._pos)

    def _parse_statement(self, blank: bool) -> CssNode:
        start = self._pos
        text, stop = self._scan_prelude()
        text = text.strip()
        is_placeholder = text.startswith(PLACEHOLDER_PREFIX)

        if stop == "{":
            self._pos += 1
            nodes = self._parse_nodes(nested=True)
            if text.startswith("@") and not is_placeholder:
                name, params = _split_at_rule(text)
                return CssAtRule(name, params, nodes, blank)
            if not text:
                raise self._error("expected a selector", start, start + 1)
            return CssRule(text, nodes, blank)

        semicolon = stop == ";"
        if semicolon:
            self._pos += 1
        if _PLACEHOLDER_ONLY_RE.fullmatch(text):
            return CssDeclaration(text, None, semicolon=semicolon, blank_before=blank)
        if text.startswith("@") and not is_placeholder:
            name, params = _split_at_rule(text)
            return CssAtRule(name, params, None, blank)
        prop, colon, value = text.partition(":")
        if not colon:
            raise self._error("expected ':' in declaration", start, start + len(text))
        important = bool(_IMPORTANT_RE.search(value))
        if important:
            value = _IMPORTANT_RE.sub("", value)
        return CssDeclaration(prop.strip(), value.strip(), important, True, blank)


def _split_at_rule(text: str) -> tuple[str, str]:
    match = re.match(r"@([\w-]+)\s*(.*)", text, re.DOTALL)
    if match is None:
        return text[1:], ""
    return match.group(1), match.group(2)


def parse_css(source: str) -> Stylesheet:
    """Parse a stylesheet; raises ParseError on unbalanced input."""
    return CssParser(source).parse()


# ---------------------------------------------------------------------------
# Printer
# ---------------------------------------------------------------------------


def _collapse(text: str) -> str:
    """Collapse whitespace runs outside quoted strings."""
    out: list[str] = []
    quote = ""
    pending_space = False
    for ch in text.strip():
        if quote:
            out.append(ch)
            if ch == quote:
                quote = ""
            continue
        if ch.isspace():
            pending_space = True
            continue
        if pending_space:
            out.append(" ")
            pending_space = False
        if ch in "\"'":
            quote = ch
        out.append(ch)
    return "".join(out)


def _split_top_level(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    quote = ""
    current: list[str] = []
    for ch in text:
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "\"'":
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(0, depth - 1)
        elif ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def format_value(value: str) -> str:
    """``a ,b`` -> ``a, b`` with whitespace collapsed."""
    parts = [_collapse(part) for part in _split_top_level(value, ",")]
    return ", ".join(parts)


def format_selector(selector: str) -> list[str]:
    """One entry per comma-separated selector, combinators spaced."""
    result = []
    for part in _split_top_level(selector, ","):
        part = _collapse(part)
        if "[" not in part and "(" not in part:
            part = _COMBINATOR_RE.sub(r" \1 ", part).strip()
        result.append(part)
    return result


def _print_node(node: CssNode) -> Doc:
    match node:
        case CssComment():
            return node.text
        case CssDeclaration():
            if node.value is None:
                return node.prop + (";" if node.semicolon else "")
            prop = node.prop
            if not prop.startswith(("--", "$", PLACEHOLDER_PREFIX)):
                prop = prop.lower()
            value = node.value if prop.startswith("--") else format_value(node.value)
            return concat(
                [prop, ":", " " + value if value else "", " !important" if node.important else "", ";"]
            )
        case CssAtRule():
            head = "@" + node.name.lower()
            params = format_value(node.params) if node.params else ""
            if params:
                head += " " + params
            if node.nodes is None:
                return head + ";"
            return concat([head, " ", _print_block(node.nodes)])
        case CssRule():
            selector = join(concat([",", HARDLINE]), format_selector(node.selector))
            return concat([selector, " ", _print_block(node.nodes)])
    raise TypeError(f"unknown stylesheet node {node!r}")


def _print_block(nodes: tuple[CssNode, ...]) -> Doc:
    if not nodes:
        return concat(["{", HARDLINE, "}"])
    return concat(["{", indent(concat([HARDLINE, _print_nodes(nodes)])), HARDLINE, "}"])


def _print_nodes(nodes: tuple[CssNode, ...]) -> Doc:
    parts: list[Doc] = []
    for i, node in enumerate(nodes):
        if i > 0:
            parts.append(HARDLINE)
            if node.blank_before:
                parts.append(HARDLINE)
        parts.append(_print_node(node))
    return concat(parts)


def print_stylesheet(sheet: Stylesheet) -> Doc:
    """Doc for a whole stylesheet, ending with a hard line."""
    if not sheet.nodes:
        return ""
    return concat([_print_nodes(sheet.nodes), HARDLINE])
