"""Pipeline orchestration: parse, attach comments, print, lay out."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from vxfmt.ast import Node, child_nodes
from vxfmt.comments import attach_comments
from vxfmt.css import parse_css, print_stylesheet
from vxfmt.doc import Doc
from vxfmt.layout import render_with_cursor
from vxfmt.options import FormatOptions
from vxfmt.parser import ParseResult, parse
from vxfmt.path import AstPath, PrintContext
from vxfmt.printer import print_path

logger = logging.getLogger(__name__)


def parse_source(source: str, options: FormatOptions) -> ParseResult:
    """Run the Adapter selected by ``options.parser``."""
    return parse(source, html=options.parser == "html")


def print_tree(
    result: ParseResult,
    options: FormatOptions,
    *,
    fragment: bool = False,
    cursor_node: Node | None = None,
) -> Doc:
    """Attach comments to a parsed tree and print it to a Doc.

    Raises CommentNotPrintedError if any attached comment was not emitted.
    """
    comments = attach_comments(result.root, result.comments, result.source)

    def print_fn(path: AstPath, **flags: Any) -> Doc:
        return print_path(path, ctx, **flags)

    def text_to_doc(text: str, parser: str) -> Doc:
        return text_to_doc_with_options(text, dataclasses.replace(options, parser=parser))

    ctx = PrintContext(
        options,
        result.source,
        comments,
        print_fn,
        text_to_doc,
        fragment=fragment,
        cursor_node=cursor_node,
    )
    doc = print_fn(AstPath(result.root))
    comments.ensure_all_printed()
    return doc


def text_to_doc_with_options(text: str, options: FormatOptions) -> Doc:
    """Doc for a whole payload in the language named by ``options.parser``."""
    if options.parser == "css":
        logger.debug("parsing stylesheet (%d chars)", len(text))
        return print_stylesheet(parse_css(text))
    logger.debug("parsing %s source (%d chars)", options.parser, len(text))
    return print_tree(parse_source(text, options), options)


def find_cursor_node(root: Node, offset: int) -> Node | None:
    """The innermost node whose span contains *offset*."""
    if not root.start <= offset <= root.end:
        return None
    node = root
    while True:
        for child in child_nodes(node):
            if child.start <= offset < child.end:
                node = child
                break
        else:
            return node


def format_text(
    source: str,
    options: FormatOptions,
    *,
    fragment: bool = False,
    cursor_offset: int | None = None,
) -> tuple[str, int | None]:
    """Format *source*; also return where *cursor_offset* moved, if given."""
    if options.parser == "css":
        doc = text_to_doc_with_options(source, options)
        text, _ = render_with_cursor(doc, options.print_width, options.tab_width, options.use_tabs)
        cursor = None if cursor_offset is None else min(cursor_offset, len(text))
        return text, cursor

    result = parse_source(source, options)
    logger.debug("parsed %d comment(s)", len(result.comments))
    cursor_node = None
    if cursor_offset is not None:
        cursor_node = find_cursor_node(result.root, cursor_offset)
    doc = print_tree(result, options, fragment=fragment, cursor_node=cursor_node)
    text, marker = render_with_cursor(doc, options.print_width, options.tab_width, options.use_tabs)
    logger.debug("rendered %d chars at width %d", len(text), options.print_width)

    if cursor_offset is None:
        return text, None
    if marker is None or cursor_node is None:
        return text, min(cursor_offset, len(text))
    return text, min(marker + (cursor_offset - cursor_node.start), len(text))
