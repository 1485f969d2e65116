"""Markup printing: elements, fragments, attributes and children packing.

Children are laid out inside-out. Text is split into words separated by
line docs and packed with ``fill``; tags and expressions sit between them
with hard or soft separators. Whitespace that matters (a space next to a
tag) is carried by ``jsx_whitespace``, which prints as a plain space when
the line fits and as an explicit ``{" "}`` when the element breaks.
"""

from __future__ import annotations

import re
from typing import Any

from vxfmt.ast import (
    ArrayExpression,
    ArrowFunctionExpression,
    CallExpression,
    ConditionalExpression,
    ExpressionStatement,
    FunctionExpression,
    JSXAttribute,
    JSXClosingElement,
    JSXClosingFragment,
    JSXElement,
    JSXEmptyExpression,
    JSXExpressionContainer,
    JSXFragment,
    JSXIdentifier,
    JSXMemberExpression,
    JSXNamespacedName,
    JSXOpeningElement,
    JSXOpeningFragment,
    JSXSpreadAttribute,
    JSXSpreadChild,
    JSXText,
    MarkupRoot,
    Node,
    ObjectExpression,
    Program,
    StringLiteral,
    TaggedTemplateExpression,
    TemplateLiteral,
    is_binaryish,
    is_jsx,
    is_literal,
)
from vxfmt.comments import (
    IGNORE_DIRECTIVE,
    has_trailing_comment,
    print_comments,
    print_dangling_comments,
)
from vxfmt.doc import (
    HARDLINE,
    LINE,
    LINE_SUFFIX_BOUNDARY,
    SOFTLINE,
    Doc,
    Line,
    concat,
    conditional_group,
    fill,
    group,
    if_break,
    indent,
    is_empty,
    is_line_next,
    join,
    will_break,
)
from vxfmt.errors import UnsupportedNodeTypeError
from vxfmt.path import AstPath, PrintContext
from vxfmt.utils import preferred_quote

# Only space, newline, carriage return and tab are whitespace inside markup
_JSX_WHITESPACE = " \n\r\t"
_NON_WHITESPACE_RE = re.compile(f"[^{_JSX_WHITESPACE}]")
_WHITESPACE_SPLIT_RE = re.compile(f"([{_JSX_WHITESPACE}]+)")

_NO_WRAP_PARENTS = (
    ArrayExpression,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXFragment,
    ExpressionStatement,
    CallExpression,
    ConditionalExpression,
    MarkupRoot,
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _raw_text(node: Node) -> str:
    if isinstance(node, JSXText):
        return node.raw
    if isinstance(node, StringLiteral):
        return node.raw
    return ""


def is_meaningful_jsx_text(node: Node | None) -> bool:
    """Text with a non-whitespace character, or whitespace without a newline."""
    if not is_literal(node):
        return False
    text = _raw_text(node)
    return _NON_WHITESPACE_RE.search(text) is not None or "\n" not in text


def is_jsx_whitespace_expression(node: Node) -> bool:
    """``{" "}``"""
    return (
        isinstance(node, JSXExpressionContainer)
        and isinstance(node.expression, StringLiteral)
        and node.expression.value == " "
        and not node.expression.comments
    )


def is_empty_jsx_element(node: JSXElement) -> bool:
    if not node.children:
        return True
    if len(node.children) > 1:
        return False
    child = node.children[0]
    return is_literal(child) and not is_meaningful_jsx_text(child)


def has_jsx_ignore_comment(path: AstPath) -> bool:
    """True if the previous markup sibling is an ignore-directive comment."""
    node = path.node
    parent = path.parent()
    if not is_jsx(node) or not is_jsx(parent):
        return False
    index = next(i for i, child in enumerate(parent.children) if child is node)
    previous = None
    for candidate in reversed(parent.children[:index]):
        if isinstance(candidate, JSXText) and not is_meaningful_jsx_text(candidate):
            continue
        previous = candidate
        break
    return (
        isinstance(previous, JSXExpressionContainer)
        and isinstance(previous.expression, JSXEmptyExpression)
        and any(c.value.strip() == IGNORE_DIRECTIVE for c in previous.expression.comments)
    )


def _is_element_without_closing(node: Node | None) -> bool:
    return isinstance(node, JSXElement) and node.closing_element is None


def _is_html(ctx: PrintContext) -> bool:
    return ctx.options.parser == "html"


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def print_jsx(path: AstPath, ctx: PrintContext, flags: dict[str, Any]) -> Doc:
    node = path.node
    match node:
        case JSXElement() | JSXFragment():
            elem = print_comments(path, _print_element(path, ctx), ctx)
            return _maybe_wrap_in_parens(path, ctx, elem)
        case JSXAttribute():
            return _print_attribute(path, ctx)
        case JSXIdentifier():
            return node.name
        case JSXNamespacedName():
            return join(":", [path.call(ctx.print, "namespace"), path.call(ctx.print, "name")])
        case JSXMemberExpression():
            return join(".", [path.call(ctx.print, "object"), path.call(ctx.print, "property")])
        case JSXSpreadAttribute():
            return _print_spread(path, ctx, "argument")
        case JSXExpressionContainer():
            return _print_expression_container(path, ctx)
        case JSXOpeningElement():
            return _print_opening_element(path, ctx, flags.get("self_closing", node.self_closing))
        case JSXOpeningFragment() | JSXClosingFragment():
            return _print_fragment_edge(path, ctx)
        case JSXEmptyExpression():
            requires_hardline = any(not c.is_block for c in node.comments)
            return concat(
                [
                    print_dangling_comments(path, ctx, same_indent=not requires_hardline),
                    HARDLINE if requires_hardline else "",
                ]
            )
        case JSXSpreadChild():
            return _print_spread(path, ctx, "expression")
        case JSXClosingElement():
            return concat(["</", path.call(ctx.print, "name"), ">"])
        case JSXText():
            return node.raw
    raise UnsupportedNodeTypeError(node.type, node.span)


def _print_spread(path: AstPath, ctx: PrintContext, name: str) -> Doc:
    def inner(p: AstPath) -> Doc:
        printed = concat(["...", ctx.print(p)])
        if not p.node.comments:
            return printed
        return concat([indent(concat([SOFTLINE, print_comments(p, printed, ctx)])), SOFTLINE])

    return concat(["{", path.call(inner, name), "}"])


def _print_attribute(path: AstPath, ctx: PrintContext) -> Doc:
    node: JSXAttribute = path.node
    parts: list[Doc] = [path.call(ctx.print, "name")]
    value = node.value
    if value is None:
        return concat(parts)
    if isinstance(value, StringLiteral):
        # Unescape quotes first so the preferred quote is chosen on real content
        content = value.raw[1:-1].replace("&apos;", "'").replace("&quot;", '"')
        quote = preferred_quote(content, ctx.options.jsx_single_quote)
        escape = "&apos;" if quote == "'" else "&quot;"
        printed: Doc = quote + content.replace(quote, escape) + quote
    else:
        printed = path.call(ctx.print, "value")
    parts.extend(["=", printed])
    return concat(parts)


def _print_expression_container(path: AstPath, ctx: PrintContext) -> Doc:
    node: JSXExpressionContainer = path.node
    parent = path.parent()
    expression = node.expression
    prevent_inline = isinstance(parent, JSXAttribute) and bool(expression.comments)
    should_inline = not prevent_inline and (
        isinstance(
            expression,
            (
                ArrayExpression,
                ObjectExpression,
                ArrowFunctionExpression,
                CallExpression,
                FunctionExpression,
                JSXEmptyExpression,
                TemplateLiteral,
                TaggedTemplateExpression,
            ),
        )
        or (
            isinstance(parent, (JSXElement, JSXFragment, MarkupRoot))
            and (isinstance(expression, ConditionalExpression) or is_binaryish(expression))
        )
    )
    printed = path.call(ctx.print, "expression")
    if should_inline:
        return group(concat(["{", printed, LINE_SUFFIX_BOUNDARY, "}"]))
    return group(
        concat(["{", indent(concat([SOFTLINE, printed])), SOFTLINE, LINE_SUFFIX_BOUNDARY, "}"])
    )


def _print_opening_element(path: AstPath, ctx: PrintContext, self_closing: bool) -> Doc:
    node: JSXOpeningElement = path.node
    attributes = node.attributes
    name_has_comments = bool(node.name.comments)
    name = path.call(ctx.print, "name")

    # <br />
    if self_closing and not attributes and not name_has_comments:
        return concat(["<", name, " />"])

    # A single text attribute never breaks the tag
    if (
        len(attributes) == 1
        and isinstance(attributes[0], JSXAttribute)
        and isinstance(attributes[0].value, StringLiteral)
        and "\n" not in attributes[0].value.value
        and not name_has_comments
        and not attributes[0].comments
    ):
        return group(
            concat(
                [
                    "<",
                    name,
                    " ",
                    concat(path.map(ctx.print, "attributes")),
                    " />" if self_closing else ">",
                ]
            )
        )

    last_attr_has_trailing_comments = bool(attributes) and has_trailing_comment(attributes[-1])
    bracket_same_line = (not attributes and not name_has_comments) or (
        ctx.options.jsx_bracket_same_line
        and (not name_has_comments or bool(attributes))
        and not last_attr_has_trailing_comments
    )
    # A multi-line string value keeps the tag expanded
    should_break = any(
        isinstance(attr, JSXAttribute)
        and isinstance(attr.value, StringLiteral)
        and "\n" in attr.value.value
        for attr in attributes
    )

    if self_closing:
        closing: list[Doc] = [LINE, "/>"]
    elif bracket_same_line:
        closing = [">", ""]
    else:
        closing = [SOFTLINE, ">"]
    return group(
        concat(
            [
                "<",
                name,
                concat(
                    [
                        indent(concat(path.map(lambda p: concat([LINE, ctx.print(p)]), "attributes"))),
                        closing[0],
                    ]
                ),
                closing[1],
            ]
        ),
        should_break=should_break,
    )


def _print_fragment_edge(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    has_comment = bool(node.comments)
    has_own_line_comment = has_comment and not all(c.is_block for c in node.comments)
    is_opening = isinstance(node, JSXOpeningFragment)
    if has_own_line_comment:
        lead: Doc = HARDLINE
    elif has_comment and not is_opening:
        lead = " "
    else:
        lead = ""
    return concat(
        [
            "<" if is_opening else "</",
            indent(concat([lead, print_dangling_comments(path, ctx, same_indent=True)])),
            HARDLINE if has_own_line_comment else "",
            ">",
        ]
    )


def _maybe_wrap_in_parens(path: AstPath, ctx: PrintContext, elem: Doc) -> Doc:
    parent = path.parent()
    if parent is None or isinstance(parent, _NO_WRAP_PARENTS):
        return elem
    should_break = path.has_ancestor_types(
        (ArrowFunctionExpression, CallExpression, JSXExpressionContainer)
    )
    return group(
        concat([if_break("("), indent(concat([SOFTLINE, elem])), SOFTLINE, if_break(")")]),
        should_break=should_break,
    )


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------


class _Separators:
    """Separator choice between words, tags and expressions of one element."""

    def __init__(self, fbt: bool) -> None:
        self.fbt = fbt

    def no_whitespace(self, child: Doc, child_node: Node, next_node: Node | None) -> Doc:
        if self.fbt:
            return ""
        if _is_element_without_closing(child_node) or _is_element_without_closing(next_node):
            return SOFTLINE if _is_single_char(child) else HARDLINE
        return SOFTLINE

    def with_whitespace(self, child: Doc, child_node: Node, next_node: Node | None) -> Doc:
        if self.fbt:
            return HARDLINE
        if _is_single_char(child):
            if _is_element_without_closing(child_node) or _is_element_without_closing(next_node):
                return HARDLINE
            return SOFTLINE
        return HARDLINE


def _is_single_char(doc: Doc) -> bool:
    return isinstance(doc, str) and len(doc) == 1


def _is_empty_str(doc: Doc | None) -> bool:
    return isinstance(doc, str) and doc == ""


def _print_children(
    path: AstPath,
    ctx: PrintContext,
    children_nodes: list[Node],
    jsx_whitespace: Doc,
    separators: _Separators,
) -> list[Doc]:
    """Alternating content/separator parts for the children of an element."""
    parts: list[Doc] = []
    for i, child in enumerate(children_nodes):
        next_node = children_nodes[i + 1] if i + 1 < len(children_nodes) else None
        if is_literal(child):
            text = _raw_text(child)
            if is_meaningful_jsx_text(child):
                words = _WHITESPACE_SPLIT_RE.split(text)

                if words[0] == "":
                    parts.append("")
                    words.pop(0)
                    if "\n" in words[0]:
                        first_word = words[1] if len(words) > 1 else ""
                        parts.append(separators.with_whitespace(first_word, child, next_node))
                    else:
                        parts.append(jsx_whitespace)
                    words.pop(0)

                end_whitespace: str | None = None
                if words and words[-1] == "":
                    words.pop()
                    end_whitespace = words.pop() if words else None

                # Whitespace only, without a newline
                if not words:
                    continue

                for j, word in enumerate(words):
                    parts.append(LINE if j % 2 else word)

                if end_whitespace is not None:
                    if "\n" in end_whitespace:
                        parts.append(separators.with_whitespace(parts[-1], child, next_node))
                    else:
                        parts.append(jsx_whitespace)
                else:
                    parts.append(separators.no_whitespace(parts[-1], child, next_node))
            elif "\n" in text:
                # Keep up to one blank line between tags and expressions
                if text.count("\n") > 1:
                    parts.extend(["", HARDLINE])
            else:
                parts.extend(["", jsx_whitespace])
        else:
            parts.append(path.call(ctx.print, "children", i))
            if next_node is not None and is_meaningful_jsx_text(next_node):
                first_word = _WHITESPACE_SPLIT_RE.split(_raw_text(next_node).strip())[0]
                parts.append(separators.no_whitespace(first_word, child, next_node))
            else:
                parts.append(HARDLINE)
    return parts


def _clean_children(children: list[Doc], jsx_whitespace: Doc, contains_text: bool) -> None:
    """Drop redundant whitespace and line pairs, then trim both ends."""

    def at(i: int) -> Doc | None:
        return children[i] if 0 <= i < len(children) else None

    def is_line(doc: Doc | None) -> bool:
        return doc is SOFTLINE or doc is HARDLINE

    i = len(children) - 2
    while i >= 0:
        a, b, c = at(i), at(i + 1), at(i + 2)
        pair_of_empty_strings = _is_empty_str(a) and _is_empty_str(b)
        pair_of_hardlines = a is HARDLINE and _is_empty_str(b) and c is HARDLINE
        line_then_whitespace = is_line(a) and _is_empty_str(b) and c is jsx_whitespace
        whitespace_then_line = a is jsx_whitespace and _is_empty_str(b) and is_line(c)
        double_whitespace = a is jsx_whitespace and _is_empty_str(b) and c is jsx_whitespace
        hard_and_soft = (a is SOFTLINE and _is_empty_str(b) and c is HARDLINE) or (
            a is HARDLINE and _is_empty_str(b) and c is SOFTLINE
        )
        if (
            (pair_of_hardlines and contains_text)
            or pair_of_empty_strings
            or line_then_whitespace
            or double_whitespace
            or hard_and_soft
        ):
            del children[i : i + 2]
        elif whitespace_then_line:
            del children[i + 1 : i + 3]
        i -= 1

    while children and (is_line_next(children[-1]) or is_empty(children[-1])):
        children.pop()

    while (
        len(children) >= 2
        and (is_line_next(children[0]) or is_empty(children[0]))
        and (is_line_next(children[1]) or is_empty(children[1]))
    ):
        del children[:2]


def _multiline_children(
    children: list[Doc], jsx_whitespace: Doc, raw_whitespace: str
) -> tuple[list[Doc], bool]:
    """Children as printed when the element breaks, and whether any breaks."""
    result: list[Doc] = []
    breaks = False
    for i, child in enumerate(children):
        if child is jsx_whitespace:
            if i == 1 and _is_empty_str(children[0]):
                if len(children) == 2:
                    # Solitary whitespace
                    result.append(raw_whitespace)
                    continue
                # Leading whitespace
                result.append(concat([raw_whitespace, HARDLINE]))
                continue
            if i == len(children) - 1:
                # Trailing whitespace
                result.append(raw_whitespace)
                continue
            if i >= 2 and _is_empty_str(children[i - 1]) and children[i - 2] is HARDLINE:
                # Whitespace after a line break
                result.append(raw_whitespace)
                continue
        result.append(child)
        if will_break(child):
            breaks = True
    return result, breaks


def _whitespace_docs(ctx: PrintContext) -> tuple[Doc, str]:
    if _is_html(ctx):
        # A distinct line object so the cleanup can tell it from LINE
        return Line(), " "
    raw = "{' '}" if ctx.options.single_quote else '{" "}'
    return if_break(concat([raw, SOFTLINE]), " "), raw


def _normalized_children(node: Node) -> list[Node]:
    # `{" "}` is read as a single space of text
    return [
        JSXText(" ", span=child.span) if is_jsx_whitespace_expression(child) else child
        for child in node.children
    ]


def _print_element(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    is_element = isinstance(node, JSXElement)

    # <div></div> prints as <div />
    if is_element and is_empty_jsx_element(node):
        return path.call(lambda p: ctx.print(p, self_closing=True), "opening_element")

    if is_element:
        opening = path.call(ctx.print, "opening_element")
        closing = path.call(ctx.print, "closing_element")
    else:
        opening = path.call(ctx.print, "opening_fragment")
        closing = path.call(ctx.print, "closing_fragment")

    if (
        len(node.children) == 1
        and isinstance(node.children[0], JSXExpressionContainer)
        and isinstance(node.children[0].expression, (TemplateLiteral, TaggedTemplateExpression))
    ):
        return concat([opening, concat(path.map(ctx.print, "children")), closing])

    children_nodes = _normalized_children(node)
    contains_tag = any(is_jsx(child) for child in children_nodes)
    contains_multiple_expressions = (
        sum(isinstance(child, JSXExpressionContainer) for child in children_nodes) > 1
    )
    contains_multiple_attributes = is_element and len(node.opening_element.attributes) > 1
    forced_break = (
        will_break(opening)
        or contains_tag
        or contains_multiple_attributes
        or contains_multiple_expressions
        or _is_fragment_top(path, ctx)
    )

    jsx_whitespace, raw_whitespace = _whitespace_docs(ctx)
    fbt = (
        is_element
        and isinstance(node.opening_element.name, JSXIdentifier)
        and node.opening_element.name.name == "fbt"
    )
    children = _print_children(path, ctx, children_nodes, jsx_whitespace, _Separators(fbt))
    contains_text = any(is_meaningful_jsx_text(child) for child in children_nodes)

    _clean_children(children, jsx_whitespace, contains_text)
    multiline, breaks = _multiline_children(children, jsx_whitespace, raw_whitespace)
    forced_break = forced_break or breaks

    if contains_text:
        content: Doc = fill(multiline)
    else:
        content = group(concat(multiline), should_break=True)

    multi_line_elem = group(
        concat([opening, indent(concat([HARDLINE, content])), HARDLINE, closing])
    )
    if forced_break:
        return multi_line_elem
    return conditional_group(
        [group(concat([opening, concat(children), closing])), multi_line_elem]
    )


def _is_fragment_top(path: AstPath, ctx: PrintContext) -> bool:
    """The wrapper element of a fragment program always prints broken."""
    return (
        ctx.fragment
        and isinstance(path.parent(), ExpressionStatement)
        and isinstance(path.grandparent(), Program)
    )


def print_markup_root(path: AstPath, ctx: PrintContext) -> Doc:
    """Top of an HTML payload: the children packed as in an element body."""
    children_nodes = list(path.node.children)
    jsx_whitespace, raw_whitespace = _whitespace_docs(ctx)
    children = _print_children(path, ctx, children_nodes, jsx_whitespace, _Separators(False))
    contains_text = any(is_meaningful_jsx_text(child) for child in children_nodes)
    _clean_children(children, jsx_whitespace, contains_text)
    if not children:
        return ""
    multiline, _ = _multiline_children(children, jsx_whitespace, raw_whitespace)
    if contains_text:
        content: Doc = fill(multiline)
    else:
        content = group(concat(multiline), should_break=True)
    return concat([content, HARDLINE])
