"""Sub-language embedding for template literals.

A template recognized as a stylesheet or as HTML is rebuilt as one payload
with each ``${…}`` replaced by a placeholder, formatted by the matching
sub-language pipeline, and the placeholders in the resulting Doc are swapped
back for the printed expressions.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence

from vxfmt.ast import (
    CallExpression,
    Identifier,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXIdentifier,
    MemberExpression,
    Node,
    TaggedTemplateExpression,
    TemplateLiteral,
)
from vxfmt.doc import HARDLINE, SOFTLINE, Doc, concat, group, indent, map_doc, strip_trailing_hardline
from vxfmt.errors import AdapterError, EmbeddedSubstitutionError
from vxfmt.path import AstPath, PrintContext

logger = logging.getLogger(__name__)

_CSS_PLACEHOLDER_RE = re.compile(r"@vxfmt-placeholder-(\d+)-id")
_HTML_PLACEHOLDER_RE = re.compile(r"VXFMT_HTML_PLACEHOLDER_(\d+)_IN_JS")


def embed(path: AstPath, ctx: PrintContext) -> Doc | None:
    """Doc for an embedded template literal, or None to print it normally."""
    node = path.node
    if not isinstance(node, TemplateLiteral):
        return None
    try:
        if is_styled_jsx(path) or is_styled_components(path) or is_css_prop(path):
            return _print_css_template(path, ctx)
        if is_html(path):
            return _print_html_template(path, ctx)
    except AdapterError as exc:
        # Payloads that do not parse are printed as plain templates
        logger.debug("embedded payload not formatted: %s", exc.message)
    return None


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def _jsx_name(node: Node) -> str | None:
    return node.name if isinstance(node, JSXIdentifier) else None


def is_styled_jsx(path: AstPath) -> bool:
    """``<style jsx>{`div { color: red }`}</style>``"""
    parent = path.parent()
    grandparent = path.grandparent()
    if not isinstance(parent, JSXExpressionContainer) or not isinstance(grandparent, JSXElement):
        return False
    opening = grandparent.opening_element
    return _jsx_name(opening.name) == "style" and any(
        isinstance(attr, JSXAttribute) and _jsx_name(attr.name) == "jsx" for attr in opening.attributes
    )


def _is_styled_identifier(node: Node) -> bool:
    return isinstance(node, Identifier) and node.name == "styled"


def _is_styled_extend(node: Node) -> bool:
    return (
        isinstance(node, MemberExpression)
        and isinstance(node.object, Identifier)
        and node.object.name[:1].isupper()
        and isinstance(node.property, Identifier)
        and node.property.name == "extend"
    )


def is_styled_components(path: AstPath) -> bool:
    """``styled.x``, ``styled(X)``, ``styled.x.attrs(…)``, ``X.extend`` and ``css`` tags."""
    parent = path.parent()
    if not isinstance(parent, TaggedTemplateExpression):
        return False
    tag = parent.tag
    match tag:
        case MemberExpression():
            return _is_styled_identifier(tag.object) or _is_styled_extend(tag)
        case CallExpression():
            callee = tag.callee
            if _is_styled_identifier(callee):
                return True
            if not isinstance(callee, MemberExpression):
                return False
            target = callee.object
            if isinstance(target, MemberExpression):
                return _is_styled_identifier(target.object) or _is_styled_extend(target)
            if isinstance(target, CallExpression):
                return _is_styled_identifier(target.callee)
            return False
        case Identifier():
            return tag.name == "css"
    return False


def is_css_prop(path: AstPath) -> bool:
    """``<div css={`color: red;`} />``"""
    parent = path.parent()
    grandparent = path.grandparent()
    return (
        isinstance(parent, JSXExpressionContainer)
        and isinstance(grandparent, JSXAttribute)
        and _jsx_name(grandparent.name) == "css"
    )


def _has_language_comment(node: Node, language: str) -> bool:
    # Exactly one space on either side: /* HTML */
    return any(c.leading and c.is_block and c.value == f" {language} " for c in node.comments)


def is_html(path: AstPath) -> bool:
    """``html`…``` or a template led by a ``/* HTML */`` comment."""
    node = path.node
    if _has_language_comment(node, "HTML"):
        return True
    parent = path.parent()
    return (
        isinstance(parent, TaggedTemplateExpression)
        and path.name == "quasi"
        and isinstance(parent.tag, Identifier)
        and parent.tag.name == "html"
    )


# ---------------------------------------------------------------------------
# Stylesheets
# ---------------------------------------------------------------------------


def _print_css_template(path: AstPath, ctx: PrintContext) -> Doc:
    node: TemplateLiteral = path.node
    if len(node.quasis) == 1 and not node.quasis[0].raw.strip():
        return "``"

    text = node.quasis[0].raw
    for i, quasi in enumerate(node.quasis[1:]):
        text += f"@vxfmt-placeholder-{i}-id" + quasi.raw
    logger.debug("embedding stylesheet with %d placeholder(s)", len(node.expressions))

    doc = ctx.text_to_doc(text, "css")
    expressions = path.map(ctx.print, "expressions")
    doc = _replace_placeholders(doc, expressions, _CSS_PLACEHOLDER_RE, "css", lambda e: e)
    return concat(["`", indent(concat([HARDLINE, strip_trailing_hardline(doc)])), SOFTLINE, "`"])


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def _print_html_template(path: AstPath, ctx: PrintContext) -> Doc:
    node: TemplateLiteral = path.node
    text = "".join(
        quasi.raw + (f"VXFMT_HTML_PLACEHOLDER_{i}_IN_JS" if i < len(node.expressions) else "")
        for i, quasi in enumerate(node.quasis)
    )
    if not node.expressions and not text.strip():
        return "``"
    logger.debug("embedding html with %d placeholder(s)", len(node.expressions))

    expressions = path.map(ctx.print, "expressions")
    doc = strip_trailing_hardline(ctx.text_to_doc(text, "html"))
    doc = _replace_placeholders(doc, expressions, _HTML_PLACEHOLDER_RE, "html", group)
    return group(concat(["`", indent(concat([HARDLINE, group(doc)])), SOFTLINE, "`"]))


# ---------------------------------------------------------------------------
# Splicing
# ---------------------------------------------------------------------------


def _replace_placeholders(
    doc: Doc,
    expressions: Sequence[Doc],
    pattern: re.Pattern[str],
    language: str,
    wrap: Callable[[Doc], Doc],
) -> Doc:
    """Swap every placeholder in the string leaves of *doc* for ``${expr}``.

    Every expression must be spliced back exactly once.
    """
    seen: list[int] = []

    def replace(d: Doc) -> Doc:
        if not isinstance(d, str) or not pattern.search(d):
            return d
        pieces = pattern.split(d)
        parts: list[Doc] = []
        for i, piece in enumerate(pieces):
            if i % 2 == 0:
                if piece:
                    parts.append(piece)
                continue
            index = int(piece)
            if index >= len(expressions):
                raise EmbeddedSubstitutionError(language, len(expressions), index + 1)
            seen.append(index)
            parts.append(concat(["${", wrap(expressions[index]), "}"]))
        return concat(parts)

    result = map_doc(doc, replace)
    if sorted(seen) != list(range(len(expressions))):
        raise EmbeddedSubstitutionError(language, len(expressions), len(seen))
    return result
