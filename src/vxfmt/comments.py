"""Comment attachment and comment printing.

Attachment walks each comment down the tree to the smallest node enclosing
it, remembering the nearest child before and after it. The comment is then
classified by its surroundings in the source:

* own-line: only whitespace between the previous newline and the comment;
* end-of-line: only whitespace between the comment and the next newline;
* remaining: code on both sides.

Each class first offers the comment to the node-specific handlers below and
otherwise falls back to the preceding, following or enclosing node. A
comment that finds no node at all becomes a dangling comment of the root.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vxfmt.ast import (
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    BlockStatement,
    CallExpression,
    ClassBody,
    ClassDeclaration,
    ClassMethod,
    ClassProperty,
    Comment,
    ConditionalExpression,
    Decorator,
    ExportSpecifier,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    ImportDeclaration,
    ImportSpecifier,
    JSXEmptyExpression,
    JSXExpressionContainer,
    MemberExpression,
    NewExpression,
    Node,
    ObjectExpression,
    ObjectMethod,
    ObjectProperty,
    PrivateName,
    Program,
    TaggedTemplateExpression,
    TemplateLiteral,
    VariableDeclarator,
    ArrayExpression,
    EmptyStatement,
    child_nodes,
)
from vxfmt.doc import (
    BREAK_PARENT,
    HARDLINE,
    Doc,
    concat,
    indent,
    join,
    line_suffix,
)
from vxfmt.errors import CommentNotPrintedError
from vxfmt.utils import (
    has_newline,
    has_newline_in_range,
    is_previous_line_empty,
    next_non_space_non_comment_char,
    next_non_space_non_comment_index,
    skip_newline,
    skip_spaces,
)

if TYPE_CHECKING:
    from vxfmt.path import AstPath, PrintContext

logger = logging.getLogger(__name__)

IGNORE_DIRECTIVE = "vxfmt-ignore"


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CommentContext:
    """Per-call comment state: the source and which comments were printed."""

    source: str
    comments: list[Comment]
    printed: set[int] = field(default_factory=set)

    def mark_printed(self, comment: Comment) -> None:
        self.printed.add(id(comment))

    def is_printed(self, comment: Comment) -> bool:
        return id(comment) in self.printed

    def mark_range_printed(self, start: int, end: int) -> None:
        """Mark every comment inside [start, end) printed (verbatim output)."""
        for comment in self.comments:
            if start <= comment.start and comment.end <= end:
                self.mark_printed(comment)

    def ensure_all_printed(self) -> None:
        for comment in self.comments:
            if not self.is_printed(comment):
                raise CommentNotPrintedError(comment.text(), comment.span)


@dataclass(slots=True)
class _Placement:
    comment: Comment
    enclosing: Node | None = None
    preceding: Node | None = None
    following: Node | None = None


@dataclass(frozen=True, slots=True)
class _Tie:
    """A same-line comment sitting between two sibling nodes."""

    comment: Comment
    preceding: Node
    following: Node


# ---------------------------------------------------------------------------
# Attachment
# ---------------------------------------------------------------------------


def _sorted_children(node: Node, cache: dict[int, list[Node]]) -> list[Node]:
    key = id(node)
    if key not in cache:
        cache[key] = sorted(child_nodes(node), key=lambda n: (n.start, n.end))
    return cache[key]


def _decorate(root: Node, comment: Comment, cache: dict[int, list[Node]]) -> _Placement:
    """Find the enclosing node and the nearest siblings around *comment*."""
    placement = _Placement(comment)
    node = root
    while True:
        children = _sorted_children(node, cache)
        preceding: Node | None = None
        following: Node | None = None
        left, right = 0, len(children)
        descended = False
        while left < right:
            middle = (left + right) // 2
            child = children[middle]
            if child.start <= comment.start and comment.end <= child.end:
                placement.enclosing = child
                node = child
                descended = True
                break
            if child.end <= comment.start:
                preceding = child
                left = middle + 1
                continue
            if comment.end <= child.start:
                following = child
                right = middle
                continue
            # Overlapping children (a shorthand default) cannot hold a comment
            break
        if descended:
            continue
        break

    enclosing = placement.enclosing
    if isinstance(enclosing, TemplateLiteral):
        # Only siblings inside the same ${} count
        index = _template_expression_index(enclosing, comment.start)
        if preceding is not None and _template_expression_index(enclosing, preceding.start) != index:
            preceding = None
        if following is not None and _template_expression_index(enclosing, following.start) != index:
            following = None

    placement.preceding = preceding
    placement.following = following
    return placement


def _template_expression_index(template: TemplateLiteral, offset: int) -> int:
    for i, quasi in enumerate(template.quasis[1:]):
        if offset < quasi.start:
            return i
    return len(template.quasis) - 1


def _add_leading(node: Node, comment: Comment) -> None:
    comment.leading = True
    comment.trailing = False
    node.comments.append(comment)


def _add_trailing(node: Node, comment: Comment) -> None:
    comment.leading = False
    comment.trailing = True
    node.comments.append(comment)


def _add_dangling(node: Node, comment: Comment) -> None:
    comment.leading = False
    comment.trailing = False
    node.comments.append(comment)


def attach_comments(root: Node, comments: Sequence[Comment], source: str) -> CommentContext:
    """Attach every comment in *comments* to a node under *root*."""
    cache: dict[int, list[Node]] = {}
    ties: list[_Tie] = []

    for comment in comments:
        p = _decorate(root, comment, cache)

        if has_newline(source, comment.start, backwards=True):
            comment.placement = "own-line"
            _break_ties(ties, source)
            if _handle_own_line(p, source):
                pass
            elif p.following is not None:
                _add_leading(p.following, comment)
            elif p.preceding is not None:
                _add_trailing(p.preceding, comment)
            else:
                _add_dangling(p.enclosing or root, comment)
        elif has_newline(source, comment.end):
            comment.placement = "end-of-line"
            _break_ties(ties, source)
            if _handle_end_of_line(p, source):
                pass
            elif p.preceding is not None:
                _add_trailing(p.preceding, comment)
            elif p.following is not None:
                _add_leading(p.following, comment)
            else:
                _add_dangling(p.enclosing or root, comment)
        else:
            comment.placement = "remaining"
            if _handle_remaining(p, source):
                _break_ties(ties, source)
            elif p.preceding is not None and p.following is not None:
                if ties and ties[-1].following is not p.following:
                    _break_ties(ties, source)
                ties.append(_Tie(comment, p.preceding, p.following))
            else:
                _break_ties(ties, source)
                if p.preceding is not None:
                    _add_trailing(p.preceding, comment)
                elif p.following is not None:
                    _add_leading(p.following, comment)
                else:
                    _add_dangling(p.enclosing or root, comment)

    _break_ties(ties, source)
    logger.debug("attached %d comment(s)", len(comments))
    return CommentContext(source, list(comments))


def _break_ties(ties: list[_Tie], source: str) -> None:
    """Split same-line comments between two nodes into trailing and leading.

    A comment stays leading only when nothing but spaces separates it from
    the following node (or from the next leading comment).
    """
    if not ties:
        return
    preceding = ties[0].preceding
    following = ties[0].following
    gap_end = following.start
    first_leading = len(ties)
    while first_leading > 0:
        comment = ties[first_leading - 1].comment
        gap = source[comment.end : gap_end]
        if gap.strip(" \t") == "":
            gap_end = comment.start
            first_leading -= 1
        else:
            break
    for i, tie in enumerate(ties):
        if i < first_leading:
            _add_trailing(preceding, tie.comment)
        else:
            _add_leading(following, tie.comment)
    ties.clear()


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

_Handler = Callable[[_Placement, str], bool]


def _add_block_first_comment(node: Node, comment: Comment) -> None:
    """Lead the first member of a block-like node, or dangle on it if empty."""
    if isinstance(node, (BlockStatement, ClassBody, Program)):
        items = [n for n in node.body if not isinstance(n, EmptyStatement)]
    elif isinstance(node, ObjectExpression):
        items = list(node.properties)
    elif isinstance(node, ArrayExpression):
        items = [n for n in node.elements if n is not None]
    else:
        items = []
    if items:
        _add_leading(items[0], comment)
    else:
        _add_dangling(node, comment)


def _add_block_or_not(node: Node, comment: Comment) -> None:
    if isinstance(node, BlockStatement):
        _add_block_first_comment(node, comment)
    else:
        _add_leading(node, comment)


def _handle_if_statement(p: _Placement, source: str) -> bool:
    enclosing, preceding, following = p.enclosing, p.preceding, p.following
    if not isinstance(enclosing, IfStatement) or following is None:
        return False
    # A comment before the closing paren of the test belongs to the test
    if next_non_space_non_comment_char(source, p.comment.end) == ")":
        if preceding is not None:
            _add_trailing(preceding, p.comment)
            return True
        return False
    # Comments before `else`
    if preceding is enclosing.consequent and following is enclosing.alternate:
        if isinstance(preceding, BlockStatement):
            _add_trailing(preceding, p.comment)
        else:
            _add_dangling(enclosing, p.comment)
        return True
    if isinstance(following, BlockStatement):
        _add_block_first_comment(following, p.comment)
        return True
    if isinstance(following, IfStatement):
        _add_block_or_not(following.consequent, p.comment)
        return True
    if enclosing.consequent is following:
        _add_leading(following, p.comment)
        return True
    return False


def _handle_member_expression(p: _Placement, source: str) -> bool:
    if isinstance(p.enclosing, MemberExpression) and isinstance(p.following, (Identifier, PrivateName)):
        _add_leading(p.enclosing, p.comment)
        return True
    return False


def _handle_conditional_expression(p: _Placement, source: str) -> bool:
    same_line = p.preceding is not None and not has_newline_in_range(
        source, p.preceding.end, p.comment.start
    )
    if (
        (p.preceding is None or not same_line)
        and isinstance(p.enclosing, ConditionalExpression)
        and p.following is not None
    ):
        _add_leading(p.following, p.comment)
        return True
    return False


def _handle_call_expression(p: _Placement, source: str) -> bool:
    enclosing = p.enclosing
    if (
        isinstance(enclosing, CallExpression)
        and p.preceding is not None
        and enclosing.callee is p.preceding
        and enclosing.arguments
    ):
        _add_leading(enclosing.arguments[0], p.comment)
        return True
    return False


def _handle_property(p: _Placement, source: str) -> bool:
    if isinstance(p.enclosing, ObjectProperty) and not p.enclosing.shorthand:
        _add_leading(p.enclosing, p.comment)
        return True
    return False


def _handle_variable_declarator(p: _Placement, source: str) -> bool:
    if isinstance(p.enclosing, (VariableDeclarator, AssignmentExpression)) and isinstance(
        p.following, (ObjectExpression, ArrayExpression, TemplateLiteral, TaggedTemplateExpression)
    ):
        _add_block_first_comment(p.following, p.comment)
        return True
    return False


_FUNCTION_LIKE = (
    FunctionDeclaration,
    FunctionExpression,
    ArrowFunctionExpression,
    ClassMethod,
    ObjectMethod,
)


def _handle_last_function_arg(p: _Placement, source: str) -> bool:
    enclosing = p.enclosing
    if (
        isinstance(p.preceding, (Identifier, AssignmentPattern))
        and isinstance(enclosing, _FUNCTION_LIKE)
        and next_non_space_non_comment_char(source, p.comment.end) == ")"
    ):
        _add_trailing(p.preceding, p.comment)
        return True
    if isinstance(enclosing, FunctionDeclaration) and isinstance(p.following, BlockStatement):
        # Between the closing paren of the parameters and the body
        if enclosing.params:
            anchor = enclosing.params[-1].end
        elif enclosing.id is not None:
            left_paren = next_non_space_non_comment_index(source, enclosing.id.end)
            anchor = (left_paren or 0) + 1
        else:
            return False
        right_paren = next_non_space_non_comment_index(source, anchor)
        if right_paren is not None and p.comment.start > right_paren:
            _add_block_first_comment(p.following, p.comment)
            return True
    return False


def _handle_empty_parens(p: _Placement, source: str) -> bool:
    if next_non_space_non_comment_char(source, p.comment.end) != ")":
        return False
    enclosing = p.enclosing
    if isinstance(enclosing, _FUNCTION_LIKE) and not enclosing.params:
        _add_dangling(enclosing, p.comment)
        return True
    if isinstance(enclosing, (CallExpression, NewExpression)) and not enclosing.arguments:
        _add_dangling(enclosing, p.comment)
        return True
    return False


def _handle_arrow_params(p: _Placement, source: str) -> bool:
    if not isinstance(p.enclosing, ArrowFunctionExpression):
        return False
    index = next_non_space_non_comment_index(source, p.comment.end)
    if index is not None and source.startswith("=>", index):
        _add_dangling(p.enclosing, p.comment)
        return True
    return False


def _handle_class(p: _Placement, source: str) -> bool:
    enclosing = p.enclosing
    if (
        isinstance(enclosing, ClassDeclaration)
        and enclosing.decorators
        and not isinstance(p.following, Decorator)
    ):
        _add_trailing(enclosing.decorators[-1], p.comment)
        return True
    return False


def _handle_method_name(p: _Placement, source: str) -> bool:
    if isinstance(p.preceding, Decorator) and isinstance(p.enclosing, (ClassMethod, ClassProperty)):
        _add_trailing(p.preceding, p.comment)
        return True
    return False


def _handle_import_specifier(p: _Placement, source: str) -> bool:
    if isinstance(p.enclosing, (ImportSpecifier, ExportSpecifier)):
        _add_leading(p.enclosing, p.comment)
        return True
    return False


def _handle_import_declaration(p: _Placement, source: str) -> bool:
    if (
        isinstance(p.preceding, ImportSpecifier)
        and isinstance(p.enclosing, ImportDeclaration)
        and has_newline(source, p.comment.end)
    ):
        _add_trailing(p.preceding, p.comment)
        return True
    return False


def _handle_assignment_pattern(p: _Placement, source: str) -> bool:
    if isinstance(p.enclosing, AssignmentPattern):
        _add_leading(p.enclosing, p.comment)
        return True
    return False


def _handle_expression_container(p: _Placement, source: str) -> bool:
    # `{/* note */}` keeps its comment inside the braces
    enclosing = p.enclosing
    if isinstance(enclosing, JSXExpressionContainer) and isinstance(
        enclosing.expression, JSXEmptyExpression
    ):
        _add_dangling(enclosing.expression, p.comment)
        return True
    return False


_OWN_LINE: tuple[_Handler, ...] = (
    _handle_expression_container,
    _handle_last_function_arg,
    _handle_member_expression,
    _handle_if_statement,
    _handle_class,
    _handle_import_specifier,
    _handle_import_declaration,
    _handle_assignment_pattern,
    _handle_method_name,
)
_END_OF_LINE: tuple[_Handler, ...] = (
    _handle_expression_container,
    _handle_last_function_arg,
    _handle_conditional_expression,
    _handle_import_specifier,
    _handle_if_statement,
    _handle_class,
    _handle_call_expression,
    _handle_property,
    _handle_variable_declarator,
)
_REMAINING: tuple[_Handler, ...] = (
    _handle_expression_container,
    _handle_if_statement,
    _handle_empty_parens,
    _handle_method_name,
    _handle_arrow_params,
)


def _handle_own_line(p: _Placement, source: str) -> bool:
    return any(handler(p, source) for handler in _OWN_LINE)


def _handle_end_of_line(p: _Placement, source: str) -> bool:
    return any(handler(p, source) for handler in _END_OF_LINE)


def _handle_remaining(p: _Placement, source: str) -> bool:
    return any(handler(p, source) for handler in _REMAINING)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def has_leading_comment(node: Node | None) -> bool:
    return node is not None and any(c.leading for c in node.comments)


def has_trailing_comment(node: Node | None) -> bool:
    return node is not None and any(c.trailing for c in node.comments)


def has_dangling_comments(node: Node | None) -> bool:
    return node is not None and any(not c.leading and not c.trailing for c in node.comments)


def has_ignore_comment(node: Node | None) -> bool:
    return node is not None and any(
        c.leading and c.value.strip() == IGNORE_DIRECTIVE for c in node.comments
    )


def is_line_comment(comment: Comment) -> bool:
    return not comment.is_block


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------


def _is_indentable_block(comment: Comment) -> bool:
    # Every line starts with `*` once the delimiters' stars are added back
    lines = f"*{comment.value}*".split("\n")
    return len(lines) > 1 and all(line.strip().startswith("*") for line in lines)


def _print_indentable_block(comment: Comment) -> Doc:
    lines = comment.value.split("\n")
    last = len(lines) - 1
    printed = [
        line.rstrip() if i == 0 else " " + (line.strip() if i < last else line.lstrip())
        for i, line in enumerate(lines)
    ]
    return concat(["/*", join(HARDLINE, printed), "*/"])


def print_comment(comment: Comment, ctx: PrintContext) -> Doc:
    """Print one comment and record it as printed."""
    ctx.comments.mark_printed(comment)
    if comment.is_block:
        if _is_indentable_block(comment):
            printed = _print_indentable_block(comment)
            if comment.trailing and not has_newline(ctx.source, comment.start, backwards=True):
                return concat([HARDLINE, printed])
            return printed
        return f"/*{comment.value}*/"
    return "//" + comment.value.rstrip()


def _print_leading(comment: Comment, ctx: PrintContext) -> Doc:
    contents = print_comment(comment, ctx)
    if comment.is_block:
        return concat([contents, HARDLINE if has_newline(ctx.source, comment.end) else " "])
    return concat([contents, HARDLINE])


def _print_trailing(comment: Comment, ctx: PrintContext) -> Doc:
    contents = print_comment(comment, ctx)
    if has_newline(ctx.source, comment.start, backwards=True):
        # A comment on its own line at the end of a nested structure
        blank = is_previous_line_empty(ctx.source, comment.start)
        return line_suffix(concat([HARDLINE, HARDLINE if blank else "", contents]))
    if comment.is_block:
        return concat([" ", contents])
    return concat([line_suffix(concat([" ", contents])), BREAK_PARENT])


def print_comments(path: AstPath, printed: Doc, ctx: PrintContext) -> Doc:
    """Surround *printed* with the leading and trailing comments of the node."""
    node = path.node
    if node is None or not node.comments:
        return printed
    leading: list[Doc] = []
    trailing: list[Doc] = [printed]
    for comment in node.comments:
        if comment.leading:
            leading.append(_print_leading(comment, ctx))
            index = skip_newline(ctx.source, skip_spaces(ctx.source, comment.end))
            if index is not None and has_newline(ctx.source, index):
                leading.append(HARDLINE)
        elif comment.trailing:
            trailing.append(_print_trailing(comment, ctx))
    if not leading and len(trailing) == 1:
        return printed
    return concat(leading + trailing)


def print_dangling_comments(
    path: AstPath,
    ctx: PrintContext,
    same_indent: bool = False,
    keep: Callable[[Comment], bool] | None = None,
) -> Doc:
    node = path.node
    if node is None:
        return ""
    parts = [
        print_comment(c, ctx)
        for c in node.comments
        if not c.leading and not c.trailing and (keep is None or keep(c))
    ]
    if not parts:
        return ""
    if same_indent:
        return join(HARDLINE, parts)
    return indent(concat([HARDLINE, join(HARDLINE, parts)]))
