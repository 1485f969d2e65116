"""Node to Doc printing.

``print_path`` is the recursive driver: it prints the node through the
matching handler, then adds parentheses, class decorators, a protective
semicolon and the node's comments around the result. Markup, member chains,
argument lists and embedded templates live in their own modules.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from vxfmt import embed, markup
from vxfmt.ast import (
    ArrayExpression,
    ArrowFunctionExpression,
    AssignmentExpression,
    AssignmentPattern,
    AwaitExpression,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ClassBody,
    ClassDeclaration,
    ClassMethod,
    ClassProperty,
    ConditionalExpression,
    Decorator,
    EmptyStatement,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ExportSpecifier,
    ExpressionStatement,
    FunctionDeclaration,
    FunctionExpression,
    HTMLComment,
    Identifier,
    IfStatement,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    JSXAttribute,
    JSXExpressionContainer,
    JSXSpreadAttribute,
    JSXSpreadChild,
    LogicalExpression,
    MarkupRoot,
    MemberExpression,
    NewExpression,
    Node,
    NullLiteral,
    NumericLiteral,
    ObjectExpression,
    ObjectMethod,
    ObjectProperty,
    PrivateName,
    Program,
    RestElement,
    ReturnStatement,
    SequenceExpression,
    SpreadElement,
    StringLiteral,
    Super,
    TaggedTemplateExpression,
    TemplateElement,
    TemplateLiteral,
    ThisExpression,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    is_binaryish,
    is_jsx,
)
from vxfmt.chains import (
    is_template_on_its_own_line,
    is_test_call,
    print_call_expression,
    print_member_expression,
    should_print_comma,
)
from vxfmt.comments import (
    has_dangling_comments,
    has_ignore_comment,
    has_trailing_comment,
    print_comments,
    print_dangling_comments,
)
from vxfmt.doc import (
    BREAK_PARENT,
    CURSOR,
    HARDLINE,
    LINE,
    LINE_SUFFIX_BOUNDARY,
    LITERALLINE,
    SOFTLINE,
    Doc,
    align,
    concat,
    dedent,
    group,
    if_break,
    indent,
    join,
    remove_lines,
)
from vxfmt.errors import UnsupportedNodeTypeError
from vxfmt.layout import render
from vxfmt.parens import (
    get_left_side,
    has_naked_left_side,
    left_side_field,
    needs_parens,
    should_flatten,
    starts_with_no_lookahead_token,
)
from vxfmt.path import AstPath, PrintContext
from vxfmt.utils import (
    has_newline,
    has_newline_in_range,
    is_next_line_empty,
    next_non_space_non_comment_char,
    next_non_space_non_comment_index,
    print_number,
    print_string,
)

_IDENTIFIER_NAME_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_EMPTY_BRACES_RE = re.compile(r"\{\s*\}")
_NEWLINE_SPLIT_RE = re.compile(r"\r?\n")

_METHOD_TYPES = (ClassMethod, ObjectMethod)
_PARAMS_OWNERS = (FunctionDeclaration, FunctionExpression, ArrowFunctionExpression, ClassMethod, ObjectMethod)
_EXPORT_TYPES = (ExportNamedDeclaration, ExportDefaultDeclaration)


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def print_path(path: AstPath, ctx: PrintContext, **flags: Any) -> Doc:
    """Print the node at *path* with its parentheses, decorators and comments.

    Flags: ``expand_first_arg``/``expand_last_arg`` (the node is a hugged
    argument), ``self_closing`` (an opening element printed as ``<x />``)
    and ``needs_semi`` (prefix a semicolon protecting against ASI).
    """
    node = path.node
    if node is None:
        return ""

    if has_ignore_comment(node) or markup.has_jsx_ignore_comment(path):
        ctx.comments.mark_range_printed(node.start, node.end)
        return print_comments(path, ctx.source[node.start : node.end], ctx)

    printed = _print_node(path, ctx, flags)
    if node is ctx.cursor_node:
        printed = concat([CURSOR, printed])
    if needs_parens(path):
        printed = concat(["(", printed, ")"])
    decorators = _print_class_decorators(path, ctx)
    if decorators is not None:
        printed = group(concat([decorators, printed]))
    if flags.get("needs_semi"):
        printed = concat([";", printed])
    if _prints_own_comments(path):
        return printed
    return print_comments(path, printed, ctx)


def _prints_own_comments(path: AstPath) -> bool:
    node = path.node
    parent = path.parent()
    return (
        is_jsx(node)
        or isinstance(parent, (JSXSpreadAttribute, JSXSpreadChild))
        or (isinstance(parent, ClassDeclaration) and path.name == "superclass")
    )


def _print_node(path: AstPath, ctx: PrintContext, flags: dict[str, Any]) -> Doc:
    node = path.node
    semi = ";" if ctx.options.semi else ""
    match node:
        case Program():
            parts = [
                _print_statement_sequence(path, ctx, "body"),
                print_dangling_comments(path, ctx, same_indent=True),
            ]
            # Only force a final newline when there is content
            if node.body or node.comments:
                parts.append(HARDLINE)
            return concat(parts)
        case EmptyStatement():
            return ""
        case ExpressionStatement():
            return concat(
                [
                    path.call(ctx.print, "expression"),
                    "" if _is_sole_fragment_markup(path, ctx) else semi,
                ]
            )
        case BlockStatement():
            return _print_block(path, ctx)
        case ReturnStatement():
            return _print_return(path, ctx, semi)
        case IfStatement():
            return _print_if(path, ctx)
        case VariableDeclaration():
            return _print_variable_declaration(path, ctx, semi)
        case VariableDeclarator():
            return _print_assignment(path, ctx, "id", " =", "init")
        case AssignmentExpression():
            return _print_assignment(path, ctx, "left", f" {node.operator}", "right")
        case FunctionDeclaration() | FunctionExpression():
            return _print_function(path, ctx)
        case ArrowFunctionExpression():
            return _print_arrow(path, ctx, flags)
        case ClassDeclaration():
            return _print_class(path, ctx)
        case ClassBody():
            if not node.comments and not node.body:
                return "{}"
            if node.body:
                inner: Doc = indent(concat([HARDLINE, _print_statement_sequence(path, ctx, "body")]))
            else:
                inner = print_dangling_comments(path, ctx)
            return concat(["{", inner, HARDLINE, "}"])
        case ClassProperty():
            parts = [_print_member_decorators(path, ctx)]
            if node.static:
                parts.append("static ")
            parts.append(_print_property_key(path, ctx))
            if node.value is not None:
                parts.append(" =")
                parts.append(_print_assignment_right(path, ctx, node.key, "value"))
            parts.append(semi)
            return group(concat(parts))
        case ClassMethod():
            parts = [_print_member_decorators(path, ctx)]
            if node.static:
                parts.append("static ")
            parts.append(_print_method(path, ctx))
            return concat(parts)
        case Decorator():
            return concat(["@", path.call(ctx.print, "expression")])
        case ImportDeclaration():
            return _print_import(path, ctx, semi)
        case ImportSpecifier():
            parts = [path.call(ctx.print, "imported")]
            if node.local is not node.imported:
                parts.extend([" as ", path.call(ctx.print, "local")])
            return concat(parts)
        case ImportDefaultSpecifier():
            return path.call(ctx.print, "local")
        case ImportNamespaceSpecifier():
            return concat(["* as ", path.call(ctx.print, "local")])
        case ExportNamedDeclaration() | ExportDefaultDeclaration():
            return _print_export(path, ctx, semi)
        case ExportSpecifier():
            parts = [path.call(ctx.print, "local")]
            if node.exported is not node.local:
                parts.extend([" as ", path.call(ctx.print, "exported")])
            return concat(parts)
        case _:
            return _print_expression(path, ctx, flags)


def _print_expression(path: AstPath, ctx: PrintContext, flags: dict[str, Any]) -> Doc:
    node = path.node
    match node:
        case Identifier():
            return node.name
        case PrivateName():
            return "#" + node.name
        case ThisExpression():
            return "this"
        case Super():
            return "super"
        case NullLiteral():
            return "null"
        case BooleanLiteral():
            return "true" if node.value else "false"
        case NumericLiteral():
            return print_number(node.raw)
        case StringLiteral():
            return print_string(node.raw, ctx.options.single_quote)
        case TemplateLiteral():
            embedded = embed.embed(path, ctx)
            if embedded is not None:
                return embedded
            return _print_template_literal(path, ctx)
        case TemplateElement():
            return join(LITERALLINE, _NEWLINE_SPLIT_RE.split(node.raw))
        case TaggedTemplateExpression():
            return concat([path.call(ctx.print, "tag"), path.call(ctx.print, "quasi")])
        case ArrayExpression():
            return _print_array(path, ctx)
        case ObjectExpression():
            return _print_object(path, ctx)
        case ObjectProperty():
            if node.shorthand:
                return path.call(ctx.print, "value")
            return _print_assignment(path, ctx, "key", ":", "value")
        case ObjectMethod():
            return _print_method(path, ctx)
        case SpreadElement() | RestElement():
            return concat(["...", path.call(ctx.print, "argument")])
        case AssignmentPattern():
            return concat([path.call(ctx.print, "left"), " = ", path.call(ctx.print, "right")])
        case MemberExpression():
            return print_member_expression(path, ctx)
        case CallExpression() | NewExpression():
            return print_call_expression(path, ctx)
        case UnaryExpression():
            parts: list[Doc] = [node.operator]
            if node.operator[-1].isalpha():
                parts.append(" ")
            argument = path.call(ctx.print, "argument")
            if node.argument.comments:
                parts.append(group(concat(["(", indent(concat([SOFTLINE, argument])), SOFTLINE, ")"])))
            else:
                parts.append(argument)
            return concat(parts)
        case UpdateExpression():
            argument = path.call(ctx.print, "argument")
            if node.prefix:
                return concat([node.operator, argument])
            return concat([argument, node.operator])
        case AwaitExpression():
            return concat(["await ", path.call(ctx.print, "argument")])
        case SequenceExpression():
            return _print_sequence(path, ctx)
        case BinaryExpression() | LogicalExpression():
            return _print_binaryish(path, ctx)
        case ConditionalExpression():
            return _print_conditional(path, ctx)
        case MarkupRoot():
            return markup.print_markup_root(path, ctx)
        case HTMLComment():
            return node.value
        case _ if node.type.startswith("JSX"):
            return markup.print_jsx(path, ctx, flags)
    raise UnsupportedNodeTypeError(node.type, node.span)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def _is_sole_fragment_markup(path: AstPath, ctx: PrintContext) -> bool:
    """The single markup statement of a fragment program takes no semicolon."""
    node = path.node
    parent = path.parent()
    return (
        ctx.fragment
        and isinstance(node, ExpressionStatement)
        and is_jsx(node.expression)
        and isinstance(parent, Program)
        and len(parent.body) == 1
    )


def _print_statement_sequence(path: AstPath, ctx: PrintContext, name: str) -> Doc:
    node = path.node
    statements = getattr(node, name)
    is_class = isinstance(node, ClassBody)
    semi = ctx.options.semi
    real = [s for s in statements if not isinstance(s, EmptyStatement)]
    last = real[-1] if real else None

    printed: list[Doc] = []
    for i, stmt in enumerate(statements):
        if isinstance(stmt, EmptyStatement):
            continue

        def print_statement(p: AstPath) -> Doc:
            if (
                not semi
                and not is_class
                and not _is_sole_fragment_markup(p, ctx)
                and _statement_needs_asi_protection(p, ctx)
            ):
                return ctx.print(p, needs_semi=True)
            return ctx.print(p)

        parts = [path.call(print_statement, name, i)]

        if not semi and is_class:
            if _class_property_may_cause_asi_problems(stmt):
                parts.append(";")
            elif isinstance(stmt, ClassProperty):
                following = statements[i + 1] if i + 1 < len(statements) else None
                if _class_member_needs_asi_protection(following):
                    parts.append(";")

        if stmt is not last and is_next_line_empty(ctx.source, stmt.end):
            parts.append(HARDLINE)
        printed.append(concat(parts))
    return join(HARDLINE, printed)


def _statement_needs_asi_protection(path: AstPath, ctx: PrintContext) -> bool:
    if not isinstance(path.node, ExpressionStatement):
        return False
    return path.call(lambda p: _expression_needs_asi_protection(p, ctx), "expression")


def _expression_needs_asi_protection(path: AstPath, ctx: PrintContext) -> bool:
    node = path.node
    if (
        needs_parens(path)
        or (isinstance(node, ArrowFunctionExpression) and not _params_without_parens(node, ctx))
        or isinstance(node, (ArrayExpression, TemplateLiteral))
        or (isinstance(node, UnaryExpression) and node.operator in ("+", "-"))
        or is_jsx(node)
    ):
        return True
    if not has_naked_left_side(node):
        return False
    name, index = left_side_field(node)
    return path.call(lambda p: _expression_needs_asi_protection(p, ctx), name, index)


def _class_property_may_cause_asi_problems(node: Node) -> bool:
    return (
        isinstance(node, ClassProperty)
        and node.value is None
        and isinstance(node.key, Identifier)
        and node.key.name in ("static", "get", "set")
    )


def _class_member_needs_asi_protection(node: Node | None) -> bool:
    if node is None or getattr(node, "static", False):
        return False
    if not node.computed and isinstance(node.key, Identifier) and node.key.name in ("in", "instanceof"):
        return True
    match node:
        case ClassProperty():
            return node.computed
        case ClassMethod():
            if node.is_async or node.kind in ("get", "set"):
                return False
            return node.computed or node.generator
    return False


def _print_block(path: AstPath, ctx: PrintContext) -> Doc:
    node: BlockStatement = path.node
    has_content = any(not isinstance(s, EmptyStatement) for s in node.body)
    if (
        not has_content
        and not has_dangling_comments(node)
        and isinstance(path.parent(), (*_PARAMS_OWNERS,))
    ):
        return "{}"
    parts: list[Doc] = ["{"]
    if has_content:
        parts.append(indent(concat([HARDLINE, _print_statement_sequence(path, ctx, "body")])))
    parts.append(print_dangling_comments(path, ctx))
    parts.extend([HARDLINE, "}"])
    return concat(parts)


def _has_leading_own_line_comment(node: Node | None, text: str) -> bool:
    if node is None:
        return False
    if is_jsx(node):
        return has_ignore_comment(node)
    return any(c.leading and has_newline(text, c.end) for c in node.comments)


def _return_argument_has_leading_comment(argument: Node, text: str) -> bool:
    if _has_leading_own_line_comment(argument, text):
        return True
    if has_naked_left_side(argument):
        leftmost = get_left_side(argument)
        while leftmost is not None:
            if _has_leading_own_line_comment(leftmost, text):
                return True
            leftmost = get_left_side(leftmost)
    return False


def _print_return(path: AstPath, ctx: PrintContext, semi: str) -> Doc:
    node: ReturnStatement = path.node
    parts: list[Doc] = ["return"]
    argument = node.argument
    if argument is not None:
        printed = path.call(ctx.print, "argument")
        if _return_argument_has_leading_comment(argument, ctx.source):
            parts.append(concat([" (", indent(concat([HARDLINE, printed])), HARDLINE, ")"]))
        elif is_binaryish(argument) or isinstance(argument, SequenceExpression):
            parts.append(
                group(
                    concat(
                        [" ", if_break("("), indent(concat([SOFTLINE, printed])), SOFTLINE, if_break(")")]
                    )
                )
            )
        else:
            parts.extend([" ", printed])

    last_is_line_comment = bool(node.comments) and not node.comments[-1].is_block
    if last_is_line_comment:
        parts.append(semi)
    if has_dangling_comments(node):
        parts.extend([" ", print_dangling_comments(path, ctx, same_indent=True)])
    if not last_is_line_comment:
        parts.append(semi)
    return concat(parts)


def _adjust_clause(node: Node, clause: Doc, force_space: bool = False) -> Doc:
    if isinstance(node, EmptyStatement):
        return ";"
    if isinstance(node, BlockStatement) or force_space:
        return concat([" ", clause])
    return indent(concat([LINE, clause]))


def _print_if(path: AstPath, ctx: PrintContext) -> Doc:
    node: IfStatement = path.node
    consequent = _adjust_clause(node.consequent, path.call(ctx.print, "consequent"))
    opening = group(
        concat(
            [
                "if (",
                group(concat([indent(concat([SOFTLINE, path.call(ctx.print, "test")])), SOFTLINE])),
                ")",
                consequent,
            ]
        )
    )
    parts: list[Doc] = [opening]
    if node.alternate is not None:
        dangling = [c for c in node.comments if not c.leading and not c.trailing]
        comment_on_own_line = any(
            c.trailing and not c.is_block for c in node.consequent.comments
        ) or (bool(dangling) and not dangling[-1].is_block)
        else_on_same_line = isinstance(node.consequent, BlockStatement) and not comment_on_own_line
        parts.append(" " if else_on_same_line else HARDLINE)
        if dangling:
            parts.extend(
                [
                    print_dangling_comments(path, ctx, same_indent=True),
                    HARDLINE if comment_on_own_line else " ",
                ]
            )
        parts.extend(
            [
                "else",
                group(
                    _adjust_clause(
                        node.alternate,
                        path.call(ctx.print, "alternate"),
                        isinstance(node.alternate, IfStatement),
                    )
                ),
            ]
        )
    return group(concat(parts))


def _print_variable_declaration(path: AstPath, ctx: PrintContext, semi: str) -> Doc:
    node: VariableDeclaration = path.node
    printed = path.map(ctx.print, "declarations")
    has_value = any(d.init is not None for d in node.declarations)
    first: Doc = ""
    if len(printed) == 1 and not node.declarations[0].comments:
        first = printed[0]
    elif printed:
        first = indent(printed[0])
    return group(
        concat(
            [
                node.kind,
                concat([" ", first]) if printed else "",
                indent(concat([concat([",", HARDLINE if has_value else LINE, p]) for p in printed[1:]])),
                semi,
            ]
        )
    )


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


def should_inline_logical_expression(node: Node) -> bool:
    """``a || {...}``: the right side hugs the operator."""
    if not isinstance(node, LogicalExpression):
        return False
    right = node.right
    if isinstance(right, ObjectExpression) and right.properties:
        return True
    if isinstance(right, ArrayExpression) and right.elements:
        return True
    return is_jsx(right)


def _is_member_expression_chain(node: Node) -> bool:
    while isinstance(node, MemberExpression):
        if isinstance(node.object, Identifier):
            return True
        node = node.object
    return False


def _print_assignment_right(path: AstPath, ctx: PrintContext, left: Node, name: str) -> Doc:
    right = getattr(path.node, name)
    printed = path.call(ctx.print, name)
    if _has_leading_own_line_comment(right, ctx.source):
        return indent(concat([HARDLINE, printed]))
    can_break = (
        (is_binaryish(right) and not should_inline_logical_expression(right))
        or (
            isinstance(right, ConditionalExpression)
            and is_binaryish(right.test)
            and not should_inline_logical_expression(right.test)
        )
        or (
            isinstance(left, (Identifier, StringLiteral, MemberExpression))
            and (isinstance(right, StringLiteral) or _is_member_expression_chain(right))
        )
        or isinstance(right, SequenceExpression)
    )
    if can_break:
        return group(indent(concat([LINE, printed])))
    return concat([" ", printed])


def _print_assignment(
    path: AstPath, ctx: PrintContext, left_name: str, operator: str, right_name: str
) -> Doc:
    node = path.node
    left = getattr(node, left_name)
    if isinstance(node, ObjectProperty):
        printed_left = _print_property_key(path, ctx)
    else:
        printed_left = path.call(ctx.print, left_name)
    if getattr(node, right_name) is None:
        return printed_left
    right = _print_assignment_right(path, ctx, left, right_name)
    return group(concat([printed_left, operator, right]))


def _print_property_key(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    key = node.key
    if node.computed:
        return concat(["[", path.call(ctx.print, "key"), "]"])
    # 'a' -> a when the key is a plain identifier name
    if (
        isinstance(key, StringLiteral)
        and key.raw[1:-1] == key.value
        and _IDENTIFIER_NAME_RE.match(key.value)
    ):
        return path.call(lambda p: print_comments(p, key.value, ctx), "key")
    return path.call(ctx.print, "key")


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


def _should_hug_the_only_param(node: Node) -> bool:
    params = getattr(node, "params", ())
    if len(params) != 1 or params[0].comments:
        return False
    param = params[0]
    if isinstance(param, (ObjectExpression, ArrayExpression)):
        return True
    if isinstance(param, AssignmentPattern) and isinstance(param.left, (ObjectExpression, ArrayExpression)):
        right = param.right
        return (
            isinstance(right, Identifier)
            or (isinstance(right, ObjectExpression) and not right.properties)
            or (isinstance(right, ArrayExpression) and not right.elements)
        )
    return False


def _print_function_params(path: AstPath, ctx: PrintContext, expand_arg: bool = False) -> Doc:
    node = path.node
    params = node.params
    in_test_call = is_test_call(path.parent())
    hug = _should_hug_the_only_param(node)
    expand = expand_arg and not any(p.comments for p in params)

    if not params:
        return concat(
            [
                "(",
                print_dangling_comments(
                    path,
                    ctx,
                    same_indent=True,
                    keep=lambda c: next_non_space_non_comment_char(ctx.source, c.end) == ")",
                ),
                ")",
            ]
        )

    last_index = len(params) - 1
    printed: list[Doc] = []
    for index, param in enumerate(params):
        parts = [path.call(ctx.print, "params", index)]
        if index == last_index:
            pass
        elif in_test_call or hug or expand:
            parts.append(", ")
        elif is_next_line_empty(ctx.source, param.end):
            parts.extend([",", HARDLINE, HARDLINE])
        else:
            parts.extend([",", LINE])
        printed.append(concat(parts))

    # verylongcall((a, b) => {
    # }) keeps its parameters on the call line
    if expand:
        return group(concat(["(", *(remove_lines(p) for p in printed), ")"]))
    # function({ a, b }) {} hugs the braces
    if hug or in_test_call:
        return concat(["(", *printed, ")"])

    can_have_trailing_comma = not isinstance(params[-1], RestElement)
    return concat(
        [
            "(",
            indent(concat([SOFTLINE, *printed])),
            if_break("," if can_have_trailing_comma and should_print_comma(ctx, "all") else ""),
            SOFTLINE,
            ")",
        ]
    )


def _print_function(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    parts: list[Doc] = []
    if node.is_async:
        parts.append("async ")
    parts.append("function")
    if node.generator:
        parts.append("*")
    if node.id is not None:
        parts.extend([" ", path.call(ctx.print, "id")])
    parts.extend([group(_print_function_params(path, ctx)), " ", path.call(ctx.print, "body")])
    return concat(parts)


def _print_method(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    parts: list[Doc] = []
    if node.kind in ("get", "set"):
        parts.extend([node.kind, " "])
    else:
        if node.is_async:
            parts.append("async ")
        if node.generator:
            parts.append("*")
    parts.extend(
        [
            _print_property_key(path, ctx),
            group(_print_function_params(path, ctx)),
            " ",
            path.call(ctx.print, "body"),
        ]
    )
    return concat(parts)


def _params_without_parens(node: ArrowFunctionExpression, ctx: PrintContext) -> bool:
    if ctx.options.arrow_parens != "avoid":
        return False
    return (
        len(node.params) == 1
        and isinstance(node.params[0], Identifier)
        and not node.params[0].comments
        and not has_dangling_comments(node)
    )


def _print_arrow(path: AstPath, ctx: PrintContext, flags: dict[str, Any]) -> Doc:
    node: ArrowFunctionExpression = path.node
    expand_flags = {k: v for k, v in flags.items() if k in ("expand_first_arg", "expand_last_arg")}
    expand_arg = bool(expand_flags.get("expand_first_arg") or expand_flags.get("expand_last_arg"))
    text = ctx.source

    parts: list[Doc] = []
    if node.is_async:
        parts.append("async ")
    if _params_without_parens(node, ctx):
        parts.append(path.call(ctx.print, "params", 0))
    else:
        parts.append(group(_print_function_params(path, ctx, expand_arg)))

    def before_arrow(comment: Any) -> bool:
        index = next_non_space_non_comment_index(text, comment.end)
        return index is not None and text.startswith("=>", index)

    dangling = print_dangling_comments(path, ctx, same_indent=True, keep=before_arrow)
    if dangling != "":
        parts.extend([" ", dangling])
    parts.append(" =>")

    body_node = node.body
    body = path.call(lambda p: ctx.print(p, **expand_flags), "body")

    # These bodies always stay on the line of the arrow
    if not _has_leading_own_line_comment(body_node, text) and (
        isinstance(body_node, (ArrayExpression, ObjectExpression, BlockStatement, ArrowFunctionExpression))
        or is_jsx(body_node)
        or is_template_on_its_own_line(body_node, text)
    ):
        return group(concat([concat(parts), " ", body]))

    # The parentheses of a sequence body go on their own lines
    if isinstance(body_node, SequenceExpression):
        return group(
            concat(
                [
                    concat(parts),
                    group(concat([" (", indent(concat([SOFTLINE, body])), SOFTLINE, ")"])),
                ]
            )
        )

    should_add_soft_line = (
        expand_arg or isinstance(path.parent(), JSXExpressionContainer)
    ) and not node.comments
    print_trailing_comma = bool(expand_flags.get("expand_last_arg")) and should_print_comma(ctx, "all")
    # a => a ? a : a is easy to misread as a <= a ? a : a
    should_add_parens = isinstance(body_node, ConditionalExpression) and not starts_with_no_lookahead_token(
        body_node, False
    )
    return group(
        concat(
            [
                concat(parts),
                group(
                    concat(
                        [
                            indent(
                                concat(
                                    [
                                        LINE,
                                        if_break("", "(") if should_add_parens else "",
                                        body,
                                        if_break("", ")") if should_add_parens else "",
                                    ]
                                )
                            ),
                            concat([if_break("," if print_trailing_comma else ""), SOFTLINE])
                            if should_add_soft_line
                            else "",
                        ]
                    )
                ),
            ]
        )
    )


# ---------------------------------------------------------------------------
# Classes and decorators
# ---------------------------------------------------------------------------


def _has_decorators_before_export(node: Node | None) -> bool:
    if not isinstance(node, _EXPORT_TYPES):
        return False
    declaration = node.declaration
    decorators = getattr(declaration, "decorators", ())
    return bool(decorators) and decorators[0].start <= node.start


def _print_class_decorators(path: AstPath, ctx: PrintContext) -> Doc | None:
    node = path.node
    if not isinstance(node, ClassDeclaration) or not node.decorators:
        return None
    parent = path.parent()
    if _has_decorators_before_export(parent):
        return None
    return concat(
        [
            HARDLINE if isinstance(parent, _EXPORT_TYPES) else BREAK_PARENT,
            join(LINE, path.map(ctx.print, "decorators")),
            LINE,
        ]
    )


def _print_member_decorators(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    if not node.decorators:
        return ""
    # Decorators written on their own lines stay there
    own_line = any(has_newline(ctx.source, d.end) for d in node.decorators)
    return group(concat([join(LINE, path.map(ctx.print, "decorators")), HARDLINE if own_line else LINE]))


def _print_class(path: AstPath, ctx: PrintContext) -> Doc:
    node: ClassDeclaration = path.node
    parts: list[Doc] = ["class"]
    group_mode = (node.id is not None and has_trailing_comment(node.id)) or (
        node.superclass is not None and bool(node.superclass.comments)
    )
    heading: list[Doc] = []
    if node.id is not None:
        heading.extend([" ", path.call(ctx.print, "id")])
    if node.superclass is not None:
        printed = concat(["extends ", path.call(ctx.print, "superclass")])
        with_comments = path.call(lambda p: print_comments(p, printed, ctx), "superclass")
        heading.extend([LINE if group_mode else " ", with_comments])
    if group_mode:
        parts.append(group(indent(concat(heading))))
    else:
        parts.extend(heading)
    parts.extend([" ", path.call(ctx.print, "body")])
    return concat(parts)


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------


def _print_braced_specifiers(ctx: PrintContext, printed: list[Doc]) -> Doc:
    return group(
        concat(
            [
                "{",
                indent(concat([LINE, join(concat([",", LINE]), printed)])),
                if_break("," if should_print_comma(ctx) else ""),
                LINE,
                "}",
            ]
        )
    )


def _print_import(path: AstPath, ctx: PrintContext, semi: str) -> Doc:
    node: ImportDeclaration = path.node
    parts: list[Doc] = ["import "]
    if node.specifiers:
        standalone: list[Doc] = []
        grouped: list[Doc] = []
        for i, spec in enumerate(node.specifiers):
            printed = path.call(ctx.print, "specifiers", i)
            if isinstance(spec, (ImportDefaultSpecifier, ImportNamespaceSpecifier)):
                standalone.append(printed)
            else:
                grouped.append(printed)
        if standalone:
            parts.append(join(", ", standalone))
        if standalone and grouped:
            parts.append(", ")
        if len(grouped) == 1 and not standalone and not any(s.comments for s in node.specifiers):
            parts.append(concat(["{ ", grouped[0], " }"]))
        elif grouped:
            parts.append(_print_braced_specifiers(ctx, grouped))
        parts.append(" from ")
    elif _EMPTY_BRACES_RE.search(ctx.source[node.start : node.source.start]):
        parts.append("{} from ")
    parts.extend([path.call(ctx.print, "source"), semi])
    return concat(parts)


def _print_export(path: AstPath, ctx: PrintContext, semi: str) -> Doc:
    node = path.node
    is_default = isinstance(node, ExportDefaultDeclaration)
    parts: list[Doc] = []
    if _has_decorators_before_export(node):
        parts.append(
            path.call(
                lambda p: concat([join(HARDLINE, p.map(ctx.print, "decorators")), HARDLINE]),
                "declaration",
            )
        )
    parts.append("export")
    if is_default:
        parts.append(" default")
    dangling = [c for c in node.comments if not c.leading and not c.trailing]
    if dangling:
        parts.append(print_dangling_comments(path, ctx, same_indent=True))
        if not dangling[-1].is_block:
            parts.append(HARDLINE)

    declaration = node.declaration
    if declaration is not None:
        parts.extend([" ", path.call(ctx.print, "declaration")])
        if is_default and not isinstance(
            declaration, (ClassDeclaration, FunctionDeclaration, FunctionExpression)
        ):
            parts.append(semi)
        return concat(parts)

    if node.specifiers:
        printed = path.map(ctx.print, "specifiers")
        if len(printed) > 1 or any(s.comments for s in node.specifiers):
            parts.extend([" ", _print_braced_specifiers(ctx, printed)])
        else:
            parts.extend([" { ", printed[0], " }"])
    else:
        parts.append(" {}")
    if node.source is not None:
        parts.extend([" from ", path.call(ctx.print, "source")])
    parts.append(semi)
    return concat(parts)


# ---------------------------------------------------------------------------
# Objects and arrays
# ---------------------------------------------------------------------------


def _is_pattern(path: AstPath) -> bool:
    """True if the object or array at *path* is a destructuring target."""
    for depth in range(len(path.stack) - 1, 0, -1):
        parent = path.stack[depth - 1]
        name = path.names[depth][0]
        match parent:
            case (
                FunctionDeclaration()
                | FunctionExpression()
                | ArrowFunctionExpression()
                | ClassMethod()
                | ObjectMethod()
            ):
                return name == "params"
            case VariableDeclarator():
                return name == "id"
            case AssignmentExpression() | AssignmentPattern():
                return name == "left"
            case ObjectProperty():
                if name != "value":
                    return False
            case ObjectExpression() | ArrayExpression() | RestElement():
                pass
            case _:
                return False
    return False


def _print_object(path: AstPath, ctx: PrintContext) -> Doc:
    node: ObjectExpression = path.node
    parent = path.parent()
    text = ctx.source
    is_pattern = _is_pattern(path)

    if is_pattern:
        should_break = not isinstance(parent, (*_PARAMS_OWNERS, AssignmentPattern)) and any(
            isinstance(prop, ObjectProperty)
            and not prop.shorthand
            and isinstance(prop.value, (ObjectExpression, ArrayExpression))
            for prop in node.properties
        )
    else:
        should_break = bool(node.properties) and has_newline_in_range(
            text, node.start, node.properties[0].start
        )

    if not node.properties:
        if not has_dangling_comments(node):
            return "{}"
        return group(concat(["{", print_dangling_comments(path, ctx), SOFTLINE, "}"]))

    separator: list[Doc] = []
    printed: list[Doc] = []
    for i, prop in enumerate(node.properties):
        printed.append(concat([*separator, group(path.call(ctx.print, "properties", i))]))
        separator = [",", LINE]
        if is_next_line_empty(text, prop.end):
            separator.append(HARDLINE)

    can_have_trailing_comma = not isinstance(node.properties[-1], RestElement)
    content = concat(
        [
            "{",
            indent(concat([LINE, *printed])),
            if_break("," if can_have_trailing_comma and should_print_comma(ctx) else ""),
            LINE,
            "}",
        ]
    )

    # The hugged only parameter breaks together with its function
    if (
        path.name == "params"
        and path.index == 0
        and isinstance(parent, _PARAMS_OWNERS)
        and _should_hug_the_only_param(parent)
    ):
        return content
    return group(content, should_break=should_break)


def _print_array(path: AstPath, ctx: PrintContext) -> Doc:
    node: ArrayExpression = path.node
    if not node.elements:
        if not has_dangling_comments(node):
            return "[]"
        return group(concat(["[", print_dangling_comments(path, ctx), SOFTLINE, "]"]))

    last = node.elements[-1]
    can_have_trailing_comma = not isinstance(last, RestElement)
    # [1, ,] needs its comma to keep the hole
    needs_forced_trailing_comma = can_have_trailing_comma and last is None

    items: list[Doc] = []
    separator: list[Doc] = []
    for i, element in enumerate(node.elements):
        items.append(concat(separator))
        items.append(group(path.call(ctx.print, "elements", i)))
        separator = [",", LINE]
        if element is not None and is_next_line_empty(ctx.source, element.end):
            separator.append(SOFTLINE)

    return group(
        concat(
            [
                "[",
                indent(concat([SOFTLINE, *items])),
                "," if needs_forced_trailing_comma else "",
                if_break(
                    ","
                    if can_have_trailing_comma
                    and not needs_forced_trailing_comma
                    and should_print_comma(ctx)
                    else ""
                ),
                print_dangling_comments(path, ctx, same_indent=True),
                SOFTLINE,
                "]",
            ]
        )
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_UNLIMITED_WIDTH = sys.maxsize


def _is_simple_template_literal(node: TemplateLiteral) -> bool:
    if not node.expressions:
        return False
    for expr in node.expressions:
        if expr.comments:
            return False
        if isinstance(expr, (Identifier, ThisExpression)):
            continue
        if not isinstance(expr, MemberExpression):
            return False
        head: Node = expr
        while isinstance(head, MemberExpression):
            if not isinstance(head.property, (Identifier, StringLiteral, NumericLiteral)):
                return False
            head = head.object
            if head.comments:
                return False
        if not isinstance(head, (Identifier, ThisExpression)):
            return False
    return True


def _print_template_literal(path: AstPath, ctx: PrintContext) -> Doc:
    node: TemplateLiteral = path.node
    expressions = path.map(ctx.print, "expressions")
    simple = _is_simple_template_literal(node)
    if simple:
        options = ctx.options
        expressions = [
            render(doc, _UNLIMITED_WIDTH, options.tab_width, options.use_tabs) for doc in expressions
        ]

    parts: list[Doc] = [LINE_SUFFIX_BOUNDARY, "`"]
    for i in range(len(node.quasis)):
        parts.append(path.call(ctx.print, "quasis", i))
        if i >= len(expressions):
            continue
        printed = expressions[i]
        expr = node.expressions[i]
        # Prefer breaking at ${ and } over breaking inside these
        if not simple and (
            expr.comments
            or isinstance(expr, (MemberExpression, ConditionalExpression, SequenceExpression))
            or is_binaryish(expr)
        ):
            printed = concat([indent(concat([SOFTLINE, printed])), SOFTLINE])
        parts.append(group(concat(["${", printed, LINE_SUFFIX_BOUNDARY, "}"])))
    parts.append("`")
    return concat(parts)


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def _print_sequence(path: AstPath, ctx: PrintContext) -> Doc:
    printed = path.map(ctx.print, "expressions")
    if isinstance(path.parent(), ExpressionStatement):
        # Expressions after the first are indented
        parts = [printed[0]]
        for doc in printed[1:]:
            parts.extend([",", indent(concat([LINE, doc]))])
        return group(concat(parts))
    return group(join(concat([",", LINE]), printed))


def _print_binaryish_parts(path: AstPath, ctx: PrintContext, nested: bool, inside_parens: bool) -> list[Doc]:
    node = path.node
    if not is_binaryish(node):
        return [group(ctx.print(path))]

    left = node.left
    if is_binaryish(left) and should_flatten(node.operator, left.operator):
        # Same precedence: flatten the left side into this chain
        parts = path.call(lambda p: _print_binaryish_parts(p, ctx, True, inside_parens), "left")
    else:
        parts = [group(path.call(ctx.print, "left"))]

    right_doc = path.call(ctx.print, "right")
    if should_inline_logical_expression(node):
        right: Doc = concat([node.operator, " ", right_doc])
    else:
        right = concat([node.operator, LINE, right_doc])

    # A lone binary expression keeps a short right side on its line
    parent = path.parent()
    should_group = (
        not (inside_parens and isinstance(node, LogicalExpression))
        and type(parent) is not type(node)
        and type(node.left) is not type(node)
        and type(node.right) is not type(node)
    )
    parts.extend([" ", group(right) if should_group else right])

    # Nested nodes do not pass through the driver, so print their comments here
    if nested and node.comments:
        return [print_comments(path, concat(parts), ctx)]
    return parts


def _print_binaryish(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    parent = path.parent()
    grandparent = path.grandparent()
    inside_parens = isinstance(parent, IfStatement) and path.name == "test"
    parts = _print_binaryish_parts(path, ctx, False, inside_parens)

    if inside_parens:
        return concat(parts)

    # (
    #   a &&
    #   b
    # ).call()
    if (
        (isinstance(parent, (CallExpression, NewExpression)) and path.name == "callee")
        or isinstance(parent, UnaryExpression)
        or (isinstance(parent, MemberExpression) and not parent.computed)
    ):
        return group(concat([indent(concat([SOFTLINE, *parts])), SOFTLINE]))

    # Where the first operand is already indented, the rest is not
    should_not_indent = (
        isinstance(parent, ReturnStatement)
        or (isinstance(parent, JSXExpressionContainer) and isinstance(grandparent, JSXAttribute))
        or (isinstance(parent, ArrowFunctionExpression) and path.name == "body")
        or (
            isinstance(parent, ConditionalExpression)
            and not isinstance(grandparent, (ReturnStatement, CallExpression))
        )
    )
    should_indent_if_inlining = isinstance(
        parent, (AssignmentExpression, VariableDeclarator, ClassProperty, ObjectProperty)
    )
    same_precedence_sub_expression = is_binaryish(node.left) and should_flatten(
        node.operator, node.left.operator
    )
    inline = should_inline_logical_expression(node)
    if (
        should_not_indent
        or (inline and not same_precedence_sub_expression)
        or (not inline and should_indent_if_inlining)
    ):
        return group(concat(parts))

    if is_jsx(node.right):
        # The markup operand stays outside the chain's indentation
        chain = group(concat([parts[0], indent(concat(parts[1:-1]))]))
        return group(concat([chain, parts[-1]]))
    return group(concat([parts[0], indent(concat(parts[1:]))]))


# ---------------------------------------------------------------------------
# Conditionals
# ---------------------------------------------------------------------------


def _conditional_chain_contents(node: Node) -> list[Node]:
    """Every non-conditional operand of a nested conditional chain."""
    result: list[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, ConditionalExpression):
            stack.extend([current.alternate, current.consequent, current.test])
        else:
            result.append(current)
    return result


def _print_conditional(path: AstPath, ctx: PrintContext) -> Doc:
    node: ConditionalExpression = path.node
    parent = path.parent()
    parent_is_conditional = isinstance(parent, ConditionalExpression)
    force_no_indent = parent_is_conditional

    # The outermost conditional of the chain, and the node above it
    last_conditional: Node = node
    current = path.parent(0)
    level = 1
    while isinstance(current, ConditionalExpression):
        last_conditional = current
        current = path.parent(level)
        level += 1
    first_non_conditional = current if current is not None else parent

    jsx_mode = (
        is_jsx(node.test)
        or is_jsx(node.consequent)
        or is_jsx(node.alternate)
        or any(is_jsx(n) for n in _conditional_chain_contents(last_conditional))
    )

    consequent = path.call(ctx.print, "consequent")
    alternate = path.call(ctx.print, "alternate")
    if jsx_mode:
        force_no_indent = True

        # Parentheses act like the braces of an if statement
        def wrap(doc: Doc) -> Doc:
            return concat([if_break("("), indent(concat([SOFTLINE, doc])), SOFTLINE, if_break(")")])

        body: Doc = concat(
            [
                " ? ",
                consequent if isinstance(node.consequent, NullLiteral) else wrap(consequent),
                " : ",
                alternate
                if isinstance(node.alternate, (ConditionalExpression, NullLiteral))
                else wrap(alternate),
            ]
        )
    else:
        nested_consequent = isinstance(node.consequent, ConditionalExpression)
        part = concat(
            [
                LINE,
                "? ",
                if_break("", "(") if nested_consequent else "",
                align(2, consequent),
                if_break("", ")") if nested_consequent else "",
                LINE,
                ": ",
                alternate if isinstance(node.alternate, ConditionalExpression) else align(2, alternate),
            ]
        )
        if not parent_is_conditional or parent.alternate is node:
            body = part
        elif ctx.options.use_tabs:
            body = dedent(indent(part))
        else:
            body = align(max(0, ctx.options.tab_width - 2), part)

    # (a
    #   ? b
    #   : c
    # ).call()
    break_closing_paren = not jsx_mode and isinstance(parent, MemberExpression) and not parent.computed

    test = path.call(ctx.print, "test")
    if parent_is_conditional and parent.alternate is node:
        test = align(2, test)
    doc = concat(
        [
            test,
            body if force_no_indent else indent(body),
            SOFTLINE if break_closing_paren else "",
        ]
    )
    # The whole chain breaks together, so only the outermost is grouped
    if parent is first_non_conditional:
        return group(doc)
    return doc


__all__ = ["print_path", "should_inline_logical_expression"]