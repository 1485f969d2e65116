"""When an expression must be wrapped in parentheses to keep its meaning."""

from __future__ import annotations

from vxfmt.ast import (
    PRECEDENCE,
    ArrowFunctionExpression,
    AssignmentExpression,
    AwaitExpression,
    BinaryExpression,
    BlockStatement,
    CallExpression,
    ClassDeclaration,
    ConditionalExpression,
    Decorator,
    EmptyStatement,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    ExpressionStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    ImportDeclaration,
    JSXSpreadAttribute,
    LogicalExpression,
    MemberExpression,
    NewExpression,
    Node,
    NumericLiteral,
    ObjectExpression,
    Program,
    ReturnStatement,
    SequenceExpression,
    SpreadElement,
    TaggedTemplateExpression,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
)
from vxfmt.path import AstPath

_STATEMENTS = (
    Program,
    ExpressionStatement,
    EmptyStatement,
    BlockStatement,
    ReturnStatement,
    IfStatement,
    VariableDeclaration,
    FunctionDeclaration,
    ImportDeclaration,
    ExportNamedDeclaration,
    ExportDefaultDeclaration,
)

_EQUALITY = frozenset({"==", "!=", "===", "!=="})
_MULTIPLICATIVE = frozenset({"*", "/", "%"})
_BITSHIFT = frozenset({">>", ">>>", "<<"})
_BITWISE = _BITSHIFT | {"|", "^", "&"}


def _is_statement(node: Node) -> bool:
    if isinstance(node, ClassDeclaration):
        return not node.is_expression
    return isinstance(node, _STATEMENTS)


def _is_class_expression(node: Node) -> bool:
    return isinstance(node, ClassDeclaration) and node.is_expression


def should_flatten(parent_op: str, node_op: str) -> bool:
    """True if ``a <node_op> b <parent_op> c`` can print without parentheses."""
    if PRECEDENCE.get(node_op) != PRECEDENCE.get(parent_op):
        return False
    # x ** y ** z --> x ** (y ** z)
    if parent_op == "**":
        return False
    # x == y == z --> (x == y) == z
    if parent_op in _EQUALITY and node_op in _EQUALITY:
        return False
    # x * y % z --> (x * y) % z
    if (node_op == "%" and parent_op in _MULTIPLICATIVE) or (
        parent_op == "%" and node_op in _MULTIPLICATIVE
    ):
        return False
    # x * y / z --> (x * y) / z
    if node_op != parent_op and node_op in _MULTIPLICATIVE and parent_op in _MULTIPLICATIVE:
        return False
    # x << y << z --> (x << y) << z
    if parent_op in _BITSHIFT and node_op in _BITSHIFT:
        return False
    return True


# ---------------------------------------------------------------------------
# Left-side walking
# ---------------------------------------------------------------------------


def has_naked_left_side(node: Node) -> bool:
    """True if the first token of *node* belongs to a sub-expression."""
    if isinstance(node, UpdateExpression):
        return not node.prefix
    return isinstance(
        node,
        (
            AssignmentExpression,
            BinaryExpression,
            LogicalExpression,
            ConditionalExpression,
            CallExpression,
            MemberExpression,
            SequenceExpression,
            TaggedTemplateExpression,
        ),
    )


def left_side_field(node: Node) -> tuple[str, int | None]:
    """The field holding the left-most sub-expression of *node*."""
    match node:
        case SequenceExpression():
            return "expressions", 0
        case AssignmentExpression() | BinaryExpression() | LogicalExpression():
            return "left", None
        case ConditionalExpression():
            return "test", None
        case MemberExpression():
            return "object", None
        case CallExpression() | NewExpression():
            return "callee", None
        case TaggedTemplateExpression():
            return "tag", None
        case UpdateExpression() | UnaryExpression() | AwaitExpression():
            return "argument", None
    raise ValueError(f"{node.type} has no left side")


def get_left_side(node: Node) -> Node | None:
    try:
        name, index = left_side_field(node)
    except ValueError:
        return None
    value = getattr(node, name)
    return value[index] if index is not None else value


def starts_with_no_lookahead_token(node: Node, forbid_function_class: bool) -> bool:
    """True if *node* would start with ``{`` (or ``function``/``class``)."""
    while True:
        match node:
            case ObjectExpression():
                return True
            case FunctionExpression():
                return forbid_function_class
            case ClassDeclaration() if node.is_expression:
                return forbid_function_class
            case MemberExpression():
                node = node.object
            case TaggedTemplateExpression():
                if isinstance(node.tag, FunctionExpression):
                    return False
                node = node.tag
            case CallExpression():
                if isinstance(node.callee, FunctionExpression):
                    return False
                node = node.callee
            case ConditionalExpression():
                node = node.test
            case UpdateExpression():
                if node.prefix:
                    return False
                node = node.argument
            case SequenceExpression():
                node = node.expressions[0]
            case AssignmentExpression() | BinaryExpression() | LogicalExpression():
                node = node.left
            case _:
                return False


# ---------------------------------------------------------------------------
# needs_parens
# ---------------------------------------------------------------------------


def _decorator_needs_parens(node: Node) -> bool:
    has_call = has_member = False
    current: Node | None = node
    while current is not None:
        match current:
            case MemberExpression():
                has_member = True
                current = current.object
            case CallExpression():
                if has_member or has_call:
                    return True
                has_call = True
                current = current.callee
            case Identifier():
                return False
            case _:
                return True
    return True


def _wrap_for_export_default(path: AstPath) -> bool:
    node = path.node
    parent = path.parent()
    if isinstance(node, FunctionExpression) or _is_class_expression(node):
        return isinstance(parent, ExportDefaultDeclaration) or not needs_parens(path)
    if not has_naked_left_side(node) or (
        not isinstance(parent, ExportDefaultDeclaration) and needs_parens(path)
    ):
        return False
    name, index = left_side_field(node)
    return path.call(_wrap_for_export_default, name, index)


def _binaryish_in_parent(node: Node, parent: Node, name: str | None) -> bool:
    match parent:
        case CallExpression() | NewExpression():
            return name == "callee"
        case (
            TaggedTemplateExpression()
            | UnaryExpression()
            | JSXSpreadAttribute()
            | SpreadElement()
            | AwaitExpression()
            | UpdateExpression()
        ):
            return True
        case MemberExpression():
            return name == "object"
        case BinaryExpression() | LogicalExpression():
            po, no = parent.operator, node.operator
            # `??` cannot mix with `||` or `&&` without parentheses
            if (po == "??") != (no == "??") and {po, no} & {"||", "&&"}:
                return True
            pp, np = PRECEDENCE[po], PRECEDENCE[no]
            if pp > np:
                return True
            if pp == np and name == "right":
                return True
            if pp == np and not should_flatten(po, no):
                return True
            if pp < np and no == "%":
                return po in ("+", "-")
            return po in _BITWISE
    return False


def needs_parens(path: AstPath) -> bool:
    """True if the node at *path* must be printed inside parentheses."""
    node = path.node
    parent = path.parent()
    name = path.name
    if parent is None or _is_statement(node) or isinstance(node, Identifier):
        return False

    if isinstance(parent, ClassDeclaration) and name == "superclass":
        if isinstance(
            node,
            (
                ArrowFunctionExpression,
                AssignmentExpression,
                AwaitExpression,
                BinaryExpression,
                ConditionalExpression,
                LogicalExpression,
                NewExpression,
                ObjectExpression,
                SequenceExpression,
                TaggedTemplateExpression,
                UnaryExpression,
                UpdateExpression,
            ),
        ):
            return True

    if isinstance(parent, ExportDefaultDeclaration):
        # `export default function () {}` is a declaration form of its own
        if isinstance(node, FunctionExpression) or _is_class_expression(node):
            return False
        return isinstance(node, SequenceExpression) or _wrap_for_export_default(path)

    if isinstance(parent, Decorator) and name == "expression":
        return _decorator_needs_parens(node)

    if isinstance(parent, ExpressionStatement) and starts_with_no_lookahead_token(node, True):
        return True

    if (
        isinstance(parent, ArrowFunctionExpression)
        and name == "body"
        and not isinstance(node, SequenceExpression)
        and starts_with_no_lookahead_token(node, False)
    ):
        return True

    match node:
        case UpdateExpression() if isinstance(parent, UnaryExpression):
            return node.prefix and (
                (node.operator == "++" and parent.operator == "+")
                or (node.operator == "--" and parent.operator == "-")
            )
        case UnaryExpression() | UpdateExpression():
            match parent:
                case UnaryExpression():
                    return node.operator == parent.operator and node.operator in ("+", "-")
                case MemberExpression():
                    return name == "object"
                case TaggedTemplateExpression():
                    return True
                case CallExpression() | NewExpression():
                    return name == "callee"
                case BinaryExpression():
                    return parent.operator == "**" and name == "left"
            return False
        case BinaryExpression() if isinstance(parent, UpdateExpression):
            return True
        case BinaryExpression() | LogicalExpression():
            return _binaryish_in_parent(node, parent, name)
        case SequenceExpression():
            match parent:
                case ReturnStatement():
                    return False
                case ExpressionStatement():
                    return name != "expression"
                case ArrowFunctionExpression():
                    # Arrow bodies print their own parentheses
                    return name != "body"
            return True
        case AwaitExpression():
            match parent:
                case TaggedTemplateExpression() | UnaryExpression() | SpreadElement():
                    return True
                case MemberExpression():
                    return name == "object"
                case CallExpression() | NewExpression():
                    return name == "callee"
                case ConditionalExpression():
                    return name == "test"
                case BinaryExpression():
                    return True
            return False
        case NumericLiteral():
            return isinstance(parent, MemberExpression) and name == "object"
        case AssignmentExpression():
            if isinstance(parent, ArrowFunctionExpression) and name == "body":
                return True
            if isinstance(parent, ExpressionStatement):
                return isinstance(node.left, ObjectExpression)
            return not isinstance(parent, AssignmentExpression)
        case ConditionalExpression():
            match parent:
                case (
                    TaggedTemplateExpression()
                    | UnaryExpression()
                    | SpreadElement()
                    | BinaryExpression()
                    | LogicalExpression()
                    | ExportDefaultDeclaration()
                    | AwaitExpression()
                    | JSXSpreadAttribute()
                ):
                    return True
                case CallExpression() | NewExpression():
                    return name == "callee"
                case ConditionalExpression():
                    return name == "test"
                case MemberExpression():
                    return name == "object"
            return False
        case FunctionExpression():
            match parent:
                case CallExpression():
                    return name == "callee"
                case TaggedTemplateExpression():
                    return True
            return False
        case ArrowFunctionExpression():
            match parent:
                case CallExpression() | NewExpression():
                    return name == "callee"
                case MemberExpression():
                    return name == "object"
                case (
                    TaggedTemplateExpression()
                    | UnaryExpression()
                    | LogicalExpression()
                    | BinaryExpression()
                    | AwaitExpression()
                ):
                    return True
                case ConditionalExpression():
                    return name == "test"
            return False
        case ClassDeclaration():
            return isinstance(parent, NewExpression) and name == "callee"
        case CallExpression() | MemberExpression() | TaggedTemplateExpression():
            if isinstance(parent, NewExpression) and name == "callee":
                current: Node | None = node
                while current is not None:
                    match current:
                        case CallExpression():
                            return True
                        case MemberExpression():
                            current = current.object
                        case TaggedTemplateExpression():
                            current = current.tag
                        case _:
                            return False
            return False
    return False
