"""Syntax node types produced by the parser.

Every node carries its source ``span`` and a ``comments`` list that only the
comment attacher appends to. Child nodes are found generically from the
dataclass fields, so attachment and dumping need no per-type tables.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import Any

from vxfmt.tokens import Span


@dataclass(eq=False, slots=True)
class Comment:
    """A ``//`` line or ``/* */`` block comment; value excludes delimiters."""

    kind: str  # "line" | "block"
    value: str
    span: Span
    leading: bool = False
    trailing: bool = False
    placement: str = ""  # "own-line" | "end-of-line" | "remaining", set on attach

    @property
    def start(self) -> int:
        return self.span.start.offset

    @property
    def end(self) -> int:
        return self.span.end.offset

    @property
    def is_block(self) -> bool:
        return self.kind == "block"

    def text(self) -> str:
        if self.kind == "block":
            return f"/*{self.value}*/"
        return f"//{self.value}"


@dataclass(frozen=True, slots=True, eq=False)
class Node:
    span: Span = field(kw_only=True)
    comments: list[Comment] = field(default_factory=list, kw_only=True)

    @property
    def type(self) -> str:
        return type(self).__name__

    @property
    def start(self) -> int:
        return self.span.start.offset

    @property
    def end(self) -> int:
        return self.span.end.offset


def child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of *node* in field order.

    A shorthand property holds the same node as key and value; it is
    yielded once.
    """
    previous: Node | None = None
    for f in fields(node):
        if f.name in ("span", "comments"):
            continue
        value: Any = getattr(node, f.name)
        items = value if isinstance(value, tuple) else (value,)
        for item in items:
            if isinstance(item, Node) and item is not previous:
                previous = item
                yield item


# ---------------------------------------------------------------------------
# Program and statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, eq=False)
class Program(Node):
    body: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class ExpressionStatement(Node):
    expression: Node


@dataclass(frozen=True, slots=True, eq=False)
class EmptyStatement(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class BlockStatement(Node):
    body: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class ReturnStatement(Node):
    argument: Node | None


@dataclass(frozen=True, slots=True, eq=False)
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Node | None


@dataclass(frozen=True, slots=True, eq=False)
class VariableDeclarator(Node):
    id: Node
    init: Node | None


@dataclass(frozen=True, slots=True, eq=False)
class VariableDeclaration(Node):
    kind: str  # var | let | const
    declarations: tuple[VariableDeclarator, ...]


@dataclass(frozen=True, slots=True, eq=False)
class FunctionDeclaration(Node):
    id: Node | None
    params: tuple[Node, ...]
    body: BlockStatement
    is_async: bool = False
    generator: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class Decorator(Node):
    expression: Node


@dataclass(frozen=True, slots=True, eq=False)
class ClassProperty(Node):
    decorators: tuple[Decorator, ...]
    key: Node
    value: Node | None
    computed: bool = False
    static: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class ClassMethod(Node):
    decorators: tuple[Decorator, ...]
    key: Node
    params: tuple[Node, ...]
    body: BlockStatement
    kind: str = "method"  # method | get | set | constructor
    computed: bool = False
    static: bool = False
    is_async: bool = False
    generator: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class ClassBody(Node):
    body: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class ClassDeclaration(Node):
    decorators: tuple[Decorator, ...]
    id: Node | None
    superclass: Node | None
    body: ClassBody
    is_expression: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class ImportSpecifier(Node):
    imported: Node
    local: Node


@dataclass(frozen=True, slots=True, eq=False)
class ImportDefaultSpecifier(Node):
    local: Node


@dataclass(frozen=True, slots=True, eq=False)
class ImportNamespaceSpecifier(Node):
    local: Node


@dataclass(frozen=True, slots=True, eq=False)
class ImportDeclaration(Node):
    specifiers: tuple[Node, ...]
    source: Node


@dataclass(frozen=True, slots=True, eq=False)
class ExportSpecifier(Node):
    local: Node
    exported: Node


@dataclass(frozen=True, slots=True, eq=False)
class ExportNamedDeclaration(Node):
    declaration: Node | None
    specifiers: tuple[ExportSpecifier, ...]
    source: Node | None


@dataclass(frozen=True, slots=True, eq=False)
class ExportDefaultDeclaration(Node):
    declaration: Node


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, eq=False)
class Identifier(Node):
    name: str


@dataclass(frozen=True, slots=True, eq=False)
class PrivateName(Node):
    name: str


@dataclass(frozen=True, slots=True, eq=False)
class ThisExpression(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class Super(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class NumericLiteral(Node):
    raw: str


@dataclass(frozen=True, slots=True, eq=False)
class StringLiteral(Node):
    value: str  # cooked value
    raw: str  # source text including quotes


@dataclass(frozen=True, slots=True, eq=False)
class BooleanLiteral(Node):
    value: bool


@dataclass(frozen=True, slots=True, eq=False)
class NullLiteral(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class TemplateElement(Node):
    raw: str
    tail: bool


@dataclass(frozen=True, slots=True, eq=False)
class TemplateLiteral(Node):
    quasis: tuple[TemplateElement, ...]
    expressions: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class TaggedTemplateExpression(Node):
    tag: Node
    quasi: TemplateLiteral


@dataclass(frozen=True, slots=True, eq=False)
class ArrayExpression(Node):
    elements: tuple[Node | None, ...]


@dataclass(frozen=True, slots=True, eq=False)
class ObjectProperty(Node):
    key: Node
    value: Node
    computed: bool = False
    shorthand: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class ObjectMethod(Node):
    key: Node
    params: tuple[Node, ...]
    body: BlockStatement
    kind: str = "method"  # method | get | set
    computed: bool = False
    is_async: bool = False
    generator: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class ObjectExpression(Node):
    properties: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class SpreadElement(Node):
    argument: Node


@dataclass(frozen=True, slots=True, eq=False)
class RestElement(Node):
    argument: Node


@dataclass(frozen=True, slots=True, eq=False)
class AssignmentPattern(Node):
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, eq=False)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class CallExpression(Node):
    callee: Node
    arguments: tuple[Node, ...]
    optional: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class NewExpression(Node):
    callee: Node
    arguments: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class ArrowFunctionExpression(Node):
    params: tuple[Node, ...]
    body: Node
    is_async: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class FunctionExpression(Node):
    id: Node | None
    params: tuple[Node, ...]
    body: BlockStatement
    is_async: bool = False
    generator: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class UnaryExpression(Node):
    operator: str
    argument: Node


@dataclass(frozen=True, slots=True, eq=False)
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool


@dataclass(frozen=True, slots=True, eq=False)
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, eq=False)
class LogicalExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, eq=False)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass(frozen=True, slots=True, eq=False)
class AssignmentExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True, eq=False)
class SequenceExpression(Node):
    expressions: tuple[Node, ...]


@dataclass(frozen=True, slots=True, eq=False)
class AwaitExpression(Node):
    argument: Node


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, eq=False)
class JSXIdentifier(Node):
    name: str


@dataclass(frozen=True, slots=True, eq=False)
class JSXNamespacedName(Node):
    namespace: JSXIdentifier
    name: JSXIdentifier


@dataclass(frozen=True, slots=True, eq=False)
class JSXMemberExpression(Node):
    object: Node
    property: JSXIdentifier


@dataclass(frozen=True, slots=True, eq=False)
class JSXAttribute(Node):
    name: Node
    value: Node | None


@dataclass(frozen=True, slots=True, eq=False)
class JSXSpreadAttribute(Node):
    argument: Node


@dataclass(frozen=True, slots=True, eq=False)
class JSXOpeningElement(Node):
    name: Node
    attributes: tuple[Node, ...]
    self_closing: bool


@dataclass(frozen=True, slots=True, eq=False)
class JSXClosingElement(Node):
    name: Node


@dataclass(frozen=True, slots=True, eq=False)
class JSXOpeningFragment(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class JSXClosingFragment(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class JSXText(Node):
    raw: str


@dataclass(frozen=True, slots=True, eq=False)
class JSXEmptyExpression(Node):
    pass


@dataclass(frozen=True, slots=True, eq=False)
class JSXExpressionContainer(Node):
    expression: Node


@dataclass(frozen=True, slots=True, eq=False)
class JSXSpreadChild(Node):
    expression: Node


@dataclass(frozen=True, slots=True, eq=False)
class JSXElement(Node):
    opening_element: JSXOpeningElement
    children: tuple[Node, ...]
    closing_element: JSXClosingElement | None


@dataclass(frozen=True, slots=True, eq=False)
class JSXFragment(Node):
    opening_fragment: JSXOpeningFragment
    children: tuple[Node, ...]
    closing_fragment: JSXClosingFragment


@dataclass(frozen=True, slots=True, eq=False)
class HTMLComment(Node):
    value: str


@dataclass(frozen=True, slots=True, eq=False)
class MarkupRoot(Node):
    """Top of an HTML payload: a run of markup children."""

    children: tuple[Node, ...]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

FUNCTION_TYPES = (FunctionExpression, ArrowFunctionExpression)
JSX_TYPES = (JSXElement, JSXFragment)


def is_jsx(node: Node | None) -> bool:
    return isinstance(node, JSX_TYPES)


def is_literal(node: Node | None) -> bool:
    return isinstance(
        node,
        (BooleanLiteral, NullLiteral, NumericLiteral, StringLiteral, TemplateLiteral, JSXText),
    )


def is_binaryish(node: Node | None) -> bool:
    return isinstance(node, (BinaryExpression, LogicalExpression))


def is_call(node: Node | None) -> bool:
    return isinstance(node, CallExpression)


def is_memberish(node: Node | None) -> bool:
    return isinstance(node, MemberExpression)


PRECEDENCE: dict[str, int] = {}
for _tier, _ops in enumerate(
    [
        ["|>"],
        ["??"],
        ["||"],
        ["&&"],
        ["|"],
        ["^"],
        ["&"],
        ["==", "===", "!=", "!=="],
        ["<", ">", "<=", ">=", "in", "instanceof"],
        [">>", "<<", ">>>"],
        ["+", "-"],
        ["*", "/", "%"],
        ["**"],
    ]
):
    for _op in _ops:
        PRECEDENCE[_op] = _tier

LOGICAL_OPERATORS = frozenset({"||", "&&", "??"})
