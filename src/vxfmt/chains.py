"""Calls, member lookups, member chains and argument lists.

A chain such as ``a.b(x).c(y).d(z)`` is linearized into printed nodes,
cut into groups (a head group, then one group per ``.name(...)`` segment)
and printed either on one line or with one segment per indented line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from vxfmt.ast import (
    ArrayExpression,
    ArrowFunctionExpression,
    AssignmentExpression,
    BlockStatement,
    CallExpression,
    ConditionalExpression,
    ExpressionStatement,
    FunctionExpression,
    Identifier,
    MemberExpression,
    NewExpression,
    Node,
    NumericLiteral,
    ObjectExpression,
    StringLiteral,
    TaggedTemplateExpression,
    TemplateLiteral,
    ThisExpression,
    VariableDeclarator,
    is_jsx,
    is_memberish,
)
from vxfmt.comments import (
    has_leading_comment,
    has_trailing_comment,
    print_comments,
    print_dangling_comments,
)
from vxfmt.doc import (
    BREAK_PARENT,
    HARDLINE,
    LINE,
    SOFTLINE,
    Doc,
    concat,
    conditional_group,
    group,
    if_break,
    indent,
    join,
    will_break,
)
from vxfmt.parens import needs_parens
from vxfmt.path import AstPath, PrintContext
from vxfmt.utils import (
    has_newline,
    is_next_line_empty,
    is_next_line_empty_after_index,
    next_non_space_non_comment_index,
)

_UNIT_TEST_RE = re.compile(r"^(skip|[fx]?(it|describe|test))$")
_FACTORY_RE = re.compile(r"^[A-Z]|^[_$]+$")

_COMPOSITION_FUNCTIONS = frozenset(
    {
        "pipe",
        "pipeP",
        "pipeK",
        "compose",
        "composeFlipped",
        "composeP",
        "composeK",
        "flow",
        "flowRight",
        "connect",
        "createSelector",
    }
)
# Method names that look like composition functions but are not
_ORDINARY_METHODS = frozenset({"connect"})


def should_print_comma(ctx: PrintContext, level: str = "es5") -> bool:
    """True if trailing commas of *level* ("es5" or "all") are enabled."""
    setting = ctx.options.trailing_comma
    if level == "all":
        return setting == "all"
    return setting in ("es5", "all")


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_function_or_arrow(node: Node | None) -> bool:
    return isinstance(node, (FunctionExpression, ArrowFunctionExpression))


def _is_function_or_arrow_with_body(node: Node) -> bool:
    return isinstance(node, FunctionExpression) or (
        isinstance(node, ArrowFunctionExpression) and isinstance(node.body, BlockStatement)
    )


def template_has_newlines(template: TemplateLiteral) -> bool:
    return any("\n" in quasi.raw for quasi in template.quasis)


def is_template_on_its_own_line(node: Node, text: str) -> bool:
    """A multi-line template that starts on the line of the code before it."""
    if isinstance(node, TemplateLiteral):
        multiline = template_has_newlines(node)
    elif isinstance(node, TaggedTemplateExpression):
        multiline = template_has_newlines(node.quasi)
    else:
        return False
    return multiline and not has_newline(text, node.start, backwards=True)


def _is_skip_or_only_block(node: CallExpression) -> bool:
    callee = node.callee
    return (
        isinstance(callee, MemberExpression)
        and isinstance(callee.object, Identifier)
        and isinstance(callee.property, Identifier)
        and _UNIT_TEST_RE.match(callee.object.name) is not None
        and callee.property.name in ("only", "skip")
    )


def is_test_call(node: Node | None) -> bool:
    """``describe("name", () => {...})`` and friends."""
    if not isinstance(node, CallExpression):
        return False
    args = node.arguments
    if len(args) not in (2, 3):
        return False
    callee = node.callee
    named = isinstance(callee, Identifier) and _UNIT_TEST_RE.match(callee.name) is not None
    if not (named or _is_skip_or_only_block(node)):
        return False
    if not isinstance(args[0], (TemplateLiteral, StringLiteral)):
        return False
    # it("name", () => { ... }, 2500)
    if len(args) == 3 and not isinstance(args[2], NumericLiteral):
        return False
    if len(args) == 2:
        return is_function_or_arrow(args[1])
    return _is_function_or_arrow_with_body(args[1]) and len(args[1].params) <= 1


def is_function_composition(node: Node) -> bool:
    match node:
        case MemberExpression():
            return is_function_composition(node.property) and not (
                isinstance(node.property, Identifier) and node.property.name in _ORDINARY_METHODS
            )
        case Identifier():
            return node.name in _COMPOSITION_FUNCTIONS
        case StringLiteral():
            return node.value in _COMPOSITION_FUNCTIONS
    return False


def could_group_arg(arg: Node) -> bool:
    """True if *arg* may hug the parentheses of its call when expanded."""
    match arg:
        case ObjectExpression():
            return bool(arg.properties or arg.comments)
        case ArrayExpression():
            return bool(arg.elements or arg.comments)
        case FunctionExpression():
            return True
        case ArrowFunctionExpression():
            return isinstance(
                arg.body,
                (
                    BlockStatement,
                    ArrowFunctionExpression,
                    ObjectExpression,
                    ArrayExpression,
                    CallExpression,
                    ConditionalExpression,
                ),
            ) or is_jsx(arg.body)
    return False


def should_group_first_arg(args: tuple[Node, ...]) -> bool:
    if len(args) != 2:
        return False
    first, second = args
    return (
        not first.comments
        and _is_function_or_arrow_with_body(first)
        and not isinstance(second, (FunctionExpression, ArrowFunctionExpression, ConditionalExpression))
        and not could_group_arg(second)
    )


def should_group_last_arg(args: tuple[Node, ...]) -> bool:
    last = args[-1]
    penultimate = args[-2] if len(args) > 1 else None
    return (
        not has_leading_comment(last)
        and not has_trailing_comment(last)
        and could_group_arg(last)
        # Two trailing arguments of the same type do not hug
        and (penultimate is None or type(penultimate) is not type(last))
    )


# ---------------------------------------------------------------------------
# Lookups and calls
# ---------------------------------------------------------------------------


def print_optional_token(path: AstPath) -> str:
    node = path.node
    if not getattr(node, "optional", False):
        return ""
    if isinstance(node, CallExpression) or (isinstance(node, MemberExpression) and node.computed):
        return "?."
    # The lookup supplies the dot
    return "?"


def print_member_lookup(path: AstPath, ctx: PrintContext) -> Doc:
    node: MemberExpression = path.node
    prop = path.call(ctx.print, "property")
    optional = print_optional_token(path)
    if not node.computed:
        return concat([optional, ".", prop])
    if isinstance(node.property, NumericLiteral):
        return concat([optional, "[", prop, "]"])
    return group(concat([optional, "[", indent(concat([SOFTLINE, prop])), SOFTLINE, "]"]))


def print_member_expression(path: AstPath, ctx: PrintContext) -> Doc:
    node: MemberExpression = path.node
    parent = path.parent()
    first_non_member = None
    for ancestor in path.ancestors():
        if not isinstance(ancestor, MemberExpression):
            first_non_member = ancestor
            break

    should_inline = (
        isinstance(first_non_member, NewExpression)
        or (
            isinstance(first_non_member, VariableDeclarator)
            and not isinstance(first_non_member.id, Identifier)
        )
        or (
            isinstance(first_non_member, AssignmentExpression)
            and not isinstance(first_non_member.left, Identifier)
        )
        or node.computed
        or (
            isinstance(node.object, Identifier)
            and isinstance(node.property, Identifier)
            and not isinstance(parent, MemberExpression)
        )
    )
    lookup = print_member_lookup(path, ctx)
    return concat(
        [
            path.call(ctx.print, "object"),
            lookup if should_inline else group(indent(concat([SOFTLINE, lookup]))),
        ]
    )


def print_call_expression(path: AstPath, ctx: PrintContext) -> Doc:
    """Print a CallExpression or NewExpression."""
    node = path.node
    is_new = isinstance(node, NewExpression)
    optional = print_optional_token(path)
    callee = node.callee
    args = node.arguments

    if (
        # require/define calls stay a unit
        (not is_new and isinstance(callee, Identifier) and callee.name in ("require", "define"))
        or (len(args) == 1 and is_template_on_its_own_line(args[0], ctx.source))
        or (not is_new and is_test_call(node))
    ):
        return concat(
            [
                "new " if is_new else "",
                path.call(ctx.print, "callee"),
                optional,
                "(",
                join(", ", path.map(ctx.print, "arguments")),
                ")",
            ]
        )

    if not is_new and is_memberish(callee):
        return print_member_chain(path, ctx)

    return concat(
        [
            "new " if is_new else "",
            path.call(ctx.print, "callee"),
            optional,
            print_arguments_list(path, ctx),
        ]
    )


# ---------------------------------------------------------------------------
# Member chains
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _ChainLink:
    node: Node
    printed: Doc
    needs_parens: bool = False


def _should_insert_empty_line_after(node: Node, text: str) -> bool:
    index = next_non_space_non_comment_index(text, node.end)
    # A parenthesized head only keeps the blank line after its parenthesis
    if index is not None and index < len(text) and text[index] == ")":
        return is_next_line_empty_after_index(text, index + 1)
    return is_next_line_empty(text, node.end)


def _is_factory(name: str) -> bool:
    return _FACTORY_RE.match(name) is not None


def print_member_chain(path: AstPath, ctx: PrintContext) -> Doc:
    """Print a call whose callee is a member lookup as a grouped chain."""
    text = ctx.source
    links: list[_ChainLink] = []

    def rec(p: AstPath) -> None:
        node = p.node
        if isinstance(node, CallExpression) and (
            is_memberish(node.callee) or isinstance(node.callee, CallExpression)
        ):
            printed = print_comments(
                p, concat([print_optional_token(p), print_arguments_list(p, ctx)]), ctx
            )
            links.insert(
                0,
                _ChainLink(
                    node,
                    concat([printed, HARDLINE if _should_insert_empty_line_after(node, text) else ""]),
                ),
            )
            p.call(rec, "callee")
        elif is_memberish(node):
            links.insert(
                0,
                _ChainLink(
                    node,
                    print_comments(p, print_member_lookup(p, ctx), ctx),
                    needs_parens(p),
                ),
            )
            p.call(rec, "object")
        else:
            links.insert(0, _ChainLink(node, ctx.print(p)))

    # The comments of the outermost call are printed by the driver
    root = path.node
    links.append(
        _ChainLink(root, concat([print_optional_token(path), print_arguments_list(path, ctx)]))
    )
    path.call(rec, "callee")

    # groups[0] is the head: the first node, then any calls and numeric
    # lookups right after it, then (for a non-call head) every member but
    # the last of a run of members.
    groups: list[list[_ChainLink]] = []
    current = [links[0]]
    i = 1
    while i < len(links):
        node = links[i].node
        if isinstance(node, CallExpression) or (
            isinstance(node, MemberExpression)
            and node.computed
            and isinstance(node.property, NumericLiteral)
        ):
            current.append(links[i])
            i += 1
        else:
            break
    if not isinstance(links[0].node, CallExpression):
        while i + 1 < len(links):
            if is_memberish(links[i].node) and is_memberish(links[i + 1].node):
                current.append(links[i])
                i += 1
            else:
                break
    groups.append(current)
    current = []

    # Every further group is a run of lookups followed by a run of calls
    seen_call = False
    while i < len(links):
        link = links[i]
        node = link.node
        if seen_call and is_memberish(node):
            # A numeric lookup ends the group rather than starting the next
            if node.computed and isinstance(node.property, NumericLiteral):
                current.append(link)
                i += 1
                continue
            groups.append(current)
            current = []
            seen_call = False
        if isinstance(node, CallExpression):
            seen_call = True
        current.append(link)
        if has_trailing_comment(node):
            groups.append(current)
            current = []
            seen_call = False
        i += 1
    if current:
        groups.append(current)

    def should_not_wrap() -> bool:
        parent = path.parent()
        is_expression = isinstance(parent, ExpressionStatement)
        has_computed = bool(groups[1]) and getattr(groups[1][0].node, "computed", False)
        if len(groups[0]) == 1:
            first = groups[0][0].node
            return isinstance(first, ThisExpression) or (
                isinstance(first, Identifier)
                and (
                    _is_factory(first.name)
                    or (is_expression and len(first.name) <= ctx.options.tab_width)
                    or has_computed
                )
            )
        last = groups[0][-1].node
        return (
            isinstance(last, MemberExpression)
            and isinstance(last.property, Identifier)
            and (_is_factory(last.property.name) or has_computed)
        )

    should_merge = len(groups) >= 2 and not groups[1][0].node.comments and should_not_wrap()

    def print_group(printed_group: list[_ChainLink]) -> Doc:
        printed = [link.printed for link in printed_group]
        if printed_group and printed_group[-1].needs_parens:
            return concat(["(", *printed, ")"])
        return concat(printed)

    def print_indented_group(rest: list[list[_ChainLink]]) -> Doc:
        if not rest:
            return ""
        return indent(group(concat([HARDLINE, join(HARDLINE, [print_group(g) for g in rest])])))

    printed_groups = [print_group(g) for g in groups]
    one_line = concat(printed_groups)

    cutoff = 3 if should_merge else 2
    flat_links = [link for g in groups[:cutoff] for link in g]
    has_comment = (
        any(has_leading_comment(link.node) for link in flat_links[1:-1])
        or any(has_trailing_comment(link.node) for link in flat_links[:-1])
        or (len(groups) > cutoff and has_leading_comment(groups[cutoff][0].node))
    )

    # A single lookup is printed as-is
    if len(groups) <= cutoff and not has_comment:
        return group(one_line)

    last_before_indent = (groups[1] if should_merge else groups[0])[-1].node
    empty_line_before_indent = not isinstance(
        last_before_indent, CallExpression
    ) and _should_insert_empty_line_after(last_before_indent, text)

    expanded = concat(
        [
            print_group(groups[0]),
            print_group(groups[1]) if should_merge else "",
            HARDLINE if empty_line_before_indent else "",
            print_indented_group(groups[2 if should_merge else 1 :]),
        ]
    )

    calls = [link.node for link in links if isinstance(link.node, CallExpression)]
    last_group_breaks = isinstance(groups[-1][-1].node, CallExpression) and will_break(
        printed_groups[-1]
    )

    # Break when there is a comment, when three or more calls follow a head
    # that is not kept together with its first call, when any group but the
    # last breaks, or when the last call breaks after an earlier call took a
    # function argument.
    if (
        has_comment
        or (len(calls) >= 3 and not should_merge)
        or any(will_break(g) for g in printed_groups[:-1])
        or (
            last_group_breaks
            and any(
                any(is_function_or_arrow(arg) for arg in call.arguments) for call in calls[:-1]
            )
        )
    ):
        return group(expanded)

    return concat(
        [
            BREAK_PARENT if will_break(one_line) or empty_line_before_indent else "",
            conditional_group([one_line, expanded]),
        ]
    )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def print_arguments_list(path: AstPath, ctx: PrintContext) -> Doc:
    node = path.node
    args = node.arguments
    text = ctx.source

    if not args:
        return concat(["(", print_dangling_comments(path, ctx, same_indent=True), ")"])

    # useEffect(() => { ... }, [foo, bar, baz])
    if (
        len(args) == 2
        and isinstance(args[0], ArrowFunctionExpression)
        and not args[0].params
        and isinstance(args[0].body, BlockStatement)
        and isinstance(args[1], ArrayExpression)
        and not any(arg.comments for arg in args)
    ):
        return concat(
            [
                "(",
                path.call(ctx.print, "arguments", 0),
                ", ",
                path.call(ctx.print, "arguments", 1),
                ")",
            ]
        )

    any_arg_empty_line = False
    empty_line_after_first = False
    last_index = len(args) - 1
    printed_args: list[Doc] = []
    for index, arg in enumerate(args):
        parts = [path.call(ctx.print, "arguments", index)]
        if index == last_index:
            pass
        elif is_next_line_empty(text, arg.end):
            if index == 0:
                empty_line_after_first = True
            any_arg_empty_line = True
            parts.extend([",", HARDLINE, HARDLINE])
        else:
            parts.extend([",", LINE])
        printed_args.append(concat(parts))

    trailing_comma = "," if should_print_comma(ctx, "all") else ""

    def all_args_broken_out() -> Doc:
        return group(
            concat(["(", indent(concat([LINE, *printed_args])), trailing_comma, LINE, ")"]),
            should_break=True,
        )

    # pipe(
    #   x => x + 1,
    #   x => x - 1
    # )
    if is_function_composition(node.callee) and len(args) > 1:
        return all_args_broken_out()

    group_first = should_group_first_arg(args)
    group_last = should_group_last_arg(args)
    if group_first or group_last:
        if group_first:
            should_break = any(will_break(p) for p in printed_args[1:])
        else:
            should_break = any(will_break(p) for p in printed_args[:-1])
        should_break = should_break or any_arg_empty_line

        if group_first:
            first = path.call(lambda p: ctx.print(p, expand_first_arg=True), "arguments", 0)
            expanded_args = [
                concat(
                    [
                        first,
                        "," if len(printed_args) > 1 else "",
                        HARDLINE if empty_line_after_first else LINE,
                        HARDLINE if empty_line_after_first else "",
                    ]
                ),
                *printed_args[1:],
            ]
        else:
            last = path.call(lambda p: ctx.print(p, expand_last_arg=True), "arguments", last_index)
            expanded_args = [*printed_args[:-1], last]

        some_break = any(will_break(p) for p in printed_args)
        if group_first:
            hugged = concat(
                ["(", group(expanded_args[0], should_break=True), *expanded_args[1:], ")"]
            )
        else:
            hugged = concat(
                ["(", *printed_args[:-1], group(expanded_args[-1], should_break=True), ")"]
            )
        return concat(
            [
                BREAK_PARENT if some_break else "",
                conditional_group(
                    [
                        concat(
                            [
                                if_break(
                                    indent(concat(["(", SOFTLINE, *expanded_args])),
                                    concat(["(", *expanded_args]),
                                ),
                                concat([if_break(trailing_comma), SOFTLINE]) if some_break else "",
                                ")",
                            ]
                        ),
                        hugged,
                        all_args_broken_out(),
                    ],
                    should_break=should_break,
                ),
            ]
        )

    return group(
        concat(
            [
                "(",
                indent(concat([SOFTLINE, *printed_args])),
                if_break(trailing_comma),
                SOFTLINE,
                ")",
            ]
        ),
        should_break=any(will_break(p) for p in printed_args) or any_arg_empty_line,
    )
