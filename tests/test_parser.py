"""Parser: tree shapes for statements, expressions and markup, plus syntax errors."""

from __future__ import annotations

import pytest

from vxfmt.ast import (
    ArrowFunctionExpression,
    BinaryExpression,
    CallExpression,
    ClassMethod,
    ClassProperty,
    ExportDefaultDeclaration,
    FunctionExpression,
    JSXElement,
    JSXExpressionContainer,
    JSXFragment,
    JSXText,
    LogicalExpression,
    MarkupRoot,
    MemberExpression,
    ObjectProperty,
)
from vxfmt.errors import AdapterError, ParseError
from vxfmt.parser import parse

from tests.conftest import first_expression, first_statement


class TestStatements:
    def test_variable_declaration(self, parse_source) -> None:
        stmt = first_statement(parse_source("const a = 1, b;"))
        assert stmt.type == "VariableDeclaration"
        assert stmt.kind == "const"
        assert [d.id.name for d in stmt.declarations] == ["a", "b"]
        assert stmt.declarations[0].init.raw == "1"
        assert stmt.declarations[1].init is None

    def test_let_as_identifier(self, parse_source) -> None:
        expr = first_expression(parse_source("let + 1"))
        assert isinstance(expr, BinaryExpression)
        assert expr.left.name == "let"

    def test_if_else(self, parse_source) -> None:
        stmt = first_statement(parse_source("if (a) b; else { c }"))
        assert stmt.type == "IfStatement"
        assert stmt.consequent.type == "ExpressionStatement"
        assert stmt.alternate.type == "BlockStatement"

    def test_return_without_argument_before_newline(self, parse_source) -> None:
        stmt = first_statement(parse_source("function f() { return\n1 }"))
        body = stmt.body.body
        assert body[0].type == "ReturnStatement"
        assert body[0].argument is None
        assert body[1].type == "ExpressionStatement"

    def test_newline_separates_statements(self, parse_source) -> None:
        result = parse_source("a\nb")
        assert len(result.root.body) == 2

    def test_empty_statement(self, parse_source) -> None:
        assert first_statement(parse_source(";")).type == "EmptyStatement"


class TestExpressions:
    def test_precedence(self, parse_source) -> None:
        expr = first_expression(parse_source("a + b * c"))
        assert expr.operator == "+"
        assert expr.right.operator == "*"

    def test_left_associative(self, parse_source) -> None:
        expr = first_expression(parse_source("a - b - c"))
        assert expr.left.operator == "-"
        assert expr.right.name == "c"

    def test_exponent_is_right_associative(self, parse_source) -> None:
        expr = first_expression(parse_source("a ** b ** c"))
        assert expr.left.name == "a"
        assert expr.right.operator == "**"

    def test_logical_expression(self, parse_source) -> None:
        expr = first_expression(parse_source("a && b || c"))
        assert isinstance(expr, LogicalExpression)
        assert expr.operator == "||"
        assert isinstance(expr.left, LogicalExpression)

    def test_member_call_chain(self, parse_source) -> None:
        expr = first_expression(parse_source("a.b(c)[d]"))
        assert isinstance(expr, MemberExpression)
        assert expr.computed
        assert isinstance(expr.object, CallExpression)
        assert isinstance(expr.object.callee, MemberExpression)

    def test_optional_chaining(self, parse_source) -> None:
        expr = first_expression(parse_source("a?.b"))
        assert isinstance(expr, MemberExpression)
        assert expr.optional

    def test_arrow_function(self, parse_source) -> None:
        expr = first_expression(parse_source("(a, b = 1) => a + b"))
        assert isinstance(expr, ArrowFunctionExpression)
        assert [p.type for p in expr.params] == ["Identifier", "AssignmentPattern"]
        assert isinstance(expr.body, BinaryExpression)

    def test_async_arrow_single_param(self, parse_source) -> None:
        expr = first_expression(parse_source("async x => x"))
        assert isinstance(expr, ArrowFunctionExpression)
        assert expr.is_async
        assert expr.params[0].name == "x"

    def test_parenthesized_expression_is_not_arrow(self, parse_source) -> None:
        expr = first_expression(parse_source("(a)"))
        assert expr.type == "Identifier"

    def test_conditional(self, parse_source) -> None:
        expr = first_expression(parse_source("a ? b : c ? d : e"))
        assert expr.type == "ConditionalExpression"
        assert expr.alternate.type == "ConditionalExpression"

    def test_object_members(self, parse_source) -> None:
        expr = first_expression(parse_source("({ a, b: 1, [c]: 2, d() {}, ...e })"))
        kinds = [p.type for p in expr.properties]
        assert kinds == [
            "ObjectProperty",
            "ObjectProperty",
            "ObjectProperty",
            "ObjectMethod",
            "SpreadElement",
        ]
        shorthand = expr.properties[0]
        assert isinstance(shorthand, ObjectProperty) and shorthand.shorthand
        assert expr.properties[2].computed

    def test_array_holes(self, parse_source) -> None:
        expr = first_expression(parse_source("[a, , b]"))
        assert expr.elements[1] is None
        assert len(expr.elements) == 3

    def test_string_is_cooked(self, parse_source) -> None:
        expr = first_expression(parse_source(r"'a\nb'"))
        assert expr.value == "a\nb"
        assert expr.raw == r"'a\nb'"

    def test_template_literal(self, parse_source) -> None:
        expr = first_expression(parse_source("`a${b}c`"))
        assert [q.raw for q in expr.quasis] == ["a", "c"]
        assert [q.tail for q in expr.quasis] == [False, True]
        assert expr.expressions[0].name == "b"

    def test_tagged_template(self, parse_source) -> None:
        expr = first_expression(parse_source("css`color: red;`"))
        assert expr.type == "TaggedTemplateExpression"
        assert expr.tag.name == "css"

    def test_new_expression(self, parse_source) -> None:
        expr = first_expression(parse_source("new Foo(1)"))
        assert expr.type == "NewExpression"
        assert len(expr.arguments) == 1


class TestClassesAndModules:
    def test_class_members(self, parse_source) -> None:
        stmt = first_statement(
            parse_source("class A extends B { static x = 1; constructor() {} get y() {} }")
        )
        assert stmt.id.name == "A"
        assert stmt.superclass.name == "B"
        members = stmt.body.body
        assert isinstance(members[0], ClassProperty) and members[0].static
        assert isinstance(members[1], ClassMethod) and members[1].kind == "constructor"
        assert members[2].kind == "get"

    def test_decorated_class(self, parse_source) -> None:
        stmt = first_statement(parse_source("@observer class A {}"))
        assert stmt.type == "ClassDeclaration"
        assert stmt.decorators[0].expression.name == "observer"

    def test_import_specifiers(self, parse_source) -> None:
        stmt = first_statement(parse_source("import React, { a as b, c } from 'react';"))
        assert [s.type for s in stmt.specifiers] == [
            "ImportDefaultSpecifier",
            "ImportSpecifier",
            "ImportSpecifier",
        ]
        assert stmt.specifiers[1].local.name == "b"
        assert stmt.source.value == "react"

    def test_namespace_import(self, parse_source) -> None:
        stmt = first_statement(parse_source("import * as ns from 'x'"))
        assert stmt.specifiers[0].type == "ImportNamespaceSpecifier"

    def test_export_default_function(self, parse_source) -> None:
        stmt = first_statement(parse_source("export default function () {}"))
        assert isinstance(stmt, ExportDefaultDeclaration)
        assert isinstance(stmt.declaration, FunctionExpression)

    def test_export_named_list(self, parse_source) -> None:
        stmt = first_statement(parse_source("export { a, b as c } from './m';"))
        assert stmt.declaration is None
        assert [s.exported.name for s in stmt.specifiers] == ["a", "c"]
        assert stmt.source.value == "./m"


class TestMarkup:
    def test_element_with_children(self, parse_source) -> None:
        expr = first_expression(parse_source("<div a='1'>hi {x}</div>"))
        assert isinstance(expr, JSXElement)
        assert expr.opening_element.name.name == "div"
        assert expr.opening_element.attributes[0].value.value == "1"
        assert [type(c) for c in expr.children] == [JSXText, JSXExpressionContainer]
        assert expr.closing_element.name.name == "div"

    def test_self_closing(self, parse_source) -> None:
        expr = first_expression(parse_source("<Foo.Bar />"))
        assert expr.opening_element.self_closing
        assert expr.closing_element is None
        assert expr.opening_element.name.type == "JSXMemberExpression"

    def test_fragment(self, parse_source) -> None:
        expr = first_expression(parse_source("<><a /></>"))
        assert isinstance(expr, JSXFragment)
        assert len(expr.children) == 1

    def test_spread_attribute(self, parse_source) -> None:
        expr = first_expression(parse_source("<a {...props} />"))
        assert expr.opening_element.attributes[0].type == "JSXSpreadAttribute"

    def test_empty_expression_container(self, parse_source) -> None:
        expr = first_expression(parse_source("<a>{}</a>"))
        assert expr.children[0].expression.type == "JSXEmptyExpression"

    def test_html_void_elements(self) -> None:
        result = parse("<p>x<br></p>", html=True)
        assert isinstance(result.root, MarkupRoot)
        paragraph = result.root.children[0]
        br = paragraph.children[1]
        assert br.opening_element.self_closing
        assert br.closing_element is None


class TestComments:
    def test_comments_are_returned(self, parse_source) -> None:
        result = parse_source("a; // trailing\n/* block */ b;")
        assert [c.kind for c in result.comments] == ["line", "block"]

    def test_comments_keep_source(self, parse_source) -> None:
        result = parse_source("// x\na")
        assert result.source == "// x\na"


class TestParseErrors:
    def test_missing_semicolon_on_same_line(self, parse_source) -> None:
        with pytest.raises(ParseError, match="expected ';'"):
            parse_source("a b")

    def test_unsupported_statement(self, parse_source) -> None:
        with pytest.raises(ParseError, match="unsupported syntax: 'for' statement"):
            parse_source("for (;;) {}")

    def test_regular_expression(self, parse_source) -> None:
        with pytest.raises(ParseError, match="regular expression"):
            parse_source("x = /a/")

    def test_invalid_assignment_target(self, parse_source) -> None:
        with pytest.raises(ParseError, match="invalid assignment target"):
            parse_source("1 = 2")

    def test_mismatched_closing_tag(self, parse_source) -> None:
        with pytest.raises(ParseError, match="corresponding closing tag for <a>"):
            parse_source("<a></b>")

    def test_unclosed_block(self, parse_source) -> None:
        with pytest.raises(ParseError, match="expected '}', found end of input"):
            parse_source("{ a")

    def test_error_span_points_at_token(self, parse_source) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_source("a\nb c")
        start = exc_info.value.span.start
        assert (start.line, start.column) == (2, 3)

    def test_parse_errors_are_adapter_errors(self, parse_source) -> None:
        with pytest.raises(AdapterError):
            parse_source("(")


class TestNestingLimits:
    def test_deep_parentheses(self, parse_source) -> None:
        source = "(" * 150 + "1" + ")" * 150
        with pytest.raises(ParseError, match="nested too deeply"):
            parse_source(source)

    def test_long_flat_chain_is_checked(self, parse_source) -> None:
        source = "a" + " + a" * 250
        with pytest.raises(ParseError, match="nested too deeply"):
            parse_source(source)

    def test_moderate_nesting_is_fine(self, parse_source) -> None:
        result = parse_source("(" * 20 + "1" + ")" * 20)
        assert first_expression(result).raw == "1"
