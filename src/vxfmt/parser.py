"""Recursive-descent parser for script, markup fragment and HTML sources."""

from __future__ import annotations

from dataclasses import dataclass

from vxfmt.ast import (
    LOGICAL_OPERATORS,
    PRECEDENCE,
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
    Comment,
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
    child_nodes,
)
from vxfmt.errors import AdapterError, ParseError
from vxfmt.lexer import Lexer, Mode
from vxfmt.tokens import Position, Span, Token, TokenType

# Parser recursion limit, counted per nested expression, statement or element.
MAX_NESTING_DEPTH = 100
# Limit on the depth of the finished tree, which left-associative chains can
# grow without recursing in the parser.
MAX_TREE_DEPTH = 200

_RESERVED = frozenset(
    """break case catch class const continue debugger default delete do else
    export extends finally for function if import in instanceof new return
    super switch this throw try typeof var void while with null true false""".split()
)
_UNSUPPORTED_STATEMENTS = frozenset(
    "for while do switch try throw break continue debugger with".split()
)
_ASSIGNMENT_OPERATORS = frozenset(
    "= += -= *= /= %= **= <<= >>= >>>= &= |= ^= &&= ||= ??=".split()
)
_UNARY_OPERATORS = frozenset({"!", "~", "+", "-", "typeof", "void", "delete"})
_VOID_ELEMENTS = frozenset(
    "area base br col embed hr img input link meta param source track wbr".split()
)


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Root node plus the chronological comment list."""

    root: Node
    comments: list[Comment]
    source: str


class _Snapshot:
    __slots__ = ("position", "token", "last_end")

    def __init__(self, position: Position, token: Token, last_end: Position) -> None:
        self.position = position
        self.token = token
        self.last_end = last_end


class Parser:
    """Recursive descent parser driving a modal Lexer."""

    def __init__(self, source: str, *, html: bool = False) -> None:
        self._source = source
        self._html = html
        self._lexer = Lexer(source)
        self._last_end = self._lexer.position()
        self._depth = 0
        self._tok = self._lexer.next(Mode.HTML_CHILD if html else Mode.SCRIPT)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _at(self, *values: str) -> bool:
        tok = self._tok
        return tok.type in (TokenType.PUNCT, TokenType.NAME) and tok.value in values

    def _at_name(self) -> bool:
        return self._tok.type is TokenType.NAME and self._tok.value not in _RESERVED

    def _at_eof(self) -> bool:
        return self._tok.type is TokenType.EOF

    def _advance(self, mode: Mode = Mode.SCRIPT) -> Token:
        tok = self._tok
        self._last_end = tok.span.end
        self._tok = self._lexer.next(mode)
        return tok

    def _eat(self, value: str, mode: Mode = Mode.SCRIPT) -> bool:
        if self._at(value):
            self._advance(mode)
            return True
        return False

    def _expect(self, value: str, mode: Mode = Mode.SCRIPT) -> Token:
        if not self._at(value):
            raise self._unexpected(f"expected {value!r}")
        return self._advance(mode)

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(self._lexer.position(), self._tok, self._last_end)

    def _restore(self, snap: _Snapshot) -> None:
        self._lexer.seek(snap.position)
        self._tok = snap.token
        self._last_end = snap.last_end

    def _peek_value(self) -> str:
        """Value of the token after the lookahead, in script mode."""
        snap = self._snapshot()
        try:
            self._advance()
            return self._tok.value
        finally:
            self._restore(snap)

    def _start(self) -> Position:
        return self._tok.span.start

    def _span(self, start: Position) -> Span:
        return Span(start, self._last_end)

    def _error(self, message: str, span: Span) -> ParseError:
        return ParseError(message, span, self._source)

    def _unexpected(self, message: str) -> ParseError:
        tok = self._tok
        found = "end of input" if tok.type is TokenType.EOF else repr(tok.value)
        return self._error(f"{message}, found {found}", tok.span)

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise self._error("input nested too deeply", self._tok.span)

    def _leave(self) -> None:
        self._depth -= 1

    def _consume_semicolon(self) -> None:
        if self._eat(";"):
            return
        if self._at("}") or self._at_eof() or self._tok.newline_before:
            return
        raise self._unexpected("expected ';'")

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse_program(self) -> ParseResult:
        start = Position(1, 1, 0)
        body: list[Node] = []
        while not self._at_eof():
            body.append(self._parse_statement())
        end = self._lexer.position()
        program = Program(tuple(body), span=Span(start, end))
        return self._finish(program)

    def parse_markup(self) -> ParseResult:
        start = Position(1, 1, 0)
        children: list[Node] = []
        while not self._at_eof():
            children.append(self._parse_child(Mode.HTML_CHILD, top_level=True))
        root = MarkupRoot(tuple(children), span=Span(start, self._lexer.position()))
        return self._finish(root)

    def _finish(self, root: Node) -> ParseResult:
        _check_tree_depth(root, self._source)
        return ParseResult(root, list(self._lexer.comments), self._source)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Node:
        self._enter()
        try:
            return self._parse_statement_inner()
        finally:
            self._leave()

    def _parse_statement_inner(self) -> Node:
        start = self._start()
        tok = self._tok

        if self._at("{"):
            return self._parse_block()
        if self._at(";"):
            self._advance()
            return EmptyStatement(span=self._span(start))
        if self._at("@"):
            decorators = self._parse_decorators()
            if self._at("export"):
                return self._parse_export(start, decorators)
            if not self._at("class"):
                raise self._unexpected("expected class after decorators")
            return self._parse_class(start, decorators)

        if tok.type is TokenType.NAME:
            word = tok.value
            if word in ("var", "const") or (word == "let" and self._peek_is_binding()):
                declaration = self._parse_variable_declaration()
                self._consume_semicolon()
                return _with_span(declaration, self._span(start))
            if word == "function" or (word == "async" and self._peek_value() == "function"):
                return self._parse_function(start, declaration=True)
            if word == "class":
                return self._parse_class(start, ())
            if word == "return":
                self._advance()
                argument = None
                if not (self._at(";", "}") or self._at_eof() or self._tok.newline_before):
                    argument = self._parse_expression()
                self._consume_semicolon()
                return ReturnStatement(argument, span=self._span(start))
            if word == "if":
                return self._parse_if(start)
            if word == "import" and self._peek_value() not in ("(", "."):
                return self._parse_import(start)
            if word == "export":
                return self._parse_export(start, ())
            if word in _UNSUPPORTED_STATEMENTS:
                raise self._error(f"unsupported syntax: '{word}' statement", tok.span)

        expression = self._parse_expression()
        self._consume_semicolon()
        return ExpressionStatement(expression, span=self._span(start))

    def _peek_is_binding(self) -> bool:
        following = self._peek_value()
        return following in ("[", "{") or (following.isidentifier() and following not in _RESERVED)

    def _parse_block(self) -> BlockStatement:
        start = self._start()
        self._expect("{")
        body: list[Node] = []
        while not self._at("}"):
            if self._at_eof():
                raise self._unexpected("expected '}'")
            body.append(self._parse_statement())
        self._advance()
        return BlockStatement(tuple(body), span=self._span(start))

    def _parse_if(self, start: Position) -> IfStatement:
        self._advance()
        self._expect("(")
        test = self._parse_expression()
        self._expect(")")
        consequent = self._parse_statement()
        alternate = None
        if self._eat("else"):
            alternate = self._parse_statement()
        return IfStatement(test, consequent, alternate, span=self._span(start))

    def _parse_variable_declaration(self) -> VariableDeclaration:
        start = self._start()
        kind = self._advance().value
        declarations: list[VariableDeclarator] = []
        while True:
            decl_start = self._start()
            target = self._parse_binding_target()
            init = None
            if self._eat("="):
                init = self._parse_assignment()
            declarations.append(VariableDeclarator(target, init, span=self._span(decl_start)))
            if not self._eat(","):
                break
        return VariableDeclaration(kind, tuple(declarations), span=self._span(start))

    def _parse_decorators(self) -> tuple[Decorator, ...]:
        decorators: list[Decorator] = []
        while self._at("@"):
            start = self._start()
            self._advance()
            if self._at("("):
                self._advance()
                expression = self._parse_expression()
                self._expect(")")
            else:
                expr_start = self._start()
                expression = self._parse_identifier()
                while self._at("."):
                    self._advance()
                    prop = self._parse_property_name()
                    expression = MemberExpression(expression, prop, span=self._span(expr_start))
                if self._at("("):
                    arguments = self._parse_arguments()
                    expression = CallExpression(expression, arguments, span=self._span(expr_start))
            decorators.append(Decorator(expression, span=self._span(start)))
        return tuple(decorators)

    # ------------------------------------------------------------------
    # Functions and classes
    # ------------------------------------------------------------------

    def _parse_function(self, start: Position, *, declaration: bool) -> Node:
        is_async = False
        if self._at("async"):
            self._advance()
            is_async = True
        self._expect("function")
        generator = self._eat("*")
        ident = None
        if self._at_name() or (self._tok.type is TokenType.NAME and self._tok.value in ("async",)):
            ident = self._parse_identifier()
        elif declaration:
            raise self._unexpected("expected function name")
        params = self._parse_params()
        body = self._parse_block()
        if declaration:
            return FunctionDeclaration(ident, params, body, is_async, generator, span=self._span(start))
        return FunctionExpression(ident, params, body, is_async, generator, span=self._span(start))

    def _parse_params(self) -> tuple[Node, ...]:
        self._expect("(")
        params: list[Node] = []
        while not self._at(")"):
            params.append(self._parse_param())
            if not self._eat(","):
                break
        self._expect(")")
        return tuple(params)

    def _parse_param(self) -> Node:
        start = self._start()
        if self._eat("..."):
            return RestElement(self._parse_binding_target(), span=self._span(start))
        target = self._parse_binding_target()
        if self._eat("="):
            default = self._parse_assignment()
            return AssignmentPattern(target, default, span=self._span(start))
        return target

    def _parse_binding_target(self) -> Node:
        if self._at("{"):
            return self._parse_object()
        if self._at("["):
            return self._parse_array()
        if self._at_name():
            return self._parse_identifier()
        raise self._unexpected("expected binding name")

    def _parse_class(self, start: Position, decorators: tuple[Decorator, ...], *, expression: bool = False) -> ClassDeclaration:
        self._expect("class")
        ident = None
        if self._at_name():
            ident = self._parse_identifier()
        elif not expression:
            raise self._unexpected("expected class name")
        superclass = None
        if self._eat("extends"):
            superclass = self._parse_call_member(allow_call=True)
        body_start = self._start()
        self._expect("{")
        members: list[Node] = []
        while not self._at("}"):
            if self._at_eof():
                raise self._unexpected("expected '}'")
            if self._eat(";"):
                continue
            members.append(self._parse_class_member())
        self._advance()
        body = ClassBody(tuple(members), span=self._span(body_start))
        return ClassDeclaration(decorators, ident, superclass, body, expression, span=self._span(start))

    def _parse_class_member(self) -> Node:
        start = self._start()
        decorators = self._parse_decorators() if self._at("@") else ()
        static = is_async = generator = False
        kind = "method"
        if self._at("static") and self._peek_value() not in ("(", "=", ";", "}"):
            self._advance()
            static = True
        if self._at("async") and self._peek_value() not in ("(", "=", ";", "}") and not self._peek_newline():
            self._advance()
            is_async = True
        if self._eat("*"):
            generator = True
        if self._at("get", "set") and self._peek_value() not in ("(", "=", ";", "}"):
            kind = self._advance().value
        key, computed = self._parse_property_key()
        if self._at("("):
            if not computed and isinstance(key, Identifier) and key.name == "constructor":
                kind = "constructor"
            params = self._parse_params()
            body = self._parse_block()
            return ClassMethod(
                decorators, key, params, body, kind, computed, static, is_async, generator,
                span=self._span(start),
            )
        value = None
        if self._eat("="):
            value = self._parse_assignment()
        self._consume_semicolon()
        return ClassProperty(decorators, key, value, computed, static, span=self._span(start))

    def _peek_newline(self) -> bool:
        snap = self._snapshot()
        try:
            self._advance()
            return self._tok.newline_before
        finally:
            self._restore(snap)

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def _parse_import(self, start: Position) -> ImportDeclaration:
        self._advance()
        specifiers: list[Node] = []
        if self._tok.type is not TokenType.STRING:
            if self._at_name():
                local = self._parse_identifier()
                specifiers.append(ImportDefaultSpecifier(local, span=local.span))
                self._eat(",")
            if self._at("*"):
                spec_start = self._start()
                self._advance()
                self._expect("as")
                local = self._parse_identifier()
                specifiers.append(ImportNamespaceSpecifier(local, span=self._span(spec_start)))
            elif self._at("{"):
                self._advance()
                while not self._at("}"):
                    spec_start = self._start()
                    imported = self._parse_module_name()
                    local = imported
                    if self._eat("as"):
                        local = self._parse_identifier()
                    specifiers.append(ImportSpecifier(imported, local, span=self._span(spec_start)))
                    if not self._eat(","):
                        break
                self._expect("}")
            self._expect("from")
        source = self._parse_string()
        self._consume_semicolon()
        return ImportDeclaration(tuple(specifiers), source, span=self._span(start))

    def _parse_export(self, start: Position, decorators: tuple[Decorator, ...]) -> Node:
        self._expect("export")
        if self._eat("default"):
            decl_start = self._start()
            if self._at("@"):
                decorators = decorators + self._parse_decorators()
            if self._at("class"):
                declaration: Node = self._parse_class(decl_start, decorators, expression=True)
            elif self._at("function") or (self._at("async") and self._peek_value() == "function"):
                declaration = self._parse_function(decl_start, declaration=False)
            else:
                declaration = self._parse_assignment()
                self._consume_semicolon()
            return ExportDefaultDeclaration(declaration, span=self._span(start))
        if self._at("@"):
            decorators = decorators + self._parse_decorators()
        if self._at("class"):
            decl_start = decorators[0].span.start if decorators else self._start()
            declaration = self._parse_class(decl_start, decorators)
            return ExportNamedDeclaration(declaration, (), None, span=self._span(start))
        if self._at("var", "let", "const"):
            declaration = self._parse_variable_declaration()
            self._consume_semicolon()
            return ExportNamedDeclaration(declaration, (), None, span=self._span(start))
        if self._at("function", "async"):
            declaration = self._parse_function(self._start(), declaration=True)
            return ExportNamedDeclaration(declaration, (), None, span=self._span(start))
        self._expect("{")
        specifiers: list[ExportSpecifier] = []
        while not self._at("}"):
            spec_start = self._start()
            local = self._parse_module_name()
            exported = local
            if self._eat("as"):
                exported = self._parse_module_name()
            specifiers.append(ExportSpecifier(local, exported, span=self._span(spec_start)))
            if not self._eat(","):
                break
        self._expect("}")
        source = None
        if self._eat("from"):
            source = self._parse_string()
        self._consume_semicolon()
        return ExportNamedDeclaration(None, tuple(specifiers), source, span=self._span(start))

    def _parse_module_name(self) -> Identifier:
        if self._tok.type is not TokenType.NAME:
            raise self._unexpected("expected name")
        start = self._start()
        name = self._advance().value
        return Identifier(name, span=self._span(start))

    def _parse_string(self) -> StringLiteral:
        if self._tok.type is not TokenType.STRING:
            raise self._unexpected("expected string")
        start = self._start()
        raw = self._advance().value
        return StringLiteral(_cook(raw), raw, span=self._span(start))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Node:
        start = self._start()
        expression = self._parse_assignment()
        if not self._at(","):
            return expression
        expressions = [expression]
        while self._eat(","):
            expressions.append(self._parse_assignment())
        return SequenceExpression(tuple(expressions), span=self._span(start))

    def _parse_assignment(self) -> Node:
        self._enter()
        try:
            arrow = self._try_arrow()
            if arrow is not None:
                return arrow
            start = self._start()
            left = self._parse_conditional()
            if self._tok.type is TokenType.PUNCT and self._tok.value in _ASSIGNMENT_OPERATORS:
                if not isinstance(left, (Identifier, MemberExpression, ObjectExpression, ArrayExpression)):
                    raise self._error("invalid assignment target", left.span)
                operator = self._advance().value
                right = self._parse_assignment()
                return AssignmentExpression(operator, left, right, span=self._span(start))
            return left
        finally:
            self._leave()

    def _try_arrow(self) -> Node | None:
        """Parse an arrow function if one starts here, else rewind."""
        if not (self._at("(") or self._at_name()):
            return None
        start = self._start()
        snap = self._snapshot()
        is_async = False
        try:
            if self._at("async") and not self._peek_newline() and self._peek_value() != "=>":
                self._advance()
                is_async = True
            if self._at("("):
                params = self._parse_params()
            elif self._at_name():
                ident = self._parse_identifier()
                params = (ident,)
            else:
                raise self._unexpected("expected arrow parameters")
            if not self._at("=>") or self._tok.newline_before:
                raise self._unexpected("expected '=>'")
        except AdapterError:
            self._restore(snap)
            return None
        self._advance()
        if self._at("{"):
            body: Node = self._parse_block()
        else:
            body = self._parse_assignment()
        return ArrowFunctionExpression(params, body, is_async, span=self._span(start))

    def _parse_conditional(self) -> Node:
        start = self._start()
        test = self._parse_binary(0)
        if not self._eat("?"):
            return test
        consequent = self._parse_assignment()
        self._expect(":")
        alternate = self._parse_assignment()
        return ConditionalExpression(test, consequent, alternate, span=self._span(start))

    def _binary_operator(self) -> str | None:
        tok = self._tok
        if tok.type is TokenType.PUNCT and tok.value in PRECEDENCE:
            return tok.value
        if tok.type is TokenType.NAME and tok.value in ("in", "instanceof"):
            return tok.value
        return None

    def _parse_binary(self, min_precedence: int) -> Node:
        start = self._start()
        left = self._parse_unary()
        while True:
            operator = self._binary_operator()
            if operator is None or PRECEDENCE[operator] < min_precedence:
                return left
            precedence = PRECEDENCE[operator]
            self._advance()
            # ** is right-associative
            next_min = precedence if operator == "**" else precedence + 1
            right = self._parse_binary(next_min)
            cls = LogicalExpression if operator in LOGICAL_OPERATORS else BinaryExpression
            left = cls(operator, left, right, span=self._span(start))

    def _parse_unary(self) -> Node:
        start = self._start()
        tok = self._tok
        if tok.type in (TokenType.PUNCT, TokenType.NAME) and tok.value in _UNARY_OPERATORS:
            self._advance()
            self._enter()
            try:
                argument = self._parse_unary()
            finally:
                self._leave()
            return UnaryExpression(tok.value, argument, span=self._span(start))
        if self._at("++", "--"):
            self._advance()
            argument = self._parse_unary()
            return UpdateExpression(tok.value, argument, True, span=self._span(start))
        if self._at("await"):
            self._advance()
            argument = self._parse_unary()
            return AwaitExpression(argument, span=self._span(start))
        expression = self._parse_call_member(allow_call=True)
        if self._at("++", "--") and not self._tok.newline_before:
            operator = self._advance().value
            return UpdateExpression(operator, expression, False, span=self._span(start))
        return expression

    def _parse_call_member(self, *, allow_call: bool) -> Node:
        start = self._start()
        if self._at("new"):
            expression = self._parse_new()
        else:
            expression = self._parse_primary()
        while True:
            if self._at("."):
                self._advance()
                prop = self._parse_property_name()
                expression = MemberExpression(expression, prop, span=self._span(start))
            elif self._at("?."):
                self._advance()
                if self._at("(") and allow_call:
                    arguments = self._parse_arguments()
                    expression = CallExpression(expression, arguments, True, span=self._span(start))
                elif self._at("["):
                    self._advance()
                    prop = self._parse_expression()
                    self._expect("]")
                    expression = MemberExpression(expression, prop, True, True, span=self._span(start))
                else:
                    prop = self._parse_property_name()
                    expression = MemberExpression(expression, prop, False, True, span=self._span(start))
            elif self._at("["):
                self._advance()
                prop = self._parse_expression()
                self._expect("]")
                expression = MemberExpression(expression, prop, True, span=self._span(start))
            elif self._at("(") and allow_call:
                arguments = self._parse_arguments()
                expression = CallExpression(expression, arguments, span=self._span(start))
            elif self._at("`"):
                quasi = self._parse_template()
                expression = TaggedTemplateExpression(expression, quasi, span=self._span(start))
            else:
                return expression

    def _parse_new(self) -> Node:
        start = self._start()
        self._expect("new")
        callee = self._parse_call_member(allow_call=False)
        arguments: tuple[Node, ...] = ()
        if self._at("("):
            arguments = self._parse_arguments()
        return NewExpression(callee, arguments, span=self._span(start))

    def _parse_arguments(self) -> tuple[Node, ...]:
        self._expect("(")
        arguments: list[Node] = []
        while not self._at(")"):
            start = self._start()
            if self._eat("..."):
                arguments.append(SpreadElement(self._parse_assignment(), span=self._span(start)))
            else:
                arguments.append(self._parse_assignment())
            if not self._eat(","):
                break
        self._expect(")")
        return tuple(arguments)

    def _parse_property_name(self) -> Node:
        start = self._start()
        if self._tok.type is TokenType.NAME:
            name = self._advance().value
            return Identifier(name, span=self._span(start))
        if self._tok.type is TokenType.PRIVATE_NAME:
            name = self._advance().value
            return PrivateName(name[1:], span=self._span(start))
        raise self._unexpected("expected property name")

    def _parse_identifier(self) -> Identifier:
        if self._tok.type is not TokenType.NAME or self._tok.value in _RESERVED:
            raise self._unexpected("expected identifier")
        start = self._start()
        name = self._advance().value
        return Identifier(name, span=self._span(start))

    def _parse_primary(self) -> Node:
        start = self._start()
        tok = self._tok

        if tok.type is TokenType.NUMBER:
            self._advance()
            return NumericLiteral(tok.value, span=self._span(start))
        if tok.type is TokenType.STRING:
            return self._parse_string()
        if tok.type is TokenType.NAME:
            word = tok.value
            if word == "this":
                self._advance()
                return ThisExpression(span=self._span(start))
            if word == "super":
                self._advance()
                return Super(span=self._span(start))
            if word == "null":
                self._advance()
                return NullLiteral(span=self._span(start))
            if word in ("true", "false"):
                self._advance()
                return BooleanLiteral(word == "true", span=self._span(start))
            if word == "function" or (word == "async" and self._peek_value() == "function"):
                return self._parse_function(start, declaration=False)
            if word == "class":
                return self._parse_class(start, (), expression=True)
            return self._parse_identifier()
        if tok.type is TokenType.PUNCT:
            if tok.value == "(":
                self._advance()
                expression = self._parse_expression()
                self._expect(")")
                return expression
            if tok.value == "[":
                return self._parse_array()
            if tok.value == "{":
                return self._parse_object()
            if tok.value == "`":
                return self._parse_template()
            if tok.value == "<":
                return self._parse_jsx_element(Mode.SCRIPT)
            if tok.value == "@":
                decorators = self._parse_decorators()
                return self._parse_class(start, decorators, expression=True)
            if tok.value in ("/", "/="):
                raise self._error("regular expression literals are not supported", tok.span)
        raise self._unexpected("expected expression")

    def _parse_array(self) -> ArrayExpression:
        start = self._start()
        self._expect("[")
        elements: list[Node | None] = []
        while not self._at("]"):
            if self._at(","):
                self._advance()
                elements.append(None)
                continue
            el_start = self._start()
            if self._eat("..."):
                element: Node = SpreadElement(self._parse_assignment(), span=self._span(el_start))
            else:
                element = self._parse_assignment()
            elements.append(element)
            if not self._eat(","):
                break
        self._expect("]")
        return ArrayExpression(tuple(elements), span=self._span(start))

    def _parse_object(self) -> ObjectExpression:
        start = self._start()
        self._expect("{")
        properties: list[Node] = []
        while not self._at("}"):
            properties.append(self._parse_object_member())
            if not self._eat(","):
                break
        self._expect("}")
        return ObjectExpression(tuple(properties), span=self._span(start))

    def _parse_object_member(self) -> Node:
        start = self._start()
        if self._eat("..."):
            return SpreadElement(self._parse_assignment(), span=self._span(start))
        is_async = generator = False
        kind = "method"
        if self._at("async") and self._peek_value() not in (",", ":", "(", "}", "="):
            self._advance()
            is_async = True
        if self._eat("*"):
            generator = True
        if self._at("get", "set") and self._peek_value() not in (",", ":", "(", "}", "="):
            kind = self._advance().value
        key, computed = self._parse_property_key()
        if self._at("("):
            params = self._parse_params()
            body = self._parse_block()
            return ObjectMethod(key, params, body, kind, computed, is_async, generator, span=self._span(start))
        if self._eat(":"):
            value = self._parse_assignment()
            return ObjectProperty(key, value, computed, span=self._span(start))
        if not isinstance(key, Identifier) or computed:
            raise self._unexpected("expected ':'")
        if self._at("="):
            self._advance()
            default = self._parse_assignment()
            pattern = AssignmentPattern(key, default, span=self._span(start))
            return ObjectProperty(key, pattern, False, True, span=self._span(start))
        return ObjectProperty(key, key, False, True, span=self._span(start))

    def _parse_property_key(self) -> tuple[Node, bool]:
        start = self._start()
        tok = self._tok
        if self._at("["):
            self._advance()
            key = self._parse_assignment()
            self._expect("]")
            return key, True
        if tok.type is TokenType.STRING:
            return self._parse_string(), False
        if tok.type is TokenType.NUMBER:
            self._advance()
            return NumericLiteral(tok.value, span=self._span(start)), False
        return self._parse_property_name(), False

    def _parse_template(self) -> TemplateLiteral:
        start = self._start()
        if not self._at("`"):
            raise self._unexpected("expected template literal")
        # The lexer sits just past the backtick.
        self._last_end = self._tok.span.end
        quasis: list[TemplateElement] = []
        expressions: list[Node] = []
        while True:
            raw, tail, span = self._lexer.scan_template_chunk()
            quasis.append(TemplateElement(raw, tail, span=span))
            if tail:
                break
            self._last_end = self._lexer.position()
            self._tok = self._lexer.next()
            expressions.append(self._parse_expression())
            if not self._at("}"):
                raise self._unexpected("expected '}' in template literal")
        self._last_end = self._lexer.position()
        self._tok = self._lexer.next()
        return TemplateLiteral(tuple(quasis), tuple(expressions), span=self._span(start))

    # ------------------------------------------------------------------
    # Markup
    # ------------------------------------------------------------------

    def _tag_mode(self) -> Mode:
        return Mode.HTML_TAG if self._html else Mode.JSX_TAG

    def _child_mode(self) -> Mode:
        return Mode.HTML_CHILD if self._html else Mode.JSX_CHILD

    def _parse_jsx_element(self, after: Mode) -> Node:
        """Parse an element or fragment starting at '<'.

        *after* is the scanning mode for the token following the element.
        """
        start = self._start()
        self._advance(self._tag_mode())
        return self._parse_jsx_after_lt(start, after)

    def _parse_jsx_after_lt(self, start: Position, after: Mode) -> Node:
        self._enter()
        try:
            if self._at(">"):
                return self._parse_jsx_fragment(start, after)
            return self._parse_jsx_tagged(start, after)
        finally:
            self._leave()

    def _parse_jsx_fragment(self, start: Position, after: Mode) -> JSXFragment:
        self._advance(self._child_mode())
        opening = JSXOpeningFragment(span=self._span(start))
        children, close_start = self._parse_jsx_children()
        self._advance(self._tag_mode())  # '/'
        self._expect_tag(">", after)
        closing = JSXClosingFragment(span=self._span(close_start))
        return JSXFragment(opening, children, closing, span=self._span(start))

    def _expect_tag(self, value: str, mode: Mode) -> None:
        if self._tok.type is not TokenType.PUNCT or self._tok.value != value:
            raise self._unexpected(f"expected {value!r}")
        self._advance(mode)

    def _parse_jsx_tagged(self, start: Position, after: Mode) -> JSXElement:
        tag_mode = self._tag_mode()
        name = self._parse_jsx_name()
        attributes: list[Node] = []
        while not self._at(">", "/"):
            if self._at_eof():
                raise self._unexpected("expected '>'")
            attributes.append(self._parse_jsx_attribute())
        self_closing = False
        if self._at("/"):
            self._advance(tag_mode)
            self_closing = True
        tag_name = _jsx_name_text(name)
        void = self._html and tag_name.lower() in _VOID_ELEMENTS
        self._expect_tag(">", after if self_closing or void else self._child_mode())
        opening = JSXOpeningElement(name, tuple(attributes), self_closing or void, span=self._span(start))
        if self_closing or void:
            return JSXElement(opening, (), None, span=self._span(start))

        children, close_start = self._parse_jsx_children()
        self._advance(tag_mode)  # '/'
        closing_name = self._parse_jsx_name()
        if _jsx_name_text(closing_name) != tag_name:
            raise self._error(
                f"expected corresponding closing tag for <{tag_name}>", closing_name.span
            )
        self._expect_tag(">", after)
        closing = JSXClosingElement(closing_name, span=self._span(close_start))
        return JSXElement(opening, children, closing, span=self._span(start))

    def _parse_jsx_children(self) -> tuple[tuple[Node, ...], Position]:
        """Parse children up to a closing tag, consuming its '<'."""
        mode = self._child_mode()
        children: list[Node] = []
        while True:
            if self._at_eof():
                raise self._unexpected("unterminated element")
            if self._at("<"):
                lt_start = self._start()
                self._advance(self._tag_mode())
                if self._at("/"):
                    return tuple(children), lt_start
                children.append(self._parse_jsx_after_lt(lt_start, mode))
                continue
            children.append(self._parse_child(mode))

    def _parse_child(self, mode: Mode, *, top_level: bool = False) -> Node:
        start = self._start()
        tok = self._tok
        if tok.type is TokenType.JSX_TEXT:
            self._advance(mode)
            return JSXText(tok.value, span=self._span(start))
        if tok.type is TokenType.HTML_COMMENT:
            self._advance(mode)
            return HTMLComment(tok.value, span=self._span(start))
        if self._at("{"):
            return self._parse_jsx_expression_container(mode, child=True)
        if top_level and self._at("<"):
            return self._parse_jsx_element(mode)
        raise self._unexpected("unexpected token in markup")

    def _parse_jsx_expression_container(self, after: Mode, *, child: bool) -> Node:
        start = self._start()
        self._advance()
        if self._at("}"):
            empty = JSXEmptyExpression(span=Span(self._last_end, self._tok.span.start))
            self._expect_tag("}", after)
            return JSXExpressionContainer(empty, span=self._span(start))
        if child and self._at("..."):
            self._advance()
            expression = self._parse_expression()
            self._expect_tag("}", after)
            return JSXSpreadChild(expression, span=self._span(start))
        expression = self._parse_expression()
        self._expect_tag("}", after)
        return JSXExpressionContainer(expression, span=self._span(start))

    def _parse_jsx_name(self) -> Node:
        tag_mode = self._tag_mode()
        start = self._start()
        if self._tok.type is not TokenType.JSX_NAME:
            raise self._unexpected("expected tag name")
        ident = JSXIdentifier(self._advance(tag_mode).value, span=self._span(start))
        if self._at(":"):
            self._advance(tag_mode)
            name = self._parse_jsx_identifier()
            return JSXNamespacedName(ident, name, span=self._span(start))
        node: Node = ident
        while self._at("."):
            self._advance(tag_mode)
            prop = self._parse_jsx_identifier()
            node = JSXMemberExpression(node, prop, span=self._span(start))
        return node

    def _parse_jsx_identifier(self) -> JSXIdentifier:
        start = self._start()
        if self._tok.type is not TokenType.JSX_NAME:
            raise self._unexpected("expected name")
        return JSXIdentifier(self._advance(self._tag_mode()).value, span=self._span(start))

    def _parse_jsx_attribute(self) -> Node:
        tag_mode = self._tag_mode()
        start = self._start()
        if self._at("{") and not self._html:
            self._advance()
            self._expect("...")
            argument = self._parse_assignment()
            self._expect_tag("}", tag_mode)
            return JSXSpreadAttribute(argument, span=self._span(start))
        name_start = self._start()
        if self._tok.type is not TokenType.JSX_NAME:
            raise self._unexpected("expected attribute name")
        name: Node = JSXIdentifier(self._advance(tag_mode).value, span=self._span(name_start))
        if self._at(":"):
            self._advance(tag_mode)
            local = self._parse_jsx_identifier()
            name = JSXNamespacedName(name, local, span=self._span(name_start))
        value: Node | None = None
        if self._at("="):
            self._advance(Mode.HTML_VALUE if self._html else tag_mode)
            tok = self._tok
            value_start = self._start()
            if tok.type is TokenType.JSX_STRING:
                self._advance(tag_mode)
                value = StringLiteral(tok.value[1:-1], tok.value, span=self._span(value_start))
            elif self._at("{") and not self._html:
                value = self._parse_jsx_expression_container(tag_mode, child=False)
            elif self._at("<") and not self._html:
                value = self._parse_jsx_element(tag_mode)
            else:
                raise self._unexpected("expected attribute value")
        return JSXAttribute(name, value, span=self._span(start))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _cook(raw: str) -> str:
    """Resolve the simple escapes of a quoted string literal."""
    body = raw[1:-1]
    if "\\" not in body:
        return body
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            if nxt == "\n":
                i += 2
                continue
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _jsx_name_text(node: Node) -> str:
    if isinstance(node, JSXIdentifier):
        return node.name
    if isinstance(node, JSXNamespacedName):
        return f"{node.namespace.name}:{node.name.name}"
    if isinstance(node, JSXMemberExpression):
        return f"{_jsx_name_text(node.object)}.{node.property.name}"
    return ""


def _with_span(node: VariableDeclaration, span: Span) -> VariableDeclaration:
    return VariableDeclaration(node.kind, node.declarations, span=span)


def _check_tree_depth(root: Node, source: str) -> None:
    stack: list[tuple[Node, int]] = [(root, 1)]
    while stack:
        node, depth = stack.pop()
        if depth > MAX_TREE_DEPTH:
            raise ParseError("input nested too deeply", node.span, source)
        for child in child_nodes(node):
            stack.append((child, depth + 1))


def parse(source: str, *, html: bool = False) -> ParseResult:
    """Parse *source* as a script program, or as HTML markup when *html*."""
    parser = Parser(source, html=html)
    if html:
        return parser.parse_markup()
    return parser.parse_program()
