"""Parser for the PLC language.

A recursive-descent parser with one method per grammar rule. The token
list produced by `plclang.scanner.scan` is consumed left to right and the
result is a `Source` AST node holding the program's globals and
functions.

Expressions are parsed by precedence layers, weakest first:

    logical          && ||
    comparison       < > == !=
    additive         + -
    multiplicative   * / ^
    primary

Every binary layer is left-associative. Keywords (`LET`, `IF`, `END`, ...)
are ordinary IDENTIFIER tokens recognized by their literal text.

Errors are raised as `ParseError` carrying the index of the offending
token (the token count when input ended early).
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import List, Optional, Union

from lark import Token

from .ast import (
    Source, GlobalDecl, FuncDecl, ExprStmt, VarDecl, Assign, IfStmt,
    SwitchStmt, CaseStmt, WhileStmt, ReturnStmt, Literal, Group, BinaryOp,
    Access, Call, ListLit, Node
)
from .errors import ParseError
from .scanner import TokenKind, scan
from .types import NIL_VALUE, CharVal

Pattern = Union[str, TokenKind]

BLOCK_TERMINATORS = ('END', 'ELSE', 'CASE', 'DEFAULT')
GLOBAL_KEYWORDS = ('LIST', 'VAR', 'VAL', 'LET')

_ESCAPE_RE = re.compile(r'\\([bnrt\'"\\])')
_ESCAPES = {'b': '\b', 'n': '\n', 'r': '\r', 't': '\t', '\'': '\'', '"': '"', '\\': '\\'}


def unescape(text: str) -> str:
    """Replace escape sequences in the body of a character or string literal."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], text)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # Token stream helpers

    def peek(self, *patterns: Pattern) -> bool:
        """True if the next tokens match `patterns` in order.

        A TokenKind pattern matches the token's kind; a string pattern
        matches the token's literal text.
        """
        for offset, pattern in enumerate(patterns):
            i = self.pos + offset
            if i >= len(self.tokens):
                return False
            token = self.tokens[i]
            if isinstance(pattern, TokenKind):
                if token.type != pattern.name:
                    return False
            elif token.value != pattern:
                return False
        return True

    def match(self, *patterns: Pattern) -> bool:
        if self.peek(*patterns):
            self.pos += len(patterns)
            return True
        return False

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def error(self, message: str) -> ParseError:
        if self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            message = f"{message}, got {token.value!r}"
        else:
            message = f"{message}, got end of input"
        return ParseError(message, self.pos)

    def consume(self, expected: Pattern, what: Optional[str] = None) -> Token:
        if not self.match(expected):
            if what is None:
                what = expected.name if isinstance(expected, TokenKind) else repr(expected)
            raise self.error(f"expected {what}")
        return self.previous()

    def identifier(self, what: str = 'identifier') -> str:
        return self.consume(TokenKind.IDENTIFIER, what).value

    def optional_type(self) -> Optional[str]:
        if self.match(':'):
            return self.identifier('type name')
        return None

    # Top level

    def parse_source(self) -> Source:
        globals_: List[GlobalDecl] = []
        functions: List[FuncDecl] = []
        while any(self.peek(keyword) for keyword in GLOBAL_KEYWORDS):
            globals_.append(self.parse_global())
        while self.peek('FUN'):
            functions.append(self.parse_function())
        if self.pos < len(self.tokens):
            raise self.error("expected global or function declaration")
        return Source(globals_, functions)

    def parse_global(self) -> GlobalDecl:
        if self.match('LIST'):
            decl = self.parse_list()
        elif self.match('VAL'):
            decl = self.parse_immutable()
        else:
            # VAR or LET
            self.pos += 1
            decl = self.parse_mutable()
        self.consume(';')
        return decl

    def parse_list(self) -> GlobalDecl:
        name = self.identifier()
        type_name = self.optional_type()
        self.consume('=')
        self.consume('[')
        value = self.parse_list_elements()
        return GlobalDecl(name, type_name, True, value)

    def parse_mutable(self) -> GlobalDecl:
        name = self.identifier()
        type_name = self.optional_type()
        value = self.parse_expression() if self.match('=') else None
        return GlobalDecl(name, type_name, True, value)

    def parse_immutable(self) -> GlobalDecl:
        name = self.identifier()
        type_name = self.optional_type()
        self.consume('=', "'=' (immutable value must be initialized)")
        value = self.parse_expression()
        return GlobalDecl(name, type_name, False, value)

    def parse_function(self) -> FuncDecl:
        self.consume('FUN')
        name = self.identifier('function name')
        self.consume('(')
        params: List[str] = []
        param_types: List[Optional[str]] = []
        if not self.peek(')'):
            while True:
                params.append(self.identifier('parameter name'))
                param_types.append(self.optional_type())
                if not self.match(','):
                    break
        self.consume(')')
        return_type = self.optional_type()
        self.consume('DO')
        body = self.parse_block()
        self.consume('END')
        return FuncDecl(name, params, param_types, return_type, body)

    # Statements

    def parse_block(self) -> List[Node]:
        statements: List[Node] = []
        while not any(self.peek(t) for t in BLOCK_TERMINATORS):
            if self.pos >= len(self.tokens):
                raise self.error("expected END")
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self) -> Node:
        if self.peek('LET'):
            return self.parse_declaration()
        if self.peek('SWITCH'):
            return self.parse_switch()
        if self.peek('IF'):
            return self.parse_if()
        if self.peek('WHILE'):
            return self.parse_while()
        if self.peek('RETURN'):
            return self.parse_return()
        expr = self.parse_expression()
        if self.match('='):
            if not isinstance(expr, Access):
                self.pos -= 1
                raise self.error("invalid assignment target")
            value = self.parse_expression()
            self.consume(';')
            return Assign(expr, value)
        self.consume(';')
        return ExprStmt(expr)

    def parse_declaration(self) -> VarDecl:
        self.consume('LET')
        name = self.identifier()
        type_name = self.optional_type()
        value = self.parse_expression() if self.match('=') else None
        self.consume(';')
        return VarDecl(name, type_name, value)

    def parse_if(self) -> IfStmt:
        self.consume('IF')
        condition = self.parse_expression()
        self.consume('DO')
        then_body = self.parse_block()
        else_body: List[Node] = []
        if self.match('ELSE'):
            else_body = self.parse_block()
        self.consume('END')
        return IfStmt(condition, then_body, else_body)

    def parse_switch(self) -> SwitchStmt:
        self.consume('SWITCH')
        condition = self.parse_expression()
        cases: List[CaseStmt] = []
        while self.peek('CASE'):
            cases.append(self.parse_case())
        if not cases:
            raise self.error("expected CASE")
        if not self.peek('DEFAULT'):
            raise self.error("expected DEFAULT")
        cases.append(self.parse_case())
        self.consume('END')
        return SwitchStmt(condition, cases)

    def parse_case(self) -> CaseStmt:
        if self.match('CASE'):
            value = self.parse_expression()
            self.consume(':')
            return CaseStmt(value, self.parse_block())
        self.consume('DEFAULT')
        self.match(':')
        return CaseStmt(None, self.parse_block())

    def parse_while(self) -> WhileStmt:
        self.consume('WHILE')
        condition = self.parse_expression()
        self.consume('DO')
        body = self.parse_block()
        self.consume('END')
        return WhileStmt(condition, body)

    def parse_return(self) -> ReturnStmt:
        self.consume('RETURN')
        if self.match(';'):
            return ReturnStmt(None)
        value = self.parse_expression()
        self.consume(';')
        return ReturnStmt(value)

    # Expressions

    def parse_expression(self) -> Node:
        return self.parse_logical()

    def parse_binary(self, operators, operand) -> Node:
        node = operand()
        while any(self.peek(op) for op in operators):
            self.pos += 1
            op = self.previous().value
            right = operand()
            node = BinaryOp(op, node, right)
        return node

    def parse_logical(self) -> Node:
        return self.parse_binary(('&&', '||'), self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self.parse_binary(('<', '>', '==', '!='), self.parse_additive)

    def parse_additive(self) -> Node:
        return self.parse_binary(('+', '-'), self.parse_multiplicative)

    def parse_multiplicative(self) -> Node:
        return self.parse_binary(('*', '/', '^'), self.parse_primary)

    def parse_primary(self) -> Node:
        if self.match('NIL'):
            return Literal(NIL_VALUE)
        if self.match('TRUE'):
            return Literal(True)
        if self.match('FALSE'):
            return Literal(False)
        if self.match(TokenKind.INTEGER):
            return Literal(int(self.previous().value))
        if self.match(TokenKind.DECIMAL):
            return Literal(Decimal(self.previous().value))
        if self.match(TokenKind.CHARACTER):
            return Literal(CharVal(unescape(self.previous().value[1:-1])))
        if self.match(TokenKind.STRING):
            return Literal(unescape(self.previous().value[1:-1]))
        if self.match(TokenKind.IDENTIFIER):
            name = self.previous().value
            if self.match('('):
                args: List[Node] = []
                if not self.peek(')'):
                    args.append(self.parse_expression())
                    while self.match(','):
                        args.append(self.parse_expression())
                self.consume(')')
                return Call(name, args)
            if self.match('['):
                offset = self.parse_expression()
                self.consume(']')
                return Access(name, offset)
            return Access(name)
        if self.match('['):
            return self.parse_list_elements()
        if self.match('('):
            expr = self.parse_expression()
            self.consume(')')
            return Group(expr)
        raise self.error("expected expression")

    def parse_list_elements(self) -> ListLit:
        # opening '[' already consumed
        elements = [self.parse_expression()]
        while self.match(','):
            elements.append(self.parse_expression())
        self.consume(']')
        return ListLit(elements)


def parse(tokens: List[Token]) -> Source:
    """Parse a token list into a Source AST, or raise ParseError."""
    return Parser(tokens).parse_source()


def parse_program(source: str) -> Source:
    """Scan and parse PLC source text into a Source AST."""
    return parse(scan(source))
