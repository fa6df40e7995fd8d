from decimal import Decimal

import pytest

from plclang.ast import (
    Source, GlobalDecl, FuncDecl, ExprStmt, VarDecl, Assign, IfStmt,
    SwitchStmt, CaseStmt, WhileStmt, ReturnStmt, Literal, Group, BinaryOp,
    Access, Call, ListLit
)
from plclang.errors import ParseError
from plclang.parser import parse, parse_program
from plclang.scanner import scan
from plclang.types import NIL_VALUE, CharVal


def parse_body(statements):
    """Parse `statements` as the body of a single function and return it."""
    source = parse_program(f'FUN f() DO {statements} END')
    return source.functions[0].body


def parse_expr(text):
    (stmt,) = parse_body(f'{text};')
    assert isinstance(stmt, ExprStmt)
    return stmt.expr


def test_globals_and_functions():
    source = parse_program(
        'LIST xs: Integer = [1, 2]; VAR y; VAL z: Decimal = 1.0; LET w = 1; '
        'FUN main(): Integer DO RETURN 0; END'
    )
    assert source.globals == [
        GlobalDecl('xs', 'Integer', True, ListLit([Literal(1), Literal(2)])),
        GlobalDecl('y', None, True, None),
        GlobalDecl('z', 'Decimal', False, Literal(Decimal('1.0'))),
        GlobalDecl('w', None, True, Literal(1)),
    ]
    assert source.functions == [FuncDecl('main', [], [], 'Integer', [ReturnStmt(Literal(0))])]


def test_function_parameters():
    source = parse_program('FUN add(a: Integer, b) DO END')
    assert source.functions[0] == FuncDecl('add', ['a', 'b'], ['Integer', None], None, [])


def test_literals_are_unescaped():
    assert parse_expr('NIL') == Literal(NIL_VALUE)
    assert parse_expr('TRUE') == Literal(True)
    assert parse_expr('FALSE') == Literal(False)
    assert parse_expr("'\\n'") == Literal(CharVal('\n'))
    assert parse_expr('"a\\tb\\"c"') == Literal('a\tb"c')
    assert parse_expr('2.50') == Literal(Decimal('2.50'))


def test_precedence_weakest_first():
    expr = parse_expr('a || b == c + d * e')
    assert expr == BinaryOp(
        '||',
        Access('a'),
        BinaryOp('==', Access('b'), BinaryOp('+', Access('c'), BinaryOp('*', Access('d'), Access('e')))),
    )


def test_binary_operators_fold_left():
    assert parse_expr('a - b - c') == BinaryOp('-', BinaryOp('-', Access('a'), Access('b')), Access('c'))
    assert parse_expr('2 ^ 3 ^ 2') == BinaryOp('^', BinaryOp('^', Literal(2), Literal(3)), Literal(2))


def test_group_call_and_index():
    expr = parse_expr('(a + 1) * f(x, y[2])')
    assert expr == BinaryOp(
        '*',
        Group(BinaryOp('+', Access('a'), Literal(1))),
        Call('f', [Access('x'), Access('y', Literal(2))]),
    )


def test_list_literal_in_expression():
    assert parse_expr('[1, 2]') == ListLit([Literal(1), Literal(2)])


def test_statements():
    body = parse_body(
        'LET a: Integer = 1; LET b; a = 2; xs[0] = a; '
        'WHILE a < 3 DO a = a + 1; END RETURN; RETURN a;'
    )
    assert body == [
        VarDecl('a', 'Integer', Literal(1)),
        VarDecl('b', None, None),
        Assign(Access('a'), Literal(2)),
        Assign(Access('xs', Literal(0)), Access('a')),
        WhileStmt(BinaryOp('<', Access('a'), Literal(3)),
                  [Assign(Access('a'), BinaryOp('+', Access('a'), Literal(1)))]),
        ReturnStmt(None),
        ReturnStmt(Access('a')),
    ]


def test_if_else():
    (stmt,) = parse_body('IF x DO print(1); ELSE print(2); END')
    assert stmt == IfStmt(
        Access('x'),
        [ExprStmt(Call('print', [Literal(1)]))],
        [ExprStmt(Call('print', [Literal(2)]))],
    )


def test_switch_with_default():
    (stmt,) = parse_body('SWITCH x CASE 1: print(1); CASE 2: DEFAULT: print(0); END')
    assert stmt == SwitchStmt(Access('x'), [
        CaseStmt(Literal(1), [ExprStmt(Call('print', [Literal(1)]))]),
        CaseStmt(Literal(2), []),
        CaseStmt(None, [ExprStmt(Call('print', [Literal(0)]))]),
    ])


def test_default_colon_is_optional():
    (stmt,) = parse_body('SWITCH x CASE 1: DEFAULT END')
    assert stmt.cases[-1] == CaseStmt(None, [])


def test_parsing_is_deterministic():
    text = 'VAR n = 3; FUN main(): Integer DO WHILE n > 0 DO n = n - 1; END RETURN n; END'
    assert parse_program(text) == parse_program(text)


def test_parse_accepts_tokens():
    assert parse(scan('FUN main() DO END')) == Source([], [FuncDecl('main', [], [], None, [])])


def test_switch_requires_a_case():
    with pytest.raises(ParseError):
        parse_body('SWITCH x DEFAULT END')


def test_switch_requires_default():
    with pytest.raises(ParseError):
        parse_body('SWITCH x CASE 1: print(1); END')


def test_missing_semicolon_reports_token_index():
    with pytest.raises(ParseError) as exc:
        parse_program('VAR x = 1 FUN main() DO END')
    assert exc.value.index == 4


def test_missing_end():
    with pytest.raises(ParseError) as exc:
        parse_program('FUN main() DO print(1);')
    assert exc.value.index == 10
    assert 'end of input' in exc.value.message


def test_invalid_assignment_target():
    with pytest.raises(ParseError) as exc:
        parse_program('FUN main() DO f() = 1; END')
    assert exc.value.index == 8


def test_immutable_requires_value():
    with pytest.raises(ParseError):
        parse_program('VAL x: Integer;')


def test_globals_must_precede_functions():
    with pytest.raises(ParseError):
        parse_program('FUN main() DO END VAR x = 1;')
