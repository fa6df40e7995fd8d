import pytest

from plclang.errors import LexError
from plclang.scanner import TokenKind, scan


def kinds(source):
    return [(t.type, t.value) for t in scan(source)]


def test_declaration_tokens():
    assert kinds('LET x = 5;') == [
        ('IDENTIFIER', 'LET'),
        ('IDENTIFIER', 'x'),
        ('OPERATOR', '='),
        ('INTEGER', '5'),
        ('OPERATOR', ';'),
    ]


def test_token_positions():
    tokens = scan('ab  12\n"s"')
    assert [t.start_pos for t in tokens] == [0, 4, 7]
    assert tokens[2].line == 2
    assert tokens[2].column == 1


def test_whitespace_including_backspace_is_skipped():
    assert kinds(' \t\b\r\nx') == [('IDENTIFIER', 'x')]


def test_identifier_allows_at_underscore_and_dash():
    assert kinds('@thing a_b x-1') == [
        ('IDENTIFIER', '@thing'),
        ('IDENTIFIER', 'a_b'),
        ('IDENTIFIER', 'x-1'),
    ]


def test_numbers():
    assert kinds('0 12 -3 0.5 -1.25') == [
        ('INTEGER', '0'),
        ('INTEGER', '12'),
        ('INTEGER', '-3'),
        ('DECIMAL', '0.5'),
        ('DECIMAL', '-1.25'),
    ]


def test_leading_zero_splits_number():
    assert kinds('01') == [('INTEGER', '0'), ('INTEGER', '1')]


def test_trailing_dot_is_not_decimal():
    assert kinds('1.') == [('INTEGER', '1'), ('OPERATOR', '.')]


def test_lone_minus_is_operator():
    assert kinds('a - b') == [
        ('IDENTIFIER', 'a'),
        ('OPERATOR', '-'),
        ('IDENTIFIER', 'b'),
    ]


def test_character_literals():
    assert kinds("'a' '\\n' '\\''") == [
        ('CHARACTER', "'a'"),
        ('CHARACTER', "'\\n'"),
        ('CHARACTER', "'\\''"),
    ]


def test_string_literal_with_escapes():
    assert kinds('"say \\"hi\\"\\t"') == [('STRING', '"say \\"hi\\"\\t"')]


def test_two_character_operators():
    assert kinds('== != && || <') == [
        ('OPERATOR', '=='),
        ('OPERATOR', '!='),
        ('OPERATOR', '&&'),
        ('OPERATOR', '||'),
        ('OPERATOR', '<'),
    ]


def test_any_other_character_is_an_operator():
    assert kinds('$') == [('OPERATOR', '$')]


def test_rescanning_token_text_yields_same_token():
    for token in scan('LET @x: Decimal = -1.5; print("a\\tb"); \'c\' != 0'):
        again = scan(token.value)
        assert len(again) == 1
        assert again[0].type == token.type
        assert again[0].value == token.value


def test_token_kind_names_match_token_types():
    assert scan('1.0')[0].type == TokenKind.DECIMAL.name


def test_unterminated_string():
    with pytest.raises(LexError) as exc:
        scan('"abc')
    assert exc.value.index == 4


def test_string_rejects_newline():
    with pytest.raises(LexError):
        scan('"ab\ncd"')


def test_invalid_escape():
    with pytest.raises(LexError) as exc:
        scan('"\\q"')
    assert exc.value.index == 2


def test_unterminated_character():
    with pytest.raises(LexError) as exc:
        scan("'ab'")
    assert exc.value.index == 2


def test_empty_character():
    with pytest.raises(LexError) as exc:
        scan("''")
    assert exc.value.index == 1
