"""Scanner for the PLC language.

Turns source text into a list of `lark.Token`s. Each token's `type` is
the name of a `TokenKind`, its `value` is the literal source text and
`start_pos` is the offset of its first character. Whitespace is skipped
and never produces a token.

Classification is tried in a fixed order: identifier, number, character,
string, and finally operator, which accepts any single character and so
must come last.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from lark import Token

from .errors import LexError


class TokenKind(Enum):
    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    DECIMAL = 'DECIMAL'
    CHARACTER = 'CHARACTER'
    STRING = 'STRING'
    OPERATOR = 'OPERATOR'


WHITESPACE = ' \t\n\r\b'
ESCAPES = 'bnrt\'"\\'
TWO_CHAR_OPS = ('==', '!=', '&&', '||')


def _is_letter(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z')


def _is_digit(c: str) -> bool:
    return '0' <= c <= '9'


class Scanner:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def peek(self, offset: int = 0) -> str:
        """Return the character at pos + offset, or '' past the end."""
        i = self.pos + offset
        if i < len(self.source):
            return self.source[i]
        return ''

    def advance(self, n: int = 1):
        for _ in range(n):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def scan(self) -> List[Token]:
        tokens: List[Token] = []
        while self.pos < len(self.source):
            if self.peek() in WHITESPACE:
                self.advance()
                continue
            tokens.append(self.scan_token())
        return tokens

    def scan_token(self) -> Token:
        c = self.peek()
        if c == '@' or _is_letter(c):
            return self.scan_identifier()
        if c == '-' or _is_digit(c):
            return self.scan_number()
        if c == '\'':
            return self.scan_character()
        if c == '"':
            return self.scan_string()
        return self.scan_operator()

    def emit(self, kind: TokenKind, start: int, line: int, column: int) -> Token:
        return Token(kind.name, self.source[start:self.pos],
                     start_pos=start, line=line, column=column, end_pos=self.pos)

    def scan_identifier(self) -> Token:
        start, line, column = self.pos, self.line, self.column
        self.advance()
        while True:
            c = self.peek()
            if c and (_is_letter(c) or _is_digit(c) or c in '_-'):
                self.advance()
            else:
                break
        return self.emit(TokenKind.IDENTIFIER, start, line, column)

    def scan_number(self) -> Token:
        start, line, column = self.pos, self.line, self.column
        if self.peek() == '-':
            if not _is_digit(self.peek(1)):
                # a lone minus is an operator
                self.advance()
                return self.emit(TokenKind.OPERATOR, start, line, column)
            self.advance()
        kind = TokenKind.INTEGER
        if self.peek() == '0':
            self.advance()
        else:
            while _is_digit(self.peek()):
                self.advance()
        if self.peek() == '.' and _is_digit(self.peek(1)):
            self.advance()
            while _is_digit(self.peek()):
                self.advance()
            kind = TokenKind.DECIMAL
        return self.emit(kind, start, line, column)

    def scan_escape(self, what: str):
        # current character is the backslash
        self.advance()
        if self.peek() == '' or self.peek() not in ESCAPES:
            raise LexError(f"invalid escape sequence in {what} literal", self.pos)
        self.advance()

    def scan_character(self) -> Token:
        start, line, column = self.pos, self.line, self.column
        self.advance()
        c = self.peek()
        if c == '\\':
            self.scan_escape('character')
        elif c == '' or c in '\'\n\r':
            raise LexError("invalid character literal", self.pos)
        else:
            self.advance()
        if self.peek() != '\'':
            raise LexError("unterminated character literal", self.pos)
        self.advance()
        return self.emit(TokenKind.CHARACTER, start, line, column)

    def scan_string(self) -> Token:
        start, line, column = self.pos, self.line, self.column
        self.advance()
        while True:
            c = self.peek()
            if c == '"':
                self.advance()
                break
            if c == '\\':
                self.scan_escape('string')
                continue
            if c == '' or not c.isprintable():
                raise LexError("unterminated string literal", self.pos)
            self.advance()
        return self.emit(TokenKind.STRING, start, line, column)

    def scan_operator(self) -> Token:
        start, line, column = self.pos, self.line, self.column
        if self.source[self.pos:self.pos + 2] in TWO_CHAR_OPS:
            self.advance(2)
        else:
            self.advance()
        return self.emit(TokenKind.OPERATOR, start, line, column)


def scan(source: str) -> List[Token]:
    """Convert source text into a list of tokens, or raise LexError."""
    return Scanner(source).scan()
