"""
Lexer for numeric expressions.

Produces one token at a time from a cursor over the input string. A character
can be put back after it was read, which is all the lookahead the grammar
needs. Numeric literals are built digit by digit instead of going through
float() so conversion is exactly reproducible.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from .config import MAX_NAME_LENGTH
from .errors import ErrorKind, EvalError

_END_CHAR = '\0'
_EXPONENT_CAP = 100000


class TokenType:
    """Token kinds."""
    END = 'END'
    ADD = 'ADD'
    SUBTRACT = 'SUBTRACT'
    MULTIPLY = 'MULTIPLY'
    DIVIDE = 'DIVIDE'
    OPEN_BRACKET = 'OPEN_BRACKET'
    CLOSE_BRACKET = 'CLOSE_BRACKET'
    NUMBER = 'NUMBER'
    FUNCTION = 'FUNCTION'
    VARIABLE = 'VARIABLE'
    GREATER = 'GREATER'
    GREATER_EQ = 'GREATER_EQ'
    LESS = 'LESS'
    LESS_EQ = 'LESS_EQ'
    EQUAL = 'EQUAL'


RELATIONAL = frozenset({
    TokenType.GREATER, TokenType.GREATER_EQ,
    TokenType.LESS, TokenType.LESS_EQ,
    TokenType.EQUAL,
})

_SINGLE_CHAR_TOKENS = {
    '+': TokenType.ADD,
    '-': TokenType.SUBTRACT,
    '*': TokenType.MULTIPLY,
    '/': TokenType.DIVIDE,
    '(': TokenType.OPEN_BRACKET,
    ')': TokenType.CLOSE_BRACKET,
}


@dataclass
class Token:
    """A lexical unit; number is set for NUMBER, name for FUNCTION/VARIABLE."""
    type: str
    pos: int
    number: float = 0.0
    name: str = ''

    def __repr__(self) -> str:
        if self.type == TokenType.NUMBER:
            return f"Token({self.type}, {self.number!r}, pos={self.pos})"
        if self.type in (TokenType.FUNCTION, TokenType.VARIABLE):
            return f"Token({self.type}, {self.name!r}, pos={self.pos})"
        return f"Token({self.type}, pos={self.pos})"


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_name_start(ch: str) -> bool:
    return ('A' <= ch <= 'Z') or ('a' <= ch <= 'z') or ch == '_'


def _is_name(ch: str) -> bool:
    return _is_name_start(ch) or _is_digit(ch)


def scale_by_power_of_ten(value: float, exponent: int) -> float:
    """Multiply value by 10**exponent using exponentiation by squaring."""
    power = 10.0
    if exponent < 0:
        exponent = -exponent
        while exponent:
            if exponent & 1:
                value /= power
            exponent >>= 1
            power *= power
    else:
        while exponent:
            if exponent & 1:
                value *= power
            exponent >>= 1
            power *= power
    return value


class Lexer:
    """Cursor-based tokenizer.

    The current token is held in ``token`` and replaced on every call to
    next_token(). Reading past the end keeps returning END.
    """

    def __init__(self, text: str, max_name_length: int = MAX_NAME_LENGTH):
        self.text = text
        self.pos = 0
        self.max_name_length = max_name_length
        self.token = Token(TokenType.END, 0)

    def _get_char(self) -> str:
        i = self.pos
        self.pos += 1
        return self.text[i] if i < len(self.text) else _END_CHAR

    def _put_char(self) -> None:
        self.pos -= 1

    def next_token(self) -> Token:
        """Advance to the next token, store it in ``token`` and return it."""
        while True:
            start = self.pos
            ch = self._get_char()
            if ch == _END_CHAR:
                self._put_char()
                self.token = Token(TokenType.END, start)
                return self.token
            if ch <= ' ':
                continue
            if _is_digit(ch) or ch == '.':
                self._put_char()
                self.token = self._read_number()
            elif _is_name_start(ch):
                self._put_char()
                self.token = self._read_name(TokenType.FUNCTION, start)
            elif ch == '$':
                self.token = self._read_name(TokenType.VARIABLE, start)
            elif ch in '<>':
                if self._get_char() == '=':
                    typ = TokenType.GREATER_EQ if ch == '>' else TokenType.LESS_EQ
                else:
                    self._put_char()
                    typ = TokenType.GREATER if ch == '>' else TokenType.LESS
                self.token = Token(typ, start)
            elif ch == '=':
                # A lone '=' is still an equality test.
                if self._get_char() != '=':
                    self._put_char()
                self.token = Token(TokenType.EQUAL, start)
            elif ch in _SINGLE_CHAR_TOKENS:
                self.token = Token(_SINGLE_CHAR_TOKENS[ch], start)
            else:
                raise EvalError(ErrorKind.ILLEGAL_CHARACTER, start)
            return self.token

    def _read_number(self) -> Token:
        start = self.pos
        value = 0.0
        exponent = 0

        ch = self._get_char()
        if ch != '.':
            if not _is_digit(ch):
                raise EvalError(ErrorKind.INVALID_LITERAL, start)
            while _is_digit(ch):
                value = value * 10.0 + (ord(ch) - ord('0'))
                ch = self._get_char()

        if ch == '.':
            ch = self._get_char()
            if not _is_digit(ch):
                raise EvalError(ErrorKind.INVALID_LITERAL, start)
            while _is_digit(ch):
                value = value * 10.0 + (ord(ch) - ord('0'))
                exponent -= 1
                ch = self._get_char()

        if ch in ('e', 'E'):
            negative = False
            ch = self._get_char()
            if ch in ('-', '+'):
                negative = ch == '-'
                ch = self._get_char()
            if not _is_digit(ch):
                raise EvalError(ErrorKind.INVALID_LITERAL, start)
            magnitude = 0
            while _is_digit(ch):
                # Past the cap every scale already gives 0 or inf.
                if magnitude < _EXPONENT_CAP:
                    magnitude = magnitude * 10 + (ord(ch) - ord('0'))
                ch = self._get_char()
            exponent += -magnitude if negative else magnitude

        if value != 0.0:
            value = scale_by_power_of_ten(value, exponent)
        self._put_char()

        if not math.isfinite(value):
            raise EvalError(ErrorKind.LITERAL_OUT_OF_RANGE, start)
        return Token(TokenType.NUMBER, start, number=value)

    def _read_name(self, typ: str, start: int) -> Token:
        chars = []
        while True:
            ch = self._get_char()
            if not _is_name(ch):
                break
            if len(chars) >= self.max_name_length:
                raise EvalError(ErrorKind.NAME_TOO_LONG, start)
            chars.append(ch)
        self._put_char()
        return Token(typ, start, name=''.join(chars))


def iter_tokens(text: str, max_name_length: int = MAX_NAME_LENGTH) -> Iterator[Token]:
    """Yield tokens from text up to and including END."""
    lexer = Lexer(text, max_name_length)
    while True:
        token = lexer.next_token()
        yield token
        if token.type == TokenType.END:
            return
