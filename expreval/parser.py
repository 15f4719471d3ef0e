"""
Single-pass recursive descent parser and evaluator.

Each grammar rule pulls tokens from the lexer and returns the numeric value of
the sub-expression it recognised; no syntax tree is built.

Grammar (lowest to highest precedence):
    expr    : sum
    sum     : product ((ADD|SUBTRACT) product)*
    product : unary ((MULTIPLY|DIVIDE|relop) unary)*
    unary   : (SUBTRACT)* term
    term    : NUMBER | OPEN_BRACKET expr CLOSE_BRACKET
            | FUNCTION OPEN_BRACKET expr CLOSE_BRACKET | VARIABLE

Relational operators share the multiply/divide tier and are applied left to
right with them, so ``1 < 2 * 3`` is ``(1 < 2) * 3`` and ``a < b < c`` is
``(a < b) < c``.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from .config import DEFAULT_CONFIG, EvalConfig
from .errors import ErrorKind, EvalError
from .lexer import RELATIONAL, Lexer, TokenType
from .resolvers import Resolver


def _divide(lhs: float, rhs: float) -> float:
    """IEEE division: x/0 is a signed infinity, 0/0 is nan."""
    if rhs == 0.0:
        if lhs == 0.0 or math.isnan(lhs):
            return math.nan
        return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)
    return lhs / rhs


def _to_float(value) -> float:
    try:
        return float(value)
    except OverflowError:
        # ints beyond double range saturate
        return math.copysign(math.inf, value)


def _compare(op: str, lhs: float, rhs: float) -> float:
    if op == TokenType.EQUAL:
        result = lhs == rhs
    elif op == TokenType.LESS_EQ:
        result = lhs <= rhs
    elif op == TokenType.LESS:
        result = lhs < rhs
    elif op == TokenType.GREATER_EQ:
        result = lhs >= rhs
    else:
        result = lhs > rhs
    return 1.0 if result else 0.0


class EvalContext:
    """State for one top-level evaluation."""

    def __init__(
        self,
        expression: str,
        resolver: Optional[Resolver],
        user_data: Any,
        config: EvalConfig,
    ):
        self.resolver = resolver
        self.user_data = user_data
        self.lexer = Lexer(expression, config.max_name_length)
        self.max_depth = config.max_depth
        self.depth = 0

    @property
    def token(self):
        return self.lexer.token

    def advance(self) -> None:
        self.lexer.next_token()

    def expr(self) -> float:
        """expr : sum, guarded by the nesting depth limit."""
        if self.depth >= self.max_depth:
            raise EvalError(ErrorKind.STACK_OVERFLOW, self.token.pos)
        self.depth += 1
        try:
            return self.sum()
        finally:
            self.depth -= 1

    def sum(self) -> float:
        lhs = self.product()
        while True:
            op = self.token.type
            if op == TokenType.ADD:
                self.advance()
                lhs += self.product()
            elif op == TokenType.SUBTRACT:
                self.advance()
                lhs -= self.product()
            else:
                return lhs

    def product(self) -> float:
        lhs = self.unary()
        while True:
            op = self.token.type
            if op == TokenType.MULTIPLY:
                self.advance()
                lhs *= self.unary()
            elif op == TokenType.DIVIDE:
                self.advance()
                lhs = _divide(lhs, self.unary())
            elif op in RELATIONAL:
                self.advance()
                lhs = _compare(op, lhs, self.unary())
            else:
                return lhs

    def unary(self) -> float:
        """unary : (SUBTRACT)* term; an odd count of minuses negates."""
        negate = False
        while self.token.type == TokenType.SUBTRACT:
            negate = not negate
            self.advance()
        value = self.term()
        return -value if negate else value

    def term(self) -> float:
        token = self.token
        if token.type == TokenType.NUMBER:
            value = token.number
        elif token.type == TokenType.OPEN_BRACKET:
            self.advance()
            value = self.expr()
            self._expect_close_bracket()
        elif token.type == TokenType.FUNCTION:
            value = self._call(token.name, token.pos)
        elif token.type == TokenType.VARIABLE:
            if self.resolver is None:
                raise EvalError(ErrorKind.UNDEFINED_VARIABLE, token.pos)
            value = self._lookup(token.name, token.pos)
        else:
            raise EvalError(ErrorKind.EXPECTED_TERM, token.pos)
        self.advance()
        return value

    def _lookup(self, name: str, pos: int) -> float:
        try:
            value = self.resolver.get_variable(name)
        except EvalError as e:
            if e.pos is None:
                e.pos = pos
            raise
        return _to_float(value)

    def _call(self, name: str, pos: int) -> float:
        func = self.resolver.get_function(name) if self.resolver is not None else None
        if func is None:
            raise EvalError(ErrorKind.UNDEFINED_FUNCTION, pos)
        self.advance()
        if self.token.type != TokenType.OPEN_BRACKET:
            raise EvalError(ErrorKind.EXPECTED_OPEN_BRACKET, self.token.pos)
        self.advance()
        arg = self.expr()
        self._expect_close_bracket()
        return _to_float(func(arg, self.user_data))

    def _expect_close_bracket(self) -> None:
        if self.token.type != TokenType.CLOSE_BRACKET:
            raise EvalError(ErrorKind.EXPECTED_CLOSE_BRACKET, self.token.pos)


def evaluate(
    expression: str,
    resolver: Optional[Resolver] = None,
    user_data: Any = None,
    config: Optional[EvalConfig] = None,
) -> float:
    """
    Evaluate an infix expression and return its value.

    Args:
        expression: Text such as ``"1+(2*sin(3))"``
        resolver: Lookup for function names and ``$variables``; without one,
            any name is undefined
        user_data: Passed unchanged to every resolved function
        config: Name-length and depth bounds (defaults to DEFAULT_CONFIG)

    Returns:
        The value as a float; relational operators yield 1.0 or 0.0

    Raises:
        EvalError: On the first lexical, syntax or resolution error. An
            EvalError from get_variable without a position gets the position
            of the $name token; other resolver and function errors propagate
            unchanged.
    """
    ctx = EvalContext(expression, resolver, user_data, config or DEFAULT_CONFIG)
    ctx.advance()
    value = ctx.expr()
    if ctx.token.type != TokenType.END:
        raise EvalError(ErrorKind.UNEXPECTED_CHARACTER, ctx.token.pos)
    return value
