"""
Error taxonomy for the expression engine.

Every failure is reported as a single EvalError carrying an ErrorKind. The
kinds are flat (no nested causes) and keep stable integer codes so hosts can
map them to their own diagnostics.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Union


class ErrorKind(IntEnum):
    """Result codes, in the order hosts may rely on."""
    OK = 0
    ILLEGAL_CHARACTER = 1
    INVALID_LITERAL = 2
    LITERAL_OUT_OF_RANGE = 3
    NAME_TOO_LONG = 4
    UNEXPECTED_CHARACTER = 5
    EXPECTED_TERM = 6
    STACK_OVERFLOW = 7
    UNDEFINED_FUNCTION = 8
    UNDEFINED_VARIABLE = 9
    EXPECTED_OPEN_BRACKET = 10
    EXPECTED_CLOSE_BRACKET = 11


_MESSAGES = (
    "ok",
    "illegal character",
    "invalid literal",
    "literal out-of-range",
    "name too long",
    "unexpected character",
    "expected term",
    "stack overflow",
    "undefined function",
    "undefined variable",
    "expected open bracket",
    "expected close bracket",
)


def error_to_string(kind: Union[ErrorKind, int]) -> str:
    """Return the human-readable text for an error kind or raw code."""
    code = int(kind)
    if 0 <= code < len(_MESSAGES):
        return _MESSAGES[code]
    return "undefined error"


class EvalError(Exception):
    """Raised when lexing, parsing or name resolution fails."""

    def __init__(self, kind: ErrorKind, pos: Optional[int] = None):
        self.kind = kind
        self.pos = pos
        super().__init__(kind, pos)

    def __str__(self) -> str:
        msg = error_to_string(self.kind)
        if self.pos is not None:
            return f"{msg} at position {self.pos}"
        return msg

    def __repr__(self) -> str:
        return f"EvalError({self.kind.name}, pos={self.pos})"
