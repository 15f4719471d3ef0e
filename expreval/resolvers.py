"""
Name resolution for functions and variables.

The parser hands every identifier it cannot evaluate by itself to a Resolver.
A built-in resolver exposes a fixed table of unary math functions and
constants; MappingResolver layers host-defined names on top of it.
"""

from __future__ import annotations

import functools
import math
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import ErrorKind, EvalError

# A resolved function takes the argument and the caller's user_data.
EvalFunc = Callable[[float, Any], float]


class Resolver(ABC):
    """
    Abstract lookup of function and variable names
    """
    @abstractmethod
    def get_function(self, name: str) -> Optional[EvalFunc]:
        """
        Look up a function by name

        Args:
            name: Identifier as written in the expression

        Returns:
            Callable taking (arg, user_data), or None if the name is unknown
        """
        pass

    @abstractmethod
    def get_variable(self, name: str) -> float:
        """
        Look up a variable by name (without the leading '$')

        Raises:
            EvalError: UNDEFINED_VARIABLE if the name is unknown
        """
        pass


def _c_math(func: Callable[[float], float]) -> EvalFunc:
    """Wrap a math function so domain errors give nan and overflow gives inf."""
    @functools.wraps(func)
    def wrapper(arg: float, user_data: Any = None) -> float:
        try:
            return float(func(arg))
        except OverflowError:
            return math.inf
        except ValueError:
            return math.nan
    return wrapper


def _log(x: float) -> float:
    if x == 0.0:
        return -math.inf
    return math.log(x)


def _log10(x: float) -> float:
    if x == 0.0:
        return -math.inf
    return math.log10(x)


def _integral(func: Callable[[float], int]) -> Callable[[float], float]:
    @functools.wraps(func)
    def wrapper(x: float) -> float:
        if not math.isfinite(x):
            return x
        return float(func(x))
    return wrapper


def _round(x: float) -> int:
    return math.floor(x + 0.5)


_FUNCTIONS: Mapping[str, EvalFunc] = MappingProxyType({
    'cos': _c_math(math.cos),
    'sin': _c_math(math.sin),
    'tan': _c_math(math.tan),
    'acos': _c_math(math.acos),
    'asin': _c_math(math.asin),
    'atan': _c_math(math.atan),
    'exp': _c_math(math.exp),
    'log': _c_math(_log),
    'log10': _c_math(_log10),
    'sqrt': _c_math(math.sqrt),
    'ceil': _c_math(_integral(math.ceil)),
    'floor': _c_math(_integral(math.floor)),
    'round': _c_math(_integral(_round)),
})

_CONSTANTS: Mapping[str, float] = MappingProxyType({
    'INFINITY': math.inf,
    'NAN': math.nan,
    'PI': math.pi,
})


class DefaultResolver(Resolver):
    """Built-in math functions and constants, matched case-sensitively."""

    def get_function(self, name: str) -> Optional[EvalFunc]:
        return _FUNCTIONS.get(name)

    def get_variable(self, name: str) -> float:
        try:
            return _CONSTANTS[name]
        except KeyError:
            raise EvalError(ErrorKind.UNDEFINED_VARIABLE) from None

    def function_names(self) -> List[str]:
        return sorted(_FUNCTIONS)

    def variable_names(self) -> List[str]:
        return sorted(_CONSTANTS)


_DEFAULT_RESOLVER = DefaultResolver()


def default_resolver() -> DefaultResolver:
    """Return the shared built-in resolver."""
    return _DEFAULT_RESOLVER


class MappingResolver(Resolver):
    """
    Resolver backed by host-supplied dictionaries.

    Names defined here shadow those of the fallback resolver, which defaults
    to the built-in one. Pass fallback=None to expose only the host's names.
    """

    def __init__(
        self,
        variables: Optional[Mapping[str, float]] = None,
        functions: Optional[Mapping[str, EvalFunc]] = None,
        fallback: Optional[Resolver] = _DEFAULT_RESOLVER,
    ):
        self._variables: Dict[str, float] = {k: float(v) for k, v in (variables or {}).items()}
        self._functions: Dict[str, EvalFunc] = dict(functions or {})
        self.fallback = fallback

    @property
    def variables(self) -> Mapping[str, float]:
        return MappingProxyType(self._variables)

    def set_variable(self, name: str, value: float) -> None:
        self._variables[name] = float(value)

    def set_function(self, name: str, func: EvalFunc) -> None:
        if not callable(func):
            raise TypeError(f"Function '{name}' must be callable, got {type(func).__name__}")
        self._functions[name] = func

    def get_function(self, name: str) -> Optional[EvalFunc]:
        func = self._functions.get(name)
        if func is None and self.fallback is not None:
            return self.fallback.get_function(name)
        return func

    def get_variable(self, name: str) -> float:
        if name in self._variables:
            return self._variables[name]
        if self.fallback is None:
            raise EvalError(ErrorKind.UNDEFINED_VARIABLE)
        return self.fallback.get_variable(name)

    def function_names(self) -> List[str]:
        names = set(self._functions)
        if isinstance(self.fallback, (DefaultResolver, MappingResolver)):
            names.update(self.fallback.function_names())
        return sorted(names)

    def variable_names(self) -> List[str]:
        names = set(self._variables)
        if isinstance(self.fallback, (DefaultResolver, MappingResolver)):
            names.update(self.fallback.variable_names())
        return sorted(names)
