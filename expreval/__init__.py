"""Embeddable numeric expression evaluator."""

from .config import DEFAULT_CONFIG, EvalConfig, load_config
from .errors import ErrorKind, EvalError, error_to_string
from .parser import evaluate
from .resolvers import DefaultResolver, MappingResolver, Resolver, default_resolver

__all__ = [
    'DEFAULT_CONFIG',
    'DefaultResolver',
    'ErrorKind',
    'EvalConfig',
    'EvalError',
    'MappingResolver',
    'Resolver',
    'default_resolver',
    'error_to_string',
    'evaluate',
    'load_config',
]

__version__ = '1.0.0'
