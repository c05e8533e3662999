"""Builtin dispatch registry and the core builtin table."""

from .registry import (
    MAX_PRECEDENCE, BuiltinEntry, BuiltinFlags, BuiltinRegistry,
    OperatorEntry, OperatorKind,
)
from .corefunctions import CORE_DECLARATIONS, Alias, Function, Operator, build_registry

__all__ = [
    'MAX_PRECEDENCE', 'BuiltinEntry', 'BuiltinFlags', 'BuiltinRegistry',
    'OperatorEntry', 'OperatorKind',
    'CORE_DECLARATIONS', 'Alias', 'Function', 'Operator', 'build_registry',
]
