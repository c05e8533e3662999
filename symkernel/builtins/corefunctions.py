"""
Declarative table of the core builtins and the routine that builds the
registry from it.

One line per builtin:
    Function(internal, exposed, arity, flags)  - register an implementation
    Alias(internal, exposed, arity, flags)     - expose an implementation again
    Operator(kind, precedence, exposed)        - declare a syntax form

A Function may add a fifth field, the maximum argument count of a VARIABLE
builtin.

`internal` is the name of the implementation function in core.py. An alias
refers to the first name its implementation was registered under and must
repeat that entry's arity and flags.
"""

from typing import Callable, Iterable, NamedTuple, Optional, Union

from . import core
from .registry import (
    MAX_PRECEDENCE, BuiltinFlags, BuiltinRegistry, OperatorKind,
)
from ..errors import RegistryError


class Function(NamedTuple):
    internal: str
    exposed: str
    arity: int
    flags: BuiltinFlags
    max_arity: Optional[int] = None


class Alias(NamedTuple):
    internal: str
    exposed: str
    arity: int
    flags: BuiltinFlags


class Operator(NamedTuple):
    kind: OperatorKind
    precedence: int
    exposed: str


Declaration = Union[Function, Alias, Operator]

FIXED = BuiltinFlags.FIXED
VARIABLE = BuiltinFlags.VARIABLE
MACRO = BuiltinFlags.MACRO

PREFIX = OperatorKind.PREFIX
INFIX = OperatorKind.INFIX
POSTFIX = OperatorKind.POSTFIX
BODIED = OperatorKind.BODIED


CORE_DECLARATIONS = [
    # Arithmetic
    Function('builtin_add', 'MathAdd', 2, FIXED),
    Function('builtin_subtract', 'MathSubtract', 2, FIXED),
    Function('builtin_multiply', 'MathMultiply', 2, FIXED),
    Function('builtin_divide', 'MathDivide', 2, FIXED),
    Function('builtin_negate', 'MathNegate', 1, FIXED),
    Function('builtin_power', 'MathPower', 2, FIXED),
    Function('builtin_abs', 'MathAbs', 1, FIXED),
    Function('builtin_factorial', 'Factorial', 1, FIXED),
    Function('builtin_minus', '-', 1, VARIABLE, 2),
    Alias('builtin_add', '+', 2, FIXED),
    Alias('builtin_multiply', '*', 2, FIXED),
    Alias('builtin_divide', '/', 2, FIXED),
    Alias('builtin_power', '^', 2, FIXED),
    Alias('builtin_factorial', '!', 1, FIXED),
    Alias('builtin_abs', 'Abs', 1, FIXED),

    # Comparison
    Function('builtin_less_than', 'LessThan', 2, FIXED),
    Function('builtin_greater_than', 'GreaterThan', 2, FIXED),
    Function('builtin_less_or_equal', 'LessOrEqual', 2, FIXED),
    Function('builtin_greater_or_equal', 'GreaterOrEqual', 2, FIXED),
    Function('builtin_equals', 'Equals', 2, FIXED),
    Function('builtin_not_equals', 'NotEquals', 2, FIXED),
    Alias('builtin_less_than', '<', 2, FIXED),
    Alias('builtin_greater_than', '>', 2, FIXED),
    Alias('builtin_less_or_equal', '<=', 2, FIXED),
    Alias('builtin_greater_or_equal', '>=', 2, FIXED),
    Alias('builtin_equals', '=', 2, FIXED),
    Alias('builtin_not_equals', '!=', 2, FIXED),

    # Logic
    Function('builtin_and', 'And', 1, VARIABLE | MACRO),
    Function('builtin_or', 'Or', 1, VARIABLE | MACRO),
    Function('builtin_not', 'Not', 1, FIXED),

    # Strings and atoms
    Function('builtin_length', 'Length', 1, FIXED),
    Function('builtin_concat', 'Concat', 0, VARIABLE),
    Function('builtin_string_mid', 'StringMid', 3, FIXED),
    Function('builtin_atom', 'Atom', 1, FIXED),
    Function('builtin_string', 'String', 1, FIXED),
    Alias('builtin_concat', 'ConcatStrings', 0, VARIABLE),

    # Output
    Function('builtin_write_string', 'WriteString', 1, FIXED),
    Function('builtin_write', 'Write', 1, VARIABLE),
    Function('builtin_new_line', 'NewLine', 0, FIXED),

    # Lists
    Function('builtin_list', 'List', 0, VARIABLE),
    Function('builtin_nth', 'Nth', 2, FIXED),

    # Control
    Function('builtin_hold', 'Hold', 1, MACRO),
    Function('builtin_eval', 'Eval', 1, FIXED),
    Function('builtin_set', 'Set', 2, MACRO),
    Function('builtin_prog', 'Prog', 0, VARIABLE | MACRO),
    Function('builtin_if', 'If', 2, VARIABLE | MACRO, 3),
    Function('builtin_while', 'While', 2, MACRO),
    Alias('builtin_set', ':=', 2, MACRO),

    # Operator forms (lower precedence binds tighter)
    Operator(POSTFIX, 0, '!'),
    Operator(INFIX, 20, '^'),
    Operator(INFIX, 30, '/'),
    Operator(INFIX, 40, '*'),
    Operator(PREFIX, 50, '-'),
    Operator(INFIX, 70, '+'),
    Operator(INFIX, 70, '-'),
    Operator(INFIX, 90, '<'),
    Operator(INFIX, 90, '>'),
    Operator(INFIX, 90, '<='),
    Operator(INFIX, 90, '>='),
    Operator(INFIX, 90, '='),
    Operator(INFIX, 90, '!='),
    Operator(PREFIX, 100, 'Not'),
    Operator(INFIX, 1000, 'And'),
    Operator(INFIX, 1010, 'Or'),
    Operator(INFIX, 10000, ':='),
    Operator(BODIED, MAX_PRECEDENCE, 'While'),
]


def build_registry(declarations: Optional[Iterable[Declaration]] = None,
                   resolve: Optional[Callable[[str], Callable]] = None,
                   verbose: bool = False) -> BuiltinRegistry:
    """
    Build and freeze a registry from a declarative list.

    Any malformed or duplicate declaration aborts the build; no partially
    filled registry is ever returned.
    """
    if declarations is None:
        declarations = CORE_DECLARATIONS
    if resolve is None:
        resolve = _resolve_core

    registry = BuiltinRegistry(verbose=verbose)
    # internal implementation name -> first exposed name
    exposed_by_internal = {}

    for decl in declarations:
        if isinstance(decl, Function):
            registry.register(decl.exposed, resolve(decl.internal), decl.arity, decl.flags,
                              decl.max_arity)
            exposed_by_internal.setdefault(decl.internal, decl.exposed)
        elif isinstance(decl, Alias):
            existing = exposed_by_internal.get(decl.internal, decl.internal)
            entry = registry.register_alias(existing, decl.exposed)
            if entry.arity != decl.arity or entry.flags != decl.flags:
                raise RegistryError(
                    f"alias '{decl.exposed}' declares arity {decl.arity}, flags {int(decl.flags)} "
                    f"but '{existing}' has arity {entry.arity}, flags {int(entry.flags)}"
                )
        elif isinstance(decl, Operator):
            registry.register_operator(decl.kind, decl.precedence, decl.exposed)
        else:
            raise RegistryError(f"malformed builtin declaration: {decl!r}")

    registry.freeze()
    registry.log(f"Registered {len(registry)} builtins, "
                 f"{len(registry.operator_names())} operator spellings")
    return registry


def _resolve_core(internal: str) -> Callable:
    implementation = getattr(core, internal, None)
    if implementation is None or not internal.startswith('builtin_'):
        raise RegistryError(f"no implementation named '{internal}'")
    return implementation
