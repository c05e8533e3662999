"""
Builtin dispatch registry.

Maps builtin names to native implementations together with their arity and
evaluation flags, and keeps the operator tables the parser and printer use
to translate infix/prefix/postfix/bodied syntax into builtin calls.

An implementation has the signature ``impl(env, stack_top)``. The caller
pushes the arguments onto ``env.stack`` before invoking; ``stack_top`` is
the index of the first argument and the implementation pushes exactly one
result.
"""

import sys
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..errors import (
    ArityMismatchError, DuplicateNameError, EvaluationError,
    RegistryError, UnknownNameError,
)


# Loosest binding level; lower precedence numbers bind tighter.
MAX_PRECEDENCE = 60000


class BuiltinFlags(IntFlag):
    """Evaluation flags of a builtin."""
    FIXED = 0       # arity is exact
    VARIABLE = 1    # arity is a lower bound
    MACRO = 2       # arguments are passed unevaluated


class OperatorKind(Enum):
    """Syntax forms that desugar to a builtin call."""
    PREFIX = 'prefix'
    INFIX = 'infix'
    POSTFIX = 'postfix'
    BODIED = 'bodied'


Implementation = Callable[[Any, int], None]


@dataclass(frozen=True)
class BuiltinEntry:
    """A registered primitive."""
    name: str
    implementation: Implementation
    arity: int
    flags: BuiltinFlags = BuiltinFlags.FIXED
    max_arity: Optional[int] = None  # upper bound for VARIABLE entries

    @property
    def variadic(self) -> bool:
        return bool(self.flags & BuiltinFlags.VARIABLE)

    @property
    def holds_arguments(self) -> bool:
        return bool(self.flags & BuiltinFlags.MACRO)

    def accepts(self, arg_count: int) -> bool:
        """Check whether arg_count satisfies this entry's arity."""
        if self.variadic:
            if self.max_arity is not None and arg_count > self.max_arity:
                return False
            return arg_count >= self.arity
        return arg_count == self.arity

    def arity_error(self, arg_count: int) -> ArityMismatchError:
        return ArityMismatchError(self.name, self.arity, arg_count, self.variadic, self.max_arity)

    def __repr__(self):
        return f"BuiltinEntry({self.name}, {self.arity}, {self.flags!r})"


@dataclass(frozen=True)
class OperatorEntry:
    """A declared operator syntax form."""
    kind: OperatorKind
    precedence: int
    name: str
    order: int = 0  # declaration order, breaks precedence ties

    def __repr__(self):
        return f"OperatorEntry({self.kind.value}, {self.precedence}, {self.name})"


class BuiltinRegistry:
    """Name -> builtin table plus per-kind operator tables."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self._entries: Dict[str, BuiltinEntry] = {}
        self._operators: Dict[OperatorKind, Dict[str, OperatorEntry]] = {
            kind: {} for kind in OperatorKind
        }
        self._operator_count = 0
        self._frozen = False

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[symkernel] {message}", file=sys.stderr)

    # =========================================================================
    # Registration
    # =========================================================================

    def _check_mutable(self):
        if self._frozen:
            raise RegistryError("builtin registry is frozen")

    def register(self, name: str, implementation: Implementation, arity: int,
                 flags: BuiltinFlags = BuiltinFlags.FIXED,
                 max_arity: Optional[int] = None) -> BuiltinEntry:
        """
        Add a builtin. Raises DuplicateNameError if name is taken.

        max_arity caps the argument count of a VARIABLE builtin.
        """
        self._check_mutable()
        if name in self._entries:
            raise DuplicateNameError(name)
        if not callable(implementation):
            raise RegistryError(f"implementation of '{name}' is not callable")
        if arity < 0:
            raise RegistryError(f"arity of '{name}' must be non-negative, got {arity}")
        if max_arity is not None and (max_arity < arity or not flags & BuiltinFlags.VARIABLE):
            raise RegistryError(
                f"maximum arity of '{name}' needs the VARIABLE flag and must be at least {arity}"
            )
        entry = BuiltinEntry(name, implementation, arity, BuiltinFlags(flags), max_arity)
        self._entries[name] = entry
        return entry

    def register_alias(self, existing_name: str, alias_name: str) -> BuiltinEntry:
        """Make alias_name resolve to the same implementation, arity and flags."""
        self._check_mutable()
        existing = self._entries.get(existing_name)
        if existing is None:
            raise UnknownNameError(existing_name)
        return self.register(alias_name, existing.implementation, existing.arity,
                             existing.flags, existing.max_arity)

    def register_operator(self, kind: OperatorKind, precedence: int, name: str) -> OperatorEntry:
        """
        Declare an operator form.

        The builtin named here need not exist yet; the parser reports an
        operator that never resolves when it meets one.
        """
        self._check_mutable()
        table = self._operators[kind]
        if name in table:
            raise DuplicateNameError(name, kind.value)
        entry = OperatorEntry(kind, precedence, name, self._operator_count)
        self._operator_count += 1
        table[name] = entry
        return entry

    def freeze(self):
        """Disallow any further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # =========================================================================
    # Lookup
    # =========================================================================

    def lookup(self, name: str) -> Optional[BuiltinEntry]:
        return self._entries.get(name)

    def operator(self, kind: OperatorKind, name: str) -> Optional[OperatorEntry]:
        return self._operators[kind].get(name)

    def operators(self, kind: OperatorKind) -> List[OperatorEntry]:
        """Operators of one kind, tightest first, ties in declaration order."""
        return sorted(self._operators[kind].values(), key=lambda op: (op.precedence, op.order))

    def operator_names(self) -> List[str]:
        """Every spelling declared as an operator of any kind."""
        names = []
        for table in self._operators.values():
            for name in table:
                if name not in names:
                    names.append(name)
        return names

    def names(self) -> List[str]:
        """Builtin names in registration order."""
        return list(self._entries)

    def entries(self) -> Iterator[BuiltinEntry]:
        return iter(self._entries.values())

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def invoke(self, name: str, env, arg_count: int) -> Any:
        """
        Call builtin `name` on the top arg_count values of env.stack.

        The arguments are replaced on the stack by the single result, which
        is also returned.
        """
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownNameError(name)
        if not entry.accepts(arg_count):
            raise entry.arity_error(arg_count)

        stack = env.stack
        stack_top = len(stack) - arg_count
        if stack_top < 0:
            raise EvaluationError(
                f"'{name}' invoked with {arg_count} argument(s) but the stack holds {len(stack)}"
            )

        entry.implementation(env, stack_top)

        if len(stack) != stack_top + arg_count + 1:
            raise EvaluationError(f"'{name}' did not push exactly one result")
        result = stack.pop()
        stack.drop_to(stack_top)
        stack.push(result)
        return result

    def __repr__(self):
        return f"BuiltinRegistry({len(self._entries)} builtins)"
