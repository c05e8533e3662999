"""
Evaluation environment.

Holds the shared argument stack that builtins read their arguments from,
the global variables and the output stream printing builtins write to.
evaluate() is the minimal walk needed to drive the builtin registry: it
pushes the operands of a form and invokes the builtin by name.
"""

import sys
from typing import Any, Dict, List, Optional, Tuple

from .builtins.registry import BuiltinRegistry
from .errors import EvaluationError, UnknownNameError
from .io import Output, StringOutput
from .parser.ast_nodes import ASTNode, AtomNode, FormNode, NumberNode, StringNode


class EvaluationStack:
    """Argument stack shared by all builtin calls of one evaluation."""

    def __init__(self):
        self._items: List[Any] = []

    def push(self, value: Any):
        self._items.append(value)

    def pop(self) -> Any:
        if not self._items:
            raise EvaluationError("evaluation stack underflow")
        return self._items.pop()

    def drop_to(self, stack_top: int):
        """Discard everything from stack_top upwards."""
        del self._items[stack_top:]

    def arguments(self, stack_top: int) -> Tuple[Any, ...]:
        """The values of the current call, first argument first."""
        return tuple(self._items[stack_top:])

    def __getitem__(self, index: int) -> Any:
        return self._items[index]

    def __setitem__(self, index: int, value: Any):
        self._items[index] = value

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self):
        return f"EvaluationStack({self._items!r})"


class Environment:
    """State of one evaluation: registry, stack, globals and output."""

    def __init__(self, registry: BuiltinRegistry, output: Optional[Output] = None,
                 verbose: bool = False):
        self.registry = registry
        self.stack = EvaluationStack()
        self.output = output if output is not None else StringOutput()
        self.verbose = verbose
        self.globals: Dict[str, Any] = {}

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[symkernel] {message}", file=sys.stderr)

    def get_global(self, name: str) -> Optional[Any]:
        return self.globals.get(name)

    def set_global(self, name: str, value: Any):
        self.globals[name] = value

    def evaluate(self, expr: ASTNode) -> Any:
        """Evaluate an expression node to a Python value."""
        if isinstance(expr, (NumberNode, StringNode)):
            return expr.value

        if isinstance(expr, AtomNode):
            if expr.value == "True":
                return True
            if expr.value == "False":
                return False
            if expr.value in self.globals:
                return self.globals[expr.value]
            return expr

        if isinstance(expr, FormNode):
            return self.apply(expr.operator, expr.operands)

        # Already a value (e.g. an argument handed back by a builtin)
        return expr

    def apply(self, name: str, operands: List[ASTNode]) -> Any:
        """Push the operands of a call and invoke the builtin."""
        entry = self.registry.lookup(name)
        if entry is None:
            raise UnknownNameError(name)

        if not entry.accepts(len(operands)):
            raise entry.arity_error(len(operands))

        stack_top = len(self.stack)
        try:
            for operand in operands:
                if entry.holds_arguments:
                    self.stack.push(operand)
                else:
                    self.stack.push(self.evaluate(operand))
            result = self.registry.invoke(name, self, len(operands))
        finally:
            self.stack.drop_to(stack_top)
        return result

    def evaluate_all(self, exprs: List[ASTNode]) -> Any:
        """Evaluate statements in order; return the last value."""
        result = None
        for expr in exprs:
            self.log(f"evaluating {expr!r}")
            result = self.evaluate(expr)
        return result
