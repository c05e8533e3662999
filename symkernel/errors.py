"""
Exception hierarchy for symkernel.

Registry errors are configuration errors raised while the builtin table is
built. Evaluation and stream errors are raised to the immediate caller, which
decides whether to retry, abort the current parse/evaluation or report.
"""

from typing import Optional


class SymkernelError(Exception):
    """Base exception for all symkernel errors."""
    pass


class RegistryError(SymkernelError):
    """Malformed builtin declaration or mutation of a frozen registry."""
    pass


class DuplicateNameError(RegistryError):
    """A builtin or operator name was registered twice."""

    def __init__(self, name: str, kind: Optional[str] = None):
        self.name = name
        self.kind = kind
        if kind:
            super().__init__(f"{kind} operator '{name}' is already declared")
        else:
            super().__init__(f"builtin '{name}' is already registered")


class EvaluationError(SymkernelError):
    """Base exception for errors surfaced while evaluating an expression."""
    pass


class UnknownNameError(EvaluationError):
    """No builtin is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no such operation: '{name}'")


class ArityMismatchError(EvaluationError):
    """A builtin was invoked with the wrong number of arguments."""

    def __init__(self, name: str, expected: int, actual: int, variadic: bool = False,
                 maximum: Optional[int] = None):
        self.name = name
        self.expected = expected
        self.actual = actual
        self.variadic = variadic
        self.maximum = maximum
        if variadic and maximum is not None:
            wanted = f"{expected} to {maximum}"
        elif variadic:
            wanted = f"at least {expected}"
        else:
            wanted = str(expected)
        super().__init__(f"'{name}' expects {wanted} argument(s), got {actual}")


class ArgumentTypeError(EvaluationError):
    """A builtin received an argument of the wrong type."""
    pass


class StreamError(SymkernelError):
    """Base exception for character stream errors."""
    pass


class EndOfStreamError(StreamError):
    """Read past the end of an input stream."""

    def __init__(self, position: int):
        self.position = position
        super().__init__(f"end of stream at position {position}")


class InvalidPositionError(StreamError):
    """set_position() was asked for a position outside the buffer."""

    def __init__(self, position: int, length: int):
        self.position = position
        self.length = length
        super().__init__(f"position {position} is outside [0, {length}]")
