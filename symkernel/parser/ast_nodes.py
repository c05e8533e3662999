"""
Expression tree nodes produced by the parser.

Every operator form desugars to a FormNode naming the builtin it calls, so
the tree only has four shapes.
"""

from enum import Enum, auto
from typing import Any, List, Optional


class NodeType(Enum):
    """Expression node types."""
    ATOM = auto()
    NUMBER = auto()
    STRING = auto()
    FORM = auto()          # operator(operand1, operand2, ...)


class ASTNode:
    """Base class for all expression nodes."""

    node_type: NodeType = None

    def __init__(self, line: int = 0, column: int = 0):
        self.line = line
        self.column = column

    def structurally_equals(self, other: 'ASTNode') -> bool:
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, ASTNode):
            return NotImplemented
        return self.structurally_equals(other)

    def __hash__(self):
        return id(self)


class AtomNode(ASTNode):
    """Symbol node."""
    node_type = NodeType.ATOM

    def __init__(self, value: str, line: int = 0, column: int = 0):
        super().__init__(line, column)
        self.value = value

    def structurally_equals(self, other: ASTNode) -> bool:
        return isinstance(other, AtomNode) and other.value == self.value

    def __repr__(self):
        return f"Atom({self.value})"


class NumberNode(ASTNode):
    """Integer or float literal node."""
    node_type = NodeType.NUMBER

    def __init__(self, value, line: int = 0, column: int = 0):
        super().__init__(line, column)
        self.value = value

    def structurally_equals(self, other: ASTNode) -> bool:
        return isinstance(other, NumberNode) and other.value == self.value

    def __repr__(self):
        return f"Number({self.value})"


class StringNode(ASTNode):
    """String literal node."""
    node_type = NodeType.STRING

    def __init__(self, value: str, line: int = 0, column: int = 0):
        super().__init__(line, column)
        self.value = value

    def structurally_equals(self, other: ASTNode) -> bool:
        return isinstance(other, StringNode) and other.value == self.value

    def __repr__(self):
        return f"String({self.value!r})"


class FormNode(ASTNode):
    """Call of a builtin: operator(operand1, operand2, ...)."""
    node_type = NodeType.FORM

    def __init__(self, operator: str, operands: Optional[List[ASTNode]] = None,
                 line: int = 0, column: int = 0):
        super().__init__(line, column)
        self.operator = operator
        self.operands = operands or []

    def structurally_equals(self, other: ASTNode) -> bool:
        if not isinstance(other, FormNode) or other.operator != self.operator:
            return False
        if len(other.operands) != len(self.operands):
            return False
        return all(a.structurally_equals(b) for a, b in zip(self.operands, other.operands))

    def __repr__(self):
        args = ', '.join(repr(op) for op in self.operands)
        return f"Form({self.operator}, [{args}])"


def to_node(value: Any) -> ASTNode:
    """Wrap a Python value produced by evaluation back into a node."""
    if isinstance(value, ASTNode):
        return value
    if isinstance(value, bool):
        return AtomNode("True" if value else "False")
    if isinstance(value, (int, float)):
        return NumberNode(value)
    if isinstance(value, str):
        return StringNode(value)
    if isinstance(value, (list, tuple)):
        return FormNode("List", [to_node(v) for v in value])
    raise TypeError(f"cannot convert {type(value).__name__} to an expression")
