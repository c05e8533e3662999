"""
Printer - Writes expression trees back out as source text.

Operator forms are re-created from the registry's operator tables, with
parentheses only where precedence requires them, so that printing a parsed
expression yields text that parses to the same tree.
"""

from typing import Optional

from .builtins.registry import MAX_PRECEDENCE, BuiltinRegistry, OperatorEntry, OperatorKind
from .io import Output, StringOutput
from .lexer.lexer import OPERATOR_CHARS
from .parser.ast_nodes import ASTNode, AtomNode, FormNode, NumberNode, StringNode


STRING_ESCAPES = {
    '"': '\\"',
    '\\': '\\\\',
    '\n': '\\n',
    '\t': '\\t',
}


class Printer:
    """Prints expressions to an Output stream."""

    def __init__(self, registry: BuiltinRegistry):
        self.registry = registry

    def print(self, expr: ASTNode, output: Output):
        self._print(expr, MAX_PRECEDENCE, output)

    def _syntax(self, expr: ASTNode) -> Optional[OperatorEntry]:
        """Operator form an expression prints as, if any."""
        if not isinstance(expr, FormNode):
            return None
        count = len(expr.operands)
        if count == 2:
            op = self.registry.operator(OperatorKind.INFIX, expr.operator)
            if op is not None:
                return op
        if count == 1:
            for kind in (OperatorKind.PREFIX, OperatorKind.POSTFIX):
                op = self.registry.operator(kind, expr.operator)
                if op is not None:
                    return op
        if count >= 1:
            return self.registry.operator(OperatorKind.BODIED, expr.operator)
        return None

    def precedence(self, expr: ASTNode) -> int:
        """Binding level of expr as printed; 0 for atoms and calls."""
        if isinstance(expr, NumberNode) and expr.value < 0:
            negate = self.registry.operator(OperatorKind.PREFIX, '-')
            return negate.precedence if negate else 0
        op = self._syntax(expr)
        return op.precedence if op else 0

    def _print(self, expr: ASTNode, depth: int, output: Output):
        if self.precedence(expr) > depth:
            output.put_char('(')
            self._print(expr, MAX_PRECEDENCE, output)
            output.put_char(')')
            return

        if isinstance(expr, NumberNode):
            output.write(repr(expr.value))
        elif isinstance(expr, StringNode):
            output.put_char('"')
            for ch in expr.value:
                output.write(STRING_ESCAPES.get(ch, ch))
            output.put_char('"')
        elif isinstance(expr, AtomNode):
            output.write(expr.value)
        elif isinstance(expr, FormNode):
            self._print_form(expr, output)
        else:
            raise TypeError(f"cannot print {type(expr).__name__}")

    def _print_form(self, form: FormNode, output: Output):
        if form.operator == "List":
            output.put_char('{')
            self._print_arguments(form.operands, output)
            output.put_char('}')
            return

        op = self._syntax(form)
        if op is None:
            output.write(form.operator)
            output.put_char('(')
            self._print_arguments(form.operands, output)
            output.put_char(')')
        elif op.kind == OperatorKind.INFIX:
            lhs, rhs = form.operands
            self._print(lhs, op.precedence, output)
            output.write(f" {op.name} ")
            self._print(rhs, op.precedence - 1, output)
        elif op.kind == OperatorKind.PREFIX:
            output.write(op.name)
            operand = StringOutput()
            self._print(form.operands[0], op.precedence, operand)
            text = operand.release()
            # Keep "- -x" and "Not x" from running together
            if op.name[-1].isalnum() or text[:1] in OPERATOR_CHARS:
                output.put_char(' ')
            output.write(text)
        elif op.kind == OperatorKind.POSTFIX:
            self._print(form.operands[0], op.precedence, output)
            output.write(op.name)
        else:
            output.write(op.name)
            output.put_char('(')
            self._print_arguments(form.operands[:-1], output)
            output.write(") ")
            self._print(form.operands[-1], op.precedence, output)

    def _print_arguments(self, operands, output: Output):
        for i, operand in enumerate(operands):
            if i:
                output.write(", ")
            self._print(operand, MAX_PRECEDENCE, output)


def to_string(expr: ASTNode, registry: BuiltinRegistry) -> str:
    """Print an expression into a fresh StringOutput and return the text."""
    output = StringOutput()
    Printer(registry).print(expr, output)
    return output.getvalue()
