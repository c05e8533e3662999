"""
Core builtin implementations.

Every builtin takes the environment and the stack marker of its first
argument, reads its arguments off env.stack and pushes one result. Which
exposed names these are registered under is declared in corefunctions.py.
"""

import math

from ..errors import ArgumentTypeError, EvaluationError
from ..parser.ast_nodes import ASTNode, AtomNode, to_node


def _args(env, stack_top: int) -> tuple:
    return env.stack.arguments(stack_top)


def _is_number(val) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def require_number(val, op: str):
    """Require value to be a number."""
    if not _is_number(val):
        raise ArgumentTypeError(f"{op} requires numeric arguments, got {_type_name(val)}")
    return val


def require_string(val, op: str) -> str:
    """Require value to be a string."""
    if not isinstance(val, str):
        raise ArgumentTypeError(f"{op} requires string arguments, got {_type_name(val)}")
    return val


def require_int(val, op: str) -> int:
    if not isinstance(val, int) or isinstance(val, bool):
        raise ArgumentTypeError(f"{op} requires an integer argument, got {_type_name(val)}")
    return val


def _type_name(val) -> str:
    if isinstance(val, ASTNode):
        return val.node_type.name.lower()
    return type(val).__name__


def is_true(val) -> bool:
    """Only True is true; everything else that is not False is an error."""
    if val is True:
        return True
    if val is False:
        return False
    raise ArgumentTypeError(f"expected a boolean, got {_type_name(val)}")


# =============================================================================
# Arithmetic
# =============================================================================

def builtin_add(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'MathAdd') + require_number(b, 'MathAdd'))


def builtin_subtract(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'MathSubtract') - require_number(b, 'MathSubtract'))


def builtin_minus(env, stack_top: int):
    """Prefix negation with one argument, subtraction with two."""
    args = _args(env, stack_top)
    if len(args) == 1:
        env.stack.push(-require_number(args[0], '-'))
    else:
        a, b = args
        env.stack.push(require_number(a, '-') - require_number(b, '-'))


def builtin_multiply(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'MathMultiply') * require_number(b, 'MathMultiply'))


def builtin_divide(env, stack_top: int):
    a, b = _args(env, stack_top)
    n = require_number(a, 'MathDivide')
    d = require_number(b, 'MathDivide')
    if d == 0:
        raise EvaluationError("Division by zero")
    # Exact integer quotients stay integers
    if isinstance(n, int) and isinstance(d, int) and n % d == 0:
        env.stack.push(n // d)
    else:
        env.stack.push(n / d)


def builtin_negate(env, stack_top: int):
    (a,) = _args(env, stack_top)
    env.stack.push(-require_number(a, 'MathNegate'))


def builtin_power(env, stack_top: int):
    a, b = _args(env, stack_top)
    base = require_number(a, 'MathPower')
    exponent = require_number(b, 'MathPower')
    if base == 0 and exponent < 0:
        raise EvaluationError("Division by zero")
    if base < 0 and isinstance(exponent, float) and not exponent.is_integer():
        raise EvaluationError(f"MathPower: {base} ^ {exponent} has no real value")
    try:
        result = base ** exponent
    except OverflowError:
        raise EvaluationError(f"MathPower: {base} ^ {exponent} overflows") from None
    env.stack.push(result)


def builtin_abs(env, stack_top: int):
    (a,) = _args(env, stack_top)
    env.stack.push(abs(require_number(a, 'MathAbs')))


def builtin_factorial(env, stack_top: int):
    (a,) = _args(env, stack_top)
    n = require_int(a, 'Factorial')
    if n < 0:
        raise ArgumentTypeError(f"Factorial requires a non-negative integer, got {n}")
    env.stack.push(math.factorial(n))


# =============================================================================
# Comparison
# =============================================================================

def builtin_less_than(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'LessThan') < require_number(b, 'LessThan'))


def builtin_greater_than(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'GreaterThan') > require_number(b, 'GreaterThan'))


def builtin_less_or_equal(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'LessOrEqual') <= require_number(b, 'LessOrEqual'))


def builtin_greater_or_equal(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(require_number(a, 'GreaterOrEqual') >= require_number(b, 'GreaterOrEqual'))


def _equal(a, b) -> bool:
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, ASTNode) or isinstance(b, ASTNode):
        try:
            return to_node(a).structurally_equals(to_node(b))
        except TypeError:
            return False
    return type(a) is type(b) and a == b


def builtin_equals(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(_equal(a, b))


def builtin_not_equals(env, stack_top: int):
    a, b = _args(env, stack_top)
    env.stack.push(not _equal(a, b))


# =============================================================================
# Logic
# =============================================================================

def builtin_and(env, stack_top: int):
    """Short-circuit conjunction over unevaluated arguments."""
    for expr in _args(env, stack_top):
        if not is_true(env.evaluate(expr)):
            env.stack.push(False)
            return
    env.stack.push(True)


def builtin_or(env, stack_top: int):
    """Short-circuit disjunction over unevaluated arguments."""
    for expr in _args(env, stack_top):
        if is_true(env.evaluate(expr)):
            env.stack.push(True)
            return
    env.stack.push(False)


def builtin_not(env, stack_top: int):
    (a,) = _args(env, stack_top)
    env.stack.push(not is_true(a))


# =============================================================================
# Strings and atoms
# =============================================================================

def builtin_length(env, stack_top: int):
    (a,) = _args(env, stack_top)
    if isinstance(a, (str, list)):
        env.stack.push(len(a))
    else:
        raise ArgumentTypeError(f"Length requires a string or list, got {_type_name(a)}")


def builtin_concat(env, stack_top: int):
    env.stack.push(''.join(require_string(s, 'Concat') for s in _args(env, stack_top)))


def builtin_string_mid(env, stack_top: int):
    """StringMid(index, length, string), 1-based."""
    index, length, text = _args(env, stack_top)
    index = require_int(index, 'StringMid')
    length = require_int(length, 'StringMid')
    text = require_string(text, 'StringMid')
    if index < 1 or length < 0 or index - 1 + length > len(text):
        raise ArgumentTypeError(
            f"StringMid range {index}..{index + length - 1} is outside a string of length {len(text)}"
        )
    env.stack.push(text[index - 1:index - 1 + length])


def builtin_atom(env, stack_top: int):
    (a,) = _args(env, stack_top)
    env.stack.push(AtomNode(require_string(a, 'Atom')))


def builtin_string(env, stack_top: int):
    (a,) = _args(env, stack_top)
    if not isinstance(a, AtomNode):
        raise ArgumentTypeError(f"String requires an atom, got {_type_name(a)}")
    env.stack.push(a.value)


# =============================================================================
# Output
# =============================================================================

def builtin_write_string(env, stack_top: int):
    (a,) = _args(env, stack_top)
    env.output.write(require_string(a, 'WriteString'))
    env.stack.push(True)


def builtin_write(env, stack_top: int):
    """Print each argument in source syntax."""
    from ..printer import Printer

    printer = Printer(env.registry)
    for value in _args(env, stack_top):
        printer.print(to_node(value), env.output)
    env.stack.push(True)


def builtin_new_line(env, stack_top: int):
    env.output.put_char('\n')
    env.stack.push(True)


# =============================================================================
# Lists
# =============================================================================

def builtin_list(env, stack_top: int):
    env.stack.push(list(_args(env, stack_top)))


def builtin_nth(env, stack_top: int):
    """Nth(list, n), 1-based."""
    items, n = _args(env, stack_top)
    if not isinstance(items, list):
        raise ArgumentTypeError(f"Nth requires a list, got {_type_name(items)}")
    n = require_int(n, 'Nth')
    if n < 1 or n > len(items):
        raise ArgumentTypeError(f"Nth index {n} is outside a list of length {len(items)}")
    env.stack.push(items[n - 1])


# =============================================================================
# Control (arguments arrive unevaluated)
# =============================================================================

def builtin_hold(env, stack_top: int):
    (expr,) = _args(env, stack_top)
    env.stack.push(expr)


def builtin_eval(env, stack_top: int):
    (value,) = _args(env, stack_top)
    env.stack.push(env.evaluate(value))


def builtin_set(env, stack_top: int):
    target, expr = _args(env, stack_top)
    if not isinstance(target, AtomNode):
        raise ArgumentTypeError(f"cannot assign to {_type_name(target)}")
    env.set_global(target.value, env.evaluate(expr))
    env.stack.push(True)


def builtin_prog(env, stack_top: int):
    result = True
    for expr in _args(env, stack_top):
        result = env.evaluate(expr)
    env.stack.push(result)


def builtin_if(env, stack_top: int):
    """If(cond, then) or If(cond, then, else)."""
    args = _args(env, stack_top)
    if is_true(env.evaluate(args[0])):
        env.stack.push(env.evaluate(args[1]))
    elif len(args) == 3:
        env.stack.push(env.evaluate(args[2]))
    else:
        env.stack.push(False)


def builtin_while(env, stack_top: int):
    condition, body = _args(env, stack_top)
    while is_true(env.evaluate(condition)):
        env.evaluate(body)
    env.stack.push(True)
