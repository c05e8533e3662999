"""Tests for the operator-precedence parser."""

import pytest

from symkernel.builtins import BuiltinFlags, BuiltinRegistry, OperatorKind
from symkernel.parser import parse

from .conftest import atom, form, num, string


def parse_one(source, registry):
    statements = parse(source, registry)
    assert len(statements) == 1
    return statements[0]


class TestPrecedence:
    """Tests for operator precedence and associativity."""

    def test_multiplication_binds_tighter(self, registry):
        assert parse_one("1 + 2 * 3", registry) == form('+', num(1), form('*', num(2), num(3)))

    def test_parentheses_override(self, registry):
        assert parse_one("(1 + 2) * 3", registry) == form('*', form('+', num(1), num(2)), num(3))

    def test_left_associative(self, registry):
        assert parse_one("a - b - c", registry) == \
            form('-', form('-', atom('a'), atom('b')), atom('c'))

    def test_prefix_minus_below_power(self, registry):
        assert parse_one("-x ^ 2", registry) == form('-', form('^', atom('x'), num(2)))

    def test_prefix_minus_above_addition(self, registry):
        assert parse_one("-2 + 3", registry) == form('+', form('-', num(2)), num(3))

    def test_postfix(self, registry):
        assert parse_one("2 + 3!", registry) == form('+', num(2), form('!', num(3)))

    def test_alphabetic_operators(self, registry):
        assert parse_one("Not a And b", registry) == \
            form('And', form('Not', atom('a')), atom('b'))

    def test_comparison_below_arithmetic(self, registry):
        assert parse_one("x + 1 < 2 * y", registry) == \
            form('<', form('+', atom('x'), num(1)), form('*', num(2), atom('y')))

    def test_assignment_is_loosest_infix(self, registry):
        assert parse_one("x := 1 + 2", registry) == \
            form(':=', atom('x'), form('+', num(1), num(2)))

    def test_operator_split_from_symbol_run(self, registry):
        assert parse_one("2*-3", registry) == form('*', num(2), form('-', num(3)))


class TestPrimaries:
    """Tests for calls, lists, blocks and literals."""

    def test_literals(self, registry):
        assert parse_one('"text"', registry) == string("text")
        assert parse_one("2.5", registry) == num(2.5)
        assert parse_one("name", registry) == atom("name")

    def test_call(self, registry):
        assert parse_one("f(1, x)", registry) == form('f', num(1), atom('x'))

    def test_call_without_arguments(self, registry):
        assert parse_one("NewLine()", registry) == form('NewLine')

    def test_prefix_operator_name_as_call(self, registry):
        assert parse_one("Not(x)", registry) == form('Not', atom('x'))

    def test_operator_symbol_call(self, registry):
        assert parse_one("-(1, 2, 3)", registry) == form('-', num(1), num(2), num(3))
        assert parse_one("*(a)", registry) == form('*', atom('a'))
        assert parse_one("-()", registry) == form('-')

    def test_prefix_operator_with_parenthesized_operand(self, registry):
        assert parse_one("-(a + b)", registry) == form('-', form('+', atom('a'), atom('b')))
        assert parse_one("-(a) ^ 2", registry) == form('-', form('^', atom('a'), num(2)))
        assert parse_one("-(a)!", registry) == form('-', form('!', atom('a')))

    def test_list(self, registry):
        assert parse_one("{1, {2}}", registry) == form('List', num(1), form('List', num(2)))

    def test_block(self, registry):
        assert parse_one("[a; b;]", registry) == form('Prog', atom('a'), atom('b'))

    def test_bodied(self, registry):
        assert parse_one("While(x < 3) x := x + 1", registry) == form(
            'While',
            form('<', atom('x'), num(3)),
            form(':=', atom('x'), form('+', atom('x'), num(1))),
        )

    def test_statements(self, registry):
        assert parse("a; b;; c", registry) == [atom('a'), atom('b'), atom('c')]

    def test_node_locations(self, registry):
        node = parse_one("\n  f(1)", registry)
        assert (node.line, node.column) == (2, 3)


class TestErrors:
    """Tests for parse-time errors."""

    def test_unexpected_end(self, registry):
        with pytest.raises(SyntaxError, match="Unexpected end of input"):
            parse("1 +", registry)

    def test_missing_separator(self, registry):
        with pytest.raises(SyntaxError, match="Expected SEMICOLON"):
            parse("1 2", registry)

    def test_unclosed_call(self, registry):
        with pytest.raises(SyntaxError, match="Expected RPAREN"):
            parse("f(1, 2", registry)

    def test_unterminated_block(self, registry):
        with pytest.raises(SyntaxError, match="Unterminated block"):
            parse("[a; b", registry)

    def test_unresolved_operator_fails_at_parse_time(self):
        """Declaring an operator without a builtin is fine until it is used."""
        registry = BuiltinRegistry()
        registry.register_operator(OperatorKind.INFIX, 70, "+")
        registry.register_operator(OperatorKind.INFIX, 40, "*")
        registry.register("*", lambda env, stack_top: None, 2, BuiltinFlags.FIXED)

        assert parse("a * b", registry) == [form('*', atom('a'), atom('b'))]
        with pytest.raises(SyntaxError, match="infix operator '\\+' is not bound to a builtin"):
            parse("a + b", registry)
