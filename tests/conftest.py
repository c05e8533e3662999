"""
Test fixtures and helpers for symkernel.

- registry: the frozen core builtin registry
- session: a fresh interpreter session over that registry
- evaluate(): parse and evaluate source, return the value of the last statement
- atom/num/string/form: shorthand for building expected expression trees
"""

import sys
from pathlib import Path
from typing import Optional

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from symkernel.builtins import build_registry
from symkernel.cli import Session
from symkernel.parser.ast_nodes import AtomNode, FormNode, NumberNode, StringNode


_CORE_REGISTRY = build_registry()


def atom(name: str) -> AtomNode:
    return AtomNode(name)


def num(value) -> NumberNode:
    return NumberNode(value)


def string(value: str) -> StringNode:
    return StringNode(value)


def form(operator: str, *operands) -> FormNode:
    return FormNode(operator, list(operands))


def evaluate(source: str, session: Optional[Session] = None):
    """Evaluate every statement in source and return the last value."""
    if session is None:
        session = Session(_CORE_REGISTRY)
    return session.env.evaluate_all(session.parse(source))


@pytest.fixture
def registry():
    """The core builtin registry."""
    return _CORE_REGISTRY


@pytest.fixture
def session():
    """Create a fresh interpreter session."""
    return Session(_CORE_REGISTRY)
