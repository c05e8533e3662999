"""
symkernel - Front end of a symbolic-expression interpreter.

This package provides the builtin dispatch registry, the character stream
abstraction used by the lexer and the printer, and a small driver that
ties them together.
"""

__version__ = "0.1.0"
__author__ = "symkernel Project"
