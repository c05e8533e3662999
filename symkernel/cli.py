"""
Command-line driver.

Coordinates building the builtin table, lexing, parsing, evaluation and
printing for a source file or an expression given on the command line.
"""

import sys
from pathlib import Path
from typing import List, Optional

from .builtins import BuiltinRegistry, build_registry
from .environment import Environment
from .errors import SymkernelError
from .io import InputStatus, StringInput, StringOutput
from .lexer import Lexer, Token
from .parser import Parser
from .parser.ast_nodes import ASTNode, to_node
from .printer import Printer


class Session:
    """One interpreter session over a frozen builtin registry."""

    def __init__(self, registry: Optional[BuiltinRegistry] = None, verbose: bool = False):
        self.verbose = verbose
        self.registry = registry if registry is not None else build_registry(verbose=verbose)
        self.output = StringOutput()
        self.env = Environment(self.registry, self.output, verbose=verbose)

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[symkernel] {message}", file=sys.stderr)

    def tokenize(self, source: str, filename: str = "<input>") -> List[Token]:
        lexer = Lexer(StringInput(source, InputStatus(filename)), self.registry.operator_names())
        tokens = lexer.tokenize()
        self.log(f"Lexed {len(tokens)} tokens from {filename}")
        return tokens

    def parse(self, source: str, filename: str = "<input>") -> List[ASTNode]:
        statements = Parser(self.tokenize(source, filename), self.registry, filename).parse()
        self.log(f"Parsed {len(statements)} statement(s)")
        return statements

    def format(self, value) -> str:
        output = StringOutput()
        Printer(self.registry).print(to_node(value), output)
        return output.release()

    def run(self, source: str, filename: str = "<input>") -> str:
        """
        Evaluate every statement in source.

        Returns whatever the program wrote followed by the printed value of
        the last statement.
        """
        result = self.env.evaluate_all(self.parse(source, filename))
        text = self.output.release()
        if result is not None:
            text += self.format(result)
        return text


def list_builtins(registry: BuiltinRegistry) -> str:
    """Help listing: one builtin per line in registration order."""
    lines = []
    for entry in registry.entries():
        if entry.max_arity is not None:
            arity = f"{entry.arity}-{entry.max_arity}"
        elif entry.variadic:
            arity = f"{entry.arity}+"
        else:
            arity = str(entry.arity)
        flags = " macro" if entry.holds_arguments else ""
        lines.append(f"{entry.name:<16} {arity}{flags}")
    return '\n'.join(lines)


def main(argv: Optional[List[str]] = None):
    """Command-line interface."""
    import argparse

    parser = argparse.ArgumentParser(
        description='symkernel - Evaluate symbolic expressions with the core builtins'
    )
    parser.add_argument('input', nargs='?', help='Source file to evaluate')
    parser.add_argument('-e', '--expression', help='Evaluate EXPRESSION instead of a file')
    parser.add_argument('--tokens', action='store_true',
                        help='Print the token stream instead of evaluating')
    parser.add_argument('--parse', action='store_true',
                        help='Print the parsed statements instead of evaluating')
    parser.add_argument('--list-builtins', action='store_true',
                        help='List the registered builtins and exit')
    parser.add_argument('--verbose', action='store_true',
                        help='Verbose output')

    args = parser.parse_args(argv)

    session = Session(verbose=args.verbose)

    if args.list_builtins:
        print(list_builtins(session.registry))
        sys.exit(0)

    if args.expression is not None:
        source, filename = args.expression, "<expression>"
    elif args.input:
        source, filename = Path(args.input).read_text(), args.input
    else:
        parser.error("an input file or -e EXPRESSION is required")

    try:
        if args.tokens:
            for token in session.tokenize(source, filename):
                print(token)
        elif args.parse:
            for statement in session.parse(source, filename):
                print(session.format(statement))
        else:
            print(session.run(source, filename))
        success = True
    except (SyntaxError, SymkernelError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        success = False

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
