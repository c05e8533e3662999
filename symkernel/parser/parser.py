"""
Parser - Builds expression trees from tokens.

Operator syntax is driven entirely by the registry's operator tables:
lower precedence numbers bind tighter, infix operators associate to the
left, and every operator form becomes a FormNode calling the builtin of
the same name.
"""

from typing import List, Optional

from ..builtins.registry import MAX_PRECEDENCE, BuiltinRegistry, OperatorEntry, OperatorKind
from ..io import InputStatus, StringInput
from ..lexer import Lexer, Token, TokenType
from .ast_nodes import ASTNode, AtomNode, FormNode, NumberNode, StringNode


# Tokens that can spell an operator
OPERATOR_TOKENS = (TokenType.OPERATOR, TokenType.ATOM)


class Parser:
    """Parses tokens into expression trees."""

    def __init__(self, tokens: List[Token], registry: BuiltinRegistry, filename: str = "<input>"):
        self.tokens = tokens
        self.registry = registry
        self.filename = filename
        self.pos = 0
        self.current_token = self.tokens[0] if tokens else Token(TokenType.EOF, None, 1, 1)

    def error(self, message: str, token: Optional[Token] = None):
        """Raise a parser error with location information."""
        token = token or self.current_token
        raise SyntaxError(f"{self.filename}:{token.line}:{token.column}: {message}")

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Peek at token at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current_token = self.tokens[self.pos]
        return token

    def expect(self, token_type: TokenType) -> Token:
        """Consume token of expected type or raise error."""
        if self.current_token.type != token_type:
            self.error(f"Expected {token_type.name}, got {self.current_token.type.name} "
                       f"({self.current_token.value!r})")
        return self.advance()

    def parse(self) -> List[ASTNode]:
        """Parse every statement up to end of input."""
        statements = []
        while self.current_token.type != TokenType.EOF:
            if self.current_token.type == TokenType.SEMICOLON:
                self.advance()
                continue
            statements.append(self.parse_expression())
            if self.current_token.type != TokenType.EOF:
                self.expect(TokenType.SEMICOLON)
        return statements

    # =========================================================================
    # Operators
    # =========================================================================

    def _operator(self, kind: OperatorKind, token: Token) -> Optional[OperatorEntry]:
        if token is None or token.type not in OPERATOR_TOKENS:
            return None
        return self.registry.operator(kind, token.value)

    def _make_form(self, op: OperatorEntry, operands: List[ASTNode], token: Token) -> FormNode:
        if op.name not in self.registry:
            self.error(f"{op.kind.value} operator '{op.name}' is not bound to a builtin", token)
        return FormNode(op.name, operands, token.line, token.column)

    def parse_expression(self, depth: int = MAX_PRECEDENCE) -> ASTNode:
        """Parse an expression whose operators bind no looser than depth."""
        return self.parse_operators(self.parse_prefix(), depth)

    def parse_operators(self, lhs: ASTNode, depth: int) -> ASTNode:
        """Apply the infix and postfix operators that follow lhs."""
        while True:
            token = self.current_token
            infix = self._operator(OperatorKind.INFIX, token)
            if infix is not None and infix.precedence <= depth:
                self.advance()
                rhs = self.parse_expression(infix.precedence - 1)
                lhs = self._make_form(infix, [lhs, rhs], token)
                continue

            postfix = self._operator(OperatorKind.POSTFIX, token)
            if postfix is not None and postfix.precedence <= depth:
                self.advance()
                lhs = self._make_form(postfix, [lhs], token)
                continue

            return lhs

    def parse_prefix(self) -> ASTNode:
        """Parse a prefix operator application or a primary expression."""
        token = self.current_token
        prefix = self._operator(OperatorKind.PREFIX, token)
        if self._is_symbolic_call(token):
            return self.parse_symbolic_call(token, prefix)
        # Name(...) is a call even when Name is also a prefix operator
        if prefix is not None and not self._is_call(token):
            self.advance()
            operand = self.parse_expression(prefix.precedence)
            return self._make_form(prefix, [operand], token)
        return self.parse_primary()

    def _is_call(self, token: Token) -> bool:
        following = self.peek(1)
        return (token.type == TokenType.ATOM and following is not None
                and following.type == TokenType.LPAREN)

    def _is_symbolic_call(self, token: Token) -> bool:
        following = self.peek(1)
        return (token.type == TokenType.OPERATOR and following is not None
                and following.type == TokenType.LPAREN)

    def parse_symbolic_call(self, token: Token, prefix: Optional[OperatorEntry]) -> ASTNode:
        """
        Parse op(...) where op is an operator symbol.

        A prefix operator with a single parenthesized operand stays a prefix
        application, so "-(a) ^ 2" still negates "a ^ 2". Any other
        argument count is a plain call of the builtin named op.
        """
        self.advance()
        self.expect(TokenType.LPAREN)
        operands = self.parse_arguments(TokenType.RPAREN)
        if prefix is not None and len(operands) == 1:
            operand = self.parse_operators(operands[0], prefix.precedence)
            return self._make_form(prefix, [operand], token)
        return FormNode(token.value, operands, token.line, token.column)

    # =========================================================================
    # Primaries
    # =========================================================================

    def parse_primary(self) -> ASTNode:
        token = self.current_token

        if token.type == TokenType.NUMBER:
            self.advance()
            return NumberNode(token.value, token.line, token.column)

        if token.type == TokenType.STRING:
            self.advance()
            return StringNode(token.value, token.line, token.column)

        if token.type == TokenType.ATOM:
            self.advance()
            if self.current_token.type == TokenType.LPAREN:
                return self.parse_call(token)
            return AtomNode(token.value, token.line, token.column)

        if token.type == TokenType.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(TokenType.RPAREN)
            return expr

        if token.type == TokenType.LBRACE:
            self.advance()
            items = self.parse_arguments(TokenType.RBRACE)
            return FormNode("List", items, token.line, token.column)

        if token.type == TokenType.LBRACKET:
            return self.parse_block()

        if token.type == TokenType.EOF:
            self.error("Unexpected end of input")
        self.error(f"Unexpected token {token.type.name} ({token.value!r})")

    def parse_call(self, name_token: Token) -> FormNode:
        """Parse f(a, b, ...), plus the trailing body of a bodied operator."""
        self.expect(TokenType.LPAREN)
        operands = self.parse_arguments(TokenType.RPAREN)

        bodied = self.registry.operator(OperatorKind.BODIED, name_token.value)
        if bodied is not None:
            operands.append(self.parse_expression(bodied.precedence))
            return self._make_form(bodied, operands, name_token)

        return FormNode(name_token.value, operands, name_token.line, name_token.column)

    def parse_arguments(self, closing: TokenType) -> List[ASTNode]:
        """Parse a comma-separated list up to and including the closing token."""
        items = []
        if self.current_token.type == closing:
            self.advance()
            return items
        while True:
            items.append(self.parse_expression())
            if self.current_token.type == TokenType.COMMA:
                self.advance()
                continue
            self.expect(closing)
            return items

    def parse_block(self) -> FormNode:
        """Parse [stmt; stmt; ...] into a Prog form."""
        start = self.expect(TokenType.LBRACKET)
        statements = []
        while self.current_token.type != TokenType.RBRACKET:
            if self.current_token.type == TokenType.EOF:
                self.error("Unterminated block", start)
            if self.current_token.type == TokenType.SEMICOLON:
                self.advance()
                continue
            statements.append(self.parse_expression())
            if self.current_token.type not in (TokenType.RBRACKET, TokenType.EOF):
                self.expect(TokenType.SEMICOLON)
        self.advance()  # ]
        return FormNode("Prog", statements, start.line, start.column)


def parse(source: str, registry: BuiltinRegistry, filename: str = "<input>") -> List[ASTNode]:
    """Convenience function to lex and parse a source string."""
    lexer = Lexer(StringInput(source, InputStatus(filename)), registry.operator_names())
    return Parser(lexer.tokenize(), registry, filename).parse()
