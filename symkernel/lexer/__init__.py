"""Lexer - Tokenizes expression source."""

from .lexer import Lexer, Token, TokenType, tokenize

__all__ = ['Lexer', 'Token', 'TokenType', 'tokenize']
