"""Parser - Builds expression trees from tokens."""

from .parser import Parser, parse
from .ast_nodes import *

__all__ = ['Parser', 'parse']
