"""
Lexer - Tokenizes expression source read from an Input stream.

Handles:
- Numbers (integers, decimals, exponents)
- Strings with backslash escapes
- Atoms (identifiers)
- Operator symbols, split against the known operator spellings
- Brackets, commas and statement separators
- Comments (/* ... */ and // to end of line)
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..io import Input, InputStatus, StringInput


OPERATOR_CHARS = "~`!@#$^&*-=+:<>?/\\|%."
DIGITS = "0123456789"


class TokenType(Enum):
    """Token types."""
    # Literals
    NUMBER = auto()      # 12, 2.5, 1e3
    STRING = auto()      # "text"
    ATOM = auto()        # identifier
    OPERATOR = auto()    # + - := ...

    # Delimiters
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    LBRACE = auto()      # {
    RBRACE = auto()      # }
    LBRACKET = auto()    # [
    RBRACKET = auto()    # ]
    COMMA = auto()       # ,
    SEMICOLON = auto()   # ;

    # End of input
    EOF = auto()


DELIMITERS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
}


@dataclass
class Token:
    """Represents a single token."""
    type: TokenType
    value: Any
    line: int
    column: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """Tokenizes source text read through the Input capability."""

    def __init__(self, input: Input, known_operators: Iterable[str] = ()):
        self.input = input
        self.filename = input.status.file_name
        self.known_operators = set(known_operators)
        self.tokens: List[Token] = []

    def column_at(self, position: int) -> int:
        """1-based column of a buffer offset."""
        buffer = self.input.start_ptr()
        return position - (buffer.rfind('\n', 0, position) + 1) + 1

    def line_at(self, position: int) -> int:
        """Line number of a buffer offset at or before the cursor."""
        buffer = self.input.start_ptr()
        return self.input.status.line_number - buffer.count('\n', position, self.input.position())

    def error(self, message: str, position: Optional[int] = None):
        """Raise a lexer error with location information."""
        if position is None:
            position = self.input.position()
        line = self.line_at(position)
        raise SyntaxError(f"{self.filename}:{line}:{self.column_at(position)}: {message}")

    def peek(self) -> Optional[str]:
        """Character at the cursor, or None at end of input."""
        if self.input.end_of_stream():
            return None
        return self.input.peek()

    def advance(self) -> str:
        """Consume and return the character at the cursor."""
        return self.input.next()

    def skip_whitespace(self):
        """Skip whitespace and comments."""
        while True:
            ch = self.peek()
            if ch is None:
                return
            if ch in ' \t\n\r\f':
                self.advance()
            elif ch == '/' and self._comment_follows():
                self.skip_comment()
            else:
                return

    def _comment_follows(self) -> bool:
        pos = self.input.position()
        buffer = self.input.start_ptr()
        return buffer.startswith('/*', pos) or buffer.startswith('//', pos)

    def skip_comment(self):
        """Skip /* block */ or // line comments."""
        start = self.input.position()
        self.advance()  # /
        if self.advance() == '/':
            while self.peek() is not None and self.peek() != '\n':
                self.advance()
            return

        while True:
            ch = self.peek()
            if ch is None:
                self.error("Unterminated comment", start)
            self.advance()
            if ch == '*' and self.peek() == '/':
                self.advance()
                return

    def read_string(self) -> str:
        """Read a string literal."""
        start = self.input.position()
        start_line = self.input.status.line_number
        start_col = self.column_at(start)

        self.advance()  # opening "
        chars = []

        while self.peek() is not None and self.peek() != '"':
            ch = self.advance()

            # Handle escape sequences
            if ch == '\\':
                next_ch = self.peek()
                if next_ch is None:
                    break
                self.advance()
                if next_ch == 'n':
                    chars.append('\n')
                elif next_ch == 't':
                    chars.append('\t')
                else:
                    chars.append(next_ch)
            else:
                chars.append(ch)

        if self.peek() != '"':
            self.error(f"Unterminated string starting at {start_line}:{start_col}")

        self.advance()  # closing "
        return ''.join(chars)

    def _read_digits(self) -> int:
        count = 0
        while self.peek() is not None and self.peek() in DIGITS:
            self.advance()
            count += 1
        return count

    def read_number(self):
        """Read an integer or decimal number."""
        start = self.input.position()
        is_float = False

        self._read_digits()

        # Fraction: only if a digit follows the period
        if self.peek() == '.':
            mark = self.input.position()
            self.advance()
            if self._read_digits():
                is_float = True
            else:
                self.input.set_position(mark)

        # Exponent: only if digits follow the (optionally signed) e
        if self.peek() in ('e', 'E'):
            mark = self.input.position()
            self.advance()
            if self.peek() in ('+', '-'):
                self.advance()
            if self._read_digits():
                is_float = True
            else:
                self.input.set_position(mark)

        text = self.input.start_ptr()[start:self.input.position()]
        return float(text) if is_float else int(text)

    def read_atom(self) -> str:
        """Read an identifier."""
        start = self.input.position()
        while self.peek() is not None and self.is_atom_char(self.peek()):
            self.advance()
        return self.input.start_ptr()[start:self.input.position()]

    def is_atom_char(self, ch: str) -> bool:
        return ch.isalnum() or ch in "_'"

    def read_operator(self) -> str:
        """
        Read a run of operator characters.

        When the run is not itself a known operator, the stream is rewound
        to the end of the longest known prefix (e.g. "*-" becomes "*").
        """
        start = self.input.position()
        while self.peek() is not None and self.peek() in OPERATOR_CHARS:
            self.advance()
        text = self.input.start_ptr()[start:self.input.position()]

        if text in self.known_operators or not self.known_operators:
            return text
        for end in range(len(text) - 1, 0, -1):
            if text[:end] in self.known_operators:
                self.input.set_position(start + end)
                return text[:end]
        return text

    def next_token(self) -> Token:
        """Read the next token."""
        self.skip_whitespace()

        position = self.input.position()
        line = self.input.status.line_number
        col = self.column_at(position)

        ch = self.peek()
        if ch is None:
            return Token(TokenType.EOF, None, line, col)

        if ch in DELIMITERS:
            self.advance()
            return Token(DELIMITERS[ch], ch, line, col)
        if ch == '"':
            return Token(TokenType.STRING, self.read_string(), line, col)
        if ch in DIGITS:
            return Token(TokenType.NUMBER, self.read_number(), line, col)
        if ch.isalpha() or ch == '_':
            return Token(TokenType.ATOM, self.read_atom(), line, col)
        if ch in OPERATOR_CHARS:
            return Token(TokenType.OPERATOR, self.read_operator(), line, col)

        self.error(f"Unexpected character: {ch!r}")

    def tokenize(self) -> List[Token]:
        """Tokenize the rest of the input."""
        while True:
            token = self.next_token()
            self.tokens.append(token)
            if token.type == TokenType.EOF:
                return self.tokens


def tokenize(source: str, filename: str = "<input>",
             known_operators: Iterable[str] = ()) -> List[Token]:
    """Convenience function to tokenize a source string."""
    lexer = Lexer(StringInput(source, InputStatus(filename)), known_operators)
    return lexer.tokenize()
