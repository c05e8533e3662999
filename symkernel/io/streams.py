"""
Character streams used by the lexer and the printer.

Input and Output are the capability interfaces. StringInput reads from a
borrowed string, StringOutput accumulates into a string it owns. Other
backends (files, sockets) implement the same interfaces directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..errors import EndOfStreamError, InvalidPositionError


@dataclass
class InputStatus:
    """Where an input stream currently is, for error reporting."""
    file_name: str = "<input>"
    line_number: int = 1

    def location(self) -> str:
        return f"{self.file_name}:{self.line_number}"


class Input(ABC):
    """Read capability over a character sequence."""

    def __init__(self, status: Optional[InputStatus] = None):
        self.status = status if status is not None else InputStatus()

    @abstractmethod
    def next(self) -> str:
        """Return the character at the cursor and advance past it."""

    @abstractmethod
    def peek(self) -> str:
        """Return the character at the cursor without advancing."""

    @abstractmethod
    def end_of_stream(self) -> bool:
        """True when the cursor is at the end of the buffer."""

    @abstractmethod
    def position(self) -> int:
        """Current cursor offset."""

    @abstractmethod
    def set_position(self, position: int):
        """Move the cursor to an absolute offset in [0, length]."""

    @abstractmethod
    def start_ptr(self) -> str:
        """Read-only view of the whole buffer from its start."""


class Output(ABC):
    """Write capability over a character sequence."""

    @abstractmethod
    def put_char(self, ch: str):
        """Append a single character."""

    def write(self, text: str):
        """Append every character of text."""
        for ch in text:
            self.put_char(ch)


class StringInput(Input):
    """
    Input stream over a borrowed string.

    The buffer is never copied or mutated; start_ptr() hands back the same
    object so callers can slice token text by offset. The line number in
    status follows the cursor in both directions, so rewinding for
    backtracking keeps error locations correct.
    """

    def __init__(self, buffer: str, status: Optional[InputStatus] = None, start: int = 0):
        super().__init__(status)
        self._buffer = buffer
        self._current = 0
        if start:
            self.set_position(start)

    def __len__(self) -> int:
        return len(self._buffer)

    def next(self) -> str:
        if self._current >= len(self._buffer):
            raise EndOfStreamError(self._current)
        ch = self._buffer[self._current]
        self._current += 1
        if ch == '\n':
            self.status.line_number += 1
        return ch

    def peek(self) -> str:
        if self._current >= len(self._buffer):
            raise EndOfStreamError(self._current)
        return self._buffer[self._current]

    def end_of_stream(self) -> bool:
        return self._current == len(self._buffer)

    def position(self) -> int:
        return self._current

    def set_position(self, position: int):
        if position < 0 or position > len(self._buffer):
            raise InvalidPositionError(position, len(self._buffer))
        if position > self._current:
            self.status.line_number += self._buffer.count('\n', self._current, position)
        elif position < self._current:
            self.status.line_number -= self._buffer.count('\n', position, self._current)
        self._current = position

    def start_ptr(self) -> str:
        return self._buffer

    def __repr__(self):
        return f"StringInput({self._current}/{len(self._buffer)})"


class StringOutput(Output):
    """
    Output stream that owns the text it accumulates.

    The printer writes values here; getvalue() reads the text so far and
    release() hands it over, leaving the stream empty.
    """

    def __init__(self, seed: str = ""):
        self._chars: List[str] = list(seed)

    def put_char(self, ch: str):
        self._chars.append(ch)

    def write(self, text: str):
        self._chars.extend(text)

    def getvalue(self) -> str:
        return ''.join(self._chars)

    def release(self) -> str:
        """Return the accumulated text and reset the buffer."""
        text = ''.join(self._chars)
        self._chars = []
        return text

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return self.getvalue()

    def __repr__(self):
        return f"StringOutput({self.getvalue()!r})"
