"""Tests for the character stream abstraction."""

import pytest

from symkernel.errors import EndOfStreamError, InvalidPositionError
from symkernel.io import Input, InputStatus, Output, StringInput, StringOutput
from symkernel.lexer import Lexer, TokenType


class TestStringInput:
    """Tests for the string-backed input stream."""

    def test_scenario_12_plus_3(self):
        """Peek, Next, then SetPosition(2) and Peek over "12+3"."""
        stream = StringInput("12+3")
        assert stream.position() == 0
        assert stream.peek() == '1'
        assert stream.next() == '1'
        assert stream.position() == 1
        stream.set_position(2)
        assert stream.peek() == '+'

    def test_reads_whole_buffer_then_end_of_stream(self):
        text = "abc"
        stream = StringInput(text)
        chars = []
        for _ in range(len(text)):
            assert not stream.end_of_stream()
            chars.append(stream.next())
        assert ''.join(chars) == text
        assert stream.end_of_stream()
        with pytest.raises(EndOfStreamError):
            stream.next()
        with pytest.raises(EndOfStreamError):
            stream.peek()

    def test_empty_buffer_is_at_end(self):
        stream = StringInput("")
        assert stream.end_of_stream()
        with pytest.raises(EndOfStreamError):
            stream.peek()

    def test_peek_does_not_advance(self):
        stream = StringInput("xy")
        assert stream.peek() == 'x'
        assert stream.peek() == 'x'
        assert stream.position() == 0

    def test_end_of_stream_is_pure(self):
        stream = StringInput("a")
        stream.end_of_stream()
        stream.end_of_stream()
        assert stream.position() == 0

    def test_set_position_round_trip(self):
        text = "hello"
        stream = StringInput(text)
        for p in range(len(text) + 1):
            stream.set_position(p)
            assert stream.position() == p

    def test_set_position_to_length_is_end_of_stream(self):
        stream = StringInput("abc")
        stream.set_position(3)
        assert stream.end_of_stream()

    def test_set_position_backwards(self):
        stream = StringInput("abc")
        stream.next()
        stream.next()
        stream.set_position(0)
        assert stream.next() == 'a'

    @pytest.mark.parametrize("position", [-1, 4, 100])
    def test_out_of_range_position_fails_and_keeps_cursor(self, position):
        stream = StringInput("abc")
        stream.next()
        with pytest.raises(InvalidPositionError) as exc_info:
            stream.set_position(position)
        assert exc_info.value.position == position
        assert exc_info.value.length == 3
        assert stream.position() == 1

    def test_start_offset(self):
        stream = StringInput("abcdef", start=3)
        assert stream.position() == 3
        assert stream.next() == 'd'

    def test_start_offset_out_of_range(self):
        with pytest.raises(InvalidPositionError):
            StringInput("abc", start=5)

    def test_start_ptr_is_the_borrowed_buffer(self):
        text = "token text"
        stream = StringInput(text)
        stream.next()
        assert stream.start_ptr() is text
        assert stream.start_ptr()[0:5] == "token"

    def test_len(self):
        assert len(StringInput("four")) == 4


class TestInputStatus:
    """Tests for line tracking through the input status."""

    def test_next_counts_lines(self):
        stream = StringInput("a\nb\nc", InputStatus("test.ys"))
        while not stream.end_of_stream():
            stream.next()
        assert stream.status.line_number == 3
        assert stream.status.location() == "test.ys:3"

    def test_set_position_keeps_line_in_step(self):
        stream = StringInput("a\nb\nc")
        stream.set_position(4)
        assert stream.status.line_number == 3
        stream.set_position(1)
        assert stream.status.line_number == 1
        stream.set_position(2)
        assert stream.status.line_number == 2

    def test_start_offset_sets_line(self):
        stream = StringInput("x\ny", start=2)
        assert stream.status.line_number == 2


class TestStringOutput:
    """Tests for the string-backed output stream."""

    def test_put_char_scenario(self):
        out = StringOutput()
        assert out.getvalue() == ""
        out.put_char('x')
        out.put_char('y')
        assert out.getvalue() == "xy"

    def test_put_char_preserves_order(self):
        chars = "the quick brown fox"
        out = StringOutput()
        for ch in chars:
            out.put_char(ch)
        assert out.getvalue() == chars
        assert len(out) == len(chars)

    def test_seeded_buffer(self):
        out = StringOutput("ab")
        out.put_char('c')
        assert str(out) == "abc"

    def test_write(self):
        out = StringOutput()
        out.write("hello")
        out.put_char('!')
        assert out.getvalue() == "hello!"

    def test_release_hands_over_and_resets(self):
        out = StringOutput()
        out.write("done")
        assert out.release() == "done"
        assert out.getvalue() == ""
        out.put_char('z')
        assert out.getvalue() == "z"


class ListInput(Input):
    """A second backend: reads from a list of characters."""

    def __init__(self, chars):
        super().__init__()
        self.chars = list(chars)
        self.current = 0

    def next(self):
        ch = self.peek()
        self.current += 1
        return ch

    def peek(self):
        if self.current >= len(self.chars):
            raise EndOfStreamError(self.current)
        return self.chars[self.current]

    def end_of_stream(self):
        return self.current == len(self.chars)

    def position(self):
        return self.current

    def set_position(self, position):
        if position < 0 or position > len(self.chars):
            raise InvalidPositionError(position, len(self.chars))
        self.current = position

    def start_ptr(self):
        return ''.join(self.chars)


class CountingOutput(Output):
    """A second backend: only counts characters."""

    def __init__(self):
        self.count = 0

    def put_char(self, ch):
        self.count += 1


class TestInterfaces:
    """Tests for the abstract capability interfaces."""

    def test_interfaces_are_abstract(self):
        with pytest.raises(TypeError):
            Input()
        with pytest.raises(TypeError):
            Output()

    def test_lexer_runs_over_another_backend(self):
        tokens = Lexer(ListInput("12+3"), ["+"]).tokenize()
        assert [t.type for t in tokens] == [
            TokenType.NUMBER, TokenType.OPERATOR, TokenType.NUMBER, TokenType.EOF,
        ]

    def test_write_defaults_to_put_char(self):
        out = CountingOutput()
        out.write("abc")
        assert out.count == 3
