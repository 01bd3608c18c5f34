"""
BASIC Detokenizer Tests
=======================

Tests for the token tables and for converting tokenized Spectrum BASIC
lines and programs back to text.
"""

import pytest

from zxtap.basic import (
    CONTROL_CODES,
    GRAPHICS_CHARS,
    KEYWORDS,
    UDG_CHARS,
    DetokenizerState,
    detokenize_line,
    detokenize_program,
    format_line,
    format_program,
)
from zxtap.basic.tokens import control_arg_count, keyword
from zxtap.errors import MalformedStreamError
from zxtap.tap import build_basic_program, encode_basic_line


PRINT = 0xF5
REM = 0xEA


@pytest.fixture
def hello_program() -> bytes:
    return build_basic_program([(10, bytes([PRINT]) + b'"HI"')])


# =============================================================================
# Token Tables
# =============================================================================

class TestTokenTables:
    """Tests for the character and keyword tables."""

    def test_table_sizes(self):
        assert len(CONTROL_CODES) == 32
        assert len(GRAPHICS_CHARS) == 16
        assert len(UDG_CHARS) == 21
        assert len(KEYWORDS) == 93

    def test_keyword_lookup(self):
        assert keyword(0xF5) == " PRINT "
        assert keyword(0xEA) == " REM "
        assert keyword(0xA5) == "RND"
        assert keyword(0xFF) == " COPY "

    def test_keyword_out_of_range(self):
        assert keyword(0xA2) is None
        assert keyword(0x100) is None

    @pytest.mark.parametrize("byte,count", [
        (0x0D, 0), (0x10, 1), (0x11, 1), (0x15, 1), (0x16, 2), (0x17, 2), (0x18, 0),
    ])
    def test_control_arg_count(self, byte: int, count: int):
        assert control_arg_count(byte) == count


# =============================================================================
# Line Decoding
# =============================================================================

class TestDetokenizeLine:
    """Tests for single-line decoding."""

    def test_ascii(self):
        assert detokenize_line(b"HELLO 123") == "HELLO 123"

    def test_print_string(self):
        assert detokenize_line(bytes([PRINT]) + b'"HI"') == 'PRINT "HI"'

    def test_empty_line(self):
        assert detokenize_line(b"") == ""

    def test_ink_consumes_one_argument(self):
        assert detokenize_line(bytes([0x10, 0x07]) + b"A") == "{INK 7}A"

    def test_at_consumes_two_arguments(self):
        assert detokenize_line(bytes([0x16, 5, 10]) + b"X") == "{AT 5,10}X"

    def test_number_marker_skipped(self):
        data = b"10" + bytes([0x0E, 0x00, 0x00, 0x0A, 0x00, 0x00]) + b"+"
        assert detokenize_line(data) == "10+"

    def test_terminator_and_tab(self):
        assert detokenize_line(bytes([0x06, 0x0D])) == "\t\n"

    def test_unnamed_control_code(self):
        assert detokenize_line(bytes([0x01])) == "{01}"

    @pytest.mark.parametrize("data", [
        bytes([0x10]),
        bytes([0x16, 0x05]),
        bytes([0x0E, 0x00, 0x00]),
    ])
    def test_truncated_arguments(self, data: bytes):
        with pytest.raises(MalformedStreamError):
            detokenize_line(data)

    def test_copyright(self):
        assert detokenize_line(bytes([0x7F])) == "{(C)}"

    def test_block_graphics(self):
        assert detokenize_line(bytes([0x80, 0x8F])) == "{-8}{+8}"

    def test_udg(self):
        assert detokenize_line(bytes([0x90, 0xA2])) == "{A}{S}"

    def test_udg_boundary_outside_quotes(self):
        """0xA3 is the SPECTRUM keyword outside a string."""
        assert detokenize_line(bytes([0xA3])) == "SPECTRUM "

    def test_udg_boundary_inside_quotes(self):
        data = b'"' + bytes([0xA3, 0xA4]) + b'"'
        assert detokenize_line(data) == '"{T}{U}"'

    def test_keyword_after_text(self):
        assert detokenize_line(b"X" + bytes([0xC5]) + b"Y") == "X OR Y"

    def test_keyword_after_space_collapses(self):
        assert detokenize_line(b"X " + bytes([0xC5]) + b"Y") == "X OR Y"

    def test_consecutive_keywords(self):
        data = bytes([0xFA]) + b"a" + bytes([0xCB, 0xFB])
        assert detokenize_line(data) == "IF a THEN CLS "

    def test_keyword_without_spaces(self):
        assert detokenize_line(bytes([0xA5, 0xC5])) == "RND OR "

    def test_go_to_with_number(self):
        data = bytes([0xEC]) + b"10" + bytes([0x0E, 0x00, 0x00, 0x0A, 0x00, 0x00])
        assert detokenize_line(data) == "GO TO 10"


class TestDetokenizerState:
    """Tests for quote and REM tracking."""

    def test_quote_toggles(self):
        state = DetokenizerState()
        detokenize_line(b'"abc', state)
        assert state.in_quotes
        detokenize_line(b'"', state)
        assert not state.in_quotes

    def test_rem_suppresses_quote_toggle(self):
        state = DetokenizerState()
        text = detokenize_line(bytes([REM]) + b'"', state)
        assert text == 'REM "'
        assert state.in_rem
        assert not state.in_quotes

    def test_closed_string_then_rem(self):
        state = DetokenizerState()
        text = detokenize_line(b'"ab"' + bytes([REM]) + b'"', state)
        assert text == '"ab" REM "'
        assert state.in_rem
        assert not state.in_quotes

    def test_rem_keeps_keywords(self):
        """A quote after REM does not switch 0xA3 to a UDG."""
        data = bytes([REM]) + b'"' + bytes([0xA3])
        assert detokenize_line(data) == 'REM " SPECTRUM '

    def test_state_carries_between_calls(self):
        state = DetokenizerState()
        detokenize_line(b'"', state)
        assert detokenize_line(bytes([0xA3]), state) == "{T}"


# =============================================================================
# Program Decoding
# =============================================================================

class TestDetokenizeProgram:
    """Tests for whole-program decoding and formatting."""

    def test_hello(self, hello_program: bytes):
        lines = detokenize_program(hello_program)
        assert lines == [(10, 'PRINT "HI"')]
        assert format_program(lines) == '  10 PRINT "HI"'

    def test_multiple_lines(self):
        goto = bytes([0xEC]) + b"10" + bytes([0x0E, 0x00, 0x00, 0x0A, 0x00, 0x00])
        program = build_basic_program([
            (10, bytes([PRINT]) + b'"HI"'),
            (20, goto),
        ])
        assert detokenize_program(program) == [(10, 'PRINT "HI"'), (20, "GO TO 10")]

    def test_big_endian_line_number(self):
        program = encode_basic_line(256, b"A")
        assert detokenize_program(program) == [(256, "A")]

    def test_empty_program(self):
        assert detokenize_program(b"") == []

    def test_stops_at_variables_area(self, hello_program: bytes):
        """A line number of 16384 or more ends the program text."""
        data = hello_program + bytes([0x40, 0x00, 0xFF])
        assert detokenize_program(data) == [(10, 'PRINT "HI"')]

    def test_stops_at_numeric_variable(self, hello_program: bytes):
        data = hello_program + bytes([0x61, 0x00, 0x00, 0x0A, 0x00, 0x00])
        assert detokenize_program(data) == [(10, 'PRINT "HI"')]

    def test_state_reset_per_line(self):
        program = build_basic_program([
            (10, bytes([PRINT]) + b'"'),
            (20, bytes([0xA3])),
        ])
        assert detokenize_program(program) == [(10, 'PRINT "'), (20, "SPECTRUM ")]

    def test_only_terminator_newline_removed(self):
        program = encode_basic_line(10, b"A" + bytes([0x0D]))
        assert detokenize_program(program) == [(10, "A\n")]

    @pytest.mark.parametrize("data", [
        b"\x00",
        b"\x00\x0a\x05",
        b"\x00\x0a\x05\x00\xf5",
    ])
    def test_truncated_program(self, data: bytes):
        with pytest.raises(MalformedStreamError) as exc_info:
            detokenize_program(data)
        assert "buffer overflow" in str(exc_info.value)

    def test_format_line(self):
        assert format_line(10, "CLS ") == "  10 CLS "
        assert format_line(9999, "STOP ") == "9999 STOP "
