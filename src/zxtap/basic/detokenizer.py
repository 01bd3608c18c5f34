"""
ZX-Spectrum BASIC Detokenizer
=============================

Converts the tokenized form of a Spectrum BASIC program (as found in the
data block following a BASIC header) back into readable text.

Program Layout
--------------
A program is a sequence of lines, terminated either by the end of the
buffer or by the variables area (whose first byte never forms a line
number below 16384):

    Offset  Size    Description
    ------  ----    -----------
    0       2       Line number (BIG-endian, unlike every other field)
    2       2       Line length LL (little-endian)
    4       LL      Tokenized line, normally ending with 0x0D

Inside a line, numbers appear twice: as ASCII digits for listing, then as
a 0x0E marker followed by the 5-byte floating point form used at run
time. The binary copy is skipped.

Decoding State
--------------
Three flags are tracked while a line is decoded:

- in_quotes: toggled by every '"' outside a REM. Inside quotes the bytes
  0xA3 and 0xA4 are UDG characters instead of keywords.
- in_rem: set by the REM token; quotes no longer toggle after it.
- last_was_space: used to drop the leading space of a keyword that
  directly follows a space, so `10 PRINT` is not listed as `10  PRINT`.
  The start of a line counts as a space.

Usage
-----
    >>> for number, text in detokenize_program(block.payload):
    ...     print(format_line(number, text))
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional
import logging

from zxtap.errors import MalformedStreamError
from zxtap.basic.tokens import (
    COPYRIGHT,
    COPYRIGHT_GLYPH,
    GRAPHICS_START,
    NUMBER_MARKER,
    NUMBER_SIZE,
    QUOTE,
    REM,
    SPACE,
    UDG_START,
    control_arg_count,
    control_format,
    graphics_char,
    keyword,
    udg_char,
    udg_end,
)

# Logger for this module
logger = logging.getLogger(__name__)

# Line numbers at or above this mark the end of the program text
END_OF_PROGRAM_LINE = 16384

BUFFER_OVERFLOW_MSG = "buffer overflow during detokenization"


@dataclass
class DetokenizerState:
    """Quoting and spacing state for one decode call."""
    in_quotes: bool = False
    in_rem: bool = False
    last_was_space: bool = True


# =============================================================================
# Line Decoding
# =============================================================================

def _render_control(data: bytes, position: int) -> tuple[str, int]:
    """
    Render the control code at `position`.

    Returns:
        Tuple of (text, bytes consumed including the code itself)

    Raises:
        MalformedStreamError: If argument bytes run past the end of the line
    """
    byte = data[position]
    available = len(data) - position - 1

    if byte == NUMBER_MARKER:
        if available < NUMBER_SIZE:
            raise MalformedStreamError(
                f"number marker needs {NUMBER_SIZE} bytes, only {available} left",
                offset=position,
            )
        return control_format(byte), 1 + NUMBER_SIZE

    fmt = control_format(byte)
    arg_count = control_arg_count(byte)
    if available < arg_count:
        raise MalformedStreamError(
            f"control code 0x{byte:02X} needs {arg_count} argument byte(s), only {available} left",
            offset=position,
        )
    args = tuple(data[position + 1:position + 1 + arg_count])
    text = fmt % args if arg_count else fmt
    return text, 1 + arg_count


def detokenize_line(payload: bytes, state: Optional[DetokenizerState] = None) -> str:
    """
    Convert one tokenized BASIC line to text.

    Args:
        payload: The tokenized line bytes (without line number and length)
        state: Decoding state to continue from; a fresh one is used if None

    Returns:
        The line text. A trailing 0x0D terminator renders as "\\n".

    Raises:
        MalformedStreamError: If a control code's arguments run past the end

    Example:
        >>> detokenize_line(bytes([0xF5, 0x22, 0x48, 0x49, 0x22]))
        'PRINT "HI"'
    """
    if state is None:
        state = DetokenizerState()

    data = bytes(payload)
    parts: list[str] = []
    position = 0

    while position < len(data):
        byte = data[position]
        consumed = 1

        # Control codes
        if byte < SPACE:
            text, consumed = _render_control(data, position)
            state.last_was_space = False

        # ASCII
        elif byte < GRAPHICS_START:
            text = COPYRIGHT_GLYPH if byte == COPYRIGHT else chr(byte)
            state.last_was_space = byte == SPACE

        # Block graphics
        elif byte < UDG_START:
            text = graphics_char(byte)
            state.last_was_space = False

        # User-defined graphics (range grows inside quotes)
        elif byte < udg_end(state.in_quotes):
            text = udg_char(byte)
            state.last_was_space = False

        # Keywords
        else:
            text = keyword(byte)
            if state.last_was_space and text.startswith(" "):
                text = text[1:]
            state.last_was_space = text.endswith(" ")

        parts.append(text)

        if byte == QUOTE and not state.in_rem:
            state.in_quotes = not state.in_quotes
        if byte == REM:
            state.in_rem = True

        position += consumed

    return "".join(parts)


# =============================================================================
# Program Decoding
# =============================================================================

def iter_program_lines(payload: bytes) -> Iterator[tuple[int, str]]:
    """
    Lazily decode a BASIC program into (line number, text) pairs.

    Each line is decoded with a fresh DetokenizerState. The trailing
    newline produced by the 0x0D terminator is removed.

    Raises:
        MalformedStreamError: If a line header or body runs past the end
    """
    data = bytes(payload)
    position = 0

    while position < len(data):
        if len(data) - position < 2:
            raise MalformedStreamError(BUFFER_OVERFLOW_MSG, offset=position)
        line_number = (data[position] << 8) | data[position + 1]
        position += 2

        if line_number >= END_OF_PROGRAM_LINE:
            logger.debug(
                f"End of program text at offset {position - 2}, "
                f"{len(data) - position + 2} bytes of variables follow"
            )
            return

        if len(data) - position < 2:
            raise MalformedStreamError(BUFFER_OVERFLOW_MSG, offset=position)
        line_length = data[position] | (data[position + 1] << 8)
        position += 2

        if line_length > len(data) - position:
            raise MalformedStreamError(
                f"{BUFFER_OVERFLOW_MSG}: line {line_number} declares {line_length} bytes, "
                f"{len(data) - position} left",
                offset=position,
            )

        text = detokenize_line(data[position:position + line_length])
        position += line_length

        if text.endswith("\n"):
            text = text[:-1]
        yield line_number, text


def detokenize_program(payload: bytes) -> list[tuple[int, str]]:
    """
    Decode a whole BASIC program.

    Args:
        payload: The data block following a BASIC header

    Returns:
        List of (line number, text) pairs in program order

    Raises:
        MalformedStreamError: If the program layout is truncated

    Example:
        >>> for number, text in detokenize_program(entry.payload):
        ...     print(number, text)
    """
    return list(iter_program_lines(payload))


def format_line(line_number: int, text: str) -> str:
    """Format a decoded line the way the Spectrum lists it."""
    return f"{line_number:>4} {text}"


def format_program(lines: Iterable[tuple[int, str]]) -> str:
    """Format decoded lines as a listing, one line per row."""
    return "\n".join(format_line(number, text) for number, text in lines)
