"""
ZX-Spectrum BASIC Support
=========================

Token tables and the detokenizer for Spectrum BASIC programs.

    >>> from zxtap.basic import detokenize_program, format_program
    >>> print(format_program(detokenize_program(entry.payload)))
"""

from zxtap.basic.tokens import (
    CONTROL_CODES,
    GRAPHICS_CHARS,
    UDG_CHARS,
    KEYWORDS,
    COPYRIGHT_GLYPH,
)

from zxtap.basic.detokenizer import (
    DetokenizerState,
    END_OF_PROGRAM_LINE,
    detokenize_line,
    detokenize_program,
    iter_program_lines,
    format_line,
    format_program,
)

__all__ = [
    # Tables
    "CONTROL_CODES",
    "GRAPHICS_CHARS",
    "UDG_CHARS",
    "KEYWORDS",
    "COPYRIGHT_GLYPH",
    # Detokenizer
    "DetokenizerState",
    "END_OF_PROGRAM_LINE",
    "detokenize_line",
    "detokenize_program",
    "iter_program_lines",
    "format_line",
    "format_program",
]
