"""
ZX-Spectrum BASIC Character and Token Tables
============================================

The Spectrum character set maps every byte value to something printable:

    Range       Meaning
    -----       -------
    0x00-0x1F   Control codes (colour/position codes take 1 or 2 argument bytes)
    0x20-0x7E   ASCII (0x60 is the pound sign, 0x7F the copyright sign)
    0x80-0x8F   Block graphics
    0x90-0xA4   User-defined graphics A..U
    0xA3-0xFF   Keywords (0xA3/0xA4 are SPECTRUM/PLAY on the 128K)

The UDG and keyword ranges overlap at 0xA3-0xA4: inside a string literal
those bytes are UDG characters T and U, elsewhere they are keywords.

Glyphs that have no ASCII form are rendered as `{...}` placeholders:
`{-1}`..`{+8}` for block graphics, `{A}`..`{U}` for UDGs, `{(C)}` for
the copyright sign and `{INK 7}` style for colour codes.

All tables are immutable tuples; use the lookup functions rather than
indexing by raw byte arithmetic.

Reference
---------
- https://en.wikipedia.org/wiki/ZX_Spectrum_character_set
"""

from typing import Optional


# =============================================================================
# Range Boundaries
# =============================================================================

CONTROL_START = 0x00
GRAPHICS_START = 0x80
UDG_START = 0x90
KEYWORDS_START = 0xA3

# End (exclusive) of the UDG range outside and inside string literals
UDG_END = 0xA3
UDG_END_IN_QUOTES = 0xA5

# Control code marking an inline 5-byte floating point number
NUMBER_MARKER = 0x0E
NUMBER_SIZE = 5

# Character bytes that drive the detokenizer state
QUOTE = 0x22
SPACE = 0x20
COPYRIGHT = 0x7F
REM = 0xEA

COPYRIGHT_GLYPH = "{(C)}"


# =============================================================================
# Tables
# =============================================================================

# 0x00-0x1F. Entries with %d placeholders consume that many argument bytes.
CONTROL_CODES: tuple[str, ...] = (
    # 0x00
    "{00}", "{01}", "{02}", "{03}", "{04}", "{05}", "\t", "{07}",
    # 0x08
    "{08}", "{09}", "{0A}", "{0B}", "{0C}", "\n", "", "{0F}",
    # 0x10
    "{INK %d}", "{PAPER %d}", "{FLASH %d}", "{BRIGHT %d}",
    "{INVERSE %d}", "{OVER %d}", "{AT %d,%d}", "{TAB %d,%d}",
    # 0x18
    "{18}", "{19}", "{1A}", "{1B}", "{1C}", "{1D}", "{1E}", "{1F}",
)

# 0x80-0x8F, named after the quadrant pattern key on the Spectrum keyboard
GRAPHICS_CHARS: tuple[str, ...] = (
    "{-8}", "{-1}", "{-2}", "{-3}", "{-4}", "{-5}", "{-6}", "{-7}",
    "{+7}", "{+6}", "{+5}", "{+4}", "{+3}", "{+2}", "{+1}", "{+8}",
)

# 0x90-0xA4
UDG_CHARS: tuple[str, ...] = (
    "{A}", "{B}", "{C}", "{D}", "{E}", "{F}", "{G}", "{H}",
    "{I}", "{J}", "{K}", "{L}", "{M}", "{N}", "{O}", "{P}",
    "{Q}", "{R}", "{S}", "{T}", "{U}",
)

# 0xA3-0xFF. Leading/trailing spaces are how the ROM lists them.
KEYWORDS: tuple[str, ...] = (
    # 0xA3
    " SPECTRUM ", " PLAY ", "RND", "INKEY$", "PI",
    # 0xA8
    "FN ", "POINT ", "SCREEN$ ", "ATTR ", "AT ", "TAB ", "VAL$ ", "CODE ",
    # 0xB0
    "VAL ", "LEN ", "SIN ", "COS ", "TAN ", "ASN ", "ACS ", "ATN ",
    # 0xB8
    "LN ", "EXP ", "INT ", "SQR ", "SGN ", "ABS ", "PEEK ", "IN ",
    # 0xC0
    "USR ", "STR$ ", "CHR$ ", "NOT ", "BIN ", " OR ", " AND ", "<=",
    # 0xC8
    ">=", "<>", " LINE ", " THEN ", " TO ", " STEP ", " DEF FN ", " CAT ",
    # 0xD0
    " FORMAT ", " MOVE ", " ERASE ", " OPEN #", " CLOSE #", " MERGE ", " VERIFY ", " BEEP ",
    # 0xD8
    " CIRCLE ", " INK ", " PAPER ", " FLASH ", " BRIGHT ", " INVERSE ", " OVER ", " OUT ",
    # 0xE0
    " LPRINT ", " LLIST ", " STOP ", " READ ", " DATA ", " RESTORE ", " NEW ", " BORDER ",
    # 0xE8
    " CONTINUE ", " DIM ", " REM ", " FOR ", " GO TO ", " GO SUB ", " INPUT ", " LOAD ",
    # 0xF0
    " LIST ", " LET ", " PAUSE ", " NEXT ", " POKE ", " PRINT ", " PLOT ", " RUN ",
    # 0xF8
    " SAVE ", " RANDOMIZE ", " IF ", " CLS ", " DRAW ", " CLEAR ", " RETURN ", " COPY ",
)


# =============================================================================
# Lookups
# =============================================================================

def _lookup(table: tuple[str, ...], start: int, byte: int) -> Optional[str]:
    index = byte - start
    if 0 <= index < len(table):
        return table[index]
    return None


def control_format(byte: int) -> Optional[str]:
    """Format string for a control code, or None if `byte` is not one."""
    return _lookup(CONTROL_CODES, CONTROL_START, byte)


def control_arg_count(byte: int) -> int:
    """Number of argument bytes that follow a control code."""
    fmt = control_format(byte)
    return fmt.count("%d") if fmt else 0


def graphics_char(byte: int) -> Optional[str]:
    return _lookup(GRAPHICS_CHARS, GRAPHICS_START, byte)


def udg_char(byte: int) -> Optional[str]:
    return _lookup(UDG_CHARS, UDG_START, byte)


def keyword(byte: int) -> Optional[str]:
    """Keyword text for a token byte, or None outside 0xA3-0xFF."""
    return _lookup(KEYWORDS, KEYWORDS_START, byte)


def udg_end(in_quotes: bool) -> int:
    """End (exclusive) of the UDG range for the current quoting state."""
    return UDG_END_IN_QUOTES if in_quotes else UDG_END
