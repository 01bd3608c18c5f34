"""
zxtap Error Hierarchy
=====================

This module defines the exception hierarchy for the whole zxtap package.
All exceptions inherit from ZXTapError, allowing callers to catch every
decoding or export problem with a single except clause if desired.

Exception Hierarchy
-------------------
ZXTapError (base)
├── TapError (TAP container handling)
│   ├── MalformedStreamError - truncated or inconsistent binary layout
│   ├── ChecksumError - block checksum mismatch (strict mode only)
│   └── EntryNotFoundError - no header matched the selection
├── UnsupportedDataTypeError - entry has a datatype the operation can't handle
├── ExportError - HEX or file extraction cannot be produced
└── ConfigError - invalid environment setting

Outcomes That Are Not Errors
----------------------------
Two normal results of the decoding engine are deliberately NOT exceptions:

- End of stream: read_next_block() returns None.
- Not a header: try_parse_header() returns None for data/opaque blocks.

Unknown byte values inside BASIC lines and unknown header datatypes are
never raised either; they are rendered with their table entry or as
"UNKNOWN(n)" so that partial output is still produced for damaged tapes.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ZXTapError(Exception):
    """
    Base exception for all zxtap errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch all decoding errors with a single except clause:

        try:
            reader = TapReader.from_file("game.tap")
        except ZXTapError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# TAP Container Exceptions
# =============================================================================

class TapError(ZXTapError):
    """Base exception for TAP container handling errors."""
    pass


class MalformedStreamError(TapError):
    """
    Truncated or inconsistent binary layout.

    Raised when:
    - A block declares a length smaller than 2 (tag + checksum)
    - The stream ends in the middle of a block
    - A BASIC program or line runs past the end of its buffer

    Attributes:
        message: The error description
        offset: Byte offset in the stream or buffer where it was detected
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        self.message = message
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class ChecksumError(TapError):
    """
    Block checksum mismatch.

    Checksums are advisory by default. This is only raised when the
    reader runs in strict mode.
    """

    def __init__(self, expected: int, actual: int, offset: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        self.offset = offset
        message = f"checksum mismatch: stored 0x{expected:02X}, calculated 0x{actual:02X}"
        if offset is not None:
            message = f"{message} (block at offset {offset})"
        super().__init__(message)


class EntryNotFoundError(TapError):
    """
    No header matched the requested selection.

    Raised by TapReader.find_entry() when the name, index or datatype
    criteria do not match any header in the tape.
    """
    pass


# =============================================================================
# Operation Exceptions
# =============================================================================

class UnsupportedDataTypeError(ZXTapError):
    """
    The selected entry has a datatype the operation cannot handle.

    Examples:
        - Asking for a BASIC listing of a CODE block
        - Asking for Intel HEX of a number array
    """

    def __init__(self, datatype_name: str, operation: str):
        self.datatype_name = datatype_name
        self.operation = operation
        super().__init__(f"{operation} is not supported for {datatype_name} blocks")


class ExportError(ZXTapError):
    """
    Output cannot be produced.

    Raised when:
    - A CODE block does not fit in the 16-bit address space
    - The extraction directory cannot be written
    """
    pass


class ConfigError(ZXTapError):
    """
    An environment setting has an invalid value.

    Raised by InspectorConfig.from_env(), e.g. for a non-numeric
    ZXTAPI_HEX_RECORD_SIZE.
    """
    pass
