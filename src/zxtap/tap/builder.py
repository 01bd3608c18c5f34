"""
TAP Image Builder
=================

This module provides the TapBuilder class for creating TAP images, plus
helpers to encode individual blocks and tokenized BASIC programs.

Usage
-----
Saving a machine-code block the way `SAVE "SCREEN" CODE 16384,6912` does:

    >>> from zxtap.tap import TapBuilder
    >>> builder = TapBuilder()
    >>> builder.add_code("SCREEN", 16384, screen_bytes)
    >>> builder.build_to_file("screen.tap")

Saving a BASIC program with autostart:

    >>> program = build_basic_program([(10, b"\\xf5\\"HI\\"")])
    >>> TapBuilder().add_basic("HELLO", program, autostart=10).build()

BASIC Line Layout
-----------------
    Offset  Size    Description
    ------  ----    -----------
    0       2       Line number (BIG-endian)
    2       2       Line length (little-endian), including the 0x0D terminator
    4       n       Tokenized line, ending with 0x0D
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union
import logging
import struct

from zxtap.errors import TapError
from zxtap.tap.records import (
    FILENAME_SIZE,
    NO_AUTOSTART,
    BlockType,
    DataType,
    Header,
    RawBlock,
)

# Logger for this module
logger = logging.getLogger(__name__)

# Terminator byte of every tokenized BASIC line (ENTER)
LINE_TERMINATOR = 0x0D

# Largest valid BASIC line number
MAX_LINE_NUMBER = 9999


# =============================================================================
# Encoding Helpers
# =============================================================================

def encode_block(tag: int, payload: bytes) -> bytes:
    """
    Encode one TAP block with length prefix and checksum.

    Example:
        >>> encode_block(0xFF, b"\\x01\\x02").hex()
        '0400ff0102fc'
    """
    return RawBlock.create(tag, payload).to_bytes()


def encode_basic_line(number: int, body: bytes, terminate: bool = True) -> bytes:
    """
    Encode one BASIC line.

    Args:
        number: Line number (0-9999)
        body: Tokenized line contents
        terminate: Append the 0x0D terminator if True

    Raises:
        ValueError: If the line number is out of range
    """
    if not 0 <= number <= MAX_LINE_NUMBER:
        raise ValueError(f"Invalid line number {number} (valid: 0-{MAX_LINE_NUMBER})")
    body = bytes(body)
    if terminate:
        body += bytes([LINE_TERMINATOR])
    return struct.pack(">H", number) + struct.pack("<H", len(body)) + body


def build_basic_program(lines: Iterable[tuple[int, bytes]]) -> bytes:
    """Encode a sequence of (line number, tokenized body) pairs."""
    return b"".join(encode_basic_line(number, body) for number, body in lines)


# =============================================================================
# Tape Builder
# =============================================================================

@dataclass
class TapBuilder:
    """
    Builder for TAP images.

    Provides a fluent interface: every add_* method returns the builder.

    Example:
        >>> data = (TapBuilder()
        ...         .add_basic("LOADER", program, autostart=10)
        ...         .add_code("GAME", 32768, code)
        ...         .build())
    """
    _blocks: list[RawBlock] = field(default_factory=list, repr=False)

    def add_block(self, block: RawBlock) -> "TapBuilder":
        """Append a block exactly as given (checksum included)."""
        self._blocks.append(block)
        logger.debug(f"Added {block.get_type_name()} block ({len(block.payload)} bytes)")
        return self

    def add_raw(self, payload: bytes, tag: int = BlockType.DATA) -> "TapBuilder":
        """Append a block with a calculated checksum."""
        return self.add_block(RawBlock.create(tag, payload))

    def add_header(self, header: Header) -> "TapBuilder":
        """Append a header block."""
        return self.add_block(header.to_block())

    def add_file(
        self,
        datatype: int,
        name: str,
        data: bytes,
        param1: int,
        param2: int,
    ) -> "TapBuilder":
        """
        Append a header and its data block.

        Raises:
            TapError: If the name is too long or the data exceeds 65535 bytes
        """
        if len(name) > FILENAME_SIZE:
            raise TapError(f"Filename '{name}' is longer than {FILENAME_SIZE} characters")
        if len(data) > 0xFFFF:
            raise TapError(f"Data block too large: {len(data)} bytes")

        header = Header(
            datatype=datatype,
            filename=name,
            length=len(data),
            param1=param1,
            param2=param2,
        )
        return self.add_header(header).add_raw(data)

    def add_basic(
        self,
        name: str,
        program: bytes,
        autostart: Optional[int] = None,
        variables: bytes = b"",
    ) -> "TapBuilder":
        """Append a BASIC program (optionally followed by its variables area)."""
        line = NO_AUTOSTART if autostart is None else autostart
        return self.add_file(DataType.BASIC, name, program + variables, line, len(program))

    def add_code(self, name: str, address: int, code: bytes) -> "TapBuilder":
        """Append a CODE block loaded at `address`."""
        return self.add_file(DataType.CODE, name, code, address, NO_AUTOSTART)

    def get_block_count(self) -> int:
        return len(self._blocks)

    def clear(self) -> "TapBuilder":
        self._blocks.clear()
        return self

    def build(self) -> bytes:
        """Serialize all blocks to a TAP image."""
        return b"".join(block.to_bytes() for block in self._blocks)

    def build_to_file(self, filepath: Union[str, Path]) -> int:
        """
        Write the TAP image to a file.

        Returns:
            Number of bytes written
        """
        data = self.build()
        Path(filepath).write_bytes(data)
        logger.info(f"Wrote {len(self._blocks)} blocks ({len(data)} bytes) to {filepath}")
        return len(data)
