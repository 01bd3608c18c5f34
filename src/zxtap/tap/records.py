"""
TAP Record Type Definitions
===========================

This module defines the data structures for ZX-Spectrum TAP blocks and
the 17-byte header that describes the block following it.

TAP Structure Overview
----------------------
A TAP file is a plain sequence of blocks, each exactly as the ROM SAVE
routine wrote it to tape, prefixed by its length:

    Offset  Size    Description
    ------  ----    -----------
    0       2       Block length L (little-endian), counts tag+payload+checksum
    2       1       Tag byte (0x00 header, 0xFF data, other = opaque)
    3       L-2     Payload
    1+L     1       Checksum (XOR of tag and payload)

Header Payload
--------------
A block with tag 0x00 and exactly 17 payload bytes is a header:

    Offset  Size    Description
    ------  ----    -----------
    0       1       Datatype (0=BASIC, 1=number array, 2=string array, 3=CODE)
    1       10      Filename, space-padded
    11      2       Length of the following data block (little-endian)
    13      2       Param1 (little-endian)
    15      2       Param2 (little-endian)

Param1/param2 meaning depends on the datatype:

    BASIC           param1 = autostart line (>= 32768 means none)
                    param2 = offset of the variables area (program length)
    NUMBER_ARRAY    param1 high byte = encoded variable name
    STRING_ARRAY    param1 high byte = encoded variable name
    CODE            param1 = load address, param2 = unused (32768)

Reference
---------
- https://sinclair.wiki.zxnet.co.uk/wiki/TAP_format
- https://sinclair.wiki.zxnet.co.uk/wiki/Spectrum_tape_interface
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
import struct

from zxtap.tap.checksum import calculate_checksum


# Payload size of a header block
HEADER_SIZE = 17

# Width of the filename field in a header
FILENAME_SIZE = 10

# param1 values at or above this mean "no autostart" for BASIC programs
NO_AUTOSTART = 32768


# =============================================================================
# Enumeration Types
# =============================================================================

class BlockType(IntEnum):
    """
    Block tag (flag) byte values.

    Any other tag value is vendor-specific (custom loaders) and is treated
    as an opaque data block.
    """
    HEADER = 0x00
    DATA = 0xFF

    @classmethod
    def get_name(cls, tag: int) -> str:
        """Get a human-readable name for a tag byte."""
        if tag == cls.HEADER:
            return "Header"
        if tag == cls.DATA:
            return "Data"
        return f"Custom (0x{tag:02X})"


class DataType(IntEnum):
    """
    Header datatype ordinals.

    ANY is a wildcard used when searching; it never appears on tape.
    """
    BASIC = 0
    NUMBER_ARRAY = 1
    STRING_ARRAY = 2
    CODE = 3
    ANY = 0xFF

    @classmethod
    def from_ordinal(cls, value: int) -> Optional["DataType"]:
        """Return the DataType for an on-tape ordinal, or None if unknown."""
        if value == cls.ANY:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def get_name(cls, value: int) -> str:
        """Get the display name for a datatype ordinal, known or not."""
        names = {
            cls.BASIC: "BASIC-PROGRAM",
            cls.NUMBER_ARRAY: "NUMBER-ARRAY",
            cls.STRING_ARRAY: "STRING-ARRAY",
            cls.CODE: "CODE",
        }
        return names.get(value, f"UNKNOWN({value})")


# =============================================================================
# Raw Block
# =============================================================================

@dataclass(frozen=True)
class RawBlock:
    """
    One length-delimited unit read from a TAP stream.

    Attributes:
        kind: Tag byte (0x00 header, 0xFF data, anything else opaque)
        payload: Block bytes between the tag and the checksum
        checksum: Checksum byte as stored in the stream
        offset: Stream offset of the length prefix (-1 if unknown)
    """
    kind: int
    payload: bytes
    checksum: int
    offset: int = -1

    @property
    def block_length(self) -> int:
        """The declared length L (tag + payload + checksum)."""
        return len(self.payload) + 2

    @property
    def is_header(self) -> bool:
        return self.kind == BlockType.HEADER

    @property
    def is_data(self) -> bool:
        return self.kind == BlockType.DATA

    @property
    def calculated_checksum(self) -> int:
        """XOR of the tag and payload bytes."""
        return calculate_checksum(self.kind, self.payload)

    @property
    def is_checksum_valid(self) -> bool:
        return self.calculated_checksum == self.checksum

    def get_type_name(self) -> str:
        """Get a human-readable name for this block's tag."""
        return BlockType.get_name(self.kind)

    def to_bytes(self) -> bytes:
        """Serialize the block to TAP format, including the length prefix."""
        return (
            struct.pack("<HB", self.block_length, self.kind)
            + self.payload
            + bytes([self.checksum])
        )

    @classmethod
    def create(cls, kind: int, payload: bytes) -> "RawBlock":
        """Build a block with a correctly calculated checksum."""
        payload = bytes(payload)
        return cls(kind=kind, payload=payload, checksum=calculate_checksum(kind, payload))


# =============================================================================
# Header
# =============================================================================

@dataclass
class Header:
    """
    Parsed contents of a 17-byte header block.

    The datatype is kept as a plain int so that non-standard values found
    on real tapes survive parsing; use `data_type` for the enum view and
    `datatype_name` for display.
    """
    datatype: int = DataType.BASIC
    filename: str = ""
    length: int = 0
    param1: int = 0
    param2: int = 0

    @classmethod
    def from_payload(cls, payload: bytes) -> "Header":
        """
        Deserialize a header from a 17-byte block payload.

        Raises:
            ValueError: If payload is not exactly 17 bytes
        """
        if len(payload) != HEADER_SIZE:
            raise ValueError(f"Header payload must be {HEADER_SIZE} bytes, got {len(payload)}")

        datatype = payload[0]
        raw_name = bytes(payload[1:1 + FILENAME_SIZE])
        length, param1, param2 = struct.unpack_from("<HHH", payload, 11)

        return cls(
            datatype=datatype,
            filename=raw_name.rstrip(b" \x00").decode("latin-1"),
            length=length,
            param1=param1,
            param2=param2,
        )

    def to_bytes(self) -> bytes:
        """Serialize the header to its 17-byte payload."""
        name = self.filename.encode("latin-1")[:FILENAME_SIZE].ljust(FILENAME_SIZE, b" ")
        return (
            bytes([self.datatype & 0xFF])
            + name
            + struct.pack("<HHH", self.length, self.param1, self.param2)
        )

    def to_block(self) -> RawBlock:
        """Wrap the header in a tag-0x00 block with a valid checksum."""
        return RawBlock.create(BlockType.HEADER, self.to_bytes())

    @property
    def data_type(self) -> Optional[DataType]:
        """The datatype as an enum, or None for non-standard values."""
        return DataType.from_ordinal(self.datatype)

    @property
    def datatype_name(self) -> str:
        return DataType.get_name(self.datatype)

    @property
    def autostart_line(self) -> Optional[int]:
        """BASIC autostart line number, or None if not set."""
        if self.datatype != DataType.BASIC or self.param1 >= NO_AUTOSTART:
            return None
        return self.param1

    @property
    def program_length(self) -> Optional[int]:
        """BASIC program length without variables (offset of the variables area)."""
        if self.datatype != DataType.BASIC:
            return None
        return self.param2

    @property
    def load_address(self) -> Optional[int]:
        """CODE load address."""
        if self.datatype != DataType.CODE:
            return None
        return self.param1

    @property
    def array_name(self) -> Optional[str]:
        """Variable name of a saved array, e.g. 'a' or 'b$'."""
        if self.datatype not in (DataType.NUMBER_ARRAY, DataType.STRING_ARRAY):
            return None
        letter = chr(0x60 + ((self.param1 >> 8) & 0x1F))
        return letter + "$" if self.datatype == DataType.STRING_ARRAY else letter

    def describe_params(self) -> str:
        """Short description of param1/param2 in terms of the datatype."""
        if self.datatype == DataType.BASIC:
            line = self.autostart_line
            autostart = f"LINE {line}" if line is not None else "no autostart"
            return f"{autostart}, program {self.param2} bytes"
        if self.datatype == DataType.CODE:
            return f"load at {self.param1} (0x{self.param1:04X})"
        if self.array_name is not None:
            return f"array {self.array_name}()"
        return f"param1={self.param1}, param2={self.param2}"
