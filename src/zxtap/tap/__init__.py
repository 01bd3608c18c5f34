"""
TAP Container Handling
======================

This package reads and writes ZX-Spectrum `.tap` tape images.

A TAP file is the sequence of blocks the ROM SAVE routine writes to
cassette, each prefixed by a 2-byte length. Programs are normally saved
as a 17-byte header block followed by the data block it describes.

This package provides:
- **read_next_block / iter_blocks**: stream blocks from a file object
- **try_parse_header**: interpret a block as a header
- **TapReader**: index a tape and find entries by index, name or type
- **TapBuilder**: create TAP images
- **Checksum utilities**: XOR block checksums

Quick Start
-----------
    >>> from zxtap.tap import TapReader, DataType
    >>> reader = TapReader.from_file("game.tap")
    >>> for entry in reader.iter_headers():
    ...     print(entry.index, entry.name, entry.datatype_name)

Reference
---------
- https://sinclair.wiki.zxnet.co.uk/wiki/TAP_format
"""

from zxtap.tap.records import (
    # Enums
    BlockType,
    DataType,
    # Data structures
    RawBlock,
    Header,
    # Constants
    HEADER_SIZE,
    FILENAME_SIZE,
    NO_AUTOSTART,
)

from zxtap.tap.checksum import (
    ChecksumAnalysis,
    calculate_checksum,
    verify_checksum,
    analyze_checksum,
)

from zxtap.tap.reader import (
    read_next_block,
    iter_blocks,
    try_parse_header,
    TapEntry,
    TapReader,
)

from zxtap.tap.builder import (
    TapBuilder,
    encode_block,
    encode_basic_line,
    build_basic_program,
)

__all__ = [
    # Enums
    "BlockType",
    "DataType",
    # Data structures
    "RawBlock",
    "Header",
    "HEADER_SIZE",
    "FILENAME_SIZE",
    "NO_AUTOSTART",
    # Checksum
    "ChecksumAnalysis",
    "calculate_checksum",
    "verify_checksum",
    "analyze_checksum",
    # Reader
    "read_next_block",
    "iter_blocks",
    "try_parse_header",
    "TapEntry",
    "TapReader",
    # Builder
    "TapBuilder",
    "encode_block",
    "encode_basic_line",
    "build_basic_program",
]
