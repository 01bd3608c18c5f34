"""
zxtap - ZX-Spectrum TAP Inspector
=================================

This package inspects and decodes ZX-Spectrum cassette tape images (.tap)
and the tokenized BASIC programs stored in them.

Main Components
---------------
- **tap**: TAP container handling
    Block reader, header interpreter, tape index and builder

- **basic**: Spectrum BASIC support
    Token tables and the detokenizer

- **intelhex**: Intel HEX output for machine-code blocks

- **inspector**: list, print and extract operations used by the CLI

Quick Start
-----------
Print the first BASIC program on a tape:
    >>> from zxtap import TapReader, DataType, detokenize_program, format_program
    >>> reader = TapReader.from_file("game.tap")
    >>> entry = reader.find_entry(datatype=DataType.BASIC)
    >>> print(format_program(detokenize_program(entry.payload)))

Or use the command-line tool:
    $ zxtapi list game.tap
    $ zxtapi basic game.tap
    $ zxtapi extract -o ./output game.tap

Reference Documentation
-----------------------
- TAP format: https://sinclair.wiki.zxnet.co.uk/wiki/TAP_format
- Character set: https://en.wikipedia.org/wiki/ZX_Spectrum_character_set
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from zxtap.errors import (
    ZXTapError,
    TapError,
    MalformedStreamError,
    ChecksumError,
    EntryNotFoundError,
    UnsupportedDataTypeError,
    ExportError,
    ConfigError,
)

from zxtap.tap import (
    BlockType,
    DataType,
    RawBlock,
    Header,
    TapEntry,
    TapReader,
    TapBuilder,
    read_next_block,
    iter_blocks,
    try_parse_header,
)

from zxtap.basic import (
    DetokenizerState,
    detokenize_line,
    detokenize_program,
    format_program,
)

from zxtap.config import InspectorConfig

__all__ = [
    "__version__",
    # Exception hierarchy
    "ZXTapError",
    "TapError",
    "MalformedStreamError",
    "ChecksumError",
    "EntryNotFoundError",
    "UnsupportedDataTypeError",
    "ExportError",
    "ConfigError",
    # TAP container
    "BlockType",
    "DataType",
    "RawBlock",
    "Header",
    "TapEntry",
    "TapReader",
    "TapBuilder",
    "read_next_block",
    "iter_blocks",
    "try_parse_header",
    # BASIC
    "DetokenizerState",
    "detokenize_line",
    "detokenize_program",
    "format_program",
    # Configuration
    "InspectorConfig",
]
