"""
TAP Block Reader and Header Interpreter
=======================================

This module provides the low-level block reader for TAP streams, the
header interpreter, and the TapReader class that indexes a whole tape.

Block Reader
------------
read_next_block() consumes exactly one block from any binary file-like
object. It returns None at the end of the stream (the normal way to stop)
and raises MalformedStreamError when the stream ends in the middle of a
block or declares an impossible length.

Header Interpreter
------------------
try_parse_header() returns a Header for tag-0x00 blocks with a 17-byte
payload and None for everything else. None is the expected result for
data blocks, not a failure.

TapReader
---------
TapReader loads all blocks of a tape and pairs each header with the block
that follows it, giving a list of TapEntry objects that can be searched
by 1-based index, filename or datatype.

Usage Examples
--------------
Streaming over blocks:
    >>> with open("game.tap", "rb") as f:
    ...     for block in iter_blocks(f):
    ...         header = try_parse_header(block)
    ...         if header:
    ...             print(header.filename)

Indexing a tape:
    >>> reader = TapReader.from_file("game.tap")
    >>> entry = reader.find_entry(datatype=DataType.BASIC)
    >>> print(entry.header.filename, len(entry.payload))
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union
import io
import logging

from zxtap.errors import (
    ChecksumError,
    EntryNotFoundError,
    MalformedStreamError,
    ZXTapError,
)
from zxtap.tap.checksum import analyze_checksum
from zxtap.tap.records import HEADER_SIZE, BlockType, DataType, Header, RawBlock

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Block Reader
# =============================================================================

def _read_exact(source: BinaryIO, size: int, what: str, offset: int) -> bytes:
    """Read exactly `size` bytes or raise MalformedStreamError."""
    data = source.read(size) if size else b""
    if len(data) != size:
        raise MalformedStreamError(
            f"truncated block: expected {size} byte(s) of {what}, got {len(data)}",
            offset=offset,
        )
    return data


def read_next_block(
    source: BinaryIO,
    strict: bool = False,
    offset: int = -1,
) -> Optional[RawBlock]:
    """
    Read the next block from a TAP byte stream.

    Args:
        source: Binary file-like object positioned at a length prefix
        strict: If True, a checksum mismatch raises ChecksumError
        offset: Stream offset of the block, recorded in the result and in
            error messages (-1 if unknown)

    Returns:
        The RawBlock read, or None at the end of the stream

    Raises:
        MalformedStreamError: If the declared length is below 2 or the
            stream ends inside the block
        ChecksumError: In strict mode, if the checksum does not match
    """
    prefix = source.read(2)
    if len(prefix) == 0:
        return None
    if len(prefix) == 1:
        logger.warning(f"Ignoring stray trailing byte 0x{prefix[0]:02X} at offset {offset}")
        return None

    block_length = prefix[0] | (prefix[1] << 8)
    if block_length < 2:
        raise MalformedStreamError(
            f"invalid block length {block_length} (minimum is 2: tag + checksum)",
            offset=offset,
        )

    tag = _read_exact(source, 1, "tag", offset)[0]
    payload = _read_exact(source, block_length - 2, "payload", offset)
    checksum = _read_exact(source, 1, "checksum", offset)[0]

    analysis = analyze_checksum(tag, payload, checksum)
    if not analysis.is_valid:
        if strict:
            raise ChecksumError(checksum, analysis.calculated_checksum, offset=offset)
        logger.warning(f"Block at offset {offset}: {analysis.message}")

    logger.debug(
        f"Read {BlockType.get_name(tag)} block at offset {offset}: "
        f"{len(payload)} payload bytes"
    )
    return RawBlock(kind=tag, payload=payload, checksum=checksum, offset=offset)


def iter_blocks(source: BinaryIO, strict: bool = False) -> Iterator[RawBlock]:
    """
    Iterate over all blocks in a TAP stream.

    Offsets are counted from the position of the source when iteration
    starts.

    Yields:
        RawBlock instances, in stream order

    Raises:
        MalformedStreamError: On the first truncated or impossible block
    """
    offset = 0
    while True:
        block = read_next_block(source, strict=strict, offset=offset)
        if block is None:
            return
        offset += 2 + block.block_length
        yield block


# =============================================================================
# Header Interpreter
# =============================================================================

def try_parse_header(block: Optional[RawBlock]) -> Optional[Header]:
    """
    Interpret a block as a header.

    Args:
        block: The block to interpret (None is accepted and yields None)

    Returns:
        The parsed Header, or None if the block is not a header block

    Example:
        >>> header = try_parse_header(block)
        >>> if header is not None:
        ...     print(f"{header.datatype_name}: {header.filename}")
    """
    if block is None:
        return None
    if block.kind != BlockType.HEADER or len(block.payload) != HEADER_SIZE:
        return None
    return Header.from_payload(block.payload)


# =============================================================================
# Tape Entries
# =============================================================================

@dataclass
class TapEntry:
    """
    A header and the block that follows it, or a headerless block.

    Attributes:
        index: 1-based header number (None for headerless blocks)
        header: The parsed header (None for headerless blocks)
        header_block: The raw header block
        data_block: The block following the header (None if missing)
    """
    index: Optional[int] = None
    header: Optional[Header] = None
    header_block: Optional[RawBlock] = None
    data_block: Optional[RawBlock] = None

    @property
    def is_headerless(self) -> bool:
        return self.header is None

    @property
    def name(self) -> str:
        return self.header.filename if self.header else ""

    @property
    def datatype_name(self) -> str:
        return self.header.datatype_name if self.header else "HEADERLESS"

    @property
    def payload(self) -> bytes:
        """Payload of the data block (empty if there is none)."""
        return self.data_block.payload if self.data_block else b""

    @property
    def has_length_mismatch(self) -> bool:
        """True if the data block size differs from the header's length field."""
        if self.header is None or self.data_block is None:
            return False
        return len(self.data_block.payload) != self.header.length

    def matches(
        self,
        name: Optional[str] = None,
        index: Optional[int] = None,
        datatype: int = DataType.ANY,
    ) -> bool:
        """
        Check this entry against selection criteria.

        Name and index are checked when given. If neither is given, the
        datatype is checked instead (DataType.ANY matches every header).
        """
        if self.header is None:
            return False
        if name is not None and self.header.filename != name:
            return False
        if index is not None and self.index != index:
            return False
        if name is None and index is None and datatype != DataType.ANY:
            return self.header.datatype == datatype
        return True


# =============================================================================
# Tape Reader
# =============================================================================

@dataclass
class TapReader:
    """
    Index of all blocks in a TAP image.

    Attributes:
        data: The raw TAP file bytes
        strict: If True, checksum mismatches raise ChecksumError
        blocks: All blocks, in tape order
        entries: Headers paired with their data blocks, plus headerless blocks

    Example:
        >>> reader = TapReader.from_file("game.tap")
        >>> for entry in reader.iter_headers():
        ...     print(entry.index, entry.name, entry.datatype_name)
    """
    # Raw TAP data (private, not exposed in repr)
    data: bytes = field(repr=False)

    strict: bool = False

    blocks: list[RawBlock] = field(default_factory=list)

    entries: list[TapEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Parse the tape data after initialization."""
        self._parse()

    @classmethod
    def from_file(cls, filepath: Union[str, Path], strict: bool = False) -> "TapReader":
        """
        Create a TapReader from a file path.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MalformedStreamError: If the tape is truncated
        """
        filepath = Path(filepath)
        return cls(data=filepath.read_bytes(), strict=strict)

    @classmethod
    def from_bytes(cls, data: bytes, strict: bool = False) -> "TapReader":
        """Create a TapReader from raw TAP bytes."""
        return cls(data=bytes(data), strict=strict)

    def _parse(self) -> None:
        """Read all blocks and build the entry list."""
        try:
            self.blocks = list(iter_blocks(io.BytesIO(self.data), strict=self.strict))
        except ZXTapError as e:
            logger.error(f"Failed to parse TAP: {e}")
            raise
        self.entries = self._pair_blocks(self.blocks)
        logger.debug(
            f"Parsed {len(self.blocks)} blocks, {len(self.get_headers())} headers"
        )

    @staticmethod
    def _pair_blocks(blocks: list[RawBlock]) -> list[TapEntry]:
        """Pair every header with the non-header block that follows it."""
        entries: list[TapEntry] = []
        header_count = 0
        position = 0

        while position < len(blocks):
            block = blocks[position]
            header = try_parse_header(block)
            position += 1

            if header is None:
                entries.append(TapEntry(data_block=block))
                continue

            header_count += 1
            entry = TapEntry(index=header_count, header=header, header_block=block)
            if position < len(blocks) and try_parse_header(blocks[position]) is None:
                entry.data_block = blocks[position]
                position += 1
            else:
                logger.warning(f"Header {header_count} '{header.filename}' has no data block")

            if entry.has_length_mismatch:
                logger.warning(
                    f"Header {header_count} '{header.filename}' declares {header.length} bytes, "
                    f"data block has {len(entry.payload)}"
                )
            entries.append(entry)

        return entries

    # =========================================================================
    # Public Query Methods
    # =========================================================================

    def get_headers(self) -> list[TapEntry]:
        """All entries that have a header, in tape order."""
        return [entry for entry in self.entries if entry.header is not None]

    def iter_headers(self) -> Iterator[TapEntry]:
        for entry in self.entries:
            if entry.header is not None:
                yield entry

    def list_names(self) -> list[str]:
        """Filenames of all headers."""
        return [entry.name for entry in self.iter_headers()]

    def find_entry(
        self,
        name: Optional[str] = None,
        index: Optional[int] = None,
        datatype: int = DataType.ANY,
    ) -> TapEntry:
        """
        Find the first entry matching the selection.

        Args:
            name: Exact (trimmed) filename to match
            index: 1-based header index
            datatype: Used only when neither name nor index is given

        Returns:
            The first matching TapEntry

        Raises:
            EntryNotFoundError: If nothing matches
        """
        for entry in self.iter_headers():
            if entry.matches(name=name, index=index, datatype=datatype):
                return entry

        criteria = []
        if name is not None:
            criteria.append(f"name '{name}'")
        if index is not None:
            criteria.append(f"index {index}")
        if not criteria:
            criteria.append(f"type {DataType.get_name(datatype)}")
        raise EntryNotFoundError(f"No block found with {' and '.join(criteria)}")

    def get_info(self) -> dict:
        """Summary information about the tape."""
        headers = self.get_headers()
        return {
            "total_bytes": len(self.data),
            "block_count": len(self.blocks),
            "header_count": len(headers),
            "headerless_count": sum(1 for e in self.entries if e.is_headerless),
            "bad_checksums": sum(1 for b in self.blocks if not b.is_checksum_valid),
            "basic_count": sum(1 for e in headers if e.header.datatype == DataType.BASIC),
            "code_count": sum(1 for e in headers if e.header.datatype == DataType.CODE),
        }
