"""
Tape Inspection and Extraction
==============================

High-level operations built on the TAP reader, the BASIC detokenizer and
the Intel HEX emitter. These are what the zxtapi commands call.

Operations
----------
- format_block_list(): table of headers and data blocks (list/detail)
- select_entry(): find a header by name, 1-based index or datatype and
  check that it has the datatype the operation needs
- render_basic(): detokenized listing of a BASIC entry
- render_code_hex(): Intel HEX for a CODE entry
- extract_entries(): write entries to files (.bas, .hex, .bin)

Example
-------
    >>> reader = TapReader.from_file("game.tap")
    >>> entry = select_entry(reader, datatype=DataType.BASIC)
    >>> print(render_basic(entry))
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import re

from zxtap.basic import detokenize_program, format_program
from zxtap.errors import ExportError, TapError, UnsupportedDataTypeError, ZXTapError
from zxtap.intelhex import DEFAULT_RECORD_SIZE, to_intel_hex
from zxtap.tap import DataType, RawBlock, TapEntry, TapReader

# Logger for this module
logger = logging.getLogger(__name__)

LIST_HEADER = "IDX: name       : type          : Length : Param1 : Param2"
LIST_RULE = "---:------------:---------------:--------:--------:--------"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


# =============================================================================
# Listing
# =============================================================================

def format_block_list(reader: TapReader, detail: bool = False) -> list[str]:
    """
    Format the contents of a tape as table rows.

    Args:
        reader: The parsed tape
        detail: Add block offsets, checksum status and header semantics

    Returns:
        Lines of text, including the table header
    """
    rows = [LIST_HEADER, LIST_RULE]
    data_count = 0

    for entry in reader.entries:
        if entry.header is not None:
            header = entry.header
            name = f'"{header.filename}"'
            rows.append(
                f" {entry.index:02d}:{name:<12}:{header.datatype_name:<15}"
                f" {header.length:6d}   {header.param1:6d}   {header.param2:6d}"
            )
            if detail:
                rows.extend(_detail_rows(entry))
            data_count = 0

        if entry.data_block is not None:
            label = f"//data{data_count}" if entry.header is not None else "//headerless"
            size = len(entry.data_block.payload)
            rows.append(f"    {'':12} {label:<15} {size:6d}")
            if detail:
                rows.append(f"    {'':12}   {_block_status(entry.data_block)}")
            data_count += 1

    return rows


def _block_status(block: RawBlock) -> str:
    status = "OK" if block.is_checksum_valid else f"BAD (calculated 0x{block.calculated_checksum:02X})"
    return (
        f"offset {block.offset}, tag 0x{block.kind:02X}, "
        f"checksum 0x{block.checksum:02X} {status}"
    )


def _detail_rows(entry: TapEntry) -> list[str]:
    rows = [f"    {'':12}   {entry.header.describe_params()}"]
    if entry.header_block is not None:
        rows.append(f"    {'':12}   {_block_status(entry.header_block)}")
    if entry.data_block is None:
        rows.append(f"    {'':12}   no data block")
    elif entry.has_length_mismatch:
        rows.append(
            f"    {'':12}   length mismatch: header {entry.header.length}, "
            f"block {len(entry.payload)}"
        )
    return rows


# =============================================================================
# Selection and Rendering
# =============================================================================

def select_entry(
    reader: TapReader,
    name: Optional[str] = None,
    index: Optional[int] = None,
    datatype: int = DataType.ANY,
) -> TapEntry:
    """
    Find an entry and check it can be used as `datatype`.

    Raises:
        EntryNotFoundError: If no header matches
        UnsupportedDataTypeError: If the matched header has another datatype
        TapError: If the header has no data block
    """
    entry = reader.find_entry(name=name, index=index, datatype=datatype)

    if datatype != DataType.ANY and entry.header.datatype != datatype:
        raise UnsupportedDataTypeError(
            entry.header.datatype_name,
            f"Block {entry.index} '{entry.name}': {DataType.get_name(datatype)} output",
        )
    if entry.data_block is None:
        raise TapError(f"Block {entry.index} '{entry.name}' has no data block")
    return entry


def render_basic(entry: TapEntry) -> str:
    """
    Detokenized listing of a BASIC entry.

    Raises:
        UnsupportedDataTypeError: If the entry is not a BASIC program
        MalformedStreamError: If the program is truncated
    """
    if entry.header is None or entry.header.datatype != DataType.BASIC:
        raise UnsupportedDataTypeError(entry.datatype_name, "BASIC listing")
    lines = detokenize_program(entry.payload)
    logger.debug(f"Decoded {len(lines)} lines from '{entry.name}'")
    return format_program(lines)


def render_code_hex(entry: TapEntry, record_size: int = DEFAULT_RECORD_SIZE) -> str:
    """
    Intel HEX for a CODE entry, loaded at the header's address.

    Raises:
        UnsupportedDataTypeError: If the entry is not a CODE block
        ExportError: If the block does not fit in memory
    """
    if entry.header is None or entry.header.datatype != DataType.CODE:
        raise UnsupportedDataTypeError(entry.datatype_name, "Intel HEX export")
    return to_intel_hex(entry.header.load_address, entry.payload, record_size)


# =============================================================================
# Extraction
# =============================================================================

@dataclass
class ExtractedFile:
    """A file written by extract_entries()."""
    entry: TapEntry
    path: Path
    kind: str


def safe_filename(name: str, fallback: str = "noname") -> str:
    """Make a tape filename usable on the host filesystem."""
    cleaned = _UNSAFE_CHARS.sub("_", name.strip()).strip("._")
    return cleaned or fallback


def _render_entry(entry: TapEntry, record_size: int) -> tuple[str, bytes]:
    """Choose the output format for an entry: (extension, file contents)."""
    datatype = entry.header.datatype if entry.header else None
    if datatype == DataType.BASIC:
        return "bas", (render_basic(entry) + "\n").encode("latin-1")
    if datatype == DataType.CODE:
        return "hex", render_code_hex(entry, record_size).encode("ascii")
    return "bin", entry.payload


def extract_entries(
    reader: TapReader,
    output_dir: Path,
    name: Optional[str] = None,
    index: Optional[int] = None,
    record_size: int = DEFAULT_RECORD_SIZE,
) -> list[ExtractedFile]:
    """
    Write tape entries to files in `output_dir`.

    BASIC programs become .bas listings, CODE blocks .hex files and
    everything else (arrays, headerless blocks) raw .bin payloads. Files
    are named NN_NAME.ext with NN the 1-based header index. An entry that
    fails to decode is written as its raw .bin payload.

    Args:
        reader: The parsed tape
        output_dir: Directory to create and write into
        name: Only extract the header with this filename
        index: Only extract the header with this 1-based index

    Returns:
        The files written

    Raises:
        EntryNotFoundError: If a selection is given and nothing matches
        ExportError: If the directory cannot be created
    """
    if name is not None or index is not None:
        entries = [reader.find_entry(name=name, index=index)]
    else:
        entries = reader.entries

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"Cannot create output directory {output_dir}: {e}") from e

    written: list[ExtractedFile] = []
    headerless = 0
    for entry in entries:
        if entry.data_block is None:
            logger.warning(f"Skipping '{entry.name}': no data block")
            continue

        try:
            extension, contents = _render_entry(entry, record_size)
        except ZXTapError as e:
            logger.warning(f"Cannot decode '{entry.name}' ({e}), writing raw payload")
            extension, contents = "bin", entry.payload
        if entry.header is not None:
            stem = f"{entry.index:02d}_{safe_filename(entry.name)}"
        else:
            headerless += 1
            stem = f"headerless{headerless:02d}"

        path = output_dir / f"{stem}.{extension}"
        path.write_bytes(contents)
        logger.info(f"Extracted {entry.datatype_name} '{entry.name}' to {path}")
        written.append(ExtractedFile(entry=entry, path=path, kind=extension))

    return written
