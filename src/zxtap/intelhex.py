"""
Intel HEX Output
================

Renders binary data as Intel HEX records, used to export CODE blocks at
their load address.

Record Format
-------------
    :LLAAAATTDD...CC

    LL    number of data bytes
    AAAA  16-bit load address (big-endian)
    TT    record type (00 = data, 01 = end of file)
    DD    data bytes
    CC    two's complement of the sum of all preceding byte values

Only the 16-bit address space is supported (no extended address records),
which covers the whole Spectrum memory map.
"""

from typing import Iterator

from zxtap.errors import ExportError

DATA_RECORD = 0x00
EOF_RECORD = 0x01

DEFAULT_RECORD_SIZE = 16
MAX_RECORD_SIZE = 255


def record_checksum(record_type: int, address: int, data: bytes) -> int:
    """Checksum byte of a record."""
    total = len(data) + (address >> 8) + (address & 0xFF) + record_type + sum(data)
    return (-total) & 0xFF


def format_record(record_type: int, address: int, data: bytes = b"") -> str:
    """Format a single record line (without newline)."""
    checksum = record_checksum(record_type, address, data)
    return f":{len(data):02X}{address:04X}{record_type:02X}{data.hex().upper()}{checksum:02X}"


def iter_hex_records(
    address: int,
    data: bytes,
    record_size: int = DEFAULT_RECORD_SIZE,
) -> Iterator[str]:
    """
    Yield the data records for `data` loaded at `address`, then the EOF record.

    Raises:
        ExportError: If the data does not fit below 0x10000 or the record
            size is invalid
    """
    if not 1 <= record_size <= MAX_RECORD_SIZE:
        raise ExportError(f"Invalid HEX record size {record_size} (valid: 1-{MAX_RECORD_SIZE})")
    if address < 0 or address + len(data) > 0x10000:
        raise ExportError(
            f"{len(data)} bytes at 0x{address:04X} do not fit in the 16-bit address space"
        )

    for start in range(0, len(data), record_size):
        chunk = bytes(data[start:start + record_size])
        yield format_record(DATA_RECORD, address + start, chunk)
    yield format_record(EOF_RECORD, 0)


def to_intel_hex(address: int, data: bytes, record_size: int = DEFAULT_RECORD_SIZE) -> str:
    """Render data as a complete Intel HEX document (newline terminated)."""
    return "\n".join(iter_hex_records(address, data, record_size)) + "\n"
