"""
TAP Block Checksums
===================

Every TAP block ends with a single checksum byte computed by the ROM
SAVE routine as the XOR of the flag (tag) byte and every payload byte.

    checksum = tag ^ payload[0] ^ payload[1] ^ ... ^ payload[n-1]

XOR-ing the whole block including the checksum byte therefore yields 0
for an intact block.

Checksums are advisory here: real-world tape dumps frequently carry
damaged blocks that still load (or partially load) on an emulator, so the
reader reports mismatches instead of rejecting the block unless strict
mode is requested.
"""

from dataclasses import dataclass
from functools import reduce
from operator import xor


@dataclass
class ChecksumAnalysis:
    """
    Result of checking a block checksum.

    Attributes:
        is_valid: True if the stored checksum matches the calculated one
        stored_checksum: The checksum byte read from the stream
        calculated_checksum: XOR of tag and payload
        message: Human-readable explanation of the analysis
    """
    is_valid: bool
    stored_checksum: int
    calculated_checksum: int
    message: str = ""


def calculate_checksum(tag: int, payload: bytes) -> int:
    """
    Calculate the checksum byte for a block.

    Args:
        tag: The block tag (flag) byte
        payload: The block payload bytes

    Returns:
        The 8-bit XOR checksum

    Example:
        >>> calculate_checksum(0xFF, bytes([0x01, 0x02]))
        252
    """
    return reduce(xor, payload, tag & 0xFF)


def verify_checksum(tag: int, payload: bytes, stored: int) -> bool:
    """Return True if `stored` is the correct checksum for tag + payload."""
    return calculate_checksum(tag, payload) == (stored & 0xFF)


def analyze_checksum(tag: int, payload: bytes, stored: int) -> ChecksumAnalysis:
    """
    Compare a stored checksum against the calculated one.

    Args:
        tag: The block tag byte
        payload: The block payload bytes
        stored: The checksum byte read from the stream

    Returns:
        ChecksumAnalysis describing the outcome
    """
    calculated = calculate_checksum(tag, payload)
    if calculated == stored:
        return ChecksumAnalysis(
            is_valid=True,
            stored_checksum=stored,
            calculated_checksum=calculated,
            message="checksum OK",
        )
    return ChecksumAnalysis(
        is_valid=False,
        stored_checksum=stored,
        calculated_checksum=calculated,
        message=f"stored 0x{stored:02X}, calculated 0x{calculated:02X}",
    )
