"""Checksum utilities for file integrity verification."""

import logging
import zlib
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)

# Constants for checksum calculation
CRC32_CHUNK_SIZE = 65536  # 64 KB chunks


def compute_crc32(file_path: Path, chunk_size: int = CRC32_CHUNK_SIZE) -> int:
    """
    Compute CRC32 checksum of entire file.

    The file is streamed in chunks of at most ``chunk_size`` bytes, so memory
    use does not grow with file size. The result does not depend on
    ``chunk_size``.

    Args:
        file_path: Path to the file
        chunk_size: Maximum number of bytes read per call

    Returns:
        CRC32 checksum as unsigned 32-bit integer

    Raises:
        ValueError: If chunk_size is smaller than 1
        OSError: If file cannot be read
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")

    crc = 0

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            crc = zlib.crc32(chunk, crc)

    # Return as unsigned 32-bit integer
    return crc & 0xFFFFFFFF


def compute_file_checksum(file_path: Path, buffer_size: int = CRC32_CHUNK_SIZE) -> Tuple[int, bool]:
    """
    Compute CRC32 checksum of a file, reporting failure as a flag.

    An empty file and an unreadable file both produce a checksum of 0, so
    callers must branch on the flag, never on the checksum.

    Args:
        file_path: Path to the file
        buffer_size: Maximum number of bytes read per call

    Returns:
        Tuple of (checksum, ok). ``(0, False)`` when the file cannot be
        opened or read.

    Raises:
        ValueError: If buffer_size is smaller than 1
    """
    try:
        return compute_crc32(file_path, chunk_size=buffer_size), True
    except OSError as e:
        logger.debug(f"Cannot checksum file: {{'path': {str(file_path)!r}, 'error': {str(e)!r}}}")
        return 0, False


def format_checksum(checksum: int) -> str:
    """Render a checksum the way SFV manifests store it (8 uppercase hex digits)."""
    return f"{checksum & 0xFFFFFFFF:08X}"
