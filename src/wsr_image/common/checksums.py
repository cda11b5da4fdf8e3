"""Checksum utilities for output integrity verification."""

import zlib
from pathlib import Path

CRC32_CHUNK_SIZE = 65536  # 64 KB chunks


def compute_crc32(file_path: Path) -> int:
    """
    Compute CRC32 checksum of entire file.

    Args:
        file_path: Path to the file

    Returns:
        CRC32 checksum as unsigned 32-bit integer

    Raises:
        OSError: If file cannot be read
    """
    crc = 0

    with open(file_path, 'rb') as f:
        while chunk := f.read(CRC32_CHUNK_SIZE):
            crc = zlib.crc32(chunk, crc)

    return crc & 0xFFFFFFFF


def compute_crc32_bytes(data: bytes) -> int:
    """CRC32 of an in-memory buffer, as unsigned 32-bit integer."""
    return zlib.crc32(data) & 0xFFFFFFFF
