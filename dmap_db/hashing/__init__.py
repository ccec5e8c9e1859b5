"""
dmap_db.hashing

Checksum utilities for DMAP DB.

This package provides:
- crc32:        PKZIP-compatible CRC-32 of a byte sequence
- crc32_update: incremental form for chunked payloads

The export layer uses these to fill the CRC fields of ZIP headers.
"""

from .crc32 import crc32, crc32_update

__all__ = [
    "crc32",
    "crc32_update",
]
