"""
CRC-32 checksum utilities.

The goal:
    - compute the ISO-3309 / PKZIP CRC-32 used in ZIP headers
    - match zlib.crc32 bit for bit
    - stay pure and deterministic (no I/O, no global mutation after import)

Reflected polynomial 0xEDB88320, initial value and final XOR 0xFFFFFFFF.
The 256-entry lookup table is built once at import time and reused.
"""

from __future__ import annotations

from typing import List


POLYNOMIAL = 0xEDB88320
_MASK = 0xFFFFFFFF


# ----------------------------------------------------------------------
# Internal primitives
# ----------------------------------------------------------------------

def _build_table() -> List[int]:
    """
    Precompute the CRC of every possible byte value.
    """
    table: List[int] = []
    for i in range(256):
        c = i
        for _ in range(8):
            if c & 1:
                c = POLYNOMIAL ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return table


_TABLE = tuple(_build_table())


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def crc32_update(crc: int, data: bytes) -> int:
    """
    Continue a running CRC-32 over another chunk of bytes.

    `crc` is a previously returned checksum (0 to start). Feeding a
    payload in chunks gives the same result as a single call:

        crc32_update(crc32_update(0, a), b) == crc32(a + b)
    """
    table = _TABLE
    c = (crc ^ _MASK) & _MASK
    for byte in data:
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return (c ^ _MASK) & _MASK


def crc32(data: bytes) -> int:
    """
    Compute the CRC-32 of a byte sequence as an unsigned 32-bit integer.

    crc32(b"") == 0
    crc32(b"123456789") == 0xCBF43926
    """
    return crc32_update(0, data)


__all__ = ["POLYNOMIAL", "crc32", "crc32_update"]
