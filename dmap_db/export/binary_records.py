"""
Fixed-layout ZIP records.

Builds the three binary structures a store-only ZIP archive needs:

    - local file header          (30 bytes + name)
    - central directory header   (46 bytes + name)
    - end of central directory   (22 bytes)

All integers are little-endian. Entries are never compressed (method 0)
and names are flagged as UTF-8 (general purpose bit 11). ZIP64 is not
supported, so any field that overflows its classic width raises
ArchiveError.
"""

from __future__ import annotations

import struct
from datetime import datetime
from typing import Optional, Tuple

from ..errors import ArchiveError


LOCAL_FILE_HEADER_SIGNATURE = 0x04034B50
CENTRAL_DIRECTORY_SIGNATURE = 0x02014B50
END_OF_CENTRAL_DIRECTORY_SIGNATURE = 0x06054B50

VERSION = 20
FLAG_UTF8 = 0x0800
METHOD_STORED = 0

ZIP_EPOCH_YEAR = 1980
ZIP_LAST_YEAR = ZIP_EPOCH_YEAR + 127

_UINT16_MAX = 0xFFFF
_UINT32_MAX = 0xFFFFFFFF

# signature, version needed, flags, method, time, date, crc,
# compressed size, uncompressed size, name length, extra length
_LOCAL_STRUCT = struct.Struct("<IHHHHHIIIHH")

# signature, version made by, version needed, flags, method, time, date,
# crc, compressed size, uncompressed size, name length, extra length,
# comment length, disk number start, internal attrs, external attrs,
# local header offset
_CENTRAL_STRUCT = struct.Struct("<IHHHHHHIIIHHHHHII")

# signature, this disk, central directory disk, entries on this disk,
# total entries, central directory size, central directory offset,
# comment length
_END_STRUCT = struct.Struct("<IHHHHIIH")

LOCAL_HEADER_SIZE = _LOCAL_STRUCT.size
CENTRAL_HEADER_SIZE = _CENTRAL_STRUCT.size
END_RECORD_SIZE = _END_STRUCT.size


# ----------------------------------------------------------------------
# DOS date/time
# ----------------------------------------------------------------------

def to_dos_datetime(dt: Optional[datetime] = None) -> Tuple[int, int]:
    """
    Pack a timestamp into MS-DOS (time, date) words.

    Aware datetimes are converted to local time first; naive ones are
    taken as local already. Years before 1980 clamp to 1980; years after
    2107 do not fit the date word and raise ArchiveError. Seconds are
    stored at 2-second resolution.

        time = (hour << 11) | (minute << 5) | (second // 2)
        date = ((year - 1980) << 9) | (month << 5) | day
    """
    if dt is None:
        dt = datetime.now()
    elif dt.tzinfo is not None:
        dt = dt.astimezone()

    if dt.year > ZIP_LAST_YEAR:
        raise ArchiveError(f"Year {dt.year} is past the last DOS date year {ZIP_LAST_YEAR}")
    year = max(ZIP_EPOCH_YEAR, dt.year)
    dos_time = (dt.hour << 11) | (dt.minute << 5) | (dt.second // 2)
    dos_date = ((year - ZIP_EPOCH_YEAR) << 9) | (dt.month << 5) | dt.day
    return dos_time, dos_date


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------

def _check(value: int, limit: int, what: str) -> None:
    if value < 0 or value > limit:
        raise ArchiveError(f"{what} {value} does not fit the ZIP header field")


def local_file_header(
    name_bytes: bytes,
    crc: int,
    size: int,
    dos_time: int,
    dos_date: int,
) -> bytes:
    """
    Local file header followed by the encoded name.
    Compressed and uncompressed sizes are both `size` (stored entries).
    """
    _check(len(name_bytes), _UINT16_MAX, "File name length")
    _check(size, _UINT32_MAX, "Entry size")
    return _LOCAL_STRUCT.pack(
        LOCAL_FILE_HEADER_SIGNATURE,
        VERSION,
        FLAG_UTF8,
        METHOD_STORED,
        dos_time,
        dos_date,
        crc & _UINT32_MAX,
        size,
        size,
        len(name_bytes),
        0,
    ) + name_bytes


def central_directory_header(
    name_bytes: bytes,
    crc: int,
    size: int,
    dos_time: int,
    dos_date: int,
    offset: int,
) -> bytes:
    """
    Central directory header followed by the encoded name.
    `offset` is the position of the entry's local header from the
    start of the archive.
    """
    _check(len(name_bytes), _UINT16_MAX, "File name length")
    _check(size, _UINT32_MAX, "Entry size")
    _check(offset, _UINT32_MAX, "Local header offset")
    return _CENTRAL_STRUCT.pack(
        CENTRAL_DIRECTORY_SIGNATURE,
        VERSION,
        VERSION,
        FLAG_UTF8,
        METHOD_STORED,
        dos_time,
        dos_date,
        crc & _UINT32_MAX,
        size,
        size,
        len(name_bytes),
        0,
        0,
        0,
        0,
        0,
        offset,
    ) + name_bytes


def end_of_central_directory(
    entry_count: int,
    central_size: int,
    central_offset: int,
) -> bytes:
    """
    Single-disk end record; the entry count appears twice.
    """
    _check(entry_count, _UINT16_MAX, "Entry count")
    _check(central_size, _UINT32_MAX, "Central directory size")
    _check(central_offset, _UINT32_MAX, "Central directory offset")
    return _END_STRUCT.pack(
        END_OF_CENTRAL_DIRECTORY_SIGNATURE,
        0,
        0,
        entry_count,
        entry_count,
        central_size,
        central_offset,
        0,
    )


__all__ = [
    "LOCAL_FILE_HEADER_SIGNATURE",
    "CENTRAL_DIRECTORY_SIGNATURE",
    "END_OF_CENTRAL_DIRECTORY_SIGNATURE",
    "FLAG_UTF8",
    "METHOD_STORED",
    "LOCAL_HEADER_SIZE",
    "CENTRAL_HEADER_SIZE",
    "END_RECORD_SIZE",
    "to_dos_datetime",
    "local_file_header",
    "central_directory_header",
    "end_of_central_directory",
]
