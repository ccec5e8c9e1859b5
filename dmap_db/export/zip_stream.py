"""
Store-only ZIP writer for DMAP exports.

create_zip() turns an ordered list of named in-memory payloads into one
ZIP archive. Entries keep their input order, are stored uncompressed,
and carry UTF-8 names with the matching flag bit so unzip tools show
Korean, Japanese, etc. file names correctly.

Layout:

    [local header + payload] * N
    [central directory header] * N
    end of central directory record

Every payload is read fully before its header is written, since the
CRC and size must be known up front. If any payload cannot be read the
whole call fails with ArchiveError and nothing is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, List, Optional, Sequence, Union

from . import binary_records as records
from ..errors import ArchiveError
from ..hashing import crc32

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview, BinaryIO, Callable[[], bytes]]


@dataclass(frozen=True)
class ArchiveEntry:
    """
    One named payload destined for the archive.

    Parameters
    ----------
    name:
        Member name, encoded as UTF-8.
    payload:
        Bytes, a readable binary file object, or a zero-argument callable
        returning bytes.
    modified_at:
        Timestamp for the DOS time/date fields; None means "now".
    """

    name: str
    payload: Payload
    modified_at: Optional[datetime] = None


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------

def _read_payload(entry: ArchiveEntry) -> bytes:
    payload = entry.payload
    try:
        if isinstance(payload, (bytes, bytearray, memoryview)):
            return bytes(payload)
        if hasattr(payload, "read"):
            data = payload.read()
        elif callable(payload):
            data = payload()
        else:
            raise TypeError(f"unsupported payload type {type(payload).__name__}")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"payload produced {type(data).__name__}, expected bytes")
        return bytes(data)
    except ArchiveError:
        raise
    except Exception as e:
        raise ArchiveError(f"Could not read payload for {entry.name!r}: {e}") from e


def _check_names(entries: Sequence[ArchiveEntry]) -> None:
    seen = set()
    for entry in entries:
        if not entry.name:
            raise ArchiveError("Archive entry name must not be empty")
        if entry.name in seen:
            raise ArchiveError(f"Duplicate archive entry name: {entry.name!r}")
        seen.add(entry.name)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def create_zip(entries: Iterable[ArchiveEntry]) -> bytes:
    """
    Build a complete store-only ZIP archive in memory.

    Raises
    ------
    ArchiveError
        On duplicate or empty names, unreadable payloads, or sizes and
        offsets beyond the classic 32-bit ZIP limits.
    """
    entries = list(entries)
    _check_names(entries)

    file_parts: List[bytes] = []
    central_parts: List[bytes] = []
    offset = 0

    for entry in entries:
        name_bytes = entry.name.encode("utf-8")
        data = _read_payload(entry)
        crc = crc32(data)
        size = len(data)
        dos_time, dos_date = records.to_dos_datetime(entry.modified_at)

        local = records.local_file_header(name_bytes, crc, size, dos_time, dos_date)
        file_parts.append(local)
        file_parts.append(data)

        central_parts.append(
            records.central_directory_header(name_bytes, crc, size, dos_time, dos_date, offset)
        )

        offset += len(local) + size

    central_size = sum(len(part) for part in central_parts)
    end = records.end_of_central_directory(len(entries), central_size, offset)

    archive = b"".join(file_parts + central_parts + [end])
    logger.debug("Built ZIP with %d entries (%d bytes)", len(entries), len(archive))
    return archive


class ZipStreamWriter:
    """
    Collects ArchiveEntry objects and writes them out as one archive.

    Parameters
    ----------
    entries :
        Optional initial entries, kept in order.
    """

    def __init__(self, entries: Optional[Iterable[ArchiveEntry]] = None) -> None:
        self.entries: List[ArchiveEntry] = list(entries or [])

    def add(self, name: str, payload: Payload, modified_at: Optional[datetime] = None) -> None:
        self.entries.append(ArchiveEntry(name=name, payload=payload, modified_at=modified_at))

    def to_bytes(self) -> bytes:
        return create_zip(self.entries)

    def write_to_path(self, zip_path: Union[str, Path]) -> Path:
        """
        Write the ZIP archive to a file path.

        The archive is fully assembled before the file is opened, so a
        failed build never leaves a truncated file behind.
        """
        zip_path = Path(zip_path)
        data = self.to_bytes()
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        zip_path.write_bytes(data)
        return zip_path

    def write_to_fileobj(self, fp: BinaryIO) -> None:
        """
        Write the ZIP archive into an open file-like object.

        The caller is responsible for opening and closing the file.
        """
        fp.write(self.to_bytes())


__all__ = [
    "ArchiveEntry",
    "Payload",
    "create_zip",
    "ZipStreamWriter",
]
