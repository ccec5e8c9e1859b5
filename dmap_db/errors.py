"""
Exception types raised by dmap_db.

Not-found conditions are never exceptions: reads return None and
update-by-id operations return False.
"""

from __future__ import annotations

from typing import Optional


class DmapDBError(Exception):
    """Base class for all dmap_db errors."""


class StoreUnavailableError(DmapDBError):
    """The underlying SQLite store could not be opened or initialized."""


class StoreError(DmapDBError, RuntimeError):
    """A statement or transaction against an open store failed."""


class ArchiveError(DmapDBError):
    """
    Archive construction failed.

    Raised for unreadable payloads, duplicate entry names and header
    fields that do not fit the classic (non-ZIP64) record layout.
    """


class ExportError(DmapDBError):
    """
    An export failed outside the recoverable archive step.

    Attributes
    ----------
    phase:
        Which step failed: "load" or "metadata".
    """

    def __init__(self, message: str, phase: str, document_key: Optional[str] = None):
        super().__init__(message)
        self.phase = phase
        self.document_key = document_key

    def __str__(self) -> str:
        base = super().__str__()
        if self.document_key is None:
            return f"[{self.phase}] {base}"
        return f"[{self.phase}] {self.document_key!r}: {base}"


class InvalidDataURLError(DmapDBError, ValueError):
    """A data URL could not be decoded."""


__all__ = [
    "DmapDBError",
    "StoreUnavailableError",
    "StoreError",
    "ArchiveError",
    "ExportError",
    "InvalidDataURLError",
]
