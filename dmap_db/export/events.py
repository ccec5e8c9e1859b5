"""
Structured export events
========================

Payloads produced while an export runs:

    - ProgressEvent : emitted before each delivery in sequential mode
    - ExportResult  : the single terminal result of an export call

Both render to JSON-compatible dicts for UI streams and logs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


BUNDLED = "bundled"
SEQUENTIAL = "sequential"


def _ts() -> float:
    """Return a UNIX timestamp for event emission."""
    return time.time()


@dataclass(frozen=True)
class ProgressEvent:
    """
    One delivery about to start.

    current is 1-indexed; total counts the metadata file plus every
    photo that will be delivered.
    """

    current: int
    total: int
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "export_progress",
            "current": self.current,
            "total": self.total,
            "name": self.name,
            "ts": _ts(),
        }


ProgressCallback = Callable[[int, int, str], Any]


@dataclass
class ExportResult:
    """
    Outcome of ProjectExporter.export_project.

    Attributes
    ----------
    mode:
        "bundled" when one ZIP was delivered, "sequential" otherwise.
    file_name:
        Archive name in bundled mode, None in sequential mode.
    total_files:
        Number of deliveries made.
    delivered:
        Names handed to the sink, in delivery order.
    fallback:
        True when sequential delivery ran because the archive build failed.
    error:
        Message of the archive failure that triggered the fallback.
    """

    success: bool
    mode: str
    document_key: str
    file_name: Optional[str] = None
    total_files: int = 0
    total_bytes: int = 0
    delivered: List[str] = field(default_factory=list)
    fallback: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "type": self.mode,
            "documentKey": self.document_key,
            "fileName": self.file_name,
            "totalFiles": self.total_files,
            "totalBytes": self.total_bytes,
            "delivered": list(self.delivered),
            "fallback": self.fallback,
            "error": self.error,
        }


__all__ = [
    "BUNDLED",
    "SEQUENTIAL",
    "ProgressEvent",
    "ProgressCallback",
    "ExportResult",
]
