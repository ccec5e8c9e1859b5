"""
dmap_db.export

Project export for DMAP DB.

This package provides:

    - binary_records    : fixed-layout ZIP headers and DOS timestamps
    - ArchiveEntry / create_zip / ZipStreamWriter:
          store-only ZIP construction from in-memory payloads

    - ExportMetadata    : the "<basename>_metadata.json" document
    - normalize_basename: document key -> export file basename

    - ProjectExporter   : bundled / sequential export driver
    - ProgressEvent / ExportResult: structured progress and outcome
"""

from . import binary_records
from .zip_stream import ArchiveEntry, ZipStreamWriter, create_zip
from .manifest import (
    ExportMetadata,
    PhotoSummary,
    archive_file_name,
    metadata_file_name,
    normalize_basename,
)
from .events import BUNDLED, SEQUENTIAL, ExportResult, ProgressEvent
from .exporter import AUTO, ProjectExporter

__all__ = [
    # ZIP construction
    "binary_records",
    "ArchiveEntry",
    "ZipStreamWriter",
    "create_zip",

    # Metadata document
    "ExportMetadata",
    "PhotoSummary",
    "archive_file_name",
    "metadata_file_name",
    "normalize_basename",

    # Orchestration
    "AUTO",
    "BUNDLED",
    "SEQUENTIAL",
    "ExportResult",
    "ProgressEvent",
    "ProjectExporter",
]
