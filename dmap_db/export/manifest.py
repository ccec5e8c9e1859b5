"""
Export metadata document.

Every export carries one JSON document describing the project and its
photos, named "<basename>_metadata.json":

    {
      "dxfFile": "site-a.dxf",
      "photos": [
        {"id": "...", "fileName": "...",
         "position": {"x": 1.0, "y": 2.0},
         "size": {"width": 3.0, "height": 4.0},
         "memo": "", "uploaded": true}
      ],
      "texts": [...],
      "lastModified": "2024-05-01T12:00:00.000Z"
    }

Design constraints:

    - texts are passed through exactly as stored
    - every photo of the project is summarized, including ones whose
      payload is not shipped
    - stable, indented UTF-8 JSON
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..registry.models import PhotoRecord, ProjectRecord
from ..utils.json_io import dump_json_bytes
from ..utils.timestamps import now_iso

DXF_SUFFIX = ".dxf"
FALLBACK_BASENAME = "photo"


class Position(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None


class Size(BaseModel):
    width: Optional[float] = None
    height: Optional[float] = None


class PhotoSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_name: str = Field(default="", alias="fileName")
    position: Position = Field(default_factory=Position)
    size: Size = Field(default_factory=Size)
    memo: str = ""
    uploaded: bool = True

    @classmethod
    def from_record(cls, photo: PhotoRecord) -> "PhotoSummary":
        return cls(
            id=photo.id,
            file_name=photo.file_name,
            position=Position(x=photo.x, y=photo.y),
            size=Size(width=photo.width, height=photo.height),
            memo=photo.memo or "",
        )


class ExportMetadata(BaseModel):
    """
    The metadata document shipped with every export.
    """

    model_config = ConfigDict(populate_by_name=True)

    dxf_file: str = Field(alias="dxfFile")
    photos: List[PhotoSummary] = Field(default_factory=list)
    texts: List[Any] = Field(default_factory=list)
    last_modified: str = Field(default_factory=now_iso, alias="lastModified")

    @classmethod
    def build(
        cls,
        document_key: str,
        project: Optional[ProjectRecord],
        photos: Sequence[PhotoRecord],
    ) -> "ExportMetadata":
        """
        Assemble the document; a missing project contributes no texts
        and the current time as lastModified.
        """
        return cls(
            dxf_file=document_key,
            photos=[PhotoSummary.from_record(p) for p in photos],
            texts=list(project.texts) if project else [],
            last_modified=(project.last_modified if project and project.last_modified else now_iso()),
        )

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    def to_json_bytes(self) -> bytes:
        return dump_json_bytes(self.to_dict(), indent=2)


def normalize_basename(document_key: Optional[str]) -> str:
    """
    Strip a trailing ".dxf" (any case) from the document key; "photo"
    when the key is empty.
    """
    if not document_key:
        return FALLBACK_BASENAME
    if document_key.lower().endswith(DXF_SUFFIX):
        return document_key[: -len(DXF_SUFFIX)]
    return document_key


def metadata_file_name(basename: str) -> str:
    return f"{basename}_metadata.json"


def archive_file_name(basename: str) -> str:
    return f"{basename}_export.zip"


__all__ = [
    "Position",
    "Size",
    "PhotoSummary",
    "ExportMetadata",
    "normalize_basename",
    "metadata_file_name",
    "archive_file_name",
]
