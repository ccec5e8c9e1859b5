from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.data_url import DEFAULT_MIME_TYPE
from ..utils.timestamps import now_iso, to_epoch_ms, to_iso


# ----------------------------------------------------------------------
# Project
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectRecord:
    document_key: str
    texts: List[Any] = field(default_factory=list)
    last_modified: str = field(default_factory=now_iso)


# ----------------------------------------------------------------------
# Photo
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class PhotoRecord:
    id: str
    document_key: str

    file_name: str = ""
    memo: str = ""

    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    blob: Optional[bytes] = None
    mime_type: str = DEFAULT_MIME_TYPE

    created_at: Optional[str] = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @property
    def size(self) -> int:
        """Payload size in bytes (0 when there is no blob)."""
        return len(self.blob) if self.blob is not None else 0

    @property
    def created_at_ms(self) -> Optional[int]:
        if not self.created_at:
            return None
        return to_epoch_ms(self.created_at)

    @property
    def exportable(self) -> bool:
        """True when the photo can become its own export file."""
        return bool(self.blob) and bool(self.file_name)


# ----------------------------------------------------------------------
# Photo input schema
# ----------------------------------------------------------------------

class PhotoInput(BaseModel):
    """
    Caller-supplied photo fields accepted by RecordStore.save_photo.

    Accepts both snake_case and the camelCase keys used by the capture
    UI (fileName, createdAt, mimeType). Defaults:

        file_name  ""
        memo       ""
        x, y, width, height  None
        blob       None
        mime_type  "application/octet-stream"
        created_at None (the store assigns the current time)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    file_name: str = Field(default="", alias="fileName")
    memo: str = ""
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    blob: Optional[bytes] = None
    mime_type: str = Field(default=DEFAULT_MIME_TYPE, alias="mimeType")
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        if v is None:
            raise ValueError("photo id is required")
        return str(v)

    @field_validator("file_name", "memo", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("mime_type", mode="before")
    @classmethod
    def _default_mime(cls, v: Any) -> Any:
        return v or DEFAULT_MIME_TYPE

    @field_validator("blob", mode="before")
    @classmethod
    def _coerce_blob(cls, v: Any) -> Any:
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        return v

    @field_validator("created_at", mode="before")
    @classmethod
    def _normalize_created_at(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return to_iso(v)
