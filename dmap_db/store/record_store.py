"""
RecordStore - asynchronous keyed storage for projects and photos.

Every public coroutine obtains the shared StoreHandle from its
StoreProvider and runs the blocking registry call in a worker thread
via asyncio.to_thread. Each mutating call is one transaction; nothing
spans two calls.

Read misses return None, update-by-id misses return False.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, TypeVar, Union

from .handle import StoreHandle, StoreProvider
from ..registry.models import PhotoInput, PhotoRecord, ProjectRecord
from ..utils.data_url import encode_data_url
from ..utils.timestamps import TimestampLike, now_iso, to_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")

PhotoLike = Union[PhotoInput, Mapping[str, Any]]


class RecordStore:
    """
    Async facade over the project and photo registries.

    Parameters
    ----------
    provider:
        StoreProvider that opens the database on first use.
    """

    def __init__(self, provider: StoreProvider):
        self.provider = provider

    @classmethod
    def for_sqlite(cls, db_path: str) -> "RecordStore":
        return cls(StoreProvider.for_sqlite(db_path))

    async def _run(self, fn: Callable[[StoreHandle], T]) -> T:
        handle = await self.provider.get()
        return await asyncio.to_thread(fn, handle)

    async def init(self) -> bool:
        """
        Open the store now instead of on the first operation.
        """
        await self.provider.get()
        return True

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def save_project(
        self,
        document_key: str,
        texts: Optional[Sequence[Any]] = None,
        last_modified: Optional[TimestampLike] = None,
    ) -> bool:
        """
        Upsert the project for document_key.

        texts defaults to an empty list, last_modified to the current time.
        """
        record = ProjectRecord(
            document_key=document_key,
            texts=list(texts or []),
            last_modified=to_iso(last_modified) if last_modified else now_iso(),
        )
        await self._run(lambda h: h.projects.upsert(record))
        return True

    async def load_project(self, document_key: str) -> Optional[ProjectRecord]:
        return await self._run(lambda h: h.projects.get(document_key))

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    async def save_photo(self, document_key: str, photo: PhotoLike) -> bool:
        """
        Upsert a photo under document_key.

        The id is coerced to its string form. created_at is fixed by the
        first save (the caller-supplied value, else the current time) and
        later saves leave it alone; updated_at is always refreshed.
        """
        data = photo if isinstance(photo, PhotoInput) else PhotoInput.model_validate(dict(photo))
        now = now_iso()
        record = PhotoRecord(
            id=data.id,
            document_key=document_key,
            file_name=data.file_name,
            memo=data.memo,
            x=data.x,
            y=data.y,
            width=data.width,
            height=data.height,
            blob=data.blob,
            mime_type=data.mime_type,
            created_at=data.created_at or now,
            updated_at=now,
        )
        await self._run(lambda h: h.photos.upsert(record))
        return True

    async def load_photos(self, document_key: str) -> List[PhotoRecord]:
        return await self._run(lambda h: h.photos.list_for_document(document_key))

    async def get_photo_by_id(self, photo_id: Any) -> Optional[PhotoRecord]:
        key = str(photo_id)
        return await self._run(lambda h: h.photos.get(key))

    async def update_photo_memo(self, photo_id: Any, memo: Optional[str]) -> bool:
        """
        Replace a photo's memo and refresh its updated_at.

        Returns False, with no write, when the photo does not exist.
        """
        key = str(photo_id)
        updated_at = now_iso()
        result = await self._run(lambda h: h.photos.update_memo(key, memo or "", updated_at))
        return result is not None

    async def delete_photo(self, photo_id: Any) -> bool:
        """
        Delete a photo. Deleting an unknown id is not an error.
        """
        key = str(photo_id)
        await self._run(lambda h: h.photos.delete(key))
        return True

    async def delete_photos_by_date_range(
        self,
        document_key: str,
        start_ms: int,
        end_ms: int,
    ) -> List[str]:
        """
        Delete the photos of document_key created inside [start_ms, end_ms].

        Returns the ids removed; an empty list means nothing matched and
        nothing was written.
        """
        deleted = await self._run(
            lambda h: h.photos.delete_created_between(document_key, start_ms, end_ms)
        )
        if deleted:
            logger.info("Deleted %d photo(s) from %r by date range", len(deleted), document_key)
        return deleted

    async def get_photo_data_url(self, photo_id: Any) -> Optional[str]:
        """
        Return a stored photo as a base64 data URL, or None when the
        photo is missing or has no payload.
        """
        record = await self.get_photo_by_id(photo_id)
        if record is None or not record.blob:
            return None
        return encode_data_url(record.blob, record.mime_type)


__all__ = [
    "RecordStore",
    "PhotoLike",
]
