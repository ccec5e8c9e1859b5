"""
Project export orchestration.

ProjectExporter reads a project and its photos from the RecordStore and
hands them to a DeliverySink using one of two strategies:

    bundled     one ZIP "<basename>_export.zip" holding the metadata
                document and every photo that has a payload and a name
    sequential  the metadata document first, then each photo as its own
                file, pausing after every delivery

The strategy is chosen from the total photo payload size against
`bundle_threshold_bytes` (10 MiB by default). A failed archive build is
not fatal: the same export is retried sequentially and the result says
so. Store failures surface as ExportError with the failing phase;
sink failures propagate unchanged.

Steps run strictly one after another. There is no cancellation: a
caller that loses interest simply ignores the result.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from .events import BUNDLED, SEQUENTIAL, ExportResult, ProgressCallback, ProgressEvent
from .manifest import (
    ExportMetadata,
    archive_file_name,
    metadata_file_name,
    normalize_basename,
)
from .zip_stream import ZipStreamWriter
from ..config import DEFAULT_BUNDLE_THRESHOLD_BYTES, DEFAULT_DELIVERY_PAUSE
from ..delivery.base import DeliverySink
from ..errors import ExportError
from ..registry.models import PhotoRecord
from ..store.record_store import RecordStore
from ..utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

AUTO = "auto"
MODES = (AUTO, BUNDLED, SEQUENTIAL)

_MIB = 1024 * 1024


class ProjectExporter:
    """
    Export driver bound to a store and a delivery sink.

    Parameters
    ----------
    store:
        RecordStore to read the project from.
    sink:
        Receives the delivered files.
    bundle_threshold_bytes:
        Total payload size up to which a single archive is built.
    delivery_pause:
        Seconds to wait after each sequential delivery.
    """

    def __init__(
        self,
        store: RecordStore,
        sink: DeliverySink,
        *,
        bundle_threshold_bytes: int = DEFAULT_BUNDLE_THRESHOLD_BYTES,
        delivery_pause: float = DEFAULT_DELIVERY_PAUSE,
    ):
        self.store = store
        self.sink = sink
        self.bundle_threshold_bytes = bundle_threshold_bytes
        self.delivery_pause = delivery_pause

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def export_project(
        self,
        document_key: str,
        mode: str = AUTO,
        on_progress: Optional[ProgressCallback] = None,
        progress_queue: Optional[asyncio.Queue] = None,
    ) -> ExportResult:
        """
        Export one project.

        Parameters
        ----------
        document_key:
            Key of the project to export.
        mode:
            "auto" picks by size; "bundled" or "sequential" force a strategy.
        on_progress:
            Optional callable (current, total, name), called before each
            sequential delivery. May be a coroutine function.
        progress_queue:
            Optional asyncio.Queue receiving ProgressEvent objects, then
            None once the export has finished (successfully or not).

        Raises
        ------
        ValueError
            For an unknown mode.
        ExportError
            If the project cannot be read or its metadata built.
        """
        try:
            if mode not in MODES:
                raise ValueError(f"Unknown export mode {mode!r}; expected one of {MODES}")
            return await self._export(document_key, mode, on_progress, progress_queue)
        finally:
            if progress_queue is not None:
                progress_queue.put_nowait(None)

    # ------------------------------------------------------------------
    # Internal steps
    # ------------------------------------------------------------------

    async def _export(
        self,
        document_key: str,
        mode: str,
        on_progress: Optional[ProgressCallback],
        progress_queue: Optional[asyncio.Queue],
    ) -> ExportResult:
        try:
            project = await self.store.load_project(document_key)
            photos = await self.store.load_photos(document_key)
        except Exception as e:
            raise ExportError(f"Could not load project: {e}", phase="load", document_key=document_key) from e

        total_size = sum(p.size for p in photos)
        logger.info(
            "Preparing export of %r: %d photo(s), %.2f MiB",
            document_key,
            len(photos),
            total_size / _MIB,
        )

        try:
            metadata = ExportMetadata.build(document_key, project, photos).to_json_bytes()
        except Exception as e:
            raise ExportError(f"Could not build metadata: {e}", phase="metadata", document_key=document_key) from e

        basename = normalize_basename(document_key)

        use_sequential = mode == SEQUENTIAL or (
            mode == AUTO and total_size > self.bundle_threshold_bytes
        )
        if use_sequential:
            if mode == AUTO:
                logger.info(
                    "Payload exceeds %.2f MiB, switching to sequential delivery",
                    self.bundle_threshold_bytes / _MIB,
                )
            return await self._deliver_sequential(
                document_key, basename, metadata, photos, on_progress, progress_queue
            )

        writer = ZipStreamWriter()
        writer.add(metadata_file_name(basename), metadata)
        for photo in photos:
            if photo.exportable:
                writer.add(photo.file_name, photo.blob, modified_at=_modified_at(photo))

        try:
            archive = await asyncio.to_thread(writer.to_bytes)
        except Exception as e:
            logger.warning(
                "Archive build failed for %r, falling back to sequential delivery: %s",
                document_key,
                e,
            )
            result = await self._deliver_sequential(
                document_key, basename, metadata, photos, on_progress, progress_queue
            )
            result.fallback = True
            result.error = str(e)
            return result

        zip_name = archive_file_name(basename)
        logger.info("Built %s (%.2f MiB)", zip_name, len(archive) / _MIB)
        stored = await self.sink.deliver(zip_name, archive)
        zip_name = stored or zip_name

        return ExportResult(
            success=True,
            mode=BUNDLED,
            document_key=document_key,
            file_name=zip_name,
            total_files=1,
            total_bytes=len(archive),
            delivered=[zip_name],
        )

    async def _deliver_sequential(
        self,
        document_key: str,
        basename: str,
        metadata: bytes,
        photos: Sequence[PhotoRecord],
        on_progress: Optional[ProgressCallback],
        progress_queue: Optional[asyncio.Queue],
    ) -> ExportResult:
        eligible = [p for p in photos if p.exportable]
        total = len(eligible) + 1

        queue = [(metadata_file_name(basename), metadata)]
        queue.extend((p.file_name, p.blob) for p in eligible)

        delivered: List[str] = []
        total_bytes = 0
        for index, (name, data) in enumerate(queue, start=1):
            await _emit(ProgressEvent(index, total, name), on_progress, progress_queue)
            logger.info("[%d/%d] Delivering %s", index, total, name)
            stored = await self.sink.deliver(name, data)
            delivered.append(stored or name)
            total_bytes += len(data)
            if self.delivery_pause > 0:
                await asyncio.sleep(self.delivery_pause)

        logger.info("Export of %r complete: %d file(s)", document_key, total)
        return ExportResult(
            success=True,
            mode=SEQUENTIAL,
            document_key=document_key,
            total_files=len(delivered),
            total_bytes=total_bytes,
            delivered=delivered,
        )


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def _modified_at(photo: PhotoRecord) -> Optional[datetime]:
    if not photo.updated_at:
        return None
    try:
        return parse_timestamp(photo.updated_at)
    except (TypeError, ValueError):
        return None


async def _emit(
    event: ProgressEvent,
    on_progress: Optional[ProgressCallback],
    progress_queue: Optional[asyncio.Queue],
) -> None:
    if progress_queue is not None:
        progress_queue.put_nowait(event)
    if on_progress is not None:
        ret = on_progress(event.current, event.total, event.name)
        if inspect.isawaitable(ret):
            await ret


__all__ = [
    "AUTO",
    "MODES",
    "ProjectExporter",
]
