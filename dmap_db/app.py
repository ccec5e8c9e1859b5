"""
DMAP DB HTTP API.

A small FastAPI surface over the DmapDB façade:

    GET    /health
    PUT    /api/v1/projects/{key}                 save project texts
    GET    /api/v1/projects/{key}                 load project
    POST   /api/v1/projects/{key}/photos          save photo (image as data URL)
    GET    /api/v1/projects/{key}/photos          list photos (no payloads)
    DELETE /api/v1/projects/{key}/photos          delete by created-at window
    POST   /api/v1/projects/{key}/export          export to the export dir
    GET    /api/v1/photos/{id}                    photo details
    GET    /api/v1/photos/{id}/data_url           photo as data URL
    PATCH  /api/v1/photos/{id}/memo               update memo
    DELETE /api/v1/photos/{id}                    delete photo

Run with:  uvicorn dmap_db.app:app
"""

from __future__ import annotations

import json
import logging
import time
import traceback
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .core import DmapDB, create_dmap_db
from .errors import ExportError, InvalidDataURLError, StoreUnavailableError
from .export.exporter import AUTO, MODES
from .registry.models import PhotoInput, PhotoRecord, ProjectRecord
from .utils.data_url import decode_data_url

logger = logging.getLogger(__name__)


# ============================================================================
# Request / response models
# ============================================================================

class ProjectBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    texts: List[Any] = Field(default_factory=list)
    last_modified: Optional[str] = Field(default=None, alias="lastModified")


class PhotoBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Union[str, int]
    file_name: Optional[str] = Field(default=None, alias="fileName")
    memo: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    data_url: Optional[str] = Field(default=None, alias="dataUrl")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class MemoBody(BaseModel):
    memo: Optional[str] = None


def _project_json(project: ProjectRecord) -> Dict[str, Any]:
    return {
        "dxfFile": project.document_key,
        "texts": project.texts,
        "lastModified": project.last_modified,
    }


def _photo_json(photo: PhotoRecord) -> Dict[str, Any]:
    return {
        "id": photo.id,
        "dxfFile": photo.document_key,
        "fileName": photo.file_name,
        "memo": photo.memo,
        "x": photo.x,
        "y": photo.y,
        "width": photo.width,
        "height": photo.height,
        "mimeType": photo.mime_type,
        "bytes": photo.size,
        "createdAt": photo.created_at,
        "updatedAt": photo.updated_at,
    }


def _log(msg: str, **extra: Any) -> None:
    """
    Structured request logging; one JSON object per line.
    """
    logger.info(json.dumps({"msg": msg, **extra}, ensure_ascii=False, default=str))


# ============================================================================
# App factory
# ============================================================================

def create_app(db: Optional[DmapDB] = None) -> FastAPI:
    """
    Build the FastAPI application around a DmapDB instance
    (default: configured from the environment).
    """
    db = db or create_dmap_db()

    app = FastAPI(title="DMAP DB API", version="0.1.0")
    app.state.db = db

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        _log("[http] request", method=request.method, path=request.url.path)
        try:
            resp = await call_next(request)
        except Exception as exc:
            _log("[http] error", error=str(exc), traceback=traceback.format_exc())
            raise
        _log(
            "[http] response",
            path=request.url.path,
            duration_ms=int((time.time() - start) * 1000),
            status_code=getattr(resp, "status_code", None),
        )
        return resp

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable(request: Request, exc: StoreUnavailableError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/health")
    async def health():
        return {"status": "ok", "time": time.time()}

    router = APIRouter(prefix="/api/v1")

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @router.put("/projects/{document_key}")
    async def save_project(document_key: str, body: ProjectBody):
        try:
            await db.store.save_project(document_key, body.texts, body.last_modified)
        except ValueError as exc:
            raise HTTPException(400, str(exc))
        project = await db.store.load_project(document_key)
        return _project_json(project)

    @router.get("/projects/{document_key}")
    async def load_project(document_key: str):
        project = await db.store.load_project(document_key)
        if project is None:
            raise HTTPException(404, f"Project {document_key!r} not found")
        return _project_json(project)

    # ------------------------------------------------------------------
    # Photos of a project
    # ------------------------------------------------------------------

    @router.post("/projects/{document_key}/photos", status_code=201)
    async def save_photo(document_key: str, body: PhotoBody):
        blob = None
        mime_type = None
        if body.data_url:
            try:
                blob, mime_type = decode_data_url(body.data_url)
            except InvalidDataURLError as exc:
                raise HTTPException(400, str(exc))

        try:
            photo = PhotoInput(
                id=body.id,
                file_name=body.file_name,
                memo=body.memo,
                x=body.x,
                y=body.y,
                width=body.width,
                height=body.height,
                blob=blob,
                mime_type=mime_type,
                created_at=body.created_at,
            )
        except ValueError as exc:
            raise HTTPException(400, str(exc))

        await db.store.save_photo(document_key, photo)
        saved = await db.store.get_photo_by_id(photo.id)
        return _photo_json(saved)

    @router.get("/projects/{document_key}/photos")
    async def list_photos(document_key: str):
        photos = await db.store.load_photos(document_key)
        return {"photos": [_photo_json(p) for p in photos]}

    @router.delete("/projects/{document_key}/photos")
    async def delete_photos_by_date_range(
        document_key: str,
        start_ms: int = Query(...),
        end_ms: int = Query(...),
    ):
        deleted = await db.store.delete_photos_by_date_range(document_key, start_ms, end_ms)
        return {"deleted": deleted}

    @router.post("/projects/{document_key}/export")
    async def export_project(document_key: str, mode: str = Query(AUTO)):
        if mode not in MODES:
            raise HTTPException(400, f"Unknown export mode {mode!r}")
        _log("[api] export", document_key=document_key, mode=mode)
        try:
            result = await db.export_project(document_key, mode=mode)
        except ExportError as exc:
            _log("[api] export failed", document_key=document_key, phase=exc.phase, error=str(exc))
            raise HTTPException(500, {"phase": exc.phase, "error": str(exc)})
        return result.to_dict()

    # ------------------------------------------------------------------
    # Single photos
    # ------------------------------------------------------------------

    @router.get("/photos/{photo_id}")
    async def get_photo(photo_id: str):
        photo = await db.store.get_photo_by_id(photo_id)
        if photo is None:
            raise HTTPException(404, f"Photo {photo_id!r} not found")
        return _photo_json(photo)

    @router.get("/photos/{photo_id}/data_url")
    async def get_photo_data_url(photo_id: str):
        data_url = await db.store.get_photo_data_url(photo_id)
        if data_url is None:
            raise HTTPException(404, f"Photo {photo_id!r} has no image")
        return {"id": photo_id, "dataUrl": data_url}

    @router.patch("/photos/{photo_id}/memo")
    async def update_photo_memo(photo_id: str, body: MemoBody):
        if not await db.store.update_photo_memo(photo_id, body.memo):
            raise HTTPException(404, f"Photo {photo_id!r} not found")
        return _photo_json(await db.store.get_photo_by_id(photo_id))

    @router.delete("/photos/{photo_id}")
    async def delete_photo(photo_id: str):
        await db.store.delete_photo(photo_id)
        return {"status": "ok", "id": photo_id}

    app.include_router(router)
    return app


def __getattr__(name: str):
    # `uvicorn dmap_db.app:app` builds the default app on first access
    if name == "app":
        application = create_app()
        globals()["app"] = application
        return application
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["create_app"]
