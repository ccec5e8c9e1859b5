"""
DB-backed Photo Registry.

Photos are keyed by a globally unique id and reach their project
through the idx_photos_document_key secondary index.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional

from .models import PhotoRecord
from ..db.connection import DBConnection, DBPool
from ..utils.data_url import DEFAULT_MIME_TYPE


_COLUMNS = (
    "id, document_key, file_name, memo, x, y, width, height, "
    "blob, mime_type, created_at, created_at_ms, updated_at"
)


def _row_to_record(row: Dict[str, Any]) -> PhotoRecord:
    blob = row.get("blob")
    return PhotoRecord(
        id=row["id"],
        document_key=row["document_key"],
        file_name=row.get("file_name") or "",
        memo=row.get("memo") or "",
        x=row.get("x"),
        y=row.get("y"),
        width=row.get("width"),
        height=row.get("height"),
        blob=bytes(blob) if blob is not None else None,
        mime_type=row.get("mime_type") or DEFAULT_MIME_TYPE,
        created_at=row.get("created_at"),
        updated_at=row["updated_at"],
    )


class DBPhotoRegistry:
    """
    Database-backed photo registry.

    Every mutating method runs in one transaction: either all of its
    writes land or none do.
    """

    def __init__(self, pool: DBPool):
        self.pool = pool

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, record: PhotoRecord) -> PhotoRecord:
        """
        Insert or overwrite the photo row with record.id.

        An existing row keeps its created_at; every other field is
        replaced. Returns the record as written.
        """
        with self.pool.transaction() as conn:
            current = self._get(conn, record.id)
            if current is not None and current.created_at:
                record = replace(record, created_at=current.created_at)
            self._write(conn, record)
        return record

    def update_memo(self, photo_id: str, memo: str, updated_at: str) -> Optional[PhotoRecord]:
        """
        Set memo and updated_at on an existing photo.

        Returns the updated record, or None (without writing) when no
        photo has this id.
        """
        with self.pool.transaction() as conn:
            current = self._get(conn, photo_id)
            if current is None:
                return None
            updated = replace(current, memo=memo, updated_at=updated_at)
            conn.execute(
                "UPDATE photos SET memo = ?, updated_at = ? WHERE id = ?",
                (updated.memo, updated.updated_at, photo_id),
            )
        return updated

    def delete(self, photo_id: str) -> None:
        with self.pool.transaction() as conn:
            conn.execute("DELETE FROM photos WHERE id = ?", (photo_id,))

    def delete_created_between(self, document_key: str, start_ms: int, end_ms: int) -> List[str]:
        """
        Delete the photos of a document whose created_at falls inside
        [start_ms, end_ms] (epoch milliseconds, both ends inclusive).

        Photos without created_at never match. Returns the deleted ids;
        when nothing matches no write statement is issued.
        """
        with self.pool.transaction() as conn:
            rows = conn.fetch_all(
                """
                SELECT id
                FROM photos
                WHERE document_key = ?
                  AND created_at_ms IS NOT NULL
                  AND created_at_ms BETWEEN ? AND ?
                ORDER BY id ASC
                """,
                (document_key, int(start_ms), int(end_ms)),
            )
            ids = [row["id"] for row in rows]
            if ids:
                conn.executemany(
                    "DELETE FROM photos WHERE id = ?",
                    [(photo_id,) for photo_id in ids],
                )
        return ids

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, photo_id: str) -> Optional[PhotoRecord]:
        with self.pool.connection() as conn:
            return self._get(conn, photo_id)

    def list_for_document(self, document_key: str) -> List[PhotoRecord]:
        with self.pool.connection() as conn:
            rows = conn.fetch_all(
                f"""
                SELECT {_COLUMNS}
                FROM photos INDEXED BY idx_photos_document_key
                WHERE document_key = ?
                ORDER BY id ASC
                """,
                (document_key,),
            )
        return [_row_to_record(row) for row in rows]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _get(conn: DBConnection, photo_id: str) -> Optional[PhotoRecord]:
        row = conn.fetch_one(
            f"""
            SELECT {_COLUMNS}
            FROM photos
            WHERE id = ?
            """,
            (photo_id,),
        )
        return _row_to_record(row) if row else None

    @staticmethod
    def _write(conn: DBConnection, record: PhotoRecord) -> None:
        conn.execute(
            f"""
            INSERT OR REPLACE INTO photos({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.document_key,
                record.file_name,
                record.memo,
                record.x,
                record.y,
                record.width,
                record.height,
                record.blob,
                record.mime_type,
                record.created_at,
                record.created_at_ms,
                record.updated_at,
            ),
        )
