"""
DB-backed Project Registry.

One row per drawing document, keyed by the document key.
"""

from __future__ import annotations

from typing import Optional

from .models import ProjectRecord
from ..db.connection import DBPool
from ..utils.json_io import dump_json_text, load_json_text


class DBProjectRegistry:
    """
    Database-backed project registry.
    """

    def __init__(self, pool: DBPool):
        self.pool = pool

    def upsert(self, record: ProjectRecord) -> ProjectRecord:
        """
        Insert or overwrite the project row for record.document_key.
        """
        with self.pool.transaction() as conn:
            conn.execute(
                """
                INSERT INTO projects(document_key, texts_json, last_modified)
                VALUES (?, ?, ?)
                ON CONFLICT(document_key) DO UPDATE SET
                    texts_json = excluded.texts_json,
                    last_modified = excluded.last_modified
                """,
                (
                    record.document_key,
                    dump_json_text(list(record.texts)),
                    record.last_modified,
                ),
            )
        return record

    def get(self, document_key: str) -> Optional[ProjectRecord]:
        with self.pool.connection() as conn:
            row = conn.fetch_one(
                """
                SELECT *
                FROM projects
                WHERE document_key = ?
                """,
                (document_key,),
            )

        if not row:
            return None

        return ProjectRecord(
            document_key=row["document_key"],
            texts=load_json_text(row.get("texts_json"), default=[]),
            last_modified=row["last_modified"],
        )
