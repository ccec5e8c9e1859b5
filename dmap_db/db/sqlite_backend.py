"""
SQLite backend for DMAP DB.

One database file holds every project and photo of a device or session.
The photo table carries the image bytes inline as a BLOB.

Implements:
    - connect()
    - helpers
    - init_schema()
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from . import helpers
from .backend_base import DBBackend


# ----------------------------------------------------------------------
# Canonical Schema (v1)
# ----------------------------------------------------------------------

SQL_SCHEMA = """
-- ------------------------------------------------------------
-- Schema version table (see migrations.py)
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS schema_version (
    version      INTEGER NOT NULL,
    applied_at   TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- ------------------------------------------------------------
-- Projects: one row per drawing document
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS projects (
    document_key   TEXT PRIMARY KEY,
    texts_json     TEXT NOT NULL DEFAULT '[]',
    last_modified  TEXT NOT NULL
);

-- ------------------------------------------------------------
-- Photos: document_key is a soft reference (no FOREIGN KEY, no cascade)
-- ------------------------------------------------------------
CREATE TABLE IF NOT EXISTS photos (
    id             TEXT PRIMARY KEY,
    document_key   TEXT NOT NULL,
    file_name      TEXT NOT NULL DEFAULT '',
    memo           TEXT NOT NULL DEFAULT '',
    x              REAL,
    y              REAL,
    width          REAL,
    height         REAL,
    blob           BLOB,
    created_at     TEXT,
    created_at_ms  INTEGER,
    updated_at     TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_photos_document_key
    ON photos(document_key);

-- ------------------------------------------------------------
-- Initial schema version
-- ------------------------------------------------------------
INSERT INTO schema_version (version)
SELECT 1
WHERE NOT EXISTS (SELECT 1 FROM schema_version);
"""


# ----------------------------------------------------------------------
# Backend implementation
# ----------------------------------------------------------------------

class SQLiteBackend(DBBackend):
    """
    SQLite backend.

    Parameters
    ----------
    db_path : str
        Path to the SQLite database file, or ":memory:".
    """

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        self._helpers = helpers

    @property
    def helpers(self):
        return self._helpers

    @property
    def is_memory(self) -> bool:
        return self.db_path == ":memory:"

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """
        Open a SQLite3 connection with dict-like rows.

        The connection is placed in autocommit mode (isolation_level=None)
        so DBConnection.transaction() controls BEGIN/COMMIT explicitly,
        and is usable from the worker threads asyncio.to_thread picks.
        """
        if not self.is_memory:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            self.db_path,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Schema initializer
    # ------------------------------------------------------------------

    def init_schema(self, conn) -> None:
        """
        Create tables and indices if they do not exist.

        Idempotent – safe to call multiple times.
        """
        cur = conn.cursor()
        cur.executescript(SQL_SCHEMA)
