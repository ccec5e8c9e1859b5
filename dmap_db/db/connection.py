"""
Unified database connection abstraction for DMAP DB.

This file defines:
- DBConnection: a wrapper around a live database handle
- DBPool: owner of the single shared connection for one store

Backends must expose:
    backend.connect() -> raw connection (autocommit, explicit BEGIN)
    backend.helpers   -> module with:
        safe_execute
        safe_executemany
        safe_fetch_all
        safe_fetch_one
        row_to_dict
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from ..errors import StoreError

logger = logging.getLogger(__name__)


class DBConnection:
    """
    Thin wrapper around a raw DB-API 2.0 connection.

    Responsibilities:
        - Provide a stable API for SQL execution (execute, fetch, etc.)
        - Normalize rows (return Python dicts)
        - Group writes into explicit transactions

    Notes:
        - The raw connection runs in autocommit mode; a statement outside
          transaction() is committed on its own
        - Safe to close() multiple times
    """

    def __init__(self, raw_conn: Any, helpers: Any):
        self.raw = raw_conn
        self.helpers = helpers
        self._in_transaction = False

    # ------------------------------------------------------------------
    # SQL execution wrappers
    # ------------------------------------------------------------------

    def execute(self, query: str, params: Optional[tuple] = None):
        """
        Execute a single SQL statement.
        Returns the underlying cursor.
        """
        return self.helpers.safe_execute(self.raw, query, params)

    def executemany(self, query: str, seq: Iterable[tuple]):
        """
        Bulk-execute the same SQL statement with a sequence of parameters.
        """
        return self.helpers.safe_executemany(self.raw, query, seq)

    def fetch_all(self, query: str, params: Optional[tuple] = None):
        """
        Execute a SELECT statement and return a list of dict rows.
        """
        rows = self.helpers.safe_fetch_all(self.raw, query, params)
        return [self.helpers.row_to_dict(r) for r in rows]

    def fetch_one(self, query: str, params: Optional[tuple] = None):
        """
        Execute a SELECT statement and return a single dict row or None.
        """
        row = self.helpers.safe_fetch_one(self.raw, query, params)
        return self.helpers.row_to_dict(row) if row else None

    # ------------------------------------------------------------------
    # Transaction and connection lifecycle
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["DBConnection"]:
        """
        Run the enclosed statements as one atomic unit.

        Commits on normal exit, rolls back when the block raises and
        re-raises the original exception. Nested use joins the outer
        transaction.
        """
        if self._in_transaction:
            yield self
            return

        self.execute("BEGIN IMMEDIATE")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self._in_transaction = False
            self.rollback()
            raise
        self._in_transaction = False
        self.commit()

    def commit(self) -> None:
        """
        Commit the current transaction.

        A failed COMMIT (e.g. SQLITE_BUSY) is rolled back before the
        error is raised, so the shared connection leaves the transaction.
        """
        try:
            self.raw.execute("COMMIT")
        except Exception as e:
            self.rollback()
            raise StoreError(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        """
        Roll back the current transaction.
        """
        try:
            self.raw.execute("ROLLBACK")
        except Exception:
            # Nothing to roll back when BEGIN itself failed.
            logger.debug("Rollback skipped", exc_info=True)

    def close(self) -> None:
        """
        Close the underlying connection safely.
        """
        try:
            self.raw.close()
        except Exception:
            logger.debug("Close on already-closed connection", exc_info=True)


# ----------------------------------------------------------------------
# DB Pool
# ----------------------------------------------------------------------

class DBPool:
    """
    Owner of the single database connection shared by one store.

    sqlite3 connections are not safe for simultaneous use from several
    threads, so every checkout holds a lock for its duration. Blocking
    calls dispatched through asyncio.to_thread therefore serialize here.

    The backend must provide:
        - connect()  -> raw DB-API connection
        - helpers    -> module with DB helper functions
    """

    def __init__(self, backend: Any):
        self.backend = backend
        self._lock = threading.RLock()
        self._conn: Optional[DBConnection] = None

    def get(self) -> DBConnection:
        """
        Return the shared DBConnection wrapper, connecting on first use.
        """
        with self._lock:
            if self._conn is None:
                raw = self.backend.connect()
                self._conn = DBConnection(raw, self.backend.helpers)
            return self._conn

    # ------------------------------------------------------------------
    # Context manager syntax:
    #     with db_pool.connection() as conn:
    #         ...
    # ------------------------------------------------------------------

    @contextmanager
    def connection(self) -> Iterator[DBConnection]:
        """
        Exclusive checkout of the shared connection.
        """
        with self._lock:
            yield self.get()

    @contextmanager
    def transaction(self) -> Iterator[DBConnection]:
        """
        Exclusive checkout wrapped in an atomic transaction.
        """
        with self.connection() as conn:
            with conn.transaction():
                yield conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
