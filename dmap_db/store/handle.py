"""
Store handle and its open-once provider.

StoreHandle
    Constructing one opens the SQLite database, creates the schema and
    runs pending migrations. A handle is the unit that gets shared.

StoreProvider
    Memoizes the first successful open. Concurrent first callers all
    await the same in-flight task instead of opening duplicate handles.
    A failed open is reported to every waiter and then forgotten, so a
    later call starts a fresh attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from ..db import DBPool, SQLiteBackend, default_migrations, ensure_backend
from ..errors import StoreUnavailableError
from ..registry import DBPhotoRegistry, DBProjectRegistry

logger = logging.getLogger(__name__)


class StoreHandle:
    """
    Open database plus the registries bound to it.

    Parameters
    ----------
    backend:
        Any object satisfying BackendLike (normally SQLiteBackend).

    Raises
    ------
    StoreUnavailableError
        If connecting, schema creation, or migration fails.
    """

    def __init__(self, backend: Any):
        self.backend = ensure_backend(backend)
        self.pool = DBPool(self.backend)

        try:
            with self.pool.connection() as conn:
                self.backend.init_schema(conn.raw)
                self.schema_version = default_migrations().apply_migrations(conn)
        except Exception as e:
            self.pool.close()
            raise StoreUnavailableError(f"Could not open store: {e}") from e

        self.projects = DBProjectRegistry(self.pool)
        self.photos = DBPhotoRegistry(self.pool)
        logger.info("Store opened (schema version %d)", self.schema_version)

    @classmethod
    def open_sqlite(cls, db_path: str) -> "StoreHandle":
        return cls(SQLiteBackend(db_path))

    def close(self) -> None:
        self.pool.close()


class StoreProvider:
    """
    Lazily opens a StoreHandle exactly once and shares it.

    Parameters
    ----------
    factory:
        Zero-argument callable returning a new StoreHandle. It runs in a
        worker thread because opening touches the filesystem.
    """

    def __init__(self, factory: Callable[[], StoreHandle]):
        self._factory = factory
        self._handle: Optional[StoreHandle] = None
        self._pending: Optional[asyncio.Task] = None

    @classmethod
    def for_sqlite(cls, db_path: str) -> "StoreProvider":
        return cls(lambda: StoreHandle.open_sqlite(db_path))

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def get(self) -> StoreHandle:
        """
        Return the shared handle, opening it on first use.

        Raises
        ------
        StoreUnavailableError
            When the open attempt fails.
        """
        if self._handle is not None:
            return self._handle

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._open())

        pending = self._pending
        try:
            # shield: one cancelled waiter must not cancel the shared open
            return await asyncio.shield(pending)
        finally:
            if pending.done() and self._pending is pending:
                self._pending = None

    async def _open(self) -> StoreHandle:
        try:
            handle = await asyncio.to_thread(self._factory)
        except StoreUnavailableError:
            logger.error("Store open failed", exc_info=True)
            raise
        except Exception as e:
            logger.error("Store open failed", exc_info=True)
            raise StoreUnavailableError(f"Could not open store: {e}") from e
        self._handle = handle
        return handle

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


__all__ = [
    "StoreHandle",
    "StoreProvider",
]
