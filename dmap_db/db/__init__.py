"""
dmap_db.db

Database backend abstraction layer for DMAP DB.

This package provides:

- A connection abstraction:
      * DBConnection (explicit transactions)
      * DBPool       (single shared connection per store)

- Helper functions for SQL execution and row mapping:
      * safe_execute
      * safe_fetch_all
      * safe_fetch_one
      * safe_executemany
      * row_to_dict

- The SQLite backend:
      * SQLiteBackend

- Migration utilities for schema upgrades:
      * MigrationManager
      * default_migrations

- Backend contracts:
      * DBBackend
      * BackendLike
      * ensure_backend
"""

from .connection import DBConnection, DBPool
from .sqlite_backend import SQLiteBackend
from .backend_base import DBBackend, BackendLike, ensure_backend
from .helpers import (
    safe_execute,
    safe_executemany,
    safe_fetch_all,
    safe_fetch_one,
    row_to_dict,
)
from .migrations import MigrationManager, default_migrations

__all__ = [
    # Connection / Pool
    "DBConnection",
    "DBPool",

    # Backends
    "SQLiteBackend",
    "DBBackend",
    "BackendLike",
    "ensure_backend",

    # Helpers
    "safe_execute",
    "safe_executemany",
    "safe_fetch_all",
    "safe_fetch_one",
    "row_to_dict",

    # Migrations
    "MigrationManager",
    "default_migrations",
]
