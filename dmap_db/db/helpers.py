"""
Shared DB helper utilities.

These wrappers ensure:
    - consistent interfaces for the SQLite backend and test doubles
    - predictable row→dict mapping
    - driver errors surfaced as StoreError with the failing statement

Backends import this module as `.helpers`
"""

from __future__ import annotations
from typing import Any, Optional, Iterable

from ..errors import StoreError


# ----------------------------------------------------------------------
# Execution helpers
# ----------------------------------------------------------------------

def safe_execute(conn: Any, query: str, params: Optional[tuple] = None):
    """
    Execute a single SQL statement.
    Returns the raw cursor.

    Parameters
    ----------
    conn:
        DB-API compatible connection object (sqlite3).
    query:
        SQL string with placeholders.
    params:
        Optional parameter tuple.

    Raises
    ------
    StoreError
        Wrapped execution error with context. Blob parameters are
        summarized by length so payload bytes never end up in logs.
    """
    cur = conn.cursor()
    try:
        cur.execute(query, params or ())
    except Exception as e:
        raise StoreError(
            f"DB execute failed: {e} | Query: {query!r} | Params: {_describe(params)}"
        ) from e
    return cur


def safe_executemany(conn: Any, query: str, seq: Iterable[tuple]):
    """
    Execute the same SQL statement for multiple parameter sets.

    Raises
    ------
    StoreError
        Wrapped execution error with context.
    """
    cur = conn.cursor()
    try:
        cur.executemany(query, seq)
    except Exception as e:
        raise StoreError(
            f"DB executemany failed: {e} | Query: {query!r}"
        ) from e
    return cur


def safe_fetch_all(conn: Any, query: str, params: Optional[tuple] = None):
    """
    Execute a SELECT query and fetch all rows.
    """
    cur = safe_execute(conn, query, params)
    return cur.fetchall()


def safe_fetch_one(conn: Any, query: str, params: Optional[tuple] = None):
    """
    Execute a SELECT query and fetch one row, or None.
    """
    cur = safe_execute(conn, query, params)
    return cur.fetchone()


# ----------------------------------------------------------------------
# Row mapping
# ----------------------------------------------------------------------

def row_to_dict(row: Any) -> dict:
    """
    Convert a sqlite3.Row to a plain Python dict.

    Returns an empty dict for None.
    """
    if row is None:
        return {}

    if hasattr(row, "keys"):
        return {k: row[k] for k in row.keys()}

    return dict(enumerate(row))


def _describe(params: Optional[tuple]) -> str:
    if not params:
        return "()"
    parts = []
    for p in params:
        if isinstance(p, (bytes, bytearray, memoryview)):
            parts.append(f"<{len(p)} bytes>")
        else:
            parts.append(repr(p))
    return "(" + ", ".join(parts) + ")"


__all__ = [
    "safe_execute",
    "safe_executemany",
    "safe_fetch_all",
    "safe_fetch_one",
    "row_to_dict",
]
