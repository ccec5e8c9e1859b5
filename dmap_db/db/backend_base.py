"""
Backend base interfaces for DMAP DB.

This module defines the minimal contracts a database backend must
satisfy. It does NOT depend on any specific DB driver and only encodes
the structural requirements assumed by:
      * dmap_db.db.connection.DBPool
      * dmap_db.db.migrations
      * dmap_db.store.handle.StoreHandle

Backends must expose:

    backend.connect() -> raw_connection
    backend.helpers   -> module with safe_execute, row_to_dict, ...
    backend.init_schema(conn)

This file provides:
- DBBackend: abstract base class
- BackendLike: structural protocol
- ensure_backend: runtime validator
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Abstract Base Backend
# ---------------------------------------------------------------------------

class DBBackend(ABC):
    """
    Abstract base class for a DMAP DB backend.

    Required interface:

        @property
        helpers  – module providing safe_execute, row_to_dict, etc.
        connect() -> raw DB-API connection
        init_schema(conn) -> None (optional; default is a no-op)
    """

    @property
    @abstractmethod
    def helpers(self) -> Any:
        """
        Return the helper module associated with this backend.
        """
        raise NotImplementedError

    @abstractmethod
    def connect(self) -> Any:
        """
        Acquire and return a new raw DB-API 2.0 connection.
        """
        raise NotImplementedError

    def init_schema(self, conn: Any) -> None:
        """
        Optional schema bootstrap. Default: no-op.
        """
        return None


# ---------------------------------------------------------------------------
# Structural Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class BackendLike(Protocol):
    """
    Structural protocol for objects usable as a DMAP DB backend.
    """

    helpers: Any

    def connect(self) -> Any:
        ...

    def init_schema(self, conn: Any) -> None:
        ...


# ---------------------------------------------------------------------------
# Runtime Guard
# ---------------------------------------------------------------------------

def ensure_backend(backend: Any) -> BackendLike:
    """
    Validate that an object behaves like a DMAP DB backend.

    Raises:
        TypeError if required attributes are missing.
    """
    if not isinstance(backend, BackendLike):
        missing = [
            attr
            for attr in ("connect", "helpers", "init_schema")
            if not hasattr(backend, attr)
        ]
        if missing:
            raise TypeError(
                f"Invalid DMAP DB backend {backend!r}: missing attributes {missing}"
            )

    return backend  # type: ignore[return-value]


__all__ = [
    "DBBackend",
    "BackendLike",
    "ensure_backend",
]
