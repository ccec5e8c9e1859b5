"""
Database schema migration manager.

The canonical schema in sqlite_backend.py is version 1. Later columns
and indices are added here as numbered upgrade steps so that database
files written by older builds keep opening.

Applied versions are recorded in the schema_version table.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class MigrationManager:
    """
    Schema migration registry and executor.

    Usage pattern:

        mgr = MigrationManager()
        mgr.register(
            version=2,
            upgrade=lambda conn: conn.execute("ALTER TABLE ..."),
        )
        mgr.apply_migrations(conn)
    """

    def __init__(self):
        # version -> {"upgrade": fn, "downgrade": fn}
        self.migrations: Dict[int, Dict[str, Optional[Callable]]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        version: int,
        upgrade: Callable[[Any], None],
        downgrade: Optional[Callable[[Any], None]] = None,
    ):
        """
        Register a migration step.

        Parameters
        ----------
        version:
            Integer schema version identifier. Must be greater than 1,
            since version 1 is the base schema.

        upgrade:
            Callable taking a DBConnection that applies the upgrade.

        downgrade:
            Optional callable for reversing the migration.
        """
        if version <= 1:
            raise ValueError(f"Migration version must be > 1, got {version}")
        if version in self.migrations:
            raise ValueError(f"Migration version {version} already registered")
        self.migrations[version] = {
            "upgrade": upgrade,
            "downgrade": downgrade,
        }

    def get_latest_version(self) -> int:
        """
        Return the highest registered migration number, or 1 if none exist.
        """
        return max(self.migrations.keys(), default=1)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def current_version(self, conn) -> int:
        row = conn.fetch_one("SELECT MAX(version) AS version FROM schema_version")
        if not row or row.get("version") is None:
            return 0
        return int(row["version"])

    def apply_migrations(self, conn) -> int:
        """
        Apply pending upgrades in ascending version order.

        Each step runs in its own transaction together with its
        schema_version row, so a failing step leaves the database at the
        previous version.

        Returns the schema version after the run.
        """
        current = self.current_version(conn)
        for version in sorted(v for v in self.migrations if v > current):
            step = self.migrations[version]
            logger.info("Applying schema migration %d", version)
            with conn.transaction():
                step["upgrade"](conn)
                conn.execute(
                    "INSERT INTO schema_version (version) VALUES (?)",
                    (version,),
                )
            current = version
        return current


# ----------------------------------------------------------------------
# Registered upgrades
# ----------------------------------------------------------------------

def _column_names(conn, table: str) -> set:
    return {row["name"] for row in conn.fetch_all(f"PRAGMA table_info({table})")}


def _add_photo_mime_type(conn) -> None:
    if "mime_type" in _column_names(conn, "photos"):
        return
    conn.execute(
        "ALTER TABLE photos ADD COLUMN mime_type TEXT NOT NULL "
        "DEFAULT 'application/octet-stream'"
    )


def default_migrations() -> MigrationManager:
    """
    The migration chain every store runs on open.
    """
    mgr = MigrationManager()
    mgr.register(version=2, upgrade=_add_photo_mime_type)
    return mgr


__all__ = [
    "MigrationManager",
    "default_migrations",
]
