import os
import shutil
import sqlite3
import tempfile
import unittest

from dmap_db.db import DBConnection, DBPool, MigrationManager, SQLiteBackend, ensure_backend
from dmap_db.db import helpers
from dmap_db.errors import StoreError


class DBPoolTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.backend = SQLiteBackend(os.path.join(self.tmpdir, "nested", "dmap.db"))
        self.pool = DBPool(self.backend)
        with self.pool.connection() as conn:
            self.backend.init_schema(conn.raw)

    def tearDown(self):
        self.pool.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _count(self):
        with self.pool.connection() as conn:
            return conn.fetch_one("SELECT COUNT(*) AS n FROM projects")["n"]

    def test_transaction_commits(self):
        with self.pool.transaction() as conn:
            conn.execute(
                "INSERT INTO projects(document_key, last_modified) VALUES (?, ?)",
                ("a.dxf", "2024-01-01T00:00:00.000Z"),
            )
        self.assertEqual(self._count(), 1)

    def test_transaction_rolls_back_on_error(self):
        with self.assertRaises(KeyError):
            with self.pool.transaction() as conn:
                conn.execute(
                    "INSERT INTO projects(document_key, last_modified) VALUES (?, ?)",
                    ("a.dxf", "2024-01-01T00:00:00.000Z"),
                )
                raise KeyError("abort")
        self.assertEqual(self._count(), 0)

    def test_nested_transaction_joins_outer(self):
        with self.assertRaises(RuntimeError):
            with self.pool.transaction() as conn:
                with conn.transaction():
                    conn.execute(
                        "INSERT INTO projects(document_key, last_modified) VALUES (?, ?)",
                        ("a.dxf", "2024-01-01T00:00:00.000Z"),
                    )
                raise RuntimeError("outer fails")
        self.assertEqual(self._count(), 0)

    def test_sql_errors_carry_query_context(self):
        with self.pool.connection() as conn:
            with self.assertRaises(StoreError) as ctx:
                conn.execute("INSERT INTO photos(id, blob) VALUES (?, ?)", ("p", b"\x00" * 64))
        message = str(ctx.exception)
        self.assertIn("INSERT INTO photos", message)
        self.assertIn("<64 bytes>", message)

    def test_migration_registry(self):
        mgr = MigrationManager()
        self.assertEqual(mgr.get_latest_version(), 1)
        mgr.register(3, upgrade=lambda conn: None)
        with self.assertRaises(ValueError):
            mgr.register(3, upgrade=lambda conn: None)
        with self.assertRaises(ValueError):
            mgr.register(1, upgrade=lambda conn: None)

        with self.pool.connection() as conn:
            self.assertEqual(mgr.current_version(conn), 1)
            self.assertEqual(mgr.apply_migrations(conn), 3)
            self.assertEqual(mgr.apply_migrations(conn), 3)

    def test_failed_migration_keeps_previous_version(self):
        def broken(conn):
            conn.execute("CREATE TABLE scratch (x INTEGER)")
            raise RuntimeError("half done")

        mgr = MigrationManager()
        mgr.register(2, upgrade=broken)
        with self.pool.connection() as conn:
            with self.assertRaises(RuntimeError):
                mgr.apply_migrations(conn)
            self.assertEqual(mgr.current_version(conn), 1)
            tables = conn.fetch_all("SELECT name FROM sqlite_master WHERE name = 'scratch'")
            self.assertEqual(tables, [])


class _BusyOnCommit:
    """Raw connection stand-in whose COMMIT fails while `busy` is set."""

    def __init__(self):
        self.busy = True
        self.statements = []

    def cursor(self):
        return self

    def execute(self, query, params=()):
        self.statements.append(query)
        if query == "COMMIT" and self.busy:
            raise sqlite3.OperationalError("database is locked")
        return self


class CommitFailureTestCase(unittest.TestCase):

    def test_failed_commit_rolls_back(self):
        raw = _BusyOnCommit()
        conn = DBConnection(raw, helpers)

        with self.assertRaises(StoreError):
            with conn.transaction():
                conn.execute("UPDATE photos SET memo = ?", ("x",))
        self.assertEqual(raw.statements, ["BEGIN IMMEDIATE", "UPDATE photos SET memo = ?", "COMMIT", "ROLLBACK"])

        raw.busy = False
        raw.statements.clear()
        with conn.transaction():
            pass
        self.assertEqual(raw.statements, ["BEGIN IMMEDIATE", "COMMIT"])


class EnsureBackendTestCase(unittest.TestCase):

    def test_accepts_sqlite_backend(self):
        backend = SQLiteBackend(":memory:")
        self.assertIs(ensure_backend(backend), backend)
        self.assertTrue(backend.is_memory)

    def test_rejects_incomplete_object(self):
        with self.assertRaises(TypeError):
            ensure_backend(object())


if __name__ == "__main__":
    unittest.main()
