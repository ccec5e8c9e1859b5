"""
dmap_db

Top-level package initializer for the DMAP photo store.

This module does not contain any logic.
It exposes configuration utilities and ensures the package loads cleanly.

Submodules include:
    - hashing/   CRC-32 checksums
    - db/        SQLite backend, pool, migrations
    - registry/  project and photo records
    - store/     async record store
    - export/    ZIP construction and export orchestration
    - delivery/  export sinks
    - utils/
    - core       DmapDB façade
    - app        FastAPI HTTP surface

This root package exports only the global config loader for convenience.
"""

from .config import DmapDBConfig, load_config

__all__ = [
    "DmapDBConfig",
    "load_config",
]
