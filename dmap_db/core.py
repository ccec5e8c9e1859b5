"""
Core façade for the DMAP DB subsystem.

DmapDB is the single, high-level entrypoint used by:

    - the HTTP layer (dmap_db.app)
    - scripts and tests that need a store plus export in one object

It wraps:

    - the lazily opened store (StoreProvider + RecordStore)
    - the export driver (ProjectExporter)
    - the default delivery sink (LocalDirectorySink on config.export_dir)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .config import DmapDBConfig, load_config
from .delivery import DeliverySink, LocalDirectorySink
from .export import AUTO, ExportResult, ProjectExporter
from .export.events import ProgressCallback
from .store import RecordStore, StoreProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DmapDB façade
# ---------------------------------------------------------------------------

@dataclass
class DmapDB:
    """
    High-level façade over the DMAP DB components.

    One instance per process is the intended use; the store behind it
    is opened on first use and shared by every caller.

    Attributes
    ----------
    config:
        DmapDBConfig used to construct this instance.

    provider:
        StoreProvider that owns the database handle.

    store:
        RecordStore exposing the async project/photo operations.
    """

    config: DmapDBConfig
    provider: StoreProvider
    store: RecordStore

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: Optional[DmapDBConfig] = None) -> "DmapDB":
        """
        Construct a DmapDB instance from a DmapDBConfig.

        Nothing touches the disk here; the database opens on first use.
        """
        cfg = config or load_config()

        if cfg.enable_logging:
            logging.basicConfig(level=logging.INFO)
            logger.info("Initializing DmapDB with config: %s", cfg)

        provider = StoreProvider.for_sqlite(cfg.db_uri)
        return cls(config=cfg, provider=provider, store=RecordStore(provider))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def default_sink(self) -> LocalDirectorySink:
        # repeated names within or across exports get " (n)" suffixes
        return LocalDirectorySink(self.config.export_dir, overwrite=False)

    def exporter(self, sink: Optional[DeliverySink] = None) -> ProjectExporter:
        return ProjectExporter(
            self.store,
            sink if sink is not None else self.default_sink(),
            bundle_threshold_bytes=self.config.bundle_threshold_bytes,
            delivery_pause=self.config.delivery_pause,
        )

    async def export_project(
        self,
        document_key: str,
        *,
        mode: str = AUTO,
        sink: Optional[DeliverySink] = None,
        on_progress: Optional[ProgressCallback] = None,
        progress_queue: Optional[asyncio.Queue] = None,
    ) -> ExportResult:
        """
        Export a project to `sink` (default: the configured export dir).
        """
        return await self.exporter(sink).export_project(
            document_key,
            mode=mode,
            on_progress=on_progress,
            progress_queue=progress_queue,
        )

    def close(self) -> None:
        self.provider.close()


# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------

def create_dmap_db(config: Optional[DmapDBConfig] = None) -> DmapDB:
    """
    Convenience constructor used by services / scripts.
    """
    return DmapDB.from_config(config)


__all__ = [
    "DmapDB",
    "create_dmap_db",
]
