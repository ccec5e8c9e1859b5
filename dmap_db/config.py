"""
Global configuration settings for DMAP DB.

This module centralizes configuration for:

    - database location
    - export delivery directory
    - bundled / sequential export strategy switch
    - feature flags (logging, etc.)

It provides:
    DmapDBConfig  – structured config object
    load_config() – load from environment variables or defaults
"""

from __future__ import annotations

from dataclasses import dataclass
import os


DEFAULT_BUNDLE_THRESHOLD_BYTES = 10 * 1024 * 1024
DEFAULT_DELIVERY_PAUSE = 0.5


@dataclass
class DmapDBConfig:
    """
    Canonical configuration for the dmap_db subsystem.

    Attributes
    ----------
    db_uri:
        Path to the SQLite database file (e.g. "./dmap.db").
        ":memory:" is accepted for throwaway stores.

    export_dir:
        Directory used by LocalDirectorySink to receive exported files.

    bundle_threshold_bytes:
        Total photo payload size above which exports switch from a single
        ZIP archive to one-file-at-a-time delivery.

    delivery_pause:
        Seconds to wait after each delivery in sequential mode.

    enable_logging:
        Whether to enable internal info logging.
    """

    db_uri: str = "dmap.db"
    export_dir: str = "./dmap_exports"

    bundle_threshold_bytes: int = DEFAULT_BUNDLE_THRESHOLD_BYTES
    delivery_pause: float = DEFAULT_DELIVERY_PAUSE

    enable_logging: bool = False


def load_config() -> DmapDBConfig:
    """
    Load DmapDBConfig from environment variables, falling back to defaults.

    Recognized variables:
        DMAP_DB_URI                  (SQLite path)
        DMAP_EXPORT_DIR              (directory path)
        DMAP_BUNDLE_THRESHOLD_BYTES  (integer byte count)
        DMAP_DELIVERY_PAUSE          (float seconds)
        DMAP_ENABLE_LOGGING          ("true" / "false" / "1" / "0")

    Returns
    -------
    DmapDBConfig
    """

    def _env_flag(name: str, default: bool) -> bool:
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in ("1", "true", "yes", "on")

    def _env_number(name: str, default, cast):
        val = os.getenv(name)
        if val is None or not val.strip():
            return default
        try:
            return cast(val.strip())
        except ValueError:
            raise ValueError(f"Invalid value for {name}: {val!r}")

    return DmapDBConfig(
        db_uri=os.getenv("DMAP_DB_URI", "dmap.db"),

        export_dir=os.getenv("DMAP_EXPORT_DIR", "./dmap_exports"),

        bundle_threshold_bytes=_env_number(
            "DMAP_BUNDLE_THRESHOLD_BYTES",
            DEFAULT_BUNDLE_THRESHOLD_BYTES,
            int,
        ),

        delivery_pause=_env_number(
            "DMAP_DELIVERY_PAUSE",
            DEFAULT_DELIVERY_PAUSE,
            float,
        ),

        enable_logging=_env_flag(
            "DMAP_ENABLE_LOGGING",
            default=False
        ),
    )
