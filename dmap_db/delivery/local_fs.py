"""
Local filesystem delivery sinks.

LocalDirectorySink writes each delivered file under `root`, the way a
browser drops downloads into a downloads folder. Names are flat file
names; anything that would escape the root is rejected.

Example mapping:
    name = "site-a_export.zip"
    real_path = "<root>/site-a_export.zip"
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Union

from .base import DeliveredFile, DeliverySink

logger = logging.getLogger(__name__)


class LocalDirectorySink(DeliverySink):
    """
    Write delivered files into a directory.

    Parameters
    ----------
    root:
        Target directory, created if missing.
    overwrite:
        When False, an existing file gets a " (n)" suffix instead of
        being replaced.
    """

    def __init__(self, root: Union[str, Path], overwrite: bool = True):
        self.root = Path(root).resolve()
        self.overwrite = overwrite
        self.root.mkdir(parents=True, exist_ok=True)
        self.written: List[Path] = []

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------

    def _resolve(self, name: str) -> Path:
        """
        Translate a delivery name into a path directly under root.

        Ensures:
          - no directory components
          - no path traversal
        """
        clean = name.replace("\\", "/").strip("/")
        if not clean or "/" in clean or clean in (".", ".."):
            raise ValueError(f"Suspicious delivery name: {name!r}")

        path = (self.root / clean).resolve()
        if path.parent != self.root:
            raise ValueError(f"Suspicious delivery name outside root: {name!r}")

        if not self.overwrite:
            stem, suffix = os.path.splitext(clean)
            n = 1
            while path.exists():
                path = self.root / f"{stem} ({n}){suffix}"
                n += 1
        return path

    # ------------------------------------------------------------------
    # Core interface
    # ------------------------------------------------------------------

    def _write(self, name: str, data: bytes) -> Path:
        path = self._resolve(name)
        tmp = path.with_name(path.name + ".part")
        try:
            with open(tmp, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        return path

    async def deliver(self, name: str, data: bytes) -> str:
        """
        Write one file and return the name it was stored under.
        """
        path = await asyncio.to_thread(self._write, name, data)
        self.written.append(path)
        logger.info("Delivered %s (%d bytes)", path, len(data))
        return path.name


class MemorySink(DeliverySink):
    """
    Keep delivered files in memory, in delivery order.
    """

    def __init__(self):
        self.files: List[DeliveredFile] = []

    async def deliver(self, name: str, data: bytes) -> str:
        self.files.append(DeliveredFile(name=name, data=bytes(data)))
        return name

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.files]

    def get(self, name: str) -> bytes:
        for f in self.files:
            if f.name == name:
                return f.data
        raise KeyError(name)


__all__ = [
    "LocalDirectorySink",
    "MemorySink",
]
