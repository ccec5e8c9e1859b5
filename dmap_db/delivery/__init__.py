"""
dmap_db.delivery

Sinks that receive exported files.
"""

from .base import DeliveredFile, DeliverySink
from .local_fs import LocalDirectorySink, MemorySink

__all__ = [
    "DeliveredFile",
    "DeliverySink",
    "LocalDirectorySink",
    "MemorySink",
]
