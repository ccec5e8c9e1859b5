"""
dmap_db.store

Asynchronous record store for DMAP DB.

    - StoreHandle   : an open database with its registries
    - StoreProvider : opens one StoreHandle lazily and shares it
    - RecordStore   : async project/photo operations
"""

from .handle import StoreHandle, StoreProvider
from .record_store import RecordStore

__all__ = [
    "StoreHandle",
    "StoreProvider",
    "RecordStore",
]
