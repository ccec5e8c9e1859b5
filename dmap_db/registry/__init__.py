"""
DMAP DB - Registry package.

This package provides:
    - Record types (ProjectRecord, PhotoRecord) and the PhotoInput schema
    - Database-backed registry implementations:
          * DBProjectRegistry
          * DBPhotoRegistry

The registries are synchronous and sit directly on the DB pool. The
asynchronous RecordStore in dmap_db.store dispatches to them.
"""

from .models import ProjectRecord, PhotoRecord, PhotoInput
from .project_registry import DBProjectRegistry
from .photo_registry import DBPhotoRegistry

__all__ = [
    # Records
    "ProjectRecord",
    "PhotoRecord",
    "PhotoInput",

    # DB-backed registries
    "DBProjectRegistry",
    "DBPhotoRegistry",
]
