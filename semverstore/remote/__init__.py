"""
Storage backends for the version.

Each module provides a VersionStore for one kind of storage; storage.py
selects one from a Source and wraps it in a VersionDriver.

    s3   S3Storage.py   object ETag,           If-Match / If-None-Match PUT
    git  GitStorage.py  branch head commit,    fast-forward-only push
    gcs  GCSStorage.py  object generation,     if_generation_match upload
"""

from .GCSStorage import GCSVersionStore
from .GitStorage import GitVersionStore
from .S3Storage import S3VersionStore
from .storage import driver_kind, get_driver

__all__ = [
    "get_driver",
    "driver_kind",
    "S3VersionStore",
    "GitVersionStore",
    "GCSVersionStore",
]
