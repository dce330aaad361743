"""
Driver contract and the optimistic-concurrency bump protocol.

Backends in ``semverstore.remote`` only provide a VersionStore; the
VersionDriver here turns any of them into a Driver.
"""

from .exceptions import (
    DriverError,
    InvalidConfigurationError,
    UnknownDriverError,
    ConcurrentModificationError,
    StorageUnavailableError,
)
from .interfaces import Driver, VersionStore
from .protocol import MAX_RETRIES, VersionDriver

__all__ = [
    "Driver",
    "VersionStore",
    "VersionDriver",
    "MAX_RETRIES",
    "DriverError",
    "InvalidConfigurationError",
    "UnknownDriverError",
    "ConcurrentModificationError",
    "StorageUnavailableError",
]
