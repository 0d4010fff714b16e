"""Schema exports."""

from .base import SchemaBase
from .errors import StorageErrorCode, StorageFailure
from .storage import DEFAULT_COLLECTIONS, BackendType, StorageConfig

__all__ = [
    "SchemaBase",
    "StorageErrorCode",
    "StorageFailure",
    "DEFAULT_COLLECTIONS",
    "BackendType",
    "StorageConfig",
]
