"""
Storage Services Package

Provides the abstract tab storage interface and the plain-text directory
implementation. Designed so another backend can be swapped in.
"""

from tabledger.services.storage.interface import (
    DuplicateError,
    IOFailureError,
    NotFoundError,
    StorageError,
    TabStorageInterface,
)
from tabledger.services.storage.file_store import (
    MANIFEST_SEPARATOR,
    FileTabStore,
)

__all__ = [
    # Interface
    "TabStorageInterface",
    # Exceptions
    "DuplicateError",
    "IOFailureError",
    "NotFoundError",
    "StorageError",
    # Plain-text implementation
    "FileTabStore",
    "MANIFEST_SEPARATOR",
]
