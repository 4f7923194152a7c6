"""Services package."""

from tabledger.services.storage import (
    DuplicateError,
    FileTabStore,
    IOFailureError,
    NotFoundError,
    StorageError,
    TabStorageInterface,
)

__all__ = [
    "DuplicateError",
    "FileTabStore",
    "IOFailureError",
    "NotFoundError",
    "StorageError",
    "TabStorageInterface",
]
