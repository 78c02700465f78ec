"""Local storage for lesson PDF uploads."""

from src.storage.dependencies import StorageServiceDep, get_storage_service
from src.storage.router import router
from src.storage.service import (
    FileTooLargeError,
    InvalidContentTypeError,
    LocalStorageService,
    StorageError,
    StoredFile,
    StorageUploadError,
    StorageValidationError,
)


__all__ = [
    "FileTooLargeError",
    "InvalidContentTypeError",
    "LocalStorageService",
    "StorageError",
    "StorageServiceDep",
    "StorageUploadError",
    "StorageValidationError",
    "StoredFile",
    "get_storage_service",
    "router",
]
