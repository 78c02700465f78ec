"""Dependencies for storage module."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.storage.service import LocalStorageService, StorageError


def get_storage_service(request: Request) -> LocalStorageService:
    """Get the storage service created at startup."""
    service = getattr(request.app.state, "storage_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage service not available",
        )
    return service


StorageServiceDep = Annotated[LocalStorageService, Depends(get_storage_service)]


def handle_storage_error(error: StorageError) -> HTTPException:
    """Convert storage errors to HTTP exceptions."""
    status_map = {
        "file_too_large": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        "invalid_content_type": status.HTTP_400_BAD_REQUEST,
        "validation_error": status.HTTP_400_BAD_REQUEST,
        "upload_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
    )
