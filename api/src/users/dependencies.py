"""FastAPI dependencies for users."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import UserError, UserService


def get_user_service(request: Request) -> UserService:
    """Get UserService from app state."""
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User service not available",
        )
    return service


UserServiceDep = Annotated[UserService, Depends(get_user_service)]


def handle_user_error(error: UserError) -> HTTPException:
    """Convert user errors to HTTP exceptions."""
    status_map = {
        "user_not_found": status.HTTP_404_NOT_FOUND,
        "user_exists": status.HTTP_409_CONFLICT,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
