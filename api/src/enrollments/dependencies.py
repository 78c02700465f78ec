"""FastAPI dependencies for enrollments.

Provides dependency injection for:
- Enrollment service
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.users.service import UserError

from .service import EnrollmentError, EnrollmentService


async def get_enrollment_service(request: Request) -> EnrollmentService:
    """Get enrollment service from app state.

    Args:
        request: FastAPI request

    Returns:
        EnrollmentService instance
    """
    service = getattr(request.app.state, "enrollment_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrollment service not available",
        )
    return service


EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]


def handle_enrollment_error(error: EnrollmentError | UserError) -> HTTPException:
    """Convert enrollment errors to HTTP exceptions.

    Args:
        error: Enrollment or user error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "enrollment_not_found": status.HTTP_404_NOT_FOUND,
        "user_not_found": status.HTTP_404_NOT_FOUND,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
