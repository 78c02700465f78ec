"""Enrollment API endpoints.

Provides routes for:
- Creating enrollments
- Coarse progress updates (100 marks completion)
- Listing a user's enrollments
- Listing every enrollment (admin)
"""

from fastapi import APIRouter, Depends, status

from src.auth.dependencies import require_admin
from src.users.service import UserError

from .dependencies import EnrollmentServiceDep, handle_enrollment_error
from .schemas import (
    CreateEnrollmentRequest,
    EnrollmentResponse,
    UpdateEnrollmentProgressRequest,
)
from .service import EnrollmentError


router = APIRouter(prefix="/api", tags=["enrollments"])
admin_router = APIRouter(
    prefix="/api/admin/enrollments",
    tags=["admin-enrollments"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "/enrollments",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create enrollment",
)
async def create_enrollment(
    data: CreateEnrollmentRequest,
    enrollment_service: EnrollmentServiceDep,
) -> dict:
    try:
        return await enrollment_service.create_enrollment(data)
    except (EnrollmentError, UserError) as e:
        raise handle_enrollment_error(e) from e


@router.patch(
    "/enrollments/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Update enrollment progress",
)
async def update_enrollment_progress(
    enrollment_id: int,
    data: UpdateEnrollmentProgressRequest,
    enrollment_service: EnrollmentServiceDep,
) -> dict:
    """Set progress; completedAt is set at 100 and cleared otherwise."""
    try:
        return await enrollment_service.update_progress(enrollment_id, data.progress)
    except EnrollmentError as e:
        raise handle_enrollment_error(e) from e


@router.get(
    "/user/{user_id}/enrollments",
    response_model=list[EnrollmentResponse],
    summary="List enrollments of a user",
)
async def list_user_enrollments(
    user_id: int,
    enrollment_service: EnrollmentServiceDep,
) -> list[dict]:
    try:
        return await enrollment_service.list_user_enrollments(user_id)
    except UserError as e:
        raise handle_enrollment_error(e) from e


@admin_router.get(
    "",
    response_model=list[EnrollmentResponse],
    summary="List all enrollments",
)
async def list_enrollments(enrollment_service: EnrollmentServiceDep) -> list[dict]:
    return await enrollment_service.list_enrollments()
