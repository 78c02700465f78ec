"""User API endpoints."""

from fastapi import APIRouter, Depends, status

from src.auth.dependencies import require_admin

from .dependencies import UserServiceDep, handle_user_error
from .schemas import CreateUserRequest, UserResponse
from .service import UserError


router = APIRouter(prefix="/api", tags=["users"])
admin_router = APIRouter(
    prefix="/api/admin/users",
    tags=["admin-users"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user profile",
)
async def create_user(data: CreateUserRequest, user_service: UserServiceDep) -> dict:
    """Create the local profile of a Firebase user."""
    try:
        return await user_service.create_user(data)
    except UserError as e:
        raise handle_user_error(e) from e


@router.get(
    "/user/{user_id}",
    response_model=UserResponse,
    summary="Get user",
)
async def get_user(user_id: int, user_service: UserServiceDep) -> dict:
    try:
        return await user_service.get_user(user_id)
    except UserError as e:
        raise handle_user_error(e) from e


@admin_router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
)
async def list_users(user_service: UserServiceDep) -> list[dict]:
    return await user_service.list_users()
