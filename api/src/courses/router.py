"""Course content API endpoints.

Public routes expose published content only; admin routes see everything
and require an administrator token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.auth.dependencies import require_admin
from src.core.schemas import MessageResponse

from .dependencies import LessonServiceDep, ModuleServiceDep, handle_course_error
from .schemas import (
    CreateLessonRequest,
    CreateModuleRequest,
    LessonResponse,
    ModuleResponse,
    UpdateLessonRequest,
    UpdateModuleRequest,
)
from .service import CourseError


# ==============================================================================
# Public Endpoints
# ==============================================================================

router_modules = APIRouter(prefix="/api/modules", tags=["modules"])
router_lessons = APIRouter(prefix="/api/lessons", tags=["lessons"])


@router_modules.get(
    "",
    response_model=list[ModuleResponse],
    summary="List published modules",
)
async def list_published_modules(
    module_service: ModuleServiceDep,
) -> list[dict]:
    """Modules with isPublished = true, in display order."""
    return await module_service.list_published_modules()


@router_lessons.get(
    "/{module_id}",
    response_model=list[LessonResponse],
    summary="List published lessons of a module",
)
async def list_published_lessons(
    module_id: int,
    lesson_service: LessonServiceDep,
) -> list[dict]:
    """Published lessons of a module ordered by ``order``."""
    return await lesson_service.list_published_lessons(module_id)


# ==============================================================================
# Admin Module Endpoints
# ==============================================================================

admin_modules = APIRouter(
    prefix="/api/admin/modules",
    tags=["admin-modules"],
    dependencies=[Depends(require_admin)],
)


@admin_modules.get(
    "",
    response_model=list[ModuleResponse],
    summary="List all modules",
)
async def list_modules(module_service: ModuleServiceDep) -> list[dict]:
    """All modules, published or not."""
    return await module_service.list_modules()


@admin_modules.post(
    "",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create module",
)
async def create_module(
    data: CreateModuleRequest,
    module_service: ModuleServiceDep,
) -> dict:
    return await module_service.create_module(data)


@admin_modules.get(
    "/{module_id}",
    response_model=ModuleResponse,
    summary="Get module",
)
async def get_module(module_id: int, module_service: ModuleServiceDep) -> dict:
    try:
        return await module_service.get_module(module_id)
    except CourseError as e:
        raise handle_course_error(e) from e


@admin_modules.patch(
    "/{module_id}",
    response_model=ModuleResponse,
    summary="Update module",
)
async def update_module(
    module_id: int,
    data: UpdateModuleRequest,
    module_service: ModuleServiceDep,
) -> dict:
    """Partial update; only fields present in the body change."""
    try:
        return await module_service.update_module(module_id, data)
    except CourseError as e:
        raise handle_course_error(e) from e


@admin_modules.delete(
    "/{module_id}",
    response_model=MessageResponse,
    summary="Delete module and its lessons",
)
async def delete_module(
    module_id: int,
    module_service: ModuleServiceDep,
) -> MessageResponse:
    try:
        await module_service.delete_module(module_id)
    except CourseError as e:
        raise handle_course_error(e) from e
    return MessageResponse(message="Module deleted successfully")


# ==============================================================================
# Admin Lesson Endpoints
# ==============================================================================

admin_lessons = APIRouter(
    prefix="/api/admin/lessons",
    tags=["admin-lessons"],
    dependencies=[Depends(require_admin)],
)


@admin_lessons.get(
    "",
    response_model=list[LessonResponse],
    summary="List all lessons",
)
async def list_lessons(
    lesson_service: LessonServiceDep,
    module_id: Annotated[int | None, Query(alias="moduleId")] = None,
) -> list[dict]:
    """All lessons, published or not, optionally filtered by module."""
    return await lesson_service.list_lessons(module_id)


@admin_lessons.post(
    "",
    response_model=LessonResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create lesson",
)
async def create_lesson(
    data: CreateLessonRequest,
    lesson_service: LessonServiceDep,
) -> dict:
    try:
        return await lesson_service.create_lesson(data)
    except CourseError as e:
        raise handle_course_error(e) from e


@admin_lessons.get(
    "/{lesson_id}",
    response_model=LessonResponse,
    summary="Get lesson",
)
async def get_lesson(lesson_id: int, lesson_service: LessonServiceDep) -> dict:
    try:
        return await lesson_service.get_lesson(lesson_id)
    except CourseError as e:
        raise handle_course_error(e) from e


@admin_lessons.patch(
    "/{lesson_id}",
    response_model=LessonResponse,
    summary="Update lesson",
)
async def update_lesson(
    lesson_id: int,
    data: UpdateLessonRequest,
    lesson_service: LessonServiceDep,
) -> dict:
    try:
        return await lesson_service.update_lesson(lesson_id, data)
    except CourseError as e:
        raise handle_course_error(e) from e


@admin_lessons.delete(
    "/{lesson_id}",
    response_model=MessageResponse,
    summary="Delete lesson",
)
async def delete_lesson(
    lesson_id: int,
    lesson_service: LessonServiceDep,
) -> MessageResponse:
    try:
        await lesson_service.delete_lesson(lesson_id)
    except CourseError as e:
        raise handle_course_error(e) from e
    return MessageResponse(message="Lesson deleted successfully")
