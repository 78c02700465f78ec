"""FastAPI dependencies for course content.

Provides dependency injection for:
- Service instances (created at startup, stored on app.state)
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.courses.service import CourseError, LessonService, ModuleService


def get_module_service(request: Request) -> ModuleService:
    """Get ModuleService from app state."""
    service = getattr(request.app.state, "module_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Module service not available",
        )
    return service


def get_lesson_service(request: Request) -> LessonService:
    """Get LessonService from app state."""
    service = getattr(request.app.state, "lesson_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lesson service not available",
        )
    return service


ModuleServiceDep = Annotated[ModuleService, Depends(get_module_service)]
LessonServiceDep = Annotated[LessonService, Depends(get_lesson_service)]


def handle_course_error(error: CourseError) -> HTTPException:
    """Convert course errors to HTTPException."""
    status_map = {
        "module_not_found": status.HTTP_404_NOT_FOUND,
        "lesson_not_found": status.HTTP_404_NOT_FOUND,
        "invalid_content": status.HTTP_400_BAD_REQUEST,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
