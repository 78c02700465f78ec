"""Course content service layer.

Business logic for:
- Modules: list (published/all), CRUD, cascade delete of lessons
- Lessons: list by module, CRUD, YouTube video field derivation
"""

from typing import Any

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from src.core.database import Database, lessons, modules, utcnow
from src.storage.service import LocalStorageService, StorageError
from src.video.service import YouTubeUrlError, parse_youtube_url

from .schemas import (
    CreateLessonRequest,
    CreateModuleRequest,
    UpdateLessonRequest,
    UpdateModuleRequest,
)


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CourseError(Exception):
    """Base course content error."""

    def __init__(self, message: str, code: str = "course_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CourseModuleNotFoundError(CourseError):
    """Module not found."""

    def __init__(self, message: str = "Module not found"):
        super().__init__(message, "module_not_found")


class LessonNotFoundError(CourseError):
    """Lesson not found."""

    def __init__(self, message: str = "Lesson not found"):
        super().__init__(message, "lesson_not_found")


class InvalidLessonContentError(CourseError):
    """Lesson content cannot be accepted (e.g. unparseable YouTube URL)."""

    def __init__(self, message: str):
        super().__init__(message, "invalid_content")


# ==============================================================================
# Helpers
# ==============================================================================


async def _module_exists(conn: AsyncConnection, module_id: int) -> bool:
    result = await conn.execute(select(modules.c.id).where(modules.c.id == module_id))
    return result.first() is not None


async def _remove_pdfs(
    storage: LocalStorageService | None, urls: list[str | None]
) -> None:
    """Delete stored PDFs no lesson points at any more.

    Runs after the database change committed; a failed removal is logged and
    leaves the file behind.
    """
    if storage is None:
        return
    for url in urls:
        try:
            await storage.delete_by_url(url)
        except (StorageError, OSError) as e:
            logger.warning("lesson_pdf_cleanup_failed", pdf_url=url, error=str(e))


def derive_video_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Fill youtube_video_id/video_thumbnail from youtube_url.

    - youtube_url absent: nothing changes.
    - youtube_url empty or null: all three video fields are cleared.
    - explicit youtube_video_id: kept as sent.

    Raises:
        InvalidLessonContentError: youtube_url is not a YouTube URL.
    """
    if "youtube_url" not in values:
        return values

    url = values["youtube_url"]
    if not url:
        values.update(youtube_url=None, youtube_video_id=None, video_thumbnail=None)
        return values

    if values.get("youtube_video_id"):
        return values

    result = parse_youtube_url(url)
    if isinstance(result, YouTubeUrlError):
        raise InvalidLessonContentError(result.message)

    values["youtube_video_id"] = result.video_id
    if not values.get("video_thumbnail"):
        values["video_thumbnail"] = result.thumbnail_url
    return values


# ==============================================================================
# Module Service
# ==============================================================================


class ModuleService:
    """Service for module management."""

    def __init__(self, database: Database, storage: LocalStorageService | None = None):
        self.database = database
        self.storage = storage

    async def list_published_modules(self) -> list[dict[str, Any]]:
        """Modules visible to students, in display order."""
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(modules)
                .where(modules.c.is_published)
                .order_by(modules.c.order, modules.c.id)
            )
            return [dict(row) for row in result.mappings().all()]

    async def list_modules(self) -> list[dict[str, Any]]:
        """All modules regardless of published state (admin)."""
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(modules).order_by(modules.c.order, modules.c.id)
            )
            return [dict(row) for row in result.mappings().all()]

    async def get_module(self, module_id: int) -> dict[str, Any]:
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(modules).where(modules.c.id == module_id)
            )
            row = result.mappings().first()
        if row is None:
            raise CourseModuleNotFoundError
        return dict(row)

    async def create_module(self, data: CreateModuleRequest) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            result = await conn.execute(
                insert(modules).values(**data.model_dump()).returning(modules)
            )
            row = dict(result.mappings().one())

        logger.info("module_created", module_id=row["id"], title=row["title"])
        return row

    async def update_module(
        self, module_id: int, data: UpdateModuleRequest
    ) -> dict[str, Any]:
        """Apply a partial update and refresh updated_at.

        Raises:
            CourseModuleNotFoundError: No module with this id.
        """
        values = data.changes()
        values["updated_at"] = utcnow()

        async with self.database.transaction() as conn:
            result = await conn.execute(
                update(modules)
                .where(modules.c.id == module_id)
                .values(**values)
                .returning(modules)
            )
            row = result.mappings().first()

        if row is None:
            raise CourseModuleNotFoundError

        logger.info("module_updated", module_id=module_id, fields=sorted(values))
        return dict(row)

    async def delete_module(self, module_id: int) -> int:
        """Delete a module and its lessons atomically.

        Lessons are deleted first, then the module, in one transaction. Their
        stored PDFs are removed once the transaction committed.

        Returns:
            Number of lessons deleted.

        Raises:
            CourseModuleNotFoundError: No module with this id (nothing deleted).
        """
        async with self.database.transaction() as conn:
            if not await _module_exists(conn, module_id):
                raise CourseModuleNotFoundError

            lessons_result = await conn.execute(
                delete(lessons)
                .where(lessons.c.module_id == module_id)
                .returning(lessons.c.pdf_url)
            )
            pdf_urls = list(lessons_result.scalars().all())
            await conn.execute(delete(modules).where(modules.c.id == module_id))

        await _remove_pdfs(self.storage, pdf_urls)
        logger.info(
            "module_deleted",
            module_id=module_id,
            lessons_deleted=len(pdf_urls),
        )
        return len(pdf_urls)


# ==============================================================================
# Lesson Service
# ==============================================================================


class LessonService:
    """Service for lesson management."""

    def __init__(self, database: Database, storage: LocalStorageService | None = None):
        self.database = database
        self.storage = storage

    async def list_published_lessons(self, module_id: int) -> list[dict[str, Any]]:
        """Published lessons of a module ordered by ``order``."""
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(lessons)
                .where(lessons.c.module_id == module_id, lessons.c.is_published)
                .order_by(lessons.c.order, lessons.c.id)
            )
            return [dict(row) for row in result.mappings().all()]

    async def list_lessons(self, module_id: int | None = None) -> list[dict[str, Any]]:
        """All lessons, optionally of one module (admin)."""
        query = select(lessons).order_by(
            lessons.c.module_id, lessons.c.order, lessons.c.id
        )
        if module_id is not None:
            query = query.where(lessons.c.module_id == module_id)

        async with self.database.connection() as conn:
            result = await conn.execute(query)
            return [dict(row) for row in result.mappings().all()]

    async def get_lesson(self, lesson_id: int) -> dict[str, Any]:
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(lessons).where(lessons.c.id == lesson_id)
            )
            row = result.mappings().first()
        if row is None:
            raise LessonNotFoundError
        return dict(row)

    async def create_lesson(self, data: CreateLessonRequest) -> dict[str, Any]:
        """Create a lesson.

        Raises:
            CourseModuleNotFoundError: Parent module does not exist.
            InvalidLessonContentError: youtube_url is not a YouTube URL.
        """
        values = derive_video_fields(data.model_dump())

        async with self.database.transaction() as conn:
            if not await _module_exists(conn, values["module_id"]):
                raise CourseModuleNotFoundError
            result = await conn.execute(
                insert(lessons).values(**values).returning(lessons)
            )
            row = dict(result.mappings().one())

        logger.info(
            "lesson_created",
            lesson_id=row["id"],
            module_id=row["module_id"],
            has_video=row["youtube_video_id"] is not None,
            has_pdf=row["pdf_url"] is not None,
        )
        return row

    async def update_lesson(
        self, lesson_id: int, data: UpdateLessonRequest
    ) -> dict[str, Any]:
        """Apply a partial update and refresh updated_at.

        Replacing or clearing ``pdf_url`` removes the previously stored PDF.

        Raises:
            LessonNotFoundError: No lesson with this id.
            CourseModuleNotFoundError: Lesson moved to a missing module.
            InvalidLessonContentError: youtube_url is not a YouTube URL.
        """
        values = derive_video_fields(data.changes())
        values["updated_at"] = utcnow()

        async with self.database.transaction() as conn:
            if "module_id" in values and not await _module_exists(
                conn, values["module_id"]
            ):
                raise CourseModuleNotFoundError
            previous_pdf_url = None
            if "pdf_url" in values:
                previous = await conn.execute(
                    select(lessons.c.pdf_url)
                    .where(lessons.c.id == lesson_id)
                    .with_for_update()
                )
                previous_pdf_url = previous.scalar_one_or_none()
            result = await conn.execute(
                update(lessons)
                .where(lessons.c.id == lesson_id)
                .values(**values)
                .returning(lessons)
            )
            row = result.mappings().first()

        if row is None:
            raise LessonNotFoundError

        if previous_pdf_url and previous_pdf_url != row["pdf_url"]:
            await _remove_pdfs(self.storage, [previous_pdf_url])

        logger.info("lesson_updated", lesson_id=lesson_id, fields=sorted(values))
        return dict(row)

    async def delete_lesson(self, lesson_id: int) -> None:
        """Delete a lesson and its stored PDF.

        Raises:
            LessonNotFoundError: No lesson with this id.
        """
        async with self.database.transaction() as conn:
            result = await conn.execute(
                delete(lessons)
                .where(lessons.c.id == lesson_id)
                .returning(lessons.c.id, lessons.c.pdf_url)
            )
            deleted = result.first()

        if deleted is None:
            raise LessonNotFoundError

        await _remove_pdfs(self.storage, [deleted.pdf_url])
        logger.info("lesson_deleted", lesson_id=lesson_id)
