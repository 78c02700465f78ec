"""Enrollment service layer.

Progress is a coarse 0-100 percentage per enrollment. ``completed_at`` is
set in the same statement that sets progress to 100 and cleared by any
other value, so the two never disagree.
"""

from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import insert, select, update

from src.core.database import Database, enrollments, utcnow
from src.users.service import UserNotFoundError, user_exists

from .schemas import COMPLETE_PROGRESS, CreateEnrollmentRequest


logger = structlog.get_logger(__name__)


class EnrollmentError(Exception):
    """Base enrollment error."""

    def __init__(self, message: str, code: str = "enrollment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class EnrollmentNotFoundError(EnrollmentError):
    """Enrollment not found."""

    def __init__(self, message: str = "Enrollment not found"):
        super().__init__(message, "enrollment_not_found")


def completion_time(progress: int, now: datetime) -> datetime | None:
    """completed_at value for a progress value."""
    return now if progress == COMPLETE_PROGRESS else None


class EnrollmentService:
    """Service for enrollments and progress."""

    def __init__(self, database: Database):
        self.database = database

    async def list_enrollments(self) -> list[dict[str, Any]]:
        """All enrollments (admin)."""
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(enrollments).order_by(enrollments.c.id)
            )
            return [dict(row) for row in result.mappings().all()]

    async def list_user_enrollments(self, user_id: int) -> list[dict[str, Any]]:
        """Enrollments of one user.

        Raises:
            UserNotFoundError: No user with this id.
        """
        async with self.database.connection() as conn:
            if not await user_exists(conn, user_id):
                raise UserNotFoundError
            result = await conn.execute(
                select(enrollments)
                .where(enrollments.c.user_id == user_id)
                .order_by(enrollments.c.id)
            )
            return [dict(row) for row in result.mappings().all()]

    async def create_enrollment(self, data: CreateEnrollmentRequest) -> dict[str, Any]:
        """Create an enrollment.

        Raises:
            UserNotFoundError: No user with this id.
        """
        now = utcnow()
        async with self.database.transaction() as conn:
            if not await user_exists(conn, data.user_id):
                raise UserNotFoundError
            result = await conn.execute(
                insert(enrollments)
                .values(
                    user_id=data.user_id,
                    enrolled=data.enrolled,
                    progress=data.progress,
                    completed_at=completion_time(data.progress, now),
                    created_at=now,
                    updated_at=now,
                )
                .returning(enrollments)
            )
            row = dict(result.mappings().one())

        logger.info("enrollment_created", enrollment_id=row["id"], user_id=data.user_id)
        return row

    async def update_progress(self, enrollment_id: int, progress: int) -> dict[str, Any]:
        """Set progress, derive completed_at and refresh updated_at.

        Raises:
            EnrollmentNotFoundError: No enrollment with this id.
        """
        now = utcnow()
        async with self.database.transaction() as conn:
            result = await conn.execute(
                update(enrollments)
                .where(enrollments.c.id == enrollment_id)
                .values(
                    progress=progress,
                    completed_at=completion_time(progress, now),
                    updated_at=now,
                )
                .returning(enrollments)
            )
            row = result.mappings().first()

        if row is None:
            raise EnrollmentNotFoundError

        logger.info(
            "enrollment_progress_updated",
            enrollment_id=enrollment_id,
            progress=progress,
            completed=row["completed_at"] is not None,
        )
        return dict(row)
