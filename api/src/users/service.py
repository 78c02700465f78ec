"""User service layer."""

from typing import Any

import structlog
from sqlalchemy import insert, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection

from src.core.database import Database, users

from .schemas import CreateUserRequest


logger = structlog.get_logger(__name__)

# Everything except the password placeholder
PUBLIC_COLUMNS = (
    users.c.id,
    users.c.username,
    users.c.email,
    users.c.name,
    users.c.created_at,
)


class UserError(Exception):
    """Base user error."""

    def __init__(self, message: str, code: str = "user_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class UserNotFoundError(UserError):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, "user_not_found")


class UserAlreadyExistsError(UserError):
    """Username or email already registered."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(message, "user_exists")


async def user_exists(conn: AsyncConnection, user_id: int) -> bool:
    """Check a user id inside an existing connection."""
    result = await conn.execute(select(users.c.id).where(users.c.id == user_id))
    return result.first() is not None


class UserService:
    """Service for user records."""

    def __init__(self, database: Database):
        self.database = database

    async def list_users(self) -> list[dict[str, Any]]:
        """All users, newest first (admin)."""
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(*PUBLIC_COLUMNS).order_by(
                    users.c.created_at.desc(), users.c.id.desc()
                )
            )
            return [dict(row) for row in result.mappings().all()]

    async def get_user(self, user_id: int) -> dict[str, Any]:
        async with self.database.connection() as conn:
            result = await conn.execute(
                select(*PUBLIC_COLUMNS).where(users.c.id == user_id)
            )
            row = result.mappings().first()
        if row is None:
            raise UserNotFoundError
        return dict(row)

    async def create_user(self, data: CreateUserRequest) -> dict[str, Any]:
        """Create a user; the password column is always stored empty.

        Raises:
            UserAlreadyExistsError: Username or email already used.
        """
        async with self.database.transaction() as conn:
            existing = await conn.execute(
                select(users.c.username, users.c.email).where(
                    or_(users.c.username == data.username, users.c.email == data.email)
                )
            )
            clash = existing.mappings().first()
            if clash is not None:
                if clash["username"] == data.username:
                    raise UserAlreadyExistsError("Username already taken")
                raise UserAlreadyExistsError("Email already registered")

            try:
                result = await conn.execute(
                    insert(users)
                    .values(
                        username=data.username,
                        email=data.email,
                        name=data.name,
                        password="",
                    )
                    .returning(*PUBLIC_COLUMNS)
                )
            except IntegrityError as e:
                # Concurrent sign-up with the same username/email
                raise UserAlreadyExistsError from e
            row = dict(result.mappings().one())

        logger.info("user_created", user_id=row["id"], username=row["username"])
        return row
