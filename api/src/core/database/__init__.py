"""Database access for LearnHub."""

from src.core.database.engine import Database
from src.core.database.tables import (
    enrollments,
    lessons,
    metadata,
    modules,
    users,
    utcnow,
)


__all__ = [
    "Database",
    "enrollments",
    "lessons",
    "metadata",
    "modules",
    "users",
    "utcnow",
]
