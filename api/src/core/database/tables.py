"""SQLAlchemy Core table definitions."""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    false,
    func,
)


def utcnow() -> datetime:
    """Timezone-aware current time used for created_at/updated_at."""
    return datetime.now(UTC)


convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# USERS
# =====================================================
users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", Text, nullable=False, unique=True),
    # Placeholder, identity lives in Firebase
    Column("password", Text, nullable=False, default="", server_default=""),
    Column("email", Text, nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
)


# =====================================================
# ENROLLMENTS
# =====================================================
enrollments = Table(
    "enrollments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    ),
    Column("enrolled", Boolean, nullable=False, default=False, server_default=false()),
    Column("progress", Integer, nullable=False, default=0, server_default="0"),
    Column("completed_at", DateTime(timezone=True)),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
    CheckConstraint("progress >= 0 AND progress <= 100", name="progress_range"),
    Index("idx_enrollments_user_id", "user_id"),
)


# =====================================================
# MODULES
# =====================================================
modules = Table(
    "modules",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False),
    # Denormalized label shown in the UI, not kept in sync with lessons
    Column("lessons", Integer, nullable=False, default=0, server_default="0"),
    Column("duration", Text, nullable=False),
    Column("order", Integer, nullable=False),
    Column(
        "is_published", Boolean, nullable=False, default=False, server_default=false()
    ),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
)


# =====================================================
# LESSONS
# =====================================================
lessons = Table(
    "lessons",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "module_id",
        Integer,
        ForeignKey("modules.id"),
        nullable=False,
    ),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("youtube_url", Text),
    Column("youtube_video_id", Text),
    Column("video_thumbnail", Text),
    Column("pdf_url", Text),
    Column("pdf_file_name", Text),
    Column("order", Integer, nullable=False),
    Column("duration", Text, nullable=False),
    Column(
        "is_published", Boolean, nullable=False, default=False, server_default=false()
    ),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    ),
    Index("idx_lessons_module_order", "module_id", "order"),
)
