"""
Base model with common fields and utilities.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, func, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    # Generic Uuid type for cross-database compatibility
    type_annotation_map = {
        uuid.UUID: Uuid(),
    }


class StatusType(str, Enum):
    """Lifecycle status shared by categories, forums, posts and members."""
    PUBLISHED = "published"
    DELETED = "deleted"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )


def generate_uuid() -> uuid.UUID:
    """Generate a new UUID."""
    return uuid.uuid4()
