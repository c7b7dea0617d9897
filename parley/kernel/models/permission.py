"""
Permission grants for forum access control.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parley.kernel.models.base import Base, generate_uuid, utcnow


class PermissionType(str, Enum):
    """Actions a grant can allow inside a forum."""
    READ = "read"
    START = "start"
    REPLY = "reply"
    EDIT = "edit"
    DELETE = "delete"
    MODERATE = "moderate"


# Pseudo-roles matched alongside the account role
ROLE_ALL_USERS = "all-users"
ROLE_REGISTERED_USERS = "registered-users"


class Permission(Base):
    """
    A single grant: (role or member) x (forum or category) x permission type.

    Grants attached to a category apply to every forum of that category
    that carries no grants of its own.
    """

    __tablename__ = "permissions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    site_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Target
    forum_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("forums.id", ondelete="CASCADE"),
        nullable=True,
    )
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=True,
    )

    permission_type: Mapped[PermissionType] = mapped_column(
        String(50),
        nullable=False,
    )

    # Subject
    role: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    member_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "forum_id IS NOT NULL OR category_id IS NOT NULL",
            name="ck_permissions_target",
        ),
        CheckConstraint(
            "role IS NOT NULL OR member_id IS NOT NULL",
            name="ck_permissions_subject",
        ),
        Index("ix_permissions_site_forum", "site_id", "forum_id"),
        Index("ix_permissions_site_category", "site_id", "category_id"),
    )

    def __repr__(self) -> str:
        subject = self.role or f"member:{self.member_id}"
        target = self.forum_id or f"category:{self.category_id}"
        return f"<Permission {subject} {self.permission_type} on {target}>"
