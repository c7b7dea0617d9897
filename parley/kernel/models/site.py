"""
Tenant and forum hierarchy: Site -> Category -> Forum.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parley.kernel.models.base import Base, StatusType, TimestampMixin, generate_uuid


class Site(Base, TimestampMixin):
    """Tenant boundary. Every forum query is scoped by site."""

    __tablename__ = "sites"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Site {self.name}>"


class Category(Base, TimestampMixin):
    """Groups forums on a site's index page."""

    __tablename__ = "categories"

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
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    status: Mapped[StatusType] = mapped_column(
        String(50),
        default=StatusType.PUBLISHED,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Forum(Base, TimestampMixin):
    """A board holding topics. Counters are maintained by the post services."""

    __tablename__ = "forums"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    status: Mapped[StatusType] = mapped_column(
        String(50),
        default=StatusType.PUBLISHED,
        nullable=False,
    )
    topics_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    replies_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_forums_category_slug", "category_id", "slug"),
    )

    def __repr__(self) -> str:
        return f"<Forum {self.slug}>"
