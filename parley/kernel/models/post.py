"""
Post model. Topics and replies share one table: a topic is a post with no
parent, a reply points at its topic through topic_id.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parley.kernel.models.base import Base, StatusType, TimestampMixin, generate_uuid


class Post(Base, TimestampMixin):
    """A topic (topic_id is None) or a reply (topic_id set)."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    forum_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("forums.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    topic_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("posts.id"),
        nullable=True,
        index=True,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("members.id"),
        nullable=False,
        index=True,
    )

    # Topics only
    title: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    slug: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    # Raw markdown; rendered on read
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    status: Mapped[StatusType] = mapped_column(
        String(50),
        default=StatusType.PUBLISHED,
        nullable=False,
    )

    # Moderation state (topics)
    pinned: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    locked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    has_answer: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    replies_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    last_reply_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Replies only
    is_answer: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_posts_forum_slug", "forum_id", "slug"),
        Index("ix_posts_topic_status", "topic_id", "status"),
    )

    @property
    def is_topic(self) -> bool:
        return self.topic_id is None

    def __repr__(self) -> str:
        kind = "topic" if self.is_topic else "reply"
        return f"<Post {kind} {self.id}>"
