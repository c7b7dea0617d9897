"""
Append-only audit log of forum mutations.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parley.kernel.models.base import Base, generate_uuid, utcnow


class EventType(str, Enum):
    """All event types for the audit log."""

    # Account events
    USER_REGISTERED = "user.registered"
    USER_LOGGED_IN = "user.logged_in"
    USER_LOGGED_OUT = "user.logged_out"
    MEMBER_CREATED = "member.created"

    # Topic events
    TOPIC_CREATED = "topic.created"
    TOPIC_UPDATED = "topic.updated"
    TOPIC_PINNED = "topic.pinned"
    TOPIC_LOCKED = "topic.locked"
    TOPIC_DELETED = "topic.deleted"

    # Reply events
    REPLY_CREATED = "reply.created"
    REPLY_UPDATED = "reply.updated"
    REPLY_ANSWER_SET = "reply.answer_set"
    REPLY_DELETED = "reply.deleted"


class EventLog(Base):
    """
    Immutable audit record. Rows are only ever inserted.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    site_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )
    # Acting member, or the user id for account events
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )
    payload: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
