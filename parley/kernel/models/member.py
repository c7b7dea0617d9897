"""
Member model - the forum-facing identity of an account.
"""

import uuid

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parley.kernel.models.base import Base, StatusType, TimestampMixin, generate_uuid


class Member(Base, TimestampMixin):
    """
    Forum identity, distinct from the User account record.

    Owns authored posts. The email is kept so display layers can derive a
    gravatar hash without reading the account table.
    """

    __tablename__ = "members"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(
        String(255),
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
    status: Mapped[StatusType] = mapped_column(
        String(50),
        default=StatusType.PUBLISHED,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Member {self.display_name}>"
