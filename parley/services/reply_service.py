"""
Reply commands: create, update, mark as answer and delete.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.errors import EntityNotFoundError
from parley.kernel.events.event_store import EventStore
from parley.kernel.models.base import StatusType, utcnow
from parley.kernel.models.event_log import EventType
from parley.kernel.models.member import Member
from parley.kernel.models.post import Post
from parley.kernel.models.site import Category, Forum
from parley.logging_config import get_logger
from parley.services.counters import adjust_counters

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreateReply:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    topic_id: uuid.UUID
    content: str


@dataclass(frozen=True)
class UpdateReply:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    topic_id: uuid.UUID
    id: uuid.UUID
    content: str


@dataclass(frozen=True)
class SetReplyAsAnswer:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    topic_id: uuid.UUID
    id: uuid.UUID
    is_answer: bool


@dataclass(frozen=True)
class DeleteReply:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    topic_id: uuid.UUID
    id: uuid.UUID


class ReplyService:
    """Executes reply commands and keeps topic answer state consistent."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def create(self, command: CreateReply) -> uuid.UUID:
        """Add a published reply to a topic. Returns the reply id."""
        topic = await self._get_topic(command.site_id, command.forum_id, command.topic_id)

        reply = Post(
            forum_id=command.forum_id,
            topic_id=topic.id,
            member_id=command.member_id,
            content=command.content,
            status=StatusType.PUBLISHED,
        )
        self.session.add(reply)
        await self.session.flush()

        topic.last_reply_at = reply.created_at
        await adjust_counters(self.session, Post, topic.id, replies_count=1)
        await adjust_counters(self.session, Forum, command.forum_id, replies_count=1)
        await adjust_counters(self.session, Member, command.member_id, replies_count=1)

        await self.event_store.log(
            event_type=EventType.REPLY_CREATED,
            entity_type="reply",
            entity_id=reply.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "topic_id": topic.id},
        )
        logger.info(
            "Reply created",
            extra={"reply_id": str(reply.id), "topic_id": str(topic.id)},
        )
        return reply.id

    async def update(self, command: UpdateReply) -> None:
        reply = await self._get_reply(command)
        reply.content = command.content

        await self.event_store.log(
            event_type=EventType.REPLY_UPDATED,
            entity_type="reply",
            entity_id=reply.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "topic_id": command.topic_id},
        )
        logger.info("Reply updated", extra={"reply_id": str(reply.id)})

    async def set_as_answer(self, command: SetReplyAsAnswer) -> None:
        """
        Flag or unflag a reply as the topic's answer. Flagging clears any
        previous answer of the topic first. Unflagging a reply that is not
        the answer leaves the topic untouched.
        """
        topic = await self._get_topic(command.site_id, command.forum_id, command.topic_id)
        reply = await self._get_reply(command)

        if command.is_answer:
            await self.session.execute(
                update(Post)
                .where(
                    and_(
                        Post.topic_id == topic.id,
                        Post.id != reply.id,
                        Post.is_answer.is_(True),
                    )
                )
                .values(is_answer=False)
                .execution_options(synchronize_session="fetch")
            )
            reply.is_answer = True
            topic.has_answer = True
        elif reply.is_answer:
            reply.is_answer = False
            topic.has_answer = False

        await self.event_store.log(
            event_type=EventType.REPLY_ANSWER_SET,
            entity_type="reply",
            entity_id=reply.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={
                "forum_id": command.forum_id,
                "topic_id": topic.id,
                "is_answer": command.is_answer,
            },
        )
        logger.info(
            "Reply answer flag set",
            extra={"reply_id": str(reply.id), "is_answer": command.is_answer},
        )

    async def delete(self, command: DeleteReply) -> None:
        """Soft delete. Deleting the answer clears the topic's answer flag."""
        reply = await self._get_reply(command)
        reply.status = StatusType.DELETED

        if reply.is_answer:
            reply.is_answer = False
            topic = await self._get_topic(command.site_id, command.forum_id, command.topic_id)
            topic.has_answer = False

        await adjust_counters(self.session, Post, command.topic_id, replies_count=-1)
        await adjust_counters(self.session, Forum, command.forum_id, replies_count=-1)
        await adjust_counters(self.session, Member, reply.member_id, replies_count=-1)

        await self.event_store.log(
            event_type=EventType.REPLY_DELETED,
            entity_type="reply",
            entity_id=reply.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "topic_id": command.topic_id},
        )
        logger.info("Reply deleted", extra={"reply_id": str(reply.id)})

    async def _get_topic(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        topic_id: uuid.UUID,
    ) -> Post:
        query = (
            select(Post)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(
                and_(
                    Post.id == topic_id,
                    Post.topic_id.is_(None),
                    Post.forum_id == forum_id,
                    Post.status != StatusType.DELETED,
                    Category.site_id == site_id,
                )
            )
        )
        result = await self.session.execute(query)
        topic = result.scalar_one_or_none()
        if topic is None:
            raise EntityNotFoundError("topic", topic_id)
        return topic

    async def _get_reply(self, command) -> Post:
        query = (
            select(Post)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(
                and_(
                    Post.id == command.id,
                    Post.topic_id == command.topic_id,
                    Post.forum_id == command.forum_id,
                    Post.status != StatusType.DELETED,
                    Category.site_id == command.site_id,
                )
            )
        )
        result = await self.session.execute(query)
        reply = result.scalar_one_or_none()
        if reply is None:
            raise EntityNotFoundError("reply", command.id)
        return reply
