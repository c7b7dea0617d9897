"""
Topic commands: create, update, pin, lock and delete.

Callers authorize first; each method still re-checks that the topic (or
forum) exists inside the claimed site and forum before mutating it.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.errors import EntityNotFoundError
from parley.kernel.events.event_store import EventStore
from parley.kernel.models.base import StatusType
from parley.kernel.models.event_log import EventType
from parley.kernel.models.member import Member
from parley.kernel.models.post import Post
from parley.kernel.models.site import Category, Forum
from parley.logging_config import get_logger
from parley.services.counters import adjust_counters
from parley.services.slugs import generate_topic_slug

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreateTopic:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    title: str
    content: str


@dataclass(frozen=True)
class UpdateTopic:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    id: uuid.UUID
    title: str
    content: str


@dataclass(frozen=True)
class PinTopic:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    id: uuid.UUID
    pinned: bool


@dataclass(frozen=True)
class LockTopic:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    id: uuid.UUID
    locked: bool


@dataclass(frozen=True)
class DeleteTopic:
    site_id: uuid.UUID
    forum_id: uuid.UUID
    member_id: uuid.UUID
    id: uuid.UUID


class TopicService:
    """Executes topic commands and writes their audit events."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def create(self, command: CreateTopic) -> str:
        """Create a published topic. Returns its slug."""
        await self._require_forum(command.site_id, command.forum_id)

        slug = await generate_topic_slug(self.session, command.forum_id, command.title)
        topic = Post(
            forum_id=command.forum_id,
            topic_id=None,
            member_id=command.member_id,
            title=command.title.strip(),
            slug=slug,
            content=command.content,
            status=StatusType.PUBLISHED,
        )
        self.session.add(topic)
        await self.session.flush()

        await adjust_counters(self.session, Forum, command.forum_id, topics_count=1)
        await adjust_counters(self.session, Member, command.member_id, topics_count=1)

        await self.event_store.log(
            event_type=EventType.TOPIC_CREATED,
            entity_type="topic",
            entity_id=topic.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "title": topic.title, "slug": slug},
        )
        logger.info(
            "Topic created",
            extra={"topic_id": str(topic.id), "forum_id": str(command.forum_id)},
        )
        return slug

    async def update(self, command: UpdateTopic) -> str:
        """
        Rewrite title and content. The slug is regenerated only when the title
        changes. Returns the (possibly new) slug.
        """
        topic = await self._get_topic(command.site_id, command.forum_id, command.id)

        title = command.title.strip()
        if title != topic.title:
            topic.slug = await generate_topic_slug(
                self.session, command.forum_id, title, exclude_topic_id=topic.id
            )
        topic.title = title
        topic.content = command.content

        await self.event_store.log(
            event_type=EventType.TOPIC_UPDATED,
            entity_type="topic",
            entity_id=topic.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "title": title, "slug": topic.slug},
        )
        logger.info("Topic updated", extra={"topic_id": str(topic.id)})
        return topic.slug

    async def pin(self, command: PinTopic) -> None:
        topic = await self._get_topic(command.site_id, command.forum_id, command.id)
        topic.pinned = command.pinned

        await self.event_store.log(
            event_type=EventType.TOPIC_PINNED,
            entity_type="topic",
            entity_id=topic.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "pinned": command.pinned},
        )
        logger.info(
            "Topic pin set",
            extra={"topic_id": str(topic.id), "pinned": command.pinned},
        )

    async def lock(self, command: LockTopic) -> None:
        """Set the lock flag. Setting it to its current value is a no-op, not an error."""
        topic = await self._get_topic(command.site_id, command.forum_id, command.id)
        topic.locked = command.locked

        await self.event_store.log(
            event_type=EventType.TOPIC_LOCKED,
            entity_type="topic",
            entity_id=topic.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id, "locked": command.locked},
        )
        logger.info(
            "Topic lock set",
            extra={"topic_id": str(topic.id), "locked": command.locked},
        )

    async def delete(self, command: DeleteTopic) -> None:
        """
        Soft delete. Forum counters and the reply counts of every member who
        replied are reversed along with the author's topic count.
        """
        topic = await self._get_topic(command.site_id, command.forum_id, command.id)
        topic.status = StatusType.DELETED

        await adjust_counters(
            self.session,
            Forum,
            command.forum_id,
            topics_count=-1,
            replies_count=-topic.replies_count,
        )
        await adjust_counters(self.session, Member, topic.member_id, topics_count=-1)

        repliers = await self.session.execute(
            select(Post.member_id, func.count(Post.id))
            .where(
                and_(
                    Post.topic_id == topic.id,
                    Post.status == StatusType.PUBLISHED,
                )
            )
            .group_by(Post.member_id)
        )
        for member_id, count in repliers.all():
            await adjust_counters(self.session, Member, member_id, replies_count=-count)

        await self.event_store.log(
            event_type=EventType.TOPIC_DELETED,
            entity_type="topic",
            entity_id=topic.id,
            site_id=command.site_id,
            actor_id=command.member_id,
            payload={"forum_id": command.forum_id},
        )
        logger.info("Topic deleted", extra={"topic_id": str(topic.id)})

    async def _require_forum(self, site_id: uuid.UUID, forum_id: uuid.UUID) -> None:
        query = (
            select(Forum.id)
            .join(Category, Category.id == Forum.category_id)
            .where(
                and_(
                    Forum.id == forum_id,
                    Forum.status == StatusType.PUBLISHED,
                    Category.site_id == site_id,
                )
            )
        )
        result = await self.session.execute(query)
        if result.scalar_one_or_none() is None:
            raise EntityNotFoundError("forum", forum_id)

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
