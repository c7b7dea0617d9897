"""Integration tests for topic and reply commands."""

import uuid

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.errors import EntityNotFoundError
from parley.kernel.events.event_store import EventStore
from parley.kernel.models import EventType, Forum, Member, Post, Site, StatusType
from parley.services.reply_service import (
    CreateReply,
    DeleteReply,
    ReplyService,
    SetReplyAsAnswer,
)
from parley.services.topic_service import (
    CreateTopic,
    DeleteTopic,
    LockTopic,
    TopicService,
    UpdateTopic,
)


async def _topic_by_slug(session: AsyncSession, forum: Forum, slug: str) -> Post:
    result = await session.execute(
        select(Post).where(Post.forum_id == forum.id, Post.slug == slug)
    )
    return result.scalar_one()


@pytest_asyncio.fixture
async def topic(db_session: AsyncSession, site: Site, forum: Forum, test_member: Member) -> Post:
    slug = await TopicService(db_session).create(
        CreateTopic(
            site_id=site.id,
            forum_id=forum.id,
            member_id=test_member.id,
            title="Hello World",
            content="Hello **world**",
        )
    )
    await db_session.commit()
    return await _topic_by_slug(db_session, forum, slug)


async def _reply(session, site, forum, topic, member, content="A reply") -> uuid.UUID:
    reply_id = await ReplyService(session).create(
        CreateReply(
            site_id=site.id,
            forum_id=forum.id,
            member_id=member.id,
            topic_id=topic.id,
            content=content,
        )
    )
    await session.commit()
    return reply_id


def _answer(site, forum, topic, member, reply_id, is_answer=True) -> SetReplyAsAnswer:
    return SetReplyAsAnswer(
        site_id=site.id,
        forum_id=forum.id,
        member_id=member.id,
        topic_id=topic.id,
        id=reply_id,
        is_answer=is_answer,
    )


class TestTopicService:
    """Topic commands."""

    @pytest.mark.asyncio
    async def test_create_topic_updates_counters(
        self, db_session: AsyncSession, forum: Forum, test_member: Member, topic: Post
    ):
        """Creating a topic bumps the forum and author topic counts."""
        await db_session.refresh(forum)
        await db_session.refresh(test_member)

        assert topic.slug == "hello-world"
        assert topic.status == StatusType.PUBLISHED
        assert forum.topics_count == 1
        assert test_member.topics_count == 1

    @pytest.mark.asyncio
    async def test_create_topic_logs_event(self, db_session: AsyncSession, topic: Post):
        history = await EventStore(db_session).get_entity_history("topic", topic.id)
        assert [event.event_type for event in history] == [EventType.TOPIC_CREATED.value]
        assert history[0].payload["slug"] == "hello-world"

    @pytest.mark.asyncio
    async def test_duplicate_titles_get_suffixed_slugs(
        self, db_session: AsyncSession, site: Site, forum: Forum, test_member: Member, topic: Post
    ):
        slug = await TopicService(db_session).create(
            CreateTopic(
                site_id=site.id,
                forum_id=forum.id,
                member_id=test_member.id,
                title="Hello world!",
                content="again",
            )
        )
        assert slug == "hello-world-2"

    @pytest.mark.asyncio
    async def test_update_regenerates_slug_only_on_title_change(
        self, db_session: AsyncSession, site: Site, forum: Forum, test_member: Member, topic: Post
    ):
        service = TopicService(db_session)
        command = dict(site_id=site.id, forum_id=forum.id, member_id=test_member.id, id=topic.id)

        same = await service.update(UpdateTopic(title="Hello World", content="edited", **command))
        renamed = await service.update(UpdateTopic(title="Goodbye", content="edited", **command))

        assert same == "hello-world"
        assert renamed == "goodbye"
        assert topic.content == "edited"

    @pytest.mark.asyncio
    async def test_create_in_foreign_forum_fails(
        self,
        db_session: AsyncSession,
        site: Site,
        test_member: Member,
        other_site_forum: Forum,
    ):
        """The forum must belong to the current site."""
        with pytest.raises(EntityNotFoundError):
            await TopicService(db_session).create(
                CreateTopic(
                    site_id=site.id,
                    forum_id=other_site_forum.id,
                    member_id=test_member.id,
                    title="Sneaky",
                    content="content",
                )
            )

    @pytest.mark.asyncio
    async def test_lock_is_idempotent(
        self, db_session: AsyncSession, site: Site, forum: Forum, test_member: Member, topic: Post
    ):
        service = TopicService(db_session)
        command = LockTopic(
            site_id=site.id, forum_id=forum.id, member_id=test_member.id, id=topic.id, locked=True
        )
        await service.lock(command)
        await service.lock(command)

        assert topic.locked is True

    @pytest.mark.asyncio
    async def test_delete_reverses_counters(
        self,
        db_session: AsyncSession,
        site: Site,
        forum: Forum,
        test_member: Member,
        other_member: Member,
        topic: Post,
    ):
        await _reply(db_session, site, forum, topic, other_member)

        await TopicService(db_session).delete(
            DeleteTopic(site_id=site.id, forum_id=forum.id, member_id=test_member.id, id=topic.id)
        )
        await db_session.commit()
        await db_session.refresh(forum)
        await db_session.refresh(test_member)
        await db_session.refresh(other_member)

        assert topic.status == StatusType.DELETED
        assert forum.topics_count == 0
        assert forum.replies_count == 0
        assert test_member.topics_count == 0
        assert other_member.replies_count == 0

    @pytest.mark.asyncio
    async def test_deleted_topic_cannot_be_deleted_again(
        self, db_session: AsyncSession, site: Site, forum: Forum, test_member: Member, topic: Post
    ):
        service = TopicService(db_session)
        command = DeleteTopic(
            site_id=site.id, forum_id=forum.id, member_id=test_member.id, id=topic.id
        )
        await service.delete(command)
        await db_session.commit()

        with pytest.raises(EntityNotFoundError):
            await service.delete(command)


class TestReplyService:
    """Reply commands and answer bookkeeping."""

    @pytest.mark.asyncio
    async def test_create_reply_updates_counters(
        self,
        db_session: AsyncSession,
        site: Site,
        forum: Forum,
        other_member: Member,
        topic: Post,
    ):
        reply_id = await _reply(db_session, site, forum, topic, other_member)

        reply = await db_session.get(Post, reply_id)
        await db_session.refresh(topic)
        await db_session.refresh(forum)
        await db_session.refresh(other_member)

        assert reply.topic_id == topic.id
        assert topic.replies_count == 1
        assert topic.last_reply_at is not None
        assert forum.replies_count == 1
        assert other_member.replies_count == 1

    @pytest.mark.asyncio
    async def test_only_one_answer_per_topic(
        self,
        db_session: AsyncSession,
        site: Site,
        forum: Forum,
        test_member: Member,
        other_member: Member,
        topic: Post,
    ):
        """Marking a second reply as answer unmarks the first."""
        first = await _reply(db_session, site, forum, topic, other_member, "first")
        second = await _reply(db_session, site, forum, topic, other_member, "second")
        service = ReplyService(db_session)

        await service.set_as_answer(_answer(site, forum, topic, test_member, first))
        await service.set_as_answer(_answer(site, forum, topic, test_member, second))
        await db_session.commit()

        result = await db_session.execute(
            select(Post.id).where(Post.topic_id == topic.id, Post.is_answer.is_(True))
        )
        assert result.scalars().all() == [second]
        await db_session.refresh(topic)
        assert topic.has_answer is True

    @pytest.mark.asyncio
    async def test_clearing_answer(
        self,
        db_session: AsyncSession,
        site: Site,
        forum: Forum,
        test_member: Member,
        other_member: Member,
        topic: Post,
    ):
        reply_id = await _reply(db_session, site, forum, topic, other_member)
        service = ReplyService(db_session)

        await service.set_as_answer(_answer(site, forum, topic, test_member, reply_id))
        await service.set_as_answer(_answer(site, forum, topic, test_member, reply_id, False))
        await db_session.commit()
        await db_session.refresh(topic)

        assert topic.has_answer is False

    @pytest.mark.asyncio
    async def test_unflagging_another_reply_keeps_the_answer(
        self,
        db_session: AsyncSession,
        site: Site,
        forum: Forum,
        test_member: Member,
        other_member: Member,
        topic: Post,
    ):
        """Clearing the flag on a reply that is not the answer changes nothing."""
        answer = await _reply(db_session, site, forum, topic, other_member, "answer")
        bystander = await _reply(db_session, site, forum, topic, other_member, "bystander")
        service = ReplyService(db_session)

        await service.set_as_answer(_answer(site, forum, topic, test_member, answer))
        await service.set_as_answer(_answer(site, forum, topic, test_member, bystander, False))
        await db_session.commit()
        await db_session.refresh(topic)

        result = await db_session.execute(
            select(Post.id).where(Post.topic_id == topic.id, Post.is_answer.is_(True))
        )
        assert result.scalars().all() == [answer]
        assert topic.has_answer is True

    @pytest.mark.asyncio
    async def test_deleting_the_answer_clears_topic_flag(
        self,
        db_session: AsyncSession,
        site: Site,
        forum: Forum,
        test_member: Member,
        other_member: Member,
        topic: Post,
    ):
        reply_id = await _reply(db_session, site, forum, topic, other_member)
        service = ReplyService(db_session)
        await service.set_as_answer(_answer(site, forum, topic, test_member, reply_id))
        await db_session.commit()

        await service.delete(
            DeleteReply(
                site_id=site.id,
                forum_id=forum.id,
                member_id=other_member.id,
                topic_id=topic.id,
                id=reply_id,
            )
        )
        await db_session.commit()
        await db_session.refresh(topic)
        await db_session.refresh(forum)

        assert topic.has_answer is False
        assert topic.replies_count == 0
        assert forum.replies_count == 0

    @pytest.mark.asyncio
    async def test_reply_to_missing_topic(
        self, db_session: AsyncSession, site: Site, forum: Forum, other_member: Member
    ):
        with pytest.raises(EntityNotFoundError):
            await ReplyService(db_session).create(
                CreateReply(
                    site_id=site.id,
                    forum_id=forum.id,
                    member_id=other_member.id,
                    topic_id=uuid.uuid4(),
                    content="hello?",
                )
            )
