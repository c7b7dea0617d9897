"""
Builds the topic page: the topic, one page of replies and the answer slot.
"""

import uuid
from typing import Optional

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.builders.query_options import QueryOptions, apply_ordering, contains_text, paginate
from parley.kernel.models.base import StatusType
from parley.kernel.models.member import Member
from parley.kernel.models.post import Post
from parley.kernel.models.site import Category, Forum
from parley.schemas.common import PaginatedData
from parley.schemas.topics import ReplyModel, TopicForumModel, TopicModel, TopicPageModel
from parley.services.gravatar_service import GravatarService
from parley.services.markdown_renderer import render_markdown

REPLY_SORTABLE = {
    "timestamp": Post.created_at,
}


def _scoped_to_site(stmt: Select, site_id: uuid.UUID) -> Select:
    return (
        stmt.join(Forum, Forum.id == Post.forum_id)
        .join(Category, Category.id == Forum.category_id)
        .where(Category.site_id == site_id)
    )


class TopicModelBuilder:
    """Read side of the topic page. Never checks permissions."""

    def __init__(self, session: AsyncSession, gravatar_service: Optional[GravatarService] = None):
        self.session = session
        self.gravatar_service = gravatar_service or GravatarService()

    async def build_topic_page_model(
        self,
        site_id: uuid.UUID,
        forum_slug: str,
        topic_slug: str,
        options: QueryOptions,
    ) -> Optional[TopicPageModel]:
        """
        Topic page for a published topic, or None when no such topic exists
        in a forum with that slug on this site.
        """
        query = (
            select(Post, Forum, Member)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .join(Member, Member.id == Post.member_id)
            .where(
                and_(
                    Post.topic_id.is_(None),
                    Category.site_id == site_id,
                    Forum.slug == forum_slug,
                    Forum.status == StatusType.PUBLISHED,
                    Post.slug == topic_slug,
                    Post.status == StatusType.PUBLISHED,
                )
            )
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None

        topic, forum, author = row

        replies = await self.build_topic_page_model_replies(site_id, forum.id, topic.id, options)
        answer = await self._build_answer(topic.id) if topic.has_answer else None

        return TopicPageModel(
            forum=TopicForumModel(id=forum.id, name=forum.name, slug=forum.slug),
            topic=TopicModel(
                id=topic.id,
                title=topic.title,
                slug=topic.slug,
                content=render_markdown(topic.content),
                member_id=author.id,
                member_display_name=author.display_name,
                user_id=author.user_id,
                gravatar_hash=self.gravatar_service.hash_email_for_gravatar(author.email),
                timestamp=topic.created_at,
                pinned=topic.pinned,
                locked=topic.locked,
                has_answer=topic.has_answer,
            ),
            replies=replies,
            answer=answer,
        )

    async def build_topic_page_model_replies(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        topic_id: uuid.UUID,
        options: QueryOptions,
    ) -> PaginatedData[ReplyModel]:
        """Published replies in posting order. The answer is excluded."""
        conditions = [
            Post.topic_id == topic_id,
            Post.forum_id == forum_id,
            Post.status == StatusType.PUBLISHED,
            Post.is_answer.is_(False),
        ]
        if options.search_is_defined():
            conditions.append(contains_text(Post.content, options.search))

        query = _scoped_to_site(
            select(Post, Member).join(Member, Member.id == Post.member_id),
            site_id,
        ).where(*conditions)
        query = apply_ordering(
            query, options, REPLY_SORTABLE, [Post.created_at.asc(), Post.id.asc()]
        )
        result = await self.session.execute(paginate(query, options))
        items = [self._reply_model(reply, author) for reply, author in result.all()]

        count_query = _scoped_to_site(
            select(func.count(Post.id)).select_from(Post),
            site_id,
        ).where(*conditions)
        total_records = (await self.session.execute(count_query)).scalar_one()

        return PaginatedData[ReplyModel].create(items, total_records, options.page_size)

    async def _build_answer(self, topic_id: uuid.UUID) -> Optional[ReplyModel]:
        query = (
            select(Post, Member)
            .join(Member, Member.id == Post.member_id)
            .where(
                and_(
                    Post.topic_id == topic_id,
                    Post.status == StatusType.PUBLISHED,
                    Post.is_answer.is_(True),
                )
            )
            .order_by(Post.updated_at.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None
        answer, author = row
        return self._reply_model(answer, author)

    def _reply_model(self, reply: Post, author: Member) -> ReplyModel:
        return ReplyModel(
            id=reply.id,
            content=render_markdown(reply.content),
            original_content=reply.content,
            member_id=author.id,
            member_display_name=author.display_name,
            user_id=author.user_id,
            gravatar_hash=self.gravatar_service.hash_email_for_gravatar(author.email),
            timestamp=reply.created_at,
            is_answer=reply.is_answer,
        )
