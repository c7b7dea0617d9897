"""
Builds the forum page: forum details and its paged topic listing.
"""

import uuid
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.builders.query_options import QueryOptions, apply_ordering, contains_text, paginate
from parley.kernel.models.base import StatusType
from parley.kernel.models.member import Member
from parley.kernel.models.post import Post
from parley.kernel.models.site import Category, Forum
from parley.schemas.common import PaginatedData
from parley.schemas.forums import ForumModel, ForumPageModel, ForumTopicModel
from parley.services.gravatar_service import GravatarService

# Most recent activity: last reply, or creation for topics without replies
_last_activity = func.coalesce(Post.last_reply_at, Post.created_at)

TOPIC_SORTABLE = {
    "title": Post.title,
    "timestamp": Post.created_at,
    "replies": Post.replies_count,
    "most_recent": _last_activity,
}


class ForumModelBuilder:

    def __init__(self, session: AsyncSession, gravatar_service: Optional[GravatarService] = None):
        self.session = session
        self.gravatar_service = gravatar_service or GravatarService()

    async def build_forum_page_model(
        self,
        site_id: uuid.UUID,
        slug: str,
        options: QueryOptions,
    ) -> Optional[ForumPageModel]:
        query = (
            select(Forum)
            .join(Category, Category.id == Forum.category_id)
            .where(
                and_(
                    Forum.slug == slug,
                    Forum.status == StatusType.PUBLISHED,
                    Category.site_id == site_id,
                )
            )
        )
        result = await self.session.execute(query)
        forum = result.scalars().first()
        if forum is None:
            return None

        topics = await self.build_forum_page_model_topics(site_id, forum.id, options)
        return ForumPageModel(
            forum=ForumModel(
                id=forum.id,
                name=forum.name,
                slug=forum.slug,
                description=forum.description,
            ),
            topics=topics,
        )

    async def build_forum_page_model_topics(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        options: QueryOptions,
    ) -> PaginatedData[ForumTopicModel]:
        """Published topics, pinned first, then most recent activity."""
        conditions = [
            Post.forum_id == forum_id,
            Post.topic_id.is_(None),
            Post.status == StatusType.PUBLISHED,
            Category.site_id == site_id,
        ]
        if options.search_is_defined():
            conditions.append(contains_text(Post.title, options.search))

        query = (
            select(Post, Member)
            .join(Member, Member.id == Post.member_id)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(*conditions)
        )
        query = apply_ordering(
            query,
            options,
            TOPIC_SORTABLE,
            [Post.pinned.desc(), _last_activity.desc(), Post.id.desc()],
        )
        result = await self.session.execute(paginate(query, options))

        items = [
            ForumTopicModel(
                id=topic.id,
                title=topic.title,
                slug=topic.slug,
                replies_count=topic.replies_count,
                member_id=author.id,
                member_display_name=author.display_name,
                gravatar_hash=self.gravatar_service.hash_email_for_gravatar(author.email),
                timestamp=topic.created_at,
                most_recent=topic.last_reply_at,
                pinned=topic.pinned,
                locked=topic.locked,
                has_answer=topic.has_answer,
            )
            for topic, author in result.all()
        ]

        count_query = (
            select(func.count(Post.id))
            .select_from(Post)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(*conditions)
        )
        total_records = (await self.session.execute(count_query)).scalar_one()

        return PaginatedData[ForumTopicModel].create(items, total_records, options.page_size)
