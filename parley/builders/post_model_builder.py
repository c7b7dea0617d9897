"""
Builds the topic editor pages and loads the author/lock facts used to
authorize topic and reply mutations.
"""

import uuid
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from parley.kernel.models.base import StatusType
from parley.kernel.models.post import Post
from parley.kernel.models.site import Category, Forum
from parley.kernel.permissions.security_service import PostInfo
from parley.schemas.posts import PostForumModel, PostPageModel, PostTopicModel


class PostModelBuilder:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def build_new_post_page_model(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
    ) -> Optional[PostPageModel]:
        forum = await self._get_forum(site_id, forum_id)
        if forum is None:
            return None
        return PostPageModel(
            forum=PostForumModel(id=forum.id, name=forum.name, slug=forum.slug),
        )

    async def build_edit_post_page_model(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        topic_id: uuid.UUID,
    ) -> Optional[PostPageModel]:
        """Editor page for an existing topic. Content is left as raw markdown."""
        query = (
            select(Post, Forum)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(
                and_(
                    Post.id == topic_id,
                    Post.topic_id.is_(None),
                    Post.forum_id == forum_id,
                    Post.status == StatusType.PUBLISHED,
                    Forum.status == StatusType.PUBLISHED,
                    Category.site_id == site_id,
                )
            )
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None

        topic, forum = row
        return PostPageModel(
            forum=PostForumModel(id=forum.id, name=forum.name, slug=forum.slug),
            topic=PostTopicModel(
                id=topic.id,
                title=topic.title,
                content=topic.content,
                member_id=topic.member_id,
                locked=topic.locked,
            ),
        )

    async def get_topic_info(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        topic_id: uuid.UUID,
    ) -> Optional[PostInfo]:
        """Author and lock state of a non-deleted topic in the given forum and site."""
        query = (
            select(Post.id, Post.member_id, Post.locked)
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
        row = result.first()
        if row is None:
            return None
        return PostInfo(
            id=row.id,
            member_id=row.member_id,
            locked=row.locked,
            topic_member_id=row.member_id,
        )

    async def get_reply_info(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        topic_id: uuid.UUID,
        reply_id: uuid.UUID,
    ) -> Optional[PostInfo]:
        """
        Author of a non-deleted reply, with the lock state and author of its
        topic. The topic must not be deleted either.
        """
        topic = aliased(Post)
        query = (
            select(
                Post.id,
                Post.member_id,
                topic.locked.label("topic_locked"),
                topic.member_id.label("topic_member_id"),
            )
            .join(topic, topic.id == Post.topic_id)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(
                and_(
                    Post.id == reply_id,
                    Post.topic_id == topic_id,
                    Post.forum_id == forum_id,
                    Post.status != StatusType.DELETED,
                    topic.forum_id == forum_id,
                    topic.status != StatusType.DELETED,
                    Category.site_id == site_id,
                )
            )
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None
        return PostInfo(
            id=row.id,
            member_id=row.member_id,
            locked=row.topic_locked,
            topic_member_id=row.topic_member_id,
        )

    async def _get_forum(self, site_id: uuid.UUID, forum_id: uuid.UUID) -> Optional[Forum]:
        query = (
            select(Forum)
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
        return result.scalar_one_or_none()
