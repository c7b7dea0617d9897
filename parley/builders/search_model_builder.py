"""
Builds search results over topics and replies of the forums a caller can read.
"""

import uuid
from typing import Collection, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from parley.builders.query_options import QueryOptions, apply_ordering, contains_text, paginate
from parley.kernel.models.base import StatusType
from parley.kernel.models.member import Member
from parley.kernel.models.post import Post
from parley.kernel.models.site import Category, Forum
from parley.schemas.common import PaginatedData
from parley.schemas.search import SearchPageModel, SearchPostModel
from parley.services.markdown_renderer import render_markdown


class SearchModelBuilder:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def build_search_page_model(
        self,
        site_id: uuid.UUID,
        forum_ids: Collection[uuid.UUID],
        options: QueryOptions,
    ) -> SearchPageModel:
        return SearchPageModel(
            posts=await self.search_post_models(site_id, forum_ids, options),
        )

    async def search_post_models(
        self,
        site_id: uuid.UUID,
        forum_ids: Collection[uuid.UUID],
        options: QueryOptions,
        member_id: Optional[uuid.UUID] = None,
    ) -> PaginatedData[SearchPostModel]:
        """
        Published posts of the given forums whose topic (for replies) is also
        published, newest first unless another order is requested.
        """
        if not forum_ids:
            return PaginatedData[SearchPostModel].create((), 0, options.page_size)

        topic = aliased(Post)
        title = func.coalesce(Post.title, topic.title)

        conditions = [
            Post.forum_id.in_(list(forum_ids)),
            Post.status == StatusType.PUBLISHED,
            or_(Post.topic_id.is_(None), topic.status == StatusType.PUBLISHED),
            Category.site_id == site_id,
        ]
        if options.search_is_defined():
            conditions.append(
                or_(
                    contains_text(Post.title, options.search),
                    contains_text(Post.content, options.search),
                )
            )
        if member_id is not None:
            conditions.append(Post.member_id == member_id)

        query = (
            select(
                Post.id,
                Post.topic_id,
                title.label("title"),
                func.coalesce(Post.slug, topic.slug).label("slug"),
                Post.content,
                Post.created_at,
                Member.id.label("member_id"),
                Member.display_name,
                Forum.id.label("forum_id"),
                Forum.name.label("forum_name"),
                Forum.slug.label("forum_slug"),
            )
            .select_from(Post)
            .outerjoin(topic, topic.id == Post.topic_id)
            .join(Member, Member.id == Post.member_id)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(and_(*conditions))
        )
        query = apply_ordering(
            query,
            options,
            {"timestamp": Post.created_at, "title": title},
            [Post.created_at.desc(), Post.id.desc()],
        )
        result = await self.session.execute(paginate(query, options))

        items = [
            SearchPostModel(
                id=row.id,
                topic_id=row.topic_id or row.id,
                is_topic=row.topic_id is None,
                title=row.title,
                slug=row.slug,
                content=render_markdown(row.content),
                timestamp=row.created_at,
                member_id=row.member_id,
                member_display_name=row.display_name,
                forum_id=row.forum_id,
                forum_name=row.forum_name,
                forum_slug=row.forum_slug,
            )
            for row in result.all()
        ]

        count_query = (
            select(func.count(Post.id))
            .select_from(Post)
            .outerjoin(topic, topic.id == Post.topic_id)
            .join(Forum, Forum.id == Post.forum_id)
            .join(Category, Category.id == Forum.category_id)
            .where(and_(*conditions))
        )
        total_records = (await self.session.execute(count_query)).scalar_one()

        return PaginatedData[SearchPostModel].create(items, total_records, options.page_size)
