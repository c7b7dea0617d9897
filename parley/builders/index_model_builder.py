"""
Builds the site index: categories and the forums the caller can read.
"""

import uuid
from typing import Collection, Dict, List

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.models.base import StatusType
from parley.kernel.models.site import Category, Forum
from parley.schemas.forums import IndexCategoryModel, IndexForumModel, IndexPageModel


class IndexModelBuilder:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def build_index_page_model(
        self,
        site_id: uuid.UUID,
        forum_ids: Collection[uuid.UUID],
    ) -> IndexPageModel:
        """Categories without a readable forum are left out."""
        if not forum_ids:
            return IndexPageModel()

        query = (
            select(Category, Forum)
            .join(Forum, Forum.category_id == Category.id)
            .where(
                and_(
                    Category.site_id == site_id,
                    Category.status == StatusType.PUBLISHED,
                    Forum.status == StatusType.PUBLISHED,
                    Forum.id.in_(list(forum_ids)),
                )
            )
            .order_by(
                Category.sort_order,
                Category.name,
                Forum.sort_order,
                Forum.name,
            )
        )
        result = await self.session.execute(query)

        categories: Dict[uuid.UUID, IndexCategoryModel] = {}
        ordered: List[IndexCategoryModel] = []
        for category, forum in result.all():
            model = categories.get(category.id)
            if model is None:
                model = IndexCategoryModel(id=category.id, name=category.name)
                categories[category.id] = model
                ordered.append(model)
            model.forums.append(
                IndexForumModel(
                    id=forum.id,
                    name=forum.name,
                    slug=forum.slug,
                    description=forum.description,
                    topics_count=forum.topics_count,
                    replies_count=forum.replies_count,
                )
            )

        return IndexPageModel(categories=ordered)
