"""
Builds a member's profile page with their posts.
"""

import uuid
from typing import Collection, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.builders.query_options import QueryOptions
from parley.builders.search_model_builder import SearchModelBuilder
from parley.kernel.models.base import StatusType
from parley.kernel.models.member import Member
from parley.schemas.search import MemberModel, MemberPageModel
from parley.services.gravatar_service import GravatarService


class MemberModelBuilder:

    def __init__(
        self,
        session: AsyncSession,
        search_builder: Optional[SearchModelBuilder] = None,
        gravatar_service: Optional[GravatarService] = None,
    ):
        self.session = session
        self.search_builder = search_builder or SearchModelBuilder(session)
        self.gravatar_service = gravatar_service or GravatarService()

    async def build_member_page_model(
        self,
        site_id: uuid.UUID,
        member_id: uuid.UUID,
        forum_ids: Collection[uuid.UUID],
        options: QueryOptions,
    ) -> Optional[MemberPageModel]:
        """Profile plus posts in the given (readable) forums. None for unknown or deleted members."""
        query = select(Member).where(
            and_(
                Member.id == member_id,
                Member.status == StatusType.PUBLISHED,
            )
        )
        result = await self.session.execute(query)
        member = result.scalar_one_or_none()
        if member is None:
            return None

        posts = await self.search_builder.search_post_models(
            site_id, forum_ids, options, member_id=member.id
        )
        return MemberPageModel(
            member=MemberModel(
                id=member.id,
                display_name=member.display_name,
                gravatar_hash=self.gravatar_service.hash_email_for_gravatar(member.email),
                topics_count=member.topics_count,
                replies_count=member.replies_count,
                timestamp=member.created_at,
            ),
            posts=posts,
        )
