"""
Request context: the site served by this deployment and the current member.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.config import get_settings
from parley.kernel.errors import SiteNotResolvedError
from parley.kernel.events.event_store import EventStore
from parley.kernel.models.event_log import EventType
from parley.kernel.models.member import Member
from parley.kernel.models.site import Site
from parley.kernel.models.user import User
from parley.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ForumContext:
    """Who is asking, and on which site. Built once per request."""

    site: Site
    user: Optional[User] = None
    member: Optional[Member] = None

    @property
    def site_id(self) -> uuid.UUID:
        return self.site.id

    @property
    def member_id(self) -> Optional[uuid.UUID]:
        return self.member.id if self.member else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


class ContextService:
    """Resolves the current site and member."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings()
        self.event_store = EventStore(session)

    async def current_site(self) -> Site:
        """
        The configured site.

        Raises:
            SiteNotResolvedError: If no site with the configured name exists
        """
        query = select(Site).where(Site.name == self.settings.site_name)
        result = await self.session.execute(query)
        site = result.scalar_one_or_none()
        if site is None:
            logger.error(
                "Configured site not found",
                extra={"site_name": self.settings.site_name},
            )
            raise SiteNotResolvedError(self.settings.site_name)
        return site

    async def current_member(self, user: User, site: Optional[Site] = None) -> Member:
        """The member for an account, created on first use."""
        query = select(Member).where(Member.user_id == user.id)
        result = await self.session.execute(query)
        member = result.scalar_one_or_none()
        if member is not None:
            return member

        member = Member(
            user_id=user.id,
            email=user.email,
            display_name=user.full_name,
        )
        self.session.add(member)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.MEMBER_CREATED,
            entity_type="member",
            entity_id=member.id,
            site_id=site.id if site else None,
            actor_id=user.id,
            payload={"display_name": member.display_name},
        )
        logger.info(
            "Member created",
            extra={"member_id": str(member.id), "user_id": str(user.id)},
        )
        return member

    async def build(self, user: Optional[User]) -> ForumContext:
        site = await self.current_site()
        member = await self.current_member(user, site) if user is not None else None
        return ForumContext(site=site, user=user, member=member)
