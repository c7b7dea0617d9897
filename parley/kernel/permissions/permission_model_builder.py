"""
Resolves the permission set a principal holds in each forum of a site.

Grants are matched by pseudo-role (all-users, registered-users), by the
account role, or directly by member. A forum that carries no grants of its
own falls back to the grants attached to its category. Sets are built fresh
on every request; nothing is cached.
"""

import uuid
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.models.member import Member
from parley.kernel.models.permission import (
    Permission,
    PermissionType,
    ROLE_ALL_USERS,
    ROLE_REGISTERED_USERS,
)
from parley.kernel.models.site import Category, Forum
from parley.kernel.models.user import User, UserRole

PermissionSet = FrozenSet[PermissionType]

EMPTY_PERMISSIONS: PermissionSet = frozenset()
ALL_PERMISSIONS: PermissionSet = frozenset(PermissionType)


def principal_roles(user: Optional[User]) -> Set[str]:
    """Roles a principal is matched against. Anonymous principals only get all-users."""
    roles = {ROLE_ALL_USERS}
    if user is not None:
        roles.add(ROLE_REGISTERED_USERS)
        roles.add(UserRole(user.role).value)
    return roles


def is_admin(user: Optional[User]) -> bool:
    return user is not None and UserRole(user.role) == UserRole.ADMIN


class PermissionModelBuilder:
    """Builds per-forum permission sets for the current principal."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def build_permission_models_by_forum_id(
        self,
        site_id: uuid.UUID,
        forum_id: uuid.UUID,
        user: Optional[User],
        member: Optional[Member],
    ) -> PermissionSet:
        """
        Permission set for one forum.

        A forum that does not belong to the site yields the empty set.
        """
        forums = await self._load_forums(site_id, forum_id=forum_id)
        if not forums:
            return EMPTY_PERMISSIONS

        models = await self._build(site_id, forums, user, member)
        return models[forum_id]

    async def build_permission_models(
        self,
        site_id: uuid.UUID,
        user: Optional[User],
        member: Optional[Member],
    ) -> Dict[uuid.UUID, PermissionSet]:
        """Permission sets for every forum of the site, keyed by forum id."""
        forums = await self._load_forums(site_id)
        if not forums:
            return {}
        return await self._build(site_id, forums, user, member)

    async def _load_forums(
        self,
        site_id: uuid.UUID,
        forum_id: Optional[uuid.UUID] = None,
    ) -> List[Tuple[uuid.UUID, uuid.UUID]]:
        query = (
            select(Forum.id, Forum.category_id)
            .join(Category, Category.id == Forum.category_id)
            .where(Category.site_id == site_id)
        )
        if forum_id is not None:
            query = query.where(Forum.id == forum_id)

        result = await self.session.execute(query)
        return [(row.id, row.category_id) for row in result.all()]

    async def _build(
        self,
        site_id: uuid.UUID,
        forums: List[Tuple[uuid.UUID, uuid.UUID]],
        user: Optional[User],
        member: Optional[Member],
    ) -> Dict[uuid.UUID, PermissionSet]:
        if is_admin(user):
            return {forum_id: ALL_PERMISSIONS for forum_id, _ in forums}

        forum_ids = [forum_id for forum_id, _ in forums]
        category_ids = list({category_id for _, category_id in forums})

        forums_with_grants = await self._forums_with_own_grants(site_id, forum_ids)
        granted = await self._load_principal_grants(
            site_id, forum_ids, category_ids, principal_roles(user), member
        )

        by_forum: Dict[uuid.UUID, Set[PermissionType]] = {}
        by_category: Dict[uuid.UUID, Set[PermissionType]] = {}
        for grant_forum_id, grant_category_id, permission_type in granted:
            if grant_forum_id is not None:
                by_forum.setdefault(grant_forum_id, set()).add(PermissionType(permission_type))
            elif grant_category_id is not None:
                by_category.setdefault(grant_category_id, set()).add(PermissionType(permission_type))

        models: Dict[uuid.UUID, PermissionSet] = {}
        for forum_id, category_id in forums:
            if forum_id in forums_with_grants:
                source = by_forum.get(forum_id, ())
            else:
                source = by_category.get(category_id, ())
            models[forum_id] = frozenset(source)
        return models

    async def _forums_with_own_grants(
        self,
        site_id: uuid.UUID,
        forum_ids: Iterable[uuid.UUID],
    ) -> Set[uuid.UUID]:
        # Any grant at all, for any subject, stops category inheritance
        query = (
            select(Permission.forum_id)
            .where(
                and_(
                    Permission.site_id == site_id,
                    Permission.forum_id.in_(list(forum_ids)),
                )
            )
            .distinct()
        )
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def _load_principal_grants(
        self,
        site_id: uuid.UUID,
        forum_ids: List[uuid.UUID],
        category_ids: List[uuid.UUID],
        roles: Set[str],
        member: Optional[Member],
    ) -> List[Tuple[Optional[uuid.UUID], Optional[uuid.UUID], str]]:
        subject = Permission.role.in_(roles)
        if member is not None:
            subject = or_(subject, Permission.member_id == member.id)

        query = select(
            Permission.forum_id,
            Permission.category_id,
            Permission.permission_type,
        ).where(
            and_(
                Permission.site_id == site_id,
                subject,
                or_(
                    Permission.forum_id.in_(forum_ids),
                    and_(
                        Permission.forum_id.is_(None),
                        Permission.category_id.in_(category_ids),
                    ),
                ),
            )
        )
        result = await self.session.execute(query)
        return [tuple(row) for row in result.all()]
