"""Create the default site with one category, one forum and the usual grants.

Usage: python scripts/seed_forum.py [admin-email] [admin-password]
"""
import asyncio
import sys

sys.path.insert(0, ".")

from sqlalchemy import select

from parley.config import get_settings
from parley.database import async_session_maker, init_db, close_db
from parley.kernel.identity.password import hash_password
from parley.kernel.models import (
    Category,
    Forum,
    Permission,
    PermissionType,
    ROLE_ALL_USERS,
    ROLE_REGISTERED_USERS,
    Site,
    User,
    UserRole,
)

settings = get_settings()

REGISTERED_GRANTS = (
    PermissionType.READ,
    PermissionType.START,
    PermissionType.REPLY,
    PermissionType.EDIT,
    PermissionType.DELETE,
)


async def seed(admin_email=None, admin_password=None):
    await init_db()

    async with async_session_maker() as session:
        site = (
            await session.execute(select(Site).where(Site.name == settings.site_name))
        ).scalar_one_or_none()
        if site:
            print(f"Site '{site.name}' already exists ({site.id})")
            return

        site = Site(name=settings.site_name, title="Parley")
        session.add(site)
        await session.flush()

        category = Category(site_id=site.id, name="General", sort_order=1)
        session.add(category)
        await session.flush()

        forum = Forum(
            category_id=category.id,
            name="Welcome",
            slug="welcome",
            description="Introduce yourself and say hello.",
            sort_order=1,
        )
        session.add(forum)
        await session.flush()

        # Category level grants, inherited by every forum without its own
        grants = [
            Permission(
                site_id=site.id,
                category_id=category.id,
                role=ROLE_ALL_USERS,
                permission_type=PermissionType.READ,
            )
        ]
        grants += [
            Permission(
                site_id=site.id,
                category_id=category.id,
                role=ROLE_REGISTERED_USERS,
                permission_type=permission_type,
            )
            for permission_type in REGISTERED_GRANTS
        ]
        grants.append(
            Permission(
                site_id=site.id,
                category_id=category.id,
                role=UserRole.MODERATOR.value,
                permission_type=PermissionType.MODERATE,
            )
        )
        session.add_all(grants)

        if admin_email and admin_password:
            session.add(
                User(
                    email=admin_email,
                    password_hash=hash_password(admin_password),
                    full_name="Administrator",
                    role=UserRole.ADMIN.value,
                )
            )

        await session.commit()
        print(f"Seeded site '{site.name}' ({site.id})")
        print(f"  Category: {category.name}")
        print(f"  Forum:    {forum.name} (/{forum.slug})")
        print(f"  Grants:   {len(grants)}")
        if admin_email:
            print(f"  Admin:    {admin_email}")

    await close_db()


if __name__ == "__main__":
    email = sys.argv[1] if len(sys.argv) > 1 else None
    password = sys.argv[2] if len(sys.argv) > 2 else None
    asyncio.run(seed(email, password))
