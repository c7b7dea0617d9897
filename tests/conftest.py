"""
Pytest fixtures for Parley tests.

Every test gets its own SQLite file so the app and the fixtures share one
database without leaking rows between tests.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator

# Point settings at SQLite before anything imports parley.database
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp.name}"
os.environ["SITE_NAME"] = "Default"
os.environ["DEFAULT_PAGE_SIZE"] = "10"

from parley.config import get_settings

get_settings.cache_clear()

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from parley.api.deps import get_db
from parley.kernel.identity.jwt import JWTManager
from parley.kernel.identity.password import hash_password
from parley.kernel.models import (
    Base,
    Category,
    Forum,
    Member,
    Permission,
    PermissionType,
    ROLE_ALL_USERS,
    ROLE_REGISTERED_USERS,
    Site,
    User,
    UserRole,
)
from parley.main import app

REGISTERED_GRANTS = (
    PermissionType.READ,
    PermissionType.START,
    PermissionType.REPLY,
    PermissionType.EDIT,
    PermissionType.DELETE,
)


def pytest_sessionfinish(session, exitstatus):
    """Clean up the import-time DB file."""
    if os.path.exists(_tmp.name):
        os.unlink(_tmp.name)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a test database engine on a fresh SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'parley_test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def site(db_session: AsyncSession) -> Site:
    """The configured site."""
    site = Site(name="Default", title="Parley Test")
    db_session.add(site)
    await db_session.commit()
    return site


@pytest_asyncio.fixture
async def category(db_session: AsyncSession, site: Site) -> Category:
    """A category carrying the usual grants for its forums to inherit."""
    category = Category(site_id=site.id, name="General", sort_order=1)
    db_session.add(category)
    await db_session.flush()

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
    db_session.add_all(grants)
    await db_session.commit()
    return category


@pytest_asyncio.fixture
async def forum(db_session: AsyncSession, category: Category) -> Forum:
    """A forum with no grants of its own."""
    forum = Forum(
        category_id=category.id,
        name="Welcome",
        slug="welcome",
        description="Say hello",
        sort_order=1,
    )
    db_session.add(forum)
    await db_session.commit()
    return forum


@pytest_asyncio.fixture
async def members_only_forum(db_session: AsyncSession, site: Site, category: Category) -> Forum:
    """A forum whose own grants replace the category's and leave anonymous readers out."""
    forum = Forum(category_id=category.id, name="Members", slug="members-only", sort_order=2)
    db_session.add(forum)
    await db_session.flush()
    db_session.add_all(
        Permission(
            site_id=site.id,
            forum_id=forum.id,
            role=ROLE_REGISTERED_USERS,
            permission_type=permission_type,
        )
        for permission_type in (PermissionType.READ, PermissionType.START)
    )
    await db_session.commit()
    return forum


@pytest_asyncio.fixture
async def other_site_forum(db_session: AsyncSession) -> Forum:
    """A readable forum on a different site."""
    other = Site(name="Other", title="Other Site")
    db_session.add(other)
    await db_session.flush()
    other_category = Category(site_id=other.id, name="Elsewhere")
    db_session.add(other_category)
    await db_session.flush()
    other_forum = Forum(category_id=other_category.id, name="Elsewhere", slug="welcome")
    db_session.add(other_forum)
    await db_session.flush()
    db_session.add(
        Permission(
            site_id=other.id,
            category_id=other_category.id,
            role=ROLE_ALL_USERS,
            permission_type=PermissionType.READ,
        )
    )
    await db_session.commit()
    return other_forum


async def _create_user(session: AsyncSession, email: str, name: str, role: UserRole) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        password_hash=hash_password("TestPassword123"),
        full_name=name,
        role=role.value,
    )
    session.add(user)
    await session.commit()
    return user


async def _create_member(session: AsyncSession, user: User) -> Member:
    member = Member(user_id=user.id, email=user.email, display_name=user.full_name)
    session.add(member)
    await session.commit()
    return member


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a regular member account."""
    return await _create_user(db_session, "author@example.com", "Topic Author", UserRole.MEMBER)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "other@example.com", "Other Member", UserRole.MEMBER)


@pytest_asyncio.fixture
async def test_moderator(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "mod@example.com", "Test Moderator", UserRole.MODERATOR)


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "admin@example.com", "Test Admin", UserRole.ADMIN)


@pytest_asyncio.fixture
async def test_member(db_session: AsyncSession, test_user: User) -> Member:
    return await _create_member(db_session, test_user)


@pytest_asyncio.fixture
async def other_member(db_session: AsyncSession, other_user: User) -> Member:
    return await _create_member(db_session, other_user)


@pytest.fixture
def jwt_manager() -> JWTManager:
    """JWT manager sharing the application's signing settings."""
    return JWTManager()


def bearer(jwt_manager: JWTManager, user: User) -> dict:
    token, _, _ = jwt_manager.create_access_token(
        user_id=user.id,
        email=user.email,
        role=UserRole(user.role).value,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user: User, jwt_manager: JWTManager) -> dict:
    """Authentication headers for the regular member."""
    return bearer(jwt_manager, test_user)


@pytest.fixture
def other_headers(other_user: User, jwt_manager: JWTManager) -> dict:
    return bearer(jwt_manager, other_user)


@pytest.fixture
def moderator_headers(test_moderator: User, jwt_manager: JWTManager) -> dict:
    return bearer(jwt_manager, test_moderator)


@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Async client bound to the per-test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)
