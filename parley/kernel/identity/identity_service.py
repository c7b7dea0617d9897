"""
Identity service for account operations.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.models.user import User, UserRole, RefreshToken
from parley.kernel.models.event_log import EventType
from parley.kernel.events.event_store import EventStore
from parley.kernel.identity.password import hash_password, verify_password
from parley.kernel.identity.jwt import JWTManager, TokenPair
from parley.logging_config import get_logger

logger = get_logger(__name__)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, authentication and refresh token rotation.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.jwt_manager = JWTManager()
        self.event_store = EventStore(session)

    async def register_user(
        self,
        email: str,
        password: str,
        full_name: str,
        role: UserRole = UserRole.MEMBER,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Register a new user.

        Raises:
            ValueError: If email already exists
        """
        existing = await self.get_user_by_email(email)
        if existing:
            raise ValueError("Email already registered")

        user = User(
            email=email.lower().strip(),
            password_hash=hash_password(password),
            full_name=full_name.strip(),
            role=UserRole(role).value,
        )

        self.session.add(user)
        await self.session.flush()  # Get the ID

        await self.event_store.log(
            event_type=EventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user.id,
            actor_id=user.id,
            payload={"email": user.email, "role": UserRole(user.role)},
            ip_address=ip_address,
        )
        logger.info("User registered", extra={"user_id": str(user.id)})

        return user

    async def authenticate(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> Optional[tuple[User, TokenPair]]:
        """
        Authenticate a user and return tokens.

        Returns:
            Tuple of (User, TokenPair) if successful, None otherwise
        """
        user = await self.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        if not user.is_active:
            return None

        token_pair = await self._issue_tokens(user)

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user.id,
            actor_id=user.id,
            payload={"method": "password"},
            ip_address=ip_address,
        )

        return user, token_pair

    async def refresh_tokens(
        self,
        refresh_token: str,
    ) -> Optional[tuple[User, TokenPair]]:
        """
        Exchange a refresh token for a new token pair.

        The presented token is revoked (rotation).
        """
        payload = self.jwt_manager.verify_refresh_token(refresh_token)
        if not payload:
            return None

        token_hash = JWTManager.hash_token(refresh_token)
        query = select(RefreshToken).where(
            and_(
                RefreshToken.token_hash == token_hash,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > datetime.now(timezone.utc),
            )
        )
        result = await self.session.execute(query)
        token_record = result.scalar_one_or_none()

        if not token_record:
            return None

        user = await self.get_user_by_id(uuid.UUID(payload.sub))
        if not user or not user.is_active:
            return None

        token_record.revoked = True
        new_token_pair = await self._issue_tokens(user)

        return user, new_token_pair

    async def logout(
        self,
        user_id: uuid.UUID,
        refresh_token: Optional[str] = None,
        revoke_all: bool = False,
        ip_address: Optional[str] = None,
    ) -> bool:
        """Log out a user by revoking one or all refresh tokens."""
        query = select(RefreshToken).where(
            and_(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked.is_(False),
            )
        )
        if not revoke_all:
            if not refresh_token:
                query = None
            else:
                query = query.where(
                    RefreshToken.token_hash == JWTManager.hash_token(refresh_token)
                )

        if query is not None:
            result = await self.session.execute(query)
            for token in result.scalars().all():
                token.revoked = True

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            payload={"revoke_all": revoke_all},
            ip_address=ip_address,
        )

        return True

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def _issue_tokens(self, user: User) -> TokenPair:
        token_pair = self.jwt_manager.create_token_pair(
            user_id=user.id,
            email=user.email,
            role=UserRole(user.role).value,
        )
        self.session.add(
            RefreshToken(
                user_id=user.id,
                token_hash=JWTManager.hash_token(token_pair.refresh_token),
                expires_at=datetime.now(timezone.utc)
                + timedelta(days=self.jwt_manager.refresh_token_expire_days),
            )
        )
        return token_pair
