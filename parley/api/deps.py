"""
FastAPI dependencies for authentication, request context and database sessions.
"""

import uuid
from typing import Annotated, List, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from parley.builders.query_options import QueryOptions
from parley.database import async_session_maker
from parley.kernel.identity.identity_service import IdentityService
from parley.kernel.identity.jwt import verify_access_token
from parley.kernel.models.user import User
from parley.kernel.permissions.permission_model_builder import PermissionModelBuilder
from parley.kernel.permissions.security_service import can_read
from parley.orchestration.request_pipeline import Outcome, PipelineResult, RequestPipeline
from parley.services.context_service import ContextService, ForumContext


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncSession:
    """Dependency that yields database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user_optional(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> Optional[User]:
    """Get current user if authenticated, None otherwise."""
    if not credentials:
        return None

    payload = verify_access_token(credentials.credentials)
    if not payload:
        return None

    identity_service = IdentityService(db)
    user = await identity_service.get_user_by_id(uuid.UUID(payload.sub))

    if not user or not user.is_active:
        return None

    return user


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> User:
    """Get current authenticated user or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity_service = IdentityService(db)
    user = await identity_service.get_user_by_id(uuid.UUID(payload.sub))

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or disabled",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_current_user_optional)]


async def get_forum_context(user: OptionalUser, db: DbSession) -> ForumContext:
    """Current site plus, for authenticated callers, their member record."""
    return await ContextService(db).build(user)


async def get_authenticated_context(user: CurrentUser, db: DbSession) -> ForumContext:
    """Like get_forum_context, but 401 for anonymous callers."""
    return await ContextService(db).build(user)


RequestContext = Annotated[ForumContext, Depends(get_forum_context)]
AuthenticatedContext = Annotated[ForumContext, Depends(get_authenticated_context)]


def get_pipeline(context: RequestContext, db: DbSession) -> RequestPipeline:
    return RequestPipeline(context, PermissionModelBuilder(db))


def get_authenticated_pipeline(context: AuthenticatedContext, db: DbSession) -> RequestPipeline:
    return RequestPipeline(context, PermissionModelBuilder(db))


Pipeline = Annotated[RequestPipeline, Depends(get_pipeline)]
AuthenticatedPipeline = Annotated[RequestPipeline, Depends(get_authenticated_pipeline)]


async def get_readable_forum_ids(context: RequestContext, db: DbSession) -> List[uuid.UUID]:
    """Forums of the current site the caller holds Read in."""
    models = await PermissionModelBuilder(db).build_permission_models(
        context.site_id, context.user, context.member
    )
    return [forum_id for forum_id, permissions in models.items() if can_read(permissions)]


ReadableForumIds = Annotated[List[uuid.UUID], Depends(get_readable_forum_ids)]


def get_query_options(
    page: Optional[int] = 1,
    search: Optional[str] = None,
    order_by: Optional[str] = None,
    is_ascending: bool = False,
) -> QueryOptions:
    """Paging, search and sort parameters from the query string."""
    return QueryOptions(
        search=search,
        page=page,
        order_by=order_by,
        is_ascending=is_ascending,
    )


ListOptions = Annotated[QueryOptions, Depends(get_query_options)]


def unwrap(result: PipelineResult):
    """
    Map a pipeline result to its response value.

    NOT_FOUND becomes 404 and UNAUTHORIZED becomes 401.
    """
    if result.outcome == Outcome.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found",
        )
    if result.outcome == Outcome.UNAUTHORIZED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized",
        )
    return result.value


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
