"""
Authentication endpoints.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status

from parley.api.deps import DbSession, CurrentUser, get_client_ip
from parley.kernel.identity.identity_service import IdentityService
from parley.schemas.auth import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from parley.schemas.common import SuccessResponse

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    data: UserCreate,
    db: DbSession,
):
    """
    Register a new account.

    Returns access and refresh tokens on successful registration.
    """
    identity_service = IdentityService(db)
    ip_address = get_client_ip(request)

    try:
        await identity_service.register_user(
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            ip_address=ip_address,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    result = await identity_service.authenticate(
        email=data.email,
        password=data.password,
        ip_address=ip_address,
    )

    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to authenticate after registration",
        )

    user, token_pair = result
    return _token_response(user, token_pair)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: Request,
    data: UserLogin,
    db: DbSession,
):
    identity_service = IdentityService(db)

    result = await identity_service.authenticate(
        email=data.email,
        password=data.password,
        ip_address=get_client_ip(request),
    )

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    user, token_pair = result
    return _token_response(user, token_pair)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshTokenRequest,
    db: DbSession,
):
    """
    Exchange a refresh token for a new pair.

    The presented refresh token is revoked.
    """
    identity_service = IdentityService(db)

    result = await identity_service.refresh_tokens(refresh_token=data.refresh_token)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user, token_pair = result
    return _token_response(user, token_pair)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    user: CurrentUser,
    db: DbSession,
    data: Optional[RefreshTokenRequest] = None,
):
    """
    Revoke refresh tokens.

    With a refresh_token only that token is revoked, otherwise all of them.
    """
    identity_service = IdentityService(db)

    await identity_service.logout(
        user_id=user.id,
        refresh_token=data.refresh_token if data else None,
        revoke_all=data is None,
        ip_address=get_client_ip(request),
    )

    return SuccessResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(user: CurrentUser):
    """Get current user's profile."""
    return UserResponse.model_validate(user)


def _token_response(user, token_pair) -> TokenResponse:
    return TokenResponse(
        access_token=token_pair.access_token,
        refresh_token=token_pair.refresh_token,
        token_type=token_pair.token_type,
        expires_in=token_pair.expires_in,
        user=UserResponse.model_validate(user),
    )
