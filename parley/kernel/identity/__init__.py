"""
Identity Core - Authentication and account management.
"""

from parley.kernel.identity.password import PasswordHasher, verify_password, hash_password
from parley.kernel.identity.jwt import (
    JWTManager,
    TokenPair,
    AccessTokenPayload,
    create_access_token,
    verify_access_token,
)
from parley.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "TokenPair",
    "AccessTokenPayload",
    "create_access_token",
    "verify_access_token",
    "IdentityService",
]
