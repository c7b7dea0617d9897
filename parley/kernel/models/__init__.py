"""
Kernel Data Models

SQLAlchemy models for sites, the forum hierarchy, posts, members,
permission grants and the audit log.
"""

from parley.kernel.models.base import Base, StatusType, TimestampMixin, generate_uuid
from parley.kernel.models.user import User, UserRole, RefreshToken
from parley.kernel.models.site import Site, Category, Forum
from parley.kernel.models.member import Member
from parley.kernel.models.post import Post
from parley.kernel.models.permission import (
    Permission,
    PermissionType,
    ROLE_ALL_USERS,
    ROLE_REGISTERED_USERS,
)
from parley.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "StatusType",
    "TimestampMixin",
    "generate_uuid",
    # Accounts
    "User",
    "UserRole",
    "RefreshToken",
    # Hierarchy
    "Site",
    "Category",
    "Forum",
    # Content
    "Member",
    "Post",
    # Permissions
    "Permission",
    "PermissionType",
    "ROLE_ALL_USERS",
    "ROLE_REGISTERED_USERS",
    # Audit
    "EventLog",
    "EventType",
]
