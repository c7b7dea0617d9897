"""
Kernel Layer

Foundational components shared by every forum feature:
- Data models (sites, forums, posts, members, grants)
- Audit log (every mutation recorded in the same unit of work)
- Identity Core (accounts, tokens)
- Permission Core (per-forum grants and action policies)
"""

from parley.kernel.models import (
    User,
    UserRole,
    Site,
    Category,
    Forum,
    Member,
    Post,
    Permission,
    PermissionType,
    StatusType,
    EventLog,
    EventType,
)

__all__ = [
    "User",
    "UserRole",
    "Site",
    "Category",
    "Forum",
    "Member",
    "Post",
    "Permission",
    "PermissionType",
    "StatusType",
    "EventLog",
    "EventType",
]
