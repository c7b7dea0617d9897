"""
Permission Core - per-forum grants and action policies.
"""

from parley.kernel.permissions.permission_model_builder import (
    PermissionModelBuilder,
    PermissionSet,
    EMPTY_PERMISSIONS,
    ALL_PERMISSIONS,
)
from parley.kernel.permissions.security_service import (
    PostInfo,
    has_permission,
    can_read,
    can_start_topic,
    can_moderate,
    can_edit_post,
    can_delete_post,
    can_reply,
    can_set_answer,
)

__all__ = [
    "PermissionModelBuilder",
    "PermissionSet",
    "EMPTY_PERMISSIONS",
    "ALL_PERMISSIONS",
    "PostInfo",
    "has_permission",
    "can_read",
    "can_start_topic",
    "can_moderate",
    "can_edit_post",
    "can_delete_post",
    "can_reply",
    "can_set_answer",
]
