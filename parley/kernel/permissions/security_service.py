"""
Authorization policies over a resolved permission set.

Everything here is pure: no I/O, no session. Each policy mirrors one forum
action and is written out in full rather than derived from a shared rule.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from parley.kernel.models.permission import PermissionType
from parley.kernel.permissions.permission_model_builder import PermissionSet


@dataclass(frozen=True)
class PostInfo:
    """
    Facts about a post needed to authorize a mutation.

    For a reply, ``locked`` is the lock state of its topic and
    ``topic_member_id`` the topic's author.
    """

    id: uuid.UUID
    member_id: uuid.UUID
    locked: bool
    topic_member_id: Optional[uuid.UUID] = None


def has_permission(permission_type: PermissionType, permissions: PermissionSet) -> bool:
    """True iff the permission type is in the set."""
    return permission_type in permissions


def _is_author(info: PostInfo, member_id: Optional[uuid.UUID]) -> bool:
    return member_id is not None and info.member_id == member_id


def can_read(permissions: PermissionSet) -> bool:
    return has_permission(PermissionType.READ, permissions)


def can_start_topic(permissions: PermissionSet) -> bool:
    return has_permission(PermissionType.START, permissions)


def can_moderate(permissions: PermissionSet) -> bool:
    """Pin and lock."""
    return has_permission(PermissionType.MODERATE, permissions)


def can_edit_post(
    permissions: PermissionSet,
    info: PostInfo,
    member_id: Optional[uuid.UUID],
) -> bool:
    """Edit a topic or a reply."""
    return (
        has_permission(PermissionType.EDIT, permissions)
        and _is_author(info, member_id)
        and not info.locked
    ) or has_permission(PermissionType.MODERATE, permissions)


def can_delete_post(
    permissions: PermissionSet,
    info: PostInfo,
    member_id: Optional[uuid.UUID],
) -> bool:
    """Delete a topic or a reply. Lock state does not matter."""
    return (
        has_permission(PermissionType.DELETE, permissions)
        and _is_author(info, member_id)
    ) or has_permission(PermissionType.MODERATE, permissions)


def can_reply(permissions: PermissionSet, locked: bool) -> bool:
    return (
        has_permission(PermissionType.REPLY, permissions) and not locked
    ) or has_permission(PermissionType.MODERATE, permissions)


def can_set_answer(
    permissions: PermissionSet,
    info: PostInfo,
    member_id: Optional[uuid.UUID],
) -> bool:
    """Only the topic's author (or a moderator) picks the answer."""
    is_topic_author = member_id is not None and info.topic_member_id == member_id
    return (
        is_topic_author and not info.locked
    ) or has_permission(PermissionType.MODERATE, permissions)
