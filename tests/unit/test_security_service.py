"""Unit tests for the authorization policies."""

import uuid

from parley.kernel.models.permission import PermissionType
from parley.kernel.permissions.security_service import (
    PostInfo,
    can_delete_post,
    can_edit_post,
    can_moderate,
    can_read,
    can_reply,
    can_set_answer,
    can_start_topic,
    has_permission,
)

AUTHOR = uuid.uuid4()
SOMEONE_ELSE = uuid.uuid4()

REGISTERED = frozenset({
    PermissionType.READ,
    PermissionType.START,
    PermissionType.REPLY,
    PermissionType.EDIT,
    PermissionType.DELETE,
})
MODERATOR = frozenset({PermissionType.READ, PermissionType.MODERATE})
NOTHING = frozenset()


def _info(locked: bool = False) -> PostInfo:
    return PostInfo(id=uuid.uuid4(), member_id=AUTHOR, locked=locked, topic_member_id=AUTHOR)


class TestSimplePolicies:
    """Policies that only look at the permission set."""

    def test_has_permission(self):
        assert has_permission(PermissionType.READ, REGISTERED)
        assert not has_permission(PermissionType.MODERATE, REGISTERED)

    def test_empty_set_allows_nothing(self):
        assert not can_read(NOTHING)
        assert not can_start_topic(NOTHING)
        assert not can_moderate(NOTHING)
        assert not can_reply(NOTHING, locked=False)

    def test_read_and_start(self):
        assert can_read(REGISTERED)
        assert can_start_topic(REGISTERED)
        assert not can_start_topic(MODERATOR)

    def test_moderate(self):
        assert can_moderate(MODERATOR)
        assert not can_moderate(REGISTERED)


class TestEditPolicy:
    """Editing a post."""

    def test_author_with_edit_can_edit(self):
        assert can_edit_post(REGISTERED, _info(), AUTHOR)

    def test_other_member_cannot_edit(self):
        assert not can_edit_post(REGISTERED, _info(), SOMEONE_ELSE)

    def test_locked_post_blocks_author(self):
        assert not can_edit_post(REGISTERED, _info(locked=True), AUTHOR)

    def test_moderator_edits_anything(self):
        assert can_edit_post(MODERATOR, _info(locked=True), SOMEONE_ELSE)

    def test_anonymous_cannot_edit(self):
        assert not can_edit_post(REGISTERED, _info(), None)


class TestDeletePolicy:
    """Deleting a post."""

    def test_author_with_delete_can_delete_even_when_locked(self):
        assert can_delete_post(REGISTERED, _info(locked=True), AUTHOR)

    def test_other_member_cannot_delete(self):
        assert not can_delete_post(REGISTERED, _info(), SOMEONE_ELSE)

    def test_moderator_can_delete(self):
        assert can_delete_post(MODERATOR, _info(), SOMEONE_ELSE)


class TestReplyPolicy:
    """Replying to a topic."""

    def test_reply_to_open_topic(self):
        assert can_reply(REGISTERED, locked=False)

    def test_locked_topic_blocks_reply(self):
        assert not can_reply(REGISTERED, locked=True)

    def test_moderator_replies_to_locked_topic(self):
        assert can_reply(MODERATOR, locked=True)


class TestAnswerPolicy:
    """Choosing the accepted answer."""

    def test_topic_author_sets_answer(self):
        info = PostInfo(id=uuid.uuid4(), member_id=SOMEONE_ELSE, locked=False, topic_member_id=AUTHOR)
        assert can_set_answer(NOTHING, info, AUTHOR)

    def test_reply_author_cannot_set_answer(self):
        info = PostInfo(id=uuid.uuid4(), member_id=SOMEONE_ELSE, locked=False, topic_member_id=AUTHOR)
        assert not can_set_answer(REGISTERED, info, SOMEONE_ELSE)

    def test_locked_topic_blocks_author(self):
        info = PostInfo(id=uuid.uuid4(), member_id=SOMEONE_ELSE, locked=True, topic_member_id=AUTHOR)
        assert not can_set_answer(REGISTERED, info, AUTHOR)
        assert can_set_answer(MODERATOR, info, SOMEONE_ELSE)
