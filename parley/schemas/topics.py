"""
Topic page schemas: the topic itself, its replies and the answer slot.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from parley.schemas.common import PaginatedData


class TopicForumModel(BaseModel):
    """Forum the topic lives in."""

    id: uuid.UUID
    name: str
    slug: str


class TopicModel(BaseModel):
    """The topic post, content rendered to HTML."""

    id: uuid.UUID
    title: str
    slug: str
    content: str
    member_id: uuid.UUID
    member_display_name: str
    user_id: uuid.UUID
    gravatar_hash: str
    timestamp: datetime
    pinned: bool = False
    locked: bool = False
    has_answer: bool = False


class ReplyModel(BaseModel):
    """A reply. ``content`` is rendered HTML, ``original_content`` the raw markdown."""

    id: uuid.UUID
    content: str
    original_content: str
    member_id: uuid.UUID
    member_display_name: str
    user_id: uuid.UUID
    gravatar_hash: str
    timestamp: datetime
    is_answer: bool = False


class TopicPageModel(BaseModel):
    forum: TopicForumModel
    topic: TopicModel
    replies: PaginatedData[ReplyModel]
    answer: Optional[ReplyModel] = None

    # Set by the route from the caller's permission set
    can_edit: bool = False
    can_reply: bool = False
    can_delete: bool = False
    can_moderate: bool = False
