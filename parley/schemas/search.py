"""
Search and member page schemas.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel

from parley.schemas.common import PaginatedData


class SearchPostModel(BaseModel):
    """
    A topic or reply hit. Replies carry their topic's title and slug so the
    client can link to the thread.
    """

    id: uuid.UUID
    topic_id: uuid.UUID
    is_topic: bool
    title: str
    slug: str
    content: str
    timestamp: datetime
    member_id: uuid.UUID
    member_display_name: str
    forum_id: uuid.UUID
    forum_name: str
    forum_slug: str


class SearchPageModel(BaseModel):
    posts: PaginatedData[SearchPostModel]


class MemberModel(BaseModel):
    id: uuid.UUID
    display_name: str
    gravatar_hash: str
    topics_count: int = 0
    replies_count: int = 0
    timestamp: datetime


class MemberPageModel(BaseModel):
    member: MemberModel
    posts: PaginatedData[SearchPostModel]
