"""
Forum page and index page schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from parley.schemas.common import PaginatedData


class ForumModel(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None


class ForumTopicModel(BaseModel):
    """A row of a forum's topic listing."""

    id: uuid.UUID
    title: str
    slug: str
    replies_count: int
    member_id: uuid.UUID
    member_display_name: str
    gravatar_hash: str
    timestamp: datetime
    most_recent: Optional[datetime] = None
    pinned: bool = False
    locked: bool = False
    has_answer: bool = False


class ForumPageModel(BaseModel):
    forum: ForumModel
    topics: PaginatedData[ForumTopicModel]
    can_start: bool = False


class IndexForumModel(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    topics_count: int = 0
    replies_count: int = 0


class IndexCategoryModel(BaseModel):
    id: uuid.UUID
    name: str
    forums: List[IndexForumModel] = []


class IndexPageModel(BaseModel):
    """Published categories in order, each listing the forums the caller can read."""

    categories: List[IndexCategoryModel] = []
