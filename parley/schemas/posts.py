"""
Post editor schemas: the new/edit topic page and the write requests for
topics and replies.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _not_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("Must not be blank")
    return v


class PostForumModel(BaseModel):
    id: uuid.UUID
    name: str
    slug: str


class PostTopicModel(BaseModel):
    """Topic being edited. ``content`` is the raw markdown."""

    id: uuid.UUID
    title: str
    content: str
    member_id: uuid.UUID
    locked: bool = False


class PostPageModel(BaseModel):
    """Editor page. ``topic`` is absent when starting a new topic."""

    forum: PostForumModel
    topic: Optional[PostTopicModel] = None


class CreateTopicRequest(BaseModel):
    forum_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class UpdateTopicRequest(BaseModel):
    forum_id: uuid.UUID
    topic_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class CreateReplyRequest(BaseModel):
    forum_id: uuid.UUID
    topic_id: uuid.UUID
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _not_blank(v)


class UpdateReplyRequest(BaseModel):
    forum_id: uuid.UUID
    topic_id: uuid.UUID
    reply_id: uuid.UUID
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _not_blank(v)
