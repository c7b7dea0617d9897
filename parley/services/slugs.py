"""
Topic slug generation.
"""

import uuid
from typing import Optional

from slugify import slugify
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.models.post import Post

MAX_SLUG_LENGTH = 200


def build_slug(title: str) -> str:
    """URL slug for a title. Titles with no sluggable characters become ``topic``."""
    return slugify(title or "", max_length=MAX_SLUG_LENGTH) or "topic"


async def generate_topic_slug(
    session: AsyncSession,
    forum_id: uuid.UUID,
    title: str,
    exclude_topic_id: Optional[uuid.UUID] = None,
) -> str:
    """
    Slug unique among the forum's topics, suffixed ``-2``, ``-3`` ... on collision.

    ``exclude_topic_id`` lets a topic keep its own slug when re-titled.
    """
    candidate = build_slug(title)

    query = select(Post.slug).where(
        and_(
            Post.forum_id == forum_id,
            Post.topic_id.is_(None),
            Post.slug.like(f"{candidate}%"),
        )
    )
    if exclude_topic_id is not None:
        query = query.where(Post.id != exclude_topic_id)

    result = await session.execute(query)
    taken = set(result.scalars().all())

    unique_candidate = candidate
    suffix = 1
    while unique_candidate in taken:
        suffix += 1
        unique_candidate = f"{candidate}-{suffix}"
    return unique_candidate
