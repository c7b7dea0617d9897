"""
Forum page endpoints.
"""

import uuid

from fastapi import APIRouter

from parley.api.deps import DbSession, ListOptions, Pipeline, RequestContext, unwrap
from parley.builders.forum_model_builder import ForumModelBuilder
from parley.kernel.permissions.security_service import can_read, can_start_topic
from parley.schemas.common import PaginatedData
from parley.schemas.forums import ForumPageModel, ForumTopicModel

router = APIRouter()


@router.get("/{forum_id:uuid}/topics", response_model=PaginatedData[ForumTopicModel])
async def forum_topics(
    forum_id: uuid.UUID,
    context: RequestContext,
    pipeline: Pipeline,
    db: DbSession,
    options: ListOptions,
):
    builder = ForumModelBuilder(db)
    result = await pipeline.run(
        load=None,
        forum_id=forum_id,
        authorize=lambda permissions, _: can_read(permissions),
        execute=lambda _: builder.build_forum_page_model_topics(
            context.site_id, forum_id, options
        ),
    )
    return unwrap(result)


@router.get("/{slug}", response_model=ForumPageModel)
async def forum(
    slug: str,
    context: RequestContext,
    pipeline: Pipeline,
    db: DbSession,
    options: ListOptions,
):
    """Forum details and the first page of topics. Requires Read."""
    builder = ForumModelBuilder(db)
    result = await pipeline.run(
        load=lambda: builder.build_forum_page_model(context.site_id, slug, options),
        forum_id=lambda model: model.forum.id,
        authorize=lambda permissions, _: can_read(permissions),
    )
    model: ForumPageModel = unwrap(result)
    model.can_start = context.is_authenticated and can_start_topic(result.permissions)
    return model
