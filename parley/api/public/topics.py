"""
Topic endpoints: topic page, replies page, editor pages and topic commands.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Body

from parley.api.deps import (
    AuthenticatedContext,
    AuthenticatedPipeline,
    DbSession,
    ListOptions,
    Pipeline,
    RequestContext,
    unwrap,
)
from parley.builders.post_model_builder import PostModelBuilder
from parley.builders.topic_model_builder import TopicModelBuilder
from parley.kernel.models.permission import PermissionType
from parley.kernel.permissions.security_service import (
    can_delete_post,
    can_edit_post,
    can_moderate,
    can_read,
    can_start_topic,
    has_permission,
    PostInfo,
)
from parley.schemas.common import PaginatedData, SuccessResponse
from parley.schemas.posts import CreateTopicRequest, PostPageModel, UpdateTopicRequest
from parley.schemas.topics import ReplyModel, TopicPageModel
from parley.services.topic_service import (
    CreateTopic,
    DeleteTopic,
    LockTopic,
    PinTopic,
    TopicService,
    UpdateTopic,
)

router = APIRouter()


# Id-typed routes are registered before /{forum_slug}/{topic_slug}; the uuid
# converter lets slug paths such as /welcome/new-topic fall through to it


@router.get("/{forum_id:uuid}/new-topic", response_model=PostPageModel)
async def new_topic(
    forum_id: uuid.UUID,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Editor page for starting a topic. Requires Start."""
    builder = PostModelBuilder(db)
    result = await pipeline.run(
        load=lambda: builder.build_new_post_page_model(context.site_id, forum_id),
        forum_id=forum_id,
        authorize=lambda permissions, _: can_start_topic(permissions),
    )
    return unwrap(result)


@router.get("/{forum_id:uuid}/edit-topic/{topic_id:uuid}", response_model=PostPageModel)
async def edit_topic(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Editor page for an existing topic, with raw markdown content."""
    builder = PostModelBuilder(db)
    result = await pipeline.run(
        load=lambda: builder.build_edit_post_page_model(context.site_id, forum_id, topic_id),
        forum_id=forum_id,
        authorize=lambda permissions, model: can_edit_post(
            permissions, _topic_info(model), context.member_id
        ),
    )
    return unwrap(result)


@router.get("/{forum_id:uuid}/{topic_id:uuid}/replies", response_model=PaginatedData[ReplyModel])
async def replies(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    context: RequestContext,
    pipeline: Pipeline,
    db: DbSession,
    options: ListOptions,
):
    """One page of a topic's replies. Requires Read."""
    builder = TopicModelBuilder(db)
    result = await pipeline.run(
        load=None,
        forum_id=forum_id,
        authorize=lambda permissions, _: can_read(permissions),
        execute=lambda _: builder.build_topic_page_model_replies(
            context.site_id, forum_id, topic_id, options
        ),
    )
    return unwrap(result)


@router.get("/{forum_slug}/{topic_slug}", response_model=TopicPageModel)
async def topic(
    forum_slug: str,
    topic_slug: str,
    context: RequestContext,
    pipeline: Pipeline,
    db: DbSession,
    options: ListOptions,
):
    """Topic page with the first page of replies. Requires Read."""
    builder = TopicModelBuilder(db)
    result = await pipeline.run(
        load=lambda: builder.build_topic_page_model(
            context.site_id, forum_slug, topic_slug, options
        ),
        forum_id=lambda model: model.forum.id,
        authorize=lambda permissions, _: can_read(permissions),
    )
    model: TopicPageModel = unwrap(result)

    model.can_edit = has_permission(PermissionType.EDIT, result.permissions)
    model.can_reply = has_permission(PermissionType.REPLY, result.permissions)
    model.can_delete = has_permission(PermissionType.DELETE, result.permissions)
    model.can_moderate = has_permission(PermissionType.MODERATE, result.permissions)
    return model


@router.post("/create-topic", response_model=str)
async def create_topic(
    data: CreateTopicRequest,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Start a topic. Returns the new topic's slug."""
    builder = PostModelBuilder(db)
    service = TopicService(db)
    command = CreateTopic(
        site_id=context.site_id,
        forum_id=data.forum_id,
        member_id=context.member_id,
        title=data.title,
        content=data.content,
    )
    result = await pipeline.run(
        load=lambda: builder.build_new_post_page_model(context.site_id, data.forum_id),
        forum_id=data.forum_id,
        authorize=lambda permissions, _: can_start_topic(permissions),
        execute=lambda _: service.create(command),
    )
    return unwrap(result)


@router.post("/update-topic", response_model=str)
async def update_topic(
    data: UpdateTopicRequest,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Edit a topic's title and content. Returns the topic's current slug."""
    builder = PostModelBuilder(db)
    service = TopicService(db)
    command = UpdateTopic(
        site_id=context.site_id,
        forum_id=data.forum_id,
        member_id=context.member_id,
        id=data.topic_id,
        title=data.title,
        content=data.content,
    )
    result = await pipeline.run(
        load=lambda: builder.get_topic_info(context.site_id, data.forum_id, data.topic_id),
        forum_id=data.forum_id,
        authorize=lambda permissions, info: can_edit_post(permissions, info, context.member_id),
        execute=lambda _: service.update(command),
    )
    return unwrap(result)


@router.post("/pin-topic/{forum_id}/{topic_id}", response_model=SuccessResponse)
async def pin_topic(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    pinned: Annotated[bool, Body()],
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Pin or unpin a topic. Requires Moderate."""
    builder = PostModelBuilder(db)
    service = TopicService(db)
    command = PinTopic(
        site_id=context.site_id,
        forum_id=forum_id,
        member_id=context.member_id,
        id=topic_id,
        pinned=pinned,
    )
    unwrap(
        await pipeline.run(
            load=lambda: builder.get_topic_info(context.site_id, forum_id, topic_id),
            forum_id=forum_id,
            authorize=lambda permissions, _: can_moderate(permissions),
            execute=lambda _: service.pin(command),
        )
    )
    return SuccessResponse(message="Topic pinned" if pinned else "Topic unpinned")


@router.post("/lock-topic/{forum_id}/{topic_id}", response_model=SuccessResponse)
async def lock_topic(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    locked: Annotated[bool, Body()],
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Lock or unlock a topic. Requires Moderate."""
    builder = PostModelBuilder(db)
    service = TopicService(db)
    command = LockTopic(
        site_id=context.site_id,
        forum_id=forum_id,
        member_id=context.member_id,
        id=topic_id,
        locked=locked,
    )
    unwrap(
        await pipeline.run(
            load=lambda: builder.get_topic_info(context.site_id, forum_id, topic_id),
            forum_id=forum_id,
            authorize=lambda permissions, _: can_moderate(permissions),
            execute=lambda _: service.lock(command),
        )
    )
    return SuccessResponse(message="Topic locked" if locked else "Topic unlocked")


@router.delete("/delete-topic/{forum_id}/{topic_id}", response_model=SuccessResponse)
async def delete_topic(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Soft delete a topic. Authors with Delete, or moderators."""
    builder = PostModelBuilder(db)
    service = TopicService(db)
    command = DeleteTopic(
        site_id=context.site_id,
        forum_id=forum_id,
        member_id=context.member_id,
        id=topic_id,
    )
    unwrap(
        await pipeline.run(
            load=lambda: builder.get_topic_info(context.site_id, forum_id, topic_id),
            forum_id=forum_id,
            authorize=lambda permissions, info: can_delete_post(
                permissions, info, context.member_id
            ),
            execute=lambda _: service.delete(command),
        )
    )
    return SuccessResponse(message="Topic deleted")


def _topic_info(model: PostPageModel) -> PostInfo:
    return PostInfo(
        id=model.topic.id,
        member_id=model.topic.member_id,
        locked=model.topic.locked,
        topic_member_id=model.topic.member_id,
    )
