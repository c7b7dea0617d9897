"""
Reply commands.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Body

from parley.api.deps import AuthenticatedContext, AuthenticatedPipeline, DbSession, unwrap
from parley.builders.post_model_builder import PostModelBuilder
from parley.kernel.permissions.security_service import (
    can_delete_post,
    can_edit_post,
    can_reply,
    can_set_answer,
)
from parley.schemas.common import SuccessResponse
from parley.schemas.posts import CreateReplyRequest, UpdateReplyRequest
from parley.services.reply_service import (
    CreateReply,
    DeleteReply,
    ReplyService,
    SetReplyAsAnswer,
    UpdateReply,
)

router = APIRouter()


@router.post("/create-reply", response_model=uuid.UUID)
async def create_reply(
    data: CreateReplyRequest,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Reply to a topic. Locked topics only accept replies from moderators."""
    builder = PostModelBuilder(db)
    service = ReplyService(db)
    command = CreateReply(
        site_id=context.site_id,
        forum_id=data.forum_id,
        member_id=context.member_id,
        topic_id=data.topic_id,
        content=data.content,
    )
    result = await pipeline.run(
        load=lambda: builder.get_topic_info(context.site_id, data.forum_id, data.topic_id),
        forum_id=data.forum_id,
        authorize=lambda permissions, info: can_reply(permissions, info.locked),
        execute=lambda _: service.create(command),
    )
    return unwrap(result)


@router.post("/update-reply", response_model=SuccessResponse)
async def update_reply(
    data: UpdateReplyRequest,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    builder = PostModelBuilder(db)
    service = ReplyService(db)
    command = UpdateReply(
        site_id=context.site_id,
        forum_id=data.forum_id,
        member_id=context.member_id,
        topic_id=data.topic_id,
        id=data.reply_id,
        content=data.content,
    )
    unwrap(
        await pipeline.run(
            load=lambda: builder.get_reply_info(
                context.site_id, data.forum_id, data.topic_id, data.reply_id
            ),
            forum_id=data.forum_id,
            authorize=lambda permissions, info: can_edit_post(
                permissions, info, context.member_id
            ),
            execute=lambda _: service.update(command),
        )
    )
    return SuccessResponse(message="Reply updated")


@router.post(
    "/set-reply-as-answer/{forum_id}/{topic_id}/{reply_id}",
    response_model=SuccessResponse,
)
async def set_reply_as_answer(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    reply_id: uuid.UUID,
    is_answer: Annotated[bool, Body()],
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    """Mark or unmark the accepted answer. Topic author or moderators."""
    builder = PostModelBuilder(db)
    service = ReplyService(db)
    command = SetReplyAsAnswer(
        site_id=context.site_id,
        forum_id=forum_id,
        member_id=context.member_id,
        topic_id=topic_id,
        id=reply_id,
        is_answer=is_answer,
    )
    unwrap(
        await pipeline.run(
            load=lambda: builder.get_reply_info(context.site_id, forum_id, topic_id, reply_id),
            forum_id=forum_id,
            authorize=lambda permissions, info: can_set_answer(
                permissions, info, context.member_id
            ),
            execute=lambda _: service.set_as_answer(command),
        )
    )
    return SuccessResponse(message="Answer set" if is_answer else "Answer cleared")


@router.delete(
    "/delete-reply/{forum_id}/{topic_id}/{reply_id}",
    response_model=SuccessResponse,
)
async def delete_reply(
    forum_id: uuid.UUID,
    topic_id: uuid.UUID,
    reply_id: uuid.UUID,
    context: AuthenticatedContext,
    pipeline: AuthenticatedPipeline,
    db: DbSession,
):
    builder = PostModelBuilder(db)
    service = ReplyService(db)
    command = DeleteReply(
        site_id=context.site_id,
        forum_id=forum_id,
        member_id=context.member_id,
        topic_id=topic_id,
        id=reply_id,
    )
    unwrap(
        await pipeline.run(
            load=lambda: builder.get_reply_info(context.site_id, forum_id, topic_id, reply_id),
            forum_id=forum_id,
            authorize=lambda permissions, info: can_delete_post(
                permissions, info, context.member_id
            ),
            execute=lambda _: service.delete(command),
        )
    )
    return SuccessResponse(message="Reply deleted")
