"""
Member profile endpoints.
"""

import uuid

from fastapi import APIRouter, HTTPException, status

from parley.api.deps import (
    AuthenticatedContext,
    DbSession,
    ListOptions,
    ReadableForumIds,
    RequestContext,
)
from parley.builders.member_model_builder import MemberModelBuilder
from parley.schemas.search import MemberPageModel

router = APIRouter()


@router.get("", response_model=MemberPageModel)
async def current_member(
    context: AuthenticatedContext,
    forum_ids: ReadableForumIds,
    db: DbSession,
    options: ListOptions,
):
    """Profile page of the authenticated caller."""
    model = await MemberModelBuilder(db).build_member_page_model(
        context.site_id, context.member_id, forum_ids, options
    )
    if model is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        )
    return model


@router.get("/{member_id}", response_model=MemberPageModel)
async def member(
    member_id: uuid.UUID,
    context: RequestContext,
    forum_ids: ReadableForumIds,
    db: DbSession,
    options: ListOptions,
):
    """Profile page of any member. Posts are limited to forums the caller can read."""
    model = await MemberModelBuilder(db).build_member_page_model(
        context.site_id, member_id, forum_ids, options
    )
    if model is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        )
    return model
